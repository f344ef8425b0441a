from .transport import HttpxTransport  # noqa
