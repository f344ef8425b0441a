from .formatting import english_enumerate  # noqa
from .typing import is_blank  # noqa
from .uritemplate import URITemplate, expand_template  # noqa
