import abc
import typing

from .types import JSONValue
from .utils import english_enumerate


class HateoasClientException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class ValidationError(HateoasClientException):
    names: typing.Sequence[str]

    @property
    def message(self):
        if len(self.names) == 1:
            return f"passed param {self.names[0]} must not be null, undefined or empty"
        return f"passed params {english_enumerate(self.names)} must not be null, undefined or empty"

    def __init__(self, names: typing.Sequence[str]):
        self.names = names


class InvalidDeclarationError(HateoasClientException):
    _message: str

    @property
    def message(self):
        return self._message

    def __init__(self, message: str):
        self._message = message


class NotResourceShapedError(HateoasClientException):
    expected: str
    payload: JSONValue

    @property
    def message(self):
        return f"you try to get wrong resource type, expected {self.expected} type"

    def __init__(self, expected: str, payload: JSONValue = None):
        self.expected = expected
        self.payload = payload


class UnsupportedMethodError(HateoasClientException):
    method: str
    allowed: typing.Sequence[str]

    @property
    def message(self):
        return f"allowed only {english_enumerate(self.allowed, ' or ')} http methods, you passed {self.method}"

    def __init__(self, method: str, allowed: typing.Sequence[str] = ()):
        self.method = method
        self.allowed = allowed


class RelationNotFoundError(HateoasClientException):
    resource: typing.Any
    relation_name: str

    @property
    def message(self):
        return f'no link found by relation name "{self.relation_name}" in {type(self.resource).__name__}'

    def __init__(self, resource: typing.Any, relation_name: str):
        self.resource = resource
        self.relation_name = relation_name


class DetachedResourceError(HateoasClientException):
    resource: typing.Any

    @property
    def message(self):
        return f"{type(self.resource).__name__} is not bound to a client and cannot fetch its relations"

    def __init__(self, resource: typing.Any):
        self.resource = resource


class InvalidConfigurationError(HateoasClientException):
    _message: str

    @property
    def message(self):
        return self._message

    def __init__(self, message: str):
        self._message = message


class TransportError(HateoasClientException):
    """
    Raised by :py:class:`hateoas_client.interfaces.Transport` implementations.
    The core passes it through untouched.
    """

    _message: str
    status_code: typing.Optional[int]
    payload: JSONValue

    @property
    def message(self):
        if self.status_code is not None:
            return f"{self._message} (status {self.status_code})"
        return self._message

    def __init__(
        self,
        message: str,
        status_code: typing.Optional[int] = None,
        payload: JSONValue = None,
    ):
        self._message = message
        self.status_code = status_code
        self.payload = payload
