import dataclasses
import enum
import typing


class HttpMethod(enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class SortOrder(enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


class Include(enum.Enum):
    NULL_VALUES = "NULL_VALUES"
    """Keep properties whose value is ``None`` in the request body."""


@dataclasses.dataclass(frozen=True)
class PageParam:
    size: int = 20
    page: int = 0


@dataclasses.dataclass(frozen=True)
class ValuesOption:
    include: typing.Optional[Include] = None


@dataclasses.dataclass
class RequestBody:
    """
    A :py:class:`RequestBody` carries a mutation body along with the policy deciding
    which of its values make it to the wire.
    """

    body: typing.Any
    values_option: typing.Optional[ValuesOption] = None


@dataclasses.dataclass
class RequestOption:
    params: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class GetOption(RequestOption):
    sort: typing.Mapping[str, typing.Union[SortOrder, str]] = dataclasses.field(
        default_factory=dict
    )
    use_cache: bool = True


@dataclasses.dataclass
class PagedGetOption(GetOption):
    page: typing.Optional[PageParam] = None


Options = typing.Union[RequestOption, GetOption, PagedGetOption]
