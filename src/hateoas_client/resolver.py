import collections.abc
import dataclasses
import datetime
import typing

from .classifier import self_href
from .declarations import Include, RequestBody
from .models import AbstractResource

PASSTHROUGH_TYPES = (datetime.date, datetime.datetime, datetime.time)


def _is_object(value: typing.Any) -> bool:
    return (
        isinstance(value, (collections.abc.Mapping, AbstractResource))
        or (dataclasses.is_dataclass(value) and not isinstance(value, type))
    )


def _items(value: typing.Any) -> typing.Iterable[typing.Tuple[str, typing.Any]]:
    if isinstance(value, AbstractResource):
        return [(k, v) for k, v in value.attributes().items() if k != "_links"]
    if isinstance(value, collections.abc.Mapping):
        return value.items()
    return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]


class _Resolver:
    include_nulls: bool

    def resolve_object(self, value: typing.Any) -> typing.Dict[str, typing.Any]:
        result: typing.Dict[str, typing.Any] = {}
        for name, v in _items(value):
            if v is None and not self.include_nulls:
                continue
            result[name] = self.resolve(v)
        return result

    def resolve(self, value: typing.Any) -> typing.Any:
        if value is None or isinstance(value, PASSTHROUGH_TYPES):
            return value
        if _is_object(value):
            href = self_href(value)
            if href is not None:
                return href
            return self.resolve_object(value)
        if isinstance(value, (list, tuple)):
            return [self.resolve(v) for v in value]
        return value

    def __init__(self, include_nulls: bool):
        self.include_nulls = include_nulls


def resolve_values(request_body: typing.Optional[RequestBody]) -> typing.Any:
    """
    Turns a request body into the value sent over the wire.

    The body is walked recursively.  Resources found anywhere below the top level
    collapse into their ``self`` link, properties set to ``None`` are dropped unless
    ``Include.NULL_VALUES`` is requested, and dates and times are left for the
    transport to serialize.

    :param Optional[RequestBody] request_body: the body and its value policy.
    :return: the resolved body, or ``None`` when there is nothing to send.
    """
    if request_body is None or request_body.body is None:
        return None
    body = request_body.body
    if isinstance(body, collections.abc.Mapping) and not body:
        return None

    values_option = request_body.values_option
    resolver = _Resolver(
        include_nulls=values_option is not None and values_option.include is Include.NULL_VALUES
    )
    if _is_object(body):
        return resolver.resolve_object(body)
    if isinstance(body, (list, tuple)):
        return [resolver.resolve(v) for v in body]
    return body
