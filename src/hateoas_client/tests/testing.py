import collections.abc
import dataclasses
import typing

from ..exceptions import TransportError
from ..interfaces import Transport
from ..models import EmbeddedResource, Resource
from ..types import JSONValue, QueryParams

ROOT_URL = "http://localhost:8080/api/v1"


@dataclasses.dataclass
class RecordedRequest:
    method: str
    url: str
    headers: typing.Optional[typing.Mapping[str, str]]
    params: typing.Optional[QueryParams]
    body: typing.Any


class RecordingTransport(Transport):
    """
    Replays canned payloads keyed by ``(method, url)`` and records every request.
    Unknown requests fail with a 404 :py:class:`TransportError`.
    """

    responses: typing.Dict[typing.Tuple[str, str], JSONValue]
    requests: typing.List[RecordedRequest]
    closed: bool

    def respond(self, method: str, url: str, payload: JSONValue) -> None:
        self.responses[(method, url)] = payload

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        params: typing.Optional[QueryParams] = None,
        body: typing.Any = None,
    ) -> JSONValue:
        self.requests.append(
            RecordedRequest(method=method, url=url, headers=headers, params=params, body=body)
        )
        try:
            return self.responses[(method, url)]
        except KeyError:
            raise TransportError(f"{method} {url} failed", status_code=404) from None

    def close(self) -> None:
        self.closed = True

    def __init__(
        self,
        responses: typing.Optional[
            typing.Mapping[typing.Tuple[str, str], JSONValue]
        ] = None,
    ):
        self.responses = dict(responses) if isinstance(responses, collections.abc.Mapping) else {}
        self.requests = []
        self.closed = False


def raw_resource(id: int = 1, resource_name: str = "things", **fields: typing.Any):
    href = f"{ROOT_URL}/{resource_name}/{id}"
    return {
        "text": "hello world",
        **fields,
        "_links": {
            "self": {"href": href},
            resource_name[:-1]: {"href": f"{href}{{?projection}}", "templated": True},
        },
    }


def raw_embedded_resource(**fields: typing.Any):
    return {
        "name": "embedded",
        **fields,
        "_links": {"anotherResource": {"href": f"{ROOT_URL}/others/1"}},
    }


def raw_resource_collection(resource_name: str = "things"):
    return {
        "_embedded": {
            resource_name: [
                raw_resource(1, resource_name, text="hello world"),
                raw_resource(2, resource_name, text="Second object"),
            ]
        },
        "_links": {"self": {"href": f"{ROOT_URL}/{resource_name}"}},
    }


def raw_paged_resource_collection(resource_name: str = "things"):
    base = f"{ROOT_URL}/{resource_name}"
    return {
        "_embedded": {
            resource_name: [
                raw_resource(1, resource_name, text="hello world"),
                raw_resource(2, resource_name, text="Second object"),
            ]
        },
        "_links": {
            "first": {"href": f"{base}?page=0&size=2"},
            "prev": {"href": f"{base}?page=0&size=2"},
            "self": {"href": f"{base}?page=1&size=2"},
            "next": {"href": f"{base}?page=2&size=2"},
            "last": {"href": f"{base}?page=3&size=2"},
        },
        "page": {"size": 2, "totalElements": 8, "totalPages": 4, "number": 1},
    }


class Thing(Resource):
    pass


class ThingProjection(Resource):
    pass


class Other(Resource):
    pass


class Address(EmbeddedResource):
    pass
