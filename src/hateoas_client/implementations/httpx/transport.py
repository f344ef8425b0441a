import datetime
import json
import logging
import typing

import httpx

from ...exceptions import TransportError
from ...interfaces import Transport
from ...types import JSONValue, QueryParams

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/hal+json, application/json"}
DEFAULT_TIMEOUT = httpx.Timeout(30.0)
JSON_CONTENT_TYPE = "application/json"


def _json_default(value: typing.Any) -> typing.Any:
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def _parse_body(response: httpx.Response) -> JSONValue:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport(Transport):
    """
    A :py:class:`hateoas_client.interfaces.Transport` backed by :py:class:`httpx.Client`.

    :param Optional[httpx.Client] client: the client to send requests with.  A client owned
                                          by the transport is created when none is given.
    :param httpx.Timeout timeout: the timeout of the owned client.
    :param Optional[Mapping[str, str]] headers: headers added to every request.
    """

    client: httpx.Client
    headers: typing.Dict[str, str]
    _owns_client: bool

    def _encode_body(
        self, body: typing.Any, headers: typing.Dict[str, str]
    ) -> typing.Optional[typing.Union[str, bytes]]:
        if body is None:
            return None
        if isinstance(body, (str, bytes)):
            return body
        headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        return json.dumps(body, default=_json_default)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        params: typing.Optional[QueryParams] = None,
        body: typing.Any = None,
    ) -> JSONValue:
        _headers = dict(self.headers)
        if headers is not None:
            _headers.update(headers)
        content = self._encode_body(body, _headers)
        try:
            response = self.client.request(
                method,
                url,
                headers=_headers,
                params=list(params) if params else None,
                content=content,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.debug("%s %s responded with %d", method, url, e.response.status_code)
            raise TransportError(
                f"{method} {url} failed",
                status_code=e.response.status_code,
                payload=_parse_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return _parse_body(response)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        client: typing.Optional[httpx.Client] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ):
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(timeout=timeout)
        self.headers = dict(DEFAULT_HEADERS)
        if headers is not None:
            self.headers.update(headers)
