"""
This module contains the interface the HTTP backend has to implement.
The client never issues a network call itself.

"""
import abc
import typing

from .types import JSONValue, QueryParams


class Transport(metaclass=abc.ABCMeta):
    """
    A :py:class:`Transport` performs a single HTTP exchange and returns the parsed
    response body.  The default implementation lives in
    :py:mod:`hateoas_client.implementations.httpx`.
    """

    @abc.abstractmethod
    def request(
        self,
        method: str,
        url: str,
        *,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        params: typing.Optional[QueryParams] = None,
        body: typing.Any = None,
    ) -> JSONValue:
        """
        Sends a request.

        :param str method: the HTTP method.
        :param str url: the absolute URL.
        :param Optional[Mapping[str, str]] headers: extra request headers.
        :param Optional[QueryParams] params: query params as ``(name, value)`` pairs.
        :param Any body: the request body.  Strings are sent as they are, anything else
                         is encoded as JSON.
        :return: the parsed JSON body, or ``None`` when the response has none.
        :raises TransportError: when the exchange fails or the server responds with an error.
        """
        ...  # pragma: nocover

    def close(self) -> None:
        """
        Releases the resources held by the transport.
        """
