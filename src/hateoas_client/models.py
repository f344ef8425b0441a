"""
Classes in :py:mod:`hateoas_client.models` are the materialized form of HAL documents.

A resource is an attribute bag: every property of the server payload, including its
``_links`` node, becomes an attribute of the instance.  Nodes produced by a
:py:class:`hateoas_client.client.HateoasClient` are bound to it and can fetch the
resources their links point to.
"""

import collections.abc
import dataclasses
import typing

from .declarations import GetOption, PagedGetOption, PageParam, RequestBody, RequestOption
from .exceptions import DetachedResourceError, RelationNotFoundError, ValidationError
from .types import JSONObject, JSONValue
from .validation import validate_input_params

if typing.TYPE_CHECKING:
    from .client import HateoasClient  # noqa: F401

CLIENT_ATTRIBUTE = "_client_"


@dataclasses.dataclass(frozen=True)
class Link:
    """
    :py:class:`Link` represents a single entry of a ``_links`` node.
    """

    href: str
    templated: bool = False

    @classmethod
    def from_json(cls, value: JSONValue) -> typing.Optional["Link"]:
        if not isinstance(value, collections.abc.Mapping):
            return None
        href = value.get("href")
        if not isinstance(href, str):
            return None
        return cls(href=href, templated=bool(value.get("templated", False)))


class AbstractResource:
    """
    The base for every materialized node.
    """

    _client_: typing.Optional["HateoasClient"] = None
    _links: JSONObject

    def attributes(self) -> typing.Dict[str, typing.Any]:
        """
        Returns the payload properties held by this node, ``_links`` included.
        """
        return {k: v for k, v in vars(self).items() if k != CLIENT_ATTRIBUTE}

    @property
    def links(self) -> typing.Mapping[str, typing.Union[Link, typing.Sequence[Link]]]:
        result: typing.Dict[str, typing.Union[Link, typing.Sequence[Link]]] = {}
        for rel, value in getattr(self, "_links", {}).items():
            if isinstance(value, collections.abc.Sequence) and not isinstance(value, str):
                result[rel] = [
                    link for link in (Link.from_json(v) for v in value) if link is not None
                ]
            else:
                link = Link.from_json(value)
                if link is not None:
                    result[rel] = link
        return result

    def has_relation(self, relation_name: str) -> bool:
        return relation_name in self.links

    def get_relation_link(self, relation_name: str) -> Link:
        """
        Looks up the link registered under ``relation_name``.  When the relation holds
        several links the first one is returned.

        :param str relation_name: the relation name.
        :return: a :py:class:`Link`.
        :raises RelationNotFoundError: when no such relation exists.
        """
        validate_input_params(relation_name=relation_name)
        link = self.links.get(relation_name)
        if isinstance(link, Link):
            return link
        if link:
            return link[0]
        raise RelationNotFoundError(self, relation_name)

    @property
    def self_href(self) -> typing.Optional[str]:
        link = self.links.get("self")
        if isinstance(link, Link):
            return link.href
        if link:
            return link[0].href
        return None

    def bind_client(self, client: "HateoasClient") -> None:
        setattr(self, CLIENT_ATTRIBUTE, client)

    def _require_client(self) -> "HateoasClient":
        client = getattr(self, CLIENT_ATTRIBUTE, None)
        if client is None:
            raise DetachedResourceError(self)
        return client

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.attributes() == other.attributes()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(f'{k}={v!r}' for k, v in self.attributes().items())})"


class BaseResource(AbstractResource):
    """
    Common behaviour of :py:class:`Resource` and :py:class:`EmbeddedResource`:
    property access and relation navigation.
    """

    def __getitem__(self, name: str) -> typing.Any:
        try:
            return self.attributes()[name]
        except KeyError:
            raise KeyError(name) from None

    def __contains__(self, name: str) -> bool:
        return name in self.attributes()

    def _fetch_relation(
        self, op: str, relation_name: str, kind: typing.Any, options: typing.Optional[GetOption]
    ) -> typing.Any:
        from .links import generate_link_url, to_query_params

        validate_input_params(relation_name=relation_name)
        client = self._require_client()
        client.stage_logger.resource_begin_log(
            self, op, relation_name=relation_name, options=options
        )
        link = self.get_relation_link(relation_name)
        params = to_query_params(options)
        result = client.fetch(
            generate_link_url(link, options),
            kind,
            params=() if link.templated else params,
            use_cache=options.use_cache if isinstance(options, GetOption) else True,
            is_projection=any(name == "projection" for name, _ in params),
        )
        client.stage_logger.resource_end_log(
            self, op, result=f"relation {relation_name} was got successfully"
        )
        return result

    def get_relation(
        self, relation_name: str, options: typing.Optional[GetOption] = None
    ) -> typing.Optional["BaseResource"]:
        """
        Fetches the single resource the relation points to.

        :param str relation_name: the relation name.
        :param Optional[GetOption] options: request options.
        :return: the materialized resource.
        """
        from .classifier import PayloadKind

        return self._fetch_relation("GET_RELATION", relation_name, PayloadKind.RESOURCE, options)

    def get_related_collection(
        self, relation_name: str, options: typing.Optional[GetOption] = None
    ) -> typing.Optional["ResourceCollection"]:
        from .classifier import PayloadKind

        return self._fetch_relation(
            "GET_RELATED_COLLECTION", relation_name, PayloadKind.COLLECTION, options
        )

    def get_related_page(
        self, relation_name: str, options: typing.Optional[PagedGetOption] = None
    ) -> typing.Optional["PagedResourceCollection"]:
        """
        Fetches a page of the related collection.  The client's default page is used
        when ``options`` carries none.
        """
        from .classifier import PayloadKind
        from .links import fill_default_page

        client = self._require_client()
        return self._fetch_relation(
            "GET_RELATED_PAGE",
            relation_name,
            PayloadKind.PAGED_COLLECTION,
            fill_default_page(options, client.config.pagination.default_page),
        )

    def _send_relation(
        self,
        op: str,
        method: str,
        relation_name: str,
        request_body: RequestBody,
        options: typing.Optional[RequestOption],
    ) -> typing.Any:
        from .links import generate_link_url, to_query_params
        from .resolver import resolve_values

        validate_input_params(relation_name=relation_name, request_body=request_body)
        client = self._require_client()
        client.stage_logger.resource_begin_log(
            self, op, relation_name=relation_name, request_body=request_body, options=options
        )
        link = self.get_relation_link(relation_name)
        result = client.send(
            method,
            generate_link_url(link, options),
            body=resolve_values(request_body),
            params=() if link.templated else to_query_params(options),
        )
        client.stage_logger.resource_end_log(
            self, op, result=f"relation {relation_name} was sent successfully"
        )
        return result

    def post_relation(
        self,
        relation_name: str,
        request_body: RequestBody,
        options: typing.Optional[RequestOption] = None,
    ) -> typing.Any:
        return self._send_relation("POST_RELATION", "POST", relation_name, request_body, options)

    def patch_relation(
        self,
        relation_name: str,
        request_body: RequestBody,
        options: typing.Optional[RequestOption] = None,
    ) -> typing.Any:
        return self._send_relation("PATCH_RELATION", "PATCH", relation_name, request_body, options)

    def put_relation(
        self,
        relation_name: str,
        request_body: RequestBody,
        options: typing.Optional[RequestOption] = None,
    ) -> typing.Any:
        return self._send_relation("PUT_RELATION", "PUT", relation_name, request_body, options)


URI_LIST_HEADERS = {"Content-Type": "text/uri-list"}


class Resource(BaseResource):
    """
    A resource addressable through its ``self`` link.
    """

    def _uri_list(
        self, entities: typing.Union["Resource", typing.Sequence["Resource"]]
    ) -> str:
        _entities = entities if isinstance(entities, collections.abc.Sequence) else [entities]
        hrefs = []
        for entity in _entities:
            href = entity.self_href if isinstance(entity, AbstractResource) else None
            if href is None:
                raise ValidationError(["entities"])
            hrefs.append(href)
        return "\n".join(hrefs)

    def _send_uri_list(
        self,
        op: str,
        method: str,
        relation_name: str,
        entities: typing.Union["Resource", typing.Sequence["Resource"]],
    ) -> typing.Any:
        from .links import remove_template_params

        validate_input_params(relation_name=relation_name, entities=entities)
        client = self._require_client()
        client.stage_logger.resource_begin_log(self, op, relation_name=relation_name)
        link = self.get_relation_link(relation_name)
        result = client.send(
            method,
            remove_template_params(link.href),
            body=self._uri_list(entities),
            headers=URI_LIST_HEADERS,
        )
        client.stage_logger.resource_end_log(
            self, op, result=f"relation {relation_name} was updated successfully"
        )
        return result

    def bind_relation(
        self,
        relation_name: str,
        entities: typing.Union["Resource", typing.Sequence["Resource"]],
    ) -> typing.Any:
        """
        Replaces the relation with the given resource(s) (``PUT`` with ``text/uri-list``).
        """
        return self._send_uri_list("BIND_RELATION", "PUT", relation_name, entities)

    def add_collection_relation(
        self,
        relation_name: str,
        entities: typing.Union["Resource", typing.Sequence["Resource"]],
    ) -> typing.Any:
        """
        Appends the given resource(s) to a collection relation (``POST`` with ``text/uri-list``).
        """
        return self._send_uri_list("ADD_COLLECTION_RELATION", "POST", relation_name, entities)

    def unbind_relation(self, relation_name: str) -> typing.Any:
        from .links import remove_template_params

        validate_input_params(relation_name=relation_name)
        client = self._require_client()
        client.stage_logger.resource_begin_log(self, "UNBIND_RELATION", relation_name=relation_name)
        link = self.get_relation_link(relation_name)
        result = client.send("DELETE", remove_template_params(link.href))
        client.stage_logger.resource_end_log(
            self, "UNBIND_RELATION", result=f"relation {relation_name} was unbound successfully"
        )
        return result


class EmbeddedResource(BaseResource):
    """
    A resource that only lives inside another one and has no ``self`` link.
    """


class ResourceCollection(AbstractResource):
    resources: typing.List[typing.Any]

    def __iter__(self) -> typing.Iterator[typing.Any]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def __getitem__(self, index: int) -> typing.Any:
        return self.resources[index]

    def __init__(self):
        self.resources = []
        self._links = {}


class PagedResourceCollection(ResourceCollection):
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int

    def has_first(self) -> bool:
        return self.has_relation("first")

    def has_last(self) -> bool:
        return self.has_relation("last")

    def has_next(self) -> bool:
        return self.has_relation("next")

    def has_prev(self) -> bool:
        return self.has_relation("prev")

    def _fetch_page(
        self,
        relation_name: str,
        params: typing.Sequence[typing.Tuple[str, str]] = (),
        use_cache: bool = True,
    ) -> typing.Optional["PagedResourceCollection"]:
        from .classifier import PayloadKind
        from .links import remove_template_params, strip_query_params

        client = self._require_client()
        link = self.get_relation_link(relation_name)
        url = remove_template_params(link.href)
        if params:
            url = strip_query_params(url, [name for name, _ in params])
        return client.fetch(url, PayloadKind.PAGED_COLLECTION, params=params, use_cache=use_cache)

    def first_page(self, use_cache: bool = True) -> typing.Optional["PagedResourceCollection"]:
        return self._fetch_page("first", use_cache=use_cache)

    def last_page(self, use_cache: bool = True) -> typing.Optional["PagedResourceCollection"]:
        return self._fetch_page("last", use_cache=use_cache)

    def next_page(self, use_cache: bool = True) -> typing.Optional["PagedResourceCollection"]:
        return self._fetch_page("next", use_cache=use_cache)

    def prev_page(self, use_cache: bool = True) -> typing.Optional["PagedResourceCollection"]:
        return self._fetch_page("prev", use_cache=use_cache)

    def custom_page(
        self,
        page: PageParam,
        sort: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        use_cache: bool = True,
    ) -> typing.Optional["PagedResourceCollection"]:
        """
        Re-fetches the ``self`` link of this page with another page number, size, or sort order.
        """
        from .links import to_query_params

        validate_input_params(page=page)
        return self._fetch_page(
            "self",
            to_query_params(PagedGetOption(page=page, sort=sort or {})),
            use_cache=use_cache,
        )

    def __init__(self):
        super().__init__()
        self.page_number = 0
        self.page_size = PageParam().size
        self.total_elements = 0
        self.total_pages = 1
