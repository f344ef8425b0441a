"""
:py:class:`GraphMaterializer` rebuilds HAL payloads into graphs of resource objects.

The class of every node is looked up in a :py:class:`hateoas_client.registry.TypeRegistry`:

* a resource is looked up by its resource name, which is inferred from its
  ``self`` link (``http://localhost/api/things/1`` is a ``things`` resource);
* an embedded resource, which has no ``self`` link, is looked up by the name of
  the property (or ``_embedded`` key) it was found under;
* a collection is looked up by its first ``_embedded`` key.

Unregistered names fall back to the generic classes of :py:mod:`hateoas_client.models`.
Malformed input never raises: the ``instantiate_*`` entry points return ``None``
and nested values that are not resource-shaped are copied as they are.
"""

import collections.abc
import copy
import typing
from urllib.parse import urlsplit

from .classifier import PayloadKind, classify, is_embedded_resource, self_href
from .links import remove_template_params
from .models import (
    AbstractResource,
    EmbeddedResource,
    PagedResourceCollection,
    Resource,
    ResourceCollection,
)
from .registry import ResourceKind, TypeRegistry
from .stages import Stage, StageLogger
from .types import JSONObject

if typing.TYPE_CHECKING:
    from .client import HateoasClient  # noqa: F401

HIBERNATE_LAZY_INITIALIZER = "hibernateLazyInitializer"
RESERVED_KEYS = frozenset([HIBERNATE_LAZY_INITIALIZER])


def _path_segments(url: str) -> typing.List[str]:
    return [s for s in urlsplit(url).path.split("/") if s]


def _has_links(payload: typing.Any) -> bool:
    return (
        isinstance(payload, collections.abc.Mapping)
        and isinstance(payload.get("_links"), collections.abc.Mapping)
        and len(payload["_links"]) > 0
    )


def _is_collection_shaped(payload: typing.Any) -> bool:
    return (
        isinstance(payload, collections.abc.Mapping)
        and isinstance(payload.get("_embedded"), collections.abc.Mapping)
        and isinstance(payload.get("_links"), collections.abc.Mapping)
    )


def _as_int(value: typing.Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return default
    try:
        return int(value)
    except ValueError:
        return default


class GraphMaterializer:
    registry: TypeRegistry
    default_page_size: int
    base_api_url: typing.Optional[str]
    client: typing.Optional["HateoasClient"]
    stage_logger: StageLogger

    def find_resource_name(self, payload: typing.Any) -> typing.Optional[str]:
        """
        Infers the resource name from the ``self`` link of ``payload``.  Under the API
        root it is the first path segment after the root, so
        ``<root>/things/1/parts/2`` is a ``things`` resource.  Elsewhere it is the
        segment preceding the trailing identifier, or the only segment of a
        one-segment path.
        """
        href = self_href(payload)
        if href is None:
            return None
        href = remove_template_params(href)
        if self.base_api_url is not None and href.startswith(f"{self.base_api_url}/"):
            segments = _path_segments(href[len(self.base_api_url) + 1 :])
            if segments:
                return segments[0]
        segments = _path_segments(href)
        if not segments:
            return None
        if len(segments) == 1:
            return segments[0]
        return segments[-2]

    def _new(self, class_: type) -> typing.Any:
        node = class_()
        if self.client is not None:
            node.bind_client(self.client)
        return node

    def _materialize_relation(self, value: typing.Any, relation_class: type) -> typing.Any:
        if isinstance(value, (list, tuple)):
            return [self._materialize_relation(v, relation_class) for v in value]
        if isinstance(value, AbstractResource):
            return value
        if not isinstance(value, collections.abc.Mapping) or not value:
            return copy.deepcopy(value)
        kind = classify(value)
        if kind is PayloadKind.PAGED_COLLECTION:
            return self.instantiate_paged_resource_collection(value)
        if kind is PayloadKind.COLLECTION:
            return self.instantiate_resource_collection(value)
        return self._build(value, relation_class, self.find_resource_name(value))

    def _materialize_value(self, name: str, value: typing.Any) -> typing.Any:
        if isinstance(value, (list, tuple)):
            return [self._materialize_value(name, v) for v in value]
        if isinstance(value, AbstractResource):
            return value
        kind = classify(value)
        if kind is PayloadKind.PAGED_COLLECTION:
            return self.instantiate_paged_resource_collection(value)
        elif kind is PayloadKind.COLLECTION:
            return self.instantiate_resource_collection(value)
        elif kind is PayloadKind.RESOURCE:
            if is_embedded_resource(value):
                return self._build(value, self.registry.resolve(ResourceKind.EMBEDDED, name), None)
            resource_name = self.find_resource_name(value)
            return self._build(
                value, self.registry.resolve(ResourceKind.RESOURCE, resource_name), resource_name
            )
        return copy.deepcopy(value)

    def _build(
        self,
        payload: JSONObject,
        class_: type,
        resource_name: typing.Optional[str],
        is_projection: bool = False,
    ) -> typing.Any:
        node = self._new(class_)
        attrs = vars(node)
        with_projection_relations = (
            is_projection or self.registry.resolve_projection(resource_name) is not None
        )
        for key, value in payload.items():
            if key in RESERVED_KEYS:
                continue
            if key == "_links":
                attrs[key] = dict(value) if isinstance(value, collections.abc.Mapping) else {}
                continue
            if with_projection_relations:
                relation_class = self.registry.resolve_projection_relation(key)
                if relation_class is not None:
                    attrs[key] = self._materialize_relation(value, relation_class)
                    continue
            attrs[key] = self._materialize_value(key, value)
        if "_links" not in attrs:
            attrs["_links"] = {}
        return node

    def _resource_class(
        self, resource_name: typing.Optional[str], is_projection: bool
    ) -> type:
        if is_projection:
            projection_class = self.registry.resolve_projection(resource_name)
            if projection_class is not None:
                return projection_class
        return self.registry.resolve(ResourceKind.RESOURCE, resource_name)

    def instantiate_resource(
        self,
        payload: typing.Any,
        is_projection: bool = False,
        resource_class: typing.Optional[type] = None,
    ) -> typing.Optional[Resource]:
        """
        Materializes a single resource.

        :param payload: the HAL document.
        :param bool is_projection: whether the document was requested as a projection,
                                   in which case the registered projection class is used.
        :param Optional[type] resource_class: a class chosen by the caller, bypassing
                                              the registry lookup.
        :return: the resource, or ``None`` when ``payload`` is empty or has no
                 ``_links`` mapping.
        """
        if not _has_links(payload):
            return None
        resource_name = self.find_resource_name(payload)
        class_ = (
            resource_class
            if resource_class is not None
            else self._resource_class(resource_name, is_projection)
        )
        self.stage_logger.stage_log(
            Stage.INIT_RESOURCE, resource_name=resource_name, resource_type=class_.__name__
        )
        return self._build(payload, class_, resource_name, is_projection)

    def _collection_item(self, name: str, item: typing.Any, is_projection: bool) -> typing.Any:
        if not _has_links(item):
            return copy.deepcopy(item)
        if self_href(item) is None:
            return self._build(item, self.registry.resolve(ResourceKind.EMBEDDED, name), None)
        resource_name = self.find_resource_name(item)
        return self._build(
            item, self._resource_class(resource_name, is_projection), resource_name, is_projection
        )

    def _fill_collection(
        self, collection: ResourceCollection, payload: JSONObject, is_projection: bool
    ) -> None:
        for name, value in payload["_embedded"].items():
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                collection.resources.append(self._collection_item(name, item, is_projection))
        collection._links = dict(payload["_links"])

    def _collection_name(self, payload: JSONObject) -> typing.Optional[str]:
        return next(iter(payload["_embedded"]), None)

    def instantiate_resource_collection(
        self, payload: typing.Any, is_projection: bool = False
    ) -> typing.Optional[ResourceCollection]:
        if not _is_collection_shaped(payload):
            return None
        collection = self._new(
            self.registry.resolve(ResourceKind.COLLECTION, self._collection_name(payload))
        )
        self._fill_collection(collection, payload, is_projection)
        self.stage_logger.stage_log(
            Stage.INIT_RESOURCE,
            collection_type=type(collection).__name__,
            size=len(collection.resources),
        )
        return collection

    def instantiate_paged_resource_collection(
        self, payload: typing.Any, is_projection: bool = False
    ) -> typing.Optional[PagedResourceCollection]:
        """
        Materializes a page of a collection.  Page metadata missing from the payload
        takes its default: page ``0`` of size :py:attr:`default_page_size`, with no
        elements and a single page.
        """
        if not _is_collection_shaped(payload):
            return None
        collection = self._new(
            self.registry.resolve(ResourceKind.PAGED_COLLECTION, self._collection_name(payload))
        )
        self._fill_collection(collection, payload, is_projection)
        page = payload.get("page")
        if not isinstance(page, collections.abc.Mapping):
            page = {}
        collection.page_number = _as_int(page.get("number"), 0)
        collection.page_size = _as_int(page.get("size"), self.default_page_size)
        collection.total_elements = _as_int(page.get("totalElements"), 0)
        collection.total_pages = _as_int(page.get("totalPages"), 1)
        self.stage_logger.stage_log(
            Stage.INIT_RESOURCE,
            collection_type=type(collection).__name__,
            size=len(collection.resources),
            page_number=collection.page_number,
        )
        return collection

    def materialize(self, payload: typing.Any, is_projection: bool = False) -> typing.Any:
        """
        Materializes ``payload`` according to its shape.  Payloads that are not
        resource-shaped are plain data and are returned unchanged.
        """
        kind = classify(payload)
        if kind is PayloadKind.PAGED_COLLECTION:
            return self.instantiate_paged_resource_collection(payload, is_projection)
        elif kind is PayloadKind.COLLECTION:
            return self.instantiate_resource_collection(payload, is_projection)
        elif kind is PayloadKind.RESOURCE:
            return self.instantiate_resource(payload, is_projection)
        return payload

    def init_resource(self, value: typing.Any) -> typing.Any:
        """
        Wraps a resource-shaped mapping into a bare :py:class:`Resource` or
        :py:class:`EmbeddedResource` without consulting the registry.  Anything
        else is returned as is.
        """
        if isinstance(value, AbstractResource) or classify(value) is not PayloadKind.RESOURCE:
            return value
        node = self._new(EmbeddedResource if is_embedded_resource(value) else Resource)
        vars(node).update(value)
        return node

    def __init__(
        self,
        registry: TypeRegistry,
        default_page_size: int = 20,
        client: typing.Optional["HateoasClient"] = None,
        stage_logger: typing.Optional[StageLogger] = None,
        base_api_url: typing.Optional[str] = None,
    ):
        self.registry = registry
        self.default_page_size = default_page_size
        self.base_api_url = base_api_url.rstrip("/") if base_api_url is not None else None
        self.client = client
        self.stage_logger = stage_logger if stage_logger is not None else StageLogger()
