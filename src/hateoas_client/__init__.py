"""
A client for HAL+JSON hypermedia APIs.

Resource classes are registered at application startup, before the first request::

    import hateoas_client

    class Thing(hateoas_client.Resource):
        pass

    hateoas_client.register_resource_type("things", Thing)

The module-level helpers register into :py:data:`hateoas_client.registry.default_registry`,
which every :py:class:`HateoasClient` uses unless it is given a registry of its own.
"""

import typing

from .cache import CacheKey, ResourceCache  # noqa
from .client import HateoasClient  # noqa
from .config import (  # noqa
    CacheConfig,
    HateoasConfiguration,
    HttpConfig,
    LogsConfig,
    PaginationConfig,
)
from .declarations import (  # noqa
    GetOption,
    HttpMethod,
    Include,
    PagedGetOption,
    PageParam,
    RequestBody,
    RequestOption,
    SortOrder,
    ValuesOption,
)
from .exceptions import (  # noqa
    DetachedResourceError,
    HateoasClientException,
    InvalidConfigurationError,
    InvalidDeclarationError,
    NotResourceShapedError,
    RelationNotFoundError,
    TransportError,
    UnsupportedMethodError,
    ValidationError,
)
from .interfaces import Transport  # noqa
from .models import (  # noqa
    EmbeddedResource,
    Link,
    PagedResourceCollection,
    Resource,
    ResourceCollection,
)
from .registry import ResourceKind, TypeRegistry, default_registry


def register_resource_type(resource_name: str, class_: type) -> None:
    default_registry.register_resource_type(resource_name, class_)


def register_embedded_type(relation_names: typing.Iterable[str], class_: type) -> None:
    default_registry.register_embedded_type(relation_names, class_)


def register_projection(resource_class: type, projection_name: str, class_: type) -> None:
    default_registry.register_projection(resource_class, projection_name, class_)


def register_projection_relation(property_name: str, relation_class: type) -> None:
    default_registry.register_projection_relation(property_name, relation_class)


__all__ = (
    "CacheConfig",
    "CacheKey",
    "DetachedResourceError",
    "EmbeddedResource",
    "GetOption",
    "HateoasClient",
    "HateoasClientException",
    "HateoasConfiguration",
    "HttpConfig",
    "HttpMethod",
    "Include",
    "InvalidConfigurationError",
    "InvalidDeclarationError",
    "Link",
    "LogsConfig",
    "NotResourceShapedError",
    "PageParam",
    "PagedGetOption",
    "PagedResourceCollection",
    "PaginationConfig",
    "RelationNotFoundError",
    "RequestBody",
    "RequestOption",
    "Resource",
    "ResourceCache",
    "ResourceCollection",
    "ResourceKind",
    "SortOrder",
    "Transport",
    "TransportError",
    "TypeRegistry",
    "UnsupportedMethodError",
    "ValidationError",
    "ValuesOption",
    "default_registry",
    "register_embedded_type",
    "register_projection",
    "register_projection_relation",
    "register_resource_type",
)
