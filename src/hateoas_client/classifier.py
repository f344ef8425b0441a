"""
Shape predicates for HAL payloads.

The predicates accept raw JSON mappings as well as nodes that were already
materialized, and are evaluated in priority order by :py:func:`classify`:
paged collection, then collection, then single resource.
"""

import collections.abc
import enum
import typing

from .models import AbstractResource


class PayloadKind(enum.Enum):
    PAGED_COLLECTION = "paged_collection"
    COLLECTION = "collection"
    RESOURCE = "resource"
    NONE = "none"


def _as_mapping(payload: typing.Any) -> typing.Optional[typing.Mapping[str, typing.Any]]:
    if isinstance(payload, AbstractResource):
        return payload.attributes()
    if isinstance(payload, collections.abc.Mapping):
        return payload
    return None


def _has_mapping(payload: typing.Mapping[str, typing.Any], key: str) -> bool:
    return isinstance(payload.get(key), collections.abc.Mapping)


def is_paged_resource_collection(payload: typing.Any) -> bool:
    _payload = _as_mapping(payload)
    if not _payload:
        return False
    return (
        _has_mapping(_payload, "_embedded")
        and _has_mapping(_payload, "_links")
        and "page" in _payload
    )


def is_resource_collection(payload: typing.Any) -> bool:
    _payload = _as_mapping(payload)
    if not _payload:
        return False
    return (
        _has_mapping(_payload, "_embedded")
        and _has_mapping(_payload, "_links")
        and "page" not in _payload
    )


def is_resource(payload: typing.Any) -> bool:
    _payload = _as_mapping(payload)
    if not _payload:
        return False
    links = _payload.get("_links")
    if not isinstance(links, collections.abc.Mapping) or not links:
        return False
    return not (is_paged_resource_collection(_payload) or is_resource_collection(_payload))


def self_href(payload: typing.Any) -> typing.Optional[str]:
    """
    Returns ``_links.self.href`` of a payload, or ``None`` when it has none.
    """
    _payload = _as_mapping(payload)
    if _payload is None:
        return None
    links = _payload.get("_links")
    if not isinstance(links, collections.abc.Mapping):
        return None
    link = links.get("self")
    if isinstance(link, collections.abc.Sequence) and not isinstance(link, str):
        link = link[0] if link else None
    if not isinstance(link, collections.abc.Mapping):
        return None
    href = link.get("href")
    return href if isinstance(href, str) and href else None


def is_embedded_resource(payload: typing.Any) -> bool:
    """
    An embedded resource has links but no ``self`` link of its own.
    """
    return is_resource(payload) and self_href(payload) is None


def classify(payload: typing.Any) -> PayloadKind:
    if is_paged_resource_collection(payload):
        return PayloadKind.PAGED_COLLECTION
    if is_resource_collection(payload):
        return PayloadKind.COLLECTION
    if is_resource(payload):
        return PayloadKind.RESOURCE
    return PayloadKind.NONE
