"""
In-memory cache of materialized GET responses.

Entries are keyed by a :py:class:`CacheKey` fingerprint and expire once
``life_time`` has passed since they were stored.  A mutation on a resource
evicts every entry stored under the same resource name, so single resources,
collections and pages built from the same data go away together.
"""

import dataclasses
import datetime
import typing
from collections import OrderedDict
from urllib.parse import urlencode

from .config import DEFAULT_CACHE_LIFE_TIME
from .exceptions import ValidationError
from .stages import Stage, StageLogger
from .types import QueryParams
from .validation import validate_input_params

Clock = typing.Callable[[], datetime.datetime]

EVICTION_BOUNDARIES = ("/", "?", "#", "|")


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclasses.dataclass(frozen=True)
class CacheKey:
    url: str
    params: typing.Tuple[typing.Tuple[str, str], ...] = ()
    method: str = "GET"

    @property
    def value(self) -> str:
        """
        The fingerprint of the request, ``url=<url>|method=<METHOD>|params=<k=v&...>``.
        Param names and values are percent-encoded.
        """
        return f"url={self.url}|method={self.method.upper()}|params={urlencode(self.params)}"

    @classmethod
    def of(cls, url: str, params: QueryParams = (), method: str = "GET") -> "CacheKey":
        """
        Builds a key whose params are sorted, so that requests differing only in
        param order share a key.
        """
        validate_input_params(url=url)
        return cls(
            url=url,
            params=tuple(sorted((str(name), str(value)) for name, value in params)),
            method=method.upper(),
        )


@dataclasses.dataclass
class CachedEntry:
    value: typing.Any
    cached_at: datetime.datetime


class ResourceCache:
    base_api_url: str
    life_time: datetime.timedelta
    clock: Clock
    stage_logger: StageLogger
    _entries: "OrderedDict[str, CachedEntry]"

    def _validate_key(self, key: typing.Optional[CacheKey]) -> CacheKey:
        if key is None or not isinstance(key, CacheKey):
            raise ValidationError(["key"])
        validate_input_params(url=key.url)
        return key

    def get_resource(self, key: CacheKey) -> typing.Any:
        """
        Returns the value cached under ``key``, or ``None`` when there is none or it
        has expired.  Expired entries are evicted.
        """
        _key = self._validate_key(key)
        entry = self._entries.get(_key.value)
        if entry is None:
            self.stage_logger.stage_log(Stage.CACHE_GET, cache_key=_key.value, result=None)
            return None
        if self.clock() > entry.cached_at + self.life_time:
            del self._entries[_key.value]
            self.stage_logger.stage_log(
                Stage.CACHE_GET, cache_key=_key.value, message="cache was expired", result=None
            )
            return None
        self.stage_logger.stage_log(Stage.CACHE_GET, cache_key=_key.value, result=entry.value)
        return entry.value

    def put_resource(self, key: CacheKey, value: typing.Any) -> None:
        _key = self._validate_key(key)
        validate_input_params(value=value)
        self._entries.pop(_key.value, None)
        self._entries[_key.value] = CachedEntry(value=value, cached_at=self.clock())
        self.stage_logger.stage_log(Stage.CACHE_PUT, cache_key=_key.value)

    def _resource_name_of(self, url: str) -> typing.Optional[str]:
        prefix = f"{self.base_api_url}/"
        if not url.startswith(prefix):
            return None
        rest = url[len(prefix):]
        for boundary in EVICTION_BOUNDARIES:
            rest = rest.split(boundary, 1)[0]
        return rest or None

    def evict_resource(self, key: CacheKey) -> None:
        """
        Evicts every entry whose URL lies under the resource name of ``key.url``, the
        first path segment after the API root.  A URL outside the API root only
        evicts its own entry.
        """
        _key = self._validate_key(key)
        resource_name = self._resource_name_of(_key.url)
        if resource_name is None:
            evicted = [_key.value] if _key.value in self._entries else []
        else:
            prefix = f"url={self.base_api_url}/{resource_name}"
            evicted = [
                cache_key
                for cache_key in self._entries
                if cache_key.startswith(prefix)
                and cache_key[len(prefix) : len(prefix) + 1] in EVICTION_BOUNDARIES
            ]
        for cache_key in evicted:
            del self._entries[cache_key]
        if evicted:
            self.stage_logger.stage_log(Stage.CACHE_EVICT, cache_key=_key.value, evicted=evicted)

    def evict_all(self) -> None:
        self._entries.clear()
        self.stage_logger.stage_log(Stage.CACHE_EVICT, evicted="all")

    def set_cache_life_time(self, life_time: datetime.timedelta) -> None:
        self.life_time = life_time

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return isinstance(key, CacheKey) and key.value in self._entries

    def __init__(
        self,
        base_api_url: str,
        life_time: datetime.timedelta = DEFAULT_CACHE_LIFE_TIME,
        clock: Clock = utcnow,
        stage_logger: typing.Optional[StageLogger] = None,
    ):
        self.base_api_url = base_api_url.rstrip("/")
        self.life_time = life_time
        self.clock = clock
        self.stage_logger = stage_logger if stage_logger is not None else StageLogger()
        self._entries = OrderedDict()
