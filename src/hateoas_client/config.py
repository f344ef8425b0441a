"""
Configuration surface of the client.

Applications either build a :py:class:`HateoasConfiguration` directly or load one from
a plain mapping with :py:meth:`HateoasConfiguration.from_mapping`, which understands the
camel-cased layout used by HAL server configuration files::

    {
        "baseUrl": "http://localhost:8080/api/v1",
        "cache": {"enabled": True, "lifeTimeMs": 300000},
        "pagination": {"defaultPage": {"size": 20, "page": 0}},
        "logs": {"verboseLogs": False},
    }

The mapping is validated with pydantic before the configuration is built, so values
such as ``"false"`` or ``"50"`` are coerced, and ``None`` means "use the default".
"""

import dataclasses
import datetime
import typing

import pydantic
from pydantic import BaseModel, Field

from .declarations import PageParam
from .exceptions import InvalidConfigurationError

DEFAULT_ROOT_URL = "http://localhost:8080/api/v1"
DEFAULT_CACHE_LIFE_TIME = datetime.timedelta(minutes=5)

T = typing.TypeVar("T")


@dataclasses.dataclass
class HttpConfig:
    root_url: str = DEFAULT_ROOT_URL


@dataclasses.dataclass
class CacheConfig:
    enabled: bool = True
    life_time: datetime.timedelta = DEFAULT_CACHE_LIFE_TIME


@dataclasses.dataclass
class PaginationConfig:
    default_page: PageParam = dataclasses.field(default_factory=PageParam)


@dataclasses.dataclass
class LogsConfig:
    verbose_logs: bool = False


class HttpSettings(BaseModel):
    root_url: typing.Optional[str] = Field(default=None, alias="rootUrl", min_length=1)


class CacheSettings(BaseModel):
    enabled: typing.Optional[bool] = None
    life_time_ms: typing.Optional[int] = Field(default=None, alias="lifeTimeMs", ge=0)


class PageSettings(BaseModel):
    size: typing.Optional[int] = Field(default=None, gt=0)
    page: typing.Optional[int] = Field(default=None, ge=0)


class PaginationSettings(BaseModel):
    default_page: typing.Optional[PageSettings] = Field(default=None, alias="defaultPage")


class LogsSettings(BaseModel):
    verbose_logs: typing.Optional[bool] = Field(default=None, alias="verboseLogs")


class ConfigurationSettings(BaseModel):
    """
    The camel-cased mapping form of :py:class:`HateoasConfiguration`.  Every key is
    optional; unknown keys are ignored.
    """

    base_url: typing.Optional[str] = Field(default=None, alias="baseUrl", min_length=1)
    http: typing.Optional[HttpSettings] = None
    cache: typing.Optional[CacheSettings] = None
    pagination: typing.Optional[PaginationSettings] = None
    logs: typing.Optional[LogsSettings] = None


def _or_default(value: typing.Optional[T], default: T) -> T:
    return value if value is not None else default


@dataclasses.dataclass
class HateoasConfiguration:
    http: HttpConfig = dataclasses.field(default_factory=HttpConfig)
    cache: CacheConfig = dataclasses.field(default_factory=CacheConfig)
    pagination: PaginationConfig = dataclasses.field(default_factory=PaginationConfig)
    logs: LogsConfig = dataclasses.field(default_factory=LogsConfig)

    @property
    def base_api_url(self) -> str:
        """
        The API root without its trailing slash.
        """
        return self.http.root_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: ConfigurationSettings) -> "HateoasConfiguration":
        http = settings.http or HttpSettings()
        cache = settings.cache or CacheSettings()
        pagination = settings.pagination or PaginationSettings()
        default_page = pagination.default_page or PageSettings()
        logs = settings.logs or LogsSettings()
        defaults = PageParam()

        root_url = _or_default(settings.base_url, _or_default(http.root_url, DEFAULT_ROOT_URL))
        life_time = DEFAULT_CACHE_LIFE_TIME
        if cache.life_time_ms is not None:
            life_time = datetime.timedelta(milliseconds=cache.life_time_ms)

        return cls(
            http=HttpConfig(root_url=root_url),
            cache=CacheConfig(enabled=_or_default(cache.enabled, True), life_time=life_time),
            pagination=PaginationConfig(
                default_page=PageParam(
                    size=_or_default(default_page.size, defaults.size),
                    page=_or_default(default_page.page, defaults.page),
                ),
            ),
            logs=LogsConfig(verbose_logs=_or_default(logs.verbose_logs, False)),
        )

    @classmethod
    def from_mapping(cls, mapping: typing.Mapping[str, typing.Any]) -> "HateoasConfiguration":
        """
        Builds a configuration from its camel-cased mapping form.  Keys that are absent
        or ``None`` keep their defaults.

        :param Mapping[str, Any] mapping: the configuration mapping.
        :return: a :py:class:`HateoasConfiguration`.
        :raises InvalidConfigurationError: when a value cannot be converted, e.g. a page
                                           size that is not a positive integer.
        """
        try:
            settings = ConfigurationSettings.model_validate(mapping)
        except pydantic.ValidationError as e:
            raise InvalidConfigurationError(f"invalid configuration: {e}") from e
        return cls.from_settings(settings)
