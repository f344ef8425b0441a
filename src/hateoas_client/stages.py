import enum
import logging
import typing

_logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    PREPARE_URL = "PREPARE_URL"
    PREPARE_PARAMS = "PREPARE_PARAMS"
    RESOLVE_VALUES = "RESOLVE_VALUES"
    HTTP_REQUEST = "HTTP_REQUEST"
    HTTP_RESPONSE = "HTTP_RESPONSE"
    INIT_RESOURCE = "INIT_RESOURCE"
    CACHE_GET = "CACHE_GET"
    CACHE_PUT = "CACHE_PUT"
    CACHE_EVICT = "CACHE_EVICT"


def _format_params(params: typing.Mapping[str, typing.Any]) -> str:
    return ", ".join(f"{k}={v!r}" for k, v in params.items())


class StageLogger:
    """
    Emits one record per pipeline stage.  Stage records are ``DEBUG`` and only go
    out when ``verbose`` is set; errors are always logged.

    :param bool verbose: whether stage records are emitted.
    :param logging.Logger logger: the logger to write to.
    """

    verbose: bool
    logger: logging.Logger

    def stage_log(self, stage: Stage, **params: typing.Any) -> None:
        if self.verbose and self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("[%s] %s", stage.value, _format_params(params))

    def stage_error_log(self, stage: Stage, **params: typing.Any) -> None:
        self.logger.error("[%s] %s", stage.value, _format_params(params))

    def resource_begin_log(self, resource: typing.Any, method: str, **params: typing.Any) -> None:
        if self.verbose and self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "%s %s begin: %s", type(resource).__name__, method, _format_params(params)
            )

    def resource_end_log(self, resource: typing.Any, method: str, **params: typing.Any) -> None:
        if self.verbose and self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "%s %s end: %s", type(resource).__name__, method, _format_params(params)
            )

    def __init__(self, verbose: bool = False, logger: typing.Optional[logging.Logger] = None):
        self.verbose = verbose
        self.logger = logger if logger is not None else _logger
