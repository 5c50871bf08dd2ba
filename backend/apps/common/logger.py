import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

_SCALARS = (str, int, float, bool, Decimal)


def render_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if value is None or isinstance(value, _SCALARS):
        return str(value)
    return repr(value)


class AppLogger:
    """Stdlib logger plus immutable key/value context.

    Lines come out as ``message | key=value ...``; every checkout line carries
    the cart and order ids it concerns. The merged context is also attached to
    the record as ``record.context`` for handlers that want it structured.
    """

    def __init__(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
        _logger: Optional[logging.Logger] = None,
    ):
        self._name = name
        self._logger = _logger or logging.getLogger(name)
        self._context = dict(context or {})

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def bind(self, **fields: Any) -> "AppLogger":
        return AppLogger(self._name, {**self._context, **fields}, _logger=self._logger)

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        """ERROR line with the traceback of the exception being handled."""
        self._emit(logging.ERROR, message, fields, exc_info=True)

    def _emit(
        self, level: int, message: str, fields: Dict[str, Any], exc_info: bool = False
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        merged = {**self._context, **fields}
        self._logger.log(
            level,
            self._format(message, merged),
            exc_info=exc_info,
            extra={"context": merged},
        )

    @staticmethod
    def _format(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={render_value(value)}" for key, value in context.items())
        return f"{message} | {pairs}"


def get_logger(name: str) -> AppLogger:
    return AppLogger(name)
