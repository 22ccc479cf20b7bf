"""
judgment/trace.py — zdarzenia diagnostyczne silnika (logging + rich).

Tylko obserwowalność — nie wpływa na wyniki osądów.

Publiczne API:
  TRACE                      poziom logowania poniżej DEBUG (odrzucone porażki reguł)
  get_logger(name)           → logging.Logger w hierarchii "judgment"
  span(name, **fields)       context manager: span z nazwą osądu i polami debug
  current_span()             → ścieżka aktywnych spanów, np. "is_even(n=4)/is_even(n=2)"
  configure_logging(level)   podpina RichHandler (idempotentne)
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from contextvars import ContextVar
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

ROOT_LOGGER = "judgment"

_SPANS: ContextVar[tuple[str, ...]] = ContextVar("judgment_spans", default=())


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger w hierarchii 'judgment' (np. get_logger('engine') → 'judgment.engine')."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _fmt_fields(fields: dict[str, Any]) -> str:
    return ", ".join(f"{k}={v!r}" for k, v in fields.items())


def current_span() -> str:
    return "/".join(_SPANS.get())


@contextlib.contextmanager
def span(name: str, **fields: Any) -> Iterator[str]:
    """
    Otwiera span diagnostyczny; rekordy logów wewnątrz dostają record.span.

    Span jest kluczowany nazwą osądu i wybranymi polami wejścia (debug).
    """
    label = f"{name}({_fmt_fields(fields)})"
    token = _SPANS.set(_SPANS.get() + (label,))
    log   = get_logger("span")
    log.debug("wejście %s", label)
    try:
        yield label
    finally:
        log.debug("wyjście %s", label)
        _SPANS.reset(token)


class SpanFilter(logging.Filter):
    """Dokleja bieżącą ścieżkę spanów do rekordu (record.span)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.span = current_span()
        return True


class _SpanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        path = getattr(record, "span", "")
        return f"[{path}] {msg}" if path else msg


_configured = False


def configure_logging(level: int | str = logging.INFO, *, rich: bool = True) -> None:
    """Konfiguruje logger 'judgment' (RichHandler na stderr). Wywołania kolejne tylko zmieniają poziom."""
    global _configured
    logger = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = TRACE if level.upper() == "TRACE" else logging.getLevelName(level.upper())
    logger.setLevel(level)
    if _configured:
        return

    if rich:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(_SpanFormatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(_SpanFormatter("%(levelname)s %(name)s: %(message)s"))

    handler.addFilter(SpanFilter())
    logger.addHandler(handler)
    _configured = True
