"""Logging helpers shared by environments and demo scripts."""

from __future__ import annotations

from collections import OrderedDict
import logging
from typing import Any


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        force=True,
    )


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def format_key_values(values: dict[str, Any], *, prefix: str | None = None) -> str:
    """Render `values` as a tab-separated `key=value` line, skipping None."""
    ordered = OrderedDict((key, value) for key, value in values.items() if value is not None)
    segments: list[str] = []
    if prefix:
        segments.append(str(prefix))
    for key, value in ordered.items():
        segments.append(f"{key}={_format_value(value)}")
    return "\t".join(segments)


def log_key_values(
    logger_name: str,
    values: dict[str, Any],
    *,
    prefix: str | None = None,
    level: int = logging.INFO,
) -> None:
    logging.getLogger(logger_name).log(level, format_key_values(values, prefix=prefix))
