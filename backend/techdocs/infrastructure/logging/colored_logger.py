"""Colored pipeline logger — ANSI-colored console logging for the ingestion pipeline.

Provides a PipelineLogger with color-coded output per ingestion stage,
making it easy to follow a scrape job through the worker logs.

Color scheme:
    🟢 Green   — Dequeue / Persist
    🟡 Yellow  — Deduplication
    🟣 Magenta — Extraction
    🔵 Blue    — Embedding
    🔴 Red     — Errors
    ⚪ Gray    — Details / Stats
"""

import logging
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Pipeline Stage Definitions ───────────────────────────────────────

class PipelineStage:
    """Ingestion stages with colors and icons."""

    DEQUEUE = ("DEQUEUE", _Colors.GREEN, "📥")
    DEDUP = ("DEDUP", _Colors.YELLOW, "🔍")
    EXTRACT = ("EXTRACT", _Colors.MAGENTA, "🌐")
    EMBED = ("EMBED", _Colors.BLUE, "🧮")
    PERSIST = ("PERSIST", _Colors.GREEN, "💾")
    PIPELINE = ("PIPELINE", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


def _format_details(kwargs: dict[str, Any], color: str) -> str:
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"


# ── PipelineLogger ───────────────────────────────────────────────────

class PipelineLogger:
    """Color-coded logger for the ingestion pipeline.

    Usage:
        log = PipelineLogger("IngestionPipeline")
        log.step_start(PipelineStage.EXTRACT, "Fetching https://example.com/x")
        log.detail("extractor=universal")
        log.step_complete(PipelineStage.PERSIST, "Stored universal_3f2a")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(kwargs, _Colors.GRAY)
        self._logger.info(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(kwargs, _Colors.GRAY)
        self._logger.info(formatted)

    def step_skip(self, stage: tuple[str, str, str], message: str) -> None:
        label, _, icon = stage
        self._logger.info(f"{_Colors.YELLOW}{icon} [{label}] ↷ {message}{_Colors.RESET}")

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a pipeline step error in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            formatted += _format_details(kwargs, _Colors.DIM)
        self._logger.info(formatted)

    def stats(self, **kwargs: Any) -> None:
        parts = [f"{_Colors.GRAY}{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}")
