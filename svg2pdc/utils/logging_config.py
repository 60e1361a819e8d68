"""Unified logging configuration for the converter entry points.

Provides consistent logging for the CLI, the golden-corpus checker and
library callers that opt in:
    - Console handler (stderr) and optional file handler with rotation
    - JSON output mode for ingestion by CI tooling
    - Contextual fields (file, case) attached to every record
    - Warning capture (``numpy`` overflow warnings -> logging)

Public API:
    setup_logging(**cfg.logging, context={"app": "svg2pdc"})
    push_context(file="icon.svg")
    pop_context(keys=["file"])

Format examples:
    Human: 2026-10-19T10:00:00.000Z | WARNING  | file=icon.svg | Skipping unsupported tag: text
    JSON: {"t":"2026-10-19T10:00:00+00:00","lvl":"WARNING","name":"...","msg":"...","file":"icon.svg"}

Context uses contextvars.  Repeated ``setup_logging()`` calls replace the
handlers installed by the previous call and leave other handlers alone.
"""

import contextvars
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "svg2pdc_logging_context"
)

# Handlers installed by setup_logging(), removed on reconfiguration
_installed: List[logging.Handler] = []


def _current_context() -> Dict[str, Any]:
    return _context_var.get({})


class ContextFormatter(logging.Formatter):
    """Formatter that appends contextual fields.

    Parameters
    ----------
    fmt_mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        ANSI level colors; only honored when stderr is a terminal.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt_mode: str = "human", use_color: bool = True) -> None:
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown format mode: {fmt_mode!r}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = _current_context()
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(
        self, record: logging.LogRecord, ts: datetime, context: Dict[str, Any]
    ) -> str:
        entry: Dict[str, Any] = {
            "t": ts.isoformat(),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        entry.update(context)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)

    def _format_human(
        self, record: logging.LogRecord, ts: datetime, context: Dict[str, Any]
    ) -> str:
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        parts = [ts_str, "|", level, "|"]
        if context:
            parts.append(" ".join(f"{k}={v}" for k, v in context.items()))
            parts.append("|")
        parts.append(record.getMessage())

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the root logger.

    Parameters
    ----------
    log_level : str
        ``"DEBUG"``, ``"INFO"``, ``"WARNING"``, ``"ERROR"`` or ``"CRITICAL"``.
    log_file : str, optional
        Log file path; ``None`` disables file logging.
    json : bool
        JSON lines instead of the human format (console and file).
    color : bool
        ANSI colors on the console.
    to_stderr : bool
        Log to stderr.
    rotate : dict, optional
        ``{"max_bytes": 1_000_000, "backup_count": 3}`` for a size-rotated
        log file.
    capture_warnings : bool
        Route Python warnings to the ``py.warnings`` logger.
    context : dict, optional
        Initial contextual fields (e.g. ``{"app": "svg2pdc"}``).

    Returns
    -------
    list[logging.Handler]
        Handlers installed by this call.

    Raises
    ------
    ValueError
        If *log_level* is not a logging level name.
    """
    level = _level(log_level)
    root = logging.getLogger()
    reset_logging()

    root.setLevel(level)
    fmt_mode = "json" if json else "human"

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter(fmt_mode, use_color=color and not json))
        _installed.append(console)

    if log_file:
        _installed.append(_create_file_handler(log_file, rotate, fmt_mode))

    for handler in _installed:
        root.addHandler(handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)

    return list(_installed)


def _create_file_handler(
    log_file: str, rotate: Optional[Dict[str, Any]], fmt_mode: str
) -> logging.Handler:
    """File handler, size-rotated when *rotate* is given."""
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler: logging.Handler
    if rotate:
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=rotate.get("max_bytes", 1_000_000),
            backupCount=rotate.get("backup_count", 3),
            encoding="utf-8",
        )
    else:
        handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(ContextFormatter(fmt_mode, use_color=False))
    return handler


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def push_context(**kwargs: Any) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(file="icon.svg")
    >>> logger.warning("Skipping unsupported tag: text")
    ... | WARNING  | file=icon.svg | Skipping unsupported tag: text
    """
    _context_var.set({**_current_context(), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; ``None`` clears all of them."""
    if keys is None:
        _context_var.set({})
        return
    _context_var.set({k: v for k, v in _current_context().items() if k not in keys})


def reset_logging() -> None:
    """Remove and close the handlers installed by ``setup_logging``."""
    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()
