import logging
import logging.handlers
import sys
import time
import traceback
from pathlib import Path
from types import TracebackType

from schema_guard.config import Settings

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

_LOGGING_INITIALIZED = False


class TruncatedFormatter(logging.Formatter):
  """Formatter that truncates the stack trace to the last few lines."""

  # ruff: noqa: N802
  def formatException(self, ei: tuple[type[BaseException] | None, BaseException | None, TracebackType | None]) -> str:
    lines = traceback.format_exception(*ei)
    # Keep header + last 5 lines of traceback
    if len(lines) > 6:
      return "".join(lines[:1] + ["    ...\n"] + lines[-5:])
    return "".join(lines)


def _file_handler(settings: Settings) -> tuple[logging.Handler, Path]:
  """Create a rotating file handler inside the configured log directory."""
  log_dir = Path(settings.log_dir or ".")
  try:
    log_dir.mkdir(parents=True, exist_ok=True)
  except OSError as exc:
    raise RuntimeError(f"Failed to create log directory at {log_dir}: {exc}") from exc

  log_path = log_dir / f"schema_guard_{time.strftime('%Y%m%d_%H%M%S')}.log"
  handler = logging.handlers.RotatingFileHandler(log_path, encoding="utf-8", maxBytes=settings.log_max_bytes, backupCount=settings.log_backup_count)
  handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  return handler, log_path


def setup_logging(settings: Settings) -> Path | None:
  """Route schema_guard and root logging to stdout and, optionally, a rotating file.

  Returns the log file path when file logging is enabled. Calling it again is
  a no-op.
  """
  global _LOGGING_INITIALIZED
  if _LOGGING_INITIALIZED:
    return None

  stream = logging.StreamHandler(sys.stdout)
  stream.setFormatter(TruncatedFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  handlers: list[logging.Handler] = [stream]

  log_path: Path | None = None
  if settings.log_dir:
    file_handler, log_path = _file_handler(settings)
    handlers.append(file_handler)

  level = logging.DEBUG if settings.debug else logging.INFO
  logging.basicConfig(level=level, handlers=handlers, force=True)
  _LOGGING_INITIALIZED = True
  if log_path is not None:
    logging.getLogger("schema_guard.core.logging").info("Logging initialized. Writing to %s", log_path)
  return log_path
