"""Environment helpers: .env loading and typed parsing of raw values."""

from __future__ import annotations

import os
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def default_env_path() -> Path:
  """Return the .env path in the current working directory."""

  return Path.cwd() / ".env"


def _strip_quotes(value: str) -> str:
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    return value[1:-1]
  return value


def load_env_file(path: Path, *, override: bool = False) -> int:
  """Load KEY=value lines from ``path`` into ``os.environ`` and return how many were set.

  Blank lines, comments and ``export`` prefixes are tolerated. Existing
  variables win unless ``override`` is set.
  """

  if not path.is_file():
    return 0

  loaded = 0
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
      continue

    line = line.removeprefix("export ").lstrip()
    key, value = (part.strip() for part in line.split("=", 1))
    if not key or (key in os.environ and not override):
      continue

    os.environ[key] = _strip_quotes(value)
    loaded += 1

  return loaded


def parse_bool(raw: str | None, default: bool = False) -> bool:
  """Parse a boolean-ish environment string."""

  if raw is None or not raw.strip():
    return default
  return raw.strip().lower() in _TRUTHY


def parse_csv(raw: str | None) -> tuple[str, ...]:
  """Split a comma-separated value into trimmed, non-empty items."""

  if not raw:
    return ()
  return tuple(item.strip() for item in raw.split(",") if item.strip())


def optional_str(raw: str | None) -> str | None:
  """Return a stripped string, or None when blank."""

  if raw is None:
    return None
  value = raw.strip()
  return value or None
