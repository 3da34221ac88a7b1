"""Caller-supplied reactions to a failed verification run."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Protocol

from schema_guard.schema.diagnostics import VerificationReport, format_failure_report

logger = logging.getLogger("schema_guard.services.failure_policy")

ALARM_BANNER = "=-✗" * 24


class FailurePolicy(Protocol):
  """Reaction applied once when verification fails."""

  async def on_failure(self, report: VerificationReport) -> None:
    """Handle a failed report."""


class LogOnlyPolicy:
  """Log the failure report and return immediately."""

  async def on_failure(self, report: VerificationReport) -> None:
    logger.error("%s", format_failure_report(report))


class DelayThenTerminatePolicy:
  """Make drift impossible to miss: alarm, block, then optionally exit.

  The delay keeps a failing process visibly stuck at startup instead of
  serving traffic; ``terminate`` is meant for test and verification runs where
  a hard exit is preferable to a degraded service.
  """

  def __init__(
    self,
    *,
    delay_seconds: float = 60.0,
    terminate: bool = False,
    exit_code: int = 1,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    exit_process: Callable[[int], None] = sys.exit,
  ) -> None:
    if delay_seconds < 0:
      raise ValueError("delay_seconds must be zero or positive.")
    self.delay_seconds = delay_seconds
    self.terminate = terminate
    self.exit_code = exit_code
    self._sleep = sleep
    self._exit = exit_process

  async def on_failure(self, report: VerificationReport) -> None:
    logger.error("%s", format_failure_report(report))
    logger.error("Schema validation is failed..")
    logger.error("%s", ALARM_BANNER)
    if self.delay_seconds:
      logger.error("Blocking startup for %.0f seconds.", self.delay_seconds)
      await self._sleep(self.delay_seconds)

    if self.terminate:
      logger.critical("Terminating with exit code %d after schema validation failure.", self.exit_code)
      self._exit(self.exit_code)
