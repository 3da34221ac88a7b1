import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import FastAPI

from schema_guard.config import Settings, get_settings
from schema_guard.core.exceptions import SchemaMismatchError
from schema_guard.core.logging import setup_logging
from schema_guard.schema.diagnostics import VerificationReport
from schema_guard.schema.model_meta import OrderState
from schema_guard.schema.registry import registry_for
from schema_guard.services.failure_policy import FailurePolicy
from schema_guard.services.startup import verify_database
from schema_guard.services.verifier import VerifierState


def schema_guard_lifespan(
  models: Any,
  *,
  order_states: Sequence[OrderState] = (),
  settings: Settings | None = None,
  policy: FailurePolicy | None = None,
  strict: bool = False,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
  """Build a FastAPI lifespan that verifies the database schema before serving.

  ``models`` is SQLAlchemy MetaData, a declarative base, or a ModelRegistry.
  The verdict lands on ``app.state.schema_valid`` and the verifier state on
  ``app.state.schema_guard``. With ``strict`` a failed verdict aborts startup.
  """
  registry = registry_for(models)

  @asynccontextmanager
  async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    resolved = settings or get_settings()
    setup_logging(resolved)
    logger = logging.getLogger("schema_guard.core.lifespan")

    state: VerifierState = getattr(app.state, "schema_guard", None) or VerifierState()
    app.state.schema_guard = state
    try:
      schema_valid = await verify_database(resolved, registry, state=state, order_states=order_states, policy=policy)
    except Exception:
      # Connection and configuration problems are reported without marking the attempt.
      logger.error("Schema verification could not run.", exc_info=True)
      if strict:
        raise
      schema_valid = False

    app.state.schema_valid = schema_valid
    if strict and not schema_valid:
      raise SchemaMismatchError(state.report or VerificationReport())

    logger.info("Startup schema verification finished: valid=%s", schema_valid)
    yield

  return lifespan
