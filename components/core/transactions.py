"""Read-then-write transactions with bounded retry on conflicts."""

from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from components.core.config import get_settings
from components.core.errors import ConflictError
from components.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Errors raised when another writer got to the same rows first.
CONFLICT_ERRORS = (StaleDataError, OperationalError)


async def run_in_transaction(
    session: AsyncSession,
    operation: Callable[[AsyncSession], Awaitable[T]],
    attempts: Optional[int] = None,
) -> T:
    """
    Run ``operation`` and commit, retrying the whole read-then-write on conflict.

    ``operation`` must do all of its reads through the session it receives and
    must be safe to run again from scratch: on a conflict the session is rolled
    back before the next attempt. Any other exception rolls back and propagates.

    Raises:
        ConflictError: when every attempt ended in a conflict.
    """
    attempts = attempts or get_settings().TRANSACTION_RETRIES
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        try:
            result = await operation(session)
            await session.commit()
            return result
        except CONFLICT_ERRORS as e:
            await session.rollback()
            last_error = e
            logger.warning("Transaction conflict (attempt %d/%d): %s", attempt, attempts, e)
        except Exception:
            await session.rollback()
            raise

    raise ConflictError(
        f"The operation was not applied after {attempts} attempts because the records "
        f"were being modified concurrently. Try again. ({last_error})"
    )


async def commit_batch(session: AsyncSession) -> None:
    """Commit everything staged on the session as one all-or-nothing write."""
    try:
        await session.commit()
    except CONFLICT_ERRORS as e:
        await session.rollback()
        raise ConflictError(
            "Nothing was saved because the records changed while the operation ran. "
            "Reload and try again."
        ) from e
    except Exception:
        await session.rollback()
        raise
