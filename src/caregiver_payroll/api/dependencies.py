"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.config import get_settings
from caregiver_payroll.database import get_session
from caregiver_payroll.payroll_config import PayrollConfig, load_payroll_config
from caregiver_payroll.services import PayrollService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Mutating routes commit before responding."""
    async with get_session() as session:
        yield session


@lru_cache(maxsize=1)
def get_payroll_config() -> PayrollConfig:
    """Pay rules loaded once from PAYROLL_CONFIG_FILE, or the reference defaults."""
    return load_payroll_config(get_settings().payroll_config_file)


async def get_actor_id(
    x_actor_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract the acting user's ID from header."""
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Actor-ID header is required",
        )
    try:
        return UUID(x_actor_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Actor-ID format",
        )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
ActorId = Annotated[UUID, Depends(get_actor_id)]
Config = Annotated[PayrollConfig, Depends(get_payroll_config)]


async def get_payroll_service(db: DbSession, config: Config) -> PayrollService:
    return PayrollService.for_session(db, config)


Service = Annotated[PayrollService, Depends(get_payroll_service)]
