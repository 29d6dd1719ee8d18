"""Check number allocation via an atomically incremented counter row."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.models import CheckNumberCounter, PayrollRecord

logger = logging.getLogger(__name__)


class CheckNumberIssuer:
    """Issues unique, strictly increasing check numbers.

    The counter row is incremented in place with
    ``UPDATE ... SET current_value = current_value + 1 ... RETURNING``, so the
    database serializes concurrent callers on the row. Reading
    ``max(check_number) + 1`` is never used to pick a number.

    The increment belongs to the caller's transaction: a rollback returns the
    number. Never commits.
    """

    COUNTER_NAME = "payroll_check"

    def __init__(self, session: AsyncSession, start: int = 1000):
        self.session = session
        self.start = start

    async def next_number(self) -> int:
        """Allocate the next check number. The first number issued is start + 1."""
        for _ in range(2):
            value = await self._increment()
            if value is not None:
                logger.debug("Allocated check number %d", value)
                return value
            await self._seed()

        raise RuntimeError(f"Check number counter '{self.COUNTER_NAME}' could not be created")

    async def current_value(self) -> int | None:
        result = await self.session.execute(
            select(CheckNumberCounter.current_value).where(
                CheckNumberCounter.name == self.COUNTER_NAME
            )
        )
        return result.scalar_one_or_none()

    async def _increment(self) -> int | None:
        result = await self.session.execute(
            update(CheckNumberCounter)
            .where(CheckNumberCounter.name == self.COUNTER_NAME)
            .values(current_value=CheckNumberCounter.current_value + 1)
            .returning(CheckNumberCounter.current_value)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def _seed(self) -> None:
        # Start above any number already printed on a record
        result = await self.session.execute(select(func.max(PayrollRecord.check_number)))
        highest = result.scalar_one_or_none() or 0
        seed = max(self.start, highest)

        try:
            async with self.session.begin_nested():
                self.session.add(CheckNumberCounter(name=self.COUNTER_NAME, current_value=seed))
        except IntegrityError:
            # Another transaction created the row first; the retried increment uses it
            logger.debug("Check number counter created concurrently, retrying increment")
        else:
            logger.debug("Seeded check number counter at %d", seed)
