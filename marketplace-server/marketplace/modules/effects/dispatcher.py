"""Best-effort post-settlement effects.

Effects run after the settlement commit as independent asyncio tasks. A
failing effect is retried, then recorded in ``effect_failures``; it never
reaches the buyer and never touches money.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_exponential

from marketplace.core.config import EffectsSettings
from marketplace.infrastructure.database.repositories.progress_repository import SqlProgressRepository
from marketplace.modules.listings import ListingSnapshot
from marketplace.modules.orders import OrderRecord
from marketplace.modules.settlement.exceptions import EffectDispatchFailure

from .handlers import DEFAULT_EFFECTS, EffectHandler
from .models import EffectContext
from .repository import ProgressRepository

logger = logging.getLogger(__name__)


class EffectsDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: EffectsSettings,
        handlers: Mapping[str, EffectHandler] | None = None,
        repository_factory: Callable[[AsyncSession], ProgressRepository] = SqlProgressRepository,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._handlers = dict(handlers if handlers is not None else DEFAULT_EFFECTS)
        self._repository_factory = repository_factory
        self._tasks: set[asyncio.Task] = set()

    def dispatch(self, order: OrderRecord, listing: ListingSnapshot) -> list[asyncio.Task]:
        """Schedule every effect for a committed order and return immediately."""
        if not self._settings.enabled:
            return []
        ctx = EffectContext(order=order, listing=listing)
        tasks = []
        for name, handler in self._handlers.items():
            task = asyncio.create_task(self._run(name, handler, ctx), name=f"effect:{name}:{order.id}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    async def drain(self) -> None:
        """Wait for in-flight effects, including any they schedule."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run(self, name: str, handler: EffectHandler, ctx: EffectContext) -> None:
        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential(
                multiplier=self._settings.wait_min_seconds,
                min=self._settings.wait_min_seconds,
                max=self._settings.wait_max_seconds,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    await self._apply(handler, ctx)
        except Exception as exc:
            failure = EffectDispatchFailure(name, ctx.order.id, repr(exc))
            logger.error("%s after %s attempts", failure, attempts, exc_info=exc)
            await self._dead_letter(failure, attempts, repr(exc))

    async def _apply(self, handler: EffectHandler, ctx: EffectContext) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await handler(self._repository_factory(session), ctx)

    async def _dead_letter(self, failure: EffectDispatchFailure, attempts: int, error: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._repository_factory(session).record_failure(
                        order_id=failure.order_id,
                        effect=failure.effect,
                        error=error,
                        attempts=attempts,
                    )
        except Exception:
            logger.exception("Could not record failed effect %s for order %s", failure.effect, failure.order_id)
