"""Dependency container wiring the settlement pipeline singletons."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.config import Settings, get_settings
from marketplace.infrastructure.database.session import get_session_factory
from marketplace.modules.effects import EffectsDispatcher
from marketplace.modules.settlement import SettlementLocks, SettlementRecovery, SettlementService


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    locks: SettlementLocks
    effects: EffectsDispatcher
    settlement: SettlementService
    recovery: SettlementRecovery

    @classmethod
    def build(
        cls,
        settings: Settings,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ) -> "ApplicationContainer":
        factory = session_factory or get_session_factory()
        # One lock registry per process: purchases and recovery sweeps must share it.
        locks = SettlementLocks()
        effects = EffectsDispatcher(factory, settings.effects)
        settlement = SettlementService(factory, settings=settings.settlement, locks=locks, effects=effects)
        return cls(
            settings=settings,
            session_factory=factory,
            locks=locks,
            effects=effects,
            settlement=settlement,
            recovery=SettlementRecovery(factory, locks),
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer.build(get_settings())


__all__ = ["ApplicationContainer", "get_container"]
