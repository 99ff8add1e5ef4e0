"""
Per-user onboarding/tour state.

The store is handed to routes as a dependency instead of living in a module
global, so each request reads and writes the state of its own user only.
"""
import logging
from typing import Protocol
from app.core.config import settings
from app.core.redis import redis_manager
from app.modules.onboarding.schemas import OnboardingState, OnboardingPatch

logger = logging.getLogger(__name__)

class JsonBackend(Protocol):
    async def get_json(self, key: str) -> dict | None: ...
    async def set_json(self, key: str, data: dict) -> None: ...

class OnboardingStore:
    def __init__(self, backend: JsonBackend, prefix: str | None = None):
        self.backend = backend
        self.prefix = prefix or settings.ONBOARDING_KEY_PREFIX

    def _key(self, user_id: str) -> str:
        return f"{self.prefix}:{user_id}"

    async def get(self, user_id: str) -> OnboardingState:
        data = await self.backend.get_json(self._key(user_id))
        return OnboardingState.model_validate(data) if data else OnboardingState()

    async def save(self, user_id: str, state: OnboardingState) -> OnboardingState:
        await self.backend.set_json(self._key(user_id), state.model_dump())
        return state

    async def patch(self, user_id: str, changes: OnboardingPatch) -> OnboardingState:
        state = await self.get(user_id)
        state = state.model_copy(update=changes.model_dump(exclude_none=True))
        return await self.save(user_id, state)

    async def start(self, user_id: str) -> OnboardingState:
        return await self.patch(user_id, OnboardingPatch(isTourOpen=True, tourStep=0))

    async def reset(self, user_id: str) -> OnboardingState:
        logger.info(f"Onboarding tour reset for {user_id}")
        return await self.patch(user_id, OnboardingPatch(hasSeenTour=False, tourStep=0, isTourOpen=True))

def get_onboarding_store() -> OnboardingStore:
    return OnboardingStore(redis_manager)
