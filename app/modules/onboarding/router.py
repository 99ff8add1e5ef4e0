from fastapi import APIRouter, Depends
from app.core.security import get_required_identity, Identity
from app.modules.onboarding.schemas import OnboardingState, OnboardingPatch
from app.modules.onboarding.store import OnboardingStore, get_onboarding_store

router = APIRouter(prefix="/onboarding")

@router.get("", response_model=OnboardingState)
async def get_state(
    identity: Identity = Depends(get_required_identity),
    store: OnboardingStore = Depends(get_onboarding_store),
):
    return await store.get(identity.user_id)

@router.patch("", response_model=OnboardingState)
async def patch_state(
    payload: OnboardingPatch,
    identity: Identity = Depends(get_required_identity),
    store: OnboardingStore = Depends(get_onboarding_store),
):
    return await store.patch(identity.user_id, payload)

@router.post("/start", response_model=OnboardingState)
async def start_tour(
    identity: Identity = Depends(get_required_identity),
    store: OnboardingStore = Depends(get_onboarding_store),
):
    return await store.start(identity.user_id)

@router.post("/reset", response_model=OnboardingState)
async def reset_tour(
    identity: Identity = Depends(get_required_identity),
    store: OnboardingStore = Depends(get_onboarding_store),
):
    return await store.reset(identity.user_id)
