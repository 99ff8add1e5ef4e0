from app.modules.onboarding.store import OnboardingStore
from app.modules.onboarding.schemas import OnboardingPatch
from conftest import API, auth, MemoryJsonBackend


async def test_store_keys_state_per_user():
    backend = MemoryJsonBackend()
    store = OnboardingStore(backend, prefix="onboarding-storage")

    await store.patch("user_a", OnboardingPatch(hasSeenTour=True, tourStep=3))

    assert backend.data == {
        "onboarding-storage:user_a": {"hasSeenTour": True, "tourStep": 3, "isTourOpen": False, "isHelpOpen": False}
    }
    assert (await store.get("user_b")).hasSeenTour is False


async def test_onboarding_routes(client, factory):
    clinic = await factory.clinic()
    user = await factory.staff(clinic, "NURSE")

    r = await client.get(f"{API}/onboarding", headers=auth(user))
    assert r.json() == {"hasSeenTour": False, "tourStep": 0, "isTourOpen": False, "isHelpOpen": False}

    r = await client.post(f"{API}/onboarding/start", headers=auth(user))
    assert r.json()["isTourOpen"] is True

    r = await client.patch(f"{API}/onboarding", json={"tourStep": 4, "hasSeenTour": True, "isTourOpen": False}, headers=auth(user))
    assert r.json() == {"hasSeenTour": True, "tourStep": 4, "isTourOpen": False, "isHelpOpen": False}

    r = await client.post(f"{API}/onboarding/reset", headers=auth(user))
    assert r.json() == {"hasSeenTour": False, "tourStep": 0, "isTourOpen": True, "isHelpOpen": False}


async def test_onboarding_requires_session(client):
    r = await client.get(f"{API}/onboarding")
    assert r.status_code == 401
