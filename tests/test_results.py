import pytest
from sqlalchemy import select, func

from app.modules.results.models import ResultRelease
from app.modules.results.service import ResultReleaseService
from conftest import API, auth


@pytest.fixture
async def setup(factory):
    clinic = await factory.clinic("Clinica Centro")
    doctor = await factory.staff(clinic, "DOCTOR")
    user, patient = await factory.portal_patient(clinic)
    lab = await factory.lab_order(clinic, patient, doctor)
    return {"clinic": clinic, "doctor": doctor, "user": user, "patient": patient, "lab": lab}


async def _release_count(session_factory, lab_order_id):
    async with session_factory() as s:
        q = select(func.count()).select_from(ResultRelease).where(ResultRelease.lab_order_id == lab_order_id)
        return (await s.execute(q)).scalar_one()


async def test_release_redirects_and_duplicates_are_kept(client, setup, session_factory):
    url = f"{API}/portal/results/{setup['lab'].id}/release"

    for _ in range(2):
        r = await client.post(url, params={"type": "lab"}, headers=auth(setup["doctor"]))
        assert r.status_code == 303
        assert r.headers["location"] == "/settings/portal-results"

    assert await _release_count(session_factory, setup["lab"].id) == 2
    async with session_factory() as s:
        assert await ResultReleaseService(s).is_visible(setup["lab"].id, "lab") is True


async def test_release_requires_session(client, setup, session_factory):
    r = await client.post(f"{API}/portal/results/{setup['lab'].id}/release", params={"type": "lab"})
    assert r.status_code == 401
    assert await _release_count(session_factory, setup["lab"].id) == 0


async def test_release_rejects_unknown_type(client, setup):
    r = await client.post(f"{API}/portal/results/{setup['lab'].id}/release", params={"type": "xray"}, headers=auth(setup["doctor"]))
    assert r.status_code == 400


async def test_release_of_other_clinic_order_is_not_found(client, setup, factory):
    elsewhere = await factory.clinic("Elsewhere")
    stranger = await factory.staff(elsewhere, "DOCTOR")
    r = await client.post(f"{API}/portal/results/{setup['lab'].id}/release", params={"type": "lab"}, headers=auth(stranger))
    assert r.status_code == 404


async def test_portal_sees_only_released_completed_results(client, setup, factory):
    clinic, patient, doctor = setup["clinic"], setup["patient"], setup["doctor"]
    imaging = await factory.imaging_order(clinic, patient, doctor)
    await factory.lab_order(clinic, patient, doctor, status="IN_PROGRESS")

    r = await client.get(f"{API}/portal/results", headers=auth(setup["user"]))
    body = r.json()
    assert body["labOrders"] == [] and body["imagingOrders"] == []
    assert body["pendingLabResults"] == 1
    assert body["pendingImagingResults"] == 1

    await client.post(f"{API}/portal/results/{imaging.id}/release", params={"type": "imaging"}, headers=auth(doctor))

    r = await client.get(f"{API}/portal/results", headers=auth(setup["user"]))
    body = r.json()
    assert [o["id"] for o in body["imagingOrders"]] == [str(imaging.id)]
    assert body["pendingImagingResults"] == 0
    assert body["pendingLabResults"] == 1

    r = await client.get(f"{API}/portal/results/pending", headers=auth(doctor))
    assert [o["id"] for o in r.json()["labOrders"]] == [str(setup["lab"].id)]
    assert r.json()["imagingOrders"] == []


async def test_release_row_references_exactly_one_order(setup, db):
    svc = ResultReleaseService(db)
    await svc.releases.add("lab", setup["lab"].id, setup["doctor"].id)
    row = (await db.execute(select(ResultRelease))).scalar_one()
    assert row.lab_order_id == setup["lab"].id
    assert row.imaging_order_id is None
