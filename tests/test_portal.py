import pytest
from sqlalchemy import select

from app.modules.clinics.models import User
from app.modules.patients.models import Patient
from conftest import API, auth


def _register(**kw):
    body = {
        "email": "ana@example.com",
        "password": "secret1",
        "confirmPassword": "secret1",
        "firstName": "Ana",
        "lastName": "Lopez",
    }
    body.update(kw)
    return body


async def test_register_links_patient_by_curp(client, factory, session_factory):
    clinic = await factory.clinic("Clinica Centro")
    patient = await factory.patient(clinic, curp="LOAA900101MDFPNN09")

    r = await client.post(f"{API}/portal/auth/register", json=_register(curp="LOAA900101MDFPNN09"))

    assert r.status_code == 200
    assert r.json()["clinicName"] == "Clinica Centro"
    async with session_factory() as s:
        stored = await s.get(Patient, patient.id)
        user = (await s.execute(select(User).where(User.email == "ana@example.com"))).scalar_one()
    assert stored.user_id == user.id
    assert user.id.startswith("patient_")
    assert user.name == "Ana Lopez"


async def test_register_falls_back_to_mobile(client, factory):
    clinic = await factory.clinic()
    await factory.patient(clinic, mobile="5512345678")
    r = await client.post(f"{API}/portal/auth/register", json=_register(curp="NOPE", phone="5512345678"))
    assert r.status_code == 200


async def test_register_ignores_inactive_clinics(client, factory):
    clinic = await factory.clinic(is_active=False)
    await factory.patient(clinic, curp="LOAA900101MDFPNN09")
    r = await client.post(f"{API}/portal/auth/register", json=_register(curp="LOAA900101MDFPNN09"))
    assert r.status_code == 404


async def test_register_rejections(client, factory):
    clinic = await factory.clinic()
    await factory.user(email="taken@example.com")
    await factory.portal_patient(clinic, curp="LINK900101MDFPNN09")

    r = await client.post(f"{API}/portal/auth/register", json=_register(confirmPassword="other1"))
    assert r.status_code == 400
    assert "confirmPassword" in r.json()["fields"]

    r = await client.post(f"{API}/portal/auth/register", json=_register(password="123"))
    assert r.status_code == 400
    assert "password" in r.json()["fields"]

    r = await client.post(f"{API}/portal/auth/register", json=_register(email="taken@example.com"))
    assert r.status_code == 409

    r = await client.post(f"{API}/portal/auth/register", json=_register(curp="LINK900101MDFPNN09"))
    assert r.status_code == 409


async def test_portal_doctors_and_contact(client, factory):
    clinic = await factory.clinic()
    await factory.staff(clinic, "DOCTOR", name="Dr. House", specialty="Internal")
    await factory.staff(clinic, "NURSE")
    user, _ = await factory.portal_patient(clinic)

    r = await client.get(f"{API}/portal/doctors", headers=auth(user))
    assert [d["name"] for d in r.json()["doctors"]] == ["Dr. House"]

    r = await client.post(f"{API}/portal/contact", json={"subject": "Hi", "message": "Question"}, headers=auth(user))
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = await client.post(f"{API}/portal/contact", json={"subject": "Hi"}, headers=auth(user))
    assert r.status_code == 400


async def test_approve_portal_patient(client, factory, session_factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    user, _ = await factory.portal_patient(clinic)
    async with session_factory() as s:
        (await s.get(User, user.id)).is_active = False
        await s.commit()

    r = await client.post(f"{API}/portal/patients/{user.id}/approve", headers=auth(admin))

    assert r.status_code == 303
    assert r.headers["location"] == "/settings/portal-patients"
    async with session_factory() as s:
        assert (await s.get(User, user.id)).is_active is True


async def test_approve_unknown_portal_patient(client, factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    r = await client.post(f"{API}/portal/patients/patient_missing/approve", headers=auth(admin))
    assert r.status_code == 404
