from datetime import timedelta

from sqlalchemy import select, func

from app.core.base import utcnow
from app.modules.clinics.models import User, UserClinic
from app.modules.invitations.models import ClinicInvitation
from app.modules.invitations.repository import InvitationRepository
from app.modules.notifications.models import OutboundMessage
from app.platform.provider_registry import registry
from conftest import API, auth


async def _stored(session_factory, invitation_id):
    async with session_factory() as s:
        return await s.get(ClinicInvitation, invitation_id)


async def _membership_count(session_factory, email, clinic_id):
    async with session_factory() as s:
        q = (
            select(func.count())
            .select_from(UserClinic)
            .join(User, User.id == UserClinic.user_id)
            .where(User.email == email, UserClinic.clinic_id == clinic_id)
        )
        return (await s.execute(q)).scalar_one()


async def test_admin_creates_invitation_and_mail_is_sent(client, factory, mailer):
    clinic = await factory.clinic("Clinica Centro")
    admin = await factory.staff(clinic, "ADMIN", name="Dra. Ruiz")

    r = await client.post(f"{API}/invitations", json={"email": "New.Doc@Example.com", "role": "DOCTOR"}, headers=auth(admin))

    assert r.status_code == 200
    inv = r.json()["invitation"]
    assert inv["email"] == "new.doc@example.com"
    assert inv["status"] == "PENDING"
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "new.doc@example.com"
    assert f"/invitations/{inv['token']}" in mailer.sent[0]["html"]
    assert "Clinica Centro" in mailer.sent[0]["subject"]

    r = await client.get(f"{API}/invitations", headers=auth(admin))
    assert [i["email"] for i in r.json()["invitations"]] == ["new.doc@example.com"]


async def test_invitation_requires_admin_and_valid_role(client, factory):
    clinic = await factory.clinic()
    doctor = await factory.staff(clinic, "DOCTOR")
    admin = await factory.staff(clinic, "ADMIN")

    r = await client.post(f"{API}/invitations", json={"email": "x@example.com", "role": "NURSE"}, headers=auth(doctor))
    assert r.status_code == 403

    r = await client.post(f"{API}/invitations", json={"email": "x@example.com", "role": "ADMIN"}, headers=auth(admin))
    assert r.status_code == 400
    assert "role" in r.json()["fields"]


async def test_duplicate_pending_invitation_conflicts(client, factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    body = {"email": "nurse@example.com", "role": "NURSE"}

    assert (await client.post(f"{API}/invitations", json=body, headers=auth(admin))).status_code == 200
    r = await client.post(f"{API}/invitations", json=body, headers=auth(admin))
    assert r.status_code == 409


async def test_mail_failure_does_not_block_invitation(client, factory, session_factory):
    class BrokenMailer:
        async def send(self, to, subject, html):
            raise RuntimeError("provider down")

    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    registry.override_mailer(BrokenMailer())

    r = await client.post(f"{API}/invitations", json={"email": "rx@example.com", "role": "RECEPTIONIST"}, headers=auth(admin))

    assert r.status_code == 200
    async with session_factory() as s:
        msg = (await s.execute(select(OutboundMessage))).scalar_one()
    assert msg.status == "failed"
    assert "provider down" in msg.last_error


async def test_check_valid_invitation(client, factory):
    clinic = await factory.clinic("Clinica Centro")
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "nurse@example.com", role="NURSE")

    r = await client.get(f"{API}/invitations/{inv.token}/check")

    assert r.status_code == 200
    body = r.json()
    assert body["existingUser"] is False
    assert body["invitation"]["clinicName"] == "Clinica Centro"
    assert body["invitation"]["role"] == "NURSE"
    assert body["invitation"]["status"] == "PENDING"


async def test_check_unknown_token(client):
    r = await client.get(f"{API}/invitations/nope/check")
    assert r.status_code == 404


async def test_check_after_expiry_reports_expired_without_writing(client, factory, session_factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "late@example.com", expires_at=utcnow() - timedelta(minutes=1))

    for _ in range(2):
        r = await client.get(f"{API}/invitations/{inv.token}/check")
        assert r.status_code == 400
        assert "expired" in r.json()["error"]
        assert (await _stored(session_factory, inv.id)).status == "PENDING"


async def test_accept_expired_persists_expired(client, factory, session_factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "late@example.com", expires_at=utcnow() - timedelta(minutes=1))

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json={"name": "Late", "password": "secret123"})

    assert r.status_code == 400
    assert "expired" in r.json()["error"]
    assert (await _stored(session_factory, inv.id)).status == "EXPIRED"
    assert await _membership_count(session_factory, "late@example.com", clinic.id) == 0


async def test_new_user_must_give_name_and_password(client, factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "new@example.com")

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json={})

    assert r.status_code == 400
    assert set(r.json()["fields"]) == {"name", "password"}


async def test_accept_creates_user_and_membership_once(client, factory, session_factory):
    clinic = await factory.clinic("Clinica Centro")
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "new@example.com", role="DOCTOR")
    body = {"name": "Dr. Nuevo", "password": "secret123"}

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json=body)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["clinic"] == {"id": str(clinic.id), "name": "Clinica Centro"}

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json=body)
    assert r.status_code == 400
    assert "already accepted" in r.json()["error"]

    stored = await _stored(session_factory, inv.id)
    assert stored.status == "ACCEPTED"
    assert stored.accepted_at is not None
    assert await _membership_count(session_factory, "new@example.com", clinic.id) == 1

    r = await client.get(f"{API}/invitations/{inv.token}/check")
    assert r.status_code == 400


async def test_existing_user_joins_without_password(client, factory, session_factory):
    home = await factory.clinic("Home")
    clinic = await factory.clinic("Second")
    admin = await factory.staff(clinic, "ADMIN")
    doctor = await factory.staff(home, "DOCTOR", email="doc@example.com")
    inv = await factory.invitation(clinic, admin, "doc@example.com", role="DOCTOR")

    r = await client.get(f"{API}/invitations/{inv.token}/check")
    assert r.json()["existingUser"] is True

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json={})
    assert r.status_code == 200
    assert await _membership_count(session_factory, "doc@example.com", clinic.id) == 1

    # the older membership still decides the active clinic
    r = await client.get(f"{API}/clinics/me", headers=auth(doctor))
    assert r.json()["clinicName"] == "Home"


async def test_existing_member_cannot_accept(client, factory, session_factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    await factory.staff(clinic, "NURSE", email="nurse@example.com")
    inv = await factory.invitation(clinic, admin, "nurse@example.com", role="NURSE")

    r = await client.post(f"{API}/invitations/{inv.token}/accept", json={})

    assert r.status_code == 409
    assert (await _stored(session_factory, inv.id)).status == "PENDING"


async def test_conditional_claim_succeeds_once(factory, db):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    inv = await factory.invitation(clinic, admin, "race@example.com")
    repo = InvitationRepository(db)

    assert await repo.transition_from_pending(inv.id, "ACCEPTED", accepted_at=utcnow()) is True
    assert await repo.transition_from_pending(inv.id, "ACCEPTED", accepted_at=utcnow()) is False


async def test_lapsed_invitation_does_not_block_reinvite(client, factory, session_factory):
    clinic = await factory.clinic()
    admin = await factory.staff(clinic, "ADMIN")
    old = await factory.invitation(clinic, admin, "late@example.com", expires_at=utcnow() - timedelta(days=1))

    r = await client.post(f"{API}/invitations", json={"email": "late@example.com", "role": "DOCTOR"}, headers=auth(admin))

    assert r.status_code == 200
    assert r.json()["invitation"]["token"] != old.token
    assert (await _stored(session_factory, old.id)).status == "EXPIRED"
