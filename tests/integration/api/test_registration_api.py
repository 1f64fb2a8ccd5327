"""
Integration tests for student registration and lookup
"""
import asyncio

import pytest
from httpx import AsyncClient
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.services.data_protection import Classification
from campus_identity.depends import protector
from campus_identity.domain.entities import (
    Account,
    AuditAction,
    AuditEvent,
    CredentialBinding,
    StudentProfile,
    VerificationToken,
)
from tests.integration.api.helpers import API, latest_verification_params, register


@pytest.mark.asyncio
async def test_register_then_verify_activates_account(
    client: AsyncClient, db_session: AsyncSession, gateway
):
    """REG-2024-001 registers, follows the emailed link and becomes active"""
    response = await register(client)

    assert response.status_code == 201
    data = response.json()
    assert data["account"]["email"] == "a@example.com"
    assert data["account"]["active"] is False
    assert data["student"]["matric_number"] == "REG-2024-001"
    assert data["requires_verification"] is True
    assert data["verification_email_sent"] is True

    params = latest_verification_params(gateway)
    response = await client.get(f"{API}/registration/verify-email", params=params)

    assert response.status_code == 200
    assert response.json()["status"] == "verified"
    assert gateway.last("welcome-student")["to"] == "a@example.com"

    account = (await db_session.exec(select(Account))).one()
    assert account.active is True
    assert account.email_verified_at is not None

    assert (await db_session.exec(select(VerificationToken))).all() == []

    binding = (await db_session.exec(select(CredentialBinding))).one()
    assert binding.account_id == account.id
    assert binding.provider_account_id == str(account.id)

    actions = [event.action for event in (await db_session.exec(select(AuditEvent))).all()]
    assert actions.count(AuditAction.EMAIL_VERIFIED.value) == 1
    assert AuditAction.STUDENT_REGISTERED.value in actions
    assert AuditAction.VERIFICATION_EMAIL_SENT.value in actions


@pytest.mark.asyncio
async def test_profile_fields_are_stored_encrypted(client: AsyncClient, db_session: AsyncSession):
    await register(client)

    profile = (await db_session.exec(select(StudentProfile))).one()
    assert profile.email_encrypted != "a@example.com"
    assert protector.unprotect(profile.email_encrypted, Classification.EMAIL) == "a@example.com"
    assert profile.phone_search_hash == protector.search_hash("08031234567", Classification.PHONE)
    assert profile.department == "Computer science"


@pytest.mark.asyncio
async def test_duplicate_registration_is_rejected(client: AsyncClient, db_session: AsyncSession):
    first = await register(client)
    second = await register(client)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "ALREADY_EXISTS"
    assert len((await db_session.exec(select(Account))).all()) == 1


@pytest.mark.asyncio
async def test_concurrent_duplicate_registrations(client: AsyncClient, db_session: AsyncSession):
    """Exactly one of two simultaneous submissions wins"""
    first, second = await asyncio.gather(register(client), register(client))

    assert sorted([first.status_code, second.status_code]) == [201, 409]
    assert len((await db_session.exec(select(Account))).all()) == 1
    assert len((await db_session.exec(select(StudentProfile))).all()) == 1

@pytest.mark.asyncio
async def test_duplicate_phone_with_other_identity_is_rejected(client: AsyncClient):
    await register(client)

    response = await register(
        client,
        matric_number="REG-2024-002",
        jamb_reg_number="87654321AB",
        email="b@example.com",
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_short_password_is_rejected(client: AsyncClient, db_session: AsyncSession, gateway):
    response = await register(client, password="short")

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {
        "field": "password",
        "message": "Password must be at least 8 characters long",
    } in error["details"]["violations"]
    assert (await db_session.exec(select(Account))).all() == []
    assert gateway.sent == []


@pytest.mark.asyncio
async def test_all_violations_reported_together(client: AsyncClient):
    response = await client.post(f"{API}/registration/students", json={"email": "bad"})

    assert response.status_code == 422
    fields = {violation["field"] for violation in response.json()["error"]["details"]["violations"]}
    assert fields == {"matric_number", "surname", "first_name", "email", "phone", "password"}


async def seed_profile(db_session: AsyncSession) -> StudentProfile:
    def protect(value, classification):
        return protector.protect(value, classification)

    surname = protect("Okafor", Classification.NAME)
    first_name = protect("Chidi", Classification.NAME)
    email = protect("chidi@example.com", Classification.EMAIL)
    jamb = protect("11112222CD", Classification.GOVERNMENT_ID)
    profile = StudentProfile(
        matric_number="REG-2024-050",
        college="ENG",
        department="Civil engineering",
        course="Civil engineering",
        surname_encrypted=surname.ciphertext,
        surname_search_hash=surname.search_hash,
        first_name_encrypted=first_name.ciphertext,
        first_name_search_hash=first_name.search_hash,
        email_encrypted=email.ciphertext,
        email_search_hash=email.search_hash,
        jamb_reg_number_encrypted=jamb.ciphertext,
        jamb_reg_search_hash=jamb.search_hash,
    )
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.mark.asyncio
async def test_lookup_seeded_record_by_jamb_number(client: AsyncClient, db_session: AsyncSession):
    await seed_profile(db_session)

    response = await client.post(
        f"{API}/registration/students/lookup", json={"identifier": "11112222cd"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["exists"] is True
    assert body["data"]["surname"] == "Okafor"
    assert body["data"]["email"] == "chidi@example.com"
    assert body["data"]["college"] == "ENG"


@pytest.mark.asyncio
async def test_lookup_registered_record(client: AsyncClient):
    await register(client)

    response = await client.post(
        f"{API}/registration/students/lookup", json={"identifier": "reg-2024-001"}
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"

@pytest.mark.asyncio
async def test_lookup_unknown_record(client: AsyncClient):
    response = await client.post(
        f"{API}/registration/students/lookup", json={"identifier": "REG-2099-999"}
    )

    assert response.status_code == 200
    assert response.json() == {"exists": False, "data": None, "requires_manual_entry": True}


@pytest.mark.asyncio
async def test_registering_seeded_record_claims_it(client: AsyncClient, db_session: AsyncSession):
    seeded = await seed_profile(db_session)
    seeded_id = str(seeded.id)

    response = await register(
        client,
        matric_number="REG-2024-050",
        jamb_reg_number="11112222CD",
        surname="Okafor",
        first_name="Chidi",
        email="chidi@example.com",
        phone="08099998888",
    )

    assert response.status_code == 201
    assert response.json()["student"]["id"] == seeded_id

    lookup = await client.post(
        f"{API}/registration/students/lookup", json={"identifier": "REG-2024-050"}
    )
    assert lookup.status_code == 409
    assert lookup.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
