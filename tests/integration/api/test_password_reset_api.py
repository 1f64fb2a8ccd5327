"""
Integration tests for password reset
"""
import pytest
from httpx import AsyncClient
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.password_policy import PasswordHasher
from campus_identity.domain.entities import Account, PasswordResetToken
from tests.integration.api.helpers import API, latest_link, latest_verification_params, register


async def register_and_verify(client: AsyncClient, gateway):
    await register(client)
    response = await client.get(
        f"{API}/registration/verify-email", params=latest_verification_params(gateway)
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, db_session: AsyncSession, gateway):
    await register_and_verify(client, gateway)

    response = await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})
    assert response.status_code == 200

    params = latest_link(gateway, "password-reset", "reset_link")
    check = await client.get(f"{API}/password/reset/verify", params=params)
    assert check.status_code == 200
    assert check.json() == {"valid": True, "email": "a@example.com"}

    payload = {
        "token": params["t"],
        "e": params["e"],
        "password": "Newpass123",
        "confirm_password": "Newpass123",
    }
    reset = await client.post(f"{API}/password/reset", json=payload)
    assert reset.status_code == 200
    assert gateway.last("password-reset-confirmation")["to"] == "a@example.com"

    reused = await client.post(f"{API}/password/reset", json=payload)
    assert reused.status_code == 400
    assert reused.json()["error"]["code"] == "EXPIRED_OR_INVALID"

    account = (await db_session.exec(select(Account))).one()
    assert PasswordHasher(rounds=4).verify("Newpass123", account.password_hash)
    assert account.password_changed_at is not None
    assert (await db_session.exec(select(PasswordResetToken))).all() == []


@pytest.mark.asyncio
async def test_reset_request_for_unverified_account(client: AsyncClient, gateway):
    await register(client)

    response = await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_reset_request_for_unknown_email(client: AsyncClient, gateway):
    response = await client.post(
        f"{API}/password/reset-request", json={"email": "nobody@example.com"}
    )

    assert response.status_code == 200
    assert gateway.sent == []


@pytest.mark.asyncio
async def test_reset_with_mismatched_confirmation(client: AsyncClient, gateway):
    await register_and_verify(client, gateway)
    await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})
    params = latest_link(gateway, "password-reset", "reset_link")

    response = await client.post(
        f"{API}/password/reset",
        json={
            "token": params["t"],
            "e": params["e"],
            "password": "Newpass123",
            "confirm_password": "Newpass124",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_expired_reset_link(client: AsyncClient, gateway, clock):
    await register_and_verify(client, gateway)
    await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})
    params = latest_link(gateway, "password-reset", "reset_link")

    clock.advance(minutes=61)
    response = await client.get(f"{API}/password/reset/verify", params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EXPIRED_OR_INVALID"


@pytest.mark.asyncio
async def test_reset_link_check_does_not_consume_token(
    client: AsyncClient, db_session: AsyncSession, gateway
):
    await register_and_verify(client, gateway)
    await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})
    params = latest_link(gateway, "password-reset", "reset_link")

    first = await client.get(f"{API}/password/reset/verify", params=params)
    second = await client.get(f"{API}/password/reset/verify", params=params)

    assert first.status_code == 200
    assert first.json() == {"valid": True, "email": "a@example.com"}
    assert second.status_code == 200
    assert len((await db_session.exec(select(PasswordResetToken))).all()) == 1


@pytest.mark.asyncio
async def test_reset_link_check_with_substituted_identifier(client: AsyncClient, gateway):
    await register_and_verify(client, gateway)
    await client.post(f"{API}/password/reset-request", json={"email": "a@example.com"})
    params = latest_link(gateway, "password-reset", "reset_link")
    params["e"] = LinkCodec.encode_identifier("intruder@example.com")

    response = await client.get(f"{API}/password/reset/verify", params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LINK_MISMATCH"
