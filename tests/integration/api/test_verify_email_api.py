"""
Integration tests for email verification links
"""
import pytest
from httpx import AsyncClient
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.domain.entities import VerificationToken
from tests.integration.api.helpers import API, latest_verification_params, register

VERIFY = f"{API}/registration/verify-email"


@pytest.mark.asyncio
async def test_link_is_single_use(client: AsyncClient, gateway):
    await register(client)
    params = latest_verification_params(gateway)

    first = await client.get(VERIFY, params=params)
    second = await client.get(VERIFY, params=params)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "EXPIRED_OR_INVALID"


@pytest.mark.asyncio
async def test_expired_link_is_rejected(
    client: AsyncClient, db_session: AsyncSession, gateway, clock
):
    await register(client)
    params = latest_verification_params(gateway)

    clock.advance(hours=24, seconds=1)
    response = await client.get(VERIFY, params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EXPIRED_OR_INVALID"
    assert (await db_session.exec(select(VerificationToken))).all() == []


@pytest.mark.asyncio
async def test_resend_supersedes_previous_link(client: AsyncClient, gateway):
    await register(client)
    old_params = latest_verification_params(gateway)

    resend = await client.post(
        f"{API}/registration/resend-verification", json={"email": "a@example.com"}
    )
    assert resend.status_code == 200
    new_params = latest_verification_params(gateway)
    assert new_params["t"] != old_params["t"]

    old = await client.get(VERIFY, params=old_params)
    new = await client.get(VERIFY, params=new_params)

    assert old.status_code == 400
    assert old.json()["error"]["code"] == "EXPIRED_OR_INVALID"
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_substituted_identifier_is_rejected(client: AsyncClient, gateway):
    await register(client)
    params = latest_verification_params(gateway)
    params["e"] = LinkCodec.encode_identifier("intruder@example.com")

    response = await client.get(VERIFY, params=params)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "LINK_MISMATCH"
    assert error["message"] == "This verification link is invalid or has expired"


@pytest.mark.asyncio
async def test_incomplete_link_is_rejected(client: AsyncClient, gateway):
    await register(client)
    params = latest_verification_params(gateway)
    del params["h"]

    response = await client.get(VERIFY, params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LINK_MISMATCH"


@pytest.mark.asyncio
async def test_verify_with_posted_parameters(client: AsyncClient, gateway):
    await register(client)
    params = latest_verification_params(gateway)

    response = await client.post(
        VERIFY, json={"token": params["t"], "e": params["e"], "h": params["h"]}
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Email successfully verified"
