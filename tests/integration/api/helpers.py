from typing import Any, Dict

from httpx import AsyncClient

from tests.fixtures.fakes import RecordingNotificationGateway, link_params

API = "/api"


def registration_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "matric_number": "REG-2024-001",
        "jamb_reg_number": "12345678AB",
        "surname": "Adeyemi",
        "first_name": "Tolu",
        "gender": "FEMALE",
        "marital_status": "SINGLE",
        "college": "SCI",
        "department": "Computer Science",
        "course": "Computer Science",
        "state": "Oyo",
        "lga": "Ibadan North",
        "email": "a@example.com",
        "phone": "08031234567",
        "password": "Abcd1234",
    }
    payload.update(overrides)
    return payload


async def register(client: AsyncClient, **overrides):
    return await client.post(f"{API}/registration/students", json=registration_payload(**overrides))


def latest_link(gateway: RecordingNotificationGateway, template_id: str, key: str) -> Dict[str, str]:
    return link_params(gateway.last(template_id)["context"][key])


def latest_verification_params(gateway: RecordingNotificationGateway) -> Dict[str, str]:
    return latest_link(gateway, "email-verification", "verification_link")
