import pytest
from httpx import AsyncClient

from gagyebu.services.colors import TAG_COLORS


async def setup_household(client: AsyncClient) -> tuple[dict[str, str], str]:
    register_res = await client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "testpass123", "name": "김민수"},
    )
    headers = {"Authorization": f"Bearer {register_res.json()['token']['access_token']}"}
    household_res = await client.post("/api/households", json={"name": "우리집"}, headers=headers)
    assert household_res.status_code == 201
    return headers, household_res.json()["id"]


@pytest.mark.asyncio
async def test_palette_and_next_color_skip_seeded_colors(client: AsyncClient) -> None:
    headers, household_id = await setup_household(client)

    palette_res = await client.get(f"/api/households/{household_id}/tags/palette", headers=headers)
    assert palette_res.status_code == 200
    assert len(palette_res.json()) == len(TAG_COLORS)
    assert palette_res.json()[0] == {
        "id": "red",
        "name": "빨강",
        "hex": "#ef4444",
        "bg": "#fef2f2",
        "text": "#991b1b",
    }

    next_res = await client.get(f"/api/households/{household_id}/tags/next-color", headers=headers)
    assert next_res.status_code == 200
    assert next_res.json()["id"] == "rose"


@pytest.mark.asyncio
async def test_create_update_delete_tag_color(client: AsyncClient) -> None:
    headers, household_id = await setup_household(client)
    url = f"/api/households/{household_id}/tags"

    existing_res = await client.post(url, json={"tag_name": "식비", "color_hex": "#000000"}, headers=headers)
    assert existing_res.status_code == 409

    create_res = await client.post(
        url,
        json={"tag_name": " 반려동물 ", "color_hex": "#F43F5E"},
        headers=headers,
    )
    assert create_res.status_code == 201
    assert create_res.json() == {"tag_name": "반려동물", "color_hex": "#f43f5e"}

    invalid_res = await client.put(f"{url}/반려동물", json={"color_hex": "red"}, headers=headers)
    assert invalid_res.status_code == 422

    update_res = await client.put(f"{url}/반려동물", json={"color_hex": "#14b8a6"}, headers=headers)
    assert update_res.status_code == 200
    assert update_res.json()["color_hex"] == "#14b8a6"

    listed = {tag["tag_name"]: tag["color_hex"] for tag in (await client.get(url, headers=headers)).json()}
    assert listed["반려동물"] == "#14b8a6"
    assert listed["식비"] == "#ef4444"

    delete_res = await client.delete(f"{url}/반려동물", headers=headers)
    assert delete_res.status_code == 204

    missing_res = await client.delete(f"{url}/반려동물", headers=headers)
    assert missing_res.status_code == 404
