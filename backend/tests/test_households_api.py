import pytest
from httpx import AsyncClient

from gagyebu.core.config import get_settings
from gagyebu.services.colors import DEFAULT_HOUSEHOLD_TAGS


async def register_user(client: AsyncClient, email: str, name: str) -> tuple[str, str]:
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    return data["token"]["access_token"], data["user"]["id"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_create_household_seeds_member_and_default_tags(client: AsyncClient) -> None:
    token, user_id = await register_user(client, "owner@example.com", "김민수")

    create_res = await client.post("/api/households", json={"name": "  우리   집  "}, headers=auth(token))
    assert create_res.status_code == 201
    household = create_res.json()
    assert household["name"] == "우리 집"
    assert household["created_by"] == user_id
    assert len(household["invite_code"]) == 7
    assert household["max_members"] == 7
    assert [member["user_id"] for member in household["members"]] == [user_id]
    assert household["members"][0]["is_creator"] is True

    tags_res = await client.get(f"/api/households/{household['id']}/tags", headers=auth(token))
    assert tags_res.status_code == 200
    assert {tag["tag_name"] for tag in tags_res.json()} == {name for name, _ in DEFAULT_HOUSEHOLD_TAGS}

    list_res = await client.get("/api/households", headers=auth(token))
    assert list_res.status_code == 200
    assert [item["id"] for item in list_res.json()] == [household["id"]]


@pytest.mark.asyncio
async def test_join_by_invite_code_and_member_permissions(client: AsyncClient) -> None:
    owner_token, _ = await register_user(client, "owner@example.com", "김민수")
    member_token, member_id = await register_user(client, "member@example.com", "이영희")
    outsider_token, _ = await register_user(client, "outsider@example.com", "박지성")

    household = (
        await client.post("/api/households", json={"name": "우리집"}, headers=auth(owner_token))
    ).json()
    household_id = household["id"]

    join_res = await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"].lower()},
        headers=auth(member_token),
    )
    assert join_res.status_code == 200
    assert {member["user_id"] for member in join_res.json()["members"]} >= {member_id}

    again_res = await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )
    assert again_res.status_code == 409

    bad_code_res = await client.post(
        "/api/households/join",
        json={"invite_code": "NOPE000"},
        headers=auth(outsider_token),
    )
    assert bad_code_res.status_code == 404

    outsider_res = await client.get(f"/api/households/{household_id}", headers=auth(outsider_token))
    assert outsider_res.status_code == 403

    member_delete_res = await client.delete(f"/api/households/{household_id}", headers=auth(member_token))
    assert member_delete_res.status_code == 403

    member_invite_res = await client.post(
        f"/api/households/{household_id}/invite",
        headers=auth(member_token),
    )
    assert member_invite_res.status_code == 403

    rename_res = await client.patch(
        f"/api/households/{household_id}",
        json={"name": "새 우리집"},
        headers=auth(member_token),
    )
    assert rename_res.status_code == 200
    assert rename_res.json()["name"] == "새 우리집"


@pytest.mark.asyncio
async def test_join_is_rejected_when_household_is_full(
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(get_settings(), "household_max_members", 2)
    owner_token, _ = await register_user(client, "owner@example.com", "김민수")
    household = (
        await client.post("/api/households", json={"name": "작은집"}, headers=auth(owner_token))
    ).json()

    second_token, _ = await register_user(client, "second@example.com", "이영희")
    third_token, _ = await register_user(client, "third@example.com", "박지성")

    second_res = await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(second_token),
    )
    assert second_res.status_code == 200

    third_res = await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(third_token),
    )
    assert third_res.status_code == 409
    assert third_res.json()["detail"] == "Household already has 2 members"


@pytest.mark.asyncio
async def test_owner_removes_member_regenerates_code_and_deletes(client: AsyncClient) -> None:
    owner_token, owner_id = await register_user(client, "owner@example.com", "김민수")
    member_token, member_id = await register_user(client, "member@example.com", "이영희")
    household = (
        await client.post("/api/households", json={"name": "우리집"}, headers=auth(owner_token))
    ).json()
    household_id = household["id"]
    await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )

    self_remove_res = await client.delete(
        f"/api/households/{household_id}/members/{owner_id}",
        headers=auth(owner_token),
    )
    assert self_remove_res.status_code == 400

    remove_res = await client.delete(
        f"/api/households/{household_id}/members/{member_id}",
        headers=auth(owner_token),
    )
    assert remove_res.status_code == 200

    removed_again_res = await client.delete(
        f"/api/households/{household_id}/members/{member_id}",
        headers=auth(owner_token),
    )
    assert removed_again_res.status_code == 404

    member_view_res = await client.get(f"/api/households/{household_id}", headers=auth(member_token))
    assert member_view_res.status_code == 403

    invite_res = await client.post(f"/api/households/{household_id}/invite", headers=auth(owner_token))
    assert invite_res.status_code == 200
    assert invite_res.json()["invite_code"] != household["invite_code"]

    old_code_res = await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )
    assert old_code_res.status_code == 404

    delete_res = await client.delete(f"/api/households/{household_id}", headers=auth(owner_token))
    assert delete_res.status_code == 200

    after_delete_res = await client.get(f"/api/households/{household_id}", headers=auth(owner_token))
    assert after_delete_res.status_code == 404
    assert (await client.get("/api/households", headers=auth(owner_token))).json() == []


@pytest.mark.asyncio
async def test_member_can_leave_household(client: AsyncClient) -> None:
    owner_token, _ = await register_user(client, "owner@example.com", "김민수")
    member_token, member_id = await register_user(client, "member@example.com", "이영희")
    household = (
        await client.post("/api/households", json={"name": "우리집"}, headers=auth(owner_token))
    ).json()
    await client.post(
        "/api/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )

    leave_res = await client.post(f"/api/households/{household['id']}/leave", headers=auth(member_token))
    assert leave_res.status_code == 200
    assert (await client.get("/api/households", headers=auth(member_token))).json() == []

    detail_res = await client.get(f"/api/households/{household['id']}", headers=auth(owner_token))
    assert member_id not in {member["user_id"] for member in detail_res.json()["members"]}


@pytest.mark.asyncio
async def test_invalid_household_id_is_unprocessable(client: AsyncClient) -> None:
    token, _ = await register_user(client, "owner@example.com", "김민수")
    res = await client.get("/api/households/not-a-uuid", headers=auth(token))
    assert res.status_code == 422
