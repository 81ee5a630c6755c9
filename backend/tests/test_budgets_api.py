import csv
import io

import pytest
from httpx import AsyncClient


async def setup_household(client: AsyncClient) -> tuple[dict[str, str], str]:
    register_res = await client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "testpass123", "name": "김민수"},
    )
    headers = {"Authorization": f"Bearer {register_res.json()['token']['access_token']}"}
    household_res = await client.post("/api/households", json={"name": "우리집"}, headers=headers)
    assert household_res.status_code == 201
    return headers, household_res.json()["id"]


async def add_transaction(
    client: AsyncClient,
    headers: dict[str, str],
    household_id: str,
    amount: int,
    day: str,
    tags: list[str],
    type: str = "expense",
) -> None:
    response = await client.post(
        f"/api/households/{household_id}/transactions",
        json={"type": type, "amount": amount, "date": day, "tags": tags},
        headers=headers,
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_budget_upsert_and_progress(client: AsyncClient) -> None:
    headers, household_id = await setup_household(client)
    url = f"/api/households/{household_id}/budgets"

    create_res = await client.put(url, json={"tag_name": "식비", "monthly_limit": 100000}, headers=headers)
    assert create_res.status_code == 200
    goal_id = create_res.json()["id"]

    upsert_res = await client.put(url, json={"tag_name": "식비", "monthly_limit": 100000}, headers=headers)
    assert upsert_res.json()["id"] == goal_id

    await client.put(url, json={"tag_name": "교통비", "monthly_limit": 80000}, headers=headers)

    await add_transaction(client, headers, household_id, 60000, "2024-03-03", ["식비"])
    await add_transaction(client, headers, household_id, 50000, "2024-03-20", ["식비", "외식"])
    await add_transaction(client, headers, household_id, 20000, "2024-03-21", ["교통비"])
    await add_transaction(client, headers, household_id, 99999, "2024-02-28", ["식비"])
    await add_transaction(client, headers, household_id, 70000, "2024-03-05", ["식비"], type="income")

    progress_res = await client.get(f"{url}/progress", params={"month": "2024-03"}, headers=headers)
    assert progress_res.status_code == 200
    progress = progress_res.json()
    assert progress["month"] == "2024-03"
    assert progress["total_limit"] == 180000
    assert progress["total_spent"] == 130000

    items = {item["tag_name"]: item for item in progress["items"]}
    assert items["식비"] == {
        "tag_name": "식비",
        "monthly_limit": 100000,
        "spent_amount": 110000,
        "remaining_amount": -10000,
        "usage_percent": 110.0,
        "is_over_budget": True,
        "color_hex": "#ef4444",
    }
    assert items["교통비"]["usage_percent"] == 25.0
    assert items["교통비"]["is_over_budget"] is False

    bad_month_res = await client.get(f"{url}/progress", params={"month": "2024-13"}, headers=headers)
    assert bad_month_res.status_code == 422

    csv_res = await client.get(
        f"/api/households/{household_id}/reports/export.csv",
        params={"start_date": "2024-03-01", "end_date": "2024-03-31", "kind": "budgets"},
        headers=headers,
    )
    assert csv_res.status_code == 200
    rows = list(csv.reader(io.StringIO(csv_res.content.decode("utf-8-sig"))))
    assert rows[0] == ["카테고리", "예산", "지출", "잔여", "사용률"]
    assert ["식비", "100000", "110000", "-10000", "110.0%"] in rows


@pytest.mark.asyncio
async def test_budget_update_and_delete(client: AsyncClient) -> None:
    headers, household_id = await setup_household(client)
    url = f"/api/households/{household_id}/budgets"
    goal = (await client.put(url, json={"tag_name": "의료비", "monthly_limit": 50000}, headers=headers)).json()

    negative_res = await client.patch(f"{url}/{goal['id']}", json={"monthly_limit": -5}, headers=headers)
    assert negative_res.status_code == 422

    update_res = await client.patch(f"{url}/{goal['id']}", json={"monthly_limit": 70000}, headers=headers)
    assert update_res.status_code == 200
    assert update_res.json()["monthly_limit"] == 70000

    delete_res = await client.delete(f"{url}/{goal['id']}", headers=headers)
    assert delete_res.status_code == 204
    assert (await client.get(url, headers=headers)).json() == []

    empty_progress = (await client.get(f"{url}/progress", params={"month": "2024-03"}, headers=headers)).json()
    assert empty_progress["items"] == []
    assert empty_progress["total_limit"] == 0
