import io

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook


async def setup_ledger(client: AsyncClient) -> tuple[dict[str, str], str]:
    register_res = await client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "testpass123", "name": "김민수"},
    )
    headers = {"Authorization": f"Bearer {register_res.json()['token']['access_token']}"}
    household_res = await client.post("/api/households", json={"name": "우리집"}, headers=headers)
    household_id = household_res.json()["id"]

    rows = [
        ("expense", 100000, "2024-02-14", ["식비"], "발렌타인 저녁"),
        ("expense", 100000, "2024-03-02", ["식비"], "장보기"),
        ("expense", 50000, "2024-03-09", ["교통비"], "교통카드 충전"),
        ("income", 3000000, "2024-03-25", ["급여"], "3월 급여"),
    ]
    for kind, amount, day, tags, description in rows:
        response = await client.post(
            f"/api/households/{household_id}/transactions",
            json={"type": kind, "amount": amount, "date": day, "tags": tags, "description": description},
            headers=headers,
        )
        assert response.status_code == 201
    return headers, household_id


@pytest.mark.asyncio
async def test_monthly_totals_only_include_months_with_data(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)

    res = await client.get(
        f"/api/households/{household_id}/analytics/monthly",
        params={"year": 2024},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json() == {
        "year": 2024,
        "months": [
            {"month": "2024-02", "total_expense": 100000, "total_income": 0, "net_income": -100000},
            {"month": "2024-03", "total_expense": 150000, "total_income": 3000000, "net_income": 2850000},
        ],
    }

    other_year = await client.get(
        f"/api/households/{household_id}/analytics/monthly",
        params={"year": 2023},
        headers=headers,
    )
    assert other_year.json()["months"] == []


@pytest.mark.asyncio
async def test_category_totals_and_spending_by_tag(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)
    base = f"/api/households/{household_id}/analytics"

    expense_res = await client.get(
        f"{base}/categories",
        params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
        headers=headers,
    )
    assert expense_res.status_code == 200
    assert expense_res.json()["type"] == "expense"
    assert expense_res.json()["items"] == [
        {"tag_name": "식비", "total_amount": 100000, "transaction_count": 1, "color_hex": "#ef4444"},
        {"tag_name": "교통비", "total_amount": 50000, "transaction_count": 1, "color_hex": "#3b82f6"},
    ]

    income_res = await client.get(f"{base}/categories", params={"type": "income"}, headers=headers)
    assert [item["tag_name"] for item in income_res.json()["items"]] == ["급여"]

    spending_res = await client.get(f"{base}/spending-by-tag", params={"month": "2024-03"}, headers=headers)
    assert spending_res.json() == {"month": "2024-03", "spending": {"식비": 100000, "교통비": 50000}}


@pytest.mark.asyncio
async def test_period_comparison_handles_zero_baseline(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)

    res = await client.get(
        f"/api/households/{household_id}/analytics/comparison",
        params={"month": "2024-03"},
        headers=headers,
    )
    assert res.status_code == 200
    data = res.json()
    assert data["current"]["total_expense"] == 150000
    assert data["previous"]["total_expense"] == 100000
    assert data["expense_change_percent"] == 50.0
    assert data["income_change_percent"] is None
    assert data["net_change"] == 2950000


@pytest.mark.asyncio
async def test_monthly_report(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)
    await client.put(
        f"/api/households/{household_id}/budgets",
        json={"tag_name": "식비", "monthly_limit": 200000},
        headers=headers,
    )

    res = await client.get(
        f"/api/households/{household_id}/reports/monthly",
        params={"month": "2024-03"},
        headers=headers,
    )
    assert res.status_code == 200
    report = res.json()
    assert report["household_name"] == "우리집"
    assert report["period_start"] == "2024-03-01"
    assert report["period_end"] == "2024-03-31"
    assert report["summary"] == {
        "total_income": 3000000,
        "total_expense": 150000,
        "net_amount": 2850000,
        "savings_rate": 95.0,
        "transaction_count": 3,
    }
    assert [item["tag_name"] for item in report["categories"]] == ["식비", "교통비"]
    assert report["budgets"][0]["usage_percent"] == 50.0
    assert len(report["transactions"]) == 3


@pytest.mark.asyncio
async def test_yearly_report_fills_every_month(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)

    res = await client.get(
        f"/api/households/{household_id}/reports/yearly",
        params={"year": 2024},
        headers=headers,
    )
    assert res.status_code == 200
    report = res.json()
    assert report["year"] == 2024
    assert [month["month"] for month in report["months"]] == [f"2024-{index:02d}" for index in range(1, 13)]
    assert report["months"][0]["total_expense"] == 0
    assert report["summary"]["total_expense"] == 250000
    assert report["summary"]["transaction_count"] == 4
    assert report["previous_year_summary"]["transaction_count"] == 0
    assert report["expense_growth_percent"] is None
    assert report["top_categories"][0]["tag_name"] == "식비"
    assert report["top_categories"][0]["total_amount"] == 200000


@pytest.mark.asyncio
async def test_report_export_requires_period(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)

    missing_res = await client.get(f"/api/households/{household_id}/reports/export.csv", headers=headers)
    assert missing_res.status_code == 422

    bad_kind_res = await client.get(
        f"/api/households/{household_id}/reports/export.csv",
        params={"start_date": "2024-03-01", "end_date": "2024-03-31", "kind": "pdf"},
        headers=headers,
    )
    assert bad_kind_res.status_code == 422

    ok_res = await client.get(
        f"/api/households/{household_id}/reports/export.csv",
        params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
        headers=headers,
    )
    assert ok_res.status_code == 200
    assert len(ok_res.content.decode("utf-8-sig").strip().splitlines()) == 4


@pytest.mark.asyncio
async def test_excel_report_sheets(client: AsyncClient) -> None:
    headers, household_id = await setup_ledger(client)
    budget_res = await client.put(
        f"/api/households/{household_id}/budgets",
        json={"tag_name": "식비", "monthly_limit": 150000},
        headers=headers,
    )
    assert budget_res.status_code == 200
    url = f"/api/households/{household_id}/reports/export.xlsx"
    period = {"start_date": "2024-03-01", "end_date": "2024-03-31"}

    res = await client.get(url, params=period, headers=headers)

    assert res.status_code == 200
    assert res.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert ".xlsx" in res.headers["content-disposition"]
    workbook = load_workbook(io.BytesIO(res.content))
    assert workbook.sheetnames == ["요약", "거래내역", "예산분석"]

    summary = [row for row in workbook["요약"].iter_rows(values_only=True)]
    assert summary[0] == ("가구명", "우리집")
    assert summary[1] == ("기간", "2024-03-01 - 2024-03-31")
    assert summary[4][0] == "재정 요약"
    assert summary[5] == ("총 수입", 3000000)
    assert summary[6] == ("총 지출", 150000)
    assert summary[7] == ("순 잔액", 2850000)

    transactions = [row for row in workbook["거래내역"].iter_rows(values_only=True)]
    assert transactions[0] == ("날짜", "유형", "설명", "카테고리", "금액", "결제방법")
    assert [row[:5] for row in transactions[1:]] == [
        ("2024-03-25", "수입", "3월 급여", "급여", 3000000),
        ("2024-03-09", "지출", "교통카드 충전", "교통비", 50000),
        ("2024-03-02", "지출", "장보기", "식비", 100000),
    ]

    budgets = [row for row in workbook["예산분석"].iter_rows(values_only=True)]
    assert budgets == [
        ("카테고리", "예산", "지출", "잔여", "사용률"),
        ("식비", 150000, 100000, 50000, "66.7%"),
    ]

    trimmed_res = await client.get(
        url,
        params={**period, "include_transactions": "false", "include_budgets": "false"},
        headers=headers,
    )
    assert load_workbook(io.BytesIO(trimmed_res.content)).sheetnames == ["요약"]
