from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import HouseholdAccess, get_assistant, get_current_user, load_household_access
from gagyebu.core.db import get_session
from gagyebu.core.logging import get_logger
from gagyebu.models.tag_color import TagColor
from gagyebu.models.user import User
from gagyebu.schemas.ai import (
    AdviceResponse,
    AIRequest,
    AnalysisRequest,
    BudgetRecommendationsResponse,
    CategorizeRequest,
    CategorizeResponse,
    InsightData,
    InsightsResponse,
    SpendingPatternsResponse,
    SuggestTagsRequest,
    SuggestTagsResponse,
)
from gagyebu.services.ai import assistant
from gagyebu.services.ai.base import FinancialAssistantProvider
from gagyebu.services.ai.types import BudgetSnapshot, TransactionDigest
from gagyebu.services.analytics_service import (
    get_budget_progress,
    get_category_totals,
    get_monthly_totals,
)
from gagyebu.services.dates import first_day_of_month, shift_months, today_utc
from gagyebu.services.report_service import savings_rate
from gagyebu.services.transaction_service import TransactionFilter, list_transactions, load_tags

router = APIRouter(prefix="/ai", tags=["ai"])
logger = get_logger(__name__)


class AIRouteError(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _require_access(
    session: AsyncSession,
    household_id: str | None,
    user: User,
) -> HouseholdAccess:
    if not household_id:
        raise AIRouteError("HouseholdId is required", 400)
    try:
        household_uuid = UUID(household_id)
    except ValueError as exc:
        raise AIRouteError("Invalid householdId", 400) from exc
    try:
        return await load_household_access(session, household_uuid, user)
    except HTTPException as exc:
        raise AIRouteError(str(exc.detail), exc.status_code) from exc


async def _recent_digests(
    session: AsyncSession,
    access: HouseholdAccess,
    months: int,
) -> list[TransactionDigest]:
    today = today_utc()
    start = shift_months(first_day_of_month(today), -(months - 1))
    transactions = await list_transactions(
        session,
        access.household.id,
        TransactionFilter(start_date=start, end_date=today),
    )
    tags = await load_tags(session, [transaction.id for transaction in transactions])
    return [
        TransactionDigest(
            type=transaction.type.value,
            amount=transaction.amount,
            date=transaction.date.isoformat(),
            description=transaction.description,
            category=(tags.get(transaction.id) or ["기타"])[0],
        )
        for transaction in transactions
    ]


async def _budget_snapshots(session: AsyncSession, access: HouseholdAccess) -> list[BudgetSnapshot]:
    progress = await get_budget_progress(session, access.household.id, today_utc())
    return [
        BudgetSnapshot(
            category=item.tag_name,
            budget_amount=item.monthly_limit,
            spent_amount=item.spent_amount,
        )
        for item in progress
    ]


@router.post("/insights", response_model=InsightsResponse)
async def insights(
    payload: AIRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    try:
        access = await _require_access(session, payload.household_id, user)
        monthly = await get_monthly_totals(session, access.household.id, today_utc().year)
        categories = await get_category_totals(session, access.household.id)
        messages = await assistant.generate_insights(provider, monthly, categories)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_insights_route_failed")
        return _error("Failed to generate financial insights", 500)
    return InsightsResponse(
        insights=messages,
        data=InsightData(monthly_totals=monthly[-6:], category_totals=categories[:10]),
    )


@router.post("/suggest-tags", response_model=SuggestTagsResponse)
async def suggest_tags(
    payload: SuggestTagsRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    if not payload.description or not payload.household_id:
        return _error("Description and householdId are required", 400)
    try:
        access = await _require_access(session, payload.household_id, user)
        result = await session.execute(
            select(TagColor.tag_name).where(TagColor.household_id == access.household.id)
        )
        existing_tags = list(result.scalars().all())
        suggestions = await assistant.suggest_tags(provider, payload.description, existing_tags)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_suggest_tags_route_failed")
        return _error("Failed to generate tag suggestions", 500)
    return SuggestTagsResponse(suggestions=suggestions)


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(
    payload: CategorizeRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    if not payload.description:
        return _error("Description is required", 400)
    try:
        if payload.household_id:
            await _require_access(session, payload.household_id, user)
        category = await assistant.categorize_transaction(provider, payload.description)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_categorize_route_failed")
        return _error("Failed to categorize transaction", 500)
    return CategorizeResponse(category=category)


@router.post("/spending-patterns", response_model=SpendingPatternsResponse)
async def spending_patterns(
    payload: AnalysisRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    try:
        access = await _require_access(session, payload.household_id, user)
        digests = await _recent_digests(session, access, payload.months)
        patterns = await assistant.analyze_spending_patterns(provider, digests)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_spending_patterns_route_failed")
        return _error("Failed to analyze spending patterns", 500)
    return SpendingPatternsResponse(patterns=patterns)


@router.post("/budget-recommendations", response_model=BudgetRecommendationsResponse)
async def budget_recommendations(
    payload: AnalysisRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    try:
        access = await _require_access(session, payload.household_id, user)
        digests = await _recent_digests(session, access, payload.months)
        budgets = await _budget_snapshots(session, access)
        recommendations = await assistant.recommend_budget(provider, digests, budgets)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_budget_recommendations_route_failed")
        return _error("Failed to generate budget recommendations", 500)
    return BudgetRecommendationsResponse(recommendations=recommendations)


@router.post("/advice", response_model=AdviceResponse)
async def advice(
    payload: AnalysisRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    provider: FinancialAssistantProvider = Depends(get_assistant),
):
    try:
        access = await _require_access(session, payload.household_id, user)
        digests = await _recent_digests(session, access, payload.months)
        budgets = await _budget_snapshots(session, access)
        income = sum(item.amount for item in digests if item.type == "income")
        expense = sum(item.amount for item in digests if item.type == "expense")
        rate = savings_rate(income, expense)
        items = await assistant.generate_financial_advice(provider, digests, budgets, rate)
    except AIRouteError as exc:
        return _error(exc.message, exc.status_code)
    except Exception:
        logger.exception("ai_advice_route_failed")
        return _error("Failed to generate financial advice", 500)
    return AdviceResponse(savings_rate=rate, advice=items)
