from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import HouseholdAccess, get_household_access, parse_uuid
from gagyebu.core.db import get_session
from gagyebu.models.budget_goal import BudgetGoal, utc_now_naive
from gagyebu.schemas.budget import (
    BudgetGoalResponse,
    BudgetGoalUpdateRequest,
    BudgetGoalUpsertRequest,
    BudgetProgressItem,
    BudgetProgressResponse,
)
from gagyebu.services.analytics_service import BudgetProgress, get_budget_progress
from gagyebu.services.dates import parse_month, today_utc

router = APIRouter(prefix="/households/{household_id}/budgets", tags=["budgets"])


def _to_budget_response(goal: BudgetGoal) -> BudgetGoalResponse:
    return BudgetGoalResponse(
        id=str(goal.id),
        tag_name=goal.tag_name,
        monthly_limit=goal.monthly_limit,
        created_by=str(goal.created_by),
        created_at=goal.created_at.isoformat(),
        updated_at=goal.updated_at.isoformat(),
    )


def to_progress_item(item: BudgetProgress) -> BudgetProgressItem:
    return BudgetProgressItem(
        tag_name=item.tag_name,
        monthly_limit=item.monthly_limit,
        spent_amount=item.spent_amount,
        remaining_amount=item.remaining_amount,
        usage_percent=item.usage_percent,
        is_over_budget=item.is_over_budget,
        color_hex=item.color_hex,
    )


def month_param(month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$")) -> date:
    if month is None:
        return today_utc().replace(day=1)
    try:
        return parse_month(month)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid month",
        ) from exc


async def _load_goal(session: AsyncSession, access: HouseholdAccess, goal_id: str) -> BudgetGoal:
    result = await session.execute(
        select(BudgetGoal).where(
            BudgetGoal.id == parse_uuid(goal_id, "goal_id"),
            BudgetGoal.household_id == access.household.id,
        )
    )
    goal = result.scalar_one_or_none()
    if goal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Budget goal not found",
        )
    return goal


@router.get("", response_model=list[BudgetGoalResponse])
async def list_goals(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> list[BudgetGoalResponse]:
    result = await session.execute(
        select(BudgetGoal)
        .where(BudgetGoal.household_id == access.household.id)
        .order_by(BudgetGoal.tag_name.asc())
    )
    return [_to_budget_response(goal) for goal in result.scalars().all()]


@router.put("", response_model=BudgetGoalResponse)
async def upsert_goal(
    payload: BudgetGoalUpsertRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> BudgetGoalResponse:
    tag_name = " ".join(payload.tag_name.split())
    result = await session.execute(
        select(BudgetGoal).where(
            BudgetGoal.household_id == access.household.id,
            BudgetGoal.tag_name == tag_name,
        )
    )
    goal = result.scalar_one_or_none()
    if goal is None:
        goal = BudgetGoal(
            household_id=access.household.id,
            tag_name=tag_name,
            monthly_limit=payload.monthly_limit,
            created_by=access.user.id,
        )
    else:
        goal.monthly_limit = payload.monthly_limit
        goal.updated_at = utc_now_naive()
    session.add(goal)
    await session.commit()
    await session.refresh(goal)
    return _to_budget_response(goal)


@router.get("/progress", response_model=BudgetProgressResponse)
async def progress(
    month: date = Depends(month_param),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> BudgetProgressResponse:
    items = await get_budget_progress(session, access.household.id, month)
    return BudgetProgressResponse(
        month=month.strftime("%Y-%m"),
        total_limit=sum(item.monthly_limit for item in items),
        total_spent=sum(item.spent_amount for item in items),
        items=[to_progress_item(item) for item in items],
    )


@router.patch("/{goal_id}", response_model=BudgetGoalResponse)
async def update_goal(
    goal_id: str,
    payload: BudgetGoalUpdateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> BudgetGoalResponse:
    goal = await _load_goal(session, access, goal_id)
    goal.monthly_limit = payload.monthly_limit
    goal.updated_at = utc_now_naive()
    session.add(goal)
    await session.commit()
    await session.refresh(goal)
    return _to_budget_response(goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> None:
    goal = await _load_goal(session, access, goal_id)
    await session.delete(goal)
    await session.commit()
