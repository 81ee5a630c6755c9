from fastapi import APIRouter

from gagyebu.api.ai import router as ai_router
from gagyebu.api.analytics import router as analytics_router
from gagyebu.api.auth import router as auth_router
from gagyebu.api.budgets import router as budgets_router
from gagyebu.api.households import router as households_router
from gagyebu.api.payment_methods import router as payment_methods_router
from gagyebu.api.receipts import router as receipts_router
from gagyebu.api.recurring import router as recurring_router
from gagyebu.api.reports import router as reports_router
from gagyebu.api.tags import router as tags_router
from gagyebu.api.transactions import router as transactions_router

api_router = APIRouter(prefix="/api")
api_router.include_router(ai_router)
api_router.include_router(analytics_router)
api_router.include_router(auth_router)
api_router.include_router(budgets_router)
api_router.include_router(households_router)
api_router.include_router(payment_methods_router)
api_router.include_router(receipts_router)
api_router.include_router(recurring_router)
api_router.include_router(reports_router)
api_router.include_router(tags_router)
api_router.include_router(transactions_router)
