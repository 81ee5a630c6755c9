from gagyebu.models.budget_goal import BudgetGoal
from gagyebu.models.household import Household, HouseholdMember
from gagyebu.models.payment_method import PaymentMethod
from gagyebu.models.recurring_transaction import RecurringFrequency, RecurringTransaction
from gagyebu.models.tag_color import TagColor
from gagyebu.models.transaction import (
    PersonType,
    Transaction,
    TransactionTag,
    TransactionType,
)
from gagyebu.models.user import User

__all__ = [
    "BudgetGoal",
    "Household",
    "HouseholdMember",
    "PaymentMethod",
    "PersonType",
    "RecurringFrequency",
    "RecurringTransaction",
    "TagColor",
    "Transaction",
    "TransactionTag",
    "TransactionType",
    "User",
]
