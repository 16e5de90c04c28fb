from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models import (
    CategoryType,
    LoanDirection,
    PaymentMode,
    TransactionKind,
)


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    applies_to: CategoryType


class TransactionIn(BaseModel):
    date: date
    mode: PaymentMode
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    kind: TransactionKind
    category_id: int


class LoanDebtIn(BaseModel):
    person_id: int
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    direction: LoanDirection
    reason: str = Field(..., min_length=1, max_length=200)
    date_created: date


class SelectionSettlement(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: Literal["selection"] = "selection"
    person_id: int
    loan_ids: list[int] = Field(default_factory=list)


class ManualSettlement(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: Literal["manual"] = "manual"
    person_id: int
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    reason: Optional[str] = Field(default=None, max_length=200)


SettlementRequest = Annotated[
    Union[SelectionSettlement, ManualSettlement], Field(discriminator="method")
]
