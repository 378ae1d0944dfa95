import datetime as dt
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, StringConstraints

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
Money = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]


class TransactionCreateSchema(BaseModel):
    type: Literal["income", "expense"]
    amount: Money = Field(..., ge=0)
    category: Name
    description: Optional[str] = None
    date: dt.date


class CategoryCreateSchema(BaseModel):
    name: Name
    monthly_limit: Money = Field(..., gt=0)


class GoalCreateSchema(BaseModel):
    name: Name
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(Decimal("0"), ge=0)
    target_date: Optional[dt.date] = None


class GoalUpdateSchema(BaseModel):
    name: Optional[Name] = None
    target_amount: Optional[Money] = Field(None, gt=0)
    current_amount: Optional[Money] = Field(None, ge=0)
    target_date: Optional[dt.date] = None
