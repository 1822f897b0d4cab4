"""Request bodies accepted by the HTTP API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SpinIn(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1)
    bet_level: str = Field(..., alias="betLevel", min_length=1)
    seed: Optional[str] = None


class BuyIn(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1)
    prize_id: str = Field(..., alias="prizeId", min_length=1)


class AdminIn(_CamelModel):
    auth_secret: Optional[str] = Field(default=None, alias="authSecret")


class AddDucksIn(AdminIn):
    user_id: str = Field(..., alias="userId", min_length=1)
    amount: float
    note: str = Field(..., min_length=1)


class AdminPrizeIn(AdminIn):
    prize: dict[str, Any]


class AdminSettingIn(AdminIn):
    setting: dict[str, Any]


class OrderStatusIn(AdminIn):
    status: str
