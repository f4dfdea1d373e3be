"""Input checks run by the tool adapter before anything is fetched."""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import TypeVar

from .errors import ValidationError
from .models import (
    AdviceRiskTolerance,
    Blockchain,
    InvestmentHorizon,
    RiskTolerance,
    TimeRange,
)

WALLET_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

E = TypeVar("E", bound=Enum)


def validate_wallet_address(address: str) -> str:
    if not isinstance(address, str) or not WALLET_ADDRESS_RE.match(address):
        raise ValidationError(f"Invalid wallet address format: {address!r}. Expected 0x followed by 40 hex characters.")
    return address


def validate_collection_address(address: str) -> str:
    if not isinstance(address, str) or not address.strip():
        raise ValidationError("collection_address is required")
    return address.strip()


def resolve_blockchain(blockchain: str) -> Blockchain:
    return _parse_enum(Blockchain, (blockchain or "").lower(), "blockchain")


def resolve_chain_id(blockchain: str) -> int:
    return resolve_blockchain(blockchain).chain_id


def validate_time_range(time_range: str) -> TimeRange:
    return _parse_enum(TimeRange, time_range, "time_range")


def validate_budget(budget: float) -> float:
    if isinstance(budget, bool) or not isinstance(budget, (int, float)):
        raise ValidationError(f"Invalid budget: {budget!r}. Must be a positive number.")
    if not math.isfinite(budget) or budget <= 0:
        raise ValidationError(f"Invalid budget: {budget!r}. Must be a positive number.")
    return float(budget)


def parse_risk_tolerance(value: str) -> RiskTolerance:
    return _parse_enum(RiskTolerance, value, "risk tolerance")


def parse_investment_horizon(value: str) -> InvestmentHorizon:
    return _parse_enum(InvestmentHorizon, value, "investment horizon")


def parse_advice_risk_tolerance(value: str) -> AdviceRiskTolerance:
    return _parse_enum(AdviceRiskTolerance, value, "risk tolerance")


def _parse_enum(enum_cls: type[E], value: str, label: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label}: {value!r}. Must be one of: {allowed}") from None
