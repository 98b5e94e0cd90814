"""
Token Amount Module

Token symbols and Decimal quantities. Balances NEVER use float: every
incoming amount goes through Decimal(str(value)).
"""

from decimal import Decimal, InvalidOperation, getcontext
from typing import Dict, Iterable, Union

getcontext().prec = 28

DEFAULT_TOKENS = ("USD", "BTC")

ZERO = Decimal('0')

Numeric = Union[Decimal, int, float, str]


def to_amount(value: Numeric) -> Decimal:
    """
    Convert a numeric input to Decimal

    Raises:
        ValueError: if the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def format_amount(amount: Decimal) -> str:
    """Plain rendering without trailing zeros or exponent ('10', '0.5')"""
    if amount == ZERO:
        return "0"
    return format(amount.normalize(), 'f')


def seed_balances(tokens: Iterable[str] = DEFAULT_TOKENS) -> Dict[str, Decimal]:
    """Opening balance sheet for a new user: every token at zero"""
    return {token: ZERO for token in tokens}


def balances_from_storage(data: Dict[str, str]) -> Dict[str, Decimal]:
    return {token: Decimal(value) for token, value in (data or {}).items()}
