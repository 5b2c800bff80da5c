from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from tzpayroll.core.config import settings

def format_tzs(amount: Union[int, float, Decimal], symbol: str = None) -> str:
    """Format an amount as whole Tanzanian shillings, e.g. ``TSh 1,200,000``."""
    symbol = symbol or settings.CURRENCY_SYMBOL
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.0f}"

def format_rate(rate: Union[float, Decimal]) -> str:
    """Format a fractional rate as a percentage: 0.08 -> '8%', 0.005 -> '0.5%'."""
    pct = (Decimal(str(rate)) * 100).normalize()
    return f"{pct:f}%"
