"""
PAYE (Pay As You Earn) bracket resolution for Tanzania monthly employment income.

Each bracket carries the cumulative tax of every lower bracket in
``fixed_amount``, so resolving tax is a lookup of the single matching bracket
plus the marginal tax on the excess above its floor.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from tzpayroll.core.formatters import format_rate
from tzpayroll.core.utils import round_money, to_decimal

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class TaxBracket:
    """Inclusive income range [min, max]; ``max=None`` is unbounded."""
    min: int
    max: Optional[int]
    rate: Decimal
    fixed_amount: Decimal = Decimal("0")

    def contains(self, amount: Decimal) -> bool:
        if amount < self.min:
            return False
        return self.max is None or amount <= self.max

    @property
    def label(self) -> str:
        upper = "Above" if self.max is None else f"{self.max:,}"
        return f"{self.min:,} - {upper} TZS"

@dataclass(frozen=True)
class BracketLine:
    bracket: str
    rate: str
    amount: Decimal

@dataclass(frozen=True)
class TaxResolution:
    total_tax: Decimal
    breakdown: Tuple[BracketLine, ...] = ()

# PAYE brackets (Tanzania 2024, monthly, TZS)
TANZANIA_2024_PAYE_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(0, 270000, Decimal("0")),
    TaxBracket(270001, 520000, Decimal("0.08")),
    TaxBracket(520001, 760000, Decimal("0.20"), Decimal("20000")),
    TaxBracket(760001, 1040000, Decimal("0.25"), Decimal("68000")),
    TaxBracket(1040001, None, Decimal("0.30"), Decimal("128000")),
)

def find_bracket(taxable_income, brackets: Sequence[TaxBracket]) -> Optional[TaxBracket]:
    amount = to_decimal(taxable_income)
    for bracket in brackets:
        if bracket.contains(amount):
            return bracket
    return None

def resolve_tax(taxable_income, brackets: Sequence[TaxBracket] = TANZANIA_2024_PAYE_BRACKETS) -> TaxResolution:
    """
    Compute PAYE for a monthly taxable income.

    Returns zero tax and an empty breakdown for non-positive income, and also
    when no bracket matches; the latter means the bracket table has a gap and
    is logged as a warning.
    """
    amount = to_decimal(taxable_income)
    if amount <= 0:
        return TaxResolution(Decimal("0"))

    bracket = find_bracket(amount, brackets)
    if bracket is None:
        logger.warning("No PAYE bracket matches taxable income %s; check the bracket table", amount)
        return TaxResolution(Decimal("0"))

    if bracket.rate == 0:
        return TaxResolution(Decimal("0"), (BracketLine(bracket.label, "0%", Decimal("0")),))

    excess = amount - (bracket.min - 1)
    amount_due = bracket.fixed_amount + excess * bracket.rate
    # the line keeps the exact figure, only the total is rounded
    line = BracketLine(bracket.label, format_rate(bracket.rate), amount_due)
    return TaxResolution(round_money(amount_due), (line,))

def validate_brackets(brackets: Sequence[TaxBracket]) -> list:
    """Return a list of problems with a bracket table; empty when it is well formed."""
    problems = []
    if not brackets:
        return ["Bracket table is empty"]
    if brackets[0].min > 0:
        problems.append(f"First bracket starts at {brackets[0].min:,}, not 0")
    for lower, upper in zip(brackets, brackets[1:]):
        if lower.max is None:
            problems.append(f"Bracket {lower.label} is unbounded but is not the last bracket")
            continue
        if upper.min != lower.max + 1:
            problems.append(f"Brackets {lower.label} and {upper.label} are not contiguous")
    if brackets[-1].max is not None:
        problems.append(f"Top bracket {brackets[-1].label} must be unbounded")
    for bracket in brackets:
        if bracket.rate < 0 or bracket.fixed_amount < 0:
            problems.append(f"Bracket {bracket.label} has a negative rate or fixed amount")
    return problems
