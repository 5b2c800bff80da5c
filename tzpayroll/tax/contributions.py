from dataclasses import dataclass
from decimal import Decimal

from tzpayroll.core.utils import round_money, to_decimal

@dataclass(frozen=True)
class StatutoryRates:
    nssf_employee: Decimal
    nssf_employer: Decimal
    wcf_employer: Decimal
    sdl_employer: Decimal
    sdl_threshold: int

# NSSF 10% + 10%, WCF 0.5% employer, SDL 3.5% employer from 10 employees
TANZANIA_STATUTORY_RATES = StatutoryRates(
    nssf_employee=Decimal("0.10"),
    nssf_employer=Decimal("0.10"),
    wcf_employer=Decimal("0.005"),
    sdl_employer=Decimal("0.035"),
    sdl_threshold=10,
)

@dataclass(frozen=True)
class NSSFContribution:
    employee: Decimal
    employer: Decimal

def calculate_nssf(gross_salary, rates: StatutoryRates = TANZANIA_STATUTORY_RATES) -> NSSFContribution:
    gross = to_decimal(gross_salary)
    return NSSFContribution(
        employee=round_money(gross * rates.nssf_employee),
        employer=round_money(gross * rates.nssf_employer),
    )

def calculate_wcf(gross_salary, rates: StatutoryRates = TANZANIA_STATUTORY_RATES) -> Decimal:
    """Workers Compensation Fund, employer only."""
    return round_money(to_decimal(gross_salary) * rates.wcf_employer)

def calculate_sdl(gross_salary, total_employees: int, rates: StatutoryRates = TANZANIA_STATUTORY_RATES) -> Decimal:
    """Skills Development Levy, employer only, due once headcount reaches the threshold."""
    if total_employees < rates.sdl_threshold:
        return Decimal("0")
    return round_money(to_decimal(gross_salary) * rates.sdl_employer)
