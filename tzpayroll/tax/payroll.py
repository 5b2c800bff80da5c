"""
Tanzania gross-to-net payroll composition.

Compliant with TRA (PAYE), NSSF, WCF and SDL rules. The bracket table and the
statutory rates are passed in explicitly; the defaults model the 2024 monthly
schedule.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple

from tzpayroll.core.utils import to_decimal
from tzpayroll.tax.contributions import (
    StatutoryRates, TANZANIA_STATUTORY_RATES, calculate_nssf, calculate_sdl, calculate_wcf,
)
from tzpayroll.tax.paye import BracketLine, TaxBracket, TANZANIA_2024_PAYE_BRACKETS, resolve_tax

DEFAULT_TOTAL_EMPLOYEES = 10

@dataclass(frozen=True)
class PayrollInput:
    basic_salary: Any
    housing_allowance: Any = None
    transport_allowance: Any = None
    other_allowances: Any = None
    other_deductions: Any = None
    total_employees: Optional[int] = None

@dataclass(frozen=True)
class PayrollResult:
    # Earnings
    basic_salary: Decimal
    housing_allowance: Decimal
    transport_allowance: Decimal
    other_allowances: Decimal
    gross_salary: Decimal

    # Employee deductions
    nssf_employee: Decimal
    taxable_income: Decimal
    paye: Decimal
    other_deductions: Decimal
    total_deductions: Decimal

    # Employer contributions
    nssf_employer: Decimal
    wcf_employer: Decimal
    sdl_employer: Decimal
    total_employer_contributions: Decimal

    net_salary: Decimal

    # for audit display
    paye_breakdown: Tuple[BracketLine, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

def compute_payroll(
    payroll_input: PayrollInput,
    brackets: Sequence[TaxBracket] = TANZANIA_2024_PAYE_BRACKETS,
    rates: StatutoryRates = TANZANIA_STATUTORY_RATES,
) -> PayrollResult:
    """
    Complete payroll calculation for a single employee.

    Never raises for numeric input; validate with
    ``tzpayroll.payroll.validators.validate_payroll_input`` first. A negative
    net salary is returned as is.
    """
    basic = to_decimal(payroll_input.basic_salary)
    housing = to_decimal(payroll_input.housing_allowance)
    transport = to_decimal(payroll_input.transport_allowance)
    other_allowances = to_decimal(payroll_input.other_allowances)
    other_deductions = to_decimal(payroll_input.other_deductions)
    total_employees = payroll_input.total_employees
    if total_employees is None:
        total_employees = DEFAULT_TOTAL_EMPLOYEES

    gross = basic + housing + transport + other_allowances

    nssf = calculate_nssf(gross, rates)
    taxable_income = gross - nssf.employee
    paye = resolve_tax(taxable_income, brackets)

    wcf = calculate_wcf(gross, rates)
    sdl = calculate_sdl(gross, total_employees, rates)

    total_deductions = nssf.employee + paye.total_tax + other_deductions
    net = gross - total_deductions
    total_employer = nssf.employer + wcf + sdl

    return PayrollResult(
        basic_salary=basic,
        housing_allowance=housing,
        transport_allowance=transport,
        other_allowances=other_allowances,
        gross_salary=gross,
        nssf_employee=nssf.employee,
        taxable_income=taxable_income,
        paye=paye.total_tax,
        other_deductions=other_deductions,
        total_deductions=total_deductions,
        nssf_employer=nssf.employer,
        wcf_employer=wcf,
        sdl_employer=sdl,
        total_employer_contributions=total_employer,
        net_salary=net,
        paye_breakdown=paye.breakdown,
    )

class TanzaniaPayroll:
    """One bracket table and rate set, bound for repeated calculations."""

    def __init__(
        self,
        brackets: Sequence[TaxBracket] = TANZANIA_2024_PAYE_BRACKETS,
        rates: StatutoryRates = TANZANIA_STATUTORY_RATES,
    ):
        self.brackets = tuple(brackets)
        self.rates = rates

    def compute_paye(self, taxable_income) -> Decimal:
        return resolve_tax(taxable_income, self.brackets).total_tax

    def compute_nssf(self, gross) -> Decimal:
        return calculate_nssf(gross, self.rates).employee

    def compute_wcf(self, gross) -> Decimal:
        return calculate_wcf(gross, self.rates)

    def compute_sdl(self, gross, total_employees: int = DEFAULT_TOTAL_EMPLOYEES) -> Decimal:
        return calculate_sdl(gross, total_employees, self.rates)

    def payroll_breakdown(self, payroll_input: PayrollInput) -> PayrollResult:
        return compute_payroll(payroll_input, self.brackets, self.rates)
