"""
Organization-wide totals for statutory submissions.

Every reducer is a plain sum over the results, so the order of the input does
not matter and an empty payroll gives all-zero totals.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from tzpayroll.tax.payroll import PayrollResult

def _total(results: List[PayrollResult], field_name: str) -> Decimal:
    return sum((getattr(r, field_name) for r in results), Decimal("0"))

@dataclass(frozen=True)
class TRASummary:
    total_gross: Decimal
    total_paye: Decimal
    employee_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class NSSFReport:
    total_employee_contribution: Decimal
    total_employer_contribution: Decimal
    total_contribution: Decimal
    employee_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class SDLWCFReport:
    total_gross: Decimal
    total_sdl: Decimal
    total_wcf: Decimal
    total_levies: Decimal
    employee_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class PayrollTotals:
    gross: Decimal
    paye: Decimal
    nssf_employee: Decimal
    nssf_employer: Decimal
    wcf: Decimal
    sdl: Decimal
    other_deductions: Decimal
    deductions: Decimal
    net: Decimal
    employer_contributions: Decimal
    employee_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

def generate_tra_summary(payroll_results: Iterable[PayrollResult]) -> TRASummary:
    """Payroll summary for TRA PAYE submission."""
    results = list(payroll_results)
    return TRASummary(
        total_gross=_total(results, "gross_salary"),
        total_paye=_total(results, "paye"),
        employee_count=len(results),
    )

def generate_nssf_report(payroll_results: Iterable[PayrollResult]) -> NSSFReport:
    """NSSF contribution report, employee and employer sides."""
    results = list(payroll_results)
    employee = _total(results, "nssf_employee")
    employer = _total(results, "nssf_employer")
    return NSSFReport(
        total_employee_contribution=employee,
        total_employer_contribution=employer,
        total_contribution=employee + employer,
        employee_count=len(results),
    )

def generate_sdl_wcf_report(payroll_results: Iterable[PayrollResult]) -> SDLWCFReport:
    results = list(payroll_results)
    sdl = _total(results, "sdl_employer")
    wcf = _total(results, "wcf_employer")
    return SDLWCFReport(
        total_gross=_total(results, "gross_salary"),
        total_sdl=sdl,
        total_wcf=wcf,
        total_levies=sdl + wcf,
        employee_count=len(results),
    )

def payroll_totals(payroll_results: Iterable[PayrollResult]) -> PayrollTotals:
    results = list(payroll_results)
    return PayrollTotals(
        gross=_total(results, "gross_salary"),
        paye=_total(results, "paye"),
        nssf_employee=_total(results, "nssf_employee"),
        nssf_employer=_total(results, "nssf_employer"),
        wcf=_total(results, "wcf_employer"),
        sdl=_total(results, "sdl_employer"),
        other_deductions=_total(results, "other_deductions"),
        deductions=_total(results, "total_deductions"),
        net=_total(results, "net_salary"),
        employer_contributions=_total(results, "total_employer_contributions"),
        employee_count=len(results),
    )
