from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from tzpayroll.core.formatters import format_tzs
from tzpayroll.core.utils import setup_logging
from tzpayroll.payroll.validators import InvalidPayrollInput, validate_payroll_input
from tzpayroll.reports.statutory import (
    NSSFReport, PayrollTotals, SDLWCFReport, TRASummary,
    generate_nssf_report, generate_sdl_wcf_report, generate_tra_summary, payroll_totals,
)
from tzpayroll.tax.config_manager import TaxConfigManager, TaxTable
from tzpayroll.tax.contributions import StatutoryRates, TANZANIA_STATUTORY_RATES
from tzpayroll.tax.payroll import PayrollInput, PayrollResult, compute_payroll

PAY_COMPONENTS = ("basic_salary", "housing_allowance", "transport_allowance", "other_allowances", "other_deductions")

@dataclass
class PayrollLine:
    employee_id: Optional[str]
    name: str
    result: PayrollResult

    def to_dict(self) -> Dict[str, Any]:
        row = {"employee_id": self.employee_id, "name": self.name}
        row.update(self.result.to_dict())
        return row

@dataclass
class PayrollRun:
    payroll_period: str
    total_employees: int
    rates: StatutoryRates = TANZANIA_STATUTORY_RATES
    lines: List[PayrollLine] = field(default_factory=list)
    rejected: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def results(self) -> List[PayrollResult]:
        return [line.result for line in self.lines]

    @property
    def totals(self) -> PayrollTotals:
        return payroll_totals(self.results)

    def tra_summary(self) -> TRASummary:
        return generate_tra_summary(self.results)

    def nssf_report(self) -> NSSFReport:
        return generate_nssf_report(self.results)

    def sdl_wcf_report(self) -> SDLWCFReport:
        return generate_sdl_wcf_report(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payroll_period": self.payroll_period,
            "total_employees": self.total_employees,
            "employees": [line.to_dict() for line in self.lines],
            "rejected": self.rejected,
            "totals": self.totals.to_dict(),
        }

def employee_name(employee: Dict[str, Any]) -> str:
    if employee.get("name"):
        return str(employee["name"])
    return f"{employee.get('first_name','')} {employee.get('last_name','')}".strip()

class PayrollEngine:
    def __init__(self, tenant_id: str, tax_table: Optional[TaxTable] = None, strict: bool = True):
        self.tenant_id = tenant_id
        self.config_manager = None if tax_table else TaxConfigManager(tenant_id)
        self.tax_table = tax_table or self.config_manager.get_active_table()
        self.strict = strict
        self.logger = setup_logging(tenant_id)

    def table_for_period(self, payroll_period: Optional[str]) -> TaxTable:
        """
        Tax table in force on the first day of a "YYYY-MM" period.

        A table passed to the constructor is used for every period.
        """
        if self.config_manager is None or not payroll_period:
            return self.tax_table
        period_start = pd.to_datetime(payroll_period).date().replace(day=1)
        return self.config_manager.get_active_table(effective_date=period_start)

    def compute(self, payroll_input: PayrollInput, employee_id: str = None, tax_table: Optional[TaxTable] = None) -> PayrollResult:
        validation = validate_payroll_input(payroll_input, strict=self.strict)
        if not validation.valid:
            raise InvalidPayrollInput(validation.errors, employee_id)
        table = tax_table or self.tax_table
        result = compute_payroll(payroll_input, table.brackets, table.rates)
        if result.net_salary < 0:
            self.logger.warning("Negative net salary %s for employee %s", format_tzs(result.net_salary), employee_id or "-")
        return result

    def run_payroll(self, employees: List[Dict], payroll_period: str, total_employees: Optional[int] = None) -> PayrollRun:
        """
        Compute one payroll period for a list of employee records.

        The tax table is the one effective at the start of the period.
        Headcount for the skills levy defaults to the number of records in the
        run. Records that fail validation are listed in ``rejected`` with their
        messages and left out of the totals.
        """
        headcount = total_employees if total_employees is not None else len(employees)
        table = self.table_for_period(payroll_period)
        run = PayrollRun(payroll_period=payroll_period, total_employees=headcount, rates=table.rates)

        for index, e in enumerate(employees):
            emp_id = e.get("employee_id", e.get("id"))
            components = {k: e.get(k) for k in PAY_COMPONENTS}
            if components["basic_salary"] is None:
                components["basic_salary"] = e.get("salary")
            payroll_input = PayrollInput(total_employees=headcount, **components)
            try:
                result = self.compute(payroll_input, employee_id=emp_id, tax_table=table)
            except InvalidPayrollInput as exc:
                self.logger.warning("Rejected payroll line for %s: %s", emp_id, exc)
                run.rejected.append({"index": index, "employee_id": emp_id, "errors": exc.errors})
                continue
            run.lines.append(PayrollLine(employee_id=emp_id, name=employee_name(e), result=result))

        self.logger.info(
            "Payroll %s computed: %d employees, %d rejected",
            payroll_period, len(run.lines), len(run.rejected),
        )
        return run
