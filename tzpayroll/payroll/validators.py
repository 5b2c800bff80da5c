"""
Employee payroll input validation.

Runs before composition; it only reports problems and never clamps or rewrites
the input.
"""
from dataclasses import dataclass, field
from decimal import InvalidOperation
from typing import List

from tzpayroll.core.utils import to_decimal
from tzpayroll.tax.payroll import PayrollInput

@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

class InvalidPayrollInput(ValueError):
    """Raised when an invalid record is computed directly instead of validated first."""

    def __init__(self, errors: List[str], employee_id: str = None):
        self.errors = list(errors)
        self.employee_id = employee_id
        prefix = f"Employee {employee_id}: " if employee_id else ""
        super().__init__(prefix + "; ".join(self.errors))

def _check_amount(value, label: str, errors: List[str]):
    if value is None:
        return
    try:
        amount = to_decimal(value)
    except InvalidOperation:
        errors.append(f"{label} must be a number")
        return
    if not amount.is_finite():
        errors.append(f"{label} must be a number")
    elif amount < 0:
        errors.append(f"{label} cannot be negative")

def validate_payroll_input(payroll_input: PayrollInput, strict: bool = True) -> ValidationResult:
    """
    Validate employee payroll data.

    Basic salary, housing allowance and transport allowance must not be
    negative. With ``strict`` (the default) other allowances, other deductions
    and the employee headcount are checked as well; ``strict=False`` leaves
    them unchecked, so a negative other deduction raises net pay.
    """
    errors: List[str] = []

    if payroll_input.basic_salary is None:
        errors.append("Basic salary is required")
    else:
        _check_amount(payroll_input.basic_salary, "Basic salary", errors)
    _check_amount(payroll_input.housing_allowance, "Housing allowance", errors)
    _check_amount(payroll_input.transport_allowance, "Transport allowance", errors)

    if strict:
        _check_amount(payroll_input.other_allowances, "Other allowances", errors)
        _check_amount(payroll_input.other_deductions, "Other deductions", errors)

        headcount = payroll_input.total_employees
        if headcount is not None:
            if isinstance(headcount, bool) or not isinstance(headcount, int):
                errors.append("Total employees must be a whole number")
            elif headcount < 1:
                errors.append("Total employees must be at least 1")

    return ValidationResult(valid=len(errors) == 0, errors=errors)
