"""
Spreadsheet exports for a payroll run: the payroll register and the TRA, NSSF
and SDL/WCF statutory reports. Each report ends with a TOTAL row.
"""
import pandas as pd
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Union

from tzpayroll.core.config import settings
from tzpayroll.core.formatters import format_rate
from tzpayroll.core.utils import atomic_write_json
from tzpayroll.payroll.engine import PayrollLine, PayrollRun
from tzpayroll.tax.contributions import StatutoryRates, TANZANIA_STATUTORY_RATES

def _frame(rows: List[Dict[str, Any]], columns: List[str], label_column: str = 'Employee Name') -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=columns)
    if df.empty:
        return df
    total = {}
    for col in columns:
        if col == label_column:
            total[col] = 'TOTAL'
        elif pd.api.types.is_numeric_dtype(df[col]):
            total[col] = df[col].sum()
        else:
            total[col] = ''
    return pd.concat([df, pd.DataFrame([total], columns=columns)], ignore_index=True)

def payroll_register_frame(run: PayrollRun) -> pd.DataFrame:
    columns = [
        'Employee ID', 'Employee Name', 'Basic Salary', 'Gross Salary', 'NSSF (Employee)',
        'Taxable Income', 'PAYE', 'Other Deductions', 'Total Deductions', 'Net Salary',
        'NSSF (Employer)', 'WCF', 'SDL',
    ]
    rows = []
    for line in run.lines:
        r = line.result
        rows.append({
            'Employee ID': line.employee_id,
            'Employee Name': line.name,
            'Basic Salary': float(r.basic_salary),
            'Gross Salary': float(r.gross_salary),
            'NSSF (Employee)': float(r.nssf_employee),
            'Taxable Income': float(r.taxable_income),
            'PAYE': float(r.paye),
            'Other Deductions': float(r.other_deductions),
            'Total Deductions': float(r.total_deductions),
            'Net Salary': float(r.net_salary),
            'NSSF (Employer)': float(r.nssf_employer),
            'WCF': float(r.wcf_employer),
            'SDL': float(r.sdl_employer),
        })
    return _frame(rows, columns)

def tra_report_frame(run: PayrollRun) -> pd.DataFrame:
    """PAYE report for TRA: gross, employee NSSF, taxable income and PAYE per employee."""
    columns = ['Employee Name', 'Gross Salary (TZS)', 'NSSF Employee (TZS)', 'Taxable Income (TZS)', 'PAYE (TZS)']
    rows = [
        dict(zip(columns, [
            line.name,
            float(line.result.gross_salary),
            float(line.result.nssf_employee),
            float(line.result.taxable_income),
            float(line.result.paye),
        ]))
        for line in run.lines
    ]
    return _frame(rows, columns)

def nssf_report_frame(run: PayrollRun) -> pd.DataFrame:
    columns = [
        'Employee Name',
        'Gross Salary (TZS)',
        f"Employee Contribution ({format_rate(run.rates.nssf_employee)})",
        f"Employer Contribution ({format_rate(run.rates.nssf_employer)})",
        'Total Contribution',
    ]
    rows = [
        dict(zip(columns, [
            line.name,
            float(line.result.gross_salary),
            float(line.result.nssf_employee),
            float(line.result.nssf_employer),
            float(line.result.nssf_employee + line.result.nssf_employer),
        ]))
        for line in run.lines
    ]
    return _frame(rows, columns)

def sdl_wcf_report_frame(run: PayrollRun) -> pd.DataFrame:
    columns = [
        'Employee Name',
        'Gross Salary (TZS)',
        f"SDL ({format_rate(run.rates.sdl_employer)})",
        f"WCF ({format_rate(run.rates.wcf_employer)})",
    ]
    rows = [
        dict(zip(columns, [
            line.name,
            float(line.result.gross_salary),
            float(line.result.sdl_employer),
            float(line.result.wcf_employer),
        ]))
        for line in run.lines
    ]
    return _frame(rows, columns)

def export_frame(df: pd.DataFrame, file_path: Union[str, Path]) -> str:
    """Write a report to CSV or Excel, chosen by file extension."""
    file_path = Path(file_path)
    ext = file_path.suffix.lower()
    if ext not in ('.csv', '.xlsx'):
        raise ValueError(f"Unsupported export format: {ext}")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if ext == '.csv':
        df.to_csv(file_path, index=False)
    else:
        df.to_excel(file_path, index=False)
    return str(file_path)

def _json_number(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)

def export_run_json(run: PayrollRun, file_path: Union[str, Path]) -> str:
    """Write the run as JSON with money amounts as numbers."""
    atomic_write_json(str(file_path), run.to_dict(), default=_json_number)
    return str(file_path)

REPORT_FRAMES = {
    'payroll_register': payroll_register_frame,
    'tra_paye': tra_report_frame,
    'nssf': nssf_report_frame,
    'sdl_wcf': sdl_wcf_report_frame,
}

def export_statutory_reports(run: PayrollRun, directory: Union[str, Path, None] = None, fmt: str = 'xlsx') -> Dict[str, str]:
    """
    Write the register and every statutory report for a run.

    Files go to ``directory`` or, when omitted, to ``EXPORT_DIR/<period>``.
    Returns the written paths keyed by report name.
    """
    if directory is None:
        directory = Path(settings.EXPORT_DIR) / (run.payroll_period or 'unscheduled')
    directory = Path(directory)
    written = {}
    for name, build in REPORT_FRAMES.items():
        written[name] = export_frame(build(run), directory / f"{name}_{run.payroll_period}.{fmt}")
    return written

def payslip_frame(line: PayrollLine, rates: StatutoryRates = TANZANIA_STATUTORY_RATES) -> pd.DataFrame:
    """
    Payslip for one employee as Section / Item / Amount rows.

    Allowances and other deductions are listed only when non-zero. Employer
    contributions are shown last; they are not deducted from pay.
    """
    r = line.result
    rows = [('Earnings', 'Basic Salary', r.basic_salary)]
    for item, amount in (
        ('Housing Allowance', r.housing_allowance),
        ('Transport Allowance', r.transport_allowance),
        ('Other Allowances', r.other_allowances),
    ):
        if amount > 0:
            rows.append(('Earnings', item, amount))
    rows.append(('Earnings', 'Gross Salary', r.gross_salary))

    rows.append(('Deductions', f"NSSF ({format_rate(rates.nssf_employee)})", r.nssf_employee))
    rows.append(('Deductions', 'Taxable Income', r.taxable_income))
    rows.append(('Deductions', 'PAYE (Income Tax)', r.paye))
    if r.other_deductions > 0:
        rows.append(('Deductions', 'Other Deductions', r.other_deductions))
    rows.append(('Deductions', 'Total Deductions', r.total_deductions))

    rows.append(('Net Pay', 'Net Salary', r.net_salary))

    rows.extend([
        ('Employer Contributions', f"NSSF Employer ({format_rate(rates.nssf_employer)})", r.nssf_employer),
        ('Employer Contributions', f"WCF ({format_rate(rates.wcf_employer)})", r.wcf_employer),
        ('Employer Contributions', f"SDL ({format_rate(rates.sdl_employer)})", r.sdl_employer),
        ('Employer Contributions', 'Total Employer Contributions', r.total_employer_contributions),
    ])
    return pd.DataFrame(
        [(section, item, float(amount)) for section, item, amount in rows],
        columns=['Section', 'Item', 'Amount (TZS)'],
    )

def export_payslips(run: PayrollRun, directory: Union[str, Path, None] = None, fmt: str = 'xlsx') -> Dict[str, str]:
    """One payslip file per employee, keyed by employee id (or line number when missing)."""
    if directory is None:
        directory = Path(settings.EXPORT_DIR) / (run.payroll_period or 'unscheduled') / 'payslips'
    directory = Path(directory)
    written = {}
    for number, line in enumerate(run.lines, start=1):
        key = str(line.employee_id or number)
        written[key] = export_frame(payslip_frame(line, run.rates), directory / f"payslip_{key}_{run.payroll_period}.{fmt}")
    return written
