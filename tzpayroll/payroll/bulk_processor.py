"""
Bulk payroll processing from CSV/Excel/JSON sheets with tax calculations and exports.
"""
import json
import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Any, Optional, Union

from ..core.utils import setup_logging
from ..reports.exports import export_frame, payroll_register_frame
from .engine import PayrollEngine, PayrollRun

NUMERIC_FIELDS = ['basic_salary', 'housing_allowance', 'transport_allowance', 'other_allowances', 'other_deductions']

def _clean(value):
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return value

@dataclass
class ColumnMapping:
    """Maps uploaded columns to payroll fields."""
    source_column: str
    target_field: str
    transform: Optional[str] = None  # 'upper', 'lower', 'strip', 'number'

class PayrollBulkProcessor:
    """Payroll processing for whole sheets of employees."""

    def __init__(self, tenant_id: str, engine: Optional[PayrollEngine] = None):
        self.tenant_id = tenant_id
        self.engine = engine or PayrollEngine(tenant_id)
        self.logger = setup_logging(tenant_id)

    def get_template(self) -> pd.DataFrame:
        """Get payroll upload template with one sample row."""
        return pd.DataFrame([{
            'employee_id': 'EMP001',
            'name': 'Sample Employee',
            'basic_salary': 500000,
            'housing_allowance': 0,
            'transport_allowance': 0,
            'other_allowances': 0,
            'other_deductions': 0,
        }])

    def load_file(self, file_path: Union[str, Path]) -> pd.DataFrame:
        """Load file into DataFrame based on extension."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_ext = file_path.suffix.lower()
        try:
            if file_ext == '.csv':
                return pd.read_csv(file_path)
            elif file_ext == '.xlsx':
                return pd.read_excel(file_path)
            elif file_ext == '.json':
                with open(file_path, 'r') as f:
                    data = json.load(f)
                return pd.DataFrame(data if isinstance(data, list) else [data])
        except (OSError, ValueError) as e:
            raise ValueError(f"Error loading file: {str(e)}")
        raise ValueError(f"Unsupported file format: {file_ext}")

    def map_columns(self, df: pd.DataFrame, mappings: List[ColumnMapping]) -> pd.DataFrame:
        """Apply column mappings and transformations."""
        mapped_df = df.rename(columns={m.source_column: m.target_field for m in mappings})

        for mapping in mappings:
            if mapping.target_field in mapped_df.columns and mapping.transform:
                col = mapping.target_field
                if mapping.transform == 'upper':
                    mapped_df[col] = mapped_df[col].astype(str).str.upper()
                elif mapping.transform == 'lower':
                    mapped_df[col] = mapped_df[col].astype(str).str.lower()
                elif mapping.transform == 'strip':
                    mapped_df[col] = mapped_df[col].astype(str).str.strip()
                elif mapping.transform == 'number':
                    mapped_df[col] = pd.to_numeric(mapped_df[col], errors='coerce')

        return mapped_df

    def _normalize(self, df: pd.DataFrame) -> tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Split rows into employee records and row errors for unreadable amounts."""
        if "employee_id" in df.columns:
            ids = df["employee_id"]
            df["employee_id"] = ids.where(ids.isna(), ids.astype(str).str.strip().str.upper())

        records = []
        row_errors = []
        for idx, row in df.iterrows():
            record = {'row': idx + 1, 'employee_id': _clean(row.get('employee_id')), 'name': _clean(row.get('name'))}
            if record['name'] is None and ('first_name' in df.columns or 'last_name' in df.columns):
                record['first_name'] = '' if pd.isna(row.get('first_name')) else str(row.get('first_name'))
                record['last_name'] = '' if pd.isna(row.get('last_name')) else str(row.get('last_name'))

            errors = []
            for field in NUMERIC_FIELDS:
                raw = _clean(row.get(field))
                if raw is None:
                    record[field] = None
                    continue
                value = pd.to_numeric(raw, errors='coerce')
                if pd.isna(value):
                    record[field] = None
                    errors.append(f"{field}: must be a number")
                else:
                    # keep integers exact; str() of a numpy float can carry noise
                    record[field] = int(value) if float(value).is_integer() else float(value)

            if record['basic_salary'] is None and 'basic_salary: must be a number' not in errors:
                errors.append("Missing required field: basic_salary")

            if errors:
                row_errors.append({'row': idx + 1, 'employee_id': record['employee_id'], 'errors': errors})
            else:
                records.append(record)
        return records, row_errors

    def process_file(
        self,
        file_path: Union[str, Path],
        column_mappings: Optional[List[Dict[str, str]]] = None,
        payroll_period: str = None,
        total_employees: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Bulk process payroll from a sheet.

        Args:
            file_path: Path to CSV/Excel/JSON file
            column_mappings: List of {'source': 'col_name', 'target': 'payroll_field'}
            payroll_period: Payroll period (YYYY-MM format)
            total_employees: Organization headcount for SDL; defaults to the rows in the sheet
        """
        mappings = [
            ColumnMapping(source_column=m['source'], target_field=m['target'], transform=m.get('transform'))
            for m in (column_mappings or [])
        ]

        df = self.load_file(file_path)
        total_rows = len(df)
        if total_rows == 0:
            return {
                'success': False,
                'errors': ["File is empty"],
                'total_rows': 0,
                'processed_rows': 0,
                'error_rows': 0,
                'row_errors': [],
                'payroll_run': None,
                'payroll_calculations': None,
            }

        df = self.map_columns(df, mappings)
        records, row_errors = self._normalize(df)

        headcount = total_employees if total_employees is not None else total_rows
        run = self.engine.run_payroll(records, payroll_period, total_employees=headcount)
        for rejected in run.rejected:
            row_errors.append({'row': records[rejected['index']]['row'], 'employee_id': rejected['employee_id'], 'errors': rejected['errors']})

        processed_rows = len(run.lines)
        self.logger.info(
            "Processed payroll sheet %s for %s: %d of %d rows",
            Path(file_path).name, payroll_period, processed_rows, total_rows,
        )
        return {
            'success': processed_rows > 0,
            'errors': [],
            'total_rows': total_rows,
            'processed_rows': processed_rows,
            'error_rows': total_rows - processed_rows,
            'row_errors': row_errors,
            'payroll_run': run,
            'payroll_calculations': self._generate_payroll_summary(run),
        }

    def _generate_payroll_summary(self, run: PayrollRun) -> Dict[str, Any]:
        """Generate payroll summary with totals, averages and statutory reports."""
        totals = run.totals
        count = totals.employee_count
        return {
            'period': run.payroll_period,
            'total_employees': count,
            'totals': {k: float(v) for k, v in totals.to_dict().items() if k != 'employee_count'},
            'averages': {
                'gross': round(float(totals.gross) / count, 2) if count > 0 else 0,
                'net': round(float(totals.net) / count, 2) if count > 0 else 0,
            },
            'tra': run.tra_summary().to_dict(),
            'nssf': run.nssf_report().to_dict(),
            'sdl_wcf': run.sdl_wcf_report().to_dict(),
        }

    def export_payroll(self, run: PayrollRun, file_path: Union[str, Path]) -> bool:
        """Export payroll register to an Excel or CSV file."""
        if not run.lines:
            return False
        export_frame(payroll_register_frame(run), file_path)
        return True
