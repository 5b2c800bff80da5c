"""
Tax configuration management with effective-dated versions.

A tax table pairs a PAYE bracket table with a set of statutory rates. Tables
are registered per key (e.g. ``tz_paye_monthly``) and effective date; lookups
return the latest version effective on a given date.
"""
import json
import logging
import pandas as pd
from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.config import settings
from .contributions import StatutoryRates, TANZANIA_STATUTORY_RATES
from .paye import TaxBracket, TANZANIA_2024_PAYE_BRACKETS, validate_brackets

logger = logging.getLogger(__name__)

DEFAULT_TABLE_KEY = "tz_paye_monthly"

@dataclass(frozen=True)
class TaxTable:
    key: str
    effective_date: str  # YYYY-MM-DD
    brackets: Tuple[TaxBracket, ...]
    rates: StatutoryRates
    description: str = ""

TANZANIA_2024_TAX_TABLE = TaxTable(
    key=DEFAULT_TABLE_KEY,
    effective_date="2024-07-01",
    brackets=TANZANIA_2024_PAYE_BRACKETS,
    rates=TANZANIA_STATUTORY_RATES,
    description="Tanzania monthly PAYE, NSSF, WCF and SDL (2024)",
)

def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name}: '{value}' is not a number")

def _normalize_date(value: Union[str, date, None]) -> str:
    if value is None:
        return datetime.now().strftime('%Y-%m-%d')
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')
    return pd.to_datetime(value).strftime('%Y-%m-%d')

def table_from_dict(data: Dict[str, Any]) -> TaxTable:
    """Build a TaxTable from its JSON form; raises ValueError when malformed."""
    raw_brackets = data.get('brackets')
    if not raw_brackets:
        raise ValueError("Tax table has no brackets")

    brackets = []
    for i, raw in enumerate(raw_brackets, start=1):
        upper = raw.get('max')
        brackets.append(TaxBracket(
            min=int(raw['min']),
            max=None if upper is None else int(upper),
            rate=_decimal(raw.get('rate', 0), f"bracket {i} rate"),
            fixed_amount=_decimal(raw.get('fixed_amount', 0), f"bracket {i} fixed_amount"),
        ))

    problems = validate_brackets(brackets)
    if problems:
        raise ValueError("Invalid bracket table: " + "; ".join(problems))

    raw_rates = data.get('rates') or {}
    rate_values = {}
    for f in fields(StatutoryRates):
        default = getattr(TANZANIA_STATUTORY_RATES, f.name)
        value = raw_rates.get(f.name, default)
        rate_values[f.name] = int(value) if f.name == 'sdl_threshold' else _decimal(value, f.name)

    return TaxTable(
        key=str(data.get('key', DEFAULT_TABLE_KEY)).strip().lower(),
        effective_date=_normalize_date(data.get('effective_date')),
        brackets=tuple(brackets),
        rates=StatutoryRates(**rate_values),
        description=data.get('description', ''),
    )

class TaxConfigManager:
    """Tax configuration management with versioning."""

    def __init__(self, tenant_id: str, load_settings_file: bool = True):
        self.tenant_id = tenant_id
        self.tables: Dict[str, List[TaxTable]] = {}
        self.register(TANZANIA_2024_TAX_TABLE)
        if load_settings_file and settings.TAX_TABLE_FILE:
            self.load_file(settings.TAX_TABLE_FILE)

    def register(self, table: TaxTable) -> TaxTable:
        """Add a table version; an existing version with the same effective date is replaced."""
        versions = [t for t in self.tables.get(table.key, []) if t.effective_date != table.effective_date]
        versions.append(table)
        versions.sort(key=lambda t: t.effective_date)
        self.tables[table.key] = versions
        logger.info("Registered tax table %s effective %s for %s", table.key, table.effective_date, self.tenant_id)
        return table

    def load_file(self, file_path: Union[str, Path]) -> List[TaxTable]:
        """Load one table or a list of tables from a JSON file."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        with open(file_path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Error loading tax table {file_path}: {e}")

        records = data if isinstance(data, list) else [data]
        return [self.register(table_from_dict(record)) for record in records]

    def get_active_table(self, config_key: str = DEFAULT_TABLE_KEY, effective_date: Union[str, date, None] = None) -> TaxTable:
        """Get the table in force on a date (today when omitted)."""
        on_date = _normalize_date(effective_date)
        versions = self.tables.get(config_key, [])
        valid = [t for t in versions if t.effective_date <= on_date]
        if not valid:
            raise LookupError(f"No tax table '{config_key}' effective on {on_date}")
        return valid[-1]

    def get_template(self, config_key: str = DEFAULT_TABLE_KEY, effective_date: Union[str, date, None] = None) -> pd.DataFrame:
        """Bracket table as rows, the shape used for review and export."""
        table = self.get_active_table(config_key, effective_date)
        rows = [
            {
                'bracket': b.label,
                'min': b.min,
                'max': b.max,
                'rate': float(b.rate),
                'fixed_amount': float(b.fixed_amount),
                'effective_date': table.effective_date,
            }
            for b in table.brackets
        ]
        return pd.DataFrame(rows)

    def export_brackets(self, file_path: Union[str, Path], config_key: str = DEFAULT_TABLE_KEY) -> bool:
        df = self.get_template(config_key)
        if df.empty:
            return False
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if file_path.suffix.lower() == '.csv':
            df.to_csv(file_path, index=False)
        else:
            df.to_excel(file_path, index=False)
        return True

    def get_config_stats(self) -> Dict[str, Any]:
        latest_version = {key: versions[-1].effective_date for key, versions in self.tables.items() if versions}
        return {
            'total_configs': sum(len(v) for v in self.tables.values()),
            'by_key': {key: len(versions) for key, versions in self.tables.items()},
            'latest_version': latest_version,
            'unique_keys': len(self.tables),
        }
