"""
Bulk payroll processing from spreadsheets.
Pipeline: load -> normalize -> validate per row -> calculate -> summarize.
"""
import pandas as pd
import json
from pathlib import Path
from typing import Dict, List, Any, Union
from dataclasses import dataclass, field

from ..core.errors import TaxValidationError
from ..core.utils import setup_logging
from ..tax.config import TaxConfig, ensure_config
from ..tax.paye import EmployeeEarnings, PayeResult, MONEY_FIELDS
from .engine import PayrollEmployee, PayrollEngine, PayrollRunSummary, summarize

COLUMN_ALIASES = {
    'id': 'employee_id',
    'employee': 'employee_id',
    'emp_id': 'employee_id',
    'salary': 'basic_salary',
    'basic': 'basic_salary',
    'basic_pay': 'basic_salary',
    'overtime_pay': 'overtime',
    'allowance': 'allowances',
    'bonus': 'bonuses',
    'children': 'dependents',
    'number_of_dependents': 'dependents',
    'nis': 'nis_number',
    'nis_no': 'nis_number',
    'tin_number': 'tin',
    'firstname': 'first_name',
    'lastname': 'last_name',
    'surname': 'last_name',
}

TEXT_COLUMNS = ['first_name', 'last_name', 'nis_number', 'tin']

@dataclass
class BulkPayrollResult:
    """Outcome of a bulk payroll run with per-row errors."""
    summary: PayrollRunSummary
    employees: List[PayrollEmployee]
    row_errors: List[Dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0

    @property
    def processed_rows(self) -> int:
        return len(self.summary.results)

    @property
    def error_rows(self) -> int:
        return len(self.row_errors)

    @property
    def success(self) -> bool:
        return not self.row_errors

    def to_frame(self) -> pd.DataFrame:
        return results_to_frame(self.summary.results)

def load_payroll_file(file_path: Union[str, Path]) -> pd.DataFrame:
    """Load payroll lines from CSV, Excel, or JSON file."""
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    file_ext = file_path.suffix.lower()

    if file_ext == '.csv':
        return pd.read_csv(file_path, dtype=str, keep_default_na=False)
    elif file_ext in ['.xlsx', '.xls']:
        return pd.read_excel(file_path, dtype=str, keep_default_na=False)
    elif file_ext == '.json':
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, list):
            return pd.DataFrame(data)
        return pd.DataFrame([data])
    raise ValueError(f"Unsupported file format: {file_ext}")

def _is_blank(series: pd.Series) -> pd.Series:
    return series.isna() | (series.astype(str).str.strip() == '')

def normalize_payroll_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Standardize column names and types; unparseable amounts are left as NaN for row validation."""
    df = df.copy()
    df.columns = [str(c).strip().lower().replace(' ', '_').replace('-', '_') for c in df.columns]
    df = df.rename(columns={c: COLUMN_ALIASES[c] for c in df.columns if c in COLUMN_ALIASES})

    if 'employee_id' not in df.columns:
        raise TaxValidationError(["Payroll file must contain an employee_id column"], field="employee_id")

    df['employee_id'] = df['employee_id'].fillna('').astype(str).str.strip().str.upper()

    for col in list(MONEY_FIELDS) + ['dependents']:
        if col not in df.columns:
            df[col] = 0
            continue
        raw = df[col]
        cleaned = raw.astype(str).str.replace(',', '', regex=False).str.strip()
        numeric = pd.to_numeric(cleaned, errors='coerce')
        df[col] = numeric.where(~_is_blank(raw), 0)

    for col in TEXT_COLUMNS:
        if col not in df.columns:
            df[col] = ''
        df[col] = df[col].fillna('').astype(str).str.strip()

    return df

def _dependents_value(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if hasattr(value, 'item'):
        return _dependents_value(value.item())
    return value

def employee_from_row(row: Dict[str, Any]) -> PayrollEmployee:
    emp_id = row['employee_id']
    earnings = EmployeeEarnings(
        basic_salary=row['basic_salary'],
        overtime=row['overtime'],
        allowances=row['allowances'],
        bonuses=row['bonuses'],
        dependents=_dependents_value(row['dependents']),
        employee_id=emp_id,
    )
    return PayrollEmployee(
        id=emp_id,
        first_name=row['first_name'],
        last_name=row['last_name'],
        nis_number=row['nis_number'],
        tin=row['tin'],
        earnings=earnings,
    )

def results_to_frame(results: List[PayeResult]) -> pd.DataFrame:
    """Flatten PAYE results into a DataFrame with float amounts."""
    rows = [r.to_dict() for r in results]
    if not rows:
        return pd.DataFrame(columns=list(PayeResult.__dataclass_fields__))
    df = pd.DataFrame(rows)
    for col in df.columns:
        if col not in ('employee_id', 'tax_year'):
            df[col] = df[col].astype(float)
    return df

class PayrollBulkProcessor:
    """Runs PAYE/NIS over a payroll spreadsheet, collecting row errors instead of aborting."""

    def __init__(self, tenant_id: str, config: TaxConfig):
        self.tenant_id = tenant_id
        self.config = ensure_config(config)
        self.engine = PayrollEngine(tenant_id, self.config)
        self.logger = setup_logging(tenant_id)

    def process_frame(self, df: pd.DataFrame) -> BulkPayrollResult:
        df = normalize_payroll_frame(df)
        results, employees, row_errors = [], [], []
        seen = set()

        for idx, row in enumerate(df.to_dict(orient='records'), start=1):
            emp_id = row['employee_id']
            errors = []
            if not emp_id:
                errors.append("Employee id is required")
            elif emp_id in seen:
                errors.append(f"Duplicate employee id {emp_id}")
            else:
                seen.add(emp_id)
            if not errors:
                employee = employee_from_row(row)
                try:
                    results.append(self.engine.calculate(employee))
                    employees.append(employee)
                except TaxValidationError as e:
                    errors.extend(e.errors)
            if errors:
                row_errors.append({'row': idx, 'employee_id': emp_id, 'errors': errors})

        summary = summarize(results, self.config.tax_year)
        self.logger.info(
            "Bulk payroll: %d rows, %d processed, %d rejected",
            len(df), len(results), len(row_errors),
        )
        for err in row_errors:
            self.logger.warning("Row %s (%s) rejected: %s", err['row'], err['employee_id'] or '-', "; ".join(err['errors']))

        return BulkPayrollResult(summary=summary, employees=employees, row_errors=row_errors, total_rows=len(df))

    def process_file(self, file_path: Union[str, Path]) -> BulkPayrollResult:
        return self.process_frame(load_payroll_file(file_path))
