"""
Statutory payroll schedules.

 - GRA Form 7B: year-end payroll CSV
   TIN, Last_Name, First_Name, Gross_Earnings, Tax_Deducted, NIS_Employee
 - NIS CS3: fixed-width contribution schedule
   header  NIS<employer nis><MM><YYYY>
   lines   nis number (15) | nisable earnings (12) | employee (10) | employer (10)
"""
import pandas as pd
from pathlib import Path
from typing import List, Union

from gktax.core.errors import TaxValidationError
from gktax.core.utils import atomic_write_text
from gktax.payroll.engine import PayrollEmployee, PayrollRunSummary

FORM_7B_COLUMNS = ["TIN", "Last_Name", "First_Name", "Gross_Earnings", "Tax_Deducted", "NIS_Employee"]


def _money(amount) -> str:
    return f"{amount:.2f}"


def generate_form_7b_csv(summary: PayrollRunSummary, employees: List[PayrollEmployee], employer_tin: str) -> str:
    """Employees with no result in the run are skipped."""
    by_id = {e.id: e for e in employees}
    rows = []
    for result in summary.results:
        employee = by_id.get(result.employee_id)
        if employee is None:
            continue
        rows.append({
            "TIN": employer_tin,
            "Last_Name": employee.last_name,
            "First_Name": employee.first_name,
            "Gross_Earnings": _money(result.gross_earnings),
            "Tax_Deducted": _money(result.total_paye_tax),
            "NIS_Employee": _money(result.employee_nis),
        })
    df = pd.DataFrame(rows, columns=FORM_7B_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n").rstrip("\n")


def generate_nis_cs3_schedule(summary: PayrollRunSummary, employees: List[PayrollEmployee],
                              employer_nis_number: str, period_month: int, period_year: int) -> str:
    if not 1 <= period_month <= 12:
        raise TaxValidationError([f"Invalid period month: {period_month}"], field="period_month")
    by_id = {e.id: e for e in employees}
    lines = [f"NIS{employer_nis_number}{period_month:02d}{period_year}"]
    for result in summary.results:
        employee = by_id.get(result.employee_id)
        if employee is None:
            continue
        lines.append("".join([
            employee.nis_number.ljust(15),
            _money(result.nisable_earnings).rjust(12),
            _money(result.employee_nis).rjust(10),
            _money(result.employer_nis).rjust(10),
        ]))
    return "\n".join(lines)


def write_schedule(path: Union[str, Path], content: str) -> Path:
    atomic_write_text(str(path), content + "\n")
    return Path(path)
