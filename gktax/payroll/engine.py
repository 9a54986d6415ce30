from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from gktax.core.errors import TaxValidationError
from gktax.core.utils import ZERO, setup_logging, audit_log, format_currency
from gktax.tax.config import TaxConfig, ensure_config
from gktax.tax.paye import EmployeeEarnings, PayeResult, calculate_paye


@dataclass(frozen=True)
class PayrollEmployee:
    id: str
    first_name: str = ""
    last_name: str = ""
    nis_number: str = ""
    tin: str = ""
    earnings: EmployeeEarnings = field(default_factory=EmployeeEarnings)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PayrollEmployee":
        emp_id = str(data.get("id") or data.get("employee_id") or "")
        earnings = EmployeeEarnings(
            basic_salary=data.get("basic_salary", 0),
            overtime=data.get("overtime", 0),
            allowances=data.get("allowances", 0),
            bonuses=data.get("bonuses", 0),
            dependents=data.get("dependents", 0),
            employee_id=emp_id,
        )
        return cls(
            id=emp_id,
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            nis_number=data.get("nis_number", ""),
            tin=data.get("tin", ""),
            earnings=earnings,
        )


@dataclass(frozen=True)
class PayrollTotals:
    total_gross_pay: Decimal = ZERO
    total_net_pay: Decimal = ZERO
    total_paye: Decimal = ZERO
    total_employee_nis: Decimal = ZERO
    total_employer_nis: Decimal = ZERO
    employee_count: int = 0


@dataclass(frozen=True)
class PayrollRunSummary:
    tax_year: int
    results: List[PayeResult]
    totals: PayrollTotals
    generated_at: str

    def result_for(self, employee_id: str) -> Optional[PayeResult]:
        return next((r for r in self.results if r.employee_id == employee_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize(results: Sequence[PayeResult], tax_year: int) -> PayrollRunSummary:
    totals = PayrollTotals(
        total_gross_pay=sum((r.gross_earnings for r in results), ZERO),
        total_net_pay=sum((r.net_pay for r in results), ZERO),
        total_paye=sum((r.total_paye_tax for r in results), ZERO),
        total_employee_nis=sum((r.employee_nis for r in results), ZERO),
        total_employer_nis=sum((r.employer_nis for r in results), ZERO),
        employee_count=len(results),
    )
    return PayrollRunSummary(
        tax_year=tax_year,
        results=list(results),
        totals=totals,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )


class PayrollEngine:
    def __init__(self, tenant_id: str, config: TaxConfig):
        self.tenant_id = tenant_id
        self.config = ensure_config(config)
        self.logger = setup_logging(tenant_id)

    def calculate(self, employee: Union[PayrollEmployee, Dict[str, Any]]) -> PayeResult:
        if isinstance(employee, dict):
            employee = PayrollEmployee.from_dict(employee)
        earnings = employee.earnings
        if earnings.employee_id != employee.id:
            earnings = replace(earnings, employee_id=employee.id)
        return calculate_paye(earnings, self.config)

    def run_payroll(self, employees: Sequence[Union[PayrollEmployee, Dict[str, Any]]],
                    actor: Optional[str] = None, period: Optional[str] = None) -> PayrollRunSummary:
        """Calculate every employee; a validation error on any employee aborts the run."""
        results = []
        for e in employees:
            try:
                results.append(self.calculate(e))
            except TaxValidationError:
                emp_id = (e.get("id") or e.get("employee_id")) if isinstance(e, dict) else e.id
                self.logger.error("Payroll run aborted: invalid earnings for employee %s", emp_id)
                raise
        summary = summarize(results, self.config.tax_year)
        t = summary.totals
        self.logger.info(
            "Payroll run %s: %d employees, gross %s, PAYE %s, NIS %s (tax year %d)",
            period or "-", t.employee_count, format_currency(t.total_gross_pay, self.config.currency),
            format_currency(t.total_paye, self.config.currency),
            format_currency(t.total_employee_nis, self.config.currency), self.config.tax_year,
        )
        if actor:
            audit_log(self.tenant_id, actor, "payroll.run", "payroll_run", period or summary.generated_at, {
                "tax_year": self.config.tax_year,
                "employee_count": t.employee_count,
                "total_gross_pay": t.total_gross_pay,
                "total_paye": t.total_paye,
                "total_employee_nis": t.total_employee_nis,
                "total_employer_nis": t.total_employer_nis,
            })
        return summary
