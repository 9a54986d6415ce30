import json
from decimal import Decimal
import pytest
from gktax.core.errors import TaxValidationError
from gktax.payroll.engine import PayrollEmployee, PayrollEngine
from gktax.tax.paye import EmployeeEarnings

def staff():
    return [
        PayrollEmployee(id="E1", first_name="Asha", last_name="Persaud", nis_number="A-1234567-B", tin="123456789",
                        earnings=EmployeeEarnings(basic_salary=150000, overtime=25000, allowances=10000, bonuses=15000, dependents=2)),
        PayrollEmployee(id="E2", first_name="Dev", last_name="Ramdin", nis_number="987654321", tin="987654321",
                        earnings=EmployeeEarnings(basic_salary=600000)),
        PayrollEmployee(id="E3", first_name="Kim", last_name="Adams", nis_number="C-7654321-D", tin="111222333",
                        earnings=EmployeeEarnings(basic_salary=90000)),
    ]

def test_run_payroll_totals(config):
    eng = PayrollEngine("payroll-tenant", config)
    summary = eng.run_payroll(staff(), period="2025-03")
    t = summary.totals
    assert t.employee_count == 3
    assert t.total_gross_pay == 200000 + 600000 + 90000
    assert t.total_net_pay == sum(r.net_pay for r in summary.results)
    assert t.total_paye == sum(r.total_paye_tax for r in summary.results)
    assert t.total_employee_nis == sum(r.employee_nis for r in summary.results)
    assert summary.result_for("E1").employee_id == "E1"
    assert summary.result_for("E3").total_paye_tax == 0
    assert summary.tax_year == 2025

def test_dict_employees_accepted(config):
    eng = PayrollEngine("payroll-tenant", config)
    r = eng.calculate({"employee_id": "D1", "basic_salary": 200000, "dependents": 5})
    assert r.employee_id == "D1"
    assert r.child_allowance == 30000

def test_invalid_employee_aborts_run(config):
    eng = PayrollEngine("payroll-tenant", config)
    bad = PayrollEmployee(id="BAD", earnings=EmployeeEarnings(basic_salary=-100))
    with pytest.raises(TaxValidationError):
        eng.run_payroll(staff() + [bad])

def test_run_with_actor_writes_audit(config, audit_dir):
    eng = PayrollEngine("audited-tenant", config)
    eng.run_payroll(staff(), actor="payroll@gk.local", period="2025-04")
    lines = (audit_dir / "audited-tenant_audit.jsonl").read_text().splitlines()
    entry = json.loads(lines[-1])
    assert entry["action"] == "payroll.run"
    assert entry["object_id"] == "2025-04"
    assert entry["diff"]["employee_count"] == 3
    assert Decimal(entry["diff"]["total_gross_pay"]) == Decimal("890000")
