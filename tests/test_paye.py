from decimal import Decimal
import pytest
from gktax.core.errors import TaxValidationError, TaxConfigurationError
from gktax.tax.paye import EmployeeEarnings, calculate_paye, validate_earnings

def assert_consistent(r):
    assert r.total_paye_tax == r.tax_band_1_tax + r.tax_band_2_tax
    assert r.total_deductions == r.employee_nis + r.total_paye_tax
    assert r.net_pay == r.gross_earnings - r.total_deductions
    assert r.total_employment_cost == r.gross_earnings + r.employer_nis

def test_concrete_payroll_scenario(config):
    e = EmployeeEarnings(basic_salary=150000, overtime=25000, allowances=10000, bonuses=15000, dependents=2, employee_id="E1")
    r = calculate_paye(e, config)
    assert r.gross_earnings == 200000
    assert r.nisable_earnings == 200000
    assert r.employee_nis == Decimal("200000") * config.nis.employee_rate
    assert r.employer_nis == Decimal("200000") * config.nis.employer_rate
    assert r.child_allowance == 2 * config.paye.child_allowance_per_child
    assert r.overtime_tax_free == 25000
    expected_taxable = (r.gross_earnings - config.paye.statutory_free_pay - r.employee_nis
                        - r.child_allowance - r.overtime_tax_free)
    assert r.taxable_income == expected_taxable
    assert r.tax_band_1_tax == expected_taxable * config.paye.band_1_rate
    assert r.tax_band_2_tax == 0
    assert r.employee_id == "E1"
    assert r.tax_year == 2025
    assert_consistent(r)

def test_overtime_above_limit_is_taxable(make_config):
    cfg = make_config("paye", overtime_tax_free_limit="10000")
    e = EmployeeEarnings(basic_salary=150000, overtime=25000, allowances=10000, bonuses=15000, dependents=2)
    r = calculate_paye(e, cfg)
    assert r.overtime_tax_free == 10000
    assert r.taxable_income == Decimal("200000") - 130000 - r.employee_nis - 20000 - 10000
    assert_consistent(r)

def test_salary_below_free_pay_pays_no_tax(config):
    for salary in (0, 50000, 100000, 129999):
        r = calculate_paye(EmployeeEarnings(basic_salary=salary), config)
        assert r.total_paye_tax == 0
        assert r.net_pay == r.gross_earnings - r.employee_nis

def test_zero_salary_all_zero(config):
    r = calculate_paye(EmployeeEarnings(), config)
    for value in (r.gross_earnings, r.statutory_free_pay, r.child_allowance, r.overtime_tax_free,
                  r.nisable_earnings, r.employee_nis, r.employer_nis, r.taxable_income,
                  r.total_paye_tax, r.total_deductions, r.net_pay):
        assert value == 0

def test_band_two_applies_above_limit(config):
    r = calculate_paye(EmployeeEarnings(basic_salary=600000), config)
    assert r.taxable_income > config.paye.band_1_limit
    assert r.tax_band_1_amount == config.paye.band_1_limit
    assert r.tax_band_2_amount == r.taxable_income - config.paye.band_1_limit
    assert r.tax_band_2_tax > 0
    assert r.tax_band_1_tax == Decimal("65000.00")
    assert r.tax_band_2_tax == Decimal("68012.00")
    assert_consistent(r)

def test_nis_contribution_capped_by_ceiling(config):
    cap = config.nis.earnings_ceiling * config.nis.employee_rate
    previous = Decimal("0")
    for salary in (100000, 279999, 280000, 280001, 1000000, 50000000):
        r = calculate_paye(EmployeeEarnings(basic_salary=salary), config)
        assert r.employee_nis <= cap
        assert r.employee_nis >= previous
        assert r.employer_nis <= config.nis.earnings_ceiling * config.nis.employer_rate
        previous = r.employee_nis
    assert previous == Decimal("15680.00")

def test_dependents_capped_at_three(config):
    three = calculate_paye(EmployeeEarnings(basic_salary=300000, dependents=3), config)
    five = calculate_paye(EmployeeEarnings(basic_salary=300000, dependents=5), config)
    assert three.child_allowance == five.child_allowance == 30000
    assert three.total_paye_tax == five.total_paye_tax

def test_negative_inputs_rejected(config):
    with pytest.raises(TaxValidationError) as exc:
        calculate_paye(EmployeeEarnings(basic_salary=-1, bonuses=-5), config)
    assert "Basic salary cannot be negative" in exc.value.errors
    assert "Bonuses cannot be negative" in exc.value.errors

def test_invalid_dependents_and_amounts(config):
    assert validate_earnings(EmployeeEarnings(basic_salary=1000, dependents=11)) == ["Dependents cannot exceed 10"]
    assert validate_earnings(EmployeeEarnings(basic_salary="abc")) == ["Basic salary must be a number"]
    assert validate_earnings(EmployeeEarnings(dependents=2.5)) == ["Dependents must be a whole number"]
    assert validate_earnings(EmployeeEarnings(basic_salary="150,000", dependents=10)) == []
    with pytest.raises(ValueError):
        calculate_paye(EmployeeEarnings(dependents=-1), config)

def test_missing_config_is_fatal():
    with pytest.raises(TaxConfigurationError):
        calculate_paye(EmployeeEarnings(basic_salary=1000), None)

def test_free_pay_applied_capped_at_gross(config):
    r = calculate_paye(EmployeeEarnings(basic_salary=50000), config)
    assert r.statutory_free_pay == Decimal("50000")
    assert calculate_paye(EmployeeEarnings(basic_salary=200000), config).statutory_free_pay == config.paye.statutory_free_pay

def test_oversized_amounts_rejected(config):
    with pytest.raises(TaxValidationError) as exc:
        calculate_paye(EmployeeEarnings(basic_salary=Decimal("1e27")), config)
    assert exc.value.errors == ["Basic salary is too large"]
    assert validate_earnings(EmployeeEarnings(basic_salary=Decimal("999999999999999.99"))) == []

def test_sub_cent_amounts_rejected(config):
    assert validate_earnings(EmployeeEarnings(bonuses="100.005")) == ["Bonuses cannot have more than 2 decimal places"]
    assert validate_earnings(EmployeeEarnings(basic_salary="1500.50", overtime=0.25)) == []
