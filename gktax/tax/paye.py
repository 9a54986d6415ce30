"""
PAYE income tax and NIS contributions for an employee's monthly earnings.

Taxable income is gross earnings less statutory free pay, the employee's NIS
contribution, the child allowance and the tax-free part of overtime. The first
band_1_limit of taxable income is taxed at band_1_rate and the remainder at
band_2_rate.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from gktax.core.errors import TaxValidationError
from gktax.core.utils import ZERO, Number, amount_errors, round_money, to_decimal
from gktax.tax.config import TaxConfig, ensure_config

MAX_DEPENDENTS = 10

MONEY_FIELDS = ("basic_salary", "overtime", "allowances", "bonuses")


@dataclass(frozen=True)
class EmployeeEarnings:
    """One pay period's earnings as declared for an employee."""
    basic_salary: Number = 0
    overtime: Number = 0
    allowances: Number = 0
    bonuses: Number = 0
    dependents: int = 0
    employee_id: Optional[str] = None


@dataclass(frozen=True)
class PayeResult:
    """PAYE and NIS figures for one pay period. Reliefs are the amounts actually applied, so
    statutory_free_pay never exceeds gross earnings."""
    employee_id: Optional[str]
    tax_year: int
    gross_earnings: Decimal
    statutory_free_pay: Decimal
    child_allowance: Decimal
    overtime_tax_free: Decimal
    nisable_earnings: Decimal
    employee_nis: Decimal
    employer_nis: Decimal
    taxable_income: Decimal
    tax_band_1_amount: Decimal
    tax_band_1_tax: Decimal
    tax_band_2_amount: Decimal
    tax_band_2_tax: Decimal
    total_paye_tax: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    total_employment_cost: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_earnings(earnings: EmployeeEarnings) -> List[str]:
    """Return a list of problems with the input; empty when it can be calculated."""
    _, errors = _parse_earnings(earnings)
    return errors


def _parse_earnings(earnings: EmployeeEarnings) -> Tuple[Dict[str, Decimal], List[str]]:
    errors = []
    amounts = {}
    for name in MONEY_FIELDS:
        label = name.replace("_", " ").capitalize()
        try:
            value = to_decimal(getattr(earnings, name))
        except (InvalidOperation, TypeError, ValueError):
            errors.append(f"{label} must be a number")
            continue
        if value < 0:
            errors.append(f"{label} cannot be negative")
        else:
            errors.extend(amount_errors(value, label))
        amounts[name] = value

    dependents = earnings.dependents
    if isinstance(dependents, bool) or not isinstance(dependents, int):
        errors.append("Dependents must be a whole number")
    elif dependents < 0:
        errors.append("Dependents cannot be negative")
    elif dependents > MAX_DEPENDENTS:
        errors.append(f"Dependents cannot exceed {MAX_DEPENDENTS}")
    return amounts, errors


def nis_contributions(gross: Decimal, config: TaxConfig) -> Tuple[Decimal, Decimal, Decimal]:
    """(nisable earnings, employee contribution, employer contribution); the ceiling caps the base."""
    nis = config.nis
    base = min(gross, nis.earnings_ceiling)
    return base, round_money(base * nis.employee_rate), round_money(base * nis.employer_rate)


def child_allowance(dependents: int, config: TaxConfig) -> Decimal:
    eligible = min(dependents, config.paye.max_child_allowance_children)
    return eligible * config.paye.child_allowance_per_child


def band_tax(taxable: Decimal, config: TaxConfig) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
    paye = config.paye
    if taxable <= 0:
        return ZERO, ZERO, ZERO, ZERO
    band_1 = min(taxable, paye.band_1_limit)
    band_2 = max(ZERO, taxable - paye.band_1_limit)
    return band_1, round_money(band_1 * paye.band_1_rate), band_2, round_money(band_2 * paye.band_2_rate)


def calculate_paye(earnings: EmployeeEarnings, config: TaxConfig) -> PayeResult:
    config = ensure_config(config)
    amounts, errors = _parse_earnings(earnings)
    if errors:
        raise TaxValidationError(errors)

    overtime = amounts["overtime"]
    gross = amounts["basic_salary"] + overtime + amounts["allowances"] + amounts["bonuses"]

    nisable, employee_nis, employer_nis = nis_contributions(gross, config)
    allowance = child_allowance(earnings.dependents, config)
    overtime_tax_free = min(overtime, config.paye.overtime_tax_free_limit)
    free_pay = min(gross, config.paye.statutory_free_pay)

    taxable = max(
        ZERO,
        gross - free_pay - employee_nis - allowance - overtime_tax_free,
    )
    band_1_amount, band_1_tax, band_2_amount, band_2_tax = band_tax(taxable, config)

    total_paye = band_1_tax + band_2_tax
    total_deductions = employee_nis + total_paye

    return PayeResult(
        employee_id=earnings.employee_id,
        tax_year=config.tax_year,
        gross_earnings=gross,
        statutory_free_pay=free_pay,
        child_allowance=allowance,
        overtime_tax_free=overtime_tax_free,
        nisable_earnings=nisable,
        employee_nis=employee_nis,
        employer_nis=employer_nis,
        taxable_income=taxable,
        tax_band_1_amount=band_1_amount,
        tax_band_1_tax=band_1_tax,
        tax_band_2_amount=band_2_amount,
        tax_band_2_tax=band_2_tax,
        total_paye_tax=total_paye,
        total_deductions=total_deductions,
        net_pay=gross - total_deductions,
        total_employment_cost=gross + employer_nis,
    )
