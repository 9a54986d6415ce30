"""
Tax-year configuration models.

A TaxConfig is an immutable table of statutory values for one tax year. It is
passed explicitly into every calculation so that several years can coexist
and historical results stay reproducible.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from gktax.core.errors import TaxConfigurationError


class _Table(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


def _check_rate(value: Decimal) -> Decimal:
    if not (Decimal("0") <= value <= Decimal("1")):
        raise ValueError(f"rate {value} must be within [0, 1]")
    return value


class PayeConfig(_Table):
    statutory_free_pay: Decimal = Field(ge=0)
    band_1_limit: Decimal = Field(gt=0)
    band_1_rate: Decimal
    band_2_rate: Decimal
    child_allowance_per_child: Decimal = Field(ge=0)
    max_child_allowance_children: int = Field(3, ge=0)
    overtime_tax_free_limit: Decimal = Field(ge=0)

    @field_validator("band_1_rate", "band_2_rate")
    @classmethod
    def check_rate_bounds(cls, value):
        return _check_rate(value)

    @model_validator(mode="after")
    def check_bands_progressive(self):
        if self.band_2_rate < self.band_1_rate:
            raise ValueError("band_2_rate must not be lower than band_1_rate")
        return self


class NisConfig(_Table):
    earnings_ceiling: Decimal = Field(gt=0)
    employee_rate: Decimal
    employer_rate: Decimal

    @field_validator("employee_rate", "employer_rate")
    @classmethod
    def check_rate_bounds(cls, value):
        return _check_rate(value)

    @property
    def max_employee_contribution(self) -> Decimal:
        return self.earnings_ceiling * self.employee_rate

    @property
    def max_employer_contribution(self) -> Decimal:
        return self.earnings_ceiling * self.employer_rate


class VatConfig(_Table):
    standard_rate: Decimal
    registration_threshold: Decimal = Field(ge=0)

    @field_validator("standard_rate")
    @classmethod
    def check_rate_bounds(cls, value):
        return _check_rate(value)


class TaxConfig(_Table):
    tax_year: int = Field(ge=1900, le=9999)
    effective_date: date
    currency: str = "GYD"
    description: str = ""
    paye: PayeConfig
    nis: NisConfig
    vat: VatConfig

    @model_validator(mode="after")
    def check_effective_in_year(self):
        if self.effective_date.year != self.tax_year:
            raise ValueError(
                f"effective_date {self.effective_date} is outside tax year {self.tax_year}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaxConfig":
        """Build a config from plain data, raising TaxConfigurationError on any problem."""
        if not isinstance(data, dict):
            raise TaxConfigurationError(f"Tax table must be a mapping, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            year = data.get("tax_year", "?")
            raise TaxConfigurationError(f"Invalid tax table for {year}: {problems}") from e

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def ensure_config(config: Any) -> TaxConfig:
    if config is None:
        raise TaxConfigurationError("No tax configuration supplied")
    if not isinstance(config, TaxConfig):
        raise TaxConfigurationError(
            f"Expected a TaxConfig, got {type(config).__name__}"
        )
    return config
