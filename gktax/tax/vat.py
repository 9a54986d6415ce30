"""
VAT for single transactions and for period returns.

A VatCategory is one of Standard, ZeroRated(subcategory) or Exempt(subcategory).
Zero-rated and exempt supplies both carry a 0% rate but are reported
separately on a return.
"""
from dataclasses import dataclass, asdict, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from gktax.core.errors import TaxValidationError
from gktax.core.utils import ZERO, Number, amount_errors, round_money, to_decimal
from gktax.tax.config import TaxConfig, ensure_config


class VatTreatment(str, Enum):
    STANDARD = "STANDARD"
    ZERO_RATED = "ZERO_RATED"
    EXEMPT = "EXEMPT"


class ZeroRatedCategory(str, Enum):
    BASIC_FOOD_ITEMS = "BASIC_FOOD_ITEMS"
    MEDICAL_SUPPLIES = "MEDICAL_SUPPLIES"
    EDUCATIONAL_MATERIALS = "EDUCATIONAL_MATERIALS"
    EXPORTS = "EXPORTS"
    AGRICULTURAL_PRODUCTS = "AGRICULTURAL_PRODUCTS"


class ExemptCategory(str, Enum):
    FINANCIAL_SERVICES = "FINANCIAL_SERVICES"
    INSURANCE = "INSURANCE"
    RESIDENTIAL_RENT = "RESIDENTIAL_RENT"
    MEDICAL_SERVICES = "MEDICAL_SERVICES"
    EDUCATIONAL_SERVICES = "EDUCATIONAL_SERVICES"


Subcategory = Union[ZeroRatedCategory, ExemptCategory]


@dataclass(frozen=True)
class VatCategory:
    treatment: VatTreatment
    subcategory: Optional[Subcategory] = None

    def __post_init__(self):
        if not isinstance(self.treatment, VatTreatment):
            raise TaxValidationError([f"Invalid VAT treatment: {self.treatment!r}"], field="category")
        allowed = {
            VatTreatment.STANDARD: type(None),
            VatTreatment.ZERO_RATED: (ZeroRatedCategory, type(None)),
            VatTreatment.EXEMPT: (ExemptCategory, type(None)),
        }[self.treatment]
        if not isinstance(self.subcategory, allowed):
            raise TaxValidationError(
                [f"{self.subcategory!r} is not a valid {self.treatment.value} subcategory"],
                field="category",
            )

    @classmethod
    def standard(cls) -> "VatCategory":
        return cls(VatTreatment.STANDARD)

    @classmethod
    def zero_rated(cls, subcategory: Optional[ZeroRatedCategory] = None) -> "VatCategory":
        return cls(VatTreatment.ZERO_RATED, subcategory)

    @classmethod
    def exempt(cls, subcategory: Optional[ExemptCategory] = None) -> "VatCategory":
        return cls(VatTreatment.EXEMPT, subcategory)

    @classmethod
    def parse(cls, value: Union["VatCategory", str]) -> "VatCategory":
        """Accept STANDARD, ZERO_RATED, EXEMPT or any named subcategory (case-insensitive)."""
        if isinstance(value, VatCategory):
            return value
        if not isinstance(value, str):
            raise TaxValidationError([f"Invalid VAT category: {value!r}"], field="category")
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        if key in VatTreatment.__members__:
            return cls(VatTreatment[key])
        if key in ZeroRatedCategory.__members__:
            return cls.zero_rated(ZeroRatedCategory[key])
        if key in ExemptCategory.__members__:
            return cls.exempt(ExemptCategory[key])
        raise TaxValidationError([f"Invalid VAT category: {value!r}"], field="category")

    @property
    def name(self) -> str:
        return (self.subcategory or self.treatment).value

    @property
    def is_zero_rated(self) -> bool:
        return self.treatment is VatTreatment.ZERO_RATED

    @property
    def is_exempt(self) -> bool:
        return self.treatment is VatTreatment.EXEMPT

    def rate(self, config: TaxConfig) -> Decimal:
        if self.treatment is VatTreatment.STANDARD:
            return config.vat.standard_rate
        return ZERO

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class VatTransaction:
    amount: Number
    category: Union[VatCategory, str] = VatTreatment.STANDARD.value
    vat_inclusive: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class VatResult:
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal
    vat_rate: Decimal
    category: str
    is_exempt: bool
    is_zero_rated: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _amount(value: Any, label: str, errors: List[str], allow_negative: bool = False) -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        errors.append(f"{label} must be a number")
        return ZERO
    if amount < 0 and not allow_negative:
        errors.append(f"{label} cannot be negative")
    else:
        errors.extend(amount_errors(amount, label))
    return amount


def calculate_vat(transaction: VatTransaction, config: TaxConfig) -> VatResult:
    config = ensure_config(config)
    errors: List[str] = []
    amount = _amount(transaction.amount, "Amount", errors)
    try:
        category = VatCategory.parse(transaction.category)
    except TaxValidationError as e:
        errors.extend(e.errors)
        category = None
    if errors:
        raise TaxValidationError(errors)

    rate = category.rate(config)
    if transaction.vat_inclusive:
        gross = amount
        net = amount / (1 + rate)
        vat = gross - net
    else:
        net = amount
        vat = net * rate
        gross = net + vat

    # each figure is rounded from its own unrounded value
    return VatResult(
        net_amount=round_money(net),
        vat_amount=round_money(vat),
        gross_amount=round_money(gross),
        vat_rate=rate,
        category=category.name,
        is_exempt=category.is_exempt,
        is_zero_rated=category.is_zero_rated,
    )


@dataclass(frozen=True)
class VatReturnInput:
    period: str = ""
    standard_rated_sales: Number = 0
    zero_rated_sales: Number = 0
    exempt_sales: Number = 0
    standard_rated_purchases: Number = 0
    zero_rated_purchases: Number = 0
    exempt_purchases: Number = 0
    adjustments: Number = 0
    previous_credit: Number = 0
    vat_registration_number: Optional[str] = None


@dataclass(frozen=True)
class VatBreakdown:
    standard_rated: Decimal
    zero_rated: Decimal
    exempt: Decimal


@dataclass(frozen=True)
class VatReturn:
    period: str
    tax_year: int
    total_sales: Decimal
    total_purchases: Decimal
    output_vat: Decimal
    input_vat: Decimal
    net_vat: Decimal
    adjustments: Decimal
    previous_credit: Decimal
    total_vat_due: Decimal
    output_breakdown: VatBreakdown
    input_breakdown: VatBreakdown
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


RETURN_MONEY_FIELDS = (
    "standard_rated_sales", "zero_rated_sales", "exempt_sales",
    "standard_rated_purchases", "zero_rated_purchases", "exempt_purchases",
    "previous_credit",
)


def _return_warnings(amounts: Dict[str, Decimal], output_vat: Decimal, input_vat: Decimal,
                     return_input: VatReturnInput, config: TaxConfig) -> List[str]:
    warnings = []
    monthly_sales = amounts["standard_rated_sales"] + amounts["zero_rated_sales"] + amounts["exempt_sales"]
    if monthly_sales * 12 > config.vat.registration_threshold and not return_input.vat_registration_number:
        warnings.append("Annual sales may exceed VAT registration threshold. Consider VAT registration.")
    if output_vat > 0 and input_vat / output_vat > Decimal("1.5"):
        warnings.append("Input VAT is significantly higher than Output VAT. Please verify purchases.")
    if output_vat > 0 and abs(amounts["adjustments"]) > output_vat * Decimal("0.1"):
        warnings.append("Adjustment amount is more than 10% of Output VAT. Please provide explanation.")
    return warnings


def calculate_vat_return(return_input: VatReturnInput, config: TaxConfig) -> VatReturn:
    """Period return; the amount due is floored at zero, a surplus is a credit outside this figure."""
    config = ensure_config(config)
    errors: List[str] = []
    amounts = {
        name: _amount(getattr(return_input, name), name.replace("_", " ").capitalize(), errors)
        for name in RETURN_MONEY_FIELDS
    }
    amounts["adjustments"] = _amount(return_input.adjustments, "Adjustments", errors, allow_negative=True)
    if errors:
        raise TaxValidationError(errors)

    rate = config.vat.standard_rate
    output = VatBreakdown(round_money(amounts["standard_rated_sales"] * rate), ZERO, ZERO)
    inputs = VatBreakdown(round_money(amounts["standard_rated_purchases"] * rate), ZERO, ZERO)
    output_vat = output.standard_rated + output.zero_rated + output.exempt
    input_vat = inputs.standard_rated + inputs.zero_rated + inputs.exempt
    net_vat = output_vat - input_vat

    return VatReturn(
        period=return_input.period,
        tax_year=config.tax_year,
        total_sales=amounts["standard_rated_sales"] + amounts["zero_rated_sales"] + amounts["exempt_sales"],
        total_purchases=(amounts["standard_rated_purchases"] + amounts["zero_rated_purchases"]
                         + amounts["exempt_purchases"]),
        output_vat=output_vat,
        input_vat=input_vat,
        net_vat=net_vat,
        adjustments=amounts["adjustments"],
        previous_credit=amounts["previous_credit"],
        total_vat_due=max(ZERO, net_vat + amounts["adjustments"] - amounts["previous_credit"]),
        output_breakdown=output,
        input_breakdown=inputs,
        warnings=_return_warnings(amounts, output_vat, input_vat, return_input, config),
    )


@dataclass(frozen=True)
class VatItemsSummary:
    items: List[VatResult]
    gross_total: Decimal
    net_total: Decimal
    vat_total: Decimal
    standard_rate_vat: Decimal
    zero_rated_amount: Decimal
    exempt_amount: Decimal


def summarize_vat_items(transactions: Sequence[VatTransaction], config: TaxConfig) -> VatItemsSummary:
    results = [calculate_vat(t, config) for t in transactions]
    standard = [r for r in results if not (r.is_exempt or r.is_zero_rated)]
    return VatItemsSummary(
        items=results,
        gross_total=sum((r.gross_amount for r in results), ZERO),
        net_total=sum((r.net_amount for r in results), ZERO),
        vat_total=sum((r.vat_amount for r in results), ZERO),
        standard_rate_vat=sum((r.vat_amount for r in standard), ZERO),
        zero_rated_amount=sum((r.net_amount for r in results if r.is_zero_rated), ZERO),
        exempt_amount=sum((r.net_amount for r in results if r.is_exempt), ZERO),
    )


@dataclass(frozen=True)
class VatRegistrationCheck:
    requires_registration: bool
    annual_turnover: Decimal
    threshold: Decimal
    excess_amount: Decimal
    recommendation: str


def check_vat_registration(annual_turnover: Number, config: TaxConfig) -> VatRegistrationCheck:
    config = ensure_config(config)
    errors: List[str] = []
    turnover = _amount(annual_turnover, "Annual turnover", errors)
    if errors:
        raise TaxValidationError(errors)

    threshold = config.vat.registration_threshold
    required = turnover >= threshold
    if required:
        recommendation = "Must register for VAT immediately. Registration is mandatory."
    elif turnover >= threshold * Decimal("0.8"):
        recommendation = "Consider voluntary VAT registration as you are approaching the threshold."
    else:
        recommendation = "VAT registration not required at current turnover level."
    return VatRegistrationCheck(
        requires_registration=required,
        annual_turnover=turnover,
        threshold=threshold,
        excess_amount=max(ZERO, turnover - threshold),
        recommendation=recommendation,
    )
