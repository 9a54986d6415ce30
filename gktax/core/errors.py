"""
Exceptions raised by the tax calculators and the payroll layer.
"""
from typing import Iterable, List, Optional


class TaxError(Exception):
    """Base class for all tax engine errors."""


class TaxValidationError(TaxError, ValueError):
    """Input rejected before any arithmetic ran."""

    def __init__(self, errors: Iterable[str], field: Optional[str] = None):
        self.errors: List[str] = list(errors) or ["Invalid input"]
        self.field = field
        super().__init__("; ".join(self.errors))


class TaxConfigurationError(TaxError):
    """Missing or inconsistent tax-year configuration."""
