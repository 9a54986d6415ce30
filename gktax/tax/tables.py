"""
Versioned tax-year tables.

The registry keeps several TaxConfig versions per year, keyed by effective
date, so that a calculation can be pinned to the table that was in force on a
given day.
"""
import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from gktax.core.config import settings
from gktax.core.errors import TaxConfigurationError
from gktax.tax.config import TaxConfig

# Guyana 2025 Budget (monthly figures, GYD)
GUYANA_2025 = TaxConfig.from_dict({
    "tax_year": 2025,
    "effective_date": "2025-01-01",
    "currency": "GYD",
    "description": "Guyana 2025 Budget, monthly payroll",
    "paye": {
        "statutory_free_pay": "130000",
        "band_1_limit": "260000",
        "band_1_rate": "0.25",
        "band_2_rate": "0.35",
        "child_allowance_per_child": "10000",
        "max_child_allowance_children": 3,
        "overtime_tax_free_limit": "50000",
    },
    "nis": {
        "earnings_ceiling": "280000",
        "employee_rate": "0.056",
        "employer_rate": "0.084",
    },
    "vat": {
        "standard_rate": "0.125",
        "registration_threshold": "15000000",
    },
})

BUILTIN_TABLES = [GUYANA_2025]


class TaxConfigRegistry:
    """Holds tax tables and resolves the one in force for a year or date."""

    def __init__(self, configs: Optional[Iterable[TaxConfig]] = None):
        self._configs: Dict[int, List[TaxConfig]] = {}
        for config in configs or []:
            self.register(config)

    def register(self, config: TaxConfig, replace: bool = False) -> TaxConfig:
        if not isinstance(config, TaxConfig):
            raise TaxConfigurationError(f"Expected a TaxConfig, got {type(config).__name__}")
        versions = self._configs.setdefault(config.tax_year, [])
        for i, existing in enumerate(versions):
            if existing.effective_date == config.effective_date:
                if existing == config:
                    return existing
                if not replace:
                    raise TaxConfigurationError(
                        f"A different {config.tax_year} table effective {config.effective_date} is already registered"
                    )
                versions[i] = config
                return config
        versions.append(config)
        versions.sort(key=lambda c: c.effective_date)
        return config

    def years(self) -> List[int]:
        return sorted(self._configs)

    def versions(self, tax_year: int) -> List[TaxConfig]:
        return list(self._configs.get(tax_year, []))

    def for_year(self, tax_year: int) -> TaxConfig:
        """Latest version registered for the year."""
        versions = self._configs.get(tax_year)
        if not versions:
            raise TaxConfigurationError(f"No tax table registered for {tax_year}")
        return versions[-1]

    def for_date(self, on: Union[date, str]) -> TaxConfig:
        """Table in force on a given date: the latest version effective on or before it."""
        if isinstance(on, str):
            try:
                on = date.fromisoformat(on)
            except ValueError as e:
                raise TaxConfigurationError(f"Invalid date: {on!r}") from e
        candidates = [c for c in self._configs.get(on.year, []) if c.effective_date <= on]
        if not candidates:
            raise TaxConfigurationError(f"No tax table in force on {on.isoformat()}")
        return max(candidates, key=lambda c: c.effective_date)

    def load_file(self, path: Union[str, Path], replace: bool = False) -> List[TaxConfig]:
        """Load one table or a list of tables from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise TaxConfigurationError(f"Tax table file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data: Any = json.load(f)
        except json.JSONDecodeError as e:
            raise TaxConfigurationError(f"Tax table file {path} is not valid JSON: {e}") from e
        records = data if isinstance(data, list) else [data]
        loaded = [TaxConfig.from_dict(r) for r in records]
        for config in loaded:
            self.register(config, replace=replace)
        return loaded


def default_registry() -> TaxConfigRegistry:
    registry = TaxConfigRegistry(BUILTIN_TABLES)
    if settings.TAX_TABLES_PATH:
        registry.load_file(settings.TAX_TABLES_PATH, replace=True)
    return registry
