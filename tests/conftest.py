import pytest
from gktax.core.config import settings
from gktax.tax.config import TaxConfig
from gktax.tax.tables import GUYANA_2025

@pytest.fixture(autouse=True)
def audit_dir(tmp_path, monkeypatch):
    path = tmp_path / "logs"
    monkeypatch.setattr(settings, "AUDIT_LOG_PATH", str(path))
    return path

@pytest.fixture
def config():
    return GUYANA_2025

@pytest.fixture
def make_config():
    """Build a variant of the 2025 table, e.g. make_config('paye', overtime_tax_free_limit='10000')."""
    def _make(section=None, **overrides):
        data = GUYANA_2025.to_dict()
        if section:
            data[section].update(overrides)
        else:
            data.update(overrides)
        return TaxConfig.from_dict(data)
    return _make
