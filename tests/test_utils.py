import logging
import logging.handlers
from decimal import Decimal
from gktax.core.utils import setup_logging, audit_log, amount_errors, format_currency, round_money, to_decimal

def test_setup_logging_idempotent(audit_dir):
    tenant = "tmptest"
    logger1 = setup_logging(tenant)
    handlers_before = len(logger1.handlers)
    logger2 = setup_logging(tenant)
    handlers_after = len(logger2.handlers)
    assert handlers_before == handlers_after
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger2.handlers)

def test_audit_log_appends(audit_dir):
    audit_log("t1", "me", "vat.return", "vat_return", "2025-Q1")
    entry = audit_log("t1", "me", "vat.return", "vat_return", "2025-Q2", {"due": 10})
    assert entry["diff"] == {"due": 10}
    assert len((audit_dir / "t1_audit.jsonl").read_text().splitlines()) == 2

def test_money_helpers():
    assert round_money(Decimal("2.675")) == Decimal("2.68")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("1,250.50") == Decimal("1250.50")
    assert format_currency(1234.5) == "GYD 1,234.50"
    assert format_currency("1000", "USD") == "USD 1,000.00"

def test_amount_errors():
    assert amount_errors(Decimal("1250.50"), "Amount") == []
    assert amount_errors(Decimal("0E-10"), "Amount") == []
    assert amount_errors(Decimal("12.345"), "Amount") == ["Amount cannot have more than 2 decimal places"]
    assert amount_errors(Decimal("1e15"), "Amount") == ["Amount is too large"]
    assert amount_errors(Decimal("-1e15"), "Amount") == ["Amount is too large"]
