import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
import json
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Union

from gktax.core.config import settings

CENT = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[int, float, str, Decimal]

# amounts from 10**15 upward are rejected; cent arithmetic on them overflows the decimal context
MAX_AMOUNT_DIGITS = 15

def mkdir_safe(path: str):
    Path(path).mkdir(parents=True, exist_ok=True)

def atomic_write_text(path: str, text: str):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    os.replace(str(tmp), str(p))

def atomic_write_json(path: str, obj: Any):
    atomic_write_text(path, json.dumps(obj, indent=2, default=str))

def setup_logging(tenant_id: str = "system", *, log_level: str = None):
    logger_name = f"{settings.APP_NAME}.{tenant_id}"
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger
    level = log_level or settings.LOG_LEVEL
    logger.setLevel(getattr(logging, level.upper()))
    audit_dir = settings.AUDIT_LOG_PATH
    mkdir_safe(audit_dir)
    logfile = Path(audit_dir) / f"{tenant_id}.log"
    handler = RotatingFileHandler(str(logfile), maxBytes=10_000_000, backupCount=5)
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if os.getenv("DEV", "").lower() in ("1","true","yes"):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)
    logger.propagate = False
    return logger

def audit_log(tenant_id: str, actor: str, action: str, obj_type: str, obj_id: str, diff: Dict = None):
    audit_dir = settings.AUDIT_LOG_PATH
    mkdir_safe(audit_dir)
    path = Path(audit_dir) / f"{tenant_id}_audit.jsonl"
    entry = {
        "ts": int(time.time()),
        "actor": actor,
        "action": action,
        "object_type": obj_type,
        "object_id": obj_id,
        "diff": diff or {}
    }
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, default=str) + "\n")
    return entry

def to_decimal(value: Number) -> Decimal:
    """Convert a user-supplied amount to Decimal, going through str for floats."""
    if isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        result = Decimal(str(value).strip().replace(",", ""))
    if not result.is_finite():
        raise InvalidOperation(f"Not a finite number: {value!r}")
    return result

def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)

def amount_errors(amount: Decimal, label: str) -> List[str]:
    """Range and precision problems with a parsed money amount; sign is left to the caller."""
    if amount and amount.adjusted() >= MAX_AMOUNT_DIGITS:
        return [f"{label} is too large"]
    if amount != amount.quantize(CENT):
        return [f"{label} cannot have more than 2 decimal places"]
    return []

def format_currency(amount: Number, currency: str = None) -> str:
    """Format an amount as e.g. 'GYD 1,234.50'."""
    code = currency or settings.CURRENCY
    return f"{code} {round_money(to_decimal(amount)):,.2f}"
