import re

def validate_nis_number(nis_number: str) -> bool:
    """NIS numbers are 9 alphanumerics once separators are removed (A-1234567-B or 123456789)."""
    if not nis_number or not isinstance(nis_number, str):
        return False
    cleaned = re.sub(r'[^A-Za-z0-9]', '', nis_number)
    return bool(re.fullmatch(r'[A-Za-z0-9]{9}', cleaned))

def validate_tin_number(tin_number: str) -> bool:
    """TIN is exactly 9 digits"""
    if not tin_number or not isinstance(tin_number, str):
        return False
    cleaned = re.sub(r'\D', '', tin_number)
    return bool(re.fullmatch(r'\d{9}', cleaned))

def validate_vat_registration_number(vat_number: str) -> bool:
    if not isinstance(vat_number, str):
        return False
    return bool(re.fullmatch(r'VAT\d{9}', vat_number.strip()))

def validate_vat_period(period: str) -> bool:
    """Quarterly (2025-Q1) or monthly (2025-M01) return period."""
    if not isinstance(period, str):
        return False
    return bool(re.fullmatch(r'\d{4}-(Q[1-4]|M(0[1-9]|1[0-2]))', period.strip()))
