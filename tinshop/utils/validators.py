# utils/validators.py
import re


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    """
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val > 0)


def is_whole_number(x) -> bool:
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and float(val).is_integer())


# ---- Phone numbers ----

_NON_DIGITS = re.compile(r"\D+")


def phone_digits(phone: str | None) -> str:
    return _NON_DIGITS.sub("", phone or "")


def is_valid_phone(phone: str | None, min_digits: int = 11) -> bool:
    """
    True if the number has at least `min_digits` digits (01712345678 -> 11).
    Separators and a leading '+' are ignored.
    """
    return len(phone_digits(phone)) >= min_digits
