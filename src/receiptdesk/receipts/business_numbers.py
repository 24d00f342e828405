"""Australian Business Number (ABN) validation."""

import re

ABN_WEIGHTS = (10, 1, 3, 5, 7, 9, 11, 13, 15, 17, 19)

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_abn(value: str) -> str:
    """Strip spaces and punctuation from an ABN."""
    return _NON_DIGITS.sub("", value)


def abn_error(value: str | None) -> str | None:
    """
    Return why an ABN is invalid, or None when it is valid or blank.

    Subtract 1 from the first digit, weight the 11 digits and the sum
    must be divisible by 89.
    """
    if not value or not value.strip():
        return None

    digits = [int(ch) for ch in normalize_abn(value)]
    if len(digits) != 11:
        return "ABN must be 11 digits"

    digits[0] -= 1
    if digits[0] < 0:
        return "invalid ABN format"

    total = sum(d * w for d, w in zip(digits, ABN_WEIGHTS))
    if total % 89 != 0:
        return "invalid ABN check digit"
    return None


def is_valid_abn(value: str | None) -> bool:
    return abn_error(value) is None
