# usopen_live/utils/misc_utils.py
import math
from typing import Any, Optional

# Offset from an ASCII capital letter to its regional indicator symbol
REGIONAL_INDICATOR_OFFSET = 0x1F1E6 - ord("A")

ADVANTAGE_SENTINELS = {"AD", "ADV"}
ADVANTAGE_POINTS = 50


def to_flag_emoji(country_code: Optional[str]) -> str:
    """Flag emoji for a two-letter country code, or '' for anything else."""
    if not isinstance(country_code, str) or len(country_code) != 2:
        return ""
    code = country_code.upper()
    if not (code.isascii() and code.isalpha()):
        return ""
    return "".join(chr(REGIONAL_INDICATOR_OFFSET + ord(c)) for c in code)


def parse_number(value: Any) -> Optional[float]:
    """Finite float from a feed value (number or numeric string), else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    number = parse_number(value)
    if number is None:
        return default
    return int(number)


def coerce_seed(value: Any) -> Optional[int]:
    """Seeds arrive as ints or strings ("4"); anything not a positive whole number is dropped."""
    number = parse_number(value)
    if number is None or number <= 0 or not number.is_integer():
        return None
    return int(number)


def parse_points(value: Any) -> Optional[int]:
    """Point score of a game in progress; advantage maps to 50."""
    if isinstance(value, str) and value.strip().upper() in ADVANTAGE_SENTINELS:
        return ADVANTAGE_POINTS
    return parse_int(value)
