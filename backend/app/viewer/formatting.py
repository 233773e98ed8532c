import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


def format_phone_number(raw: str) -> str:
    """Format North American numbers; anything else is returned unchanged.

    >>> format_phone_number("5551234567")
    '(555) 123-4567'
    >>> format_phone_number("15551234567")
    '+1 (555) 123-4567'
    >>> format_phone_number("123")
    '123'
    """
    digits = _NON_DIGITS.sub("", raw)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits[0] == "1":
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return raw


def format_duration(seconds: Optional[int]) -> str:
    """Per-call duration as M:SS."""
    if seconds is None:
        return "N/A"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def format_total_duration(seconds: int) -> str:
    """Total talk time as 'Hh Mm Ss'."""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"
