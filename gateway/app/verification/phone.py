"""Kenyan phone number normalisation for SMS verification."""

import re
from typing import Optional

_SEPARATORS = re.compile(r"[\s\-()]")
_LOCAL = re.compile(r"^(?:\+254|254|0)([17][0-9]{8})$")


def normalize_phone_number(phone: str) -> Optional[str]:
    """
    Normalise a Kenyan mobile or landline number to +254XXXXXXXXX.

    Accepts the +254, 254 and 0 prefixes, with spaces, dashes or
    parentheses between digits.

    Returns:
        The international form, or None if the number is not recognised

    Example:
        >>> normalize_phone_number("0712 345 678")
        '+254712345678'
    """
    if not phone:
        return None

    match = _LOCAL.match(_SEPARATORS.sub("", phone))
    if not match:
        return None
    return f"+254{match.group(1)}"
