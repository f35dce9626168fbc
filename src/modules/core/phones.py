"""Phone number normalisation for storage and WhatsApp delivery.

Numbers are kept as digits only with the Brazilian ``55`` country code.
"""

from __future__ import annotations

import re

BRAZIL_COUNTRY_CODE = "55"
_LOCAL_AREA_CODES = ("11", "34")


def sanitize_phone(value: str | None) -> str:
    """Strip formatting and prefix the country code where it is missing.

    - 11 digits in a local area code gain ``55``.
    - 13 digits already starting with ``55`` are kept.
    - Anything longer than 8 digits not starting with ``55`` gains ``55``.
    - Shorter input is returned as bare digits.
    """
    if not value:
        return ""
    digits = re.sub(r"\D", "", value)
    if len(digits) == 11 and digits.startswith(_LOCAL_AREA_CODES):
        return BRAZIL_COUNTRY_CODE + digits
    if len(digits) == 13 and digits.startswith(BRAZIL_COUNTRY_CODE):
        return digits
    if len(digits) > 8 and not digits.startswith(BRAZIL_COUNTRY_CODE):
        return BRAZIL_COUNTRY_CODE + digits
    return digits


def format_phone_for_display(value: str | None) -> str:
    """``+55 (11) 98765-4321`` style rendering; ``N/A`` when empty."""
    if not value:
        return "N/A"
    digits = re.sub(r"\D", "", value)
    if len(digits) == 13 and digits.startswith(BRAZIL_COUNTRY_CODE):
        return f"+{digits[:2]} ({digits[2:4]}) {digits[4:9]}-{digits[9:]}"
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    return value
