from __future__ import annotations

import random
import re
import string
from decimal import Decimal, InvalidOperation

from backoffice.application.exceptions import InvalidInputError

BOOKING_ID_ALPHABET = string.ascii_uppercase + string.digits
BOOKING_ID_LENGTH = 6

_PHONE_NOISE = re.compile(r"[\s+\-]")


def normalize_phone_number(phone: str) -> str:
    """Strip spaces, "+" and "-" so lookups ignore punctuation."""
    return _PHONE_NOISE.sub("", phone or "")


def is_skip(text: str) -> bool:
    return (text or "").strip().lower() == "skip"


def is_none(text: str) -> bool:
    return (text or "").strip().lower() == "none"


def parse_amount(text: str, label: str = "amount") -> Decimal:
    raw = (text or "").strip()
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        raise InvalidInputError(label, raw) from None
    if not value.is_finite():
        raise InvalidInputError(label, raw)
    return value


def format_amount(value: Decimal | None) -> str:
    if value is None:
        return "0"
    normalized = value.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


def generate_booking_id(rng: random.Random | None = None) -> str:
    chooser = rng or random
    return "".join(chooser.choice(BOOKING_ID_ALPHABET) for _ in range(BOOKING_ID_LENGTH))
