from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ServiceOption:
    id: str
    name: str


PRESET_AMOUNTS: tuple[Decimal, ...] = tuple(Decimal(v) for v in ("200", "250", "300", "400", "500"))
DURATION_OPTIONS: tuple[int, ...] = (60, 90, 120, 150, 180)
PAYMENT_OPTIONS: dict[str, str] = {"cash": "Cash", "online/bank": "Online/Bank"}
PROFIT_OPTIONS: dict[str, str] = {"shared": "Shared", "only_ranjeet": "Only Ranjeet"}
SHARED_PROFIT = "Shared"

SERVICES: tuple[ServiceOption, ...] = (
    ServiceOption("thai", "Thai"),
    ServiceOption("deep_tissue", "Deep Tissue"),
    ServiceOption("swedish", "Swedish"),
    ServiceOption("anti_cellulite", "Anti-Cellulite"),
    ServiceOption("hot_candle", "Hot Candle"),
    ServiceOption("maderotherapy", "Maderotherapy"),
    ServiceOption("balinese", "Balinese"),
    ServiceOption("lymphatic", "Lymphatic"),
    ServiceOption("sports", "Sports"),
)

PRESET_TIMES: tuple[str, ...] = (
    "10:00 AM",
    "11:00 AM",
    "12:00 PM",
    "1:00 PM",
    "2:00 PM",
    "3:00 PM",
    "4:00 PM",
    "5:00 PM",
    "6:00 PM",
    "7:00 PM",
    "8:00 PM",
    "9:00 PM",
    "10:00 PM",
)

GENDERS: dict[str, str] = {"male": "Male", "female": "Female", "skip": ""}


def find_service(service_id: str) -> ServiceOption | None:
    for service in SERVICES:
        if service.id == service_id:
            return service
    return None


def find_staff(options: list[str], token_arg: str) -> str | None:
    """Resolve a lower-cased staff token back to the configured display name."""
    for name in options:
        if name.lower().replace(" ", "_") == token_arg.lower():
            return name
    return None
