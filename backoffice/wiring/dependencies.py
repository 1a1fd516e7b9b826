from functools import lru_cache
import logging
from decimal import Decimal

from backoffice.core.config import settings
from backoffice.application.exceptions import ConfigurationError
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.application.ports.record_store import RecordStores
from backoffice.application.use_cases.flow_base import FlowContext
from backoffice.application.use_cases.flow_engine import FlowEngine
from backoffice.application.use_cases.mirror_publisher import MirrorPublisher
from backoffice.application.use_cases.reports import ReportsUseCase
from backoffice.application.use_cases.send_reply import SendReplyUseCase
from backoffice.domain.entities.booking import BookingSource
from backoffice.infrastructure.gateway.mock_gateway import MockChatGateway
from backoffice.infrastructure.scheduling.timer_scheduler import TimerScheduler
from backoffice.infrastructure.store.json_store import json_record_stores
from backoffice.infrastructure.store.memory_store import memory_record_stores
from backoffice.infrastructure.store.session_store import InMemorySessionStore
from backoffice.infrastructure.telegram.telegram_client import TelegramClient
from backoffice.infrastructure.telegram.telegram_gateway import TelegramGateway
from backoffice.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from backoffice.infrastructure.whatsapp.whatsapp_gateway import WhatsAppGateway

LOCAL_MIRROR_CHAT_ID = "local-mirror"

logger = logging.getLogger(__name__)


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_record_stores() -> RecordStores:
    provider = settings.STORE_PROVIDER.lower()
    if provider == "memory":
        return memory_record_stores()
    if provider == "json":
        return json_record_stores(settings.STORE_DATA_DIR)
    raise ConfigurationError(f"Unknown STORE_PROVIDER {settings.STORE_PROVIDER!r}; use 'memory' or 'json'.")


@lru_cache
def get_telegram_gateway() -> ChatGatewayPort:
    logger.info("TELEGRAM_BOT_TOKEN present=%s", bool(settings.TELEGRAM_BOT_TOKEN))
    logger.info("ENV=%s", settings.ENV)

    if not settings.TELEGRAM_BOT_TOKEN:
        if _is_local():
            logger.info("Using MockChatGateway (token missing, ENV=dev/local)")
            return MockChatGateway()
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is required outside dev/local.")

    client = TelegramClient(bot_token=settings.TELEGRAM_BOT_TOKEN, api_base=settings.TELEGRAM_API_BASE)
    return TelegramGateway(client=client)


@lru_cache
def get_whatsapp_gateway() -> ChatGatewayPort | None:
    if not (settings.WHATSAPP_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID):
        logger.info("WhatsApp channel disabled (credentials missing)")
        return None
    client = WhatsAppClient(
        token=settings.WHATSAPP_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_version=settings.WHATSAPP_GRAPH_API_VERSION,
    )
    return WhatsAppGateway(client=client)


def get_mirror_chat_id() -> str:
    if settings.TELEGRAM_RECEIVE_CHAT_ID:
        return settings.TELEGRAM_RECEIVE_CHAT_ID
    if _is_local():
        return LOCAL_MIRROR_CHAT_ID
    raise ConfigurationError("TELEGRAM_RECEIVE_CHAT_ID is required outside dev/local.")


@lru_cache
def get_mirror_publisher() -> MirrorPublisher:
    stores = get_record_stores()
    return MirrorPublisher(
        gateway=get_telegram_gateway(),
        bookings=stores.bookings,
        clients=stores.clients,
        receiver_chat_id=get_mirror_chat_id(),
        currency=settings.CURRENCY,
    )


@lru_cache
def get_reports() -> ReportsUseCase:
    return ReportsUseCase(
        bookings=get_record_stores().bookings,
        currency=settings.CURRENCY,
        party_a=settings.PROFIT_PARTY_A,
        party_b=settings.PROFIT_PARTY_B,
        party_a_deduction=Decimal(settings.PARTY_A_DEDUCTION),
        party_b_deduction=Decimal(settings.PARTY_B_DEDUCTION),
        party_a_deduction_label=settings.PARTY_A_DEDUCTION_LABEL,
        party_b_deduction_label=settings.PARTY_B_DEDUCTION_LABEL,
    )


def build_engine(gateway: ChatGatewayPort, source: BookingSource) -> FlowEngine:
    """One engine per channel: its own sessions and cleanup timers, shared records and mirror."""
    sessions = InMemorySessionStore(gateway=gateway, scheduler=TimerScheduler())
    ctx = FlowContext(
        stores=get_record_stores(),
        sessions=sessions,
        reply=SendReplyUseCase(gateway=gateway, sessions=sessions),
        mirror=get_mirror_publisher(),
        reports=get_reports(),
        staff_options=list(settings.STAFF_OPTIONS),
        currency=settings.CURRENCY,
        cleanup_delay=settings.CLEANUP_DELAY_SECONDS,
        earnings_cleanup_delay=settings.EARNINGS_CLEANUP_DELAY_SECONDS,
        booking_id_attempts=settings.BOOKING_ID_ATTEMPTS,
        source=source,
    )
    return FlowEngine(ctx, gateway)


@lru_cache
def get_telegram_engine() -> FlowEngine:
    return build_engine(get_telegram_gateway(), BookingSource.STAFF)


@lru_cache
def get_whatsapp_engine() -> FlowEngine | None:
    gateway = get_whatsapp_gateway()
    if gateway is None:
        return None
    # bookings typed in by customers start as Pending until staff confirm them
    return build_engine(gateway, BookingSource.CLIENT)


def get_container() -> dict[str, object]:
    return {
        "stores": get_record_stores(),
        "mirror": get_mirror_publisher(),
        "telegram": get_telegram_engine(),
        "whatsapp": get_whatsapp_engine(),
    }
