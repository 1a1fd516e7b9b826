import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backoffice.api.webhooks import router as webhooks_router
from backoffice.core.config import settings
from backoffice.wiring.dependencies import get_container


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("chat_id", "flow", "action", "booking_id", "message_id", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # missing credentials raise ConfigurationError here, before any webhook is served
    container = get_container()
    logging.getLogger(__name__).info("Back office ready (whatsapp enabled=%s)", container["whatsapp"] is not None)
    yield


app = FastAPI(title="Booking Back Office", version="1.0.0", lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
