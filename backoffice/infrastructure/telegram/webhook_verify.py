from __future__ import annotations

import hmac
import logging

logger = logging.getLogger(__name__)


def verify_secret_token(header_value: str | None, expected_secret: str | None, env: str) -> bool:
    """Check X-Telegram-Bot-Api-Secret-Token against the secret set with setWebhook."""
    if not expected_secret:
        if env.lower() not in {"dev", "local"}:
            logger.warning("TELEGRAM_WEBHOOK_SECRET not set; accepting update unverified")
        return True

    if not header_value:
        return False
    return hmac.compare_digest(header_value, expected_secret)
