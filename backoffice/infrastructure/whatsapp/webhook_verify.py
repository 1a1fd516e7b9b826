from __future__ import annotations

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)


def verify_subscription(mode: str | None, token: str | None, challenge: str | None, expected_token: str) -> str | None:
    """Return the hub challenge when Meta's subscription handshake matches our verify token."""
    if mode != "subscribe" or not expected_token:
        return None
    if token and hmac.compare_digest(token, expected_token):
        return challenge or ""
    return None


def verify_signature(body: bytes, signature_header: str | None, app_secret: str | None, env: str) -> bool:
    """Validate X-Hub-Signature-256 ("sha256=<hex>") over the raw request body."""
    if not app_secret:
        if env.lower() in {"dev", "local"}:
            logger.warning("WHATSAPP_APP_SECRET not set; skipping signature check in dev mode")
            return True
        logger.error("Missing WhatsApp app secret for signature verification")
        return False

    if not signature_header or not signature_header.startswith("sha256="):
        return False

    expected = hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header.removeprefix("sha256="))
