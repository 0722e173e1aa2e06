import secrets
from datetime import datetime, timezone
from typing import Callable

CERT_UID_PREFIX = "CERT-"

Clock = Callable[[], datetime]
TokenSource = Callable[[int], str]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_certificate_uid(
    now: datetime | None = None,
    token_hex: TokenSource = secrets.token_hex,
) -> str:
    """
    CERT-{epoch millis, 12 hex}{64 random bits, 16 hex}, upper-case.

    The time prefix keeps ids roughly ordered; the random tail makes an id
    impossible to derive from a neighbouring one.
    """
    now = now or utcnow()
    millis = int(now.timestamp() * 1000)
    return f"{CERT_UID_PREFIX}{millis:012X}{token_hex(8).upper()}"
