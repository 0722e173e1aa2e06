import hmac
import hashlib
from urllib.parse import quote

from app.core.config import settings


def sign_cert(cert_uid: str) -> str:
    """
    Sign certificate identifier (the public CERT-... string).
    Always treat as string.
    """
    key = settings.signing_secret.encode("utf-8")
    msg = str(cert_uid).encode("utf-8")
    return hmac.new(key, msg, hashlib.sha256).hexdigest()


def verify_sig(cert_uid: str, sig: str) -> bool:
    """
    Verify HMAC signature safely.
    """
    if not sig:
        return False

    expected = sign_cert(cert_uid)
    return hmac.compare_digest(expected, sig)


def build_verify_url(cert_uid: str) -> str:
    """Public verify link printed as QR on the certificate."""
    base = settings.PUBLIC_BASE_URL.rstrip("/") + settings.API_PREFIX
    return f"{base}/certificates/verify/{quote(cert_uid)}?sig={sign_cert(cert_uid)}"
