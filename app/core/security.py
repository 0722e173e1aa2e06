from datetime import datetime, timedelta, timezone
from jose import jwt
from app.core.config import settings


# ── Identity provider tokens ──────────────────────────────────────────
def verify_id_token(token: str) -> dict:
    """
    Verifies an identity-provider token (signature, expiry, and audience /
    issuer when configured) and returns its claims.
    Raises jose.JWTError on any failure.
    """
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options=options,
    )


def create_access_token(subject: str, name: str | None = None, email: str | None = None,
                        expires_minutes: int | None = None, **claims) -> str:
    """
    Mints a token the way the identity provider does. Used by local tooling
    and tests; production tokens come from the provider.

    Payload contains:
      sub   : stable subject id (becomes Student.id)
      name  : display name printed on certificates
      email : optional
      iat / exp
    plus any extra claims (e.g. roll_number)
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if name:
        payload["name"] = name
    if email:
        payload["email"] = email
    payload.update(claims)
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
