import secrets

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cert_ids import Clock, TokenSource, utcnow
from app.core.database import get_db, insert_or_ignore
from app.core.errors import AuthError
from app.core.security import verify_id_token
from app.models.student import Student


bearer = HTTPBearer(auto_error=False)


async def get_token_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> dict:
    """
    Bearer guard for every "token" route.

    Verifies the token with the identity provider and attaches the caller's
    subject to request.state.auth_subject.
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Token missing")

    try:
        claims = verify_id_token(credentials.credentials)
    except JWTError:
        raise AuthError("Invalid token")

    sub = str(claims.get("sub") or "").strip()
    if not sub:
        raise AuthError("Invalid token")

    claims["sub"] = sub
    request.state.auth_subject = sub
    return claims


async def get_auth_subject(claims: dict = Depends(get_token_claims)) -> str:
    return claims["sub"]


def _claim(claims: dict, key: str) -> str | None:
    """Claim as a stripped string; None when absent or blank."""
    value = claims.get(key)
    if value is None:
        return None
    return str(value).strip() or None


async def get_current_student(
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> Student:
    """
    Student for the token subject.

    First call by a subject provisions the row from the token claims
    (name / email / roll_number); later calls refresh those fields when the
    provider reports new values.
    """
    sub = claims["sub"]
    name = _claim(claims, "name")
    email = _claim(claims, "email")
    roll_number = _claim(claims, "roll_number")

    await insert_or_ignore(
        db,
        Student,
        {
            "id": sub,
            "name": name or email or "Student",
            "email": email,
            "roll_number": roll_number,
            "created_at": utcnow(),
        },
    )

    student = await db.get(Student, sub)
    if student is None:
        raise AuthError("Invalid token")

    if name and student.name != name:
        student.name = name
    if email and student.email != email:
        student.email = email
    if roll_number and student.roll_number != roll_number:
        student.roll_number = roll_number

    return student


# ── Injected capabilities ─────────────────────────────────────────────
# Overridden in tests via app.dependency_overrides.

def get_clock() -> Clock:
    return utcnow


def get_token_source() -> TokenSource:
    return secrets.token_hex
