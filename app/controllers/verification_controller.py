from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.cert_sign import verify_sig
from app.core.cert_storage import public_url
from app.models.certificate import GeneratedCertificate

UNKNOWN_STUDENT = "Unknown Student"
UNKNOWN_EVENT = "Unknown Event"


async def verify_certificate(db: AsyncSession, cert_uid: str, sig: Optional[str] = None) -> dict:
    """
    Public lookup by certificate id. Never mutates, never raises for an
    unknown id: "not found" is a normal negative verdict.

    `sig` comes from the QR link; when present it must match the id.
    """
    if sig is not None and not verify_sig(cert_uid, sig):
        return {"success": True, "valid": False, "message": "Signature mismatch"}

    stmt = (
        select(GeneratedCertificate)
        .options(selectinload(GeneratedCertificate.student), selectinload(GeneratedCertificate.event))
        .where(GeneratedCertificate.cert_uid == cert_uid)
    )
    cert = (await db.execute(stmt)).scalar_one_or_none()

    if not cert:
        return {"success": True, "valid": False, "message": "Certificate not found"}

    s = cert.student
    e = cert.event

    return {
        "success": True,
        "valid": True,
        "data": {
            "studentName": getattr(s, "name", None) or UNKNOWN_STUDENT,
            "eventName": getattr(e, "title", None) or UNKNOWN_EVENT,
            "issueDate": cert.created_at.date().isoformat(),
            "certificateUid": cert.cert_uid,
            "downloadUrl": public_url(cert.certificate_path),
        },
    }
