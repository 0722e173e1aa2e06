# app/controllers/certificates_controller.py
"""
Certificate issuance and the student's view of their certificates.

Issuance order is render -> store PDF -> insert row -> commit. A failed
commit removes the stored PDF again, so no half-issued certificate is left
behind.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import anyio
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.cert_ids import Clock, TokenSource, generate_certificate_uid
from app.core.cert_pdf import build_default_certificate_pdf, build_templated_certificate_pdf
from app.core.cert_sign import build_verify_url
from app.core.cert_storage import ObjectStorage, generated_key, public_url
from app.core.config import settings
from app.core.errors import AppError, IssuanceError, NotFoundError, RenderError, StorageError
from app.models.certificate import GeneratedCertificate
from app.models.events import Event
from app.models.student import Student
from app.services.templates import resolve_template

logger = logging.getLogger(__name__)


def _descriptor(cert: GeneratedCertificate) -> dict:
    url = public_url(cert.certificate_path)
    return {
        "certificateId": cert.cert_uid,
        "pdfUrl": url,
        "generatedAt": cert.created_at,
        "certificate": cert,
        "download_url": url,
    }


async def _find_existing(db: AsyncSession, event_id: str, student_id: str) -> Optional[GeneratedCertificate]:
    res = await db.execute(
        select(GeneratedCertificate)
        .where(
            GeneratedCertificate.event_id == event_id,
            GeneratedCertificate.student_id == student_id,
        )
        .order_by(GeneratedCertificate.created_at.asc(), GeneratedCertificate.id.asc())
        .limit(1)
    )
    return res.scalar_one_or_none()


async def _render(
    db: AsyncSession,
    storage: ObjectStorage,
    event: Event,
    student: Student,
    cert_uid: str,
    roll_number: Optional[str],
) -> bytes:
    template = await resolve_template(db, storage, event.id)
    verify_url = build_verify_url(cert_uid)

    if template is None:
        build, kwargs = build_default_certificate_pdf, {
            "event_title": event.title,
            "event_date": event.date,
        }
    else:
        build, kwargs = build_templated_certificate_pdf, {
            "template_image": await anyio.to_thread.run_sync(storage.get_bytes, template.template_path),
            "placements": template.placements,
        }

    try:
        return await anyio.to_thread.run_sync(
            lambda: build(
                cert_uid=cert_uid,
                student_name=student.name,
                roll_number=roll_number,
                verify_url=verify_url,
                orientation=settings.CERTIFICATE_ORIENTATION,
                **kwargs,
            )
        )
    except Exception as e:
        raise RenderError(error=str(e)) from e


async def issue_certificate(
    db: AsyncSession,
    storage: ObjectStorage,
    *,
    event_id: str,
    student: Student,
    roll_number: Optional[str] = None,
    clock: Clock,
    token_hex: TokenSource,
) -> dict:
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found", f"No event with id {event_id}")

    # Default mode always issues a fresh certificate, even for a repeat
    # request; CERTIFICATE_ISSUE_MODE=idempotent hands back the first one.
    if settings.issue_idempotent:
        existing = await _find_existing(db, event.id, student.id)
        if existing is not None:
            logger.info("Certificate %s already issued for event %s / student %s",
                        existing.cert_uid, event.id, student.id)
            return _descriptor(existing)

    roll_number = (roll_number or student.roll_number or "").strip() or None
    now: datetime = clock()
    cert_uid = generate_certificate_uid(now, token_hex)
    key = generated_key(f"certificate_{cert_uid}.pdf")

    try:
        pdf_bytes = await _render(db, storage, event, student, cert_uid, roll_number)
    except AppError as e:
        logger.exception("Certificate render failed for event %s / student %s", event.id, student.id)
        raise IssuanceError(error=e.error) from e

    try:
        await anyio.to_thread.run_sync(storage.put_bytes, key, pdf_bytes, "application/pdf")
    except StorageError as e:
        logger.exception("Storing certificate %s failed", cert_uid)
        raise IssuanceError(error=e.error) from e

    cert = GeneratedCertificate(
        cert_uid=cert_uid,
        student_id=student.id,
        event_id=event.id,
        certificate_path=key,
        downloads=0,
        created_at=now,
    )
    db.add(cert)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Persisting certificate %s failed, removing stored PDF", cert_uid)
        try:
            await anyio.to_thread.run_sync(storage.delete, key)
        except StorageError:
            logger.exception("Could not remove orphaned certificate file %s", key)
        raise IssuanceError(error=str(e)) from e

    await db.refresh(cert)
    logger.info("Issued certificate %s for event %s / student %s", cert_uid, event.id, student.id)
    return _descriptor(cert)


# =========================================================
# ---------------------- STUDENT ---------------------------
# =========================================================

async def list_student_certificates(db: AsyncSession, student: Student) -> list[dict]:
    res = await db.execute(
        select(GeneratedCertificate)
        .options(selectinload(GeneratedCertificate.event))
        .where(GeneratedCertificate.student_id == student.id)
        .order_by(GeneratedCertificate.created_at.desc(), GeneratedCertificate.id.desc())
    )

    items = []
    for cert in res.scalars().all():
        ev = cert.event
        items.append(
            {
                "id": cert.id,
                "cert_uid": cert.cert_uid,
                "student_id": cert.student_id,
                "event_id": cert.event_id,
                "certificate_path": cert.certificate_path,
                "downloads": cert.downloads,
                "created_at": cert.created_at,
                "download_url": public_url(cert.certificate_path),
                "event": (
                    {"id": ev.id, "title": ev.title, "date": ev.date.isoformat(), "venue": ev.venue}
                    if ev else None
                ),
            }
        )
    return items


async def download_certificate(
    db: AsyncSession,
    storage: ObjectStorage,
    student: Student,
    cert_uid: str,
) -> tuple[str, bytes]:
    res = await db.execute(
        select(GeneratedCertificate).where(
            GeneratedCertificate.cert_uid == cert_uid,
            GeneratedCertificate.student_id == student.id,
        )
    )
    cert = res.scalar_one_or_none()
    if not cert:
        raise NotFoundError("Certificate not found", f"No certificate {cert_uid} for this student")

    data = await anyio.to_thread.run_sync(storage.get_bytes, cert.certificate_path)

    await db.execute(
        update(GeneratedCertificate)
        .where(GeneratedCertificate.id == cert.id)
        .values(downloads=GeneratedCertificate.downloads + 1)
    )
    await db.commit()
    return f"{cert.cert_uid}.pdf", data


# =========================================================
# ---------------------- ADMIN -----------------------------
# =========================================================

async def certificate_stats(db: AsyncSession) -> dict:
    total_students = (await db.execute(select(func.count(Student.id)))).scalar() or 0
    total_events = (await db.execute(select(func.count(Event.id)))).scalar() or 0
    total_certificates = (await db.execute(select(func.count(GeneratedCertificate.id)))).scalar() or 0

    return {
        "total_students": int(total_students),
        "total_events": int(total_events),
        "certificates_generated": int(total_certificates),
    }
