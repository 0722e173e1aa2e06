# app/routes/student_certificates.py

from urllib.parse import quote

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cert_ids import Clock, TokenSource
from app.core.cert_storage import ObjectStorage, get_storage
from app.core.database import get_db
from app.core.dependencies import get_clock, get_current_student, get_token_source

from app.models.student import Student
from app.schemas.certificate import CertificateIssuedOut, StudentCertificateOut, StudentGenerateIn
from app.controllers.certificates_controller import (
    download_certificate,
    issue_certificate,
    list_student_certificates,
)


router = APIRouter(prefix="/student", tags=["Student - Certificates"])


@router.get("/certificates", response_model=list[StudentCertificateOut])
async def my_certificates(
    db: AsyncSession = Depends(get_db),
    student: Student = Depends(get_current_student),
):
    return await list_student_certificates(db, student)


@router.get("/certificates/{cert_uid}/download")
async def download_my_certificate(
    cert_uid: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    student: Student = Depends(get_current_student),
):
    """
    Streams the caller's own PDF and bumps its download counter.
    - 404: unknown id, or the certificate belongs to someone else
    """
    filename, data = await download_certificate(db, storage, student, cert_uid)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.post("/events/{event_id}/generate-certificate", response_model=CertificateIssuedOut)
async def generate_certificate_for_event(
    event_id: str,
    payload: StudentGenerateIn | None = Body(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    student: Student = Depends(get_current_student),
    clock: Clock = Depends(get_clock),
    token_hex: TokenSource = Depends(get_token_source),
):
    descriptor = await issue_certificate(
        db,
        storage,
        event_id=event_id,
        student=student,
        roll_number=payload.roll_number if payload else None,
        clock=clock,
        token_hex=token_hex,
    )
    return {"success": True, "data": descriptor}
