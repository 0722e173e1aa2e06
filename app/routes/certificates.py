# app/routes/certificates.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cert_ids import Clock, TokenSource
from app.core.cert_storage import ObjectStorage, get_storage
from app.core.database import get_db
from app.core.dependencies import get_clock, get_current_student, get_token_source

from app.models.student import Student
from app.schemas.certificate import CertificateIssuedOut, GenerateCertificateIn, TemplateUploadOut
from app.controllers.certificates_controller import issue_certificate
from app.controllers.templates_controller import upload_template

router = APIRouter(prefix="/certificates", tags=["Certificates"])


@router.post("/upload", response_model=TemplateUploadOut, status_code=201)
async def upload_certificate_template(
    certificate: UploadFile = File(...),
    eventId: str = Form(...),
    templateConfig: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
):
    """
    Multipart upload of a certificate background.
    - certificate: jpeg/png/gif image
    - eventId: event the template belongs to
    - templateConfig: optional JSON placement map, e.g.
      {"studentName": {"x": 0.5, "y": 0.4, "fontSize": 32}}
    """
    data = await certificate.read()
    out = await upload_template(
        db,
        storage,
        event_id=eventId,
        filename=certificate.filename or "",
        content_type=certificate.content_type,
        data=data,
        template_config=templateConfig,
        clock=clock,
    )
    return {"success": True, "message": "Certificate uploaded successfully", "data": out}


@router.post("/generate", response_model=CertificateIssuedOut)
async def generate_certificate(
    payload: GenerateCertificateIn,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    student: Student = Depends(get_current_student),
    clock: Clock = Depends(get_clock),
    token_hex: TokenSource = Depends(get_token_source),
):
    descriptor = await issue_certificate(
        db,
        storage,
        event_id=payload.event_id,
        student=student,
        roll_number=payload.roll_number,
        clock=clock,
        token_hex=token_hex,
    )
    return {"success": True, "data": descriptor}
