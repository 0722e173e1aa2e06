from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.controllers.verification_controller import verify_certificate
from app.schemas.certificate import CertificateVerifyOut

router = APIRouter(prefix="/certificates", tags=["Public - Verify"])


@router.get("/verify/{cert_uid}", response_model=CertificateVerifyOut, response_model_exclude_none=True)
async def verify_certificate_api(
    cert_uid: str,
    sig: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    # unknown ids are a normal answer (200, valid=false), not an error
    return await verify_certificate(db, cert_uid, sig)
