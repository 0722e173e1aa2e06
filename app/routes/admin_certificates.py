from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_auth_subject
from app.controllers.certificates_controller import certificate_stats
from app.schemas.certificate import CertificateStatsOut

router = APIRouter(prefix="/admin/certificates", tags=["Admin - Certificates"])


@router.get("/stats", response_model=CertificateStatsOut)
async def certificates_stats(
    db: AsyncSession = Depends(get_db),
    subject: str = Depends(get_auth_subject),
):
    return await certificate_stats(db)
