from pydantic import BaseModel, Field, TypeAdapter
from pydantic.config import ConfigDict
from datetime import datetime
from typing import Optional


# ------------------ TEMPLATE CONFIG ------------------

class FieldPlacement(BaseModel):
    """Where one dynamic field is drawn on a template, in page-relative units."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    x: float = Field(..., ge=0, le=1)
    y: float = Field(..., ge=0, le=1)
    font_size: Optional[float] = Field(None, alias="fontSize", gt=0, le=400)
    color: Optional[str] = Field(None, pattern=r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


TemplateConfig = dict[str, FieldPlacement]

template_config_adapter = TypeAdapter(TemplateConfig)


# ------------------ ISSUANCE ------------------

class GenerateCertificateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    event_id: str = Field(..., alias="eventId", min_length=1)
    roll_number: Optional[str] = Field(None, alias="rollNumber")


class StudentGenerateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    roll_number: Optional[str] = Field(None, alias="rollNumber")


class GeneratedCertificateOut(BaseModel):
    id: int
    cert_uid: str
    student_id: Optional[str] = None
    event_id: Optional[str] = None
    certificate_path: str
    downloads: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class CertificateDescriptor(BaseModel):
    certificateId: str
    pdfUrl: str
    generatedAt: datetime
    certificate: GeneratedCertificateOut
    download_url: str


class CertificateIssuedOut(BaseModel):
    success: bool = True
    data: CertificateDescriptor


class StudentCertificateEventOut(BaseModel):
    id: str
    title: str
    date: Optional[str] = None
    venue: Optional[str] = None


class StudentCertificateOut(GeneratedCertificateOut):
    download_url: str
    event: Optional[StudentCertificateEventOut] = None


# ------------------ VERIFY ------------------

class CertificateVerifyData(BaseModel):
    studentName: str
    eventName: str
    issueDate: str
    certificateUid: str
    downloadUrl: str


class CertificateVerifyOut(BaseModel):
    success: bool = True
    valid: bool
    data: Optional[CertificateVerifyData] = None
    message: Optional[str] = None


# ------------------ UPLOAD ------------------

class TemplateUploadData(BaseModel):
    imageUrl: str
    filename: str
    path: str


class TemplateUploadOut(BaseModel):
    success: bool = True
    message: str = "Certificate uploaded successfully"
    data: TemplateUploadData


# ------------------ ADMIN ------------------

class CertificateStatsOut(BaseModel):
    total_students: int
    total_events: int
    certificates_generated: int
