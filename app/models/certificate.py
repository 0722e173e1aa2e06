from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CertificateTemplate(Base):
    __tablename__ = "certificate_templates"
    __table_args__ = (UniqueConstraint("event_id", name="uq_certificate_template_event"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[str] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)

    # object key of the background image; placement config sits next to it as .json
    template_path: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    event = relationship("Event")


class GeneratedCertificate(Base):
    __tablename__ = "generated_certificates"
    __table_args__ = (UniqueConstraint("cert_uid", name="uq_generated_certificate_uid"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cert_uid: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # SET NULL: a certificate stays verifiable after its event/student is removed
    student_id: Mapped[str | None] = mapped_column(
        ForeignKey("students.id", ondelete="SET NULL"), nullable=True, index=True
    )
    event_id: Mapped[str | None] = mapped_column(
        ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True
    )

    certificate_path: Mapped[str] = mapped_column(Text, nullable=False)
    downloads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    student = relationship("Student")
    event = relationship("Event")
