"""create event and certificate tables

Revision ID: 001
Revises: 
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id",          sa.String(128), primary_key=True),
        sa.Column("name",        sa.String(255), nullable=False),
        sa.Column("email",       sa.String(255), nullable=True),
        sa.Column("roll_number", sa.String(64),  nullable=True),
        sa.Column("created_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_students_email", "students", ["email"])

    op.create_table(
        "events",
        sa.Column("id",                          sa.String(32),  primary_key=True),
        sa.Column("title",                       sa.String(255), nullable=False),
        sa.Column("description",                 sa.Text(),      nullable=True),
        sa.Column("date",                        sa.Date(),      nullable=False),
        sa.Column("start_time",                  sa.String(5),   nullable=False),
        sa.Column("end_time",                    sa.String(5),   nullable=False),
        sa.Column("venue",                       sa.String(255), nullable=False),
        sa.Column("organizer_id",                sa.String(128), nullable=False),
        sa.Column("organizer_name",              sa.String(255), nullable=False),
        sa.Column("status",                      sa.String(20),  nullable=False, server_default="pending"),
        sa.Column("event_type",                  sa.String(20),  nullable=False, server_default="free"),
        sa.Column("entry_fee",                   sa.Numeric(10, 2), nullable=True),
        sa.Column("poster_base64",               sa.Text(),      nullable=True),
        sa.Column("certificate_template_base64", sa.Text(),      nullable=True),
        sa.Column("template_config",             sa.JSON(),      nullable=True),
        sa.Column("participant_count",           sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
    )
    op.create_index("ix_events_date_venue", "events", ["date", "venue"])

    op.create_table(
        "venue_day_locks",
        sa.Column("id",    sa.Integer(),   primary_key=True, autoincrement=True),
        sa.Column("date",  sa.Date(),      nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.UniqueConstraint("date", "venue", name="uq_venue_day"),
    )

    op.create_table(
        "event_attendance",
        sa.Column("id",         sa.Integer(),   primary_key=True, autoincrement=True),
        sa.Column("event_id",   sa.String(32),  sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.String(128), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("attended",   sa.Boolean(),   nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
        sa.UniqueConstraint("event_id", "student_id", name="uq_attendance_event_student"),
    )

    op.create_table(
        "certificate_templates",
        sa.Column("id",            sa.Integer(),  primary_key=True, autoincrement=True),
        sa.Column("event_id",      sa.String(32), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("template_path", sa.Text(),     nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("event_id", name="uq_certificate_template_event"),
    )

    op.create_table(
        "generated_certificates",
        sa.Column("id",               sa.Integer(),   primary_key=True, autoincrement=True),
        sa.Column("cert_uid",         sa.String(64),  nullable=False),
        sa.Column("student_id",       sa.String(128), sa.ForeignKey("students.id", ondelete="SET NULL"), nullable=True),
        sa.Column("event_id",         sa.String(32),  sa.ForeignKey("events.id", ondelete="SET NULL"), nullable=True),
        sa.Column("certificate_path", sa.Text(),      nullable=False),
        sa.Column("downloads",        sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("cert_uid", name="uq_generated_certificate_uid"),
    )
    op.create_index("ix_generated_certificates_cert_uid", "generated_certificates", ["cert_uid"])
    op.create_index("ix_generated_certificates_student_id", "generated_certificates", ["student_id"])
    op.create_index("ix_generated_certificates_event_id", "generated_certificates", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_generated_certificates_event_id", table_name="generated_certificates")
    op.drop_index("ix_generated_certificates_student_id", table_name="generated_certificates")
    op.drop_index("ix_generated_certificates_cert_uid", table_name="generated_certificates")
    op.drop_table("generated_certificates")
    op.drop_table("certificate_templates")
    op.drop_table("event_attendance")
    op.drop_table("venue_day_locks")
    op.drop_index("ix_events_date_venue", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_students_email", table_name="students")
    op.drop_table("students")
