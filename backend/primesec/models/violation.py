from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class SecurityViolation(Base):
    __tablename__ = "security_violations"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    violation_type: Mapped[str] = mapped_column(String(20), index=True)
    severity: Mapped[str] = mapped_column(String(10), index=True)
    status: Mapped[str] = mapped_column(String(20), default="Open", index=True)
    incident_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    detection_method: Mapped[str | None] = mapped_column(String(200), nullable=True)
    affected_systems: Mapped[str | None] = mapped_column(Text, nullable=True)
    impact_assessment: Mapped[str | None] = mapped_column(Text, nullable=True)
    remediation_steps: Mapped[str | None] = mapped_column(Text, nullable=True)
    container_id: Mapped[int | None] = mapped_column(ForeignKey("containers.id"), nullable=True, index=True)
    related_issue_id: Mapped[int | None] = mapped_column(ForeignKey("security_issues.id"), nullable=True)
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
