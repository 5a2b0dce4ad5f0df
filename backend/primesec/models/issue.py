from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class SecurityIssue(Base):
    __tablename__ = "security_issues"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    severity: Mapped[str] = mapped_column(String(10), index=True)
    status: Mapped[str] = mapped_column(String(20), default="Open", index=True)
    classification: Mapped[str] = mapped_column(String(20), index=True)
    hierarchy: Mapped[str] = mapped_column(String(10))  # "Epic" | "Story" | "Task"

    # Weighted combination of the five impact dimensions below.
    risk_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), index=True)
    confidentiality_impact: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    integrity_impact: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    availability_impact: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    compliance_impact: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    third_party_risk: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))

    # Threat-modeling annotations (MITRE ATT&CK, LINDDUN)
    mitre_attack_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mitre_attack_tactic: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mitre_attack_technique: Mapped[str | None] = mapped_column(String(200), nullable=True)
    linddun_category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    attack_complexity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    threat_modeling_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    compensating_controls: Mapped[str | None] = mapped_column(Text, nullable=True)

    container_id: Mapped[int] = mapped_column(ForeignKey("containers.id"), index=True)
    parent_issue_id: Mapped[int | None] = mapped_column(ForeignKey("security_issues.id"), nullable=True)
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_automated_finding: Mapped[bool] = mapped_column(Boolean, default=False)
