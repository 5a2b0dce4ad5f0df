from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class SecurityReview(Base):
    __tablename__ = "security_reviews"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    document_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    document_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # "PDF" | "DOCX" | ...
    status: Mapped[str] = mapped_column(String(20), default="Pending", index=True)
    ai_analysis_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_analysis_results: Mapped[dict | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )
    container_id: Mapped[int | None] = mapped_column(ForeignKey("containers.id"), nullable=True, index=True)
    reviewer_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
