from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class SecurityControl(Base):
    __tablename__ = "security_controls"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    control_type: Mapped[str] = mapped_column(String(50), index=True)
    implementation_status: Mapped[str] = mapped_column(String(20), index=True)  # "Existing" | "Planned" | "NotSpecified"
    effectiveness_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    framework_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)  # NIST, ISO, ...
    control_family: Mapped[str | None] = mapped_column(String(100), nullable=True)
    implementation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    testing_frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_tested: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    container_id: Mapped[int] = mapped_column(ForeignKey("containers.id"), index=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
