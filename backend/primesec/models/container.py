from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class Container(Base):
    __tablename__ = "containers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20))  # "Project" | "Application" | "System" | "Service"
    # Derived from the container's issues; never written directly by clients.
    risk_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    external_system: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
