from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from primesec.database import Base, utcnow


class ArchitectureComponent(Base):
    __tablename__ = "architecture_components"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    component_type: Mapped[str] = mapped_column(String(50), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    technology_stack: Mapped[str | None] = mapped_column(String(200), nullable=True)
    security_domain: Mapped[str | None] = mapped_column(String(100), nullable=True)
    trust_boundary: Mapped[str | None] = mapped_column(String(100), nullable=True)
    network_zone: Mapped[str | None] = mapped_column(String(100), nullable=True)
    data_classification: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Diagram coordinates
    position_x: Mapped[float | None] = mapped_column(Float, nullable=True)
    position_y: Mapped[float | None] = mapped_column(Float, nullable=True)
    container_id: Mapped[int] = mapped_column(ForeignKey("containers.id"), index=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
