"""Project and risk log models."""

from datetime import datetime, date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, DateTime, Enum, ForeignKey, Integer, JSON, Numeric, Uuid
from sqlalchemy.orm import mapped_column, Mapped

from app.models.base import Base, TimestampMixin, enum_values, utc_now
from app.domain.accounting.enums import ProjectStatus, RiskLevel


class Project(TimestampMixin, Base):
    """Construction project. Budget consumption is tracked in ``spent``."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    project_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)

    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, values_callable=enum_values, native_enum=False, length=20),
        default=ProjectStatus.PLANNING,
        nullable=False,
    )

    budget: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    spent: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    planned_progress: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    actual_progress: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class RiskLog(Base):
    """Append-only audit trail of risk assessments."""

    __tablename__ = "risk_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_level: Mapped[RiskLevel] = mapped_column(
        Enum(RiskLevel, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    factors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
