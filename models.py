from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Index, Integer, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


class Program(Base):
    __tablename__ = "programs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    program_code: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    university: Mapped[str] = mapped_column(String(255), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(40), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    faculty: Mapped[str] = mapped_column(String(255), nullable=False)
    program_name: Mapped[str] = mapped_column(String(255), nullable=False)
    aps_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # [{"name": ..., "level": 1-7, "is_required": bool, "alternatives": [...]}]
    subject_requirements: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("aps_required >= 0 and aps_required <= 42", name="ck_programs_aps_required"),
        Index("ix_programs_active", "active"),
        Index("ix_programs_abbreviation", "abbreviation"),
    )


class EligibilityCheck(Base):
    __tablename__ = "eligibility_checks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    program_code: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    total_aps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_eligible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    inputs_json: Mapped[dict] = mapped_column(JSONType, nullable=False)
    results_json: Mapped[dict] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_eligibility_checks_program_code", "program_code"),)
