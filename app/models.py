"""
Database models and SQLAlchemy setup for the construction schedule engine.
Dates are stored as DATE columns and exposed as ISO yyyy-MM-dd strings at the API edge.
"""
from datetime import datetime
from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean,
    DateTime, Date, Text, ForeignKey, Index
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

DATABASE_URL = "sqlite:///./schedule.db"
engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# =============================================================================
# Project
# =============================================================================

class Project(Base):
    """
    A self-build project.
    Owns its schedule rows and alerts; deleting it deletes both.
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    current_stage = Column(String(50), nullable=True)
    target_start_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    schedules = relationship("ProjectSchedule", back_populates="project", cascade="all, delete-orphan")
    alerts = relationship("ScheduleAlertEntity", back_populates="project", cascade="all, delete-orphan")


# =============================================================================
# Schedule rows (one per phase instance, plus materialized manual tasks)
# =============================================================================

class ProjectSchedule(Base):
    """
    Dated schedule row.
    INVARIANT: start_date <= end_date
    Manual tasks use step_id 'manual-<hex>' and is_manual_date = True.
    """
    __tablename__ = "project_schedules"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    step_id = Column(String(100), nullable=False)
    step_name = Column(String(200), nullable=False)
    trade_type = Column(String(50), nullable=False, default="autre")
    trade_color = Column(String(20), nullable=True)
    estimated_days = Column(Integer, nullable=False, default=1)
    actual_days = Column(Integer, nullable=True)  # Set on completion
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, pending, in_progress, completed

    supplier_schedule_lead_days = Column(Integer, default=0)
    fabrication_lead_days = Column(Integer, default=0)
    measurement_required = Column(Boolean, default=False)
    measurement_after_step_id = Column(String(100), nullable=True)
    measurement_notes = Column(Text, nullable=True)

    is_manual_date = Column(Boolean, default=False)  # User pinned, exempt from re-chaining
    is_overlay = Column(Boolean, default=False)  # Visual-only manual task
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="schedules")
    alerts = relationship("ScheduleAlertEntity", back_populates="schedule", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_project_schedules_project_dates", "project_id", "start_date", "end_date"),
    )


# =============================================================================
# Alerts
# =============================================================================

class ScheduleAlertEntity(Base):
    """Supplier-call / fabrication-start reminder for a schedule row."""
    __tablename__ = "schedule_alerts"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("project_schedules.id"), nullable=False, index=True)
    alert_type = Column(String(30), nullable=False)  # supplier_call, fabrication_start
    alert_date = Column(Date, nullable=False)
    message = Column(Text, nullable=False)
    is_dismissed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    project = relationship("Project", back_populates="alerts")
    schedule = relationship("ProjectSchedule", back_populates="alerts")


def init_db():
    """Initialize the database and create all tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Database session dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
