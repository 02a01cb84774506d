"""
Schedule API Endpoints - Generation, conflicts, alerts and edits of project schedules.

Implements:
- POST /api/v1/schedules/projects/{project_id}/generate - Rebuild the schedule
- GET /api/v1/schedules/projects/{project_id} - List schedule rows
- GET /api/v1/schedules/projects/{project_id}/conflicts - Trade conflicts by day
- GET /api/v1/schedules/projects/{project_id}/delays - Mandatory delay windows
- GET /api/v1/schedules/projects/{project_id}/active - Rows active on a day
- GET /api/v1/schedules/projects/{project_id}/alerts - Active alerts
- GET /api/v1/schedules/projects/{project_id}/summary - Dashboard counters
- POST /api/v1/schedules/projects/{project_id}/manual-tasks - Add a manual task
- PATCH /api/v1/schedules/{schedule_id} - Update a row (date moves re-chain)
- DELETE /api/v1/schedules/{schedule_id} - Delete a row
- POST /api/v1/schedules/alerts/{alert_id}/dismiss - Dismiss an alert
- GET /api/v1/schedules/estimate - Duration estimate for a stage
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.config import get_phase_catalog
from app.models import get_db
from app.domain.entities.phase import PhaseCatalog
from app.domain.entities.schedule_item import ManualTask
from app.domain.services.project_schedule_service import ProjectScheduleService
from app.domain.exceptions import (
    DomainError,
    ValidationError,
    UnknownPhaseError,
    InvalidScheduleDateRangeError,
    ScheduleItemNotFoundError,
    ScheduleAlertNotFoundError,
)

router = APIRouter()

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# =============================================================================
# Pydantic Models
# =============================================================================

class GenerateRequest(BaseModel):
    """Request model for generating a project schedule."""
    target_start_date: str = Field(..., description="First day of construction (yyyy-MM-dd)")
    current_stage: Optional[str] = Field(None, max_length=50, description="Current project stage")


class ManualTaskCreate(BaseModel):
    """Request model for adding a manual task."""
    description: str = Field(..., min_length=1, max_length=200)
    start_date: str = Field(..., pattern=ISO_DATE_PATTERN, description="yyyy-MM-dd")
    estimated_days: int = Field(1, ge=1, description="Duration in business days")
    linked_step_id: Optional[str] = Field(None, description="Phase the task belongs to")
    is_overlay: bool = Field(False, description="Visual only, ignored by conflicts")
    trade_type: str = Field("autre", max_length=50)
    trade_color: Optional[str] = Field(None, max_length=20)


class ScheduleUpdate(BaseModel):
    """Partial update of a schedule row. A date or duration change re-chains later rows."""
    start_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    end_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    estimated_days: Optional[int] = Field(None, ge=1)
    actual_days: Optional[int] = Field(None, ge=1)
    status: Optional[str] = Field(None, pattern="^(scheduled|pending|in_progress|completed)$")
    notes: Optional[str] = Field(None, max_length=2000)


class ScheduleItemResponse(BaseModel):
    """Response model for a schedule row."""
    id: Optional[int]
    project_id: int
    step_id: str
    step_name: str
    trade_type: str
    trade_color: Optional[str]
    estimated_days: int
    actual_days: Optional[int]
    start_date: Optional[str]
    end_date: Optional[str]
    status: str
    supplier_schedule_lead_days: int
    fabrication_lead_days: int
    measurement_required: bool
    measurement_after_step_id: Optional[str]
    measurement_notes: Optional[str]
    is_manual_date: bool
    is_overlay: bool
    notes: Optional[str]


class ScheduleListResponse(BaseModel):
    """Response for listing schedule rows."""
    schedules: List[ScheduleItemResponse]
    total: int


class GenerationResponse(BaseModel):
    """Response for a successful generation."""
    success: bool
    error: Optional[str]
    schedule_count: int
    alert_count: int
    warnings: List[str]
    schedules: List[ScheduleItemResponse]


class ConflictResponse(BaseModel):
    date: str
    trades: List[str]


class DelayWindowResponse(BaseModel):
    phase_id: str
    after_phase_id: str
    gap_days: int
    minimum_days: int
    reason: str
    window_start: Optional[str]
    window_end: Optional[str]
    satisfied: bool


class AlertResponse(BaseModel):
    id: Optional[int]
    project_id: int
    schedule_id: int
    alert_type: str
    alert_date: str
    message: str
    is_dismissed: bool


class SummaryResponse(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    conflicts: int
    alerts: int


class EstimateResponse(BaseModel):
    preparation_days: int
    construction_days: int
    total_days: int
    preparation_start_date: Optional[str] = None


# =============================================================================
# Dependencies
# =============================================================================

def get_schedule_service(
    db: Session = Depends(get_db),
    catalog: PhaseCatalog = Depends(get_phase_catalog),
) -> ProjectScheduleService:
    return ProjectScheduleService(db, catalog=catalog)


def _http_error(e: DomainError) -> HTTPException:
    if isinstance(e, (ScheduleItemNotFoundError, ScheduleAlertNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, (ValidationError, UnknownPhaseError, InvalidScheduleDateRangeError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return HTTPException(status_code=code, detail=e.message)


# =============================================================================
# Project schedule endpoints
# =============================================================================

@router.post(
    "/projects/{project_id}/generate",
    response_model=GenerationResponse,
    summary="Generate project schedule",
    description="Replace every schedule row of the project with a freshly computed schedule. "
                "Preparation phases end the business day before the target date."
)
def generate_schedule(
    project_id: int,
    request: GenerateRequest,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    """
    Rebuild the schedule. A failed generation leaves the previous schedule
    in place and answers 422 with the error message.
    """
    result = service.generate_project_schedule(
        project_id,
        request.target_start_date,
        request.current_stage,
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=result.error
        )

    return {
        **result.to_dict(),
        'schedules': [item.to_dict() for item in service.list_schedule(project_id)],
    }


@router.get(
    "/projects/{project_id}",
    response_model=ScheduleListResponse,
    summary="List schedule rows",
    description="All rows of a project ordered by start date, or in execution order"
)
def list_schedule(
    project_id: int,
    execution_order: bool = False,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    if execution_order:
        items = service.list_in_execution_order(project_id)
    else:
        items = service.list_schedule(project_id)
    return {
        'schedules': [item.to_dict() for item in items],
        'total': len(items)
    }


@router.get(
    "/projects/{project_id}/conflicts",
    response_model=List[ConflictResponse],
    summary="Trade conflicts",
    description="Days on which two or more distinct trades are scheduled (overlays excluded)"
)
def get_conflicts(
    project_id: int,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    return [conflict.to_dict() for conflict in service.get_conflicts(project_id)]


@router.get(
    "/projects/{project_id}/delays",
    response_model=List[DelayWindowResponse],
    summary="Mandatory delay windows",
    description="Observed gap for each configured mandatory delay (advisory only)"
)
def get_delay_windows(
    project_id: int,
    phase_id: Optional[str] = Query(None, description="Only the delay bound to this phase"),
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    return [window.to_dict() for window in service.get_delay_windows(project_id, phase_id)]


@router.get(
    "/projects/{project_id}/active",
    response_model=ScheduleListResponse,
    summary="Rows active on a day",
    description="Rows whose inclusive date range covers the given day (calendar cell)"
)
def list_active(
    project_id: int,
    on: str = Query(..., pattern=ISO_DATE_PATTERN, description="Day (yyyy-MM-dd)"),
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    try:
        items = service.list_active_on(project_id, on)
    except DomainError as e:
        raise _http_error(e)
    return {
        'schedules': [item.to_dict() for item in items],
        'total': len(items)
    }


@router.get(
    "/projects/{project_id}/alerts",
    response_model=List[AlertResponse],
    summary="Schedule alerts",
    description="Supplier-call and fabrication-start reminders ordered by date"
)
def list_alerts(
    project_id: int,
    include_dismissed: bool = False,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    return [
        alert.to_dict()
        for alert in service.list_alerts(project_id, include_dismissed=include_dismissed)
    ]


@router.get(
    "/projects/{project_id}/summary",
    response_model=SummaryResponse,
    summary="Schedule summary",
)
def get_summary(
    project_id: int,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    return service.summary(project_id)


@router.post(
    "/projects/{project_id}/manual-tasks",
    response_model=ScheduleItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a manual task",
    description="Add a pinned, user-defined task. Overlay tasks never count as conflicts."
)
def add_manual_task(
    project_id: int,
    task_data: ManualTaskCreate,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    task = ManualTask(
        description=task_data.description,
        start_date=task_data.start_date,
        estimated_days=task_data.estimated_days,
        linked_step_id=task_data.linked_step_id,
        is_overlay=task_data.is_overlay,
        trade_type=task_data.trade_type,
        trade_color=task_data.trade_color,
    )

    try:
        return service.add_manual_task(project_id, task).to_dict()
    except DomainError as e:
        raise _http_error(e)


# =============================================================================
# Row and alert endpoints
# =============================================================================

@router.patch(
    "/{schedule_id}",
    response_model=ScheduleListResponse,
    summary="Update a schedule row",
    description="Partial update. Moving the start date pins the row and re-chains "
                "every later row; the response lists every changed row."
)
def update_schedule(
    schedule_id: int,
    update_data: ScheduleUpdate,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    try:
        changed = service.update_schedule(
            schedule_id,
            **update_data.model_dump(exclude_unset=True)
        )
    except DomainError as e:
        raise _http_error(e)

    return {
        'schedules': [item.to_dict() for item in changed],
        'total': len(changed)
    }


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a schedule row",
)
def delete_schedule(
    schedule_id: int,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    try:
        service.delete_schedule(schedule_id)
    except DomainError as e:
        raise _http_error(e)


@router.post(
    "/alerts/{alert_id}/dismiss",
    response_model=AlertResponse,
    summary="Dismiss an alert",
)
def dismiss_alert(
    alert_id: int,
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    try:
        return service.dismiss_alert(alert_id).to_dict()
    except DomainError as e:
        raise _http_error(e)


@router.get(
    "/estimate",
    response_model=EstimateResponse,
    summary="Estimate project duration",
    description="Business-day totals for the phases ahead of the given stage"
)
def estimate_duration(
    current_stage: Optional[str] = Query(None, description="Current project stage"),
    target_start_date: Optional[str] = Query(None, description="Construction start (yyyy-MM-dd)"),
    service: ProjectScheduleService = Depends(get_schedule_service)
):
    try:
        return service.estimate(current_stage, target_start_date)
    except DomainError as e:
        raise _http_error(e)
