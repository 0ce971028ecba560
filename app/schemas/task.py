from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TaskOut(BaseModel):
    """A task as shown on the calendars."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    is_done: bool = False
    is_personal: bool = False
    due_date: Optional[datetime] = None
    assigned_to: Optional[UUID] = None
    created_by: Optional[UUID] = None


class CalendarDayOut(BaseModel):
    date: date
    weekday: int = Field(..., ge=0, le=6, description="0 = Sunday")
    in_current_month: bool
    is_today: bool
    tasks: List[TaskOut] = Field(default_factory=list)


class CalendarMonthResponse(BaseModel):
    year: int
    month: int
    timezone: str
    weekday_labels: List[str] = Field(..., description="Column headers, Sunday first")
    days: List[CalendarDayOut]


class TasksOnDateResponse(BaseModel):
    date: date
    timezone: str
    tasks: List[TaskOut]


class TaskRescheduleRequest(BaseModel):
    """Body for PATCH /api/v1/tasks/{task_id}/reschedule."""

    target_date: date = Field(..., description="Drop-target calendar date (org timezone)")


class TaskRescheduleResponse(BaseModel):
    success: bool = True
    task: TaskOut
    previous_due_date: Optional[datetime] = None
    timezone: str


class TaskDoneRequest(BaseModel):
    """Body for PATCH /api/v1/tasks/{task_id}/done."""

    is_done: bool


class TaskDoneResponse(BaseModel):
    success: bool = True
    task: TaskOut
