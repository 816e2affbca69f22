import logging
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Set
from pydantic import BaseModel, Field, StringConstraints, UUID4, field_validator
from sqlalchemy.orm import Session
from app.models.task import TASK_PRIORITIES, TASK_STATUSES
from app.models.user import User
from app.utils.errors import ValidationFailed
from app.utils.validation import canonical_uuid, collect_errors, parse_iso_datetime

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000

STATUS_ERROR = "Status must be pending, in_progress, or completed"
PRIORITY_ERROR = "Priority must be low, medium, or high"

TaskStatus = Literal["pending", "in_progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH)]

TASK_MESSAGES = {
    "title": f"Title is required and must be between 1 and {TITLE_MAX_LENGTH} characters",
    "status": STATUS_ERROR,
    "description": f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters",
    "priority": PRIORITY_ERROR,
    "due_date": "Due date must be a valid ISO date",
    "assigned_to": "Assigned user ID must be a valid UUID",
}

def parse_due_date(value):
    if value is None:
        return None
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise ValueError("not an ISO-8601 date")
    return parsed

# Field order is the order errors are reported in
class TaskCreate(BaseModel):
    title: Title
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None
    assigned_to: UUID4

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, value):
        return parse_due_date(value)

class TaskUpdate(BaseModel):
    """Every field is optional; title, status, priority and assignee may not be null."""

    title: Title = None
    status: TaskStatus = None
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority = None
    due_date: Optional[datetime] = None
    assigned_to: UUID4 = None

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, value):
        return parse_due_date(value)

def _check_assignee(payload: dict, failed: Set[str], db: Session, errors: List[str]) -> None:
    if "assigned_to" in failed or "assigned_to" not in payload:
        return
    if not db.query(User).filter(User.id == canonical_uuid(payload["assigned_to"])).first():
        errors.append("Assigned user not found")

def validate_task_create(payload: dict, db: Session, actor_id: Optional[str] = None, ip: Optional[str] = None) -> dict:
    task, errors, failed = collect_errors(TaskCreate, payload, TASK_MESSAGES)
    _check_assignee(payload, failed, db, errors)

    if errors:
        logger.warning("Task creation validation failed errors=%s user_id=%s ip=%s", errors, actor_id, ip)
        raise ValidationFailed(errors)
    return task.model_dump()

def validate_task_update(payload: dict, db: Session, actor_id: Optional[str] = None, ip: Optional[str] = None) -> dict:
    task, errors, failed = collect_errors(TaskUpdate, payload, TASK_MESSAGES)
    _check_assignee(payload, failed, db, errors)

    if errors:
        logger.warning("Task update validation failed errors=%s user_id=%s ip=%s", errors, actor_id, ip)
        raise ValidationFailed(errors)
    return task.model_dump(exclude_unset=True)

def validate_status(value: str) -> str:
    if value not in TASK_STATUSES:
        raise ValidationFailed([STATUS_ERROR])
    return value

def validate_priority(value: str) -> str:
    if value not in TASK_PRIORITIES:
        raise ValidationFailed([PRIORITY_ERROR])
    return value
