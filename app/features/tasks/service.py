from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.features.access.policies import is_restricted_to_own_records
from app.models.task import Task
from app.utils.security import Identity

class AssigneeResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Optional[str]

class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    status: str
    priority: str
    due_date: Optional[datetime]
    assigned_to: str
    created_at: datetime
    updated_at: datetime
    assignee: Optional[AssigneeResponse]

def serialize_task(task: Task) -> dict:
    assignee = None
    if task.assignee is not None:
        assignee = AssigneeResponse(
            id=task.assignee.id,
            name=task.assignee.name,
            email=task.assignee.email,
            role=task.assignee.role_name,
        )
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        assigned_to=task.assigned_to,
        created_at=task.created_at,
        updated_at=task.updated_at,
        assignee=assignee,
    ).model_dump(mode="json")

def get_task(db: Session, task_id: str) -> Optional[Task]:
    return db.query(Task).filter(Task.id == task_id).first()

def list_tasks(db: Session, identity: Identity, status: Optional[str] = None, priority: Optional[str] = None):
    query = db.query(Task)
    if is_restricted_to_own_records(identity):
        query = query.filter(Task.assigned_to == identity.user_id)
    if status is not None:
        query = query.filter(Task.status == status)
    if priority is not None:
        query = query.filter(Task.priority == priority)
    return query.order_by(Task.created_at.desc()).all()

def create_task(db: Session, payload: dict) -> Task:
    task = Task(
        title=payload["title"],
        description=payload.get("description"),
        priority=payload.get("priority") or "medium",
        assigned_to=str(payload["assigned_to"]),
        due_date=payload.get("due_date"),
        status="pending",
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task

def apply_task_update(db: Session, task: Task, payload: dict) -> Task:
    for field in ("title", "description", "status", "priority", "due_date"):
        if field in payload:
            setattr(task, field, payload[field])
    if "assigned_to" in payload:
        task.assigned_to = str(payload["assigned_to"])
    db.commit()
    db.refresh(task)
    return task
