import logging
from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.features.access.policies import (
    can_update_task,
    can_view_task,
    ensure_can_assign_priority,
    ensure_owner_or_role,
    require_admin,
    require_manager,
)
from app.features.access.roles import MANAGER_OR_ABOVE
from app.features.auth.dependencies import client_ip, get_current_identity
from app.features.tasks.service import apply_task_update, create_task, get_task, list_tasks, serialize_task
from app.features.tasks.validators import validate_priority, validate_status, validate_task_create, validate_task_update
from app.utils.errors import NotFound
from app.utils.responses import envelope
from app.utils.security import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

@router.get("")
def read_tasks(request: Request, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    tasks = list_tasks(db, identity)

    logger.info(
        "Tasks retrieved successfully user_id=%s role=%s task_count=%d ip=%s",
        identity.user_id, identity.role, len(tasks), client_ip(request),
    )
    return envelope([serialize_task(task) for task in tasks])

@router.get("/status/{task_status}")
def read_tasks_by_status(task_status: str, request: Request, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    tasks = list_tasks(db, identity, status=validate_status(task_status))

    logger.info(
        "Tasks by status retrieved successfully user_id=%s status=%s task_count=%d ip=%s",
        identity.user_id, task_status, len(tasks), client_ip(request),
    )
    return envelope([serialize_task(task) for task in tasks])

@router.get("/priority/{priority}")
def read_tasks_by_priority(priority: str, request: Request, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    tasks = list_tasks(db, identity, priority=validate_priority(priority))

    logger.info(
        "Tasks by priority retrieved successfully user_id=%s priority=%s task_count=%d ip=%s",
        identity.user_id, priority, len(tasks), client_ip(request),
    )
    return envelope([serialize_task(task) for task in tasks])

@router.get("/{task_id}")
def read_task(task_id: str, request: Request, db: Session = Depends(get_db), identity: Identity = Depends(can_view_task)):
    task = get_task(db, task_id)
    if not task:
        logger.warning("Task not found task_id=%s user_id=%s ip=%s", task_id, identity.user_id, client_ip(request))
        raise NotFound("Task not found")

    ensure_owner_or_role(
        identity, task.assigned_to, MANAGER_OR_ABOVE,
        "Access denied: You can only view tasks assigned to you", ip=client_ip(request),
    )

    logger.info("Task retrieved successfully user_id=%s task_id=%s ip=%s", identity.user_id, task_id, client_ip(request))
    return envelope(serialize_task(task))

@router.post("", status_code=status.HTTP_201_CREATED)
def create(request: Request, payload: dict = Body(...), db: Session = Depends(get_db), manager: Identity = Depends(require_manager)):
    payload = validate_task_create(payload, db, actor_id=manager.user_id, ip=client_ip(request))
    ensure_can_assign_priority(manager, payload.get("priority"), ip=client_ip(request))

    task = create_task(db, payload)

    logger.info(
        "Task created successfully user_id=%s task_id=%s priority=%s assigned_to=%s ip=%s",
        manager.user_id, task.id, task.priority, task.assigned_to, client_ip(request),
    )
    return envelope(serialize_task(task), "Task created successfully")

@router.put("/{task_id}")
def update(
    task_id: str,
    request: Request,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(can_update_task),
):
    payload = validate_task_update(payload, db, actor_id=identity.user_id, ip=client_ip(request))
    ensure_can_assign_priority(identity, payload.get("priority"), ip=client_ip(request))

    task = get_task(db, task_id)
    if not task:
        logger.warning("Task not found for update task_id=%s user_id=%s ip=%s", task_id, identity.user_id, client_ip(request))
        raise NotFound("Task not found")

    ensure_owner_or_role(
        identity, task.assigned_to, MANAGER_OR_ABOVE,
        "Access denied: You can only update tasks assigned to you", ip=client_ip(request),
    )

    task = apply_task_update(db, task, payload)

    logger.info("Task updated successfully user_id=%s task_id=%s ip=%s", identity.user_id, task_id, client_ip(request))
    return envelope(serialize_task(task), "Task updated successfully")

@router.delete("/{task_id}")
def delete(task_id: str, request: Request, db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    task = get_task(db, task_id)
    if not task:
        logger.warning("Task not found for deletion task_id=%s user_id=%s ip=%s", task_id, admin.user_id, client_ip(request))
        raise NotFound("Task not found")

    db.delete(task)
    db.commit()

    logger.info("Task deleted successfully user_id=%s task_id=%s ip=%s", admin.user_id, task_id, client_ip(request))
    return envelope(message="Task deleted successfully")
