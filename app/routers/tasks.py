from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..db import get_session
from ..models import TaskStatus
from ..schemas import TaskCreate, TaskOut, TaskUpdate
from ..utils.users import current_user_id

router = APIRouter()


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(
    payload: TaskCreate,
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await crud.create_task(db, payload, user_id=user_id)


@router.get("", response_model=list[TaskOut])
async def list_tasks(
    status: TaskStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await crud.list_tasks(db, user_id=user_id, status=status, limit=limit, offset=offset)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    task = await crud.get_task(db, task_id, user_id=user_id)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    task = await crud.update_task(db, task_id, payload, user_id=user_id)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    await crud.delete_task(db, task_id, user_id=user_id)
    return Response(status_code=204)
