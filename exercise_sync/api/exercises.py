"""Exercise log and conflict resolution endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from loguru import logger

from exercise_sync.api.dependencies import get_pipeline
from exercise_sync.api.schemas import (
    ConflictGroupResponse,
    ExerciseResponse,
    ResolveRequest,
    ResolveResponse,
    SyncResponse,
)
from exercise_sync.errors import InvalidSurvivorError, ManualEntryError, PipelineBusyError, ResolutionStateError
from exercise_sync.reconciliation.pipeline import ReconciliationPipeline, SyncStatus
from exercise_sync.records.manual import ManualEntry

router = APIRouter(tags=["exercises"])


def _busy() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="sync_in_progress")


@router.get("/exercises", response_model=list[ExerciseResponse])
async def list_exercises(pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> list[ExerciseResponse]:
    records = await pipeline.store.list_all()
    return [ExerciseResponse.from_record(record) for record in records]


@router.post("/exercises", response_model=SyncResponse, status_code=status.HTTP_201_CREATED)
async def add_exercise(entry: ManualEntry, pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> SyncResponse:
    try:
        _, result = await pipeline.add_manual(entry)
    except ManualEntryError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.field_errors) from e
    except PipelineBusyError as e:
        raise _busy() from e
    return SyncResponse.from_result(result)


@router.delete("/exercises/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(record_id: str, pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> Response:
    try:
        await pipeline.delete_record(record_id)
    except PipelineBusyError as e:
        raise _busy() from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/exercises", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_exercises(pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> Response:
    try:
        await pipeline.delete_all()
    except PipelineBusyError as e:
        raise _busy() from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sync", response_model=SyncResponse)
async def sync(pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> SyncResponse:
    result = await pipeline.sync()
    if result.status is SyncStatus.BUSY:
        raise _busy()
    if result.status is SyncStatus.NEEDS_AUTHORIZATION:
        await pipeline.provider.request_grants()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="authorization_required")
    return SyncResponse.from_result(result)


@router.get("/conflicts/current", response_model=ConflictGroupResponse | None)
async def current_conflict(pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> ConflictGroupResponse | Response:
    group = pipeline.session.current_group
    if group is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return ConflictGroupResponse.from_group(group)


@router.post("/conflicts/current/resolve", response_model=ResolveResponse)
async def resolve_conflict(request: ResolveRequest, pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> ResolveResponse:
    try:
        decision = await pipeline.resolve(request.survivor_id)
    except ResolutionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="no_pending_conflict") from e
    except InvalidSurvivorError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except PipelineBusyError as e:
        raise _busy() from e

    next_group = pipeline.session.current_group
    logger.info(f"Resolved conflict, kept {decision.survivor_id}")
    return ResolveResponse(
        survivor_id=decision.survivor_id,
        deleted_ids=decision.deleted_ids,
        next_conflict=ConflictGroupResponse.from_group(next_group) if next_group else None,
    )


@router.post("/conflicts/current/dismiss", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_conflict(pipeline: ReconciliationPipeline = Depends(get_pipeline)) -> Response:
    try:
        pipeline.dismiss()
    except ResolutionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="no_pending_conflict") from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
