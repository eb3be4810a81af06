from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status

from trichter.domain.models import RunData
from trichter.schemas.common import ApiResponse
from trichter.schemas.run import CreateRunRequest, RunResponse, UpdateRunUserRequest
from trichter.services.errors import RunNotFoundError
from trichter.services.run_service import RunService

router = APIRouter()


async def get_run_service(request: Request) -> RunService:
    runs = getattr(request.app.state, "run_repository", None)
    if runs is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Run store is not initialized",
        )
    realtime = getattr(request.app.state, "realtime_hub", None)
    return RunService(
        runs=runs,
        realtime=realtime,
        placeholder_image=request.app.state.settings.run_placeholder_image,
    )


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, RunNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    raise exc


@router.get("", response_model=list[RunResponse])
async def list_runs(
    service: RunService = Depends(get_run_service),
) -> list[RunResponse]:
    runs = await service.list_runs()
    return [RunResponse.model_validate(run) for run in runs]


@router.post("", response_model=ApiResponse)
async def create_run(
    payload: CreateRunRequest,
    service: RunService = Depends(get_run_service),
) -> ApiResponse:
    await service.create_run(
        data=RunData(
            duration=payload.duration,
            rate=payload.rate,
            volume=payload.volume,
        ),
        image=payload.image,
        user_id=payload.user_id,
    )
    return ApiResponse(success=True)


@router.put("/{run_id}/user", response_model=ApiResponse)
async def update_run_user(
    run_id: UUID,
    payload: UpdateRunUserRequest,
    service: RunService = Depends(get_run_service),
) -> ApiResponse:
    try:
        await service.assign_user(run_id, payload.user_id)
    except RunNotFoundError as exc:
        _raise_for_service_error(exc)
    return ApiResponse(success=True)


@router.delete("/{run_id}", response_model=ApiResponse)
async def delete_run(
    run_id: UUID,
    service: RunService = Depends(get_run_service),
) -> ApiResponse:
    try:
        await service.delete_run(run_id)
    except RunNotFoundError as exc:
        _raise_for_service_error(exc)
    return ApiResponse(success=True)
