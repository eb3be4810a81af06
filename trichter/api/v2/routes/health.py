from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, str | int]:
    hub = getattr(request.app.state, "realtime_hub", None)
    subscribers = hub.subscriber_count if hub is not None else 0
    return {"status": "ok", "subscribers": subscribers}
