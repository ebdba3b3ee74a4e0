from fastapi import APIRouter, Request, Response
from .schemas import PublishRequest, PublishResponse, ErrorResponse
from ..services.gateway import ChannelGateway

router = APIRouter(prefix="/v1")

_errors = {404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


def get_gateway(request: Request) -> ChannelGateway:
    return request.app.state.gateway


@router.post("/channels/{channel:path}/publish", response_model=PublishResponse, responses=_errors)
async def publish(channel: str, req: PublishRequest, request: Request):
    events = await get_gateway(request).publish(f"/{channel}", req.events)
    return PublishResponse(events=events)


@router.post("/channels/{channel:path}/subscribe", status_code=204, responses=_errors)
async def subscribe(channel: str, request: Request):
    await get_gateway(request).subscribe(f"/{channel}")
    return Response(status_code=204)
