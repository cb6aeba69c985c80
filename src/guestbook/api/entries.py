from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from guestbook.models.domain import Entry
from guestbook.models.requests import EntryRequest
from guestbook.models.responses import ErrorResponse, MessageResponse

router = APIRouter()


@router.get("/entries", response_model=list[Entry])
async def list_entries(request: Request, response: Response) -> list[Entry]:
    """Most recent entries, newest first. ``X-Cache`` tells whether the cache served it."""
    service = request.app.state.entry_service
    recent = await service.read_recent()
    response.headers["X-Cache"] = "HIT" if recent.cache_hit else "MISS"
    return recent.entries


@router.post(
    "/entries",
    response_model=Entry,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_entry(body: EntryRequest, request: Request) -> Entry:
    service = request.app.state.entry_service
    return await service.create_entry(body.name, body.message)


@router.put(
    "/entries/{entry_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_entry(entry_id: int, body: EntryRequest, request: Request) -> MessageResponse:
    service = request.app.state.entry_service
    await service.update_entry(entry_id, body.name, body.message)
    return MessageResponse(message="Entry updated")


@router.delete(
    "/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_entry(entry_id: int, request: Request) -> Response:
    service = request.app.state.entry_service
    await service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
