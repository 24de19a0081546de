"""Farming assistant chat route."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.schemas.chat import ChatRequest, ChatResponse
from app.services.chat_service import ChatService

router = APIRouter(prefix="/chat", tags=["chat"])


def _map_error(_exc: Exception) -> HTTPException:
	# upstream and decoding failures alike surface as 500
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail={"error": "Something went wrong"},
	)


@router.post("", response_model=ChatResponse)
async def chat(payload: ChatRequest) -> ChatResponse:
	service = ChatService()
	try:
		return await service.reply(payload.message)
	except Exception as exc:
		raise _map_error(exc) from exc
