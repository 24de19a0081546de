"""Pydantic schemas for the /chat assistant endpoint."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ChatSource(StrEnum):
	completion = "completion"
	scripted = "scripted"


class ChatRequest(BaseModel):
	message: str = Field(min_length=1, max_length=2000)


class ChatResponse(BaseModel):
	reply: str
	source: ChatSource
