"""Shared pagination schemas."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field


class PageQuery(BaseModel):
	page: int = Field(default=1, ge=1)
	limit: int = Field(default=10, ge=1, le=100)

	@property
	def offset(self) -> int:
		return (self.page - 1) * self.limit


class Pagination(BaseModel):
	current: int
	pages: int
	total: int

	@classmethod
	def build(cls, query: PageQuery, total: int) -> "Pagination":
		return cls(current=query.page, pages=math.ceil(total / query.limit), total=total)


class MessageResponse(BaseModel):
	message: str
