"""Farming assistant chat: completion API proxy with a scripted fallback."""

from __future__ import annotations

import random
from typing import Any

import httpx
import structlog

from app.config import Settings, get_settings
from app.schemas.chat import ChatResponse, ChatSource

logger = structlog.get_logger("marketyield.chat")

SCRIPTED_REPLIES: tuple[str, ...] = (
	"Based on current market trends, I recommend focusing on tomatoes this season. "
	"The demand is high and prices are expected to rise by 15% next month.",
	"Your onion crop looks promising! The yield forecast shows 85% success rate. "
	"Consider selling in the next 2 weeks for optimal profit.",
	"I've analyzed your local market data. The best selling window for potatoes is "
	"between 8-10 AM at Azadpur Mandi. You could get ₹5-8 more per kg.",
	"Weather patterns suggest planting capsicum in the next 2 weeks would be ideal. "
	"The soil moisture levels are perfect for germination.",
	"Your profit margins have improved by 12% this month compared to last month. "
	"Keep up the excellent work with your current crop rotation strategy!",
	"Market alerts: Tomato prices are expected to spike next week due to supply shortage. "
	"Consider holding your current stock for better returns.",
	"Based on your farming history, I recommend diversifying with leafy vegetables. "
	"They have consistent demand and shorter growth cycles.",
	"Your cauliflower yield prediction shows 90% success probability. The optimal harvest "
	"time is in 3 weeks for maximum nutritional value and market price.",
)


class ChatService:
	def __init__(
		self,
		settings: Settings | None = None,
		*,
		transport: httpx.AsyncBaseTransport | None = None,
		rng: random.Random | None = None,
	):
		self.settings = settings or get_settings()
		self.transport = transport
		self.rng = rng or random.Random()

	async def reply(self, message: str) -> ChatResponse:
		if not self.settings.chat_api_key:
			return ChatResponse(reply=self.rng.choice(SCRIPTED_REPLIES), source=ChatSource.scripted)
		payload = await self.call_completion(message)
		reply = payload.get("reply")
		if not isinstance(reply, str):
			raise RuntimeError("completion response carried no reply")
		return ChatResponse(reply=reply, source=ChatSource.completion)

	async def call_completion(self, message: str) -> dict[str, Any]:
		headers = {
			"Authorization": f"Bearer {self.settings.chat_api_key}",
			"content-type": "application/json",
		}
		body = {"prompt": message, "max_tokens": self.settings.chat_max_tokens}

		async with httpx.AsyncClient(
			timeout=self.settings.chat_timeout_seconds,
			transport=self.transport,
		) as client:
			try:
				response = await client.post(self.settings.chat_api_url, headers=headers, json=body)
				response.raise_for_status()
			except httpx.HTTPError as exc:
				logger.error("chat_completion_failed", error=str(exc))
				raise
			payload = response.json()

		if not isinstance(payload, dict):
			raise RuntimeError("completion response is not an object")
		return payload
