from __future__ import annotations

import logging
from typing import Dict, List, Optional

import anyio
import httpx
from groq import APIConnectionError, APIStatusError, Groq
try:
	import google.generativeai as genai
except Exception:
	genai = None

from interview_prep.config import Settings, settings as app_settings
from interview_prep.errors import GatewayError, preview


logger = logging.getLogger(__name__)


class LLMService:
	"""Completion gateway: one prompt in, raw reply text out.

	A failed call raises GatewayError and is never retried; the caller decides
	whether to try again.
	"""

	def __init__(self, config: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		self._settings = config or app_settings
		# Only used by the anthropic provider; tests pass an httpx.MockTransport
		self._transport = transport
		self._groq: Groq | None = None

	@property
	def provider(self) -> str:
		return (self._settings.llm_provider or "anthropic").lower()

	@property
	def model(self) -> str:
		provider = self.provider
		if provider == "groq":
			return self._settings.groq_model
		if provider == "gemini":
			return self._settings.gemini_model
		return self._settings.anthropic_model

	@property
	def enabled(self) -> bool:
		provider = self.provider
		if provider == "anthropic":
			return bool(self._settings.anthropic_api_key)
		if provider == "groq":
			return bool(self._settings.groq_api_key)
		if provider == "gemini":
			return genai is not None and bool(self._settings.gemini_api_key)
		return False

	async def complete(self, prompt: str, *, max_tokens: int) -> str:
		provider = self.provider
		if not self.enabled:
			raise GatewayError(None, f"provider '{provider}' has no API key or client", message="LLM provider is not configured")

		logger.info(
			"Requesting completion provider=%s model=%s max_tokens=%d prompt_chars=%d",
			provider, self.model, max_tokens, len(prompt),
		)
		if provider == "anthropic":
			text = await self._complete_anthropic(prompt, max_tokens)
		elif provider == "groq":
			text = await self._complete_groq(prompt, max_tokens)
		else:
			text = await self._complete_gemini(prompt, max_tokens)
		logger.info("Completion received reply_chars=%d", len(text))
		return text

	def _messages(self, prompt: str) -> List[Dict[str, str]]:
		return [{"role": "user", "content": prompt}]

	async def _complete_anthropic(self, prompt: str, max_tokens: int) -> str:
		s = self._settings
		payload = {
			"model": s.anthropic_model,
			"max_tokens": max_tokens,
			"temperature": s.completion_temperature,
			"messages": self._messages(prompt),
		}
		headers = {
			"Content-Type": "application/json",
			"x-api-key": s.anthropic_api_key or "",
			"anthropic-version": s.anthropic_version,
		}
		try:
			async with httpx.AsyncClient(
				base_url=s.anthropic_base_url,
				timeout=s.llm_timeout_seconds,
				transport=self._transport,
			) as client:
				resp = await client.post("/v1/messages", json=payload, headers=headers)
		except httpx.HTTPError as exc:
			logger.error("Completion transport failure: %r", exc)
			raise GatewayError(None, str(exc) or exc.__class__.__name__) from exc

		if resp.is_error:
			logger.error("Completion endpoint returned %d: %s", resp.status_code, preview(resp.text, 300))
			raise GatewayError(resp.status_code, resp.text)

		try:
			text = resp.json()["content"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError) as exc:
			logger.error("Unexpected completion envelope: %s", preview(resp.text, 300))
			raise GatewayError(resp.status_code, resp.text, message="Unexpected completion envelope") from exc
		return text if isinstance(text, str) else str(text)

	def _ensure_groq(self) -> Groq:
		if self._groq is None:
			# SDK default re-sends 429/5xx twice; one attempt only
			self._groq = Groq(
				api_key=self._settings.groq_api_key,
				max_retries=0,
				timeout=self._settings.llm_timeout_seconds,
			)
		return self._groq

	async def _complete_groq(self, prompt: str, max_tokens: int) -> str:
		client = self._ensure_groq()
		s = self._settings

		def _call() -> str:
			resp = client.chat.completions.create(
				model=s.groq_model,
				messages=self._messages(prompt),
				temperature=s.completion_temperature,
				max_tokens=max_tokens,
			)
			return resp.choices[0].message.content or ""

		try:
			return await anyio.to_thread.run_sync(_call)
		except APIStatusError as exc:
			logger.error("Groq returned %d: %s", exc.status_code, exc)
			body = exc.response.text if exc.response is not None else str(exc)
			raise GatewayError(exc.status_code, body) from exc
		except APIConnectionError as exc:
			logger.error("Groq transport failure: %r", exc)
			raise GatewayError(None, str(exc)) from exc

	async def _complete_gemini(self, prompt: str, max_tokens: int) -> str:
		s = self._settings
		genai.configure(api_key=s.gemini_api_key)

		def _call() -> str:
			gmodel = genai.GenerativeModel(s.gemini_model)
			resp = gmodel.generate_content(
				prompt,
				generation_config={"temperature": s.completion_temperature, "max_output_tokens": max_tokens},
				request_options={"retry": None, "timeout": s.llm_timeout_seconds},
			)
			return getattr(resp, "text", None) or (resp.candidates[0].content.parts[0].text if getattr(resp, "candidates", None) else "")

		try:
			return await anyio.to_thread.run_sync(_call)
		except Exception as exc:
			logger.exception("Gemini completion failed")
			status = getattr(exc, "code", None)
			raise GatewayError(status if isinstance(status, int) else None, str(exc)) from exc


llm_service = LLMService()
