import json
from types import SimpleNamespace

import groq
import httpx
import pytest

import interview_prep.services.llm_service as llm_module
from interview_prep.config import Settings
from interview_prep.errors import GatewayError
from interview_prep.services.llm_service import LLMService


def _settings(**overrides):
	values = {"llm_provider": "anthropic", "anthropic_api_key": "test-key", "anthropic_model": "test-model"}
	values.update(overrides)
	return Settings(**values)


def _service(handler, **overrides):
	return LLMService(config=_settings(**overrides), transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_complete_posts_messages_request():
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = str(request.url)
		seen["headers"] = request.headers
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json={"content": [{"type": "text", "text": '{"answers": []}'}]})

	service = _service(handler)
	text = await service.complete("hello", max_tokens=1500)

	assert text == '{"answers": []}'
	assert seen["url"] == "https://api.anthropic.com/v1/messages"
	assert seen["headers"]["x-api-key"] == "test-key"
	assert seen["headers"]["anthropic-version"] == "2023-06-01"
	assert seen["body"] == {
		"model": "test-model",
		"max_tokens": 1500,
		"temperature": 0.7,
		"messages": [{"role": "user", "content": "hello"}],
	}


@pytest.mark.anyio
async def test_error_status_raises_gateway_error():
	hits = []

	def handler(request: httpx.Request) -> httpx.Response:
		hits.append(request)
		return httpx.Response(429, text='{"error": "rate limited"}')

	with pytest.raises(GatewayError) as excinfo:
		await _service(handler).complete("hello", max_tokens=10)
	assert excinfo.value.status == 429
	assert "rate limited" in excinfo.value.body
	assert len(hits) == 1


@pytest.mark.anyio
async def test_transport_failure_has_no_status():
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	with pytest.raises(GatewayError) as excinfo:
		await _service(handler).complete("hello", max_tokens=10)
	assert excinfo.value.status is None
	assert "connection refused" in excinfo.value.body


@pytest.mark.anyio
async def test_unexpected_envelope_is_a_gateway_error():
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(200, json={"content": []})

	with pytest.raises(GatewayError) as excinfo:
		await _service(handler).complete("hello", max_tokens=10)
	assert excinfo.value.message == "Unexpected completion envelope"


@pytest.mark.anyio
async def test_missing_key_fails_without_calling_out():
	calls = []

	def handler(request: httpx.Request) -> httpx.Response:
		calls.append(request)
		return httpx.Response(200, json={"content": [{"text": "{}"}]})

	service = _service(handler, anthropic_api_key=None)
	assert not service.enabled
	with pytest.raises(GatewayError):
		await service.complete("hello", max_tokens=10)
	assert calls == []


def test_model_follows_provider():
	service = LLMService(config=_settings(llm_provider="groq", groq_model="groq-model"))
	assert service.provider == "groq"
	assert service.model == "groq-model"


def test_temperature_is_clamped():
	assert _settings(completion_temperature=3.0).completion_temperature == 1.0


def _use_groq_transport(monkeypatch, handler):
	def factory(**kwargs):
		return groq.Groq(http_client=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)

	monkeypatch.setattr(llm_module, "Groq", factory)


def _groq_service():
	return LLMService(config=_settings(llm_provider="groq", groq_api_key="groq-key", groq_model="groq-model"))


@pytest.mark.anyio
async def test_groq_completion(monkeypatch):
	seen = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(json.loads(request.content))
		return httpx.Response(200, json={
			"id": "cmpl-1",
			"object": "chat.completion",
			"created": 0,
			"model": "groq-model",
			"choices": [{"index": 0, "message": {"role": "assistant", "content": '{"answers": []}'}, "finish_reason": "stop"}],
		})

	_use_groq_transport(monkeypatch, handler)
	assert await _groq_service().complete("hello", max_tokens=3000) == '{"answers": []}'
	assert len(seen) == 1
	assert seen[0]["model"] == "groq-model"
	assert seen[0]["max_tokens"] == 3000


@pytest.mark.anyio
async def test_groq_error_status_is_not_retried(monkeypatch):
	hits = []

	def handler(request: httpx.Request) -> httpx.Response:
		hits.append(request)
		return httpx.Response(503, json={"error": {"message": "overloaded"}})

	_use_groq_transport(monkeypatch, handler)
	with pytest.raises(GatewayError) as excinfo:
		await _groq_service().complete("hello", max_tokens=10)
	assert excinfo.value.status == 503
	assert "overloaded" in excinfo.value.body
	assert len(hits) == 1


@pytest.mark.anyio
async def test_groq_connection_failure_is_not_retried(monkeypatch):
	hits = []

	def handler(request: httpx.Request) -> httpx.Response:
		hits.append(request)
		raise httpx.ConnectError("connection refused", request=request)

	_use_groq_transport(monkeypatch, handler)
	with pytest.raises(GatewayError) as excinfo:
		await _groq_service().complete("hello", max_tokens=10)
	assert excinfo.value.status is None
	assert len(hits) == 1


class _QuotaError(Exception):
	code = 429


class _FlakyGenerativeModel:
	"""Fails the first call only; a retried call would succeed."""

	calls = []

	def __init__(self, model_name):
		self.model_name = model_name

	def generate_content(self, prompt, **kwargs):
		_FlakyGenerativeModel.calls.append(kwargs)
		if len(_FlakyGenerativeModel.calls) == 1:
			raise _QuotaError("quota exceeded")
		return SimpleNamespace(text='{"answers": []}')


@pytest.mark.anyio
async def test_gemini_failure_is_not_retried(monkeypatch):
	_FlakyGenerativeModel.calls = []
	fake_genai = SimpleNamespace(configure=lambda **kwargs: None, GenerativeModel=_FlakyGenerativeModel)
	monkeypatch.setattr(llm_module, "genai", fake_genai)
	service = LLMService(config=_settings(llm_provider="gemini", gemini_api_key="gemini-key"))

	with pytest.raises(GatewayError) as excinfo:
		await service.complete("hello", max_tokens=10)
	assert excinfo.value.status == 429
	assert "quota exceeded" in excinfo.value.body
	assert len(_FlakyGenerativeModel.calls) == 1
	assert _FlakyGenerativeModel.calls[0]["request_options"]["retry"] is None
	assert _FlakyGenerativeModel.calls[0]["generation_config"]["max_output_tokens"] == 10
