from __future__ import annotations

from enum import Enum
from typing import Optional


PREVIEW_CHARS = 500


def preview(text: Optional[str], limit: int = PREVIEW_CHARS) -> str:
	"""Bounded-length excerpt of untrusted text for logs."""
	if not text:
		return ""
	if len(text) <= limit:
		return text
	return text[:limit] + "..."


class PrepError(Exception):
	"""Base class for every failure this service reports to callers."""

	message = "Internal Server Error"

	def __init__(self, message: Optional[str] = None) -> None:
		super().__init__(message or self.message)
		self.message = message or self.message


class GatewayError(PrepError):
	"""The completion endpoint was unreachable or rejected the request."""

	message = "LLM API error"

	def __init__(self, status: Optional[int], body: str = "", message: Optional[str] = None) -> None:
		super().__init__(message)
		self.status = status
		self.body = body or ""

	def __str__(self) -> str:
		return f"{self.message} (status={self.status}): {preview(self.body, 200)}"


class RecoveryErrorKind(str, Enum):
	TRUNCATED = "truncated"
	MALFORMED_PAYLOAD = "malformed_payload"
	INVALID_SCHEMA = "invalid_schema"


class RecoveryError(PrepError):
	"""A model reply could not be trusted as structured data."""

	message = "Failed to parse model response"

	def __init__(
		self,
		kind: RecoveryErrorKind,
		detail: str = "",
		*,
		raw: Optional[str] = None,
		sanitized: Optional[str] = None,
	) -> None:
		super().__init__()
		self.kind = kind
		self.detail = detail
		self.raw_preview = preview(raw)
		self.sanitized_preview = preview(sanitized)

	def __str__(self) -> str:
		return f"{self.kind.value}: {self.detail}"

	def diagnostics(self) -> dict:
		return {
			"kind": self.kind.value,
			"detail": self.detail,
			"raw_preview": self.raw_preview,
			"sanitized_preview": self.sanitized_preview,
		}


class StoreError(PrepError):
	message = "Session storage failure"


class SessionNotFound(StoreError):
	message = "Session not found"
