from __future__ import annotations

from fastapi import Request, Response


def preflight_response(request: Request, methods: str) -> Response:
	"""Answer a bare OPTIONS request with permissive CORS headers.

	Real browser preflights are answered by CORSMiddleware before they reach
	the router; this covers clients that send OPTIONS without them.
	"""
	acr_headers = request.headers.get("access-control-request-headers", "Content-Type, X-User-ID")
	headers = {
		"Access-Control-Allow-Origin": "*",
		"Access-Control-Allow-Headers": acr_headers,
		"Access-Control-Allow-Methods": methods,
		"Access-Control-Max-Age": "3600",
	}
	return Response(status_code=200, headers=headers)
