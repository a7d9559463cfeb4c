from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse
import logging

from interview_prep.config import settings
from interview_prep.errors import GatewayError, RecoveryError, SessionNotFound, StoreError, preview
from interview_prep.utils.logging import configure_logging
from interview_prep.routers.questions import router as questions_router
from interview_prep.routers.answers import router as answers_router
from interview_prep.routers.sessions import router as sessions_router
from interview_prep.routers.stats import router as stats_router
from interview_prep.utils.audit import auditor
from interview_prep.services.llm_service import llm_service
from interview_prep.utils.cors import preflight_response


configure_logging()
auditor.configure(settings.audit_path)
logger = logging.getLogger(__name__)
app = FastAPI(title="Interview Prep Backend", version="0.1.0")

# CORS
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_allow_origins,
	# Wildcard origins require credentials to be False per CORS spec
	allow_credentials=False if settings.cors_allow_origins == ["*"] else True,
	allow_methods=["*"],
	allow_headers=["*"],
	expose_headers=["*"],
	max_age=3600,
)


def _field_path(loc) -> str:
	return ".".join(str(part) for part in loc if part not in ("body", "query", "header"))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
	details = [{"field": _field_path(err.get("loc", ())), "message": err.get("msg", "")} for err in exc.errors()]
	logger.info("Rejected %s %s: %s", request.method, request.url.path, details)
	return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
	return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
	logger.error("Completion gateway failed on %s: %s", request.url.path, exc)
	await auditor.log({
		"type": "gateway_error",
		"path": request.url.path,
		"status": exc.status,
		"body_preview": preview(exc.body),
	})
	return JSONResponse(status_code=500, content={"error": exc.message, "status": exc.status, "details": preview(exc.body)})


@app.exception_handler(RecoveryError)
async def recovery_error_handler(request: Request, exc: RecoveryError) -> JSONResponse:
	return JSONResponse(status_code=500, content={"error": exc.message, "kind": exc.kind.value, "details": exc.detail})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
	if isinstance(exc, SessionNotFound):
		return JSONResponse(status_code=404, content={"error": exc.message})
	logger.error("Storage failed on %s: %s", request.url.path, exc)
	return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.options("/health")
async def health_options(request: Request) -> Response:
	return preflight_response(request, "GET, OPTIONS")


@app.get("/health")
async def health() -> JSONResponse:
	return JSONResponse({
		"status": "ok",
		"version": app.version,
		"llm": {"provider": llm_service.provider, "model": llm_service.model, "enabled": llm_service.enabled},
		"sessionStore": settings.session_store,
		"diagnostics": auditor.enabled,
	})


# Routers
app.include_router(questions_router, prefix="/api", tags=["questions"])
app.include_router(answers_router, prefix="/api", tags=["answers"])
app.include_router(sessions_router, prefix="/api", tags=["sessions"])
app.include_router(stats_router, prefix="/api", tags=["stats"])


def run() -> None:
	import uvicorn

	uvicorn.run("interview_prep.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
