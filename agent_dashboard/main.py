import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent_dashboard.api.routes import router as api_router
from agent_dashboard.config import public_settings, setup_logging
from agent_dashboard.errors import (
    EmbeddingFailed,
    GenerationFailed,
    InvalidInput,
    ProviderError,
    ProviderUnavailable,
    StoreFailed,
)
from agent_dashboard.models.schemas import ErrorResponse

logger = setup_logging()
app = FastAPI(title="AI Agent Dashboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("Application starting")
logger.info("Loaded settings: %s", public_settings())


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


def _error(status_code: int, detail: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, error_code=error_code).model_dump(),
    )


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.warning("Invalid input: %s", exc, extra={"path": request.url.path})
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_INPUT")


@app.exception_handler(StoreFailed)
async def store_failed_handler(request: Request, exc: StoreFailed):
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "STORE_FAILED")


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    if isinstance(exc, ProviderUnavailable):
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, str(exc), "PROVIDER_UNAVAILABLE")
    if isinstance(exc, EmbeddingFailed):
        return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "EMBEDDING_FAILED")
    if isinstance(exc, GenerationFailed):
        return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "GENERATION_FAILED")
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "PROVIDER_ERROR")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router)
