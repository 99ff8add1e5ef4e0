import time
import uuid
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# .env must be loaded before settings are built
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx
from app.core.errors import AppError, app_error_handler, request_validation_handler
from app.api.router import api_router
from app.core.db import init_models
from app.core.redis import redis_manager


setup_logging()
app = FastAPI(title=settings.APP_NAME)
logger = logging.getLogger(__name__)

@app.middleware("http")
async def request_context(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    token = request_id_ctx.set(rid)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        request_id_ctx.reset(token)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["x-request-id"] = rid
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.2f}ms) rid={rid}")
    return response

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "An internal server error occurred."})


@app.on_event("startup")
async def on_startup():
    await init_models()
    await redis_manager.connect()
    logger.info(f"{settings.APP_NAME} started env={settings.ENV}")

@app.on_event("shutdown")
async def on_shutdown():
    await redis_manager.close()


app.include_router(api_router, prefix=settings.API_PREFIX)
