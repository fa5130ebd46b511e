import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .db import Base, engine
from .routers import health, tasks, voice

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("voice_tasks")


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s)", settings.app_env)
    yield
    await engine.dispose()


app = FastAPI(title="Voice Tasks - Task Service", version="0.1.0", lifespan=lifespan)

origins = settings.cors_origin_list or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _validation_errors(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": jsonable_encoder(exc.errors())})


@app.exception_handler(StarletteHTTPException)
async def _http_errors(request: Request, exc: StarletteHTTPException):
    # No route matched: the router never set an endpoint
    if exc.status_code == 404 and "endpoint" not in request.scope:
        return JSONResponse(
            status_code=404,
            content={"error": {"message": "Route not found", "path": request.url.path}},
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def _unhandled_errors(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"error": {"message": message}})


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(voice.router, prefix="/api/voice-notes", tags=["voice"])


@app.get("/")
def root():
    return {"ok": True, "service": "voice-tasks", "version": "0.1.0"}
