import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from station_sync.api import devices, licensees, sessions, videos
from station_sync.core.config import settings
from station_sync.core.errors import StationSyncError, StoreError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Station Sync")

app.include_router(devices.router, prefix="/api/v1/devices", tags=["devices"])
app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["sessions"])
app.include_router(licensees.router, prefix="/api/v1/licensees", tags=["licensees"])
app.include_router(videos.router, prefix="/api/v1/videos", tags=["videos"])

# Todas las respuestas de error comparten la forma {"error": <mensaje>}

@app.exception_handler(StationSyncError)
async def station_sync_error_handler(request: Request, exc: StationSyncError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"❌ Error de base de datos en {request.method} {request.url.path}")
    error = StoreError(str(getattr(exc, "orig", None) or exc))
    return JSONResponse(status_code=error.status_code, content={"error": error.message})

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(details) or "Invalid request"})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})
