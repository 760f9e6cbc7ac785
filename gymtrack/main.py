# gymtrack/main.py
import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from gymtrack.core.config import settings
from gymtrack.core.logger import setup_logging
from gymtrack.core.lifespan import lifespan
from gymtrack.middleware import APIAccessLoggerMiddleware

from gymtrack.domains.auth.router import router as auth_router
from gymtrack.domains.device.router import router as notification_router
from gymtrack.domains.device.router import push_router
from gymtrack.domains.routine.router import router as routine_router
from gymtrack.domains.routine.router import predefined_router

setup_logging()
logger = logging.getLogger("api_monitor")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="GymTrack routines and notification relay API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    APIAccessLoggerMiddleware,
)

# ID token checked per route
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(routine_router, prefix="/api/routines", tags=["Routines"])
app.include_router(predefined_router, prefix="/api/predefined-routines", tags=["Predefined routines"])

# device-local
app.include_router(notification_router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(push_router, prefix="/api/push", tags=["Push"])


@app.get("/")
def health_check():
    return {"status": "ok", "message": "GymTrack is running"}


# ==========================================================
# global error handlers
# ==========================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🛑 [System Error] {request.url} : {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error.",
            "path": str(request.url)
        },
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "fail",
            "message": exc.detail,
            "code": exc.status_code
        },
        headers=exc.headers,
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_details = exc.errors()
    logger.error(f"❌ VALIDATION_ERROR | {request.url} | Details: {error_details}")

    return JSONResponse(
        status_code=422,
        content={
            "status": "fail",
            "message": "Invalid input.",
            "details": jsonable_encoder(error_details)
        },
    )
