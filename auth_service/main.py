from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import auth_service.auth.models  # noqa: F401  (registers the tables on Base)
from auth_service import __version__
from auth_service.auth.router import router as auth_router
from auth_service.auth.validators import format_validation_errors
from auth_service.base_microservice import BaseMicroservice
from auth_service.errors import AppError, error_envelope, error_item
from auth_service.users.router import router as users_router

base_service = BaseMicroservice()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Creates missing tables on startup.
    """
    base_service.log_event("service.startup", {"service": "auth"})
    try:
        await base_service.create_tables()
    except Exception as e:
        base_service.log_error(e, context="Auth service startup")
        raise
    yield
    base_service.log_event("service.shutdown", {"service": "auth"})


app = FastAPI(
    title="Auth Service",
    description="User registration and authentication",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/auth")
app.include_router(users_router, prefix="/users")


# --- Global error handling ---

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(format_validation_errors(exc.errors())),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    base_service.logger.error(exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope([error_item(type(exc).__name__, exc.client_message)]),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    base_service.logger.error(str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope([error_item("HTTPException", str(exc.detail))]),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    base_service.log_error(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope([error_item(type(exc).__name__, "Internal server error")]),
    )


@app.get("/", tags=["root"])
async def root():
    return {"message": "Welcome to auth service"}


@app.get("/health", tags=["health"])
async def health_check():
    return {"status": "ok"}


# For running directly with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("auth_service.main:app", host="0.0.0.0", port=base_service.config.port, reload=True)
