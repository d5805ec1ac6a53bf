from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.requests import Request
from app.api.auth_routes import router as auth_router
from app.api.center_routes import router as center_router
from app.api.member_routes import router as member_router
from app.api.loan_routes import router as loan_router
from app.api.user_routes import router as user_router
from contextlib import asynccontextmanager
from app.database.connection import init_db
from app.core.config import settings
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
import logging
import traceback


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to every API response.

    OPTIONS requests are left alone so CORSMiddleware can answer preflights
    with its own Access-Control headers.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-XSS-Protection"] = "1; mode=block"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            # Document capture happens in the browser, not through the API origin
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Loan intake for microfinance field officers: centers, members, loan applications and document uploads",
    version="1.0.0",
    lifespan=lifespan
)


logger = logging.getLogger("server_exception_handler")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    # Structured details (e.g. field errors of a rejected loan) go under "details"
    if isinstance(exc.detail, dict):
        message = exc.detail.get("message") or str(exc.status_code)
        details = exc.detail
    else:
        message = str(exc.detail) if exc.detail else str(exc.status_code)
        details = None

    body = {
        "error": {
            "code": "http_error",
            "message": message,
            "status_code": exc.status_code,
            "details": jsonable_encoder(details)
        }
    }
    logger.warning(f"HTTPException handled ({exc.status_code}): {message}")
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = {
        "error": {
            "code": "validation_error",
            "message": "Request validation failed",
            "status_code": 422,
            "details": jsonable_encoder(exc.errors())
        }
    }
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    body = {
        "error": {
            "code": "internal_server_error",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "details": str(exc)
        }
    }
    return JSONResponse(status_code=500, content=body)

# Comma-separated CLIENT_URL values are all allowed
raw_origins = settings.CLIENT_URL or ""
allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

logger.info(f"CORS allowed origins: {allowed_origins}")

# Middleware runs LIFO: CORSMiddleware is added last so it sees preflights first
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
        "Accept-Language",
        "Content-Language",
        "X-Requested-With",
        "Cache-Control",
        "If-Modified-Since",
        "If-None-Match",
        "Pragma",
    ],
    expose_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.include_router(auth_router, prefix="/api")
app.include_router(center_router, prefix="/api")
app.include_router(member_router, prefix="/api")
app.include_router(loan_router, prefix="/api")
app.include_router(user_router, prefix="/api")

@app.get("/")
async def root():
    return {"message": "Loan intake API is running!"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
