"""
Studio Perennis auth service - FastAPI application
"""
from contextlib import asynccontextmanager
from datetime import timedelta
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .auth import PasswordHasher, TokenIssuer
from .config import Settings, get_settings
from .db import Database
from .errors import AuthServiceError
from .mailer import build_mailer
from .routes import auth as auth_routes

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds browser hardening headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and close it on shutdown"""
    database = Database(app.state.settings.DATABASE_URL)
    if not database.check_connection():
        database.dispose()
        raise RuntimeError("Database connection failed")
    database.init_db()
    app.state.database = database
    try:
        yield
    finally:
        database.dispose()


async def auth_error_handler(_request: Request, exc: AuthServiceError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(_request: Request, exc: RequestValidationError):
    logger.info("Rejected request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"message": "Invalid request body"})


def create_app(settings: Settings = None, mailer=None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Studio Perennis Auth",
        description="Signup, signin and password reset",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.tokens = TokenIssuer(
        session_secret=settings.JWT_SECRET,
        reset_secret=settings.JWT_RESET_SECRET,
        session_ttl=timedelta(hours=settings.SESSION_TOKEN_TTL_HOURS),
        reset_ttl=timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
    )
    app.state.mailer = mailer if mailer is not None else build_mailer(settings)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthServiceError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(auth_routes.router)

    @app.get("/")
    def root():
        """Health check"""
        return {"service": "Studio Perennis backend", "status": "live"}

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    logger.info("Server running on port %s", settings.PORT)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
