"""Auth App - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import BASE_DIR, get_settings
from app.core.errors import InfrastructureError
from app.core.logging import configure_logging
from app.core.security import PasswordHasher
from app.db.base import Base
from app.db.session import engine
from app.dependencies import LoginRequired
from app.middleware import session_middleware
from app.routers import auth, web
from app.services.mailer import SmtpMailer
from app.services.sessions import InMemorySessionStore
from app.templating import render

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.session_store = InMemorySessionStore(settings.session_cookie_max_age)
    app.state.password_hasher = PasswordHasher(settings.password_schemes)
    app.state.mailer = SmtpMailer.from_settings(settings)
    logger.info("%s started", settings.app_name)

    yield

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Registration, session login and email password reset",
    lifespan=lifespan,
)

app.middleware("http")(session_middleware)

# Mount static files at /static
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "app" / "static")), name="static")

app.include_router(web.router)
app.include_router(auth.router)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(str(request.url_for("login_get")), status_code=303)


@app.exception_handler(InfrastructureError)
async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return render(
        request,
        "error.html",
        {"message": "Something went wrong on our side. Please try again later."},
        status_code=500,
    )


@app.get("/health")
async def health():
    return {"status": "ok"}
