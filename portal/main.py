"""Discover Portal - FastAPI app entry point."""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles

from portal.core.config import BASE_DIR, get_settings
from portal.core.errors import install_error_handlers
from portal.core.logging import configure_logging, log_requests
from portal.db.base import Base
from portal.db.session import check_connection, engine
from portal.routers import auth, pages
from portal.sessions.gate import require_session
from portal.sessions.store import InMemorySessionStore

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create tables (async)
    if await check_connection():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Register, log in, discover",
    lifespan=lifespan,
)

# Sessions are process-local; a restart logs everyone out
app.state.session_store = InMemorySessionStore()

app.middleware("http")(log_requests)
install_error_handlers(app)

# Mount static files at /static
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

# Access matrix:
#   public        /, /login, /register, /health, /static
#   gated         /discover, /logout  (no session -> 303 /login)
#   self-checked  /profile            (no session -> 401)
app.include_router(auth.router)
app.include_router(pages.router, dependencies=[Depends(require_session)])
app.include_router(pages.profile_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
