# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Hackathon Registration Service
==============================
Accepts team registrations (4–6 members), re-validates every field, rejects
duplicate team names and already-registered members, persists the team and
its members, and emails a confirmation to each member plus an admin summary.

Pipeline per request:
    deadline ─► turnstile ─► parse ─► schema ─► uniqueness ─► persist ─► email

Port: 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hackreg.controllers import registration_controller, system_controller
from hackreg.core.config import settings
from hackreg.core.dependencies import get_registration_repo
from hackreg.core.logging import get_logger
from hackreg.errors import RegistrationError
from hackreg.middleware import RequestContextMiddleware

logger = get_logger()


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    repo = get_registration_repo()
    try:
        repo.create_schema()
        logger.info("Database schema ready")
    except Exception:
        logger.warning("Could not create schema, DB may not be ready yet")
    yield
    repo.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Hackathon Registration Service",
    description="Validates and persists hackathon team registrations.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    if exc.status_code >= 500:
        logger.error("Registration failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "internal_server_error"})


app.include_router(system_controller.router)
app.include_router(registration_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
