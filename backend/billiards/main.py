import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from billiards import __version__
from billiards.api.routes.badges import router as badges_router
from billiards.api.routes.matches import router as matches_router
from billiards.api.routes.players import router as players_router
from billiards.api.routes.stats import router as stats_router
from billiards.core.config import settings
from billiards.core.errors import STATUS_BY_KIND, AppError, ErrorKind, database_error
from billiards.core.log import RequestLoggingMiddleware, setup_logging
from billiards.core.timeframes import utcnow
from billiards.db.init_db import migrate
from billiards.db.session import SessionLocal, get_db
from billiards.schemas.envelope import fail, ok
from billiards.services.players import seed_default_players

log = logging.getLogger(__name__)

_missing = [k.name for k in ErrorKind if k not in STATUS_BY_KIND]
if _missing:
    raise RuntimeError(f"ErrorKind without an HTTP status: {', '.join(_missing)}")


def _details(details):
    return None if settings.is_production else details


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    log.info("Starting billiards API (%s)", settings.ENVIRONMENT)

    db = SessionLocal()
    try:
        migrate(db)
        if settings.AUTO_INIT_PLAYERS:
            try:
                created = seed_default_players(db, settings.default_players)
                if created:
                    log.info("Seeded default players: %s", [p.name for p in created])
            except Exception:
                db.rollback()
                log.exception("Default player seeding failed, continuing without it")
    finally:
        db.close()

    yield
    log.info("Shutting down billiards API")


app = FastAPI(title="Billiards Score API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(exc.message, exc.kind.value, _details(exc.details)),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"), "message": e.get("msg")}
        for e in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=STATUS_BY_KIND[ErrorKind.VALIDATION],
        content=fail(message, ErrorKind.VALIDATION.value, _details({"errors": errors})),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = ErrorKind.NOT_FOUND.value if exc.status_code == 404 else "HTTP_ERROR"
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail), code))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    log.exception("Database error on %s %s", request.method, request.url.path)
    err = database_error(f"{request.method} {request.url.path}", exc)
    return JSONResponse(
        status_code=err.status_code,
        content=fail(err.message, err.kind.value, _details(err.details)),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=fail("Internal server error", "INTERNAL_ERROR"))


app.include_router(players_router, prefix=settings.API_PREFIX)
app.include_router(matches_router, prefix=settings.API_PREFIX)
app.include_router(stats_router, prefix=settings.API_PREFIX)
app.include_router(badges_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    return ok(
        {
            "name": "Billiards Score API",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
            "timestamp": utcnow(),
        }
    )


@app.get("/health")
def health(db: Session = Depends(get_db)):
    database = "up"
    players_table = "missing"
    try:
        db.execute(text("SELECT 1"))
        if inspect(db.get_bind()).has_table("players"):
            players_table = "exists"
    except SQLAlchemyError:
        log.exception("Health check could not reach the database")
        database = "down"

    healthy = database == "up" and players_table == "exists"
    return ok(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": utcnow(),
            "services": {"database": database, "tables": {"players": players_table}},
        }
    )


if __name__ == "__main__":
    uvicorn.run("billiards.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
