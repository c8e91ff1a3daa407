"""FastAPI application entrypoint. Registers middleware, exception handlers and API routers."""

import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings
from app.database import Base, SessionLocal, engine
import app.models  # noqa: F401 - registers model metadata
from app.middleware.error_handlers import register_exception_handlers
from app.routers import auth, projects, tasks, users
from app.services import auth_service

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Kanban-style project and task management API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(users.router)


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        auth_service.ensure_default_admin(db)
    finally:
        db.close()


@app.get("/api")
def api_index():
    return {
        "success": True,
        "message": f"{settings.APP_NAME} is running",
        "data": {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "endpoints": {
                "auth": "/api/auth",
                "projects": "/api/projects",
                "tasks": "/api/tasks",
                "users": "/api/users",
                "health": "/api/health",
            },
        },
    }


@app.get("/api/health")
def health_check():
    database = "connected"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "unavailable"
    return {
        "status": "ok" if database == "connected" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "database": database,
    }
