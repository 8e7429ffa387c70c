from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import get_settings
from api.errors import register_exception_handlers
from api.users import router as users_router
from api.hospitals import router as hospitals_router
from api.pharmacies import router as pharmacies_router
from database.connection import engine, Base

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create missing tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready (%s)", engine.url.render_as_string(hide_password=True))
    yield
    # Shutdown
    engine.dispose()


app = FastAPI(
    title="MediConnect API",
    description="Patients, hospitals and pharmacies: doctor and medicine search",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.settings = settings

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(users_router)
app.include_router(hospitals_router)
app.include_router(pharmacies_router)


@app.get("/api/health")
async def health_check():
    return {"success": True, "message": "MediConnect API is running"}


if __name__ == "__main__":
    logger.info("Server running on port %s", settings.port)
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=not settings.is_production)
