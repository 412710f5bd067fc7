from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from smart_triage.config.database import Database
from smart_triage.config.settings import settings
from smart_triage.api.intake import router as intake_router
from smart_triage.api.patients import router as patients_router
from smart_triage.api.dashboard import router as dashboard_router
import logging

# Configure logging
_handlers = [logging.StreamHandler()]
if settings.log_file:
    _handlers.append(logging.FileHandler(settings.log_file))

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=_handlers,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting Smart Triage service...")
    logger.info(f"Environment: {settings.environment}")

    try:
        await Database.connect_db()
        logger.info("MongoDB connected successfully")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down Smart Triage service...")
    await Database.close_db()
    logger.info("MongoDB connection closed")


# Initialize FastAPI app
app = FastAPI(
    title="Smart Triage",
    description="Patient intake, AI triage submission and staff dashboard.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(intake_router)
app.include_router(patients_router)
app.include_router(dashboard_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    try:
        db = Database.get_database()
        await db.command("ping")
        mongodb_status = "connected"
    except Exception as e:
        logger.error(f"MongoDB health check failed: {e}")
        mongodb_status = f"error: {str(e)}"

    return {
        "status": "ok",
        "service": settings.service_name,
        "version": "1.0.0",
        "dependencies": {
            "mongodb": mongodb_status,
            "triage_function": settings.functions_url,
        },
    }


@app.get("/")
async def root():
    """Landing page: what the service does and where its views live."""
    return {
        "message": "Smart Triage - AI-assisted patient triage",
        "description": "Submit patient intake for AI risk classification and "
        "department routing, then review the queue on the staff dashboard.",
        "version": "1.0.0",
        "views": {
            "intake": "/api/v1/intake/catalog",
            "submit": "/api/v1/intake/submit",
            "results": "/api/v1/patients/{patient_id}/results",
            "dashboard": "/api/v1/dashboard",
        },
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.smart_triage_port,
        reload=settings.environment == "development",
    )
