# plant journal backend api
# fastapi app with async mongodb, facebook sign-in and jwt auth

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plantjournal.config import settings
from plantjournal.exceptions import (
    DatabaseConnectionError,
    InvalidIdentifier,
    PlantJournalError,
    ValidationError,
)
from plantjournal.services.store import store
from plantjournal.routers import auth, plants, notes

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting plant journal backend...")
    try:
        await store.database.connect()
    except DatabaseConnectionError as e:
        # the store connects lazily, so requests will retry on first use
        logger.error(f"MongoDB not reachable at startup: {e}")
    logger.info("Plant journal backend ready")
    yield
    logger.info("Shutting down plant journal backend...")
    await store.database.close()


app = FastAPI(
    title="Plant Journal API",
    description="Backend API for the plant journal - plants, notes about plants, facebook sign-in",
    version="0.1.0",
    lifespan=lifespan,
)

# cors - allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(auth.router)
app.include_router(plants.router)
app.include_router(notes.router)


# data layer errors -> http status

ERROR_STATUS = {
    InvalidIdentifier: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DatabaseConnectionError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(PlantJournalError)
async def plant_journal_error_handler(request: Request, exc: PlantJournalError):
    code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    return JSONResponse(status_code=code, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "plant-journal-api"}
