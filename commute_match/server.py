from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from commute_match.core.config import settings
from commute_match.core.exceptions import setup_exception_handlers
from commute_match.database import client, init_indexes
from commute_match.routers import create_api_router

# Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(title="Commute Match API")
api_router = create_api_router()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=settings.cors_origins.split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


@api_router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Commute Match API"}


@api_router.get("/config")
async def get_client_config():
    """Values the web client needs to render maps and the workplace."""
    return {
        "maps_api_key": settings.google_maps_api_key or "",
        "workplace_name": settings.workplace_name,
        "workplace_address": settings.workplace_address,
        "workplace_lat": settings.work_lat,
        "workplace_lng": settings.work_lng
    }


app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    await init_indexes()
    logger.info("Commute Match API started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    client.close()
    logger.info("Commute Match API shutting down")
