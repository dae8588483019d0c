"""FixYourCity: FastAPI app."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fixyourcity.config import settings
from fixyourcity.dashboard import router as dashboard_router
from fixyourcity.reports import router as reports_router
from fixyourcity.reports.exceptions import StorageWriteError

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FixYourCity",
    description="Citizen issue reporting with a municipal dashboard",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router.router)
app.include_router(dashboard_router.router)


@app.exception_handler(StorageWriteError)
async def storage_write_error_handler(request: Request, exc: StorageWriteError):
    logger.error("Storage write failed during %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "ok", "storage_key": settings.storage_key}
