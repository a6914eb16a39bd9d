"""
FastAPI application entry point for the Inventory Tracker.
"""

# Load environment variables FIRST before any other imports
from pathlib import Path
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent.parent.parent  # src/inventory_tracker/api/main.py -> root
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

from contextlib import asynccontextmanager
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventory_tracker import __version__
from inventory_tracker.api.routes import box_stock, documents, reports, stock, units
from inventory_tracker.api.middleware.error_handler import ErrorHandlerMiddleware, register_error_handlers
from inventory_tracker.utils.config import get_config
from inventory_tracker.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting Inventory Tracker API...")
    yield
    logger.info("Shutting down Inventory Tracker API...")


app = FastAPI(
    title="Inventory Tracker API",
    description="Warehouse stock ledgers, shipments and reconciliation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ErrorHandlerMiddleware)

register_error_handlers(app)

app.include_router(stock.router, prefix="/api/v1/stock", tags=["Stock"])
app.include_router(units.router, prefix="/api/v1/stock-units", tags=["Stock Units"])
app.include_router(box_stock.router, prefix="/api/v1/box-stock", tags=["Box Stock"])
app.include_router(documents.router, prefix="/api/v1/documents", tags=["Outgoing Documents"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "name": "Inventory Tracker API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "inventory_tracker.api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", 8000)),
        reload=get_config().app.debug_mode
    )
