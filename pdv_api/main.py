from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from pdv_api.database.database import engine, Base

# Import middleware and error handling
from pdv_api.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from pdv_api.core.exceptions import PDVError, pdv_error_handler

# Import routers
from pdv_api.modules.catalog.router import catalog_router
from pdv_api.modules.cart.router import cart_router
from pdv_api.modules.scale.router import scale_router
from pdv_api.modules.pos.routers import cash_registers_router, sales_router

# Import models for table creation
import pdv_api.modules.catalog.models
import pdv_api.modules.pos.models
import pdv_api.modules.scale.models

from pdv_api.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="PDV API",
    description="Caixa do PDV: abertura, movimentações, vendas e fechamento com conferência",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Add your frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(PDVError, pdv_error_handler)

# Include routers
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(cart_router, prefix="/api/v1")
app.include_router(scale_router, prefix="/api/v1")
app.include_router(cash_registers_router, prefix="/api/v1")
app.include_router(sales_router, prefix="/api/v1")

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)

@app.get("/")
async def read_root():
    return {
        "message": "PDV API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}

@app.on_event("startup")
async def startup_event():
    logger.info("PDV API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("PDV API shutting down...")
