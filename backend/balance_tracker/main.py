"""FastAPI application entry point."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from balance_tracker.config import settings
from balance_tracker.api.routes import balances, batches, browser
from balance_tracker.utils.errors import (
    BatchNotFoundError,
    ExtractionError,
    InvalidAddressError,
    InvalidInputError,
)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Wallet portfolio balance tracking API"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(balances.router, prefix=f"{settings.api_prefix}/balances", tags=["balances"])
app.include_router(batches.router, prefix=f"{settings.api_prefix}/batches", tags=["batches"])
app.include_router(browser.router, prefix=f"{settings.api_prefix}/browser", tags=["browser"])


@app.exception_handler(InvalidAddressError)
@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(BatchNotFoundError)
async def not_found_handler(request: Request, exc: BatchNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    print(f"Error fetching data: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Wallet Balance Tracker API",
        "version": settings.api_version,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
