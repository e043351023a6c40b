"""
Stock Price Prediction - FastAPI Application
Four simple forecasting heuristics and a consensus view for a price series.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockcast.api import routes
from stockcast.config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Moving average, linear regression, ARIMA-style and volume weighted price predictions",
    version="1.0.0"
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(routes.router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {
        "message": "Stock Price Prediction API",
        "docs": "/docs",
        "health": "ok"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
