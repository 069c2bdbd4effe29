"""
FastAPI application entry-point.
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routers import catalog, listings, properties

app = FastAPI(
    title="Stay Search API",
    version="0.1.0",
    description="Property and listing search with declarative query filters",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(properties.router, prefix="/properties", tags=["Properties"])
app.include_router(listings.router, prefix="/listings", tags=["Listings"])
app.include_router(catalog.router, tags=["Filters"])


@app.get("/health")
def health():
    return {"status": "ok"}
