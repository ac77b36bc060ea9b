"""
Main API Router for the arrival card service
Includes all endpoint routers
"""

from fastapi import APIRouter

from app.api.v1.endpoints import arrival_cards
from app.api.v1.endpoints import files

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(arrival_cards.router, tags=["Arrival Cards"])

files_router = APIRouter()
files_router.include_router(files.router, prefix="/files", tags=["Files"])
