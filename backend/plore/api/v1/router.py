"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from plore.api.v1.routes import workouts

api_router = APIRouter()

api_router.include_router(workouts.router, tags=["Workouts"])
