"""API routers for the dispensa application."""

from dispensa.routers.dashboard import router as dashboard_router
from dispensa.routers.inspiration import router as inspiration_router
from dispensa.routers.pantry import router as pantry_router
from dispensa.routers.recipes import router as recipes_router
from dispensa.routers.shopping_list import router as shopping_list_router
from dispensa.routers.weekly_plan import router as weekly_plan_router

__all__ = [
    "dashboard_router",
    "inspiration_router",
    "pantry_router",
    "recipes_router",
    "shopping_list_router",
    "weekly_plan_router",
]
