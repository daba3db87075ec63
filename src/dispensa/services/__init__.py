"""Application services behind the HTTP API."""

from dispensa.services.dashboard import DashboardService
from dispensa.services.pantry import PantryService
from dispensa.services.recipes import RecipeService
from dispensa.services.weekly_plan import WeeklyPlanService

__all__ = [
    "DashboardService",
    "PantryService",
    "RecipeService",
    "WeeklyPlanService",
]
