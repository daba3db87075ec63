"""Recipe import from web pages."""

from dispensa.ingest.parser import ParsedIngredient, parse_ingredient_string
from dispensa.ingest.scraper import (
    RecipeFetchError,
    RecipeScraper,
    ScrapedRecipe,
    ScraperError,
    extract_recipe,
)

__all__ = [
    "ParsedIngredient",
    "RecipeFetchError",
    "RecipeScraper",
    "ScrapedRecipe",
    "ScraperError",
    "extract_recipe",
    "parse_ingredient_string",
]
