"""Recipe page scraper based on embedded schema.org JSON-LD data."""

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
from bs4 import BeautifulSoup
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dispensa.config import get_settings
from dispensa.ingest.parser import ParsedIngredient, parse_ingredient_string
from dispensa.logging_config import get_logger

logger = get_logger(__name__)

# Generic words that say nothing about a recipe
FORBIDDEN_TAGS = frozenset(
    {"ricetta", "ricette", "cucina", "cucinare", "piatti", "portata", "preparazione"}
)
MIN_TAG_LENGTH = 3
MAX_TAG_LENGTH = 19

# How deep to look for a Recipe object inside nested JSON-LD
MAX_SEARCH_DEPTH = 8


class ScraperError(Exception):
    """Base exception for scraper errors."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RecipeFetchError(ScraperError):
    """Raised when a recipe page cannot be downloaded."""


@dataclass
class ScrapedRecipe:
    """Recipe data extracted from a web page."""

    name: str
    ingredients: list[ParsedIngredient] = field(default_factory=list)
    tags: str = ""
    raw_ingredients: list[str] = field(default_factory=list)


def is_recipe_node(node: Any) -> bool:
    """Check whether a JSON-LD object has @type Recipe (alone or in a list)."""
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def find_recipe_node(node: Any, depth: int = 0) -> dict[str, Any] | None:
    """
    Depth-first search for the first Recipe object.

    Handles the three usual layouts: the object itself, an array of objects,
    and a {"@graph": [...]} wrapper.
    """
    if node is None or depth > MAX_SEARCH_DEPTH:
        return None

    if isinstance(node, list):
        for item in node:
            found = find_recipe_node(item, depth + 1)
            if found is not None:
                return found
        return None

    if not isinstance(node, dict):
        return None

    if is_recipe_node(node):
        return node

    graph = node.get("@graph")
    if isinstance(graph, list):
        return find_recipe_node(graph, depth + 1)

    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def clean_tags(recipe_data: dict[str, Any]) -> str:
    """
    Build the comma-joined tag string from recipeCategory and keywords.

    Tags are trimmed, lowercased and deduplicated in order of appearance;
    very short, very long and generic ones are dropped.
    """
    raw_tags: list[str] = [str(c) for c in _as_list(recipe_data.get("recipeCategory"))]

    keywords = recipe_data.get("keywords")
    if isinstance(keywords, str):
        raw_tags.extend(keywords.split(","))
    elif isinstance(keywords, list):
        raw_tags.extend(str(k) for k in keywords)

    tags: list[str] = []
    for tag in raw_tags:
        tag = tag.strip().lower()
        if not MIN_TAG_LENGTH <= len(tag) <= MAX_TAG_LENGTH:
            continue
        if tag in FORBIDDEN_TAGS or tag in tags:
            continue
        tags.append(tag)

    return ",".join(tags)


def _page_title(soup: BeautifulSoup) -> str:
    heading = soup.find("h1")
    if heading and heading.get_text(strip=True):
        return heading.get_text(strip=True)
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    return ""


def extract_recipe(html_text: str) -> ScrapedRecipe:
    """
    Extract a recipe from an HTML page.

    Without a JSON-LD Recipe the page heading (or title) becomes the name
    and the recipe has no ingredients and no tags.
    """
    soup = BeautifulSoup(html_text, "html.parser")

    recipe_data: dict[str, Any] | None = None
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            payload = json.loads(script.string or script.get_text() or "")
        except (json.JSONDecodeError, TypeError) as e:
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
            continue
        recipe_data = find_recipe_node(payload)
        if recipe_data is not None:
            break

    if recipe_data is None:
        logger.info("No JSON-LD recipe found, falling back to page title")
        return ScrapedRecipe(name=_page_title(soup))

    raw_ingredients = recipe_data.get("recipeIngredient") or recipe_data.get("ingredients") or []
    raw_lines = [str(line) for line in _as_list(raw_ingredients)]

    name = recipe_data.get("name")
    if not isinstance(name, str) or not name.strip():
        name = _page_title(soup)

    return ScrapedRecipe(
        name=name.strip(),
        ingredients=[parse_ingredient_string(line) for line in raw_lines],
        tags=clean_tags(recipe_data),
        raw_ingredients=raw_lines,
    )


class RecipeScraper:
    """Downloads recipe pages with a browser-like request and extracts them."""

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.timeout = timeout or settings.scraping_timeout
        self.max_retries = max_retries or settings.scraping_max_retries
        self.user_agent = settings.scraping_user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        return {
            "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
            "Accept-Language": "it-IT,it;q=0.9,en;q=0.8",
            "Cache-Control": "no-cache",
            "User-Agent": self.user_agent,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self._get_headers(),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch_html(self, url: str) -> str:
        """
        Download a page.

        Raises:
            RecipeFetchError: On HTTP errors or when retries are exhausted.
        """
        client = await self._get_client()

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, max=10),
        )
        async def _do_request() -> httpx.Response:
            return await client.get(url)

        try:
            response = await _do_request()
        except RetryError as e:
            logger.error(f"Request failed after {self.max_retries} retries: {url}")
            raise RecipeFetchError(
                f"Request failed after {self.max_retries} retries",
                url=url,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Request error for {url}: {e}")
            raise RecipeFetchError(f"Request failed: {e}", url=url) from e

        if response.status_code >= 400:
            logger.error(f"Request error {response.status_code} for {url}")
            raise RecipeFetchError(
                f"Request failed with status {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        return response.text

    async def scrape(self, url: str) -> ScrapedRecipe:
        """Fetch and extract a recipe; fetch failures raise RecipeFetchError."""
        html_text = await self.fetch_html(url)
        recipe = extract_recipe(html_text)
        logger.info(
            f"Scraped '{recipe.name}' from {url}: {len(recipe.ingredients)} ingredients, "
            f"tags={recipe.tags!r}"
        )
        return recipe

    async def __aenter__(self) -> "RecipeScraper":
        await self._get_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
