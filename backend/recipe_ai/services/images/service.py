"""Recipe image URL resolution with caching.

Builds dish photo URLs for recipe cards without storing any images:
1. Image cache (same title + first 3 ingredients → same picture for 24h)
2. Pollinations.ai food-photography prompt URL (free, no API key)
3. Unsplash keyword URL
4. Themed static Unsplash photo by dish type

When ``verify_urls`` is on, candidates 2 and 3 are checked with a streamed GET
and skipped if unreachable. Otherwise the Pollinations URL is used directly.
"""

import logging
from collections.abc import Sequence
from urllib.parse import quote

import httpx

from recipe_ai.services.cache import ImageCache

logger = logging.getLogger(__name__)

_UNSPLASH_PHOTO = "https://images.unsplash.com/photo-{}?w=400&h=300&fit=crop&crop=center&auto=format&q=80"

# (title keywords, photo id), first match wins.
THEMED_FALLBACKS: list[tuple[tuple[str, ...], str]] = [
    (("pasta", "spaghetti", "noodle"), "1551892374-ecf8754cf8b0"),
    (("pizza",), "1565299624946-b28f40a0ca4b"),
    (("salad",), "1512621776951-a57141f2eefd"),
    (("soup",), "1547592180-85f173990554"),
    (("chicken",), "1598103442097-8b74394b95c6"),
    (("beef", "steak"), "1546833999-b9f581a1996d"),
    (("fish", "salmon"), "1519708227418-c8fd9a32b7a2"),
    (("dessert", "cake", "sweet"), "1551024506-0bccd828d307"),
]
GENERIC_FALLBACK_PHOTO = "1546554137-f86b9593a222"

FOOD_KEYWORDS = (
    "chicken", "beef", "pork", "fish", "salmon", "shrimp", "pasta", "rice", "curry",
    "soup", "salad", "pizza", "burger", "sandwich", "stir-fry", "grilled", "baked",
    "fried", "roasted", "steamed", "vegetarian", "vegan", "spicy", "sweet", "savory",
    "healthy", "quinoa", "tofu", "eggs", "cheese", "bread", "noodles", "tacos",
    "burrito", "sushi", "steak", "lobster", "crab", "vegetables", "fruit",
)


def food_photo_prompt(title: str, ingredients: Sequence[str]) -> str:
    """Food-photography prompt using the head noun of the first 3 ingredients."""
    key_ingredients = ", ".join(
        ing.split()[-1] for ing in ingredients[:3] if ing.strip()
    )
    return (
        f"Professional food photography of {title}, featuring {key_ingredients}, "
        f"beautifully plated, restaurant quality, natural lighting, appetizing, "
        f"high resolution, food styling, garnished, colorful, delicious looking"
    )


def extract_food_terms(title: str) -> list[str]:
    words = title.lower().split()
    matched = [
        w for w in words
        if len(w) > 2 and any(k in w or w in k for k in FOOD_KEYWORDS)
    ]
    return matched[:3] if matched else words[:2]


def themed_fallback_image(title: str) -> str:
    lowered = title.lower()
    for keywords, photo_id in THEMED_FALLBACKS:
        if any(k in lowered for k in keywords):
            return _UNSPLASH_PHOTO.format(photo_id)
    return _UNSPLASH_PHOTO.format(GENERIC_FALLBACK_PHOTO)


class RecipeImageService:
    """Resolves and caches an image URL per dish.

    Uses a shared httpx client for the optional reachability checks.
    """

    POLLINATIONS_URL = "https://image.pollinations.ai/prompt/"
    UNSPLASH_SOURCE_URL = "https://source.unsplash.com/400x300/"

    HEADERS = {"User-Agent": "RecipeAI/1.0"}

    def __init__(
        self,
        cache: ImageCache,
        verify_urls: bool = False,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self._verify_urls = verify_urls
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def pollinations_url(self, title: str, ingredients: Sequence[str]) -> str:
        prompt = quote(food_photo_prompt(title, ingredients), safe="")
        return f"{self.POLLINATIONS_URL}{prompt}?width=400&height=300&model=flux&enhance=true&nologo=true"

    def unsplash_url(self, title: str) -> str:
        query = quote(" ".join(extract_food_terms(title)), safe="")
        return f"{self.UNSPLASH_SOURCE_URL}?{query},food,recipe,delicious"

    async def _is_reachable(self, url: str) -> bool:
        try:
            async with self._get_client().stream("GET", url) as response:
                return response.status_code < 400
        except httpx.HTTPError as e:
            logger.info(f"[IMAGE] Unreachable {url[:60]}: {type(e).__name__}")
            return False

    async def resolve_image(self, title: str, ingredients: Sequence[str]) -> tuple[str, bool]:
        """Return ``(url, served_from_cache)`` for a dish."""
        cached = self._cache.get_cached_image(title, ingredients)
        if cached:
            return cached, True

        url = self.pollinations_url(title, ingredients)
        if self._verify_urls:
            for candidate in (url, self.unsplash_url(title)):
                if await self._is_reachable(candidate):
                    url = candidate
                    break
            else:
                url = themed_fallback_image(title)
                logger.info(f"[IMAGE] Using themed fallback for: {title}")

        self._cache.cache_image(title, ingredients, url)
        return url, False
