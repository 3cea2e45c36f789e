"""
TheMealDB client with disk caching and mode control.

Features:
- filter_by_ingredient(term)  -> List[RecipeStub]      (filter.php?i=)
- lookup_meal(meal_id)        -> RecipeDetail | None    (lookup.php?i=)
- search_by_name(name)        -> List[RecipeDetail]     (search.php?s=)
- Cached wrappers with modes:
    - "offline": use disk cache only (stale allowed), never hit the API.
    - "auto":    use cache when fresh; fetch missing/expired and write back.
                 If the API is unreachable, serve a stale entry when present.
    - "refresh": force the API and overwrite the cache.

Single attempt per request; retry policy is left to callers.
Config (env or .env): MEALDB_BASE_URL, MEALDB_API_KEY, MEALDB_TIMEOUT.

Dependencies: requests, python-dotenv
"""

from __future__ import annotations

import os
from typing import Dict, List, Literal, Optional

import requests
from dotenv import load_dotenv

from pantry.cache import DETAIL_CACHE, FILTER_CACHE, DiskCache
from pantry.datasets import RecipeDetail, RecipeStub

load_dotenv()

# --- Constants -----------------------------------------------------------
MEALDB_BASE_URL = os.getenv("MEALDB_BASE_URL", "https://www.themealdb.com/api/json/v1").rstrip("/")
MEALDB_API_KEY = os.getenv("MEALDB_API_KEY", "1")
MEALDB_TIMEOUT = float(os.getenv("MEALDB_TIMEOUT", "15"))

Mode = Literal["auto", "offline", "refresh"]

SESSION = requests.Session()
SESSION.headers.update({
    "User-Agent": "PantryRecipeFinder/1.0 (+ingredient search)",
    "Accept": "application/json",
})


class MealDbError(RuntimeError):
    """Recipe source unreachable, errored, or returned an unusable payload."""


# =============== Low-level HTTP helpers =================================
def _url(endpoint: str) -> str:
    return f"{MEALDB_BASE_URL}/{MEALDB_API_KEY}/{endpoint}"


def _get_json(endpoint: str, params: Dict[str, str]) -> dict:
    url = _url(endpoint)
    try:
        resp = SESSION.get(url, params=params, timeout=MEALDB_TIMEOUT)
    except requests.RequestException as e:
        raise MealDbError(f"GET failed for {endpoint}: {e}") from e
    if resp.status_code != 200:
        raise MealDbError(f"GET failed for {endpoint}: HTTP {resp.status_code}")
    try:
        data = resp.json()
    except ValueError as e:
        raise MealDbError(f"Malformed JSON from {endpoint}") from e
    if not isinstance(data, dict):
        raise MealDbError(f"Unexpected payload from {endpoint}")
    return data


def _meals(data: dict) -> list:
    # TheMealDB returns {"meals": null} for no hits
    meals = data.get("meals")
    return meals if isinstance(meals, list) else []


# =============== Plain API calls ========================================
def filter_by_ingredient(term: str) -> List[RecipeStub]:
    data = _get_json("filter.php", {"i": term})
    out: List[RecipeStub] = []
    for meal in _meals(data):
        if isinstance(meal, dict) and meal.get("idMeal"):
            out.append(RecipeStub.from_mealdb(meal))
    return out


def lookup_meal(meal_id: str) -> Optional[RecipeDetail]:
    data = _get_json("lookup.php", {"i": str(meal_id)})
    meals = [m for m in _meals(data) if isinstance(m, dict) and m.get("idMeal")]
    if not meals:
        return None
    return RecipeDetail.from_mealdb(meals[0])


def search_by_name(name: str) -> List[RecipeDetail]:
    data = _get_json("search.php", {"s": name})
    return [
        RecipeDetail.from_mealdb(m)
        for m in _meals(data)
        if isinstance(m, dict) and m.get("idMeal")
    ]


# =============== Cached wrappers ========================================
def _cached(cache: DiskCache, key: str, fetch, mode: Mode):
    """
    Shared mode logic. `fetch` returns a JSON-friendly value.
    Returns the cached or freshly fetched value; raises MealDbError when
    nothing usable is available.
    """
    if mode == "offline":
        hit = cache.get(key, allow_stale=True)
        if hit is None:
            raise MealDbError(f"offline mode: no cached entry for {key!r}")
        return hit

    if mode != "refresh":
        hit = cache.get(key)
        if hit is not None:
            return hit

    try:
        value = fetch()
    except MealDbError as e:
        stale = cache.get(key, allow_stale=True) if mode == "auto" else None
        if stale is None:
            raise
        print(f"[mealdb][WARN] {e}; serving stale cache for {key!r}")
        return stale

    cache.set(key, value)
    return value


def _decode(key: str, decode, value):
    try:
        return decode(value)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MealDbError(f"malformed cached entry for {key!r}: {e!r}") from e


def filter_stubs_cached(term: str, mode: Mode = "auto") -> List[RecipeStub]:
    key = term.strip().lower()
    value = _cached(
        FILTER_CACHE,
        key,
        lambda: [s.to_dict() for s in filter_by_ingredient(key)],
        mode,
    )
    return _decode(key, lambda v: [RecipeStub.from_dict(d) for d in v], value)


def filter_ids_cached(term: str, mode: Mode = "auto") -> List[str]:
    return [s.id for s in filter_stubs_cached(term, mode=mode)]


def lookup_meal_cached(meal_id: str, mode: Mode = "auto") -> RecipeDetail:
    key = str(meal_id)

    def fetch():
        detail = lookup_meal(key)
        if detail is None:
            raise MealDbError(f"recipe {key} not found")
        return detail.to_dict()

    return _decode(key, RecipeDetail.from_dict, _cached(DETAIL_CACHE, key, fetch, mode))
