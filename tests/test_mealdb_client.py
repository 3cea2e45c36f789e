import pytest
import requests

from pantry import cache, mealdb_client
from pantry.cache import DiskCache
from pantry.datasets import RecipeDetail
from pantry.mealdb_client import MealDbError

ADOBO = {
    "idMeal": "52772",
    "strMeal": "Chicken Adobo",
    "strMealThumb": "https://img/adobo.jpg",
    "strCategory": "Chicken",
    "strArea": "Filipino",
    "strInstructions": "Simmer everything.",
    "strTags": "Stew, Filipino,,",
    "strIngredient1": "Chicken Thighs",
    "strMeasure1": "1kg",
    "strIngredient2": "Soy Sauce",
    "strMeasure2": " 1/2 cup ",
    "strIngredient3": "",
    "strMeasure3": "",
    "strIngredient4": None,
    "strMeasure4": None,
    "strIngredient5": "Garlic",
    "strMeasure5": None,
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def json(self):
        if self.bad_json:
            raise ValueError("no json")
        return self.payload


@pytest.fixture
def calls(monkeypatch, tmp_path):
    """Route SESSION.get through a queue of responses and isolate the caches."""
    log = []
    queue = []

    def fake_get(url, params=None, timeout=None):
        log.append((url, dict(params or {})))
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(mealdb_client.SESSION, "get", fake_get)
    monkeypatch.setattr(mealdb_client, "FILTER_CACHE", DiskCache(tmp_path / "filter.json", 60))
    monkeypatch.setattr(mealdb_client, "DETAIL_CACHE", DiskCache(tmp_path / "detail.json", 60))
    return log, queue


# ---------- parsing ----------
def test_detail_from_mealdb_record():
    d = RecipeDetail.from_mealdb(ADOBO)
    assert d.id == "52772"
    assert d.ingredient_names() == ["Chicken Thighs", "Soy Sauce", "Garlic"]
    assert [i.measure for i in d.ingredients] == ["1kg", "1/2 cup", ""]
    assert d.tags == ["Stew", "Filipino"]
    assert d.source.is_generated is False


def test_detail_dict_round_trip_keeps_source():
    d = RecipeDetail.from_mealdb(ADOBO)
    assert RecipeDetail.from_dict(d.to_dict()) == d


# ---------- plain calls ----------
def test_filter_by_ingredient_builds_url(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": [
        {"idMeal": "1", "strMeal": "A", "strMealThumb": "t1"},
        {"idMeal": "2", "strMeal": "B", "strMealThumb": ""},
    ]}))
    stubs = mealdb_client.filter_by_ingredient("onion")
    assert [(s.id, s.title, s.thumbnail) for s in stubs] == [("1", "A", "t1"), ("2", "B", None)]
    url, params = log[0]
    assert url.endswith("/filter.php")
    assert params == {"i": "onion"}


def test_null_meals_is_empty(calls):
    _, queue = calls
    queue.append(FakeResponse({"meals": None}))
    assert mealdb_client.filter_by_ingredient("durian") == []
    queue.append(FakeResponse({"meals": None}))
    assert mealdb_client.lookup_meal("999") is None


def test_search_by_name(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": [ADOBO]}))
    found = mealdb_client.search_by_name("adobo")
    assert [d.title for d in found] == ["Chicken Adobo"]
    assert log[0][0].endswith("/search.php")
    assert log[0][1] == {"s": "adobo"}


@pytest.mark.parametrize("item", [
    requests.ConnectionError("down"),
    FakeResponse(status_code=500),
    FakeResponse(bad_json=True),
    FakeResponse(["not", "a", "dict"]),
])
def test_transport_problems_raise_mealdb_error(calls, item):
    _, queue = calls
    queue.append(item)
    with pytest.raises(MealDbError):
        mealdb_client.filter_by_ingredient("onion")


# ---------- cached wrappers ----------
def test_auto_mode_uses_fresh_cache(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": [{"idMeal": "1", "strMeal": "A"}]}))
    assert mealdb_client.filter_ids_cached(" Onion ") == ["1"]
    assert mealdb_client.filter_ids_cached("onion") == ["1"]
    assert len(log) == 1


def test_refresh_mode_always_fetches(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": [{"idMeal": "1", "strMeal": "A"}]}))
    queue.append(FakeResponse({"meals": [{"idMeal": "2", "strMeal": "B"}]}))
    mealdb_client.filter_ids_cached("onion")
    assert mealdb_client.filter_ids_cached("onion", mode="refresh") == ["2"]
    assert mealdb_client.filter_ids_cached("onion", mode="offline") == ["2"]
    assert len(log) == 2


def test_offline_mode_never_fetches(calls):
    log, _ = calls
    with pytest.raises(MealDbError):
        mealdb_client.filter_ids_cached("onion", mode="offline")
    assert log == []


def test_auto_serves_stale_entry_when_source_down(calls, monkeypatch):
    log, queue = calls
    monkeypatch.setattr(cache, "_now", lambda: 1000)
    queue.append(FakeResponse({"meals": [{"idMeal": "1", "strMeal": "A"}]}))
    mealdb_client.filter_ids_cached("onion")

    monkeypatch.setattr(cache, "_now", lambda: 5000)
    queue.append(requests.Timeout("slow"))
    assert mealdb_client.filter_ids_cached("onion") == ["1"]
    assert len(log) == 2


def test_auto_without_cache_propagates_error(calls):
    _, queue = calls
    queue.append(requests.ConnectionError("down"))
    with pytest.raises(MealDbError):
        mealdb_client.filter_ids_cached("onion")


def test_empty_filter_result_is_cached(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": None}))
    assert mealdb_client.filter_ids_cached("durian") == []
    assert mealdb_client.filter_ids_cached("durian") == []
    assert len(log) == 1


def test_lookup_meal_cached(calls):
    log, queue = calls
    queue.append(FakeResponse({"meals": [ADOBO]}))
    first = mealdb_client.lookup_meal_cached("52772")
    second = mealdb_client.lookup_meal_cached("52772")
    assert first == second
    assert first.title == "Chicken Adobo"
    assert len(log) == 1
    assert log[0][1] == {"i": "52772"}


def test_lookup_meal_cached_not_found_raises(calls):
    _, queue = calls
    queue.append(FakeResponse({"meals": None}))
    with pytest.raises(MealDbError):
        mealdb_client.lookup_meal_cached("404")


def test_malformed_cached_values_raise_mealdb_error(calls):
    log, _ = calls
    mealdb_client.FILTER_CACHE.set("onion", ["not-a-stub"])
    mealdb_client.DETAIL_CACHE.set("2", {"id": "2", "ingredients": ["tomato"]})
    with pytest.raises(MealDbError):
        mealdb_client.filter_ids_cached("onion")
    with pytest.raises(MealDbError):
        mealdb_client.lookup_meal_cached("2", mode="offline")
    assert log == []
