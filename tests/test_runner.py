import json

import pytest

import runner
from pantry import cache, mealdb_client
from pantry.cache import DiskCache
from pantry.datasets import RecipeDetail, RecipeIngredient, RecipeStub
from pantry.mealdb_client import MealDbError

HITS = {"tomato": ["1", "2"], "onion": ["2", "3"]}
TITLES = {"1": "Bruschetta", "2": "Tomato and Onion Salad", "3": "Onion Soup"}
INGREDIENTS = {"1": ["tomato", "bread"], "2": ["tomato", "onion"], "3": ["onion", "stock"]}


def _detail(rid):
    return RecipeDetail(
        id=rid,
        title=TITLES[rid],
        thumbnail=f"https://img/{rid}.jpg",
        ingredients=[RecipeIngredient(n) for n in INGREDIENTS[rid]],
    )


@pytest.fixture
def source(monkeypatch):
    """Stub recipe source. Terms/ids listed in `down` raise MealDbError."""
    state = {"hits": dict(HITS), "down": set(), "lookups": []}

    def filter_ids(term, mode="auto"):
        if term in state["down"]:
            raise MealDbError(f"{term} unreachable")
        return list(state["hits"].get(term, []))

    def filter_stubs(term, mode="auto"):
        return [RecipeStub(i, TITLES[i]) for i in filter_ids(term, mode)]

    def lookup(meal_id, mode="auto"):
        state["lookups"].append(meal_id)
        if meal_id in state["down"]:
            raise MealDbError(f"recipe {meal_id} unreachable")
        return _detail(meal_id)

    monkeypatch.setattr(mealdb_client, "filter_ids_cached", filter_ids)
    monkeypatch.setattr(mealdb_client, "filter_stubs_cached", filter_stubs)
    monkeypatch.setattr(mealdb_client, "lookup_meal_cached", lookup)
    return state


def test_end_to_end_typo_and_filipino_input(source):
    result = runner.search_recipes(["t0mat0", "sibuyas"])
    assert result.searched_ingredients == ["tomato", "onion"]
    assert [rr.recipe.id for rr in result.recipes] == ["2"]
    assert result.recipes[0].match_info.is_exact_match
    assert result.is_partial_match is False
    assert result.fallback is None
    assert source["lookups"] == ["2"]


def test_quick_search_ranks_by_match_count(source):
    rows = runner.quick_search(["t0mat0", "sibuyas"])
    assert [(r.id, r.matched_count) for r in rows] == [("2", 2), ("1", 1), ("3", 1)]


def test_partial_matches_when_no_intersection(source):
    source["hits"] = {"tomato": ["1"], "onion": ["3"]}
    result = runner.search_recipes(["tomato", "onion"])
    assert result.is_partial_match is True
    assert sorted(rr.recipe.id for rr in result.recipes) == ["1", "3"]


def test_nothing_found_gives_suggestion_and_fallback(source):
    source["hits"] = {"tomato": [], "onion": []}
    result = runner.search_recipes(["tomato", "onion"])
    assert result.recipes == []
    assert result.suggestion == "tomato"
    assert result.fallback is not None
    assert result.fallback.recipe.source.is_generated
    assert source["lookups"] == []


def test_fallback_can_be_disabled(source):
    source["hits"] = {}
    result = runner.search_recipes(["tomato"], with_fallback=False)
    assert result.fallback is None


def test_failed_term_is_excluded(source):
    source["down"] = {"onion"}
    result = runner.search_recipes(["tomato", "onion"])
    assert result.failed_terms == ["onion"]
    assert result.source_unreachable is False
    # only "tomato" participates, so both of its hits are candidates
    assert sorted(rr.recipe.id for rr in result.recipes) == ["1", "2"]


def test_every_term_failing_means_source_unreachable(source):
    source["down"] = {"tomato", "onion"}
    result = runner.search_recipes(["tomato", "onion"])
    assert result.recipes == []
    assert result.suggestion is None
    assert result.failed_terms == ["tomato", "onion"]
    assert result.source_unreachable is True


def test_failed_detail_is_skipped(source):
    source["hits"] = {"tomato": ["1", "2", "3"]}
    source["down"] = {"2"}
    result = runner.search_recipes(["tomato"])
    assert result.failed_ids == ["2"]
    assert [rr.recipe.id for rr in result.recipes] == ["1", "3"]


def test_limit_and_empty_input(source):
    source["hits"] = {"tomato": ["1", "2", "3"]}
    assert len(runner.search_recipes(["tomato"], limit=2).recipes) == 2
    empty = runner.search_recipes(["", "Knorr"])
    assert empty.searched_ingredients == []
    assert empty.recipes == []
    assert empty.source_unreachable is False


def test_split_query():
    assert runner.split_query("sibuyas, kamatis\negg;; ") == ["sibuyas", " kamatis", "egg"]
    assert runner.split_query("") == []


def test_run_once_writes_json(source, tmp_path):
    path = runner.run_once("T0mat0, Sibuyas", out_dir=str(tmp_path))
    assert path.endswith("results_t0mat0_sibuyas.json")
    with open(path, encoding="utf-8") as f:
        doc = json.load(f)
    assert doc["searched_ingredients"] == ["tomato", "onion"]
    assert doc["recipes"][0]["recipe"]["id"] == "2"
    assert doc["source_unreachable"] is False


# ---------- real client over seeded disk caches ----------
@pytest.fixture
def seeded_cache(monkeypatch, tmp_path):
    filter_cache = DiskCache(tmp_path / "filter.json", 60)
    detail_cache = DiskCache(tmp_path / "detail.json", 60)
    monkeypatch.setattr(mealdb_client, "FILTER_CACHE", filter_cache)
    monkeypatch.setattr(mealdb_client, "DETAIL_CACHE", detail_cache)
    return filter_cache, detail_cache


def test_malformed_cached_detail_is_skipped(seeded_cache):
    filter_cache, detail_cache = seeded_cache
    filter_cache.set("tomato", [{"id": "1", "title": "Bruschetta"}, {"id": "2", "title": "Salad"}])
    detail_cache.set("1", _detail("1").to_dict())
    detail_cache.set("2", {"id": "2", "ingredients": ["tomato"]})

    result = runner.search_recipes(["tomato"], mode="offline")
    assert [rr.recipe.id for rr in result.recipes] == ["1"]
    assert result.failed_ids == ["2"]


def test_cache_entry_with_null_timestamp_fails_only_that_term(seeded_cache, tmp_path):
    filter_cache, detail_cache = seeded_cache
    filter_cache.set("tomato", [{"id": "1", "title": "Bruschetta"}])
    doc = json.loads((tmp_path / "filter.json").read_text("utf-8"))
    doc["data"]["onion"] = {"value": [{"id": "3", "title": "Onion Soup"}], "ts": None}
    (tmp_path / "filter.json").write_text(json.dumps(doc), encoding="utf-8")
    detail_cache.set("1", _detail("1").to_dict())

    result = runner.search_recipes(["tomato", "onion"], mode="offline")
    assert result.failed_terms == ["onion"]
    assert [rr.recipe.id for rr in result.recipes] == ["1"]


# ---------- dish lookup and cache controls ----------
def test_find_dish(monkeypatch):
    monkeypatch.setattr(mealdb_client, "search_by_name", lambda name: [_detail("1"), _detail("2")])
    assert [r.id for r in runner.find_dish(" bruschetta ", limit=1)] == ["1"]
    assert runner.find_dish("   ") == []


def test_find_dish_source_down_gives_empty_list(monkeypatch):
    def down(name):
        raise MealDbError("down")

    monkeypatch.setattr(mealdb_client, "search_by_name", down)
    assert runner.find_dish("adobo") == []


def test_cache_status_and_clear(monkeypatch, tmp_path):
    f = DiskCache(tmp_path / "f.json", 60)
    d = DiskCache(tmp_path / "d.json", 60)
    f.set("onion", [])
    f.set("tomato", [])
    d.set("1", _detail("1").to_dict())
    monkeypatch.setattr(cache, "FILTER_CACHE", f)
    monkeypatch.setattr(cache, "DETAIL_CACHE", d)
    assert runner.cache_status() == {"ingredients": 2, "recipes": 1}
    runner.clear_cache()
    assert runner.cache_status() == {"ingredients": 0, "recipes": 0}
