# runner.py
"""
End-to-end pipeline:
1) normalize pantry input (pantry.normalizer.normalize)
2) query TheMealDB per term, concurrently (pantry.mealdb_client.filter_ids_cached)
3) pick candidates: intersection, else union, else suggestion (pantry.ranker.select_candidates)
4) fetch details per candidate, concurrently (pantry.mealdb_client.lookup_meal_cached)
5) score & rank (pantry.ranker.score_and_rank)
6) save to data/results_<query>.json

Run:
  python runner.py sibuyas kamatis "magic sarap"
"""
from __future__ import annotations

import json
import os
import re
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from pantry import cache, mealdb_client
from pantry.datasets import RecipeDetail, SearchResult
from pantry.fallback import fallback_result
from pantry.mealdb_client import MealDbError, Mode
from pantry.normalizer import DEFAULT_MAX_TERMS, normalize
from pantry.ranker import (
    DEFAULT_RESULT_LIMIT,
    DEFAULT_SUMMARY_LIMIT,
    match_counts,
    rank_by_match_count,
    score_and_rank,
    select_candidates,
)

MAX_WORKERS = 6


def _fetch_term_hits(terms: Sequence[str], fetch, max_workers: int):
    """
    Fire one lookup per term, collect all. Returns ({term: result}, failed_terms).
    Failed terms keep search order.
    """
    hits: Dict[str, object] = {}
    failed = set()
    if not terms:
        return hits, []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(terms)))) as ex:
        futures = {ex.submit(fetch, t): t for t in terms}
        for fut in as_completed(futures):
            term = futures[fut]
            try:
                hits[term] = fut.result()
            except (MealDbError, ValueError, KeyError) as e:
                print(f"[runner][WARN] lookup for {term!r} failed: {e}")
                failed.add(term)
    return hits, [t for t in terms if t in failed]


def _fetch_details(ids: Sequence[str], mode: Mode, max_workers: int):
    """Fetch details concurrently; result keeps candidate order. Returns (details, failed_ids)."""
    found: Dict[str, RecipeDetail] = {}
    failed = set()
    if not ids:
        return [], []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(ids)))) as ex:
        futures = {ex.submit(mealdb_client.lookup_meal_cached, i, mode): i for i in ids}
        for fut in as_completed(futures):
            rid = futures[fut]
            try:
                found[rid] = fut.result()
            except (MealDbError, ValueError, KeyError) as e:
                print(f"[runner][WARN] detail for {rid} failed: {e}")
                failed.add(rid)
    return [found[i] for i in ids if i in found], [i for i in ids if i in failed]


def search_recipes(
    raw_inputs: Sequence[str],
    max_terms: int = DEFAULT_MAX_TERMS,
    limit: int = DEFAULT_RESULT_LIMIT,
    mode: Mode = "auto",
    with_fallback: bool = True,
    max_workers: int = MAX_WORKERS,
) -> SearchResult:
    terms = normalize(raw_inputs, max_terms)
    print(f"[runner] search terms: {terms}")
    if not terms:
        return SearchResult(recipes=[], searched_ingredients=[])

    per_term_ids, failed_terms = _fetch_term_hits(
        terms, lambda t: mealdb_client.filter_ids_cached(t, mode), max_workers
    )
    for t in terms:
        if t in per_term_ids:
            print(f"[runner] {t!r} -> {len(per_term_ids[t])} recipe(s)")

    selection = select_candidates(per_term_ids, terms)
    if not selection.candidate_ids:
        fallback = fallback_result(terms) if with_fallback else None
        if selection.suggestion:
            print(f"[runner] no overlap; suggest removing {selection.suggestion!r}")
        return SearchResult(
            recipes=[],
            searched_ingredients=terms,
            suggestion=selection.suggestion,
            failed_terms=failed_terms,
            fallback=fallback,
        )

    details, failed_ids = _fetch_details(selection.candidate_ids, mode, max_workers)
    counts = match_counts(per_term_ids, terms, selection.candidate_ids)
    ranked = score_and_rank(details, counts, terms, limit=limit)
    for rr in ranked:
        print(f"[runner] {rr.recipe.title} -> score={rr.match_info.score:.1f}")

    return SearchResult(
        recipes=ranked,
        searched_ingredients=terms,
        is_partial_match=selection.is_partial_match,
        failed_terms=failed_terms,
        failed_ids=failed_ids,
    )


def quick_search(
    raw_inputs: Sequence[str],
    max_terms: int = DEFAULT_MAX_TERMS,
    limit: int = DEFAULT_SUMMARY_LIMIT,
    mode: Mode = "auto",
    max_workers: int = MAX_WORKERS,
):
    """Match-count-only ranking straight from filter results (no detail fetch)."""
    terms = normalize(raw_inputs, max_terms)
    per_term_stubs, _ = _fetch_term_hits(
        terms, lambda t: mealdb_client.filter_stubs_cached(t, mode), max_workers
    )
    return rank_by_match_count({t: per_term_stubs[t] for t in terms if t in per_term_stubs}, limit=limit)


def find_dish(name: str, limit: int = DEFAULT_RESULT_LIMIT) -> List[RecipeDetail]:
    """Look a dish up by name (e.g. "adobo"). Source errors give an empty list."""
    name = (name or "").strip()
    if not name:
        return []
    try:
        found = mealdb_client.search_by_name(name)
    except MealDbError as e:
        print(f"[runner][WARN] dish lookup for {name!r} failed: {e}")
        return []
    print(f"[runner] dish {name!r} -> {len(found)} recipe(s)")
    return found[: max(0, limit)]


def cache_status() -> Dict[str, int]:
    return {"ingredients": len(cache.FILTER_CACHE), "recipes": len(cache.DETAIL_CACHE)}


def clear_cache():
    cache.clear_all()
    print("[runner] cache cleared")


def split_query(query: str) -> List[str]:
    return [p for p in re.split(r"[,\n;]+", query or "") if p.strip()]


def run_once(query: str, limit: int = DEFAULT_RESULT_LIMIT, mode: Mode = "auto",
             out_dir: Optional[str] = None) -> str:
    result = search_recipes(split_query(query), limit=limit, mode=mode)

    out_dir = out_dir or "data"
    os.makedirs(out_dir, exist_ok=True)

    safe_query = re.sub(r"[^a-z0-9]+", "_", query.strip().lower()).strip("_") or "empty"
    out_path = os.path.join(out_dir, f"results_{safe_query}.json")

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    return out_path


if __name__ == "__main__":
    q = ", ".join(sys.argv[1:]) if len(sys.argv) > 1 else "sibuyas, kamatis"
    path = run_once(q)
    print(f"[OK] Results saved to: {path}")
