"""
===============================================================================
ranker.py — Candidate selection, scoring and ranking
===============================================================================

Purpose:
    Turns per-term recipe-source hits into an ordered recipe list.

    Key responsibilities:
        • Pick candidate ids: intersection of all term hits, falling back to
          the union (partial matches), else a "try removing X" suggestion
        • Count how many search terms returned each candidate
        • Score fetched recipe details with fixed weights:
              3 × match count
            + 2 × search terms found in the title
            + 2   Filipino dish bonus
            + 1   thumbnail bonus
            − 1   when more than 3 search terms are missing
        • Rank by score (stable), or by match count only when no details
          were fetched

-------------------------------------------------------------------------------
Notes:
    • Pure functions; no I/O. Failed terms/ids are simply absent from the
      inputs, the orchestrator handles transport errors.
    • Union order is first-seen: terms in search order, ids in response order.

===============================================================================
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pantry.datasets import (
    CandidateSelection,
    MatchInfo,
    RankedRecipe,
    RecipeDetail,
    RecipeStub,
    RecipeSummary,
)
from pantry.knowledgebase import FILIPINO_DISH_KEYWORDS

MAX_CANDIDATES = 10
DEFAULT_RESULT_LIMIT = 5
DEFAULT_SUMMARY_LIMIT = 30

MATCH_WEIGHT = 3.0
TITLE_WEIGHT = 2.0
FILIPINO_WEIGHT = 2.0
IMAGE_WEIGHT = 1.0
MISSING_PENALTY = 1.0
MISSING_PENALTY_THRESHOLD = 3


# ================== Candidate selection ==================
def _participating(per_term_ids: Mapping[str, Iterable[str]], search_terms: Sequence[str]):
    """(term, ids) for search terms that have a result entry, in search order."""
    out = []
    for term in search_terms:
        if term in per_term_ids and per_term_ids[term] is not None:
            out.append((term, [str(i) for i in per_term_ids[term]]))
    return out


def suggest_ingredient_to_remove(frequencies: Mapping[str, int]) -> Optional[str]:
    """Least frequent ingredient; the first one wins a tie."""
    best, best_n = None, None
    for term, n in frequencies.items():
        if best_n is None or n < best_n:
            best, best_n = term, n
    return best


def select_candidates(
    per_term_ids: Mapping[str, Iterable[str]],
    search_terms: Sequence[str],
    max_candidates: int = MAX_CANDIDATES,
) -> CandidateSelection:
    """
    Choose which recipe ids to fetch details for.

    Example:
        select_candidates({"tomato": ["1", "2"], "onion": ["2", "3"]}, ["tomato", "onion"])
        -> CandidateSelection(candidate_ids=["2"], suggestion=None, is_partial_match=False)
    """
    terms = _participating(per_term_ids, search_terms)
    if not terms:
        return CandidateSelection(candidate_ids=[])

    union: List[str] = []
    seen = set()
    for _, ids in terms:
        for i in ids:
            if i not in seen:
                seen.add(i)
                union.append(i)

    id_sets = [set(ids) for _, ids in terms]
    intersection = [i for i in union if all(i in s for s in id_sets)]

    if intersection:
        return CandidateSelection(candidate_ids=intersection[:max_candidates])
    if union:
        return CandidateSelection(candidate_ids=union[:max_candidates], is_partial_match=True)

    frequencies = {term: len(set(ids)) for term, ids in terms}
    return CandidateSelection(candidate_ids=[], suggestion=suggest_ingredient_to_remove(frequencies))


# older name for select_candidates
rank_candidates = select_candidates


def match_counts(
    per_term_ids: Mapping[str, Iterable[str]],
    search_terms: Sequence[str],
    candidate_ids: Iterable[str],
) -> Dict[str, int]:
    id_sets = [set(ids) for _, ids in _participating(per_term_ids, search_terms)]
    return {cid: sum(1 for s in id_sets if cid in s) for cid in candidate_ids}


# ================== Scoring ==================
def is_filipino(recipe: RecipeDetail) -> bool:
    if (recipe.area or "").strip().lower() == "filipino":
        return True
    parts = [recipe.title, recipe.area, recipe.category, " ".join(recipe.tags or [])]
    text = " ".join(p for p in parts if p).lower()
    return any(k in text for k in FILIPINO_DISH_KEYWORDS)


def _split_matches(recipe: RecipeDetail, search_terms: Sequence[str]):
    names = [n.strip().lower() for n in recipe.ingredient_names()]
    names = [n for n in names if n]
    matched, missing = [], []
    for term in search_terms:
        t = term.lower()
        if any(t in n or n in t for n in names):
            matched.append(term)
        else:
            missing.append(term)
    return matched, missing


def score_recipe(recipe: RecipeDetail, match_count: int, search_terms: Sequence[str]) -> MatchInfo:
    matched, missing = _split_matches(recipe, search_terms)
    filipino = is_filipino(recipe)

    title = (recipe.title or "").lower()
    title_hits = sum(1 for t in search_terms if t.lower() in title)

    score = MATCH_WEIGHT * match_count
    score += TITLE_WEIGHT * title_hits
    if filipino:
        score += FILIPINO_WEIGHT
    if recipe.thumbnail and recipe.thumbnail.strip():
        score += IMAGE_WEIGHT
    if len(missing) > MISSING_PENALTY_THRESHOLD:
        score -= MISSING_PENALTY

    return MatchInfo(
        matched_ingredients=matched,
        missing_ingredients=missing,
        is_exact_match=not missing and len(matched) == len(search_terms),
        score=float(score),
        is_filipino=filipino,
    )


# ================== Ranking ==================
def score_and_rank(
    recipes: Iterable[RecipeDetail],
    match_counts: Mapping[str, int],
    search_terms: Sequence[str],
    limit: int = DEFAULT_RESULT_LIMIT,
) -> List[RankedRecipe]:
    scored = [
        RankedRecipe(recipe=r, match_info=score_recipe(r, match_counts.get(r.id, 0), search_terms))
        for r in recipes
    ]
    # sorted() is stable: equal scores keep fetch order
    scored = sorted(scored, key=lambda rr: -rr.match_info.score)
    return scored[: max(0, limit)]


def rank_by_match_count(
    per_term_stubs: Mapping[str, Iterable[RecipeStub]],
    limit: int = DEFAULT_SUMMARY_LIMIT,
) -> List[RecipeSummary]:
    counts: Dict[str, int] = {}
    stubs: Dict[str, RecipeStub] = {}
    for _, hits in per_term_stubs.items():
        for stub in {s.id: s for s in hits}.values():
            counts[stub.id] = counts.get(stub.id, 0) + 1
            stubs.setdefault(stub.id, stub)

    rows = [
        RecipeSummary(id=i, title=stubs[i].title, thumbnail=stubs[i].thumbnail, matched_count=n)
        for i, n in counts.items()
    ]
    rows.sort(key=lambda r: (-r.matched_count, r.title))
    return rows[: max(0, limit)]
