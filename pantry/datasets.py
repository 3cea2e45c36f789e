"""
===============================================================================
datasets.py — Core data models (RecipeDetail, MatchInfo & search results)
===============================================================================

Purpose:
    Defines the dataclasses shared by the normalizer, the ranker, the
    TheMealDB client, the caches and the presentation layers:
        • RecipeStub — a filter-by-ingredient hit (id, title, thumbnail)
        • RecipeDetail — a full recipe record (ingredients, area, tags...)
        • RecipeSource — where a recipe came from (TheMealDB or generated)
        • MatchInfo — per-recipe match/score information
        • RankedRecipe / RecipeSummary — ranked outputs
        • CandidateSelection / SearchResult — pipeline outputs

Design Principles:
    • Type-safe structure using Python dataclasses.
    • Minimal, dependency-free core that other modules can import without
      circular dependencies.
    • `to_dict()` / `from_dict()` give a JSON-friendly round trip for the
      disk cache, the saved-recipe store and results files.

-------------------------------------------------------------------------------
Notes:
    • TheMealDB returns up to 20 numbered strIngredientN / strMeasureN pairs;
      blank ingredient names are skipped when parsing.

===============================================================================
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

MEALDB_MAX_INGREDIENTS = 20

SOURCE_MEALDB = "themealdb"
SOURCE_GENERATED = "generated"


def _clean_optional(value) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class RecipeSource:
    """
    Tagged origin of a recipe.
    - kind: "themealdb" (sourced) or "generated" (offline fallback)
    - safety_notes: only meaningful for generated recipes
    """
    kind: str = SOURCE_MEALDB
    safety_notes: tuple = ()

    @classmethod
    def sourced(cls) -> "RecipeSource":
        return cls(SOURCE_MEALDB)

    @classmethod
    def generated(cls, safety_notes=()) -> "RecipeSource":
        return cls(SOURCE_GENERATED, tuple(safety_notes))

    @property
    def is_generated(self) -> bool:
        return self.kind == SOURCE_GENERATED

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "safety_notes": list(self.safety_notes)}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "RecipeSource":
        if not data:
            return cls.sourced()
        return cls(data.get("kind") or SOURCE_MEALDB, tuple(data.get("safety_notes") or ()))


@dataclass
class RecipeStub:
    id: str
    title: str
    thumbnail: Optional[str] = None

    @classmethod
    def from_mealdb(cls, meal: Dict) -> "RecipeStub":
        return cls(
            id=str(meal["idMeal"]),
            title=str(meal.get("strMeal") or ""),
            thumbnail=_clean_optional(meal.get("strMealThumb")),
        )

    def to_dict(self) -> Dict:
        return {"id": self.id, "title": self.title, "thumbnail": self.thumbnail}

    @classmethod
    def from_dict(cls, data: Dict) -> "RecipeStub":
        return cls(id=str(data["id"]), title=data.get("title") or "", thumbnail=data.get("thumbnail"))


@dataclass
class RecipeIngredient:
    name: str
    measure: str = ""


@dataclass
class RecipeDetail:
    """
    Full recipe record.
    - id: recipe id in the source (TheMealDB idMeal)
    - ingredients: ordered name/measure pairs
    - tags: free-text tags (TheMealDB strTags split on commas)
    """
    id: str
    title: str
    thumbnail: Optional[str] = None
    category: Optional[str] = None
    area: Optional[str] = None
    ingredients: List[RecipeIngredient] = field(default_factory=list)
    instructions: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    source: RecipeSource = field(default_factory=RecipeSource.sourced)

    def ingredient_names(self) -> List[str]:
        return [i.name for i in self.ingredients]

    @classmethod
    def from_mealdb(cls, meal: Dict) -> "RecipeDetail":
        ingredients: List[RecipeIngredient] = []
        for n in range(1, MEALDB_MAX_INGREDIENTS + 1):
            name = _clean_optional(meal.get(f"strIngredient{n}"))
            if not name:
                continue
            measure = _clean_optional(meal.get(f"strMeasure{n}")) or ""
            ingredients.append(RecipeIngredient(name=name, measure=measure))
        raw_tags = meal.get("strTags") or ""
        tags = [t.strip() for t in str(raw_tags).split(",") if t.strip()]
        return cls(
            id=str(meal["idMeal"]),
            title=str(meal.get("strMeal") or ""),
            thumbnail=_clean_optional(meal.get("strMealThumb")),
            category=_clean_optional(meal.get("strCategory")),
            area=_clean_optional(meal.get("strArea")),
            ingredients=ingredients,
            instructions=_clean_optional(meal.get("strInstructions")),
            tags=tags,
            source=RecipeSource.sourced(),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "category": self.category,
            "area": self.area,
            "ingredients": [{"name": i.name, "measure": i.measure} for i in self.ingredients],
            "instructions": self.instructions,
            "tags": list(self.tags),
            "source": self.source.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "RecipeDetail":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            thumbnail=data.get("thumbnail"),
            category=data.get("category"),
            area=data.get("area"),
            ingredients=[
                RecipeIngredient(name=i.get("name") or "", measure=i.get("measure") or "")
                for i in (data.get("ingredients") or [])
            ],
            instructions=data.get("instructions"),
            tags=list(data.get("tags") or []),
            source=RecipeSource.from_dict(data.get("source")),
        )


@dataclass
class MatchInfo:
    matched_ingredients: List[str]
    missing_ingredients: List[str]
    is_exact_match: bool
    score: float
    is_filipino: bool

    @property
    def is_partial_match(self) -> bool:
        return not self.is_exact_match

    def to_dict(self) -> Dict:
        return {
            "matched_ingredients": list(self.matched_ingredients),
            "missing_ingredients": list(self.missing_ingredients),
            "is_exact_match": self.is_exact_match,
            "score": self.score,
            "is_filipino": self.is_filipino,
        }


@dataclass
class RankedRecipe:
    recipe: RecipeDetail
    match_info: MatchInfo

    def to_dict(self) -> Dict:
        return {"recipe": self.recipe.to_dict(), "match_info": self.match_info.to_dict()}


@dataclass
class RecipeSummary:
    """Match-count-only row (no detail fetch needed)."""
    id: str
    title: str
    thumbnail: Optional[str]
    matched_count: int

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "matched_count": self.matched_count,
        }


@dataclass
class CandidateSelection:
    candidate_ids: List[str]
    suggestion: Optional[str] = None
    is_partial_match: bool = False


@dataclass
class SearchResult:
    recipes: List[RankedRecipe]
    searched_ingredients: List[str]
    suggestion: Optional[str] = None
    is_partial_match: bool = False
    failed_terms: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)
    fallback: Optional[RankedRecipe] = None

    @property
    def source_unreachable(self) -> bool:
        """True when there were terms to search and every term query failed."""
        return bool(self.searched_ingredients) and len(self.failed_terms) == len(self.searched_ingredients)

    def to_dict(self) -> Dict:
        return {
            "searched_ingredients": list(self.searched_ingredients),
            "suggestion": self.suggestion,
            "is_partial_match": self.is_partial_match,
            "source_unreachable": self.source_unreachable,
            "failed_terms": list(self.failed_terms),
            "failed_ids": list(self.failed_ids),
            "recipes": [r.to_dict() for r in self.recipes],
            "fallback": self.fallback.to_dict() if self.fallback else None,
        }
