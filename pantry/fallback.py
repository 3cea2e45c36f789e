"""
Offline fallback recipes, offered when no sourced recipe overlaps the pantry.

The picks are curated Filipino home dishes chosen from the search terms:
    chicken        -> Chicken Adobo
    pork           -> Pork Adobo
    3+ ingredients -> Pinakbet
    otherwise      -> Filipino-style stir fry built from the terms

Every generated recipe carries safety notes (see ensure_safety_notes).
"""
from __future__ import annotations

from typing import List, Sequence

from pantry.datasets import RankedRecipe, RecipeDetail, RecipeIngredient, RecipeSource
from pantry.ranker import score_recipe

# (trigger words, note, markers that mean the note is already present)
SAFETY_RULES = [
    (("chicken", "manok"), "Cook chicken to internal temperature of 165°F (74°C)", ("165°F", "74°C")),
    (("pork", "baboy"), "Cook pork to internal temperature of 145°F (63°C)", ("145°F", "63°C")),
    (("ground", "giniling"), "Cook ground meat to internal temperature of 160°F (71°C)", ("160°F", "71°C")),
]


def ensure_safety_notes(recipe: RecipeDetail) -> RecipeDetail:
    """Return a copy of a generated recipe with any missing temperature notes added."""
    notes = list(recipe.source.safety_notes)
    text = " ".join(
        [recipe.title] + recipe.ingredient_names() + [recipe.instructions or ""]
    ).lower()
    for triggers, note, markers in SAFETY_RULES:
        if not any(t in text for t in triggers):
            continue
        if not any(m in n for n in notes for m in markers):
            notes.append(note)
    out = RecipeDetail.from_dict(recipe.to_dict())
    out.source = RecipeSource.generated(notes)
    return out


def _adobo(meat: str, meat_name: str) -> RecipeDetail:
    return RecipeDetail(
        id=f"generated-{meat}-adobo",
        title=f"{meat_name} Adobo (Filipino Style)",
        category=meat_name,
        area="Filipino",
        ingredients=[
            RecipeIngredient(f"{meat_name} pieces", "1 kg"),
            RecipeIngredient("Soy sauce", "1/2 cup"),
            RecipeIngredient("White vinegar", "1/4 cup"),
            RecipeIngredient("Garlic", "6 cloves"),
            RecipeIngredient("Bay leaves", "3 pieces"),
            RecipeIngredient("Black peppercorns", "1 tsp"),
        ],
        instructions="\n".join([
            f"Combine {meat}, soy sauce, vinegar, garlic, bay leaves, and peppercorns in a pot.",
            "Marinate for at least 30 minutes.",
            "Bring to a boil, then simmer covered for 20 minutes.",
            "Remove cover and continue cooking until sauce reduces.",
            "Serve hot with steamed rice.",
        ]),
        tags=["Adobo", "Filipino"],
        source=RecipeSource.generated(),
    )


def _pinakbet(terms: Sequence[str]) -> RecipeDetail:
    base = ["squash", "eggplant", "bitter gourd", "string beans", "tomato", "onion", "garlic"]
    names: List[str] = list(dict.fromkeys(list(terms) + base))
    return RecipeDetail(
        id="generated-pinakbet",
        title="Simple Pinakbet",
        category="Vegetable",
        area="Filipino",
        ingredients=[RecipeIngredient(n, "as needed") for n in names]
        + [RecipeIngredient("shrimp paste", "2 tbsp")],
        instructions="\n".join([
            "Saute garlic, onion and tomato until soft.",
            "Add shrimp paste and cook for a minute.",
            "Add the harder vegetables first, then the rest, with a splash of water.",
            "Cover and simmer until the vegetables are just tender.",
        ]),
        tags=["Pinakbet", "Filipino"],
        source=RecipeSource.generated(),
    )


def _stir_fry(terms: Sequence[str]) -> RecipeDetail:
    return RecipeDetail(
        id="generated-stir-fry",
        title="Filipino-Style Stir Fry",
        area="Filipino",
        ingredients=[RecipeIngredient(t, "as needed") for t in terms],
        instructions="\n".join([
            "Heat oil in a large pan or wok.",
            "Add garlic and onions, saute until fragrant.",
            "Add main ingredients and cook thoroughly.",
            "Season with soy sauce and pepper.",
        ]),
        tags=["Ginisa"],
        source=RecipeSource.generated([
            "Ensure all meat is cooked to safe temperatures",
            "Wash vegetables thoroughly before cooking",
        ]),
    )


def generate_fallback_recipe(search_terms: Sequence[str]) -> RecipeDetail:
    if any("chicken" in t for t in search_terms):
        recipe = _adobo("chicken", "Chicken")
    elif any("pork" in t for t in search_terms):
        recipe = _adobo("pork", "Pork")
    elif len(search_terms) >= 3:
        recipe = _pinakbet(search_terms)
    else:
        recipe = _stir_fry(search_terms)
    return ensure_safety_notes(recipe)


def fallback_result(search_terms: Sequence[str]) -> RankedRecipe:
    recipe = generate_fallback_recipe(search_terms)
    return RankedRecipe(recipe=recipe, match_info=score_recipe(recipe, 0, search_terms))
