"""
===============================================================================
knowledgebase.py — Ingredient vocabulary and dish keyword tables
===============================================================================

Purpose:
    Centralizes the fixed lookup tables used by the ingredient normalizer and
    the recipe ranker. Pantry input arrives in a mix of English and
    Filipino/Tagalog, often with digit-for-letter typos and brand names, so
    every table here maps that noise onto the English vocabulary used by the
    recipe source.

-------------------------------------------------------------------------------
Contents:
    • FILIPINO_TO_ENGLISH — exact Filipino term → English ingredient.
        Example:  "sibuyas" → "onion"
                  "sitaw"   → "string beans"

    • DIGIT_TYPOS — per-character digit → letter corrections ("t0mat0").

    • IRREGULAR_SINGULARS — plural → singular forms checked before the
      generic trailing-"s" rule.

    • BRAND_AND_VAGUE_TERMS — brand names and vague words that are never
      useful as a search term ("knorr", "seasoning").

    • FILIPINO_DISH_KEYWORDS — substrings that mark a recipe as Filipino.

-------------------------------------------------------------------------------
Design Principles:
    • Keep mappings one-directional (alias → canonical).
    • All keys and values are lowercase ASCII.
    • Tables are read-only (MappingProxyType / frozenset).

-------------------------------------------------------------------------------
Notes:
    • This module has no dependencies and may be safely imported anywhere.
    • The brand list also holds generic filler words ("mix", "seasoning").

===============================================================================
"""
from types import MappingProxyType

FILIPINO_TO_ENGLISH = MappingProxyType({
    # aromatics & vegetables
    "sibuyas": "onion",
    "bawang": "garlic",
    "kamatis": "tomato",
    "patatas": "potato",
    "talong": "eggplant",
    "sitaw": "string beans",
    "kangkong": "water spinach",
    "pechay": "bok choy",
    "kalabasa": "squash",
    "ampalaya": "bitter gourd",
    "labanos": "radish",
    "sili": "chili",
    "malunggay": "moringa",

    # meats & seafood
    "manok": "chicken",
    "baboy": "pork",
    "baka": "beef",
    "isda": "fish",
    "tahong": "mussels",
    "tokwa": "tofu",

    # pantry
    "asukal": "sugar",
    "toyo": "soy sauce",
    "suka": "vinegar",
})

# 0→o, 1→l, 3→e, 4→a, 5→s, 7→t
DIGIT_TYPOS = MappingProxyType({
    "0": "o",
    "1": "l",
    "3": "e",
    "4": "a",
    "5": "s",
    "7": "t",
})

IRREGULAR_SINGULARS = MappingProxyType({
    "tomatoes": "tomato",
    "potatoes": "potato",
    "onions": "onion",
    "eggs": "egg",
    "peppers": "pepper",
    "beans": "bean",
    "leaves": "leaf",
    "cloves": "clove",
})

BRAND_AND_VAGUE_TERMS = frozenset({
    # brands
    "knorr", "maggi", "magic sarap", "nor", "del monte", "mama sita",
    "ajinomoto", "mccormick",
    # vague
    "seasoning", "mix", "flavor", "flavour", "taste enhancer",
})

FILIPINO_DISH_KEYWORDS = (
    "filipino", "adobo", "sinigang", "ginisa", "tinola", "inihaw",
    "bistek", "menudo", "afritada", "kaldereta", "kare kare", "pinakbet",
)
