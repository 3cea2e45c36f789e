"""
User-saved recipes, kept in a JSON file (permanent, no TTL).

File layout: {"schema_version": 1, "recipes": {recipe_id: {"saved_at": int, "recipe": {...}}}}
Location: $PANTRY_DATA_DIR/saved_recipes.json (default ./data).
"""
from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from pantry.datasets import RecipeDetail

load_dotenv()

DATA_DIR = Path(os.getenv("PANTRY_DATA_DIR") or "data")
SAVED_RECIPES_PATH = DATA_DIR / "saved_recipes.json"
_SCHEMA_VERSION = 1


class SavedRecipeStore:

    def __init__(self, path: Path = SAVED_RECIPES_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict:
        try:
            doc = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError):
            return {}
        recipes = doc.get("recipes") if isinstance(doc, dict) else None
        return recipes if isinstance(recipes, dict) else {}

    def _write(self, recipes: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        doc = {"schema_version": _SCHEMA_VERSION, "recipes": recipes}
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(doc, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def save(self, recipe: RecipeDetail):
        with self._lock:
            recipes = self._read()
            recipes[recipe.id] = {"saved_at": time.time(), "recipe": recipe.to_dict()}
            self._write(recipes)

    def delete(self, recipe_id: str) -> bool:
        with self._lock:
            recipes = self._read()
            if recipe_id not in recipes:
                return False
            del recipes[recipe_id]
            self._write(recipes)
            return True

    def is_saved(self, recipe_id: str) -> bool:
        return recipe_id in self._read()

    def list(self) -> List[RecipeDetail]:
        """Saved recipes, most recently saved first. Corrupted entries are skipped."""
        entries = []
        for rid, entry in self._read().items():
            try:
                entries.append((float(entry.get("saved_at", 0)), RecipeDetail.from_dict(entry["recipe"])))
            except (AttributeError, KeyError, TypeError, ValueError):
                print(f"[saved][WARN] skipping corrupted saved recipe {rid!r}")
                continue
        entries.sort(key=lambda e: e[0], reverse=True)
        return [r for _, r in entries]
