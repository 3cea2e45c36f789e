"""
===============================================================================
main.py — Primary entry point
===============================================================================

Purpose:
    Single executable entry point. Run it directly from an IDE or terminal:

        python main.py                       -> launches the Streamlit app
        python main.py sibuyas kamatis egg   -> terminal search, prints results

    The search pipeline itself lives in runner.py:
        • Normalizes pantry input (English / Filipino, typos, brands)
        • Queries TheMealDB per ingredient, with a local disk cache
        • Ranks recipes and saves output to `data/results_<query>.json`

-------------------------------------------------------------------------------
Notes:
    • No packages are auto-installed; install dependencies manually via:
          pip install -e .
    • Settings are read from the environment or a `.env` file
      (MEALDB_API_KEY, MEALDB_BASE_URL, PANTRY_CACHE_DIR, PANTRY_DATA_DIR).

===============================================================================
"""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
APP_PATH = ROOT / "streamlit_app.py"  # Streamlit app entry


def _print_results(ingredients):
    from runner import search_recipes

    result = search_recipes(ingredients)
    print(f"Searched: {', '.join(result.searched_ingredients) or '(nothing usable)'}")
    if result.source_unreachable:
        print("⚠️ Recipe source unreachable. Please try again later.")
    if result.recipes:
        if result.is_partial_match:
            print("No recipe uses every ingredient; showing partial matches.")
        for rr in result.recipes:
            mi = rr.match_info
            flag = " 🇵🇭" if mi.is_filipino else ""
            print(f"- {rr.recipe.title}{flag}  [score {mi.score:.1f}]")
            if mi.missing_ingredients:
                print(f"    missing: {', '.join(mi.missing_ingredients)}")
    elif result.suggestion:
        print(f"No recipes found. Try removing: {result.suggestion}")
    if not result.recipes and result.fallback:
        print(f"Offline suggestion: {result.fallback.recipe.title}")
        for note in result.fallback.recipe.source.safety_notes:
            print(f"    ⚠️ {note}")


def _launch_streamlit():
    """
    Launches 'streamlit run streamlit_app.py' programmatically without spawning a shell.
    """
    try:
        import runpy
        import streamlit  # noqa: F401  # just to check availability

        # Build argv exactly as if the user typed: streamlit run streamlit_app.py
        sys.argv = [
            "streamlit", "run", str(APP_PATH),
            "--server.headless=true"
        ]
        runpy.run_module("streamlit.web.cli", run_name="__main__")

    except ImportError:
        print(
            "[ERROR] Streamlit is not installed.\n"
            "Please install dependencies manually:\n"
            "  pip install -e .\n\n"
            "Then launch either:\n"
            f"  streamlit run {APP_PATH}\n"
            "or just re-run:\n"
            "  python main.py\n"
        )
        raise SystemExit(1)


if __name__ == "__main__":
    if len(sys.argv) > 1:
        _print_results(sys.argv[1:])
        raise SystemExit(0)
    if not APP_PATH.exists():
        print(f"[ERROR] Cannot find app file: {APP_PATH}")
        raise SystemExit(1)
    _launch_streamlit()
