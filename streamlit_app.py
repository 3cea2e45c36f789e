# streamlit run streamlit_app.py
import os
import sys

from runner import cache_status, clear_cache, find_dish, search_recipes, split_query
from pantry.saved_store import SavedRecipeStore


def _is_streamlit_runtime() -> bool:
    try:
        import streamlit.runtime as rt  # type: ignore
        return getattr(rt, "exists", lambda: False)()
    except ImportError:
        return any(k in os.environ for k in ["STREAMLIT_SERVER_PORT", "STREAMLIT_BROWSER_GATHER_USAGE_STATS"])


if not _is_streamlit_runtime():
    sys.stderr.write(
        "This script must be run with Streamlit.\n"
        "Try:  streamlit run streamlit_app.py\n"
    )
    sys.exit(1)

import streamlit as st

store = SavedRecipeStore()

# ---------- Initialize session_state ----------
st.session_state.setdefault("page", "home")          # "home" | "waiting" | "results" | "saved"
st.session_state.setdefault("query", "sibuyas, kamatis, egg")
st.session_state.setdefault("result", None)

# ---------- Page Setting ----------
st.set_page_config(page_title="Pantry Recipe Finder", page_icon="🍲", layout="centered")


# ---------- Helpers ----------
def _go(page: str):
    st.session_state["page"] = page
    st.rerun()


def _go_waiting_then_search():
    q = st.session_state["query"].strip()
    if not q:
        st.warning("Please enter at least one ingredient.")
        return
    st.session_state["result"] = None
    _go("waiting")


def _render_recipe(recipe, match_info=None, key_prefix="r"):
    st.markdown(f"### {recipe.title}")
    if recipe.thumbnail:
        st.image(recipe.thumbnail, width=240)
    meta = " • ".join(x for x in [recipe.category, recipe.area] if x)
    if meta:
        st.caption(meta)
    if match_info is not None:
        c1, c2, c3 = st.columns(3)
        c1.metric("Score", f"{match_info.score:.1f}")
        c2.metric("Matched", len(match_info.matched_ingredients))
        c3.metric("Missing", len(match_info.missing_ingredients))
        if match_info.is_filipino:
            st.caption("🇵🇭 Filipino dish")
        if match_info.missing_ingredients:
            st.caption("Missing: " + ", ".join(match_info.missing_ingredients))
    for note in recipe.source.safety_notes:
        st.caption(f"⚠️ {note}")
    with st.expander("Ingredients & steps"):
        for ing in recipe.ingredients:
            st.write(f"- {ing.name} {('— ' + ing.measure) if ing.measure else ''}")
        if recipe.instructions:
            st.write(recipe.instructions)
    if store.is_saved(recipe.id):
        if st.button("Remove from saved", key=f"{key_prefix}-del-{recipe.id}"):
            store.delete(recipe.id)
            st.rerun()
    elif st.button("Save recipe", key=f"{key_prefix}-save-{recipe.id}"):
        store.save(recipe)
        st.rerun()
    st.divider()


# ---------- HOME ----------
if st.session_state["page"] == "home":
    st.title("🍲 Pantry Recipe Finder")
    st.caption("English or Filipino, one ingredient per line or comma-separated.")

    st.session_state["query"] = st.text_area(
        "What's in your pantry?",
        value=st.session_state["query"]
    )

    cols = st.columns(2)
    if cols[0].button("Search", type="primary"):
        _go_waiting_then_search()
    if cols[1].button("Saved recipes"):
        _go("saved")

    st.divider()
    dish = st.text_input("Or look up a dish by name", placeholder="adobo")
    if st.button("Find dish") and dish.strip():
        found = find_dish(dish)
        if not found:
            st.info("No dish found with that name.")
        for recipe in found:
            _render_recipe(recipe, key_prefix="dish")

    with st.expander("Cache"):
        status = cache_status()
        st.caption(f"{status['ingredients']} ingredient lookups, {status['recipes']} recipes cached.")
        if st.button("Clear cache"):
            clear_cache()
            st.rerun()

# ---------- WAITING ----------
elif st.session_state["page"] == "waiting":
    st.title("⏳ Searching")
    with st.spinner("Looking up recipes..."):
        st.session_state["result"] = search_recipes(split_query(st.session_state["query"]))
    _go("results")

# ---------- RESULTS ----------
elif st.session_state["page"] == "results":
    if st.button("← Back", use_container_width=True):
        _go("home")

    result = st.session_state["result"]
    if result is None:
        st.warning("No search has been run. Please go back and try again.")
    else:
        st.title("🍲 Results")
        st.caption("Searched: " + (", ".join(result.searched_ingredients) or "nothing usable"))
        if result.source_unreachable:
            st.error("The recipe source could not be reached. Please try again later.")
        if result.recipes:
            if result.is_partial_match:
                st.info("No recipe uses every ingredient; showing partial matches.")
            for rr in result.recipes:
                _render_recipe(rr.recipe, rr.match_info)
        else:
            if result.suggestion:
                st.info(f"No recipes found. Try removing **{result.suggestion}**.")
            elif not result.source_unreachable:
                st.info("No recipes found.")
            if result.fallback:
                st.subheader("Try this instead")
                _render_recipe(result.fallback.recipe, result.fallback.match_info, key_prefix="fb")

# ---------- SAVED ----------
elif st.session_state["page"] == "saved":
    if st.button("← Back", use_container_width=True):
        _go("home")
    st.title("⭐ Saved recipes")
    saved = store.list()
    if not saved:
        st.info("No saved recipes yet.")
    for recipe in saved:
        _render_recipe(recipe, key_prefix="saved")
