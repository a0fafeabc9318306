"""Wisdom Vault -- Streamlit console.

Stands in for the browser extension: capture a podcast moment by hand,
review the takeaways, save them to Notion, and browse recent captures.
"""

from __future__ import annotations

import streamlit as st

from src.notion.writer import format_time
from src.ui.api_client import (
    check_health,
    get_recent_insights,
    process_insight,
    save_to_notion,
)

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Wisdom Vault", layout="wide")


def render_insight(insight: dict) -> None:  # type: ignore[type-arg]
    """Show takeaways and transcript for one processed insight."""
    if insight.get("manualMode"):
        st.info(insight.get("message") or "Podcast not found. Add your own notes in Notion.")
        return

    st.subheader("Key Takeaways")
    for bullet in insight.get("summary") or []:
        st.markdown(f"- {bullet}")

    origin = insight.get("transcriptOrigin")
    label = "Transcript" if not origin else f"Transcript ({origin})"
    with st.expander(label):
        st.write(insight.get("transcript", ""))


# ---------------------------------------------------------------------------
# Sidebar -- navigation + API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("Wisdom Vault")
    st.markdown("---")

    page = st.radio(
        "Navigate",
        ["Capture Insight", "Recent Insights"],
        label_visibility="collapsed",
    )

    st.markdown("---")

    api_healthy = check_health()
    if api_healthy:
        st.markdown(":green_circle: API connected")
    else:
        st.markdown(":red_circle: API unreachable")

# ---------------------------------------------------------------------------
# Page: Capture Insight
# ---------------------------------------------------------------------------
if page == "Capture Insight":
    st.header("Capture Insight")
    st.write("Enter the episode you are listening to and where you are in it.")

    title = st.text_input("Episode title", placeholder="e.g. How to Build a Habit")
    show_name = st.text_input("Show name (optional)")
    timestamp = st.text_input("Timestamp", placeholder="seconds or H:MM:SS, e.g. 1:02:05")
    spotify_url = st.text_input("Spotify URL (optional)")

    if st.button("Process", disabled=not title):
        if not api_healthy:
            st.error("Cannot process: the API server is not reachable.")
        else:
            with st.spinner("Finding episode, transcribing and summarizing..."):
                result = process_insight(
                    title=title,
                    show_name=show_name or None,
                    timestamp=timestamp or None,
                    spotify_url=spotify_url or None,
                )
            if result:
                st.session_state["last_insight"] = result
                st.session_state["last_title"] = title
                st.session_state["last_spotify_url"] = spotify_url or None
            # Error case is already handled inside process_insight via st.error

    last = st.session_state.get("last_insight")
    if last:
        st.markdown("---")
        st.write(
            f"**{last.get('episodeTitle', '')}** -- {last.get('showName', '')} "
            f"at {format_time(last.get('timestampSeconds', 0))}"
        )
        render_insight(last)

        if st.button("Save to Notion"):
            with st.spinner("Saving..."):
                page_data = save_to_notion(
                    last,
                    title=st.session_state.get("last_title", last.get("episodeTitle", "")),
                    spotify_url=st.session_state.get("last_spotify_url"),
                )
            if page_data:
                url = page_data.get("notionUrl")
                st.success(f"Saved to Notion: {url}" if url else "Saved to Notion.")

# ---------------------------------------------------------------------------
# Page: Recent Insights
# ---------------------------------------------------------------------------
elif page == "Recent Insights":
    st.header("Recent Insights")
    st.write("The latest captures processed by this server, newest first.")

    if not api_healthy:
        st.warning("The API server is not reachable. Cannot load insights.")
    else:
        recent = get_recent_insights()
        if not recent:
            st.info("No insights yet. Capture one to get started.")
        else:
            for item in recent:
                header = (
                    f"{item.get('title', 'Untitled')} -- "
                    f"{item.get('showName') or 'Unknown Show'} "
                    f"@ {format_time(item.get('timestampSeconds', 0))}"
                )
                with st.expander(header):
                    st.caption(f"Captured {item.get('capturedAt', '')}")
                    render_insight(item.get("insight", {}))
