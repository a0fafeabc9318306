"""HTTP client wrapper for the Wisdom Vault FastAPI backend."""

from __future__ import annotations

import os

import httpx
import streamlit as st

API_URL = os.getenv("API_URL", "http://localhost:3001")


def _error_message(response: httpx.Response) -> str:
    """Pull ``message`` out of the API's error envelope, falling back to the status line."""
    try:
        return str(response.json().get("message") or response.reason_phrase)
    except ValueError:
        return f"{response.status_code} {response.reason_phrase}"


def check_health() -> bool:
    """Return True if the API server responds to /health."""
    try:
        r = httpx.get(f"{API_URL}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.ConnectError:
        return False


def process_insight(
    title: str,
    show_name: str | None = None,
    timestamp: str | int | None = None,
    spotify_url: str | None = None,
) -> dict:  # type: ignore[type-arg]
    """Run the insight pipeline for one captured moment.

    Returns the ``data`` object of a successful response, or ``{}`` after
    showing the server's error message.
    """
    payload: dict[str, str | int] = {"title": title}
    if show_name:
        payload["showName"] = show_name
    if timestamp not in (None, ""):
        payload["timestamp"] = timestamp
    if spotify_url:
        payload["spotifyUrl"] = spotify_url
    try:
        # Download + trim + transcription can take most of a minute
        r = httpx.post(f"{API_URL}/process-insight", json=payload, timeout=300.0)
    except httpx.HTTPError as e:
        st.error(f"Processing failed: {e}")
        return {}
    if r.is_error:
        st.error(f"Processing failed: {_error_message(r)}")
        return {}
    return r.json().get("data", {})  # type: ignore[no-any-return]


def save_to_notion(insight: dict, title: str, spotify_url: str | None = None) -> dict:  # type: ignore[type-arg]
    """Save a processed insight as a Notion page."""
    payload = {
        "title": title,
        "showName": insight.get("showName"),
        "transcript": insight.get("transcript"),
        "summary": insight.get("summary"),
        "spotifyUrl": spotify_url,
        "thumbnailUrl": insight.get("thumbnailUrl"),
        "timestampSeconds": insight.get("timestampSeconds", 0),
        "manualMode": insight.get("manualMode", False),
    }
    try:
        r = httpx.post(f"{API_URL}/save-to-notion", json=payload, timeout=60.0)
    except httpx.HTTPError as e:
        st.error(f"Notion save failed: {e}")
        return {}
    if r.is_error:
        st.error(f"Notion save failed: {_error_message(r)}")
        return {}
    return r.json().get("data", {})  # type: ignore[no-any-return]


def get_recent_insights() -> list[dict]:  # type: ignore[type-arg]
    """Fetch the most recent insights processed by the server, newest first."""
    try:
        r = httpx.get(f"{API_URL}/recent-insights", timeout=10.0)
        r.raise_for_status()
        return r.json().get("data", [])  # type: ignore[no-any-return]
    except httpx.HTTPError:
        return []
