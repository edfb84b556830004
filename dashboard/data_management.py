"""
Data Management
===============

This module loads quiz exports, keeps the last one in a local cache and
memoizes analytics between page reruns.
"""
import json
import os
import pickle
from datetime import datetime

import streamlit as st
from loguru import logger

from analytics.metrics import compute_analytics
from analytics.reports import snapshot_fingerprint
from models.quiz_models import AttemptRecord, Quiz


class ExportFormatError(ValueError):
    pass


def get_export_path():
    return os.getenv("QUIZ_EXPORT_PATH", "quiz_export.json")


def get_cache_path():
    return os.getenv("QUIZ_CACHE_PATH", "quiz_cache.pkl")


def parse_export(payload):
    """
    Builds (Quiz, attempts) from an export document of the form
    {"quiz": {...}, "attempts": [...]}. Attempts belonging to another quiz
    are dropped.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("quiz"), dict):
        raise ExportFormatError("Export must be an object with a 'quiz' entry.")

    attempts_doc = payload.get("attempts")
    if attempts_doc is None:
        attempts_doc = []
    if not isinstance(attempts_doc, list):
        raise ExportFormatError("'attempts' must be a list.")

    quiz = Quiz.from_document(payload["quiz"])
    attempts = []
    for doc in attempts_doc:
        if not isinstance(doc, dict):
            continue
        attempt = AttemptRecord.from_document(doc, assume_completed=True)
        if attempt.quiz_id and quiz.id and attempt.quiz_id != quiz.id:
            continue
        attempts.append(attempt)

    dropped = len(attempts_doc) - len(attempts)
    if dropped:
        logger.debug(f"Dropped {dropped} attempt document(s) not belonging to quiz {quiz.id}")
    return quiz, attempts


def load_export(source):
    """Reads an export from a path or an open (uploaded) file."""
    try:
        if isinstance(source, (str, os.PathLike)):
            logger.info(f"Reading quiz export from {source}")
            with open(source, "r", encoding="utf-8") as f:
                payload = json.load(f)
        else:
            payload = json.load(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExportFormatError(f"Export is not valid JSON: {e}") from e

    return parse_export(payload)


def save_local_cache(data):
    with open(get_cache_path(), "wb") as f:
        pickle.dump(data, f)


def load_local_cache():
    cache_path = get_cache_path()
    if os.path.exists(cache_path):
        with open(cache_path, "rb") as f:
            st.session_state.raw_data = pickle.load(f)
            st.session_state.last_sync = "Cached data"
            st.session_state.attempts_page = 1
        st.success("Data loaded from local cache!")
        st.rerun()
    else:
        st.error("Cache file not found.")


def sync_with_export(source):
    """Loads an export into the session and refreshes the local cache."""
    with st.status("Loading quiz export...", expanded=False) as status:
        try:
            fetched_data = load_export(source)
        except (OSError, ExportFormatError) as e:
            st.session_state.raw_data = None
            status.update(label=f"Could not load export: {e}", state="error")
            return

        st.session_state.raw_data = fetched_data
        st.session_state.last_sync = datetime.now().strftime('%H:%M:%S')
        st.session_state.attempts_page = 1
        save_local_cache(fetched_data)
        st.rerun()


@st.cache_data(max_entries=32, ttl=3600, show_spinner=False)
def cached_analytics(fingerprint, _quiz, _attempts):
    """Analytics memoized on the content fingerprint only."""
    return compute_analytics(_quiz, _attempts)


def get_analytics(quiz, attempts):
    return cached_analytics(snapshot_fingerprint(quiz, attempts), quiz, attempts)
