"""
UI
==

This module implements the quiz analytics dashboard UI.
"""

import pandas as pd
import plotly.express as px
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from analytics.reports import (
    attempts_dataframe,
    paginate_attempts,
    question_table,
    recent_attempts,
    score_trend,
)
from dashboard.data_management import (
    get_analytics,
    get_export_path,
    load_local_cache,
    sync_with_export,
)

DIFFICULTY_COLORS = {"easy": "#2ca02c", "medium": "#ffbf00", "hard": "#d62728"}

INSIGHT_ICONS = {
    "excellent": "🟢",
    "good": "🟢",
    "moderate": "🟡",
    "challenging": "🟠",
    "difficult": "🔴",
}


def initialize_session_state():
    """Initializes page config and session variables."""
    st.set_page_config(page_title="Quiz Analytics Dash", layout="wide")

    if 'raw_data' not in st.session_state:
        st.session_state.raw_data = None
    if 'last_sync' not in st.session_state:
        st.session_state.last_sync = None
    if 'last_auto_refresh' not in st.session_state:
        st.session_state.last_auto_refresh = 0
    if 'attempts_page' not in st.session_state:
        st.session_state.attempts_page = 1


def render_sidebar():
    """Renders the sidebar and returns the export source to load, if any."""
    source = None
    with st.sidebar:
        st.title("📊 Quiz Analytics")
        st.header("Data Source")
        export_path = st.text_input("Export file", value=get_export_path())
        uploaded = st.file_uploader("...or upload an export", type=["json"])

        st.divider()
        st.subheader("Data Management")
        if st.button("📂 Load Last Export"):
            load_local_cache()

        st.divider()
        st.subheader("Update Settings")
        enable_auto_reload = st.checkbox("Enable Auto-reload", value=False)
        interval = st.slider("Interval (minutes)", 1, 10, 5, disabled=not enable_auto_reload)

        if enable_auto_reload:
            refresh_count = st_autorefresh(interval=interval * 60 * 1000, key="export_auto_reload")
            if refresh_count > st.session_state.last_auto_refresh:
                st.session_state.last_auto_refresh = refresh_count
                source = export_path

        if st.button("🚀 Load Now"):
            source = uploaded if uploaded is not None else export_path

    return source


def render_top_indicators(snapshot, quiz):
    """Renders top indicators."""
    with st.container():
        c1, c2, c3, c4, c5, c6 = st.columns(6)
        c1.metric("Attempts", snapshot.total_attempts)
        c2.metric("Average", f"{snapshot.average_percentage}%")
        c3.metric("Highest", f"{snapshot.highest_score}%")
        c4.metric("Lowest", f"{snapshot.lowest_score}%")
        c5.metric("Pass Rate", f"{snapshot.performance_metrics.pass_rate}%")
        c6.metric("Excellent", f"{snapshot.performance_metrics.excellent_rate}%")

    if quiz.access_code:
        st.caption(f"Access code: `{quiz.access_code}` · Last load: {st.session_state.last_sync}")


def render_performance_overview(snapshot, attempts):
    column1, column2 = st.columns(2)

    with column1:
        st.subheader("Difficulty Distribution")
        distribution = snapshot.performance_metrics.difficulty_distribution
        df_difficulty = pd.DataFrame({
            "Difficulty": ["easy", "medium", "hard"],
            "Questions": [distribution.easy, distribution.medium, distribution.hard],
        })
        fig = px.pie(df_difficulty, names="Difficulty", values="Questions",
                     color="Difficulty", color_discrete_map=DIFFICULTY_COLORS)
        fig.update_layout(height=280, margin=dict(l=10, r=10, t=10, b=10))
        st.plotly_chart(fig, width="stretch", key="difficulty_pie")

    with column2:
        st.subheader("Score Trend")
        df_trend = score_trend(attempts)
        fig = px.area(df_trend, x="Attempt", y="Percentage", hover_data=["Participant"])
        fig.update_layout(height=280, margin=dict(l=10, r=10, t=10, b=10),
                          yaxis=dict(range=[0, 100]))
        st.plotly_chart(fig, width="stretch", key="score_trend")


def render_question_analytics(snapshot):
    st.header("🔍 Question Analysis")

    for entry in snapshot.question_analytics:
        insight = entry.performance_insight
        icon = INSIGHT_ICONS.get(insight.level, "⚪")
        with st.expander(f"{icon} Q{entry.question_number}: {entry.question}", expanded=False):
            column1, column2 = st.columns([3, 2])

            with column1:
                df_options = pd.DataFrame({
                    "Option": [f"{chr(65 + i)}: {o.text}" for i, o in enumerate(entry.option_analytics)],
                    "Responses": [o.count for o in entry.option_analytics],
                    "Status": ["Correct" if o.is_correct else "Distractor"
                               for o in entry.option_analytics],
                })
                fig = px.bar(df_options, x="Responses", y="Option", color="Status",
                             orientation="h",
                             color_discrete_map={"Correct": "#2ca02c", "Distractor": "#9e9e9e"})
                fig.update_layout(height=120 + 30 * len(df_options), showlegend=False,
                                  margin=dict(l=10, r=10, t=10, b=10),
                                  yaxis={'type': 'category', 'autorange': 'reversed'})
                st.plotly_chart(fig, width="stretch", key=f"options_q_{entry.question_number}")

            with column2:
                c1, c2 = st.columns(2)
                c1.metric("Correct", f"{entry.correct_percentage}%")
                c2.metric("Difficulty", entry.difficulty_level)
                c1.metric("Discrimination", entry.effectiveness.discrimination_index)
                c2.metric("Distractors", f"{entry.effectiveness.distractor_effectiveness}%")
                if entry.unattempted_count:
                    st.caption(f"{entry.unattempted_count} participant(s) skipped this question")

            st.info(insight.message)
            for recommendation in entry.recommendations:
                st.write(f"• {recommendation}")


def render_question_matrix(snapshot):
    st.subheader("Question Matrix")
    matrix_df = question_table(snapshot).set_index("Question")
    st.dataframe(
        matrix_df.style.background_gradient(cmap="RdYlGn", vmin=0, vmax=100,
                                            subset=["Correct (%)", "Distractors (%)"]),
        width="stretch"
    )


def render_attempts_table(attempts):
    st.subheader("Recent Attempts")
    ordered = recent_attempts(attempts, limit=len(attempts))
    page_items, total_pages = paginate_attempts(ordered, st.session_state.attempts_page)

    if not page_items:
        st.info("No attempts yet.")
        return

    st.dataframe(attempts_dataframe(page_items), width="stretch", hide_index=True)

    if total_pages > 1:
        col_prev, col_page, col_next = st.columns([1, 2, 1])
        if col_prev.button("◀ Previous", disabled=st.session_state.attempts_page <= 1):
            st.session_state.attempts_page -= 1
            st.rerun()
        col_page.write(f"Page {min(st.session_state.attempts_page, total_pages)} of {total_pages}")
        if col_next.button("Next ▶", disabled=st.session_state.attempts_page >= total_pages):
            st.session_state.attempts_page += 1
            st.rerun()


def run_dashboard():
    initialize_session_state()

    source = render_sidebar()
    if source is not None:
        sync_with_export(source)

    if isinstance(st.session_state.raw_data, tuple):
        quiz, attempts = st.session_state.raw_data
        snapshot = get_analytics(quiz, attempts)

        st.title(snapshot.quiz_title)
        if snapshot.is_empty:
            st.info("No completed attempts yet. Share the access code to collect responses.")
            if quiz.access_code:
                st.code(quiz.access_code)
            return

        render_top_indicators(snapshot, quiz)
        render_performance_overview(snapshot, attempts)
        render_question_analytics(snapshot)

        st.divider()
        render_question_matrix(snapshot)
        render_attempts_table(attempts)
    else:
        st.info("Choose a quiz export in the sidebar and click 'Load Now'.")
