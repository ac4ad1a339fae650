"""
🎬 Letterboxd Stats Dashboard — Streamlit UI
=============================================
Run with:  streamlit run app.py
Dependencies: streamlit, pandas, numpy, requests, beautifulsoup4, python-dotenv
"""

import os
import html
import logging

import streamlit as st
import pandas as pd
import warnings
warnings.filterwarnings('ignore')

from letterboxd_stats import (
    SAMPLE_PEOPLE,
    sample_films,
    recent_films,
    summarize,
    rating_distribution,
    watches_by_month,
    watches_by_year,
    watches_by_date,
    watches_by_decade,
    top_people,
)
from letterboxd_scraper import MAX_PAGES, DiaryFetchError, fetch_diary

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("letterboxd_dashboard")

LOAD_ERROR = "Couldn't load that diary. Check the username and try again."

SOURCE_SAMPLE = "🎞️ Sample data"
SOURCE_DIARY = "📓 Letterboxd diary"

# ─────────────────────────────────────────────
# PAGE CONFIG
# ─────────────────────────────────────────────
st.set_page_config(
    page_title="🎬 Letterboxd Stats",
    page_icon="🎬",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ─────────────────────────────────────────────
# CUSTOM CSS
# ─────────────────────────────────────────────
st.markdown("""
<style>
    .stApp { background-color: #14181c !important; }

    [data-testid="stSidebar"] > div:first-child {
        background-color: #1c2228 !important;
        padding: 10px;
    }

    .film-card {
        background: linear-gradient(135deg, #1c2228, #242c34);
        border: 1px solid #2c3440;
        border-radius: 12px;
        padding: 12px 16px;
        margin-bottom: 10px;
    }

    .film-card:hover { border-color: #00e054; }

    .film-title { font-size: 16px; font-weight: 700; color: #ffffff; }
    .film-meta  { font-size: 13px; color: #99aabb; margin-top: 4px; }

    .liked-heart { color: #ff8000; margin-left: 6px; }
    .star-rating { color: #00e054; font-size: 14px; }

    .section-header {
        font-size: 22px; font-weight: 700; color: #00e054;
        margin: 10px 0 16px 0; border-left: 4px solid #00e054; padding-left: 12px;
    }

    .sample-note { font-size: 12px; color: #678; font-style: italic; }

    hr { border-color: #2c3440; }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# ─────────────────────────────────────────────
# SESSION STATE
# ─────────────────────────────────────────────
if 'films' not in st.session_state:
    st.session_state.films = sample_films()
if 'source_label' not in st.session_state:
    st.session_state.source_label = "Sample data"
if 'load_error' not in st.session_state:
    st.session_state.load_error = None


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────
MARKDOWN_ENTITIES = {"$": "&#36;", "*": "&#42;", "_": "&#95;", "`": "&#96;", "[": "&#91;", "]": "&#93;", "\\": "&#92;"}

def safe_text(text) -> str:
    """Escape scraped or typed text for st.markdown with unsafe_allow_html."""
    escaped = html.escape(str(text))
    return "".join(MARKDOWN_ENTITIES.get(ch, ch) for ch in escaped)

def star_display(rating) -> str:
    if pd.isna(rating):
        return '<span class="film-meta">not rated</span>'
    rating = float(rating)
    full  = int(rating)
    half  = '½' if (rating - full) >= 0.5 else ''
    empty = 5 - full - (1 if half else 0)
    return f'<span class="star-rating">{"★"*full}{half}{"☆"*empty}</span> {rating:g}/5'

def render_film_card(rank: int, row: pd.Series):
    title = safe_text(row.get('title') or 'Untitled')
    year  = int(row['year']) if row.get('year') else '—'
    when  = row['date'].strftime('%d %b %Y') if not pd.isna(row.get('date')) else 'undated'
    heart = '<span class="liked-heart">♥</span>' if row.get('liked') else ''
    st.markdown(f"""
    <div class="film-card">
        <div><span class="film-title">{rank}. {title}</span> <span class="film-meta">({year})</span>{heart}</div>
        <div class="film-meta">📅 {when} &nbsp;|&nbsp; {star_display(row.get('rating'))}</div>
    </div>
    """, unsafe_allow_html=True)

def progress_bar_chart(series: pd.Series, title="", unit="films"):
    if title:
        st.markdown(f"**{title}**")
    max_val = series.max() if not series.empty else 0
    for label, value in series.items():
        ratio = float(value) / max_val if max_val > 0 else 0
        c1, c2, c3 = st.columns([3, 5, 2])
        with c1:
            st.markdown(f"<div style='font-size:12px;color:#e2e8f0;padding-top:6px;text-align:right'>{safe_text(label)}</div>", unsafe_allow_html=True)
        with c2:
            st.progress(ratio)
        with c3:
            st.markdown(f"<div style='font-size:12px;color:#00e054;padding-top:6px'>{int(value)} {unit}</div>", unsafe_allow_html=True)

def chart_or_note(series: pd.Series, note: str, line=False):
    if series.empty:
        st.info(note)
    elif line:
        st.line_chart(series)
    else:
        st.bar_chart(series)


# ─────────────────────────────────────────────
# SIDEBAR
# ─────────────────────────────────────────────
with st.sidebar:
    st.markdown("## 🎬 Letterboxd Stats")
    st.markdown("---")
    source = st.radio("Data source", [SOURCE_SAMPLE, SOURCE_DIARY])

    username = ""
    pages = 1
    if source == SOURCE_DIARY:
        username = st.text_input("Letterboxd username", placeholder="Enter Letterboxd username")
        pages = st.slider("Diary pages", 1, 10, min(max(MAX_PAGES, 1), 10))

    if st.button("📥 Load Stats", width="stretch"):
        if source == SOURCE_SAMPLE:
            st.session_state.films = sample_films()
            st.session_state.source_label = "Sample data"
            st.session_state.load_error = None
        else:
            with st.spinner("Loading diary…"):
                try:
                    films = fetch_diary(username, pages=pages)
                except (DiaryFetchError, ValueError):
                    logger.warning("Could not load diary for %r", username, exc_info=True)
                    st.session_state.load_error = LOAD_ERROR
                else:
                    st.session_state.films = films
                    st.session_state.source_label = f"@{username.strip()}"
                    st.session_state.load_error = None

    st.markdown("---")
    n_films = len(st.session_state.films)
    st.markdown(f"📓 **{safe_text(st.session_state.source_label)}:** {n_films} film{'s' if n_films!=1 else ''}", unsafe_allow_html=True)


# ─────────────────────────────────────────────
# HEADER
# ─────────────────────────────────────────────
films = st.session_state.films

st.title("Letterboxd Stats Dashboard")
st.markdown(f'<p style="color:#99aabb">Showing <b>{safe_text(st.session_state.source_label)}</b></p>', unsafe_allow_html=True)

if st.session_state.load_error:
    st.error(st.session_state.load_error)

tab_recent, tab_stats, tab_people = st.tabs(["🕒 Recent Activity", "📈 Statistics", "👥 People"])


# ─────────────────────────────────────────────
# TAB: RECENT ACTIVITY
# ─────────────────────────────────────────────
with tab_recent:
    col_a, col_b = st.columns(2)
    with col_a:
        st.markdown('<div class="section-header">🎞️ Recent Watches</div>', unsafe_allow_html=True)
        recent = recent_films(films, limit=8)
        if recent.empty:
            st.info("No diary entries yet.")
        for i, row in recent.iterrows():
            render_film_card(i, row)

    with col_b:
        st.markdown('<div class="section-header">📅 Monthly Watches</div>', unsafe_allow_html=True)
        chart_or_note(watches_by_month(films), "No dated watches to chart.")

        st.markdown('<div class="section-header">⭐ Ratings Distribution</div>', unsafe_allow_html=True)
        chart_or_note(rating_distribution(films), "No ratings to chart.")

    st.markdown("---")
    st.markdown('<div class="section-header">🎭 Most Watched Actors</div>', unsafe_allow_html=True)
    st.markdown('<div class="sample-note">Sample data: the diary page lists no cast.</div>', unsafe_allow_html=True)
    chart_or_note(top_people(SAMPLE_PEOPLE["actors"]), "No actors to chart.")


# ─────────────────────────────────────────────
# TAB: STATISTICS
# ─────────────────────────────────────────────
with tab_stats:
    stats = summarize(films)

    c1, c2, c3, c4 = st.columns(4)
    with c1: st.metric("Films Watched", stats["films"])
    with c2: st.metric("This Year", stats["this_year"])
    with c3: st.metric("Average Rating", f"{stats['average_rating']:.2f} / 5")
    with c4: st.metric("Liked", stats["liked"])

    c1, c2, c3, c4 = st.columns(4)
    with c1: st.metric("Rated", stats["rated"])
    with c2: st.metric("Busiest Month", stats["busiest_month"] or "—")
    with c3: st.metric("Favourite Release Year", stats["favourite_year"] or "—")
    with c4: st.metric("Longest Streak", f"{stats['longest_streak']} days")

    st.markdown("---")
    col_a, col_b = st.columns(2)
    with col_a:
        st.markdown("#### Watches per Year")
        per_year = watches_by_year(films)
        per_year.index = per_year.index.astype(str)
        chart_or_note(per_year, "No dated watches to chart.")
    with col_b:
        st.markdown("#### Daily Activity")
        chart_or_note(watches_by_date(films), "No dated watches to chart.", line=True)

    st.markdown("#### Full Diary")
    table = films.copy()
    table.index = range(1, len(table) + 1)
    st.dataframe(table, width="stretch")


# ─────────────────────────────────────────────
# TAB: PEOPLE
# ─────────────────────────────────────────────
with tab_people:
    col_a, col_b = st.columns(2)
    with col_a:
        st.markdown('<div class="section-header">🎬 Top Directors</div>', unsafe_allow_html=True)
        st.markdown('<div class="sample-note">Sample data: the diary page lists no crew.</div>', unsafe_allow_html=True)
        progress_bar_chart(top_people(SAMPLE_PEOPLE["directors"]), unit="movies")

    with col_b:
        st.markdown('<div class="section-header">📆 Most Watched Decades</div>', unsafe_allow_html=True)
        decades = watches_by_decade(films)
        if decades.empty:
            st.info("No release years in this diary.")
        else:
            progress_bar_chart(decades.head(5), unit="movies")
