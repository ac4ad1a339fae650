"""
Letterboxd Diary Statistics
---------------------------
✓ One film table for sample data AND scraped diaries
✓ Missing fields default, never raise
✓ Month / year / day series with gaps zero-filled
✓ Half-star rating histogram (0.5 → 5.0)
✓ Headline numbers for the Statistics tab
"""

import re
import datetime
from collections import Counter

import numpy as np
import pandas as pd

# ============================================================
# 1. FILM TABLE
# ============================================================

FILM_COLUMNS = ["title", "date", "rating", "liked", "year"]

# diary links look like /<user>/films/diary/for/2025/02/14/
DATE_PATH_RE = re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})")

# sample data and data-viewing-date attributes use ISO dates
ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[T ])")

RATING_BUCKETS = np.arange(1, 11) / 2


def parse_watch_date(value):
    """ISO date, date-path string or date object -> Timestamp (NaT if unusable)."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NaT
    if isinstance(value, (pd.Timestamp, datetime.date)):
        return pd.Timestamp(value).normalize()

    text = str(value).strip()
    match = ISO_DATE_RE.match(text) or DATE_PATH_RE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return pd.Timestamp(year=year, month=month, day=day)
        except ValueError:
            return pd.NaT
    return pd.NaT


def _snap_rating(series):
    ratings = pd.to_numeric(series, errors="coerce").astype(float)
    ratings = ratings.where(ratings > 0)
    return ((ratings * 2).round() / 2).clip(0.5, 5.0)


def _as_flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "liked")
    return bool(value) if not pd.isna(value) else False


def films_to_frame(records):
    """Build the film table from dicts; unknown keys are dropped, missing ones defaulted."""
    df = pd.DataFrame(list(records), columns=FILM_COLUMNS)

    df["title"] = df["title"].fillna("").astype(str).str.strip()
    df["date"] = pd.to_datetime(df["date"].map(parse_watch_date))
    df["rating"] = _snap_rating(df["rating"])
    df["liked"] = df["liked"].map(_as_flag).astype(bool)
    df["year"] = pd.to_numeric(df["year"], errors="coerce").fillna(0).astype(int)

    return df.reset_index(drop=True)


def recent_films(films, limit=10):
    df = films.sort_values("date", ascending=False, na_position="last", kind="stable").head(limit).copy()
    df.index = range(1, len(df) + 1)
    return df


# ============================================================
# 2. AGGREGATES
# ============================================================

def average_rating(films):
    rated = films["rating"].dropna()
    if rated.empty:
        return 0.0
    return round(float(rated.mean()), 2)


def rating_distribution(films):
    """Counts per half-star bucket; all ten buckets are always present."""
    counts = films["rating"].dropna().value_counts()
    dist = counts.reindex(RATING_BUCKETS, fill_value=0).astype(int)
    dist.index = [f"{b:.1f}" for b in RATING_BUCKETS]
    dist.index.name = "rating"
    return dist.rename("Films")


def _watch_dates(films):
    return films["date"].dropna()


def watches_by_month(films):
    """Films per YYYY-MM from the first to the last watch, empty months included."""
    dates = _watch_dates(films)
    if dates.empty:
        return pd.Series(dtype=int, name="Films")

    months = dates.dt.to_period("M")
    full = pd.period_range(months.min(), months.max(), freq="M")
    series = months.value_counts().reindex(full, fill_value=0).astype(int)
    series.index = full.astype(str)
    series.index.name = "month"
    return series.rename("Films")


def watches_by_year(films):
    dates = _watch_dates(films)
    if dates.empty:
        return pd.Series(dtype=int, name="Films")

    years = dates.dt.year
    full = range(int(years.min()), int(years.max()) + 1)
    series = years.value_counts().reindex(full, fill_value=0).astype(int)
    series.index.name = "year"
    return series.rename("Films")


def watches_by_date(films):
    """Daily counts with every day between the first and last watch present."""
    dates = _watch_dates(films)
    if dates.empty:
        return pd.Series(dtype=int, name="Films")

    days = dates.dt.normalize()
    full = pd.date_range(days.min(), days.max(), freq="D")
    series = days.value_counts().reindex(full, fill_value=0).astype(int)
    series.index.name = "date"
    return series.rename("Films")


def watches_by_decade(films):
    years = films.loc[films["year"] > 0, "year"]
    if years.empty:
        return pd.Series(dtype=int, name="Films")

    decades = (years // 10 * 10).astype(str) + "s"
    counts = decades.value_counts().sort_index()
    counts = counts.sort_values(ascending=False, kind="stable")
    counts.index.name = "decade"
    return counts.rename("Films")


def most_frequent(values):
    """Most common non-empty value; ties go to whichever appeared first."""
    counter = Counter(
        v for v in values
        if v is not None and v == v and not (isinstance(v, str) and not v.strip())
    )
    if not counter:
        return None
    return counter.most_common(1)[0][0]


def longest_streak(films):
    days = sorted(set(_watch_dates(films).dt.normalize()))
    best, run, prev = 0, 0, None
    for day in days:
        run = run + 1 if prev is not None and (day - prev).days == 1 else 1
        best = max(best, run)
        prev = day
    return best


def summarize(films, today=None):
    today = pd.Timestamp(today or datetime.date.today())
    dates = films["date"]

    favourite_year = most_frequent(films.loc[films["year"] > 0, "year"])

    return {
        "films": len(films),
        "this_year": int((dates.dt.year == today.year).sum()),
        "average_rating": average_rating(films),
        "rated": int(films["rating"].notna().sum()),
        "liked": int(films["liked"].sum()),
        "busiest_month": most_frequent(_watch_dates(films).dt.strftime("%Y-%m")),
        "favourite_year": int(favourite_year) if favourite_year is not None else None,
        "longest_streak": longest_streak(films),
    }


def top_people(tally, limit=5):
    if not tally:
        return pd.Series(dtype=int, name="Films")
    series = pd.Series(tally, name="Films").sort_values(ascending=False, kind="stable")
    return series.head(limit)


# ============================================================
# 3. SAMPLE DATA
# ============================================================

SAMPLE_DIARY = [
    {"title": "Inception", "date": "2025-02-14", "rating": 4.5, "liked": True, "year": 2010},
    {"title": "The Godfather", "date": "2025-02-13", "rating": 5.0, "liked": True, "year": 1972},
    {"title": "Pulp Fiction", "date": "2025-02-12", "rating": 4.0, "liked": False, "year": 1994},
    {"title": "Oppenheimer", "date": "2025-02-08", "rating": 4.0, "liked": True, "year": 2023},
    {"title": "Goodfellas", "date": "2025-02-02", "rating": 4.5, "liked": True, "year": 1990},
    {"title": "The Departed", "date": "2025-01-26", "rating": 4.0, "liked": False, "year": 2006},
    {"title": "Interstellar", "date": "2025-01-19", "rating": 5.0, "liked": True, "year": 2014},
    {"title": "Jackie Brown", "date": "2025-01-18", "rating": 3.5, "liked": False, "year": 1997},
    {"title": "Tenet", "date": "2025-01-11", "rating": 3.0, "liked": False, "year": 2020},
    {"title": "Se7en", "date": "2025-01-04", "rating": None, "liked": False, "year": 1995},
    {"title": "The Dark Knight", "date": "2024-12-31", "rating": 5.0, "liked": True, "year": 2008},
    {"title": "Once Upon a Time in Hollywood", "date": "2024-12-30", "rating": 4.0, "liked": False, "year": 2019},
    {"title": "The Irishman", "date": "2024-12-29", "rating": 3.5, "liked": False, "year": 2019},
    {"title": "Memento", "date": "2024-12-20", "rating": 4.5, "liked": True, "year": 2000},
    {"title": "Taxi Driver", "date": "2024-12-07", "rating": 4.0, "liked": False, "year": 1976},
    {"title": "Forrest Gump", "date": "2024-10-12", "rating": 3.5, "liked": False, "year": 1994},
    {"title": "The Shawshank Redemption", "date": "2024-10-05", "rating": 5.0, "liked": True, "year": 1994},
    {"title": "Cast Away", "date": "2024-10-04", "rating": 2.5, "liked": False, "year": 2000},
]

# the diary page carries no cast or crew, so the People tab only has sample tallies
SAMPLE_PEOPLE = {
    "actors": {
        "Tom Hanks": 12,
        "Morgan Freeman": 10,
        "Leonardo DiCaprio": 8,
        "Robert De Niro": 7,
        "Samuel L. Jackson": 5,
        "Michael Caine": 5,
    },
    "directors": {
        "Christopher Nolan": 8,
        "Martin Scorsese": 6,
        "Quentin Tarantino": 5,
        "Robert Zemeckis": 3,
        "David Fincher": 2,
    },
}


def sample_films():
    return films_to_frame(SAMPLE_DIARY)
