from __future__ import annotations

from pathlib import Path

from streamlit.testing.v1 import AppTest

import letterboxd_scraper
from letterboxd_stats import films_to_frame

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")


def _app() -> AppTest:
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    return at


def test_dashboard_renders_sample_data() -> None:
    at = _app()

    assert not at.exception
    assert at.title[0].value == "Letterboxd Stats Dashboard"
    assert len(at.session_state["films"]) > 0
    assert [m.label for m in at.metric][:4] == ["Films Watched", "This Year", "Average Rating", "Liked"]
    assert not at.error


def test_failed_diary_load_shows_generic_error(monkeypatch) -> None:
    def _boom(username, pages=None, **_):
        raise letterboxd_scraper.DiaryFetchError("HTTP 503")

    monkeypatch.setattr(letterboxd_scraper, "fetch_diary", _boom)
    at = _app()
    before = len(at.session_state["films"])

    at.sidebar.radio[0].set_value("📓 Letterboxd diary").run()
    at.sidebar.text_input[0].input("cinephile").run()
    at.sidebar.button[0].click().run()

    assert not at.exception
    assert at.error[0].value == "Couldn't load that diary. Check the username and try again."
    assert len(at.session_state["films"]) == before


def test_successful_diary_load_replaces_films(monkeypatch) -> None:
    def _fetch(username, pages=None, **_):
        return films_to_frame([{"title": "Heat", "date": "2025-02-03", "rating": 4, "year": 1995}])

    monkeypatch.setattr(letterboxd_scraper, "fetch_diary", _fetch)
    at = _app()

    at.sidebar.radio[0].set_value("📓 Letterboxd diary").run()
    at.sidebar.text_input[0].input("cinephile").run()
    at.sidebar.button[0].click().run()

    assert not at.exception
    assert list(at.session_state["films"]["title"]) == ["Heat"]
    assert at.session_state["source_label"] == "@cinephile"
    assert not at.error


def test_scraped_title_and_username_are_escaped(monkeypatch) -> None:
    def _fetch(username, pages=None, **_):
        return films_to_frame([{"title": "<b>Heat</b> & *Co* $x$", "date": "2025-02-03", "rating": 4}])

    monkeypatch.setattr(letterboxd_scraper, "fetch_diary", _fetch)
    at = _app()

    at.sidebar.radio[0].set_value("📓 Letterboxd diary").run()
    at.sidebar.text_input[0].input("<i>me</i>").run()
    at.sidebar.button[0].click().run()

    assert not at.exception
    rendered = [m.value for m in at.markdown]
    assert any("&lt;b&gt;Heat&lt;/b&gt; &amp; &#42;Co&#42; &#36;x&#36;" in text for text in rendered)
    assert any("@&lt;i&gt;me&lt;/i&gt;" in text for text in rendered)
    assert not any("<b>Heat</b>" in text or "<i>me</i>" in text for text in rendered)


def test_app_uses_width_instead_of_deprecated_container_flag() -> None:
    source = Path(APP_PATH).read_text(encoding="utf-8")

    assert "use_container_width" not in source
    assert 'width="stretch"' in source
