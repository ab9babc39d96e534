"""
CLI helpers: navigation script parsing and replay through the tracker.

Usage: pytest test_app.py
"""

import pytest

from app import ReplayClock, build_parser, format_visit_row, parse_nav_script, replay
from conftest import RecordingDispatcher
from page_tracker import PageEnvironment, TrackerProvider

SCRIPT = """
# news feed, then an article read in two sittings
0    go /news
12   go /news/42?ref=feed  Article 42
30   hide
95   show
100  go /unknown/thing
110  unload
"""


class TestParseNavScript:

    def test_parses_steps(self):
        steps = parse_nav_script(SCRIPT)
        assert [s.action for s in steps] == ["go", "go", "hide", "show", "go", "unload"]
        assert steps[1].path == "/news/42?ref=feed"
        assert steps[1].title == "Article 42"
        assert steps[2].path is None

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ("abc go /news", "bad offset"),
            ("0 jump /news", "unknown action"),
            ("0 go", "needs a path"),
            ("5 go /news\n2 hide", "before"),
            ("7", "expected"),
        ],
    )
    def test_rejects_bad_lines(self, text, fragment):
        with pytest.raises(ValueError, match=fragment):
            parse_nav_script(text)


def test_replay_accumulates_visible_time():
    clock = ReplayClock(start=1_000.0)
    env = PageEnvironment(user_agent="Mozilla/5.0 (iPhone) Mobile")
    dispatcher = RecordingDispatcher()
    provider = TrackerProvider(env, dispatcher, clock=clock)

    replay(parse_nav_script(SCRIPT), env, provider, clock)

    timed = {
        b["page_path"]: b["time_spent_seconds"]
        for b, _ in dispatcher.sent
        if "time_spent_seconds" in b
    }
    assert timed["/news"] == 12
    # 12..30 visible, hidden until 95, visible again until 100
    assert timed["/news/42?ref=feed"] == 23
    assert timed["/unknown/thing"] == 10

    last, sync = dispatcher.sent[-1]
    assert sync is True
    assert "page_type" not in last
    assert all(b["device_type"] == "mobile" for b, _ in dispatcher.sent)
    assert env.listener_count("navigate") == 0
    provider.destroy()


def test_parser_subcommands():
    args = build_parser().parse_args(["visits", "42", "--page-type", "news"])
    assert args.user_id == 42
    assert args.page_type == "news"
    args = build_parser().parse_args(["migrate", "--check"])
    assert args.check is True


def test_format_visit_row():
    row = {
        "visited_at": "2026-03-01T10:00:00Z",
        "page_path": "/news/42",
        "page_type": "news",
        "page_id": "42",
        "time_spent_seconds": 31,
    }
    assert format_visit_row(row) == "  2026-03-01T10:00:00Z  news         /news/42  31s"

    unknown = {"page_path": "/admin", "page_type": "unknown", "time_spent_seconds": None}
    assert format_visit_row(unknown) == "  ?  -            /admin  -s"
