"""
Page classification and device detection.

Usage: pytest test_classifier.py
"""

import pytest

from data_schema import DeviceType, PageType, PageVisit, detect_device_type
from page_tracker.classifier import UNKNOWN_PAGE, extract_page_info, split_path


class TestExtractPageInfo:

    @pytest.mark.parametrize("path", ["", "/"])
    def test_root_is_onboarding(self, path):
        info = extract_page_info(path)
        assert info.page_type == PageType.ONBOARDING
        assert info.page_id is None

    def test_news_paths(self):
        assert extract_page_info("/news") == extract_page_info("/news/")
        assert extract_page_info("/news").page_type == PageType.NEWS
        assert extract_page_info("/news").page_id is None
        assert extract_page_info("/news/").page_id is None

        info = extract_page_info("/news/42")
        assert info.page_type == PageType.NEWS
        assert info.page_id == "42"

    def test_calendar_with_query_string(self):
        info = extract_page_info("/calendar/7?x=1")
        assert info.page_type == PageType.EVENT
        assert info.page_id == "7"

    @pytest.mark.parametrize(
        "path, page_type, page_id",
        [
            ("/events", PageType.EVENT, None),
            ("/events/15", PageType.EVENT, "15"),
            ("/instructions/3", PageType.INSTRUCTION, "3"),
            ("/library", PageType.INSTRUCTION, None),
            ("/recordings/9", PageType.RECORDING, "9"),
            ("/faq/2", PageType.FAQ, "2"),
            ("/profile", PageType.PROFILE, None),
            ("/favorites", PageType.FAVORITES, None),
            ("/notes/12", PageType.NOTES, None),
        ],
    )
    def test_sections(self, path, page_type, page_id):
        info = extract_page_info(path)
        assert info.page_type == page_type
        assert info.page_id == page_id

    def test_non_numeric_tail_has_no_id(self):
        info = extract_page_info("/news/latest")
        assert info.page_type == PageType.NEWS
        assert info.page_id is None

    def test_unknown_path(self):
        info = extract_page_info("/unknown/thing")
        assert info == UNKNOWN_PAGE
        assert info.page_type is None
        assert info.page_id is None

    @pytest.mark.parametrize("bad", [None, 42, b"/news"])
    def test_malformed_input_degrades_to_unknown(self, bad):
        assert extract_page_info(bad) == UNKNOWN_PAGE

    def test_split_path(self):
        assert split_path("/calendar/7?x=1") == ("/calendar/7", "?x=1")
        assert split_path("/news#top") == ("/news", "")
        assert split_path("/faq") == ("/faq", "")


class TestDeviceType:

    def test_ipad_is_tablet(self):
        ua = "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) Mobile/15E148"
        assert detect_device_type(ua) == DeviceType.TABLET

    def test_iphone_is_mobile(self):
        ua = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"
        assert detect_device_type(ua) == DeviceType.MOBILE

    def test_android_phone_is_mobile(self):
        assert detect_device_type("Mozilla/5.0 (Linux; Android 14; Pixel 8)") == DeviceType.MOBILE

    def test_desktop(self):
        ua = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0"
        assert detect_device_type(ua) == DeviceType.DESKTOP

    def test_missing_user_agent(self):
        assert detect_device_type(None) == DeviceType.DESKTOP


class TestPageVisitWire:

    def test_to_dict_uses_snake_case_and_skips_unset(self):
        visit = PageVisit(
            page_path="/news/42?ref=feed",
            session_id="session_1_abc",
            page_type=PageType.NEWS,
            page_id="42",
            device_type=DeviceType.DESKTOP,
        )
        assert visit.to_dict() == {
            "page_path": "/news/42?ref=feed",
            "session_id": "session_1_abc",
            "page_type": "news",
            "page_id": "42",
            "device_type": "desktop",
        }

    def test_zero_time_spent_is_sent(self):
        visit = PageVisit(page_path="/faq", session_id="s", time_spent_seconds=0)
        assert visit.to_dict()["time_spent_seconds"] == 0

    def test_from_dict(self):
        visit = PageVisit.from_dict({
            "page_path": "/calendar/7",
            "session_id": "s",
            "page_type": "event",
            "page_id": 7,
            "time_spent_seconds": "12",
        })
        assert visit.page_type == PageType.EVENT
        assert visit.page_id == "7"
        assert visit.time_spent_seconds == 12
        assert visit.device_type is None

    def test_from_dict_unrecognised_types_become_none(self):
        visit = PageVisit.from_dict({
            "page_path": "/admin/products",
            "session_id": "s",
            "page_type": "unknown",
            "device_type": "smart-tv",
        })
        assert visit.page_type is None
        assert visit.device_type is None
        assert "page_type" not in visit.to_dict()
