from __future__ import annotations

import datetime as dt

import pytest

from activity_log import services
from activity_log.errors import ClipboardUnavailable, InvalidLink, MissingMainPerson, UnrecognizedText
from activity_log.parser import UKRAINIAN_LABELS
from activity_log.store import ActivityStore


class FakeClipboard:
    def __init__(self, text: str = "", fail: bool = False) -> None:
        self.text = text
        self.fail = fail

    def read_text(self) -> str:
        if self.fail:
            raise PermissionError("clipboard access denied")
        return self.text

    def write_text(self, text: str) -> None:
        if self.fail:
            raise PermissionError("clipboard access denied")
        self.text = text


def test_paste_activity_creates_record(store: ActivityStore):
    text = (
        "Detection date/time: 12.12.2025 15:16:25\n"
        "Crew: Falcon\n"
        "Count: 3\n"
        "Combat readiness: Fully combat-ready\n"
        "Type: Personnel\n"
        "Link: https://example.com/e/1\n"
    )
    record = services.paste_activity(store, text)

    assert record.id == 1
    assert (record.hour, record.minute) == ("15", "16")
    assert record.main_person == "Falcon"
    assert record.participants_count == 3
    assert record.transport_type == "walk"
    assert (record.green_count, record.yellow_count, record.red_count) == (3, None, None)
    assert record.link == "https://example.com/e/1"
    assert store.list()[0].main_person == "Falcon"


def test_paste_defaults_time_and_count(store: ActivityStore):
    record = services.paste_activity(store, "Crew: Owl\nType: Truck")
    assert (record.hour, record.minute) == ("00", "00")
    assert record.participants_count == 1
    assert record.transport_type == "car"


def test_paste_drops_invalid_link(store: ActivityStore):
    record = services.paste_activity(store, "Crew: Owl\nLink: not a url")
    assert record.link is None


def test_paste_without_labels_raises(store: ActivityStore):
    with pytest.raises(UnrecognizedText):
        services.paste_activity(store, "nothing useful here")
    assert store.list() == []


def test_paste_without_crew_raises(store: ActivityStore):
    with pytest.raises(MissingMainPerson):
        services.paste_activity(store, "Count: 2\nComment: no crew")
    assert store.list() == []


def test_paste_with_ukrainian_labels(store: ActivityStore):
    record = services.paste_activity(store, "Екіпаж: Сова\nКількість: 2", UKRAINIAN_LABELS)
    assert record.main_person == "Сова"
    assert record.participants_count == 2


def test_paste_link_accepts_http_and_https():
    assert services.paste_link("  https://example.com/x  ") == "https://example.com/x"
    assert services.paste_link("http://example.com") == "http://example.com"


@pytest.mark.parametrize("text", ["", "   ", "example.com", "ftp://example.com/file", "https://", "http://exa mple.com"])
def test_paste_link_rejects_invalid(text: str):
    with pytest.raises(InvalidLink):
        services.paste_link(text)


def test_paste_from_clipboard(store: ActivityStore):
    clipboard = FakeClipboard("Crew: Heron\nCount: 2")
    record = services.paste_activity_from_clipboard(store, clipboard)
    assert record.main_person == "Heron"


def test_clipboard_failures_become_unavailable(store: ActivityStore):
    clipboard = FakeClipboard(fail=True)
    with pytest.raises(ClipboardUnavailable):
        services.paste_activity_from_clipboard(store, clipboard)
    with pytest.raises(ClipboardUnavailable):
        services.copy_markdown(store, clipboard)


def test_copy_and_file_export_are_byte_identical(store: ActivityStore, tmp_path):
    store.create({"hour": "09", "minute": "00", "main_person": "Bob", "transport_type": "car"})
    store.add_detail(1, {"hour": "09", "minute": "05", "comment": "ünïcödé"})
    clipboard = FakeClipboard()

    copied = services.copy_markdown(store, clipboard)
    path = services.write_markdown_export(store, tmp_path, dt.date(2025, 3, 7))

    assert clipboard.text == copied
    assert path.name == "company-activities-2025-03-07.md"
    assert path.read_bytes() == copied.encode("utf-8")


def test_stats_and_suggestions(store: ActivityStore):
    store.create({"hour": "09", "minute": "00", "main_person": "Bob", "transport_type": "walk",
                  "participants_count": 2, "establishment": "Depot"})
    store.create({"hour": "09", "minute": "10", "main_person": "Alice", "transport_type": "walk",
                  "participants_count": 1, "establishment": "Cafe"})

    stats = services.build_stats(store)
    assert stats.aggregate.total == 2
    assert stats.aggregate.walk_people == 3
    assert {stat.establishment for stat in stats.establishments} == {"Depot", "Cafe"}

    assert services.suggest_main_persons(store) == ["Alice", "Bob"]
    assert services.suggest_main_persons(store, "ali") == ["Alice"]
    assert services.suggest_establishments(store, "EP") == ["Depot"]
