from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from .errors import ClipboardUnavailable, InvalidLink, MissingMainPerson, UnrecognizedText
from .exporter import render_markdown
from .parser import ENGLISH_LABELS, ActivityTextParser, LabelSet
from .schemas import ActivityFields, ActivityRecord, ParsedActivity, StatsResponse
from .store import ActivityStore
from .utils import clean_text, is_valid_link, parse_leading_int
from .views import (
    aggregate_stats,
    establishment_stats,
    filter_suggestions,
    unique_establishments,
    unique_main_persons,
)

EXPORT_FILENAME_PREFIX = "company-activities"
DEFAULT_PASTE_COUNT = 1


class Clipboard(Protocol):
    def read_text(self) -> str:
        ...

    def write_text(self, text: str) -> None:
        ...


# ----------------------------------------------------------------------
# Derived views over the current snapshot
# ----------------------------------------------------------------------
def build_stats(store: ActivityStore) -> StatsResponse:
    records = store.list()
    return StatsResponse(aggregate=aggregate_stats(records), establishments=establishment_stats(records))


def suggest_main_persons(store: ActivityStore, query: Optional[str] = None) -> list[str]:
    return filter_suggestions(unique_main_persons(store.list()), query)


def suggest_establishments(store: ActivityStore, query: Optional[str] = None) -> list[str]:
    return filter_suggestions(unique_establishments(store.list()), query)


# ----------------------------------------------------------------------
# Links
# ----------------------------------------------------------------------
def paste_link(text: str) -> str:
    link = clean_text(text)
    if not link or not is_valid_link(link):
        raise InvalidLink((text or "").strip())
    return link


# ----------------------------------------------------------------------
# Pasting activities
# ----------------------------------------------------------------------
def draft_from_parsed(parsed: ParsedActivity) -> ActivityFields:
    hour, _, minute = (parsed.time or "00:00").partition(":")
    count = parse_leading_int(parsed.participants_count) if parsed.participants_count else DEFAULT_PASTE_COUNT

    link = clean_text(parsed.link)
    if link and not is_valid_link(link):
        logger.warning(f"Dropping pasted link that is not a valid URL: {link!r}")
        link = None

    return ActivityFields(
        hour=hour or "00",
        minute=minute or "00",
        main_person=clean_text(parsed.main_person) or "",
        participants_count=count,
        transport_type=parsed.transport_type if parsed.transport_type in {"walk", "car"} else None,
        green_count=parse_leading_int(parsed.green_count or None),
        yellow_count=parse_leading_int(parsed.yellow_count or None),
        red_count=parse_leading_int(parsed.red_count or None),
        coordinates=clean_text(parsed.coordinates),
        link=link,
        comment=clean_text(parsed.comment),
    )


def paste_activity(store: ActivityStore, text: str, labels: LabelSet = ENGLISH_LABELS) -> ActivityRecord:
    parsed = ActivityTextParser(labels).parse(text)
    if parsed is None:
        raise UnrecognizedText("Could not recognise an activity in the pasted text")
    draft = draft_from_parsed(parsed)
    if not draft.main_person:
        raise MissingMainPerson(f"Pasted activity has no '{labels.crew.rstrip(':')}' value")
    record = store.create(draft)
    logger.info(f"Pasted activity {record.id} from clipboard text")
    return record


# ----------------------------------------------------------------------
# Clipboard and file export
# ----------------------------------------------------------------------
def read_clipboard(clipboard: Clipboard) -> str:
    try:
        return clipboard.read_text()
    except Exception as exc:
        logger.warning(f"Clipboard read failed: {exc}")
        raise ClipboardUnavailable("Clipboard could not be read") from exc


def paste_activity_from_clipboard(
    store: ActivityStore, clipboard: Clipboard, labels: LabelSet = ENGLISH_LABELS
) -> ActivityRecord:
    return paste_activity(store, read_clipboard(clipboard), labels)


def export_markdown(store: ActivityStore) -> str:
    return render_markdown(store.list())


def copy_markdown(store: ActivityStore, clipboard: Clipboard) -> str:
    markdown = export_markdown(store)
    try:
        clipboard.write_text(markdown)
    except Exception as exc:
        logger.warning(f"Clipboard write failed: {exc}")
        raise ClipboardUnavailable("Could not copy the export to the clipboard") from exc
    return markdown


def export_filename(day: dt.date) -> str:
    return f"{EXPORT_FILENAME_PREFIX}-{day.isoformat()}.md"


def write_markdown_export(store: ActivityStore, directory: Path, day: Optional[dt.date] = None) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(day or dt.date.today())
    # written as bytes so line endings stay "\n"
    path.write_bytes(export_markdown(store).encode("utf-8"))
    logger.info(f"Wrote Markdown export to {path}")
    return path


__all__ = [
    "Clipboard",
    "build_stats",
    "suggest_main_persons",
    "suggest_establishments",
    "paste_link",
    "draft_from_parsed",
    "paste_activity",
    "read_clipboard",
    "paste_activity_from_clipboard",
    "export_markdown",
    "copy_markdown",
    "export_filename",
    "write_markdown_export",
]
