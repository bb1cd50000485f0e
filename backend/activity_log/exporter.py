"""Markdown report of the activity log."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .schemas import ActivityRecord, DetailRecord
from .utils import truncate_text
from .views import aggregate_stats, establishment_stats

TITLE = "# Activity log"
EMPTY_REPORT = f"{TITLE}\n\nNo activities recorded.\n"
PLACEHOLDER = "—"
LINK_TEXT_LIMIT = 30

TRANSPORT_GLYPHS = {"walk": "🚶", "car": "🚗"}
STATUS_GLYPHS = (("green_count", "🟢"), ("yellow_count", "🟡"), ("red_count", "🔴"))

ACTIVITY_COLUMNS = (
    "№",
    "Time",
    "Count",
    "Type",
    "Status",
    "Direction",
    "Establishment",
    "Coordinates",
    "Person",
    "Department",
    "Link",
    "Comment",
)
DETAIL_COLUMNS = ("№", "Time", "Count", "Status", "Coordinates", "Person", "Link", "Comment")


def _cell(value: Optional[object]) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    text = " ".join(str(value).split())
    return text.replace("|", "\\|") if text else PLACEHOLDER


def _link(url: Optional[str]) -> str:
    if not url:
        return PLACEHOLDER
    label = truncate_text(url, LINK_TEXT_LIMIT).replace("[", "\\[").replace("]", "\\]")
    target = url.strip().replace(" ", "%20").replace(")", "%29")
    return _cell(f"[{label}]({target})")


def _status(record: ActivityRecord | DetailRecord) -> str:
    parts = []
    for field, glyph in STATUS_GLYPHS:
        value = getattr(record, field)
        if value is not None:
            parts.append(f"{glyph}{value}")
    return " ".join(parts) if parts else PLACEHOLDER


def _row(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _header(columns: Sequence[str]) -> List[str]:
    return [_row(columns), _row(["---"] * len(columns))]


def _activity_row(record: ActivityRecord) -> str:
    return _row(
        [
            str(record.id),
            f"{record.hour}:{record.minute}",
            _cell(record.participants_count),
            TRANSPORT_GLYPHS.get(record.transport_type or "", PLACEHOLDER),
            _status(record),
            _cell(record.direction),
            _cell(record.establishment),
            _cell(record.coordinates),
            _cell(record.main_person),
            _cell(record.department),
            _link(record.link),
            _cell(record.comment),
        ]
    )


def _detail_row(activity_id: int, detail: DetailRecord) -> str:
    return _row(
        [
            f"{activity_id}.{detail.id}",
            f"{detail.hour}:{detail.minute}",
            _cell(detail.participants_count),
            _status(detail),
            _cell(detail.coordinates),
            _cell(detail.main_person),
            _link(detail.link),
            _cell(detail.comment),
        ]
    )


def _statistics_section(records: Sequence[ActivityRecord]) -> List[str]:
    stats = aggregate_stats(records)
    directions = stats.directions
    lines = [
        "## Statistics",
        "",
        f"- **Activities:** {stats.total}",
        f"- **{TRANSPORT_GLYPHS['car']} By car:** {stats.car_people}",
        f"- **{TRANSPORT_GLYPHS['walk']} On foot:** {stats.walk_people}",
        f"- **Directions:** + {directions.plus} / - {directions.minus} / = {directions.equals}",
        "",
    ]
    venues = establishment_stats(records)
    if venues:
        lines.extend([f"### Establishments ({TRANSPORT_GLYPHS['walk']})", ""])
        lines.extend(_header(("Establishment", "Events", "People", "+", "-", "=")))
        for venue in venues:
            lines.append(
                _row(
                    [
                        _cell(venue.establishment),
                        str(venue.events),
                        str(venue.people),
                        str(venue.directions.plus),
                        str(venue.directions.minus),
                        str(venue.directions.equals),
                    ]
                )
            )
        lines.append("")
    return lines


def render_markdown(records: Sequence[ActivityRecord]) -> str:
    """Render the report for ``records`` in the order given.

    The output depends only on the records, so repeated exports of an
    unchanged store are byte-identical.
    """
    if not records:
        return EMPTY_REPORT

    lines = [TITLE, ""]
    lines.extend(_statistics_section(records))
    lines.extend(["## Activities", ""])

    needs_header = True
    for record in records:
        if needs_header:
            lines.extend(_header(ACTIVITY_COLUMNS))
            needs_header = False
        lines.append(_activity_row(record))
        if record.details:
            lines.append("")
            lines.extend(f"> {line}" for line in _header(DETAIL_COLUMNS))
            lines.extend(f"> {_detail_row(record.id, detail)}" for detail in record.details)
            lines.append("")
            needs_header = True
    if lines[-1] != "":
        lines.append("")
    return "\n".join(lines)
