"""Parse loosely structured ``Label: value`` text into a partial activity.

The recognised labels and vocabulary live in a :class:`LabelSet`, so another
language or report format only needs a new label set, not new control flow.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .schemas import ParsedActivity

_TIME_RE = re.compile(r"(\d{2}):(\d{2}):\d{2}")


@dataclass(frozen=True)
class LabelSet:
    link: str
    crew: str
    count: str
    comment: str
    coordinates: str
    detected_at: str
    type: str
    readiness: str
    personnel_type: str
    fully_ready: str
    partially_ready: str
    not_ready: str


ENGLISH_LABELS = LabelSet(
    link="Link:",
    crew="Crew:",
    count="Count:",
    comment="Comment:",
    coordinates="Coordinates (MGRS):",
    detected_at="Detection date/time:",
    type="Type:",
    readiness="Combat readiness:",
    personnel_type="Personnel",
    fully_ready="Fully combat-ready",
    partially_ready="Partially combat-ready",
    not_ready="Not combat-ready",
)

UKRAINIAN_LABELS = LabelSet(
    link="Посилання:",
    crew="Екіпаж:",
    count="Кількість:",
    comment="Коментар:",
    coordinates="Координати (MGRS):",
    detected_at="Дата/час виявлення:",
    type="Тип:",
    readiness="Боєздатність:",
    personnel_type="Особовий склад",
    fully_ready="Повністю боєздатний",
    partially_ready="Частково боєздатний",
    not_ready="Небоєздатний",
)

LABEL_SETS: Dict[str, LabelSet] = {"en": ENGLISH_LABELS, "uk": UKRAINIAN_LABELS}

# A handler receives the line value and the fields parsed so far and returns
# the fields it sets. An empty result means the line did not match.
Handler = Callable[[str, Dict[str, str]], Dict[str, str]]


@dataclass(frozen=True)
class LineRule:
    label: str
    handler: Handler


def _set_if_present(field: str) -> Handler:
    def handler(value: str, parsed: Dict[str, str]) -> Dict[str, str]:
        return {field: value} if value else {}

    return handler


def _time_handler(value: str, parsed: Dict[str, str]) -> Dict[str, str]:
    match = _TIME_RE.search(value)
    if not match:
        return {}
    return {"time": f"{match.group(1)}:{match.group(2)}"}


def _type_handler(labels: LabelSet) -> Handler:
    def handler(value: str, parsed: Dict[str, str]) -> Dict[str, str]:
        return {"transport_type": "walk" if value == labels.personnel_type else "car"}

    return handler


def _readiness_handler(labels: LabelSet) -> Handler:
    buckets = {
        labels.fully_ready: "green_count",
        labels.partially_ready: "yellow_count",
        labels.not_ready: "red_count",
    }

    def handler(value: str, parsed: Dict[str, str]) -> Dict[str, str]:
        count = parsed.get("participants_count", "")
        bucket = buckets.get(value)
        if not count or bucket is None:
            return {}
        routed = {field: "" for field in buckets.values()}
        routed[bucket] = count
        return routed

    return handler


def build_rules(labels: LabelSet) -> Tuple[LineRule, ...]:
    return (
        LineRule(labels.link, _set_if_present("link")),
        LineRule(labels.crew, _set_if_present("main_person")),
        LineRule(labels.count, _set_if_present("participants_count")),
        LineRule(labels.comment, _set_if_present("comment")),
        LineRule(labels.coordinates, _set_if_present("coordinates")),
        LineRule(labels.detected_at, _time_handler),
        LineRule(labels.type, _type_handler(labels)),
        LineRule(labels.readiness, _readiness_handler(labels)),
    )


class ActivityTextParser:
    def __init__(self, labels: LabelSet = ENGLISH_LABELS) -> None:
        self.labels = labels
        self.rules = build_rules(labels)

    def _match(self, line: str) -> Optional[Tuple[LineRule, str]]:
        for rule in self.rules:
            if line.startswith(rule.label):
                return rule, line[len(rule.label):].strip()
        return None

    def parse(self, text: str) -> Optional[ParsedActivity]:
        """Return the recognised fields, or ``None`` if no label matched.

        The first line that actually contributes to a label wins; later lines
        with the same label are ignored.
        """
        lines: List[str] = [line.strip() for line in (text or "").splitlines()]
        parsed: Dict[str, str] = {}
        claimed: set[str] = set()
        for line in lines:
            if not line:
                continue
            matched = self._match(line)
            if matched is None:
                continue
            rule, value = matched
            if rule.label in claimed:
                continue
            fields = rule.handler(value, parsed)
            if fields:
                parsed.update(fields)
                claimed.add(rule.label)
        if not parsed:
            return None
        return ParsedActivity(**parsed)


def get_label_set(name: str) -> LabelSet:
    try:
        return LABEL_SETS[name]
    except KeyError:
        raise ValueError(f"Unknown parser label set: {name}") from None


def parse_activity_text(text: str, labels: LabelSet = ENGLISH_LABELS) -> Optional[ParsedActivity]:
    return ActivityTextParser(labels).parse(text)
