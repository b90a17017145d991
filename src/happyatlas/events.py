from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EventEntry:
    year: int
    texts: tuple[str, ...]
    is_active: bool = False

    @property
    def headline(self) -> str | None:
        # only the active year gets a headline
        if self.is_active and self.texts:
            return self.texts[0]
        return None

    @property
    def details(self) -> tuple[str, ...]:
        return self.texts[1:] if self.headline is not None else self.texts


@dataclass(frozen=True)
class EventTimeline:
    entries: tuple[EventEntry, ...] = ()
    has_events: bool = False
    fallback: bool = False     # active year precedes every event, full list shown

    @property
    def active(self) -> EventEntry | None:
        return next((e for e in self.entries if e.is_active), None)


def visible_events(event_log: dict[str, dict[int, list[str]]], code: str | None, active_year: int) -> EventTimeline:
    by_year = event_log.get(code) if code is not None else None
    if not by_year:
        return EventTimeline()

    ordered = sorted(by_year.items(), key=lambda kv: kv[0], reverse=True)
    shown = [(y, texts) for y, texts in ordered if y <= active_year]
    fallback = not shown
    if fallback:
        shown = ordered

    entries = tuple(
        EventEntry(year=y, texts=tuple(texts), is_active=(y == active_year))
        for y, texts in shown
    )
    return EventTimeline(entries=entries, has_events=True, fallback=fallback)
