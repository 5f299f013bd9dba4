"""
Day segmentation, place linking and HTML rendering of itinerary text.
"""

import html
import logging
import re
from typing import Dict, List, Optional, Sequence

from ..core.state import DayBlock, GroundingReference, ItinerarySegments, RenderedBlock

# A day starts at the beginning of the text or of a line, optionally in bold
DAY_BOUNDARY_RE = re.compile(r"(?:^|\n)(?=\**Day\s+\d+)", re.IGNORECASE)
DAY_MARKER_RE = re.compile(r"^\**Day\s+\d+", re.IGNORECASE)
_TITLE_PUNCTUATION_RE = re.compile(r"[:#-]")
_ORDINAL_RE = re.compile(r"\d+")

# Existing anchors and any other tag are left untouched by the linker
_PROTECTED_MARKUP_RE = re.compile(r"(<a\b[^>]*>.*?</a>|</?[A-Za-z][^<>]*>)", re.IGNORECASE | re.DOTALL)

LOCATION_CATEGORIES = [
    ("Hotel", "🏨", ("hotel", "resort", "inn", "stay", "hostel", "lodging", "apartment")),
    ("Dining", "🍽️", ("restaurant", "cafe", "bistro", "grill", "food", "dining", "kitchen", "bar")),
    ("Culture/Spot", "🏛️", ("museum", "art", "gallery", "theatre", "temple", "church", "cathedral", "park", "square")),
]
DEFAULT_LOCATION_CATEGORY = ("Attraction", "🎡")


def _clean_title(line: str) -> str:
    return _TITLE_PUNCTUATION_RE.sub("", line.replace("**", "")).strip()


def _parse_day_block(fragment: str) -> DayBlock:
    first_newline = fragment.find("\n")
    if first_newline == -1:
        title, body = _clean_title(fragment), ""
    else:
        title = _clean_title(fragment[:first_newline])
        body = fragment[first_newline + 1:].strip()

    ordinal_match = _ORDINAL_RE.search(title)
    return {
        "title": title,
        "body": body,
        "ordinal": int(ordinal_match.group()) if ordinal_match else None,
    }


def segment_days(itinerary_text: str) -> ItinerarySegments:
    """Splits itinerary text into a leading preamble and ordered day blocks.

    Text without any "Day N" marker comes back whole as the preamble with no
    days, and callers render it flat. Day numbers are neither validated nor
    reordered.
    """
    text = itinerary_text or ""
    fragments = DAY_BOUNDARY_RE.split(text)
    if len(fragments) < 2:
        return {"preamble": text, "days": []}

    preamble_parts: List[str] = []
    days: List[DayBlock] = []
    for fragment in fragments:
        trimmed = fragment.strip()
        if not trimmed:
            continue
        if DAY_MARKER_RE.match(trimmed):
            days.append(_parse_day_block(trimmed))
        else:
            preamble_parts.append(trimmed)

    logging.info(f"Segmented itinerary into {len(days)} day blocks.")
    return {"preamble": "\n\n".join(preamble_parts), "days": days}


def _anchor(title: str, uri: str) -> str:
    return (
        f'<a href="{html.escape(uri, quote=True)}" target="_blank" '
        f'rel="noopener noreferrer">{html.escape(title, quote=False)}</a>'
    )


def link_entities(text: str, references: Optional[Sequence[GroundingReference]]) -> str:
    """Wraps whole-word, case-insensitive mentions of reference titles in links.

    The visible label is the reference's stored title, so differently cased
    mentions are normalized to it. References apply in the order given. Text
    already inside an anchor or a tag is never rewritten, so a later title
    that overlaps an earlier one cannot re-wrap injected markup.
    """
    if not text or not references:
        return text

    linked = text
    for reference in references:
        title = reference.get("title")
        uri = reference.get("uri")
        if not title or not uri:
            continue

        pattern = re.compile(rf"\b{re.escape(title)}\b", re.IGNORECASE)
        replacement = _anchor(title, uri)
        segments = _PROTECTED_MARKUP_RE.split(linked)
        # Odd indexes hold the captured markup
        linked = "".join(
            segment if i % 2 else pattern.sub(lambda _m: replacement, segment)
            for i, segment in enumerate(segments)
        )

    return linked


def text_to_html(text: str) -> str:
    return (text or "").replace("\n", "<br/>")


def render_itinerary(text: str, references: Optional[Sequence[GroundingReference]] = None) -> List[RenderedBlock]:
    """Renders itinerary text into display blocks with linked HTML bodies."""
    segments = segment_days(text)
    if not segments["days"]:
        return [{"kind": "flat", "html": text_to_html(link_entities(text, references))}]

    blocks: List[RenderedBlock] = []
    if segments["preamble"]:
        blocks.append({
            "kind": "preamble",
            "html": text_to_html(link_entities(segments["preamble"], references)),
        })
    for day in segments["days"]:
        blocks.append({
            "kind": "day",
            "title": day["title"],
            "ordinal": day.get("ordinal"),
            "html": text_to_html(link_entities(day["body"], references)),
        })
    return blocks


def classify_location(title: str) -> Dict[str, str]:
    """Maps a place title to the location-card category shown next to it."""
    lowered = (title or "").lower()
    for label, icon, keywords in LOCATION_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return {"label": label, "icon": icon}
    label, icon = DEFAULT_LOCATION_CATEGORY
    return {"label": label, "icon": icon}
