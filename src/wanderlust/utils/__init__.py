"""
Parsing, rendering and storage helpers for the trip planning pipeline.
"""

from .sections import split_sections, decode_json_section
from .itinerary import segment_days, link_entities, render_itinerary, text_to_html, classify_location

__all__ = [
    'split_sections',
    'decode_json_section',
    'segment_days',
    'link_entities',
    'render_itinerary',
    'text_to_html',
    'classify_location',
]
