"""
Splitting of the model's delimited response into named sections.
"""

import json
import logging
import re
from typing import Any, Dict, TypeVar

from ..core.state import SectionName

SECTION_DELIMITER = "---SECTION: "
SECTION_NAME_TERMINATOR = "---"

# Opening fence with an optional language tag, or a bare closing fence
_CODE_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*")

T = TypeVar("T")


def split_sections(raw: str) -> Dict[SectionName, str]:
    """Splits raw model text into a mapping holding every recognized section.

    Text before the first delimiter belongs to no section. A name that is not
    recognized is discarded, a repeated name keeps its first occurrence, and a
    section that never appears maps to the empty string.
    """
    sections: Dict[SectionName, str] = {name: "" for name in SectionName}
    seen = set()

    for fragment in (raw or "").split(SECTION_DELIMITER)[1:]:
        for name in SectionName:
            prefix = name.value + SECTION_NAME_TERMINATOR
            if fragment.startswith(prefix):
                if name not in seen:
                    seen.add(name)
                    sections[name] = fragment[len(prefix):].strip()
                break

    logging.info(f"Split response into sections: {[name.value for name in SectionName if name in seen]}")
    return sections


def strip_code_fences(text: str) -> str:
    """Removes markdown code-fence markers and surrounding whitespace."""
    return _CODE_FENCE_RE.sub("", text or "").strip()


def decode_json_section(section_text: str, fallback: T) -> T:
    """Decodes a JSON section, returning `fallback` instead of ever raising.

    Empty sections return the fallback without being treated as an error. When
    the fallback is a list, a decoded value that is not a list (an object where
    an array was expected) also yields the fallback; element shapes
    are left to the normalizers.
    """
    cleaned = strip_code_fences(section_text)
    if not cleaned:
        return fallback

    try:
        decoded: Any = json.loads(cleaned)
    except (json.JSONDecodeError, ValueError) as e:
        logging.warning(f"Could not decode JSON section, using fallback: {e}")
        return fallback

    if isinstance(fallback, list) and not isinstance(decoded, list):
        logging.warning(f"JSON section decoded to {type(decoded).__name__}, expected a list. Using fallback.")
        return fallback

    return decoded
