"""Scanner for the tag-delimited protocol emitted by the model.

A fragment is ``<name attrs>content</name>``. The closing marker is matched
by back-reference to the opening name, not by structural nesting, so a tag
nested inside another tag of the same name closes early. Unclosed tags
simply produce no fragment; nothing in here raises on malformed input.
"""
from typing import List, Optional
import re

from domain.models.protocol import Fragment

TAG_NAME_PATTERN = r"[A-Za-z0-9_.-]+"

_FRAGMENT_RE = re.compile(rf"<({TAG_NAME_PATTERN})[^>]*>(.*?)</\1>", re.DOTALL)


def extract_fragments(text: str) -> List[Fragment]:
    """Extract tag fragments left to right, without overlap"""

    if not text:
        return []

    return [
        Fragment(tag_name=match.group(1), content=match.group(2))
        for match in _FRAGMENT_RE.finditer(text)
    ]


def _named_tag_re(name: str) -> "re.Pattern[str]":
    escaped = re.escape(name)
    return re.compile(rf"<{escaped}(?:\s[^>]*)?>(.*?)</{escaped}>", re.DOTALL)


def find_tag_match(text: str, name: str) -> Optional["re.Match[str]"]:
    """Locate the first ``<name>`` element, returning the regex match"""
    return _named_tag_re(name).search(text)


def find_tag(text: str, name: str) -> Optional[str]:
    """Return the raw content of the first ``<name>`` element, if any"""

    match = find_tag_match(text, name)
    return match.group(1) if match else None


def find_all_tags(text: str, name: str) -> List[str]:
    """Return the raw content of every ``<name>`` element in order"""
    return [match.group(1) for match in _named_tag_re(name).finditer(text)]
