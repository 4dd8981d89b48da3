"""Ordered field extractors for heterogeneous upstream payloads.

Each extractor takes a payload and returns a value or None. ``first_of``
combines extractors so the first one producing a usable value wins.
"""

import re
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .models import UNKNOWN

Extractor = Callable[[Any], Optional[Any]]

CHROMOSOME_PATTERN = re.compile(r'^(\d+|X|Y|MT)')
ALIAS_DELIMITERS = re.compile(r'\s*[,;|]\s*')


def _usable(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def first_of(*extractors: Extractor) -> Extractor:
    """Combine extractors; the first usable result wins."""
    def extract(payload: Any) -> Optional[Any]:
        for extractor in extractors:
            try:
                value = extractor(payload)
            except (KeyError, IndexError, TypeError, AttributeError):
                continue
            if _usable(value):
                return value
        return None
    return extract


def path(*keys) -> Extractor:
    """Extractor following nested dict keys / list indices."""
    def extract(payload: Any) -> Optional[Any]:
        current = payload
        for key in keys:
            if current is None:
                return None
            if isinstance(key, int):
                if not isinstance(current, (list, tuple)) or len(current) <= key:
                    return None
            elif not isinstance(current, dict):
                return None
            current = current[key] if isinstance(key, int) else current.get(key)
        return current
    return extract


def constant(value: Any) -> Extractor:
    """Extractor that always yields value; used as a last resort."""
    return lambda payload: value


def extract_chromosome(chromosome: Optional[str], location: Optional[str]) -> str:
    """
    Determine the chromosome for a gene.

    Prefers the explicit chromosome field, then the leading token of the
    cytogenetic location, then "Unknown".
    """
    if chromosome and str(chromosome).strip():
        return str(chromosome).strip()
    if location:
        match = CHROMOSOME_PATTERN.match(str(location).strip())
        return match.group(1) if match else UNKNOWN
    return UNKNOWN


def split_aliases(*fields: Any, limit: int = 10) -> List[str]:
    """
    Split delimited alias fields, concatenate them in order and cap the list.

    Fields may be delimited strings or lists of strings.
    """
    aliases: List[str] = []
    seen = set()
    for value in fields:
        if not value:
            continue
        parts: Iterable[str]
        if isinstance(value, (list, tuple)):
            parts = [str(item) for item in value]
        else:
            parts = ALIAS_DELIMITERS.split(str(value))
        for part in parts:
            alias = part.strip()
            if alias and alias.upper() not in seen:
                seen.add(alias.upper())
                aliases.append(alias)
    return aliases[:limit]


def unwrap_single(payload: Any) -> Any:
    """Arrays yield their first element; objects pass through."""
    if isinstance(payload, list):
        return payload[0] if payload else None
    return payload


COORDINATE_EXTENSIONS: Sequence[str] = ('.pdb', '.cif', '.mmcif', '.bcif', '.ent')


def has_coordinate_extension(value: Optional[str]) -> bool:
    if not value:
        return False
    lowered = str(value).lower().split('?', 1)[0]
    return lowered.endswith(tuple(COORDINATE_EXTENSIONS))
