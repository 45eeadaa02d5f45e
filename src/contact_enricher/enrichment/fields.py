"""
Contact attribute set and the cleaning rules applied to extracted values.
Each attribute has a declarative rule: an optional normalizer followed by
predicates that must all hold for the value to be kept.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

from ..errors import ExtractionParseError


CONTACT_FIELDS = (
    'contact',
    'phone',
    'email',
    'website',
    'location',
    'linkedin',
    'address',
    'twitter',
    'facebook',
)

# Values models return instead of leaving a field empty
SENTINEL_VALUES = {
    'not found',
    'not available',
    'not provided',
    'not specified',
    'unknown',
    'n/a',
    'na',
    'none',
    'null',
    '-',
}

ExtractedFields = Dict[str, str]

_HOSTNAME_RE = re.compile(r'^(?:www\.)?[a-z0-9-]+(?:\.[a-z0-9-]+)*\.[a-z]{2,}(?:[/?#].*)?$', re.IGNORECASE)


def is_present(value: str) -> bool:
    return bool(value) and value.lower() not in SENTINEL_VALUES


def has_at_sign(value: str) -> bool:
    return '@' in value


def is_absolute_url(value: str) -> bool:
    """Check that the value carries an http(s) scheme and a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def strip_mailto(value: str) -> str:
    if value.lower().startswith('mailto:'):
        return value[7:].split('?')[0]
    return value


def add_missing_scheme(value: str) -> str:
    """Prefix bare hostnames like ``example.com`` with ``https://``."""
    if '://' in value:
        return value
    if _HOSTNAME_RE.match(value):
        return f"https://{value}"
    return value


@dataclass(frozen=True)
class FieldRule:
    """Normalization and validation for one contact attribute."""
    checks: Tuple[Callable[[str], bool], ...] = (is_present,)
    normalize: Optional[Callable[[str], str]] = None

    def clean(self, value: Any) -> Optional[str]:
        """Return the cleaned value, or None when it should be dropped."""
        if not isinstance(value, str):
            return None

        cleaned = value.strip()
        if self.normalize and is_present(cleaned):
            cleaned = self.normalize(cleaned).strip()

        if all(check(cleaned) for check in self.checks):
            return cleaned
        return None


FIELD_RULES: Dict[str, FieldRule] = {
    'contact': FieldRule(),
    'phone': FieldRule(),
    'email': FieldRule(checks=(is_present, has_at_sign), normalize=strip_mailto),
    'website': FieldRule(checks=(is_present, is_absolute_url), normalize=add_missing_scheme),
    'location': FieldRule(),
    'linkedin': FieldRule(checks=(is_present, is_absolute_url)),
    'address': FieldRule(),
    'twitter': FieldRule(checks=(is_present, is_absolute_url)),
    'facebook': FieldRule(checks=(is_present, is_absolute_url)),
}


def clean_fields(raw: Dict[str, Any]) -> ExtractedFields:
    """Apply the field rules to a raw model answer.

    Unknown keys and values failing their rule are dropped. The result
    follows the attribute order of ``CONTACT_FIELDS``.
    """
    cleaned: ExtractedFields = {}
    for name in CONTACT_FIELDS:
        if name not in raw:
            continue
        value = FIELD_RULES[name].clean(raw[name])
        if value is not None:
            cleaned[name] = value
    return cleaned


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in text, if any.

    Braces inside JSON string literals do not count towards the balance.
    """
    start = text.find('{')
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def parse_extraction_response(text: str) -> ExtractedFields:
    """Parse and clean a model response.

    Raises ExtractionParseError when no JSON object can be read from it.
    """
    span = find_json_object(text or '')
    if span is None:
        raise ExtractionParseError("No JSON object found in extraction response")

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise ExtractionParseError(f"Invalid JSON in extraction response: {e}")

    if not isinstance(data, dict):
        raise ExtractionParseError("Extraction response is not a JSON object")

    return clean_fields(data)
