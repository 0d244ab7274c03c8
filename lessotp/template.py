"""
OTP Templates
=============
Parsing, validation and generation of template-shaped OTP values.

A template is a run of groups such as ``N{4}L{2}U{2}``:

- ``N`` digits (0-9)
- ``L`` lowercase letters (a-z)
- ``U`` uppercase letters (A-Z)
- ``A`` alphanumeric (0-9, a-z, A-Z)
- ``M`` mixed-case letters (a-z, A-Z)

The legacy grammar also accepts a bare kind letter (count of 1) and literal
separator characters between groups, e.g. ``M{3}-N{3}``.
"""

import re
import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .exceptions import InvalidTemplate


class TemplateKind(str, Enum):
    """Character classes a template group can draw from."""
    NUMERIC = "N"
    LOWER = "L"
    UPPER = "U"
    ALPHANUMERIC = "A"
    MIXED_CASE = "M"


class TemplateGrammar(str, Enum):
    """Template grammar versions."""
    STRICT = "strict"
    LEGACY = "legacy"


ALPHABETS = {
    TemplateKind.NUMERIC: string.digits,
    TemplateKind.LOWER: string.ascii_lowercase,
    TemplateKind.UPPER: string.ascii_uppercase,
    TemplateKind.ALPHANUMERIC: string.digits + string.ascii_lowercase + string.ascii_uppercase,
    TemplateKind.MIXED_CASE: string.ascii_lowercase + string.ascii_uppercase,
}

DEFAULT_OTP_MIN = 100000
DEFAULT_OTP_MAX = 999999

_STRICT_PATTERN = re.compile(r"(?:[NLUAM]\{[0-9]+\})+")
_STRICT_GROUP = re.compile(r"([NLUAM])\{([0-9]+)\}")
_LEGACY_TOKEN = re.compile(r"([NLUAM])(?:\{([0-9]+)\})?|([^NLUAM{}])")


@dataclass(frozen=True)
class TemplateGroup:
    """A run of ``count`` random characters of one kind."""
    kind: TemplateKind
    count: int

    @property
    def alphabet(self) -> str:
        return ALPHABETS[self.kind]


Segment = Union[TemplateGroup, str]


def _parse_strict(template: str) -> List[Segment]:
    if not _STRICT_PATTERN.fullmatch(template):
        raise InvalidTemplate(template)

    groups: List[Segment] = []
    for kind, count in _STRICT_GROUP.findall(template):
        if int(count) <= 0:
            raise InvalidTemplate(template, f"Group count must be positive: {kind}{{{count}}}")
        groups.append(TemplateGroup(TemplateKind(kind), int(count)))
    return groups


def _parse_legacy(template: str) -> List[Segment]:
    segments: List[Segment] = []
    pos = 0
    while pos < len(template):
        match = _LEGACY_TOKEN.match(template, pos)
        if match is None:
            # stray brace
            raise InvalidTemplate(template)
        kind, count, literal = match.groups()
        if literal is not None:
            segments.append(literal)
        else:
            n = int(count) if count is not None else 1
            if n <= 0:
                raise InvalidTemplate(template, f"Group count must be positive: {kind}{{{count}}}")
            segments.append(TemplateGroup(TemplateKind(kind), n))
        pos = match.end()

    if not any(isinstance(segment, TemplateGroup) for segment in segments):
        raise InvalidTemplate(template, f"Template has no character groups: {template!r}")
    return segments


def parse_template(
    template: str,
    grammar: TemplateGrammar = TemplateGrammar.STRICT,
) -> List[Segment]:
    """
    Parse a template into its segments.

    Args:
        template: Template string, e.g. ``N{3}L{2}``
        grammar: Grammar version to parse with

    Returns:
        List of TemplateGroup (and, for the legacy grammar, literal strings)

    Raises:
        InvalidTemplate: If the template does not match the grammar
    """
    if not isinstance(template, str) or not template:
        raise InvalidTemplate(template)

    if TemplateGrammar(grammar) is TemplateGrammar.LEGACY:
        return _parse_legacy(template)
    return _parse_strict(template)


def validate_template(
    template: str,
    grammar: TemplateGrammar = TemplateGrammar.STRICT,
) -> bool:
    """Return True if ``template`` is valid under ``grammar``."""
    try:
        parse_template(template, grammar)
    except InvalidTemplate:
        return False
    return True


def random_from_alphabet(alphabet: str, count: int) -> str:
    """Draw ``count`` independent, uniformly random characters from ``alphabet``."""
    return "".join(secrets.choice(alphabet) for _ in range(count))


def generate_default_otp() -> str:
    """Generate a 6-digit numeric OTP in [100000, 999999]."""
    return str(DEFAULT_OTP_MIN + secrets.randbelow(DEFAULT_OTP_MAX - DEFAULT_OTP_MIN + 1))


def generate_otp(
    template: Optional[str] = None,
    grammar: TemplateGrammar = TemplateGrammar.STRICT,
) -> str:
    """
    Generate an OTP shaped by a template.

    Args:
        template: Template string; the default 6-digit code is used when empty
        grammar: Grammar version to parse the template with

    Returns:
        OTP string

    Raises:
        InvalidTemplate: If the template is not valid
    """
    if not template:
        return generate_default_otp()

    parts = []
    for segment in parse_template(template, grammar):
        if isinstance(segment, TemplateGroup):
            parts.append(random_from_alphabet(segment.alphabet, segment.count))
        else:
            parts.append(segment)
    return "".join(parts)
