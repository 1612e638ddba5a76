from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Mapping
import re


class TrackerKind(str, Enum):
    """Tracked marketing technologies, in fixed result order."""
    TAG_MANAGER = "tag_manager"
    ANALYTICS = "analytics"
    ADS_CONVERSION = "ads_conversion"
    SOCIAL_PIXEL = "social_pixel"

    @classmethod
    def ordered(cls) -> List["TrackerKind"]:
        return list(cls)


@dataclass(frozen=True)
class IdPattern:
    """Regex that yields an identifier, optionally reformatted through a template.

    When the pattern has a capturing group, group 1 is the identifier; otherwise
    the whole match is. ``template`` is a ``str.format`` string such as ``"AW-{}"``.
    """
    pattern: str
    template: Optional[str] = None

    def findall(self, text: str) -> List[str]:
        found: List[str] = []
        for match in re.finditer(self.pattern, text):
            value = match.group(1) if match.re.groups else match.group(0)
            if not value:
                continue
            found.append(self.template.format(value) if self.template else value)
        return found


@dataclass(frozen=True)
class TrackerDefinition:
    """Declarative description of one tracking technology and its evidence sources."""
    kind: TrackerKind
    name: str
    identifier: str  # Regex for a bare identifier, e.g. GTM-XXXX
    script_sources: List[str] = field(default_factory=list)
    markup_tags: List[str] = field(default_factory=list)
    inline_init: List[str] = field(default_factory=list)
    inline_ids: List[IdPattern] = field(default_factory=list)
    markup_ids: List[IdPattern] = field(default_factory=list)
    network_urls: List[str] = field(default_factory=list)
    network_ids: List[IdPattern] = field(default_factory=list)
    queue_events: List[str] = field(default_factory=list)
    queue_commands: List[str] = field(default_factory=list)
    queue_fields: List[str] = field(default_factory=list)
    confirmation_signals: List[str] = field(default_factory=list)
    confirmation_mode: str = "any"  # "any" or "all"
    recommendation: str = ""

    def is_confirmed(self, signals: Mapping[str, bool]) -> bool:
        """Evaluate the auxiliary confirmation signals under this tracker's mode."""
        names = self.confirmation_signals or list(signals.keys())
        if not names:
            return False
        values = [bool(signals.get(name, False)) for name in names]
        if self.confirmation_mode == "all":
            return all(values)
        return any(values)


# Signature weights for platform fingerprinting
WEIGHTS = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class PlatformSignature:
    """A single weighted check against markup, script sources or the global probe."""
    source: str  # 'markup', 'scripts' or 'global'
    weight: int
    pattern: Optional[str] = None
    name: Optional[str] = None  # Global variable name for 'global' checks
    label: Optional[str] = None


@dataclass(frozen=True)
class PlatformDefinition:
    """A known CMS / storefront / site-builder and its fingerprint table."""
    name: str
    signatures: List[PlatformSignature] = field(default_factory=list)
    generator: Optional[str] = None  # Regex matched against <meta name="generator">
