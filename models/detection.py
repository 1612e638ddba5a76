from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from models.technology import TrackerKind


class TagStatus(str, Enum):
    CONNECTED = "Connected"
    MISCONFIGURED = "Misconfigured"
    INCOMPLETE = "Incomplete Setup"
    NOT_FOUND = "Not Found"
    ERROR = "Error"


@dataclass(frozen=True)
class DetectionResult:
    """Classification of one tracking technology on one page."""
    technology: TrackerKind
    name: str
    is_present: bool
    status: TagStatus
    primary_id: Optional[str] = None
    all_ids: Tuple[str, ...] = ()
    reason: str = ""


@dataclass(frozen=True)
class PlatformResult:
    """Best-guess CMS / storefront platform."""
    name: Optional[str]
    confidence: float
    score: int = 0
    signals: Tuple[str, ...] = ()  # Labels of the signatures that matched


@dataclass(frozen=True)
class ScanResult:
    url: str
    domain: str
    scan_time: datetime
    tags: Tuple[DetectionResult, ...] = ()
    platform: Optional[PlatformResult] = None
    recommendations: Tuple[str, ...] = field(default_factory=tuple)

    def get(self, technology: TrackerKind) -> Optional[DetectionResult]:
        for tag in self.tags:
            if tag.technology == technology:
                return tag
        return None
