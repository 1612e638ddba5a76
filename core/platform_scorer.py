"""Weighted CMS / storefront fingerprinting.

Every platform sums the weights of its matching signatures. A platform whose
score reaches HIGH_CONFIDENCE_THRESHOLD wins outright; otherwise an unambiguous
<meta name="generator"> tag decides; otherwise the highest non-zero score wins.
Ties go to the platform listed first in the rules file.
"""
import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from core.observation import Observation
from models.detection import PlatformResult
from models.technology import PlatformDefinition, PlatformSignature

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_THRESHOLD = 5
THRESHOLD_CONFIDENCE = 0.95
GENERATOR_CONFIDENCE = 0.9
STRONG_SCORE = 2
STRONG_SCORE_CONFIDENCE = 0.8
WEAK_SCORE_CONFIDENCE = 0.6

GENERATOR_LABEL = "generator meta tag"
GENERATOR_PATTERNS = [
    r'<meta\s+[^>]*name=["\']?generator["\']?[^>]*\s+content=["\']([^"\']+)["\']',
    r'<meta\s+[^>]*content=["\']([^"\']+)["\'][^>]*\s+name=["\']?generator["\']?',
]


@dataclass
class PlatformScore:
    platform: PlatformDefinition
    score: int
    signals: Tuple[str, ...]


def generator_values(markup: str) -> List[str]:
    """Contents of every generator meta tag, in document order."""
    found = []
    for pattern in GENERATOR_PATTERNS:
        for match in re.finditer(pattern, markup, re.IGNORECASE):
            found.append((match.start(), match.group(1)))
    return [value for _, value in sorted(found)]


class PlatformScorer:
    def __init__(self, platforms: List[PlatformDefinition]):
        self.platforms = platforms

    async def analyze(self, observation: Observation) -> Optional[PlatformResult]:
        return self.score(observation)

    def score(self, observation: Observation) -> Optional[PlatformResult]:
        scores: List[PlatformScore] = []
        for platform in self.platforms:
            entry = self._score_platform(platform, observation)
            logger.debug(f"Platform {platform.name}: score={entry.score} signals={entry.signals}")
            if entry.score >= HIGH_CONFIDENCE_THRESHOLD:
                return self._result(entry, THRESHOLD_CONFIDENCE)
            scores.append(entry)

        generator_entry = self._generator_match(observation, scores)
        if generator_entry:
            return PlatformResult(
                name=generator_entry.platform.name,
                confidence=GENERATOR_CONFIDENCE,
                score=generator_entry.score,
                signals=generator_entry.signals + (GENERATOR_LABEL,),
            )

        best: Optional[PlatformScore] = None
        for entry in scores:
            if entry.score > 0 and (best is None or entry.score > best.score):
                best = entry
        if best is None:
            return None
        confidence = STRONG_SCORE_CONFIDENCE if best.score >= STRONG_SCORE else WEAK_SCORE_CONFIDENCE
        return self._result(best, confidence)

    def _result(self, entry: PlatformScore, confidence: float) -> PlatformResult:
        return PlatformResult(
            name=entry.platform.name,
            confidence=confidence,
            score=entry.score,
            signals=entry.signals,
        )

    def _score_platform(self, platform: PlatformDefinition, observation: Observation) -> PlatformScore:
        total = 0
        matched = []
        for signature in platform.signatures:
            if self._matches(signature, observation):
                total += signature.weight
                matched.append(signature.label)
        return PlatformScore(platform=platform, score=total, signals=tuple(matched))

    def _matches(self, signature: PlatformSignature, observation: Observation) -> bool:
        if signature.source == "global":
            return observation.is_defined(signature.name)
        if signature.source == "scripts":
            return any(
                isinstance(src, str) and re.search(signature.pattern, src, re.IGNORECASE)
                for src in observation.script_sources
            )
        markup = observation.markup if isinstance(observation.markup, str) else ""
        return bool(re.search(signature.pattern, markup, re.IGNORECASE))

    def _generator_match(self, observation: Observation, scores: List[PlatformScore]) -> Optional[PlatformScore]:
        markup = observation.markup if isinstance(observation.markup, str) else ""
        values = generator_values(markup)
        if not values:
            return None
        named = [
            entry for entry in scores
            if entry.platform.generator
            and any(re.search(entry.platform.generator, value, re.IGNORECASE) for value in values)
        ]
        if len(named) != 1:
            if named:
                logger.debug(f"Ambiguous generator tags: {values}")
            return None
        return named[0]
