import re
from typing import Dict
from core.observation import Observation
from core.extractor_registry import ExtractorRegistry
from extractors.base import SignalExtractor, text_values

INIT_CALL = r'fbq\s*\(\s*["\']init["\']\s*,\s*["\']?\d+'
LEGACY_INIT_PUSH = r'_fbq\.push\s*\(\s*\[\s*["\']init["\']\s*,\s*["\']?\d+'
# A defined fbq only confirms an install; it never counts as presence, so a
# pixel injected with no visible script or snippet classifies as Not Found
PIXEL_FUNCTION = "fbq"


@ExtractorRegistry.register("social_pixel")
class SocialPixelExtractor(SignalExtractor):
    """Meta Pixel init calls, fbevents.js loads and /tr beacons."""

    def auxiliary_signals(self, observation: Observation) -> Dict[str, bool]:
        return {
            "init_call": self._has_init_call(observation),
            "pixel_function": observation.is_defined(PIXEL_FUNCTION),
        }

    def _has_init_call(self, observation: Observation) -> bool:
        for body in text_values(observation.script_bodies):
            if re.search(INIT_CALL, body) or re.search(LEGACY_INIT_PUSH, body):
                return True
        return False
