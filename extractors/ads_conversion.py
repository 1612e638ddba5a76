import re
from typing import Any, Dict, List
from core.observation import Observation
from core.extractor_registry import ExtractorRegistry
from extractors.base import SignalExtractor
from extractors.queue import iter_objects, iter_strings
from models.technology import IdPattern

# Legacy conversion globals set by the pre-gtag conversion snippet.
# They confirm an install but never count as presence on their own
CONVERSION_GLOBALS = ("google_trackConversion", "google_conversion_id", "google_conversion_label")
SEND_TO_FIELD = "send_to"


def _container_tag_ids(obj: Dict[str, Any]) -> List[str]:
    # Tag metadata pushed by a container: {'gtm': {'tags': {'1': {'tagId': 'AW-1'}}}}
    gtm = obj.get("gtm")
    if not isinstance(gtm, dict) or not isinstance(gtm.get("tags"), dict):
        return []
    return [str(tag["tagId"]) for tag in gtm["tags"].values() if isinstance(tag, dict) and tag.get("tagId")]


@ExtractorRegistry.register("ads_conversion")
class AdsConversionExtractor(SignalExtractor):
    """Google Ads conversion IDs from conversion pings, send_to targets and snippets."""

    def queue_ids(self, observation: Observation) -> List[str]:
        ids = super().queue_ids(observation)
        identifier = IdPattern(pattern=self.tracker.identifier)
        for entry in observation.queue_entries:
            for obj in iter_objects(entry):
                for tag_id in _container_tag_ids(obj):
                    ids.extend(identifier.findall(tag_id))
        return ids

    def auxiliary_signals(self, observation: Observation) -> Dict[str, bool]:
        return {
            "conversion_event": self._has_conversion_event(observation),
            "conversion_globals": any(observation.is_defined(name) for name in CONVERSION_GLOBALS),
        }

    def _has_conversion_event(self, observation: Observation) -> bool:
        for entry in observation.queue_entries:
            if any("conversion" in value.lower() for value in iter_strings(entry)):
                return True
            for obj in iter_objects(entry):
                send_to = obj.get(SEND_TO_FIELD)
                if isinstance(send_to, str) and re.search(self.tracker.identifier, send_to):
                    return True
        return False
