import re
from typing import Dict
from core.observation import Observation
from core.extractor_registry import ExtractorRegistry
from extractors.base import SignalExtractor
from extractors.queue import as_command


@ExtractorRegistry.register("analytics")
class AnalyticsExtractor(SignalExtractor):
    """GA4 measurement IDs from collect beacons, gtag config commands and snippets."""

    def auxiliary_signals(self, observation: Observation) -> Dict[str, bool]:
        return {"proper_config": self._has_proper_config(observation)}

    def _has_proper_config(self, observation: Observation) -> bool:
        # Only ['config', '<measurement id>'] counts
        for entry in observation.queue_entries:
            command = as_command(entry)
            if not command or len(command) < 2 or command[0] != "config":
                continue
            if isinstance(command[1], str) and re.fullmatch(self.tracker.identifier, command[1]):
                return True
        return False
