from typing import Dict
from core.observation import Observation
from core.extractor_registry import ExtractorRegistry
from extractors.base import SignalExtractor
from extractors.queue import as_object, command_name

# Event pushed by the container snippet once the container script has loaded
CONTAINER_LOADED_EVENT = "gtm.js"
# gtag-style commands that also prove a container-driven setup is running
ACTIVATION_COMMANDS = ("js", "config")


@ExtractorRegistry.register("tag_manager")
class TagManagerExtractor(SignalExtractor):
    """Google Tag Manager container script, snippet and dataLayer activation."""

    def auxiliary_signals(self, observation: Observation) -> Dict[str, bool]:
        return {"container_loaded": self._container_loaded(observation)}

    def _container_loaded(self, observation: Observation) -> bool:
        for entry in observation.queue_entries:
            obj = as_object(entry)
            if obj is not None and obj.get("event") == CONTAINER_LOADED_EVENT:
                return True
            if command_name(entry) in ACTIVATION_COMMANDS:
                return True
        return False
