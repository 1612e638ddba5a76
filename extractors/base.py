"""Evidence-combination policy shared by every tracker extractor."""
import re
import logging
from typing import Any, Dict, Iterable, List, Tuple
from core.observation import Observation
from core.identifier_resolver import resolve_identifiers
from models.evidence import EvidenceSet
from models.technology import IdPattern, TrackerDefinition
from extractors.queue import as_command, as_object, iter_objects

logger = logging.getLogger(__name__)


def text_values(values: Iterable[Any]) -> List[str]:
    return [value for value in values if isinstance(value, str)]


def _event_url(event: Any) -> str:
    if isinstance(event, str):
        return event
    if isinstance(event, dict):
        return event.get("url") or ""
    return getattr(event, "url", None) or ""


def ids_in_text(patterns: List[IdPattern], text: str) -> List[str]:
    """Identifiers from all patterns, ordered by where they appear in the text."""
    found: List[Tuple[int, int, str]] = []
    for rank, id_pattern in enumerate(patterns):
        for match in re.finditer(id_pattern.pattern, text):
            value = match.group(1) if match.re.groups else match.group(0)
            if not value:
                continue
            if id_pattern.template:
                value = id_pattern.template.format(value)
            found.append((match.start(), rank, value))
    found.sort(key=lambda item: (item[0], item[1]))
    return [value for _, _, value in found]


class SignalExtractor:
    """Turn an Observation into one tracker's EvidenceSet.

    Identifier discovery walks the sources in trust order: network requests,
    activity-queue entries, inline scripts, then the full markup as a fallback
    when nothing else produced an id. Presence flags are computed independently
    of whether an id was found. Subclasses add tracker-specific auxiliary signals.
    """

    def __init__(self, tracker: TrackerDefinition):
        self.tracker = tracker

    async def extract(self, observation: Observation) -> EvidenceSet:
        return self.collect(observation)

    def collect(self, observation: Observation) -> EvidenceSet:
        ids = resolve_identifiers(
            self.network_ids(observation),
            self.queue_ids(observation),
            self.inline_ids(observation),
        )
        if not ids:
            ids = resolve_identifiers(self.markup_ids(observation))

        evidence = EvidenceSet(
            script_tag_present=self.script_tag_present(observation),
            inline_init_present=self.inline_init_present(observation),
            activity_queue_active=self.activity_queue_active(observation),
            network_confirmed=self.network_confirmed(observation),
            candidate_ids=tuple(ids),
            auxiliary_signals=self.auxiliary_signals(observation),
        )
        logger.debug(f"{self.tracker.name} evidence: {evidence}")
        return evidence

    # Identifier sources, in trust order

    def network_ids(self, observation: Observation) -> List[str]:
        ids: List[str] = []
        for event in observation.network_events:
            ids.extend(ids_in_text(self.tracker.network_ids, _event_url(event)))
        return ids

    def queue_ids(self, observation: Observation) -> List[str]:
        identifier = IdPattern(pattern=self.tracker.identifier)
        ids: List[str] = []
        for entry in observation.queue_entries:
            command = as_command(entry)
            if command and len(command) > 1 and command[0] in self.tracker.queue_commands \
                    and isinstance(command[1], str):
                ids.extend(identifier.findall(command[1]))
            for obj in iter_objects(entry):
                for field_name in self.tracker.queue_fields:
                    value = obj.get(field_name)
                    if isinstance(value, str):
                        ids.extend(identifier.findall(value))
        return ids

    def inline_ids(self, observation: Observation) -> List[str]:
        ids: List[str] = []
        for body in text_values(observation.script_bodies):
            ids.extend(ids_in_text(self.tracker.inline_ids, body))
        return ids

    def markup_ids(self, observation: Observation) -> List[str]:
        if not isinstance(observation.markup, str):
            return []
        return ids_in_text(self.tracker.markup_ids, observation.markup)

    # Presence flags

    def script_tag_present(self, observation: Observation) -> bool:
        for src in text_values(observation.script_sources):
            if any(re.search(p, src, re.IGNORECASE) for p in self.tracker.script_sources):
                return True
        markup = observation.markup if isinstance(observation.markup, str) else ""
        return any(re.search(p, markup, re.IGNORECASE) for p in self.tracker.markup_tags)

    def inline_init_present(self, observation: Observation) -> bool:
        for body in text_values(observation.script_bodies):
            if any(re.search(p, body, re.IGNORECASE) for p in self.tracker.inline_init):
                return True
        return False

    def activity_queue_active(self, observation: Observation) -> bool:
        for entry in observation.queue_entries:
            obj = as_object(entry)
            if obj is not None:
                event = obj.get("event")
                if isinstance(event, str) and any(re.search(p, event) for p in self.tracker.queue_events):
                    return True
        return bool(self.queue_ids(observation))

    def network_confirmed(self, observation: Observation) -> bool:
        for event in observation.network_events:
            url = _event_url(event)
            if any(re.search(p, url, re.IGNORECASE) for p in self.tracker.network_urls):
                return True
            if ids_in_text(self.tracker.network_ids, url):
                return True
        return False

    # Tracker-specific confirmation

    def auxiliary_signals(self, observation: Observation) -> Dict[str, bool]:
        return {}
