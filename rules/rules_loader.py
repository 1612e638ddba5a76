import os
import logging
import yaml
from typing import List, Dict, Any, Optional
from models.technology import (
    TrackerKind,
    TrackerDefinition,
    IdPattern,
    PlatformDefinition,
    PlatformSignature,
    WEIGHTS,
)

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
TRACKERS_FILE = "trackers.yaml"
PLATFORMS_FILE = "platforms.yaml"
SIGNATURE_SOURCES = {"markup", "scripts", "global"}


def _read_yaml(rules_dir: Optional[str], filename: str) -> List[Dict[str, Any]]:
    filepath = os.path.join(rules_dir or RULES_DIR, filename)
    with open(filepath, "r") as f:
        data = yaml.safe_load(f)
    if not data:
        return []
    if not isinstance(data, list):
        logger.warning(f"Expected a list of rules in {filepath}, got {type(data).__name__}")
        return []
    return data


def _id_patterns(items: Optional[List[Any]]) -> List[IdPattern]:
    patterns = []
    for item in items or []:
        if isinstance(item, str):
            patterns.append(IdPattern(pattern=item))
        elif isinstance(item, dict) and item.get("pattern"):
            patterns.append(IdPattern(pattern=item["pattern"], template=item.get("template")))
    return patterns


def _section(rule_data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = rule_data.get(key) or {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring invalid '{key}' block for tracker {rule_data['key']}: {value}")
        return {}
    return value


def load_trackers(rules_dir: Optional[str] = None) -> List[TrackerDefinition]:
    """
    Loads tracker definitions from trackers.yaml, sorted into fixed result order.
    """
    trackers: Dict[TrackerKind, TrackerDefinition] = {}
    for rule_data in _read_yaml(rules_dir, TRACKERS_FILE):
        if not isinstance(rule_data, dict) or not all(k in rule_data for k in ["key", "name", "identifier"]):
            logger.warning(f"Skipping invalid tracker rule: {rule_data}")
            continue
        try:
            kind = TrackerKind(rule_data["key"])
        except ValueError:
            logger.warning(f"Skipping tracker rule with unknown key: {rule_data['key']}")
            continue

        identifier = rule_data["identifier"]
        network = _section(rule_data, "network")
        queue = _section(rule_data, "queue")
        confirmation = _section(rule_data, "confirmation")
        inline_ids = _id_patterns(rule_data.get("inline_ids")) or [IdPattern(pattern=identifier)]
        markup_ids = _id_patterns(rule_data.get("markup_ids")) or [IdPattern(pattern=identifier)]

        trackers[kind] = TrackerDefinition(
            kind=kind,
            name=rule_data["name"],
            identifier=identifier,
            script_sources=list(rule_data.get("script_sources") or []),
            markup_tags=list(rule_data.get("markup_tags") or []),
            inline_init=list(rule_data.get("inline_init") or []),
            inline_ids=inline_ids,
            markup_ids=markup_ids,
            network_urls=list(network.get("urls") or []),
            network_ids=_id_patterns(network.get("ids")),
            queue_events=list(queue.get("events") or []),
            queue_commands=list(queue.get("commands") or []),
            queue_fields=list(queue.get("fields") or []),
            confirmation_signals=list(confirmation.get("signals") or []),
            confirmation_mode=confirmation.get("mode", "any"),
            recommendation=rule_data.get("recommendation", ""),
        )

    return [trackers[kind] for kind in TrackerKind.ordered() if kind in trackers]


def load_platforms(rules_dir: Optional[str] = None) -> List[PlatformDefinition]:
    """
    Loads platform fingerprint tables from platforms.yaml, keeping file order.
    """
    platforms: List[PlatformDefinition] = []
    for rule_data in _read_yaml(rules_dir, PLATFORMS_FILE):
        if not isinstance(rule_data, dict) or "name" not in rule_data:
            logger.warning(f"Skipping invalid platform rule: {rule_data}")
            continue

        signatures = []
        for item in rule_data.get("signatures") or []:
            if not isinstance(item, dict):
                logger.warning(f"Skipping invalid signature for {rule_data['name']}: {item}")
                continue
            source = item.get("source")
            weight = WEIGHTS.get(str(item.get("weight", "low")).lower())
            if source not in SIGNATURE_SOURCES or weight is None:
                logger.warning(f"Skipping invalid signature for {rule_data['name']}: {item}")
                continue
            if source == "global" and not item.get("name"):
                logger.warning(f"Skipping global signature without a name for {rule_data['name']}")
                continue
            if source != "global" and not item.get("pattern"):
                logger.warning(f"Skipping {source} signature without a pattern for {rule_data['name']}")
                continue
            signatures.append(
                PlatformSignature(
                    source=source,
                    weight=weight,
                    pattern=item.get("pattern"),
                    name=item.get("name"),
                    label=item.get("label") or item.get("pattern") or item.get("name"),
                )
            )

        platforms.append(
            PlatformDefinition(
                name=rule_data["name"],
                signatures=signatures,
                generator=rule_data.get("generator"),
            )
        )
    return platforms


# Example usage (for testing)
if __name__ == "__main__":
    for tracker in load_trackers():
        print(f"  - {tracker.name} ({tracker.kind.value}): id={tracker.identifier}")
    for platform in load_platforms():
        print(f"  - {platform.name}: {len(platform.signatures)} signatures")
