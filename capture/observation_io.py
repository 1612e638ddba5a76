"""Read and write Observations as JSON.

Browser-driven collaborators hand their finalized capture over as a JSON object.
Both snake_case and camelCase keys are accepted:

    {
      "url": "https://shop.example",
      "markupSnapshot": "<html>...</html>",
      "scriptSources": ["https://www.googletagmanager.com/gtm.js?id=GTM-ABC1"],
      "scriptBodies": ["window.dataLayer = window.dataLayer || [];"],
      "globalProbe": {"dataLayer": true, "fbq": {"defined": true, "snapshot": "function"}},
      "activityQueueEntries": [{"event": "gtm.js"}, ["config", "G-ABC123"]],
      "networkEvents": [{"url": "https://region1.google-analytics.com/g/collect?tid=G-ABC123", "timestamp": 1.5}],
      "capturedAt": "2024-05-01T12:00:00+00:00"
    }

Missing or mistyped fields fall back to empty values.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.observation import GlobalProbe, NetworkEvent, Observation

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "url": ("url",),
    "markup": ("markup", "markupSnapshot", "markup_snapshot"),
    "script_sources": ("script_sources", "scriptSources"),
    "script_bodies": ("script_bodies", "scriptBodies"),
    "global_probe": ("global_probe", "globalProbe"),
    "queue_entries": ("queue_entries", "activityQueueEntries", "activity_queue_entries"),
    "network_events": ("network_events", "networkEvents"),
    "captured_at": ("captured_at", "capturedAt"),
}


def _field(data: Dict[str, Any], name: str) -> Any:
    for key in FIELD_ALIASES[name]:
        if key in data:
            return data[key]
    return None


def _list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring observation field '{name}': expected a list, got {type(value).__name__}")
        return []
    return value


def _strings(value: Any, name: str) -> List[str]:
    return [item for item in _list(value, name) if isinstance(item, str)]


def _global_probe(value: Any) -> Dict[str, GlobalProbe]:
    if not isinstance(value, dict):
        return {}
    probe = {}
    for name, state in value.items():
        if isinstance(state, dict):
            snapshot = state.get("snapshot")
            probe[name] = GlobalProbe(
                defined=bool(state.get("defined")),
                snapshot=snapshot if snapshot is None or isinstance(snapshot, str) else json.dumps(snapshot),
            )
        else:
            probe[name] = GlobalProbe(defined=bool(state))
    return probe


def _network_events(value: Any) -> List[NetworkEvent]:
    events = []
    for item in _list(value, "network_events"):
        if isinstance(item, str):
            events.append(NetworkEvent(url=item))
        elif isinstance(item, dict) and isinstance(item.get("url"), str):
            timestamp = item.get("timestamp")
            events.append(NetworkEvent(
                url=item["url"],
                timestamp=float(timestamp) if isinstance(timestamp, (int, float)) else None,
            ))
    return events


def _captured_at(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparsable capture time: {value}")
        return None


def observation_from_dict(data: Dict[str, Any]) -> Observation:
    markup = _field(data, "markup")
    url = _field(data, "url")
    return Observation(
        url=url if isinstance(url, str) else "",
        markup=markup if isinstance(markup, str) else "",
        script_sources=tuple(_strings(_field(data, "script_sources"), "script_sources")),
        script_bodies=tuple(_strings(_field(data, "script_bodies"), "script_bodies")),
        global_probe=_global_probe(_field(data, "global_probe")),
        queue_entries=tuple(_list(_field(data, "queue_entries"), "queue_entries")),
        network_events=tuple(_network_events(_field(data, "network_events"))),
        captured_at=_captured_at(_field(data, "captured_at")),
    )


def observation_to_dict(observation: Observation) -> Dict[str, Any]:
    return {
        "url": observation.url,
        "markupSnapshot": observation.markup,
        "scriptSources": list(observation.script_sources),
        "scriptBodies": list(observation.script_bodies),
        "globalProbe": {
            name: {"defined": probe.defined, "snapshot": probe.snapshot}
            for name, probe in observation.global_probe.items()
        },
        "activityQueueEntries": [list(e) if isinstance(e, tuple) else e for e in observation.queue_entries],
        "networkEvents": [{"url": e.url, "timestamp": e.timestamp} for e in observation.network_events],
        "capturedAt": observation.captured_at.isoformat() if observation.captured_at else None,
    }


def load_observation(path: str) -> Observation:
    """Load an Observation from a JSON file.

    Raises:
        FileNotFoundError, json.JSONDecodeError: as raised by the file read
        ValueError: when the file does not hold a JSON object
    """
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Observation file must contain a JSON object: {path}")
    return observation_from_dict(data)


def save_observation(observation: Observation, path: str) -> None:
    with open(path, "w") as f:
        json.dump(observation_to_dict(observation), f, indent=2)
