from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class NetworkEvent:
    """An outbound request seen during the capture window."""
    url: str
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class GlobalProbe:
    """State of one well-known page global after the page settled."""
    defined: bool = False
    snapshot: Optional[str] = None  # Lightweight serialized value, when available


def _as_tuple(value: Any) -> Any:
    # Malformed values are kept as-is; extractors fault on them individually
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def _as_probe(value: Any) -> Any:
    # Bare booleans and plain dicts are the wire shape of a probe entry
    if isinstance(value, GlobalProbe):
        return value
    if isinstance(value, bool):
        return GlobalProbe(defined=value)
    if isinstance(value, Mapping):
        snapshot = value.get("snapshot")
        return GlobalProbe(
            defined=bool(value.get("defined")),
            snapshot=snapshot if snapshot is None or isinstance(snapshot, str) else str(snapshot),
        )
    return value


@dataclass(frozen=True)
class Observation:
    """Immutable evidence bundle captured from one page visit."""
    url: str = ""
    markup: str = ""
    script_sources: Tuple[str, ...] = ()
    script_bodies: Tuple[str, ...] = ()
    global_probe: Mapping[str, GlobalProbe] = field(default_factory=dict)
    queue_entries: Tuple[Any, ...] = ()  # Positional command arrays or keyed objects
    network_events: Tuple[NetworkEvent, ...] = ()
    captured_at: Optional[datetime] = None

    def __post_init__(self):
        for name in ("script_sources", "script_bodies", "queue_entries", "network_events"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))
        if self.markup is None:
            object.__setattr__(self, "markup", "")
        probe = self.global_probe if self.global_probe is not None else {}
        if isinstance(probe, Mapping):
            probe = MappingProxyType({name: _as_probe(value) for name, value in probe.items()})
        object.__setattr__(self, "global_probe", probe)

    def is_defined(self, name: str) -> bool:
        """True when the capture reported the named global as defined."""
        probe = self.global_probe.get(name)
        return bool(probe and probe.defined)
