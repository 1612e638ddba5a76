"""Single-owner capture session that hands a finished Observation to the engine."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from capture.errors import CaptureClosedError
from core.observation import GlobalProbe, NetworkEvent, Observation

logger = logging.getLogger(__name__)


class CaptureSession:
    """
    Collects evidence while a page is loading and settling.

    The session is owned by whoever drives the page. Network events can only be
    recorded while it is open; ``finalize()`` closes it and returns the
    immutable Observation, so the engine never reads a list that is still filling.
    """

    def __init__(self, url: str):
        self.url = url
        self._markup = ""
        self._script_sources: List[str] = []
        self._script_bodies: List[str] = []
        self._globals: Dict[str, GlobalProbe] = {}
        self._queue: List[Any] = []
        self._network: List[NetworkEvent] = []
        self._observation: Optional[Observation] = None

    @property
    def closed(self) -> bool:
        return self._observation is not None

    def _ensure_open(self):
        if self.closed:
            raise CaptureClosedError(f"Capture session for {self.url} is already finalized")

    def record_request(self, url: str, timestamp: Optional[float] = None) -> None:
        self._ensure_open()
        self._network.append(NetworkEvent(url=url, timestamp=timestamp))

    def set_markup(self, markup: str) -> None:
        self._ensure_open()
        self._markup = markup or ""

    def add_script_sources(self, sources: Iterable[str]) -> None:
        self._ensure_open()
        self._script_sources.extend(sources)

    def add_script_bodies(self, bodies: Iterable[str]) -> None:
        self._ensure_open()
        self._script_bodies.extend(bodies)

    def set_queue_entries(self, entries: Iterable[Any]) -> None:
        """Replace the queue with its final state, as read after the page settled."""
        self._ensure_open()
        self._queue = list(entries)

    def set_global(self, name: str, defined: bool, snapshot: Optional[str] = None) -> None:
        self._ensure_open()
        self._globals[name] = GlobalProbe(defined=defined, snapshot=snapshot)

    def finalize(self, captured_at: Optional[datetime] = None) -> Observation:
        """Close the session and return its Observation. Idempotent."""
        if self._observation is None:
            self._observation = Observation(
                url=self.url,
                markup=self._markup,
                script_sources=tuple(self._script_sources),
                script_bodies=tuple(self._script_bodies),
                global_probe=dict(self._globals),
                queue_entries=tuple(self._queue),
                network_events=tuple(self._network),
                captured_at=captured_at or datetime.now(timezone.utc),
            )
            logger.debug(
                f"Finalized capture of {self.url}: {len(self._network)} requests, "
                f"{len(self._script_sources)} scripts, {len(self._queue)} queue entries"
            )
        return self._observation
