from dataclasses import dataclass, field
from typing import Mapping, Tuple


@dataclass(frozen=True)
class EvidenceSet:
    """Per-technology evidence extracted from one Observation."""
    script_tag_present: bool = False
    inline_init_present: bool = False
    activity_queue_active: bool = False
    network_confirmed: bool = False
    candidate_ids: Tuple[str, ...] = ()  # Discovery order, deduplicated
    auxiliary_signals: Mapping[str, bool] = field(default_factory=dict)

    @property
    def presence_indicated(self) -> bool:
        return self.script_tag_present or self.inline_init_present or self.activity_queue_active
