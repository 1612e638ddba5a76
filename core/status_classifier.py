"""Map an EvidenceSet to a status and a fixed-template reason."""
import logging
from models.detection import DetectionResult, TagStatus
from models.evidence import EvidenceSet
from models.technology import TrackerDefinition
from core.identifier_resolver import resolve_identifiers, primary_identifier

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "No {name} script, code or traffic found"
REASON_INCOMPLETE = "{name} script/code present but no ID found"
REASON_MISCONFIGURED = "{name} ID found but not demonstrably active"
REASON_CONNECTED_NETWORK = "{name} sent data during the scan"
REASON_CONNECTED_CONFIRMED = "{name} ID found and activation confirmed"
REASON_ERROR = "Error during detection"


def classify(tracker: TrackerDefinition, evidence: EvidenceSet) -> DetectionResult:
    """
    Decide the status for one tracker. The first matching rule wins:

    1. nothing present, no traffic, no id      -> Not Found
    2. traffic observed                        -> Connected (overrides 3 and 4)
    3. presence but no id                      -> Incomplete Setup
    4. id but no auxiliary confirmation        -> Misconfigured
    5. id with auxiliary confirmation          -> Connected
    """
    ids = resolve_identifiers(evidence.candidate_ids)

    if not evidence.presence_indicated and not evidence.network_confirmed and not ids:
        status, template = TagStatus.NOT_FOUND, REASON_NOT_FOUND
    elif evidence.network_confirmed:
        status, template = TagStatus.CONNECTED, REASON_CONNECTED_NETWORK
    elif not ids:
        status, template = TagStatus.INCOMPLETE, REASON_INCOMPLETE
    elif not tracker.is_confirmed(evidence.auxiliary_signals):
        status, template = TagStatus.MISCONFIGURED, REASON_MISCONFIGURED
    else:
        status, template = TagStatus.CONNECTED, REASON_CONNECTED_CONFIRMED

    logger.debug(f"{tracker.name}: {status.value} (ids={ids})")
    return DetectionResult(
        technology=tracker.kind,
        name=tracker.name,
        is_present=status != TagStatus.NOT_FOUND,
        status=status,
        primary_id=primary_identifier(ids),
        all_ids=tuple(ids),
        reason=template.format(name=tracker.name),
    )


def error_result(tracker: TrackerDefinition) -> DetectionResult:
    return DetectionResult(
        technology=tracker.kind,
        name=tracker.name,
        is_present=False,
        status=TagStatus.ERROR,
        reason=REASON_ERROR,
    )
