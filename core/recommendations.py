"""Suggest installs for tracking technologies that were not found."""
from typing import Dict, List, Sequence
from models.detection import DetectionResult
from models.technology import TrackerDefinition, TrackerKind

# Tag manager first: it is the preferred delivery mechanism for the others
RECOMMENDATION_ORDER = (
    TrackerKind.TAG_MANAGER,
    TrackerKind.ANALYTICS,
    TrackerKind.SOCIAL_PIXEL,
    TrackerKind.ADS_CONVERSION,
)


def generate_recommendations(
    results: Sequence[DetectionResult],
    trackers: Sequence[TrackerDefinition],
) -> List[str]:
    """
    One recommendation per technology that is not present, in fixed priority order.

    Technologies that are present get no recommendation, whatever their status.
    """
    by_kind: Dict[TrackerKind, DetectionResult] = {r.technology: r for r in results}
    definitions = {t.kind: t for t in trackers}
    tag_manager = by_kind.get(TrackerKind.TAG_MANAGER)
    verb = "Add" if tag_manager is not None and tag_manager.is_present else "Implement"

    recommendations: List[str] = []
    for kind in RECOMMENDATION_ORDER:
        result = by_kind.get(kind)
        if result is None or result.is_present:
            continue
        definition = definitions.get(kind)
        text = definition.recommendation if definition and definition.recommendation else result.name
        recommendations.append(f"{verb} {text}")
    return recommendations
