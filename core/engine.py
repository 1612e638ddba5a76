import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from core.observation import Observation
from core.extractor_registry import ExtractorRegistry
from core.status_classifier import classify, error_result
from core.platform_scorer import PlatformScorer
from core.recommendations import generate_recommendations
from core.url_utils import normalize_url, domain_of
from models.detection import DetectionResult, PlatformResult, ScanResult
from models.technology import TrackerDefinition
from rules.rules_loader import load_trackers, load_platforms

# Import all extractors to trigger @ExtractorRegistry.register decorators
import extractors.tag_manager
import extractors.analytics
import extractors.ads_conversion
import extractors.social_pixel


class Engine:
    def __init__(
        self,
        exclude_extractors: Set[str] = None,
        detect_platform: bool = True,
        rules_dir: Optional[str] = None,
    ):
        """Initialize the engine with tracker and platform rules.

        Args:
            exclude_extractors: Set of extractor names to skip (e.g., {'social_pixel'})
            detect_platform: Whether to run the platform fingerprint scorer
            rules_dir: Directory holding trackers.yaml and platforms.yaml
        """
        self.logger = logging.getLogger(__name__)
        self.trackers: List[TrackerDefinition] = load_trackers(rules_dir)
        self.logger.info(f"Loaded {len(self.trackers)} tracker definitions")

        self.extractors = ExtractorRegistry.instantiate_all(self.trackers, exclude=exclude_extractors)
        self.logger.info(f"Initialized {len(self.extractors)} extractors")
        if exclude_extractors:
            self.logger.info(f"Excluded extractors: {', '.join(sorted(exclude_extractors))}")

        self.scorer: Optional[PlatformScorer] = None
        if detect_platform:
            platforms = load_platforms(rules_dir)
            self.scorer = PlatformScorer(platforms)
            self.logger.info(f"Loaded {len(platforms)} platform fingerprints")

    async def analyze(self, observation: Observation) -> ScanResult:
        """Classify every tracker and fingerprint the platform for one Observation.

        Never raises: a fault in one tracker becomes an Error result for that tracker.
        """
        logger = logging.getLogger(__name__)
        trackers = {t.kind.value: t for t in self.trackers}

        async def run_extractor(name: str, extractor) -> DetectionResult:
            tracker = trackers[name]
            logger.debug(f"Running {name} extractor")
            try:
                evidence = await extractor.extract(observation)
                return classify(tracker, evidence)
            except Exception as e:
                logger.error(f"Error in {name} extractor: {e}", exc_info=True)
                return error_result(tracker)

        async def run_scorer() -> Optional[PlatformResult]:
            if self.scorer is None:
                return None
            try:
                return await self.scorer.analyze(observation)
            except Exception as e:
                logger.error(f"Error in platform scorer: {e}", exc_info=True)
                return None

        # Extractors and the scorer share nothing mutable; join once all have finished
        tasks = [run_extractor(name, extractor) for name, extractor in self.extractors.items()]
        *tags, platform = await asyncio.gather(*tasks, run_scorer())

        try:
            recommendations = generate_recommendations(tags, self.trackers)
        except Exception as e:
            logger.error(f"Error generating recommendations: {e}", exc_info=True)
            recommendations = []

        url, domain = self._target(observation)
        result = ScanResult(
            url=url,
            domain=domain,
            scan_time=self._scan_time(observation),
            tags=tuple(tags),
            platform=platform,
            recommendations=tuple(recommendations),
        )
        present = sum(1 for tag in tags if tag.is_present)
        logger.info(f"Classified {len(tags)} trackers for {url or '<unknown>'}: {present} present")
        return result

    def _target(self, observation: Observation) -> Tuple[str, str]:
        if not isinstance(observation.url, str) or not observation.url:
            return "", ""
        url = normalize_url(observation.url)
        return url, domain_of(url)

    def _scan_time(self, observation: Observation) -> datetime:
        if isinstance(observation.captured_at, datetime):
            return observation.captured_at
        return datetime.now(timezone.utc)
