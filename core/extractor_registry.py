"""Dynamic extractor registration system."""
import logging
from typing import Dict, Type, List, Set, Optional
from models.technology import TrackerDefinition

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Registry for discovering and instantiating per-tracker signal extractors."""

    _extractors: Dict[str, Type] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, name: str):
        """Decorator to register an extractor class under a tracker key.

        Example:
            @ExtractorRegistry.register("tag_manager")
            class TagManagerExtractor(SignalExtractor):
                def auxiliary_signals(self, observation) -> Dict[str, bool]:
                    ...
        """
        def decorator(extractor_class: Type):
            if name in cls._extractors:
                logger.warning(f"Extractor '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._extractors[name] = extractor_class
            logger.debug(f"Registered extractor: {name} -> {extractor_class.__name__}")
            return extractor_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered extractors in registration order."""
        return cls._order.copy()

    @classmethod
    def get_extractor_class(cls, name: str) -> Optional[Type]:
        return cls._extractors.get(name)

    @classmethod
    def instantiate_all(cls, trackers: List[TrackerDefinition], exclude: Set[str] = None) -> Dict[str, object]:
        """Instantiate one extractor per tracker definition.

        Args:
            trackers: Tracker definitions, in result order
            exclude: Set of extractor names to skip

        Returns:
            Dictionary mapping extractor name to instance, in tracker order
        """
        exclude = exclude or set()
        instances = {}

        for tracker in trackers:
            name = tracker.kind.value
            if name in exclude:
                logger.info(f"Skipping excluded extractor: {name}")
                continue

            extractor_class = cls._extractors.get(name)
            if extractor_class is None:
                logger.warning(f"No extractor registered for tracker '{name}'")
                continue

            instances[name] = extractor_class(tracker)
            logger.debug(f"Instantiated extractor: {name}")

        return instances
