import core.engine  # registers the extractors
from core.extractor_registry import ExtractorRegistry
from extractors.social_pixel import SocialPixelExtractor
from extractors.tag_manager import TagManagerExtractor


def test_registration_order_matches_result_order():
    assert ExtractorRegistry.get_all_names() == ["tag_manager", "analytics", "ads_conversion", "social_pixel"]


def test_extractor_class_lookup():
    assert ExtractorRegistry.get_extractor_class("social_pixel") is SocialPixelExtractor
    assert ExtractorRegistry.get_extractor_class("tag_manager") is TagManagerExtractor
    assert ExtractorRegistry.get_extractor_class("unknown") is None


def test_instantiate_all_skips_excluded(trackers):
    instances = ExtractorRegistry.instantiate_all(list(trackers.values()), exclude={"analytics"})

    assert list(instances) == ["tag_manager", "ads_conversion", "social_pixel"]
    assert instances["social_pixel"].tracker.name == "Meta Pixel"
