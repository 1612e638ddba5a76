import asyncio
from datetime import datetime, timezone
import pytest

from core.engine import Engine
from core.observation import Observation, NetworkEvent, GlobalProbe
from models.detection import TagStatus
from models.technology import TrackerKind


@pytest.fixture(scope="module")
def engine():
    return Engine()


def _analyze(engine, observation):
    return asyncio.run(engine.analyze(observation))


def test_empty_observation(engine):
    result = _analyze(engine, Observation(url="https://example.com"))

    assert [tag.technology for tag in result.tags] == list(TrackerKind)
    for tag in result.tags:
        assert tag.is_present is False
        assert tag.status == TagStatus.NOT_FOUND
        assert tag.all_ids == ()
    assert result.platform is None
    assert len(result.recommendations) == 4
    assert all(text.startswith("Implement") for text in result.recommendations)


def test_target_identity_and_capture_time(engine):
    captured = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    result = _analyze(engine, Observation(url="shop.example.com/products", captured_at=captured))

    assert result.url == "https://shop.example.com/products"
    assert result.domain == "shop.example.com"
    assert result.scan_time == captured


def test_container_loaded_without_identifier(engine):
    result = _analyze(engine, Observation(queue_entries=[{"event": "gtm.js"}]))

    gtm = result.get(TrackerKind.TAG_MANAGER)
    assert gtm.is_present is True
    assert gtm.status == TagStatus.INCOMPLETE
    assert gtm.primary_id is None


def test_analytics_beacon(engine):
    observation = Observation(
        network_events=[NetworkEvent(url="https://region1.google-analytics.com/g/collect?v=2&tid=G-ABC123&en=page_view", timestamp=1.2)],
    )

    analytics = _analyze(engine, observation).get(TrackerKind.ANALYTICS)

    assert analytics.status == TagStatus.CONNECTED
    assert analytics.primary_id == "G-ABC123"


def test_pixel_init_without_confirmation(engine):
    observation = Observation(script_bodies=["fbq('init', '99999');"])

    pixel = _analyze(engine, observation).get(TrackerKind.SOCIAL_PIXEL)

    assert pixel.status == TagStatus.MISCONFIGURED
    assert pixel.primary_id == "99999"


@pytest.mark.parametrize("kind, url", [
    (TrackerKind.TAG_MANAGER, "https://www.googletagmanager.com/gtm.js?id=GTM-ABC123"),
    (TrackerKind.ANALYTICS, "https://www.google-analytics.com/g/collect?tid=G-ABC123"),
    (TrackerKind.ADS_CONVERSION, "https://googleads.g.doubleclick.net/pagead/viewthroughconversion/123456/?random=1"),
    (TrackerKind.SOCIAL_PIXEL, "https://www.facebook.com/tr/?id=99999&ev=PageView"),
])
def test_network_identifier_always_connects(engine, kind, url):
    # Conflicting static evidence must not outweigh observed traffic
    observation = Observation(
        markup="<html><body>no tags here</body></html>",
        script_bodies=["console.log('hello');"],
        queue_entries=[["set", "linker", {}], {"event": "page_ready"}],
        global_probe={"fbq": GlobalProbe(defined=False)},
        network_events=[NetworkEvent(url="https://example.com/app.js"), NetworkEvent(url=url)],
    )

    tag = _analyze(engine, observation).get(kind)

    assert tag.status == TagStatus.CONNECTED
    assert tag.is_present is True


def test_fully_instrumented_page(engine):
    gtm_src = "https://www.googletagmanager.com/gtm.js?id=GTM-K9X2PQ"
    observation = Observation(
        url="https://store.example.com",
        markup=f"""
        <html><head>
        <script src="{gtm_src}"></script>
        <link rel="stylesheet" href="//cdn.shopify.com/s/files/1/theme.css">
        <script>Shopify.theme = {{"name": "Dawn"}};</script>
        </head></html>
        """,
        script_sources=[gtm_src, "https://connect.facebook.net/en_US/fbevents.js"],
        script_bodies=["fbq('init', '1234567890'); fbq('track', 'PageView');"],
        global_probe={"fbq": GlobalProbe(defined=True, snapshot="function")},
        queue_entries=[
            {"gtm.start": 1700000000000, "event": "gtm.js"},
            ["js", "2024-05-01"],
            ["config", "G-STORE42"],
        ],
        network_events=[NetworkEvent(url=gtm_src, timestamp=0.1)],
    )

    result = _analyze(engine, observation)

    assert [(tag.technology, tag.status) for tag in result.tags] == [
        (TrackerKind.TAG_MANAGER, TagStatus.CONNECTED),
        (TrackerKind.ANALYTICS, TagStatus.CONNECTED),
        (TrackerKind.ADS_CONVERSION, TagStatus.NOT_FOUND),
        (TrackerKind.SOCIAL_PIXEL, TagStatus.CONNECTED),
    ]
    assert result.get(TrackerKind.TAG_MANAGER).primary_id == "GTM-K9X2PQ"
    assert result.get(TrackerKind.ANALYTICS).primary_id == "G-STORE42"
    assert result.get(TrackerKind.SOCIAL_PIXEL).primary_id == "1234567890"
    assert result.platform.name == "Shopify"
    assert result.platform.confidence == 0.95
    assert result.recommendations == ("Add Google Ads conversion tracking to optimize your ad campaigns",)


def test_fault_in_one_extractor_is_isolated():
    engine = Engine()

    def broken(observation):
        raise RuntimeError("boom")

    engine.extractors["analytics"].collect = broken
    observation = Observation(script_bodies=["fbq('init', '99999');"])

    result = asyncio.run(engine.analyze(observation))

    assert result.get(TrackerKind.ANALYTICS).status == TagStatus.ERROR
    assert result.get(TrackerKind.ANALYTICS).reason == "Error during detection"
    assert result.get(TrackerKind.SOCIAL_PIXEL).status == TagStatus.MISCONFIGURED
    assert result.get(TrackerKind.TAG_MANAGER).status == TagStatus.NOT_FOUND
    # Error counts as not present for recommendations
    assert len(result.recommendations) == 3


def test_malformed_observation_field_never_raises(engine):
    observation = Observation(network_events=42, markup='<meta name="generator" content="Wix.com Website Builder">')

    result = _analyze(engine, observation)

    assert all(tag.status == TagStatus.ERROR for tag in result.tags)
    assert result.platform.name == "Wix"
    assert len(result.recommendations) == 4


def test_excluded_extractors_are_omitted():
    engine = Engine(exclude_extractors={"social_pixel"}, detect_platform=False)

    result = asyncio.run(engine.analyze(Observation(markup="/wp-content/ /wp-includes/")))

    assert [tag.technology for tag in result.tags] == [
        TrackerKind.TAG_MANAGER,
        TrackerKind.ANALYTICS,
        TrackerKind.ADS_CONVERSION,
    ]
    assert result.platform is None
    assert len(result.recommendations) == 3


def test_observation_is_not_mutated(engine):
    entries = [{"event": "gtm.js"}, ["config", "G-ABC123"]]
    observation = Observation(queue_entries=entries, script_bodies=["gtag('config', 'G-ABC123');"])

    _analyze(engine, observation)

    assert observation.queue_entries == ({"event": "gtm.js"}, ["config", "G-ABC123"])
    assert observation.script_bodies == ("gtag('config', 'G-ABC123');",)


@pytest.mark.asyncio
async def test_concurrent_scans_do_not_interfere():
    engine = Engine()
    pixel = Observation(url="https://a.example", script_bodies=["fbq('init', '99999');"])
    tags = Observation(url="https://b.example", queue_entries=[{"event": "gtm.js"}])

    first, second = await asyncio.gather(engine.analyze(pixel), engine.analyze(tags))

    assert first.domain == "a.example"
    assert first.get(TrackerKind.SOCIAL_PIXEL).status == TagStatus.MISCONFIGURED
    assert first.get(TrackerKind.TAG_MANAGER).status == TagStatus.NOT_FOUND
    assert second.get(TrackerKind.TAG_MANAGER).status == TagStatus.INCOMPLETE
    assert second.get(TrackerKind.SOCIAL_PIXEL).status == TagStatus.NOT_FOUND


def test_boolean_global_probe_values(engine):
    observation = Observation(
        markup='<link rel="stylesheet" href="//cdn.shopify.com/s/files/1/theme.css">',
        script_bodies=["fbq('init', '99999');"],
        global_probe={"fbq": True, "Shopify": {"defined": True, "snapshot": "object"}},
    )

    result = _analyze(engine, observation)

    pixel = result.get(TrackerKind.SOCIAL_PIXEL)
    assert pixel.status == TagStatus.CONNECTED
    assert pixel.primary_id == "99999"
    assert result.platform.name == "Shopify"
    assert result.platform.score == 5
    assert result.platform.confidence == 0.95
    assert observation.global_probe["fbq"] == GlobalProbe(defined=True)
