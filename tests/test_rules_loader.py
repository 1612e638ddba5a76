import re
import textwrap

from models.technology import TrackerKind, WEIGHTS
from rules.rules_loader import load_trackers, load_platforms


def test_bundled_trackers_in_result_order():
    trackers = load_trackers()

    assert [t.kind for t in trackers] == [
        TrackerKind.TAG_MANAGER,
        TrackerKind.ANALYTICS,
        TrackerKind.ADS_CONVERSION,
        TrackerKind.SOCIAL_PIXEL,
    ]
    for tracker in trackers:
        assert tracker.name
        assert tracker.recommendation
        assert tracker.confirmation_signals
        re.compile(tracker.identifier)


def test_bundled_identifier_patterns():
    trackers = {t.kind: t for t in load_trackers()}

    assert re.fullmatch(trackers[TrackerKind.TAG_MANAGER].identifier, "GTM-ABC123")
    assert re.fullmatch(trackers[TrackerKind.ANALYTICS].identifier, "G-ABC123")
    assert not re.fullmatch(trackers[TrackerKind.ANALYTICS].identifier, "G-AB")
    assert re.fullmatch(trackers[TrackerKind.ADS_CONVERSION].identifier, "AW-123456789")
    assert trackers[TrackerKind.SOCIAL_PIXEL].confirmation_mode == "all"


def test_bundled_platforms_keep_file_order():
    platforms = load_platforms()

    assert [p.name for p in platforms] == [
        "WordPress", "Shopify", "Wix", "Squarespace", "Webflow", "Drupal", "Joomla",
    ]
    for platform in platforms:
        assert platform.generator
        assert all(sig.weight in WEIGHTS.values() for sig in platform.signatures)


def test_custom_rules_dir_skips_invalid_entries(tmp_path):
    (tmp_path / "trackers.yaml").write_text(textwrap.dedent("""\
        - key: social_pixel
          name: Pixel
          identifier: '\\d+'
          network: ['collect']
          queue: tr
        - key: tag_manager
          name: Tags
          identifier: 'TM-\\d+'
          network:
            ids:
              - pattern: 'id=(\\d+)'
                template: 'TM-{}'
        - key: unknown_tracker
          name: Other
          identifier: 'X'
        - name: Missing key
        - just a string
        """))
    (tmp_path / "platforms.yaml").write_text(textwrap.dedent("""\
        - name: Custom
          signatures:
            - {source: markup, pattern: 'custom-cms', weight: high}
            - 'cdn.x.com'
            - {source: global, weight: low}
            - {source: cookies, pattern: 'x', weight: low}
            - {source: scripts, pattern: 'custom\\.js', weight: huge}
        - signatures: []
        """))

    trackers = load_trackers(str(tmp_path))
    platforms = load_platforms(str(tmp_path))

    assert [t.kind for t in trackers] == [TrackerKind.TAG_MANAGER, TrackerKind.SOCIAL_PIXEL]
    tag_manager = trackers[0]
    assert tag_manager.inline_ids[0].pattern == "TM-\\d+"
    assert tag_manager.network_ids[0].findall("https://x.test/?id=42") == ["TM-42"]
    assert tag_manager.confirmation_mode == "any"
    pixel = trackers[1]
    assert pixel.network_urls == []
    assert pixel.network_ids == []
    assert pixel.queue_events == []

    assert len(platforms) == 1
    assert platforms[0].generator is None
    assert [(s.source, s.weight, s.label) for s in platforms[0].signatures] == [("markup", 3, "custom-cms")]


def test_empty_rules_files(tmp_path):
    (tmp_path / "trackers.yaml").write_text("")
    (tmp_path / "platforms.yaml").write_text("name: not a list\n")

    assert load_trackers(str(tmp_path)) == []
    assert load_platforms(str(tmp_path)) == []
