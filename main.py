import asyncio
import argparse
import json
import logging
from capture.errors import CaptureError
from capture.observation_io import load_observation, save_observation
from capture.static_capture import capture_static
from core.engine import Engine
from core.extractor_registry import ExtractorRegistry


def _serialize_tag(tag):
    return {
        "name": tag.name,
        "technology": tag.technology.value,
        "isPresent": tag.is_present,
        "status": tag.status.value,
        "id": tag.primary_id,
        "ids": list(tag.all_ids),
        "statusReason": tag.reason,
    }


def _serialize_result(result):
    platform = None
    if result.platform:
        platform = {
            "name": result.platform.name,
            "confidence": result.platform.confidence,
            "score": result.platform.score,
            "signals": list(result.platform.signals),
        }
    return {
        "url": result.url,
        "domain": result.domain,
        "scanTime": result.scan_time.isoformat(),
        "tags": [_serialize_tag(tag) for tag in result.tags],
        "cms": platform,
        "recommendations": list(result.recommendations),
    }


def main():
    parser = argparse.ArgumentParser(description="Marketing tag and CMS classification CLI")
    parser.add_argument("url", nargs="?", help="Target URL to capture statically (e.g., https://example.com)")
    parser.add_argument("--observation", type=str, help="Path to a JSON observation produced by a browser capture")
    parser.add_argument("--save-observation", type=str, help="Write the captured observation to this JSON file")
    parser.add_argument("--headers-file", type=str, help="Path to JSON file containing additional HTTP headers (e.g., User-Agent, Cookie)")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds for static capture (default: 10)")
    parser.add_argument("--exclude", type=str, nargs="+", help="Exclude specific extractors (e.g., --exclude social_pixel)")
    parser.add_argument("--list-extractors", action="store_true", help="List all available extractors and exit")
    parser.add_argument("--no-platform", action="store_true", help="Skip CMS/platform fingerprinting")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    if args.list_extractors:
        # Engine import registers the extractors
        print("Available extractors:")
        for name in ExtractorRegistry.get_all_names():
            extractor_class = ExtractorRegistry.get_extractor_class(name)
            print(f"  - {name} ({extractor_class.__name__})")
        return

    if not args.url and not args.observation:
        parser.error("A URL or --observation file is required unless using --list-extractors")

    custom_headers = {}
    if args.headers_file:
        try:
            with open(args.headers_file, 'r') as f:
                custom_headers = json.load(f)
            if not isinstance(custom_headers, dict):
                logger.error("Headers file must contain a JSON object (dictionary)")
                return
            logger.info(f"Loaded {len(custom_headers)} custom headers from {args.headers_file}")
        except FileNotFoundError:
            logger.error(f"Headers file not found: {args.headers_file}")
            return
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in headers file: {e}")
            return

    exclude_set = set(args.exclude) if args.exclude else set()
    invalid_excludes = exclude_set - set(ExtractorRegistry.get_all_names())
    if invalid_excludes:
        logger.error(f"Invalid extractor names: {', '.join(sorted(invalid_excludes))}")
        logger.info(f"Available extractors: {', '.join(ExtractorRegistry.get_all_names())}")
        return

    async def run():
        if args.observation:
            try:
                observation = load_observation(args.observation)
            except FileNotFoundError:
                logger.error(f"Observation file not found: {args.observation}")
                return
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Invalid observation file: {e}")
                return
            logger.info(f"Loaded observation for {observation.url or '<unknown>'} from {args.observation}")
        else:
            logger.info(f"Capturing {args.url}...")
            try:
                observation = await capture_static(args.url, headers=custom_headers, timeout=args.timeout)
            except CaptureError as e:
                logger.error(f"Failed to scan URL: {e}")
                return
            logger.debug(f"Markup length: {len(observation.markup)} bytes, scripts: {len(observation.script_sources)}")

        if args.save_observation:
            save_observation(observation, args.save_observation)
            logger.info(f"Saved observation to {args.save_observation}")

        engine = Engine(exclude_extractors=exclude_set, detect_platform=not args.no_platform)
        result = await engine.analyze(observation)
        print(json.dumps(_serialize_result(result), indent=2))

    asyncio.run(run())


if __name__ == "__main__":
    main()
