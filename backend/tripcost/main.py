import argparse
import asyncio
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tripcost.config import settings


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Console logging, plus a rotating file when a log file is configured."""
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_path = log_file or settings.log_file
    if log_path:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Quiet noisy libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


async def run(request: dict) -> dict:
    from tripcost.services.distance_service import (
        FallbackDistanceProvider,
        HaversineDistanceProvider,
        OSRMDistanceProvider,
    )
    from tripcost.services.geocoding_service import NominatimGeocoder
    from tripcost.services.rates_service import rates_service
    from tripcost.services.trip_costs.engine import TripCostEngine

    osrm = OSRMDistanceProvider()
    geocoder = NominatimGeocoder()
    try:
        engine = TripCostEngine(
            distance_provider=FallbackDistanceProvider(osrm, HaversineDistanceProvider()),
            rates_resolver=rates_service,
            toll_provider=osrm,
            geocoder=geocoder,
        )
        result = await engine.calculate_multi_stop_trip_costs(request)
    finally:
        await asyncio.gather(osrm.close(), geocoder.close())
    return result.to_dict()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tripcost",
        description="Compute road vs flight costs for a multi-stop technician trip.",
    )
    parser.add_argument("request", help="Path to a JSON trip cost request ('-' for stdin)")
    parser.add_argument("--log-level", default=None, help="Override TRIPCOST_LOG_LEVEL")
    parser.add_argument("--indent", type=int, default=2)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    from tripcost.services.trip_costs.errors import InvalidInput

    try:
        if args.request == "-":
            request = json.load(sys.stdin)
        else:
            request = json.loads(Path(args.request).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read request {args.request}: {e}")
        return 2

    try:
        result = asyncio.run(run(request))
    except InvalidInput as e:
        logger.error(f"Invalid trip cost request: {e}")
        return 1

    json.dump(result, sys.stdout, indent=args.indent, ensure_ascii=False, default=str)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
