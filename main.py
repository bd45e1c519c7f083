#!/usr/bin/env python
"""CLI for the Voice of Kalki news feed."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator

from kalki_news.config import create_controller, get_default_config_path, load_config
from kalki_news.data import FetchErrorKind, Language, NewsGenre, Region

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    config: Path
    language: Language = Language.ENGLISH
    region: Region = Region.GLOBAL
    city: str | None = None
    genre: NewsGenre = NewsGenre.ALL
    search: str = ""
    verified_only: bool = False
    lat: float | None = None
    lng: float | None = None
    access_token: str | None = None
    log: bool = False

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @model_validator(mode="after")
    def coords_come_in_pairs(self) -> "CLIArgs":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("--lat and --lng must be given together")
        return self


async def run(args: CLIArgs) -> int:
    """Fetch and print one feed.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    controller = await create_controller(
        config,
        access_token=args.access_token,
        log_override=args.log if args.log else None,
    )
    async with controller:
        controller.set_language(args.language)
        controller.set_region(args.region)
        controller.set_genre(args.genre)
        controller.set_query(args.search)
        controller.set_verified_only(args.verified_only)
        if args.city:
            controller.set_city(args.city)

        if args.lat is not None and args.lng is not None:
            state = await controller.detect_location(args.lat, args.lng)
            logger.info(f"Detected location: {state.city}")

        state = await controller.refresh()
        logger.info(f"Cloud sync: {'connected' if controller.cloud_connected else 'local only'}")

        if state.error_kind == FetchErrorKind.QUOTA:
            logger.error("The news service is over quota. Try again later.")
            return 2

        items = controller.visible_items()
        print(f"\n{len(items)} stories for {state.filters.region} / {state.filters.genre}:\n")
        for i, item in enumerate(items, 1):
            marks = ""
            if item.is_urgent:
                marks += " [URGENT]"
            if item.is_verified:
                marks += " [VERIFIED]"
            logger.info(f"{i}. {item.title}{marks}")
            logger.info(f"   {item.summary}")
            logger.info(f"   Source: {item.source} ({item.timestamp})")
            if item.source_url:
                logger.info(f"   URL: {item.source_url}")
        return 0


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Fetch an AI-aggregated regional news feed.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--language",
        "-l",
        choices=[lang.value for lang in Language],
        default=Language.ENGLISH.value,
        help="Feed language (default: en)",
    )
    parser.add_argument(
        "--region",
        "-r",
        choices=[region.value for region in Region],
        default=Region.GLOBAL.value,
        help="Feed region (default: Global)",
    )
    parser.add_argument("--city", help="City for the Local region")
    parser.add_argument(
        "--genre",
        "-g",
        choices=[genre.value for genre in NewsGenre],
        default=NewsGenre.ALL.value,
        help="Topic filter (default: All)",
    )
    parser.add_argument("--search", "-s", default="", help="Filter by title or summary text")
    parser.add_argument(
        "--verified-only",
        action="store_true",
        default=False,
        help="Only show stories from verified sources",
    )
    parser.add_argument("--lat", type=float, help="Latitude for location detection")
    parser.add_argument("--lng", type=float, help="Longitude for location detection")
    parser.add_argument("--access-token", help="Session token of a signed-in user")
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Record each fetch to a JSON file",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            config=config_path,
            language=ns.language,
            region=ns.region,
            city=ns.city,
            genre=ns.genre,
            search=ns.search,
            verified_only=ns.verified_only,
            lat=ns.lat,
            lng=ns.lng,
            access_token=ns.access_token,
            log=ns.log,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
