"""Command-line interface for world map generation."""

import argparse
import json
import sys
import time
from pathlib import Path

import structlog

from .models import WorldMap

logger = structlog.get_logger()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for world map generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural world map with rivers, cities and roads"
    )
    parser.add_argument(
        "--width", type=int, default=160, help="Map width (default: 160)"
    )
    parser.add_argument(
        "--height", type=int, default=120, help="Map height (default: 120)"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed (default: current time)"
    )
    parser.add_argument(
        "--rivers", type=float, default=None, help="River density 0.0-1.0 (default: 0.5)"
    )
    parser.add_argument(
        "--cities", type=float, default=None, help="City density 0.0-1.0 (default: 0.5)"
    )
    parser.add_argument(
        "--land", type=float, default=None, help="Land percentage 0.0-1.0 (default: 0.4)"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Config name (e.g. 'continent') or path to a TOML file",
    )
    parser.add_argument(
        "--json",
        type=str,
        default=None,
        help="Write the generated map as JSON to this path",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure structlog for CLI
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if args.verbose else 20),
    )

    # Import here to avoid slow startup for --help
    from .config import GenerationSettings, GeneratorConfig, find_config, load_config
    from .exceptions import MapperError
    from .generator import generate
    from .validation import validate_world

    if args.config:
        try:
            config_path = find_config(args.config)
            config = load_config(config_path)
            logger.info("config_loaded", path=str(config_path))
        except FileNotFoundError as e:
            parser.error(str(e))
    else:
        config = GeneratorConfig()

    # Apply CLI overrides; values are clamped into [0, 1]
    overrides = {
        "river_density": args.rivers,
        "city_density": args.cities,
        "land_percentage": args.land,
    }
    settings = GenerationSettings(
        **config.settings.model_dump()
        | {key: value for key, value in overrides.items() if value is not None}
    )
    seed = args.seed if args.seed is not None else int(time.time())

    print(
        f"Generating {args.width}x{args.height} map with seed {seed}: "
        f"rivers={settings.river_density:.0%}, cities={settings.city_density:.0%}, "
        f"land={settings.land_percentage:.0%}"
    )

    start_time = time.time()
    try:
        world = generate(seed, settings, args.width, args.height, config)
    except MapperError as e:
        parser.error(str(e))
    gen_time = time.time() - start_time

    result = validate_world(world, args.width, args.height, config.rivers)

    print()
    print(f"Generation complete in {gen_time:.1f}s")
    _print_summary(world)

    if args.json:
        output_path = Path(args.json)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(world.to_dict(), f)
        print(f"Saved to {output_path}")

    if not result.passed:
        sys.exit(1)


def _print_summary(world: WorldMap) -> None:
    """Print biome breakdown and feature lists."""
    total = world.width * world.height

    print()
    print("Biome distribution:")
    for biome, count in sorted(world.biome_counts().items(), key=lambda item: -item[1]):
        print(f"  {biome.value}: {count:,} ({count / total:.1%})")

    print()
    print(f"Rivers: {len(world.rivers)}")

    print(f"Cities: {len(world.cities)}")
    for city in world.cities:
        print(f"  {city.name} ({city.tier.value}) - population {city.population:,}")

    print(f"Roads: {len(world.roads)} ({len(world.bridges)} bridges)")
    for road in world.roads:
        print(f"  {road.name} ({road.road_type.value}, {len(road.path)} cells)")

    print("Named locations:")
    for label in world.labels:
        print(f"  {label.name} - {label.feature_type} (at {label.x:.0f}, {label.y:.0f})")


if __name__ == "__main__":
    main()
