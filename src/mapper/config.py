"""Generation settings and tuning configuration models."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigNotFoundError

CONFIGS_DIR = Path(__file__).parent / "configs"


class GenerationSettings(BaseModel, frozen=True):
    """Caller-facing density and land-coverage knobs, each in [0, 1]."""

    river_density: float = Field(default=0.5, description="0 = no rivers, 1 = many")
    city_density: float = Field(default=0.5, description="0 = no cities, 1 = many")
    land_percentage: float = Field(
        default=0.4, description="0 = all water, 1 = mostly land"
    )

    @field_validator("river_density", "city_density", "land_percentage")
    @classmethod
    def _clamp_unit(cls, value: float) -> float:
        return min(1.0, max(0.0, float(value)))


class RiverConfig(BaseModel):
    """River simulation parameters."""

    rivers_per_density_min: int = Field(
        default=20, description="Minimum candidates at density 1.0"
    )
    rivers_per_density_max: int = Field(
        default=50, description="Maximum candidates at density 1.0"
    )
    start_attempts: int = Field(default=200, description="Retries to find a source cell")
    source_min_elevation: float = Field(default=0.15, description="Source elevation floor")
    source_max_elevation: float = Field(default=0.85, description="Source elevation cap")
    max_steps: int = Field(default=200, description="Steepest-descent step cap")
    sea_level: float = Field(default=-0.05, description="Elevation counted as sea")
    lake_level: float = Field(
        default=0.2, description="Terminal elevation below which a river may pool"
    )
    min_sea_length: int = Field(default=10, description="Sea rivers need more cells than this")
    min_lake_length: int = Field(default=8, description="Pooled rivers need more cells than this")
    erosion: float = Field(default=0.9, description="Elevation factor on river cells")
    bank_erosion: float = Field(default=0.95, description="Elevation factor on banks")
    bank_floor: float = Field(default=-0.1, description="Banks at or below this are left alone")


class SettlementConfig(BaseModel):
    """Settlement placement parameters."""

    edge_margin: int = Field(default=2, description="Cells kept free along the map edge")
    max_major: int = Field(default=10, description="Cap on major cities")
    max_medium: int = Field(default=25, description="Cap on medium towns")
    max_small: int = Field(default=70, description="Cap on small towns")
    base_population: int = Field(default=500_000, description="Zipf rank-1 population")
    medium_population: tuple[int, int] = Field(
        default=(50_000, 150_000), description="Medium population range [low, high)"
    )
    small_population: tuple[int, int] = Field(
        default=(5_000, 30_000), description="Small population range [low, high)"
    )
    placement_attempts: int = Field(default=150, description="Attempts per settlement")
    major_spacing: float = Field(default=100.0, description="Min distance for major cities")
    medium_spacing: float = Field(default=60.0, description="Min distance for medium towns")
    small_spacing: float = Field(default=40.0, description="Min distance for small towns")
    alignment_tolerance: float = Field(
        default=3.0, description="Row/column offset counted as aligned"
    )
    alignment_range: float = Field(
        default=40.0, description="Distance within which alignment is rejected"
    )
    alignment_attempts: int = Field(
        default=100, description="Attempts during which alignment is rejected"
    )
    suburb_min_distance: float = Field(default=6.0, description="Closest a suburb may sit")
    suburb_range: float = Field(default=12.0, description="Distance counted as a suburb")
    suburb_chance: float = Field(default=0.3, description="Probability a suburb is allowed")
    suburb_spacing: float = Field(default=8.0, description="Relaxed spacing for suburbs")


class RoadConfig(BaseModel):
    """Road network parameters."""

    backbone_size: int = Field(default=8, description="Settlements in the highway MST")
    backbone_max_distance: float = Field(
        default=80.0, description="MST edges longer than this are dropped"
    )
    junction_max_distance: float = Field(
        default=30.0, description="Max distance to branch off an existing road"
    )
    road_population: int = Field(
        default=100_000, description="Above this population a link is a road, not a trail"
    )
    trail_chance: float = Field(default=0.3, description="Chance of an exploratory trail")
    trail_min_distance: float = Field(default=15.0, description="Trail target min distance")
    trail_max_distance: float = Field(default=30.0, description="Trail target max distance")
    trail_max_expansions: int = Field(default=50, description="Partial search budget")
    trail_min_length: int = Field(default=5, description="Trails need more cells than this")


class LabelConfig(BaseModel):
    """Region discovery and label placement parameters."""

    min_region_size: int = Field(default=10, description="Regions need more cells than this")
    label_spacing: float = Field(
        default=80.0, description="Min label distance on a 160x120 map (scaled)"
    )
    max_oceans: int = Field(default=3, description="Ocean labels")
    ocean_min_size: int = Field(default=200, description="Ocean size floor")
    max_mountains: int = Field(default=4, description="Mountain range labels")
    mountain_min_size: int = Field(default=40, description="Mountain size floor")
    max_forests: int = Field(default=3, description="Forest labels")
    forest_min_size: int = Field(default=100, description="Forest size floor")
    max_swamps: int = Field(default=2, description="Swamp labels")
    swamp_min_size: int = Field(default=60, description="Swamp size floor")
    max_river_labels: int = Field(default=3, description="River labels")
    river_min_length: int = Field(default=30, description="Rivers need more cells than this")


class GeneratorConfig(BaseModel):
    """Complete generator configuration."""

    settings: GenerationSettings = Field(default_factory=GenerationSettings)
    rivers: RiverConfig = Field(default_factory=RiverConfig)
    settlements: SettlementConfig = Field(default_factory=SettlementConfig)
    roads: RoadConfig = Field(default_factory=RoadConfig)
    labels: LabelConfig = Field(default_factory=LabelConfig)


def load_config(config_path: Path) -> GeneratorConfig:
    """Parse a generator TOML file into a ``GeneratorConfig``.

    Tables that are absent (``[rivers]``, ``[roads]`` ...) keep their
    built-in defaults.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If a value has the wrong type.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return GeneratorConfig.model_validate(data)


def find_config(name: str) -> Path:
    """Resolve a config name or path.

    Anything containing ``/`` or ending in ``.toml`` is taken as a path;
    any other name is looked up as ``{name}.toml`` among the presets
    bundled in ``mapper/configs``.

    Raises:
        ConfigNotFoundError: If neither lookup finds a file.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise ConfigNotFoundError(f"Config file not found: {name}")

    config_path = CONFIGS_DIR / f"{name}.toml"
    if config_path.exists():
        return config_path

    raise ConfigNotFoundError(
        f"Preset '{name}' not found; bundled presets: {', '.join(list_configs())}"
    )


def list_configs() -> list[str]:
    """Names of the bundled presets, sorted."""
    if not CONFIGS_DIR.exists():
        return []
    return sorted(p.stem for p in CONFIGS_DIR.glob("*.toml"))
