"""Word-list name generators for map features.

Generators mix an index-derived offset with draws from the shared
generator, so consecutive features tend to get different names.
Duplicates are allowed.
"""

import numpy as np

OCEAN_PREFIXES = ("Azure", "Cerulean", "Sapphire", "Mystic", "Crystal", "Eternal", "Whispering")
OCEAN_SUFFIXES = ("Sea", "Ocean", "Deep", "Abyss", "Waters", "Expanse", "Bay")

MOUNTAIN_PREFIXES = ("Mount", "Mt.", "Peak")
MOUNTAIN_FIRST_PARTS = (
    "Storm", "Iron", "Snow", "Thunder", "Eagle", "Wolf", "Dragon", "Crystal",
    "Shadow", "Silver", "Golden", "Frost", "Wind", "Cloud", "Stone", "Red",
)
MOUNTAIN_SECOND_PARTS = (
    "horn", "crest", "spire", "ridge", "tooth", "peak", "crown", "fang",
    "head", "point", "top", "summit", "needle", "wall",
)
MOUNTAIN_RANGE_SUFFIXES = ("Mountains", "Range", "Peaks", "Heights", "Alps", "Highlands")

FOREST_ADJECTIVES = ("Whispering", "Ancient", "Enchanted", "Dark", "Silver", "Golden", "Misty")
FOREST_NOUNS = ("Woods", "Forest", "Grove", "Thicket", "Woodland", "Glade", "Copse")

SWAMP_ADJECTIVES = ("Murky", "Fetid", "Misty", "Black", "Forgotten", "Cursed", "Silent")
SWAMP_NOUNS = ("Marsh", "Swamp", "Bog", "Fen", "Mire", "Wetlands", "Quagmire")

CITY_PREFIXES = ("New", "Port", "Fort", "Saint", "North", "South", "East", "West", "Old", "")
CITY_FIRST_PARTS = (
    "Oak", "River", "Lake", "Hill", "Green", "White", "Black", "Gold", "Silver",
    "Spring", "Summer", "Winter", "Mill", "Fair", "Clear", "Bright",
)
CITY_SECOND_PARTS = (
    "haven", "bridge", "vale", "crest", "shore", "field", "gate", "wells",
    "cross", "wood", "meadow", "ridge", "view", "hill", "brook",
)
CITY_SUFFIXES = ("ton", "ville", "burg", "shire", "ford", "mouth", "stead", "ham", "thorpe")
CITY_TYPES = (" City", " Town", "", "", "")

ROAD_DESCRIPTORS = (
    "King's", "Queen's", "Merchant's", "Old", "Ancient", "Royal",
    "Imperial", "Trade", "Coastal", "Mountain", "Forest", "Valley",
    "Pioneer", "Settler's", "Hunter's", "Pilgrim's",
)

RIVER_PREFIXES = ("River", "The")
RIVER_NAMES = ("Silverflow", "Clearwater", "Rushing", "Serpent", "Crystal", "Moonwater", "Swift")

BRIDGE_PREFIXES = ("Old", "New", "Great", "High", "Stone", "Iron", "Wooden", "Ancient")
BRIDGE_MIDDLES = ("River", "Creek", "Valley", "Canyon", "Gorge", "Falls", "Rapids", "Mill")


def _pick(rng: np.random.Generator, words: tuple[str, ...]) -> str:
    return words[int(rng.integers(0, len(words)))]


def _offset(rng: np.random.Generator, base: int, spread: int, size: int) -> int:
    """Index-derived position plus a small random offset, wrapped."""
    return (base + int(rng.integers(0, spread))) % size


def ocean_name(rng: np.random.Generator) -> str:
    prefix = _pick(rng, OCEAN_PREFIXES)
    suffix = _pick(rng, OCEAN_SUFFIXES)
    return f"{prefix} {suffix}"


def mountain_name(index: int, rng: np.random.Generator) -> str:
    """Name a mountain range, e.g. "Mt. Stormcrest" or "The Ironspire Range"."""
    prefix = MOUNTAIN_PREFIXES[_offset(rng, index, 3, len(MOUNTAIN_PREFIXES))]
    first = MOUNTAIN_FIRST_PARTS[_offset(rng, index * 7, 4, len(MOUNTAIN_FIRST_PARTS))]
    second = MOUNTAIN_SECOND_PARTS[_offset(rng, index * 5, 3, len(MOUNTAIN_SECOND_PARTS))]

    if rng.random() < 0.4:
        suffix = _pick(rng, MOUNTAIN_RANGE_SUFFIXES)
        return f"The {first}{second} {suffix}"
    return f"{prefix} {first}{second}"


def forest_name(rng: np.random.Generator) -> str:
    adjective = _pick(rng, FOREST_ADJECTIVES)
    noun = _pick(rng, FOREST_NOUNS)
    return f"{adjective} {noun}"


def swamp_name(rng: np.random.Generator) -> str:
    adjective = _pick(rng, SWAMP_ADJECTIVES)
    noun = _pick(rng, SWAMP_NOUNS)
    return f"{adjective} {noun}"


def city_name(index: int, rng: np.random.Generator) -> str:
    """Name the ``index``-th placed settlement.

    Args:
        index: Number of settlements placed before this one.
        rng: Random number generator.

    Returns:
        A compound name with optional prefix and "City"/"Town" suffix.
    """
    with_prefix = rng.random() < 0.4
    first = CITY_FIRST_PARTS[_offset(rng, index * 3, 4, len(CITY_FIRST_PARTS))]
    second = CITY_SECOND_PARTS[_offset(rng, index * 5, 3, len(CITY_SECOND_PARTS))]

    if rng.random() < 0.6:
        suffix = CITY_SUFFIXES[_offset(rng, index * 7, 2, len(CITY_SUFFIXES))]
        name = f"{first}{second}{suffix}"
    else:
        name = f"{first}{second}"

    if with_prefix:
        prefix = _pick(rng, CITY_PREFIXES)
        if prefix:
            name = f"{prefix} {name}"

    return name + _pick(rng, CITY_TYPES)


def road_descriptor(index: int, rng: np.random.Generator) -> str:
    """Descriptor word for the ``index``-th road, e.g. "King's"."""
    return ROAD_DESCRIPTORS[_offset(rng, index * 3, 4, len(ROAD_DESCRIPTORS))]


def river_name(rng: np.random.Generator) -> str:
    prefix = _pick(rng, RIVER_PREFIXES)
    name = _pick(rng, RIVER_NAMES)
    if prefix == "The":
        return f"The {name} River"
    return f"{name} River"


def bridge_name(index: int, rng: np.random.Generator) -> str:
    """Name the ``index``-th bridge; always ends in "Bridge"."""
    prefix = BRIDGE_PREFIXES[_offset(rng, index * 5, 3, len(BRIDGE_PREFIXES))]
    middle = BRIDGE_MIDDLES[_offset(rng, index * 3, 2, len(BRIDGE_MIDDLES))]
    return f"{prefix} {middle} Bridge"
