"""Road network: highway backbone, branch roads, exploratory trails.

Paths come from an A* search whose cost model favours diagonal, contour-
following routes and punishes right angles and long straight runs; the
resulting cell path is then rounded at corners and given a gentle
sinusoidal wiggle.
"""

import heapq
import itertools
import math
from collections.abc import Callable

import numpy as np
import structlog
from numpy.typing import NDArray

from .biomes import ROAD_BLOCKING_BIOMES, Biome, biome_code, codes_for
from .config import RoadConfig
from .models import Bridge, City, Road, RoadType
from .names import bridge_name, road_descriptor

logger = structlog.get_logger()

Cell = tuple[int, int]

TAU = 2.0 * math.pi

# (dx, dy) in scan order
NEIGHBOR_OFFSETS: tuple[Cell, ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)

ORTHOGONAL_COST = 10
DIAGONAL_COST = 14

# Multiplier on the step cost for entering a cell of this biome
BIOME_COST: dict[Biome, float] = {
    Biome.RIVER: 5,
    Biome.MOUNTAINS: 8,
    Biome.SNOW_PEAKS: 10,
    Biome.HILLS: 2,
    Biome.SWAMP: 3,
    Biome.FOREST: 1.5,
}

# Partial searches give up on reaching any of these
TRAIL_STOP_BIOMES = frozenset({
    Biome.MOUNTAINS,
    Biome.SNOW_PEAKS,
    Biome.OCEAN,
    Biome.DEEP_OCEAN,
})

CORNER_COS = 0.5
CORNER_RADIUS = 0.4
CORNER_SAMPLES = 8
WIGGLE_MIN_DISTANCE = 1.5


class RoadTerrain:
    """Read-only terrain view tuned for per-cell access in path searches."""

    def __init__(self, elevation: NDArray[np.float64], biomes: NDArray[np.uint8]):
        self.height, self.width = biomes.shape
        self.elevation = elevation.tolist()
        self.biomes = biomes.tolist()

        blocking = set(codes_for(ROAD_BLOCKING_BIOMES))
        self._blocked = [[code in blocking for code in row] for row in self.biomes]
        self._cost = {biome_code(b): m for b, m in BIOME_COST.items()}
        self._stops = set(codes_for(TRAIL_STOP_BIOMES))
        self._river = biome_code(Biome.RIVER)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def passable(self, x: int, y: int) -> bool:
        """In bounds and not on a road-blocking biome."""
        return self.in_bounds(x, y) and not self._blocked[y][x]

    def cost_multiplier(self, x: int, y: int) -> float:
        return self._cost.get(self.biomes[y][x], 1)

    def stops_trail(self, x: int, y: int) -> bool:
        return self.biomes[y][x] in self._stops

    def is_river(self, x: int, y: int) -> bool:
        return self.biomes[y][x] == self._river


def _round(value: float) -> int:
    """Round half away from zero."""
    if value >= 0.0:
        return math.floor(value + 0.5)
    return -math.floor(-value + 0.5)


def _reconstruct(came_from: dict[Cell, Cell], end: Cell) -> list[Cell]:
    path = [end]
    while path[-1] in came_from:
        path.append(came_from[path[-1]])
    path.reverse()
    return path


def _straight_run(came_from: dict[Cell, Cell], position: Cell, dx: int, dy: int) -> int:
    """Consecutive steps into ``position`` that moved by exactly (dx, dy)."""
    count = 0
    current = position
    while current in came_from:
        prev = came_from[current]
        if (current[0] - prev[0], current[1] - prev[1]) != (dx, dy):
            break
        count += 1
        current = prev
    return count


def _step_cost(
    terrain: RoadTerrain,
    position: Cell,
    dx: int,
    dy: int,
    came_from: dict[Cell, Cell],
    rng: np.random.Generator,
) -> int:
    """Integer cost of moving from ``position`` by (dx, dy)."""
    x, y = position
    nx, ny = x + dx, y + dy
    diagonal = dx != 0 and dy != 0

    move_cost = DIAGONAL_COST if diagonal else ORTHOGONAL_COST
    elevation_change = abs(terrain.elevation[ny][nx] - terrain.elevation[y][x])
    move_cost += int(elevation_change * 100.0)
    move_cost = int(move_cost * terrain.cost_multiplier(nx, ny))

    # Jitter against unnaturally straight lines
    move_cost += int(rng.integers(5, 35))

    prev = came_from.get(position)
    if not diagonal:
        if prev is None:
            move_cost += 150
        else:
            pdx, pdy = x - prev[0], y - prev[1]
            right_angle = (
                (pdx != 0 and pdy != 0)
                or (pdx != 0 and pdy == 0 and dx == 0)
                or (pdx == 0 and pdy != 0 and dy == 0)
            )
            if right_angle:
                move_cost += 1000
            else:
                run = _straight_run(came_from, position, dx, dy)
                move_cost += run * run * 50
                move_cost += 200 + int(rng.integers(50, 100))
                if (dx == 0 and pdx == 0) or (dy == 0 and pdy == 0):
                    move_cost += 300
    else:
        move_cost = int(move_cost * 0.3)
        if prev is not None:
            pdx, pdy = x - prev[0], y - prev[1]
            if pdx != 0 and pdy != 0 and abs(dx - pdx) + abs(dy - pdy) <= 1:
                move_cost = int(move_cost * 0.5)

    # Contour following
    if elevation_change < 0.05:
        move_cost = int(move_cost * 0.85)

    return move_cost


def find_path(
    terrain: RoadTerrain,
    start: Cell,
    goal: Cell,
    rng: np.random.Generator,
) -> list[Cell]:
    """A* route between two cells, smoothed.

    Args:
        terrain: Terrain view.
        start: (x, y) start cell.
        goal: (x, y) goal cell.
        rng: Random number generator.

    Returns:
        Smoothed list of (x, y) cells, or an empty list if unreachable.
    """
    gx, gy = goal
    best: dict[Cell, int] = {start: 0}
    came_from: dict[Cell, Cell] = {}
    counter = itertools.count()
    frontier = [(0, next(counter), start)]

    while frontier:
        cost, _, position = heapq.heappop(frontier)
        if position == goal:
            return smooth_path(_reconstruct(came_from, goal), terrain, rng)

        if cost > best.get(position, math.inf):
            continue

        x, y = position
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not terrain.passable(nx, ny):
                continue

            move_cost = _step_cost(terrain, position, dx, dy, came_from, rng)
            heuristic = int(math.hypot(nx - gx, ny - gy) * 12.0)
            next_cost = cost + move_cost + heuristic // 4

            if next_cost < best.get((nx, ny), math.inf):
                best[(nx, ny)] = next_cost
                came_from[(nx, ny)] = position
                heapq.heappush(frontier, (next_cost, next(counter), (nx, ny)))

    return []


def find_partial_path(
    terrain: RoadTerrain,
    start: Cell,
    goal: Cell,
    rng: np.random.Generator,
    max_expansions: int = 50,
) -> list[Cell]:
    """Bounded search towards a goal that may stop short.

    The search returns the route to the current cell once it has popped
    more than ``max_expansions`` cells or stands on rough or open water.

    Args:
        terrain: Terrain view.
        start: (x, y) start cell.
        goal: (x, y) goal cell.
        rng: Random number generator (used by smoothing).
        max_expansions: Search budget.

    Returns:
        Smoothed list of (x, y) cells, possibly empty.
    """
    best: dict[Cell, int] = {start: 0}
    came_from: dict[Cell, Cell] = {}
    counter = itertools.count()
    frontier = [(0, next(counter), start)]
    expansions = 0

    while frontier:
        cost, _, position = heapq.heappop(frontier)
        x, y = position
        expansions += 1

        if (
            expansions > max_expansions
            or position == goal
            or terrain.stops_trail(x, y)
        ):
            return smooth_path(_reconstruct(came_from, position), terrain, rng)

        if cost > best.get(position, math.inf):
            continue

        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not terrain.passable(nx, ny):
                continue

            move_cost = DIAGONAL_COST if dx != 0 and dy != 0 else ORTHOGONAL_COST
            move_cost += int(abs(terrain.elevation[ny][nx] - terrain.elevation[y][x]) * 50.0)
            next_cost = cost + move_cost

            if next_cost < best.get((nx, ny), math.inf):
                best[(nx, ny)] = next_cost
                came_from[(nx, ny)] = position
                heapq.heappush(frontier, (next_cost, next(counter), (nx, ny)))

    return []


def _round_corner(prev: Cell, curr: Cell, nxt: Cell, terrain: RoadTerrain) -> list[Cell] | None:
    """Bezier samples replacing a sharp corner, or None if it is gentle."""
    v1x, v1y = curr[0] - prev[0], curr[1] - prev[1]
    v2x, v2y = nxt[0] - curr[0], nxt[1] - curr[1]
    len1 = math.hypot(v1x, v1y)
    len2 = math.hypot(v2x, v2y)

    cos_angle = 1.0
    if len1 > 0.0 and len2 > 0.0:
        cos_angle = (v1x * v2x + v1y * v2y) / (len1 * len2)
    if cos_angle >= CORNER_COS:
        return None

    radius = min(len1, len2) * CORNER_RADIUS
    p1x = curr[0] - v1x * radius / len1
    p1y = curr[1] - v1y * radius / len1
    p2x = curr[0] + v2x * radius / len2
    p2y = curr[1] + v2y * radius / len2

    samples = []
    for j in range(CORNER_SAMPLES + 1):
        t = j / CORNER_SAMPLES
        mt = 1.0 - t
        # Both inner control points sit on the corner
        px = mt**3 * p1x + 3.0 * mt * t * curr[0] + t**3 * p2x
        py = mt**3 * p1y + 3.0 * mt * t * curr[1] + t**3 * p2y
        cx, cy = _round(px), _round(py)
        if terrain.passable(cx, cy):
            samples.append((cx, cy))
    return samples


def smooth_path(path: list[Cell], terrain: RoadTerrain, rng: np.random.Generator) -> list[Cell]:
    """Round sharp corners and add a gentle wiggle to straight stretches.

    Args:
        path: Raw (x, y) path.
        terrain: Terrain view; samples on blocking biomes are rejected.
        rng: Random number generator.

    Returns:
        Smoothed path without consecutive duplicates.
    """
    if len(path) < 3:
        return path

    splined = [path[0]]
    for prev, curr, nxt in zip(path, path[1:], path[2:]):
        corner = _round_corner(prev, curr, nxt, terrain)
        if corner is None:
            splined.append(curr)
        else:
            splined.extend(corner)
    splined.append(path[-1])

    smoothed = [splined[0]]
    for current, nxt in itertools.pairwise(splined):
        dx = nxt[0] - current[0]
        dy = nxt[1] - current[1]
        distance = math.hypot(dx, dy)

        if distance > WIGGLE_MIN_DISTANCE:
            num_points = int(distance * 0.8)
            phase = rng.uniform(0.0, TAU)
            frequency = rng.uniform(0.3, 0.7)
            amplitude = rng.uniform(0.5, 1.2)
            perp_x, perp_y = -dy / distance, dx / distance

            for j in range(1, num_points + 1):
                t = j / (num_points + 1)
                base_x = current[0] + dx * t
                base_y = current[1] + dy * t

                wiggle = math.sin(t * math.pi * frequency + phase) * amplitude
                wiggle += (
                    math.sin(t * math.pi * frequency * 2.3 + phase * 0.7) * amplitude * 0.3
                )

                wx = _round(base_x + perp_x * wiggle + rng.uniform(-0.1, 0.1))
                wy = _round(base_y + perp_y * wiggle + rng.uniform(-0.1, 0.1))

                if terrain.passable(wx, wy):
                    smoothed.append((wx, wy))
                else:
                    bx, by = _round(base_x), _round(base_y)
                    if terrain.passable(bx, by):
                        smoothed.append((bx, by))

        smoothed.append(nxt)

    return [cell for i, cell in enumerate(smoothed) if i == 0 or cell != smoothed[i - 1]]


def minimum_spanning_tree(
    points: list[Cell],
    max_distance: float,
) -> list[tuple[int, int]]:
    """Kruskal's MST over straight-line distances.

    Args:
        points: Node positions.
        max_distance: Edges longer than this are never used.

    Returns:
        List of (i, j) index pairs, shortest first.
    """
    edges = sorted(
        (
            (math.dist(points[i], points[j]), i, j)
            for i in range(len(points))
            for j in range(i + 1, len(points))
        ),
        key=lambda edge: edge[0],
    )

    parent = list(range(len(points)))

    def find(node: int) -> int:
        while parent[node] != node:
            node = parent[node]
        return node

    tree = []
    for dist, i, j in edges:
        if dist > max_distance:
            break
        root_i, root_j = find(i), find(j)
        if root_i != root_j:
            parent[root_i] = root_j
            tree.append((i, j))
    return tree


class RoadBuilder:
    """Accumulates roads, bridges and the set of road cells."""

    def __init__(self, terrain: RoadTerrain, rng: np.random.Generator):
        self.terrain = terrain
        self.rng = rng
        self.roads: list[Road] = []
        self.bridges: list[Bridge] = []
        # Insertion-ordered road cells -> index of the first road through them
        self.road_cells: dict[Cell, int] = {}

    def add(
        self,
        path: list[Cell],
        road_type: RoadType,
        name_for: Callable[[str], str],
    ) -> Road:
        """Commit a path as a road; bridges are named before the road."""
        index = len(self.roads)
        for cell in path:
            self.road_cells.setdefault(cell, index)

        bridges = []
        for x, y in path:
            if self.terrain.is_river(x, y):
                bridge = Bridge(x=x, y=y, name=bridge_name(len(self.bridges), self.rng))
                bridges.append(bridge)
                self.bridges.append(bridge)

        road = Road(
            path=tuple(path),
            name=name_for(road_descriptor(index, self.rng)),
            road_type=road_type,
            bridges=tuple(bridges),
        )
        self.roads.append(road)
        return road

    def nearest_road_cell(self, city: City, max_distance: float) -> Cell | None:
        """Closest existing road cell strictly within ``max_distance``."""
        best = None
        best_dist = max_distance
        for cell in self.road_cells:
            dist = math.dist(city.position, cell)
            if dist < best_dist:
                best_dist = dist
                best = cell
        return best


def _nearest_city(city: City, others: list[City]) -> City | None:
    best = None
    best_dist = math.inf
    for other in others:
        if other is city:
            continue
        dist = math.dist(city.position, other.position)
        if dist < best_dist:
            best_dist = dist
            best = other
    return best


def trail_target(x: int, y: int, angle: float, distance: float) -> Cell:
    """Cell ``distance`` away from (x, y) along ``angle``, clamped at zero."""
    return (
        max(0, int(x + math.cos(angle) * distance)),
        max(0, int(y + math.sin(angle) * distance)),
    )


def build_roads(
    elevation: NDArray[np.float64],
    biomes: NDArray[np.uint8],
    cities: list[City],
    rng: np.random.Generator,
    config: RoadConfig,
) -> tuple[list[Road], list[Bridge]]:
    """Connect settlements with highways, roads and trails.

    Args:
        elevation: Elevation field (after river erosion).
        biomes: Biome code grid.
        cities: Placed settlements, majors first.
        rng: Random number generator.
        config: Road configuration.

    Returns:
        Tuple of (roads, bridges) in creation order.
    """
    if not cities:
        return [], []

    builder = RoadBuilder(RoadTerrain(elevation, biomes), rng)
    connected = [False] * len(cities)

    # Highway backbone between the largest settlements
    backbone = [c.position for c in cities[: config.backbone_size]]
    for i, j in minimum_spanning_tree(backbone, config.backbone_max_distance):
        path = find_path(builder.terrain, cities[i].position, cities[j].position, rng)
        if path:
            connected[i] = connected[j] = True
            builder.add(path, RoadType.HIGHWAY, lambda d: f"{d} Highway")

    # Branch or link every remaining settlement into the network
    for i, city in enumerate(cities):
        if connected[i]:
            continue

        target = builder.nearest_road_cell(city, config.junction_max_distance)
        junction = target is not None
        if target is None:
            linked = [c for k, c in enumerate(cities) if connected[k]]
            nearest = _nearest_city(city, linked) or _nearest_city(city, cities)
            if nearest is not None:
                target = nearest.position
        if target is None:
            continue

        if target == city.position:
            # Already on an existing road
            connected[i] = True
            continue

        path = find_path(builder.terrain, city.position, target, rng)
        if not path:
            continue

        connected[i] = True
        if city.population > config.road_population:
            road_type, kind = RoadType.ROAD, "Road"
        else:
            road_type, kind = RoadType.TRAIL, "Trail"
        if junction:
            builder.add(path, road_type, lambda d: f"{d} Branch")
        else:
            builder.add(path, road_type, lambda d, kind=kind: f"{d} {kind}")

    # Exploratory trails into the wilderness
    for city in cities:
        if rng.random() >= config.trail_chance:
            continue
        angle = rng.uniform(0.0, TAU)
        distance = rng.uniform(config.trail_min_distance, config.trail_max_distance)
        target = trail_target(city.x, city.y, angle, distance)
        if not builder.terrain.in_bounds(*target):
            continue

        path = find_partial_path(
            builder.terrain, city.position, target, rng, config.trail_max_expansions
        )
        if len(path) > config.trail_min_length:
            builder.add(path, RoadType.TRAIL, lambda d: f"Old {d} Trail")

    logger.debug(
        "road_network_built",
        roads=len(builder.roads),
        bridges=len(builder.bridges),
        unconnected=connected.count(False),
    )
    return builder.roads, builder.bridges
