"""Geometry kernel — pure helpers for right-angle rotated rectangles.

Coordinates are in feet with the y axis pointing down (screen
convention), so a +90° rotation turns the plan clockwise.
"""

from __future__ import annotations

from shapely.geometry import box as shapely_box
from shapely.ops import unary_union

from stableplan.catalog.models import Connector, ModuleDef

from .models import Box, PlacedUnit


def rotated_extents(width: float, depth: float, rotation: int) -> tuple[float, float]:
    """Return (w, d) of the footprint at a given rotation.

    Width and depth swap at 90° and 270°.
    """
    if rotation % 360 in (90, 270):
        return (depth, width)
    return (width, depth)


def rotate_point_in_unit(
    x: float, y: float,
    width: float, depth: float,
    rotation: int,
) -> tuple[float, float]:
    """Map a point from the unrotated local frame into the rotated box frame.

    Both frames have their origin at the top-left corner of the box.
    """
    r = rotation % 360
    if r == 90:
        return (depth - y, x)
    if r == 180:
        return (width - x, depth - y)
    if r == 270:
        return (y, width - x)
    return (x, y)


def rotate_direction(nx: float, ny: float, rotation: int) -> tuple[float, float]:
    """Rotate a direction vector by the same angle as ``rotate_point_in_unit``."""
    r = rotation % 360
    if r == 90:
        return (-ny, nx)
    if r == 180:
        return (-nx, -ny)
    if r == 270:
        return (ny, -nx)
    return (nx, ny)


def bounding_box(unit: PlacedUnit, module: ModuleDef) -> Box:
    """World-space box of a placed unit."""
    w, d = rotated_extents(module.width_ft, module.depth_ft, unit.rotation)
    return Box(unit.x, unit.y, w, d)


def overlaps(a: Box, b: Box) -> bool:
    """Strict rectangle intersection — touching edges do not overlap."""
    return not (
        a.x + a.w <= b.x or b.x + b.w <= a.x
        or a.y + a.d <= b.y or b.y + b.d <= a.y
    )


def overlap_extents(a: Box, b: Box) -> tuple[float, float]:
    """Length of the shared interval on each axis (negative = gap)."""
    ox = min(a.x + a.w, b.x + b.w) - max(a.x, b.x)
    oy = min(a.y + a.d, b.y + b.d) - max(a.y, b.y)
    return (ox, oy)


def connector_world(
    unit: PlacedUnit, module: ModuleDef, connector: Connector,
) -> tuple[float, float, float, float]:
    """Return (x, y, nx, ny) of a connector in world space."""
    px, py = rotate_point_in_unit(
        connector.x, connector.y, module.width_ft, module.depth_ft, unit.rotation,
    )
    nx, ny = rotate_direction(connector.nx, connector.ny, unit.rotation)
    return (unit.x + px, unit.y + py, nx, ny)


def origin_for_connector(
    target_x: float, target_y: float,
    module: ModuleDef, connector: Connector, rotation: int,
) -> tuple[float, float]:
    """Origin that puts *connector* (at *rotation*) on the target point."""
    px, py = rotate_point_in_unit(
        connector.x, connector.y, module.width_ft, module.depth_ft, rotation,
    )
    return (target_x - px, target_y - py)


# ── Cardinal directions ───────────────────────────────────────────

_FRONT_FACE = {0: "S", 90: "W", 180: "N", 270: "E"}


def front_face(rotation: int) -> str:
    """Cardinal direction of a module's front face at a given rotation."""
    return _FRONT_FACE[rotation % 360]


def cardinal_toward(dx: float, dy: float) -> str:
    """Nearest cardinal direction of a vector (y down; ties go to x)."""
    if abs(dx) >= abs(dy):
        return "E" if dx > 0 else "W"
    return "S" if dy > 0 else "N"


# ── Aggregate helpers ─────────────────────────────────────────────


def _to_shapely(b: Box):
    return shapely_box(b.x, b.y, b.x + b.w, b.y + b.d)


def area_weighted_centroid(boxes: list[Box]) -> tuple[float, float]:
    """Centroid of the box centres, each weighted by its area."""
    total = 0.0
    cx = cy = 0.0
    for b in boxes:
        poly = _to_shapely(b)
        c = poly.centroid
        cx += c.x * poly.area
        cy += c.y * poly.area
        total += poly.area
    if total <= 0:
        return (0.0, 0.0)
    return (cx / total, cy / total)


def layout_extents(boxes: list[Box]) -> tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y) of all boxes."""
    if not boxes:
        return (0.0, 0.0, 0.0, 0.0)
    return tuple(unary_union([_to_shapely(b) for b in boxes]).bounds)
