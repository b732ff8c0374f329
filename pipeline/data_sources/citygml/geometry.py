"""
Auswahl der Gebäudegeometrie und Kodierung als WKT-MultiPolygon.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .models import BuildingRecord, LOD_PRIORITY, Point, RingEncoding

logger = logging.getLogger(__name__)

EMPTY_MULTIPOLYGON = "MULTIPOLYGON()"
EMPTY_RING = "(())"

def select_geometry(record: BuildingRecord) -> Tuple[Optional[str], List[RingEncoding]]:
    """Wählt die erste nicht-leere LOD-Sammlung (LOD0 -> LOD4).

    Args:
        record: Gebäude mit seinen LOD-Sammlungen

    Returns:
        Tuple aus LOD-Schlüssel und Ringen, (None, []) wenn alle leer sind
    """
    for lod in LOD_PRIORITY:
        rings = record.rings(lod)
        if rings:
            return lod, rings
    return None, []

def _format_polygon(points: Sequence[Point]) -> str:
    if not points:
        return EMPTY_RING
    return "((" + ", ".join(f"{x} {y}" for x, y in points) + "))"

def encode_ring(ring: RingEncoding) -> str:
    """Kodiert einen Ring als WKT-Polygon ``((x1 y1, x2 y2, ...))``.

    Die Koordinaten werden als Text übernommen, ohne Umsortierung und ohne
    den Ring zu schließen. Ein Ring ohne Punkte ergibt ``(())``.
    """
    return _format_polygon(ring.points())

def encode_multipolygon(rings: Sequence[RingEncoding]) -> str:
    """Kodiert eine Ringsammlung als WKT-MultiPolygon (ein Polygon pro Ring)."""
    return "MULTIPOLYGON(" + ", ".join(encode_ring(ring) for ring in rings) + ")"

def encode_building(record: BuildingRecord) -> Tuple[Optional[str], str]:
    """Wählt die Geometrie eines Gebäudes und kodiert sie als WKT im Quell-KBS.

    Jede Sammlung wird nur einmal ausgewählt und jeder Ring nur einmal
    dekodiert.

    Args:
        record: Das Gebäude

    Returns:
        Tuple aus LOD-Schlüssel (None ohne Geometrie) und WKT-MultiPolygon
    """
    lod, rings = select_geometry(record)
    if lod is None:
        logger.debug(f"Gebäude {record.building_id} ohne Geometrie")
        return None, EMPTY_MULTIPOLYGON

    polygons = []
    for ring in rings:
        points = ring.points()
        if ring.ambiguous:
            logger.warning(
                f"⚠️ Gebäude {record.building_id}: mehrere Koordinatenkodierungen "
                f"in einem Ring, verwende {ring.__class__.__name__}"
            )
        elif not points:
            logger.warning(f"⚠️ Gebäude {record.building_id}: Ring ohne Koordinaten in {lod}")
        polygons.append(_format_polygon(points))

    return lod, "MULTIPOLYGON(" + ", ".join(polygons) + ")"

def building_to_wkt(record: BuildingRecord) -> str:
    """Liefert die Geometrie eines Gebäudes als WKT im Quell-KBS.

    Returns:
        str: WKT-MultiPolygon, ``MULTIPOLYGON()`` ohne Geometrie
    """
    return encode_building(record)[1]
