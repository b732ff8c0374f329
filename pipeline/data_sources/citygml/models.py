"""
Datenmodell für CityGML-Gebäude und ihre Ringkodierungen.

Ein Ring (gml:LinearRing) liegt im Quelldokument in genau einer von drei
Textkodierungen vor:

- mehrere ``gml:pos`` Elemente mit je ``"x y [z]"``
- ein ``gml:posList`` mit allen Koordinaten als (x, y, z)-Tripel
- ein veraltetes ``gml:coordinates`` mit ``"x,y[,z]"``-Tupeln

Jede Kodierung ist eine eigene Klasse. Welche verwendet wird, entscheidet
``ring_from_fields`` einmalig beim Einlesen.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

# Reihenfolge der LOD-Sammlungen nach Priorität
LOD_PRIORITY = (
    'lod0FootPrint',
    'lod1MultiSurface',
    'lod2MultiSurface',
    'lod3MultiSurface',
    'lod4MultiSurface',
)

Point = Tuple[str, str]

def normalize_whitespace(text: str) -> str:
    """Fasst beliebige Leerraumfolgen zu einzelnen Leerzeichen zusammen."""
    return " ".join(text.split())

class RingEncoding(ABC):
    """Basisklasse der Ringkodierungen."""

    def __init__(self, ambiguous: bool = False):
        # True wenn im Quelldokument mehr als eine Kodierung befüllt war
        self.ambiguous = ambiguous

    @abstractmethod
    def points(self) -> List[Point]:
        """Liefert die (x, y)-Paare als unveränderten Text."""
        pass

    def __eq__(self, other):
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"{self.__class__.__name__}({fields})"

class PosEncoding(RingEncoding):
    """Ring aus einzelnen ``gml:pos`` Positionen."""

    def __init__(self, positions: Sequence[str], ambiguous: bool = False):
        super().__init__(ambiguous)
        self.positions = list(positions)

    def points(self) -> List[Point]:
        points = []
        for position in self.positions:
            fields = normalize_whitespace(position).split(" ")
            if len(fields) < 2:
                continue
            points.append((fields[0], fields[1]))
        return points

class PosListEncoding(RingEncoding):
    """Ring aus einer ``gml:posList`` mit (x, y, z)-Tripeln."""

    def __init__(self, pos_list: str, ambiguous: bool = False):
        super().__init__(ambiguous)
        self.pos_list = pos_list

    def points(self) -> List[Point]:
        tokens = self.pos_list.split()
        points = []
        for i in range(0, len(tokens), 3):
            group = tokens[i:i + 3]
            # z wird verworfen, ein einzelner Rest-Token ergibt keinen Punkt
            if len(group) >= 2:
                points.append((group[0], group[1]))
        return points

class CoordinatesEncoding(RingEncoding):
    """Ring aus einem veralteten ``gml:coordinates`` Text."""

    def __init__(self, coordinates: str, ambiguous: bool = False):
        super().__init__(ambiguous)
        self.coordinates = coordinates

    def points(self) -> List[Point]:
        points = []
        for token in self.coordinates.split():
            fields = token.split(",")
            if len(fields) < 2:
                continue
            points.append((fields[0], fields[1]))
        return points

class EmptyEncoding(RingEncoding):
    """Ring ohne auswertbare Kodierung."""

    def points(self) -> List[Point]:
        return []

def ring_from_fields(pos: Optional[Sequence[str]] = None,
                     pos_list: Optional[str] = None,
                     coordinates: Optional[str] = None) -> RingEncoding:
    """Wählt die Ringkodierung aus den Rohfeldern eines LinearRing.

    Vorrang: pos > posList > coordinates. Leere oder nur aus Leerraum
    bestehende Felder gelten als nicht vorhanden.

    Args:
        pos: Texte der gml:pos Elemente
        pos_list: Text des gml:posList Elements
        coordinates: Text des gml:coordinates Elements

    Returns:
        RingEncoding: Die gewählte Kodierung
    """
    positions = [p for p in (pos or []) if p and p.strip()]
    has_pos_list = bool(pos_list and pos_list.strip())
    has_coordinates = bool(coordinates and coordinates.strip())

    populated = sum([bool(positions), has_pos_list, has_coordinates])
    ambiguous = populated > 1

    if positions:
        return PosEncoding(positions, ambiguous=ambiguous)
    if has_pos_list:
        return PosListEncoding(pos_list, ambiguous=ambiguous)
    if has_coordinates:
        return CoordinatesEncoding(coordinates, ambiguous=ambiguous)
    return EmptyEncoding()

class BuildingRecord(NamedTuple):
    """Ein Gebäude mit seinen LOD-Geometriesammlungen.

    Attributes:
        building_id: gml:id des Gebäudes
        lod_geometries: LOD-Schlüssel -> geordnete Liste von Ringen
    """
    building_id: str
    lod_geometries: Dict[str, List[RingEncoding]]

    def rings(self, lod: str) -> List[RingEncoding]:
        """Gibt die Ringe einer LOD-Sammlung zurück (leer wenn nicht vorhanden)."""
        return self.lod_geometries.get(lod) or []
