"""
Reprojektion von WKT-MultiPolygonen in geografische Koordinaten (WGS84).

Der Reprojector arbeitet rein auf dem WKT-Text: Ringe werden aus dem Text
gelesen, jedes Koordinatenpaar wird transformiert und das MultiPolygon wird
mit fester Nachkommastellenzahl neu geschrieben. Ring- und Punktanzahl
bleiben dabei erhalten.
"""

import logging
import math
import re
from typing import Callable, List, Optional, Sequence, Tuple, Union

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from .exceptions import CoordinateParseError, ReferenceSystemError, ReprojectionError

logger = logging.getLogger(__name__)

TARGET_CRS = "EPSG:4326"
DEFAULT_PRECISION = 6

# Ein Polygon "((...))", auch über mehrere Zeilen
RING_PATTERN = re.compile(r"\(\((.*?)\)\)", re.DOTALL)

PointTransform = Callable[[float, float], Tuple[float, float]]

def normalize_identifier(identifier: Union[str, int]) -> str:
    """Bringt einen KBS-Bezeichner in eine für pyproj lesbare Form.

    Reine Zahlen werden als EPSG-Code interpretiert, ``+init=epsg:XXXX``
    wird auf ``epsg:XXXX`` gekürzt.

    Examples:
        >>> normalize_identifier("31256")
        'EPSG:31256'
        >>> normalize_identifier("+init=epsg:25832")
        'epsg:25832'
    """
    text = str(identifier).strip()
    if text.isdigit():
        return f"EPSG:{text}"
    if text.lower().startswith("+init="):
        return text[len("+init="):]
    return text

class ReferenceSystem:
    """Unveränderliches Koordinatenreferenzsystem.

    Wird einmal erzeugt und danach nur noch gelesen, kann also zwischen
    beliebig vielen Reprojektoren geteilt werden.
    """

    __slots__ = ('identifier', 'crs')

    def __init__(self, identifier: Union[str, int]):
        """Erzeugt das KBS aus einem Registry-Bezeichner.

        Args:
            identifier: z.B. "31256", "EPSG:31256" oder ein PROJ-String

        Raises:
            ReferenceSystemError: Bei unbekanntem oder ungültigem Bezeichner
        """
        if identifier is None or not str(identifier).strip():
            raise ReferenceSystemError(str(identifier), "kein Bezeichner angegeben")

        normalized = normalize_identifier(identifier)
        try:
            crs = CRS.from_user_input(normalized)
        except CRSError as e:
            raise ReferenceSystemError(str(identifier), str(e)) from e

        object.__setattr__(self, 'identifier', normalized)
        object.__setattr__(self, 'crs', crs)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} ist unveränderlich")

    @classmethod
    def wgs84(cls) -> 'ReferenceSystem':
        """Das feste Ziel-KBS (Länge/Breite in Grad)."""
        return cls(TARGET_CRS)

    @property
    def is_geographic(self) -> bool:
        return self.crs.is_geographic

    def __eq__(self, other):
        return isinstance(other, ReferenceSystem) and self.crs == other.crs

    def __hash__(self):
        return hash(self.crs.to_wkt())

    def __repr__(self):
        return f"ReferenceSystem({self.identifier!r})"

def parse_multipolygon(wkt: str, building_id: Optional[str] = None) -> List[List[Tuple[str, str]]]:
    """Liest die Ringe eines WKT-MultiPolygons als Text-Koordinatenpaare.

    Zwischen den Ringen sind nur Kommas und Leerraum erlaubt, jeder andere
    Rest führt zu einem Fehler statt stillschweigend verworfen zu werden.

    Args:
        wkt: WKT-MultiPolygon (auch mehrzeilig, ``MULTIPOLYGON EMPTY``)
        building_id: Optionale Gebäude-ID für Fehlermeldungen

    Returns:
        Liste der Ringe, jeder Ring als Liste von (x, y)-Texten.
        Ein leerer Ring ``(())`` ergibt eine leere Liste.

    Raises:
        ReprojectionError: Wenn der Text kein MULTIPOLYGON ist oder Teile
            keinem Ring zugeordnet werden können
        CoordinateParseError: Wenn ein Paar nicht aus genau zwei Feldern besteht
    """
    text = wkt.strip()
    if not text.upper().startswith("MULTIPOLYGON"):
        raise ReprojectionError("Keine MULTIPOLYGON-Geometrie", building_id, text[:40])

    body = text[len("MULTIPOLYGON"):].strip()
    if body.upper() == "EMPTY":
        return []
    if not (body.startswith("(") and body.endswith(")")):
        raise ReprojectionError("MULTIPOLYGON ohne äußere Klammern", building_id, body[:40])
    inner = body[1:-1]

    leftover = RING_PATTERN.sub(",", inner).strip(", \t\r\n")
    if leftover.replace(",", "").strip():
        raise ReprojectionError("Text außerhalb der Ringe", building_id, leftover)

    rings = []
    for match in RING_PATTERN.finditer(inner):
        ring_text = match.group(1).strip("() \t\r\n")
        if not ring_text:
            rings.append([])
            continue

        ring = []
        for token in ring_text.split(","):
            fields = token.split()
            if len(fields) != 2:
                raise CoordinateParseError(
                    "Koordinatenpaar muss genau zwei Werte enthalten",
                    building_id, " ".join(fields)
                )
            ring.append((fields[0], fields[1]))
        rings.append(ring)

    return rings

def format_multipolygon(rings: Sequence[Sequence[Tuple[str, str]]]) -> str:
    """Schreibt Ringe aus Text-Koordinatenpaaren als WKT-MultiPolygon."""
    polygons = []
    for ring in rings:
        polygons.append("((" + ", ".join(f"{x} {y}" for x, y in ring) + "))")
    return "MULTIPOLYGON(" + ", ".join(polygons) + ")"

class Reprojector:
    """Transformiert WKT-MultiPolygone vom Quell-KBS nach WGS84."""

    def __init__(self,
                 source: Union[ReferenceSystem, str, int, None],
                 target: Optional[ReferenceSystem] = None,
                 transform: Optional[PointTransform] = None,
                 precision: int = DEFAULT_PRECISION):
        """Initialisiert den Reprojector.

        Args:
            source: Quell-KBS oder dessen Bezeichner (nur ohne ``transform`` Pflicht)
            target: Ziel-KBS, Standard ist WGS84
            transform: Optionale Punkttransformation (x, y) -> (lon, lat) in Grad,
                ersetzt den pyproj-Transformer
            precision: Anzahl der Nachkommastellen in der Ausgabe

        Raises:
            ReferenceSystemError: Bei ungültigem Quell- oder Ziel-KBS
        """
        self.logger = logging.getLogger(__name__)
        self.precision = precision

        if source is not None and not isinstance(source, ReferenceSystem):
            source = ReferenceSystem(source)
        self.source = source
        self.target = target or ReferenceSystem.wgs84()

        if not self.target.is_geographic:
            raise ReferenceSystemError(self.target.identifier, "Ziel-KBS muss geografisch sein")

        if transform is not None:
            self._transform = transform
        elif self.source is None:
            raise ReferenceSystemError("None", "kein Quell-KBS angegeben")
        else:
            transformer = Transformer.from_crs(self.source.crs, self.target.crs, always_xy=True)
            self._transform = lambda x, y: transformer.transform(x, y, errcheck=True)
            self.logger.info(f"✅ Transformation {self.source.identifier} -> {self.target.identifier} bereit")

    def transform_point(self, x: float, y: float) -> Tuple[float, float]:
        """Transformiert ein Koordinatenpaar in Länge/Breite (Grad)."""
        return self._transform(x, y)

    def format_value(self, value: float) -> str:
        text = f"{value:.{self.precision}f}"
        # -0.000000 als 0.000000 ausgeben
        if text.startswith("-") and not text.strip("-0."):
            text = text[1:]
        return text

    def reproject_wkt(self, wkt: str, building_id: Optional[str] = None) -> str:
        """Reprojiziert alle Koordinaten eines WKT-MultiPolygons.

        Ein Fehler in einem einzigen Koordinatenpaar bricht die gesamte
        Geometrie ab, es werden keine Teilergebnisse geliefert.

        Args:
            wkt: WKT-MultiPolygon im Quell-KBS
            building_id: Optionale Gebäude-ID für Fehlermeldungen

        Returns:
            str: WKT-MultiPolygon in Länge/Breite mit fester Genauigkeit

        Raises:
            CoordinateParseError: Bei nicht-numerischen Koordinaten
            ReprojectionError: Wenn die Transformation fehlschlägt
        """
        rings = parse_multipolygon(wkt, building_id)

        transformed_rings = []
        for ring in rings:
            transformed = []
            for x_text, y_text in ring:
                token = f"{x_text} {y_text}"
                try:
                    x, y = float(x_text), float(y_text)
                except ValueError as e:
                    raise CoordinateParseError("Koordinate ist keine Zahl", building_id, token) from e

                try:
                    lon, lat = self.transform_point(x, y)
                except ProjError as e:
                    raise ReprojectionError(f"Transformation fehlgeschlagen: {e}", building_id, token) from e

                if not (math.isfinite(lon) and math.isfinite(lat)):
                    raise ReprojectionError("Transformation liefert keinen endlichen Wert", building_id, token)

                transformed.append((self.format_value(lon), self.format_value(lat)))
            transformed_rings.append(transformed)

        return format_multipolygon(transformed_rings)
