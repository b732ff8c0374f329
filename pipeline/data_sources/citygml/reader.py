"""
Streaming-Leser für CityGML-Dokumente.

Das Dokument wird mit ``lxml.etree.iterparse`` gelesen; jedes
``bldg:Building`` wird nach dem Schließen ausgewertet und danach aus dem
Baum entfernt, sodass auch große Kacheln mit konstantem Speicher gelesen
werden können.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from lxml import etree

from .exceptions import CityGMLReadError
from .models import BuildingRecord, LOD_PRIORITY, RingEncoding, ring_from_fields

DEFAULT_NAMESPACES = {
    'gml': 'http://www.opengis.net/gml',
    'bldg': 'http://www.opengis.net/citygml/building/2.0',
    'bldg1': 'http://www.opengis.net/citygml/building/1.0',
}

# Pfade zu den äußeren Ringen, relativ zum Gebäude (lokale Elementnamen)
SURFACE_PATH = ('MultiSurface', 'surfaceMember', 'Polygon', 'exterior', 'LinearRing')
LOD_PATHS = {
    'lod0FootPrint': ('lod0FootPrint',) + SURFACE_PATH,
    'lod1MultiSurface': ('boundedBy', 'GroundSurface', 'lod1MultiSurface') + SURFACE_PATH,
    'lod2MultiSurface': ('boundedBy', 'GroundSurface', 'lod2MultiSurface') + SURFACE_PATH,
    'lod3MultiSurface': ('boundedBy', 'GroundSurface', 'lod3MultiSurface') + SURFACE_PATH,
    'lod4MultiSurface': ('boundedBy', 'GroundSurface', 'lod4MultiSurface') + SURFACE_PATH,
}

def local_name(element: etree._Element) -> str:
    """Lokaler Elementname ohne Namespace."""
    return etree.QName(element).localname

def find_path(element: etree._Element, path) -> List[etree._Element]:
    """Folgt einer Kette lokaler Elementnamen und liefert alle Treffer in Dokumentreihenfolge."""
    current = [element]
    for name in path:
        current = [
            child for parent in current for child in parent
            if isinstance(child.tag, str) and local_name(child) == name
        ]
        if not current:
            break
    return current

def _child_texts(element: etree._Element, name: str) -> List[str]:
    return [
        child.text or "" for child in element
        if isinstance(child.tag, str) and local_name(child) == name
    ]

def ring_from_element(linear_ring: etree._Element) -> RingEncoding:
    """Erzeugt die Ringkodierung aus einem gml:LinearRing.

    Args:
        linear_ring: XML-Element des LinearRing

    Returns:
        RingEncoding: Kodierung nach Vorrang pos > posList > coordinates
    """
    pos_lists = _child_texts(linear_ring, 'posList')
    coordinates = _child_texts(linear_ring, 'coordinates')
    return ring_from_fields(
        pos=_child_texts(linear_ring, 'pos'),
        pos_list=pos_lists[0] if pos_lists else None,
        coordinates=coordinates[0] if coordinates else None,
    )

class CityGMLReader:
    """Liest Gebäude aus einem CityGML-Dokument."""

    def __init__(self, namespaces: Optional[Dict[str, str]] = None):
        """Initialisiert den Leser.

        Args:
            namespaces: XML-Namespaces; alle Werte mit Schlüssel ``bldg*``
                gelten als Gebäude-Namespaces
        """
        self.logger = logging.getLogger(__name__)
        self.namespaces = dict(DEFAULT_NAMESPACES)
        if namespaces:
            self.namespaces.update(namespaces)

        self.building_tags = sorted({
            f"{{{uri}}}Building" for prefix, uri in self.namespaces.items()
            if prefix.startswith('bldg')
        })

    def building_id(self, building: etree._Element) -> str:
        """Liest die gml:id eines Gebäudes (Fallback: id ohne Namespace)."""
        gml_id = building.get(f"{{{self.namespaces['gml']}}}id")
        if gml_id is None:
            gml_id = building.get('id', '')
        return gml_id

    def parse_building(self, building: etree._Element) -> BuildingRecord:
        """Wandelt ein Building-Element in einen BuildingRecord.

        Args:
            building: XML-Element des Gebäudes

        Returns:
            BuildingRecord: ID und alle LOD-Sammlungen
        """
        lod_geometries = {}
        for lod in LOD_PRIORITY:
            lod_geometries[lod] = [
                ring_from_element(ring) for ring in find_path(building, LOD_PATHS[lod])
            ]
        return BuildingRecord(self.building_id(building), lod_geometries)

    def read_buildings(self, source: Union[str, Path]) -> Iterator[BuildingRecord]:
        """Liest alle Gebäude eines Dokuments nacheinander.

        Args:
            source: Pfad zur CityGML-Datei (oder ein Dateiobjekt)

        Yields:
            BuildingRecord: Ein Gebäude nach dem anderen

        Raises:
            CityGMLReadError: Bei fehlender Datei oder ungültigem XML
        """
        if isinstance(source, (str, Path)):
            if not Path(source).exists():
                raise CityGMLReadError(f"CityGML-Datei nicht gefunden: {source}")
            source = str(source)
            self.logger.info(f"🔄 Lese CityGML-Datei: {source}")

        count = 0
        try:
            context = etree.iterparse(
                source, events=('end',), tag=self.building_tags,
                resolve_entities=False, huge_tree=True
            )
            for _, element in context:
                # Verschachtelte Gebäude werden übersprungen
                if self._has_building_ancestor(element):
                    continue
                yield self.parse_building(element)
                count += 1
                element.clear()
                while element.getprevious() is not None:
                    del element.getparent()[0]
        except etree.XMLSyntaxError as e:
            raise CityGMLReadError(f"Ungültiges CityGML-Dokument: {e}") from e

        self.logger.info(f"✅ {count} Gebäude gelesen")

    def _has_building_ancestor(self, element: etree._Element) -> bool:
        return any(ancestor.tag in self.building_tags for ancestor in element.iterancestors())
