"""
Konvertierung von CityGML-Gebäuden in WKT (WGS84).
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from .exceptions import CityGMLReadError, ReprojectionError
from .geometry import EMPTY_MULTIPOLYGON, encode_building
from .models import BuildingRecord, LOD_PRIORITY
from .reprojection import Reprojector

BuildingSink = Callable[[Dict[str, Any]], Any]

class FailedBuilding(NamedTuple):
    """Ein Gebäude, dessen Konvertierung fehlgeschlagen ist."""
    building_id: str
    reason: str

class ConversionResult(NamedTuple):
    """Ergebnis eines Konvertierungslaufs."""
    buildings: List[Dict[str, Any]]
    failed: List[FailedBuilding]
    stats: Dict[str, Any]
    error: Optional[str] = None

def _empty_stats() -> Dict[str, Any]:
    return {
        'total': 0,
        'success': 0,
        'failed': 0,
        'empty': 0,
        'sink_errors': 0,
        'lod': {lod: 0 for lod in LOD_PRIORITY},
    }

class BuildingConverter:
    """Wandelt BuildingRecords in ``{'id', 'geometry', 'lod'}`` Dictionaries."""

    def __init__(self, reprojector: Reprojector, fail_fast: bool = False):
        """Initialisiert den Konverter.

        Args:
            reprojector: Einmal erzeugter Reprojector für den gesamten Lauf
            fail_fast: Wenn True, bricht der erste Gebäudefehler den Lauf ab
        """
        self.logger = logging.getLogger(__name__)
        self.reprojector = reprojector
        self.fail_fast = fail_fast

    def convert(self, record: BuildingRecord) -> Dict[str, Any]:
        """Konvertiert ein einzelnes Gebäude.

        Args:
            record: Das Gebäude

        Returns:
            Dict mit ``id``, ``geometry`` (WKT in WGS84) und ``lod``

        Raises:
            ReprojectionError: Wenn die Geometrie nicht transformiert werden kann
        """
        lod, wkt = encode_building(record)
        if wkt != EMPTY_MULTIPOLYGON:
            wkt = self.reprojector.reproject_wkt(wkt, building_id=record.building_id)

        return {
            'id': record.building_id,
            'geometry': wkt,
            'lod': lod,
        }

    def convert_all(self, records: Iterable[BuildingRecord],
                    sink: Optional[BuildingSink] = None) -> ConversionResult:
        """Konvertiert alle Gebäude nacheinander.

        Fehlgeschlagene Gebäude werden geloggt und gesammelt, der Lauf geht
        mit dem nächsten Gebäude weiter (außer bei ``fail_fast``).
        Fehler der Senke ändern das bereits berechnete WKT nicht. Bricht das
        Lesen des Dokuments ab, enthält das Ergebnis die bis dahin
        konvertierten Gebäude und den Lesefehler in ``error``.

        Args:
            records: Gebäude, z.B. aus ``CityGMLReader.read_buildings``
            sink: Optionale Funktion, die jedes konvertierte Gebäude erhält

        Returns:
            ConversionResult: Gebäude, Fehler und Statistiken
        """
        buildings = []
        failed = []
        stats = _empty_stats()

        error = None
        try:
            for record in records:
                self._convert_record(record, sink, buildings, failed, stats)
        except CityGMLReadError as e:
            # Bereits konvertierte Gebäude bleiben im Ergebnis
            self.logger.error(f"❌ Lesen nach {stats['total']} Gebäuden abgebrochen: {str(e)}")
            error = str(e)

        self._log_statistics(stats)
        return ConversionResult(buildings, failed, stats, error)

    def _convert_record(self, record: BuildingRecord, sink: Optional[BuildingSink],
                        buildings: List[Dict[str, Any]], failed: List[FailedBuilding],
                        stats: Dict[str, Any]) -> None:
        stats['total'] += 1
        try:
            building = self.convert(record)
        except ReprojectionError as e:
            self.logger.warning(f"⚠️ Gebäude {record.building_id} übersprungen: {str(e)}")
            failed.append(FailedBuilding(record.building_id, str(e)))
            stats['failed'] += 1
            if self.fail_fast:
                raise
            return

        stats['success'] += 1
        if building['lod'] is None:
            stats['empty'] += 1
        else:
            stats['lod'][building['lod']] += 1
        buildings.append(building)

        if sink is not None:
            try:
                sink(dict(building))
            except Exception as e:
                self.logger.error(f"❌ Fehler beim Speichern von Gebäude {record.building_id}: {str(e)}")
                stats['sink_errors'] += 1
                if self.fail_fast:
                    raise

    def _log_statistics(self, stats: Dict[str, Any]) -> None:
        """Loggt Verarbeitungsstatistiken.

        Args:
            stats: Dict[str, Any] - Statistiken
        """
        total = stats['total']
        self.logger.info("\n=== Verarbeitungsstatistiken ===")
        self.logger.info(f"Gesamt: {total} Gebäude")
        if not total:
            return

        self.logger.info(f"Erfolgreich: {stats['success']} ({stats['success']/total*100:.1f}%)")
        self.logger.info(f"Fehlgeschlagen: {stats['failed']} ({stats['failed']/total*100:.1f}%)")
        self.logger.info(f"Ohne Geometrie: {stats['empty']}")

        self.logger.info("\nLOD:")
        for lod, count in stats['lod'].items():
            self.logger.info(f"{lod}: {count}")

        if stats['sink_errors']:
            self.logger.warning(f"⚠️ Speicherfehler: {stats['sink_errors']}")
