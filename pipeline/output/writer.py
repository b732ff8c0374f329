# pipeline/output/writer.py

"""
Output-Writer für konvertierte Gebäude.

Dieses Modul stellt Funktionen zum Speichern der WKT-Gebäude als Dateien
(GeoJSON, GeoPackage, CSV) und des Verarbeitungsberichts bereit.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import geopandas as gpd
from shapely import wkt as shapely_wkt
from shapely.errors import ShapelyError

from core.project_paths import get_output_path
from pipeline.data_sources.citygml.reprojection import TARGET_CRS

logger = logging.getLogger(__name__)

DEFAULT_FORMATS = ['geojson', 'csv']

DRIVERS = {
    'geojson': 'GeoJSON',
    'gpkg': 'GPKG',
}

def _load_geometry(building_id: str, text: str):
    """Lädt WKT mit shapely; nicht darstellbare Geometrien ergeben None."""
    try:
        return shapely_wkt.loads(text)
    except ShapelyError as e:
        logger.debug(f"Geometrie von {building_id} nicht ladbar: {str(e)}")
        return None

def buildings_to_geodataframe(buildings: Sequence[Dict[str, Any]]) -> gpd.GeoDataFrame:
    """Erstellt einen GeoDataFrame aus konvertierten Gebäuden.

    Der Originaltext bleibt in der Spalte ``geometry_wkt`` erhalten, auch
    wenn shapely ihn nicht laden kann (leere oder entartete Ringe).

    Args:
        buildings: Dictionaries mit ``id``, ``geometry`` und ``lod``

    Returns:
        gpd.GeoDataFrame: Ein Gebäude pro Zeile in EPSG:4326
    """
    records = []
    geometries = []
    invalid = 0
    for building in buildings:
        geometry = _load_geometry(building['id'], building['geometry'])
        if geometry is None:
            invalid += 1
        records.append({
            'id': building['id'],
            'lod': building.get('lod'),
            'geometry_wkt': building['geometry'],
        })
        geometries.append(geometry)

    if invalid:
        logger.warning(f"⚠️ {invalid} Gebäude ohne darstellbare Geometrie")

    return gpd.GeoDataFrame(
        records,
        columns=['id', 'lod', 'geometry_wkt'],
        geometry=geometries,
        crs=TARGET_CRS,
    )

def write_buildings(buildings: Sequence[Dict[str, Any]],
                    output_dir: Optional[Union[str, Path]] = None,
                    output_formats: Optional[List[str]] = None,
                    name: str = "buildings") -> bool:
    """Speichert die Gebäude in den gewünschten Formaten.

    Args:
        buildings: Konvertierte Gebäude
        output_dir: Optionaler Ausgabepfad (verwendet sonst get_output_path())
        output_formats: Liste der Formate ('geojson', 'gpkg', 'csv')
        name: Dateiname ohne Endung

    Returns:
        bool: True wenn alle Formate erfolgreich gespeichert wurden
    """
    if output_formats is None:
        output_formats = DEFAULT_FORMATS

    output_dir = get_output_path('citygml') if output_dir is None else Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"📝 Speichere Daten in: {output_dir}")
    logger.info(f"📊 Ausgabeformate: {output_formats}")

    gdf = buildings_to_geodataframe(buildings)

    success = True
    for fmt in output_formats:
        output_path = output_dir / f"{name}.{fmt}"
        try:
            if fmt == 'csv':
                # Geometrie als WKT-Text wie berechnet
                gdf.drop(columns='geometry').rename(
                    columns={'geometry_wkt': 'geometry'}
                ).to_csv(output_path, index=False)
            elif fmt in DRIVERS:
                gdf.to_file(output_path, driver=DRIVERS[fmt])
            else:
                logger.error(f"❌ Nicht unterstütztes Format: {fmt}")
                success = False
                continue
            logger.info(f"✅ {name} als {fmt} gespeichert: {output_path}")
        except Exception as e:
            logger.error(f"❌ Fehler beim Speichern von {name} als {fmt}: {str(e)}")
            success = False

    return success

def write_report(result, output_dir: Optional[Union[str, Path]] = None) -> bool:
    """Speichert Statistiken und fehlgeschlagene Gebäude als JSON.

    Args:
        result: ConversionResult eines Konvertierungslaufs
        output_dir: Optionaler Ausgabepfad (verwendet sonst get_output_path())

    Returns:
        bool: True wenn der Bericht gespeichert wurde
    """
    output_dir = get_output_path('citygml') if output_dir is None else Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report = {
        'stats': result.stats,
        'failed': [failed._asdict() for failed in result.failed],
        'error': result.error,
    }

    output_path = output_dir / "report.json"
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        logger.info(f"✅ Bericht gespeichert: {output_path}")
        return True
    except OSError as e:
        logger.error(f"❌ Fehler beim Speichern des Berichts: {str(e)}")
        return False
