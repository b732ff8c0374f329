"""
CLI-Schnittstelle für die Konvertierung von CityGML-Gebäuden in WKT (WGS84).

Beispiel:
    python -m cli.run_citygml --path data/099082.gml --epsg 31256
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from core.config_manager import get_module_config, load_config, load_default_config, validate_config
from core.logging_config import setup_logging
from core.project_paths import get_output_path
from pipeline.data_sources.citygml import (
    BuildingConverter,
    CityGMLConfig,
    CityGMLConfigError,
    CityGMLError,
    CityGMLReader,
    ReferenceSystem,
    ReferenceSystemError,
    Reprojector,
)
from pipeline.output.neo4j_writer import Neo4jWriter, Neo4jWriterError
from pipeline.output.writer import write_buildings, write_report

logger = logging.getLogger(__name__)

class ConversionRunError(Exception):
    """Fataler Fehler eines Konvertierungslaufs."""
    def __init__(self, message: str, details: Optional[Exception] = None):
        self.message = message
        self.details = details
        super().__init__(f"{message}" + (f": {str(details)}" if details else ""))

def parse_formats(formats: Optional[str], output_config: Dict[str, Any]) -> List[str]:
    """Ausgabeformate aus ``--formats`` oder der Sektion ``output``."""
    if formats is not None:
        return [fmt.strip() for fmt in formats.split(',') if fmt.strip()]
    return output_config.get('formats', [])

def load_run_config(config: Optional[str]) -> Dict[str, Any]:
    """Lädt und validiert die Konfiguration des Laufs.

    Raises:
        ConversionRunError: Wenn die Konfiguration fehlt oder ungültig ist
    """
    try:
        run_config = load_config(config) if config else load_default_config()
    except (FileNotFoundError, ValueError) as e:
        raise ConversionRunError("Konfiguration konnte nicht geladen werden", e)

    validation = validate_config(run_config)
    if not validation.is_valid:
        raise ConversionRunError(f"Ungültige Konfiguration: {'; '.join(validation.errors)}")
    return run_config

def create_reprojector(epsg: Optional[str], citygml_config: CityGMLConfig) -> Reprojector:
    """Erstellt den Reprojector einmalig vor dem ersten Gebäude.

    Raises:
        ConversionRunError: Wenn kein oder ein ungültiges Quell-KBS angegeben ist
    """
    epsg = epsg or citygml_config.source_crs
    if not epsg:
        raise ConversionRunError("Kein Quell-KBS angegeben (--epsg oder citygml.source_crs)")

    try:
        return Reprojector(
            epsg,
            target=ReferenceSystem(citygml_config.target_crs),
            precision=citygml_config.precision,
        )
    except ReferenceSystemError as e:
        raise ConversionRunError("Ungültiges Koordinatenreferenzsystem", e)

@click.command()
@click.option('--path', '-p', required=True, help='Pfad zur CityGML-Datei')
@click.option('--epsg', '-e', default=None, help='EPSG-Code des Quell-KBS (überschreibt citygml.source_crs)')
@click.option('--config', '-c', default=None, help='Pfad zur Konfigurationsdatei (Standard: config/global.yml)')
@click.option('--output-dir', '-o', default=None, help='Ausgabeverzeichnis')
@click.option('--formats', '-f', default=None, help='Kommagetrennte Ausgabeformate, z.B. geojson,gpkg,csv')
@click.option('--neo4j', is_flag=True, help='Gebäude zusätzlich in Neo4j schreiben')
@click.option('--fail-fast', is_flag=True, help='Beim ersten fehlerhaften Gebäude abbrechen')
@click.option('--verbose', '-v', is_flag=True, help='Debug-Ausgaben aktivieren')
def run_citygml(path: str, epsg: Optional[str], config: Optional[str], output_dir: Optional[str],
                formats: Optional[str], neo4j: bool, fail_fast: bool, verbose: bool):
    """Konvertiert CityGML-Gebäude in WKT-MultiPolygone (WGS84)."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        # Konfiguration und KBS vor dem ersten Gebäude prüfen
        run_config = load_run_config(config)
        try:
            citygml_config = CityGMLConfig(get_module_config(run_config, 'citygml') or {}).require_valid()
        except CityGMLConfigError as e:
            raise ConversionRunError("Ungültige CityGML-Konfiguration", e)
        reprojector = create_reprojector(epsg, citygml_config)

        output_config = get_module_config(run_config, 'output') or {}
        neo4j_config = get_module_config(run_config, 'neo4j') or {}

        try:
            sink = None
            if neo4j or neo4j_config.get('enabled', False):
                writer = Neo4jWriter.from_config(neo4j_config)
                writer.ensure_layer()
                sink = writer.write_building

            logger.info(f"📂 Eingabedatei: {path}")
            reader = CityGMLReader(citygml_config.namespaces)
            converter = BuildingConverter(reprojector, fail_fast=fail_fast or citygml_config.fail_fast)
            result = converter.convert_all(reader.read_buildings(path), sink=sink)
        except (CityGMLError, Neo4jWriterError) as e:
            raise ConversionRunError("Konvertierung abgebrochen", e)

        for failed in result.failed:
            logger.info(f"⚠️ Fehlgeschlagen: {failed.building_id}: {failed.reason}")

        output_dir = output_dir or output_config.get('output_dir')
        output_path = Path(output_dir) if output_dir else get_output_path('citygml')

        output_formats = parse_formats(formats, output_config)
        if result.buildings and output_formats:
            write_buildings(result.buildings, output_path, output_formats)
        write_report(result, output_path)

        if result.error:
            raise ConversionRunError(f"Lesen des Dokuments abgebrochen, Teilergebnis gespeichert: {result.error}")

        logger.info(f"✅ {len(result.buildings)} Gebäude konvertiert, {len(result.failed)} fehlgeschlagen")

    except ConversionRunError as e:
        logger.error(f"❌ Konvertierung mit Fehlern beendet: {e.message}")
        if e.details:
            logger.error(f"Details: {str(e.details)}")
        raise click.Abort()

if __name__ == "__main__":
    run_citygml()
