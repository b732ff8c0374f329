"""
Konfigurationsmanager-Modul für die Konvertierung.

Dieses Modul stellt Funktionen zum Laden und Validieren von
YAML-Konfigurationsdateien bereit.
"""

import logging
from pathlib import Path
from typing import Dict, Any, NamedTuple, Union, Optional, List

import yaml

from core.logging_config import LoggedOperation
from core.project_paths import get_config_path

logger = logging.getLogger(__name__)

# Pflichtschlüssel je Sektion
REQUIRED_SECTIONS = {
    'citygml': ['namespaces'],
    'output': ['formats'],
}

SUPPORTED_FORMATS = ('geojson', 'gpkg', 'csv')

class ValidationResult(NamedTuple):
    """Ergebnis der Konfigurationsvalidierung."""
    is_valid: bool
    errors: List[str]

def load_config(config_file: Union[str, Path], load_referenced: bool = True) -> Dict[str, Any]:
    """Lädt eine YAML-Konfigurationsdatei und optional referenzierte Konfigurationen.

    Args:
        config_file: Pfad zur Konfigurationsdatei
        load_referenced: Wenn True, werden referenzierte Konfigurationen auch geladen

    Returns:
        Dictionary mit der Konfiguration

    Raises:
        FileNotFoundError: Wenn die Datei nicht existiert
        ValueError: Bei falscher Endung, leerer Datei oder YAML-Syntaxfehler
    """
    with LoggedOperation("Konfiguration laden", logger):
        config_path = Path(config_file)

        if not config_path.exists():
            raise FileNotFoundError(f"Konfigurationsdatei nicht gefunden: {config_path}")

        if config_path.suffix not in ('.yml', '.yaml'):
            raise ValueError(f"Ungültiges Dateiformat: {config_path.suffix}")

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"YAML Syntax-Fehler in {config_path}") from e

        if not config:
            raise ValueError(f"Leere Konfigurationsdatei: {config_path}")

        # Lade referenzierte Konfigurationen
        if load_referenced and 'config_files' in config:
            config['_referenced'] = {}
            for key, ref_path in config['config_files'].items():
                ref_config_path = Path(ref_path)
                if not ref_config_path.is_absolute():
                    ref_config_path = config_path.parent / ref_config_path
                config['_referenced'][key] = load_config(ref_config_path, load_referenced=False)

        logger.info(f"✅ Konfiguration geladen: {config_path}")
        return config

def load_default_config() -> Dict[str, Any]:
    """Lädt die mitgelieferte global.yml."""
    return load_config(get_config_path("global.yml"))

def get_module_config(global_config: Dict[str, Any], module_name: str) -> Optional[Dict[str, Any]]:
    """Holt die Konfiguration für ein spezifisches Modul.

    Args:
        global_config: Globale Konfiguration
        module_name: Name des Moduls (z.B. 'citygml', 'neo4j', 'output')

    Returns:
        Modulspezifische Konfiguration oder None
    """
    # Referenzierte Konfigurationen haben Vorrang
    referenced = global_config.get('_referenced', {})
    if module_name in referenced:
        return referenced[module_name]

    return global_config.get(module_name)

def validate_config(config: Dict[str, Any]) -> ValidationResult:
    """Validiert die Konvertierungs-Konfiguration.

    Fehlende Sektionen sind erlaubt (es gelten die Standardwerte), vorhandene
    Sektionen müssen aber vollständig und typrichtig sein.

    Args:
        config: Zu prüfende Konfiguration

    Returns:
        ValidationResult mit allen gefundenen Fehlern
    """
    errors = []

    if not isinstance(config, dict):
        return ValidationResult(False, ["Konfiguration muss ein Dictionary sein"])

    for section, keys in REQUIRED_SECTIONS.items():
        section_config = get_module_config(config, section)
        if section_config is None:
            continue
        if not isinstance(section_config, dict):
            errors.append(f"Sektion '{section}' muss ein Dictionary sein")
            continue
        for key in keys:
            if key not in section_config:
                errors.append(f"Pflichtfeld '{section}.{key}' fehlt")

    citygml_config = get_module_config(config, 'citygml') or {}
    if isinstance(citygml_config, dict):
        if 'namespaces' in citygml_config and not isinstance(citygml_config['namespaces'], dict):
            errors.append("'citygml.namespaces' muss ein Dictionary sein")
        precision = citygml_config.get('precision', 6)
        if not isinstance(precision, int) or isinstance(precision, bool) or precision < 0:
            errors.append(f"Ungültige Genauigkeit: {precision}")

    output_config = get_module_config(config, 'output') or {}
    if isinstance(output_config, dict):
        formats = output_config.get('formats', [])
        if not isinstance(formats, list):
            errors.append("'output.formats' muss eine Liste sein")
        else:
            for fmt in formats:
                if fmt not in SUPPORTED_FORMATS:
                    errors.append(f"Nicht unterstütztes Ausgabeformat: {fmt}")

    for error in errors:
        logger.warning(f"⚠️ {error}")

    return ValidationResult(not errors, errors)
