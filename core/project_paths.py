"""
Pfad-Hilfsfunktionen für Konfiguration und Ausgaben.
"""

from pathlib import Path
from typing import Optional

ROOT_DIR = Path(__file__).resolve().parent.parent

def get_output_path(category: Optional[str] = None) -> Path:
    """Gibt den Pfad zum Ausgabeverzeichnis zurück.

    Args:
        category (str, optional): Unterkategorie im Ausgabeverzeichnis

    Returns:
        Path: Pfad zum Ausgabeverzeichnis
    """
    output_dir = ROOT_DIR / "outputs"

    if category:
        output_dir = output_dir / category

    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir

def get_config_path(filename: str = "global.yml") -> Path:
    """Gibt den Pfad zur Konfigurationsdatei zurück.

    Args:
        filename (str, optional): Name der Konfigurationsdatei

    Returns:
        Path: Pfad zur Konfigurationsdatei
    """
    return ROOT_DIR / "config" / filename
