"""
CityGML-Konfigurationsklasse.
"""

import logging
from typing import Dict, Any, Optional

from core.config_manager import load_config
from .exceptions import CityGMLConfigError
from .reader import DEFAULT_NAMESPACES
from .reprojection import DEFAULT_PRECISION, TARGET_CRS

class CityGMLConfig:
    """Konfigurationsklasse für die CityGML-Konvertierung."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        """Initialisiert die CityGML-Konfiguration.

        Args:
            config: Optional[Dict] - Direkte Konfiguration (Sektion ``citygml``)
            config_path: Optional[str] - Pfad zu einer YAML-Datei mit Sektion ``citygml``
        """
        self.logger = logging.getLogger(__name__)

        if config is not None:
            self.config = config
            self.logger.info("✅ CityGML-Konfiguration aus Dictionary geladen")
        elif config_path is not None:
            self.config = load_config(config_path).get('citygml', {})
            self.logger.info(f"✅ CityGML-Konfiguration geladen von: {config_path}")
        else:
            self.config = {}
            self.logger.warning("⚠️ Keine Konfiguration übergeben, verwende Standardwerte")

    def validate(self) -> bool:
        """Validiert die Konfiguration.

        Returns:
            bool: True wenn die Konfiguration gültig ist
        """
        if not isinstance(self.config, dict):
            self.logger.warning("⚠️ CityGML-Konfiguration muss ein Dictionary sein")
            return False

        if not isinstance(self.config.get('namespaces') or {}, dict):
            self.logger.warning("⚠️ Ungültige Namespace-Konfiguration")
            return False

        precision = self.config.get('precision', DEFAULT_PRECISION)
        if not isinstance(precision, int) or isinstance(precision, bool) or precision < 0:
            self.logger.warning(f"⚠️ Ungültige Genauigkeit: {precision}")
            return False

        return True

    def require_valid(self) -> 'CityGMLConfig':
        """Wirft CityGMLConfigError, wenn die Konfiguration ungültig ist."""
        if not self.validate():
            raise CityGMLConfigError("Ungültige CityGML-Konfiguration")
        return self

    @property
    def namespaces(self) -> Dict[str, str]:
        """Gibt die XML-Namespaces zurück (Standardwerte ergänzt)."""
        namespaces = dict(DEFAULT_NAMESPACES)
        namespaces.update(self.config.get('namespaces') or {})
        return namespaces

    @property
    def source_crs(self) -> Optional[str]:
        """Gibt das Quell-KBS zurück (None wenn nicht gesetzt)."""
        value = self.config.get('source_crs')
        return str(value) if value is not None else None

    @property
    def target_crs(self) -> str:
        """Gibt das Ziel-KBS zurück."""
        return self.config.get('target_crs') or TARGET_CRS

    @property
    def precision(self) -> int:
        """Gibt die Anzahl der Nachkommastellen zurück."""
        return self.config.get('precision', DEFAULT_PRECISION)

    @property
    def fail_fast(self) -> bool:
        """Gibt zurück ob der Lauf beim ersten Fehler abbricht."""
        return bool(self.config.get('fail_fast', False))
