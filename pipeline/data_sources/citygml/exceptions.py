"""
Fehlerklassen der CityGML-Konvertierung.
"""

from typing import Optional

class CityGMLError(Exception):
    """Basisklasse aller Fehler der CityGML-Konvertierung."""
    pass

class CityGMLConfigError(CityGMLError):
    """Fehler bei der CityGML-Konfiguration."""
    pass

class CityGMLReadError(CityGMLError):
    """Fehler beim Lesen eines CityGML-Dokuments."""
    pass

class ReferenceSystemError(CityGMLError):
    """Unbekannter oder ungültiger Koordinatenreferenzsystem-Bezeichner."""

    def __init__(self, identifier: str, reason: str = ""):
        self.identifier = identifier
        self.reason = reason
        message = f"Ungültiges Koordinatenreferenzsystem '{identifier}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

class ReprojectionError(CityGMLError):
    """Fehler bei der Transformation einer Gebäudegeometrie.

    Attributes:
        building_id: ID des betroffenen Gebäudes (falls bekannt)
        token: Der Koordinaten-Token, der den Fehler ausgelöst hat
    """

    def __init__(self, message: str, building_id: Optional[str] = None, token: Optional[str] = None):
        self.building_id = building_id
        self.token = token
        details = []
        if building_id is not None:
            details.append(f"Gebäude '{building_id}'")
        if token is not None:
            details.append(f"Token '{token}'")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)

class CoordinateParseError(ReprojectionError):
    """Ein Koordinatenpaar besteht nicht aus zwei Zahlen."""
    pass
