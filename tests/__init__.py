"""
Test-Suite für die CityGML → WKT Konvertierung.

Dieses Paket enthält Unit-Tests und Integrationstests für Einlesen,
Kodierung, Reprojektion und Ausgabe.
"""

import os
import sys

# Füge das Hauptverzeichnis zum Python-Pfad hinzu
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
