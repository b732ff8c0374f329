"""
Neo4j-Ausgabe für konvertierte Gebäude.

Gebäude werden als Knoten mit ``id`` und ``geometry`` (WKT) über die
transaktionale HTTP-API von Neo4j angelegt und anschließend im räumlichen
Index des Neo4j-Spatial-Plugins registriert.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from pipeline.data_sources.citygml.geometry import EMPTY_MULTIPOLYGON

LABEL_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

CREATE_NODE_STATEMENT = """
MERGE (n:`{label}` {{id: $id}})
SET n.geometry = $geometry
RETURN n.id
"""

# Nur noch nicht indizierte Knoten, damit der Aufruf wiederholbar ist
ADD_SPATIAL_INDEX_STATEMENT = """
MATCH (n)
WHERE n.geometry IS NOT NULL AND n.id = $id AND coalesce(n.spatial_indexed, false) = false
WITH collect(n) AS nodes
CALL spatial.addNodes($layer, nodes) YIELD count
WITH nodes, count
UNWIND nodes AS n
SET n.spatial_indexed = true
RETURN count
"""

LIST_LAYERS_STATEMENT = "CALL spatial.layers() YIELD name RETURN name"
ADD_LAYER_STATEMENT = "CALL spatial.addWKTLayer($layer, 'geometry')"

class Neo4jWriterError(Exception):
    """Fehler bei der Kommunikation mit Neo4j."""
    pass

class Neo4jWriter:
    """Schreibt Gebäude über die HTTP-API in Neo4j."""

    def __init__(self, url: str, user: str, password: str,
                 database: str = "neo4j", layer: str = "buildings",
                 label: str = "Building", session: Optional[requests.Session] = None,
                 timeout: float = 30):
        """Initialisiert den Writer.

        Args:
            url: Basis-URL des Servers, z.B. http://localhost:7474
            user: Benutzername
            password: Passwort
            database: Name der Datenbank
            layer: Name des räumlichen Layers
            label: Standard-Label der Gebäudeknoten
            session: Optionale requests-Session
            timeout: Timeout pro Anfrage in Sekunden
        """
        self.logger = logging.getLogger(__name__)
        self.endpoint = f"{url.rstrip('/')}/db/{database}/tx/commit"
        self.layer = layer
        self.label = self._check_label(label)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (user, password)

    @classmethod
    def from_config(cls, config: Dict[str, Any], session: Optional[requests.Session] = None) -> 'Neo4jWriter':
        """Erstellt den Writer aus der ``neo4j`` Konfigurationssektion.

        Zugangsdaten aus der Umgebung (``NEO4J_URL``, ``NEO4J_USER``,
        ``NEO4J_PASSWORD``, auch aus einer .env Datei) haben Vorrang.
        """
        load_dotenv()
        return cls(
            url=os.getenv('NEO4J_URL') or config.get('url', 'http://localhost:7474'),
            user=os.getenv('NEO4J_USER') or config.get('user', 'neo4j'),
            password=os.getenv('NEO4J_PASSWORD') or config.get('password', ''),
            database=config.get('database', 'neo4j'),
            layer=config.get('layer', 'buildings'),
            label=config.get('label', 'Building'),
            session=session,
            timeout=config.get('timeout', 30),
        )

    @staticmethod
    def _check_label(label: str) -> str:
        if not label or not LABEL_PATTERN.match(label):
            raise Neo4jWriterError(f"Ungültiges Label: {label!r}")
        return label

    def run(self, statement: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Führt ein Cypher-Statement in einer eigenen Transaktion aus.

        Args:
            statement: Cypher-Statement
            parameters: Parameter des Statements

        Returns:
            List[Dict]: Ergebniszeilen als Dictionaries (Spaltenname -> Wert)

        Raises:
            Neo4jWriterError: Bei HTTP-Fehlern oder Fehlern im Ergebnis
        """
        payload = {'statements': [{'statement': statement, 'parameters': parameters or {}}]}
        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise Neo4jWriterError(f"Neo4j-Anfrage fehlgeschlagen: {str(e)}") from e
        except ValueError as e:
            raise Neo4jWriterError("Ungültige Antwort von Neo4j") from e

        errors = body.get('errors') or []
        if errors:
            messages = "; ".join(f"{err.get('code')}: {err.get('message')}" for err in errors)
            raise Neo4jWriterError(f"Neo4j-Fehler: {messages}")

        rows = []
        for result in body.get('results', []):
            columns = result.get('columns', [])
            for entry in result.get('data', []):
                rows.append(dict(zip(columns, entry.get('row', []))))
        return rows

    def create_node(self, building_id: str, geometry: str, label: Optional[str] = None) -> None:
        """Legt einen Gebäudeknoten an oder aktualisiert dessen Geometrie."""
        label = self._check_label(label) if label else self.label
        self.run(CREATE_NODE_STATEMENT.format(label=label), {'id': building_id, 'geometry': geometry})

    def add_spatial_index(self, building_id: str, layer: Optional[str] = None) -> int:
        """Registriert die Geometrie eines Knotens im räumlichen Index.

        Wiederholte Aufrufe für dieselbe ID fügen nichts erneut hinzu.

        Returns:
            int: Anzahl neu indizierter Knoten
        """
        rows = self.run(ADD_SPATIAL_INDEX_STATEMENT, {'id': building_id, 'layer': layer or self.layer})
        return rows[0]['count'] if rows else 0

    def ensure_layer(self, layer: Optional[str] = None) -> bool:
        """Legt den WKT-Layer an, falls er noch nicht existiert.

        Returns:
            bool: True wenn der Layer neu angelegt wurde
        """
        layer = layer or self.layer
        existing = {row.get('name') for row in self.run(LIST_LAYERS_STATEMENT)}
        if layer in existing:
            return False

        self.run(ADD_LAYER_STATEMENT, {'layer': layer})
        self.logger.info(f"✅ Räumlicher Layer angelegt: {layer}")
        return True

    def write_building(self, building: Dict[str, Any]) -> None:
        """Schreibt ein konvertiertes Gebäude (``id``, ``geometry``) und indiziert es.

        Gebäude ohne Geometrie werden angelegt, aber nicht indiziert.
        """
        self.create_node(building['id'], building['geometry'])
        if building['geometry'] == EMPTY_MULTIPOLYGON:
            self.logger.debug(f"Gebäude {building['id']} ohne Geometrie, kein Index")
            return
        self.add_spatial_index(building['id'])

    def __call__(self, building: Dict[str, Any]) -> None:
        self.write_building(building)
