"""
Gemeinsame Test-Fixtures und Konfiguration.
"""
import sys
from pathlib import Path

import pytest
import yaml

# Füge das Projekt-Root-Verzeichnis zum Python-Pfad hinzu
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.citygml_fixtures import (  # noqa: E402,F401
    citygml_namespaces,
    identity_reprojector,
    sample_citygml_content,
    sample_citygml_file,
)

@pytest.fixture
def sample_global_config():
    """Erstellt eine Beispiel-Global-Konfiguration für Tests."""
    return {
        'citygml': {
            'namespaces': {
                'gml': 'http://www.opengis.net/gml',
                'bldg': 'http://www.opengis.net/citygml/building/2.0'
            },
            'source_crs': '4326',
            'target_crs': 'EPSG:4326',
            'precision': 6,
            'fail_fast': False
        },
        'output': {
            'output_dir': None,
            'formats': ['csv']
        },
        'neo4j': {
            'enabled': False,
            'url': 'http://localhost:7474',
            'user': 'neo4j',
            'password': 'test',
            'database': 'neo4j',
            'layer': 'buildings',
            'label': 'Building'
        }
    }

@pytest.fixture
def sample_config_file(tmp_path, sample_global_config):
    """Schreibt die Beispiel-Konfiguration als YAML-Datei."""
    config_file = tmp_path / "global.yml"
    with open(config_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(sample_global_config, f)
    return config_file
