"""
Tests für das CLI-Tool run_citygml.
"""

import json

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from cli.run_citygml import ConversionRunError, parse_formats, run_citygml

@pytest.fixture
def runner():
    return CliRunner()

def test_parse_formats():
    assert parse_formats("csv, gpkg,", {}) == ['csv', 'gpkg']
    assert parse_formats(None, {'formats': ['geojson']}) == ['geojson']
    assert parse_formats(None, {}) == []

def test_run_error_message():
    error = ConversionRunError("Lauf fehlgeschlagen", ValueError("kaputt"))
    assert str(error) == "Lauf fehlgeschlagen: kaputt"
    assert error.message == "Lauf fehlgeschlagen"

def test_path_is_required(runner):
    result = runner.invoke(run_citygml, [])
    assert result.exit_code == 2

def test_converts_file(runner, sample_citygml_file, tmp_path):
    """Test vollständiger Lauf mit WGS84 als Quell-KBS."""
    output_dir = tmp_path / "out"
    result = runner.invoke(run_citygml, [
        '--path', str(sample_citygml_file),
        '--epsg', '4326',
        '--output-dir', str(output_dir),
        '--formats', 'csv',
    ])
    assert result.exit_code == 0, result.output

    df = pd.read_csv(output_dir / "buildings.csv")
    assert list(df['id']) == ["B_LOD0", "B_LOD2", "B_COORDS", "B_EMPTY"]
    assert df['geometry'].iloc[0] == \
        "MULTIPOLYGON(((1.000000 2.000000, 3.000000 4.000000, 1.000000 2.000000)))"

    with open(output_dir / "report.json", encoding="utf-8") as f:
        report = json.load(f)
    assert report['stats']['success'] == 4
    assert report['failed'] == []

def test_with_config_file(runner, sample_citygml_file, sample_config_file, tmp_path):
    """Test Quell-KBS und Formate aus der Konfigurationsdatei."""
    output_dir = tmp_path / "out"
    result = runner.invoke(run_citygml, [
        '--path', str(sample_citygml_file),
        '--config', str(sample_config_file),
        '--output-dir', str(output_dir),
    ])
    assert result.exit_code == 0, result.output
    assert (output_dir / "buildings.csv").exists()
    assert not (output_dir / "buildings.geojson").exists()

def test_invalid_epsg(runner, sample_citygml_file, tmp_path):
    result = runner.invoke(run_citygml, [
        '--path', str(sample_citygml_file),
        '--epsg', '999999',
        '--output-dir', str(tmp_path),
    ])
    assert result.exit_code == 1
    assert not (tmp_path / "report.json").exists()

def test_missing_source_crs(runner, sample_citygml_file, tmp_path):
    """Test ohne --epsg und ohne source_crs in der Standardkonfiguration."""
    result = runner.invoke(run_citygml, ['--path', str(sample_citygml_file), '--output-dir', str(tmp_path)])
    assert result.exit_code == 1

def test_missing_file(runner, tmp_path):
    result = runner.invoke(run_citygml, [
        '--path', str(tmp_path / "missing.gml"),
        '--epsg', '4326',
        '--output-dir', str(tmp_path),
    ])
    assert result.exit_code == 1

def test_missing_config(runner, sample_citygml_file, tmp_path):
    result = runner.invoke(run_citygml, [
        '--path', str(sample_citygml_file),
        '--config', str(tmp_path / "missing.yml"),
        '--epsg', '4326',
    ])
    assert result.exit_code == 1

def test_invalid_config(runner, sample_citygml_file, sample_global_config, tmp_path):
    """Test ungültiges Ausgabeformat in der Konfiguration."""
    sample_global_config['output']['formats'] = ['shp']
    config_file = tmp_path / "invalid.yml"
    config_file.write_text(yaml.safe_dump(sample_global_config), encoding="utf-8")

    result = runner.invoke(run_citygml, [
        '--path', str(sample_citygml_file),
        '--config', str(config_file),
        '--output-dir', str(tmp_path),
    ])
    assert result.exit_code == 1

def test_truncated_file_writes_report(runner, sample_citygml_content, tmp_path):
    """Test abgebrochenes Dokument: Bericht wird geschrieben, Exit-Code 1."""
    truncated = tmp_path / "truncated.gml"
    cut = sample_citygml_content.index('<core:cityObjectMember>\n        <bldg:Building gml:id="B_LOD2">')
    truncated.write_text(sample_citygml_content[:cut], encoding="utf-8")
    output_dir = tmp_path / "out"

    result = runner.invoke(run_citygml, [
        '--path', str(truncated),
        '--epsg', '4326',
        '--output-dir', str(output_dir),
        '--formats', 'csv',
    ])
    assert result.exit_code == 1

    with open(output_dir / "report.json", encoding="utf-8") as f:
        report = json.load(f)
    assert report['error']
    assert report['stats']['failed'] == 0
