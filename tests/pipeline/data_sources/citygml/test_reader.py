"""
Tests für den CityGML-Leser.
"""

from io import BytesIO

import pytest
from lxml import etree

from pipeline.data_sources.citygml.exceptions import CityGMLReadError
from pipeline.data_sources.citygml.models import (
    CoordinatesEncoding,
    PosEncoding,
    PosListEncoding,
)
from pipeline.data_sources.citygml.reader import CityGMLReader, find_path, ring_from_element

GML = "http://www.opengis.net/gml"

CITYGML_1_0 = b"""<?xml version="1.0" encoding="UTF-8"?>
<CityModel xmlns="http://www.opengis.net/citygml/1.0"
           xmlns:bldg="http://www.opengis.net/citygml/building/1.0"
           xmlns:gml="http://www.opengis.net/gml">
    <cityObjectMember>
        <bldg:Building gml:id="OLD_1">
            <bldg:lod0FootPrint>
                <gml:MultiSurface>
                    <gml:surfaceMember>
                        <gml:Polygon>
                            <gml:exterior>
                                <gml:LinearRing>
                                    <gml:coordinates>10,20 30,40 10,20</gml:coordinates>
                                </gml:LinearRing>
                            </gml:exterior>
                        </gml:Polygon>
                    </gml:surfaceMember>
                </gml:MultiSurface>
            </bldg:lod0FootPrint>
        </bldg:Building>
    </cityObjectMember>
</CityModel>
"""

@pytest.fixture
def reader():
    return CityGMLReader()

def test_reads_all_buildings_in_order(reader, sample_citygml_file):
    """Test alle Gebäude werden in Dokumentreihenfolge gelesen."""
    records = list(reader.read_buildings(sample_citygml_file))
    assert [r.building_id for r in records] == ["B_LOD0", "B_LOD2", "B_COORDS", "B_EMPTY"]

def test_lod0_footprint(reader, sample_citygml_file):
    record = next(iter(reader.read_buildings(sample_citygml_file)))
    assert record.rings('lod0FootPrint') == [PosListEncoding("1.0 2.0 0.0 3.0 4.0 0.0 1.0 2.0 0.0")]
    assert len(record.rings('lod2MultiSurface')) == 1

def test_ground_surface_only(reader, sample_citygml_file):
    """Test nur GroundSurface-Ringe werden gelesen, RoofSurface nicht."""
    records = {r.building_id: r for r in reader.read_buildings(sample_citygml_file)}
    rings = records["B_LOD2"].rings('lod2MultiSurface')
    assert len(rings) == 2
    assert rings[0] == PosEncoding(["1.0   2.0 0.0", "3.0 4.0 0.0", "1.0 2.0 0.0"])
    assert isinstance(rings[1], PosListEncoding)
    assert records["B_LOD2"].rings('lod0FootPrint') == []

def test_legacy_coordinates(reader, sample_citygml_file):
    records = {r.building_id: r for r in reader.read_buildings(sample_citygml_file)}
    assert records["B_COORDS"].rings('lod1MultiSurface') == [CoordinatesEncoding("1.0,2.0 3.0,4.0")]

def test_building_without_geometry(reader, sample_citygml_file):
    records = {r.building_id: r for r in reader.read_buildings(sample_citygml_file)}
    assert all(not rings for rings in records["B_EMPTY"].lod_geometries.values())

def test_citygml_1_0_namespace(reader):
    """Test CityGML 1.0 Gebäude aus einem Dateiobjekt."""
    records = list(reader.read_buildings(BytesIO(CITYGML_1_0)))
    assert len(records) == 1
    assert records[0].building_id == "OLD_1"
    assert records[0].rings('lod0FootPrint') == [CoordinatesEncoding("10,20 30,40 10,20")]

def test_custom_namespace_only(sample_citygml_content):
    """Test ohne passenden Gebäude-Namespace wird nichts gefunden."""
    reader = CityGMLReader({'bldg': 'urn:other', 'bldg1': 'urn:other'})
    records = list(reader.read_buildings(BytesIO(sample_citygml_content.encode("utf-8"))))
    assert records == []

def test_missing_file(reader, tmp_path):
    with pytest.raises(CityGMLReadError):
        list(reader.read_buildings(tmp_path / "missing.gml"))

def test_invalid_xml(reader, tmp_path):
    broken = tmp_path / "broken.gml"
    broken.write_text("<CityModel><cityObjectMember></CityModel>", encoding="utf-8")
    with pytest.raises(CityGMLReadError):
        list(reader.read_buildings(broken))

def test_parse_single_element(reader):
    """Test Auswertung eines einzelnen Building-Elements."""
    building = etree.fromstring(
        b'<bldg:Building xmlns:bldg="http://www.opengis.net/citygml/building/2.0" '
        b'xmlns:gml="http://www.opengis.net/gml" gml:id="SINGLE"/>'
    )
    record = reader.parse_building(building)
    assert record.building_id == "SINGLE"
    assert set(record.lod_geometries) == {
        'lod0FootPrint', 'lod1MultiSurface', 'lod2MultiSurface', 'lod3MultiSurface', 'lod4MultiSurface'
    }

def test_id_fallback(reader):
    building = etree.fromstring(
        b'<bldg:Building xmlns:bldg="http://www.opengis.net/citygml/building/2.0" id="PLAIN"/>'
    )
    assert reader.building_id(building) == "PLAIN"

def test_ring_from_element_precedence():
    """Test pos hat Vorrang vor posList."""
    ring = etree.fromstring(
        f'<gml:LinearRing xmlns:gml="{GML}">'
        f'<gml:pos>1 2 3</gml:pos><gml:pos>4 5 6</gml:pos>'
        f'<gml:posList>7 8 9</gml:posList>'
        f'</gml:LinearRing>'.encode()
    )
    encoding = ring_from_element(ring)
    assert encoding == PosEncoding(["1 2 3", "4 5 6"], ambiguous=True)

def test_find_path_ignores_comments():
    root = etree.fromstring(f'<a xmlns:gml="{GML}"><!-- x --><gml:b><gml:c/></gml:b></a>'.encode())
    assert len(find_path(root, ('b', 'c'))) == 1
    assert find_path(root, ('x', 'c')) == []

NESTED_BUILDINGS = b"""<?xml version="1.0" encoding="UTF-8"?>
<core:CityModel xmlns:core="http://www.opengis.net/citygml/2.0"
                xmlns:bldg="http://www.opengis.net/citygml/building/2.0"
                xmlns:gml="http://www.opengis.net/gml">
    <core:cityObjectMember>
        <bldg:Building gml:id="OUTER">
            <bldg:lod0FootPrint>
                <gml:MultiSurface>
                    <gml:surfaceMember>
                        <gml:Polygon>
                            <gml:exterior>
                                <gml:LinearRing>
                                    <gml:posList>1 1 0 2 2 0 1 1 0</gml:posList>
                                </gml:LinearRing>
                            </gml:exterior>
                        </gml:Polygon>
                    </gml:surfaceMember>
                </gml:MultiSurface>
            </bldg:lod0FootPrint>
            <bldg:consistsOfBuildingPart>
                <bldg:Building gml:id="INNER">
                    <bldg:lod0FootPrint>
                        <gml:MultiSurface>
                            <gml:surfaceMember>
                                <gml:Polygon>
                                    <gml:exterior>
                                        <gml:LinearRing>
                                            <gml:posList>7 7 0 8 8 0 7 7 0</gml:posList>
                                        </gml:LinearRing>
                                    </gml:exterior>
                                </gml:Polygon>
                            </gml:surfaceMember>
                        </gml:MultiSurface>
                    </bldg:lod0FootPrint>
                </bldg:Building>
            </bldg:consistsOfBuildingPart>
        </bldg:Building>
    </core:cityObjectMember>
    <core:cityObjectMember>
        <bldg:Building gml:id="NEXT"/>
    </core:cityObjectMember>
</core:CityModel>
"""

def test_nested_buildings_are_skipped(reader):
    """Test verschachtelte Gebäude werden nicht einzeln gelesen."""
    records = list(reader.read_buildings(BytesIO(NESTED_BUILDINGS)))
    assert [r.building_id for r in records] == ["OUTER", "NEXT"]
    assert records[0].rings('lod0FootPrint') == [PosListEncoding("1 1 0 2 2 0 1 1 0")]
    assert all(not rings for lod, rings in records[0].lod_geometries.items() if lod != 'lod0FootPrint')
