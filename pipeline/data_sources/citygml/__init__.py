"""
CityGML-Paket für die Konvertierung von Gebäuden in WKT.
"""

from .exceptions import (
    CityGMLError,
    CityGMLConfigError,
    CityGMLReadError,
    CoordinateParseError,
    ReferenceSystemError,
    ReprojectionError,
)
from .models import (
    BuildingRecord,
    CoordinatesEncoding,
    EmptyEncoding,
    LOD_PRIORITY,
    PosEncoding,
    PosListEncoding,
    RingEncoding,
    ring_from_fields,
)
from .geometry import building_to_wkt, encode_building, encode_multipolygon, encode_ring, select_geometry
from .reprojection import ReferenceSystem, Reprojector, TARGET_CRS
from .reader import CityGMLReader
from .config import CityGMLConfig
from .converter import BuildingConverter, ConversionResult, FailedBuilding

__all__ = [
    'CityGMLError',
    'CityGMLConfigError',
    'CityGMLReadError',
    'CoordinateParseError',
    'ReferenceSystemError',
    'ReprojectionError',
    'BuildingRecord',
    'CoordinatesEncoding',
    'EmptyEncoding',
    'LOD_PRIORITY',
    'PosEncoding',
    'PosListEncoding',
    'RingEncoding',
    'ring_from_fields',
    'building_to_wkt',
    'encode_building',
    'encode_multipolygon',
    'encode_ring',
    'select_geometry',
    'ReferenceSystem',
    'Reprojector',
    'TARGET_CRS',
    'CityGMLReader',
    'CityGMLConfig',
    'BuildingConverter',
    'ConversionResult',
    'FailedBuilding',
]
