"""Export of built geometry."""

from .geometry_json import SCHEMA_ID, geometry_from_json, geometry_to_json
from .stl import write_stl

__all__ = ['SCHEMA_ID', 'geometry_to_json', 'geometry_from_json', 'write_stl']
