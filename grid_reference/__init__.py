"""
Military Grid Reference System encoding and decoding.
"""

from grid_reference.encoder import encode, format_mgrs
from grid_reference.decoder import decode, mgrs_to_utm, parse_mgrs
from grid_reference.letters import band_for_latitude

__all__ = [
    "encode",
    "format_mgrs",
    "decode",
    "mgrs_to_utm",
    "parse_mgrs",
    "band_for_latitude",
]
