"""
Render Module
=============
Backend boundary and the PyMuPDF implementation.
"""

from pagepix.render.backend import EVENT_NAMES, ConversionRequest, RenderBackend
from pagepix.render.naming import build_output_dir, generate_filename, parse_page_range

__all__ = [
    "EVENT_NAMES",
    "ConversionRequest",
    "RenderBackend",
    "build_output_dir",
    "generate_filename",
    "parse_page_range",
]
