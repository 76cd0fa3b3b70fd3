"""Lateral offset profiles and offset line generation."""

from .offset_line import offset_line, offset_line_fractions, offset_line_linear
from .profile import OffsetProfile

__all__ = [
    "OffsetProfile",
    "offset_line",
    "offset_line_fractions",
    "offset_line_linear",
]
