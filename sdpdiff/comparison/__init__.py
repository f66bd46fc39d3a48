"""Comparison module - differential comparison of parsed SDP documents."""

from .comparer import (
    ComparisonContext,
    MEDIA_LINE_FIELDS,
    ParsingResultComparer,
    SdpComparisonResult,
    attribute_category,
)
from .diff_reporter import DiffReporter
from .original_text import get_attribute_lines, is_vendor_rtcp_fb_line

__all__ = [
    "ComparisonContext",
    "MEDIA_LINE_FIELDS",
    "ParsingResultComparer",
    "SdpComparisonResult",
    "attribute_category",
    "DiffReporter",
    "get_attribute_lines",
    "is_vendor_rtcp_fb_line",
]
