"""Domain models - parsed session description entities."""

from .attributes import (
    FIRST_ATTRIBUTE,
    LAST_ATTRIBUTE,
    AttributeType,
    Direction,
    attribute_type_string,
    iter_attribute_types,
    verify_attribute_type_bounds,
)
from .sdp import (
    AttributeList,
    Connection,
    DirectionAttribute,
    FlagAttribute,
    FmtpAttribute,
    FmtpEntry,
    MediaSection,
    MediaType,
    MultiStringAttribute,
    Origin,
    SessionDescription,
    StringAttribute,
    parse_fmtp_parameters,
)

__all__ = [
    "FIRST_ATTRIBUTE",
    "LAST_ATTRIBUTE",
    "AttributeType",
    "Direction",
    "attribute_type_string",
    "iter_attribute_types",
    "verify_attribute_type_bounds",
    "AttributeList",
    "Connection",
    "DirectionAttribute",
    "FlagAttribute",
    "FmtpAttribute",
    "FmtpEntry",
    "MediaSection",
    "MediaType",
    "MultiStringAttribute",
    "Origin",
    "SessionDescription",
    "StringAttribute",
    "parse_fmtp_parameters",
]
