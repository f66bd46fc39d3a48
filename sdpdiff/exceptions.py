"""
Custom exception hierarchy for the SDP parser comparator.

Data differences between two parsed documents are never exceptions; they
are recorded as discrepancies. The exceptions below cover the places where
the comparator itself is misconfigured or handed an inconsistent model.
"""


class SdpDiffException(Exception):
    """
    Base exception for all comparator errors.
    """

    pass


class AttributeDomainError(SdpDiffException):
    """
    Raised when the attribute type enumeration is not a contiguous range
    between its declared bounds, or when an attribute list is built with
    two attributes of one type or with a type outside the enumeration.

    Indicates a programming error in the data model that would otherwise
    let an attribute kind fall outside the compared range.
    """

    pass


class ConfigurationError(SdpDiffException):
    """
    Raised when comparator settings fail schema validation or a settings
    file cannot be read.
    """

    pass


class MetricsPublishError(SdpDiffException):
    """
    Raised when discrepancy counters cannot be delivered to CloudWatch.

    The CloudWatch recorder catches and logs this itself so that telemetry
    delivery never fails a comparison run.
    """

    pass
