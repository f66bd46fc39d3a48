"""
Parsing Result Comparer

Compares the documents produced by the reference and candidate SDP parsers
for the same input text and reports every divergence, by category, to a
DiscrepancyRecorder.

- Fast path: identical full serializations are equal, nothing else runs
- Deep path: origin, session attributes, media section count, and every
  paired media section are compared without short-circuiting
- Tolerance: fmtp attributes compare by parsed parameters, and a candidate
  attribute that reproduces the original input text verbatim is accepted
"""

import logging
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Tuple

from sdpdiff.comparison.original_text import get_attribute_lines
from sdpdiff.domain.attributes import (
    AttributeType,
    attribute_type_string,
    iter_attribute_types,
    verify_attribute_type_bounds,
)
from sdpdiff.monitoring.recorder import Discrepancy, DiscrepancyRecorder
from sdpdiff.utils.logger import get_logger, log_operation, mask_ice_credentials

logger = get_logger(__name__)

SERIALIZATION_IS_EQUAL = "serialization_is_equal"
SERIALIZATION_IS_NOT_EQUAL = "serialization_is_not_equal"
ORIGIN_CATEGORY = "o="
INEQUAL_MSEC_COUNT = "inequal_msec_count"
MEDIA_LINE_PREFIX = "m="
DIRECTION_ATTRIBUTE_CATEGORY = "a=_direction_attribute_"
MISSING_SUFFIX = "_missing"
UNEXPECTED_SUFFIX = "_unexpected"
INEQUAL_SUFFIX = "_inequal"
CANDIDATE_FAILED_REFERENCE_HAS_ERRORS = "candidate_failed__reference_has_errors"
CANDIDATE_FAILED_REFERENCE_SUCCEEDED = "candidate_failed__reference_succeeded"

# (field name, extractor) for the scalar m= section values, in comparison order
MEDIA_LINE_FIELDS: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ("media_type", attrgetter("media_type")),
    ("port", attrgetter("port")),
    ("port_count", attrgetter("port_count")),
    ("protocol", attrgetter("protocol")),
    ("is_sending", attrgetter("is_sending")),
    ("is_receiving", attrgetter("is_receiving")),
    ("direction", attrgetter("direction")),
    ("level", attrgetter("level")),
)


class SdpComparisonResult(Enum):
    """What the caller expects the comparison to conclude."""

    EQUAL = "equal"
    DIFFERENT = "different"


@dataclass(frozen=True)
class ComparisonContext:
    """Per-call inputs shared by every sub-comparison."""

    original_sdp: str
    expect: SdpComparisonResult = SdpComparisonResult.EQUAL


def attribute_category(attribute_type: AttributeType) -> str:
    """Category prefix for an attribute type, e.g. "a=rtcp-fb"."""
    if attribute_type == AttributeType.DIRECTION:
        return DIRECTION_ATTRIBUTE_CATEGORY
    return "a=" + attribute_type_string(attribute_type)


class ParsingResultComparer:
    """
    Differential comparator for two parsed SDP documents.

    The comparer keeps no per-call state: the original text and the
    expectation travel in a ComparisonContext, so a single instance can
    serve any number of comparisons.
    """

    def __init__(self, recorder: DiscrepancyRecorder, mask_credentials: bool = True):
        """
        Initialize comparer.

        Args:
            recorder: Counter/record sink for comparison outcomes
            mask_credentials: Mask a=ice-pwd values in logged SDP text

        Raises:
            AttributeDomainError: If the attribute type range is inconsistent
        """
        verify_attribute_type_bounds()
        self.recorder = recorder
        self.mask_credentials = mask_credentials

    def _loggable(self, sdp: str) -> str:
        return mask_ice_credentials(sdp) if self.mask_credentials else sdp

    @staticmethod
    def _log_expect(result: bool, context: ComparisonContext, message: str, **fields) -> None:
        """Log at debug when result agrees with the expectation, at error otherwise."""
        if (context.expect == SdpComparisonResult.EQUAL) == result:
            logger.debug(message, operation="compare", context=fields or None)
        else:
            logger.error(
                f"UNEXPECTED COMPARISON RESULT: {message}",
                operation="compare",
                context=fields or None,
            )

    @log_operation("compare")
    def compare(
        self,
        reference,
        candidate,
        original_sdp: str,
        expect: SdpComparisonResult = SdpComparisonResult.EQUAL,
    ) -> bool:
        """
        Compare the reference and candidate parses of original_sdp.

        Args:
            reference: Document from the established parser
            candidate: Document from the parser under evaluation
            original_sdp: The text both parsers were given
            expect: Whether the caller expects the documents to match;
                only affects log severity

        Returns:
            True if the documents are equivalent
        """
        context = ComparisonContext(original_sdp=original_sdp, expect=expect)
        result = self._compare_documents(reference, candidate, context)

        if result != (expect == SdpComparisonResult.EQUAL):
            logger.warning(
                "Comparison result differs from expectation",
                operation="compare",
                context={"result": result, "expected": expect.value},
            )
        return result

    def _compare_documents(self, reference, candidate, context: ComparisonContext) -> bool:
        reference_str = str(reference)
        candidate_str = str(candidate)

        result = reference_str == candidate_str
        self._log_expect(
            result,
            context,
            "The original sdp",
            original_sdp=self._loggable(context.original_sdp),
        )
        if result:
            self.recorder.increment(SERIALIZATION_IS_EQUAL)
            self._log_expect(result, context, "Serialization is equal")
            return result

        # Do a deep comparison
        result = True

        self.recorder.increment(SERIALIZATION_IS_NOT_EQUAL)
        self._log_expect(
            result,
            context,
            "Serialization is not equal",
            reference_sdp=self._loggable(reference_str),
            candidate_sdp=self._loggable(candidate_str),
        )

        reference_origin = str(reference.origin)
        candidate_origin = str(candidate.origin)
        if reference_origin != candidate_origin:
            result = False
            self.recorder.record(
                Discrepancy(
                    category=ORIGIN_CATEGORY,
                    reference_value=reference_origin,
                    candidate_value=candidate_origin,
                    message="origin is not equal",
                )
            )
            self._log_expect(
                result,
                context,
                "origin is not equal",
                reference_origin=reference_origin,
                candidate_origin=candidate_origin,
            )

        if logger.is_enabled_for(logging.DEBUG):
            reference_count = reference.attributes.count()
            candidate_count = candidate.attributes.count()
            if reference_count != candidate_count:
                self._log_expect(
                    False,
                    context,
                    "Session level attribute count is NOT equal",
                    reference_count=reference_count,
                    candidate_count=candidate_count,
                )

        result &= self.compare_attribute_lists(
            reference.attributes, candidate.attributes, -1, context
        )

        reference_msec_count = reference.get_media_section_count()
        candidate_msec_count = candidate.get_media_section_count()
        if reference_msec_count != candidate_msec_count:
            result = False
            self.recorder.record(
                Discrepancy(
                    category=INEQUAL_MSEC_COUNT,
                    reference_value=str(reference_msec_count),
                    candidate_value=str(candidate_msec_count),
                    message="Media section count is NOT equal",
                )
            )
            self._log_expect(
                result,
                context,
                "Media section count is NOT equal",
                reference_count=reference_msec_count,
                candidate_count=candidate_msec_count,
            )

        for i in range(min(reference_msec_count, candidate_msec_count)):
            result &= self.compare_media_sections(
                reference.get_media_section(i), candidate.get_media_section(i), context
            )

        return result

    def compare_media_sections(self, reference, candidate, context: ComparisonContext) -> bool:
        """
        Compare one pair of media sections.

        Returns:
            True if every m= value, the connection and the attributes match
        """
        result = True
        level = candidate.level

        def track_media_line_mismatch(reference_value, candidate_value, description: str):
            nonlocal result
            result = False
            self.recorder.record(
                Discrepancy(
                    category=MEDIA_LINE_PREFIX + description,
                    level=level,
                    reference_value=str(reference_value),
                    candidate_value=str(candidate_value),
                    message=f"The media line values {description} are not equal",
                )
            )
            self._log_expect(
                result,
                context,
                f"The media line values {description} are not equal",
                reference_value=str(reference_value),
                candidate_value=str(candidate_value),
            )

        for description, extract in MEDIA_LINE_FIELDS:
            reference_value = extract(reference)
            candidate_value = extract(candidate)
            if reference_value != candidate_value:
                track_media_line_mismatch(reference_value, candidate_value, description)

        reference_connection = str(reference.connection)
        candidate_connection = str(candidate.connection)
        if reference_connection != candidate_connection:
            track_media_line_mismatch(reference_connection, candidate_connection, "connection")

        result &= self.compare_attribute_lists(
            reference.attributes, candidate.attributes, level, context
        )
        return result

    def compare_attribute_lists(
        self, reference, candidate, level: int, context: ComparisonContext
    ) -> bool:
        """
        Compare two attribute lists over every attribute type.

        Args:
            reference: Attribute list from the established parser
            candidate: Attribute list from the parser under evaluation
            level: -1 for session level, else the media section index
            context: Per-call comparison context

        Returns:
            True if no attribute type diverges
        """
        result = True

        for attribute_type in iter_attribute_types():
            category = attribute_category(attribute_type)
            in_reference = reference.has_attribute(attribute_type)
            in_candidate = candidate.has_attribute(attribute_type)

            if not in_reference and not in_candidate:
                continue

            if not in_candidate:
                result = False
                reference_str = str(reference.get_attribute(attribute_type))
                self.recorder.record(
                    Discrepancy(
                        category=category + MISSING_SUFFIX,
                        level=level,
                        reference_value=reference_str,
                        message=f"Candidate is missing the attribute: {category}",
                    )
                )
                self._log_expect(
                    False,
                    context,
                    f"Candidate is missing the attribute: {category}",
                    level=level,
                    reference_value=reference_str,
                )
                continue

            if not in_reference:
                result = False
                candidate_str = str(candidate.get_attribute(attribute_type))
                self.recorder.record(
                    Discrepancy(
                        category=category + UNEXPECTED_SUFFIX,
                        level=level,
                        candidate_value=candidate_str,
                        message=f"Candidate has an unexpected attribute: {category}",
                    )
                )
                self._log_expect(
                    False,
                    context,
                    f"Candidate has an unexpected attribute: {category}",
                    level=level,
                    candidate_value=candidate_str,
                )
                continue

            reference_str = str(reference.get_attribute(attribute_type))
            candidate_str = str(candidate.get_attribute(attribute_type))
            if reference_str == candidate_str:
                continue

            if attribute_type == AttributeType.FMTP:
                if reference.get_fmtp() == candidate.get_fmtp():
                    continue

            original_str = get_attribute_lines(context.original_sdp, category, level)
            if candidate_str != original_str:
                result = False
                self.recorder.record(
                    Discrepancy(
                        category=category + INEQUAL_SUFFIX,
                        level=level,
                        reference_value=reference_str,
                        candidate_value=candidate_str,
                        original_value=original_str,
                        message=(
                            f"{category} is neither equal to the reference "
                            "nor to the original sdp"
                        ),
                    )
                )
                self._log_expect(
                    False,
                    context,
                    f"{category} is neither equal to the reference nor to the original sdp",
                    level=level,
                    candidate_value=candidate_str,
                    reference_value=reference_str,
                    original_value=original_str,
                )
            else:
                self._log_expect(
                    True,
                    context,
                    f"{category} differs from the reference, "
                    "but the candidate serialization is equal to the original sdp",
                    level=level,
                )

        return result

    def track_candidate_parsing_failed(self, reference_error_count: int) -> None:
        """
        Record that the candidate parser produced no document.

        Args:
            reference_error_count: Number of errors the reference parser
                reported for the same input
        """
        if reference_error_count:
            self.recorder.increment(CANDIDATE_FAILED_REFERENCE_HAS_ERRORS)
            logger.info(
                "Candidate parser failed; reference parser also reported errors",
                operation="track_candidate_parsing_failed",
                context={"reference_error_count": reference_error_count},
            )
        else:
            self.recorder.increment(CANDIDATE_FAILED_REFERENCE_SUCCEEDED)
            logger.warning(
                "Candidate parser failed where the reference parser succeeded",
                operation="track_candidate_parsing_failed",
            )
