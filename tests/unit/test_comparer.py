"""
Unit tests for the parsing result comparer (sdpdiff/comparison/comparer.py)

Tests cover:
- Serialization fast path
- Origin, media section count and media line comparison
- Attribute presence (missing/unexpected) and value comparison
- fmtp structural tolerance and original-text fallback
- Expectation logging and candidate parse failure tracking
"""

from dataclasses import replace
from unittest.mock import patch

import pytest

from sdpdiff.comparison.comparer import (
    MEDIA_LINE_FIELDS,
    ComparisonContext,
    ParsingResultComparer,
    SdpComparisonResult,
    attribute_category,
)
from sdpdiff.domain import (
    AttributeList,
    AttributeType,
    Connection,
    Direction,
    DirectionAttribute,
    FmtpAttribute,
    FmtpEntry,
    MultiStringAttribute,
    Origin,
    StringAttribute,
)
from sdpdiff.monitoring.recorder import InMemoryDiscrepancyRecorder
from tests.comparison.sdp_factory import ICE_PWD, SdpFactory


def _with_attribute(attributes, attribute):
    """Replace (or add) the attribute of the same type."""
    return [a for a in attributes if a.type != attribute.type] + [attribute]


def _without_attribute(attributes, attribute_type):
    return [a for a in attributes if a.type != attribute_type]


@pytest.fixture
def recorder():
    return InMemoryDiscrepancyRecorder()


@pytest.fixture
def comparer(recorder):
    return ParsingResultComparer(recorder)


class TestFastPath:
    """Identical serializations skip the structural walk."""

    def test_identical_documents(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.offer()

        result = comparer.compare(reference, candidate, SdpFactory.original_offer_text())

        assert result is True
        assert recorder.counts() == {"serialization_is_equal": 1}
        assert recorder.discrepancies() == []

    def test_no_structural_work_on_fast_path(self, comparer):
        with patch.object(comparer, "compare_attribute_lists") as compare_lists:
            comparer.compare(SdpFactory.offer(), SdpFactory.offer(), "")
        compare_lists.assert_not_called()

    def test_equal_documents_with_empty_original_text(self, comparer, recorder):
        assert comparer.compare(SdpFactory.offer(), SdpFactory.offer(), "") is True
        assert recorder.counts() == {"serialization_is_equal": 1}


class TestDocumentComparison:
    """Origin and media section count."""

    def test_origin_mismatch(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = replace(reference, origin=replace(SdpFactory.ORIGIN, session_version=1))

        result = comparer.compare(reference, candidate, str(reference))

        assert result is False
        assert recorder.counts() == {"serialization_is_not_equal": 1, "o=": 1}
        discrepancy = recorder.discrepancies()[0]
        assert discrepancy.category == "o="
        assert discrepancy.reference_value == str(reference.origin)
        assert discrepancy.candidate_value == str(candidate.origin)

    def test_section_count_mismatch_still_compares_prefix(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(media_sections=[SdpFactory.audio_section(port=5004)])

        result = comparer.compare(reference, candidate, str(reference))

        assert result is False
        counts = recorder.counts()
        assert counts["inequal_msec_count"] == 1
        assert counts["m=port"] == 1
        port = [d for d in recorder.discrepancies() if d.category == "m=port"][0]
        assert port.level == 0
        assert (port.reference_value, port.candidate_value) == ("9", "5004")

    def test_candidate_with_extra_section(self, comparer, recorder):
        reference = SdpFactory.document(media_sections=[SdpFactory.audio_section()])
        candidate = SdpFactory.offer()

        assert comparer.compare(reference, candidate, str(candidate)) is False
        assert recorder.counts() == {"serialization_is_not_equal": 1, "inequal_msec_count": 1}

    def test_no_short_circuit(self, comparer, recorder):
        """Every category of divergence is reported in one call."""
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            origin=Origin("-", 1, 1, "127.0.0.1"),
            session_attributes=_without_attribute(
                SdpFactory.session_attributes(), AttributeType.GROUP
            ),
            media_sections=[
                SdpFactory.audio_section(protocol="RTP/SAVPF"),
                SdpFactory.video_section(
                    attributes=_without_attribute(
                        SdpFactory.video_attributes(), AttributeType.RTCP_FB
                    )
                ),
            ],
        )

        assert comparer.compare(reference, candidate, str(reference)) is False

        counts = recorder.counts()
        assert counts["o="] == 1
        assert counts["a=group_missing"] == 1
        assert counts["m=protocol"] == 1
        assert counts["a=rtcp-fb_missing"] == 1


class TestMediaSectionComparison:
    """Scalar m= values, connection and scoped attributes."""

    def test_field_table_order(self):
        assert [name for name, _ in MEDIA_LINE_FIELDS] == [
            "media_type",
            "port",
            "port_count",
            "protocol",
            "is_sending",
            "is_receiving",
            "direction",
            "level",
        ]

    @pytest.mark.parametrize(
        "overrides, category",
        [
            ({"port": 5000}, "m=port"),
            ({"port_count": 2}, "m=port_count"),
            ({"protocol": "RTP/AVP"}, "m=protocol"),
            ({"connection": Connection("192.0.2.10")}, "m=connection"),
        ],
    )
    def test_single_field_mismatch(self, comparer, recorder, overrides, category):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[SdpFactory.audio_section(**overrides), SdpFactory.video_section()]
        )

        assert comparer.compare(reference, candidate, str(reference)) is False
        assert recorder.counts() == {"serialization_is_not_equal": 1, category: 1}

    def test_direction_mismatch(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                SdpFactory.audio_section(
                    attributes=_with_attribute(
                        SdpFactory.audio_attributes(), DirectionAttribute(Direction.SENDONLY)
                    )
                ),
                SdpFactory.video_section(),
            ]
        )

        assert comparer.compare(reference, candidate, str(reference)) is False
        counts = recorder.counts()
        assert counts["m=is_receiving"] == 1
        assert counts["m=direction"] == 1
        assert counts["a=_direction_attribute__inequal"] == 1
        assert "m=is_sending" not in counts

    def test_level_mismatch(self, comparer, recorder):
        reference = SdpFactory.document(media_sections=[SdpFactory.audio_section()])
        candidate = SdpFactory.document(media_sections=[SdpFactory.audio_section(level=1)])

        result = comparer.compare_media_sections(
            reference.get_media_section(0),
            candidate.get_media_section(0),
            _context(str(reference)),
        )

        assert result is False
        assert recorder.counts() == {"m=level": 1}


def _context(original_sdp, expect=SdpComparisonResult.EQUAL):
    return ComparisonContext(original_sdp=original_sdp, expect=expect)


class TestAttributeListComparison:
    """Per-type presence and value comparison."""

    def test_missing_in_candidate(self, comparer, recorder):
        reference = AttributeList([StringAttribute(AttributeType.ICE_LITE, "")])
        candidate = AttributeList()

        assert comparer.compare_attribute_lists(reference, candidate, -1, _context("")) is False
        assert recorder.counts() == {"a=ice-lite_missing": 1}

    def test_unexpected_in_candidate(self, comparer, recorder):
        reference = AttributeList()
        candidate = AttributeList([StringAttribute(AttributeType.MID, "0")])

        assert comparer.compare_attribute_lists(reference, candidate, 0, _context("")) is False
        assert recorder.counts() == {"a=mid_unexpected": 1}
        assert recorder.discrepancies()[0].candidate_value == "a=mid:0\r\n"

    def test_unexpected_is_not_excused_by_original_text(self, comparer, recorder):
        """The original-text fallback only applies when both sides have the attribute."""
        candidate = AttributeList([StringAttribute(AttributeType.MID, "0")])

        result = comparer.compare_attribute_lists(
            AttributeList(), candidate, -1, _context("v=0\r\na=mid:0\r\n")
        )

        assert result is False
        assert recorder.counts() == {"a=mid_unexpected": 1}

    def test_each_type_reports_exactly_one_presence_category(self, comparer, recorder):
        reference = AttributeList(
            [StringAttribute(AttributeType.MID, "0"), StringAttribute(AttributeType.SETUP, "actpass")]
        )
        candidate = AttributeList(
            [StringAttribute(AttributeType.SETUP, "actpass"), StringAttribute(AttributeType.RID, "a send")]
        )

        comparer.compare_attribute_lists(reference, candidate, 0, _context(""))

        assert recorder.counts() == {"a=mid_missing": 1, "a=rid_unexpected": 1}

    def test_equal_lists(self, comparer, recorder):
        attributes = AttributeList(SdpFactory.audio_attributes())
        assert comparer.compare_attribute_lists(attributes, attributes, 0, _context("")) is True
        assert recorder.counts() == {}

    def test_value_mismatch_records_all_three_strings(self, comparer, recorder):
        reference_doc = SdpFactory.offer()
        candidate_doc = SdpFactory.document(
            media_sections=[
                SdpFactory.audio_section(
                    attributes=_with_attribute(
                        SdpFactory.audio_attributes(), StringAttribute(AttributeType.SETUP, "active")
                    )
                ),
                SdpFactory.video_section(),
            ]
        )

        assert comparer.compare(reference_doc, candidate_doc, str(reference_doc)) is False

        assert recorder.counts() == {"serialization_is_not_equal": 1, "a=setup_inequal": 1}
        discrepancy = recorder.discrepancies()[0]
        assert discrepancy.level == 0
        assert discrepancy.candidate_value == "a=setup:active\r\n"
        assert discrepancy.reference_value == "a=setup:actpass\r\n"
        assert discrepancy.original_value == "a=setup:actpass\r\n"


class TestFmtpTolerance:
    """fmtp attributes compare by their parsed parameters."""

    @staticmethod
    def _video_with_fmtp(*entries):
        return SdpFactory.video_section(
            attributes=_with_attribute(SdpFactory.video_attributes(), FmtpAttribute(tuple(entries)))
        )

    def test_reordered_parameters_are_equal(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                SdpFactory.audio_section(),
                self._video_with_fmtp(
                    FmtpEntry("120", "max-fr=60; max-fs=12288"),
                    FmtpEntry(
                        "126",
                        "packetization-mode=1;profile-level-id=42e01f;level-asymmetry-allowed=1",
                    ),
                ),
            ]
        )
        assert str(reference) != str(candidate)

        assert comparer.compare(reference, candidate, str(reference)) is True
        assert recorder.counts() == {"serialization_is_not_equal": 1}

    def test_different_parameters_are_inequal(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                SdpFactory.audio_section(),
                self._video_with_fmtp(FmtpEntry("120", "max-fs=8160;max-fr=30")),
            ]
        )

        assert comparer.compare(reference, candidate, str(reference)) is False
        assert recorder.counts() == {"serialization_is_not_equal": 1, "a=fmtp_inequal": 1}

    def test_dropped_line_for_repeated_format_is_inequal(self, comparer, recorder):
        """Two fmtp lines for one format are not merged into one."""
        reference = AttributeList(
            [FmtpAttribute((FmtpEntry("96", "a=1"), FmtpEntry("96", "b=2")))]
        )
        candidate = AttributeList([FmtpAttribute((FmtpEntry("96", "b=2"),))])

        result = comparer.compare_attribute_lists(reference, candidate, 0, _context(""))

        assert result is False
        assert recorder.counts() == {"a=fmtp_inequal": 1}

    def test_reordered_lines_are_equal(self, comparer, recorder):
        reference = AttributeList(
            [FmtpAttribute((FmtpEntry("109", "stereo=1"), FmtpEntry("101", "0-15")))]
        )
        candidate = AttributeList(
            [FmtpAttribute((FmtpEntry("101", "0-15"), FmtpEntry("109", "stereo=1")))]
        )

        assert comparer.compare_attribute_lists(reference, candidate, 0, _context("")) is True
        assert recorder.counts() == {}


class TestOriginalTextFallback:
    """A candidate that reproduces the input verbatim is not a divergence."""

    @staticmethod
    def _audio_with(attribute):
        return SdpFactory.audio_section(
            attributes=_with_attribute(SdpFactory.audio_attributes(), attribute)
        )

    def test_candidate_matches_original(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                self._audio_with(StringAttribute(AttributeType.MID, "Audio")),
                SdpFactory.video_section(),
            ]
        )
        original = str(candidate)

        assert comparer.compare(reference, candidate, original) is True
        assert recorder.counts() == {"serialization_is_not_equal": 1}

    def test_reference_matches_original(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                self._audio_with(StringAttribute(AttributeType.MID, "Audio")),
                SdpFactory.video_section(),
            ]
        )

        assert comparer.compare(reference, candidate, str(reference)) is False
        assert recorder.counts()["a=mid_inequal"] == 1
        assert recorder.discrepancies()[0].original_value == "a=mid:0\r\n"

    def test_fallback_is_scoped_to_section_level(self, comparer, recorder):
        """Section 1 differences are checked against section 1 lines only."""
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                SdpFactory.audio_section(),
                SdpFactory.video_section(
                    attributes=_with_attribute(
                        SdpFactory.video_attributes(), StringAttribute(AttributeType.MID, "0")
                    )
                ),
            ]
        )

        # Original text contains "a=mid:0" only in section 0.
        assert comparer.compare(reference, candidate, str(reference)) is False
        assert recorder.counts()["a=mid_inequal"] == 1
        assert recorder.discrepancies()[0].original_value == "a=mid:1\r\n"

    def test_vendor_rtcp_fb_lines_do_not_count(self, comparer, recorder):
        reference = SdpFactory.document(
            media_sections=[
                SdpFactory.video_section(
                    level=0,
                    attributes=_with_attribute(
                        SdpFactory.video_attributes(),
                        MultiStringAttribute(AttributeType.RTCP_FB, ("120 nack", "120 x-foo")),
                    ),
                )
            ]
        )
        candidate = SdpFactory.document(
            media_sections=[
                SdpFactory.video_section(
                    level=0,
                    attributes=_with_attribute(
                        SdpFactory.video_attributes(),
                        MultiStringAttribute(AttributeType.RTCP_FB, ("120 nack",)),
                    ),
                )
            ]
        )

        assert comparer.compare(reference, candidate, str(reference)) is True
        assert "a=rtcp-fb_inequal" not in recorder.counts()

    def test_comparer_reuse_uses_each_calls_original_text(self, comparer, recorder):
        reference = SdpFactory.offer()
        candidate = SdpFactory.document(
            media_sections=[
                self._audio_with(StringAttribute(AttributeType.MID, "Audio")),
                SdpFactory.video_section(),
            ]
        )

        assert comparer.compare(reference, candidate, str(candidate)) is True
        assert comparer.compare(reference, candidate, str(reference)) is False
        assert comparer.compare(reference, candidate, str(candidate)) is True
        assert recorder.counts()["a=mid_inequal"] == 1


class TestSessionLevelScenario:
    """Origin equal, a=sendrecv only in the candidate, no media sections."""

    def test_unexpected_direction(self, comparer, recorder):
        reference = SdpFactory.document(session_attributes=[])
        candidate = SdpFactory.document(
            session_attributes=[DirectionAttribute(Direction.SENDRECV)]
        )

        result = comparer.compare(reference, candidate, str(candidate))

        assert result is False
        counts = recorder.counts()
        assert counts == {
            "serialization_is_not_equal": 1,
            "a=_direction_attribute__unexpected": 1,
        }
        assert "o=" not in counts


class TestExpectation:
    """The expectation only changes log severity."""

    def test_warning_when_result_differs_from_expectation(self, comparer):
        reference = SdpFactory.offer()
        candidate = replace(reference, origin=Origin("-", 1, 1, "127.0.0.1"))

        with patch("sdpdiff.comparison.comparer.logger") as mock_logger:
            result = comparer.compare(reference, candidate, str(reference))

        assert result is False
        mock_logger.warning.assert_called_once()
        assert mock_logger.error.called

    def test_expected_difference_does_not_warn(self, comparer):
        reference = SdpFactory.offer()
        candidate = replace(reference, origin=Origin("-", 1, 1, "127.0.0.1"))

        with patch("sdpdiff.comparison.comparer.logger") as mock_logger:
            result = comparer.compare(
                reference, candidate, str(reference), SdpComparisonResult.DIFFERENT
            )

        assert result is False
        mock_logger.warning.assert_not_called()

    def test_expectation_does_not_change_result(self, recorder):
        comparer = ParsingResultComparer(recorder)
        offer = SdpFactory.offer()

        assert comparer.compare(offer, offer, "", SdpComparisonResult.DIFFERENT) is True
        assert recorder.counts() == {"serialization_is_equal": 1}

    def test_logged_original_sdp_masks_ice_password(self, comparer):
        offer = SdpFactory.offer()

        with patch("sdpdiff.comparison.comparer.logger") as mock_logger:
            comparer.compare(offer, offer, str(offer))

        logged = str(mock_logger.debug.call_args_list)
        assert ICE_PWD not in logged
        assert "a=ice-pwd:****" in logged

    def test_masking_can_be_disabled(self, recorder):
        comparer = ParsingResultComparer(recorder, mask_credentials=False)
        offer = SdpFactory.offer()

        with patch("sdpdiff.comparison.comparer.logger") as mock_logger:
            comparer.compare(offer, offer, str(offer))

        assert ICE_PWD in str(mock_logger.debug.call_args_list)


class TestCandidateParsingFailed:
    """Classify which side is at fault when the candidate produced nothing."""

    def test_reference_has_errors(self, comparer, recorder):
        comparer.track_candidate_parsing_failed(3)
        assert recorder.counts() == {"candidate_failed__reference_has_errors": 1}

    def test_reference_succeeded(self, comparer, recorder):
        comparer.track_candidate_parsing_failed(0)
        assert recorder.counts() == {"candidate_failed__reference_succeeded": 1}


class TestAttributeCategory:
    def test_direction_category(self):
        assert attribute_category(AttributeType.DIRECTION) == "a=_direction_attribute_"

    def test_tagged_category(self):
        assert attribute_category(AttributeType.RTCP_FB) == "a=rtcp-fb"
