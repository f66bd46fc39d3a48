"""
SDP attribute type domain.

Every attribute kind a session description can carry maps to exactly one
member of AttributeType. The comparator walks the whole range between
FIRST_ATTRIBUTE and LAST_ATTRIBUTE on every call, so the range must stay
contiguous and must cover every member.
"""

from enum import Enum, IntEnum
from typing import Dict, Iterator

from sdpdiff.exceptions import AttributeDomainError


class AttributeType(IntEnum):
    """Attribute kinds, ordered as they are compared and serialized."""

    BUNDLE_ONLY = 0
    CANDIDATE = 1
    CONNECTION = 2
    DIRECTION = 3  # sendrecv/sendonly/recvonly/inactive flag lines
    DTLS_MESSAGE = 4
    END_OF_CANDIDATES = 5
    EXTMAP = 6
    EXTMAP_ALLOW_MIXED = 7
    FINGERPRINT = 8
    FMTP = 9
    GROUP = 10
    ICE_LITE = 11
    ICE_MISMATCH = 12
    ICE_OPTIONS = 13
    ICE_PWD = 14
    ICE_UFRAG = 15
    IDENTITY = 16
    IMAGEATTR = 17
    LABEL = 18
    MAXPTIME = 19
    MID = 20
    MSID = 21
    MSID_SEMANTIC = 22
    PTIME = 23
    REMOTE_CANDIDATES = 24
    RID = 25
    RTCP = 26
    RTCP_FB = 27
    RTCP_MUX = 28
    RTCP_RSIZE = 29
    RTPMAP = 30
    SCTPMAP = 31
    SETUP = 32
    SIMULCAST = 33
    SSRC = 34
    SSRC_GROUP = 35
    SCTP_PORT = 36
    MAX_MESSAGE_SIZE = 37


FIRST_ATTRIBUTE = AttributeType.BUNDLE_ONLY
LAST_ATTRIBUTE = AttributeType.MAX_MESSAGE_SIZE

_ATTRIBUTE_TAGS: Dict[AttributeType, str] = {
    AttributeType.BUNDLE_ONLY: "bundle-only",
    AttributeType.CANDIDATE: "candidate",
    AttributeType.CONNECTION: "connection",
    AttributeType.DIRECTION: "",
    AttributeType.DTLS_MESSAGE: "dtls-message",
    AttributeType.END_OF_CANDIDATES: "end-of-candidates",
    AttributeType.EXTMAP: "extmap",
    AttributeType.EXTMAP_ALLOW_MIXED: "extmap-allow-mixed",
    AttributeType.FINGERPRINT: "fingerprint",
    AttributeType.FMTP: "fmtp",
    AttributeType.GROUP: "group",
    AttributeType.ICE_LITE: "ice-lite",
    AttributeType.ICE_MISMATCH: "ice-mismatch",
    AttributeType.ICE_OPTIONS: "ice-options",
    AttributeType.ICE_PWD: "ice-pwd",
    AttributeType.ICE_UFRAG: "ice-ufrag",
    AttributeType.IDENTITY: "identity",
    AttributeType.IMAGEATTR: "imageattr",
    AttributeType.LABEL: "label",
    AttributeType.MAXPTIME: "maxptime",
    AttributeType.MID: "mid",
    AttributeType.MSID: "msid",
    AttributeType.MSID_SEMANTIC: "msid-semantic",
    AttributeType.PTIME: "ptime",
    AttributeType.REMOTE_CANDIDATES: "remote-candidates",
    AttributeType.RID: "rid",
    AttributeType.RTCP: "rtcp",
    AttributeType.RTCP_FB: "rtcp-fb",
    AttributeType.RTCP_MUX: "rtcp-mux",
    AttributeType.RTCP_RSIZE: "rtcp-rsize",
    AttributeType.RTPMAP: "rtpmap",
    AttributeType.SCTPMAP: "sctpmap",
    AttributeType.SETUP: "setup",
    AttributeType.SIMULCAST: "simulcast",
    AttributeType.SSRC: "ssrc",
    AttributeType.SSRC_GROUP: "ssrc-group",
    AttributeType.SCTP_PORT: "sctp-port",
    AttributeType.MAX_MESSAGE_SIZE: "max-message-size",
}


class Direction(Enum):
    """Media direction as carried by the direction pseudo-attribute."""

    INACTIVE = "inactive"
    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    SENDRECV = "sendrecv"

    @property
    def is_sending(self) -> bool:
        return self in (Direction.SENDONLY, Direction.SENDRECV)

    @property
    def is_receiving(self) -> bool:
        return self in (Direction.RECVONLY, Direction.SENDRECV)

    def __str__(self) -> str:
        return self.value


def attribute_type_string(attribute_type: AttributeType) -> str:
    """
    Return the canonical tag of an attribute type, e.g. "rtcp-fb".

    The direction pseudo-type has no tag of its own and maps to "".
    """
    return _ATTRIBUTE_TAGS[attribute_type]


def verify_attribute_type_bounds() -> None:
    """
    Check that FIRST_ATTRIBUTE..LAST_ATTRIBUTE covers every member exactly once.

    Raises:
        AttributeDomainError: If a member falls outside the declared range,
            the range has gaps, or a member has no tag.
    """
    values = sorted(member.value for member in AttributeType)
    expected = list(range(FIRST_ATTRIBUTE, LAST_ATTRIBUTE + 1))
    if values != expected:
        raise AttributeDomainError(
            f"Attribute types are not contiguous between {FIRST_ATTRIBUTE.name} "
            f"and {LAST_ATTRIBUTE.name}: {len(values)} members, {len(expected)} in range"
        )

    untagged = [member.name for member in AttributeType if member not in _ATTRIBUTE_TAGS]
    if untagged:
        raise AttributeDomainError(f"Attribute types without a tag: {untagged}")


def iter_attribute_types() -> Iterator[AttributeType]:
    """Yield every attribute type from FIRST_ATTRIBUTE to LAST_ATTRIBUTE."""
    for value in range(FIRST_ATTRIBUTE, LAST_ATTRIBUTE + 1):
        yield AttributeType(value)
