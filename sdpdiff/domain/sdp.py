"""
Session description domain model.

Immutable, parser-agnostic representation of a parsed SDP document. Both
parsers under comparison hand the comparator objects that expose the same
accessors as the classes below; these classes are the reference shape of
that contract and are what the test suite builds documents from.

Serialization follows the usual SDP wire form: one "x=" line per field,
CRLF-terminated, attributes in AttributeType order.
"""

from dataclasses import dataclass, field
from enum import Enum
from operator import itemgetter
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

from sdpdiff.domain.attributes import (
    AttributeType,
    Direction,
    attribute_type_string,
)
from sdpdiff.exceptions import AttributeDomainError

CRLF = "\r\n"


class MediaType(Enum):
    """Media kind from the m= line."""

    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    APPLICATION = "application"
    MESSAGE = "message"

    def __str__(self) -> str:
        return self.value


def _attribute_line(attribute_type: AttributeType, value: Optional[str] = None) -> str:
    tag = attribute_type_string(attribute_type)
    if value is None:
        return f"a={tag}{CRLF}"
    return f"a={tag}:{value}{CRLF}"


@dataclass(frozen=True)
class FlagAttribute:
    """Attribute without a value, e.g. a=rtcp-mux."""

    type: AttributeType

    def __str__(self) -> str:
        return _attribute_line(self.type)


@dataclass(frozen=True)
class StringAttribute:
    """Single-valued attribute, e.g. a=mid:audio."""

    type: AttributeType
    value: str

    def __str__(self) -> str:
        return _attribute_line(self.type, self.value)


@dataclass(frozen=True)
class MultiStringAttribute:
    """Attribute that may repeat, e.g. a=rtcp-fb or a=candidate. One line per value."""

    type: AttributeType
    values: Tuple[str, ...]

    def __str__(self) -> str:
        return "".join(_attribute_line(self.type, value) for value in self.values)


@dataclass(frozen=True)
class DirectionAttribute:
    """Direction flag line (a=sendrecv, a=recvonly, ...)."""

    direction: Direction
    type: AttributeType = field(default=AttributeType.DIRECTION, init=False)

    def __str__(self) -> str:
        return f"a={self.direction.value}{CRLF}"


FmtpStructure = Tuple[Tuple[str, Dict[str, str]], ...]


def parse_fmtp_parameters(parameters: str) -> Dict[str, str]:
    """
    Parse an fmtp parameter string into a key/value mapping.

    Keys are lower-cased and surrounding whitespace is dropped, so
    "profile-level-id=42e01f; packetization-mode=1" and
    "packetization-mode=1;profile-level-id=42e01f" parse identically.
    Tokens without "=" (e.g. telephone-event "0-15") map to "".

    Args:
        parameters: Raw parameter text following the format number

    Returns:
        Dict of parameter name to value
    """
    parsed: Dict[str, str] = {}
    for token in parameters.split(";"):
        token = token.strip()
        if not token:
            continue
        key, _, value = token.partition("=")
        parsed[key.strip().lower()] = value.strip()
    return parsed


@dataclass(frozen=True)
class FmtpEntry:
    """One a=fmtp line: payload format and its raw parameter text."""

    format: str
    parameters: str

    def __str__(self) -> str:
        return _attribute_line(AttributeType.FMTP, f"{self.format} {self.parameters}")


@dataclass(frozen=True)
class FmtpAttribute:
    """Format parameters for every payload format that carries them."""

    entries: Tuple[FmtpEntry, ...]
    type: AttributeType = field(default=AttributeType.FMTP, init=False)

    def structured(self) -> FmtpStructure:
        """
        Parsed parameters per fmtp line, independent of text layout.

        One (format, parameters) pair per entry, ordered by format. Repeated
        lines for the same format stay separate pairs in their original order.
        """
        pairs = [(entry.format, parse_fmtp_parameters(entry.parameters)) for entry in self.entries]
        return tuple(sorted(pairs, key=itemgetter(0)))

    def __str__(self) -> str:
        return "".join(str(entry) for entry in self.entries)


SdpAttribute = Union[
    FlagAttribute,
    StringAttribute,
    MultiStringAttribute,
    DirectionAttribute,
    FmtpAttribute,
]


class AttributeList:
    """
    Immutable set of attributes keyed by AttributeType.

    At most one attribute object per type; repeated lines of one type are
    carried by a single multi-valued attribute.
    """

    def __init__(self, attributes: Iterable[SdpAttribute] = ()):
        """
        Build an attribute list.

        Args:
            attributes: Attribute objects, at most one per type

        Raises:
            AttributeDomainError: If two attributes share a type,
                an attribute's type is not an AttributeType, or the direction
                is not a DirectionAttribute
        """
        entries: Dict[AttributeType, SdpAttribute] = {}
        for attribute in attributes:
            if not isinstance(attribute.type, AttributeType):
                raise AttributeDomainError(f"Unknown attribute type: {attribute.type!r}")
            if attribute.type == AttributeType.DIRECTION and not isinstance(
                attribute, DirectionAttribute
            ):
                raise AttributeDomainError(
                    f"Direction must be a DirectionAttribute, got {type(attribute).__name__}"
                )
            if attribute.type in entries:
                raise AttributeDomainError(
                    f"Duplicate attribute type {attribute.type.name} in attribute list"
                )
            entries[attribute.type] = attribute
        self._attributes = MappingProxyType(entries)

    def has_attribute(self, attribute_type: AttributeType) -> bool:
        return attribute_type in self._attributes

    def get_attribute(self, attribute_type: AttributeType) -> Optional[SdpAttribute]:
        return self._attributes.get(attribute_type)

    def get_fmtp(self) -> FmtpStructure:
        """Structured format parameters; empty when no fmtp attribute is present."""
        fmtp = self._attributes.get(AttributeType.FMTP)
        if fmtp is None:
            return ()
        return fmtp.structured()

    def count(self) -> int:
        return len(self._attributes)

    def __iter__(self) -> Iterator[SdpAttribute]:
        for attribute_type in sorted(self._attributes):
            yield self._attributes[attribute_type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeList):
            return NotImplemented
        return dict(self._attributes) == dict(other._attributes)

    def __repr__(self) -> str:
        names = ", ".join(attribute_type.name for attribute_type in sorted(self._attributes))
        return f"AttributeList({names})"

    def __str__(self) -> str:
        return "".join(str(attribute) for attribute in self)


@dataclass(frozen=True)
class Origin:
    """o= line identifying the session owner and version."""

    username: str
    session_id: int
    session_version: int
    address: str
    address_type: str = "IP4"

    def __str__(self) -> str:
        return (
            f"o={self.username} {self.session_id} {self.session_version} "
            f"IN {self.address_type} {self.address}{CRLF}"
        )


@dataclass(frozen=True)
class Connection:
    """c= line; ttl only applies to multicast IPv4 addresses."""

    address: str
    address_type: str = "IP4"
    ttl: Optional[int] = None

    def __str__(self) -> str:
        address = self.address if self.ttl is None else f"{self.address}/{self.ttl}"
        return f"c=IN {self.address_type} {address}{CRLF}"


@dataclass(frozen=True)
class MediaSection:
    """
    One m= section with its connection and attributes.

    Attributes:
        media_type: Media kind from the m= line
        port: Transport port
        protocol: Transport protocol, e.g. "UDP/TLS/RTP/SAVPF"
        formats: Payload formats listed on the m= line
        level: Zero-based index of this section in its document
        connection: Section-level c= line
        attributes: Attributes scoped to this section
        port_count: Number of ports; 0 when the m= line has no "/count"
    """

    media_type: MediaType
    port: int
    protocol: str
    formats: Tuple[str, ...]
    level: int
    connection: Connection
    attributes: AttributeList = field(default_factory=AttributeList)
    port_count: int = 0

    @property
    def direction(self) -> Direction:
        attribute = self.attributes.get_attribute(AttributeType.DIRECTION)
        if attribute is None:
            return Direction.SENDRECV
        return attribute.direction

    @property
    def is_sending(self) -> bool:
        return self.direction.is_sending

    @property
    def is_receiving(self) -> bool:
        return self.direction.is_receiving

    def __str__(self) -> str:
        port = f"{self.port}/{self.port_count}" if self.port_count else str(self.port)
        media_line = f"m={self.media_type} {port} {self.protocol} {' '.join(self.formats)}"
        return f"{media_line}{CRLF}{self.connection}{self.attributes}"


@dataclass(frozen=True)
class SessionDescription:
    """A complete parsed SDP document."""

    origin: Origin
    attributes: AttributeList = field(default_factory=AttributeList)
    media_sections: Tuple[MediaSection, ...] = ()
    session_name: str = "-"

    def get_media_section_count(self) -> int:
        return len(self.media_sections)

    def get_media_section(self, index: int) -> MediaSection:
        return self.media_sections[index]

    def __str__(self) -> str:
        lines = [
            f"v=0{CRLF}",
            str(self.origin),
            f"s={self.session_name}{CRLF}",
            f"t=0 0{CRLF}",
            str(self.attributes),
        ]
        lines.extend(str(section) for section in self.media_sections)
        return "".join(lines)
