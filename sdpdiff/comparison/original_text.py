"""
Recover verbatim attribute lines from the original SDP text.

Used when the two parsers serialize an attribute differently: if the
candidate's serialization is exactly what the input said, the reference
canonicalized it and the difference is not a regression.
"""

from typing import List

MEDIA_SECTION_PREFIX = "m="
RTCP_FB_PREFIX = "a=rtcp-fb:"
VENDOR_TOKEN_PREFIX = "x-"


def split_lines(sdp: str) -> List[str]:
    """
    Split SDP text on line feeds.

    Carriage returns stay on their lines so that re-joined lines compare
    equal to CRLF-terminated serializations. A trailing line feed does not
    produce an extra empty line.
    """
    lines = sdp.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def is_vendor_rtcp_fb_line(line: str) -> bool:
    """
    Return True for rtcp-fb lines carrying a non-standard "x-" feedback type.

    Matches the whole line structurally: "a=rtcp-fb:" followed by a numeric
    or "*" payload id, then any later token starting with "x-", e.g.
    "a=rtcp-fb:121 x-foo" or "a=rtcp-fb:* ccm x-bar". Some endpoints send
    these in every offer.
    """
    if not line.startswith(RTCP_FB_PREFIX):
        return False

    tokens = line[len(RTCP_FB_PREFIX):].split()
    if len(tokens) < 2:
        return False

    payload_id = tokens[0]
    if payload_id != "*" and not payload_id.isdigit():
        return False

    return any(token.startswith(VENDOR_TOKEN_PREFIX) for token in tokens[1:])


def get_attribute_lines(original_sdp: str, attribute_prefix: str, level: int) -> str:
    """
    Collect the lines of one attribute at one nesting level.

    Args:
        original_sdp: The raw SDP both parsers were given
        attribute_prefix: Attribute prefix without colon, e.g. "a=rtcp-fb"
        level: -1 for session level, otherwise the media section index

    Returns:
        Matching lines, each followed by "\\n"; "" when nothing matched
    """
    attribute_to_find = attribute_prefix + ":"
    matched: List[str] = []
    current_level = -1

    for line in split_lines(original_sdp):
        if line.startswith(MEDIA_SECTION_PREFIX):
            if level > current_level:
                matched.clear()
                current_level += 1
            else:
                break
        elif line.startswith(attribute_to_find):
            if is_vendor_rtcp_fb_line(line):
                continue
            matched.append(line + "\n")

    if current_level != level:
        return ""
    return "".join(matched)
