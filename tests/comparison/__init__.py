"""
Parser Parity Testing

Builds reference/candidate SDP document pairs for the comparator and
replays them through end-to-end comparison scenarios.
"""

__version__ = "1.0"
__all__ = ["SdpFactory"]
