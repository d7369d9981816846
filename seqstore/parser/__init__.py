"""Parsers that turn raw packets or captures into identifier/payload pairs."""

from .packet import HEADER_SIZE, Packet, build_packet, parse_packet
from .pcap_reader import iter_udp_payloads

__all__ = ["HEADER_SIZE", "Packet", "build_packet", "iter_udp_payloads", "parse_packet"]
