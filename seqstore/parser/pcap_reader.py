"""Pull UDP datagram payloads out of PCAP/PCAPNG captures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional

import dpkt

from seqstore.logging_utils import get_logger

LOGGER = get_logger(__name__)


def iter_udp_payloads(pcap_path: str | Path, port: Optional[int] = None) -> Iterator[bytes]:
    """Yield the payload of every UDP datagram in a capture, in capture order.

    When ``port`` is given only datagrams whose source or destination port
    matches are yielded. Frames that do not decode to UDP are skipped.
    """

    path = Path(pcap_path)
    if not path.exists():
        raise FileNotFoundError(f"PCAP not found: {path}")

    if path.stat().st_size == 0:
        return

    LOGGER.debug("Reading UDP payloads from %s", path)
    total = 0
    yielded = 0
    with path.open("rb") as handle:
        reader: Any
        try:
            reader = dpkt.pcap.Reader(handle)
        except (dpkt.dpkt.NeedData, ValueError):
            handle.seek(0)
            reader = dpkt.pcapng.Reader(handle)

        datalink = getattr(reader, "datalink", lambda: dpkt.pcap.DLT_EN10MB)()

        for _ts, buf in reader:
            total += 1
            try:
                udp = _decode_udp(datalink, buf)
            except (ValueError, AttributeError, dpkt.UnpackError) as exc:
                LOGGER.debug("Skipping undecodable frame %s: %s", total, exc)
                continue
            if udp is None:
                continue
            if port is not None and port not in (udp.sport, udp.dport):
                continue
            yielded += 1
            yield bytes(udp.data)

    LOGGER.info("Read %s UDP payloads from %s frames in %s", yielded, total, path)


def _decode_udp(datalink: int, buf: bytes) -> Optional[Any]:
    if datalink == dpkt.pcap.DLT_RAW:
        ip = dpkt.ip.IP(buf)
    elif datalink == dpkt.pcap.DLT_NULL:
        ip = dpkt.ip.IP(buf[4:])
    else:
        ip = dpkt.ethernet.Ethernet(buf).data

    if not isinstance(ip, (dpkt.ip.IP, dpkt.ip6.IP6)):
        return None

    udp = ip.data
    if not isinstance(udp, dpkt.udp.UDP):
        return None
    return udp


__all__ = ["iter_udp_payloads"]
