"""
Reconstructs HTTP flows from a packet capture (PCAP or PCAPNG) with scapy.

Only cleartext HTTP is visible in a capture, so every flow gets scheme
"http". Each request is paired with the next response seen on the same
TCP connection (HTTP/1.x answers in order). Requests that never get an
answer are yielded as in-flight flows.

Messages are dissected per packet: a request whose headers span several
TCP segments is not reassembled.
"""
from collections import deque
from typing import Any, Deque, Dict, Iterator, List, Optional, Tuple
import os

from scapy.error import Scapy_Exception
from scapy.layers.http import HTTPRequest, HTTPResponse
from scapy.layers.inet import IP, TCP
from scapy.layers.inet6 import IPv6
from scapy.utils import rdpcap

from models.flow import Flow, FlowRequest, FlowResponse

from .exceptions import FlowFormatError
from .flow_source import IFlowSource

ConnKey = Tuple[str, int, str, int]


def _text(value: Optional[bytes]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _addresses(packet) -> Optional[Tuple[str, str]]:
    if packet.haslayer(IP):
        return packet[IP].src, packet[IP].dst
    if packet.haslayer(IPv6):
        return packet[IPv6].src, packet[IPv6].dst
    return None


class PcapFlowReader(IFlowSource):
    """
    Reads a capture file and yields one Flow per HTTP request.

    Flow ids are 'pcap-<n>', numbered from 1 in request order.
    """

    def __init__(self, filepath: str):
        self.filepath = filepath
        self._packets = None
        self._packet_count = 0
        self._flow_count = 0
        self._unanswered = 0
        self._file_size = 0

    def open(self):
        if not os.path.exists(self.filepath):
            raise FileNotFoundError(f"Capture file not found: {self.filepath}")

        self._file_size = os.path.getsize(self.filepath)
        try:
            self._packets = rdpcap(self.filepath)
        except (Scapy_Exception, EOFError, OSError) as e:
            raise FlowFormatError(f"Failed to read capture {self.filepath}: {e}")
        self._packet_count = len(self._packets)

    def __iter__(self) -> Iterator[Flow]:
        if self._packets is None:
            raise RuntimeError("Reader not opened. Use 'with PcapFlowReader(path) as reader:'")

        # request flows in capture order; responses fill them in later
        flows: List[Dict[str, Any]] = []
        pending: Dict[ConnKey, Deque[int]] = {}

        for packet in self._packets:
            if not packet.haslayer(TCP):
                continue
            addresses = _addresses(packet)
            if addresses is None:
                continue
            src, dst = addresses
            sport, dport = packet[TCP].sport, packet[TCP].dport

            if packet.haslayer(HTTPRequest):
                request = packet[HTTPRequest]
                host = _text(request.Host) or dst
                flows.append({
                    'id': f"pcap-{len(flows) + 1}",
                    'request': FlowRequest(
                        host=host,
                        path=_text(request.Path) or "/",
                        scheme="http",
                        timestamp_start=float(packet.time),
                        content=bytes(request.payload) or None,
                        method=_text(request.Method) or "GET",
                    ),
                    'response': None,
                })
                pending.setdefault((src, sport, dst, dport), deque()).append(len(flows) - 1)

            elif packet.haslayer(HTTPResponse):
                # the response travels server -> client
                queue = pending.get((dst, dport, src, sport))
                if not queue:
                    continue
                response = packet[HTTPResponse]
                try:
                    status_code = int(_text(response.Status_Code))
                except ValueError:
                    continue
                flows[queue.popleft()]['response'] = FlowResponse(
                    status_code=status_code,
                    timestamp_end=float(packet.time),
                )

        for entry in flows:
            if entry['response'] is None:
                self._unanswered += 1
            self._flow_count += 1
            yield Flow(id=entry['id'], type="http",
                       request=entry['request'], response=entry['response'])

    def close(self):
        self._packets = None

    def get_session_info(self) -> Dict[str, Any]:
        return {
            'packet_count': self._packet_count,
            'flow_count': self._flow_count,
            'unanswered': self._unanswered,
            'file_size': self._file_size,
            'format': 'pcap',
        }
