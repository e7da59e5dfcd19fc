"""
Picks a reader for a flow file and loads it.
"""
from typing import List, Type

from models.flow import Flow

from .exceptions import FlowFormatError
from .flow_source import IFlowSource
from .json_reader import JsonFlowReader
from .pcap_reader import PcapFlowReader

_PCAP_MAGIC = {
    b"\xa1\xb2\xc3\xd4",
    b"\xd4\xc3\xb2\xa1",
    b"\xa1\xb2\x3c\x4d",
    b"\x4d\x3c\xb2\xa1",
}
_PCAPNG_MAGIC = b"\x0a\x0d\x0d\x0a"


def select_reader(filepath: str) -> Type[IFlowSource]:
    """Choose a reader by extension, falling back to the file's first bytes."""
    lower = filepath.lower()
    if lower.endswith((".json", ".jsonl")):
        return JsonFlowReader
    if lower.endswith((".pcap", ".pcapng")):
        return PcapFlowReader

    with open(filepath, "rb") as f:
        head = f.read(4)

    if head == _PCAPNG_MAGIC or head in _PCAP_MAGIC:
        return PcapFlowReader
    if head.lstrip()[:1] in (b"[", b"{"):
        return JsonFlowReader

    raise FlowFormatError(f"Unsupported flow file format: {filepath}")


def load_flows(filepath: str) -> List[Flow]:
    """Read every flow in a file, in file order."""
    reader_cls = select_reader(filepath)
    with reader_cls(filepath) as reader:
        return list(reader)
