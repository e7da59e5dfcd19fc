"""
Flow file loading (JSON exports and packet captures).
"""

from .exceptions import FlowLoaderError, FlowFormatError
from .flow_source import IFlowSource
from .json_reader import JsonFlowReader, flow_from_dict
from .pcap_reader import PcapFlowReader
from .loader import load_flows, select_reader

__all__ = [
    'FlowLoaderError',
    'FlowFormatError',
    'IFlowSource',
    'JsonFlowReader',
    'PcapFlowReader',
    'flow_from_dict',
    'load_flows',
    'select_reader',
]
