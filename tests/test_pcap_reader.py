"""
Tests for HTTP flow reconstruction from packet captures.
Run with: pytest tests/test_pcap_reader.py
"""
import json
import os
import sys

import pytest
from scapy.layers.inet import IP, TCP, UDP
from scapy.layers.l2 import Ether
from scapy.packet import Raw
from scapy.utils import wrpcap

# Add src to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from flow_loader import FlowFormatError, PcapFlowReader, load_flows
from analysis.ad_tracking import build_ad_records
from analysis.tiara import parse_tiara_flows
from models.ad import AdStatus

CLIENT = "10.0.0.2"
SERVER = "10.0.0.1"
AD_HOST = "ads-api-kcsandbox-01.kidsnote.com"
TIARA_HOST = "stat.tiara.daum.net"


def _packet(payload, ts, client_port=50000, to_server=True):
    if to_server:
        ip = IP(src=CLIENT, dst=SERVER)
        tcp = TCP(sport=client_port, dport=80, flags="PA")
    else:
        ip = IP(src=SERVER, dst=CLIENT)
        tcp = TCP(sport=80, dport=client_port, flags="PA")
    pkt = Ether() / ip / tcp / Raw(load=payload)
    pkt.time = ts
    return pkt


def _request(method, path, host, body=b"", **kwargs):
    head = f"{method} {path} HTTP/1.1\r\nHost: {host}\r\n"
    if body:
        head += f"Content-Length: {len(body)}\r\n"
    return _packet(head.encode("ascii") + b"\r\n" + body, **kwargs)


def _response(status, reason="OK", **kwargs):
    payload = f"HTTP/1.1 {status} {reason}\r\nContent-Length: 0\r\n\r\n".encode("ascii")
    return _packet(payload, to_server=False, **kwargs)


def _write(tmp_path, packets, name="capture.pcap"):
    path = tmp_path / name
    wrpcap(str(path), packets)
    return str(path)


def test_request_response_pairing(tmp_path):
    path = _write(tmp_path, [
        _request("GET", "/api/v1/kidsnote_benefit/benefit/imp?adsid=XYZ", AD_HOST, ts=100.0),
        _request("GET", "/other", "example.com", ts=100.5, client_port=50001),
        _response(204, "No Content", ts=100.25),
        _response(404, "Not Found", ts=101.0, client_port=50001),
    ])

    with PcapFlowReader(path) as reader:
        flows = list(reader)
        info = reader.get_session_info()

    assert [f.id for f in flows] == ["pcap-1", "pcap-2"]
    first, second = flows
    assert first.request.host == AD_HOST
    assert first.request.scheme == "http"
    assert first.request.path == "/api/v1/kidsnote_benefit/benefit/imp?adsid=XYZ"
    assert first.request.timestamp_start == pytest.approx(100.0)
    assert first.response.status_code == 204
    assert first.response_time_ms == pytest.approx(250)
    assert second.response.status_code == 404
    assert info["packet_count"] == 4
    assert info["flow_count"] == 2
    assert info["unanswered"] == 0


def test_requests_on_one_connection_are_answered_in_order(tmp_path):
    path = _write(tmp_path, [
        _request("GET", "/a", "example.com", ts=1.0),
        _request("GET", "/b", "example.com", ts=1.5),
        _response(200, ts=2.0),
        _response(500, "Internal Server Error", ts=2.5),
    ])
    flows = load_flows(path)
    assert [(f.request.path, f.response.status_code) for f in flows] == [("/a", 200), ("/b", 500)]


def test_unanswered_request_is_in_flight(tmp_path):
    path = _write(tmp_path, [
        _request("GET", "/slow", "example.com", ts=1.0),
        Ether() / IP(src=CLIENT, dst=SERVER) / UDP(sport=5353, dport=5353) / Raw(load=b"x"),
    ])
    with PcapFlowReader(path) as reader:
        flows = list(reader)
        info = reader.get_session_info()
    assert len(flows) == 1
    assert flows[0].response is None
    assert info["unanswered"] == 1


def test_request_body_feeds_tiara_decoding(tmp_path):
    body = json.dumps([{"action": {"type": "Click", "name": "banner"},
                        "common": {"page": "home", "access_timestamp": 1700000000000}}]).encode()
    path = _write(tmp_path, [
        _request("POST", "/track", TIARA_HOST, body=body, ts=5.0),
        _response(200, ts=5.5),
    ])
    flows = load_flows(path)
    assert flows[0].request.method == "POST"
    assert flows[0].request.content == body

    events = parse_tiara_flows(flows)
    assert [(e.action_type, e.page) for e in events] == [("Click", "home")]


def test_capture_feeds_ad_tracking(tmp_path):
    path = _write(tmp_path, [
        _request("GET", "/api/v1/kidsnote_benefit/benefit/imp?adsid=XYZ", AD_HOST, ts=10.0),
        _response(200, ts=10.1),
        _request("GET", "/api/v2/kidsnote_benefit/benefit/click?adsid=XYZ", AD_HOST, ts=12.0),
        _response(200, ts=12.1),
    ])
    ads = build_ad_records(load_flows(path))
    assert ads["XYZ"].status == AdStatus.CLICKED
    assert ads["XYZ"].impression_time == pytest.approx(10_000)


def test_not_a_capture(tmp_path):
    path = tmp_path / "broken.pcap"
    path.write_bytes(b"this is not a capture file at all")
    with pytest.raises(FlowFormatError):
        load_flows(str(path))
