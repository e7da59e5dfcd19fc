"""
Tests for the flowscope command line interface.
Run with: pytest tests/test_cli.py
"""
import json
import logging
import os
import sys

import pytest
from click.testing import CliRunner

# Add src to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from flowscope_cli.main import cli

AD_HOST = "ads-api-kcsandbox-01.kidsnote.com"
IMP_PATH = "/api/v1/kidsnote_benefit/benefit/imp"
CLICK_PATH = "/api/v2/kidsnote_benefit/benefit/click"


def _http(flow_id, host, path, start, duration=0.2, status=200, content=None, method="GET"):
    return {
        "id": flow_id,
        "type": "http",
        "request": {"host": host, "path": path, "scheme": "https", "method": method,
                    "timestamp_start": start, "content": content},
        "response": {"status_code": status, "timestamp_end": start + duration},
    }


FLOWS = [
    _http("f1", AD_HOST, IMP_PATH + "?adsid=AAA", 100.0),
    _http("f2", AD_HOST, IMP_PATH + "?adsid=BBB", 101.0),
    _http("f3", AD_HOST, CLICK_PATH + "?adsid=BBB", 102.0, status=500),
    _http("f4", "stat.tiara.daum.net", "/track", 103.0, method="POST", content=json.dumps([
        {"action": {"type": "Click", "name": "banner"},
         "common": {"page": "home", "section": "top", "access_timestamp": 103000}},
        {"action": {"type": "Pageview", "name": "main"},
         "common": {"page": "home", "access_timestamp": 103001}},
    ])),
]


@pytest.fixture(autouse=True)
def _reset_root_handlers():
    root = logging.getLogger()
    saved = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in saved:
            root.removeHandler(handler)


@pytest.fixture
def flows_file(tmp_path):
    path = tmp_path / "flows.json"
    path.write_text(json.dumps(FLOWS), encoding="utf-8")
    return str(path)


@pytest.fixture
def empty_file(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]", encoding="utf-8")
    return str(path)


def test_ads_table(flows_file):
    result = CliRunner().invoke(cli, ["ads", flows_file])
    assert result.exit_code == 0, result.output
    assert "Ads: 2  Impressed: 2  Clicked: 1  CTR: 50.0%" in result.output
    lines = result.output.splitlines()
    rows = [line for line in lines if line.startswith(("AAA", "BBB"))]
    # newest first
    assert rows[0].startswith("BBB")
    assert "Clicked" in rows[0]
    assert "Impressed" in rows[1]


def test_ads_json_with_filters(flows_file):
    result = CliRunner().invoke(cli, ["ads", flows_file, "--status", "impressed", "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["stats"]["total"] == 2
    assert [ad["adsid"] for ad in data["ads"]] == ["AAA"]
    assert data["ads"][0]["status"] == "impressed"
    assert data["ads"][0]["status_color"] == "#3b82f6"
    assert data["flows"] == {"f1": "AAA", "f2": "BBB", "f3": "BBB"}


def test_ads_empty(empty_file):
    result = CliRunner().invoke(cli, ["ads", empty_file])
    assert result.exit_code == 0
    assert "CTR: -" in result.output
    assert "No ad tracking data." in result.output


def test_tiara_table_and_filter(flows_file):
    result = CliRunner().invoke(cli, ["tiara", flows_file])
    assert result.exit_code == 0, result.output
    assert "Action types: Click, Pageview" in result.output
    assert "banner" in result.output
    assert "main" in result.output

    result = CliRunner().invoke(cli, ["tiara", flows_file, "-t", "Click", "--format", "json"])
    data = json.loads(result.output)
    assert data["action_types"] == ["Click", "Pageview"]
    assert [e["id"] for e in data["events"]] == ["f4-0"]
    assert data["events"][0]["timestamp"] == 103000


def test_tiara_jsonl_limit(flows_file):
    result = CliRunner().invoke(cli, ["tiara", flows_file, "--format", "jsonl", "--limit", "1"])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["action_name"] == "banner"


def test_tiara_out_of_range_timestamp(tmp_path):
    path = tmp_path / "flows.json"
    path.write_text(json.dumps([
        _http("t1", "stat.tiara.daum.net", "/track", 1.0, method="POST", content=json.dumps([
            {"action": {"type": "Click", "name": "far-future"},
             "common": {"page": "home", "access_timestamp": 1e20}},
        ])),
    ]), encoding="utf-8")
    result = CliRunner().invoke(cli, ["tiara", str(path)])
    assert result.exit_code == 0, result.output
    row = [line for line in result.output.splitlines() if "far-future" in line][0]
    assert row.startswith("-")


def test_tiara_empty(empty_file):
    result = CliRunner().invoke(cli, ["tiara", empty_file])
    assert result.exit_code == 0
    assert "Action types: -" in result.output
    assert "No Tiara events." in result.output


def test_metrics_table(flows_file):
    result = CliRunner().invoke(cli, ["metrics", flows_file])
    assert result.exit_code == 0, result.output
    assert "NETWORK METRICS" in result.output
    assert "Total Requests:    4" in result.output
    assert "Error Rate:        25.0%" in result.output
    assert "Avg Response Time: 200ms" in result.output
    assert AD_HOST in result.output


def test_metrics_json(flows_file):
    result = CliRunner().invoke(cli, ["metrics", flows_file, "--bucket-size", "1000", "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["summary"]["total_requests"] == 4
    assert data["domains"][0] == {"domain": AD_HOST, "count": 3, "avg_time": pytest.approx(200)}
    assert [p["timestamp"] for p in data["response_times"]] == [100000, 101000, 102000, 103000]


def test_metrics_empty(empty_file):
    result = CliRunner().invoke(cli, ["metrics", empty_file])
    assert result.exit_code == 0
    assert result.output.count("No data available") == 3


def test_metrics_rejects_zero_bucket(flows_file):
    result = CliRunner().invoke(cli, ["metrics", flows_file, "--bucket-size", "0"])
    assert result.exit_code != 0


def test_unreadable_file_is_reported(tmp_path):
    path = tmp_path / "flows.json"
    path.write_text("{oops", encoding="utf-8")
    result = CliRunner().invoke(cli, ["metrics", str(path)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_non_utf8_file_is_reported(tmp_path):
    path = tmp_path / "flows.json"
    path.write_bytes(b"[\xff\xfe]")
    result = CliRunner().invoke(cli, ["ads", str(path)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_missing_file_is_usage_error(tmp_path):
    result = CliRunner().invoke(cli, ["ads", str(tmp_path / "nope.json")])
    assert result.exit_code == 2
