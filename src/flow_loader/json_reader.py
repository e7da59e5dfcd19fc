"""
Reader for flow exports in JSON form.

Supported layouts:
- a JSON array of flow objects (the proxy web UI's /flows dump)
- a JSON object with a "flows" array
- JSON lines, one flow object per line (.jsonl, or a .json file that
  does not parse as a single document)

Flow objects use the proxy's field names:
    {"id", "type",
     "request": {"pretty_host" | "host", "path", "scheme",
                 "timestamp_start", "content", "method"},
     "response": {"status_code", "timestamp_end"}}

Records that cannot be turned into a Flow are skipped with a warning.
"""
import json
import logging
import os
from typing import Any, Dict, Iterator, List, Optional

from models.flow import Flow, FlowRequest, FlowResponse

from .exceptions import FlowFormatError
from .flow_source import IFlowSource

logger = logging.getLogger(__name__)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def flow_from_dict(data: Dict[str, Any]) -> Flow:
    """
    Build a Flow from one exported flow object.

    Raises:
        FlowFormatError: if the record is not an object, has no id, or
            carries a non-numeric status code.
    """
    if not isinstance(data, dict):
        raise FlowFormatError(f"Flow record must be an object, got {type(data).__name__}")
    if data.get("id") is None:
        raise FlowFormatError("Flow record has no 'id'")

    flow_id = str(data["id"])

    request = None
    req = data.get("request")
    if isinstance(req, dict):
        request = FlowRequest(
            host=req.get("pretty_host") or req.get("host") or "",
            path=req.get("path") or "",
            scheme=req.get("scheme") or "https",
            timestamp_start=_as_float(req.get("timestamp_start")),
            content=req.get("content"),
            method=req.get("method") or "GET",
        )

    response = None
    resp = data.get("response")
    if isinstance(resp, dict):
        try:
            status_code = int(resp.get("status_code"))
        except (TypeError, ValueError):
            raise FlowFormatError(
                f"Flow {flow_id} has an invalid status code: {resp.get('status_code')!r}"
            )
        response = FlowResponse(
            status_code=status_code,
            timestamp_end=_as_float(resp.get("timestamp_end")),
        )

    return Flow(
        id=flow_id,
        type=data.get("type") or "http",
        request=request,
        response=response,
    )


class JsonFlowReader(IFlowSource):
    """Reads flows from a JSON or JSON-lines export."""

    def __init__(self, filepath: str):
        self.filepath = filepath
        self.format = "jsonl" if filepath.lower().endswith(".jsonl") else "json"
        self._records: Optional[List[Any]] = None
        self._flow_count = 0
        self._skipped = 0
        self._file_size = 0

    def open(self):
        if not os.path.exists(self.filepath):
            raise FileNotFoundError(f"Flow file not found: {self.filepath}")

        self._file_size = os.path.getsize(self.filepath)
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise FlowFormatError(f"Flow export {self.filepath} is not UTF-8: {e}")

        if self.format == "json":
            try:
                self._records = self._records_from_document(json.loads(text))
                return
            except ValueError as e:
                if isinstance(e, FlowFormatError) or "\n" not in text.strip():
                    raise FlowFormatError(f"Invalid flow export {self.filepath}: {e}")
                logger.debug("%s is not a single JSON document, reading as JSON lines", self.filepath)
                self.format = "jsonl"

        self._records = self._records_from_lines(text)

    def _records_from_document(self, document: Any) -> List[Any]:
        if isinstance(document, list):
            return document
        if isinstance(document, dict):
            if isinstance(document.get("flows"), list):
                return document["flows"]
            if "id" in document:
                return [document]
        raise FlowFormatError(
            f"Expected a list of flows in {self.filepath}, got {type(document).__name__}"
        )

    def _records_from_lines(self, text: str) -> List[Any]:
        records = []
        bad_lines = 0
        for line_no, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                bad_lines += 1
                logger.warning("Skipping invalid JSON line %d in %s: %s", line_no, self.filepath, e)

        if bad_lines and not records:
            raise FlowFormatError(f"No valid JSON lines in {self.filepath}")
        self._skipped += bad_lines
        return records

    def __iter__(self) -> Iterator[Flow]:
        if self._records is None:
            raise RuntimeError("Reader not opened. Use 'with JsonFlowReader(path) as reader:'")

        for index, record in enumerate(self._records):
            try:
                flow = flow_from_dict(record)
            except FlowFormatError as e:
                self._skipped += 1
                logger.warning("Skipping flow record %d in %s: %s", index, self.filepath, e)
                continue
            self._flow_count += 1
            yield flow

    def close(self):
        self._records = None

    def get_session_info(self) -> Dict[str, Any]:
        return {
            'flow_count': self._flow_count,
            'skipped': self._skipped,
            'file_size': self._file_size,
            'format': self.format,
        }
