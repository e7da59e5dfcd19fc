"""
Helpers shared by the CLI commands.
"""
import json
from typing import Any, List

import click

from flow_loader import FlowLoaderError, load_flows
from models.flow import Flow


def read_flows(filepath: str) -> List[Flow]:
    """Load a flow file, turning loader failures into CLI errors."""
    try:
        return load_flows(filepath)
    except (FlowLoaderError, OSError) as e:
        raise click.ClickException(str(e))


def dump_json(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
