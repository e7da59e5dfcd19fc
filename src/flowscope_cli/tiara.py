"""
CLI command for decoded Tiara analytics events.
"""
from typing import Optional

import click

from analysis.formatting import format_timestamp
from analysis.tiara import extract_unique_action_types, filter_tiara_events, parse_tiara_flows

from ._common import dump_json, read_flows


@click.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--action-type", "-t", help="Only show events of this action type")
@click.option("--search", "-s", default="", help="Match action name, page, section or summary")
@click.option("--limit", type=int, default=0, show_default=True,
              help="Max events to print (0 = no limit)")
@click.option("--format", "format", type=click.Choice(["table", "json", "jsonl"]),
              default="table", show_default=True, help="Output format")
def tiara(filepath: str, action_type: Optional[str], search: str, limit: int, format: str):
    """
    Decode Tiara analytics events from request bodies.

    Example:
      flowscope tiara flows.json --action-type Click
    """
    flows = read_flows(filepath)
    events = parse_tiara_flows(flows)
    action_types = extract_unique_action_types(events)
    selected = filter_tiara_events(events, action_type=action_type, search=search)
    if limit > 0:
        selected = selected[:limit]

    if format == "json":
        click.echo(dump_json({
            "action_types": action_types,
            "events": [event.to_dict() for event in selected],
        }))
        return
    if format == "jsonl":
        for event in selected:
            click.echo(dump_json(event.to_dict()))
        return

    click.echo(f"Action types: {', '.join(action_types) or '-'}")
    click.echo()

    if not selected:
        click.echo("No Tiara events.")
        return

    click.echo(f"{'Time':<13} {'Type':<12} {'Name':<20} {'Page':<16} {'Section':<12} Summary")
    click.echo("-" * 100)
    for event in selected:
        click.echo(
            f"{format_timestamp(event.timestamp):<13} {event.action_type:<12} "
            f"{event.action_name:<20} {event.page:<16} {event.section:<12} {event.summary}"
        )
