"""
CLI command for the ad lifecycle view.
"""
from typing import Optional

import click

from analysis.ad_tracking import ad_tracking_stats, build_ad_records, index_flows_to_ads, select_ads
from analysis.formatting import format_percentage, format_status, format_timestamp, status_color
from models.ad import AdStatus

from ._common import dump_json, read_flows


@click.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--search", "-s", default="", help="Filter by ad id or title (case-insensitive)")
@click.option("--status", type=click.Choice([s.value for s in AdStatus]),
              help="Only show ads in this lifecycle status")
@click.option("--monotonic", is_flag=True,
              help="Never move an ad back to an earlier status")
@click.option("--format", "format", type=click.Choice(["table", "json"]),
              default="table", show_default=True, help="Output format")
def ads(filepath: str, search: str, status: Optional[str], monotonic: bool, format: str):
    """
    Reconstruct ad request/impression/click lifecycles.

    Example:
      flowscope ads flows.json --status clicked
    """
    flows = read_flows(filepath)
    records = build_ad_records(flows, monotonic=monotonic)
    stats = ad_tracking_stats(records)
    selected = select_ads(records, search=search,
                          status=AdStatus(status) if status else None)

    if format == "json":
        click.echo(dump_json({
            "stats": stats.to_dict(),
            "ads": [
                dict(ad.to_dict(), status_color=status_color(ad.status))
                for ad in selected
            ],
            # tracking flow id -> adsid
            "flows": index_flows_to_ads(flows),
        }))
        return

    ctr = format_percentage(stats.ctr) if stats.ctr is not None else "-"
    click.echo(f"Ads: {stats.total}  Impressed: {stats.impressed}  "
               f"Clicked: {stats.clicked}  CTR: {ctr}")
    click.echo()

    if not selected:
        click.echo("No ad tracking data.")
        return

    click.echo(f"{'Ad ID':<24} {'Title':<16} {'Status':<10} {'Impression':<13} {'Click':<13}")
    click.echo("-" * 80)
    for ad in selected:
        click.echo(
            f"{ad.adsid:<24} {ad.title:<16} {format_status(ad.status):<10} "
            f"{format_timestamp(ad.impression_time):<13} {format_timestamp(ad.click_time):<13}"
        )
