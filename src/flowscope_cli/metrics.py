"""
CLI command for traffic metrics.
"""
import click

from analysis.formatting import format_number, format_percentage, format_time
from analysis.metrics import DEFAULT_BUCKET_SIZE_MS, calculate_metrics

from ._common import dump_json, read_flows


@click.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--bucket-size", type=click.IntRange(min=1), default=DEFAULT_BUCKET_SIZE_MS,
              show_default=True, help="Response time bucket width in ms")
@click.option("--corrected-domain-avg", is_flag=True,
              help="Average domain response time over timed flows only")
@click.option("--format", "format", type=click.Choice(["table", "json"]),
              default="table", show_default=True, help="Output format")
def metrics(filepath: str, bucket_size: int, corrected_domain_avg: bool, format: str):
    """
    Summarize error rate, latency and per-domain traffic.

    Example:
      flowscope metrics capture.pcap --bucket-size 1000
    """
    flows = read_flows(filepath)
    report = calculate_metrics(flows, bucket_size_ms=bucket_size,
                               corrected_domain_avg=corrected_domain_avg)

    if format == "json":
        click.echo(dump_json(report.to_dict()))
        return

    summary = report.summary
    click.echo("=" * 50)
    click.echo("NETWORK METRICS")
    click.echo("=" * 50)
    click.echo(f"Total Requests:    {format_number(summary.total_requests)}")
    click.echo(f"Error Rate:        {format_percentage(summary.error_rate)}")
    click.echo(f"Avg Response Time: {format_time(summary.avg_response_time)}")
    click.echo(f"Slow Queries:      {format_number(summary.slow_queries)}")

    click.echo("\nStatus Codes")
    click.echo("-" * 20)
    if not report.status_codes:
        click.echo("No data available")
    for entry in report.status_codes:
        click.echo(f"{entry.code:<6} {entry.count:>8}")

    click.echo("\nDomains")
    click.echo("-" * 60)
    if not report.domains:
        click.echo("No data available")
    for stat in report.domains:
        click.echo(f"{stat.domain:<40} {stat.count:>8} {format_time(stat.avg_time):>10}")

    click.echo(f"\nResponse Time ({bucket_size}ms buckets)")
    click.echo("-" * 30)
    if not report.response_times:
        click.echo("No data available")
    for point in report.response_times:
        click.echo(f"{point.timestamp:<15} {format_time(point.time):>10}")
