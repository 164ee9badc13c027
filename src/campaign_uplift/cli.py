"""
Command-line interface for campaign-uplift.

Provides commands for:
  - Recomputing and persisting every activity's uplift
  - Ingesting activities and daily metrics into the store
  - Computing a report straight from files, without the store
  - Starting the API server
  - Showing the effective configuration
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from campaign_uplift.core.exceptions import UpliftError

app = typer.Typer(
    name="campaign-uplift",
    help="Campaign uplift attribution -- baseline, lift, confidence, overlap",
    add_completion=False,
)


def _stderr_sink(message) -> None:
    # Resolved per write so the sink follows whatever stream is current.
    sys.stderr.write(message)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Campaign uplift attribution."""
    logger.remove()
    logger.add(_stderr_sink, level="DEBUG" if verbose else "INFO")


def _fail(exc: UpliftError) -> None:
    logger.error(f"[{exc.code}] {exc}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# recompute
# ---------------------------------------------------------------------------

@app.command()
def recompute(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to uplift.yaml",
    ),
    database: Optional[Path] = typer.Option(
        None, "--database", "-d", help="SQLite database (overrides config)",
    ),
):
    """
    Recompute uplift for every activity and replace the persisted table.

    Loads the configuration once, reads all activities and daily metrics,
    and writes one uplift row per activity in a single transaction.
    """
    from campaign_uplift.config import load_settings
    from campaign_uplift.persistence.store import UpliftStore
    from campaign_uplift.pipeline.recompute import recompute_attribution

    try:
        settings = load_settings(config_path)
        store = UpliftStore(database or settings.storage.database_path)
        store.ensure_schema()
        result = recompute_attribution(store, settings.attribution)
    except UpliftError as exc:
        _fail(exc)
        return

    logger.info(f"Recomputed {result.count} activities in {result.duration_ms}ms")


# ---------------------------------------------------------------------------
# ingest
# ---------------------------------------------------------------------------

@app.command()
def ingest(
    activities: Optional[Path] = typer.Option(
        None, "--activities", "-a", help="CSV/Parquet file of activities",
    ),
    metrics: Optional[Path] = typer.Option(
        None, "--metrics", "-m", help="CSV/Parquet file of daily metrics",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to uplift.yaml",
    ),
    database: Optional[Path] = typer.Option(
        None, "--database", "-d", help="SQLite database (overrides config)",
    ),
):
    """Load activities and/or daily metrics from files into the store."""
    from campaign_uplift.config import load_settings
    from campaign_uplift.ingestion.loaders import load_activities, load_daily_metrics
    from campaign_uplift.persistence.store import UpliftStore

    if activities is None and metrics is None:
        logger.error("Nothing to ingest: pass --activities and/or --metrics")
        raise typer.Exit(code=1)

    try:
        settings = load_settings(config_path)
        store = UpliftStore(database or settings.storage.database_path)
        store.ensure_schema()
        if activities is not None:
            n = store.write_activities(load_activities(activities))
            logger.info(f"Ingested {n} activities from {activities}")
        if metrics is not None:
            n = store.write_daily_metrics(load_daily_metrics(metrics))
            logger.info(f"Ingested {n} daily metric rows from {metrics}")
    except UpliftError as exc:
        _fail(exc)
    except FileNotFoundError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

@app.command()
def report(
    activities: Path = typer.Option(..., "--activities", "-a", help="Activities file"),
    metrics: Path = typer.Option(..., "--metrics", "-m", help="Daily metrics file"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to uplift.yaml",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report to this CSV file",
    ),
):
    """Compute uplift reports directly from files, without touching the store."""
    from campaign_uplift.attribution.engine import compute_all_reports
    from campaign_uplift.attribution.reports import reports_to_dataframe
    from campaign_uplift.config import get_config
    from campaign_uplift.ingestion.loaders import load_activities, load_daily_metrics

    try:
        config = get_config(config_path)
        reports = compute_all_reports(
            load_activities(activities), load_daily_metrics(metrics), config,
        )
    except UpliftError as exc:
        _fail(exc)
        return
    except FileNotFoundError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        reports_to_dataframe(reports).to_csv(output, index=False)
        logger.info(f"Wrote {len(reports)} reports to {output}")
        return

    for r in reports:
        logger.info(
            f"  [{r.confidence.value}] {r.activity_id}  {r.channel}  "
            f"{r.activity.date.isoformat()}  baseline={r.baseline_avg:.1f}  "
            f"raw={r.incremental_activations:.1f}  "
            f"attributed={r.attributed_incremental_activations:.1f} ({r.metric})"
        )


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h"),
    port: Optional[int] = typer.Option(None, "--port", "-p"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Start the REST API server (recompute trigger and uplift views)."""
    from campaign_uplift.config import load_settings
    from campaign_uplift.server.app import run_server

    try:
        server = load_settings().server
    except UpliftError as exc:
        _fail(exc)
        return
    run_server(host=host or server.api_host, port=port or server.api_port, reload=reload)


# ---------------------------------------------------------------------------
# show-config
# ---------------------------------------------------------------------------

@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to uplift.yaml",
    ),
):
    """Print the effective configuration after env overrides."""
    import yaml

    from campaign_uplift.config import load_settings

    try:
        settings = load_settings(config_path)
    except UpliftError as exc:
        _fail(exc)
        return
    typer.echo(yaml.dump(settings.to_flat_dict(), default_flow_style=False, sort_keys=False))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
