"""Change Rewind CLI -- score the changes recorded before an incident."""
# mypy: disable-error-code="misc,untyped-decorator"

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import wraps
from typing import Any

import click
import structlog

from rewind.changes.loader import find_event, load_events
from rewind.changes.rewind import build_timeline, summarize
from rewind.changes.window import events_before_incident, parse_incident_at, parse_time_window
from rewind.cli.output import print_detail, print_error, print_json, print_list, print_table
from rewind.config import settings
from rewind.exceptions import RewindError
from rewind.models.base import IncidentContext, Severity
from rewind.observability.logging import configure_logging
from rewind.scoring.engine import score_change_event, score_multiple_events
from rewind.scoring.methodology import scoring_methodology
from rewind.scoring.report import build_event_report, build_incident_report

logger = structlog.get_logger()

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _handle_errors(func: Callable[..., None]) -> Callable[..., None]:
    """Report domain errors on stderr and exit 1.

    With ``--format json`` the error is written as an RFC 7807 problem detail.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except RewindError as exc:
            logger.info("cli.command_failed", error=exc.detail, status=exc.status_code)
            ctx = click.get_current_context()
            if ctx.obj and ctx.obj.get("format") == "json":
                if not exc.instance:
                    exc.instance = ctx.command_path
                print_json(exc.to_problem_detail(), err=True)
            else:
                print_error(exc.detail)
            raise SystemExit(1) from exc

    return wrapper


def _incident_options(func: Callable[..., None]) -> Callable[..., None]:
    options = [
        click.option(
            "--incident-at",
            required=True,
            help="Incident start, ISO 8601 (e.g. 2026-01-18T14:32:00Z).",
        ),
        click.option("--service", default=None, help="Service experiencing the incident."),
        click.option("--environment", default=None, help="Environment of the incident."),
        click.option(
            "--severity",
            type=click.Choice([s.value for s in Severity]),
            default=settings.default_severity,
            show_default=True,
            help="Incident severity.",
        ),
        click.option("--description", default=None, help="Free-text incident description."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _context(
    incident_at: str,
    service: str | None,
    environment: str | None,
    severity: str,
    description: str | None,
) -> IncidentContext:
    return IncidentContext(
        incident_at=parse_incident_at(incident_at),
        service=service,
        environment=environment,
        severity=Severity(severity),
        description=description,
    )


@click.group()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=settings.log_level,
    help="Minimum level for log lines written to stderr.",
)
@click.version_option(version=settings.app_version, prog_name=settings.app_name)
@click.pass_context
def cli(ctx: click.Context, output_format: str, log_level: str) -> None:
    """Change Rewind -- find which changes most plausibly caused an incident."""
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


@cli.command()
@click.argument("events_file", type=click.Path(dir_okay=False))
@_incident_options
@click.option(
    "--window",
    default=settings.score_window,
    show_default=True,
    help='Analysis window before the incident, e.g. "30m", "2h", "1d".',
)
@click.option("--limit", type=int, default=None, help="Max events to analyze (1-1000).")
@click.pass_context
@_handle_errors
def score(
    ctx: click.Context,
    events_file: str,
    incident_at: str,
    service: str | None,
    environment: str | None,
    severity: str,
    description: str | None,
    window: str,
    limit: int | None,
) -> None:
    """Score every change in the window before an incident."""
    context = _context(incident_at, service, environment, severity, description)
    span = parse_time_window(window)
    events = events_before_incident(
        load_events(events_file),
        context.incident_at,
        span,
        service=service,
        environment=environment,
        limit=limit,
    )
    assessment = score_multiple_events(
        events, context, max_workers=settings.scoring_max_workers
    )
    report = build_incident_report(assessment, context, context.incident_at - span, window)

    if ctx.obj["format"] == "json":
        print_json(report)
        return

    overall = assessment.overall_score
    click.echo(f"Overall risk: {overall.level.value} ({overall.score}/100)")
    click.echo(overall.explanation)
    rows = [
        [
            item.event.id,
            item.event.occurred_at.isoformat(),
            item.event.type,
            item.event.service,
            item.event.environment,
            str(item.score.score),
            item.score.level.value,
        ]
        for item in assessment.individual_scores
    ]
    if rows:
        print_table(["ID", "OCCURRED AT", "TYPE", "SERVICE", "ENV", "SCORE", "LEVEL"], rows)
    print_list(
        "Correlations",
        [f"{c.description} (+{c.risk_increase})" for c in assessment.correlations],
    )
    print_list("Recommendations", overall.recommendations)


@cli.command("score-event")
@click.argument("events_file", type=click.Path(dir_okay=False))
@click.argument("event_id")
@_incident_options
@click.pass_context
@_handle_errors
def score_event(
    ctx: click.Context,
    events_file: str,
    event_id: str,
    incident_at: str,
    service: str | None,
    environment: str | None,
    severity: str,
    description: str | None,
) -> None:
    """Score a single change event against an incident."""
    context = _context(incident_at, service, environment, severity, description)
    events = load_events(events_file)
    event = find_event(events, event_id)
    related = events_before_incident(
        events, context.incident_at, timedelta(hours=24), service=event.service
    )
    result = score_change_event(event, context, related)

    if ctx.obj["format"] == "json":
        print_json(build_event_report(event, context, result, len(related)))
        return

    click.echo(f"{event.type} to {event.service}: {result.level.value} ({result.score}/100)")
    click.echo(result.explanation)
    print_table(
        ["FACTOR", "SCORE", "WEIGHT", "DESCRIPTION"],
        [[f.name, f"{f.score:g}", f"{f.weight:.2f}", f.description] for f in result.factors],
    )
    print_list("Recommendations", result.recommendations)


@cli.command()
@click.argument("events_file", type=click.Path(dir_okay=False))
@click.option("--incident-at", required=True, help="Incident start, ISO 8601.")
@click.option("--window", default=settings.rewind_window, show_default=True)
@click.option("--service", default=None, help="Only changes to this service.")
@click.option("--environment", default=None, help="Only changes in this environment.")
@click.option("--limit", type=int, default=None, help="Max events to list (1-1000).")
@click.pass_context
@_handle_errors
def timeline(
    ctx: click.Context,
    events_file: str,
    incident_at: str,
    window: str,
    service: str | None,
    environment: str | None,
    limit: int | None,
) -> None:
    """List the changes recorded in the window before an incident."""
    when = parse_incident_at(incident_at)
    span = parse_time_window(window)
    events = events_before_incident(
        load_events(events_file),
        when,
        span,
        service=service,
        environment=environment,
        limit=limit,
    )
    result = build_timeline(events, when, span)

    if ctx.obj["format"] == "json":
        print_json(result.model_dump(mode="json"))
        return

    click.echo(f"{len(result.entries)} change(s) between {result.window_start} and {when}")
    if result.entries:
        print_table(
            ["WHEN", "TYPE", "SERVICE", "ENV", "SUMMARY"],
            [
                [
                    entry.time_before_incident,
                    entry.event.type,
                    entry.event.service,
                    entry.event.environment,
                    entry.event.summary,
                ]
                for entry in result.entries
            ],
        )


@cli.command()
@click.argument("events_file", type=click.Path(dir_okay=False))
@click.option("--incident-at", required=True, help="Incident start, ISO 8601.")
@click.option("--window", default=settings.rewind_window, show_default=True)
@click.option("--service", default=None, help="Only changes to this service.")
@click.option("--environment", default=None, help="Only changes in this environment.")
@click.pass_context
@_handle_errors
def summary(
    ctx: click.Context,
    events_file: str,
    incident_at: str,
    window: str,
    service: str | None,
    environment: str | None,
) -> None:
    """Quick count-based triage of the changes before an incident."""
    when = parse_incident_at(incident_at)
    events = events_before_incident(
        load_events(events_file),
        when,
        parse_time_window(window),
        service=service,
        environment=environment,
    )
    result = summarize(events, when)

    if ctx.obj["format"] == "json":
        print_json(result.model_dump(mode="json"))
        return

    assessment = result.risk_assessment
    click.echo(f"Quick assessment: {assessment.level.value} ({assessment.score}/100)")
    print_detail("Total events", result.total_events)
    print_detail("Deployments", result.recent_deployments)
    print_detail("Migrations", result.recent_migrations)
    print_detail("Services", ", ".join(result.services_affected) or "-")
    print_detail("Environments", ", ".join(result.environments_affected) or "-")
    print_list("Factors", assessment.factors)


@cli.command()
@click.pass_context
def methodology(ctx: click.Context) -> None:
    """Describe how risk scores are computed."""
    payload = scoring_methodology()
    if ctx.obj["format"] == "json":
        print_json(payload)
        return

    click.echo(f"{payload['description']} (v{payload['version']})")
    print_table(
        ["FACTOR", "WEIGHT", "DESCRIPTION"],
        [[f["name"], f["weight_display"], f["description"]] for f in payload["factors"]],
    )
    print_list(
        "Environment multipliers",
        [f"{env}: {m}x" for env, m in payload["environment_multipliers"].items()],
    )
    print_list("Risk levels", [f"{lvl}: {rng}" for lvl, rng in payload["risk_levels"].items()])


if __name__ == "__main__":
    cli()
