"""CLI for RepoSentry."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from reposentry.artifacts import render_report_json, write_artifacts
from reposentry.config import AppConfig, load_app_config
from reposentry.constants import PACKAGE_VERSION
from reposentry.providers import GitHubContentProvider, LocalContentProvider
from reposentry.scanner import SecurityScanner, parse_coordinate
from reposentry.scanner.pipeline import catalog_from_config
from reposentry.schemas.enums import RiskLevel
from reposentry.schemas.report_models import SecurityReport
from reposentry.security.redaction import redact_text

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="RepoSentry pattern-based repository security scanner.",
)
console = Console()

RISK_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "dark_orange",
    RiskLevel.CRITICAL: "red",
}
FAIL_ON_EXIT_CODE = 2


@app.command()
def version() -> None:
    """Print the RepoSentry version."""
    typer.echo(PACKAGE_VERSION)


@app.command("validate-config")
def validate_config(
    config: Path | None = typer.Option(
        None, "--config", help="Path to settings.yaml override."
    ),
) -> None:
    """Validate configuration and print the effective settings."""
    try:
        config_model = load_app_config(config)
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Configuration validation failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title="Effective Configuration")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("github.api_base_url", config_model.github.api_base_url)
    table.add_row("github.token_env", config_model.github.token_env)
    table.add_row("traversal.max_total_files", str(config_model.traversal.max_total_files))
    table.add_row(
        "traversal.max_entries_per_directory",
        str(config_model.traversal.max_entries_per_directory),
    )
    table.add_row("traversal.max_depth", str(config_model.traversal.max_depth))
    table.add_row(
        "scan_policy.source_extensions",
        ", ".join(config_model.scan_policy.source_extensions),
    )
    table.add_row("scan_policy.fetch_workers", str(config_model.scan_policy.fetch_workers))
    table.add_row("detection.rules_path", config_model.detection.rules_path or "-")
    table.add_row(
        "detection.secret_confidence", f"{config_model.detection.secret_confidence:.2f}"
    )
    console.print(table)


@app.command("rules")
def rules(
    config: Path | None = typer.Option(None, "--config", help="Path to settings.yaml override."),
    rules_path: Path | None = typer.Option(None, "--rules", help="Custom rules YAML file."),
) -> None:
    """List the compiled detection catalog."""
    try:
        cfg = load_app_config(config, cli_overrides={"rules_path": rules_path})
        catalog = catalog_from_config(cfg)
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Catalog load failed:[/red] {redact_text(str(exc))}")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"Detection Catalog {catalog.version}")
    table.add_column("Rule")
    table.add_column("Kind")
    table.add_column("Category")
    table.add_column("Level")
    for compiled in catalog.vulnerability_rules:
        rule = compiled.rule
        table.add_row(rule.id, "code", rule.category.value, rule.severity.value)
    for compiled in catalog.secret_rules:
        table.add_row(
            compiled.rule.id,
            "secret",
            compiled.rule.category.value,
            f"{compiled.confidence:.2f}",
        )
    for rule in catalog.license_rules:
        table.add_row(rule.name, "license", "license", rule.risk.value)
    console.print(table)


@app.command("scan")
def scan(
    target: str | None = typer.Argument(
        None, help="Repository as OWNER/NAME or a github.com URL."
    ),
    local_path: Path | None = typer.Option(
        None, "--path", help="Scan a local directory instead of GitHub."
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to settings.yaml override."),
    rules_path: Path | None = typer.Option(None, "--rules", help="Custom rules YAML file."),
    output_dir: Path = typer.Option(
        Path("artifacts"), "--output-dir", help="Directory for report artifacts."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    max_files: int | None = typer.Option(
        None, "--max-files", min=1, help="Override traversal.max_total_files."
    ),
    fail_on: str | None = typer.Option(
        None,
        "--fail-on",
        help="Exit with code 2 when risk is at or above this level (Low/Medium/High/Critical).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Scan a repository and write security_report.json / security_report.md."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    try:
        _ensure_single_input(target=target, local_path=local_path)
        threshold = _resolve_fail_on(fail_on)
        cfg = load_app_config(
            config,
            cli_overrides={"rules_path": rules_path, "max_total_files": max_files},
        )
        report = _run_scan(cfg, target=target, local_path=local_path)
        artifacts = write_artifacts(output_dir=output_dir, report=report)
    except typer.BadParameter:
        raise
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Scan failed:[/red] {redact_text(str(exc))}")
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(render_report_json(report).decode("utf-8"))
    else:
        _render_report(report)
        _render_artifact_paths(artifacts.json_path, artifacts.markdown_path)

    if threshold is not None and RISK_ORDER.index(report.risk_level) >= RISK_ORDER.index(
        threshold
    ):
        raise typer.Exit(code=FAIL_ON_EXIT_CODE)


def _run_scan(
    cfg: AppConfig, *, target: str | None, local_path: Path | None
) -> SecurityReport:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        console=console,
    ) as progress:
        if local_path is not None:
            provider = LocalContentProvider.from_config(local_path, cfg)
            coordinate = provider.coordinate()
            progress.add_task(description=f"Scanning {local_path}", total=None)
            return SecurityScanner(provider, config=cfg).scan(coordinate)

        assert target is not None
        coordinate = parse_coordinate(target)
        progress.add_task(description=f"Scanning {coordinate}", total=None)
        with GitHubContentProvider.from_config(cfg, os.environ) as github:
            return SecurityScanner(github, config=cfg).scan(coordinate)


def _ensure_single_input(*, target: str | None, local_path: Path | None) -> None:
    if bool(target) == bool(local_path):
        raise typer.BadParameter("Provide exactly one of TARGET or --path.")


def _resolve_fail_on(value: str | None) -> RiskLevel | None:
    if value is None:
        return None
    for level in RISK_ORDER:
        if level.value.lower() == value.strip().lower():
            return level
    raise typer.BadParameter("fail-on must be one of Low, Medium, High, Critical.")


def _render_report(report: SecurityReport) -> None:
    style = RISK_STYLES[report.risk_level]
    console.print(
        Panel.fit(
            f"Score: [bold]{report.overall_score}/100[/bold]\n"
            f"Risk: [bold {style}]{report.risk_level.value}[/bold {style}]\n"
            f"{report.summary}",
            title=f"Security Analysis: {report.repository.full_name}",
        )
    )
    findings = report.findings
    if findings.code_quality:
        table = Table(title="Code Security Issues")
        table.add_column("Severity")
        table.add_column("Location")
        table.add_column("Rule")
        for issue in sorted(
            findings.code_quality, key=lambda item: (-item.severity.rank, item.file, item.line)
        ):
            table.add_row(issue.severity.value, f"{issue.file}:{issue.line}", issue.rule_id)
        console.print(table)
    if findings.secrets:
        table = Table(title="Potential Secrets")
        table.add_column("Category")
        table.add_column("Location")
        table.add_column("Confidence", justify="right")
        for secret in findings.secrets:
            table.add_row(
                secret.category.value,
                f"{secret.file}:{secret.line}",
                f"{secret.confidence:.2f}",
            )
        console.print(table)
    for risk in findings.license_risks:
        console.print(f"License [bold]{risk.license_id}[/bold]: {risk.risk_level.value} risk")
    for recommendation in report.recommendations:
        console.print(f"- {recommendation}")


def _render_artifact_paths(json_path: Path, markdown_path: Path) -> None:
    panel = Panel.fit(
        f"security_report.json: [bold]{json_path}[/bold]\n"
        f"security_report.md: [bold]{markdown_path}[/bold]",
        title="Artifacts Generated",
    )
    console.print(panel)
