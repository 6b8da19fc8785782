"""HDF Gate (hdf-gate) - threshold validation for HDF scan results.

CI entry point: validates an evaluation against a threshold document and
exits non-zero when a threshold is not met.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from click.core import ParameterSource
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..core.config import get_effective_config
from ..core.control_mapping import extract_control_summaries_by_severity
from ..core.errors import DocumentLoadError, ThresholdValidationError
from ..core.loader import load_evaluation, load_threshold_file
from ..core.template import generate_threshold
from ..core.thresholds import flatten_profile_summary, load_threshold_document, parse_inline_threshold
from ..core.validators import validate_thresholds
from ..formatters.report import filter_validation_result, format_validation_result
from ..models.hdf import Profile
from ..models.threshold import Severity, ThresholdStatus
from ..models.validation import OutputFormat, OutputOptions

console = Console(stderr=True)

_INPUT = click.Path(dir_okay=False, path_type=Path)


def _split_list(valid: list[str]):
    """Build a click callback for comma-separated lists drawn from ``valid``."""

    def callback(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[list[str]]:
        if value is None:
            return None
        items = [v.strip().lower() for v in value.split(",") if v.strip()]
        unknown = [v for v in items if v not in valid]
        if unknown:
            raise click.BadParameter(
                f"unknown value(s) {', '.join(unknown)}; choose from {', '.join(valid)}"
            )
        return items

    return callback


def _supplied(ctx: click.Context, name: str) -> bool:
    return ctx.get_parameter_source(name) not in (None, ParameterSource.DEFAULT)


def _load_profile(input_path: Path) -> Profile:
    evaluation = load_evaluation(input_path)
    profile = evaluation.primary_profile
    if len(evaluation.profiles) > 1:
        console.print(
            f"  [yellow]WARN[/yellow] {len(evaluation.profiles)} profiles found; validating '{escape(profile.name)}'"
        )
    return profile


def _config_list(value: object, valid: list[str]) -> Optional[list[str]]:
    """Normalize a config filter list; ``None`` when it is not a list of known names."""
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    items = [v.strip().lower() for v in value]
    if any(v not in valid for v in items):
        return None
    return items


def _emit(text: str, output: Optional[Path]) -> bool:
    """Print or write a report. Returns False when the file cannot be written."""
    if output is None:
        if text:
            click.echo(text)
        return True
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"  [red]ERROR[/red] Cannot write {escape(str(output))}: {escape(e.strerror or str(e))}")
        return False
    console.print(f"  [green]OK[/green] Wrote {escape(str(output))}")
    return True


@click.group()
@click.version_option(__version__, prog_name="hdf-gate")
def gate_cli() -> None:
    """HDF Gate - validate HDF scan results against compliance thresholds."""


@gate_cli.command()
@click.pass_context
@click.option("--input", "-i", "input_path", type=_INPUT, required=True, help="HDF execution JSON file")
@click.option("--templateInline", "-I", "template_inline", type=str,
              help='Inline thresholds, e.g. "{compliance.min: 80}, {failed.total.max: 2}"')
@click.option("--templateFile", "-T", "template_file", type=_INPUT, help="Threshold YAML/JSON file")
@click.option("--format", "-f", "output_format", type=click.Choice([f.value for f in OutputFormat]),
              default=OutputFormat.DEFAULT.value, help="Report format")
@click.option("--show-passed", is_flag=True, help="Include passed checks in the report")
@click.option("--colors/--no-colors", default=True, help="Colorize text reports (default: only on a terminal)")
@click.option("--control-ids/--no-control-ids", "include_control_ids", default=True,
              help="List missing/unexpected control ids in reports")
@click.option("--filter-severity", callback=_split_list([s.value for s in Severity]),
              help="Only report checks of these severities (comma-separated)")
@click.option("--filter-status", callback=_split_list([s.value for s in ThresholdStatus]),
              help="Only report checks of these statuses (comma-separated)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file")
@click.option("--config", "-c", "config_path", type=_INPUT, help="Project config (default: ./.hdf-gate.yaml)")
def validate(
    ctx: click.Context,
    input_path: Path,
    template_inline: str | None,
    template_file: Path | None,
    output_format: str,
    show_passed: bool,
    colors: bool,
    include_control_ids: bool,
    filter_severity: list[str] | None,
    filter_status: list[str] | None,
    output: Path | None,
    config_path: Path | None,
) -> None:
    """Validate an evaluation against a threshold document.

    Example: hdf-gate validate -i results.json -I "{compliance.min: 80}, {failed.total.max: 2}"
    """
    if (template_inline is None) == (template_file is None):
        raise click.UsageError("Provide exactly one of --templateInline/-I or --templateFile/-T.")

    output_overrides = {}
    for param, key, value in (
        ("output_format", "format", output_format),
        ("show_passed", "show_passed", show_passed),
        ("colors", "colors", colors),
        ("include_control_ids", "include_control_ids", include_control_ids),
    ):
        if _supplied(ctx, param):
            output_overrides[key] = value
    filter_overrides = {}
    if filter_severity is not None:
        filter_overrides["severities"] = filter_severity
    if filter_status is not None:
        filter_overrides["statuses"] = filter_status

    config = get_effective_config(config_path, {"output": output_overrides, "filter": filter_overrides})
    exit_codes = config["ci"]["exit_codes"]

    severities = _config_list(config["filter"].get("severities"), [s.value for s in Severity])
    statuses = _config_list(config["filter"].get("statuses"), [s.value for s in ThresholdStatus])
    if severities is None or statuses is None:
        console.print(
            "  [red]ERROR[/red] Invalid filter settings in config: "
            "filter.severities and filter.statuses must be lists of known names"
        )
        ctx.exit(exit_codes["input_error"])
        return

    try:
        profile = _load_profile(input_path)
        if template_inline is not None:
            document = parse_inline_threshold(template_inline)
        else:
            document = load_threshold_file(template_file)
        thresholds = load_threshold_document(document)
    except DocumentLoadError as e:
        console.print(f"  [red]ERROR[/red] {escape(str(e))}")
        ctx.exit(exit_codes["input_error"])
        return
    except ThresholdValidationError as e:
        console.print(f"  [red]ERROR[/red] {e.code.value}: {escape(e.message)}")
        ctx.exit(exit_codes["invalid_threshold"])
        return

    result = validate_thresholds(profile, thresholds)

    if severities or statuses:
        filtered = filter_validation_result(result, severities, statuses)
        if filtered.filtered_out_failure_count:
            console.print(
                f"  [yellow]WARN[/yellow] {filtered.filtered_out_failure_count} of "
                f"{filtered.original_failure_count} failed checks hidden by the active filter"
            )
        result = filtered.result

    output_config = dict(config["output"])
    if output_config.get("colors") is None:
        output_config["colors"] = output is None and sys.stdout.isatty()
    try:
        options = OutputOptions(**output_config)
    except ValidationError as e:
        console.print(f"  [red]ERROR[/red] Invalid output settings in config: {escape(e.errors()[0]['msg'])}")
        ctx.exit(exit_codes["input_error"])
        return

    if not _emit(format_validation_result(result, options), output):
        ctx.exit(exit_codes["input_error"])
        return

    ctx.exit(exit_codes["passed"] if result.passed else exit_codes["failed"])


@gate_cli.command()
@click.pass_context
@click.option("--input", "-i", "input_path", type=_INPUT, required=True, help="HDF execution JSON file")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the template to a file")
@click.option("--exact", "-e", is_flag=True, help="Pin every count to its current value (min and max)")
@click.option("--generate-control-ids", "-c", "include_control_ids", is_flag=True,
              help="Include the control ids of every status/severity bucket")
@click.option("--flat", is_flag=True, help="Emit dot-notation keys instead of a nested document")
def generate(
    ctx: click.Context,
    input_path: Path,
    output: Path | None,
    exact: bool,
    include_control_ids: bool,
    flat: bool,
) -> None:
    """Generate a threshold template from an evaluation's current results."""
    try:
        profile = _load_profile(input_path)
    except DocumentLoadError as e:
        console.print(f"  [red]ERROR[/red] {escape(str(e))}")
        ctx.exit(get_effective_config()["ci"]["exit_codes"]["input_error"])
        return

    thresholds = generate_threshold(profile, exact=exact, include_control_ids=include_control_ids)
    document = thresholds.to_document()
    if flat:
        document = flatten_profile_summary(document)

    if not _emit(yaml.safe_dump(document, sort_keys=False), output):
        ctx.exit(get_effective_config()["ci"]["exit_codes"]["input_error"])


@gate_cli.command()
@click.pass_context
@click.option("--input", "-i", "input_path", type=_INPUT, required=True, help="HDF execution JSON file")
@click.option("--status", "status_name", type=click.Choice([s.value for s in ThresholdStatus]),
              help="Only list controls with this status")
def controls(ctx: click.Context, input_path: Path, status_name: str | None) -> None:
    """List per-control summaries grouped by status."""
    try:
        profile = _load_profile(input_path)
    except DocumentLoadError as e:
        console.print(f"  [red]ERROR[/red] {escape(str(e))}")
        ctx.exit(get_effective_config()["ci"]["exit_codes"]["input_error"])
        return

    summaries = extract_control_summaries_by_severity(profile)
    if status_name:
        summaries = {status_name: summaries[status_name]}

    document = {
        status: {control_id: summary.model_dump() for control_id, summary in by_id.items()}
        for status, by_id in summaries.items()
    }
    click.echo(yaml.safe_dump(document, sort_keys=False, allow_unicode=True), nl=False)


def main() -> None:
    gate_cli()


if __name__ == "__main__":
    main()
