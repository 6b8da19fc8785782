"""Validation report rendering and filtering."""

from __future__ import annotations

import io
from typing import Iterable, Optional

import yaml
from rich import box
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.validation import (
    CheckType,
    FilteredResult,
    OutputFormat,
    OutputOptions,
    ThresholdCheck,
    ValidationResult,
    ViolationType,
)
from .junit import format_junit
from .text import format_actual_value, format_expected_value, format_violation_brief

CHECK_MARK = "✓"
CROSS_MARK = "✗"
REPORT_WIDTH = 120


def format_validation_result(result: ValidationResult, options: Optional[OutputOptions] = None) -> str:
    """Render a validation result in the requested output format."""
    options = options or OutputOptions()
    fmt = OutputFormat(options.format)

    if fmt == OutputFormat.JSON:
        return result.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    if fmt == OutputFormat.YAML:
        return yaml.safe_dump(result.to_document(), sort_keys=False, allow_unicode=True)
    if fmt == OutputFormat.MARKDOWN:
        return _format_markdown(result, options)
    if fmt == OutputFormat.JUNIT:
        return format_junit(result)
    if fmt == OutputFormat.QUIET:
        return ""
    if fmt == OutputFormat.DETAILED:
        return _render(_detailed(result, options), options.colors)
    return _render(_default(result, options), options.colors)


def filter_validation_result(
    result: ValidationResult,
    severities: Optional[Iterable[str]] = None,
    statuses: Optional[Iterable[str]] = None,
) -> FilteredResult:
    """Narrow a result to the given severities and/or statuses.

    The summary is recomputed over the remaining checks, and the counts of
    hidden checks and hidden failures are reported so callers can warn
    when a filter suppresses failures.
    """
    severity_set = {getattr(s, "value", s) for s in severities or []}
    status_set = {getattr(s, "value", s) for s in statuses or []}

    checks = list(result.checks)
    if severity_set:
        checks = [c for c in checks if c.severity is not None and c.severity in severity_set]
    if status_set:
        checks = [c for c in checks if c.status_type is not None and c.status_type in status_set]

    original_failures = len(result.failed_checks())
    failed = sum(1 for c in checks if not c.passed)

    filtered = result.model_copy(update={
        "passed": failed == 0,
        "checks": checks,
        "summary": result.summary.model_copy(update={
            "total_checks": len(checks),
            "passed_checks": len(checks) - failed,
            "failed_checks": failed,
        }),
    })

    return FilteredResult(
        result=filtered,
        original_failure_count=original_failures,
        filtered_out_failure_count=original_failures - failed,
        filtered_out_check_count=len(result.checks) - len(checks),
    )


def _render(renderables: list[RenderableType], colors: bool) -> str:
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=REPORT_WIDTH,
        force_terminal=colors,
        color_system="standard" if colors else None,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )
    for renderable in renderables:
        console.print(renderable)
    return buffer.getvalue().rstrip("\n")


def _required_compliance(result: ValidationResult) -> str:
    required = result.summary.compliance_required
    if required is None:
        return ""
    if required.min is not None:
        return f">= {required.min}%"
    if required.max is not None:
        return f"<= {required.max}%"
    return ""


def _default(result: ValidationResult, options: OutputOptions) -> list[RenderableType]:
    lines: list[RenderableType] = []
    summary = result.summary

    if result.passed:
        lines.append(Text(f"{CHECK_MARK} All threshold validations passed", style="green"))
        if summary.compliance is not None:
            lines.append(Text(
                f"  • Compliance: {summary.compliance}% ({_required_compliance(result)} required)",
                style="dim",
            ))
        lines.append(Text(
            f"  • {summary.passed_checks}/{summary.total_checks} threshold checks passed",
            style="dim",
        ))
        return lines

    failed = result.failed_checks()
    lines.append(Text(
        f"{CROSS_MARK} Threshold validation failed ({len(failed)}/{summary.total_checks} checks)",
        style="red",
    ))
    lines.append(Text(""))
    lines.append(Text("Failed:", style="bold red"))
    for check in failed:
        lines.append(Text(f"  • {check.path}: {format_violation_brief(check)}", style="red"))

    if options.show_passed:
        passed = result.passed_checks()
        if passed:
            lines.append(Text(""))
            lines.append(Text("Passed:", style="bold green"))
            for check in passed:
                lines.append(Text(f"  • {check.path}: {format_actual_value(check)}", style="green"))
    elif summary.passed_checks > 0:
        lines.append(Text(""))
        lines.append(Text(f"Passed: {summary.passed_checks} other checks passed", style="dim"))

    return lines


def _checks_table(checks: list[ThresholdCheck], failed: bool) -> Table:
    table = Table(box=box.SQUARE, show_lines=False)
    table.add_column("Check")
    table.add_column("Actual", justify="right")
    table.add_column("Required", justify="right")
    table.add_column("Violation" if failed else "Status")
    for check in checks:
        table.add_row(
            check.path,
            format_actual_value(check),
            format_expected_value(check),
            format_violation_brief(check) if failed else f"{CHECK_MARK} PASS",
        )
    return table


def _control_id_lines(checks: list[ThresholdCheck]) -> list[str]:
    lines: list[str] = []
    for check in checks:
        violation = check.violation
        if check.type != CheckType.CONTROL_ID or violation is None:
            continue
        lines.append(f"{check.path}:")
        if violation.missing:
            lines.append(f"  missing:    {', '.join(violation.missing)}")
        if violation.unexpected:
            lines.append(f"  unexpected: {', '.join(violation.unexpected)}")
    return lines


def _recommendations(result: ValidationResult) -> list[str]:
    failed = result.failed_checks()
    recommendations: list[str] = []

    below = [c for c in failed if c.type == CheckType.COMPLIANCE and c.violation
             and c.violation.type == ViolationType.BELOW]
    if below and below[0].violation.amount:
        recommendations.append(f"  Improve compliance by {below[0].violation.amount}% to meet threshold")

    exceeds = [c for c in failed if c.type == CheckType.COUNT and c.violation
               and c.violation.type == ViolationType.EXCEEDS]
    if exceeds:
        total = sum(c.violation.amount or 0 for c in exceeds)
        recommendations.append(f"  Address {total} controls that exceed failure thresholds")

    mismatches = [c for c in failed if c.type == CheckType.CONTROL_ID]
    if mismatches:
        recommendations.append(f"  Review {len(mismatches)} control id list(s) that no longer match the scan")

    return recommendations or ["  Review threshold configuration or improve security posture"]


def _detailed(result: ValidationResult, options: OutputOptions) -> list[RenderableType]:
    summary = result.summary
    renderables: list[RenderableType] = []

    if result.passed:
        header, color = f"{CHECK_MARK} All Threshold Validations Passed", "green"
    else:
        header = f"{CROSS_MARK} Threshold Validation Failed ({summary.failed_checks}/{summary.total_checks})"
        color = "red"
    renderables.append(Panel.fit(Text(header), box=box.DOUBLE, border_style=color))
    renderables.append(Text(""))

    if summary.compliance is not None:
        compliance_checks = [c for c in result.checks if c.type == CheckType.COMPLIANCE]
        mark = CHECK_MARK if all(c.passed for c in compliance_checks) else CROSS_MARK
        renderables.append(Text("Compliance Summary", style="bold"))
        renderables.append(Text(
            f"  Overall Compliance: {summary.compliance}% ({_required_compliance(result)} required) {mark}"
        ))
        renderables.append(Text(""))

    failed = result.failed_checks()
    if failed:
        renderables.append(Text(f"FAILED CHECKS ({len(failed)})", style="bold red"))
        renderables.append(_checks_table(failed, failed=True))
        if options.include_control_ids:
            for line in _control_id_lines(failed):
                renderables.append(Text(line, style="red"))
        renderables.append(Text(""))

    if options.show_passed:
        passed = result.passed_checks()
        if passed:
            renderables.append(Text(f"PASSED CHECKS ({len(passed)})", style="bold green"))
            renderables.append(_checks_table(passed, failed=False))
            renderables.append(Text(""))

    renderables.append(Text("Summary", style="bold"))
    renderables.append(Text(f"  • Total Controls: {summary.total_controls}"))
    if summary.compliance is not None:
        renderables.append(Text(f"  • Compliance: {summary.compliance}%"))
    renderables.append(Text(f"  • Checks: {summary.passed_checks}/{summary.total_checks} passed"))

    if not result.passed:
        renderables.append(Text(""))
        renderables.append(Text("Recommendations", style="bold yellow"))
        for line in _recommendations(result):
            renderables.append(Text(line))

    return renderables


def _format_markdown(result: ValidationResult, options: OutputOptions) -> str:
    summary = result.summary
    state = f"Passed {CHECK_MARK}" if result.passed else f"Failed {CROSS_MARK}"

    lines = [
        f"# Threshold Validation {state}",
        "",
        "## Summary",
        "",
        f"- **Status**: {state}",
        f"- **Checks**: {summary.passed_checks}/{summary.total_checks} passed",
    ]
    if summary.compliance is not None:
        lines.append(f"- **Compliance**: {summary.compliance}%")
    lines.append(f"- **Total Controls**: {summary.total_controls}")
    lines.append("")

    failed = result.failed_checks()
    if failed:
        lines.extend([
            "## Failed Checks",
            "",
            "| Check | Actual | Required | Violation |",
            "|-------|--------|----------|-----------|",
        ])
        for check in failed:
            lines.append(
                f"| {check.path} | {format_actual_value(check)} | "
                f"{format_expected_value(check)} | {format_violation_brief(check)} |"
            )
        lines.append("")

        control_lines = _control_id_lines(failed) if options.include_control_ids else []
        if control_lines:
            lines.extend(["## Control ID Mismatches", "", "```", *control_lines, "```", ""])

    if options.show_passed:
        passed = result.passed_checks()
        if passed:
            lines.extend([
                "## Passed Checks",
                "",
                "| Check | Actual | Required |",
                "|-------|--------|----------|",
            ])
            for check in passed:
                lines.append(
                    f"| {check.path} | {format_actual_value(check)} | {format_expected_value(check)} |"
                )
            lines.append("")

    return "\n".join(lines)
