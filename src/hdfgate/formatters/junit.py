"""JUnit XML formatter for CI/CD integration."""

from __future__ import annotations

from xml.dom import minidom
from xml.etree import ElementTree as ET

from ..models.validation import CheckStatus, ValidationResult
from .text import format_actual_value, format_expected_value, format_violation_brief


def format_junit(
    result: ValidationResult,
    suites_name: str = "Threshold Validation",
    suite_name: str = "Threshold Checks",
) -> str:
    """Render a validation result as JUnit XML.

    One ``testcase`` per check; failed checks carry a ``failure`` child
    with the actual and expected values.
    """
    total = result.summary.total_checks
    failures = result.summary.failed_checks

    testsuites = ET.Element("testsuites")
    testsuites.set("name", suites_name)
    testsuites.set("tests", str(total))
    testsuites.set("failures", str(failures))

    testsuite = ET.SubElement(testsuites, "testsuite")
    testsuite.set("name", suite_name)
    testsuite.set("tests", str(total))
    testsuite.set("failures", str(failures))
    testsuite.set("errors", "0")

    for check in result.checks:
        testcase = ET.SubElement(testsuite, "testcase")
        testcase.set("name", check.path)
        testcase.set("classname", f"threshold.{check.type.value}")

        if check.status == CheckStatus.FAILED:
            failure = ET.SubElement(testcase, "failure")
            violation = check.violation
            message = violation.details if violation and violation.details else format_violation_brief(check)
            failure.set("message", message)
            if violation:
                failure.set("type", violation.type.value)

            text_parts = [
                f"Actual: {format_actual_value(check)}",
                f"Expected: {format_expected_value(check)}",
            ]
            if violation and violation.amount is not None:
                text_parts.append(f"Violation: {violation.type.value} by {violation.amount}")
            if violation and violation.missing:
                text_parts.append(f"Missing: {', '.join(violation.missing)}")
            if violation and violation.unexpected:
                text_parts.append(f"Unexpected: {', '.join(violation.unexpected)}")
            failure.text = "\n".join(text_parts)

    # Pretty-print XML
    rough = ET.tostring(testsuites, encoding="unicode")
    dom = minidom.parseString(rough)
    return dom.toprettyxml(indent="  ", encoding="UTF-8").decode("utf-8").rstrip("\n")
