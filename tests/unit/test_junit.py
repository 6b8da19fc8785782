"""Tests for formatters/junit.py."""

from __future__ import annotations

from xml.etree import ElementTree as ET

from hdfgate.core.thresholds import load_threshold_document
from hdfgate.core.validators import validate_thresholds
from hdfgate.formatters.junit import format_junit


class TestFormatJunit:
    def _result(self, profile):
        return validate_thresholds(profile, load_threshold_document({
            "compliance.min": 80,
            "passed.total.min": 3,
            "failed.high.controls": ["C-3", "C-8"],
        }))

    def test_structure(self, profile):
        root = ET.fromstring(format_junit(self._result(profile)).encode("utf-8"))
        assert root.tag == "testsuites"
        assert root.get("name") == "Threshold Validation"
        assert root.get("tests") == "3"
        assert root.get("failures") == "2"

        suite = root.find("testsuite")
        assert suite.get("name") == "Threshold Checks"
        assert suite.get("tests") == "3"
        assert suite.get("failures") == "2"
        assert suite.get("errors") == "0"

        cases = suite.findall("testcase")
        assert [c.get("name") for c in cases] == ["compliance.min", "passed.total.min", "failed.high.controls"]
        assert cases[0].get("classname") == "threshold.compliance"
        assert cases[2].get("classname") == "threshold.control_id"

    def test_failures(self, profile):
        root = ET.fromstring(format_junit(self._result(profile)).encode("utf-8"))
        cases = {c.get("name"): c for c in root.iter("testcase")}

        assert cases["passed.total.min"].find("failure") is None

        compliance = cases["compliance.min"].find("failure")
        assert compliance.get("type") == "below"
        assert compliance.get("message") == "Compliance is 50%, required >= 80%"
        assert "Actual: 50%" in compliance.text
        assert "Expected: >= 80%" in compliance.text
        assert "Violation: below by 30" in compliance.text

        mismatch = cases["failed.high.controls"].find("failure")
        assert mismatch.get("type") == "mismatch"
        assert "Missing: C-8" in mismatch.text

    def test_empty_result(self, profile):
        xml = format_junit(validate_thresholds(profile, load_threshold_document({})))
        root = ET.fromstring(xml.encode("utf-8"))
        assert root.get("tests") == "0"
        assert root.find("testsuite").findall("testcase") == []

    def test_deterministic(self, profile):
        assert format_junit(self._result(profile)) == format_junit(self._result(profile))

    def test_custom_names(self, profile):
        xml = format_junit(self._result(profile), suites_name="Gate", suite_name="demo")
        root = ET.fromstring(xml.encode("utf-8"))
        assert root.get("name") == "Gate"
        assert root.find("testsuite").get("name") == "demo"
