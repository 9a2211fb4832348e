"""Tests for the result, summary and report model."""
from datetime import datetime

import pytest

from specup_health.engine import (
    CheckResult,
    CheckStatus,
    HealthCheckReport,
    HealthCheckSummary,
    ResultValidationError,
    calculate_summary,
    create_error_result,
    create_result,
    is_valid_result,
)


class TestCreateResult:

    def test_builds_stamped_result(self):
        result = create_result("package-json", "pass", "package.json is valid", {"fields": 3})
        assert result.check == "package-json"
        assert result.status == CheckStatus.PASS
        assert result.details == {"fields": 3}
        assert datetime.fromisoformat(result.timestamp).tzinfo is not None

    def test_details_default_to_empty_mapping(self):
        assert create_result("a", CheckStatus.WARN, "careful").details == {}

    @pytest.mark.parametrize("check", ["", "   ", None, 42])
    def test_rejects_bad_check_name(self, check):
        with pytest.raises(ResultValidationError):
            create_result(check, "pass", "ok")

    def test_rejects_unknown_status(self):
        with pytest.raises(ResultValidationError, match="Status must be one of"):
            create_result("a", "ok", "fine")

    def test_rejects_empty_message(self):
        with pytest.raises(ResultValidationError):
            create_result("a", "pass", "  ")

    def test_rejects_non_mapping_details(self):
        with pytest.raises(ResultValidationError):
            create_result("a", "pass", "ok", ["not", "a", "mapping"])

    def test_result_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            create_result("", "pass", "ok")


class TestCreateErrorResult:

    def test_wraps_exception_with_stack(self):
        try:
            raise RuntimeError("disk on fire")
        except RuntimeError as e:
            result = create_error_result("gitignore", e, {"context": "reading"})

        assert result.status == CheckStatus.FAIL
        assert result.message == "Error during health check: disk on fire"
        assert result.details["error"] == "disk on fire"
        assert "RuntimeError" in result.details["stack"]
        assert result.details["context"] == "reading"

    def test_accepts_plain_string(self):
        result = create_error_result("gitignore", "bad things")
        assert result.details == {"error": "bad things"}

    def test_exception_without_message_uses_type_name(self):
        result = create_error_result("x", KeyError())
        assert result.message == "Error during health check: KeyError"


class TestCalculateSummary:

    def test_counts_and_score(self):
        results = [
            create_result("a", "pass", "ok"),
            create_result("b", "pass", "ok"),
            create_result("c", "fail", "bad"),
            create_result("d", "warn", "meh"),
            create_result("e", "skip", "later"),
            create_result("f", "pass", "ok"),
        ]
        summary = calculate_summary(results)
        assert (summary.total, summary.passed, summary.failed, summary.warnings, summary.skipped) == (6, 3, 1, 1, 1)
        assert summary.score == 50
        assert summary.has_errors is True
        assert summary.has_warnings is True

    def test_score_rounds_to_nearest(self):
        results = [create_result("a", "pass", "ok"), create_result("b", "pass", "ok"), create_result("c", "fail", "x")]
        assert calculate_summary(results).score == 67

    @pytest.mark.parametrize("passed, total, score", [(1, 8, 13), (3, 8, 38), (1, 40, 3), (5, 8, 63)])
    def test_score_rounds_halves_up(self, passed, total, score):
        results = [create_result(f"p{i}", "pass", "ok") for i in range(passed)]
        results += [create_result(f"f{i}", "fail", "x") for i in range(total - passed)]
        assert calculate_summary(results).score == score

    def test_empty_results(self):
        summary = calculate_summary([])
        assert summary.total == 0
        assert summary.score == 0
        assert summary.has_errors is False

    def test_accepts_result_mappings(self):
        summary = calculate_summary([create_result("a", "warn", "x").to_dict()])
        assert summary.warnings == 1

    @pytest.mark.parametrize("bad", [None, "pass", 3, {"status": "pass"}])
    def test_rejects_non_sequence(self, bad):
        with pytest.raises(ResultValidationError):
            calculate_summary(bad)

    def test_rejects_malformed_entries(self):
        with pytest.raises(ResultValidationError):
            calculate_summary([{"status": "broken"}])


class TestCheckResult:

    def test_string_status_coerced(self):
        result = CheckResult("direct", "warn", "careful", "2026-01-01T00:00:00+00:00")
        assert result.status is CheckStatus.WARN
        assert is_valid_result(result)
        assert result.to_dict()["status"] == "warn"

    def test_unknown_status_rejected(self):
        with pytest.raises(ResultValidationError):
            CheckResult("direct", "great", "ok", "2026-01-01T00:00:00+00:00")

    def test_details_are_read_only(self):
        source = {"count": 1}
        result = create_result("a", "pass", "ok", source)
        source["count"] = 2
        assert result.details["count"] == 1
        with pytest.raises(TypeError):
            result.details["count"] = 3


class TestIsValidResult:

    def test_result_instances_and_dicts(self):
        result = create_result("a", "pass", "ok")
        assert is_valid_result(result)
        assert is_valid_result(result.to_dict())

    def test_zulu_timestamp_accepted(self):
        data = {"check": "a", "status": "pass", "message": "ok", "timestamp": "2025-01-01T10:00:00Z"}
        assert is_valid_result(data)

    @pytest.mark.parametrize("data", [
        None,
        "pass",
        {"check": "a", "status": "pass", "message": "ok"},
        {"check": "a", "status": "great", "message": "ok", "timestamp": "2025-01-01T10:00:00Z"},
        {"check": "a", "status": "pass", "message": "ok", "timestamp": "yesterday"},
        {"check": "a", "status": "pass", "message": "ok", "timestamp": "2025-01-01T10:00:00Z", "details": []},
    ])
    def test_rejects_malformed(self, data):
        assert not is_valid_result(data)

    def test_from_dict_rejects_invalid(self):
        with pytest.raises(ResultValidationError):
            CheckResult.from_dict({"check": "a"})


class TestSerialization:

    def test_report_to_dict_omits_absent_keys(self):
        result = create_result("a", "pass", "ok")
        report = HealthCheckReport(
            results=[result],
            summary=calculate_summary([result]),
            timestamp="2025-01-01T10:00:00+00:00",
            provider={"type": "local"},
        )
        data = report.to_dict()
        assert data["results"][0]["status"] == "pass"
        assert "execution_time_ms" not in data["summary"]
        assert "error" not in data
        assert report.passed is True

    def test_summary_includes_timing_when_set(self):
        summary = HealthCheckSummary(execution_time_ms=12, execution_date="2025-01-01T10:00:00+00:00")
        assert summary.to_dict()["execution_time_ms"] == 12

    def test_str_of_result(self):
        assert str(create_result("a", "fail", "broken")) == "[FAIL] a: broken"
