"""Tests for the validation scenario harness."""

import pytest

from foodsafe.exceptions import NotFoundError
from foodsafe.traceability.scenarios import (
    SCENARIOS,
    ScenarioHarness,
    ValidationScenario,
)


class TestCatalogue:
    """Built-in scenarios."""

    def test_scenario_ids_unique(self):
        """Every scenario has a distinct id."""
        ids = [s.id for s in SCENARIOS]
        assert len(ids) == len(set(ids)) == 7

    def test_all_scenarios_match(self):
        """The rule catalogue produces every expected outcome."""
        report = ScenarioHarness().validate_all_scenarios()

        assert report.summary.total_tests == 7
        assert report.summary.passing_tests == 7
        assert report.summary.pass_rate == 100.0
        assert all(r.match for r in report.results)


class TestHarness:
    """Harness behaviour."""

    def test_wrong_expectation_lowers_pass_rate(self):
        """A scenario with the wrong expectation is reported as a mismatch."""
        bogus = ValidationScenario(
            id="bogus",
            name="Compliant batch expected to fail",
            description="Deliberately wrong expectation.",
            batch=SCENARIOS[0].batch,
            expected_pass=False,
        )
        report = ScenarioHarness().validate_all_scenarios(extra=[bogus])

        assert report.summary.total_tests == 8
        assert report.summary.passing_tests == 7
        assert report.summary.pass_rate == 87.5
        assert report.results[-1].match is False

    def test_empty_catalogue(self):
        """No scenarios give a zero pass rate."""
        report = ScenarioHarness(scenarios=()).validate_all_scenarios()
        assert report.summary.total_tests == 0
        assert report.summary.pass_rate == 0.0

    def test_run_single_scenario(self):
        """A scenario is re-run by id."""
        result = ScenarioHarness().run_validation_scenario("failed-ccp")

        assert result.expected is False
        assert result.result is False
        assert result.match is True
        assert "FSMA-007" in result.failed_check_ids

    def test_low_supplier_scenario_score(self):
        """A Major supplier finding lowers the score only."""
        result = ScenarioHarness().run_validation_scenario("low-supplier-score")
        assert result.result is True
        assert result.failed_check_ids == ["FSMA-011"]
        assert result.score == 91.67

    def test_unknown_scenario(self):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            ScenarioHarness().run_validation_scenario("nope")
