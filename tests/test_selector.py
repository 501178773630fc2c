"""Tests for the insight-freshness selector."""

import math
from datetime import date, datetime, timezone

import pytest

from coach_briefing.models.briefing import InsightKind, InsightSource
from coach_briefing.models.reports import WeeklyReport, WorkoutRecord
from coach_briefing.selector import (
    has_insights,
    has_summary,
    is_warning,
    latest_report,
    latest_workout,
    report_age_days,
    select_insight_source,
)

from conftest import NOW, make_report, make_workout, report_payload


class TestReportAgeDays:
    """Tests for report age calculation."""

    def test_uses_week_end(self):
        """Age is measured from week_end when present."""
        report = make_report(week_end="2024-01-07", week_start="2024-01-01")
        assert report_age_days(report, NOW) == 2

    def test_falls_back_to_week_start(self):
        """week_start is used when week_end is missing."""
        report = make_report(week_end=None, week_start="2024-01-01")
        assert report_age_days(report, NOW) == 8

    def test_no_dates_is_infinite(self):
        """A report without reference dates is infinitely old."""
        report = make_report(week_end=None, week_start=None)
        assert math.isinf(report_age_days(report, NOW))

    def test_unparseable_date_is_infinite(self):
        """Malformed dates count as missing rather than raising."""
        report = make_report(week_end="not-a-date", week_start="also bad")
        assert math.isinf(report_age_days(report, NOW))

    def test_missing_report_is_infinite(self):
        assert math.isinf(report_age_days(None, NOW))

    def test_future_reference_date_is_negative(self):
        """Reference dates in the future give a negative age."""
        report = make_report(week_end="2024-01-12")
        assert report_age_days(report, NOW) < 0

    def test_floors_partial_days(self):
        """Partial days are floored."""
        report = make_report(week_end="2024-01-07")
        just_before = datetime(2024, 1, 9, 23, 59, tzinfo=timezone.utc)
        assert report_age_days(report, just_before) == 2

    def test_same_day_is_zero(self):
        report = make_report(week_end="2024-01-09")
        assert report_age_days(report, NOW) == 0

    def test_accepts_plain_date_for_now(self):
        """A date `now` is treated as midnight UTC."""
        report = make_report(week_end="2024-01-07")
        assert report_age_days(report, date(2024, 1, 9)) == 2

    def test_naive_now_is_utc(self):
        report = make_report(week_end="2024-01-07")
        assert report_age_days(report, datetime(2024, 1, 9, 0, 0)) == 2

    def test_timestamped_week_end_keeps_time(self):
        """A timestamped week end is measured from its own instant, not midnight."""
        report = make_report(week_end="2024-01-07T23:00:00Z")
        now = datetime(2024, 1, 11, 12, 0, tzinfo=timezone.utc)
        assert report_age_days(report, now) == 3
        assert select_insight_source([report], [make_workout()], now).kind is InsightKind.WEEKLY

    def test_week_end_offset_converted_to_utc(self):
        """2024-01-07T22:00-05:00 is 2024-01-08T03:00Z."""
        report = make_report(week_end="2024-01-07T22:00:00-05:00")
        assert report_age_days(report, datetime(2024, 1, 11, 2, 0, tzinfo=timezone.utc)) == 2
        assert report_age_days(report, datetime(2024, 1, 11, 3, 0, tzinfo=timezone.utc)) == 3


class TestPredicates:
    """Tests for has_insights, has_summary and is_warning."""

    def test_has_insights_with_top_priority(self):
        assert has_insights(make_report()) is True

    @pytest.mark.parametrize("top_priority", [None, "", 42])
    def test_has_insights_without_top_priority(self, top_priority):
        assert has_insights(make_report(top_priority=top_priority)) is False

    def test_whitespace_top_priority_counts(self):
        """Any non-empty string is an insight, whitespace included."""
        assert has_insights(make_report(top_priority="   ")) is True

    def test_has_insights_without_analytics(self):
        report = WeeklyReport.model_validate({"weekId": "2024-W01", "weekEnd": "2024-01-07"})
        assert has_insights(report) is False

    def test_has_insights_none(self):
        assert has_insights(None) is False

    def test_has_summary(self):
        assert has_summary(make_workout()) is True
        assert has_summary(make_workout(summary=None)) is False
        assert has_summary(make_workout(summary="")) is False
        assert has_summary(make_workout(summary=" ")) is True
        assert has_summary(None) is False

    def test_is_warning_on_deload(self):
        assert is_warning(make_report(suggested_action="deload")) is True

    @pytest.mark.parametrize("action", ["Deload", "DELOAD", " deload"])
    def test_is_warning_deload_exact_match(self, action):
        """Only the exact deload action warns."""
        assert is_warning(make_report(suggested_action=action)) is False

    def test_is_warning_on_red_flags(self):
        assert is_warning(make_report(red_flags="Sharp knee pain reported twice")) is True

    def test_is_warning_maintain(self):
        assert is_warning(make_report(suggested_action="maintain")) is False

    def test_is_warning_no_report(self):
        assert is_warning(None) is False

    def test_is_warning_ignores_top_priority(self):
        """Warning state does not depend on the report having insights."""
        report = make_report(top_priority=None, suggested_action="deload")
        assert is_warning(report) is True


class TestLatestSnapshots:
    """Tests for picking the head of each list."""

    def test_reads_only_first_entry(self):
        reports = [make_report(week_id="2024-W02"), make_report(week_id="2024-W01")]
        assert latest_report(reports).week_id == "2024-W02"

    def test_parses_raw_mappings(self):
        workout = latest_workout([{"workoutId": "w-1", "summary": "Ran 5k"}])
        assert isinstance(workout, WorkoutRecord)
        assert workout.summary == "Ran 5k"

    def test_empty_and_none_lists(self):
        assert latest_report([]) is None
        assert latest_report(None) is None
        assert latest_workout(None) is None

    def test_unreadable_head_counts_as_missing(self):
        """A corrupt first entry is not replaced by the next one."""
        workouts = ["garbage", make_workout()]
        assert latest_workout(workouts) is None


class TestSelectInsightSource:
    """Tests for the selection policy."""

    def test_no_report_no_workout(self):
        """No report, no workout: nothing to show."""
        result = select_insight_source([], [], NOW)
        assert result.kind is InsightKind.NONE
        assert result.report is None
        assert result.workout is None

    def test_none_inputs(self):
        result = select_insight_source(None, None, NOW)
        assert result == InsightSource.none()

    def test_no_report_workout_with_summary(self):
        """No report: the latest workout summary is shown."""
        workout = make_workout()
        result = select_insight_source([], [workout], NOW)
        assert result.kind is InsightKind.WORKOUT
        assert result.workout == workout
        assert result.report is None

    def test_no_report_workout_without_summary(self):
        result = select_insight_source([], [make_workout(summary=None)], NOW)
        assert result.kind is InsightKind.NONE

    @pytest.mark.parametrize("workouts", [[], [make_workout()], [make_workout(summary=None)]])
    def test_fresh_report_age_zero(self, workouts):
        """A same-day report stands alone whatever the workout state."""
        report = make_report(age_days=0)
        result = select_insight_source([report], workouts, NOW)
        assert result.kind is InsightKind.WEEKLY
        assert result.report == report
        assert result.workout is None

    def test_fresh_boundary_three_days(self):
        """Three days old is still fresh."""
        report = make_report(age_days=3)
        result = select_insight_source([report], [make_workout()], NOW)
        assert result.kind is InsightKind.WEEKLY

    def test_four_days_with_workout_summary(self):
        report = make_report(age_days=4)
        workout = make_workout()
        result = select_insight_source([report], [workout], NOW)
        assert result.kind is InsightKind.COMBINED
        assert result.report == report
        assert result.workout == workout

    def test_combined_boundary_five_days(self):
        """Five days old still pairs with the workout."""
        result = select_insight_source([make_report(age_days=5)], [make_workout()], NOW)
        assert result.kind is InsightKind.COMBINED

    @pytest.mark.parametrize("workouts", [[], [make_workout(summary=None)], [make_workout(summary="")]])
    def test_four_days_without_usable_workout(self, workouts):
        """Nothing to pair with: the weekly report is shown on its own."""
        report = make_report(age_days=4)
        result = select_insight_source([report], workouts, NOW)
        assert result.kind is InsightKind.WEEKLY
        assert result.report == report

    def test_whitespace_summary_still_pairs(self):
        """A summary of only spaces is still a summary."""
        workout = make_workout(summary="  ")
        result = select_insight_source([make_report(age_days=4)], [workout], NOW)
        assert result.kind is InsightKind.COMBINED
        assert result.workout == workout

    def test_six_days_falls_back_to_workout(self):
        workout = make_workout()
        result = select_insight_source([make_report(age_days=6)], [workout], NOW)
        assert result.kind is InsightKind.WORKOUT
        assert result.workout == workout
        assert result.report is None

    def test_six_days_without_workout(self):
        result = select_insight_source([make_report(age_days=6)], [], NOW)
        assert result.kind is InsightKind.NONE

    def test_report_without_dates_is_stale(self):
        report = make_report(week_end=None, week_start=None)
        result = select_insight_source([report], [make_workout()], NOW)
        assert result.kind is InsightKind.WORKOUT

    def test_future_report_is_fresh(self):
        report = make_report(week_end="2024-01-14")
        result = select_insight_source([report], [make_workout()], NOW)
        assert result.kind is InsightKind.WEEKLY

    @pytest.mark.parametrize("top_priority", [None, ""])
    def test_report_without_top_priority_is_ignored(self, top_priority):
        """A report without a top priority is treated as no report."""
        report = make_report(age_days=0, top_priority=top_priority)
        workout = make_workout()
        assert select_insight_source([report], [workout], NOW).kind is InsightKind.WORKOUT
        assert select_insight_source([report], [], NOW).kind is InsightKind.NONE

    def test_only_first_report_consulted(self):
        """An older report with insights does not stand in for a bare latest one."""
        bare = make_report(age_days=0, top_priority=None)
        older = make_report(age_days=1)
        result = select_insight_source([bare, older], [], NOW)
        assert result.kind is InsightKind.NONE

    def test_only_first_workout_consulted(self):
        workouts = [make_workout(summary=None), make_workout(summary="Tempo run")]
        result = select_insight_source([], workouts, NOW)
        assert result.kind is InsightKind.NONE

    def test_raw_payloads(self):
        """Backend dictionaries can be passed straight in."""
        result = select_insight_source(
            [report_payload(week_end="2024-01-05")],
            [{"workoutId": "w-9", "summary": "Ran 5k"}],
            NOW,
        )
        assert result.kind is InsightKind.COMBINED
        assert result.workout.workout_id == "w-9"

    def test_custom_thresholds(self):
        report = make_report(age_days=4)
        result = select_insight_source([report], [make_workout()], NOW, fresh_max_age_days=4)
        assert result.kind is InsightKind.WEEKLY

    def test_idempotent(self):
        """Identical inputs and `now` give identical results."""
        reports = [make_report(age_days=4)]
        workouts = [make_workout()]
        first = select_insight_source(reports, workouts, NOW)
        second = select_insight_source(reports, workouts, NOW)
        assert first == second

    def test_does_not_mutate_inputs(self):
        reports = [report_payload(week_end="2024-01-05")]
        workouts = [{"workoutId": "w-1", "summary": "Ran 5k"}]
        snapshot = (repr(reports), repr(workouts))
        select_insight_source(reports, workouts, NOW)
        assert (repr(reports), repr(workouts)) == snapshot

    def test_warning_independent_of_kind(self):
        """A deload report still warns when nothing is selected."""
        report = make_report(age_days=10, suggested_action="deload")
        result = select_insight_source([report], [], NOW)
        assert result.kind is InsightKind.NONE
        assert is_warning(latest_report([report])) is True

    def test_warning_with_workout_only_result(self):
        report = make_report(age_days=8, red_flags="Resting HR elevated all week")
        result = select_insight_source([report], [make_workout()], NOW)
        assert result.kind is InsightKind.WORKOUT
        assert is_warning(report) is True


class TestConcreteScenarios:
    """Worked examples."""

    def test_two_day_old_report(self):
        report = make_report(week_end="2024-01-07", top_priority="Increase squat volume")
        result = select_insight_source([report], [], datetime(2024, 1, 9, tzinfo=timezone.utc))
        assert result.kind is InsightKind.WEEKLY
        assert result.report.top_priority == "Increase squat volume"

    def test_five_day_old_report_with_run(self):
        report = make_report(week_end="2024-01-03", top_priority="Increase squat volume")
        workout = make_workout(summary="Ran 5k")
        result = select_insight_source([report], [workout], datetime(2024, 1, 8, tzinfo=timezone.utc))
        assert result.kind is InsightKind.COMBINED
        assert result.workout.summary == "Ran 5k"


class TestInsightSourceSerialization:
    """Tests for InsightSource.to_dict."""

    def test_none_to_dict(self):
        assert InsightSource.none().to_dict() == {"kind": "none"}

    def test_combined_to_dict_uses_camel_case(self):
        data = InsightSource.combined(make_report(), make_workout()).to_dict()
        assert data["kind"] == "combined"
        assert data["report"]["weekId"] == "2024-W01"
        assert data["report"]["weekEnd"] == "2024-01-07T00:00:00Z"
        assert data["workout"]["workoutId"] == "w-123"
