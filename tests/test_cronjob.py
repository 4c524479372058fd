"""
Tests for the CronJob analyzer and cron schedule validation.
"""

import pytest
from kubernetes.client.exceptions import ApiException

from kub_analyze.analyzers.cronjob import CronJobAnalyzer, check_cron_schedule
from kub_analyze.errors import InvalidScheduleFormat, ListError
from kub_analyze.models import Sensitive


# ═══════════════════════════════════════════════════════════════════
#  check_cron_schedule
# ═══════════════════════════════════════════════════════════════════


class TestCheckCronSchedule:
    @pytest.mark.parametrize("schedule", [
        "* * * * *",
        "*/5 * * * *",
        "0 3 * * 1-5",
        "30 2 1,15 * *",
        "15 14 1 * *",
    ])
    def test_standard_expressions_are_valid(self, schedule):
        """Five-field expressions pass without raising."""
        check_cron_schedule(schedule)

    @pytest.mark.parametrize("schedule", ["@daily", "@hourly", "@weekly"])
    def test_descriptors_are_valid(self, schedule):
        check_cron_schedule(schedule)

    def test_time_zone_prefix_is_stripped(self):
        check_cron_schedule("CRON_TZ=Europe/Paris 0 6 * * *")
        check_cron_schedule("TZ=UTC 0 6 * * *")

    def test_wrong_field_count_is_structured(self):
        """Three fields → InvalidScheduleFormat carrying the raw string."""
        with pytest.raises(InvalidScheduleFormat) as exc_info:
            check_cron_schedule("* * *")
        err = exc_info.value
        assert err.raw == "* * *"
        assert "expected exactly 5 fields, found 3" in err.cause
        assert str(err) == err.cause

    def test_six_fields_rejected(self):
        """Seconds-precision expressions are not standard cron."""
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule("0 */5 * * * *")

    def test_out_of_range_value_rejected(self):
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule("61 * * * *")

    def test_garbage_rejected(self):
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule("every tuesday a b c")

    @pytest.mark.parametrize("schedule", ["", "   ", None])
    def test_empty_rejected(self, schedule):
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule(schedule)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            check_cron_schedule("* * *")

    @pytest.mark.parametrize("schedule", [
        "0 0 L * *",
        "0 0 * * 5#3",
        "0 0 15W * *",
        "H 0 * * *",
        "0 0 * * 5L",
    ])
    def test_quartz_extensions_rejected(self, schedule):
        """L, W, # and H are not standard cron syntax."""
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule(schedule)

    def test_unknown_time_zone_rejected(self):
        with pytest.raises(InvalidScheduleFormat) as exc_info:
            check_cron_schedule("CRON_TZ=Not/AZone 0 6 * * *")
        assert "provided bad location Not/AZone" in str(exc_info.value)

    @pytest.mark.parametrize("schedule", ["@every 1h", "@every 1h30m", "@every 90s", "@every 1.5h"])
    def test_every_descriptor_is_valid(self, schedule):
        check_cron_schedule(schedule)

    @pytest.mark.parametrize("schedule", ["@every", "@every soon", "@every 5", "@reboot", "@fortnightly"])
    def test_bad_descriptors_rejected(self, schedule):
        with pytest.raises(InvalidScheduleFormat):
            check_cron_schedule(schedule)

    @pytest.mark.parametrize("schedule", [
        "0 0 * JAN,JUL SUN",
        "0 9 * * mon-fri",
        "? 0 * * *",
        "5/15 * * * *",
        "0 0 1,,15 * *",
    ])
    def test_names_and_standard_forms_are_valid(self, schedule):
        check_cron_schedule(schedule)

    @pytest.mark.parametrize("schedule, message", [
        ("0 0 * * 7", "end of range (7) above maximum (6)"),
        ("0 0 0 * *", "beginning of range (0) below minimum (1)"),
        ("30-10 * * * *", "beginning of range (30) beyond end of range (10)"),
        ("*/0 * * * *", "step of range should be a positive number"),
        ("1-2-3 * * * *", "too many hyphens"),
        ("1/2/3 * * * *", "too many slashes"),
    ])
    def test_range_errors(self, schedule, message):
        with pytest.raises(InvalidScheduleFormat) as exc_info:
            check_cron_schedule(schedule)
        assert message in str(exc_info.value)


# ═══════════════════════════════════════════════════════════════════
#  CronJobAnalyzer
# ═══════════════════════════════════════════════════════════════════


class TestCronJobAnalyzer:
    def _run(self, ctx, cluster, cronjob_list, *jobs):
        cluster.batch.list_cron_job_for_all_namespaces.return_value = cronjob_list(*jobs)
        return CronJobAnalyzer().analyze(ctx)

    def test_invalid_schedule_example(self, ctx, cluster, masker, make_cronjob, cronjob_list):
        """backup in ops with a three-field schedule → one result, one failure."""
        job = make_cronjob("backup", "ops", schedule="* * *", suspend=False, deadline=None)

        results = self._run(ctx, cluster, cronjob_list, job)

        assert len(results) == 1
        result = results[0]
        assert result.kind == "CronJob"
        assert result.name == "ops/backup"
        assert len(result.error) == 1
        failure = result.error[0]
        assert "invalid schedule" in failure.text
        assert "expected exactly 5 fields" in failure.text
        assert failure.sensitive == (
            Sensitive("ops", masker.mask("ops")),
            Sensitive("backup", masker.mask("backup")),
        )

    def test_suspended_takes_precedence(self, ctx, cluster, make_cronjob, cronjob_list):
        """nightly is suspended and has a bad schedule → only the suspension."""
        job = make_cronjob("nightly", "batch", schedule="not a cron", suspend=True, deadline=-5)

        results = self._run(ctx, cluster, cronjob_list, job)

        assert len(results) == 1
        assert results[0].name == "batch/nightly"
        assert [f.text for f in results[0].error] == ["CronJob nightly is suspended"]

    def test_negative_deadline(self, ctx, cluster, make_cronjob, cronjob_list):
        job = make_cronjob("report", "ops", deadline=-1)

        results = self._run(ctx, cluster, cronjob_list, job)

        assert [f.text for f in results[0].error] == ["CronJob report has a negative starting deadline"]

    def test_invalid_schedule_and_negative_deadline_both_reported(self, ctx, cluster, make_cronjob, cronjob_list):
        job = make_cronjob("report", "ops", schedule="* * *", deadline=-30)

        results = self._run(ctx, cluster, cronjob_list, job)

        texts = [f.text for f in results[0].error]
        assert len(texts) == 2
        assert "invalid schedule" in texts[0]
        assert "negative starting deadline" in texts[1]

    @pytest.mark.parametrize("deadline", [None, 0, 200])
    def test_healthy_job_yields_no_result(self, ctx, cluster, make_cronjob, cronjob_list, deadline):
        """Silence means healthy: no empty-failure Result."""
        job = make_cronjob("ok", "ops", deadline=deadline)

        assert self._run(ctx, cluster, cronjob_list, job) == []

    def test_results_follow_listing_order(self, ctx, cluster, make_cronjob, cronjob_list):
        jobs = [
            make_cronjob("zeta", "b", suspend=True),
            make_cronjob("fine", "a"),
            make_cronjob("alpha", "a", schedule="* *"),
        ]

        results = self._run(ctx, cluster, cronjob_list, *jobs)

        assert [r.name for r in results] == ["b/zeta", "a/alpha"]

    def test_namespace_scoping(self, ctx, cluster, make_cronjob, cronjob_list):
        """A namespace in the context uses the namespaced list call."""
        ctx.namespace = "ops"
        cluster.batch.list_namespaced_cron_job.return_value = cronjob_list(make_cronjob("backup", "ops", suspend=True))

        results = CronJobAnalyzer().analyze(ctx)

        cluster.batch.list_namespaced_cron_job.assert_called_once_with("ops")
        cluster.batch.list_cron_job_for_all_namespaces.assert_not_called()
        assert len(results) == 1

    def test_list_failure_is_fatal(self, ctx, cluster, reporter):
        cluster.batch.list_cron_job_for_all_namespaces.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ListError) as exc_info:
            CronJobAnalyzer().analyze(ctx)

        assert exc_info.value.kind == "CronJob"
        assert exc_info.value.status == 403
        assert "403 Forbidden" in str(exc_info.value)

    def test_metrics_set_to_failure_count(self, ctx, cluster, reporter, make_cronjob, cronjob_list):
        self._run(ctx, cluster, cronjob_list,
                  make_cronjob("report", "ops", schedule="* * *", deadline=-30),
                  make_cronjob("fine", "ops"))

        assert reporter.value("CronJob", "report", "ops") == 2.0
        assert reporter.value("CronJob", "fine", "ops") is None

    def test_stale_metrics_cleared_on_rerun(self, ctx, cluster, reporter, make_cronjob, cronjob_list):
        """An object fixed between runs loses its series."""
        self._run(ctx, cluster, cronjob_list, make_cronjob("backup", "ops", suspend=True))
        assert reporter.value("CronJob", "backup", "ops") == 1.0

        self._run(ctx, cluster, cronjob_list, make_cronjob("backup", "ops"))

        assert reporter.value("CronJob", "backup", "ops") is None
