"""
Tests for the payroll preview runner.

Verifies per-employee isolation, job ordering, cancellation and the
run-level totals.
"""

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from payroll_batch.domain.types import (
    OutcomeStatus,
    PayrollJob,
    PreviewStatus,
)
from payroll_batch.services.preview import run_company_preview, run_payroll_preview
from payroll_config.cache import PolicyCache
from payroll_config.schema import CompanyPolicySet, OvertimePolicy
from payroll_kernel.domain.attendance import AttendanceDay, BreakRecord, EmployeeSalaryInfo
from payroll_kernel.domain.enums import SalaryType
from payroll_kernel.exceptions import BatchCancelledError


def _policies() -> CompanyPolicySet:
    return CompanyPolicySet(company_id="acme", overtime=OvertimePolicy(enabled=True))


def _day(day: int, start: int = 9, end: int = 18, breaks=()) -> AttendanceDay:
    return AttendanceDay(
        work_date=date(2024, 3, day),
        raw_check_in=datetime(2024, 3, day, start),
        raw_check_out=datetime(2024, 3, day, end),
        break_records=breaks,
    )


def _job(employee_id: str, monthly: str = "300000", days=None) -> PayrollJob:
    salary = EmployeeSalaryInfo(
        employee_id=employee_id,
        salary_type=SalaryType.MONTHLY,
        monthly_salary=Decimal(monthly),
    )
    return PayrollJob(employee_id, salary, tuple(days or [_day(4), _day(5)]))


def _bad_job(employee_id: str) -> PayrollJob:
    backwards = (BreakRecord(datetime(2024, 3, 4, 13), datetime(2024, 3, 4, 12)),)
    return _job(employee_id, days=[_day(4, breaks=backwards)])


class TestRunPayrollPreview:
    def test_all_succeed(self, captured_logs):
        jobs = [_job(f"E-{i}") for i in range(5)]
        preview = run_payroll_preview("acme", "2024-03", jobs, _policies(), max_workers=2)

        assert preview.status == PreviewStatus.COMPLETED
        assert preview.succeeded == 5
        assert preview.total_base_salary == Decimal("1500000")
        assert preview.total_net_salary == sum(r.net_salary for r in preview.results)
        messages = [r["message"] for r in captured_logs()]
        assert "payroll_preview_started" in messages
        assert "payroll_preview_completed" in messages

    def test_outcomes_in_job_order(self):
        jobs = [_job(f"E-{i}") for i in range(10)]
        preview = run_payroll_preview("acme", "2024-03", jobs, _policies(), max_workers=4)
        assert [o.employee_id for o in preview.outcomes] == [j.employee_id for j in jobs]
        assert [o.job_index for o in preview.outcomes] == list(range(10))

    def test_failure_isolated(self, captured_logs):
        jobs = [_job("E-1"), _bad_job("E-2"), _job("E-3")]
        preview = run_payroll_preview("acme", "2024-03", jobs, _policies())

        assert preview.status == PreviewStatus.PARTIALLY_COMPLETED
        failed = preview.outcomes[1]
        assert failed.status == OutcomeStatus.FAILED
        assert failed.error_code == "NEGATIVE_BREAK_DURATION"
        assert failed.error_field == "break_records[0].end"
        assert failed.result is None
        assert preview.total_base_salary == Decimal("600000")

        job_failed = [r for r in captured_logs() if r["message"] == "payroll_job_failed"][0]
        assert job_failed["employee_id"] == "E-2"
        assert job_failed["period"] == "2024-03"

    def test_all_fail(self):
        preview = run_payroll_preview("acme", "2024-03", [_bad_job("E-1")], _policies())
        assert preview.status == PreviewStatus.FAILED
        assert preview.total_net_salary == Decimal("0")

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        jobs = [_job("E-1"), _job("E-2")]
        preview = run_payroll_preview(
            "acme", "2024-03", jobs, _policies(), cancel_event=cancel
        )
        assert preview.cancelled
        assert preview.not_submitted == 2
        assert all(o.status == OutcomeStatus.NOT_SUBMITTED for o in preview.outcomes)
        with pytest.raises(BatchCancelledError) as exc_info:
            preview.raise_if_cancelled()
        assert exc_info.value.submitted == 0

    def test_empty_run(self):
        preview = run_payroll_preview("acme", "2024-03", [], _policies())
        assert preview.status == PreviewStatus.COMPLETED
        assert preview.total_employees == 0

    def test_employees_requiring_approval(self):
        long_day = _day(4, start=6, end=22)
        jobs = [_job("E-1"), _job("E-2", days=[long_day])]
        preview = run_payroll_preview("acme", "2024-03", jobs, _policies())
        assert preview.employees_requiring_approval == ("E-2",)

    def test_rejects_bad_arguments(self):
        with pytest.raises(ValueError):
            run_payroll_preview("acme", "2024-03", [], _policies(), max_workers=0)
        with pytest.raises(ValueError):
            run_payroll_preview("other", "2024-03", [], _policies())


class TestRunCompanyPreview:
    def test_policy_resolved_once_across_runs(self, captured_logs):
        cache = PolicyCache()
        calls: list[str] = []

        def source(company_id):
            calls.append(company_id)
            return None

        first = run_company_preview("acme", "2024-03", [_job("E-1")], cache, source)
        second = run_company_preview("acme", "2024-04", [_job("E-1")], cache, source)

        assert calls == ["acme"]
        assert (cache.hits, cache.misses) == (1, 1)
        assert first.status == second.status == PreviewStatus.COMPLETED
        assert first.total_net_salary == second.total_net_salary
        defaulted = [
            r for r in captured_logs() if r["message"] == "payroll_preview_uses_defaults"
        ]
        assert len(defaulted) == 2

    def test_cached_entry_wins_over_new_source(self):
        cache = PolicyCache()
        cache.get_or_resolve("acme", lambda company_id: None)
        preview = run_company_preview(
            "acme", "2024-03", [], cache, lambda company_id: {"overtime": {"enabled": False}}
        )
        assert preview.status == PreviewStatus.COMPLETED
        assert cache.get("acme").overtime.enabled


class TestPayrollJob:
    def test_employee_mismatch(self):
        salary = EmployeeSalaryInfo("E-1", SalaryType.MONTHLY, monthly_salary=Decimal("1"))
        with pytest.raises(ValueError):
            PayrollJob("E-2", salary)

    def test_negative_absence(self):
        salary = EmployeeSalaryInfo("E-1", SalaryType.MONTHLY, monthly_salary=Decimal("1"))
        with pytest.raises(ValueError):
            PayrollJob("E-1", salary, absence_days=-1)
