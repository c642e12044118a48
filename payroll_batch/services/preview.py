"""
Payroll preview runner -- per-employee isolation over a worker pool.

Contract:
    ``run_payroll_preview()`` calculates every job's payroll with the same
    resolved ``CompanyPolicySet`` and returns a ``PayrollPreview`` whose
    outcomes are in job order.
    ``run_company_preview()`` first resolves the company's policy set
    through a caller-owned ``PolicyCache``, so repeated runs for one
    company resolve its raw policy once.

Architecture: payroll_batch/services.  Imports from payroll_batch.domain,
    payroll_engines, payroll_config and payroll_kernel.  Nothing below
    this package imports it.

Invariants enforced:
    - Employee isolation: a job failing with ``PayrollEngineError`` is
      recorded as FAILED and does not abort the run.  Any other exception
      is a programming error and propagates.
    - Bounded submission: at most ``max_workers`` jobs are in flight, so
      cancellation takes effect within one job per worker.
    - Cancellation: once ``cancel_event`` is set no further jobs are
      submitted; jobs already running finish and are kept.  Unsubmitted
      jobs are reported NOT_SUBMITTED and the preview is CANCELLED.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from payroll_batch.domain.types import (
    EmployeeOutcome,
    OutcomeStatus,
    PayrollJob,
    PayrollPreview,
    PreviewStatus,
)
from payroll_config.cache import PolicyCache, RawPolicySource
from payroll_config.schema import CompanyPolicySet
from payroll_engines.payroll import calculate_payroll
from payroll_kernel.domain.results import ZERO
from payroll_kernel.exceptions import PayrollEngineError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("batch.preview")


def _run_job(
    index: int,
    job: PayrollJob,
    policies: CompanyPolicySet,
    period: str,
) -> EmployeeOutcome:
    started = time.monotonic()
    with LogContext.bind(
        company_id=policies.company_id, employee_id=job.employee_id, period=period
    ):
        try:
            result = calculate_payroll(
                job.salary, job.days, policies, absence_days=job.absence_days
            )
        except PayrollEngineError as exc:
            logger.warning(
                "payroll_job_failed",
                extra={"job_index": index, "error_code": exc.code},
                exc_info=True,
            )
            return EmployeeOutcome(
                job_index=index,
                employee_id=job.employee_id,
                status=OutcomeStatus.FAILED,
                error_code=exc.code,
                error_message=str(exc),
                error_field=getattr(exc, "field", None),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
    return EmployeeOutcome(
        job_index=index,
        employee_id=job.employee_id,
        status=OutcomeStatus.SUCCEEDED,
        result=result,
        duration_ms=int((time.monotonic() - started) * 1000),
    )


def _final_status(cancelled: bool, succeeded: int, failed: int) -> PreviewStatus:
    if cancelled:
        return PreviewStatus.CANCELLED
    if failed == 0:
        return PreviewStatus.COMPLETED
    if succeeded == 0:
        return PreviewStatus.FAILED
    return PreviewStatus.PARTIALLY_COMPLETED


def run_payroll_preview(
    company_id: str,
    period: str,
    jobs: Sequence[PayrollJob],
    policies: CompanyPolicySet,
    *,
    max_workers: int = 4,
    cancel_event: threading.Event | None = None,
) -> PayrollPreview:
    """Calculate every job on a thread pool and aggregate the preview."""
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")
    if policies.company_id != company_id:
        raise ValueError(
            f"policy set belongs to {policies.company_id}, not {company_id}"
        )

    start_time = time.monotonic()
    futures: dict[int, Future[EmployeeOutcome]] = {}
    in_flight: set[Future[EmployeeOutcome]] = set()
    cancelled = False

    logger.info(
        "payroll_preview_started",
        extra={"company_id": company_id, "period": period, "total_jobs": len(jobs)},
    )

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for index, job in enumerate(jobs):
            if len(in_flight) >= max_workers:
                _, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            future = pool.submit(_run_job, index, job, policies, period)
            futures[index] = future
            in_flight.add(future)

    outcomes: list[EmployeeOutcome] = []
    for index, job in enumerate(jobs):
        future = futures.get(index)
        if future is None:
            outcomes.append(
                EmployeeOutcome(
                    job_index=index,
                    employee_id=job.employee_id,
                    status=OutcomeStatus.NOT_SUBMITTED,
                )
            )
        else:
            # result() re-raises anything other than PayrollEngineError
            outcomes.append(future.result())

    results = [o.result for o in outcomes if o.result is not None]
    succeeded = len(results)
    failed = sum(1 for o in outcomes if o.status == OutcomeStatus.FAILED)

    preview = PayrollPreview(
        company_id=company_id,
        period=period,
        status=_final_status(cancelled, succeeded, failed),
        outcomes=tuple(outcomes),
        total_base_salary=sum((r.base_salary for r in results), ZERO),
        total_overtime_pay=sum((r.total_overtime_pay for r in results), ZERO),
        total_allowances=sum((r.total_allowances for r in results), ZERO),
        total_deductions=sum((r.total_deductions for r in results), ZERO),
        total_gross_salary=sum((r.gross_salary for r in results), ZERO),
        total_net_salary=sum((r.net_salary for r in results), ZERO),
        duration_ms=int((time.monotonic() - start_time) * 1000),
    )

    logger.info(
        "payroll_preview_completed",
        extra={
            "company_id": company_id,
            "period": period,
            "status": preview.status.value,
            "succeeded": succeeded,
            "failed": failed,
            "not_submitted": preview.not_submitted,
            "total_net_salary": str(preview.total_net_salary),
            "duration_ms": preview.duration_ms,
        },
    )
    return preview


def run_company_preview(
    company_id: str,
    period: str,
    jobs: Sequence[PayrollJob],
    cache: PolicyCache,
    source: RawPolicySource,
    *,
    max_workers: int = 4,
    cancel_event: threading.Event | None = None,
) -> PayrollPreview:
    """
    Resolve ``company_id``'s policy through ``cache`` and run the preview.

    ``source`` is only called on a cache miss.  A preview computed with
    defaulted policy sections is logged so the caller can surface it.

    Raises:
        ConfigurationError: the raw policy is malformed.
    """
    policies = cache.get_or_resolve(company_id, source)
    if policies.used_defaults:
        logger.info(
            "payroll_preview_uses_defaults",
            extra={
                "company_id": company_id,
                "period": period,
                "defaults_used_count": len(policies.defaults_used),
            },
        )
    return run_payroll_preview(
        company_id,
        period,
        jobs,
        policies,
        max_workers=max_workers,
        cancel_event=cancel_event,
    )
