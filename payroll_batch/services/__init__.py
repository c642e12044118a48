"""payroll_batch.services -- payroll preview execution."""

from payroll_batch.services.preview import run_company_preview, run_payroll_preview

__all__ = ["run_company_preview", "run_payroll_preview"]
