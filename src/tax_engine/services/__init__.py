"""Report assembly services."""

from tax_engine.services.tax_report_service import (
    EmployeeTaxReport,
    ReportConfig,
    TaxReportService,
    ytd_status,
)

__all__ = [
    "EmployeeTaxReport",
    "ReportConfig",
    "TaxReportService",
    "ytd_status",
]
