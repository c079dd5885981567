from holders_intel.models.report import (
    HolderOut,
    HoldersReport,
    InsidersGraphOut,
    LedgerFailureOut,
    ReportRequest,
)

__all__ = [
    "HolderOut",
    "HoldersReport",
    "InsidersGraphOut",
    "LedgerFailureOut",
    "ReportRequest",
]
