"""
Ata Report - Error types

Failures that abort a single extraction or export request.
"""


class AtaReportError(Exception):
    """Base class for extraction/export failures"""
    pass


class SpreadsheetReadError(AtaReportError):
    """The source document is missing, unreadable, or not a workbook"""

    def __init__(self, file_path: str, reason: str = ""):
        self.file_path = file_path
        self.reason = reason
        message = f"Could not read spreadsheet: {file_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyResultError(AtaReportError):
    """Export was requested but the scan matched no records"""

    def __init__(self, unit: str = ""):
        self.unit = unit
        if unit:
            super().__init__(f"No records found for unit: {unit}")
        else:
            super().__init__("No records found")
