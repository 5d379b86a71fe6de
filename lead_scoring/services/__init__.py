"""Services package."""
from lead_scoring.services.lead_import import (
    LeadImportError,
    EmptyLeadFileError,
    LeadFileParseError,
    LeadValidationIssue,
    LeadImportReport,
    parse_leads_csv,
    read_leads_file,
)
from lead_scoring.services.result_export import (
    EXPORT_COLUMNS,
    results_to_dataframe,
    export_results_csv,
    export_filename,
)

__all__ = [
    "LeadImportError",
    "EmptyLeadFileError",
    "LeadFileParseError",
    "LeadValidationIssue",
    "LeadImportReport",
    "parse_leads_csv",
    "read_leads_file",
    "EXPORT_COLUMNS",
    "results_to_dataframe",
    "export_results_csv",
    "export_filename",
]
