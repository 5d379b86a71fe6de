"""
Lead CSV Import

Parses an uploaded CSV into Lead records with per-row validation.

Rules:
- Headers are lower-cased and trimmed, so "Name " and "name" are the same column
- Every value is read as text and trimmed; missing cells become ""
- A row missing one of the six required columns is still imported, flagged
  `is_valid=False`, and reported as a validation error
- Line numbers count the header as line 1
"""
import io
from pathlib import Path
from typing import List

import pandas as pd
from loguru import logger
from pydantic import BaseModel, Field, computed_field

from lead_scoring.models.lead import Lead, REQUIRED_LEAD_FIELDS, validate_lead_fields


class LeadImportError(Exception):
    """Base class for CSV import failures."""
    pass


class EmptyLeadFileError(LeadImportError):
    """The file contained no data rows."""
    pass


class LeadFileParseError(LeadImportError):
    """The file could not be decoded or parsed as CSV."""
    pass


class LeadValidationIssue(BaseModel):
    line: int
    lead: str
    errors: List[str]


class LeadImportReport(BaseModel):
    """Everything one CSV import produced."""
    leads: List[Lead] = Field(default_factory=list)
    validation_errors: List[LeadValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def total_leads(self) -> int:
        return len(self.leads)

    @computed_field
    @property
    def valid_leads(self) -> int:
        return sum(1 for lead in self.leads if lead.is_valid)

    @computed_field
    @property
    def invalid_leads(self) -> int:
        return self.total_leads - self.valid_leads


def _read_frame(content: bytes) -> pd.DataFrame:
    try:
        frame = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyLeadFileError("The CSV file appears to be empty or incorrectly formatted") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise LeadFileParseError(f"Failed to parse CSV file: {e}") from e

    frame.columns = [str(column).strip().lower() for column in frame.columns]
    return frame.fillna("")


def parse_leads_csv(content: bytes) -> LeadImportReport:
    """
    Parse raw CSV bytes into a LeadImportReport.

    Raises:
        EmptyLeadFileError: If no data rows are present
        LeadFileParseError: If the content is not decodable CSV
    """
    frame = _read_frame(content)

    if frame.empty:
        raise EmptyLeadFileError("The CSV file appears to be empty or incorrectly formatted")

    report = LeadImportReport()

    for offset, row in enumerate(frame.to_dict(orient="records")):
        line_number = offset + 2
        errors = validate_lead_fields(row)

        lead = Lead(
            **{field: row.get(field, "") for field in REQUIRED_LEAD_FIELDS},
            line_number=line_number,
            is_valid=not errors,
        )

        if errors:
            report.validation_errors.append(
                LeadValidationIssue(
                    line=line_number,
                    lead=lead.name or f"Line {line_number}",
                    errors=errors,
                )
            )

        report.leads.append(lead)

    logger.info(f"📄 Parsed {report.total_leads} leads from CSV ({len(report.validation_errors)} validation warnings)")
    return report


def read_leads_file(path: str | Path) -> LeadImportReport:
    """Parse a CSV file from disk."""
    return parse_leads_csv(Path(path).read_bytes())
