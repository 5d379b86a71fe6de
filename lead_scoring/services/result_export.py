"""
Result Export
Renders scored leads as a CSV download.
"""
import datetime as dt
from typing import Optional, Sequence

import pandas as pd

from lead_scoring.models.scoring import ScoredLead

# Column title -> value extractor, in output order
EXPORT_COLUMNS = {
    "Name": lambda lead: lead.name,
    "Role": lambda lead: lead.role,
    "Company": lambda lead: lead.company,
    "Industry": lambda lead: lead.industry,
    "Location": lambda lead: lead.location,
    "Intent": lambda lead: lead.intent.value,
    "Score": lambda lead: lead.score,
    "Rule Score": lambda lead: lead.breakdown.rule_score,
    "AI Score": lambda lead: lead.breakdown.ai_score,
    "Reasoning": lambda lead: lead.reasoning,
}


def results_to_dataframe(results: Sequence[ScoredLead]) -> pd.DataFrame:
    rows = [
        {title: extract(lead) for title, extract in EXPORT_COLUMNS.items()}
        for lead in results
    ]
    return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))


def export_results_csv(results: Sequence[ScoredLead]) -> str:
    """CSV text with a header row even when there are no results."""
    return results_to_dataframe(results).to_csv(index=False)


def export_filename(now: Optional[dt.datetime] = None) -> str:
    """`lead_scores_<timestamp>.csv` with a filesystem-safe UTC timestamp."""
    now = now or dt.datetime.now(dt.timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    return f"lead_scores_{timestamp}.csv"
