"""
CLI Runner for the Scoring Pipeline
Scores a CSV of leads against an offer file without starting the API.

Usage:
    lead-scoring-cli --offer offer.json --leads leads.csv [--output scores.csv]
"""
import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from lead_scoring.core.scoring_orchestrator import ScoringOrchestrator, ScoringRun
from lead_scoring.models.offer import OfferFields
from lead_scoring.services.lead_import import LeadImportError, read_leads_file
from lead_scoring.services.result_export import export_results_csv
from lead_scoring.utils.observability import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lead-scoring-cli",
        description="Score a CSV of leads against a product offer.",
    )
    parser.add_argument("--offer", required=True, type=Path, help="JSON file with name, value_props, ideal_use_cases")
    parser.add_argument("--leads", required=True, type=Path, help="CSV file with name,role,company,industry,location,linkedin_bio")
    parser.add_argument("--output", type=Path, default=None, help="Write the scored leads as CSV to this path")
    return parser


def print_run(run: ScoringRun) -> None:
    summary = run.summary

    print("\n" + "=" * 70)
    print("📊 Scoring Summary")
    print("=" * 70)
    print(f"Total leads: {summary.total_leads}")
    print(f"   High:   {summary.intent_distribution.high} ({summary.intent_percentages.high})")
    print(f"   Medium: {summary.intent_distribution.medium} ({summary.intent_percentages.medium})")
    print(f"   Low:    {summary.intent_distribution.low} ({summary.intent_percentages.low})")
    print(
        f"Scores: avg {summary.score_stats.average}, "
        f"max {summary.score_stats.maximum}, min {summary.score_stats.minimum}"
    )
    print(f"⚡ Duration: {run.duration_ms:.0f}ms")

    for lead in run.results:
        print(f"\n{'─' * 70}")
        print(f"{lead.name or '(no name)'} | {lead.role} @ {lead.company}")
        print(f"   {lead.intent.value} ({lead.score}) rule={lead.breakdown.rule_score} ai={lead.breakdown.ai_score}")
        print(f"   {lead.reasoning}")

    if run.errors:
        print(f"\n⚠️  {len(run.errors)} leads failed scoring:")
        for error in run.errors:
            print(f"   {error.lead}: {error.error}")


async def run_cli(offer_path: Path, leads_path: Path, output_path: Path | None = None) -> int:
    try:
        offer = OfferFields.model_validate_json(offer_path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.error(f"❌ Could not load offer from {offer_path}: {e}")
        return 1

    try:
        report = read_leads_file(leads_path)
    except (OSError, LeadImportError) as e:
        logger.error(f"❌ Could not load leads from {leads_path}: {e}")
        return 1

    if report.validation_errors:
        logger.warning(f"⚠️ {len(report.validation_errors)} leads have missing fields")

    orchestrator = ScoringOrchestrator()
    run = await orchestrator.run(report.leads, offer)

    print_run(run)

    if output_path is not None:
        output_path.write_text(export_results_csv(run.results), encoding="utf-8")
        logger.info(f"📋 CSV export written: {output_path}")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    return asyncio.run(run_cli(args.offer, args.leads, args.output))


if __name__ == "__main__":
    sys.exit(main())
