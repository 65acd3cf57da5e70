"""End-to-end reconciliation: match records and generate SQL statements."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union
import logging

from contract_matcher.core.matcher import ContractMatcher, Match
from contract_matcher.core.statements import StatementGenerator
from contract_matcher.core.sources import read_records, write_match_report, write_statements
from contract_matcher.config.models import CodeMatch, MatchOutcome, MatchStrategy, MatchSummary

@dataclass
class ReconciliationResult:
    """Matches, statements and counts of a reconciliation run."""
    matches: List[Match] = field(default_factory=list)
    statements: List[str] = field(default_factory=list)
    summary: MatchSummary = field(default_factory=MatchSummary)

def reconcile(
    contracts: Any,
    spreadsheet: Any,
    plans: Any,
    strategy: MatchStrategy,
    worker_processes: int = 1
) -> ReconciliationResult:
    """
    Match contracts and build one UPDATE statement per match.

    Args:
        contracts: Contract records
        spreadsheet: Spreadsheet records
        plans: Plan records
        strategy: Matching strategy to use
        worker_processes: Number of worker processes for matching

    Returns:
        ReconciliationResult: Matches, statements and run counts
    """
    matcher = ContractMatcher(strategy, worker_processes=worker_processes)
    contracts = matcher.require_records(contracts, 'contracts')

    matches = matcher.match(contracts, spreadsheet, plans)
    statements = StatementGenerator(strategy).generate_all(matches)

    summary = MatchSummary(
        contracts=len(contracts),
        matches=len(matches),
        statements=len(statements),
        partial_matches=sum(
            1 for m in matches
            if isinstance(m, CodeMatch) and m.outcome == MatchOutcome.PARTIAL
        ),
        skipped_records=matcher.skipped_records
    )
    return ReconciliationResult(matches=matches, statements=statements, summary=summary)

def reconcile_files(
    contracts_file: Union[str, Path],
    spreadsheet_file: Union[str, Path],
    plans_file: Union[str, Path],
    output_file: Union[str, Path],
    strategy: MatchStrategy,
    report_file: Optional[Union[str, Path]] = None,
    worker_processes: int = 1
) -> ReconciliationResult:
    """
    Reconcile three record files and write the statements to a file.

    Args:
        contracts_file: CSV or Excel file with contracts
        spreadsheet_file: CSV or Excel file with spreadsheet records
        plans_file: CSV or Excel file with plans
        output_file: SQL file to write
        strategy: Matching strategy to use
        report_file: Optional Excel file for the match report
        worker_processes: Number of worker processes for matching

    Returns:
        ReconciliationResult: Matches, statements and run counts
    """
    logging.info(f"Reading contracts file: {contracts_file}")
    contracts = read_records(contracts_file)

    logging.info(f"Reading spreadsheet file: {spreadsheet_file}")
    spreadsheet = read_records(spreadsheet_file)

    logging.info(f"Reading plans file: {plans_file}")
    plans = read_records(plans_file)

    result = reconcile(contracts, spreadsheet, plans, strategy, worker_processes)
    summary = result.summary

    logging.info("Reconciliation Statistics:")
    logging.info(f"Contracts: {summary.contracts}")
    logging.info(f"Matches: {summary.matches} ({summary.partial_matches} without plan)")
    logging.info(f"Statements: {summary.statements}")

    write_statements(output_file, result.statements)
    logging.info(f"Saved SQL statements to: {output_file}")

    if report_file:
        write_match_report(report_file, result.matches, strategy)

    return result
