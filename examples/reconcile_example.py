"""Example usage of the contract matcher with CSV and Excel files."""

import logging
from pathlib import Path
from typing import Optional

from contract_matcher.config.models import (
    MatchStrategy,
    create_code_lookup_strategy,
    create_triple_join_strategy
)
from contract_matcher.core.pipeline import ReconciliationResult, reconcile_files

def run(
    strategy: MatchStrategy,
    contracts_file: Path,
    spreadsheet_file: Path,
    plans_file: Path,
    output_file: Path,
    report_file: Optional[Path] = None
) -> ReconciliationResult:
    """
    Reconcile the files and log the outcome.

    Args:
        strategy: Matching strategy to use
        contracts_file: Contracts CSV or Excel file
        spreadsheet_file: Spreadsheet to match against
        plans_file: Plans CSV or Excel file
        output_file: SQL file to write
        report_file: Optional Excel match report

    Returns:
        ReconciliationResult: Matches, statements and run counts
    """
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

        return reconcile_files(
            contracts_file=contracts_file,
            spreadsheet_file=spreadsheet_file,
            plans_file=plans_file,
            output_file=output_file,
            strategy=strategy,
            report_file=report_file,
            worker_processes=-1
        )

    except Exception as e:
        logging.error(f"An error occurred: {e}", exc_info=True)
        raise

if __name__ == "__main__":
    # Contracts, spreadsheet and plans matched on the same name
    run(
        create_triple_join_strategy(),
        contracts_file=Path('data/contracts.xlsx'),
        spreadsheet_file=Path('data/clients.xlsx'),
        plans_file=Path('data/plans.xlsx'),
        output_file=Path('output/matches.sql')
    )

    # Contracts resolved to a client code, then to the plan of that client
    run(
        create_code_lookup_strategy(),
        contracts_file=Path('data/contracts.csv'),
        spreadsheet_file=Path('data/clients.xlsx'),
        plans_file=Path('data/planes_velocidad.csv'),
        output_file=Path('output/update_statements.sql'),
        report_file=Path('output/update_report.xlsx')
    )
