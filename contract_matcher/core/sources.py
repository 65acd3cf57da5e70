"""Reading record sources and writing reconciliation output."""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Union
import logging
import pandas as pd

from contract_matcher.core.matcher import Match, records_from_dataframe
from contract_matcher.core.normalizer import join_fields, parse_identifier
from contract_matcher.config.models import CodeMatch, MatchedTriple, MatchOutcome, MatchStrategy

PathLike = Union[str, Path]

EXCEL_SUFFIXES = {'.xlsx', '.xlsm', '.xls'}

def read_records(path: PathLike, sheet_name: Union[int, str] = 0) -> List[Dict[str, Any]]:
    """
    Read the records of a CSV or Excel file.

    Args:
        path: File to read
        sheet_name: Sheet to read from Excel workbooks

    Returns:
        List[Dict[str, Any]]: One record per row, blank cells as None

    Raises:
        ValueError: If the file type is not supported
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == '.csv':
        df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[''])
    elif suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name)
    else:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    logging.info(f"Read {len(df)} records from {path}")
    return records_from_dataframe(df)

def write_statements(path: PathLike, statements: Iterable[str]) -> Path:
    """Write statements one per line, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text('\n'.join(statements), encoding='utf-8')
    return path

def _report_row(match: Match, strategy: MatchStrategy) -> Dict[str, Any]:
    contract_cols = strategy.contract_columns
    row = {
        'contract_id': parse_identifier(match.contract.get(contract_cols.id_field)),
        'contract_name': match.contract.get(contract_cols.name_field),
        'spreadsheet_name': join_fields(match.spreadsheet, strategy.spreadsheet_columns.name_fields),
    }

    if isinstance(match, MatchedTriple):
        row.update({
            'code': match.spreadsheet.get(strategy.spreadsheet_columns.code_field),
            'plan_id': parse_identifier(match.plan.get(strategy.plan_columns.id_field)),
            'outcome': MatchOutcome.FULL.value
        })
    elif isinstance(match, CodeMatch):
        row.update({
            'code': match.code,
            'plan_id': match.plan_id,
            'outcome': match.outcome.value
        })
    return row

def write_match_report(
    path: PathLike,
    matches: Iterable[Match],
    strategy: MatchStrategy
) -> Path:
    """
    Write an Excel report with one row per match.

    Args:
        path: Output workbook
        matches: Matches to report
        strategy: Strategy the matches were produced with

    Returns:
        Path: Written workbook
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    report = pd.DataFrame(
        [_report_row(match, strategy) for match in matches],
        columns=['contract_id', 'contract_name', 'spreadsheet_name', 'code', 'plan_id', 'outcome']
    )

    with pd.ExcelWriter(
        path,
        engine='xlsxwriter',
        engine_kwargs={'options': {'strings_to_urls': False}}
    ) as writer:
        report.to_excel(writer, index=False, sheet_name='matches')

    logging.info(f"Saved match report with {len(report)} rows to: {path}")
    return path
