"""Contract matching across spreadsheet and plan records."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
import numpy as np
import pandas as pd
from multiprocessing import Pool, cpu_count
import logging
from functools import partial
import time

from contract_matcher.core.errors import MalformedInputError, MissingFieldError
from contract_matcher.core.normalizer import create_preprocessor, parse_identifier
from contract_matcher.core.similarity import find_best_match
from contract_matcher.config.models import (
    CodeMatch,
    MatchedTriple,
    MatchPolicy,
    MatchStrategy
)

Match = Union[MatchedTriple, CodeMatch]

class NameIndex:
    """Lookup from normalized name to value keeping the first value seen."""

    def __init__(self, fuzzy_threshold: Optional[float] = None):
        self.fuzzy_threshold = fuzzy_threshold
        self.collisions = 0
        self._entries: Dict[str, Any] = {}

    def add(self, key: str, value: Any) -> bool:
        """Add a value unless the key is empty or already present."""
        if not key:
            return False
        if key in self._entries:
            self.collisions += 1
            return False
        self._entries[key] = value
        return True

    def get(self, key: str) -> Optional[Any]:
        """
        Look up a normalized name.

        Exact keys win. When a fuzzy threshold is configured, a miss falls
        back to the most similar key at or above the threshold.

        Args:
            key: Normalized name

        Returns:
            Optional[Any]: Indexed value, or None
        """
        if not key:
            return None
        if key in self._entries:
            return self._entries[key]
        if self.fuzzy_threshold is None:
            return None

        best = find_best_match(key, self._entries, self.fuzzy_threshold)
        return self._entries[best.candidate] if best else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

@dataclass
class MatchIndexes:
    """Indexes built once per run from the spreadsheet and plan records."""
    names: NameIndex
    plans: NameIndex
    rows_by_code: Dict[str, Mapping] = field(default_factory=dict)

def records_from_dataframe(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame to a list of records with NaN replaced by None."""
    return df.astype(object).where(pd.notna(df), None).to_dict('records')

class ContractMatcher:
    """
    Reconciles contracts with spreadsheet and plan records by name.

    Each contract is matched independently against indexes built from the
    full spreadsheet and plan sources, so the result order always follows
    the contract order.
    """

    def __init__(
        self,
        strategy: MatchStrategy,
        worker_processes: int = 1
    ):
        """
        Initialize the contract matcher.

        Args:
            strategy: Matching strategy to use
            worker_processes: Number of worker processes (-1 for CPU count)
        """
        self.strategy = strategy
        self.worker_processes = worker_processes if worker_processes > 0 else cpu_count()
        self.skipped_records = 0

        # Initialize components
        self.name_preprocessor = create_preprocessor(strategy.name_preprocess_method)
        self.code_preprocessor = create_preprocessor(strategy.code_preprocess_method)

        self._initialize_logging()

    def _initialize_logging(self) -> None:
        """Setup logging configuration."""
        self.logger = logging.getLogger(__name__)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - %(message)s'
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def require_records(self, records: Any, source: str) -> List[Mapping]:
        """
        Materialize a record source and check that it holds mappings.

        Args:
            records: DataFrame or iterable of mappings
            source: Source name used in error messages

        Returns:
            List[Mapping]: Records in source order

        Raises:
            MalformedInputError: If the source is not an iterable of mappings
        """
        if isinstance(records, pd.DataFrame):
            return records_from_dataframe(records)

        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            raise MalformedInputError(
                f"{source} must be a sequence of records, got {type(records).__name__}"
            )

        materialized = list(records)
        for position, record in enumerate(materialized):
            if not isinstance(record, Mapping):
                raise MalformedInputError(
                    f"{source} record {position} is not a mapping: {type(record).__name__}"
                )
        return materialized

    def _build_indexes(
        self,
        spreadsheet: List[Mapping],
        plans: List[Mapping]
    ) -> MatchIndexes:
        """Build the name, code and plan indexes for the configured policy."""
        sheet_cols = self.strategy.spreadsheet_columns
        plan_cols = self.strategy.plan_columns
        indexes = MatchIndexes(
            names=NameIndex(self.strategy.fuzzy_threshold),
            plans=NameIndex(self.strategy.fuzzy_threshold)
        )

        for row in spreadsheet:
            key = self.name_preprocessor.process_fields(row, sheet_cols.name_fields)
            if self.strategy.policy == MatchPolicy.TRIPLE_JOIN:
                indexes.names.add(key, row)
                continue

            code = self.code_preprocessor.process(row.get(sheet_cols.code_field))
            if not code:
                continue
            # First row with the code, named or not
            indexes.rows_by_code.setdefault(code, row)
            indexes.names.add(key, code)

        for plan in plans:
            key = self.name_preprocessor.process(plan.get(plan_cols.name_field))
            plan_id = parse_identifier(plan.get(plan_cols.id_field))
            if plan_id is None:
                continue
            if self.strategy.policy == MatchPolicy.TRIPLE_JOIN:
                indexes.plans.add(key, plan)
            else:
                indexes.plans.add(key, plan_id)

        self.logger.info(
            f"Indexed {len(indexes.names)} spreadsheet names and "
            f"{len(indexes.plans)} plan names"
        )
        if indexes.names.collisions or indexes.plans.collisions:
            self.logger.debug(
                f"Kept first record for {indexes.names.collisions} duplicate spreadsheet "
                f"names and {indexes.plans.collisions} duplicate plan names"
            )
        return indexes

    def _contract_key(self, contract: Mapping) -> Tuple[int, str]:
        """
        Get the identifier and normalized name of a contract.

        Raises:
            MissingFieldError: If the contract has no usable id or name
        """
        columns = self.strategy.contract_columns
        contract_id = parse_identifier(contract.get(columns.id_field))
        if contract_id is None:
            raise MissingFieldError(columns.id_field, 'contract')

        key = self.name_preprocessor.process(contract.get(columns.name_field))
        if not key:
            raise MissingFieldError(columns.name_field, 'contract')
        return contract_id, key

    def _match_triple(
        self,
        contract: Mapping,
        key: str,
        indexes: MatchIndexes
    ) -> Optional[MatchedTriple]:
        """Match a contract to a spreadsheet record and a plan of the same name."""
        spreadsheet_row = indexes.names.get(key)
        if spreadsheet_row is None:
            return None

        plan = indexes.plans.get(key)
        if plan is None:
            return None

        return MatchedTriple(contract=contract, spreadsheet=spreadsheet_row, plan=plan)

    def _match_code(
        self,
        contract: Mapping,
        key: str,
        indexes: MatchIndexes
    ) -> Optional[CodeMatch]:
        """Resolve a contract to a spreadsheet code and, if possible, a plan id."""
        code = indexes.names.get(key)
        if code is None:
            return None

        row = indexes.rows_by_code[code]
        plan_name = self.name_preprocessor.process(
            row.get(self.strategy.spreadsheet_columns.plan_field)
        )
        plan_id = indexes.plans.get(plan_name) if plan_name else None

        return CodeMatch(contract=contract, spreadsheet=row, code=code, plan_id=plan_id)

    def _process_chunk(
        self,
        chunk: List[Mapping],
        indexes: MatchIndexes
    ) -> Tuple[List[Match], int]:
        """
        Match a chunk of contracts.

        Args:
            chunk: Contracts to match, in input order
            indexes: Indexes built from the spreadsheet and plan records

        Returns:
            Tuple[List[Match], int]: Matches in input order and number of
            contracts skipped for missing fields
        """
        match_contract = (
            self._match_triple
            if self.strategy.policy == MatchPolicy.TRIPLE_JOIN
            else self._match_code
        )
        matches = []
        skipped = 0

        for contract in chunk:
            try:
                _, key = self._contract_key(contract)
            except MissingFieldError as e:
                self.logger.debug(f"Skipping contract {dict(contract)}: {e}")
                skipped += 1
                continue

            match = match_contract(contract, key, indexes)
            if match is not None:
                matches.append(match)

        return matches, skipped

    def match(
        self,
        contracts: Any,
        spreadsheet: Any,
        plans: Any
    ) -> List[Match]:
        """
        Match contracts against spreadsheet and plan records.

        Args:
            contracts: Contract records (DataFrame or iterable of mappings)
            spreadsheet: Spreadsheet records
            plans: Plan records

        Returns:
            List[Match]: One match per matched contract, in contract order

        Raises:
            MalformedInputError: If any source is not an iterable of mappings
        """
        start_time = time.time()

        contracts = self.require_records(contracts, 'contracts')
        spreadsheet = self.require_records(spreadsheet, 'spreadsheet')
        plans = self.require_records(plans, 'plans')

        indexes = self._build_indexes(spreadsheet, plans)

        if self.worker_processes > 1 and len(contracts) > self.worker_processes:
            chunks = [
                [contracts[i] for i in positions]
                for positions in np.array_split(
                    np.arange(len(contracts)), self.worker_processes
                )
            ]
            with Pool(processes=self.worker_processes) as pool:
                results = pool.map(
                    partial(self._process_chunk, indexes=indexes),
                    chunks
                )
        else:
            results = [self._process_chunk(contracts, indexes)]

        # Chunks come back in submission order
        matches = [match for chunk_matches, _ in results for match in chunk_matches]
        self.skipped_records = sum(skipped for _, skipped in results)

        self.logger.info(
            f"Matched {len(matches)} of {len(contracts)} contracts "
            f"({self.strategy.policy.value}) in {time.time() - start_time:.2f} seconds"
        )
        if self.skipped_records:
            self.logger.info(
                f"Skipped {self.skipped_records} contracts with missing fields"
            )

        return matches
