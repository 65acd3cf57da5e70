"""Configuration models for the contract matching system."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple
from enum import Enum

class MatchPolicy(str, Enum):
    """How contracts are reconciled against the other two sources."""
    TRIPLE_JOIN = "triple_join"
    CODE_LOOKUP = "code_lookup"

class MatchOutcome(str, Enum):
    """Outcome of matching a single contract."""
    FULL = "full"
    PARTIAL = "partial"
    NO_MATCH = "no_match"

@dataclass(frozen=True)
class ContractColumns:
    """Column names read from contract records."""
    id_field: str = 'id'
    name_field: str = 'nombre'

@dataclass(frozen=True)
class SpreadsheetColumns:
    """Column names read from spreadsheet records.

    ``name_fields`` are joined with a single space to form the full name,
    e.g. ``('Nombre', 'Apellido')``.
    """
    name_fields: Tuple[str, ...] = ('nombre',)
    code_field: str = 'Cod'
    plan_field: str = 'Plan'

@dataclass(frozen=True)
class PlanColumns:
    """Column names read from plan records."""
    name_field: str = 'nombre'
    id_field: str = 'id'

@dataclass(frozen=True)
class StatementTarget:
    """Table and column names used in generated UPDATE statements."""
    table: Optional[str] = None
    id_column: str = 'id'
    name_column: str = 'nombre_excel'
    code_column: str = 'nro'
    plan_column: str = 'plan_id'

DEFAULT_TABLES = {
    MatchPolicy.TRIPLE_JOIN: 'contratos',
    MatchPolicy.CODE_LOOKUP: 'contracts',
}

@dataclass(frozen=True)
class MatchStrategy:
    """Strategy for reconciling contracts with spreadsheet and plan records."""
    policy: MatchPolicy
    contract_columns: ContractColumns = ContractColumns()
    spreadsheet_columns: SpreadsheetColumns = SpreadsheetColumns()
    plan_columns: PlanColumns = PlanColumns()
    target: StatementTarget = StatementTarget()
    fuzzy_threshold: Optional[float] = None
    name_preprocess_method: str = 'name'
    code_preprocess_method: str = 'code'

    def __post_init__(self):
        """Coerce the policy and fill the default table for it."""
        object.__setattr__(self, 'policy', MatchPolicy(self.policy))

        if self.fuzzy_threshold is not None and not 0 <= self.fuzzy_threshold <= 1:
            raise ValueError(
                f"fuzzy_threshold must be between 0 and 1, got {self.fuzzy_threshold}"
            )

        if not self.target.table:
            object.__setattr__(
                self,
                'target',
                StatementTarget(
                    table=DEFAULT_TABLES[self.policy],
                    id_column=self.target.id_column,
                    name_column=self.target.name_column,
                    code_column=self.target.code_column,
                    plan_column=self.target.plan_column
                )
            )

@dataclass(frozen=True)
class MatchedTriple:
    """A contract matched to a spreadsheet record and a plan record."""
    contract: Mapping[str, Any]
    spreadsheet: Mapping[str, Any]
    plan: Mapping[str, Any]

@dataclass(frozen=True)
class CodeMatch:
    """A contract resolved to a spreadsheet code and, optionally, a plan id."""
    contract: Mapping[str, Any]
    spreadsheet: Mapping[str, Any]
    code: str
    plan_id: Optional[int] = None

    @property
    def outcome(self) -> MatchOutcome:
        return MatchOutcome.FULL if self.plan_id is not None else MatchOutcome.PARTIAL

@dataclass
class MatchSummary:
    """Counts reported for a reconciliation run."""
    contracts: int = 0
    matches: int = 0
    statements: int = 0
    partial_matches: int = 0
    skipped_records: int = 0

def create_triple_join_strategy(
    fuzzy_threshold: Optional[float] = None,
    table: Optional[str] = None
) -> MatchStrategy:
    """
    Create the strategy joining contracts, spreadsheet and plans by name.

    Args:
        fuzzy_threshold: Optional similarity threshold for fuzzy fallback
        table: Optional table name overriding ``contratos``

    Returns:
        MatchStrategy: Configured triple-join strategy
    """
    return MatchStrategy(
        policy=MatchPolicy.TRIPLE_JOIN,
        contract_columns=ContractColumns(id_field='id', name_field='nombre'),
        spreadsheet_columns=SpreadsheetColumns(name_fields=('nombre',)),
        plan_columns=PlanColumns(name_field='nombre', id_field='id'),
        target=StatementTarget(table=table),
        fuzzy_threshold=fuzzy_threshold
    )

def create_code_lookup_strategy(
    fuzzy_threshold: Optional[float] = None,
    table: Optional[str] = None
) -> MatchStrategy:
    """
    Create the strategy resolving contracts to a code and a plan id.

    Spreadsheet names are built from ``Nombre`` and ``Apellido``; plan names
    come from the ``Plan`` column and are looked up in the ``name`` column of
    the plans table.

    Args:
        fuzzy_threshold: Optional similarity threshold for fuzzy fallback
        table: Optional table name overriding ``contracts``

    Returns:
        MatchStrategy: Configured code-lookup strategy
    """
    return MatchStrategy(
        policy=MatchPolicy.CODE_LOOKUP,
        contract_columns=ContractColumns(id_field='id', name_field='nombre'),
        spreadsheet_columns=SpreadsheetColumns(
            name_fields=('Nombre', 'Apellido'),
            code_field='Cod',
            plan_field='Plan'
        ),
        plan_columns=PlanColumns(name_field='name', id_field='id'),
        target=StatementTarget(table=table),
        fuzzy_threshold=fuzzy_threshold
    )
