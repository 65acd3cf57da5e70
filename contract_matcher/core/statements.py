"""SQL UPDATE statement generation for matched contracts."""

from typing import Any, Iterable, List, Union

from contract_matcher.core.errors import MissingFieldError
from contract_matcher.core.normalizer import join_fields, parse_identifier
from contract_matcher.config.models import CodeMatch, MatchedTriple, MatchStrategy

def escape_sql_string(value: Any) -> str:
    """Double every single quote so the value can sit inside '...'."""
    return str(value).replace("'", "''")

def quote_sql_string(value: Any) -> str:
    return f"'{escape_sql_string(value)}'"

class StatementGenerator:
    """Renders matches as UPDATE statements for the strategy's target table."""

    def __init__(self, strategy: MatchStrategy):
        self.strategy = strategy
        self.target = strategy.target

    def _identifier(self, record: Any, field: str, source: str) -> int:
        identifier = parse_identifier(record.get(field))
        if identifier is None:
            raise MissingFieldError(field, source)
        return identifier

    def _spreadsheet_name(self, triple: MatchedTriple) -> str:
        return join_fields(triple.spreadsheet, self.strategy.spreadsheet_columns.name_fields)

    def _update(self, assignments: List[str], contract_id: int) -> str:
        return (
            f"UPDATE {self.target.table} SET {', '.join(assignments)} "
            f"WHERE {self.target.id_column} = {contract_id};"
        )

    def triple_statement(self, triple: MatchedTriple) -> str:
        """
        Build the statement for a contract matched by name on all sources.

        Args:
            triple: Matched contract, spreadsheet record and plan

        Returns:
            str: UPDATE statement setting the spreadsheet name and plan id
        """
        contract_id = self._identifier(
            triple.contract, self.strategy.contract_columns.id_field, 'contract'
        )
        plan_id = self._identifier(
            triple.plan, self.strategy.plan_columns.id_field, 'plan'
        )
        return self._update(
            [
                f"{self.target.name_column} = {quote_sql_string(self._spreadsheet_name(triple))}",
                f"{self.target.plan_column} = {plan_id}"
            ],
            contract_id
        )

    def code_statement(self, match: CodeMatch) -> str:
        """
        Build the statement for a contract resolved to a code.

        The plan clause is left out entirely when no plan id was resolved.

        Args:
            match: Code match, full or partial

        Returns:
            str: UPDATE statement setting the code and, if known, the plan id
        """
        contract_id = self._identifier(
            match.contract, self.strategy.contract_columns.id_field, 'contract'
        )
        assignments = [f"{self.target.code_column} = {quote_sql_string(match.code)}"]
        if match.plan_id is not None:
            assignments.append(f"{self.target.plan_column} = {int(match.plan_id)}")
        return self._update(assignments, contract_id)

    def generate(self, match: Union[MatchedTriple, CodeMatch]) -> str:
        """Build the UPDATE statement for a single match."""
        if isinstance(match, MatchedTriple):
            return self.triple_statement(match)
        if isinstance(match, CodeMatch):
            return self.code_statement(match)
        raise TypeError(f"Cannot generate a statement for {type(match).__name__}")

    def generate_all(self, matches: Iterable[Union[MatchedTriple, CodeMatch]]) -> List[str]:
        """Build statements for all matches, keeping their order."""
        return [self.generate(match) for match in matches]
