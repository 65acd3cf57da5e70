import pytest

from contract_matcher.config.models import (
    CodeMatch,
    MatchedTriple,
    MatchPolicy,
    MatchStrategy,
    SpreadsheetColumns,
    create_code_lookup_strategy,
    create_triple_join_strategy
)
from contract_matcher.core.errors import MissingFieldError
from contract_matcher.core.matcher import ContractMatcher
from contract_matcher.core.statements import (
    StatementGenerator,
    escape_sql_string,
    quote_sql_string
)

def test_escape_sql_string_doubles_quotes():
    assert escape_sql_string("O'Brien") == "O''Brien"
    assert escape_sql_string("''") == "''''"
    assert escape_sql_string("plain") == "plain"
    assert quote_sql_string("D'Angelo") == "'D''Angelo'"

def test_triple_statement():
    strategy = create_triple_join_strategy()
    contracts = [{"id": 1, "nombre": "Ana Gomez"}]
    spreadsheet = [{"nombre": "ana gomez", "Cod": "X1"}]
    plans = [{"nombre": "ANA GOMEZ", "id": 7}]

    matches = ContractMatcher(strategy).match(contracts, spreadsheet, plans)
    statements = StatementGenerator(strategy).generate_all(matches)

    assert statements == [
        "UPDATE contratos SET nombre_excel = 'ana gomez', plan_id = 7 WHERE id = 1;"
    ]

def test_triple_statement_escapes_spreadsheet_name():
    strategy = create_triple_join_strategy()
    triple = MatchedTriple(
        contract={"id": 3, "nombre": "Obrien"},
        spreadsheet={"nombre": "O'Brien"},
        plan={"nombre": "Obrien", "id": 2}
    )

    statement = StatementGenerator(strategy).generate(triple)

    assert "nombre_excel = 'O''Brien'" in statement
    assert statement.endswith("WHERE id = 3;")

def test_identifiers_are_rendered_bare():
    strategy = create_triple_join_strategy()
    triple = MatchedTriple(
        contract={"id": 1.0, "nombre": "Ana"},
        spreadsheet={"nombre": "Ana"},
        plan={"nombre": "Ana", "id": "7"}
    )

    statement = StatementGenerator(strategy).generate(triple)

    assert statement == "UPDATE contratos SET nombre_excel = 'Ana', plan_id = 7 WHERE id = 1;"

def test_code_statement_full_match():
    generator = StatementGenerator(create_code_lookup_strategy())
    match = CodeMatch(contract={"id": 1}, spreadsheet={}, code="X1", plan_id=7)

    assert generator.generate(match) == "UPDATE contracts SET nro = 'X1', plan_id = 7 WHERE id = 1;"

def test_code_statement_partial_match_omits_plan():
    generator = StatementGenerator(create_code_lookup_strategy())
    match = CodeMatch(contract={"id": 1}, spreadsheet={}, code="X'1")

    statement = generator.generate(match)

    assert statement == "UPDATE contracts SET nro = 'X''1' WHERE id = 1;"
    assert "plan_id" not in statement

def test_custom_table_name():
    generator = StatementGenerator(create_code_lookup_strategy(table="contratos"))
    match = CodeMatch(contract={"id": 4}, spreadsheet={}, code="A", plan_id=1)

    assert generator.generate(match).startswith("UPDATE contratos SET nro = 'A'")

def test_every_statement_ends_with_one_semicolon():
    generator = StatementGenerator(create_code_lookup_strategy())
    matches = [
        CodeMatch(contract={"id": i}, spreadsheet={}, code=f"C{i}", plan_id=i if i % 2 else None)
        for i in range(5)
    ]

    statements = generator.generate_all(matches)

    assert [s.split("WHERE id = ")[1] for s in statements] == ["0;", "1;", "2;", "3;", "4;"]
    assert all(s.endswith(";") and s.count(";") == 1 for s in statements)

def test_missing_contract_id_raises():
    generator = StatementGenerator(create_code_lookup_strategy())
    with pytest.raises(MissingFieldError):
        generator.generate(CodeMatch(contract={"id": None}, spreadsheet={}, code="A"))

def test_unknown_match_type_raises():
    with pytest.raises(TypeError):
        StatementGenerator(create_triple_join_strategy()).generate({"contract": {}})

def test_spreadsheet_name_is_written_as_read():
    strategy = MatchStrategy(
        policy=MatchPolicy.TRIPLE_JOIN,
        spreadsheet_columns=SpreadsheetColumns(name_fields=("Nombre", "Apellido"))
    )
    triple = MatchedTriple(
        contract={"id": 5, "nombre": "Ana Gomez"},
        spreadsheet={"Nombre": "Ana ", "Apellido": "Gómez"},
        plan={"nombre": "Ana Gomez", "id": 2}
    )

    statement = StatementGenerator(strategy).generate(triple)

    assert statement == "UPDATE contratos SET nombre_excel = 'Ana  Gómez', plan_id = 2 WHERE id = 5;"
