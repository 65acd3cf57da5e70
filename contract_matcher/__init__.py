"""
Contract Matcher
================

Reconciles contract records with a spreadsheet and a plans table keyed by
human-entered names, and generates SQL UPDATE statements for the matches.

Key Features:
- Accent, case and punctuation insensitive name normalization
- Levenshtein-based name similarity with optional fuzzy fallback
- Triple-join and code-lookup matching policies
- Quote-escaped UPDATE statement generation
- CSV and Excel sources, parallel matching by contract
"""

from contract_matcher.core.matcher import ContractMatcher
from contract_matcher.core.normalizer import normalize_name, split_name
from contract_matcher.core.similarity import similarity, find_best_match
from contract_matcher.core.statements import StatementGenerator, escape_sql_string
from contract_matcher.core.pipeline import reconcile, reconcile_files
from contract_matcher.core.errors import MalformedInputError, MissingFieldError

from contract_matcher.config.models import (
    MatchPolicy,
    MatchStrategy,
    MatchSummary,
    create_triple_join_strategy,
    create_code_lookup_strategy
)

__version__ = "1.0.0"
