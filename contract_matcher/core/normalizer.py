"""Name normalization and field preprocessing for record matching."""

from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Type
from abc import ABC, abstractmethod
import numbers
import re
import unicodedata
import pandas as pd

_NON_ALPHANUMERIC = re.compile(r'[^a-z0-9\s]')

def is_blank(value: Any) -> bool:
    """Check if a cell value is null, NaN or whitespace only."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False

def normalize_name(name: Any) -> str:
    """
    Canonicalize a name for comparison.

    Lower-cases, strips accents, drops anything that is not a letter, digit
    or whitespace and collapses whitespace runs to a single space.

    Args:
        name: Raw cell value

    Returns:
        str: Normalized name, empty for null values
    """
    if is_blank(name):
        return ''

    text = unicodedata.normalize('NFD', str(name).lower())
    text = ''.join(c for c in text if unicodedata.category(c) != 'Mn')
    text = _NON_ALPHANUMERIC.sub('', text)
    return ' '.join(text.split())

def parse_identifier(value: Any) -> Optional[int]:
    """Parse an integer identifier, returning None when there is none."""
    if isinstance(value, bool) or is_blank(value):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return int(value) if float(value).is_integer() else None

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None

def join_fields(record: Mapping[str, Any], fields: Sequence[str]) -> str:
    """Join the raw text of several fields with a space, as read from the source."""
    return ' '.join(
        '' if is_blank(record.get(field)) else str(record.get(field))
        for field in fields
    )

class BasePreprocessor(ABC):
    """Base class for preprocessors with common functionality."""

    @abstractmethod
    def process(self, value: Any) -> str:
        """Process a value into a standardized string format."""
        pass

    def _handle_null(self, value: Any) -> bool:
        """Check if value is null/empty."""
        return is_blank(value)

    def process_fields(self, record: Mapping[str, Any], fields: Sequence[str]) -> str:
        """
        Process the space-joined values of several fields of a record.

        A value is only produced when every field is present and non-blank.

        Args:
            record: Record to read the fields from
            fields: Field names, in joining order

        Returns:
            str: Processed value, empty if any field is missing
        """
        values = []
        for field in fields:
            value = record.get(field)
            if self._handle_null(value):
                return ''
            values.append(str(value).strip())
        return self.process(' '.join(values))

class NamePreprocessor(BasePreprocessor):
    """Preprocesses person and plan names."""

    def process(self, value: Any) -> str:
        return normalize_name(value)

class CodePreprocessor(BasePreprocessor):
    """Preprocesses spreadsheet codes into their canonical text form."""

    def process(self, value: Any) -> str:
        if self._handle_null(value):
            return ''
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

class NameParts(NamedTuple):
    given_names: str
    first_surname: str
    second_surname: str

def split_name(full_name: Any) -> NameParts:
    """
    Split a full name into given names and two surnames.

    The last two words are taken as surnames; a two-word name has a single
    surname and a one-word name has none.

    Args:
        full_name: Full name as written in the source

    Returns:
        NameParts: Given names, first surname and second surname
    """
    if not isinstance(full_name, str) or not full_name.strip():
        return NameParts('', '', '')

    parts = full_name.split()
    if len(parts) == 1:
        return NameParts(parts[0], '', '')
    if len(parts) == 2:
        return NameParts(parts[0], parts[1], '')
    return NameParts(' '.join(parts[:-2]), parts[-2], parts[-1])

def split_name_column(
    records: Iterable[Mapping[str, Any]],
    column: str
) -> List[Dict[str, Any]]:
    """Return copies of the records with NOMBRES, APELLIDO_1 and APELLIDO_2 added."""
    result = []
    for record in records:
        parts = split_name(record.get(column))
        result.append({
            **record,
            'NOMBRES': parts.given_names,
            'APELLIDO_1': parts.first_surname,
            'APELLIDO_2': parts.second_surname
        })
    return result

class PreprocessorRegistry:
    """Maps preprocess method names, as used by match strategies, to classes."""

    def __init__(self):
        self._preprocessors: Dict[str, Type[BasePreprocessor]] = {}
        self.register('name', NamePreprocessor)
        self.register('code', CodePreprocessor)

    def register(self, name: str, preprocessor_class: Type[BasePreprocessor]) -> None:
        """Register a preprocessor class, replacing any class already under the name."""
        self._preprocessors[name] = preprocessor_class

    def create(self, name: str) -> BasePreprocessor:
        """
        Instantiate the preprocessor registered under a method name.

        Args:
            name: Preprocess method name, e.g. ``'name'`` or ``'code'``

        Returns:
            BasePreprocessor: New preprocessor instance

        Raises:
            ValueError: If no preprocessor is registered under the name
        """
        preprocessor_class = self._preprocessors.get(name)
        if not preprocessor_class:
            raise ValueError(f"Unknown preprocess method: {name}")
        return preprocessor_class()

# Shared by every ContractMatcher
registry = PreprocessorRegistry()

def register_preprocessor(name: str, preprocessor_class: Type[BasePreprocessor]) -> None:
    """Make a preprocessor available to match strategies under a method name."""
    registry.register(name, preprocessor_class)

def create_preprocessor(name: str) -> BasePreprocessor:
    """Create a preprocessor from the shared registry."""
    return registry.create(name)
