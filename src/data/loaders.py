"""
Loaders for the romanization dictionary and the question pool.

Both sources are plain JSON files read once before a session starts. Any
problem (missing file, broken JSON, records that fail validation) is fatal
and surfaces as a DataLoadError.
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from ..engine.dictionary import Dictionary, build_dictionary
from ..engine.errors import DataLoadError
from ..engine.models import QuestionRecord

# Bundled data files
DATA_DIR = Path(__file__).parent
DEFAULT_DICTIONARY = DATA_DIR / "romanTypingParseDictionary.json"
DEFAULT_QUESTIONS = DATA_DIR / "questions.json"


def _read_json(path: Union[str, Path], what: str) -> Any:
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"{what} file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"{what} file {path} is not valid JSON: {e}") from e


def load_dictionary(path: Optional[Union[str, Path]] = None) -> Dictionary:
    """
    Load the romanization dictionary.

    The file holds either a list of {"Pattern": ..., "TypePattern": [...]}
    records or a {key: [spellings]} object.

    Args:
        path: Dictionary JSON file (defaults to the bundled one)

    Returns:
        Dictionary ordered longest key first

    Raises:
        DataLoadError: If the file is missing, malformed or empty
    """
    path = path or DEFAULT_DICTIONARY
    data = _read_json(path, "Dictionary")

    if not isinstance(data, (list, dict)):
        raise DataLoadError(f"Dictionary file {path} must hold a list or an object")
    try:
        dictionary = build_dictionary(data)
    except (ValidationError, TypeError) as e:
        raise DataLoadError(f"Malformed dictionary entry in {path}: {e}") from e

    if not len(dictionary):
        raise DataLoadError(f"Dictionary file {path} has no entries")
    return dictionary


def load_questions(path: Optional[Union[str, Path]] = None) -> List[QuestionRecord]:
    """
    Load the question pool.

    The file holds a list of question records, or an object mapping a
    category name to such a list (categories are flattened in file order).

    Args:
        path: Question pool JSON file (defaults to the bundled one)

    Returns:
        List of question records

    Raises:
        DataLoadError: If the file is missing or malformed
    """
    path = path or DEFAULT_QUESTIONS
    data = _read_json(path, "Question pool")

    if isinstance(data, dict):
        items: List[Any] = []
        for category in data.values():
            if not isinstance(category, list):
                raise DataLoadError(f"Question category in {path} must be a list")
            items.extend(category)
    elif isinstance(data, list):
        items = data
    else:
        raise DataLoadError(f"Question pool file {path} must hold a list or an object")

    try:
        return [QuestionRecord.model_validate(item) for item in items]
    except ValidationError as e:
        raise DataLoadError(f"Malformed question in {path}: {e}") from e
