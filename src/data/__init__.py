"""Dictionary and question pool sources."""

from .loaders import load_dictionary, load_questions, DEFAULT_DICTIONARY, DEFAULT_QUESTIONS

__all__ = [
    "load_dictionary",
    "load_questions",
    "DEFAULT_DICTIONARY",
    "DEFAULT_QUESTIONS",
]
