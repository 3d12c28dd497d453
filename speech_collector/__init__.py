"""Speech dataset collector: record, verify and export spoken sentences."""

__version__ = "0.1.0"
