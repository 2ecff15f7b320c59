"""
Exceptions raised while loading, normalizing and summarising sample data.
"""


class ShellfishDataError(Exception):
    """Base exception for shellfish monitoring data errors."""

    pass


class DataFileNotFoundError(ShellfishDataError, FileNotFoundError):
    """The monitoring data file is missing or unreadable."""

    pass


class ParseError(ShellfishDataError, ValueError):
    """A column is missing or holds values of the wrong type."""

    pass


class DomainError(ShellfishDataError, ValueError):
    """A value lies outside the domain an operation is defined on."""

    pass


def describe_rows(index) -> str:
    """
    Render a compact range of 0-based data rows, e.g.
    ``data rows 3-7 (0-based, 5 rows)``. Data row 0 is the line after the header.
    """
    rows = sorted(int(i) for i in index)
    if not rows:
        return "no rows"
    if len(rows) == 1:
        return f"data row {rows[0]} (0-based)"
    return f"data rows {rows[0]}-{rows[-1]} (0-based, {len(rows)} rows)"
