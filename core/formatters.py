# core/formatters.py

# all pure utilities for grade strings & cell keys
# must never import from models!

import math

# === grade string helpers ===


def normalize_grade(grade: str | None) -> str | None:
    """
    Normalizes a grade string for comparison and storage.

    Removes a single trailing ".0" (the UI never shows it, so "10.0" and "10" are the same grade),
    then trims whitespace and collapses a blank result to None.

    Args:
        grade (str | None): The raw grade string.

    Returns:
        The normalized grade string, or None if the grade is absent or blank.

    Notes:
        - Only one ".0" suffix is removed: "10.0.0" becomes "10.0", and "10.00" is left as is.
        - The suffix is removed before trimming, so "10.0 " keeps its ".0".
    """
    if grade is None:
        return None

    if grade.endswith(".0"):
        grade = grade[: -len(".0")]

    grade = grade.strip()

    return grade or None


def parse_grade(grade: str | None) -> float | None:
    """
    Parses a grade string as a real number without raising.

    Returns:
        The grade as a finite float, or None if the grade is absent, blank, unparsable, or non-finite.
    """
    if grade is None:
        return None

    try:
        value = float(grade.strip())

    except ValueError:
        return None

    if not math.isfinite(value):
        return None

    return value


def grade_sort_key(grade: str | None) -> tuple[int, float]:
    """
    Sort key that orders grades numerically, with missing or unparsable grades lowest.

    Every missing grade maps to the same key, so ties among them keep their stable order.
    """
    value = parse_grade(grade)
    return (0, 0.0) if value is None else (1, value)


def format_points(points: float) -> str:
    """Formats a point value the way grades are entered, dropping a redundant ".0"."""
    return str(int(points)) if float(points).is_integer() else str(points)


# === cell keys ===


def build_cell_key(student_id: str, assignment_id: str) -> str:
    return f"{student_id}-{assignment_id}"
