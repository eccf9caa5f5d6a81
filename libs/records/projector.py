"""Field projection for records."""

from typing import Dict, Optional


def project(record: Dict[str, str], exclude_column: Optional[str]) -> Dict[str, str]:
    """Return a copy of ``record`` without ``exclude_column``.

    A missing, empty or unknown column leaves the copy unchanged. The input
    mapping is never mutated.
    """
    if not exclude_column or exclude_column not in record:
        return dict(record)
    return {key: value for key, value in record.items() if key != exclude_column}
