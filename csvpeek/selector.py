import random
from typing import List, Optional, Sequence

from .filters import Predicate, apply_filters

MISSING = "[N/A]"


def select_rows(rows: Sequence[List[str]], predicates: Sequence[Predicate] = ()) -> List[List[str]]:
    """List mode: rows passing every predicate, in ingestion order."""
    return apply_filters(rows, predicates)


def sample_row(rows: Sequence[List[str]], rng: Optional[random.Random] = None) -> Optional[List[str]]:
    """Sample mode: one row drawn uniformly from the unfiltered rows."""
    if not rows:
        return None
    return (rng or random).choice(rows)


def project(row: Sequence[str], positions: Sequence[int], missing: str = MISSING) -> List[str]:
    return [row[i] if i < len(row) else missing for i in positions]
