import logging
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..model.fact import Fact

logger = logging.getLogger(__name__)

FACT_COLUMNS = ["relation", "left", "right", "rule", "dependencies"]


def facts_to_frame(facts: Iterable[Fact]) -> pd.DataFrame:
    """
    Tabulate facts. Values are rendered by label; `rule` is None for seed
    facts and `dependencies` counts the facts a derived fact matched.
    """
    rows = [
        {
            "relation": fact.relation.name,
            "left": fact.left.label,
            "right": fact.right.label,
            "rule": fact.rule,
            "dependencies": len(fact.dependencies),
        }
        for fact in facts
    ]
    if not rows:
        return pd.DataFrame({col: pd.Series(dtype="object") for col in FACT_COLUMNS})
    df = pd.DataFrame(rows, columns=FACT_COLUMNS, dtype=object)
    df["dependencies"] = df["dependencies"].astype(int)
    return df


class QueryResult:
    """A wrapper for query results that provides a consistent interface whether
    or not any facts matched.

    Calling code can always use num_rows(), columns() and to_records()
    without checking for an empty result first.
    """
    def __init__(self, frame: Optional[pd.DataFrame] = None, status: str = "success", message: str = ""):
        self.frame = frame
        self.status = status  # success, empty
        self.message = message

    def is_empty(self) -> bool:
        """Returns True if the result is empty (no rows)"""
        return self.frame is None or len(self.frame) == 0

    def num_rows(self) -> int:
        """Returns the number of rows in the result"""
        return 0 if self.frame is None else len(self.frame)

    def columns(self) -> List[str]:
        """Returns the column names in the result"""
        return [] if self.frame is None else list(self.frame.columns)

    def to_records(self) -> List[Dict[str, Any]]:
        """Returns the result data as a list of dictionaries"""
        return [] if self.frame is None else self.frame.to_dict(orient="records")

    @classmethod
    def from_facts(cls, facts: Iterable[Fact]) -> 'QueryResult':
        frame = facts_to_frame(facts)
        if len(frame) == 0:
            return cls.empty()
        logger.debug(f"[QUERY_RESULT] {len(frame)} row(s)")
        return cls(frame=frame)

    @classmethod
    def empty(cls) -> 'QueryResult':
        """Create an empty result with the fact schema"""
        return cls(frame=facts_to_frame([]), status="empty", message="No results found")
