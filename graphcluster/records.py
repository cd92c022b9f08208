from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Record:
    """One row of the statistical table: an entity's indicator value for a year."""
    entity: str
    year: Optional[int]
    indicator: str
    series: str
    value: Optional[float] = None
