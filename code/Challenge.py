from dataclasses import dataclass


@dataclass(frozen=True)
class Challenge:
    """Random event of the budget game: costs time and money while active."""
    id: str
    title: str
    description: str
    time_impact: int
    cost_impact: int
