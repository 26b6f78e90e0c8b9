from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Dict, Any

LatLon = Tuple[float, float]  # (lat, lon)


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Level:
    id: int
    name: str
    description: str
    start: LatLon
    end: LatLon
    start_name: str
    end_name: str
    distance_km: float
    difficulty: Difficulty
    recommended_transport: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start": {"lat": self.start[0], "lon": self.start[1], "name": self.start_name},
            "end": {"lat": self.end[0], "lon": self.end[1], "name": self.end_name},
            "distance_km": self.distance_km,
            "difficulty": self.difficulty.value,
            "recommended_transport": self.recommended_transport,
        }
