from typing import Dict, FrozenSet, List, Sequence

from TransportOption import TransportOption
from Level import Level, Difficulty
from Challenge import Challenge
from errors import CatalogError, UnknownTransport, UnknownLevel


# -------------------------
# static tables
# -------------------------
TRANSPORT_OPTIONS: List[TransportOption] = [
    TransportOption(id="bike", name="Vélo", co2_g_per_km=0, speed_kmh=15, cost=0, points=100),
    TransportOption(id="bus", name="Bus", co2_g_per_km=30, speed_kmh=25, cost=2, points=50),
    TransportOption(id="train", name="Train", co2_g_per_km=20, speed_kmh=60, cost=5, points=75),
    TransportOption(id="car", name="Voiture", co2_g_per_km=120, speed_kmh=45, cost=8, points=-50),
]

# options that count as a good choice when a level recommends nothing
ECO_TRANSPORTS: FrozenSet[str] = frozenset({"bike", "train"})

LEVELS: List[Level] = [
    Level(
        id=1,
        name="Vers Montmartre",
        description="Rejoins le Sacré-Cœur depuis la tour Eiffel.",
        start=(48.8584, 2.2945),
        end=(48.8866, 2.3432),
        start_name="Tour Eiffel",
        end_name="Sacré-Cœur",
        distance_km=5.2,
        difficulty=Difficulty.MEDIUM,
    ),
    Level(
        id=2,
        name="Balade sur les quais",
        description="Du Louvre à Notre-Dame en longeant la Seine.",
        start=(48.8606, 2.3376),
        end=(48.8530, 2.3499),
        start_name="Musée du Louvre",
        end_name="Notre-Dame",
        distance_km=1.3,
        difficulty=Difficulty.EASY,
        recommended_transport="bike",
    ),
    Level(
        id=3,
        name="Traversée de l'Ouest",
        description="De la gare de Lyon au quartier d'affaires de La Défense.",
        start=(48.8443, 2.3744),
        end=(48.8920, 2.2362),
        start_name="Gare de Lyon",
        end_name="La Défense",
        distance_km=11.5,
        difficulty=Difficulty.HARD,
        recommended_transport="train",
    ),
    Level(
        id=4,
        name="Les grands boulevards",
        description="De l'Arc de Triomphe à la place de la Bastille.",
        start=(48.8738, 2.2950),
        end=(48.8532, 2.3692),
        start_name="Arc de Triomphe",
        end_name="Bastille",
        distance_km=6.4,
        difficulty=Difficulty.MEDIUM,
    ),
    Level(
        id=5,
        name="Rive gauche, rive droite",
        description="De la tour Montparnasse au parc de la Villette.",
        start=(48.8422, 2.3211),
        end=(48.8938, 2.3908),
        start_name="Montparnasse",
        end_name="Parc de la Villette",
        distance_km=9.0,
        difficulty=Difficulty.HARD,
        recommended_transport="bus",
    ),
]

CHALLENGES: List[Challenge] = [
    Challenge(
        id="traffic",
        title="Embouteillages",
        description="Un embouteillage important ralentit la circulation",
        time_impact=15,
        cost_impact=2,
    ),
    Challenge(
        id="weather",
        title="Pluie",
        description="Une forte pluie rend les déplacements plus difficiles",
        time_impact=10,
        cost_impact=1,
    ),
    Challenge(
        id="strike",
        title="Grève",
        description="Les transports en commun sont perturbés",
        time_impact=20,
        cost_impact=5,
    ),
]


# -------------------------
# validation
# -------------------------
def _unique_index(items: Sequence, what: str) -> Dict:
    index = {}
    for item in items:
        if item.id in index:
            raise CatalogError(f"duplicate {what} id: {item.id!r}")
        index[item.id] = item
    return index


class Catalog:
    """
    Read-only view over the transport, level and challenge tables.
    Levels keep their table order; next_level() wraps from last to first.
    """

    def __init__(self,
                 transports: Sequence[TransportOption],
                 levels: Sequence[Level],
                 challenges: Sequence[Challenge] = (),
                 eco_transports: FrozenSet[str] = ECO_TRANSPORTS) -> None:
        if not levels:
            raise CatalogError("level catalog is empty")
        if not transports:
            raise CatalogError("transport catalog is empty")

        self._transports: Dict[str, TransportOption] = _unique_index(transports, "transport")
        self._levels: Dict[int, Level] = _unique_index(levels, "level")
        self._challenges: Dict[str, Challenge] = _unique_index(challenges, "challenge")
        self._level_order: List[Level] = list(levels)

        for level in levels:
            rec = level.recommended_transport
            if rec is not None and rec not in self._transports:
                raise CatalogError(f"level {level.id} recommends unknown transport {rec!r}")

        missing = set(eco_transports) - set(self._transports)
        if missing:
            raise CatalogError(f"eco transports not in catalog: {sorted(missing)}")
        self.eco_transports: FrozenSet[str] = frozenset(eco_transports)

    @property
    def transports(self) -> List[TransportOption]:
        return list(self._transports.values())

    @property
    def levels(self) -> List[Level]:
        return list(self._level_order)

    @property
    def challenges(self) -> List[Challenge]:
        return list(self._challenges.values())

    def transport(self, transport_id: str) -> TransportOption:
        try:
            return self._transports[transport_id]
        except KeyError:
            raise UnknownTransport(transport_id) from None

    def level(self, level_id: int) -> Level:
        try:
            return self._levels[level_id]
        except KeyError:
            raise UnknownLevel(level_id) from None

    def level_at(self, index: int) -> Level:
        return self._level_order[index % len(self._level_order)]

    def index_of(self, level: Level) -> int:
        for i, candidate in enumerate(self._level_order):
            if candidate.id == level.id:
                return i
        raise UnknownLevel(level.id)

    def next_level(self, level: Level) -> Level:
        return self.level_at(self.index_of(level) + 1)

    def to_dict(self) -> dict:
        return {
            "transports": [
                {
                    "id": t.id,
                    "name": t.name,
                    "co2_g_per_km": t.co2_g_per_km,
                    "speed_kmh": t.speed_kmh,
                    "cost": t.cost,
                    "points": t.points,
                }
                for t in self._transports.values()
            ],
            "levels": [lv.to_dict() for lv in self._level_order],
        }


DEFAULT_CATALOG = Catalog(TRANSPORT_OPTIONS, LEVELS, CHALLENGES)
