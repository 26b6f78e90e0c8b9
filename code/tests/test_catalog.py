import pytest

from Level import Level, Difficulty
from catalog import Catalog, DEFAULT_CATALOG, TRANSPORT_OPTIONS, LEVELS, CHALLENGES
from errors import CatalogError, UnknownTransport, UnknownLevel


def _level(level_id, recommended=None):
    return Level(
        id=level_id,
        name=f"level {level_id}",
        description="",
        start=(48.0, 2.0),
        end=(48.1, 2.1),
        start_name="a",
        end_name="b",
        distance_km=1.0,
        difficulty=Difficulty.EASY,
        recommended_transport=recommended,
    )


def test_default_catalog_ids_are_unique():
    ids = [lv.id for lv in DEFAULT_CATALOG.levels]
    assert len(ids) == len(set(ids))
    assert [t.id for t in DEFAULT_CATALOG.transports] == ["bike", "bus", "train", "car"]


def test_duplicate_level_id_fails_fast():
    levels = [_level(1), _level(4), _level(4)]
    with pytest.raises(CatalogError, match="duplicate level id"):
        Catalog(TRANSPORT_OPTIONS, levels)


def test_duplicate_transport_id_fails_fast():
    with pytest.raises(CatalogError):
        Catalog(TRANSPORT_OPTIONS + TRANSPORT_OPTIONS[:1], LEVELS)


def test_recommended_transport_must_exist():
    with pytest.raises(CatalogError, match="plane"):
        Catalog(TRANSPORT_OPTIONS, [_level(1, recommended="plane")])


def test_empty_level_table_rejected():
    with pytest.raises(CatalogError):
        Catalog(TRANSPORT_OPTIONS, [])


def test_next_level_wraps_to_first():
    levels = DEFAULT_CATALOG.levels
    assert DEFAULT_CATALOG.next_level(levels[0]) == levels[1]
    assert DEFAULT_CATALOG.next_level(levels[-1]) == levels[0]


def test_lookups():
    assert DEFAULT_CATALOG.transport("bike").points == 100
    assert DEFAULT_CATALOG.level(1).start == (48.8584, 2.2945)
    assert DEFAULT_CATALOG.level_at(len(LEVELS)) == LEVELS[0]
    assert len(DEFAULT_CATALOG.challenges) == len(CHALLENGES)

    with pytest.raises(UnknownTransport):
        DEFAULT_CATALOG.transport("plane")
    with pytest.raises(UnknownLevel):
        DEFAULT_CATALOG.level(99)
    with pytest.raises(UnknownLevel):
        DEFAULT_CATALOG.index_of(_level(99))


def test_to_dict_lists_everything():
    data = DEFAULT_CATALOG.to_dict()
    assert len(data["transports"]) == 4
    assert [lv["id"] for lv in data["levels"]] == [1, 2, 3, 4, 5]
    assert data["levels"][0]["difficulty"] == "medium"
