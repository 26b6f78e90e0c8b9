class GameError(Exception):
    pass


class CatalogError(GameError, ValueError):
    """Static catalog failed validation (duplicate ids, dangling references)."""


class UnknownTransport(GameError, KeyError):
    def __init__(self, transport_id: str):
        super().__init__(transport_id)
        self.transport_id = transport_id

    def __str__(self):
        return f"unknown transport: {self.transport_id!r}"


class UnknownLevel(GameError, KeyError):
    def __init__(self, level_id):
        super().__init__(level_id)
        self.level_id = level_id

    def __str__(self):
        return f"unknown level: {self.level_id!r}"


class RouteUnavailable(GameError, RuntimeError):
    """The routing service gave no usable route."""
