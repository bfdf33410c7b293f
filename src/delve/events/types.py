class EventType:
    """Centralized event names published on the EventBus."""

    # A one-shot cell marker fired for the first time; payload: x, y, cell_type, floor
    CELL_TRIGGERED = "dungeon.cell.triggered"

    # The session moved to a new floor; payload: floor
    FLOOR_ENTERED = "dungeon.floor.entered"
