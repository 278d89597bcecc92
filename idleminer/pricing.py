from __future__ import annotations

from idleminer.definition import GameDefinition, default_definition
from idleminer.errors import UnknownUpgradeType

_CATALOG = default_definition()


def price(
    upgrade_id: str, owned: int, definition: GameDefinition | None = None
) -> int:
    """Cost of the next unit of *upgrade_id* when *owned* units are held.

    Uses the shipped catalog unless a *definition* is given.
    """
    defn = definition if definition is not None else _CATALOG
    udef = defn.get_upgrade(upgrade_id)
    if udef is None:
        raise UnknownUpgradeType(upgrade_id)
    return udef.price(owned)
