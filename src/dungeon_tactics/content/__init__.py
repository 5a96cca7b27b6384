"""Sample content: ability and status effect definitions.

Content is plain camelCase data validated when loaded into a catalog or
ledger. It is sample data, not a complete game catalog.
"""

from __future__ import annotations

from dungeon_tactics.content.abilities import DEFAULT_ABILITIES, load_default_abilities
from dungeon_tactics.content.status_effects import (
    DEFAULT_STATUS_EFFECTS,
    load_default_status_effects,
)


__all__ = [
    "DEFAULT_ABILITIES",
    "DEFAULT_STATUS_EFFECTS",
    "load_default_abilities",
    "load_default_status_effects",
]
