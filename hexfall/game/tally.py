from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from hexfall.domain.hexgrid import Terrain


class ResourceCard(str, Enum):
    WOOD = "wood"
    WHEAT = "wheat"
    ORE = "ore"
    SHEEP = "sheep"
    BRICK = "brick"


TERRAIN_RESOURCES: Dict[Terrain, ResourceCard] = {
    Terrain.FOREST: ResourceCard.WOOD,
    Terrain.FIELD: ResourceCard.WHEAT,
    Terrain.MOUNTAIN: ResourceCard.ORE,
    Terrain.PASTURE: ResourceCard.SHEEP,
    Terrain.HILL: ResourceCard.BRICK,
}


def resource_for(terrain: Terrain) -> Optional[ResourceCard]:
    return TERRAIN_RESOURCES.get(Terrain(terrain))


@dataclass
class ResourceTally:
    """Counts the resource each placed tile yields; plug into tile-placed events."""

    counts: Dict[ResourceCard, int] = field(
        default_factory=lambda: {resource: 0 for resource in ResourceCard}
    )
    tiles_seen: int = 0

    def __call__(self, terrain: Terrain) -> None:
        self.record(terrain)

    def record(self, terrain: Terrain) -> None:
        self.tiles_seen += 1
        resource = resource_for(terrain)
        if resource is not None:
            self.counts[resource] += 1

    def total(self) -> int:
        return int(sum(self.counts.values()))

    def reset(self) -> None:
        self.counts = {resource: 0 for resource in ResourceCard}
        self.tiles_seen = 0
