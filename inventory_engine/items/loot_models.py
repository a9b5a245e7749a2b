# inventory_engine/items/loot_models.py
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from inventory_engine.items.item import Item
from inventory_engine.utils.utils import weighted_random_selection


def _uniform_int(low: int, high: int) -> int:
    """Uniform integer in [low, high], driven by random.random() so rolls can be patched in tests."""
    if high <= low:
        return low
    return int(random.random() * (high - low + 1)) + low


@dataclass
class LootEntry:
    item_id: str
    weight: float = 1.0
    min_count: int = 1
    max_count: int = 1

    def roll_count(self) -> int:
        return _uniform_int(self.min_count, max(self.min_count, self.max_count))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LootEntry':
        return cls(
            item_id=data.get("item_id", data.get("itemId")),
            weight=data.get("weight", 1.0),
            min_count=data.get("min_count", data.get("minCount", 1)),
            max_count=data.get("max_count", data.get("maxCount", 1)),
        )


@dataclass
class LootTable:
    table_id: str
    name: str = ""
    entries: List[LootEntry] = field(default_factory=list)
    min_rolls: int = 1
    max_rolls: int = 1

    def roll(self) -> List[Tuple[str, int]]:
        """
        Performs between min_rolls and max_rolls weighted draws.
        Returns (item_id, count) pairs. A draw over entries whose total weight
        is zero produces nothing.
        """
        results: List[Tuple[str, int]] = []
        if not self.entries:
            return results

        weights = {index: max(0.0, entry.weight) for index, entry in enumerate(self.entries)}
        if sum(weights.values()) <= 0:
            return results

        rolls = _uniform_int(self.min_rolls, max(self.min_rolls, self.max_rolls))
        for _ in range(rolls):
            index = weighted_random_selection(weights)
            if index is None or weights[index] <= 0:
                continue
            entry = self.entries[index]
            results.append((entry.item_id, entry.roll_count()))
        return results

    @classmethod
    def from_dict(cls, data: Dict[str, Any], table_id: Optional[str] = None) -> 'LootTable':
        table_id = table_id or data.get("id") or data.get("table_id")
        return cls(
            table_id=table_id,
            name=data.get("name", table_id),
            entries=[LootEntry.from_dict(e) for e in data.get("entries", [])],
            min_rolls=data.get("min_rolls", data.get("minRolls", 1)),
            max_rolls=data.get("max_rolls", data.get("maxRolls", 1)),
        )


@dataclass
class LootDrop:
    item: Item
    quantity: int = 1


@dataclass
class GuaranteedLoot:
    """Either a fixed item (item_id) or a whole table roll (loot_table)."""
    item_id: Optional[str] = None
    quantity: int = 1
    randomize: bool = False
    quality: Optional[str] = None
    loot_table: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GuaranteedLoot':
        return cls(
            item_id=data.get("item_id", data.get("itemId")),
            quantity=data.get("quantity", 1),
            randomize=data.get("randomize", False),
            quality=data.get("quality"),
            loot_table=data.get("loot_table", data.get("lootTable")),
        )


@dataclass
class PlayerProfile:
    level: int = 1
    stats: Dict[str, float] = field(default_factory=dict)
    position: Any = None
    character_class: Optional[str] = None

    @property
    def luck(self) -> float:
        return self.stats.get("luck", 0)


@dataclass
class EnemyProfile:
    level: int = 1
    enemy_type: str = "default"
    is_boss: bool = False
    is_elite: bool = False
    drop_rate: Optional[float] = None
    loot_category_weights: Optional[Dict[str, float]] = None
    guaranteed_loot: List[GuaranteedLoot] = field(default_factory=list)
    position: Any = None


@dataclass
class ContainerProfile:
    level: Optional[int] = None
    is_treasure_chest: bool = False
    loot_table: Optional[str] = None
    guaranteed_loot: List[GuaranteedLoot] = field(default_factory=list)
    position: Any = None


@dataclass
class QuestProfile:
    level: Optional[int] = None
    reward_table: Optional[str] = None
    item_rewards: List[GuaranteedLoot] = field(default_factory=list)


@dataclass
class LootPlacement:
    """Where one dropped stack lands in the world."""
    drop: LootDrop
    position: Tuple[float, float, float]
    rotation_y: float = 0.0
