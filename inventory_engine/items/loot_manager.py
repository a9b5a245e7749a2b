# inventory_engine/items/loot_manager.py
"""
Procedural loot: drop gating, item counts, quality rolls and world placement
for enemies, containers and quest rewards.
"""
import math
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pygame.math import Vector3

from inventory_engine.config import (
    CONTAINER_BASE_ITEM_COUNT, CONTAINER_CATEGORY_WEIGHTS, CONTAINER_EXTRA_ITEM_CHANCE,
    CONTAINER_MAX_EXTRA_ITEMS, ENEMY_BASE_ITEM_COUNT, ENEMY_CATEGORY_WEIGHTS,
    ENEMY_EXTRA_ITEM_CHANCE, ENEMY_LEVEL_DIVISOR, ENEMY_MAX_EXTRA_ITEMS, LOOT_BASE_DROP_RATE,
    LOOT_GLOBAL_DROP_MODIFIER, LOOT_LEVEL_DIFFERENCE_MODIFIER, LOOT_LEVEL_QUALITY_SHIFT,
    LOOT_LEVEL_SCALING, LOOT_LUCK_QUALITY_SHIFT, LOOT_MODIFIER_QUALITY_SHIFT, LOOT_QUALITY_CHANCES,
    LOOT_SPECIAL_CONDITION_MODIFIERS, LOOT_STACK_BASE, QUEST_CATEGORY_WEIGHTS, QUEST_LEVEL_DIVISOR,
    RANDOM_LEVEL_MAX, RANDOM_LEVEL_MIN
)
from inventory_engine.items.item import Item
from inventory_engine.items.loot_models import (
    ContainerProfile, EnemyProfile, GuaranteedLoot, LootDrop, LootPlacement, PlayerProfile, QuestProfile
)
from inventory_engine.utils.events import EventEmitter, LootEvent
from inventory_engine.utils.logger import Logger
from inventory_engine.utils.utils import as_position, clamp, normalize_weights, weighted_random_selection

SpawnHook = Callable[[LootPlacement], Any]


def _shift_chances(chances: Dict[str, float], shifts: Dict[str, tuple], factor: float):
    """Moves probability mass between tiers. Each tier's result is clamped on the side it moves towards."""
    for tier, (step, limit) in shifts.items():
        if tier not in chances:
            continue
        value = chances[tier] + step * factor
        chances[tier] = max(limit, value) if step < 0 else min(limit, value)


class LootManager(EventEmitter):
    """Generates loot lists through an ItemFactory. Never mutates inventories."""

    EVENT_TYPES = (LootEvent,)

    def __init__(self, item_factory: Any = None,
                 level_scaling: float = LOOT_LEVEL_SCALING,
                 global_drop_chance_modifier: float = LOOT_GLOBAL_DROP_MODIFIER,
                 quality_chances: Optional[Dict[str, float]] = None,
                 special_condition_modifiers: Optional[Dict[str, float]] = None,
                 level_difference_modifier: float = LOOT_LEVEL_DIFFERENCE_MODIFIER,
                 spawn_hook: Optional[SpawnHook] = None):
        self.item_factory = item_factory
        self.level_scaling = level_scaling
        self.global_drop_chance_modifier = global_drop_chance_modifier
        self.quality_chances = dict(quality_chances or LOOT_QUALITY_CHANCES)
        self.special_condition_modifiers = dict(LOOT_SPECIAL_CONDITION_MODIFIERS)
        if special_condition_modifiers:
            self.special_condition_modifiers.update(special_condition_modifiers)
        self.level_difference_modifier = level_difference_modifier
        self.spawn_hook = spawn_hook

    # --- Setters ---

    def set_item_factory(self, item_factory: Any):
        self.item_factory = item_factory

    def set_spawn_hook(self, spawn_hook: Optional[SpawnHook]):
        self.spawn_hook = spawn_hook

    def set_global_drop_chance_modifier(self, modifier: float):
        self.global_drop_chance_modifier = modifier

    def set_quality_chance(self, quality: str, chance: float):
        if quality in self.quality_chances:
            self.quality_chances[quality] = chance

    def set_quality_chances(self, chances: Dict[str, float]):
        self.quality_chances.update(chances)

    def set_special_condition_modifier(self, condition: str, value: float):
        if condition in self.special_condition_modifiers:
            self.special_condition_modifiers[condition] = value

    # --- Helpers ---

    def _require_factory(self, what: str) -> bool:
        if self.item_factory is None:
            Logger.error("LootManager", f"LootManager requires an item factory to generate {what}.")
            return False
        return True

    @staticmethod
    def _roll_item_count(base: int, extra_chance: float, max_extra: int) -> int:
        """Base count plus consecutive successful extra-item trials."""
        count = base
        for _ in range(max_extra):
            if random.random() < extra_chance:
                count += 1
            else:
                break
        return count

    @staticmethod
    def _randomize_level(level: float, divisor: float) -> float:
        return clamp(level / divisor, RANDOM_LEVEL_MIN, RANDOM_LEVEL_MAX)

    @staticmethod
    def _stack_quantity(item: Item, level: int) -> int:
        if not item.stackable:
            return 1
        base = LOOT_STACK_BASE.get(item.item_type, LOOT_STACK_BASE["default"])
        return base + int(random.random() * max(1, level))

    def _guaranteed_drops(self, entries: Iterable[Union[GuaranteedLoot, Dict[str, Any]]],
                          use_quality: bool = False) -> List[LootDrop]:
        drops: List[LootDrop] = []
        for entry in entries or []:
            if isinstance(entry, dict):
                entry = GuaranteedLoot.from_dict(entry)
            if entry.item_id:
                item = self.item_factory.create_item(
                    entry.item_id, quantity=entry.quantity or 1, randomize=entry.randomize,
                    quality=entry.quality if use_quality else None,
                )
                if item is not None:
                    drops.append(LootDrop(item=item, quantity=item.quantity))
            elif entry.loot_table:
                drops.extend(self.item_factory.create_loot(entry.loot_table))
        return drops

    def _random_drop(self, category: Optional[str], quality: str, randomize_level: float,
                     level: int) -> Optional[LootDrop]:
        if category is None:
            return None
        item = self.item_factory.create_random_item(
            category, randomize=True, randomize_level=randomize_level, quality=quality
        )
        if item is None:
            return None
        return LootDrop(item=item, quantity=self._stack_quantity(item, level))

    # --- Generation ---

    def generate_enemy_loot(self, enemy: EnemyProfile, player: Optional[PlayerProfile] = None,
                            **options) -> List[LootDrop]:
        """
        Rolls a kill's drops. One uniform draw against the modified drop chance gates
        all random loot; guaranteed loot is always appended.

        Options: hard_mode (bool), drop_chance_modifier (float), quality_modifier (float).
        """
        if not self._require_factory("loot"):
            return []

        player_level = player.level if player else 1
        luck = player.luck if player else 0
        base_rate = LOOT_BASE_DROP_RATE if enemy.drop_rate is None else enemy.drop_rate

        drop_chance = base_rate * self.global_drop_chance_modifier
        drop_chance *= 1 + (enemy.level - player_level) * self.level_difference_modifier
        if enemy.is_boss:
            drop_chance *= self.special_condition_modifiers["boss"]
        if enemy.is_elite:
            drop_chance *= self.special_condition_modifiers["eliteEnemy"]
        if luck:
            drop_chance *= 1 + luck * self.special_condition_modifiers["playerLuck"]
        if options.get("hard_mode"):
            drop_chance *= self.special_condition_modifiers["hardMode"]
        if options.get("drop_chance_modifier"):
            drop_chance *= options["drop_chance_modifier"]

        loot: List[LootDrop] = []
        if random.random() <= drop_chance:
            tier = "boss" if enemy.is_boss else ("elite" if enemy.is_elite else "normal")
            count = self._roll_item_count(
                ENEMY_BASE_ITEM_COUNT[tier], ENEMY_EXTRA_ITEM_CHANCE[tier], ENEMY_MAX_EXTRA_ITEMS
            )
            randomize_level = self._randomize_level(enemy.level, ENEMY_LEVEL_DIVISOR)
            for _ in range(count):
                quality = self._determine_item_quality(enemy.level, player, **options)
                drop = self._random_drop(self._choose_loot_category(enemy), quality,
                                         randomize_level, enemy.level)
                if drop is not None:
                    loot.append(drop)

        loot.extend(self._guaranteed_drops(enemy.guaranteed_loot))

        Logger.debug("LootManager", f"Generated {len(loot)} items from enemy loot")
        self.emit(LootEvent.LOOT_GENERATED, source="enemy", profile=enemy, loot=loot)
        return loot

    def generate_container_loot(self, container: ContainerProfile, player: Optional[PlayerProfile] = None,
                                **options) -> List[LootDrop]:
        if not self._require_factory("loot"):
            return []

        level = container.level or (player.level if player else 1)
        chest = "treasureChest" if container.is_treasure_chest else "default"
        randomize_level = self._randomize_level(level, ENEMY_LEVEL_DIVISOR)

        loot: List[LootDrop] = []
        if container.loot_table:
            table_options = {key: value for key, value in options.items() if key != "quality_modifier"}
            loot.extend(self.item_factory.create_loot(
                container.loot_table, randomize_level=randomize_level, **table_options
            ))
        else:
            count = self._roll_item_count(
                CONTAINER_BASE_ITEM_COUNT[chest], CONTAINER_EXTRA_ITEM_CHANCE[chest], CONTAINER_MAX_EXTRA_ITEMS
            )
            quality_options = dict(options)
            if container.is_treasure_chest:
                quality_options["quality_modifier"] = self.special_condition_modifiers["treasureChest"]
            for _ in range(count):
                quality = self._determine_item_quality(level, player, **quality_options)
                category = self._weighted_random_selection(CONTAINER_CATEGORY_WEIGHTS)
                drop = self._random_drop(category, quality, randomize_level, level)
                if drop is not None:
                    loot.append(drop)

        loot.extend(self._guaranteed_drops(container.guaranteed_loot))

        Logger.debug("LootManager", f"Generated {len(loot)} items from container loot")
        self.emit(LootEvent.LOOT_GENERATED, source="container", profile=container, loot=loot)
        return loot

    def generate_quest_reward(self, quest: QuestProfile, player: Optional[PlayerProfile] = None,
                              **options) -> List[LootDrop]:
        """Table rewards and fixed item rewards; one random reward when neither yields anything."""
        if not self._require_factory("quest rewards"):
            return []

        quest_options = dict(options)
        quest_options["quality_modifier"] = self.special_condition_modifiers["questReward"]

        loot: List[LootDrop] = []
        if quest.reward_table:
            table_options = {key: value for key, value in options.items() if key != "quality_modifier"}
            loot.extend(self.item_factory.create_loot(quest.reward_table, **table_options))

        loot.extend(self._guaranteed_drops(quest.item_rewards, use_quality=True))

        if not loot:
            level = quest.level or (player.level if player else 1)
            quality = self._determine_item_quality(level, player, **quest_options)
            category = self._weighted_random_selection(QUEST_CATEGORY_WEIGHTS)
            drop = self._random_drop(category, quality, self._randomize_level(level, QUEST_LEVEL_DIVISOR), level)
            if drop is not None:
                drop.quantity = 1
                loot.append(drop)

        Logger.debug("LootManager", f"Generated {len(loot)} items as quest rewards")
        self.emit(LootEvent.LOOT_GENERATED, source="quest", profile=quest, loot=loot)
        return loot

    # --- World placement ---

    def spawn_loot_in_world(self, loot: List[LootDrop], position: Any, radius: float = 1.0,
                            y_offset: float = 0.5) -> List[LootPlacement]:
        """
        Scatters drops on a circle around position and hands each placement to the
        spawn hook. Returns the placements.
        """
        if self.spawn_hook is None:
            Logger.error("LootManager", "LootManager requires a spawn hook to spawn loot.")
            return []
        if not loot:
            return []

        center = Vector3(as_position(position) or (0.0, 0.0, 0.0))
        placements: List[LootPlacement] = []
        for index, drop in enumerate(loot):
            angle = (index / len(loot)) * math.pi * 2
            offset = Vector3(
                math.cos(angle) * radius * random.random(),
                y_offset,
                math.sin(angle) * radius * random.random(),
            )
            spot = center + offset
            placement = LootPlacement(drop=drop, position=(spot.x, spot.y, spot.z),
                                      rotation_y=random.random() * math.pi * 2)
            self.spawn_hook(placement)
            placements.append(placement)

        self.emit(LootEvent.LOOT_SPAWNED, position=(center.x, center.y, center.z),
                  loot=loot, placements=placements)
        return placements

    # --- Quality and categories ---

    def _determine_item_quality(self, level: float, player: Optional[PlayerProfile] = None,
                                **options) -> str:
        """Shifts the base tier chances towards better tiers by level, luck and modifier, then draws one."""
        chances = dict(self.quality_chances)

        if level > 1:
            _shift_chances(chances, LOOT_LEVEL_QUALITY_SHIFT, (level - 1) * self.level_scaling)

        luck = player.luck if player else 0
        if luck:
            _shift_chances(chances, LOOT_LUCK_QUALITY_SHIFT, luck * self.special_condition_modifiers["playerLuck"])

        quality_modifier = options.get("quality_modifier")
        if quality_modifier:
            _shift_chances(chances, LOOT_MODIFIER_QUALITY_SHIFT, quality_modifier - 1)

        return self._weighted_random_selection(normalize_weights(chances)) or "COMMON"

    def _choose_loot_category(self, enemy: EnemyProfile) -> Optional[str]:
        weights = enemy.loot_category_weights or ENEMY_CATEGORY_WEIGHTS.get(
            enemy.enemy_type, ENEMY_CATEGORY_WEIGHTS["default"]
        )
        return self._weighted_random_selection(weights)

    @staticmethod
    def _weighted_random_selection(weights: Dict[str, float]) -> Optional[str]:
        return weighted_random_selection(weights)
