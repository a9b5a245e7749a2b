# inventory_engine/items/catalog.py
"""
Read-only item catalog the factory and managers query by identifier.

ItemCatalog is the contract. ItemDatabase is an in-memory implementation that
can be filled programmatically or from a JSON file.
"""
import json
import os
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from inventory_engine.config import ITEM_CATEGORIES, ITEM_TYPE_DEFAULTS
from inventory_engine.items.item import Item, Rarity
from inventory_engine.items.item_factory import build_item
from inventory_engine.items.loot_models import LootTable
from inventory_engine.utils.logger import Logger


@runtime_checkable
class ItemCatalog(Protocol):
    def get_item_by_id(self, item_id: str) -> Optional[Item]: ...

    def get_items_by_category(self, category: str) -> List[Item]: ...

    def get_loot_tables(self) -> List[LootTable]: ...

    def get_equipment_set(self, set_id: str) -> Optional[Dict[str, Any]]: ...


class ItemDatabase:
    """In-memory catalog of item templates, loot tables and equipment sets."""

    def __init__(self):
        self.items: Dict[str, Item] = {}
        self.item_types: Dict[str, Dict[str, Any]] = {k: dict(v) for k, v in ITEM_TYPE_DEFAULTS.items()}
        self.categories: Dict[str, List[str]] = {k: list(v) for k, v in ITEM_CATEGORIES.items()}
        self.loot_tables: Dict[str, LootTable] = {}
        self.equipment_sets: Dict[str, Dict[str, Any]] = {}

    # --- Registration ---

    def register_item_type(self, item_type: str, defaults: Dict[str, Any]):
        self.item_types[item_type.upper()] = dict(defaults)

    def register_category(self, category: str, item_types: List[str]):
        self.categories[category] = [t.upper() for t in item_types]

    def register_item(self, item_data: Union[Item, Dict[str, Any]]) -> Optional[Item]:
        """Registers a template. Dicts are merged over their type's defaults first."""
        if isinstance(item_data, Item):
            item = item_data
        else:
            item_id = item_data.get("id") or item_data.get("obj_id") if item_data else None
            if not item_id:
                Logger.error("ItemDatabase", "Cannot register item without an id.")
                return None
            item_type = str(item_data.get("item_type", item_data.get("type", "MISC"))).upper()
            merged = dict(self.item_types.get(item_type, {}))
            merged.update(item_data)
            merged["item_type"] = item_type
            item = build_item(merged)
            if item is None:
                return None

        if item.obj_id in self.items:
            Logger.debug("ItemDatabase", f"Item '{item.obj_id}' already registered. Overwriting.")
        self.items[item.obj_id] = item
        return item

    def register_items(self, items_data: List[Union[Item, Dict[str, Any]]]) -> List[Item]:
        registered = [self.register_item(data) for data in items_data]
        return [item for item in registered if item is not None]

    def register_loot_table(self, table: Union[LootTable, Dict[str, Any]],
                            table_id: Optional[str] = None) -> Optional[LootTable]:
        if not isinstance(table, LootTable):
            table = LootTable.from_dict(table, table_id)
        if not table.table_id:
            Logger.error("ItemDatabase", "Cannot register loot table without an id.")
            return None
        self.loot_tables[table.table_id] = table
        return table

    def register_equipment_set(self, set_id: str, set_data: Dict[str, Any]):
        self.equipment_sets[set_id] = {
            "id": set_id,
            "name": set_data.get("name", set_id),
            "description": set_data.get("description", ""),
            "pieces": list(set_data.get("pieces", [])),
            "bonuses": dict(set_data.get("bonuses", {})),
            "rarity": Rarity.parse(set_data.get("rarity")).name,
        }
        for piece_id in set_data.get("pieces", []):
            piece = self.items.get(piece_id)
            if piece:
                piece.set_id = set_id

    # --- Queries ---

    def get_item_by_id(self, item_id: str) -> Optional[Item]:
        return self.items.get(item_id)

    def create_item(self, item_id: str) -> Optional[Item]:
        """Returns an independent copy of the template."""
        template = self.items.get(item_id)
        return template.clone() if template else None

    def get_all_items(self) -> List[Item]:
        return list(self.items.values())

    def get_items_by_type(self, item_type: str) -> List[Item]:
        item_type = item_type.upper()
        return [item for item in self.items.values() if item.item_type == item_type]

    def get_items_by_category(self, category: str) -> List[Item]:
        item_types = self.categories.get(category)
        if not item_types: return []
        return [item for item in self.items.values() if item.item_type in item_types]

    def get_loot_table(self, table_id: str) -> Optional[LootTable]:
        return self.loot_tables.get(table_id)

    def get_loot_tables(self) -> List[LootTable]:
        return list(self.loot_tables.values())

    def get_equipment_set(self, set_id: str) -> Optional[Dict[str, Any]]:
        return self.equipment_sets.get(set_id)

    def find_set_for_item(self, item_or_id: Union[Item, str]) -> Optional[Dict[str, Any]]:
        item_id = item_or_id.obj_id if isinstance(item_or_id, Item) else item_or_id
        for set_data in self.equipment_sets.values():
            if item_id in set_data["pieces"]:
                return set_data
        return None

    def get_active_set_bonuses(self, equipped_item_ids: List[str]) -> List[Dict[str, Any]]:
        """Returns bonus dicts whose piece-count threshold is met by the equipped ids."""
        active_bonuses = []
        for set_data in self.equipment_sets.values():
            pieces = set(set_data["pieces"])
            count = sum(1 for item_id in equipped_item_ids if item_id in pieces)
            if count <= 0:
                continue
            for threshold, bonus in set_data["bonuses"].items():
                if count >= int(threshold):
                    active_bonuses.append(bonus)
        return active_bonuses

    def find_items(self, item_type: Optional[str] = None, rarity: Optional[str] = None,
                   tag: Optional[str] = None, name: Optional[str] = None) -> List[Item]:
        results = self.get_all_items()
        if item_type:
            results = [i for i in results if i.item_type == item_type.upper()]
        if rarity:
            wanted = Rarity.parse(rarity)
            results = [i for i in results if i.rarity == wanted]
        if tag:
            results = [i for i in results if i.has_tag(tag)]
        if name:
            name_lower = name.lower()
            results = [i for i in results if name_lower in i.name.lower()]
        return results

    def clear(self):
        self.items.clear()
        self.loot_tables.clear()
        self.equipment_sets.clear()

    # --- Loading ---

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ItemDatabase':
        """Builds a catalog from {items: [...], loot_tables: {id: {...}}, equipment_sets: {id: {...}}}."""
        database = cls()
        for item_type, defaults in data.get("item_types", {}).items():
            database.register_item_type(item_type, defaults)
        for category, item_types in data.get("categories", {}).items():
            database.register_category(category, item_types)
        database.register_items(data.get("items", []))
        for table_id, table_data in data.get("loot_tables", data.get("lootTables", {})).items():
            database.register_loot_table(table_data, table_id)
        for set_id, set_data in data.get("equipment_sets", data.get("equipmentSets", {})).items():
            database.register_equipment_set(set_id, set_data)
        return database

    @classmethod
    def load_from_file(cls, path: str) -> 'ItemDatabase':
        if not os.path.exists(path):
            Logger.warning("ItemDatabase", f"Catalog file not found: {path}")
            return cls()
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            Logger.error("ItemDatabase", f"Error loading catalog '{path}': {e}")
            return cls()
        return cls.from_dict(data)
