# inventory_engine/items/consumable.py
from typing import Optional

from inventory_engine.items.item import Item

class Consumable(Item):
    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Consumable",
                 description: str = "", **kwargs):
        kwargs.setdefault("item_type", "CONSUMABLE")
        kwargs.setdefault("is_consumable", True)
        kwargs.setdefault("stackable", True)
        kwargs.setdefault("max_stack_size", 20)
        kwargs.setdefault("weight", 0.5)
        super().__init__(obj_id=obj_id, name=name, description=description, **kwargs)


class Material(Item):
    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Material",
                 description: str = "", **kwargs):
        kwargs.setdefault("item_type", "MATERIAL")
        kwargs.setdefault("stackable", True)
        kwargs.setdefault("max_stack_size", 100)
        super().__init__(obj_id=obj_id, name=name, description=description, **kwargs)
