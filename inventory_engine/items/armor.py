# inventory_engine/items/armor.py
from typing import Optional

from inventory_engine.items.item import Item

class Armor(Item):
    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Armor",
                 description: str = "", **kwargs):
        kwargs["stackable"] = False
        kwargs.setdefault("item_type", "ARMOR")
        kwargs.setdefault("equip_slot", "CHEST")
        kwargs.setdefault("is_equippable", True)
        kwargs.setdefault("weight", 3.0)
        super().__init__(obj_id=obj_id, name=name, description=description, **kwargs)

    @property
    def defense_value(self) -> float:
        if self.is_broken():
            return 0
        return self.get_stat("defense")


class Accessory(Item):
    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Accessory",
                 description: str = "", **kwargs):
        kwargs["stackable"] = False
        kwargs.setdefault("item_type", "ACCESSORY")
        kwargs.setdefault("equip_slot", "NECK")
        kwargs.setdefault("is_equippable", True)
        kwargs.setdefault("weight", 0.2)
        super().__init__(obj_id=obj_id, name=name, description=description, **kwargs)
