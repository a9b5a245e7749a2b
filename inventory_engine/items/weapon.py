# inventory_engine/items/weapon.py
from typing import Optional

from inventory_engine.items.item import Item

class Weapon(Item):
    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Weapon",
                 description: str = "", **kwargs):
        # Weapons never stack, whatever the template says
        kwargs["stackable"] = False
        kwargs.setdefault("item_type", "WEAPON")
        kwargs.setdefault("equip_slot", "MAINHAND")
        kwargs.setdefault("is_equippable", True)
        kwargs.setdefault("weight", 2.0)
        super().__init__(obj_id=obj_id, name=name, description=description, **kwargs)

    @property
    def damage_value(self) -> float:
        """Effective damage. Broken weapons deal nothing."""
        if self.is_broken():
            return 0
        return self.get_stat("damage")
