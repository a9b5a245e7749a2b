"""
Inventory Engine.
Item model, slot/grid containers, inventory coordination and procedural loot.
"""
import os

# pygame prints a banner on import unless told otherwise
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

__version__ = "0.1.0"
