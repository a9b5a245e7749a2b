"""
Initializes the config package, making all settings available for direct import.
This allows other modules to use `from inventory_engine.config import SETTING_NAME`
without knowing which specific file the setting is in.
"""

from .config_inventory import *
from .config_items import *
from .config_loot import *
