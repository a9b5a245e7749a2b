"""
Items Package.
Item model and subclasses, catalog, factory, loot generation and inventories.
"""
