"""Manufacturing operations backend: recipe costing, batch planning, inventory and purchasing."""

__version__ = "1.0.0"
