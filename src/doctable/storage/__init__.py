"""Schema and table bootstrap for doctable."""

from doctable.storage.table_manager import TableManager

__all__ = ["TableManager"]
