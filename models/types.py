# models/types.py

"""
Holds type aliases shared by the ordering and notification code.
"""

from .edit_cell import EditCell

# category label (None for uncategorized) -> assignment ids in display order
CategorizedOrder = dict[str | None, list[str]]

# editor id -> cell key -> cell, one table per gradebook
NotificationTable = dict[str, dict[str, EditCell]]
