"""Generate Go structable structs from a database catalog."""

__version__ = "0.1.0"
