"""
Social interaction engine: optimistic likes, bookmarks, reposts and comments
over a managed database backend, with schema-tolerant reads.
"""

__version__ = "0.1.0"
