from .storage import KeyValueEntry

__all__ = ["KeyValueEntry"]
