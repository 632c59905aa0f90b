"""Sentinel values shared by the model and the interpreter."""

__all__ = ["NOT_FOUND", "UNDEFINED", "NotFound", "Undefined", "is_nullish"]


class NotFound:
    """Result of a lookup that failed at every level of a chain.

    There is a single instance, ``NOT_FOUND``. It is never stored as a
    property value, which is what separates it from ``UNDEFINED``.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NOT_FOUND"

    def __bool__(self):
        return False


class Undefined:
    """The script value ``undefined``, distinct from ``None`` (null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "undefined"

    def __bool__(self):
        return False


NOT_FOUND = NotFound()
UNDEFINED = Undefined()


def is_nullish(value) -> bool:
    """True for null (None) and undefined."""
    return value is None or value is UNDEFINED
