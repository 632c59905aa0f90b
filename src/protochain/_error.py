"""Error classes for the object model and snippet language"""

__all__ = [
    "ModelError",
    "UnknownConstructor",
    "CyclicPrototypeChain",
    "ObjectTypeError",
    "UndefinedName",
    "ParseError",
]


class ModelError(Exception):
    """Base class for all object model errors."""


class UnknownConstructor(ModelError, KeyError):
    """Constructor id is not registered with the model."""

    def __str__(self):
        return str(self.args[0]) if self.args else "Unknown constructor"


class CyclicPrototypeChain(ModelError):
    """Walking a prototype chain revisited an object already seen."""


class ObjectTypeError(ModelError, TypeError):
    """Operation applied to a value of the wrong kind.

    Mirrors the TypeError a script would see, such as reading a property
    of undefined or calling something that is not a function.
    """


class ParseError(ModelError):
    """Exception raised for snippet parsing errors.

    Args:
        message: (str) Error description
        position: (tuple | None) Optional (line, column) where the error occurred

    Attributes:
        message: (str) Error description
        position: (tuple | None) (line, column) where the error occurred
    """

    def __init__(self, message, position=None):
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} (line {position[0]}, column {position[1]})"
        super().__init__(message)


class UndefinedName(ModelError, NameError):
    """Script referenced a variable that was never declared."""
