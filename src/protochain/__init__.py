"""
protochain - JavaScript's constructor/prototype object model in Python

An in-memory model of constructors, prototype chains and property lookup,
with a small snippet interpreter and an annotated tutorial that runs on it.
"""

__version__ = "0.1.0"

from loguru import logger

from ._error import *
from ._value import *
from ._object import *
from ._fmt import *
from ._model import *
from . import _ast as ast
from ._parse import *
from ._interp import *
from ._lesson import *

# Silent unless an application opts in (the command line does).
logger.disable("protochain")
