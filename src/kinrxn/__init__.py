"""Parsing, classification, and validation of individual chemical reactions."""

from . import balance, collider, data, equation, error, factory, units
from .collider import ThirdBody
from .data import Kinetics, Phase, Reaction
from .error import ErrorCode, InputError
from .factory import (
    LoadResult,
    LoadStatus,
    load_reaction,
    new_reaction,
    reaction_type,
    reactions_from_data,
)
from .units import UnitStack

__all__ = [
    # types
    "Reaction",
    "ThirdBody",
    "Phase",
    "Kinetics",
    "UnitStack",
    "LoadResult",
    "LoadStatus",
    "ErrorCode",
    "InputError",
    # functions
    "new_reaction",
    "reaction_type",
    "load_reaction",
    "reactions_from_data",
    # modules
    "balance",
    "collider",
    "data",
    "equation",
    "error",
    "factory",
    "units",
]
