"""Dataclasses for storing reactions, rates, and the phases they occur in."""

from . import phase, rate, reac
from .phase import Kinetics, Phase
from .rate import (
    ArrheniusFunction,
    ArrheniusRate,
    BlendingFunction,
    BlendType,
    ChebyshevRate,
    CustomFuncRate,
    FalloffRate,
    InterfaceArrheniusRate,
    PlogRate,
    Rate,
    RateShape,
    StickingArrheniusRate,
)
from .reac import (
    CustomRateReaction,
    ElementaryReaction,
    FalloffReaction,
    Reaction,
    ThreeBodyReaction,
)

__all__ = [
    "phase",
    "rate",
    "reac",
    "Kinetics",
    "Phase",
    "ArrheniusFunction",
    "ArrheniusRate",
    "BlendingFunction",
    "BlendType",
    "ChebyshevRate",
    "CustomFuncRate",
    "FalloffRate",
    "InterfaceArrheniusRate",
    "PlogRate",
    "Rate",
    "RateShape",
    "StickingArrheniusRate",
    "CustomRateReaction",
    "ElementaryReaction",
    "FalloffReaction",
    "Reaction",
    "ThreeBodyReaction",
]
