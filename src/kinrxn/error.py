"""Errors raised while building and validating reactions."""

import enum
from collections.abc import Mapping, Sequence


class ErrorCode(str, enum.Enum):
    """Error codes, one per kind of invalid reaction input."""

    MALFORMED_EQUATION = "MALFORMED_EQUATION"
    UNKNOWN_REACTION_TYPE = "UNKNOWN_REACTION_TYPE"
    INVALID_REACTION_ORDER = "INVALID_REACTION_ORDER"
    UNDECLARED_SPECIES = "UNDECLARED_SPECIES"
    UNBALANCED_EQUATION = "UNBALANCED_EQUATION"
    UNBALANCED_SITES = "UNBALANCED_SITES"
    INVALID_COLLIDER = "INVALID_COLLIDER"
    INCOMPATIBLE_RATE = "INCOMPATIBLE_RATE"
    INVALID_RATE_PARAMETERS = "INVALID_RATE_PARAMETERS"


class InputError(Exception):
    """Base class for errors in reaction input.

    :param message: User-facing description of the problem
    :param node: The reaction document the problem was found in
    """

    code: ErrorCode = ErrorCode.MALFORMED_EQUATION

    def __init__(self, message: str, node: Mapping | None = None):
        super().__init__(message)
        self.message = message
        self.node = dict(node) if node else {}

    def __str__(self) -> str:
        label = self.node.get("id") or self.node.get("equation")
        if label:
            return f"{self.message}\n| in reaction: {label}"
        return self.message


class EquationError(InputError):
    """The reaction equation could not be parsed."""

    code = ErrorCode.MALFORMED_EQUATION


class ReactionTypeError(InputError):
    """The reaction (or rate) type is unknown or cannot be inferred."""

    code = ErrorCode.UNKNOWN_REACTION_TYPE


class ReactionOrderError(InputError):
    """Reaction orders are inconsistent with the reaction."""

    code = ErrorCode.INVALID_REACTION_ORDER


class UndeclaredSpeciesError(InputError):
    """The reaction refers to species missing from the governing mechanism."""

    code = ErrorCode.UNDECLARED_SPECIES

    def __init__(
        self, message: str, species: Sequence[str], node: Mapping | None = None
    ):
        super().__init__(message, node=node)
        self.species = list(species)


class BalanceError(InputError):
    """The reaction does not conserve elements."""

    code = ErrorCode.UNBALANCED_EQUATION

    def __init__(
        self,
        message: str,
        elements: Mapping[str, tuple[float, float]] | None = None,
        node: Mapping | None = None,
    ):
        super().__init__(message, node=node)
        self.elements = dict(elements or {})


class SiteBalanceError(BalanceError):
    """The surface reaction does not conserve surface sites."""

    code = ErrorCode.UNBALANCED_SITES


class ColliderError(InputError):
    """The collision partner is missing, ambiguous, or unmatched."""

    code = ErrorCode.INVALID_COLLIDER


class RateTypeError(InputError):
    """The rate model does not fit the reaction it is attached to."""

    code = ErrorCode.INCOMPATIBLE_RATE


class RateParameterError(InputError):
    """The rate parameters are missing or invalid."""

    code = ErrorCode.INVALID_RATE_PARAMETERS
