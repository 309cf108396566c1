"""Third bodies (collision partners).

Three-body and falloff reactions name their collision partner in the equation, either
generically ("M", "(+M)") or as one explicit species ("AR", "(+AR)"). The functions
here detect these partners in a parsed composition, strip them out, and record them
in a `ThirdBody` object. Rendering is the inverse operation.
"""

import dataclasses
import logging
import math
from collections.abc import Mapping

from .error import ColliderError

logger = logging.getLogger(__name__)

GENERIC_COLLIDER = "M"
FALLOFF_PREFIX = "(+"
FALLOFF_SUFFIX = ")"
FALLOFF_COEFF = -1.0

Composition = dict[str, float]


@dataclasses.dataclass
class ThirdBody:
    """A third body (collision partner) with species efficiencies.

    :param default_efficiency: Efficiency of species not listed in `efficiencies`
    :param efficiencies: Collision efficiencies by species name
    :param specified_collision_partner: Whether the equation names one explicit
        species rather than the generic collider
    :param mass_action: Whether the effective third-body concentration multiplies the
        rate (three-body) or enters it separately (falloff)
    """

    default_efficiency: float = 1.0
    efficiencies: dict[str, float] = dataclasses.field(default_factory=dict)
    specified_collision_partner: bool = False
    mass_action: bool = True

    def __post_init__(self):
        """Initialize attributes."""
        self.default_efficiency = float(self.default_efficiency)
        self.efficiencies = {k: float(v) for k, v in self.efficiencies.items()}

    def efficiency(self, name: str) -> float:
        """Get the collision efficiency of a species.

        :param name: The species name
        :return: The efficiency
        """
        return self.efficiencies.get(name, self.default_efficiency)

    def set_efficiencies(self, node: Mapping) -> None:
        """Read the efficiencies from a reaction document.

        :param node: The reaction document
        """
        self.default_efficiency = float(node.get("default-efficiency", 1.0))
        if "efficiencies" in node:
            self.efficiencies = {k: float(v) for k, v in node["efficiencies"].items()}

    def set_partner(self, name: str) -> None:
        """Make one explicit species the only collision partner.

        :param name: The species name
        """
        self.default_efficiency = 0.0
        self.efficiencies = {name: 1.0}
        self.specified_collision_partner = True

    def set_generic(self) -> None:
        """Make the generic collider the collision partner.

        Efficiencies left over from an explicit partner are dropped.
        """
        if self.specified_collision_partner:
            self.default_efficiency = 1.0
            self.efficiencies = {}
        self.specified_collision_partner = False

    def partner(self) -> str:
        """Get the name of the collision partner, as written in an equation.

        :return: The explicit partner, or the generic collider
        """
        if self.specified_collision_partner:
            return next(iter(self.efficiencies))
        return GENERIC_COLLIDER


# properties
def is_falloff_marker(name: str) -> bool:
    """Whether a species name is a falloff third-body marker, e.g. "(+M)".

    :param name: The species name
    :return: `True` if it is, `False` if it isn't
    """
    return name.startswith(FALLOFF_PREFIX)


def is_pseudo_species(name: str) -> bool:
    """Whether a species name is a collider placeholder rather than a real species.

    :param name: The species name
    :return: `True` if it is, `False` if it isn't
    """
    return name == GENERIC_COLLIDER or is_falloff_marker(name)


def falloff_marker(name: str) -> str:
    """Write the falloff marker for a collision partner, e.g. "M" => "(+M)".

    :param name: The collision partner
    :return: The falloff marker
    """
    return f"{FALLOFF_PREFIX}{name}{FALLOFF_SUFFIX}"


def falloff_marker_partner(marker: str) -> str:
    """Read the collision partner from a falloff marker, e.g. "(+M)" => "M".

    :param marker: The falloff marker
    :return: The collision partner
    """
    return marker[len(FALLOFF_PREFIX) : -len(FALLOFF_SUFFIX)]


def is_three_body(rcts: Mapping[str, float], prds: Mapping[str, float]) -> bool:
    """Whether a reaction looks like a three-body reaction with an explicit partner.

    This is a syntactic check: exactly one species appears on both sides with integer
    coefficients, all coefficients are integers, and either side adds up to exactly
    three molecules.

    :param rcts: The reactant composition
    :param prds: The product composition
    :return: `True` if it does, `False` if it doesn't
    """

    def _is_int(coeff: float) -> bool:
        return math.trunc(coeff) == coeff

    found = [
        n for n, c in rcts.items() if n in prds and _is_int(c) and _is_int(prds[n])
    ]
    if len(found) != 1:
        return False

    if not all(map(_is_int, [*rcts.values(), *prds.values()])):
        return False

    nrcts = sum(int(c) for c in rcts.values())
    nprds = sum(int(c) for c in prds.values())
    return nrcts == 3 or nprds == 3


# transformations
def strip_generic_collider(rcts: Composition, prds: Composition) -> bool:
    """Remove the generic collider "M" from both sides, if present on both.

    :param rcts: The reactant composition (modified in place)
    :param prds: The product composition (modified in place)
    :return: `True` if it was removed, `False` if it wasn't
    """
    if GENERIC_COLLIDER not in rcts or GENERIC_COLLIDER not in prds:
        return False

    del rcts[GENERIC_COLLIDER]
    del prds[GENERIC_COLLIDER]
    return True


def detect_efficiencies(
    rcts: Composition, prds: Composition, third_body: ThirdBody, equation: str = ""
) -> bool:
    """Detect an explicit collision partner, i.e. a species on both sides.

    On success, the partner is recorded in the third body and one molecule of it is
    removed from each side.

    :param rcts: The reactant composition (modified in place)
    :param prds: The product composition (modified in place)
    :param third_body: The third body (modified in place)
    :param equation: The equation, for error messages
    :return: `True` if a partner was found, `False` if there is none
    """
    found = [n for n in rcts if n in prds]

    if not found:
        return False

    if len(found) > 1:
        raise ColliderError(
            "Found more than one explicitly specified collision partner "
            f"{found} in reaction '{equation}'."
        )

    (name,) = found
    third_body.set_partner(name)
    for comp in (rcts, prds):
        if math.trunc(comp[name]) != 1:
            comp[name] -= 1.0
        else:
            del comp[name]

    logger.debug("Explicit collision partner %s in reaction '%s'", name, equation)
    return True


def resolve_falloff_marker(
    rcts: Composition,
    prds: Composition,
    third_body: ThirdBody,
    equation: str = "",
    node: Mapping | None = None,
) -> None:
    """Resolve the falloff marker, e.g. "(+M)", left behind by the equation parser.

    The parser gives the marker a coefficient of -1. It must appear on both sides;
    both entries are removed and the partner is recorded in the third body.

    :param rcts: The reactant composition (modified in place)
    :param prds: The product composition (modified in place)
    :param third_body: The third body (modified in place)
    :param equation: The equation, for error messages
    :param node: The reaction document, for error messages
    """
    marker = next(
        (n for n, c in rcts.items() if c == FALLOFF_COEFF and is_falloff_marker(n)),
        None,
    )

    if marker is None:
        raise ColliderError(
            f"Reactants for reaction '{equation}' do not contain a "
            "pressure-dependent third body",
            node=node,
        )

    partner = falloff_marker_partner(marker)
    if marker not in prds:
        raise ColliderError(
            f"Unable to match third body '{partner}' in reactants and products of "
            f"reaction '{equation}'",
            node=node,
        )

    del rcts[marker]
    del prds[marker]

    if partner == GENERIC_COLLIDER:
        third_body.set_generic()
    else:
        third_body.set_partner(partner)


# I/O
def collider_string(third_body: ThirdBody, falloff: bool = False) -> str:
    """Write the collider term that is appended to each side of an equation.

    :param third_body: The third body
    :param falloff: Use falloff notation, e.g. " (+M)" instead of " + M"?
    :return: The collider term, including the leading separator
    """
    partner = third_body.partner()
    return f" {falloff_marker(partner)}" if falloff else f" + {partner}"
