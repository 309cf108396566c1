"""Units of rate coefficients.

The units of a rate coefficient are kept as a stack of (unit, exponent) pairs rather
than as a single flattened unit. The first entry always holds the standard
concentration units of the reaction phase, so that rate models can tell how many
concentration factors each stage of the rate expression contributes (e.g. the extra
collider factor in the low-pressure limit of a falloff rate).
"""

import dataclasses
import functools
import operator
from collections.abc import Sequence

import pint

from . import collider

U = pint.UnitRegistry()

PER_SECOND = U.s**-1
ENERGY = U.J / U.kmol
PRESSURE = U.Pa


def concentration_units(ndim: int) -> pint.Unit:
    """Get the standard concentration units for a phase of a given dimensionality.

    :param ndim: The number of spatial dimensions of the phase (3, 2, or 1)
    :return: The concentration units
    """
    assert ndim in (1, 2, 3), f"Invalid phase dimensionality: {ndim}"
    return U.kmol / U.m**ndim


@dataclasses.dataclass(frozen=True)
class UnitStack:
    """A stack of units and exponents for a rate coefficient.

    :param stack: Pairs of units and exponents; the first pair holds the standard
        concentration units
    """

    stack: tuple[tuple[pint.Unit, float], ...] = ()

    def __post_init__(self):
        """Initialize attributes."""
        stack = tuple((U.Unit(u), float(e)) for u, e in self.stack)
        object.__setattr__(self, "stack", stack)

    def __len__(self) -> int:
        return len(self.stack)

    def __str__(self) -> str:
        return f"{self.product():~P}" if self.stack else "<undetermined>"

    @property
    def standard_units(self) -> pint.Unit | None:
        """The standard concentration units."""
        return self.stack[0][0] if self.stack else None

    @property
    def standard_exponent(self) -> float:
        """The exponent of the standard concentration units."""
        return self.stack[0][1] if self.stack else 0.0

    def join(self, exponent: float) -> "UnitStack":
        """Add to the exponent of the standard concentration units.

        :param exponent: The exponent increment
        :return: The new unit stack
        """
        assert self.stack, "Cannot join exponents on an undetermined unit stack"
        (units0, exp0), *rest = self.stack
        return UnitStack(((units0, exp0 + exponent), *rest))

    def update(self, units: pint.Unit, exponent: float) -> "UnitStack":
        """Add to the exponent of an entry, appending the entry if it is new.

        :param units: The units
        :param exponent: The exponent increment
        :return: The new unit stack
        """
        units = U.Unit(units)
        stack = list(self.stack)
        for idx, (units0, exp0) in enumerate(stack):
            if units0 == units:
                stack[idx] = (units0, exp0 + exponent)
                return UnitStack(tuple(stack))

        stack.append((units, exponent))
        return UnitStack(tuple(stack))

    def copy(self) -> "UnitStack":
        return UnitStack(self.stack)

    def product(self) -> pint.Unit:
        """Flatten the stack into a single unit.

        :return: The product of all units raised to their exponents
        """
        factors = (u**e for u, e in self.stack if e != 0.0)
        return functools.reduce(operator.mul, factors, U.dimensionless)


def from_standard_units(units: pint.Unit | str) -> UnitStack:
    """Start a unit stack from standard concentration units.

    :param units: The standard concentration units
    :return: The unit stack, with a zero exponent on the standard units
    """
    return UnitStack(((U.Unit(units), 0.0),))


def from_data(stack: Sequence[tuple[pint.Unit | str, float]]) -> UnitStack:
    """Build a unit stack from pairs of units and exponents.

    :param stack: Pairs of units and exponents
    :return: The unit stack
    """
    return UnitStack(tuple((U.Unit(u), e) for u, e in stack))


def calculate_rate_coeff_units(rxn, kin) -> UnitStack:
    """Determine the units of the rate coefficient of a reaction.

    The output units are concentration per second in the reaction phase. Each reactant
    divides out its own phase's concentration units, raised to its explicit order if
    one was given and to its stoichiometric coefficient otherwise. A third body
    contributes one more inverse concentration factor.

    :param rxn: A reaction object
    :param kin: The governing kinetics object
    :return: The unit stack; empty if the reaction is invalid
    """
    if not rxn.valid:
        return UnitStack()

    rxn_phase = kin.thermo(kin.reaction_phase_index())
    units = from_standard_units(rxn_phase.standard_concentration_units())
    units = units.join(1.0).update(PER_SECOND, 1.0)

    for name, order in rxn.orders.items():
        phase = kin.species_phase(name)
        units = units.update(phase.standard_concentration_units(), -order)

    for name, stoich in rxn.reactants.items():
        # Pseudo-species may not have been stripped yet
        if collider.is_pseudo_species(name) or name in rxn.orders:
            continue
        phase = kin.species_phase(name)
        units = units.update(phase.standard_concentration_units(), -stoich)

    if rxn.colliders() is not None:
        units = units.join(-1.0)

    return units
