"""Phase and kinetics lookups used while building reactions.

Reactions only need a narrow view of thermodynamic phases and of the kinetics object
that governs them: species lookup, elemental composition, site sizes, charges, and
standard concentration units. These are described by the `PhaseLike` and
`KineticsLike` protocols. `Phase` and `Kinetics` are minimal implementations, with
species compositions given directly or as formula strings.
"""

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Protocol

import more_itertools as mit
import pint
import pyparsing as pp
from pyparsing import pyparsing_common as ppc

from .. import units as units_

ELEMENT = pp.Regex(r"[A-Z][a-z]*")
COUNT = pp.Opt(ppc.fnumber, default=1.0)
FORMULA = pp.OneOrMore(pp.Group(ELEMENT + COUNT)) + pp.StringEnd()
ELECTRON = "E"


class PhaseLike(Protocol):
    def ndim(self) -> int: ...

    def standard_concentration_units(self) -> pint.Unit: ...

    def n_elements(self) -> int: ...

    def element_name(self, m: int) -> str: ...

    def n_atoms(self, k: int, m: int) -> float: ...

    def species_index(self, name: str) -> int | None: ...

    def size(self, k: int) -> float: ...

    def charge(self, k: int) -> float: ...


class KineticsLike(Protocol):
    skip_undeclared_species: bool
    skip_undeclared_third_bodies: bool

    def kinetics_species_index(self, name: str) -> int | None: ...

    def species_phase(self, name: str) -> PhaseLike: ...

    def species_phase_index(self, name: str) -> int: ...

    def thermo(self, idx: int) -> PhaseLike: ...

    def reaction_phase_index(self) -> int: ...

    def surface_phase_index(self) -> int | None: ...

    def n_phases(self) -> int: ...


def read_formula(formula: str | Mapping[str, float]) -> dict[str, float]:
    """Read an elemental composition from a formula.

    Example:
    -------
    ```
    >>> read_formula("CH3OH")
    {'C': 1.0, 'H': 4.0, 'O': 1.0}
    ```

    :param formula: A formula string, e.g. "H2O", or an element count dictionary
    :return: The element counts
    """
    if isinstance(formula, Mapping):
        return {str(k): float(v) for k, v in formula.items()}

    counts = {}
    for elem, count in FORMULA.parse_string(formula):
        counts[elem] = counts.get(elem, 0.0) + float(count)
    return counts


@dataclasses.dataclass
class Phase:
    """A phase with a list of species.

    :param name: The phase name
    :param species: Elemental compositions (or formulas) by species name
    :param dim: The number of spatial dimensions (3 bulk, 2 surface)
    :param sizes: Number of surface sites occupied, by species name (default 1)
    :param charges: Charges by species name (default: minus the electron count)
    """

    name: str
    species: dict[str, dict[str, float]]
    dim: int = 3
    sizes: dict[str, float] = dataclasses.field(default_factory=dict)
    charges: dict[str, float] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        """Initialize attributes."""
        self.species = {str(k): read_formula(v) for k, v in self.species.items()}
        self.sizes = {k: float(v) for k, v in self.sizes.items()}
        self.charges = {
            k: float(self.charges.get(k, -v.get(ELECTRON, 0.0)))
            for k, v in self.species.items()
        }
        self._names = list(self.species)
        self._elements = list(
            mit.unique_everseen(e for v in self.species.values() for e in v)
        )

    def ndim(self) -> int:
        return self.dim

    def standard_concentration_units(self) -> pint.Unit:
        return units_.concentration_units(self.dim)

    def n_species(self) -> int:
        return len(self._names)

    def species_names(self) -> list[str]:
        return list(self._names)

    def species_name(self, k: int) -> str:
        return self._names[k]

    def species_index(self, name: str) -> int | None:
        return self._names.index(name) if name in self.species else None

    def n_elements(self) -> int:
        return len(self._elements)

    def element_name(self, m: int) -> str:
        return self._elements[m]

    def n_atoms(self, k: int, m: int) -> float:
        return self.species[self._names[k]].get(self._elements[m], 0.0)

    def size(self, k: int) -> float:
        return self.sizes.get(self._names[k], 1.0)

    def charge(self, k: int) -> float:
        return self.charges[self._names[k]]


@dataclasses.dataclass
class Kinetics:
    """The phases that reactions take place in, with species lookup.

    :param phases: The phases
    :param skip_undeclared_species: Silently drop reactions with unknown species?
    :param skip_undeclared_third_bodies: Ignore unknown species in efficiencies?
    :param reaction_phase: Index of the phase where reactions occur (defaults to the
        lowest-dimensional phase, i.e. the surface for interface kinetics)
    """

    phases: Sequence[Phase]
    skip_undeclared_species: bool = False
    skip_undeclared_third_bodies: bool = False
    reaction_phase: int | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.phases = tuple(self.phases)
        assert self.phases, "Kinetics requires at least one phase"
        if self.reaction_phase is None:
            dims = [p.ndim() for p in self.phases]
            self.reaction_phase = dims.index(min(dims))

    def n_phases(self) -> int:
        return len(self.phases)

    def thermo(self, idx: int) -> Phase:
        return self.phases[idx]

    def reaction_phase_index(self) -> int:
        return self.reaction_phase

    def surface_phase_index(self) -> int | None:
        return next((i for i, p in enumerate(self.phases) if p.ndim() == 2), None)

    def species_names(self) -> list[str]:
        return [n for p in self.phases for n in p.species_names()]

    def kinetics_species_index(self, name: str) -> int | None:
        start = 0
        for phase in self.phases:
            k = phase.species_index(name)
            if k is not None:
                return start + k
            start += phase.n_species()
        return None

    def species_phase_index(self, name: str) -> int:
        idx = next(
            (i for i, p in enumerate(self.phases) if p.species_index(name) is not None),
            None,
        )
        if idx is None:
            raise KeyError(f"Unknown species '{name}'")
        return idx

    def species_phase(self, name: str) -> Phase:
        return self.phases[self.species_phase_index(name)]
