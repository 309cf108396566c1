"""Species, element, site, and charge checks for reactions."""

import logging
from collections.abc import Mapping

from .error import BalanceError, SiteBalanceError, UndeclaredSpeciesError

logger = logging.getLogger(__name__)

ELEMENT_TOLERANCE = 1e-4
SITE_TOLERANCE = 1e-5
CHARGE_TOLERANCE = 1e-4


def undeclared_species(comp: Mapping[str, float], kin) -> list[str]:
    """Find the species of a composition that the kinetics object does not know.

    :param comp: A composition (or any mapping keyed by species name)
    :param kin: The governing kinetics object
    :return: The undeclared species names
    """
    return [n for n in comp if kin.kinetics_species_index(n) is None]


def undeclared_third_bodies(rxn, kin) -> tuple[list[str], bool]:
    """Find undeclared species among the third-body efficiencies of a reaction.

    :param rxn: A reaction object
    :param kin: The governing kinetics object
    :return: The undeclared species names, and whether the reaction names an explicit
        collision partner
    """
    third_body = rxn.colliders()
    if third_body is None:
        return [], False

    names = undeclared_species(third_body.efficiencies, kin)
    return names, third_body.specified_collision_partner


def element_totals(comp: Mapping[str, float], kin) -> dict[str, float]:
    """Count the atoms of each element on one side of a reaction.

    Every element of every phase involved is included, even with a count of zero.

    :param comp: The composition of that side
    :param kin: The governing kinetics object
    :return: Atom counts by element name
    """
    totals = {}
    for name, stoich in comp.items():
        phase = kin.species_phase(name)
        k = phase.species_index(name)
        for m in range(phase.n_elements()):
            elem = phase.element_name(m)
            totals[elem] = totals.get(elem, 0.0) + stoich * phase.n_atoms(k, m)
    return totals


def check_balance(rxn, kin) -> None:
    """Check that a reaction conserves elements and, at a surface, surface sites.

    :param rxn: A reaction object
    :param kin: The governing kinetics object
    """
    rtots = element_totals(rxn.reactants, kin)
    ptots = element_totals(rxn.products, kin)

    unbalanced = {}
    for elem in {**rtots, **ptots}:
        rtot = rtots.get(elem, 0.0)
        ptot = ptots.get(elem, 0.0)
        tot = rtot + ptot
        if tot > 0.0 and abs(ptot - rtot) / tot > ELEMENT_TOLERANCE:
            unbalanced[elem] = (rtot, ptot)

    if unbalanced:
        rows = "".join(
            f"  {e:<10} {r:<12g} {p:<12g}\n" for e, (r, p) in unbalanced.items()
        )
        raise BalanceError(
            f"The following reaction is unbalanced: {rxn.equation()}\n"
            f"  Element    Reactants    Products\n{rows}",
            elements=unbalanced,
            node=rxn.input,
        )

    if kin.thermo(kin.reaction_phase_index()).ndim() == 3:
        return

    surf = kin.thermo(kin.surface_phase_index())

    def _sites(comp: Mapping[str, float]) -> float:
        idxs = ((surf.species_index(n), s) for n, s in comp.items())
        return sum(s * surf.size(k) for k, s in idxs if k is not None)

    rsites = _sites(rxn.reactants)
    psites = _sites(rxn.products)
    if abs(rsites - psites) > SITE_TOLERANCE * (rsites + psites):
        raise SiteBalanceError(
            f"Number of surface sites not balanced in reaction {rxn.equation()}.\n"
            f"Reactant sites: {rsites:g}\nProduct sites: {psites:g}",
            elements={"sites": (rsites, psites)},
            node=rxn.input,
        )


def check_species(rxn, kin) -> bool:
    """Check that all species of a reaction are declared, then check its balance.

    Whether undeclared species are an error or silently exclude the reaction is up to
    the kinetics object.

    :param rxn: A reaction object
    :param kin: The governing kinetics object
    :return: `True` if the reaction is closed and balanced, `False` if it should be
        skipped
    """
    equation = rxn.equation()

    names = undeclared_species(rxn.reactants, kin) + undeclared_species(
        rxn.products, kin
    )
    if names:
        if kin.skip_undeclared_species:
            logger.debug("Skipping '%s': undeclared species %s", equation, names)
            return False
        raise UndeclaredSpeciesError(
            f"Reaction '{equation}'\ncontains undeclared species: '{_join(names)}'",
            species=names,
            node=rxn.input,
        )

    names = undeclared_species(rxn.orders, kin)
    if names:
        if kin.skip_undeclared_species:
            logger.debug("Skipping '%s': undeclared order species %s", equation, names)
            return False
        raise UndeclaredSpeciesError(
            f"Reaction '{equation}'\ndefines reaction orders for undeclared species: "
            f"'{_join(names)}'",
            species=names,
            node=rxn.input,
        )

    names, is_specified = undeclared_third_bodies(rxn, kin)
    if names:
        if not kin.skip_undeclared_third_bodies:
            if "efficiencies" in rxn.input:
                message = "defines third-body efficiencies for undeclared species"
            else:
                message = "is a three-body reaction with undeclared species"
            raise UndeclaredSpeciesError(
                f"Reaction '{equation}'\n{message}: '{_join(names)}'",
                species=names,
                node=rxn.input,
            )
        if kin.skip_undeclared_species and is_specified:
            logger.debug("Skipping '%s': undeclared partner %s", equation, names)
            return False

    check_balance(rxn, kin)
    return True


def uses_electrochemistry(rxn, kin) -> bool:
    """Whether a reaction transfers charge between phases.

    :param rxn: A reaction object
    :param kin: The governing kinetics object
    :return: `True` if it does, `False` if it doesn't
    """
    delta = [0.0] * kin.n_phases()
    for comp, sign in ((rxn.products, 1.0), (rxn.reactants, -1.0)):
        for name, stoich in comp.items():
            idx = kin.species_phase_index(name)
            phase = kin.thermo(idx)
            delta[idx] += sign * stoich * phase.charge(phase.species_index(name))

    return any(abs(d) > CHARGE_TOLERANCE for d in delta)


def _join(names: list[str]) -> str:
    return "', '".join(names)
