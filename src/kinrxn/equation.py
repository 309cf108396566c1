"""Reaction equation parsing and writing.

Equations are whitespace-delimited, e.g. "2 H2 + O2 => 2 H2O" or
"H + CH3 (+M) <=> CH4 (+M)". A falloff third body may also be written with a space
inside the bracket, "(+ M)".
"""

from collections.abc import Mapping

import pyparsing as pp
from pyparsing import pyparsing_common as ppc

from . import collider
from .collider import Composition
from .error import EquationError

REVERSIBLE_ARROWS = ("<=>", "=")
IRREVERSIBLE_ARROWS = ("=>",)
ARROWS = REVERSIBLE_ARROWS + IRREVERSIBLE_ARROWS
PLUS = "+"

TOKENS = pp.ZeroOrMore(pp.Word(pp.printables)) + pp.StringEnd()
COEFF = ppc.fnumber.copy() + pp.StringEnd()


def tokenize(equation: str) -> list[str]:
    """Split an equation into whitespace-delimited tokens.

    :param equation: The reaction equation
    :return: The tokens
    """
    return TOKENS.parse_string(equation).as_list()


def parse(
    equation: str, kin=None, node: Mapping | None = None
) -> tuple[Composition, Composition, bool, bool]:
    """Parse a reaction equation into reactant and product compositions.

    Each completed term ("+", an arrow, or a falloff marker closes the previous term)
    is one of:
        - a bare species, with coefficient 1
        - a coefficient followed by a species
        - a falloff marker, "(+M)" or "(+ M)", stored as "(+M)" with coefficient -1

    Species that the governing kinetics object does not know, other than the generic
    collider "M" and falloff markers, make the reaction invalid but are not an error.

    :param equation: The reaction equation
    :param kin: The governing kinetics object, used to look up species
    :param node: The reaction document, for error messages
    :return: The reactants, the products, whether the reaction is reversible, and
        whether all species are known
    """
    tokens = tokenize(equation)
    if not tokens:
        raise EquationError("Empty reaction equation", node=node)

    # A trailing "+" means the last species is not a special case
    tokens.append(PLUS)

    rcts: Composition = {}
    prds: Composition = {}
    is_rev = True
    is_valid = True
    arrow = None

    last_used = -1
    for idx in range(1, len(tokens)):
        tok = tokens[idx]
        if tok == PLUS or collider.is_falloff_marker(tok) or tok in ARROWS:
            name = tokens[idx - 1]

            if last_used >= 0 and tokens[last_used] == collider.FALLOFF_PREFIX:
                # Falloff marker with a space, "(+ M)"
                name = collider.FALLOFF_PREFIX + name
                coeff = collider.FALLOFF_COEFF
            elif (
                last_used == idx - 1
                and collider.is_falloff_marker(name)
                and name.endswith(collider.FALLOFF_SUFFIX)
            ):
                # Falloff marker without a space, "(+M)"
                coeff = collider.FALLOFF_COEFF
            elif last_used == idx - 2:
                coeff = 1.0
            elif last_used == idx - 3:
                coeff = parse_coefficient(tokens[idx - 2], equation, node=node)
            else:
                last_tok = tokens[last_used] if last_used >= 0 else "n/a"
                raise EquationError(
                    f"Error parsing reaction equation '{equation}'.\n"
                    f"Current token: '{tok}'\nLast used token: '{last_tok}'",
                    node=node,
                )

            if not is_known_species(name, coeff, kin):
                is_valid = False

            add_term(prds if arrow else rcts, name, coeff)
            last_used = idx

        if tok in ARROWS:
            if arrow is not None:
                raise EquationError(
                    f"Multiple reaction arrows ('{arrow}', '{tok}') in reaction "
                    f"equation '{equation}'",
                    node=node,
                )
            arrow = tok
            is_rev = tok in REVERSIBLE_ARROWS

    if arrow is None:
        raise EquationError(
            f"Missing reaction arrow in reaction equation '{equation}'", node=node
        )

    return rcts, prds, is_rev, is_valid


def parse_coefficient(token: str, equation: str = "", node: Mapping | None = None):
    """Parse a stoichiometric coefficient.

    :param token: The coefficient token
    :param equation: The equation, for error messages
    :param node: The reaction document, for error messages
    :return: The coefficient
    """
    try:
        (coeff,) = COEFF.parse_string(token)
    except pp.ParseException as err:
        raise EquationError(
            f"Invalid stoichiometric coefficient '{token}' in reaction equation "
            f"'{equation}'",
            node=node,
        ) from err
    return float(coeff)


def is_known_species(name: str, coeff: float, kin=None) -> bool:
    """Whether a term of the equation refers to a known species or a collider.

    :param name: The species name
    :param coeff: The coefficient (-1 for falloff markers)
    :param kin: The governing kinetics object
    :return: `True` if it does, `False` if it doesn't
    """
    if coeff == collider.FALLOFF_COEFF and collider.is_falloff_marker(name):
        return True

    if name == collider.GENERIC_COLLIDER:
        return True

    return kin is not None and kin.kinetics_species_index(name) is not None


def add_term(comp: Composition, name: str, coeff: float) -> None:
    """Add a term to a composition, accumulating repeated species.

    :param comp: The composition (modified in place)
    :param name: The species name
    :param coeff: The coefficient
    """
    coeff = comp.get(name, 0.0) + coeff
    if coeff == 0.0:
        comp.pop(name, None)
    else:
        comp[name] = coeff


# I/O
def coefficient_string(coeff: float) -> str:
    """Write a stoichiometric coefficient.

    :param coeff: The coefficient
    :return: The string, e.g. "2" or "0.5"
    """
    return f"{coeff:g}"


def side_string(comp: Mapping[str, float]) -> str:
    """Write one side of a reaction equation.

    :param comp: The composition of that side
    :return: The string, e.g. "2 H2 + O2"
    """
    return " + ".join(
        name if coeff == 1.0 else f"{coefficient_string(coeff)} {name}"
        for name, coeff in comp.items()
    )


def write(rcts_str: str, prds_str: str, is_rev: bool = True) -> str:
    """Write a reaction equation from its two sides.

    :param rcts_str: The reactant side
    :param prds_str: The product side
    :param is_rev: Is this a reversible reaction?
    :return: The equation
    """
    arrow = REVERSIBLE_ARROWS[0] if is_rev else IRREVERSIBLE_ARROWS[0]
    return f"{rcts_str} {arrow} {prds_str}"
