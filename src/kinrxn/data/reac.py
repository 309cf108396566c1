"""Reaction dataclasses.

A reaction is an equation (reactant and product compositions, reversibility) plus a
rate model. The variants differ in how the equation names its collision partner:

    - `ElementaryReaction`: no collision partner; also used for interface reactions
      and for pressure-dependent rates that do not need one
    - `ThreeBodyReaction`: "A + B + M <=> AB + M", or an explicit partner
    - `FalloffReaction`: "A + B (+M) <=> AB (+M)", with a falloff or
      chemically-activated rate
    - `CustomRateReaction`: a user-supplied rate function
"""

import abc
import copy
import dataclasses
import logging
import warnings
from collections.abc import Mapping
from typing import ClassVar

from .. import balance, collider
from .. import equation as eq_
from .. import units as units_
from ..collider import Composition, ThirdBody
from ..error import (
    ColliderError,
    InputError,
    RateTypeError,
    ReactionOrderError,
    ReactionTypeError,
)
from ..units import UnitStack
from . import rate as rt_
from .rate import Rate, RateShape

logger = logging.getLogger(__name__)

HEAD_KEYS = ("type", "equation")
TAIL_KEYS = ("duplicate", "orders", "negative-orders", "nonreactant-orders")


@dataclasses.dataclass
class Reaction(abc.ABC):
    """A reaction.

    :param reactants: Stoichiometric coefficients of the reactants
    :param products: Stoichiometric coefficients of the products
    :param rate: The rate model
    :param reversible: Is this a reversible reaction?
    :param duplicate: Is this a declared duplicate of another reaction?
    :param orders: Explicit reaction orders, which replace stoichiometric coefficients
        in the forward rate expression
    :param allow_nonreactant_orders: Allow orders for species that are not reactants?
    :param allow_negative_orders: Allow negative orders?
    :param id: An identifier for error messages
    :param input: The document this reaction was read from, if any
    :param rate_units: The units of the rate coefficient
    :param valid: Whether all species are known to the governing kinetics object
    """

    reactants: Composition = dataclasses.field(default_factory=dict)
    products: Composition = dataclasses.field(default_factory=dict)
    rate: Rate | None = None
    reversible: bool = True
    duplicate: bool = False
    orders: Composition = dataclasses.field(default_factory=dict)
    allow_nonreactant_orders: bool = False
    allow_negative_orders: bool = False
    id: str = ""
    input: dict = dataclasses.field(default_factory=dict)
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)
    valid: bool = True

    # The rate shapes that can be attached to this kind of reaction
    shapes: ClassVar[tuple[RateShape, ...]] = ()

    def __post_init__(self):
        """Initialize attributes."""
        self.reactants = {str(k): float(v) for k, v in self.reactants.items()}
        self.products = {str(k): float(v) for k, v in self.products.items()}
        self.orders = {str(k): float(v) for k, v in self.orders.items()}
        if self.rate is not None:
            self.set_rate(self.rate)

    @property
    @abc.abstractmethod
    def type_(self) -> str:
        """The type of reaction."""
        pass

    def colliders(self) -> ThirdBody | None:
        """Get the third body, if this reaction has one.

        :return: The third body
        """
        return None

    # setters
    def set_equation(self, equation: str, kin=None) -> None:
        """Set the reactants, products, and reversibility from an equation.

        :param equation: The reaction equation
        :param kin: The governing kinetics object, used to look up species
        """
        rcts, prds, is_rev, is_valid = eq_.parse(equation, kin=kin, node=self.input)
        self.reactants.clear()
        self.reactants.update(rcts)
        self.products.clear()
        self.products.update(prds)
        self.reversible = is_rev
        self.valid = self.valid and is_valid

    def set_parameters(self, node: Mapping, kin=None) -> None:
        """Set the equation and the generic reaction options from a document.

        An empty document leaves the reaction unchanged.

        :param node: The reaction document
        :param kin: The governing kinetics object, used to look up species
        """
        if not node:
            return

        self.input = copy.deepcopy(dict(node))
        self.set_equation(str(node.get("equation", "")), kin)

        for name, order in node.get("orders", {}).items():
            self.orders[str(name)] = float(order)
            if kin is None or kin.kinetics_species_index(name) is None:
                self.valid = False

        self.id = str(node.get("id", ""))
        self.duplicate = bool(node.get("duplicate", False))
        self.allow_negative_orders = bool(node.get("negative-orders", False))
        self.allow_nonreactant_orders = bool(node.get("nonreactant-orders", False))

    def set_rate(self, rate: Rate | None) -> None:
        """Attach a rate model.

        :param rate: The rate model
        """
        if rate is not None and rate.shape not in self.shapes:
            raise RateTypeError(
                f"Incompatible types: a '{rate.type_}' rate cannot be used for a "
                f"'{self.type_}' reaction",
                node=self.input,
            )

        self.rate = rate
        if rate is None:
            return

        marker = collider.falloff_marker(collider.GENERIC_COLLIDER)
        if rate.drops_falloff_marker and marker in self.reactants:
            warnings.warn(
                f"Specifying '{marker}' in the reaction equation for {rate.type_} "
                "reactions is deprecated.",
                DeprecationWarning,
                stacklevel=2,
            )
            self.reactants.pop(marker)
            self.products.pop(marker, None)

        generic = collider.GENERIC_COLLIDER
        if rate.forbids_generic_collider and generic in self.reactants:
            raise ColliderError(
                f"Found superfluous '{generic}' in "
                f"{rate.type_} reaction '{self.equation()}'",
                node=self.input,
            )

    def set_orders(self, orders: Mapping[str, float]) -> None:
        """Set explicit reaction orders, checking them against the reaction.

        :param orders: Reaction orders by species name
        """
        orders0 = self.orders
        self.orders = {str(k): float(v) for k, v in orders.items()}
        try:
            self.check()
        except InputError:
            self.orders = orders0
            raise

    # checks
    def check(self) -> None:
        """Check the reaction orders and the rate parameters for consistency."""
        if not self.allow_nonreactant_orders:
            for name in self.orders:
                if name not in self.reactants:
                    raise ReactionOrderError(
                        f"Reaction order specified for non-reactant species '{name}'",
                        node=self.input,
                    )

        if not self.allow_negative_orders:
            for name, order in self.orders.items():
                if order < 0.0:
                    raise ReactionOrderError(
                        f"Negative reaction order specified for species '{name}'",
                        node=self.input,
                    )

        if self.reversible and self.orders:
            raise ReactionOrderError(
                "Reaction orders may only be given for irreversible reactions",
                node=self.input,
            )

        if self.rate is not None:
            self.rate.check(self.equation(), self.input)

    def validate(self, kin) -> None:
        """Check the reaction, then check the rate against the phases involved.

        :param kin: The governing kinetics object
        """
        self.check()
        if self.valid and self.rate is not None:
            self.rate.validate(self, kin)

    def check_balance(self, kin) -> None:
        """Check that elements and surface sites are conserved.

        :param kin: The governing kinetics object
        """
        balance.check_balance(self, kin)

    def check_species(self, kin) -> bool:
        """Check that all species are declared, then check the balance.

        :param kin: The governing kinetics object
        :return: `True` if the reaction should be kept, `False` if it should be skipped
        """
        return balance.check_species(self, kin)

    def undeclared_third_bodies(self, kin) -> tuple[list[str], bool]:
        """Find undeclared species among the third-body efficiencies.

        :param kin: The governing kinetics object
        :return: The undeclared species names, and whether the reaction names an
            explicit collision partner
        """
        return balance.undeclared_third_bodies(self, kin)

    def uses_electrochemistry(self, kin) -> bool:
        """Whether this reaction transfers charge between phases.

        :param kin: The governing kinetics object
        :return: `True` if it does, `False` if it doesn't
        """
        return balance.uses_electrochemistry(self, kin)

    def calculate_rate_coeff_units(self, kin) -> UnitStack:
        """Determine the units of the rate coefficient.

        :param kin: The governing kinetics object
        :return: The unit stack
        """
        return units_.calculate_rate_coeff_units(self, kin)

    # I/O
    def reactant_string(self) -> str:
        return eq_.side_string(self.reactants)

    def product_string(self) -> str:
        return eq_.side_string(self.products)

    def equation(self) -> str:
        """Write the reaction equation.

        :return: The equation, with the collision partner restored
        """
        return eq_.write(self.reactant_string(), self.product_string(), self.reversible)

    def get_parameters(self) -> dict:
        """Get the document form of this reaction, without the original input.

        :return: The reaction parameters
        """
        params = {"equation": self.equation()}
        if self.duplicate:
            params["duplicate"] = True
        if self.orders:
            params["orders"] = dict(self.orders)
        if self.allow_negative_orders:
            params["negative-orders"] = True
        if self.allow_nonreactant_orders:
            params["nonreactant-orders"] = True

        if self.rate is not None:
            params.update(self.rate.parameters())
            # Arrhenius is the default
            if params.get("type", "").startswith("Arrhenius"):
                del params["type"]

        return params

    def parameters(self, with_input: bool = True) -> dict:
        """Get the document form of this reaction.

        :param with_input: Merge the original input over the computed parameters?
        :return: The reaction parameters, with "type" and "equation" first and the
            generic reaction options last
        """
        params = self.get_parameters()
        if with_input:
            params.update(copy.deepcopy(self.input))
        return ordered_parameters(params)

    # constructors
    @classmethod
    def from_node(cls, node: Mapping, kin=None) -> "Reaction":
        """Build a reaction of this kind from a document.

        :param node: The reaction document
        :param kin: The governing kinetics object
        :return: The reaction object
        """
        rxn = cls()
        rxn.set_parameters(node, kin)
        if kin is not None:
            rxn.rate_units = rxn.calculate_rate_coeff_units(kin)
        # Units are undetermined for an invalid reaction, which may still be skipped
        strict = kin is None or rxn.valid
        rate_ = rt_.from_node(rxn.rate_node(node, kin), rxn.rate_units, strict=strict)
        rxn.set_rate(rate_)
        rxn.check()
        logger.debug("Built %s reaction '%s'", rxn.type_, rxn.equation())
        return rxn

    def rate_node(self, node: Mapping, kin=None) -> dict:
        """Get the document to build the rate model from.

        :param node: The reaction document
        :param kin: The governing kinetics object
        :return: The rate document
        """
        return dict(node)


@dataclasses.dataclass
class ElementaryReaction(Reaction):
    """A reaction without a collision partner."""

    shapes: ClassVar[tuple[RateShape, ...]] = (
        RateShape.ELEMENTARY,
        RateShape.PRESSURE_DEPENDENT,
        RateShape.INTERFACE,
    )

    @property
    def type_(self) -> str:
        return "elementary"

    def rate_node(self, node: Mapping, kin=None) -> dict:
        """Get the document to build the rate model from.

        At an interface, the rate type is qualified by how the rate is given: a
        "rate-constant" makes it an interface rate and a "sticking-coefficient" a
        sticking rate.

        :param node: The reaction document
        :param kin: The governing kinetics object
        :return: The rate document
        """
        rate_node = dict(node)
        if kin is None or kin.thermo(kin.reaction_phase_index()).ndim() == 3:
            return rate_node

        type_ = rate_node.get("type", "Arrhenius")
        if "rate-constant" in node:
            prefix = "interface-"
        elif "sticking-coefficient" in node:
            prefix = "sticking-"
        else:
            raise ReactionTypeError(
                "Unable to infer interface reaction type", node=self.input
            )

        if not type_.startswith(prefix):
            type_ = f"{prefix}{type_}"
        rate_node["type"] = type_
        return rate_node


@dataclasses.dataclass
class ThreeBodyReaction(Reaction):
    """A reaction with a third body that multiplies the rate (mass action).

    :param third_body: The third body
    """

    third_body: ThirdBody = dataclasses.field(default_factory=ThirdBody)

    shapes: ClassVar[tuple[RateShape, ...]] = (RateShape.ELEMENTARY,)

    def __post_init__(self):
        """Initialize attributes."""
        self.third_body.mass_action = True
        super().__post_init__()

    @property
    def type_(self) -> str:
        return "three-body"

    def colliders(self) -> ThirdBody:
        return self.third_body

    def set_equation(self, equation: str, kin=None) -> None:
        super().set_equation(equation, kin)
        if collider.strip_generic_collider(self.reactants, self.products):
            self.third_body.set_generic()
            return

        try:
            found = collider.detect_efficiencies(
                self.reactants, self.products, self.third_body, equation
            )
        except ColliderError as err:
            raise ColliderError(err.message, node=self.input) from err

        if not found:
            raise ColliderError(
                f"Reaction equation '{equation}' does not contain third body "
                f"'{collider.GENERIC_COLLIDER}'",
                node=self.input,
            )

    def set_parameters(self, node: Mapping, kin=None) -> None:
        super().set_parameters(node, kin)
        # An explicit partner has its efficiencies fixed by the equation
        if node and not self.third_body.specified_collision_partner:
            self.third_body.set_efficiencies(node)

    def reactant_string(self) -> str:
        return super().reactant_string() + collider.collider_string(self.third_body)

    def product_string(self) -> str:
        return super().product_string() + collider.collider_string(self.third_body)

    def get_parameters(self) -> dict:
        params = super().get_parameters()
        if not self.third_body.specified_collision_partner:
            params["type"] = self.type_
            params.update(third_body_parameters(self.third_body))
        return params


@dataclasses.dataclass
class FalloffReaction(Reaction):
    """A reaction whose rate blends low and high-pressure limits.

    The third body enters the reduced pressure, not the rate itself.

    :param third_body: The third body
    """

    third_body: ThirdBody = dataclasses.field(
        default_factory=lambda: ThirdBody(mass_action=False)
    )

    shapes: ClassVar[tuple[RateShape, ...]] = (RateShape.FALLOFF,)

    def __post_init__(self):
        """Initialize attributes."""
        self.third_body.mass_action = False
        super().__post_init__()

    @property
    def type_(self) -> str:
        return "falloff" if self.rate is None else self.rate.type_

    def colliders(self) -> ThirdBody:
        return self.third_body

    def set_equation(self, equation: str, kin=None) -> None:
        super().set_equation(equation, kin)
        collider.resolve_falloff_marker(
            self.reactants, self.products, self.third_body, equation, node=self.input
        )

    def set_parameters(self, node: Mapping, kin=None) -> None:
        super().set_parameters(node, kin)
        if node and not self.third_body.specified_collision_partner:
            self.third_body.set_efficiencies(node)

    def reactant_string(self) -> str:
        suffix = collider.collider_string(self.third_body, falloff=True)
        return super().reactant_string() + suffix

    def product_string(self) -> str:
        suffix = collider.collider_string(self.third_body, falloff=True)
        return super().product_string() + suffix

    def get_parameters(self) -> dict:
        params = super().get_parameters()
        if not self.third_body.specified_collision_partner:
            if self.third_body.efficiencies:
                params.update(third_body_parameters(self.third_body))
        return params


@dataclasses.dataclass
class CustomRateReaction(Reaction):
    """A reaction with a user-supplied rate function."""

    shapes: ClassVar[tuple[RateShape, ...]] = (RateShape.CUSTOM,)

    @property
    def type_(self) -> str:
        return "custom-rate-function"


REACTION_TYPES: dict[str, type[Reaction]] = {
    "elementary": ElementaryReaction,
    "reaction": ElementaryReaction,
    "Arrhenius": ElementaryReaction,
    "interface-Arrhenius": ElementaryReaction,
    "sticking-Arrhenius": ElementaryReaction,
    "pressure-dependent-Arrhenius": ElementaryReaction,
    "Chebyshev": ElementaryReaction,
    "three-body": ThreeBodyReaction,
    "falloff": FalloffReaction,
    "chemically-activated": FalloffReaction,
    "custom-rate-function": CustomRateReaction,
}


# constructors
def from_data(
    rcts: Mapping[str, float],
    prds: Mapping[str, float],
    rate_: Rate | dict | None = None,
    type_: str = "elementary",
    **kwargs,
) -> Reaction:
    """Construct a reaction object from data.

    :param rcts: Stoichiometric coefficients of the reactants
    :param prds: Stoichiometric coefficients of the products
    :param rate_: The rate model, or its document form
    :param type_: The reaction type
    :param kwargs: Other reaction fields, e.g. `reversible` or `third_body`
    :return: The reaction object
    """
    rate_ = rt_.from_node(rate_) if isinstance(rate_, dict) else rate_
    cls = reaction_class(type_)
    return cls(reactants=dict(rcts), products=dict(prds), rate=rate_, **kwargs)


def from_equation(
    equation: str, rate_: Rate | None = None, type_: str = "elementary", kin=None
) -> Reaction:
    """Construct a reaction object from an equation.

    Example:
    -------
    ```
    >>> rxn = from_equation("H + O2 + M <=> HO2 + M", type_="three-body")
    >>> rxn.reactants
    {'H': 1.0, 'O2': 1.0}
    ```

    :param equation: The reaction equation
    :param rate_: The rate model
    :param type_: The reaction type
    :param kin: The governing kinetics object, used to look up species
    :return: The reaction object
    """
    rxn = reaction_class(type_)()
    rxn.set_equation(equation, kin)
    rxn.set_rate(rate_)
    return rxn


def reaction_class(type_: str) -> type[Reaction]:
    """Get the reaction class for a reaction type.

    :param type_: The reaction type
    :return: The reaction class
    """
    if type_ not in REACTION_TYPES:
        raise ReactionTypeError(f"Unknown reaction type '{type_}'")
    return REACTION_TYPES[type_]


# I/O
def third_body_parameters(third_body: ThirdBody) -> dict:
    """Get the document form of a generic third body.

    :param third_body: The third body
    :return: The efficiencies, and the default efficiency if it isn't 1
    """
    params = {"efficiencies": dict(third_body.efficiencies)}
    if third_body.default_efficiency != 1.0:
        params["default-efficiency"] = third_body.default_efficiency
    return params


def ordered_parameters(params: Mapping) -> dict:
    """Order reaction parameters for output.

    :param params: The reaction parameters
    :return: The parameters, with "type" and "equation" first and the generic
        reaction options last
    """
    head = {k: params[k] for k in HEAD_KEYS if k in params}
    tail = {k: params[k] for k in TAIL_KEYS if k in params}
    body = {k: v for k, v in params.items() if k not in head and k not in tail}
    return {**head, **body, **tail}
