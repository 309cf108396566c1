"""Rate models.

Rate models hold the parameters of a rate coefficient k(T,P) along with the units
they are expressed in. Parameters given with explicit units (e.g. "1.0e13 cm^3/mol/s")
are converted to the units required by the reaction.
"""

import abc
import dataclasses
import enum
import math
from collections.abc import Callable, Mapping, Sequence

import numpy
import pint

from .. import units as units_
from ..error import RateParameterError, ReactionTypeError
from ..units import U, UnitStack

ValueLike = float | int | str | pint.Quantity


class RateShape(str, enum.Enum):
    """The form of rate law a rate model describes."""

    ELEMENTARY = "elementary"
    PRESSURE_DEPENDENT = "pressure-dependent"
    FALLOFF = "falloff"
    INTERFACE = "interface"
    CUSTOM = "custom"


class BlendType(str, enum.Enum):
    """The type of blending function for high and low-pressure rates."""

    LIND = "Lindemann"
    TROE = "Troe"


def convert_value(
    val: ValueLike, units: pint.Unit | None, name: str = "value", strict: bool = True
) -> float:
    """Convert a parameter value to the given units.

    Plain numbers are assumed to be in the given units already.

    :param val: The value, either a number or a quantity with units
    :param units: The target units; if `None`, the value must be a plain number
    :param name: The parameter name, for error messages
    :param strict: Raise if the value has units but the target units are unknown?
        Otherwise, the value is NaN
    :return: The value in the target units
    """
    if isinstance(val, int | float):
        return float(val)

    expected = "unknown" if units is None else f"{units:~P}"
    try:
        qty = U.Quantity(val)
        if qty.unitless:
            return float(qty.m)
        if units is None:
            if not strict:
                return math.nan
            raise RateParameterError(
                f"Cannot convert {name} = '{val}': the required units are unknown"
            )
        if qty.check("[temperature]") and U.Quantity(1, units).check(
            "[energy] / [substance]"
        ):
            qty = qty * U.molar_gas_constant
        return float(qty.m_as(units))
    except (pint.DimensionalityError, pint.UndefinedUnitError) as err:
        raise RateParameterError(
            f"Invalid units for {name} = '{val}' (expected {expected}): {err}"
        ) from err


@dataclasses.dataclass
class ArrheniusFunction:
    """A modified Arrhenius function, k = A T^b exp(-E/RT).

    :param A: The pre-exponential factor, in the rate coefficient units
    :param b: The temperature exponent
    :param E: The activation energy [J/kmol]
    """

    A: float = 1.0
    b: float = 0.0
    E: float = 0.0

    def __post_init__(self):
        """Initialize attributes."""
        self.A = float(self.A)
        self.b = float(self.b)
        self.E = float(self.E)


def arrhenius_function_from_data(
    data: Sequence[ValueLike] | Mapping[str, ValueLike] | ArrheniusFunction,
    units: pint.Unit | None = None,
    strict: bool = True,
) -> ArrheniusFunction:
    """Build an Arrhenius function object from data.

    :param data: The parameters, as a {"A": ..., "b": ..., "Ea": ...} dictionary or
        an (A, b, Ea) sequence
    :param units: The units of the pre-exponential factor
    :param strict: Raise if A has units but `units` is unknown? Otherwise, A is NaN
    :return: The Arrhenius function object
    """
    if isinstance(data, ArrheniusFunction):
        return ArrheniusFunction(A=data.A, b=data.b, E=data.E)

    if isinstance(data, Mapping):
        missing = [k for k in ("A", "b", "Ea") if k not in data]
        if missing:
            raise RateParameterError(f"Missing Arrhenius parameters {missing}: {data}")
        a, b, e = data["A"], data["b"], data["Ea"]
    else:
        a, b, e = data

    return ArrheniusFunction(
        A=convert_value(a, units, "A", strict=strict),
        b=float(b),
        E=convert_value(e, units_.ENERGY, "Ea"),
    )


def arrhenius_parameters(k: ArrheniusFunction) -> dict[str, float]:
    """Get the document form of an Arrhenius function.

    :param k: The Arrhenius function object
    :return: The parameters A, b, Ea
    """
    return {"A": k.A, "b": k.b, "Ea": k.E}


@dataclasses.dataclass
class BlendingFunction:
    """A blending function for high and low-pressure rates.

    Types:
        Lindemann   - coeffs: (None)
        Troe        - coeffs: A, T3, T1, (T2)

    :param type_: The type of parametrization: "Lindemann", "Troe"
    :param coeffs: A list of coefficients for the parametrization
    """

    type_: BlendType = BlendType.LIND
    coeffs: list[float] | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.type_ = BlendType(self.type_)
        self.coeffs = None if self.coeffs is None else list(map(float, self.coeffs))


TROE_KEYS = ("A", "T3", "T1", "T2")


def blending_function_from_node(node: Mapping) -> BlendingFunction:
    """Read the blending function of a falloff rate from a reaction document.

    :param node: The reaction document
    :return: The blending function
    """
    for key in ("SRI", "Tsang"):
        if key in node:
            raise RateParameterError(f"Unsupported falloff function '{key}'", node=node)

    if "Troe" not in node:
        return BlendingFunction()

    troe = node["Troe"]
    coeffs = [troe[k] for k in TROE_KEYS if k in troe]
    return BlendingFunction(type_=BlendType.TROE, coeffs=coeffs)


class Rate(abc.ABC):
    """Base class for rate models.

    Subclasses declare what they need from the reaction equation through capability
    flags, rather than having the reaction test for concrete rate classes:

    :param drops_falloff_marker: Whether a "(+M)" term in the equation is optional
        notation that should be removed from the composition
    :param forbids_generic_collider: Whether an "M" term in the equation is an error
    """

    drops_falloff_marker: bool = False
    forbids_generic_collider: bool = False

    @property
    @abc.abstractmethod
    def type_(self) -> str:
        """The type of rate."""
        pass

    @property
    @abc.abstractmethod
    def shape(self) -> RateShape:
        """The form of rate law this describes."""
        pass

    @abc.abstractmethod
    def parameters(self) -> dict:
        """Get the document form of this rate.

        :return: The rate parameters, including the "type"
        """
        pass

    def check(self, equation: str, node: Mapping | None = None) -> None:
        """Check the parameters for consistency.

        :param equation: The reaction equation, for error messages
        :param node: The reaction document, for error messages
        """
        pass

    def validate(self, rxn, kin) -> None:
        """Check the rate against the reaction and the phases it occurs in.

        :param rxn: The reaction object
        :param kin: The governing kinetics object
        """
        pass


@dataclasses.dataclass
class ArrheniusRate(Rate):
    """Arrhenius rate, for elementary and three-body reactions.

    :param k: The Arrhenius function
    :param allow_negative_a: Whether a negative pre-exponential factor is intended
    :param rate_units: The units of the rate coefficient
    """

    k: ArrheniusFunction = dataclasses.field(default_factory=ArrheniusFunction)
    allow_negative_a: bool = False
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    type_ = "Arrhenius"
    shape = RateShape.ELEMENTARY
    key = "rate-constant"

    def __post_init__(self):
        """Initialize attributes."""
        self.k = arrhenius_function_from_data(self.k)

    def parameters(self) -> dict:
        params = {"type": self.type_, self.key: arrhenius_parameters(self.k)}
        if self.allow_negative_a:
            params["negative-A"] = True
        return params

    def check(self, equation: str, node: Mapping | None = None) -> None:
        if self.k.A < 0.0 and not self.allow_negative_a:
            raise RateParameterError(
                "Undeclared negative pre-exponential factor found in reaction "
                f"'{equation}'",
                node=node,
            )


@dataclasses.dataclass
class InterfaceArrheniusRate(ArrheniusRate):
    """Arrhenius rate for a reaction at an interface."""

    type_ = "interface-Arrhenius"
    shape = RateShape.INTERFACE


@dataclasses.dataclass
class StickingArrheniusRate(ArrheniusRate):
    """Sticking coefficient for the adsorption of a bulk-phase species.

    :param sticking_species: The adsorbing species, if it cannot be inferred
    """

    sticking_species: str | None = None

    type_ = "sticking-Arrhenius"
    shape = RateShape.INTERFACE
    key = "sticking-coefficient"

    def parameters(self) -> dict:
        params = super().parameters()
        if self.sticking_species is not None:
            params["sticking-species"] = self.sticking_species
        return params

    def validate(self, rxn, kin) -> None:
        equation = rxn.equation()
        if self.sticking_species is not None:
            if self.sticking_species not in rxn.reactants:
                raise RateParameterError(
                    f"Sticking species '{self.sticking_species}' is not a reactant "
                    f"in reaction '{equation}'",
                    node=rxn.input,
                )
            return

        bulk = [n for n in rxn.reactants if kin.species_phase(n).ndim() == 3]
        if len(bulk) != 1:
            raise RateParameterError(
                f"Sticking reaction '{equation}' must have exactly one bulk-phase "
                f"reactant, found {bulk}",
                node=rxn.input,
            )


@dataclasses.dataclass
class FalloffRate(Rate):
    """Falloff or chemically-activated rate, blending low and high-pressure limits.

    :param k: The high-pressure limiting Arrhenius function
    :param k0: The low-pressure limiting Arrhenius function
    :param f: The blending function, F(T, P_r)
    :param chemically_activated: Is this a chemically-activated rate?
    :param allow_negative_a: Whether negative pre-exponential factors are intended
    :param rate_units: The units of the rate coefficient
    """

    k: ArrheniusFunction = dataclasses.field(default_factory=ArrheniusFunction)
    k0: ArrheniusFunction = dataclasses.field(default_factory=ArrheniusFunction)
    f: BlendingFunction = dataclasses.field(default_factory=BlendingFunction)
    chemically_activated: bool = False
    allow_negative_a: bool = False
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    shape = RateShape.FALLOFF

    def __post_init__(self):
        """Initialize attributes."""
        self.k = arrhenius_function_from_data(self.k)
        self.k0 = arrhenius_function_from_data(self.k0)

    @property
    def type_(self) -> str:
        return "chemically-activated" if self.chemically_activated else "falloff"

    def parameters(self) -> dict:
        params = {
            "type": self.type_,
            "low-P-rate-constant": arrhenius_parameters(self.k0),
            "high-P-rate-constant": arrhenius_parameters(self.k),
        }
        if self.f.type_ == BlendType.TROE:
            params["Troe"] = dict(zip(TROE_KEYS, self.f.coeffs, strict=False))
        if self.allow_negative_a:
            params["negative-A"] = True
        return params

    def check(self, equation: str, node: Mapping | None = None) -> None:
        a0, a = self.k0.A, self.k.A
        if (a0 < 0.0 or a < 0.0) and not self.allow_negative_a:
            raise RateParameterError(
                f"Negative pre-exponential factor found for reaction '{equation}'",
                node=node,
            )
        if a0 * a < 0.0:
            raise RateParameterError(
                "High and low rate pre-exponential factors must either both be "
                f"positive or both be negative in reaction '{equation}'",
                node=node,
            )
        if self.f.type_ == BlendType.TROE and len(self.f.coeffs) not in (3, 4):
            raise RateParameterError(
                f"Troe parametrization requires 3 or 4 coefficients in reaction "
                f"'{equation}', got {self.f.coeffs}",
                node=node,
            )


@dataclasses.dataclass
class PlogRate(Rate):
    """Pressure-dependent Arrhenius rate, interpolated between pressures.

    :param ks: Rate coefficients at specific pressures, k_P1, k_P2, ...
    :param ps: An array of pressures, P1, P2, ... [Pa]
    :param rate_units: The units of the rate coefficient
    """

    ks: tuple[ArrheniusFunction, ...] = ()
    ps: tuple[float, ...] = ()
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    type_ = "pressure-dependent-Arrhenius"
    shape = RateShape.PRESSURE_DEPENDENT
    forbids_generic_collider = True

    def __post_init__(self):
        """Initialize attributes."""
        self.ks = tuple(map(arrhenius_function_from_data, self.ks))
        self.ps = tuple(map(float, self.ps))
        assert len(self.ks) == len(self.ps), f"Mismatched P-log: {self.ks} {self.ps}"

    def parameters(self) -> dict:
        return {
            "type": self.type_,
            "rate-constants": [
                {"P": p, **arrhenius_parameters(k)}
                for p, k in zip(self.ps, self.ks, strict=True)
            ],
        }

    def check(self, equation: str, node: Mapping | None = None) -> None:
        if not self.ps:
            raise RateParameterError(
                f"No rate constants given for P-log reaction '{equation}'", node=node
            )


@dataclasses.dataclass
class ChebyshevRate(Rate):
    """Chebyshev rate, a bivariate polynomial in 1/T and log(P).

    :param t_limits: The min/max temperature limits [K] for the Chebyshev fit
    :param p_limits: The min/max pressure limits [Pa] for the Chebyshev fit
    :param coeffs: The Chebyshev expansion coefficients
    :param rate_units: The units of the rate coefficient
    """

    t_limits: tuple[float, float] = (290.0, 3000.0)
    p_limits: tuple[float, float] = (1.0e-7, 1.0e14)
    coeffs: numpy.ndarray = dataclasses.field(
        default_factory=lambda: numpy.zeros((1, 1))
    )
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    type_ = "Chebyshev"
    shape = RateShape.PRESSURE_DEPENDENT
    drops_falloff_marker = True

    def __post_init__(self):
        """Initialize attributes."""
        self.t_limits = tuple(map(float, self.t_limits))
        self.p_limits = tuple(map(float, self.p_limits))
        self.coeffs = numpy.array(self.coeffs, dtype=float)

    def parameters(self) -> dict:
        return {
            "type": self.type_,
            "temperature-range": list(self.t_limits),
            "pressure-range": list(self.p_limits),
            "data": self.coeffs.tolist(),
        }

    def check(self, equation: str, node: Mapping | None = None) -> None:
        (t_min, t_max), (p_min, p_max) = self.t_limits, self.p_limits
        if not (t_min < t_max and p_min < p_max):
            raise RateParameterError(
                f"Invalid Chebyshev temperature {self.t_limits} or pressure "
                f"{self.p_limits} range in reaction '{equation}'",
                node=node,
            )
        if numpy.ndim(self.coeffs) != 2 or not numpy.size(self.coeffs):
            raise RateParameterError(
                f"Chebyshev data must be a non-empty matrix in reaction '{equation}'",
                node=node,
            )


@dataclasses.dataclass
class CustomFuncRate(Rate):
    """Rate given by a user-supplied function of temperature.

    :param func: The function k(T)
    :param rate_units: The units of the rate coefficient
    """

    func: Callable[[float], float] | None = None
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    type_ = "custom-rate-function"
    shape = RateShape.CUSTOM

    def parameters(self) -> dict:
        return {"type": self.type_}


# constructors
def _required(node: Mapping, key: str):
    if key not in node:
        raise RateParameterError(f"Missing rate parameter '{key}'", node=node)
    return node[key]


def _product(units: UnitStack) -> pint.Unit | None:
    return units.product() if len(units) else None


def arrhenius_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> ArrheniusRate:
    k = arrhenius_function_from_data(
        _required(node, "rate-constant"), _product(units), strict=strict
    )
    allow_neg = bool(node.get("negative-A", False))
    return ArrheniusRate(k=k, allow_negative_a=allow_neg, rate_units=units)


def interface_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> InterfaceArrheniusRate:
    k = arrhenius_function_from_data(
        _required(node, "rate-constant"), _product(units), strict=strict
    )
    allow_neg = bool(node.get("negative-A", False))
    return InterfaceArrheniusRate(k=k, allow_negative_a=allow_neg, rate_units=units)


def sticking_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> StickingArrheniusRate:
    data = _required(node, "sticking-coefficient")
    k = arrhenius_function_from_data(data, U.dimensionless)
    return StickingArrheniusRate(
        k=k,
        allow_negative_a=bool(node.get("negative-A", False)),
        rate_units=units,
        sticking_species=node.get("sticking-species"),
    )


def falloff_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> FalloffRate:
    """Build a falloff rate from a reaction document.

    The units passed in are those of the low-pressure limit of a falloff rate, which
    carries the extra third-body concentration factor.

    :param node: The reaction document
    :param units: The units of the rate coefficient
    :return: The rate
    """
    is_act = node.get("type") == "chemically-activated"
    low_units = high_units = units
    if len(units):
        low_units = units.join(1.0) if is_act else units
        high_units = units.join(2.0) if is_act else units.join(1.0)

    k0 = arrhenius_function_from_data(
        _required(node, "low-P-rate-constant"), _product(low_units), strict=strict
    )
    k = arrhenius_function_from_data(
        _required(node, "high-P-rate-constant"), _product(high_units), strict=strict
    )
    return FalloffRate(
        k=k,
        k0=k0,
        f=blending_function_from_node(node),
        chemically_activated=is_act,
        allow_negative_a=bool(node.get("negative-A", False)),
        rate_units=units,
    )


def plog_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> PlogRate:
    entries = sorted(
        (
            (convert_value(_required(d, "P"), units_.PRESSURE, "P"), d)
            for d in _required(node, "rate-constants")
        ),
        key=lambda x: x[0],
    )
    ps = [p for p, _ in entries]
    ks = [
        arrhenius_function_from_data(d, _product(units), strict=strict)
        for _, d in entries
    ]
    return PlogRate(ks=ks, ps=ps, rate_units=units)


def chebyshev_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> ChebyshevRate:
    t_limits = [
        convert_value(t, U.K, "T") for t in _required(node, "temperature-range")
    ]
    p_limits = [
        convert_value(p, units_.PRESSURE, "P")
        for p in _required(node, "pressure-range")
    ]
    return ChebyshevRate(
        t_limits=t_limits,
        p_limits=p_limits,
        coeffs=_required(node, "data"),
        rate_units=units,
    )


def custom_from_node(
    node: Mapping, units: UnitStack, strict: bool = True
) -> CustomFuncRate:
    # The function itself cannot come from a document; it is attached afterwards
    return CustomFuncRate(rate_units=units)


RATE_TYPES: dict[str, Callable[..., Rate]] = {
    "Arrhenius": arrhenius_from_node,
    "elementary": arrhenius_from_node,
    "reaction": arrhenius_from_node,
    "three-body": arrhenius_from_node,
    "interface-Arrhenius": interface_from_node,
    "sticking-Arrhenius": sticking_from_node,
    "falloff": falloff_from_node,
    "chemically-activated": falloff_from_node,
    "pressure-dependent-Arrhenius": plog_from_node,
    "Chebyshev": chebyshev_from_node,
    "custom-rate-function": custom_from_node,
}

DEFAULT_RATES: dict[str, Callable[[], Rate]] = {
    "Arrhenius": ArrheniusRate,
    "elementary": ArrheniusRate,
    "reaction": ArrheniusRate,
    "three-body": ArrheniusRate,
    "interface-Arrhenius": InterfaceArrheniusRate,
    "sticking-Arrhenius": StickingArrheniusRate,
    "falloff": FalloffRate,
    "chemically-activated": lambda: FalloffRate(chemically_activated=True),
    "pressure-dependent-Arrhenius": PlogRate,
    "Chebyshev": ChebyshevRate,
    "custom-rate-function": CustomFuncRate,
}


def from_node(
    node: Mapping, units: UnitStack | None = None, strict: bool = True
) -> Rate:
    """Build a rate object from a reaction (or rate) document.

    A reaction whose units cannot be determined (e.g. one with undeclared species)
    passes `strict=False`, so that parameters given with units are set to NaN rather
    than rejected.

    :param node: The document; its "type" selects the rate model (default Arrhenius)
    :param units: The units of the rate coefficient
    :param strict: Raise if a parameter has units but `units` is undetermined?
    :return: The rate object
    """
    units = UnitStack() if units is None else units
    type_ = node.get("type", "Arrhenius")
    if type_ not in RATE_TYPES:
        raise ReactionTypeError(f"Unknown rate type '{type_}'", node=node)
    return RATE_TYPES[type_](node, units, strict=strict)


def from_type(type_: str) -> Rate:
    """Build a default rate object of a given type.

    :param type_: The rate type
    :return: The rate object, with default parameters
    """
    if type_ not in DEFAULT_RATES:
        raise ReactionTypeError(f"Unknown rate type '{type_}'")
    return DEFAULT_RATES[type_]()
