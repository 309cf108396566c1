"""Test kinrxn.data.reac functions."""

import math

import pytest

from kinrxn import Kinetics, Phase, factory
from kinrxn.data import rate, reac
from kinrxn.error import (
    ColliderError,
    RateParameterError,
    RateTypeError,
    ReactionOrderError,
    ReactionTypeError,
)

GAS = Phase(
    "gas",
    species={
        "H": "H",
        "H2": "H2",
        "O": "O",
        "O2": "O2",
        "OH": "OH",
        "H2O": "H2O",
        "HO2": "HO2",
        "H2O2": "H2O2",
        "CH3": "CH3",
        "CH4": "CH4",
        "AR": "Ar",
        "N2": "N2",
    },
)
SURF = Phase("surf", species={"PT(S)": "Pt", "H(S)": "HPt", "O(S)": "OPt"}, dim=2)
KIN = Kinetics([GAS])
KIN_SURF = Kinetics([GAS, SURF])

RATE = {"A": 1.0e13, "b": 0.0, "Ea": 0.0}
LOW_RATE = {"A": 6.366e14, "b": -0.72, "Ea": 0.0}
HIGH_RATE = {"A": 4.65e9, "b": 0.44, "Ea": 0.0}
TROE = {"A": 0.5, "T3": 1.0e-30, "T1": 1.0e30}
EFFS = {"AR": 0.67, "H2O": 14.0}


@pytest.mark.parametrize(
    "node, type_, rcts, prds, eq, partner",
    [
        (
            {"equation": "H + O2 <=> O + OH", "rate-constant": RATE},
            "elementary",
            {"H": 1.0, "O2": 1.0},
            {"O": 1.0, "OH": 1.0},
            "H + O2 <=> O + OH",
            None,
        ),
        (
            {"equation": "2 O + M <=> O2 + M", "type": "three-body",
             "rate-constant": RATE, "efficiencies": EFFS},
            "three-body",
            {"O": 2.0},
            {"O2": 1.0},
            "2 O + M <=> O2 + M",
            "M",
        ),
        (
            {"equation": "H + O2 + AR <=> HO2 + AR", "rate-constant": RATE},
            "three-body",
            {"H": 1.0, "O2": 1.0},
            {"HO2": 1.0},
            "H + O2 + AR <=> HO2 + AR",
            "AR",
        ),
        (
            {"equation": "H + O2 (+M) <=> HO2 (+M)", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE,
             "Troe": TROE, "efficiencies": EFFS},
            "falloff",
            {"H": 1.0, "O2": 1.0},
            {"HO2": 1.0},
            "H + O2 (+M) <=> HO2 (+M)",
            "M",
        ),
        (
            {"equation": "H + O2 (+ AR) <=> HO2 (+ AR)", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE},
            "falloff",
            {"H": 1.0, "O2": 1.0},
            {"HO2": 1.0},
            "H + O2 (+AR) <=> HO2 (+AR)",
            "AR",
        ),
        (
            {"equation": "OH + OH (+M) <=> H2O2 (+M)", "type": "chemically-activated",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE},
            "chemically-activated",
            {"OH": 2.0},
            {"H2O2": 1.0},
            "2 OH (+M) <=> H2O2 (+M)",
            "M",
        ),
    ],
)  # fmt: skip
def test__from_node(node, type_, rcts, prds, eq, partner):
    """Test Reaction.from_node, for each kind of reaction."""
    rxn = factory.new_reaction(node, KIN)
    print(rxn)
    assert rxn.type_ == type_
    assert rxn.reactants == rcts
    assert rxn.products == prds
    assert rxn.equation() == eq
    assert rxn.valid
    assert rxn.check_species(KIN)

    third_body = rxn.colliders()
    if partner is None:
        assert third_body is None
        return

    assert third_body.partner() == partner
    assert third_body.specified_collision_partner == (partner != "M")
    assert third_body.mass_action == (type_ == "three-body")
    if partner == "M" and "efficiencies" in node:
        assert third_body.efficiencies == EFFS
        assert third_body.default_efficiency == 1.0
    if partner != "M":
        assert third_body.efficiencies == {partner: 1.0}
        assert third_body.default_efficiency == 0.0

    # The equation can be read back in
    rxn_ = reac.from_equation(rxn.equation(), type_=type_, kin=KIN)
    assert rxn_.reactants == rxn.reactants
    assert rxn_.products == rxn.products
    assert rxn_.colliders().partner() == partner


@pytest.mark.parametrize(
    "node, keys",
    [
        (
            {"equation": "H + O2 <=> O + OH", "rate-constant": RATE},
            ["equation", "rate-constant"],
        ),
        (
            {"equation": "2 O + M <=> O2 + M", "type": "three-body",
             "rate-constant": RATE, "efficiencies": EFFS, "default-efficiency": 0.5},
            ["type", "equation", "rate-constant", "efficiencies",
             "default-efficiency"],
        ),
        (
            {"equation": "H + O2 + AR <=> HO2 + AR", "rate-constant": RATE},
            ["equation", "rate-constant"],
        ),
        (
            {"equation": "H + O2 (+M) <=> HO2 (+M)", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE,
             "Troe": TROE, "efficiencies": EFFS},
            ["type", "equation", "low-P-rate-constant", "high-P-rate-constant",
             "Troe", "efficiencies"],
        ),
        (
            {"equation": "H + O2 (+M) <=> HO2 (+M)", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE},
            ["type", "equation", "low-P-rate-constant", "high-P-rate-constant"],
        ),
        (
            {"equation": "2 H2 + O2 => 2 H2O", "rate-constant": RATE,
             "orders": {"H2": 1.5}, "duplicate": True},
            ["equation", "rate-constant", "duplicate", "orders"],
        ),
    ],
)  # fmt: skip
def test__parameters(node, keys):
    """Test Reaction.parameters, without the original input."""
    rxn = factory.new_reaction(node, KIN)
    params = rxn.parameters(with_input=False)
    print(params)
    assert list(params) == keys
    assert params["equation"] == rxn.equation()

    # Reading the parameters back in gives the same reaction
    rxn_ = factory.new_reaction(params, KIN)
    assert type(rxn_) is type(rxn)
    assert rxn_.parameters(with_input=False) == params


def test__parameters__with_input():
    """Test Reaction.parameters, keeping fields that are not understood."""
    node = {
        "equation": "2 H2 + O2 => 2 H2O",
        "rate-constant": RATE,
        "orders": {"H2": 1.5},
        "duplicate": True,
        "id": "water-formation",
        "note": "for testing",
    }
    rxn = factory.new_reaction(node, KIN)
    assert rxn.id == "water-formation"
    assert rxn.duplicate
    assert rxn.orders == {"H2": 1.5}

    params = rxn.parameters()
    assert params["note"] == "for testing"
    assert list(params) == [
        "equation",
        "rate-constant",
        "id",
        "note",
        "duplicate",
        "orders",
    ]

    # The stored input is a copy
    node["note"] = "changed"
    assert rxn.parameters()["note"] == "for testing"


@pytest.mark.parametrize(
    "node, exc, match",
    [
        (
            {"equation": "H + O2 <=> HO2", "type": "three-body",
             "rate-constant": RATE},
            ColliderError,
            "does not contain third body",
        ),
        (
            {"equation": "H + O2 + AR + N2 <=> HO2 + AR + N2",
             "type": "three-body", "rate-constant": RATE},
            ColliderError,
            "more than one",
        ),
        (
            {"equation": "H + O2 <=> HO2", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE},
            ColliderError,
            "pressure-dependent third body",
        ),
        (
            {"equation": "H + O2 (+M) <=> HO2 (+AR)", "type": "falloff",
             "low-P-rate-constant": LOW_RATE, "high-P-rate-constant": HIGH_RATE},
            ColliderError,
            "Unable to match",
        ),
        (
            {"equation": "H + O2 + M <=> HO2 + M",
             "type": "pressure-dependent-Arrhenius",
             "rate-constants": [{"P": "1 atm", **RATE}]},
            ColliderError,
            "superfluous",
        ),
        (
            {"equation": "H + O2 <=> HO2", "type": "inelastic",
             "rate-constant": RATE},
            ReactionTypeError,
            "Unknown reaction type",
        ),
        (
            {"equation": "H + O2 <=> HO2",
             "rate-constant": {"A": -1.0, "b": 0.0, "Ea": 0.0}},
            RateParameterError,
            "negative pre-exponential",
        ),
    ],
)  # fmt: skip
def test__from_node__error(node, exc, match):
    """Test Reaction.from_node, for invalid documents."""
    with pytest.raises(exc, match=match) as exc_info:
        factory.new_reaction(node, KIN)

    err = exc_info.value
    print(err)
    assert err.node == node
    assert str(err).endswith(f"| in reaction: {node['equation']}")


def test__chebyshev__falloff_marker():
    """Test that a falloff marker is dropped from a Chebyshev reaction."""
    node = {
        "equation": "CH3 + H (+M) <=> CH4 (+M)",
        "type": "Chebyshev",
        "temperature-range": [290.0, 3000.0],
        "pressure-range": ["0.01 atm", "100 atm"],
        "data": [[8.2883, -1.1397], [1.9764, 1.0037]],
    }
    with pytest.warns(DeprecationWarning, match="deprecated"):
        rxn = factory.new_reaction(node, KIN)

    assert rxn.type_ == "elementary"
    assert rxn.reactants == {"CH3": 1.0, "H": 1.0}
    assert rxn.products == {"CH4": 1.0}
    assert rxn.equation() == "CH3 + H <=> CH4"
    assert rxn.rate_units.standard_exponent == -1.0
    assert rxn.parameters(with_input=False)["type"] == "Chebyshev"


@pytest.mark.parametrize(
    "type_, rate_",
    [
        ("elementary", rate.FalloffRate()),
        ("elementary", rate.CustomFuncRate()),
        ("three-body", rate.PlogRate()),
        ("three-body", rate.FalloffRate()),
        ("falloff", rate.ArrheniusRate()),
        ("custom-rate-function", rate.ArrheniusRate()),
    ],
)
def test__set_rate__incompatible(type_, rate_):
    """Test Reaction.set_rate, for rates of the wrong shape."""
    rxn = factory.new_reaction(type_)
    rate0 = rxn.rate
    with pytest.raises(RateTypeError, match="Incompatible"):
        rxn.set_rate(rate_)
    assert rxn.rate is rate0


@pytest.mark.parametrize(
    "eq, orders, flags, exc",
    [
        ("2 H2 + O2 => 2 H2O", {"H2": 1.5}, {}, None),
        ("2 H2 + O2 <=> 2 H2O", {"H2": 1.5}, {}, ReactionOrderError),
        ("2 H2 + O2 => 2 H2O", {"H2": -0.5}, {}, ReactionOrderError),
        ("2 H2 + O2 => 2 H2O", {"H2": -0.5}, {"negative-orders": True}, None),
        ("2 H2 + O2 => 2 H2O", {"H2O": 0.5}, {}, ReactionOrderError),
        ("2 H2 + O2 => 2 H2O", {"H2O": 0.5}, {"nonreactant-orders": True}, None),
    ],
)
def test__orders(eq, orders, flags, exc):
    """Test reaction orders."""
    node = {"equation": eq, "rate-constant": RATE, "orders": orders, **flags}
    if exc is not None:
        with pytest.raises(exc):
            factory.new_reaction(node, KIN)
        return

    rxn = factory.new_reaction(node, KIN)
    assert rxn.orders == orders
    assert rxn.parameters(with_input=False)["orders"] == orders


def test__set_orders():
    """Test Reaction.set_orders."""
    rxn = reac.from_equation("2 H2 + O2 => 2 H2O", kin=KIN)
    rxn.set_orders({"H2": 2.0})
    assert rxn.orders == {"H2": 2.0}

    with pytest.raises(ReactionOrderError, match="non-reactant"):
        rxn.set_orders({"H2O": 1.0})
    assert rxn.orders == {"H2": 2.0}

    rxn = reac.from_equation("2 H2 + O2 <=> 2 H2O", kin=KIN)
    with pytest.raises(ReactionOrderError, match="irreversible"):
        rxn.set_orders({"H2": 2.0})
    assert rxn.orders == {}

    # Restored when the rate check fails too
    bad_rate = rate.ArrheniusRate(k=rate.ArrheniusFunction(A=-1.0e10))
    rxn = reac.from_equation("2 H2 + O2 => 2 H2O", rate_=bad_rate, kin=KIN)
    with pytest.raises(RateParameterError, match="negative pre-exponential"):
        rxn.set_orders({"H2": 2.0})
    assert rxn.orders == {}


@pytest.mark.parametrize(
    "type_, eq1, eq2, eq",
    [
        ("three-body", "H + O2 + AR <=> HO2 + AR", "H + O2 + M <=> HO2 + M",
         "H + O2 + M <=> HO2 + M"),
        ("falloff", "H + O2 (+AR) <=> HO2 (+AR)", "H + O2 (+M) <=> HO2 (+M)",
         "H + O2 (+M) <=> HO2 (+M)"),
    ],
)  # fmt: skip
def test__set_equation__partner_to_generic(type_, eq1, eq2, eq):
    """Test Reaction.set_equation, replacing an explicit partner with M."""
    rxn = reac.from_equation(eq1, type_=type_, kin=KIN)
    assert rxn.colliders().specified_collision_partner

    rxn.set_equation(eq2, KIN)
    third_body = rxn.colliders()
    assert not third_body.specified_collision_partner
    assert third_body.default_efficiency == 1.0
    assert third_body.efficiencies == {}
    assert rxn.equation() == eq
    assert "default-efficiency" not in rxn.parameters()


def test__from_node__undeclared_species_units():
    """Test Reaction.from_node, for a reaction with undeclared species and units."""
    node = {
        "equation": "H + XE <=> O + OH",
        "rate-constant": {"A": "1e13 cm^3/mol/s", "b": 0, "Ea": "10 kcal/mol"},
    }
    rxn = reac.ElementaryReaction.from_node(node, KIN)
    assert not rxn.valid
    assert len(rxn.rate_units) == 0
    assert math.isnan(rxn.rate.k.A)
    assert rxn.rate.k.E == pytest.approx(4.184e7)
    assert not rxn.check_species(Kinetics([GAS], skip_undeclared_species=True))


@pytest.mark.parametrize(
    "node, rate_type, valid",
    [
        (
            {"equation": "2 H(S) => H2 + 2 PT(S)",
             "rate-constant": {"A": 3.7e21, "b": 0.0, "Ea": 6.74e7}},
            "interface-Arrhenius",
            True,
        ),
        (
            {"equation": "H2 + 2 PT(S) => 2 H(S)",
             "sticking-coefficient": {"A": 0.046, "b": 0.0, "Ea": 0.0}},
            "sticking-Arrhenius",
            True,
        ),
        (
            {"equation": "2 O(S) => O2 + 2 PT(S)",
             "sticking-coefficient": {"A": 0.046, "b": 0.0, "Ea": 0.0}},
            "sticking-Arrhenius",
            False,
        ),
        (
            {"equation": "2 O(S) => O2 + 2 PT(S)", "sticking-species": "O(S)",
             "sticking-coefficient": {"A": 0.046, "b": 0.0, "Ea": 0.0}},
            "sticking-Arrhenius",
            True,
        ),
    ],
)  # fmt: skip
def test__interface(node, rate_type, valid):
    """Test interface reactions."""
    rxn = factory.new_reaction(node, KIN_SURF)
    print(rxn)
    assert rxn.type_ == "elementary"
    assert rxn.rate.type_ == rate_type
    assert rxn.parameters(with_input=False)["type"] == rate_type
    assert rxn.rate_units.standard_units == SURF.standard_concentration_units()
    assert rxn.check_species(KIN_SURF)

    if valid:
        rxn.validate(KIN_SURF)
    else:
        with pytest.raises(RateParameterError, match="bulk-phase"):
            rxn.validate(KIN_SURF)


def test__interface__error():
    """Test interface reactions, without a rate."""
    node = {"equation": "2 H(S) => H2 + 2 PT(S)"}
    with pytest.raises(ReactionTypeError, match="interface reaction type"):
        factory.new_reaction(node, KIN_SURF)


def test__from_data():
    """Test reac.from_data."""
    rxn = reac.from_data(
        {"H": 1, "O2": 1},
        {"HO2": 1},
        rate_={"type": "falloff", "low-P-rate-constant": LOW_RATE,
               "high-P-rate-constant": HIGH_RATE},
        type_="falloff",
    )  # fmt: skip
    assert isinstance(rxn, reac.FalloffReaction)
    assert isinstance(rxn.rate, rate.FalloffRate)
    assert rxn.equation() == "H + O2 (+M) <=> HO2 (+M)"
    assert rxn.reactants == {"H": 1.0, "O2": 1.0}

    with pytest.raises(RateTypeError):
        reac.from_data({"H": 1}, {"H": 1}, rate_=rate.FalloffRate())


if __name__ == "__main__":
    test__parameters__with_input()
    # test__chebyshev__falloff_marker()
