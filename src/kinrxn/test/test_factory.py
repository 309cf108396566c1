"""Test kinrxn.factory functions."""

import logging

import pytest

import kinrxn
from kinrxn import Kinetics, Phase, factory
from kinrxn.data import rate, reac
from kinrxn.error import BalanceError, ErrorCode, ReactionTypeError

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
        "AR": "Ar",
    },
)
SURF = Phase("surf", species={"PT(S)": "Pt", "H(S)": "HPt"}, dim=2)
KIN = Kinetics([GAS])
KIN_SKIP = Kinetics([GAS], skip_undeclared_species=True)
KIN_SURF = Kinetics([GAS, SURF])

RATE = {"A": 1.0e13, "b": 0.0, "Ea": 0.0}
RATE_UNITS = {"A": "1e13 cm^3/mol/s", "b": 0, "Ea": "10 kcal/mol"}


@pytest.mark.parametrize(
    "node, kin, type_",
    [
        ({"equation": "H + O2 <=> O + OH"}, KIN, "elementary"),
        ({"equation": "H + O2 + AR <=> HO2 + AR"}, KIN, "three-body"),
        ({"equation": "O + O + AR <=> O2 + AR"}, KIN, "three-body"),
        ({"equation": "H + O2 + M <=> HO2 + M"}, KIN, "three-body"),
        ({"equation": "H + OH <=> H2O", "type": "three-body"}, KIN, "three-body"),
        ({"equation": "H + O2 (+M) <=> HO2 (+M)", "type": "falloff"}, KIN, "falloff"),
        ({"equation": "H + O2 + AR <=> HO2 + AR"}, None, "three-body"),
        ({"equation": "2 H(S) => H2 + 2 PT(S)", "rate-constant": RATE}, KIN_SURF,
         "interface-Arrhenius"),
        ({"equation": "H2 + 2 PT(S) => 2 H(S)", "sticking-coefficient": RATE},
         KIN_SURF, "sticking-Arrhenius"),
    ],
)  # fmt: skip
def test__reaction_type(node, kin, type_):
    """Test factory.reaction_type."""
    assert factory.reaction_type(node, kin) == type_


@pytest.mark.parametrize(
    "node, kin, match",
    [
        ({"equation": "H + O2 <=> HO2", "type": "inelastic"}, KIN, "Unknown"),
        ({"equation": "2 H(S) => H2 + 2 PT(S)"}, KIN_SURF, "interface"),
    ],
)
def test__reaction_type__error(node, kin, match):
    """Test factory.reaction_type, for unknown or uninferable types."""
    with pytest.raises(ReactionTypeError, match=match) as exc_info:
        factory.reaction_type(node, kin)
    assert exc_info.value.code == ErrorCode.UNKNOWN_REACTION_TYPE


@pytest.mark.parametrize(
    "type_, cls, rate_cls",
    [
        ("elementary", reac.ElementaryReaction, rate.ArrheniusRate),
        ("three-body", reac.ThreeBodyReaction, rate.ArrheniusRate),
        ("falloff", reac.FalloffReaction, rate.FalloffRate),
        ("chemically-activated", reac.FalloffReaction, rate.FalloffRate),
        ("pressure-dependent-Arrhenius", reac.ElementaryReaction, rate.PlogRate),
        ("Chebyshev", reac.ElementaryReaction, rate.ChebyshevRate),
        ("custom-rate-function", reac.CustomRateReaction, rate.CustomFuncRate),
    ],
)
def test__new_reaction__type(type_, cls, rate_cls):
    """Test factory.new_reaction, given only a reaction type."""
    rxn = factory.new_reaction(type_)
    assert type(rxn) is cls
    assert isinstance(rxn.rate, rate_cls)
    assert rxn.reactants == {}
    assert rxn.products == {}
    if cls is reac.FalloffReaction:
        assert rxn.type_ == type_


@pytest.mark.parametrize(
    "node, kin, status, code",
    [
        ({"equation": "2 H2 + O2 => 2 H2O", "rate-constant": RATE}, KIN, "ok", None),
        ({"equation": "H + XE <=> HXE", "rate-constant": RATE}, KIN, "error",
         ErrorCode.UNDECLARED_SPECIES),
        ({"equation": "H + XE <=> O + OH", "rate-constant": RATE_UNITS}, KIN_SKIP,
         "skipped", None),
        ({"equation": "H + XE <=> O + OH", "rate-constant": RATE_UNITS}, KIN, "error",
         ErrorCode.UNDECLARED_SPECIES),
        ({"equation": "H + XE <=> HXE", "rate-constant": RATE}, KIN_SKIP, "skipped",
         None),
        ({"equation": "H2 + O2 => H2O", "rate-constant": RATE}, KIN, "error",
         ErrorCode.UNBALANCED_EQUATION),
        ({"equation": "H2 + O2 => => H2O", "rate-constant": RATE}, KIN, "error",
         ErrorCode.MALFORMED_EQUATION),
    ],
)  # fmt: skip
def test__load_reaction(node, kin, status, code):
    """Test factory.load_reaction."""
    res = factory.load_reaction(node, kin)
    print(res)
    assert res.status == status
    assert res.is_ok() == (status == "ok")
    if code is None:
        assert isinstance(res.reaction, reac.Reaction)
        assert res.error is None
    else:
        assert res.reaction is None
        assert res.error.code == code


def test__reactions_from_data(caplog):
    """Test factory.reactions_from_data."""
    nodes = [
        {"equation": "2 H2 + O2 => 2 H2O", "rate-constant": RATE},
        {"equation": "H + XE <=> HXE", "rate-constant": RATE},
        {"equation": "H + O2 + AR <=> HO2 + AR", "rate-constant": RATE},
    ]
    with caplog.at_level(logging.INFO, logger="kinrxn"):
        rxns = kinrxn.reactions_from_data(nodes, KIN_SKIP)

    assert [r.type_ for r in rxns] == ["elementary", "three-body"]
    assert "Skipping reaction 'H + XE <=> HXE'" in caplog.text

    nodes.append({"equation": "H2 + O2 => H2O", "rate-constant": RATE})
    with pytest.raises(BalanceError):
        kinrxn.reactions_from_data(nodes, KIN_SKIP)


if __name__ == "__main__":
    test__new_reaction__type("falloff", reac.FalloffReaction, rate.FalloffRate)
