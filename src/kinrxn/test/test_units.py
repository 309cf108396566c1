"""Test kinrxn.units functions."""

import pytest

from kinrxn import Kinetics, Phase, units
from kinrxn.data import reac
from kinrxn.units import U

GAS = Phase(
    "gas",
    species={"H": "H", "H2": "H2", "O": "O", "O2": "O2", "HO2": "HO2", "AR": "Ar"},
)
SURF = Phase("surf", species={"PT(S)": "Pt", "H(S)": "HPt"}, dim=2)
KIN = Kinetics([GAS])
KIN_SURF = Kinetics([GAS, SURF])

C3 = U.kmol / U.m**3
C2 = U.kmol / U.m**2


def test__unit_stack():
    """Test the UnitStack class."""
    stack0 = units.from_standard_units("kmol/m**3")
    assert len(stack0) == 1
    assert stack0.standard_units == C3
    assert stack0.standard_exponent == 0.0

    stack = stack0.join(1.0).update(units.PER_SECOND, 1.0).update(C3, -2.0)
    print(stack)
    assert len(stack) == 2
    assert stack.standard_exponent == -1.0
    assert stack.product() == U.m**3 / U.kmol / U.s

    # Stacks are never modified in place
    assert stack0.standard_exponent == 0.0
    assert stack.copy() == stack


def test__unit_stack__empty():
    """Test an undetermined unit stack."""
    stack = units.UnitStack()
    assert len(stack) == 0
    assert stack.standard_units is None
    assert stack.standard_exponent == 0.0
    assert str(stack) == "<undetermined>"


@pytest.mark.parametrize(
    "ndim, units_",
    [
        (3, U.kmol / U.m**3),
        (2, U.kmol / U.m**2),
        (1, U.kmol / U.m),
    ],
)
def test__concentration_units(ndim, units_):
    """Test units.concentration_units."""
    assert units.concentration_units(ndim) == units_


@pytest.mark.parametrize(
    "eq, type_, orders, exp, units_",
    [
        ("H => H", "elementary", None, 0.0, U.s**-1),
        ("H + O2 <=> HO2", "elementary", None, -1.0, U.m**3 / U.kmol / U.s),
        ("H + O2 + M <=> HO2 + M", "three-body", None, -2.0, None),
        ("H + O2 + AR <=> HO2 + AR", "three-body", None, -2.0, None),
        ("H + O2 (+M) <=> HO2 (+M)", "falloff", None, -2.0, None),
        ("2 O => O2", "elementary", {"O": 1.5}, -0.5, None),
    ],
)
def test__calculate_rate_coeff_units(eq, type_, orders, exp, units_):
    """Test units.calculate_rate_coeff_units."""
    rxn = reac.from_equation(eq, type_=type_, kin=KIN)
    if orders is not None:
        rxn.set_orders(orders)

    stack = rxn.calculate_rate_coeff_units(KIN)
    print(stack)
    assert stack.standard_units == C3
    assert stack.standard_exponent == pytest.approx(exp)
    if units_ is not None:
        assert stack.product() == units_


def test__calculate_rate_coeff_units__invalid():
    """Test that no units are determined for a reaction with unknown species."""
    rxn = reac.from_equation("H + X <=> HX", kin=KIN)
    assert not rxn.valid
    assert len(rxn.calculate_rate_coeff_units(KIN)) == 0


def test__calculate_rate_coeff_units__interface():
    """Test units.calculate_rate_coeff_units, for a surface reaction."""
    rxn = reac.from_equation("H2 + 2 PT(S) => 2 H(S)", kin=KIN_SURF)
    stack = rxn.calculate_rate_coeff_units(KIN_SURF)
    print(stack)
    assert len(stack) == 3
    assert stack.standard_units == C2
    assert stack.standard_exponent == -1.0
    assert stack.product() == U.m**5 / U.kmol**2 / U.s


if __name__ == "__main__":
    test__calculate_rate_coeff_units("2 O => O2", "elementary", {"O": 1.5}, -0.5, None)
