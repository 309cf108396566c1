"""Reaction classification and loading.

A reaction document need not say what kind of reaction it is. In a bulk phase, an
untyped reaction is three-body if its equation looks like one (see
`collider.is_three_body`) and elementary otherwise; at an interface, the rate
parameters decide between an interface and a sticking rate.
"""

import enum
import logging
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, InstanceOf

from . import collider
from . import equation as eq_
from .data import rate as rt_
from .data import reac
from .data.reac import Reaction
from .error import InputError, ReactionTypeError

logger = logging.getLogger(__name__)


class LoadStatus(str, enum.Enum):
    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"


class LoadResult(BaseModel):
    """The outcome of loading one reaction document."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: LoadStatus
    reaction: InstanceOf[Reaction] | None = None
    error: InstanceOf[InputError] | None = None

    def is_ok(self) -> bool:
        """Determine whether the reaction was loaded.

        :return: `True` if it was, `False` if it was skipped or invalid
        """
        return self.status == LoadStatus.OK


def reaction_type(node: Mapping, kin=None) -> str:
    """Determine the type of reaction a document describes.

    :param node: The reaction document
    :param kin: The governing kinetics object
    :return: The reaction type
    """
    if "type" in node:
        type_ = node["type"]
        if type_ not in reac.REACTION_TYPES:
            raise ReactionTypeError(f"Unknown reaction type '{type_}'", node=node)
        return type_

    if kin is None or kin.thermo(kin.reaction_phase_index()).ndim() == 3:
        equation = str(node.get("equation", ""))
        rcts, prds, *_ = eq_.parse(equation, kin=kin, node=node)
        type_ = "three-body" if collider.is_three_body(rcts, prds) else "elementary"
        logger.debug("Classified '%s' as %s", equation, type_)
        return type_

    if "rate-constant" in node:
        return "interface-Arrhenius"
    if "sticking-coefficient" in node:
        return "sticking-Arrhenius"
    raise ReactionTypeError("Unable to infer interface reaction type", node=node)


def new_reaction(node: Mapping | str, kin=None) -> Reaction:
    """Build a reaction of the right kind from a document.

    Given a reaction type instead of a document, this returns an empty reaction of
    that type with a default rate.

    :param node: The reaction document, or a reaction type
    :param kin: The governing kinetics object
    :return: The reaction object
    """
    if isinstance(node, str):
        rxn = reac.reaction_class(node)()
        rxn.set_rate(rt_.from_type(node))
        return rxn

    cls = reac.reaction_class(reaction_type(node, kin))
    return cls.from_node(node, kin)


def load_reaction(node: Mapping, kin) -> LoadResult:
    """Load a reaction document into a kinetics object's species set.

    The reaction is built, its species are checked against the kinetics object, and
    its rate is validated against the phases it occurs in.

    :param node: The reaction document
    :param kin: The governing kinetics object
    :return: The result; skipped if the kinetics object drops reactions with
        undeclared species
    """
    try:
        rxn = new_reaction(node, kin)
        if not rxn.check_species(kin):
            return LoadResult(status=LoadStatus.SKIPPED, reaction=rxn)
        rxn.validate(kin)
    except InputError as err:
        return LoadResult(status=LoadStatus.ERROR, error=err)

    return LoadResult(status=LoadStatus.OK, reaction=rxn)


def reactions_from_data(nodes: Iterable[Mapping], kin) -> list[Reaction]:
    """Load reaction documents, dropping those with undeclared species if allowed.

    :param nodes: The reaction documents
    :param kin: The governing kinetics object
    :return: The reaction objects
    """
    rxns = []
    for node in nodes:
        res = load_reaction(node, kin)
        if res.status == LoadStatus.ERROR:
            raise res.error
        if res.status == LoadStatus.SKIPPED:
            logger.info("Skipping reaction '%s'", res.reaction.equation())
            continue
        rxns.append(res.reaction)
    return rxns
