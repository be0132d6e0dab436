"""
Traversal of the relationship graph spanned by a :py:class:`ResourceDescription`.

Every function walks the graph depth-first in pre-order: a description is
visited before its relationships, and relationships are visited in the order
they were declared.  For the graph

.. code-block:: text

   entity
   └── entity_1
       ├── entity_1_1
       │   └── entity_1_1_1
       └── entity_1_2
           └── entity_1_2_1

:py:func:`collect_paths` yields ``entity``, ``entity.entity_1``,
``entity.entity_1.entity_1_1``, ``entity.entity_1.entity_1_1.entity_1_1_1``,
``entity.entity_1.entity_1_2`` and ``entity.entity_1.entity_1_2.entity_1_2_1``.
"""
import logging
import typing

from .exceptions import CyclicRelationshipError
from .models import ResourceDescription, ResourceDescriptionList

logger = logging.getLogger(__name__)


class Visit(typing.NamedTuple):
    description: ResourceDescription
    path: typing.Tuple[str, ...]


def traverse(root: ResourceDescription, include_root: bool = False) -> typing.Iterator[Visit]:
    """
    Yields a :py:class:`Visit` for every description reachable from ``root``.

    A description that is reachable through more than one branch is visited once
    per branch.  A description that is reachable from itself makes the traversal
    fail.

    :param ResourceDescription root: the description to start from.
    :param bool include_root: :py:const:`True` to visit ``root`` itself first.
    :raises CyclicRelationshipError: if the graph contains a cycle.
    """
    ancestors: typing.List[ResourceDescription] = [root]

    def _(descr: ResourceDescription, path: typing.Tuple[str, ...]) -> typing.Iterator[Visit]:
        for rel in descr.relationships:
            rel_path = path + (rel.type,)
            if any(rel is a for a in ancestors):
                raise CyclicRelationshipError(
                    ((root.type,) + rel_path) if not include_root else rel_path
                )
            yield Visit(rel, rel_path)
            ancestors.append(rel)
            try:
                yield from _(rel, rel_path)
            finally:
                ancestors.pop()

    if include_root:
        yield Visit(root, (root.type,))
        yield from _(root, (root.type,))
    else:
        yield from _(root, ())


def collect_descriptions(
    root: ResourceDescription, include_root: bool = False
) -> ResourceDescriptionList:
    """
    Returns every description reachable from ``root``, each at most once.
    """
    result = ResourceDescriptionList(visit.description for visit in traverse(root, include_root))
    logger.debug("descriptions reachable from %s: %r", root.type, result)
    return result


def collect_types(root: ResourceDescription, include_root: bool = False) -> typing.List[str]:
    """
    Returns the type names of the descriptions reachable from ``root``.
    Names are not deduplicated: a type appearing in two branches is listed twice.
    """
    return [visit.description.type for visit in traverse(root, include_root)]


def collect_paths(root: ResourceDescription, include_root: bool = False) -> typing.List[str]:
    """
    Returns the dot-joined relationship paths reachable from ``root``.
    """
    return [".".join(visit.path) for visit in traverse(root, include_root)]


class RelationshipGraphResolver:
    """
    Binds the traversal functions to a single root description.
    """

    root: ResourceDescription

    def types(self, include_root: bool = False) -> typing.List[str]:
        return collect_types(self.root, include_root)

    def descriptions(self, include_root: bool = False) -> ResourceDescriptionList:
        return collect_descriptions(self.root, include_root)

    def paths(self, include_root: bool = False) -> typing.List[str]:
        return collect_paths(self.root, include_root)

    def find(self, type: str) -> typing.Optional[ResourceDescription]:
        return self.descriptions(include_root=True).find_by_type(type)

    def __init__(self, root: ResourceDescription):
        self.root = root
