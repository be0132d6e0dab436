import abc
import typing

from .deferred import Deferred, resolve

RelationshipTarget = typing.Union["ResourceDescription", Deferred["ResourceDescription"]]


class ResourceDescription(metaclass=abc.ABCMeta):
    """
    A :py:class:`ResourceDescription` holds the declarative metadata of a
    JSON:API resource type: its name, the fields it exposes, the fields
    exposed when the client asks for no particular fields, and the resources
    it is related to.

    Descriptions are expected to be created once per resource type and are
    shared (never copied) by every translation that refers to them.
    """

    @property
    @abc.abstractmethod
    def type(self) -> str:
        """
        The unique name of the resource type, e.g. ``MailAccount``.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def fields(self) -> typing.Sequence[str]:
        """
        The names of all fields the resource type can expose.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def default_fields(self) -> typing.Sequence[str]:
        """
        The fields exposed when no sparse fieldset was requested.
        Expected to be a subset of :py:attr:`fields`.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def relationships(self) -> "ResourceDescriptionList":
        """
        The descriptions of the directly related resources, in declaration order.
        """
        ...  # pragma: nocover

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type}>"


class ResourceDescriptionList(typing.Sequence[ResourceDescription]):
    """
    An ordered collection of :py:class:`ResourceDescription` objects.
    An item is only added once; membership is decided by identity, not by
    type name, so two distinct descriptions sharing a type may both be held.
    """

    _items: typing.List[ResourceDescription]

    T = typing.TypeVar("T")

    def append(self, item: ResourceDescription) -> bool:
        """
        Appends the description unless the very same object is already in the list.

        :param ResourceDescription item: the description to add.
        :return: :py:const:`True` if the item was added.
        """
        if not isinstance(item, ResourceDescription):
            raise TypeError(f"{item!r} is not a ResourceDescription")
        if item in self:
            return False
        self._items.append(item)
        return True

    def extend(self, items: typing.Iterable[ResourceDescription]) -> None:
        for item in items:
            self.append(item)

    def map(self, fn: typing.Callable[[ResourceDescription], T]) -> typing.List[T]:
        return [fn(item) for item in self._items]

    def find_by_type(self, type: str) -> typing.Optional[ResourceDescription]:
        for item in self._items:
            if item.type == type:
                return item
        return None

    def __contains__(self, item: object) -> bool:
        return any(item is i for i in self._items)

    @typing.overload
    def __getitem__(self, index: int) -> ResourceDescription:
        ...  # pragma: nocover

    @typing.overload
    def __getitem__(self, index: slice) -> typing.Sequence[ResourceDescription]:
        ...  # pragma: nocover

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> typing.Iterator[ResourceDescription]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}([{', '.join(repr(i) for i in self._items)}])"

    def __init__(self, items: typing.Iterable[ResourceDescription] = ()):
        self._items = []
        self.extend(items)


class StaticResourceDescription(ResourceDescription):
    """
    A :py:class:`ResourceDescription` whose metadata is given to the constructor.

    :param str type: The name of the resource type.
    :param Iterable[str] fields: The names of the fields the resource exposes.
    :param Optional[Iterable[str]] default_fields: The default fields. All fields if omitted.
    :param Iterable[Union[ResourceDescription, Deferred[ResourceDescription]]] relationships:
        The related resource descriptions. :py:class:`Deferred` items get resolved
        the first time :py:attr:`relationships` is accessed.
    """

    _type: str
    _fields: typing.Tuple[str, ...]
    _default_fields: typing.Tuple[str, ...]
    _relationships: typing.Sequence[RelationshipTarget]
    _resolved_relationships: typing.Optional[ResourceDescriptionList] = None

    @property
    def type(self) -> str:
        return self._type

    @property
    def fields(self) -> typing.Sequence[str]:
        return self._fields

    @property
    def default_fields(self) -> typing.Sequence[str]:
        return self._default_fields

    @property
    def relationships(self) -> ResourceDescriptionList:
        if self._resolved_relationships is None:
            self._resolved_relationships = ResourceDescriptionList(
                resolve(rel) for rel in self._relationships
            )
        return self._resolved_relationships

    def __init__(
        self,
        type: str,
        fields: typing.Iterable[str] = (),
        default_fields: typing.Optional[typing.Iterable[str]] = None,
        relationships: typing.Iterable[RelationshipTarget] = (),
    ) -> None:
        self._type = type
        self._fields = tuple(fields)
        self._default_fields = (
            tuple(default_fields) if default_fields is not None else self._fields
        )
        self._relationships = tuple(relationships)
