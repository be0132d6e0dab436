"""
Declaring resource descriptions with an inner ``Meta`` class.

.. code-block:: python

   from jsonapi_query.declarative import describe
   from jsonapi_query.deferred import Deferred

   @describe
   class MailAccount:
       class Meta:
           fields = ["name", "address", "inbox_address"]
           default_fields = ["name", "address"]
           relationships = [Deferred(lambda: MailFolder)]

   @describe
   class MailFolder:
       class Meta:
           fields = ["name", "unreadMessages", "folderType"]

After decoration ``MailAccount`` is a :py:class:`StaticResourceDescription`
of type ``MailAccount``.
"""
import collections.abc
import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import RelationshipTarget, StaticResourceDescription


@dataclasses.dataclass
class Meta:
    type: typing.Optional[str] = None
    fields: typing.Sequence[str] = ()
    default_fields: typing.Optional[typing.Sequence[str]] = None
    relationships: typing.Optional[typing.Sequence[typing.Any]] = None


def _as_names(name: str, value: typing.Any) -> typing.Sequence[str]:
    if isinstance(value, str) or not isinstance(value, collections.abc.Iterable):
        raise InvalidDeclarationError(f"Meta.{name} must be a sequence of field names")
    names = tuple(value)
    if not all(isinstance(n, str) for n in names):
        raise InvalidDeclarationError(f"Meta.{name} must be a sequence of field names")
    return names


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}

    type_ = attrs.get("type")
    if type_ is not None and not isinstance(type_, str):
        raise InvalidDeclarationError("Meta.type must be a string")

    default_fields = attrs.get("default_fields")
    relationships = attrs.get("relationships")
    if relationships is not None and (
        isinstance(relationships, str)
        or not isinstance(relationships, collections.abc.Iterable)
    ):
        raise InvalidDeclarationError("Meta.relationships must be a sequence")

    return Meta(
        type=type_,
        fields=_as_names("fields", attrs.get("fields", ())),
        default_fields=(
            _as_names("default_fields", default_fields) if default_fields is not None else None
        ),
        relationships=tuple(relationships) if relationships is not None else None,
    )


def describe(class_: typing.Type) -> StaticResourceDescription:
    """
    Builds a :py:class:`StaticResourceDescription` from the ``Meta`` class
    nested in ``class_``.  The type name defaults to the name of ``class_``.

    :raises InvalidDeclarationError: if ``class_`` has no ``Meta`` or it is malformed.
    """
    meta_class = getattr(class_, "Meta", None)
    if meta_class is None:
        raise InvalidDeclarationError(f"{class_.__name__} does not declare a Meta class")
    meta = handle_meta(meta_class)
    return StaticResourceDescription(
        type=meta.type if meta.type is not None else class_.__name__,
        fields=meta.fields,
        default_fields=meta.default_fields,
        relationships=typing.cast(
            typing.Sequence[RelationshipTarget],
            meta.relationships if meta.relationships is not None else (),
        ),
    )
