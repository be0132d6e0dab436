"""
jsonapi_query.implementations.sqlalchemy.declarative module derives resource
descriptions from SQLAlchemy mapped classes.

Synopsis
--------

.. code-block:: python

   import sqlalchemy as sa
   from sqlalchemy import orm
   from jsonapi_query.implementations.sqlalchemy import SQLAResourceDescriptionRegistry
   from jsonapi_query.translator import SimpleQueryTranslator

   Base = orm.declarative_base()
   decl = SQLAResourceDescriptionRegistry()

   @decl
   class MailAccount(Base):
       __tablename__ = "mail_accounts"

       class Meta:
           default_fields = ["name"]
           relationships = ["folders"]

       id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
       name = sa.Column(sa.String(), nullable=False)
       address = sa.Column(sa.String(), nullable=False)
       folders = orm.relationship("MailFolder", back_populates="account")

   ...

   decl.configure()

   translator = SimpleQueryTranslator(decl.query_description_by_class(MailAccount))

``Meta.relationships`` restricts the relationships that are exposed; it is
required as soon as the model declares back references, since a relationship
graph must not contain cycles.
"""
import logging
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import exc as sa_exc  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...declarative import Meta, handle_meta
from ...exceptions import InvalidDeclarationError, UnknownResourceTypeError
from .core import SQLAContext, SQLAResourceDescription, default_extract_fields

logger = logging.getLogger(__name__)


class SQLAResourceDescriptionRegistry:
    """
    Keeps a single :py:class:`SQLAResourceDescription` per SQLAlchemy mapper,
    so that descriptions reached through different relationships are the very
    same objects.
    """

    _descriptions: typing.Dict[orm.Mapper, SQLAResourceDescription]
    _instrumented_classes: typing.List[typing.Type]
    _sqla_ctx: SQLAContext
    _extract_fields_fn: typing.Callable[[orm.Mapper], typing.Sequence[str]]

    class _SQLAContext(SQLAContext):
        outer: "SQLAResourceDescriptionRegistry"

        def query_description_by_mapper(self, sa_mapper: orm.Mapper) -> SQLAResourceDescription:
            return self.outer.query_description_by_mapper(sa_mapper)

        def extract_fields(self, sa_mapper: orm.Mapper) -> typing.Sequence[str]:
            return self.outer._extract_fields_fn(sa_mapper)

        def __init__(self, outer: "SQLAResourceDescriptionRegistry"):
            self.outer = outer

    def query_description_by_mapper(self, sa_mapper: orm.Mapper) -> SQLAResourceDescription:
        try:
            return self._descriptions[sa_mapper]
        except KeyError:
            pass
        meta_class = getattr(sa_mapper.class_, "Meta", None)
        meta = handle_meta(meta_class) if meta_class is not None else Meta()
        descr = SQLAResourceDescription(self._sqla_ctx, sa_mapper, meta)
        self._descriptions[sa_mapper] = descr
        logger.debug("described %s as %s", sa_mapper.class_.__name__, descr.type)
        return descr

    def query_description_by_class(self, class_: typing.Type) -> SQLAResourceDescription:
        try:
            sa_mapper = sa.inspect(class_)
        except sa_exc.NoInspectionAvailable as e:
            raise InvalidDeclarationError(f"{class_!r} is not a mapped class") from e
        return self.query_description_by_mapper(sa_mapper)

    def query_description_by_type(self, name: str) -> SQLAResourceDescription:
        for descr in self._descriptions.values():
            if descr.type == name:
                return descr
        raise UnknownResourceTypeError(name, [descr.type for descr in self._descriptions.values()])

    def configure(self, skip_configure_mappers: bool = False) -> None:
        if not skip_configure_mappers:
            orm.configure_mappers()
        for c in self._instrumented_classes:
            self.query_description_by_class(c)

    T = typing.TypeVar("T")

    def __call__(self, instrumented_class: typing.Type[T]) -> typing.Type[T]:
        self._instrumented_classes.append(instrumented_class)
        return instrumented_class

    def __init__(
        self,
        extract_fields_fn: typing.Callable[
            [orm.Mapper], typing.Sequence[str]
        ] = default_extract_fields,
    ):
        self._descriptions = {}
        self._instrumented_classes = []
        self._sqla_ctx = self._SQLAContext(self)
        self._extract_fields_fn = extract_fields_fn  # type: ignore
