import abc
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...declarative import Meta
from ...exceptions import InvalidDeclarationError
from ...models import ResourceDescription, ResourceDescriptionList


class SQLAContext(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def query_description_by_mapper(self, sa_mapper: orm.Mapper) -> "SQLAResourceDescription":
        ...  # pragma: nocover

    @abc.abstractmethod
    def extract_fields(self, sa_mapper: orm.Mapper) -> typing.Sequence[str]:
        ...  # pragma: nocover


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


def default_extract_fields(sa_mapper: orm.Mapper) -> typing.Sequence[str]:
    """
    Returns the keys of the column properties of the mapped class, leaving out
    the primary key and the foreign keys, which JSON:API expresses as the
    resource identifier and relationships respectively.
    """
    fields: typing.List[str] = []
    for prop in sa_mapper.column_attrs:
        expression = prop.expression
        if not is_alien_clause(sa_mapper, expression):
            if expression.primary_key or expression.foreign_keys:
                continue
        fields.append(prop.key)
    return fields


class SQLAResourceDescription(ResourceDescription):
    """
    A :py:class:`ResourceDescription` derived from an SQLAlchemy mapper and
    the ``Meta`` class of the mapped class.
    """

    sactx: SQLAContext
    mapper: orm.Mapper
    meta: Meta
    _relationships: typing.Optional[ResourceDescriptionList] = None

    @property
    def type(self) -> str:
        return self.meta.type if self.meta.type is not None else self.mapper.class_.__name__

    @property
    def fields(self) -> typing.Sequence[str]:
        if self.meta.fields:
            return self.meta.fields
        return self.sactx.extract_fields(self.mapper)

    @property
    def default_fields(self) -> typing.Sequence[str]:
        if self.meta.default_fields is not None:
            return self.meta.default_fields
        return self.fields

    @property
    def relationships(self) -> ResourceDescriptionList:
        if self._relationships is None:
            props: typing.List[orm.RelationshipProperty]
            if self.meta.relationships is None:
                props = list(self.mapper.relationships)
            else:
                props = []
                for name in self.meta.relationships:
                    if name not in self.mapper.relationships:
                        raise InvalidDeclarationError(
                            f"{self.mapper.class_.__name__} has no relationship named {name}"
                        )
                    props.append(self.mapper.relationships[name])
            self._relationships = ResourceDescriptionList(
                self.sactx.query_description_by_mapper(prop.mapper) for prop in props
            )
        return self._relationships

    def __init__(self, sactx: SQLAContext, mapper: orm.Mapper, meta: Meta):
        self.sactx = sactx
        self.mapper = mapper
        self.meta = meta
