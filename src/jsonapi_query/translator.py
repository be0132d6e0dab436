"""
Translation of JSON:API query parameters (compound documents and sparse
fieldsets) into a :py:class:`TranslatedQuery`.

Synopsis
--------

.. code-block:: python

   from jsonapi_query.translator import QueryTranslator

   class MailAccountQueryTranslator(QueryTranslator):
       resource_target = MailAccount

   translated = MailAccountQueryTranslator().translate(
       "include=MailFolder&fields[MailAccount]=name,address&fields[MailFolder]="
   )
   translated.includes  # ["MailFolder"]
   translated.fields    # {"MailAccount": ["name", "address"], "MailFolder": []}

"""
import abc
import collections.abc
import dataclasses
import logging
import typing

from .exceptions import InvalidParameterResourceError, InvalidQueryError
from .fieldsets import (
    FieldOptions,
    find_unknown_fields,
    parse_field_options,
    parse_fields,
    resolve_fields,
)
from .graph import collect_descriptions, collect_types
from .models import ResourceDescription, ResourceDescriptionList
from .query import MappingQuery, Query, group_parameter_name

logger = logging.getLogger(__name__)

Parameters = typing.Mapping[str, str]


@dataclasses.dataclass
class TranslatedQuery:
    """
    The outcome of a translation.
    """

    target: str
    """
    The type of the resource targeted by the query.
    """

    includes: typing.List[str] = dataclasses.field(default_factory=list)
    """
    The validated types requested by ``include``, in the order they were requested.
    """

    requested_fields: typing.Dict[str, typing.Optional[typing.Tuple[str, ...]]] = dataclasses.field(
        default_factory=dict
    )
    """
    The fields as requested per type. :py:const:`None` if no ``fields[TYPE]`` parameter
    was given for the type, an empty tuple if it was given empty.
    """

    field_options: typing.Dict[str, FieldOptions] = dataclasses.field(default_factory=dict)
    """
    The decoded ``options[TYPE]`` parameters per type.
    """

    fields: typing.Dict[str, typing.List[str]] = dataclasses.field(default_factory=dict)
    """
    The resolved fields per type. An empty list leaves the choice of fields to
    the default rendering of the resource.
    """


class QueryTranslator(metaclass=abc.ABCMeta):
    """
    A :py:class:`QueryTranslator` translates the query parameters of a request
    targeting a single resource type, according to the JSON:API specification's
    notions of compound documents and sparse fieldsets.

    Subclasses provide the :py:attr:`resource_target` and may override the
    class attributes that configure the translation.
    """

    include_parameter: typing.ClassVar[str] = "include"
    fields_parameter: typing.ClassVar[str] = "fields"
    options_parameter: typing.ClassVar[str] = "options"
    allow_unknown_fields: typing.ClassVar[bool] = False
    """
    Set to :py:const:`True` to pass fields a resource type does not declare on
    to the result instead of rejecting the query.
    """

    @property
    @abc.abstractmethod
    def resource_target(self) -> ResourceDescription:
        """
        The description of the resource targeted by the queries this translator processes.
        """
        ...  # pragma: nocover

    def get_related_resource_targets(
        self, with_resource_target: bool = False
    ) -> ResourceDescriptionList:
        return collect_descriptions(self.resource_target, with_resource_target)

    def get_related_resource_target_types(
        self, with_resource_target: bool = False
    ) -> typing.List[str]:
        return collect_types(self.resource_target, with_resource_target)

    def get_fields(self, type: str) -> typing.Sequence[str]:
        """
        Returns all fields exposed by the resource type named ``type``, or an
        empty sequence if the type is not part of the graph.
        """
        descr = self.get_related_resource_targets(True).find_by_type(type)
        return descr.fields if descr is not None else ()

    def get_default_fields(self, type: str) -> typing.Sequence[str]:
        descr = self.get_related_resource_targets(True).find_by_type(type)
        return descr.default_fields if descr is not None else ()

    def get_expected_parameters(self) -> typing.List[str]:
        """
        Returns the names of the parameters this translator understands.
        """
        result = [self.include_parameter]
        for type in self.get_related_resource_target_types(True):
            for group in (self.fields_parameter, self.options_parameter):
                name = group_parameter_name(group, type)
                if name not in result:
                    result.append(name)
        return result

    def extract_parameters(
        self, source: typing.Union[Query, str, typing.Mapping[str, typing.Any]]
    ) -> typing.Dict[str, str]:
        """
        Picks the expected parameters out of the parameter source.

        :param Union[Query, str, Mapping[str, Any]] source: a :py:class:`Query`,
            a raw query string or a mapping of decoded parameters.
        :raises InvalidParameterResourceError: if ``source`` is none of the above.
        """
        if not isinstance(source, Query):
            if not isinstance(source, (str, collections.abc.Mapping)):
                raise InvalidParameterResourceError(
                    f'Expected "parameter_resource" to be a Query, a query string or a mapping, was: {type(source).__name__}'
                )
            source = MappingQuery(source)
        return source.only(self.get_expected_parameters())

    def get_includes(self, params: Parameters) -> typing.List[str]:
        """
        Validates the ``include`` parameter against the relationships of the
        resource target.

        :param Mapping[str, str] params: the request parameters.
        :return: the requested includes without duplicates.
        :raises InvalidQueryError: if ``include`` names a type that is not related
            to the resource target.
        """
        raw = params.get(self.include_parameter)
        if not raw:
            return []

        rel_list = self.get_related_resource_target_types()
        includes: typing.List[str] = []
        for include in raw.split(","):
            if include not in rel_list:
                logger.debug("rejecting include %r of %s", raw, self.resource_target.type)
                raise InvalidQueryError(
                    f'parameter "{self.include_parameter}" must only contain one of '
                    f'{", ".join(rel_list)}, was: {raw}',
                    self.include_parameter,
                )
            if include not in includes:
                includes.append(include)
        return includes

    def check_fields(
        self,
        type: str,
        fields: typing.Sequence[str],
        allowed: typing.Optional[typing.Sequence[str]] = None,
    ) -> None:
        """
        Makes sure every field in ``fields`` is declared by the resource type,
        unless :py:attr:`allow_unknown_fields` is set.  ``allowed`` defaults to
        :py:meth:`get_fields`.

        :raises InvalidQueryError: if an undeclared field was requested.
        """
        if self.allow_unknown_fields:
            return
        if allowed is None:
            allowed = self.get_fields(type)
        unknown = find_unknown_fields(fields, allowed)
        if unknown:
            name = group_parameter_name(self.fields_parameter, type)
            logger.debug("rejecting fields %r of %s", unknown, type)
            raise InvalidQueryError(
                f'parameter "{name}" must only contain one of {", ".join(allowed)}, '
                f'was: {", ".join(unknown)}',
                name,
            )

    def get_fieldsets(
        self, params: Parameters, translated: typing.Optional[TranslatedQuery] = None
    ) -> typing.Dict[str, typing.List[str]]:
        """
        Resolves the fields for the resource target and every included type.

        :param Mapping[str, str] params: the request parameters.
        :param Optional[TranslatedQuery] translated: if given, receives the
            validated includes, the parsed fields and options along with the result.
        :return: the resolved fields per type.
        :raises InvalidQueryError: if the includes are invalid, the options
            cannot be decoded or unknown fields were requested.
        """
        includes = self.get_includes(params)
        types = [self.resource_target.type] + includes
        descriptions = self.get_related_resource_targets(True)

        fields: typing.Dict[str, typing.List[str]] = {}
        requested_fields: typing.Dict[str, typing.Optional[typing.Tuple[str, ...]]] = {}
        field_options: typing.Dict[str, FieldOptions] = {}

        for type in types:
            raw_fields = params.get(group_parameter_name(self.fields_parameter, type))
            raw_options = params.get(group_parameter_name(self.options_parameter, type))
            options = parse_field_options(raw_options, type)
            field_options[type] = options
            if raw_fields == "":
                requested_fields[type] = ()
                fields[type] = []
                continue
            requested = parse_fields(raw_fields)
            requested_fields[type] = requested
            descr = descriptions.find_by_type(type)
            assert descr is not None
            resolved = resolve_fields(requested, options, descr.default_fields, type)
            self.check_fields(type, resolved, descr.fields)
            fields[type] = resolved

        if translated is not None:
            translated.includes = includes
            translated.requested_fields = requested_fields
            translated.field_options = field_options
            translated.fields = fields
        return fields

    def translate(
        self, source: typing.Union[Query, str, typing.Mapping[str, typing.Any]]
    ) -> TranslatedQuery:
        """
        Translates the query parameters carried by ``source``.

        :param Union[Query, str, Mapping[str, Any]] source: the parameter source.
        :raises InvalidParameterResourceError: if ``source`` is of an unsupported type.
        :raises InvalidQueryError: if the parameters do not form a valid query.
        """
        params = self.extract_parameters(source)
        translated = TranslatedQuery(target=self.resource_target.type)
        self.get_fieldsets(params, translated)
        logger.debug("translated query for %s: %r", translated.target, translated)
        return translated


class SimpleQueryTranslator(QueryTranslator):
    """
    A :py:class:`QueryTranslator` whose resource target is given to the constructor.
    """

    _resource_target: ResourceDescription

    @property
    def resource_target(self) -> ResourceDescription:
        return self._resource_target

    def __init__(self, resource_target: ResourceDescription):
        self._resource_target = resource_target
