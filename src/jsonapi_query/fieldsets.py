import collections.abc
import json
import logging
import typing

from .exceptions import InvalidQueryError
from .utils import split_csv

logger = logging.getLogger(__name__)

WILDCARD = "*"
"""
A requested field that stands for all of the default fields of the type.
"""

FieldOptions = typing.Mapping[str, typing.Any]


def parse_fields(value: typing.Optional[str]) -> typing.Optional[typing.Tuple[str, ...]]:
    """
    Parses the value of a ``fields[TYPE]`` parameter.

    :param Optional[str] value: the raw parameter value, :py:const:`None` if the parameter was not given.
    :return: :py:const:`None` if the parameter was not given, otherwise the requested fields.
    """
    if value is None:
        return None
    return tuple(split_csv(value))


def parse_field_options(value: typing.Optional[str], type: str) -> FieldOptions:
    """
    Parses the value of an ``options[TYPE]`` parameter, a JSON encoded object
    that maps field names to their options, e.g. ``{"previewText": {"length": 200}}``.

    :param Optional[str] value: the raw parameter value.
    :param str type: the resource type the options are given for.
    :raises InvalidQueryError: if the value cannot be decoded to an object.
    """
    if not value:
        return {}
    try:
        options = json.loads(value)
    except (ValueError, RecursionError) as e:
        raise InvalidQueryError(
            f'Could not decode parameter "options[{type}]": {e}', f"options[{type}]"
        ) from e
    if not isinstance(options, collections.abc.Mapping):
        raise InvalidQueryError(
            f'Could not decode parameter "options[{type}]": expected an object, was: {value}',
            f"options[{type}]",
        )
    return options


def find_unknown_fields(
    received: typing.Iterable[str], allowed: typing.Iterable[str]
) -> typing.List[str]:
    """
    Returns the fields of ``received`` that are not in ``allowed``, keeping their order.
    """
    _allowed = set(allowed)
    return [field for field in received if field not in _allowed]


def _append_unique(buf: typing.List[str], fields: typing.Iterable[str]) -> None:
    for field in fields:
        if field not in buf:
            buf.append(field)


def resolve_fields(
    requested: typing.Optional[typing.Sequence[str]],
    options: FieldOptions,
    default_fields: typing.Sequence[str],
    type: str,
) -> typing.List[str]:
    """
    Builds the final list of fields for a resource type.

    * No requested fields at all (:py:const:`None`) results in an empty list, which
      stands for "render the resource the way it is rendered by default".
    * Explicitly requested fields take precedence over the default fields.
    * :py:data:`WILDCARD` expands to the default fields.
    * Fields that are given options are included as well.

    Fields unknown to the resource type are passed through.

    :param Optional[Sequence[str]] requested: the parsed ``fields[TYPE]`` value.
    :param Mapping[str, Any] options: the parsed ``options[TYPE]`` value.
    :param Sequence[str] default_fields: the default fields of the resource type.
    :param str type: the resource type.
    """
    if requested is None:
        return []

    result: typing.List[str] = []
    for field in requested:
        if field == WILDCARD:
            _append_unique(result, default_fields)
        elif field not in result:
            result.append(field)
    _append_unique(result, options.keys())

    logger.debug("resolved fields for %s: %r", type, result)
    return result

