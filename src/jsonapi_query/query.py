"""
The request abstraction the translator reads its parameters from.

JSON:API groups parameters by resource type using brackets, e.g.
``fields[MailAccount]=name,address``.  Depending on how the query string was
decoded, such a parameter shows up either under its full name or as an entry
of a nested mapping stored under the group name (``{"fields": {"MailAccount": ...}}``).
:py:class:`MappingQuery` understands both.
"""
import abc
import collections.abc
import dataclasses
import re
import typing
import urllib.parse

from .exceptions import InvalidParameterResourceError

_GROUP_PARAMETER_RE = re.compile(r"^([^\[\]]+)\[([^\[\]]*)\]$")


def is_group_parameter(name: str) -> bool:
    return _GROUP_PARAMETER_RE.match(name) is not None


def get_group_name(name: str) -> typing.Optional[str]:
    m = _GROUP_PARAMETER_RE.match(name)
    return m.group(1) if m is not None else None


def get_group_key(name: str) -> typing.Optional[str]:
    m = _GROUP_PARAMETER_RE.match(name)
    return m.group(2) if m is not None else None


def group_parameter_name(group: str, key: str) -> str:
    return f"{group}[{key}]"


@dataclasses.dataclass(frozen=True)
class Parameter:
    name: str
    value: str


class Query(metaclass=abc.ABCMeta):
    """
    A :py:class:`Query` gives access to the parameters of a request.
    """

    @abc.abstractmethod
    def get_parameter(self, name: str) -> typing.Optional[Parameter]:
        """
        Returns the parameter named ``name``, which may be a group parameter
        such as ``fields[MailAccount]``.

        :param str name: the name of the parameter.
        :return: the :py:class:`Parameter` or :py:const:`None` if the request does not carry it.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_all_parameters(self) -> typing.Sequence[Parameter]:
        ...  # pragma: nocover

    def get_all_parameter_names(self) -> typing.List[str]:
        return [param.name for param in self.get_all_parameters()]

    def only(self, names: typing.Iterable[str]) -> typing.Dict[str, str]:
        """
        Returns the values of the given parameters, leaving out the ones the request
        does not carry.
        """
        result: typing.Dict[str, str] = {}
        for name in names:
            param = self.get_parameter(name)
            if param is not None:
                result[name] = param.value
        return result


RawValue = typing.Union[str, typing.Sequence[str], typing.Mapping[str, typing.Any]]


def _scalar(value: typing.Any) -> typing.Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, collections.abc.Sequence):
        # repeated parameters: the last one wins
        return _scalar(value[-1]) if len(value) > 0 else None
    return None


class MappingQuery(Query):
    """
    A :py:class:`Query` over a mapping of decoded parameters or over a raw query string.

    :param Union[str, Mapping[str, Any]] source: the query string or the parameter mapping.
    :raises InvalidParameterResourceError: if ``source`` is neither of them.
    """

    _query_string: str
    _raw: typing.Mapping[str, RawValue]
    _parameters: typing.Dict[str, typing.Optional[Parameter]]
    _all_parameters: typing.Optional[typing.List[Parameter]] = None

    def get_parameter(self, name: str) -> typing.Optional[Parameter]:
        try:
            return self._parameters[name]
        except KeyError:
            pass

        param: typing.Optional[Parameter] = None
        value = _scalar(self._raw.get(name))
        if value is not None:
            param = Parameter(name, value)
        else:
            group = get_group_name(name)
            if group is not None:
                members = self._raw.get(group)
                if isinstance(members, collections.abc.Mapping):
                    value = _scalar(members.get(get_group_key(name)))
                    if value is not None:
                        param = Parameter(name, value)

        self._parameters[name] = param
        return param

    def get_all_parameters(self) -> typing.Sequence[Parameter]:
        if self._all_parameters is not None:
            return self._all_parameters

        result: typing.List[Parameter] = []
        for name, value in self._raw.items():
            if isinstance(value, collections.abc.Mapping):
                for key in value:
                    param = self.get_parameter(group_parameter_name(name, key))
                    if param is not None:
                        result.append(param)
            else:
                param = self.get_parameter(name)
                if param is not None:
                    result.append(param)
        self._all_parameters = result
        return result

    def __str__(self) -> str:
        return self._query_string

    def __init__(self, source: typing.Union[str, typing.Mapping[str, RawValue]]):
        self._parameters = {}
        if isinstance(source, str):
            self._query_string = source
            raw: typing.Dict[str, typing.List[str]] = {}
            for k, v in urllib.parse.parse_qsl(source, keep_blank_values=True):
                raw.setdefault(k, []).append(v)
            self._raw = raw
        elif isinstance(source, collections.abc.Mapping):
            self._raw = source
            self._query_string = urllib.parse.urlencode(
                [(param.name, param.value) for param in self.get_all_parameters()]
            )
        else:
            raise InvalidParameterResourceError(
                f'Expected "parameter_resource" to be a query string or a mapping, was: {type(source).__name__}'
            )
