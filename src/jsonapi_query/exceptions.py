import abc
import typing

from .utils import english_enumerate


class JSONAPIQueryException(Exception, metaclass=abc.ABCMeta):
    message: str

    def __str__(self):
        return self.message


class InvalidDeclarationError(JSONAPIQueryException):
    message: str

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidQueryError(JSONAPIQueryException):
    """
    Raised when the query parameters violate the contract of the resource
    being queried, e.g. an ``include`` naming an undeclared relationship.
    """

    message: str
    parameter: typing.Optional[str]

    def __init__(self, message: str, parameter: typing.Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter


class InvalidParameterResourceError(JSONAPIQueryException):
    """
    Raised when the object handed over as the source of the query parameters
    is not something the translator understands.
    """

    message: str

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CyclicRelationshipError(JSONAPIQueryException):
    path: typing.Sequence[str]

    @property
    def message(self):
        return f"relationship cycle detected: {'.'.join(self.path)}"

    def __init__(self, path: typing.Sequence[str]):
        super().__init__(path)
        self.path = path


class UnknownResourceTypeError(JSONAPIQueryException):
    name: str
    candidates: typing.Sequence[str]

    @property
    def message(self):
        if not self.candidates:
            return f'no resource known as "{self.name}"'
        return f'no resource known as "{self.name}" (expected {english_enumerate(self.candidates, conj=", or ")})'

    def __init__(self, name: str, candidates: typing.Sequence[str] = ()):
        super().__init__(name)
        self.name = name
        self.candidates = candidates
