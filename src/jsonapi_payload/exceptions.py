import abc
import typing


class JSONAPIPayloadException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class ConfigurationError(JSONAPIPayloadException, metaclass=abc.ABCMeta):
    """
    Raised on a setup mistake that makes a write document impossible to build.
    A build that raises one of these never returns a partial document.
    """


class UndefinedResourceTypeError(ConfigurationError):
    record: "interfaces.Record"

    @property
    def message(self):
        return f"cannot serialize {self.record!r}: undefined resource type"

    def __init__(self, record: "interfaces.Record"):
        self.record = record


class UnknownResourceTypeError(ConfigurationError):
    name: str

    @property
    def message(self):
        return f'no resource known as "{self.name}"'

    def __init__(self, name: str):
        self.name = name


class InvalidDeclarationError(ConfigurationError):
    _message: str

    @property
    def message(self):
        return self._message

    def __init__(self, message: str):
        self._message = message


class InvalidScopeError(JSONAPIPayloadException):
    _message: str
    key: typing.Optional[str]

    @property
    def message(self):
        if self.key is None:
            return self._message
        return f"{self._message} (at {self.key!r})"

    def __init__(self, message: str, key: typing.Optional[str] = None):
        self._message = message
        self.key = key


if typing.TYPE_CHECKING:
    from . import interfaces  # noqa: E402
