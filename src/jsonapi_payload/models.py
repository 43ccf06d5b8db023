import decimal
import typing
from collections import OrderedDict

from .exceptions import UnknownResourceTypeError
from .interfaces import DescriptorTable
from .serde.models import AttributeValue
from .utils import assert_not_none

KeyTransform = typing.Callable[[str], str]

NUMERIC_TYPES: typing.Tuple[type, ...] = (int, float, decimal.Decimal)


def identity_key_transform(name: str) -> str:
    return name


class AttributeDescriptor:
    parent: typing.Optional["ResourceDescriptor"] = None
    name: str
    type: typing.Optional[typing.Type[AttributeValue]]
    persist: bool

    T = typing.TypeVar("T", bound="AttributeDescriptor")

    def bind(self: T, parent: "ResourceDescriptor") -> T:
        self.parent = parent
        return self

    @property
    def is_numeric(self) -> bool:
        """
        Whether the declared type is a number. ``bool`` is not, even though it
        is a subclass of ``int``.
        """
        if self.type is None or self.type is bool:
            return False
        return isinstance(self.type, type) and issubclass(self.type, NUMERIC_TYPES)

    def serialize_key(self) -> str:
        if self.parent is None:
            return self.name
        return self.parent.serialize_key(self.name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, type={self.type!r}, persist={self.persist!r})"

    def __init__(
        self,
        type: typing.Optional[typing.Type],
        name: str,
        persist: bool = True,
    ):
        self.name = name
        self.type = type
        self.persist = persist


class ResourceDescriptor:
    """
    A :py:class:`ResourceDescriptor` holds the attribute descriptor table for a resource type.

    :param str name: The resource type, as it appears in ``type`` members.
    :param Iterable[AttributeDescriptor] attributes: The descriptors for the attributes the resource holds.
    :param Optional[Callable[[str], str]] key_transform: The function applied to attribute
                                                         and relationship names on the wire.
    """

    name: str
    """
    The name of the resource.
    """
    key_transform: KeyTransform
    _attributes: typing.MutableMapping[str, AttributeDescriptor]

    @property
    def attributes(self) -> typing.Mapping[str, AttributeDescriptor]:
        """
        The mapping of attribute names to :py:class:`AttributeDescriptor`s.
        """
        return self._attributes

    def add_attribute(self, attr: AttributeDescriptor) -> None:
        """
        Add an attribute to the resource descriptor.

        :param AttributeDescriptor attr: the attribute to add.
        """
        self._attributes[assert_not_none(attr.name)] = attr.bind(self)

    def serialize_key(self, name: str) -> str:
        return self.key_transform(name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def __init__(
        self,
        name: str,
        attributes: typing.Iterable[AttributeDescriptor] = (),
        key_transform: typing.Optional[KeyTransform] = None,
    ) -> None:
        self.name = name
        self.key_transform = key_transform if key_transform is not None else identity_key_transform
        self._attributes = OrderedDict(
            ((assert_not_none(attr.name), attr.bind(self)) for attr in attributes)
        )


class DescriptorRegistry(DescriptorTable):
    _descrs: typing.Dict[str, ResourceDescriptor]

    def register(self, descr: ResourceDescriptor) -> ResourceDescriptor:
        self._descrs[descr.name] = descr
        return descr

    def for_type(self, name: str) -> ResourceDescriptor:
        try:
            return self._descrs[name]
        except KeyError:
            raise UnknownResourceTypeError(name)

    def __contains__(self, name: str) -> bool:
        return name in self._descrs

    def __init__(self, descrs: typing.Iterable[ResourceDescriptor] = ()):
        self._descrs = {}
        for descr in descrs:
            self.register(descr)


default_registry = DescriptorRegistry()
