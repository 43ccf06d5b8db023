"""
Classes in :py:mod:`jsonapi_payload.serde.models` are abstract representation of the
elements of a JSON:API write request document.
"""

import dataclasses
import datetime
import decimal
import typing
from collections import OrderedDict

from .interfaces import ResourceMethod


@dataclasses.dataclass
class Repr:
    """
    The base class for any model objects.
    """


@dataclasses.dataclass(init=False)
class MetaContainerRepr(Repr):
    """
    :py:class:`MetaContainerRepr` is an abstract base for classes containing ``meta`` node.
    """

    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(self, *, meta: typing.Optional[typing.Dict[str, typing.Any]] = None):
        """
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__()
        self.meta = meta if meta is not None else {}


@dataclasses.dataclass(init=False)
class ResourceIdRepr(MetaContainerRepr):
    """
    Instances of :py:class:`ResourceIdRepr` represent `Resource Identifier Objects <https://jsonapi.org/format/#document-resource-identifier-objects>`_
    extended with the ``temp-id`` and ``method`` members a write request carries.

    Either ``id`` or ``temp_id`` identifies the resource; a resource that has never been
    persisted has no ``id``.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    temp_id: typing.Optional[str]  # type: ignore
    method: ResourceMethod  # type: ignore

    def __init__(
        self,
        *,
        type: str,
        method: ResourceMethod,
        id: typing.Optional[str] = None,
        temp_id: typing.Optional[str] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param ResourceMethod method: the write method requested for the resource.
        :param Optional[str] id: a value for ``id`` property.
        :param Optional[str] temp_id: a value for ``temp-id`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(meta=meta)
        self.type = type
        self.id = id
        self.temp_id = temp_id
        self.method = method


@dataclasses.dataclass(init=False)
class LinkageRepr(Repr):
    """
    :py:class:`LinkageRepr` represents a `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_
    """

    data: typing.Union[None, ResourceIdRepr, typing.Sequence[ResourceIdRepr]] = None

    def __init__(
        self,
        *,
        data: typing.Union[None, ResourceIdRepr, typing.Sequence[ResourceIdRepr]],
    ):
        """
        :param Union[None, ResourceIdRepr, Sequence[ResourceIdRepr]] data: a value for ``data`` property.
        """
        super().__init__()
        self.data = data


AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bytes, None
]
AttributeValue = typing.Union[
    typing.Sequence[AttributeScalar],
    typing.Mapping[str, AttributeScalar],
    AttributeScalar,
]


@dataclasses.dataclass(init=False)
class ResourceRepr(MetaContainerRepr):
    """
    :py:class:`ResourceRepr` class represents a `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    temp_id: typing.Optional[str]  # type: ignore
    attributes: typing.Mapping[str, AttributeValue] = dataclasses.field(default_factory=OrderedDict)  # type: ignore
    relationships: typing.Mapping[str, LinkageRepr] = dataclasses.field(default_factory=OrderedDict)  # type: ignore

    def __getitem__(self, name):
        return self.attributes[name]

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str] = None,
        temp_id: typing.Optional[str] = None,
        attributes: typing.Iterable[typing.Tuple[str, AttributeValue]] = (),
        relationships: typing.Iterable[typing.Tuple[str, LinkageRepr]] = (),
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param Optional[str] id: an optional value for ``id`` property.
        :param Optional[str] temp_id: an optional value for ``temp-id`` property.
        :param Iterable[Tuple[str, AttributeValue]] attributes: a sequence of tuples each of which represents a key-value pair of an attribute.
        :param Iterable[Tuple[str, LinkageRepr]] relationships: a sequence of tuples each of which represent a key-value pair of a relationship.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(meta=meta)
        self.type = type
        self.id = id
        self.temp_id = temp_id
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class WriteDocumentRepr(Repr):
    """
    :py:class:`WriteDocumentRepr` represents a whole write request: the primary resource
    in ``data`` and the flattened, deduplicated related resources in ``included``.
    """

    data: ResourceRepr  # type: ignore
    included: typing.Sequence[ResourceRepr] = ()

    def __init__(
        self,
        *,
        data: ResourceRepr,
        included: typing.Sequence[ResourceRepr] = (),
    ):
        """
        :param ResourceRepr data: the primary resource.
        :param Sequence[ResourceRepr] included: a sequence of :py:class:`ResourceRepr`.
        """
        super().__init__()
        self.data = data
        self.included = tuple(included)
