import abc
import typing
from collections import OrderedDict

from .interfaces import ResourceMethod
from .models import (
    AttributeValue,
    LinkageRepr,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    WriteDocumentRepr,
)


class ReprBuilder(metaclass=abc.ABCMeta):
    parent: typing.Optional["ReprBuilder"] = None
    meta: typing.Dict[str, typing.Any]

    @abc.abstractmethod
    def __call__(self) -> Repr:
        ...  # pragma: nocover

    def __init__(self, parent: typing.Optional["ReprBuilder"] = None):
        self.parent = parent
        self.meta = {}


class LinkageReprBuilder(ReprBuilder, metaclass=abc.ABCMeta):
    def __call__(self) -> LinkageRepr:
        raise NotImplementedError()


class ResourceIdReprBuilder(ReprBuilder):
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    temp_id: typing.Optional[str] = None
    method: typing.Optional[ResourceMethod] = None

    def __call__(self) -> ResourceIdRepr:
        assert self.type is not None
        assert self.method is not None
        return ResourceIdRepr(
            type=self.type,
            id=self.id,
            temp_id=self.temp_id,
            method=self.method,
            meta=self.meta,
        )

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)


class ToManyRelReprBuilder(LinkageReprBuilder):
    data: typing.List[ResourceIdRepr]

    def append(self, identifier: ResourceIdRepr) -> None:
        self.data.append(identifier)

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(data=tuple(self.data))

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)
        self.data = []


class ToOneRelReprBuilder(LinkageReprBuilder):
    data: typing.Optional[ResourceIdRepr]

    def set(self, identifier: ResourceIdRepr) -> None:
        self.data = identifier

    def nullify(self) -> None:
        self.data = None

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(data=self.data)

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)
        self.data = None


class ResourceReprBuilder(ReprBuilder):
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    temp_id: typing.Optional[str] = None
    attributes: "OrderedDict[str, typing.Any]"
    relationships: "OrderedDict[str, LinkageReprBuilder]"

    def set_type(self, type: str):
        self.type = type

    def set_id(self, id: str):
        self.id = id

    def set_temp_id(self, temp_id: str):
        self.temp_id = temp_id

    def add_attribute(self, name: str, value: AttributeValue):
        self.attributes[name] = value

    def next_to_many_relationship(self, name: str) -> ToManyRelReprBuilder:
        rel = self.relationships.get(name)
        if rel is not None:
            if not isinstance(rel, ToManyRelReprBuilder):
                raise TypeError("specified relationship is not a to-many relationship")
        else:
            self.relationships[name] = rel = ToManyRelReprBuilder(self)
        return typing.cast(ToManyRelReprBuilder, rel)

    def next_to_one_relationship(self, name: str) -> ToOneRelReprBuilder:
        rel = self.relationships.get(name)
        if rel is not None:
            if not isinstance(rel, ToOneRelReprBuilder):
                raise TypeError("specified relationship is not a to-one relationship")
        else:
            self.relationships[name] = rel = ToOneRelReprBuilder(self)
        return typing.cast(ToOneRelReprBuilder, rel)

    def __call__(self) -> ResourceRepr:
        assert self.type is not None
        return ResourceRepr(
            type=self.type,
            id=self.id,
            temp_id=self.temp_id,
            meta=self.meta,
            attributes=tuple((k, v) for k, v in self.attributes.items()),
            relationships=tuple((k, v()) for k, v in self.relationships.items()),
        )

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()


class WriteDocumentBuilder(ReprBuilder):
    data: ResourceReprBuilder
    included: typing.List[ResourceRepr]

    def __call__(self) -> WriteDocumentRepr:
        return WriteDocumentRepr(
            data=self.data(),
            included=tuple(self.included),
        )

    def __init__(self):
        super().__init__(None)
        self.data = ResourceReprBuilder(self)
        self.included = []
