import collections.abc
import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import (
    AttributeDescriptor,
    DescriptorRegistry,
    KeyTransform,
    ResourceDescriptor,
    default_registry,
)
from .serde.models import AttributeValue
from .serde.utils import english_enumerate
from .utils import UNSPECIFIED, UnspecifiedType


@dataclasses.dataclass
class Attr:
    type: typing.Optional[typing.Type[AttributeValue]] = None
    name: typing.Union[UnspecifiedType, str] = UNSPECIFIED
    persist: bool = True


@dataclasses.dataclass
class Meta:
    type: typing.Optional[str] = None
    attributes: typing.Sequence[Attr] = ()
    relationships: typing.Sequence[str] = ()
    key_transform: typing.Optional[KeyTransform] = None
    registry: DescriptorRegistry = default_registry

    @property
    def attribute_names(self) -> typing.FrozenSet[str]:
        return frozenset(typing.cast(str, attr.name) for attr in self.attributes)

    def build_descriptor(self) -> ResourceDescriptor:
        assert self.type is not None
        return ResourceDescriptor(
            self.type,
            attributes=[
                AttributeDescriptor(attr.type, typing.cast(str, attr.name), persist=attr.persist)
                for attr in self.attributes
            ],
            key_transform=self.key_transform,
        )


def _handle_attributes(
    attributes: typing.Union[
        typing.Mapping[str, typing.Union[Attr, type]],
        typing.Sequence[typing.Union[Attr, str]],
    ]
) -> typing.Sequence[Attr]:
    retval: typing.List[Attr] = []
    if isinstance(attributes, collections.abc.Mapping):
        for name, attr in attributes.items():
            if isinstance(attr, Attr):
                retval.append(dataclasses.replace(attr, name=name))
            elif isinstance(attr, type):
                retval.append(Attr(type=attr, name=name))
            else:
                raise InvalidDeclarationError(f"invalid declaration for attribute {name}: {attr!r}")
    else:
        for attr in attributes:
            if isinstance(attr, str):
                retval.append(Attr(name=attr))
            elif isinstance(attr, Attr):
                if attr.name is UNSPECIFIED:
                    raise InvalidDeclarationError(f"attribute name is not specified for {attr!r}")
                retval.append(attr)
            else:
                raise InvalidDeclarationError(f"invalid attribute declaration: {attr!r}")
    return retval


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    known = {f.name for f in dataclasses.fields(Meta)}
    unknown = sorted(k for k in attrs if k not in known)
    if unknown:
        raise InvalidDeclarationError(f"unknown Meta attribute(s): {english_enumerate(unknown)}")

    if "attributes" in attrs:
        attrs["attributes"] = _handle_attributes(attrs["attributes"])

    relationships = attrs.get("relationships", ())
    if isinstance(relationships, str):
        raise InvalidDeclarationError("relationships must be a sequence of relation names")
    attrs["relationships"] = tuple(relationships)

    retval = Meta(**attrs)
    overlaps = retval.attribute_names & set(retval.relationships)
    if overlaps:
        raise InvalidDeclarationError(
            f"declared both as an attribute and a relationship: {english_enumerate(sorted(overlaps))}"
        )
    return retval
