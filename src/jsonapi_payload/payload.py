"""
:py:mod:`jsonapi_payload.payload` builds JSON:API write request documents out of a
record graph, sending only what changed.

Synopsis
--------

.. code-block:: python

   from jsonapi_payload.payload import WritePayload

   payload = WritePayload(author, {"books": {"genre": {}}})
   document = payload.as_json()
   ...  # send the document, and once the server accepted it:
   payload.post_process()

"""

import collections.abc
import dataclasses
import logging
import typing
from collections import OrderedDict

from .exceptions import UndefinedResourceTypeError
from .interfaces import DescriptorTable, Record, TempIdGenerator
from .models import ResourceDescriptor, default_registry
from .reconciler import reconcile
from .scope import ScopeTree, normalize_scope, split_scope_key
from .serde.builders import ResourceIdReprBuilder, ResourceReprBuilder, WriteDocumentBuilder
from .serde.interfaces import ResourceMethod
from .serde.models import (
    AttributeValue,
    LinkageRepr,
    ResourceIdRepr,
    ResourceRepr,
    WriteDocumentRepr,
)
from .serde.renderer import ReprRenderer
from .serde.types import MutableJSONObject
from .tempid import default_generator
from .utils import UNSPECIFIED

logger = logging.getLogger(__name__)


def is_new_and_marked_for_destruction(record: Record) -> bool:
    return not record.is_persisted and record.is_marked_for_destruction


def resolve_method(record: Record) -> ResourceMethod:
    if record.is_persisted:
        if record.is_marked_for_destruction:
            return ResourceMethod.DESTROY
        elif record.is_marked_for_disassociation:
            return ResourceMethod.DISASSOCIATE
        else:
            return ResourceMethod.UPDATE
    else:
        return ResourceMethod.CREATE


def resource_identifier_for(record: Record) -> ResourceIdRepr:
    """
    Builds the identifier that refers to ``record`` from within a relationship.

    :raises UndefinedResourceTypeError: if the record has no resource type.
    """
    if record.jsonapi_type is None:
        raise UndefinedResourceTypeError(record)
    builder = ResourceIdReprBuilder()
    builder.type = record.jsonapi_type
    builder.id = record.id
    builder.temp_id = record.temp_id
    builder.method = resolve_method(record)
    return builder()


def extract_attributes(
    record: Record, descr: ResourceDescriptor
) -> "OrderedDict[str, AttributeValue]":
    """
    Picks the attributes worth sending: every persistable one for a record that is
    yet to be created, and only the changed ones otherwise.
    Keys are transformed by the descriptor's key transform.
    """
    attrs: "OrderedDict[str, AttributeValue]" = OrderedDict()
    values = record.attribute_values()
    changed = frozenset(record.changed_attributes()) if record.is_persisted else None

    for name, attr_descr in descr.attributes.items():
        if not attr_descr.persist or name not in values:
            continue
        if changed is not None and name not in changed:
            continue
        value = values[name]
        # an emptied numeric field is sent as an explicit null
        if attr_descr.is_numeric and isinstance(value, str) and value == "":
            value = None
        attrs[attr_descr.serialize_key()] = value
    return attrs


Identifiable = typing.Union[ResourceRepr, ResourceIdRepr]
IdentityKey = typing.Tuple[str, str, str]


def _identifier_key(
    identifier: ResourceIdRepr,
) -> typing.Tuple[str, typing.Optional[str], typing.Optional[str]]:
    return (identifier.type, identifier.id, identifier.temp_id)


def _merge_linkages(existing: LinkageRepr, other: LinkageRepr) -> LinkageRepr:
    if not isinstance(existing.data, collections.abc.Sequence) or not isinstance(
        other.data, collections.abc.Sequence
    ):
        return existing
    data = list(existing.data)
    seen = {_identifier_key(identifier) for identifier in data}
    for identifier in other.data:
        key = _identifier_key(identifier)
        if key not in seen:
            seen.add(key)
            data.append(identifier)
    return LinkageRepr(data=tuple(data))


def merge_resources(existing: ResourceRepr, other: ResourceRepr) -> ResourceRepr:
    """
    Combines two renditions of the same record reached through different scopes.
    Members of ``existing`` come first and win; ``other`` contributes the members
    ``existing`` lacks, and to-many linkages present in both are joined.
    """
    attributes = OrderedDict(existing.attributes)
    for name, value in other.attributes.items():
        attributes.setdefault(name, value)
    relationships = OrderedDict(existing.relationships)
    for name, linkage in other.relationships.items():
        if name in relationships:
            relationships[name] = _merge_linkages(relationships[name], linkage)
        else:
            relationships[name] = linkage
    return ResourceRepr(
        type=existing.type,
        id=existing.id,
        temp_id=existing.temp_id,
        attributes=attributes.items(),
        relationships=relationships.items(),
        meta=existing.meta or other.meta,
    )


class IncludedSet:
    """
    The ordered collection of related resources shared by a whole build.
    A resource is admitted only if no resource of the same type shares its
    ``id`` or its ``temp-id``.

    A slot can be reserved for a resource before it is built, so that it precedes
    whatever its relations bring in, and so that a record reached again through
    a cycle is not admitted a second time. A later rendition of an admitted
    resource is merged into it rather than dropped.
    """

    _resources: typing.List[typing.Optional[ResourceRepr]]
    _slots: typing.Dict[IdentityKey, int]
    _pending: typing.Dict[int, typing.List[ResourceRepr]]
    _excluded: typing.Set[IdentityKey]

    @staticmethod
    def _keys_for(resource: Identifiable) -> typing.List[IdentityKey]:
        keys = []
        if resource.id is not None:
            keys.append((resource.type, "id", resource.id))
        if resource.temp_id is not None:
            keys.append((resource.type, "temp-id", resource.temp_id))
        return keys

    def _slot_for(self, resource: Identifiable) -> typing.Optional[int]:
        for key in self._keys_for(resource):
            slot = self._slots.get(key)
            if slot is not None:
                return slot
        return None

    def __contains__(self, resource: Identifiable) -> bool:
        return any(k in self._slots or k in self._excluded for k in self._keys_for(resource))

    def exclude(self, identifier: Identifiable) -> None:
        """
        Keeps the resource ``identifier`` refers to out of the collection for good,
        which is what the primary resource of a document needs.
        """
        self._excluded.update(self._keys_for(identifier))

    def reserve(self, identifier: Identifiable) -> typing.Optional[int]:
        """
        Reserves a slot for the resource ``identifier`` refers to.

        :return: the slot to :py:meth:`fill`, or None if the resource is already there.
        """
        if identifier in self:
            return None
        slot = len(self._resources)
        for key in self._keys_for(identifier):
            self._slots[key] = slot
        self._resources.append(None)
        return slot

    def fill(self, slot: int, resource: ResourceRepr) -> None:
        assert self._resources[slot] is None
        for other in self._pending.pop(slot, ()):
            resource = merge_resources(resource, other)
        self._resources[slot] = resource

    def merge(self, resource: ResourceRepr) -> bool:
        """
        Merges ``resource`` into the rendition of the same record already there.
        If that one is still being built, the merge happens once it is filled in.

        :return: False if there is nothing to merge into.
        """
        slot = self._slot_for(resource)
        if slot is None:
            return False
        existing = self._resources[slot]
        if existing is None:
            self._pending.setdefault(slot, []).append(resource)
        else:
            self._resources[slot] = merge_resources(existing, resource)
        return True

    def add(self, resource: ResourceRepr) -> bool:
        """
        Adds ``resource`` unless an equivalent one is already there.

        :return: True if the resource was admitted.
        """
        slot = self.reserve(resource)
        if slot is None:
            return False
        self.fill(slot, resource)
        return True

    def __iter__(self) -> typing.Iterator[ResourceRepr]:
        return (r for r in self._resources if r is not None)

    def __len__(self) -> int:
        return sum(1 for r in self._resources if r is not None)

    def __init__(self):
        self._resources = []
        self._slots = {}
        self._pending = {}
        self._excluded = set()


@dataclasses.dataclass
class BuildContext:
    descriptors: DescriptorTable
    temp_id_generator: TempIdGenerator
    included: IncludedSet = dataclasses.field(default_factory=IncludedSet)


def _is_eligible(
    record: Record, relation: str, related: Record, nested: ScopeTree, id_only: bool
) -> bool:
    if is_new_and_marked_for_destruction(related):
        return False
    return id_only or record.has_dirty_relation(relation, related) or related.is_dirty(nested)


def _process_related(
    ctx: BuildContext, related: Record, nested: ScopeTree, id_only: bool
) -> ResourceIdRepr:
    # checked before anything is written onto the record
    if related.jsonapi_type is None:
        raise UndefinedResourceTypeError(related)
    related.clear_errors()
    if not related.is_persisted and related.temp_id is None:
        related.temp_id = ctx.temp_id_generator.generate()
        logger.debug("assigned temp-id %s to %r", related.temp_id, related)

    identifier = resource_identifier_for(related)
    if id_only:
        build_resource(ctx, related, nested, id_only)
        return identifier

    slot = ctx.included.reserve(identifier)
    resource = build_resource(ctx, related, nested, id_only)
    if slot is not None:
        ctx.included.fill(slot, resource)
    elif not ctx.included.merge(resource):
        logger.debug("%r is the primary resource; not included", related)
    return identifier


def _populate_relationships(
    ctx: BuildContext,
    builder: ResourceReprBuilder,
    record: Record,
    descr: ResourceDescriptor,
    scope: ScopeTree,
) -> None:
    for key, nested in scope.items():
        relation, nested_scope, id_only = split_scope_key(key, nested)
        wire_key = descr.serialize_key(relation)
        value = record.fetch_related(relation)

        if value is UNSPECIFIED:
            continue
        if value is None:
            builder.next_to_one_relationship(wire_key).nullify()
            continue

        if isinstance(value, collections.abc.Sequence):
            identifiers = [
                _process_related(ctx, related, nested_scope, id_only)
                for related in value
                if _is_eligible(record, relation, related, nested_scope, id_only)
            ]
            if identifiers:
                to_many = builder.next_to_many_relationship(wire_key)
                for identifier in identifiers:
                    to_many.append(identifier)
            else:
                logger.debug("nothing to send for %s of %r", relation, record)
        else:
            related = typing.cast(Record, value)
            if _is_eligible(record, relation, related, nested_scope, id_only):
                builder.next_to_one_relationship(wire_key).set(
                    _process_related(ctx, related, nested_scope, id_only)
                )
            else:
                logger.debug("nothing to send for %s of %r", relation, record)


def _populate_resource(
    ctx: BuildContext,
    builder: ResourceReprBuilder,
    record: Record,
    scope: ScopeTree,
    id_only: bool,
) -> None:
    jsonapi_type = record.jsonapi_type
    if jsonapi_type is None:
        raise UndefinedResourceTypeError(record)
    descr = ctx.descriptors.for_type(jsonapi_type)

    builder.set_type(jsonapi_type)
    if record.id is not None:
        builder.set_id(record.id)
    if record.temp_id is not None:
        builder.set_temp_id(record.temp_id)
    if not id_only:
        for name, value in extract_attributes(record, descr).items():
            builder.add_attribute(name, value)
    _populate_relationships(ctx, builder, record, descr, scope)
    if record.is_meta_dirty and record.meta:
        builder.meta = dict(record.meta)


def build_resource(
    ctx: BuildContext, record: Record, scope: ScopeTree, id_only: bool = False
) -> ResourceRepr:
    """
    Builds the resource object for ``record``, walking the relations named in ``scope``.
    Related resources are collected into ``ctx.included``.
    """
    builder = ResourceReprBuilder()
    _populate_resource(ctx, builder, record, scope, id_only)
    return builder()


class WritePayload:
    """
    A :py:class:`WritePayload` builds the write request document for one record and
    the part of its graph named by ``scope``.

    :param Record record: the primary record.
    :param Optional[Mapping] scope: the relations to walk, as a nested mapping.
    :param bool id_only: refer to the primary record by identity only, without attributes.
    :param Optional[DescriptorTable] descriptors: where attribute descriptors are looked up.
    :param Optional[TempIdGenerator] temp_id_generator: what gives new records their temp-ids.
    :raises UndefinedResourceTypeError: if the record has no resource type.
    """

    record: Record
    scope: ScopeTree
    id_only: bool
    descriptors: DescriptorTable
    temp_id_generator: TempIdGenerator

    @property
    def jsonapi_type(self) -> str:
        return typing.cast(str, self.record.jsonapi_type)

    def _new_context(self) -> BuildContext:
        return BuildContext(
            descriptors=self.descriptors,
            temp_id_generator=self.temp_id_generator,
        )

    def attributes(self) -> "OrderedDict[str, AttributeValue]":
        return extract_attributes(self.record, self.descriptors.for_type(self.jsonapi_type))

    def relationships(self) -> typing.Mapping[str, LinkageRepr]:
        return self.as_repr().data.relationships

    def as_repr(self) -> WriteDocumentRepr:
        ctx = self._new_context()
        ctx.included.exclude(resource_identifier_for(self.record))
        doc = WriteDocumentBuilder()
        _populate_resource(ctx, doc.data, self.record, self.scope, self.id_only)
        doc.included.extend(ctx.included)
        logger.debug(
            "built write document for %r with %d included resource(s)",
            self.record,
            len(ctx.included),
        )
        return doc()

    def as_json(self, renderer: typing.Optional[ReprRenderer] = None) -> MutableJSONObject:
        renderer = ReprRenderer() if renderer is None else renderer
        return renderer(self.as_repr())

    def post_process(self) -> None:
        """
        Reconciles the record graph once the document has been accepted by the server.
        """
        reconcile(self.record, self.scope)

    def __init__(
        self,
        record: Record,
        scope: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        id_only: bool = False,
        descriptors: typing.Optional[DescriptorTable] = None,
        temp_id_generator: typing.Optional[TempIdGenerator] = None,
    ):
        if record.jsonapi_type is None:
            raise UndefinedResourceTypeError(record)
        self.record = record
        self.scope = normalize_scope(scope)
        self.id_only = id_only
        self.descriptors = default_registry if descriptors is None else descriptors
        self.temp_id_generator = (
            default_generator if temp_id_generator is None else temp_id_generator
        )
