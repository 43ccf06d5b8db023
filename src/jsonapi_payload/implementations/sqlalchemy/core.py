"""
SQLAlchemy-backed records.

SQLAlchemy already tracks whether an instance is persisted and what changed in
it since it was loaded or flushed; :py:class:`SQLARecord` exposes that state
through the :py:class:`~jsonapi_payload.interfaces.Record` interface, and keeps
what SQLAlchemy has no notion of (destruction and disassociation markers,
temp-ids, meta) on the side.

.. code-block:: python

   ctx = SQLAContext()
   ctx.register(Author, "authors", key_transform=camelize)
   ctx.register(Book, "books")

   payload = WritePayload(ctx.record_for(author), {"books": {}}, descriptors=ctx)

"""

import collections.abc
import typing
import weakref

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import UnknownResourceTypeError
from ...interfaces import DescriptorTable, Record, RelatedValue
from ...models import AttributeDescriptor, KeyTransform, ResourceDescriptor
from ...utils import UNSPECIFIED, assert_type


def python_type_of(column: sa.Column) -> typing.Optional[typing.Type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def is_attribute_column(sa_mapper: orm.Mapper, column: typing.Any) -> bool:
    if not isinstance(column, sa.Column):
        return False
    if column in set(sa_mapper.primary_key):
        return False
    # foreign keys travel as relationships
    return not column.foreign_keys


def attribute_properties(sa_mapper: orm.Mapper) -> typing.List[orm.ColumnProperty]:
    return [
        prop for prop in sa_mapper.column_attrs if is_attribute_column(sa_mapper, prop.expression)
    ]


def build_descriptor(
    sa_mapper: orm.Mapper, name: str, key_transform: typing.Optional[KeyTransform] = None
) -> ResourceDescriptor:
    attrs = [
        AttributeDescriptor(python_type_of(prop.expression), prop.key)
        for prop in attribute_properties(sa_mapper)
    ]
    return ResourceDescriptor(name, attrs, key_transform=key_transform)


class SQLAContext(DescriptorTable):
    """
    A :py:class:`SQLAContext` knows the resource type of each mapped class and hands out
    one :py:class:`SQLARecord` per mapped instance, so that the same instance is the
    same record wherever it is reached from.
    """

    _descrs: typing.Dict[str, ResourceDescriptor]
    _type_names: typing.Dict[orm.Mapper, str]
    _records: "weakref.WeakKeyDictionary[typing.Any, SQLARecord]"

    def register(
        self,
        class_: typing.Type,
        name: str,
        key_transform: typing.Optional[KeyTransform] = None,
    ) -> ResourceDescriptor:
        sa_mapper = sa.inspect(class_)
        descr = build_descriptor(sa_mapper, name, key_transform)
        self._descrs[name] = descr
        self._type_names[sa_mapper] = name
        return descr

    def for_type(self, name: str) -> ResourceDescriptor:
        try:
            return self._descrs[name]
        except KeyError:
            raise UnknownResourceTypeError(name)

    def type_name_for(self, sa_mapper: orm.Mapper) -> typing.Optional[str]:
        for m in sa_mapper.iterate_to_root():
            name = self._type_names.get(m)
            if name is not None:
                return name
        return None

    def record_for(self, native: typing.Any) -> "SQLARecord":
        record = self._records.get(native)
        if record is None:
            record = self._records[native] = SQLARecord(self, native)
        return record

    def __init__(self):
        self._descrs = {}
        self._type_names = {}
        self._records = weakref.WeakKeyDictionary()


class SQLARecord(Record):
    ctx: SQLAContext
    native: typing.Any
    temp_id: typing.Optional[str]
    errors: typing.Dict[str, typing.Any]
    _marked_for_destruction: bool
    _marked_for_disassociation: bool
    _meta: typing.Dict[str, typing.Any]
    _meta_dirty: bool
    _acknowledged_links: typing.Dict[str, typing.Tuple[typing.Any, ...]]

    @property
    def state(self) -> orm.state.InstanceState:
        return sa.inspect(self.native)

    @property
    def jsonapi_type(self) -> typing.Optional[str]:
        return self.ctx.type_name_for(self.state.mapper)

    @property  # type: ignore
    def id(self) -> typing.Optional[str]:  # type: ignore
        """
        The primary key of the mapped instance, joined with ``-``. Unlike other records
        it is read-only: SQLAlchemy assigns it on flush.
        """
        state = self.state
        if not state.has_identity:
            return None
        return "-".join(str(v) for v in state.identity)

    @property
    def is_persisted(self) -> bool:
        return self.state.has_identity

    @property
    def is_marked_for_destruction(self) -> bool:
        return self._marked_for_destruction

    @property
    def is_marked_for_disassociation(self) -> bool:
        return self._marked_for_disassociation

    def mark_for_destruction(self) -> None:
        self._marked_for_destruction = True

    def mark_for_disassociation(self) -> None:
        self._marked_for_disassociation = True

    @property
    def meta(self) -> typing.Dict[str, typing.Any]:
        return self._meta

    @meta.setter
    def meta(self, value: typing.Mapping[str, typing.Any]) -> None:
        self._meta = dict(value)
        self._meta_dirty = True

    @property
    def is_meta_dirty(self) -> bool:
        return self._meta_dirty

    def _attribute_names(self) -> typing.Iterable[str]:
        # read off the mapper so that dirtiness does not depend on registration
        return [prop.key for prop in attribute_properties(self.state.mapper)]

    def attribute_values(self) -> typing.Mapping[str, typing.Any]:
        # only what is loaded; expired attributes are not fetched
        loaded = self.state.dict
        return {name: loaded[name] for name in self._attribute_names() if name in loaded}

    def changed_attributes(self) -> typing.Collection[str]:
        attrs = self.state.attrs
        return frozenset(
            name for name in self._attribute_names() if attrs[name].history.has_changes()
        )

    def _relationship(self, key: str) -> typing.Optional[orm.RelationshipProperty]:
        relationships = self.state.mapper.relationships
        return relationships[key] if key in relationships else None

    def fetch_related(self, key: str) -> RelatedValue:
        state = self.state
        rel = self._relationship(key)
        # unloaded relations are left alone rather than lazy-loaded
        if rel is None or key in state.unloaded:
            return UNSPECIFIED
        value = state.dict.get(key)
        if value is None:
            return None
        if rel.uselist:
            return [self.ctx.record_for(v) for v in value]
        return self.ctx.record_for(value)

    def replace_related(
        self, key: str, value: typing.Union[None, Record, typing.Sequence[Record]]
    ) -> None:
        if value is None:
            setattr(self.native, key, None)
        elif isinstance(value, collections.abc.Sequence):
            natives = [assert_type(SQLARecord, r).native for r in value]
            getattr(self.native, key)[:] = natives
        else:
            setattr(self.native, key, assert_type(SQLARecord, value).native)

    def has_dirty_relation(self, key: str, candidate: Record) -> bool:
        native = assert_type(SQLARecord, candidate).native
        if any(n is native for n in self._acknowledged_links.get(key, ())):
            return False
        return any(n is native for n in self.state.attrs[key].history.added)

    def has_cleared_relation(self, key: str) -> bool:
        state = self.state
        rel = self._relationship(key)
        if rel is None or rel.uselist or key in state.unloaded:
            return False
        if state.dict.get(key) is not None:
            return False
        if key in self._acknowledged_links:
            return bool(self._acknowledged_links[key])
        return bool(state.attrs[key].history.deleted)

    def reset_link_tracking(self, key: str) -> None:
        value = self.state.dict.get(key)
        rel = self._relationship(key)
        if value is None or rel is None:
            self._acknowledged_links[key] = ()
        elif rel.uselist:
            self._acknowledged_links[key] = tuple(value)
        else:
            self._acknowledged_links[key] = (value,)

    def clear_errors(self) -> None:
        self.errors = {}

    def __repr__(self):
        return f"<SQLARecord {self.native!r} id={self.id!r} temp_id={self.temp_id!r}>"

    def __init__(self, ctx: SQLAContext, native: typing.Any):
        self.ctx = ctx
        self.native = native
        self.temp_id = None
        self.errors = {}
        self._marked_for_destruction = False
        self._marked_for_disassociation = False
        self._meta = {}
        self._meta_dirty = False
        self._acknowledged_links = {}
