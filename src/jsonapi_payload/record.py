"""
:py:mod:`jsonapi_payload.record` provides :py:class:`Model`, an in-memory
:py:class:`~jsonapi_payload.interfaces.Record` with explicit change tracking.

.. code-block:: python

   class Author(Model):
       class Meta:
           type = "authors"
           attributes = {"first_name": str, "age": int}
           relationships = ("books",)
           key_transform = camelize

   author = Author.load(id="1", first_name="Stephen", books=[])
   author.age = 75
   author.books.append(Book(title="The Shining"))

"""

import collections.abc
import dataclasses
import typing

from .declarative import Meta, handle_meta
from .interfaces import Record, RelatedValue, iter_related
from .utils import UNSPECIFIED


@dataclasses.dataclass
class ChangeSet:
    """
    The changes a record went through since it was last synced.
    """

    attributes: typing.Set[str] = dataclasses.field(default_factory=set)
    """
    Names of the attributes whose value differs from the synced one.
    """
    links: typing.Dict[str, typing.Tuple[Record, ...]] = dataclasses.field(default_factory=dict)
    """
    The records each relation was linked to when last synced.
    """
    meta_dirty: bool = False

    def is_linked(self, key: str, candidate: Record) -> bool:
        return any(r is candidate for r in self.links.get(key, ()))


class Model(Record):
    _declaration: typing.ClassVar[Meta] = Meta()

    _values: typing.Dict[str, typing.Any]
    _synced_values: typing.Dict[str, typing.Any]
    _related: typing.Dict[str, typing.Any]
    _changes: ChangeSet
    _persisted: bool
    _marked_for_destruction: bool
    _marked_for_disassociation: bool
    _meta: typing.Dict[str, typing.Any]
    errors: typing.Dict[str, typing.Any]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        meta = cls.__dict__.get("Meta")
        if meta is None:
            return
        cls._declaration = handle_meta(meta)
        if cls._declaration.type is not None:
            cls._declaration.registry.register(cls._declaration.build_descriptor())

    @property
    def jsonapi_type(self) -> typing.Optional[str]:
        return type(self)._declaration.type

    @property
    def is_persisted(self) -> bool:
        return self._persisted

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
        self._changes.meta_dirty = True

    @property
    def is_meta_dirty(self) -> bool:
        return self._changes.meta_dirty

    def attribute_values(self) -> typing.Mapping[str, typing.Any]:
        return dict(self._values)

    def changed_attributes(self) -> typing.Collection[str]:
        return frozenset(self._changes.attributes)

    def fetch_related(self, key: str) -> RelatedValue:
        return self._related.get(key, UNSPECIFIED)

    def replace_related(
        self, key: str, value: typing.Union[None, Record, typing.Sequence[Record]]
    ) -> None:
        current = self._related.get(key)
        if isinstance(value, collections.abc.Sequence):
            if isinstance(current, list):
                current[:] = value
            else:
                self._related[key] = list(value)
        else:
            self._related[key] = value

    def has_dirty_relation(self, key: str, candidate: Record) -> bool:
        return not self._changes.is_linked(key, candidate)

    def has_cleared_relation(self, key: str) -> bool:
        return self._related.get(key, UNSPECIFIED) is None and bool(self._changes.links.get(key))

    def reset_link_tracking(self, key: str) -> None:
        self._changes.links[key] = tuple(iter_related(self.fetch_related(key)))

    def clear_errors(self) -> None:
        self.errors = {}

    def sync(self, id: typing.Optional[str] = None) -> None:
        """
        Takes the current state as the one the server knows about, which is what
        happens once a record is loaded from or accepted by the server.

        :param Optional[str] id: the identifier the server assigned, if any.
        """
        if id is not None:
            self.id = id
        self._persisted = True
        self.temp_id = None
        self._marked_for_destruction = False
        self._marked_for_disassociation = False
        self._synced_values = dict(self._values)
        self._changes = ChangeSet(
            links={k: tuple(iter_related(v)) for k, v in self._related.items()},
        )

    @classmethod
    def load(cls, id: str, **kwargs: typing.Any) -> "Model":
        """
        Creates a record in the state it would be right after being read from the server.
        """
        record = cls(id=id, **kwargs)
        record.sync()
        return record

    def _set_attribute(self, name: str, value: typing.Any) -> None:
        self._values[name] = value
        if name in self._synced_values and self._synced_values[name] == value:
            self._changes.attributes.discard(name)
        else:
            self._changes.attributes.add(name)

    def __getattr__(self, name: str) -> typing.Any:
        if not name.startswith("_"):
            declaration = type(self)._declaration
            if name in declaration.attribute_names:
                return self._values.get(name)
            if name in declaration.relationships:
                return self._related.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: typing.Any) -> None:
        declaration = type(self)._declaration
        if name in declaration.attribute_names:
            self._set_attribute(name, value)
        elif name in declaration.relationships:
            self._related[name] = value
        else:
            object.__setattr__(self, name, value)

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id!r} temp_id={self.temp_id!r}>"

    def __init__(
        self,
        id: typing.Optional[str] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        **kwargs: typing.Any,
    ):
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_synced_values", {})
        object.__setattr__(self, "_related", {})
        object.__setattr__(self, "_changes", ChangeSet())
        object.__setattr__(self, "_persisted", False)
        object.__setattr__(self, "_marked_for_destruction", False)
        object.__setattr__(self, "_marked_for_disassociation", False)
        object.__setattr__(self, "_meta", dict(meta) if meta is not None else {})
        object.__setattr__(self, "errors", {})
        self.id = id
        self.temp_id = None

        declaration = type(self)._declaration
        for name, value in kwargs.items():
            if name not in declaration.attribute_names and name not in declaration.relationships:
                raise TypeError(f"{type(self).__name__} has no attribute or relationship {name!r}")
            setattr(self, name, value)
