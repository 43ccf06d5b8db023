"""
This module contains the interface definitions the payload builder consumes,
which need to be implemented by whatever holds the record graph.

"""
import abc
import collections.abc
import typing

from .scope import ScopeTree, split_scope_key
from .utils import UNSPECIFIED, UnspecifiedType

RelatedValue = typing.Union[None, "Record", typing.Sequence["Record"], UnspecifiedType]


def iter_related(value: RelatedValue) -> typing.Iterable["Record"]:
    """
    Yields the records a relation value refers to, whatever its shape.
    """
    if value is None or value is UNSPECIFIED:
        return ()
    if isinstance(value, collections.abc.Sequence):
        return tuple(value)
    return (typing.cast(Record, value),)


class Record(metaclass=abc.ABCMeta):
    """
    A :py:class:`Record` is one domain entity instance as seen by the payload builder:
    its identity, its persistence state, its attributes, its relations and
    the dirty-tracking state of each.
    """

    id: typing.Optional[str] = None
    """
    The server-assigned identifier; present once persisted.
    """
    temp_id: typing.Optional[str] = None
    """
    The client-assigned identifier of a record that has not been persisted yet.
    """

    @property
    @abc.abstractmethod
    def jsonapi_type(self) -> typing.Optional[str]:
        """
        Returns the resource type of the record's class, or None if it has none.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def is_persisted(self) -> bool:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def is_marked_for_destruction(self) -> bool:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def is_marked_for_disassociation(self) -> bool:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def meta(self) -> typing.Mapping[str, typing.Any]:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def is_meta_dirty(self) -> bool:
        ...  # pragma: nocover

    @abc.abstractmethod
    def attribute_values(self) -> typing.Mapping[str, typing.Any]:
        """
        Returns the current values of the record's attributes keyed by attribute name.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def changed_attributes(self) -> typing.Collection[str]:
        """
        Returns the names of the attributes changed since the record was last synced.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def fetch_related(self, key: str) -> RelatedValue:
        """
        Fetches the value of the relation named ``key``.

        :param str key: the relation name.
        :return: None if the relation is explicitly empty, a record or a sequence of records,
                 or :py:data:`UNSPECIFIED` if the relation is not known to the record.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def replace_related(
        self, key: str, value: typing.Union[None, "Record", typing.Sequence["Record"]]
    ) -> None:
        """
        Replaces the value of the relation named ``key``. A sequence-valued relation
        must be updated in place so that every holder of it observes the change.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def has_dirty_relation(self, key: str, candidate: "Record") -> bool:
        """
        Tells whether ``candidate`` was linked through the relation ``key`` since the
        relation tracking was last reset, regardless of whether ``candidate`` itself changed.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def has_cleared_relation(self, key: str) -> bool:
        """
        Tells whether the to-one relation ``key`` was set to None since the relation
        tracking was last reset while it referred to a record then.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def reset_link_tracking(self, key: str) -> None:
        """
        Takes the current linkage of the relation ``key`` as the synced state.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def clear_errors(self) -> None:
        ...  # pragma: nocover

    def is_dirty(self, scope: typing.Optional[ScopeTree] = None) -> bool:
        """
        Tells whether the record has anything worth sending, looking into the relations
        named in ``scope`` and no further.

        :param Optional[ScopeTree] scope: the relations to look into.
        """
        if self.is_marked_for_destruction or self.is_marked_for_disassociation:
            return True
        if not self.is_persisted or self.changed_attributes() or self.is_meta_dirty:
            return True
        for key, nested in (scope or {}).items():
            relation, nested_scope, _ = split_scope_key(key, nested)
            if self.has_cleared_relation(relation):
                return True
            for related in iter_related(self.fetch_related(relation)):
                if self.has_dirty_relation(relation, related):
                    return True
                if related.is_dirty(nested_scope):
                    return True
        return False

    def reset_relation_tracking(self, scope: ScopeTree) -> None:
        """
        Resets the link tracking of the relations named in ``scope``, recursively.
        """
        for key, nested in scope.items():
            relation, nested_scope, _ = split_scope_key(key, nested)
            self.reset_link_tracking(relation)
            for related in iter_related(self.fetch_related(relation)):
                related.reset_relation_tracking(nested_scope)


class DescriptorTable(metaclass=abc.ABCMeta):
    """
    A :py:class:`DescriptorTable` maps resource types to their attribute descriptors.
    """

    @abc.abstractmethod
    def for_type(self, name: str) -> "models.ResourceDescriptor":
        """
        :param str name: a resource type.
        :raises UnknownResourceTypeError: if no descriptor is known for the type.
        """
        ...  # pragma: nocover


class TempIdGenerator(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def generate(self) -> str:
        """
        Returns an identifier never returned before within the process.
        """
        ...  # pragma: nocover


if typing.TYPE_CHECKING:
    from . import models  # noqa: E402
