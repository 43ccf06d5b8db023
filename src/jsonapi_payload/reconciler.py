import collections.abc
import logging
import typing

from .interfaces import Record
from .scope import ScopeTree, normalize_scope, split_scope_key
from .utils import UNSPECIFIED

logger = logging.getLogger(__name__)


def is_removed(record: Record) -> bool:
    return record.is_marked_for_destruction or record.is_marked_for_disassociation


def remove_deletions(record: Record, scope: ScopeTree) -> None:
    """
    Drops the related records marked for destruction or disassociation from the
    relations named in ``scope``, recursively.
    """
    for key, nested in scope.items():
        relation, nested_scope, _ = split_scope_key(key, nested)
        value = record.fetch_related(relation)
        if value is None or value is UNSPECIFIED:
            continue

        if isinstance(value, collections.abc.Sequence):
            kept = [related for related in value if not is_removed(related)]
            if len(kept) != len(value):
                logger.debug(
                    "removing %d record(s) from %s of %r",
                    len(value) - len(kept),
                    relation,
                    record,
                )
                record.replace_related(relation, kept)
            for related in kept:
                remove_deletions(related, nested_scope)
        else:
            related = typing.cast(Record, value)
            if is_removed(related):
                logger.debug("unlinking %r from %s of %r", related, relation, record)
                record.replace_related(relation, None)
            else:
                remove_deletions(related, nested_scope)


def reconcile(record: Record, scope: typing.Optional[typing.Mapping[str, typing.Any]]) -> None:
    """
    Brings the record graph in line with a write the server has just accepted:
    destroyed and disassociated records leave their relations, and the link
    tracking of the relations named in ``scope`` is reset.

    Call this only after the server accepted the document built with the same
    record and scope.
    """
    scope = normalize_scope(scope)
    remove_deletions(record, scope)
    record.reset_relation_tracking(scope)
