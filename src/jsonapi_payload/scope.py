"""
Include scopes tell the payload builder which relationships to walk and how deep.

A scope tree is an ordered mapping from relation keys to nested scope trees:

.. code-block:: python

   {"books": {"genre": {}}, "bio": {}}

A key of the form ``relation.rest`` walks ``relation`` for identifier purposes
only; ``rest`` is either ``id`` or the next relation down.
"""

import collections.abc
import typing
from collections import OrderedDict

from .exceptions import InvalidScopeError

ScopeTree = typing.Mapping[str, "ScopeTree"]

ID_ONLY_SEPARATOR = "."
ID_ONLY_SUFFIX = "id"

EMPTY_SCOPE: ScopeTree = OrderedDict()


def normalize_scope(scope: typing.Optional[typing.Mapping[str, typing.Any]]) -> ScopeTree:
    """
    Turns a nested mapping into a :py:data:`ScopeTree` made of :py:class:`OrderedDict`,
    preserving key order. ``None`` is accepted wherever an empty scope is.

    :raises InvalidScopeError: if the scope is not a nested mapping keyed by strings.
    """
    if scope is None:
        return OrderedDict()
    if not isinstance(scope, collections.abc.Mapping):
        raise InvalidScopeError(f"scope must be a mapping, got {type(scope).__name__}")
    retval: "OrderedDict[str, ScopeTree]" = OrderedDict()
    for key, nested in scope.items():
        if not isinstance(key, str) or not key:
            raise InvalidScopeError("scope keys must be non-empty strings", repr(key))
        if not isinstance(nested, (collections.abc.Mapping, type(None))):
            raise InvalidScopeError(
                f"nested scope must be a mapping, got {type(nested).__name__}", key
            )
        retval[key] = normalize_scope(nested)
    return retval


def split_scope_key(key: str, nested: ScopeTree) -> typing.Tuple[str, ScopeTree, bool]:
    """
    Resolves a scope entry into the relation to look up, the scope to descend with,
    and whether the relation is walked for identifiers only.

    >>> split_scope_key("books", {})
    ('books', {}, False)
    >>> split_scope_key("books.id", {})
    ('books', {}, True)
    >>> relation, nested, id_only = split_scope_key("books.genre", {})
    >>> relation, dict(nested), id_only
    ('books', {'genre': {}}, True)
    """
    if ID_ONLY_SEPARATOR not in key:
        return key, nested, False
    relation, rest = key.split(ID_ONLY_SEPARATOR, 1)
    if rest == ID_ONLY_SUFFIX:
        return relation, nested, True
    return relation, OrderedDict([(rest, nested)]), True
