"""
:py:mod:`jsonapi_payload.serde.renderer` module contains a class in charge of rendering internal representation of a JSON:API write document to JSON.

Synopsis
--------

.. code-block:: python

   import json

   from jsonapi_payload.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = WriteDocumentRepr(
       data=ResourceRepr(
           type="authors",
           id="1",
           attributes=[
               ("firstName", "Stephen"),
           ],
           relationships=[
               (
                   "books",
                   LinkageRepr(
                       data=[
                           ResourceIdRepr(
                               type="books",
                               temp_id="temp-id-1",
                               method=ResourceMethod.CREATE,
                           ),
                       ],
                   ),
               ),
           ],
       ),
       included=[
           ResourceRepr(
               type="books",
               temp_id="temp-id-1",
               attributes=[("title", "The Shining")],
           ),
       ],
   )

   print(json.dumps(renderer(internal_repr)))

"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from .models import (
    AttributeValue,
    LinkageRepr,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    WriteDocumentRepr,
)
from .types import JSONScalar, MutableJSONObject
from .utils import JSONPointer


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class ReprRendererContext:
    parent: typing.Optional["ReprRendererContext"]
    path: JSONPointer
    anchor: typing.Optional[Repr]

    def __truediv__(self, component: str) -> "ReprRendererContext":
        return self.replace(path=(self.path / component))

    def __or__(self, anchor: Repr) -> "ReprRendererContext":
        return self.replace(anchor=anchor)

    def __getitem__(self, index: int) -> "ReprRendererContext":
        return self.replace(path=(self.path[index]))

    def replace(
        self, *, anchor: typing.Optional[Repr] = None, path: typing.Optional[JSONPointer] = None
    ):
        anchor = self.anchor if anchor is None else anchor
        path = self.path if path is None else path
        return ReprRendererContext(parent=self, anchor=anchor, path=path)

    def __init__(
        self,
        parent: typing.Optional["ReprRendererContext"],
        anchor: typing.Optional[Repr] = None,
        path: typing.Optional[JSONPointer] = None,
    ):
        self.parent = parent
        self.anchor = anchor
        self.path = JSONPointer() if path is None else path


class ReprRenderer:
    _render_decimal_as_str: bool = True
    _render_method: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _dict_factory(self, items: typing.Iterator[typing.Tuple[str, typing.Any]]):
        return OrderedDict(items)

    def _render_datetime(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.datetime, repr_)
        if _repr.tzinfo is None:
            if self._assume_naive_timezone_as is None:
                raise ValueError(f"{ctx.path}: naive datetime {_repr}")
            else:
                if hasattr(self._assume_naive_timezone_as, "localize"):
                    _repr = typing.cast(TZLocalizer, self._assume_naive_timezone_as).localize(_repr)
                else:
                    _repr = _repr.replace(tzinfo=self._assume_naive_timezone_as)
        return _repr.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.date, repr_)
        return _repr.isoformat()

    def _render_decimal(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(decimal.Decimal, repr_)
        return str(_repr) if self._render_decimal_as_str else float(_repr)

    def _render_bytes(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return base64.b64encode(typing.cast(bytes, repr_)).decode("ascii")

    def _render_passthrough(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return typing.cast(JSONScalar, repr_)

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_value(self, ctx: ReprRendererContext, repr_: typing.Any) -> typing.Any:
        if isinstance(repr_, collections.abc.Mapping):
            return self._dict_factory(
                (k, self._render_value(ctx / k, v)) for k, v in repr_.items()
            )
        if isinstance(repr_, (list, tuple)):
            return [self._render_value(ctx[i], v) for i, v in enumerate(repr_)]
        return self._render_scalar(ctx, repr_)

    def _render_scalar(self, ctx: ReprRendererContext, repr_: AttributeValue) -> JSONScalar:
        # fast pass
        r = self._supported_types.get(type(repr_))
        if r is not None:
            return r(self, ctx, repr_)

        for type_, r in self._supported_types.items():
            if isinstance(repr_, type_):
                return r(self, ctx, repr_)

        raise TypeError(f"{ctx.path}: unsupported type {repr_!r}")

    def _render_relationship(
        self, ctx: ReprRendererContext, repr_: LinkageRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, collections.abc.Sequence):
            retval["data"] = [
                self._render_resource_identifier((ctx / "data")[i] | repr_, item)
                for i, item in enumerate(repr_.data)
            ]
        else:
            retval["data"] = self._render_resource_identifier((ctx / "data") | repr_, repr_.data)
        return retval

    def _render_identity(
        self, target: MutableJSONObject, repr_: typing.Union[ResourceRepr, ResourceIdRepr]
    ) -> None:
        target["type"] = repr_.type
        if repr_.id is not None:
            target["id"] = repr_.id
        if repr_.temp_id is not None:
            target["temp-id"] = repr_.temp_id

    def _render_resource_identifier(
        self, ctx: ReprRendererContext, repr_: ResourceIdRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        self._render_identity(retval, repr_)
        if self._render_method:
            retval["method"] = repr_.method.value
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource(self, ctx: ReprRendererContext, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        self._render_identity(retval, repr_)
        if repr_.attributes:
            new_ctx = (ctx / "attributes") | repr_
            retval["attributes"] = self._dict_factory(
                (k, self._render_value(new_ctx / k, v)) for k, v in repr_.attributes.items()
            )
        if repr_.relationships:
            new_ctx = (ctx / "relationships") | repr_
            retval["relationships"] = self._dict_factory(
                (k, self._render_relationship(new_ctx / k, v))
                for k, v in repr_.relationships.items()
            )
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_write_document(
        self, ctx: ReprRendererContext, repr_: WriteDocumentRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        retval["data"] = self._render_resource((ctx / "data") | repr_, repr_.data)
        if repr_.included:
            new_ctx = (ctx / "included") | repr_
            retval["included"] = [
                self._render_resource(new_ctx[i], r) for i, r in enumerate(repr_.included)
            ]
        return retval

    def __call__(self, repr_: WriteDocumentRepr) -> MutableJSONObject:
        ctx = ReprRendererContext(None)
        if isinstance(repr_, WriteDocumentRepr):
            return self._render_write_document(ctx, repr_)
        else:
            raise TypeError(f"unsupported document {repr_!r}")

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
        render_method: bool = True,
    ):
        """
        :param bool render_decimal_as_str: render :py:class:`decimal.Decimal` as strings rather than floats.
        :param Optional[datetime.tzinfo] assume_naive_timezone_as: the zone naive datetimes are in.
        :param bool render_method: emit the ``method`` member of resource identifiers.
                                   Turn this off for a server that rejects unknown members.
        """
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as
        self._render_method = render_method
