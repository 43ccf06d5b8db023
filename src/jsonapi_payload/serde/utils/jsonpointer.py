import typing


class JSONPointer:
    """
    An immutable `JSON Pointer <https://tools.ietf.org/html/rfc6901>`_.

    .. code-block:: python

       ptr = JSONPointer() / "data" / "relationships" / "books"
       str(ptr[0])  # "/data/relationships/books/0"
    """

    _components: typing.Tuple[str, ...]

    @property
    def components(self) -> typing.Tuple[str, ...]:
        return self._components

    def __truediv__(self, component: str) -> "JSONPointer":
        return JSONPointer(*self._components, component)

    def __getitem__(self, index: int) -> "JSONPointer":
        return JSONPointer(*self._components, str(index))

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, JSONPointer):
            return NotImplemented
        return self._components == other._components

    def __hash__(self):
        return hash(self._components)

    def __str__(self):
        return "".join(
            "/" + c.replace("~", "~0").replace("/", "~1") for c in self._components
        )

    def __repr__(self):
        return f"JSONPointer({str(self)!r})"

    def __init__(self, *components: str):
        self._components = components
