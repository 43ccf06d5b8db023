import typing

T = typing.TypeVar("T")


def assert_not_none(value: typing.Optional[T]) -> T:
    assert value is not None, "unexpected None"
    return value


def assert_type(class_: typing.Type[T], value: typing.Any) -> T:
    """
    Narrows ``value`` to ``class_``, failing loudly when a record of another
    implementation finds its way into the graph.
    """
    assert isinstance(value, class_), f"expected {class_.__name__}, got {type(value).__name__}"
    return value
