import datetime
import decimal

import pytest

from ..interfaces import ResourceMethod


@pytest.fixture
def target_class():
    from ..renderer import ReprRenderer

    return ReprRenderer


def test_write_document(target_class):
    from ..models import LinkageRepr, ResourceIdRepr, ResourceRepr, WriteDocumentRepr

    target = target_class()

    result = target(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="authors",
                id="1",
                attributes=[
                    ("firstName", "Stephen"),
                    ("age", 76),
                ],
                relationships=[
                    (
                        "bio",
                        LinkageRepr(
                            data=ResourceIdRepr(
                                type="bios",
                                id="b1",
                                method=ResourceMethod.DESTROY,
                            ),
                        ),
                    ),
                    (
                        "books",
                        LinkageRepr(
                            data=[
                                ResourceIdRepr(
                                    type="books",
                                    id="10",
                                    method=ResourceMethod.UPDATE,
                                ),
                                ResourceIdRepr(
                                    type="books",
                                    temp_id="temp-id-1",
                                    method=ResourceMethod.CREATE,
                                ),
                            ],
                        ),
                    ),
                    ("genre", LinkageRepr(data=None)),
                ],
                meta={"locale": "en"},
            ),
            included=[
                ResourceRepr(
                    type="bios",
                    id="b1",
                ),
                ResourceRepr(
                    type="books",
                    id="10",
                    attributes=[("title", "It")],
                ),
                ResourceRepr(
                    type="books",
                    temp_id="temp-id-1",
                    attributes=[("title", "The Shining")],
                ),
            ],
        ),
    )
    assert result == {
        "data": {
            "type": "authors",
            "id": "1",
            "attributes": {
                "firstName": "Stephen",
                "age": 76,
            },
            "relationships": {
                "bio": {
                    "data": {
                        "type": "bios",
                        "id": "b1",
                        "method": "destroy",
                    },
                },
                "books": {
                    "data": [
                        {
                            "type": "books",
                            "id": "10",
                            "method": "update",
                        },
                        {
                            "type": "books",
                            "temp-id": "temp-id-1",
                            "method": "create",
                        },
                    ],
                },
                "genre": {
                    "data": None,
                },
            },
            "meta": {"locale": "en"},
        },
        "included": [
            {
                "type": "bios",
                "id": "b1",
            },
            {
                "type": "books",
                "id": "10",
                "attributes": {
                    "title": "It",
                },
            },
            {
                "type": "books",
                "temp-id": "temp-id-1",
                "attributes": {
                    "title": "The Shining",
                },
            },
        ],
    }


def test_empty_members_are_omitted(target_class):
    from ..models import ResourceRepr, WriteDocumentRepr

    target = target_class()

    assert target(WriteDocumentRepr(data=ResourceRepr(type="authors"))) == {
        "data": {
            "type": "authors",
        },
    }


def test_member_order(target_class):
    from ..models import LinkageRepr, ResourceRepr, WriteDocumentRepr

    target = target_class()

    result = target(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="authors",
                attributes=[("b", 1), ("a", 2)],
                relationships=[("z", LinkageRepr(data=None)), ("y", LinkageRepr(data=[]))],
            ),
        ),
    )
    assert list(result["data"]["attributes"]) == ["b", "a"]
    assert list(result["data"]["relationships"]) == ["z", "y"]


def test_without_method(target_class):
    from ..models import LinkageRepr, ResourceIdRepr, ResourceRepr, WriteDocumentRepr

    target = target_class(render_method=False)

    result = target(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="authors",
                id="1",
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
        ),
    )
    assert result == {
        "data": {
            "type": "authors",
            "id": "1",
            "relationships": {
                "books": {
                    "data": [
                        {
                            "type": "books",
                            "temp-id": "temp-id-1",
                        },
                    ],
                },
            },
        },
    }


def test_identifier_meta(target_class):
    from ..models import LinkageRepr, ResourceIdRepr, ResourceRepr, WriteDocumentRepr

    target = target_class()

    result = target(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="authors",
                id="1",
                relationships=[
                    (
                        "bio",
                        LinkageRepr(
                            data=ResourceIdRepr(
                                type="bios",
                                id="b1",
                                method=ResourceMethod.UPDATE,
                                meta={"reason": "merged"},
                            ),
                        ),
                    ),
                ],
            ),
        ),
    )
    assert result["data"]["relationships"]["bio"]["data"] == {
        "type": "bios",
        "id": "b1",
        "method": "update",
        "meta": {"reason": "merged"},
    }


def test_attribute_values(target_class):
    from ..models import ResourceRepr, WriteDocumentRepr

    result = target_class()(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="foos",
                attributes=[
                    ("decimal", decimal.Decimal("9.99")),
                    ("date", datetime.date(1970, 1, 2)),
                    ("bytes", b"\x00\x01"),
                    ("null", None),
                    ("flag", True),
                    ("list", [decimal.Decimal("1.5"), 2]),
                    ("map", {"at": datetime.date(1970, 1, 2)}),
                ],
            ),
        ),
    )
    assert result["data"]["attributes"] == {
        "decimal": "9.99",
        "date": "1970-01-02",
        "bytes": "AAE=",
        "null": None,
        "flag": True,
        "list": ["1.5", 2],
        "map": {"at": "1970-01-02"},
    }

    result = target_class(render_decimal_as_str=False)(
        WriteDocumentRepr(
            data=ResourceRepr(type="foos", attributes=[("decimal", decimal.Decimal("9.5"))]),
        ),
    )
    assert result["data"]["attributes"] == {"decimal": 9.5}


def test_unsupported_value(target_class):
    from ..models import ResourceRepr, WriteDocumentRepr

    with pytest.raises(TypeError) as excinfo:
        target_class()(
            WriteDocumentRepr(
                data=ResourceRepr(type="foos", attributes=[("a", object())]),
            ),
        )
    assert str(excinfo.value).startswith("/data/attributes/a:")


def test_unsupported_document(target_class):
    from ..models import ResourceRepr

    with pytest.raises(TypeError):
        target_class()(ResourceRepr(type="foos"))


def test_naive_datetime(target_class):
    from ..models import ResourceRepr, WriteDocumentRepr

    target = target_class()

    with pytest.raises(ValueError):
        target(
            WriteDocumentRepr(
                data=ResourceRepr(
                    type="foos",
                    id="1",
                    attributes=[
                        ("a", datetime.datetime(1970, 1, 1, 0, 0, 0)),
                    ],
                ),
            ),
        )

    result = target(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="foos",
                id="1",
                attributes=[
                    ("a", datetime.datetime(1970, 1, 1, 0, 0, 0, tzinfo=datetime.timezone.utc)),
                ],
            ),
        )
    )

    assert result == {
        "data": {
            "type": "foos",
            "id": "1",
            "attributes": {
                "a": "1970-01-01T00:00:00+00:00",
            },
        },
    }

    target2 = target_class(assume_naive_timezone_as=datetime.timezone.utc)

    result = target2(
        WriteDocumentRepr(
            data=ResourceRepr(
                type="foos",
                id="1",
                attributes=[
                    ("a", datetime.datetime(1970, 1, 1, 0, 0, 0)),
                ],
            ),
        )
    )

    assert result == {
        "data": {
            "type": "foos",
            "id": "1",
            "attributes": {
                "a": "1970-01-01T00:00:00+00:00",
            },
        },
    }
