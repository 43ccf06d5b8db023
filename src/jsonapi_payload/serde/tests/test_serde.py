import pytest

from ..interfaces import ResourceMethod


class TestWriteDocumentBuilder:
    @pytest.fixture
    def target(self):
        from ..builders import WriteDocumentBuilder

        return WriteDocumentBuilder

    def test_basic(self, target):
        from ..models import LinkageRepr, ResourceIdRepr, ResourceRepr, WriteDocumentRepr

        b = target()
        b.data.set_type("authors")
        b.data.set_id("1")
        b.data.add_attribute("a", 1)
        b.data.add_attribute("b", 2)
        b.data.add_attribute("c", 3)
        b.data.next_to_many_relationship("books").append(
            ResourceIdRepr(type="books", temp_id="t1", method=ResourceMethod.CREATE)
        )
        b.data.next_to_one_relationship("genre").nullify()
        b.included.append(ResourceRepr(type="books", temp_id="t1"))
        assert b() == WriteDocumentRepr(
            data=ResourceRepr(
                type="authors",
                id="1",
                attributes=(
                    ("a", 1),
                    ("b", 2),
                    ("c", 3),
                ),
                relationships=(
                    (
                        "books",
                        LinkageRepr(
                            data=(
                                ResourceIdRepr(
                                    type="books", temp_id="t1", method=ResourceMethod.CREATE
                                ),
                            ),
                        ),
                    ),
                    ("genre", LinkageRepr(data=None)),
                ),
            ),
            included=(ResourceRepr(type="books", temp_id="t1"),),
        )


class TestResourceReprBuilder:
    @pytest.fixture
    def target(self):
        from ..builders import ResourceReprBuilder

        return ResourceReprBuilder

    def test_relationship_kinds_do_not_mix(self, target):
        b = target()
        b.next_to_many_relationship("books")
        with pytest.raises(TypeError):
            b.next_to_one_relationship("books")
        b.next_to_one_relationship("genre")
        with pytest.raises(TypeError):
            b.next_to_many_relationship("genre")

    def test_same_relationship_is_reused(self, target):
        from ..models import ResourceIdRepr

        b = target()
        b.set_type("authors")
        first = ResourceIdRepr(type="books", id="1", method=ResourceMethod.UPDATE)
        second = ResourceIdRepr(type="books", id="2", method=ResourceMethod.UPDATE)
        b.next_to_many_relationship("books").append(first)
        b.next_to_many_relationship("books").append(second)
        assert b().relationships["books"].data == (first, second)

    def test_meta(self, target):
        b = target()
        b.set_type("authors")
        b.meta = {"locale": "en"}
        assert b().meta == {"locale": "en"}


def test_resource_id_builder():
    from ..builders import ResourceIdReprBuilder
    from ..models import ResourceIdRepr

    b = ResourceIdReprBuilder()
    b.type = "books"
    b.temp_id = "t1"
    b.method = ResourceMethod.CREATE
    assert b() == ResourceIdRepr(type="books", temp_id="t1", method=ResourceMethod.CREATE)
