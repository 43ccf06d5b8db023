import typing

import pytest
import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ....exceptions import UndefinedResourceTypeError
from ....payload import WritePayload
from ....serde.utils import camelize
from ....tests.testing import FixedTempIdGenerator
from ....utils import UNSPECIFIED


class Base:
    def __init__(self, **kwargs: typing.Any):
        for k, v in kwargs.items():
            setattr(self, k, v)


class TestSQLAContext:
    @pytest.fixture
    def metadata(self):
        return sa.MetaData()

    @pytest.fixture
    def table_author(self, metadata):
        return sa.Table(
            "author",
            metadata,
            sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
            sa.Column("first_name", sa.String(255), nullable=False),
            sa.Column("age", sa.Integer(), nullable=True),
        )

    @pytest.fixture
    def table_genre(self, metadata):
        return sa.Table(
            "genre",
            metadata,
            sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
        )

    @pytest.fixture
    def table_book(self, metadata, table_author, table_genre):
        return sa.Table(
            "book",
            metadata,
            sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("author_id", sa.Integer(), sa.ForeignKey(table_author.c.id)),
            sa.Column("genre_id", sa.Integer(), sa.ForeignKey(table_genre.c.id)),
        )

    @pytest.fixture
    def engine(self, metadata, table_author, table_book, table_genre):
        engine = sa.create_engine("sqlite:///")
        metadata.create_all(engine)
        yield engine

    @pytest.fixture
    def Author(self):
        class Author(Base):
            pass

        return Author

    @pytest.fixture
    def Book(self):
        class Book(Base):
            pass

        return Book

    @pytest.fixture
    def Genre(self):
        class Genre(Base):
            pass

        return Genre

    @pytest.fixture
    def sa_registry(self, table_author, table_book, table_genre, Author, Book, Genre):
        registry = orm.registry()
        registry.map_imperatively(
            Author,
            table_author,
            properties={"books": orm.relationship(Book)},
        )
        registry.map_imperatively(
            Book,
            table_book,
            properties={"genre": orm.relationship(Genre)},
        )
        registry.map_imperatively(Genre, table_genre)
        yield registry
        registry.dispose()

    @pytest.fixture
    def target(self, sa_registry, Author, Book, Genre):
        from ..core import SQLAContext

        ctx = SQLAContext()
        ctx.register(Author, "authors", key_transform=camelize)
        ctx.register(Book, "books")
        ctx.register(Genre, "genres")
        return ctx

    @pytest.fixture
    def session(self, engine):
        session = orm.Session(bind=engine)
        yield session
        session.close()

    @pytest.fixture
    def author(self, session, Author, Book):
        author = Author(first_name="Stephen", age=75, books=[Book(title="It")])
        session.add(author)
        session.flush()
        return author

    def test_descriptor(self, target):
        descr = target.for_type("authors")
        assert list(descr.attributes) == ["first_name", "age"]
        assert descr.attributes["age"].type is int
        assert descr.attributes["age"].is_numeric
        assert descr.attributes["first_name"].serialize_key() == "firstName"
        # foreign keys are not attributes
        assert list(target.for_type("books").attributes) == ["title"]

    def test_record_identity(self, target, author):
        record = target.record_for(author)
        assert target.record_for(author) is record
        assert record.jsonapi_type == "authors"
        assert record.is_persisted
        assert record.id == str(author.id)
        assert record.temp_id is None

    def test_new_record(self, target, Book):
        record = target.record_for(Book(title="Carrie"))
        assert not record.is_persisted
        assert record.id is None
        assert record.attribute_values() == {"title": "Carrie"}
        assert record.is_dirty()

    def test_changed_attributes(self, target, author):
        record = target.record_for(author)
        assert record.changed_attributes() == frozenset()
        assert not record.is_dirty()
        author.age = 76
        assert record.changed_attributes() == {"age"}
        assert record.is_dirty()

    def test_unloaded_relation_is_left_alone(self, target, session, author):
        record = target.record_for(author)
        session.expire(author, ["books"])
        assert record.fetch_related("books") is UNSPECIFIED

    def test_unmapped_relation(self, target, author):
        assert target.record_for(author).fetch_related("genre") is UNSPECIFIED

    def test_write_payload(self, target, author, Book):
        author.age = 76
        author.books.append(Book(title="Carrie"))
        record = target.record_for(author)

        payload = WritePayload(
            record,
            {"books": {}},
            descriptors=target,
            temp_id_generator=FixedTempIdGenerator(),
        )
        assert payload.as_json() == {
            "data": {
                "type": "authors",
                "id": str(author.id),
                "attributes": {"age": 76},
                "relationships": {
                    "books": {
                        "data": [
                            {"type": "books", "temp-id": "temp-1", "method": "create"},
                        ],
                    },
                },
            },
            "included": [
                {"type": "books", "temp-id": "temp-1", "attributes": {"title": "Carrie"}},
            ],
        }

        payload.post_process()
        new_book = target.record_for(author.books[1])
        assert new_book.temp_id == "temp-1"
        assert not record.has_dirty_relation("books", new_book)

    def test_destroy_and_reconcile(self, target, author):
        record = target.record_for(author)
        (book,) = record.fetch_related("books")
        book.mark_for_destruction()

        payload = WritePayload(record, {"books": {}}, descriptors=target)
        assert payload.as_json() == {
            "data": {
                "type": "authors",
                "id": str(author.id),
                "relationships": {
                    "books": {
                        "data": [
                            {"type": "books", "id": book.id, "method": "destroy"},
                        ],
                    },
                },
            },
            "included": [
                {"type": "books", "id": book.id},
            ],
        }

        payload.post_process()
        assert author.books == []
        assert record.fetch_related("books") == []

    def test_unregistered_class(self, sa_registry, author, Author):
        from ..core import SQLAContext

        ctx = SQLAContext()
        ctx.register(Author, "authors")
        author.books[0].title = "It (1986)"

        with pytest.raises(UndefinedResourceTypeError):
            WritePayload(ctx.record_for(author), {"books": {}}, descriptors=ctx).as_repr()

    def test_unregistered_class_is_still_change_tracked(self, sa_registry, author, Author):
        from ..core import SQLAContext

        ctx = SQLAContext()
        ctx.register(Author, "authors")
        book = ctx.record_for(author.books[0])
        assert book.jsonapi_type is None
        assert book.changed_attributes() == frozenset()
        author.books[0].title = "It (1986)"
        assert book.changed_attributes() == {"title"}
        assert book.is_dirty()

    def test_cleared_to_one(self, target, session, author, Genre):
        native_book = author.books[0]
        native_book.genre = Genre(name="Horror")
        session.flush()
        record = target.record_for(author)
        (book,) = record.fetch_related("books")
        assert not book.has_cleared_relation("genre")
        assert not record.is_dirty({"books": {"genre": {}}})

        native_book.genre = None
        assert book.has_cleared_relation("genre")
        assert not book.has_cleared_relation("books")
        assert record.is_dirty({"books": {"genre": {}}})

        payload = WritePayload(record, {"books": {"genre": {}}}, descriptors=target)
        assert payload.as_json() == {
            "data": {
                "type": "authors",
                "id": str(author.id),
                "relationships": {
                    "books": {
                        "data": [
                            {"type": "books", "id": book.id, "method": "update"},
                        ],
                    },
                },
            },
            "included": [
                {
                    "type": "books",
                    "id": book.id,
                    "relationships": {"genre": {"data": None}},
                },
            ],
        }

        payload.post_process()
        assert not book.has_cleared_relation("genre")
        assert not record.is_dirty({"books": {"genre": {}}})

    def test_id_is_read_only(self, target, author):
        record = target.record_for(author)
        with pytest.raises(AttributeError):
            record.id = "2"
        assert record.id == str(author.id)
