from collections.abc import Callable
from typing import Any

import pytest
from faker import Faker
from graphql import GraphQLField, GraphQLObjectType, GraphQLString

from recordql.records.record import RecordList
from recordql.records.store import InMemoryRecordStore
from recordql.scaffolding.schema_scaffolder import SchemaScaffolder
from recordql.schema.manager import SchemaManager
from tests.models import Author, Post, SecretPost


def make_object_type(name: str) -> GraphQLObjectType:
    """A plain object type with a single ``Foo`` field."""
    return GraphQLObjectType(name, fields={"Foo": GraphQLField(GraphQLString)})


def static_resolver(items: list[Any]) -> Callable[..., RecordList]:
    """A data-fetch delegate always returning ``items``."""

    def resolve(parent: Any, args: dict[str, Any], context: Any, info: Any) -> RecordList:
        return RecordList(items)

    return resolve


@pytest.fixture
def manager() -> SchemaManager:
    return SchemaManager()


@pytest.fixture
def store(faker: Faker) -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    author = store.add(Author(name=faker.name(), email=faker.email()))
    for index in range(1, 6):
        store.add(
            Post(
                title=f"Post {index}",
                content=faker.paragraph(),
                rating=float(index),
                published=index % 2 == 0,
                author=author,
            )
        )
    store.add(SecretPost(title="Classified", rating=10.0))
    return store


@pytest.fixture
def blog_manager(store: InMemoryRecordStore) -> SchemaManager:
    """A manager exposing Post and Author with every operation."""
    scaffolder = SchemaScaffolder(store)
    scaffolder.apply_config(
        {
            "types": {
                "tests.models.Author": {"fields": ["name"], "operations": {"read": True, "readOne": True}},
                "tests.models.Post": {
                    "fields": "*",
                    "operations": {
                        "read": {"paginate": {"limit": 2, "maximumLimit": 3}, "sortableFields": ["title", "rating"]},
                        "readOne": True,
                        "create": True,
                        "update": True,
                        "delete": True,
                    },
                },
            }
        }
    )
    manager = SchemaManager()
    scaffolder.add_to_manager(manager)
    return manager
