from datetime import datetime, timezone

import pytest

from jsonapi_marshal.exceptions import BadFieldSpec, BadPrimaryKeyType, UnsupportedModel
from jsonapi_marshal.fields import FieldSpec, Role
from jsonapi_marshal.schemas.resource import RelationshipMany, RelationshipOne, ResourceNode
from jsonapi_marshal.serializers.base import (
    OMITTED,
    IncludedSet,
    JSONAPISerializer,
    encode_attribute,
    is_empty_value,
)
from jsonapi_marshal.timestamps import CALENDAR
from tests.models import (
    Animal,
    Author,
    Blog,
    Book,
    Comment,
    Event,
    FloatId,
    Person,
    Plain,
    Post,
    Settings,
    Timestamp,
    TimestampOmitEmpty,
    UnknownOption,
    Untagged,
)

MOMENT = datetime(2016, 12, 8, 15, 18, 54, tzinfo=timezone.utc)


@pytest.fixture
def serializer():
    return JSONAPISerializer()


class TestIdentifiers:
    """Primary and client-generated ids"""

    def test_integer_id_becomes_decimal_string(self, serializer):
        node = serializer.to_node(Comment(id=12, body="x"))
        assert node.type == "comments"
        assert node.id == "12"

    def test_string_id_is_kept(self, serializer):
        assert serializer.to_node(Animal(id="rex-7")).id == "rex-7"

    def test_large_integer_id(self, serializer):
        assert serializer.to_node(Comment(id=2**64 - 1)).id == "18446744073709551615"

    @pytest.mark.parametrize("value", [1.5, None, True, b"12", ["1"]])
    def test_unsupported_id_types(self, serializer, value):
        with pytest.raises(BadPrimaryKeyType):
            serializer.get_id(value)

    def test_float_primary_field(self, serializer):
        with pytest.raises(BadPrimaryKeyType):
            serializer.to_node(FloatId())

    def test_client_id_is_recorded(self, serializer):
        node = serializer.to_node(Comment(client_id="abc-123", body="new"))
        assert node.client_id == "abc-123"
        assert node.as_document()["client-id"] == "abc-123"

    def test_empty_client_id_is_unset(self, serializer):
        node = serializer.to_node(Comment(id=1, client_id=""))
        assert node.client_id is None
        assert "client-id" not in node.as_document()


class TestAttributes:
    """Attribute extraction"""

    def test_values_are_stored_verbatim_in_declaration_order(self, serializer):
        node = serializer.to_node(Post(id=1, blog_id=5, title="Foo", body="Bar"))
        assert list(node.attributes) == ["blog_id", "title", "body"]
        assert node.attributes == {"blog_id": 5, "title": "Foo", "body": "Bar"}

    def test_untagged_fields_are_ignored(self, serializer):
        blog = Blog(id=1, title="T", internal_notes="secret")
        assert "internal_notes" not in serializer.to_node(blog).attributes
        assert serializer.to_node(Untagged()) == ResourceNode(type="")

    def test_omitempty_drops_zero_values(self, serializer):
        node = serializer.to_node(Settings(id="s1"))
        assert node.attributes == {"plain_label": "", "plain_retries": 0}

    def test_omitempty_keeps_non_zero_values(self, serializer):
        settings = Settings(
            id="s1",
            enabled=True,
            retries=3,
            ratio=0.5,
            label="x",
            tags=["a"],
            extra={"k": None},
        )
        assert serializer.to_node(settings).attributes == {
            "enabled": True,
            "retries": 3,
            "ratio": 0.5,
            "label": "x",
            "tags": ["a"],
            "extra": {"k": None},
            "plain_label": "",
            "plain_retries": 0,
        }

    def test_no_attributes_means_no_attributes_member(self, serializer):
        node = serializer.to_node(TimestampOmitEmpty(id=1))
        assert node.attributes is None
        assert node.as_document() == {"type": "timestamps", "id": "1"}

    def test_codec_nested_in_container(self, serializer):
        event = Event(id="e1", happened_at=MOMENT, checkpoints=[MOMENT, MOMENT])
        node = serializer.to_node(event)
        assert node.attributes == {
            "happened_at": 1481210334000,
            "scheduled_for": None,
            "checkpoints": [1481210334000, 1481210334000],
        }


class TestTimestampAttributes:
    """Timestamp attribute semantics"""

    def test_set_timestamps_use_calendar_codec(self, serializer):
        node = serializer.to_node(Timestamp(id=1, time=MOMENT, next=MOMENT))
        assert node.attributes == {
            "timestamp": "2016-12-08T15:18:54Z",
            "next": "2016-12-08T15:18:54Z",
        }

    def test_zero_timestamp_is_always_omitted(self, serializer):
        node = serializer.to_node(Timestamp(id=1, time=datetime.min, next=MOMENT))
        assert "timestamp" not in node.attributes

    def test_unset_nullable_timestamp_is_null(self, serializer):
        node = serializer.to_node(Timestamp(id=1, time=MOMENT, next=None))
        assert node.attributes["next"] is None

    def test_unset_nullable_timestamp_with_omitempty_is_omitted(self, serializer):
        node = serializer.to_node(TimestampOmitEmpty(id=1, time=MOMENT, next=None))
        assert node.attributes == {"timestamp": "2016-12-08T15:18:54Z"}

    def test_zero_nullable_timestamp_is_encoded_without_omitempty(self, serializer):
        node = serializer.to_node(Timestamp(id=1, time=MOMENT, next=datetime.min))
        assert node.attributes["next"] == "0001-01-01T00:00:00Z"

    def test_zero_nullable_timestamp_with_omitempty_is_omitted(self, serializer):
        node = serializer.to_node(TimestampOmitEmpty(id=1, time=MOMENT, next=datetime.min))
        assert "next" not in node.attributes

    def test_unix_milli_attribute(self, serializer):
        node = serializer.to_node(Event(id="e1", happened_at=MOMENT, scheduled_for=MOMENT))
        assert node.attributes["happened_at"] == 1481210334000
        assert node.attributes["scheduled_for"] == "2016-12-08T15:18:54Z"

    def test_timestamp_without_declared_type(self):
        spec = FieldSpec(Role.ATTRIBUTE, wire_name="at")
        assert encode_attribute(spec, MOMENT) == "2016-12-08T15:18:54Z"
        assert encode_attribute(spec, datetime.min) is OMITTED

    def test_non_nullable_unset_timestamp_is_omitted(self):
        spec = FieldSpec(Role.ATTRIBUTE, wire_name="at", codec=CALENDAR)
        assert encode_attribute(spec, None) is OMITTED


class TestRelationships:
    """Relationship linkage and sideloading"""

    def test_single_relationship_is_shallow_and_sideloaded(self, serializer, alice):
        included = IncludedSet()
        node = serializer.to_node(alice, included)
        assert node.relationships == {
            "pet": RelationshipOne(data=ResourceNode(type="animals", id="7"))
        }
        assert included.nodes() == [
            ResourceNode(type="animals", id="7", attributes={"name": "Rex"})
        ]

    def test_without_included_set_related_nodes_are_discarded(self, serializer, alice):
        node = serializer.to_node(alice)
        assert node.relationships["pet"].data == ResourceNode(type="animals", id="7")
        nodes = serializer.to_many([alice, Person(id="43", pet=Animal(id="8"))])
        assert [n.relationships["pet"].data.id for n in nodes] == ["7", "8"]
        assert all(n.relationships["pet"].data.attributes is None for n in nodes)

    def test_collection_relationship_keeps_order(self, serializer, blog):
        included = IncludedSet()
        node = serializer.to_node(blog, included)
        posts = node.relationships["posts"]
        assert isinstance(posts, RelationshipMany)
        assert [(ref.type, ref.id) for ref in posts.data] == [("posts", "1"), ("posts", "2")]
        assert all(ref.attributes is None for ref in posts.data)

    def test_empty_collection_and_none_have_no_entry(self, serializer):
        node = serializer.to_node(Post(id=1, title="Lonely"))
        assert node.relationships is None
        assert "relationships" not in node.as_document()

    def test_shared_resource_is_included_once(self, serializer):
        rex = Animal(id="7", name="Rex")
        person = Person(id="42", name="Alice", pet=rex, favorite=rex)
        included = IncludedSet()
        node = serializer.to_node(person, included)
        assert len(included) == 1
        assert node.relationships["pet"].data == ResourceNode(type="animals", id="7")
        assert node.relationships["favorite"].data == ResourceNode(type="animals", id="7")

    def test_first_visited_duplicate_wins(self, serializer):
        person = Person(
            id="42",
            pet=Animal(id="7", name="Rex"),
            favorite=Animal(id="7", name="Impostor"),
        )
        included = IncludedSet()
        serializer.to_node(person, included)
        assert included.nodes()[0].attributes == {"name": "Rex"}

    def test_nested_resources_are_sideloaded(self, serializer, blog):
        included = IncludedSet()
        serializer.to_node(blog, included)
        assert {(node.type, node.id) for node in included} == {
            ("posts", "1"),
            ("posts", "2"),
            ("comments", "1"),
            ("comments", "2"),
            ("comments", "3"),
        }
        post = next(node for node in included if node.id == "1" and node.type == "posts")
        assert post.relationships["latest_comment"].data == ResourceNode(type="comments", id="1")

    def test_embedded_mode_nests_full_nodes(self, blog):
        serializer = JSONAPISerializer(sideload=False)
        node = serializer.to_node(blog)
        first = node.relationships["posts"].data[0]
        assert first.attributes["title"] == "Foo"
        assert first.relationships["comments"].data[1].attributes == {"post_id": 1, "body": "bar"}
        assert node.relationships["current_post"].data == first

    def test_relationship_cardinality_from_runtime_value(self, serializer):
        spec = FieldSpec(Role.RELATIONSHIP, wire_name="pets")
        included = IncludedSet()
        linkage = serializer.get_relationship(spec, (Animal(id="1"), Animal(id="2")), included)
        assert isinstance(linkage, RelationshipMany)
        assert serializer.get_relationship(spec, [], included) is None
        assert isinstance(serializer.get_relationship(spec, Animal(id="3"), included), RelationshipOne)
        assert len(included) == 3

    def test_pydantic_models(self, serializer):
        book = Book(
            isbn="978-0",
            title="Dune",
            published=MOMENT,
            authors=[Author(id=1, name="Frank")],
        )
        included = IncludedSet()
        node = serializer.to_node(book, included)
        assert node.id == "978-0"
        assert node.attributes == {"title": "Dune", "published": 1481210334000}
        assert node.relationships["authors"].data == [ResourceNode(type="authors", id="1")]
        assert included.nodes()[0].attributes == {"name": "Frank"}

    def test_cycles_are_not_detected(self, serializer):
        person = Person(id="1")
        person.friends.append(person)
        with pytest.raises(RecursionError):
            serializer.to_node(person, IncludedSet())


class TestErrors:
    """Structural errors abort the visit"""

    def test_error_in_related_object_propagates(self, serializer):
        post = Post(id=1, comments=[Comment(id=1), Comment(id=None)])
        with pytest.raises(BadPrimaryKeyType):
            serializer.to_node(post, IncludedSet())

    def test_bad_descriptor(self, serializer):
        with pytest.raises(BadFieldSpec):
            serializer.to_node(UnknownOption())

    def test_unsupported_related_object(self, serializer):
        with pytest.raises(UnsupportedModel):
            serializer.to_node(Person(id="1", pet=Plain()), IncludedSet())


class TestIncludedSet:
    def test_add_reports_duplicates(self):
        included = IncludedSet()
        assert included.add(ResourceNode(type="a", id="1"))
        assert not included.add(ResourceNode(type="a", id="1", attributes={"x": 1}))
        assert included.add(ResourceNode(type="b", id="1"))
        assert ("a", "1") in included
        assert len(included) == 2


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        (0, True),
        (0.0, True),
        (False, True),
        ("", True),
        ([], True),
        ({}, True),
        (1, False),
        ("a", False),
        ([0], False),
        (Animal(), False),
    ],
)
def test_is_empty_value(value, expected):
    assert is_empty_value(value) is expected
