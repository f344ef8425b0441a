import copy

import pytest

from ..models import (
    EmbeddedResource,
    PagedResourceCollection,
    Resource,
    ResourceCollection,
)
from .testing import (
    ROOT_URL,
    Address,
    Other,
    Thing,
    ThingProjection,
    raw_embedded_resource,
    raw_paged_resource_collection,
    raw_resource,
    raw_resource_collection,
)


@pytest.fixture
def registry():
    from ..registry import TypeRegistry

    return TypeRegistry()


@pytest.fixture
def target(registry):
    from ..materializer import GraphMaterializer

    return GraphMaterializer(registry)


class TestInstantiateResource:
    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {},
            {"_links": None},
            {"_links": {}},
            {"_links": "not_object"},
            {"text": "no links"},
            "things",
        ],
    )
    def test_not_resource_shaped(self, target, payload):
        assert target.instantiate_resource(payload) is None

    def test_generic(self, target):
        result = target.instantiate_resource(raw_resource())
        assert type(result) is Resource
        assert result["text"] == "hello world"
        assert result.self_href == f"{ROOT_URL}/things/1"

    def test_registered_type(self, target, registry):
        registry.register_resource_type("things", Thing)
        result = target.instantiate_resource(raw_resource())
        assert isinstance(result, Thing)

    def test_resource_class_given_by_caller(self, target, registry):
        registry.register_resource_type("things", Thing)
        result = target.instantiate_resource(raw_resource(), resource_class=Other)
        assert isinstance(result, Other)

    def test_embedded_resources(self, target):
        result = target.instantiate_resource(
            raw_resource(embeddedCollection=[raw_embedded_resource(), raw_embedded_resource()])
        )
        assert isinstance(result, Resource)
        assert len(result["embeddedCollection"]) == 2
        assert all(isinstance(e, EmbeddedResource) for e in result["embeddedCollection"])

    def test_registered_embedded_type(self, target, registry):
        registry.register_embedded_type("embedResTest", Address)
        result = target.instantiate_resource(raw_resource(embedResTest=raw_embedded_resource()))
        assert isinstance(result, Resource)
        assert isinstance(result["embedResTest"], Address)

    def test_nested_resources(self, target, registry):
        registry.register_resource_type("others", Other)
        result = target.instantiate_resource(
            raw_resource(
                resourceCollection=[raw_resource(2), raw_resource(3)],
                other=raw_resource(1, "others"),
            )
        )
        assert [type(r) for r in result["resourceCollection"]] == [Resource, Resource]
        assert [r["_links"]["self"]["href"] for r in result["resourceCollection"]] == [
            f"{ROOT_URL}/things/2",
            f"{ROOT_URL}/things/3",
        ]
        assert isinstance(result["other"], Other)

    def test_nested_collection(self, target):
        result = target.instantiate_resource(raw_resource(items=raw_resource_collection()))
        assert isinstance(result["items"], ResourceCollection)
        assert len(result["items"]) == 2

    def test_skips_hibernate_lazy_initializer(self, target):
        result = target.instantiate_resource(raw_resource(hibernateLazyInitializer={}))
        assert isinstance(result, Resource)
        assert "hibernateLazyInitializer" not in result

    def test_plain_values(self, target):
        result = target.instantiate_resource(
            raw_resource(count=3, tags=["a", "b"], address={"city": "Tokyo"}, missing=None)
        )
        assert result["count"] == 3
        assert result["tags"] == ["a", "b"]
        assert result["address"] == {"city": "Tokyo"}
        assert result["missing"] is None

    def test_does_not_mutate_payload(self, target):
        payload = raw_resource(embedded=raw_embedded_resource(), hibernateLazyInitializer={})
        expected = copy.deepcopy(payload)
        target.instantiate_resource(payload)
        assert payload == expected

    def test_idempotent(self, target):
        payload = raw_resource(embedded=[raw_embedded_resource()], address={"city": "Tokyo"})
        a = target.instantiate_resource(payload)
        b = target.instantiate_resource(payload)
        assert a == b
        assert a is not b
        assert a["embedded"][0] is not b["embedded"][0]
        assert a["address"] is not b["address"]

    def test_projection(self, target, registry):
        registry.register_resource_type("things", Thing)
        registry.register_projection(Thing, "thingProjection", ThingProjection)
        assert isinstance(target.instantiate_resource(raw_resource()), Thing)
        assert isinstance(target.instantiate_resource(raw_resource(), True), ThingProjection)

    def test_projection_relation(self, target, registry):
        registry.register_resource_type("things", Thing)
        registry.register_projection(Thing, "thingProjection", ThingProjection)
        registry.register_projection_relation("other", Other)

        result = target.instantiate_resource(
            raw_resource(other={"text": "inlined"}, others=[{"text": "a"}, {"text": "b"}]),
            is_projection=True,
        )
        assert isinstance(result, ThingProjection)
        assert isinstance(result["other"], Other)
        assert result["other"]["text"] == "inlined"
        assert [type(o) for o in result["others"]] == [dict, dict]

        registry.register_projection_relation("others", Other)
        result = target.instantiate_resource(
            raw_resource(others=[{"text": "a"}, {"text": "b"}]), is_projection=True
        )
        assert [type(o) for o in result["others"]] == [Other, Other]
        assert result["others"][1]["text"] == "b"

    def test_find_resource_name(self, target):
        assert target.find_resource_name(raw_resource()) == "things"
        templated = {"_links": {"self": {"href": f"{ROOT_URL}/things/1{{?projection}}"}}}
        assert target.find_resource_name(templated) == "things"
        assert target.find_resource_name({"_links": {"self": {"href": "/things"}}}) == "things"
        assert target.find_resource_name(raw_embedded_resource()) is None

    def test_find_resource_name_of_nested_link(self, target, registry):
        from ..materializer import GraphMaterializer

        nested = {"_links": {"self": {"href": f"{ROOT_URL}/things/1/parts/2"}}}
        assert target.find_resource_name(nested) == "parts"

        target = GraphMaterializer(registry, base_api_url=f"{ROOT_URL}/")
        assert target.find_resource_name(nested) == "things"
        assert target.find_resource_name(raw_resource(1, "others")) == "others"
        elsewhere = {"_links": {"self": {"href": "http://elsewhere/api/parts/2"}}}
        assert target.find_resource_name(elsewhere) == "parts"

    def test_empty_links_are_not_resources(self, target):
        assert target.materialize({"_links": {}}) == {"_links": {}}
        result = target.instantiate_resource(raw_resource(owner={"_links": {}}))
        assert result["owner"] == {"_links": {}}


class TestInstantiateResourceCollection:
    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {},
            {"_links": None, "_embedded": {"someVal": "test"}},
            {"_links": "not_object", "_embedded": {"someVal": "test"}},
            {"_embedded": None, "_links": {"someVal": "test"}},
            {"_embedded": "not_object", "_links": {"someVal": "test"}},
        ],
    )
    def test_not_collection_shaped(self, target, payload):
        assert target.instantiate_resource_collection(payload) is None
        assert target.instantiate_paged_resource_collection(payload) is None

    def test_collection(self, target):
        result = target.instantiate_resource_collection(raw_resource_collection())
        assert type(result) is ResourceCollection
        assert [type(r) for r in result] == [Resource, Resource]
        assert [r["text"] for r in result] == ["hello world", "Second object"]

    def test_registered_types(self, target, registry):
        from ..registry import ResourceKind

        class Things(ResourceCollection):
            pass

        registry.register_resource_type("things", Thing)
        registry.register(ResourceKind.COLLECTION, "things", Things)
        result = target.instantiate_resource_collection(raw_resource_collection())
        assert isinstance(result, Things)
        assert all(isinstance(r, Thing) for r in result)

    def test_copies_root_links(self, target):
        payload = raw_resource_collection()
        result = target.instantiate_resource_collection(payload)
        assert result._links == payload["_links"]
        assert result._links is not payload["_links"]

    def test_concatenates_embedded_keys(self, target):
        payload = {
            "_embedded": {
                "things": [raw_resource(1), raw_resource(2)],
                "others": raw_resource(3, "others"),
                "addresses": [raw_embedded_resource()],
            },
            "_links": {},
        }
        result = target.instantiate_resource_collection(payload)
        assert [r.self_href for r in result] == [
            f"{ROOT_URL}/things/1",
            f"{ROOT_URL}/things/2",
            f"{ROOT_URL}/others/3",
            None,
        ]
        assert isinstance(result[3], EmbeddedResource)

    def test_embedded_items(self, target, registry):
        registry.register_embedded_type("addresses", Address)
        result = target.instantiate_resource_collection(
            {"_embedded": {"addresses": [raw_embedded_resource()]}, "_links": {}}
        )
        assert isinstance(result[0], Address)

    def test_projection(self, target, registry):
        registry.register_resource_type("things", Thing)
        registry.register_projection(Thing, "thingProjection", ThingProjection)
        result = target.instantiate_resource_collection(raw_resource_collection(), True)
        assert all(isinstance(r, ThingProjection) for r in result)


class TestInstantiatePagedResourceCollection:
    def test_page_metadata(self, target):
        result = target.instantiate_paged_resource_collection(raw_paged_resource_collection())
        assert type(result) is PagedResourceCollection
        assert result.page_number == 1
        assert result.page_size == 2
        assert result.total_elements == 8
        assert result.total_pages == 4
        assert result.has_first()
        assert result.has_next()
        assert result.has_prev()
        assert result.has_last()
        assert [r["text"] for r in result] == ["hello world", "Second object"]

    def test_default_page(self, target):
        payload = {
            **raw_paged_resource_collection(),
            "page": None,
            "_links": {"self": {"href": f"{ROOT_URL}/things"}},
        }
        result = target.instantiate_paged_resource_collection(payload)
        assert result.page_number == 0
        assert result.page_size == 20
        assert result.total_elements == 0
        assert result.total_pages == 1
        assert not result.has_first()
        assert not result.has_next()
        assert not result.has_prev()
        assert not result.has_last()
        assert len(result) == 2

    def test_default_page_size(self, registry):
        from ..materializer import GraphMaterializer

        target = GraphMaterializer(registry, default_page_size=50)
        result = target.instantiate_paged_resource_collection(
            {"_embedded": {"things": []}, "_links": {}, "page": {"number": 3}}
        )
        assert result.page_number == 3
        assert result.page_size == 50

    def test_navigation_links_are_not_derived_from_page_numbers(self, target):
        payload = raw_paged_resource_collection()
        del payload["_links"]["prev"]
        result = target.instantiate_paged_resource_collection(payload)
        assert result.page_number == 1
        assert not result.has_prev()


class TestMaterialize:
    def test_dispatch(self, target):
        assert isinstance(
            target.materialize(raw_paged_resource_collection()), PagedResourceCollection
        )
        assert type(target.materialize(raw_resource_collection())) is ResourceCollection
        assert isinstance(target.materialize(raw_resource()), Resource)

    @pytest.mark.parametrize("payload", [None, "ok", 1, [1, 2], {"count": 2}])
    def test_plain_data(self, target, payload):
        assert target.materialize(payload) == payload

    def test_init_resource(self, target):
        resource = target.init_resource(raw_resource())
        assert type(resource) is Resource
        assert resource["text"] == "hello world"
        assert type(target.init_resource(raw_embedded_resource())) is EmbeddedResource
        assert target.init_resource({"count": 1}) == {"count": 1}

    def test_binds_client(self, registry):
        from ..materializer import GraphMaterializer

        client = object()
        target = GraphMaterializer(registry, client=client)
        result = target.instantiate_resource(raw_resource(embedded=raw_embedded_resource()))
        assert result._client_ is client
        assert result["embedded"]._client_ is client
        assert "_client_" not in result.attributes()
