from routedoc.parser.base import (
    ParameterDescriptor,
    ResponseCallPolicy,
    RouteDescriptor,
    RouteRecord,
    SchemaField,
)


class TestParameterDescriptor:
    def test_defaults(self):
        p = ParameterDescriptor()
        assert p.type == "string"
        assert p.required is False
        assert p.description == ""


class TestSchemaField:
    def test_nested_fields(self):
        field = SchemaField(type="array", items={"id": SchemaField(type="integer")})
        assert field.items["id"].type == "integer"
        assert field.properties is None

    def test_serialization_roundtrip(self):
        field = SchemaField(type="object", properties={"tags": SchemaField(type="array", items={})})
        assert SchemaField(**field.model_dump()) == field


class TestRouteRecord:
    def test_head_is_not_documented(self):
        record = RouteRecord(handler="app:C.index", methods=["get", "HEAD"], uri="users")
        assert record.documented_methods == ["GET"]

    def test_inline_handler_is_accepted(self):
        record = RouteRecord(handler=lambda: None, methods=["GET"], uri="ping")
        assert callable(record.handler)


class TestResponseCallPolicy:
    def test_wildcard(self):
        assert ResponseCallPolicy(methods=["*"]).allows("DELETE")

    def test_disabled_by_default(self):
        assert not ResponseCallPolicy().allows("GET")


class TestRouteDescriptor:
    def test_minimal_route(self):
        route = RouteDescriptor(id="abc", group="general", title="Ping.", methods=["GET"], uri="ping")
        assert route.headers == {}
        assert route.schemas == []
        assert route.show_response is False
