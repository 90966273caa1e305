import pytest

from model_schema_to_code.pipeline.analyzer import EntityAnalyzer, classify
from model_schema_to_code.pipeline.analyzer.ir_nodes import (
    IdentifierType,
    Optional,
    Primitive,
    PrimitiveKind,
    RecordKind,
    Reference,
    StringMap,
    UnionKind,
)
from model_schema_to_code.pipeline.config import FeatureGate, GeneratorConfig
from model_schema_to_code.pipeline.declaration import Declaration
from model_schema_to_code.pipeline.diagnostics import DiagnosticSink
from model_schema_to_code.pipeline.errors import (
    DirectiveSyntaxError,
    DuplicateWireNameError,
    InvalidDirectiveValueError,
    InvalidRefinementError,
    TagFieldCollisionError,
    UnsupportedCasingError,
    UnsupportedMapKeyError,
)


def record(name, fields, directives=None, docs=None):
    return Declaration.from_dict(
        {"name": name, "kind": "record", "fields": fields, "directives": directives or [], "docs": docs}
    )


def union(name, variants, directives=None):
    return Declaration.from_dict({"name": name, "kind": "union", "variants": variants, "directives": directives or []})


USER = record(
    "UserJson",
    [
        {"name": "id", "type": "String"},
        {"name": "age", "type": "u32"},
        {"name": "nick_name", "type": "Option<String>", "directives": ['serde(skip_serializing_if = "Option::is_none")']},
    ],
    directives=['serde(rename_all = "camelCase")'],
    docs="A registered user.",
)

PAYMENT = union(
    "PaymentJson",
    [
        {"name": "CreditCard", "fields": [{"name": "number", "type": "String"}]},
        {"name": "PayPal", "fields": [{"name": "email", "type": "String"}]},
        {"name": "Cash"},
    ],
    directives=['serde(rename_all = "lowercase")'],
)


class TestRecords:
    """Test classification of record declarations"""

    def test_record_fields(self):
        entity = classify(USER)

        assert isinstance(entity.kind, RecordKind)
        assert entity.is_record
        assert entity.declared_name == "UserJson"
        assert entity.wire_name == "User"
        assert [f.wire_name for f in entity.kind.fields] == ["id", "age", "nickName"]
        assert [f.required for f in entity.kind.fields] == [True, True, False]
        assert entity.kind.fields[2].type == Optional(Primitive(PrimitiveKind.STRING))
        assert entity.doc_comment == ("A registered user.",)

    def test_required_matches_top_level_optional(self):
        entity = classify(USER)
        for field in entity.kind.fields:
            assert field.required == (not isinstance(field.type, Optional))

    def test_name_without_suffix_is_kept(self):
        entity = classify(record("Settings", [{"name": "theme", "type": "String"}]))
        assert entity.wire_name == "Settings"

    def test_custom_suffix(self):
        config = GeneratorConfig(entity_suffix="Dto")
        assert classify(record("UserDto", []), config).wire_name == "User"

    def test_container_rename(self):
        entity = classify(record("UserJson", [], directives=['serde(rename = "Account")']))
        assert entity.wire_name == "Account"

    def test_explicit_field_rename(self):
        entity = classify(
            record(
                "DocJson",
                [{"name": "id", "type": "ObjectId", "directives": ['serde(rename = "_id")']}],
                directives=['serde(rename_all = "camelCase")'],
            )
        )
        field = entity.kind.fields[0]
        assert field.wire_name == "_id"
        assert field.type == IdentifierType()

    def test_skipped_fields_are_dropped(self):
        entity = classify(
            record(
                "CacheJson",
                [
                    {"name": "key", "type": "String"},
                    {"name": "hits", "type": "u64", "directives": ["serde(skip)"]},
                    {"name": "raw", "type": "Vec<u8>", "directives": ["serde(skip_serializing)"]},
                ],
            )
        )
        assert [f.wire_name for f in entity.kind.fields] == ["key"]

    def test_skip_if_on_required_field_warns(self):
        sink = DiagnosticSink()
        EntityAnalyzer(sink=sink).classify(
            record(
                "ListJson",
                [{"name": "items", "type": "Vec<String>", "directives": ['serde(skip_serializing_if = "Vec::is_empty")']}],
            )
        )
        assert sink.codes() == ["skip-if-on-required"]

    def test_skip_if_on_optional_field_is_silent(self):
        sink = DiagnosticSink()
        EntityAnalyzer(sink=sink).classify(USER)
        assert sink.diagnostics == []

    def test_duplicate_wire_names(self):
        declaration = record(
            "PairJson",
            [
                {"name": "first_name", "type": "String"},
                {"name": "firstName", "type": "String"},
            ],
            directives=['serde(rename_all = "camelCase")'],
        )
        with pytest.raises(DuplicateWireNameError) as exc_info:
            classify(declaration)
        assert exc_info.value.entity == "PairJson"
        assert {exc_info.value.first, exc_info.value.second} == {"first_name", "firstName"}

    def test_unsupported_casing(self):
        with pytest.raises(UnsupportedCasingError) as exc_info:
            classify(record("XJson", [], directives=['serde(rename_all = "Sentence case")']))
        assert exc_info.value.entity == "XJson"

    def test_errors_carry_entity_and_field(self):
        with pytest.raises(UnsupportedMapKeyError) as exc_info:
            classify(record("IndexJson", [{"name": "by_id", "type": "HashMap<u32, String>"}]))
        assert exc_info.value.entity == "IndexJson"
        assert exc_info.value.field == "by_id"
        assert exc_info.value.type_spelling == "u32"
        assert str(exc_info.value).startswith("IndexJson.by_id:")

    def test_model_schema_prop_directives(self):
        entity = classify(
            record(
                "ProductJson",
                [
                    {"name": "brand", "type": "String", "directives": ['model_schema_prop(literal = "Acme")']},
                    {"name": "sku", "type": "String", "directives": ["model_schema_prop(minLength = 1)"]},
                    {"name": "meta", "type": "serde_json::Value", "directives": ["model_schema_prop(as = HashMap<String, String>)"]},
                ],
            )
        )
        brand, sku, meta = entity.kind.fields
        assert brand.type == Primitive(PrimitiveKind.STRING, literal="Acme")
        assert sku.type == Primitive(PrimitiveKind.STRING, min_length=1)
        assert meta.type == StringMap(Primitive(PrimitiveKind.STRING))

    def test_invalid_refinement_values(self):
        with pytest.raises(InvalidRefinementError):
            classify(record("XJson", [{"name": "a", "type": "String", "directives": ["model_schema_prop(minLength = \"1\")"]}]))
        with pytest.raises(InvalidRefinementError):
            classify(record("XJson", [{"name": "a", "type": "u8", "directives": ['model_schema_prop(literal = "1")']}]))

    def test_malformed_directive(self):
        with pytest.raises(DirectiveSyntaxError):
            classify(record("XJson", [{"name": "a", "type": "String", "directives": ["serde(rename = )"]}]))

    def test_other_directive_namespaces_are_ignored(self):
        entity = classify(record("XJson", [{"name": "a", "type": "String", "directives": ["validate(email)"]}]))
        assert entity.kind.fields[0].wire_name == "a"

    def test_references_are_collected(self):
        entity = classify(
            record(
                "OrderJson",
                [
                    {"name": "customer", "type": "CustomerJson"},
                    {"name": "lines", "type": "Vec<OrderLineJson>"},
                    {"name": "billing", "type": "Option<CustomerJson>"},
                ],
            )
        )
        assert entity.references == ("Customer", "OrderLine")


class TestUnions:
    """Test classification of union declarations"""

    def test_plain_union(self):
        entity = classify(
            union("StatusJson", [{"name": "Active"}, {"name": "Inactive"}], directives=['serde(rename_all = "lowercase")'])
        )
        assert isinstance(entity.kind, UnionKind)
        assert entity.is_plain_union
        assert entity.kind.tag_key is None
        assert [v.wire_name for v in entity.kind.variants] == ["active", "inactive"]

    def test_tagged_union_default_tag(self):
        entity = classify(PAYMENT)
        assert entity.is_tagged_union
        assert entity.kind.tag_key == "type"
        assert [v.wire_name for v in entity.kind.variants] == ["creditcard", "paypal", "cash"]
        assert entity.kind.variants[2].fields == ()

    def test_tagged_union_custom_tag(self):
        declaration = union(
            "ShapeJson",
            [{"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]}],
            directives=['serde(tag = "kind")'],
        )
        assert classify(declaration).kind.tag_key == "kind"

    def test_configured_default_tag(self):
        declaration = union("ShapeJson", [{"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]}])
        assert classify(declaration, GeneratorConfig(default_tag_key="$type")).kind.tag_key == "$type"

    def test_tag_on_plain_union_is_ignored(self):
        entity = classify(union("ModeJson", [{"name": "On"}, {"name": "Off"}], directives=['serde(tag = "kind")']))
        assert entity.is_plain_union

    def test_tag_field_collision(self):
        declaration = union(
            "EventJson",
            [
                {"name": "Click", "fields": [{"name": "x", "type": "i32"}]},
                {"name": "Key", "fields": [{"name": "kind", "type": "String"}]},
            ],
            directives=['serde(tag = "kind")'],
        )
        with pytest.raises(TagFieldCollisionError) as exc_info:
            classify(declaration)
        assert exc_info.value.variant == "Key"
        assert exc_info.value.entity == "EventJson"

    def test_tag_collision_after_rename(self):
        declaration = union(
            "EventJson",
            [{"name": "Key", "fields": [{"name": "key_type", "type": "String", "directives": ['serde(rename = "type")']}]}],
        )
        with pytest.raises(TagFieldCollisionError):
            classify(declaration)

    def test_bare_tag_flag(self):
        declaration = union("EventJson", [{"name": "Click", "fields": [{"name": "x", "type": "i32"}]}], directives=["serde(tag)"])
        with pytest.raises(InvalidDirectiveValueError) as exc_info:
            classify(declaration)
        assert exc_info.value.key == "tag"
        assert exc_info.value.entity == "EventJson"

    @pytest.mark.parametrize("directive", ["serde(rename)", "serde(rename = 3)", "serde(rename_all)"])
    def test_naming_arguments_must_be_strings(self, directive):
        declaration = record("XJson", [{"name": "a", "type": "String", "directives": [directive]}])
        with pytest.raises(InvalidDirectiveValueError) as exc_info:
            classify(declaration)
        assert exc_info.value.field == "a"

    def test_duplicate_variant_wire_names(self):
        declaration = union("XJson", [{"name": "PayPal"}, {"name": "Paypal"}], directives=['serde(rename_all = "lowercase")'])
        with pytest.raises(DuplicateWireNameError):
            classify(declaration)

    def test_variant_field_policies(self):
        declaration = union(
            "EventJson",
            [
                {"name": "Click", "fields": [{"name": "screen_x", "type": "i32"}]},
                {
                    "name": "Scroll",
                    "directives": ['serde(rename_all = "kebab-case")'],
                    "fields": [{"name": "delta_y", "type": "i32"}],
                },
            ],
            directives=['serde(rename_all_fields = "camelCase")'],
        )
        click, scroll = classify(declaration).kind.variants
        assert click.fields[0].wire_name == "screenX"
        assert scroll.fields[0].wire_name == "delta-y"

    def test_variant_rename(self):
        declaration = union("XJson", [{"name": "Legacy", "directives": ['serde(rename = "old")']}, {"name": "New"}])
        assert [v.wire_name for v in classify(declaration).kind.variants] == ["old", "New"]


class TestNamingCapability:
    """Test behavior when the naming capability is disabled"""

    def test_naming_directives_are_ignored_with_one_warning(self):
        sink = DiagnosticSink()
        config = GeneratorConfig(features=FeatureGate(naming=False))
        entity = EntityAnalyzer(config, sink).classify(USER)

        assert [f.wire_name for f in entity.kind.fields] == ["id", "age", "nick_name"]
        assert sink.codes() == ["naming-disabled"]
        assert sink.warnings[0].entity == "UserJson"

    def test_tag_key_defaults_when_naming_disabled(self):
        sink = DiagnosticSink()
        config = GeneratorConfig(features=FeatureGate(naming=False))
        declaration = union(
            "ShapeJson",
            [{"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]}],
            directives=['serde(tag = "kind")'],
        )
        entity = EntityAnalyzer(config, sink).classify(declaration)
        assert entity.kind.tag_key == "type"
        assert [v.wire_name for v in entity.kind.variants] == ["Circle"]
        assert sink.codes() == ["naming-disabled"]

    def test_no_warning_without_naming_directives(self):
        sink = DiagnosticSink()
        config = GeneratorConfig(features=FeatureGate(naming=False))
        EntityAnalyzer(config, sink).classify(record("XJson", [{"name": "a", "type": "String"}]))
        assert sink.diagnostics == []

    def test_property_directives_still_apply(self):
        config = GeneratorConfig(features=FeatureGate(naming=False))
        entity = classify(
            record("XJson", [{"name": "a", "type": "u32", "directives": ["model_schema_prop(as = String)"]}]),
            config,
        )
        assert entity.kind.fields[0].type == Primitive(PrimitiveKind.STRING)


class TestReferences:
    """Test open-world references"""

    def test_mutual_references_resolve_independently(self):
        a = classify(record("AJson", [{"name": "b", "type": "BJson"}]))
        b = classify(record("BJson", [{"name": "a", "type": "Option<AJson>"}]))
        assert a.kind.fields[0].type == Reference("B")
        assert b.kind.fields[0].type == Optional(Reference("A"))


if __name__ == "__main__":
    pytest.main([__file__])
