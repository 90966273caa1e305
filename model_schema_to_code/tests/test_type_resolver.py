import pytest

from model_schema_to_code.pipeline.analyzer.ir_nodes import (
    IdentifierType,
    List,
    Optional,
    Primitive,
    PrimitiveKind,
    Reference,
    StringMap,
)
from model_schema_to_code.pipeline.analyzer.type_resolver import TypeResolver
from model_schema_to_code.pipeline.config import FeatureGate, GeneratorConfig, UnknownTypePolicy
from model_schema_to_code.pipeline.diagnostics import DiagnosticSink
from model_schema_to_code.pipeline.errors import (
    InvalidRefinementError,
    NestedOptionalError,
    ResolutionError,
    UnsupportedMapKeyError,
    UnsupportedTypeError,
)

STRING = Primitive(PrimitiveKind.STRING)
INTEGER = Primitive(PrimitiveKind.INTEGER)


def make_resolver(config=None, sink=None):
    return TypeResolver(config or GeneratorConfig(), sink if sink is not None else DiagnosticSink(), entity="TestJson")


class TestPrimitives:
    """Test primitive type spellings"""

    @pytest.mark.parametrize(
        "spelling,kind",
        [
            ("bool", PrimitiveKind.BOOLEAN),
            ("String", PrimitiveKind.STRING),
            ("str", PrimitiveKind.STRING),
            ("char", PrimitiveKind.STRING),
            ("u8", PrimitiveKind.INTEGER),
            ("u128", PrimitiveKind.INTEGER),
            ("i64", PrimitiveKind.INTEGER),
            ("usize", PrimitiveKind.INTEGER),
            ("isize", PrimitiveKind.INTEGER),
            ("f32", PrimitiveKind.FLOAT),
            ("f64", PrimitiveKind.FLOAT),
        ],
    )
    def test_primitive(self, spelling, kind):
        assert make_resolver().resolve(spelling) == Primitive(kind)

    def test_unknown_name_is_a_reference_without_suffix(self):
        resolver = make_resolver()
        assert resolver.resolve("AddressJson") == Reference("Address")
        assert resolver.resolve("Address") == Reference("Address")
        assert resolver.resolve("crate::models::AddressJson") == Reference("Address")

    def test_references_and_smart_pointers_are_transparent(self):
        resolver = make_resolver()
        assert resolver.resolve("&'static str") == STRING
        assert resolver.resolve("Box<NodeJson>") == Reference("Node")
        assert resolver.resolve("Arc<Vec<u32>>") == List(INTEGER)


class TestWrappers:
    """Test optional, sequence and map wrappers"""

    def test_optional(self):
        assert make_resolver().resolve("Option<String>") == Optional(STRING)

    def test_nested_optional_is_rejected(self):
        with pytest.raises(NestedOptionalError) as exc_info:
            make_resolver().resolve("Option<Option<String>>", field="nickname")
        assert exc_info.value.entity == "TestJson"
        assert exc_info.value.field == "nickname"

    def test_optional_behind_box_is_still_nested(self):
        with pytest.raises(NestedOptionalError):
            make_resolver().resolve("Option<Box<Option<String>>>")

    @pytest.mark.parametrize("spelling", ["Vec<String>", "VecDeque<String>", "HashSet<String>", "BTreeSet<String>", "[String]", "[String; 3]"])
    def test_sequences(self, spelling):
        assert make_resolver().resolve(spelling) == List(STRING)

    def test_optional_inside_collection_is_rejected(self):
        with pytest.raises(NestedOptionalError):
            make_resolver().resolve("Vec<Option<String>>")
        with pytest.raises(NestedOptionalError):
            make_resolver().resolve("HashMap<String, Option<u32>>")

    @pytest.mark.parametrize("spelling", ["HashMap<String, u32>", "BTreeMap<String, u32>", "IndexMap<&str, u32>"])
    def test_string_keyed_maps(self, spelling):
        assert make_resolver().resolve(spelling) == StringMap(INTEGER)

    @pytest.mark.parametrize("key", ["u32", "i64", "bool", "UserIdJson", "(String, String)", "Vec<String>"])
    def test_non_string_map_keys_are_rejected(self, key):
        with pytest.raises(UnsupportedMapKeyError) as exc_info:
            make_resolver().resolve(f"HashMap<{key}, String>", field="lookup")
        assert exc_info.value.key_spelling.replace(" ", "") == key.replace(" ", "")
        assert exc_info.value.field == "lookup"

    def test_map_key_rejection_ignores_reference_policy(self):
        config = GeneratorConfig(unknown_type_policy=UnknownTypePolicy.REFERENCE)
        with pytest.raises(UnsupportedMapKeyError):
            make_resolver(config).resolve("BTreeMap<u64, String>")

    def test_resolution_is_position_independent(self):
        resolver = make_resolver()
        first = resolver.resolve("Vec<HashMap<String, u8>>", field="a")
        second = resolver.resolve("Vec<HashMap<String, u8>>", field="b")
        wrapped = resolver.resolve("Option<Vec<HashMap<String, u8>>>", field="c")
        assert first == second == List(StringMap(INTEGER))
        assert wrapped == Optional(first)


class TestIdentifierType:
    """Test ObjectId resolution under the identifier capability"""

    def test_identifier_enabled(self):
        assert make_resolver().resolve("ObjectId") == IdentifierType()
        assert make_resolver().resolve("bson::oid::ObjectId") == IdentifierType()

    def test_identifier_disabled_degrades_with_warning(self):
        sink = DiagnosticSink()
        config = GeneratorConfig(features=FeatureGate(identifier=False))
        node = make_resolver(config, sink).resolve("Option<ObjectId>", field="owner")

        assert node == Optional(Reference("ObjectId"))
        assert sink.codes() == ["identifier-disabled"]
        assert sink.warnings[0].field == "owner"
        assert sink.errors == []


class TestUnsupportedTypes:
    """Test fail-closed handling of shapes outside the vocabulary"""

    @pytest.mark.parametrize("spelling", ["(String, u32)", "Cow<'a, str>", "Result<String, Error>", "Vec<String, Global>"])
    def test_unsupported_types_fail(self, spelling):
        with pytest.raises(UnsupportedTypeError):
            make_resolver().resolve(spelling)

    def test_unsupported_types_degrade_under_reference_policy(self):
        sink = DiagnosticSink()
        config = GeneratorConfig(unknown_type_policy=UnknownTypePolicy.REFERENCE)
        resolver = make_resolver(config, sink)

        assert resolver.resolve("WrapperJson<String>") == Reference("Wrapper")
        assert resolver.resolve("(String, u32)") == Reference("Unknown")
        assert sink.codes() == ["unsupported-type-degraded", "unsupported-type-degraded"]

    def test_errors_are_resolution_errors(self):
        with pytest.raises(ResolutionError):
            make_resolver().resolve("(u8, u8)")


class TestFieldResolution:
    """Test overrides and refinements"""

    def test_override_replaces_declared_type(self):
        node = make_resolver().resolve_field("chrono::DateTime<Utc>", field="created_at", override="String")
        assert node == STRING

    def test_override_is_resolved_like_a_declared_type(self):
        node = make_resolver().resolve_field("Anything", override="Option<Vec<u32>>")
        assert node == Optional(List(INTEGER))

    def test_literal_refinement(self):
        node = make_resolver().resolve_field("String", literal="v1")
        assert node == Primitive(PrimitiveKind.STRING, literal="v1")

    def test_min_length_applies_to_innermost_string(self):
        node = make_resolver().resolve_field("Option<Vec<String>>", min_length=2)
        assert node == Optional(List(Primitive(PrimitiveKind.STRING, min_length=2)))

    def test_refinement_on_non_string_is_rejected(self):
        with pytest.raises(InvalidRefinementError) as exc_info:
            make_resolver().resolve_field("Vec<u32>", field="counts", min_length=1)
        assert exc_info.value.field == "counts"

    def test_refinement_after_override(self):
        node = make_resolver().resolve_field("u32", override="String", literal="fixed")
        assert node == Primitive(PrimitiveKind.STRING, literal="fixed")


if __name__ == "__main__":
    pytest.main([__file__])
