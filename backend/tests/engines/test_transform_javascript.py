"""End-to-end transforms in V8 contexts (JavaScript dialect)."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from app.engines.transform import DataTransformer, ErrorKind, TransformError, data_transform
from app.engines.transform.classifier import NON_STRING_OUTPUT_MESSAGE
from app.engines.transform.providers import JavaScriptEngineProvider

IDENTITY_SCRIPT = (
    "function build(data){ if(!data.id) fail(\"missing id\"); return data.id.toUpperCase(); }"
)
COUNTER_SCRIPT = (
    "var counter = 0;\n"
    "function build(data) { counter += 1; return String(counter); }"
)


@pytest.fixture
def transformer() -> DataTransformer:
    return DataTransformer(JavaScriptEngineProvider())


class TestValues:
    def test_identity_example(self, transformer: DataTransformer) -> None:
        result = transformer.transform(IDENTITY_SCRIPT, {"id": "abc"})
        assert result.value == "ABC"

    def test_identity_example_missing_id(self, transformer: DataTransformer) -> None:
        result = transformer.transform(IDENTITY_SCRIPT, {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.VALIDATION
        assert result.failure.message == "missing id"

    @pytest.mark.parametrize(
        "value",
        [
            "plain",
            "",
            'with "double" and \'single\' quotes',
            "back\\slash \\n not a newline",
            "unicode é 中文 😀",
            "embedded\x00nul",
            "line\u2028separators\u2029",
            "\"});throw 1;//",
        ],
    )
    def test_string_round_trip(self, transformer: DataTransformer, value: str) -> None:
        result = transformer.transform("function build(data) { return data.value; }", {"value": value})
        assert result.ok
        assert result.value == value

    def test_null_is_empty(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function build(data) { return null; }", {})
        assert result.is_empty

    def test_input_is_a_copy(self, transformer: DataTransformer) -> None:
        data = {"items": [1, 2, 3]}
        script = "function build(data) { data.items.push(4); return String(data.items.length); }"
        assert transformer.transform(script, data).value == "4"
        assert data == {"items": [1, 2, 3]}


class TestOutputContract:
    @pytest.mark.parametrize("expr", ["42", "{a: 1}", "[1, 2]", "true", "false", "0"])
    def test_non_string_output(self, transformer: DataTransformer, expr: str) -> None:
        result = transformer.transform(f"function build(data) {{ return {expr}; }}", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.OUTPUT_SHAPE_ERROR
        assert result.failure.message == NON_STRING_OUTPUT_MESSAGE

    def test_undefined_output(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function build(data) { }", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.OUTPUT_ENCODING_ERROR

    def test_overridden_stringify(self, transformer: DataTransformer) -> None:
        script = (
            "JSON.stringify = function () { return 42; };\n"
            'function build(data) { return "x"; }'
        )
        result = transformer.transform(script, {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.OUTPUT_ENCODING_ERROR


class TestFailures:
    def test_fail_helper(self, transformer: DataTransformer) -> None:
        result = transformer.transform('function build(data) { fail("bad id"); }', {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.VALIDATION
        assert result.failure.message == "bad id"

    def test_syntax_error(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function build(data) { return 1;", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.message.startswith("SyntaxError")

    def test_runtime_error(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function build(data) { return data.x.y; }", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.message.startswith("TypeError")
        assert result.failure.details["name"] == "TypeError"

    def test_missing_build(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function make(data) { return 'x'; }", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.message.startswith("ReferenceError")

    def test_thrown_string(self, transformer: DataTransformer) -> None:
        result = transformer.transform('function build(data) { throw "boom"; }', {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.message == "boom"

    def test_thrown_plain_object(self, transformer: DataTransformer) -> None:
        result = transformer.transform("function build(data) { throw {code: 7}; }", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.details == {"code": 7}

    def test_data_transform_raises(self) -> None:
        with pytest.raises(TransformError) as exc_info:
            data_transform(IDENTITY_SCRIPT, {}, provider=JavaScriptEngineProvider())
        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert exc_info.value.message == "missing id"

    def test_data_transform_value(self) -> None:
        assert data_transform(IDENTITY_SCRIPT, {"id": "abc"}, provider=JavaScriptEngineProvider()) == "ABC"


class TestUnserializableThrows:
    def test_thrown_null_prototype_object(self, transformer: DataTransformer) -> None:
        script = "function build(data) { var o = Object.create(null); o.code = 3; throw o; }"
        result = transformer.transform(script, {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.details == {"code": 3}

    def test_thrown_cyclic_object(self, transformer: DataTransformer) -> None:
        script = "function build(data) { var o = {}; o.self = o; throw o; }"
        result = transformer.transform(script, {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR
        assert result.failure.message == "[object Object]"

    def test_thrown_value_without_string_form(self, transformer: DataTransformer) -> None:
        # Cyclic and prototype-less: neither JSON.stringify nor String() succeeds.
        script = "function build(data) { var o = Object.create(null); o.self = o; throw o; }"
        result = transformer.transform(script, {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.SCRIPT_ERROR


class TestIsolation:
    def test_no_host_objects(self, transformer: DataTransformer) -> None:
        script = (
            "function build(data) {"
            " return [typeof require, typeof process, typeof module].join(','); }"
        )
        assert transformer.transform(script, {}).value == "undefined,undefined,undefined"

    def test_sequential_invocations_do_not_share_state(self, transformer: DataTransformer) -> None:
        assert transformer.transform(COUNTER_SCRIPT, {}).value == "1"
        assert transformer.transform(COUNTER_SCRIPT, {}).value == "1"

    def test_global_leak_not_visible_to_next_invocation(self, transformer: DataTransformer) -> None:
        leak = 'function build(data) { globalThis.leaked = "yes"; return "set"; }'
        reader = "function build(data) { return typeof globalThis.leaked; }"
        assert transformer.transform(leak, {}).value == "set"
        assert transformer.transform(reader, {}).value == "undefined"

    def test_concurrent_invocations(self, transformer: DataTransformer) -> None:
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: transformer.transform(COUNTER_SCRIPT, {}), range(8)))
        assert [r.value for r in results] == ["1"] * 8


class TestLimits:
    def test_timeout(self) -> None:
        transformer = DataTransformer(JavaScriptEngineProvider(timeout_ms=200))
        result = transformer.transform("function build(data) { while (true) {} }", {})
        assert result.failure is not None
        assert result.failure.kind == ErrorKind.RESOURCE_LIMIT

    def test_non_positive_limits_mean_unbounded(self) -> None:
        provider = JavaScriptEngineProvider(timeout_ms=0, max_memory=-1)
        assert provider.timeout_ms is None
        assert provider.max_memory is None
