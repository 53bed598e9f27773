from __future__ import annotations

from dataclasses import fields, replace
import textwrap

import pytest

from varify.exceptions import MalformedEditSequenceError
from varify.locator import Declaration, locate_declarations
from varify.policy import PolicyConfiguration
from varify.processor import (
    MIN_SUPPORTED_VERSION,
    is_version_supported,
    parse_language_version,
    plan_declarations,
    plan_file,
    process_file,
    process_files,
)


def test_local_variable_is_rewritten() -> None:
    code = 'class X { void m() { String s = "hi"; } }'
    assert process_file(code, "11", PolicyConfiguration()) == 'class X { void m() { var s = "hi"; } }'


def test_field_is_left_alone() -> None:
    code = 'class X { String s = "hi"; }'
    assert process_file(code, "11", PolicyConfiguration()) == code


def test_primitives_disallowed_keep_explicit_type() -> None:
    code = "class X { void m() { int n = 42; } }"
    policy = PolicyConfiguration(allow_primitive_types=False)
    assert process_file(code, "11", policy) == code


def test_two_declarations_are_rewritten_independently(method_body) -> None:
    code = method_body('String a = "x"; int b = 1;')
    expected = method_body('var a = "x"; var b = 1;')
    assert process_file(code, "11", PolicyConfiguration()) == expected


def test_unsupported_version_passes_text_through() -> None:
    code = 'class X { void m() { String s = "hi"; } }'
    assert process_file(code, "8", PolicyConfiguration()) == code


@pytest.mark.parametrize("token", [None, "", "eight", "1.8", "10.0", "-11", "9"])
def test_gate_closes_for_unsupported_tokens(token) -> None:
    code = 'class X { void m() { String s = "hi"; } }'
    result = plan_file(code, token)
    assert result.gated is True
    assert result.modified is False
    assert result.text == code
    assert result.edits == []


@pytest.mark.parametrize(("token", "expected"), [("10", 10), (" 21 ", 21), ("1.8", None), ("+11", None), ("1_1", None)])
def test_parse_language_version(token: str, expected) -> None:
    assert parse_language_version(token) == expected


def test_minimum_version_is_inclusive() -> None:
    assert is_version_supported(str(MIN_SUPPORTED_VERSION))
    assert not is_version_supported(str(MIN_SUPPORTED_VERSION - 1))


def test_variable_without_initializer_is_left_alone() -> None:
    code = 'class Test { void method() { String text; text = "hello"; } }'
    assert process_file(code, "11") == code


@pytest.mark.parametrize(
    ("code", "expected", "allow_primitives"),
    [
        (
            "class Test { void method() { int value = 42; } }",
            "class Test { void method() { var value = 42; } }",
            True,
        ),
        (
            "class Test { void method() { int value = 42; } }",
            "class Test { void method() { int value = 42; } }",
            False,
        ),
        (
            "class Test { void method() { boolean flag = true; } }",
            "class Test { void method() { var flag = true; } }",
            True,
        ),
    ],
)
def test_primitive_types_follow_policy(code: str, expected: str, allow_primitives: bool) -> None:
    policy = PolicyConfiguration(allow_primitive_types=allow_primitives)
    assert process_file(code, "11", policy) == expected


def test_process_files_preserves_order() -> None:
    files = [
        'class Test1 { void method() { String text = "hello"; } }',
        "class Test2 { void method() { int value = 42; } }",
        'class Test3 { String field = "kept"; }',
    ]
    assert process_files(files, "11") == [
        'class Test1 { void method() { var text = "hello"; } }',
        "class Test2 { void method() { var value = 42; } }",
        'class Test3 { String field = "kept"; }',
    ]


def test_process_files_respects_gate() -> None:
    files = ['class A { void m() { String s = "x"; } }']
    assert process_files(files, "9") == files


def test_mismatched_types_need_permission(method_body) -> None:
    code = method_body("List<String> names = new ArrayList<>();")
    assert process_file(code, "11") == code
    permissive = PolicyConfiguration(allow_type_mismatch=True)
    assert process_file(code, "11", permissive) == method_body("var names = new ArrayList<>();")


def test_modifiers_are_preserved(method_body) -> None:
    code = method_body('final String s = "x";')
    assert process_file(code, "17") == method_body('final var s = "x";')


def test_loop_variables_follow_policy(method_body) -> None:
    code = method_body("for (int i = 0; i < 3; i++) { total += i; }")
    assert process_file(code, "11") == method_body("for (var i = 0; i < 3; i++) { total += i; }")
    policy = PolicyConfiguration(allow_loop_variables=False)
    assert process_file(code, "11", policy) == code


def test_lambda_initializers_follow_policy(method_body) -> None:
    code = method_body("Runnable r = () -> run();")
    mismatch = PolicyConfiguration(allow_type_mismatch=True)
    assert process_file(code, "11", mismatch) == code
    lambdas = replace(mismatch, refactor_lambda_expressions=True)
    assert process_file(code, "11", lambdas) == method_body("var r = () -> run();")


def test_anonymous_class_initializers_follow_policy(method_body) -> None:
    code = method_body("Runnable r = new Runnable() { public void run() {} };")
    assert process_file(code, "11") == code
    policy = PolicyConfiguration(refactor_anonymous_classes=True)
    assert process_file(code, "11", policy) == method_body(
        "var r = new Runnable() { public void run() {} };"
    )


def test_null_and_array_initializers_are_never_rewritten(method_body) -> None:
    code = method_body("String s = null; int[] xs = {1, 2};")
    permissive = PolicyConfiguration(allow_type_mismatch=True)
    assert process_file(code, "11", permissive) == code


_SAMPLE = textwrap.dedent(
    """
    class Sample {
        private String name = "field";

        void run(List<String> items) {
            String greeting = "hello";
            final int count = 3;
            long big = 10L;
            float ratio = 0.5f;
            double exact = 0.25;
            boolean ok = false;
            StringBuilder sb = new StringBuilder();
            List<String> copy = new ArrayList<>(items);
            Runnable task = () -> System.out.println(greeting);
            Runnable anon = new Runnable() { public void run() {} };
            Object value = compute("String fake = 1;");
            for (int i = 0; i < count; i++) {
                char c = 'x'; // int notReal = 2;
            }
        }
    }
    """
)


@pytest.mark.parametrize(
    "policy",
    [
        PolicyConfiguration(),
        PolicyConfiguration(allow_type_mismatch=True),
        PolicyConfiguration(allow_primitive_types=False, allow_loop_variables=False),
        PolicyConfiguration(*[True] * 6),
    ],
)
def test_processing_is_idempotent(policy: PolicyConfiguration) -> None:
    once = process_file(_SAMPLE, "21", policy)
    assert process_file(once, "21", policy) == once


def test_default_policy_on_sample() -> None:
    result = plan_file(_SAMPLE, "21")
    assert [item.variable_name for item in result.declarations] == [
        "greeting",
        "count",
        "big",
        "ratio",
        "exact",
        "ok",
        "sb",
        "value",
        "i",
    ]
    assert 'private String name = "field";' in result.text
    assert "final var count = 3;" in result.text
    assert "Runnable task = () ->" in result.text
    assert "Runnable anon = new Runnable()" in result.text
    assert "var value = compute(\"String fake = 1;\");" in result.text
    assert "char c = 'x';" in result.text
    assert "// int notReal = 2;" in result.text


def test_untouched_bytes_survive_rewrite() -> None:
    policy = PolicyConfiguration(allow_type_mismatch=True)
    result = plan_file(_SAMPLE, "21", policy)
    assert result.modified
    source_cursor = 0
    rebuilt = []
    for edit in result.edits:
        rebuilt.append(_SAMPLE[source_cursor : edit.start])
        rebuilt.append(edit.replacement)
        source_cursor = edit.end
    rebuilt.append(_SAMPLE[source_cursor:])
    assert "".join(rebuilt) == result.text


@pytest.mark.parametrize("switch", [item.name for item in fields(PolicyConfiguration)])
def test_disabling_a_switch_never_adds_rewrites(switch: str) -> None:
    for base in (PolicyConfiguration(), PolicyConfiguration(*[True] * 6)):
        enabled = plan_file(_SAMPLE, "21", replace(base, **{switch: True}))
        disabled = plan_file(_SAMPLE, "21", replace(base, **{switch: False}))
        enabled_spans = {item.type_span for item in enabled.declarations}
        disabled_spans = {item.type_span for item in disabled.declarations}
        assert disabled_spans <= enabled_spans


def test_line_edits_use_line_and_character() -> None:
    code = 'class X {\n  void m() {\n    String s = "hi";\n  }\n}\n'
    [edit] = plan_file(code, "11").line_edits()
    assert edit.start == (2, 4)
    assert edit.end == (2, 10)
    assert edit.replacement == "var"


def test_plan_declarations_accepts_resolved_types() -> None:
    code = "class X { void m() { List<String> xs = build(); } }"
    [located] = locate_declarations(code)
    assert plan_declarations(code, [located], "11").modified is False
    resolved = replace(located, initializer_type="List<String>")
    result = plan_declarations(code, [resolved], "11")
    assert result.text == "class X { void m() { var xs = build(); } }"


def test_plan_declarations_sorts_and_rejects_overlap() -> None:
    code = 'class X { void m() { String a = "x"; String b = "y"; } }'
    first, second = locate_declarations(code)
    result = plan_declarations(code, [second, first], "11")
    assert result.text == 'class X { void m() { var a = "x"; var b = "y"; } }'
    overlapping = Declaration(
        declared_type="String",
        variable_name="clash",
        initializer='"x"',
        type_span=(first.type_span[0] + 1, first.type_span[1] + 1),
        initializer_span=first.initializer_span,
        is_local=True,
    )
    with pytest.raises(MalformedEditSequenceError):
        plan_declarations(code, [first, overlapping], "11")


def test_plan_declarations_respects_gate() -> None:
    code = 'class X { void m() { String a = "x"; } }'
    result = plan_declarations(code, locate_declarations(code), "8")
    assert result.gated is True
    assert result.text == code
