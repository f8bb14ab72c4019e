from __future__ import annotations

from datetime import timedelta

import pytest

from autumnio.converters import ValueType
from autumnio.errors import (
    InvalidExpressionError,
    PropertyCycleError,
    PropertyDepthError,
    PropertyNotFoundError,
)
from autumnio.properties import MAX_DEPTH, PropertyResolver


def make_resolver(settings=None, environ=None) -> PropertyResolver:
    return PropertyResolver(settings or {}, environ=environ or {})


def test_plain_lookup():
    pr = make_resolver({"app.title": "Demo"})
    assert pr.get_property("app.title") == "Demo"
    assert pr.get_property("app.missing") is None


def test_empty_value_is_not_absent():
    pr = make_resolver({"app.empty": ""})
    assert pr.get_property("app.empty") == ""
    assert pr.get_property("app.empty", "x") == ""


def test_placeholder_key():
    pr = make_resolver({"a.b": "v"})
    assert pr.get_property("${a.b}") == "v"


def test_placeholder_key_with_default():
    assert make_resolver().get_property("${a.b:def}") == "def"
    assert make_resolver({"a.b": "v"}).get_property("${a.b:def}") == "v"


def test_nested_default_is_resolved():
    pr = make_resolver()
    assert pr.get_property("${a:${b:fallback}}") == "fallback"
    pr = make_resolver({"b": "from-b"})
    assert pr.get_property("${a:${b:fallback}}") == "from-b"


def test_default_keeps_colons():
    pr = make_resolver()
    assert pr.get_property("${db.url:jdbc:sqlite:memory}") == "jdbc:sqlite:memory"


def test_stored_value_chains_to_other_key():
    pr = make_resolver({"a": "${b}", "b": "${c}", "c": "end"})
    assert pr.get_property("a") == "end"


def test_stored_value_default():
    pr = make_resolver({"app.title": "Demo", "app.version": "${APP_VERSION:1.0}"})
    assert pr.get_property("app.title") == "Demo"
    assert pr.get_property("app.version") == "1.0"


def test_stored_value_uses_environment():
    pr = PropertyResolver({"app.version": "${APP_VERSION:1.0}"}, environ={"APP_VERSION": "2.5"})
    assert pr.get_property("app.version") == "2.5"


def test_settings_override_environment():
    pr = PropertyResolver({"HOME": "/srv/app"}, environ={"HOME": "/root", "USER": "root"})
    assert pr.get_property("HOME") == "/srv/app"
    assert pr.get_property("USER") == "root"


def test_default_argument_is_expanded():
    pr = make_resolver({"fallback": "fb"})
    assert pr.get_property("missing", "${fallback}") == "fb"
    assert pr.get_property("missing", "plain") == "plain"


def test_required_property():
    pr = make_resolver({"present": "yes"})
    assert pr.get_required_property("present") == "yes"
    with pytest.raises(PropertyNotFoundError) as exc:
        pr.get_required_property("missing.key")
    assert exc.value.key == "missing.key"
    assert "missing.key" in str(exc.value)


def test_placeholder_without_default_requires_key():
    pr = make_resolver({"a": "${nope}"})
    with pytest.raises(PropertyNotFoundError):
        pr.get_property("a")
    with pytest.raises(PropertyNotFoundError):
        pr.get_property("${nope}")


@pytest.mark.parametrize("key", ["${}", "${:x}"])
def test_empty_inner_key_is_invalid(key):
    with pytest.raises(InvalidExpressionError):
        make_resolver().get_property(key)


def test_contains_property_is_literal():
    pr = make_resolver({"a.b": "v", "${odd}": "literal"})
    assert pr.contains_property("a.b")
    assert not pr.contains_property("${a.b}")
    assert pr.contains_property("${odd}")
    assert not pr.contains_property("missing")


def test_typed_property():
    pr = make_resolver({"k": "42", "timeout": "PT30S"})
    assert pr.get_typed_property("k", int) == 42
    assert pr.get_typed_property("k", ValueType.INT32, 5) == 42
    assert pr.get_typed_property("absent", ValueType.INT32, 5) == 5
    assert pr.get_typed_property("absent", ValueType.INT32) is None
    assert pr.get_typed_property("timeout", timedelta) == timedelta(seconds=30)


def test_typed_property_through_placeholder():
    pr = make_resolver({"port": "${PORT:8080}"})
    assert pr.get_typed_property("port", ValueType.INT16) == 8080


def test_cycle_is_reported():
    pr = make_resolver({"A": "${B}", "B": "${A}"})
    with pytest.raises(PropertyCycleError) as exc:
        pr.get_property("A")
    assert exc.value.chain == ("A", "B", "A")


def test_self_reference_with_default_is_a_cycle():
    pr = make_resolver({"a": "${a:x}"})
    with pytest.raises(PropertyCycleError):
        pr.get_property("a")


def test_repeated_non_cyclic_lookup_is_allowed():
    pr = make_resolver({"a": "${b:${c}}", "b": "${c}", "c": "z"})
    assert pr.get_property("a") == "z"


def test_store_is_read_only():
    pr = make_resolver({"a": "1"})
    with pytest.raises(TypeError):
        pr.properties["a"] = "2"  # type: ignore[index]
    assert pr.keys() == ["a"]


def test_environ_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("AUTUMN_TEST_VALUE", "from-env")
    pr = PropertyResolver({})
    assert pr.get_property("AUTUMN_TEST_VALUE") == "from-env"


def test_extra_converter():
    pr = PropertyResolver({"tags": "a,b"}, environ={}, converters={"csv": lambda s: s.split(",")})
    assert pr.get_typed_property("tags", "csv") == ["a", "b"]


def test_builtin_converter_cannot_be_replaced():
    with pytest.raises(ValueError):
        PropertyResolver({}, environ={}, converters={int: lambda s: 0})


def test_long_chain_within_limit_resolves():
    settings = {f"k{i}": f"${{k{i + 1}}}" for i in range(50)}
    settings["k50"] = "end"
    assert make_resolver(settings).get_property("k0") == "end"


def test_chain_beyond_limit_is_a_property_error():
    settings = {f"k{i}": f"${{k{i + 1}}}" for i in range(400)}
    settings["k400"] = "end"
    with pytest.raises(PropertyDepthError) as exc:
        make_resolver(settings).get_property("k0")
    assert exc.value.limit == MAX_DEPTH


def test_deeply_nested_defaults_are_bounded():
    key = "fallback"
    for i in range(200):
        key = f"${{missing{i}:{key}}}"
    with pytest.raises(PropertyDepthError):
        make_resolver().get_property(key)
