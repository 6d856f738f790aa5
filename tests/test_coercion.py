from __future__ import annotations

from typing import Optional

import pytest

from funcbridge.errors import ConversionError
from funcbridge.invoke import CallContext, coerce_arguments, coerce_value
from funcbridge.registry import Float32, Int8, UInt8, UInt32, analyze, semantic_type


def everything(
    ctx: CallContext,
    n: int,
    f: float,
    s: str,
    b: bool,
    xs: list[int],
    obj: dict,
) -> Optional[Exception]:
    return None


def with_default(ctx: CallContext, name: str, retries: int = 3) -> Optional[Exception]:
    return None


def test_missing_arguments_take_zero_values():
    d = analyze(everything)
    assert coerce_arguments(d, {}) == {
        "arg1": 0,
        "arg2": 0.0,
        "arg3": "",
        "arg4": False,
        "arg5": [],
        "arg6": None,
    }


def test_null_behaves_like_missing():
    d = analyze(everything)
    assert coerce_arguments(d, {"arg1": None})["arg1"] == 0


def test_missing_argument_uses_declared_default():
    d = analyze(with_default)
    assert coerce_arguments(d, {"arg1": "x"}) == {"arg1": "x", "arg2": 3}


def test_unknown_keys_are_ignored():
    d = analyze(with_default)
    assert coerce_arguments(d, {"arg1": "x", "other": 1}) == {"arg1": "x", "arg2": 3}


def test_numeric_text_to_integer():
    assert coerce_value("x", "10", semantic_type(int)) == 10
    assert coerce_value("x", "-7", semantic_type(int)) == -7
    assert coerce_value("x", "+7", semantic_type(int)) == 7


def test_non_numeric_text_fails_with_details():
    with pytest.raises(ConversionError) as ei:
        coerce_value("x", "abc", semantic_type(int))
    assert ei.value.details == {"argument": "x", "source_type": "str", "target_type": "int"}
    assert "'x'" in ei.value.message


@pytest.mark.parametrize("text", ["1.5", "", " 1", "0x10", "1_000"])
def test_integer_text_must_be_plain_decimal(text):
    with pytest.raises(ConversionError):
        coerce_value("x", text, semantic_type(int))


@pytest.mark.parametrize("target", [int, UInt32])
def test_overlong_integer_text_fails_as_conversion(target):
    with pytest.raises(ConversionError) as ei:
        coerce_value("x", "9" * 5000, semantic_type(target))
    assert ei.value.details["argument"] == "x"
    assert len(ei.value.message) < 200


def test_float_truncates_toward_zero():
    st = semantic_type(int)
    assert coerce_value("x", 3.9, st) == 3
    assert coerce_value("x", -3.9, st) == -3


def test_negative_float_wraps_for_unsigned():
    assert coerce_value("x", -1.0, semantic_type(UInt32)) == 4294967295
    assert coerce_value("x", -1.0, semantic_type(UInt8)) == 255


def test_int_fits_target_width():
    assert coerce_value("x", 300, semantic_type(Int8)) == 44
    assert coerce_value("x", 200, semantic_type(Int8)) == -56
    assert coerce_value("x", 2**70, semantic_type(int)) == 2**70


def test_text_is_range_checked():
    with pytest.raises(ConversionError):
        coerce_value("x", "300", semantic_type(Int8))
    with pytest.raises(ConversionError):
        coerce_value("x", "-1", semantic_type(UInt8))
    assert coerce_value("x", "255", semantic_type(UInt8)) == 255


def test_non_finite_float_to_integer_fails():
    with pytest.raises(ConversionError):
        coerce_value("x", float("nan"), semantic_type(int))
    with pytest.raises(ConversionError):
        coerce_value("x", float("inf"), semantic_type(int))


def test_bools_and_numbers_do_not_mix():
    with pytest.raises(ConversionError):
        coerce_value("x", True, semantic_type(int))
    with pytest.raises(ConversionError):
        coerce_value("x", True, semantic_type(float))
    with pytest.raises(ConversionError):
        coerce_value("x", 1, semantic_type(bool))


@pytest.mark.parametrize("text, expected", [("true", True), ("false", False), ("1", True), ("0", False)])
def test_bool_literals(text, expected):
    assert coerce_value("x", text, semantic_type(bool)) is expected


@pytest.mark.parametrize("text", ["maybe", "True", "yes", ""])
def test_other_bool_text_fails(text):
    with pytest.raises(ConversionError):
        coerce_value("x", text, semantic_type(bool))


def test_float_targets():
    st = semantic_type(float)
    assert coerce_value("x", "1.5", st) == 1.5
    assert coerce_value("x", 2, st) == 2.0
    assert isinstance(coerce_value("x", 2, st), float)
    with pytest.raises(ConversionError):
        coerce_value("x", "one", st)


def test_float32_text_range():
    with pytest.raises(ConversionError):
        coerce_value("x", "1e39", semantic_type(Float32))
    assert coerce_value("x", "1e39", semantic_type(float)) == 1e39


def test_string_target_rejects_numbers():
    with pytest.raises(ConversionError):
        coerce_value("x", 5, semantic_type(str))


def test_arrays_coerce_elementwise():
    st = semantic_type(list[int])
    assert coerce_value("xs", ["1", 2, 3.7], st) == [1, 2, 3]
    assert coerce_value("xs", ("4",), st) == [4]
    with pytest.raises(ConversionError) as ei:
        coerce_value("xs", ["1", "x"], st)
    assert ei.value.details["argument"] == "xs[1]"
    with pytest.raises(ConversionError):
        coerce_value("xs", "12", st)


def test_object_targets():
    assert coerce_value("o", {"a": 1}, semantic_type(dict)) == {"a": 1}
    with pytest.raises(ConversionError):
        coerce_value("o", [1], semantic_type(dict))
    # non-class annotations accept anything
    assert coerce_value("o", 5, semantic_type(Optional[int])) == 5
