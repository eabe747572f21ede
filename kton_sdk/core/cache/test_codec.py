import json
from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from kton_sdk.core.cache.codec import DEFAULT_CODEC, TypePreservingCodec


def test_big_integer_is_tagged_and_restored():
    value = {"n": 123456789012345678901234567890}

    text = DEFAULT_CODEC.encode(value)

    assert json.loads(text) == {"n": "123456789012345678901234567890n"}
    assert DEFAULT_CODEC.decode(text) == value


def test_safe_integers_stay_numbers():
    limit = 2**53 - 1
    text = DEFAULT_CODEC.encode([limit, -limit, limit + 1])

    assert json.loads(text) == [limit, -limit, f"{limit + 1}n"]
    assert DEFAULT_CODEC.decode(text) == [limit, -limit, limit + 1]


def test_datetime_round_trips():
    when = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)

    text = DEFAULT_CODEC.encode({"at": when})

    assert json.loads(text) == {"at": {"__type": "Date", "value": when.isoformat()}}
    assert DEFAULT_CODEC.decode(text) == {"at": when}


def test_legacy_bigint_record_is_decoded():
    text = '{"supply": {"__type": "bigint", "value": "900000000000000000000"}}'
    assert DEFAULT_CODEC.decode(text) == {"supply": 900000000000000000000}


def test_plain_string_matching_bigint_form_is_coerced():
    # Strings that look like tagged integers cannot be told apart.
    assert DEFAULT_CODEC.decode(DEFAULT_CODEC.encode({"label": "123n"})) == {
        "label": 123
    }


def test_unrelated_type_tags_are_left_alone():
    value = {"__type": "Other", "value": "x"}
    assert DEFAULT_CODEC.decode(DEFAULT_CODEC.encode(value)) == value


def test_dataclasses_and_tuples_are_flattened():
    @dataclass
    class Point:
        x: int
        y: tuple[int, int]

    assert DEFAULT_CODEC.sanitize(Point(1, (2, 3))) == {"x": 1, "y": [2, 3]}


def test_unsupported_type_raises():
    with pytest.raises(TypeError, match="object"):
        DEFAULT_CODEC.encode(object())


def test_custom_limit():
    codec = TypePreservingCodec(safe_integer_limit=10)
    assert codec.encode([10, 11]) == '[10,"11n"]'


def test_bare_big_integer():
    big = 123456789012345678901234567890
    restored = DEFAULT_CODEC.decode(DEFAULT_CODEC.encode(big))

    assert restored == big
    assert type(restored) is int


@pytest.mark.parametrize("text", ["123n\n", "\n123n", "123nn", "12 3n", "\u0663n"])
def test_near_bigint_strings_stay_strings(text):
    assert DEFAULT_CODEC.decode(DEFAULT_CODEC.encode({"note": text})) == {"note": text}
