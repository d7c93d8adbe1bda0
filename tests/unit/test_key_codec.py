from __future__ import annotations

import uuid
from typing import Annotated, List, Optional

import pytest
from pydantic import StringConstraints

from fileheads.codec import KeyCodec
from fileheads.errors import KeyDecodeError, KeyEncodeError


NodeHash = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{40}$")]


@pytest.mark.parametrize(
    "key",
    ["foo", "", "with space", "a/b/c", "a&b=c", "100%", "ünïcödé", "head:nested", ".."],
)
def test_str_keys_roundtrip(key: str):
    codec = KeyCodec(str)
    assert codec.decode(codec.encode(key)) == key


def test_encoded_form_is_single_key_field():
    codec = KeyCodec(str)
    assert codec.encode("foo") == "key=foo"
    assert codec.encode("a b") == "key=a+b"
    assert codec.encode("a/b") == "key=a%2Fb"
    assert "/" not in codec.encode("x/y/z")


def test_int_keys():
    codec = KeyCodec(int)
    assert codec.encode(42) == "key=42"
    assert codec.decode("key=42") == 42
    assert codec.decode(codec.encode(-7)) == -7


def test_bool_keys_use_lowercase_literals():
    codec = KeyCodec(bool)
    assert codec.encode(True) == "key=true"
    assert codec.decode("key=false") is False


def test_uuid_keys_roundtrip():
    codec = KeyCodec(uuid.UUID)
    key = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert codec.encode(key) == "key=12345678-1234-5678-1234-567812345678"
    assert codec.decode(codec.encode(key)) == key


def test_constrained_hash_keys():
    codec = KeyCodec(NodeHash)
    h = "a" * 40
    assert codec.decode(codec.encode(h)) == h

    with pytest.raises(KeyEncodeError):
        codec.encode("not-a-hash")
    with pytest.raises(KeyDecodeError):
        codec.decode("key=zz")


def test_encode_rejects_wrong_type():
    with pytest.raises(KeyEncodeError) as ei:
        KeyCodec(str).encode(42)
    assert ei.value.key == 42

    with pytest.raises(KeyEncodeError):
        KeyCodec(int).encode("42")


def test_encode_rejects_non_scalar_values():
    with pytest.raises(KeyEncodeError):
        KeyCodec(List[str]).encode(["a", "b"])
    with pytest.raises(KeyEncodeError):
        KeyCodec(Optional[str]).encode(None)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "nokey",
        "other=1",
        "key=a&key=b",
        "key=a&extra=1",
        "key=%FF",
    ],
)
def test_decode_rejects_malformed_input(text: str):
    with pytest.raises(KeyDecodeError) as ei:
        KeyCodec(str).decode(text)
    assert ei.value.name == text


def test_decode_rejects_value_of_wrong_type():
    with pytest.raises(KeyDecodeError):
        KeyCodec(int).decode("key=abc")


def test_encode_rejects_lone_surrogates():
    # What os.fsdecode produces for non-UTF-8 bytes
    with pytest.raises(KeyEncodeError) as ei:
        KeyCodec(str).encode("\udcff")
    assert ei.value.key == "\udcff"


@pytest.mark.parametrize("text", ["key=a b", "key=a%20b", "key=%61", "key=a%2fb"])
def test_decode_rejects_non_canonical_str(text: str):
    with pytest.raises(KeyDecodeError):
        KeyCodec(str).decode(text)


def test_decode_accepts_canonical_forms():
    codec = KeyCodec(str)
    assert codec.decode("key=a+b") == "a b"
    assert codec.decode("key=a%2Fb") == "a/b"


def test_decode_rejects_non_canonical_int():
    codec = KeyCodec(int)
    with pytest.raises(KeyDecodeError):
        codec.decode("key=042")
    with pytest.raises(KeyDecodeError):
        codec.decode("key=+42")
