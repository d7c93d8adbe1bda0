from __future__ import annotations

from typing import Any, Generic, Type, TypeVar
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, ValidationError, create_model

from .errors import KeyDecodeError, KeyEncodeError


K = TypeVar("K")

FIELD = "key"


class KeyCodec(Generic[K]):
    """
    Converts keys to and from a filename-safe form-urlencoded string.

    Form encoding needs a structured top-level value, so the key is wrapped in
    a one-field pydantic model and written as `key=<percent-encoded value>`.

    Notes
    - `key_type` is anything pydantic can validate: plain scalars, UUID,
      date, str-valued enums or constrained `Annotated[str, ...]` types.
    - Encoding validates strictly so a key is never silently coerced.
      Decoding validates in lax mode because the stored value is always text.
    - The JSON dump of a key must be a scalar; nested models and containers
      are rejected.
    """

    def __init__(self, key_type: Any = str) -> None:
        self.key_type = key_type
        self._wrapper: Type[BaseModel] = create_model(
            "UrlEncodeWrapper", **{FIELD: (key_type, ...)}
        )

    def encode(self, key: K) -> str:
        try:
            wrapped = self._wrapper.model_validate({FIELD: key}, strict=True)
            value = wrapped.model_dump(mode="json")[FIELD]
        except ValidationError as ve:
            raise KeyEncodeError(key, f"not a valid {self.type_name()}") from ve
        except ValueError as ex:  # PydanticSerializationError
            raise KeyEncodeError(key, str(ex)) from ex

        if value is None or isinstance(value, (dict, list)):
            raise KeyEncodeError(key, "key must serialize to a scalar value")
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        # quote_plus with safe="" escapes "/" so the result is a single path component
        try:
            return urlencode({FIELD: text})
        except UnicodeEncodeError as ex:
            raise KeyEncodeError(key, "key is not valid UTF-8 text") from ex

    def decode(self, text: str) -> K:
        try:
            pairs = parse_qsl(
                text, keep_blank_values=True, strict_parsing=True, errors="strict"
            )
        except ValueError as ex:
            raise KeyDecodeError(text, f"malformed form encoding ({ex})") from ex

        if len(pairs) != 1 or pairs[0][0] != FIELD:
            raise KeyDecodeError(text, f"expected a single '{FIELD}' field")

        try:
            wrapped = self._wrapper.model_validate({FIELD: pairs[0][1]})
        except ValidationError as ve:
            raise KeyDecodeError(text, f"not a valid {self.type_name()}") from ve
        key = getattr(wrapped, FIELD)

        # Only the encoder's own output is accepted, so each key has one filename
        try:
            canonical = self.encode(key)
        except KeyEncodeError as ex:
            raise KeyDecodeError(text, str(ex)) from ex
        if canonical != text:
            raise KeyDecodeError(text, f"not in canonical form (expected {canonical!r})")
        return key

    def type_name(self) -> str:
        return getattr(self.key_type, "__name__", repr(self.key_type))
