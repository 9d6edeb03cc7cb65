"""
Tokenizer for whitespace separated hexadecimal frame strings.

Devices and capture tools hand frames over as text such as
``"AA 55 24 03 15 10 30 00"``. Each token must be exactly two hexadecimal
digits. Malformed tokens do not abort tokenization: they stay in position as
``None`` so that later stages can skip the affected field or sample while
every other offset in the frame stays correct.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union, overload

_BYTE_TOKEN = re.compile(r"[0-9A-Fa-f]{2}")


class MalformedTokenError(ValueError):
    """Raised by the strict parsers when a token is not a two-digit hex byte."""

    def __init__(self, index: int, text: str) -> None:
        super().__init__(f"Invalid hex byte {text!r} at position {index}")
        self.index = index
        self.text = text


@dataclass(frozen=True)
class MalformedToken:
    index: int
    text: str


@dataclass(frozen=True)
class TokenSequence:
    """
    An immutable sequence of frame bytes in source order.

    Attributes:
        values: One entry per source token; ``None`` where the token was malformed.
        texts: The source tokens, upper-cased.
        malformed: Positions and text of every malformed token.
    """
    values: tuple[Optional[int], ...] = ()
    texts: tuple[str, ...] = ()
    malformed: tuple[MalformedToken, ...] = field(default=())

    @classmethod
    def from_bytes(cls, data: bytes) -> "TokenSequence":
        return cls(
            values=tuple(data),
            texts=tuple(f"{byte:02X}" for byte in data),
        )

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Optional[int]]:
        return iter(self.values)

    @overload
    def __getitem__(self, index: int) -> Optional[int]: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Optional[int], ...]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self.values[index]

    @property
    def is_clean(self) -> bool:
        return not self.malformed

    def text_at(self, index: int) -> str:
        if 0 <= index < len(self.texts):
            return self.texts[index]
        return ""

    def to_bytes(self) -> bytes:
        """Return the frame as bytes; raises ``MalformedTokenError`` if any token is malformed."""
        if self.malformed:
            bad = self.malformed[0]
            raise MalformedTokenError(bad.index, bad.text)
        return bytes(value for value in self.values if value is not None)


def tokenize_hex(text: str) -> TokenSequence:
    """
    Split a hex frame string into a ``TokenSequence``.

    Any run of whitespace separates tokens; leading and trailing whitespace
    is ignored. Tokens are case-insensitive.

    Args:
        text: The frame as space separated two-digit hex bytes.

    Returns:
        A ``TokenSequence`` with ``None`` in place of malformed tokens.
    """
    values: list[Optional[int]] = []
    texts: list[str] = []
    malformed: list[MalformedToken] = []
    for index, token in enumerate(text.split()):
        texts.append(token.upper())
        if _BYTE_TOKEN.fullmatch(token):
            values.append(int(token, 16))
        else:
            values.append(None)
            malformed.append(MalformedToken(index=index, text=token))
    return TokenSequence(values=tuple(values), texts=tuple(texts), malformed=tuple(malformed))


def hex_string_to_bytes(text: str) -> bytes:
    """
    Strictly convert a hex frame string to bytes.

    Raises:
        MalformedTokenError: On the first token that is not a two-digit hex byte.
    """
    return tokenize_hex(text).to_bytes()


def format_bytes_to_hex(data: bytes, separator: str = " ") -> str:
    """Format bytes as upper-case two-digit hex tokens, e.g. ``"AA 55 01"``."""
    return separator.join(f"{byte:02X}" for byte in data)
