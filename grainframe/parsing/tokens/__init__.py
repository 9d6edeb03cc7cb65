"""
Tokenizer for space separated hexadecimal frame strings.

This sub-package turns the textual frame representation produced by capture
tools into an ordered, immutable sequence of byte values.
"""
from grainframe.parsing.tokens.decode import (
    MalformedToken,
    MalformedTokenError,
    TokenSequence,
    format_bytes_to_hex,
    hex_string_to_bytes,
    tokenize_hex,
)

__all__ = [
    "MalformedToken",
    "MalformedTokenError",
    "TokenSequence",
    "format_bytes_to_hex",
    "hex_string_to_bytes",
    "tokenize_hex",
]
