"""
Utilities for validating surface tokens and rendering symbols for display.
"""

import unicodedata

from .errors import EncodingError


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn, Cs etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_symbol(s: str) -> str:
    """Return ``s`` with control and surrogate characters escaped."""
    return _escape_ctrl_chars(s)


def decode_token(token: str | bytes) -> str:
    """
    Turn a surface token into a string that splits cleanly into codepoints.

    Bytes must be valid UTF-8. Strings must not carry lone surrogates, which is
    how undecodable input bytes show up when text is read with
    ``errors="surrogateescape"``.

    :raises EncodingError: If the token is empty or not valid Unicode.
    """
    if isinstance(token, bytes):
        try:
            token = token.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(
                "malformed utf-8 sequence", token=token, position=e.start
            ) from e
    if not token:
        raise EncodingError("empty token")
    try:
        token.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(
            "token contains undecodable characters",
            token=render_symbol(token),
            position=e.start,
        ) from e
    return token
