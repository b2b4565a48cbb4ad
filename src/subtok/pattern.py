from enum import Enum

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined regex patterns for splitting raw text into surface tokens.

    Sources:
    - GPT2: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    """

    # runs between space, newline and the punctuation . , ! ? ; : ( )
    DELIMITED = r"[^ .,!?;:()\n]+"

    WHITESPACE = r"\S+"

    # letter runs with inner apostrophes, and digit runs
    WORDS = r"\p{L}+(?:['’]\p{L}+)*|\p{N}+"

    # OpenAI models
    GPT2 = (
        r"'(?:[sdmt]|ll|ve|re)|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            )


def list_patterns() -> list[str]:
    """Return names of all available built-in split patterns."""
    return [pat.name.lower() for pat in TokenPattern]


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e)
