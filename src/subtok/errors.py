"""Custom exception hierarchy for subtok training errors."""

import regex as re


class SubTokError(Exception):
    """Base exception for all subtok errors."""


class VocabularyError(SubTokError):
    """Raised when vocabulary operations fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_token: str | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        if invalid_token is not None:
            extra += f"(token: {invalid_token!r}) "
        super().__init__(message + extra)
        self.vocab_size = vocab_size
        self.invalid_token = invalid_token


class EncodingError(SubTokError):
    """Raised when a surface token cannot be decoded into symbols."""

    def __init__(
        self,
        message: str,
        *,
        token: str | bytes | None = None,
        position: int | None = None,
    ) -> None:
        extra = " "
        if token is not None:
            extra += f"(token: {token!r}) "
        if position is not None:
            extra += f"(position: {position}) "
        super().__init__(message + extra)
        self.token = token
        self.position = position


class AllocationError(SubTokError):
    """Raised when memory runs out while growing or rewriting shared state."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        if operation:
            message = f"{message} (during: {operation})"
        super().__init__(message)
        self.operation = operation


class CountOverflowError(SubTokError):
    """Raised when a weighted pair count no longer fits a 64-bit counter."""

    def __init__(
        self, message: str, *, pair: tuple[str, str] | None = None, count: int
    ) -> None:
        extra = f" (count: {count}) "
        if pair is not None:
            extra += f"(pair: {pair!r}) "
        super().__init__(message + extra)
        self.pair = pair
        self.count = count


class TrainingError(SubTokError):
    """Raised when BPE training is misconfigured or fails."""

    def __init__(self, message: str, *, merges_done: int | None = None) -> None:
        if merges_done is not None:
            message = f"{message} (merges completed: {merges_done})"
        super().__init__(message)
        self.merges_done = merges_done


class ConfigError(SubTokError):
    """Raised when a configuration value is out of range."""

    def __init__(self, message: str, *, field: str, value: object) -> None:
        super().__init__(f"{message} ({field}: {value!r})")
        self.field = field
        self.value = value


class PatternError(SubTokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class ModeError(SubTokError):
    """Raised when an unknown parallel mode is requested."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_modes: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_modes}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_modes = available_modes
