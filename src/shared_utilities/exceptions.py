"""
Errors shared by the preprocessors.
"""


class PreprocessorError(Exception):
    """Base exception for a preprocessor run that cannot complete."""

    pass


class ConfigError(PreprocessorError):
    """The preprocessor configuration is missing or invalid."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid configuration for '{field}': {message}")
        self.field = field
