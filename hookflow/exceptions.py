"""Exception hierarchy for Hookflow."""

from typing import Optional


class HookflowError(Exception):
    """Base class for all hookflow errors."""


class ParserError(HookflowError):
    """A grammar is unavailable or source could not be parsed."""


class ConfigError(HookflowError):
    """Configuration file or value is invalid."""


class TypeResolutionError(HookflowError):
    """The external type resolver failed to answer a query."""


class RegistryError(HookflowError):
    """A processor registration conflicts with an existing one."""


class ProcessorError(HookflowError):
    """A library processor failed while handling a hook occurrence."""

    def __init__(
        self,
        processor_id: str,
        hook_name: str,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        self.processor_id = processor_id
        self.hook_name = hook_name
        self.cause = cause
        super().__init__(f"[{processor_id}] {hook_name}: {message}")
