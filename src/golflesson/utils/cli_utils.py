"""
Utility functions and decorators for CLI argument handling.
"""

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from golflesson.config.types import AppConfig

if TYPE_CHECKING:
    from golflesson.app import LessonApp


@dataclass
class CLIContext:
    """Context object for CLI command execution."""
    args: argparse.Namespace
    logger: logging.Logger
    config: AppConfig
    parser: argparse.ArgumentParser
    app: "LessonApp"

class CommandCategory(Enum):
    """Categories for organizing commands."""
    LIST = auto()
    MANAGE = auto()
    BOOK = auto()
    ADMIN = auto()
    EXPORT = auto()
    CHECK = auto()

@dataclass
class CommandMetadata:
    """Metadata for command registration."""
    name: str
    help_text: str
    category: CommandCategory
    handler: Callable[[CLIContext], int]
    options: list[dict[str, Any]]
    parent_command: str | None = None

    @property
    def key(self) -> str:
        """Registry key; subcommand names repeat across groups."""
        return f"{self.parent_command} {self.name}" if self.parent_command else self.name

def _is_iso_datetime(value: Any) -> bool:
    return isinstance(value, datetime)

class CLIOptionFactory:
    """Factory for creating common CLI options with consistent validation."""

    @staticmethod
    def create_format_option() -> dict[str, Any]:
        return {
            'name': '--format',
            'choices': ['text', 'json'],
            'default': 'text',
            'help': 'Output format: human-readable text or machine-readable JSON (default: text)'
        }

    @staticmethod
    def create_reservation_option() -> dict[str, Any]:
        return {
            'name': 'reservation_id',
            'help': 'Reservation id (rsv-...)',
            'validator': lambda x: bool(x.strip())
        }

    @staticmethod
    def create_schedule_option() -> dict[str, Any]:
        return {
            'name': 'schedule_id',
            'help': 'Schedule id (sch-...)',
            'validator': lambda x: bool(x.strip())
        }

    @staticmethod
    def create_datetime_option(name: str, help_text: str, required: bool = False) -> dict[str, Any]:
        """ISO 8601 date-time; naive values are business-timezone wall time."""
        return {
            'name': name,
            'type': datetime.fromisoformat,
            'required': required,
            'help': f"{help_text} (YYYY-MM-DDTHH:MM)",
            'validator': _is_iso_datetime
        }

    @staticmethod
    def create_date_option(name: str = '--due') -> dict[str, Any]:
        return {
            'name': name,
            'type': date.fromisoformat,
            'help': 'Date in YYYY-MM-DD format'
        }

    @staticmethod
    def create_reason_option() -> dict[str, Any]:
        return {
            'name': '--reason',
            'help': 'Reason shown to the customer'
        }

class CommandRegistry:
    """Registry for CLI commands with metadata."""

    _commands: dict[str, CommandMetadata] = {}
    _parent_commands: dict[str, list[str]] = {}

    @classmethod
    def register(cls,
                name: str,
                help_text: str,
                category: CommandCategory,
                options: list[dict[str, Any]] | None = None,
                parent_command: str | None = None) -> Callable[[Callable[[CLIContext], int]], Callable[[CLIContext], int]]:
        """Register a command handler."""
        def decorator(handler: Callable[[CLIContext], int]) -> Callable[[CLIContext], int]:
            metadata = CommandMetadata(
                name=name,
                help_text=help_text,
                category=category,
                handler=handler,
                options=options or [],
                parent_command=parent_command
            )
            cls._commands[metadata.key] = metadata

            if parent_command:
                cls._parent_commands.setdefault(parent_command, [])
                if name not in cls._parent_commands[parent_command]:
                    cls._parent_commands[parent_command].append(name)

            return handler
        return decorator

    @classmethod
    def commands(cls) -> list[CommandMetadata]:
        return list(cls._commands.values())

    @classmethod
    def get_command(cls, name: str, subcommand: str | None = None) -> CommandMetadata | None:
        """Get command metadata by name and optional subcommand."""
        return cls._commands.get(f"{name} {subcommand}" if subcommand else name)

    @classmethod
    def get_subcommands(cls, parent_command: str) -> list[str]:
        """Get all subcommands for a parent command."""
        return cls._parent_commands.get(parent_command, [])

class ArgumentValidator:
    """Validator for CLI arguments."""

    @staticmethod
    def validate_option(option: dict[str, Any], value: Any) -> bool:
        """Validate a single option value."""
        if 'validator' not in option:
            return True

        try:
            result = option['validator'](value)
            return bool(result)
        except (TypeError, ValueError, AttributeError):
            return False

    @staticmethod
    def validate_args(args: argparse.Namespace, command: CommandMetadata) -> list[str]:
        """Validate all arguments for a command."""
        errors = []

        for option in command.options:
            value = getattr(args, option['name'].lstrip('-').replace('-', '_'), None)
            if value is not None and not ArgumentValidator.validate_option(option, value):
                errors.append(f"Invalid value for {option['name']}: {value}")

        return errors

def add_common_options(parser: argparse.ArgumentParser) -> None:
    """Add common global options to a parser."""
    parser.add_argument(
        '-u', '--user',
        help='Acting account id'
    )
    parser.add_argument(
        '--dev',
        action='store_true',
        help='Run in development mode with additional debug output'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging output'
    )
    parser.add_argument(
        '--log-file',
        help='Path to write log output (default: logs to stderr)'
    )
    parser.add_argument(
        '--data-dir',
        help='Directory of the JSON data files (default: from configuration)'
    )
    parser.add_argument(
        '--config-dir',
        help='Directory containing config.yaml'
    )

class CLIBuilder:
    """Builder for constructing CLI parsers with consistent formatting."""

    # Custom option fields that should not be passed to argparse
    _CUSTOM_FIELDS = {'validator'}

    def __init__(self, description: str):
        """Initialize CLI builder."""
        self.parser = argparse.ArgumentParser(prog='golflesson', description=description)
        self.subparsers = self.parser.add_subparsers(dest='command', required=True)
        self._parent_parsers: dict[str, argparse._SubParsersAction[Any]] = {}
        self._groups: dict[str, str] = {}

        add_common_options(self.parser)

    def add_group(self, name: str, help_text: str) -> None:
        """Set help text for a parent command before its subcommands are added."""
        self._groups[name] = help_text

    def _parent_subparsers(self, parent: str) -> "argparse._SubParsersAction[Any]":
        if parent not in self._parent_parsers:
            parent_parser = self.subparsers.add_parser(
                parent,
                help=self._groups.get(parent, f"{parent.capitalize()} commands")
            )
            self._parent_parsers[parent] = parent_parser.add_subparsers(
                dest=f"{parent}_subcommand",
                required=True
            )
        return self._parent_parsers[parent]

    def add_command(self, command: CommandMetadata) -> None:
        """Add a command to the parser."""
        if command.parent_command:
            parser = self._parent_subparsers(command.parent_command).add_parser(
                command.name,
                help=command.help_text
            )
        else:
            parser = self.subparsers.add_parser(
                command.name,
                help=command.help_text
            )

        for option in command.options:
            if 'name' not in option:
                continue

            option_copy = option.copy()
            name = option_copy.pop('name')
            option_dict = {k: v for k, v in option_copy.items() if k not in self._CUSTOM_FIELDS}

            if name.startswith('--'):
                parser.add_argument(name, **option_dict)
            else:
                # Positional argument
                option_dict.pop('required', None)
                parser.add_argument(name, **option_dict)

        parser.set_defaults(func=command.handler)

    def build(self) -> argparse.ArgumentParser:
        """Build and return the parser."""
        return self.parser

def create_command_group(name: str, help_text: str, category: CommandCategory | None = None) -> Callable[[type[Any]], type[Any]]:
    """Create a command group decorator."""
    def decorator(cls: type[Any]) -> type[Any]:
        """Decorate a class to create a command group."""
        cls._command_group_metadata = {
            'name': name,
            'help_text': help_text,
            'category': category or CommandCategory.MANAGE,
        }
        return cls
    return decorator
