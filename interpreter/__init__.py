"""
Command interpreter for the smart store scripting language.

- tokenizer: quote-aware tokenizing and keyword parsing
- command_processor: dispatch to StoreService, rendering, file replay
"""

from interpreter.command_processor import CommandProcessor, ScriptResult
from interpreter.tokenizer import ParsedCommand, parse_command, tokenize

__all__ = [
    "CommandProcessor",
    "ScriptResult",
    "ParsedCommand",
    "parse_command",
    "tokenize",
]
