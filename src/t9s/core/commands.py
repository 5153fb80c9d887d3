"""The ``:`` command grammar: names, aliases and prefix completion.

Interpretation of a submitted command lives in the reducer; this module only
knows the vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    name: str
    aliases: tuple[str, ...]
    usage: str
    description: str

    @property
    def words(self) -> tuple[str, ...]:
        return (self.name,) + self.aliases


# [LAW:one-source-of-truth] Command vocabulary; help and completion read from here.
COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("workflows", ("wf", "executions"), "workflows", "Show workflow executions"),
    CommandSpec("schedules", ("sch",), "schedules", "Show schedules"),
    CommandSpec("namespace", ("ns",), "namespace [name]", "Switch namespace"),
    CommandSpec("signal", ("sig",), "signal <name> [payload]", "Signal the selected workflow"),
    CommandSpec("open", ("goto",), "open <uri>", "Open a temporal:// deep link"),
    CommandSpec("link", (), "link", "Show the link to this view"),
    CommandSpec("refresh", ("r",), "refresh", "Refresh the current view"),
    CommandSpec("poll", (), "poll", "Toggle polling"),
    CommandSpec("quit", ("q",), "quit", "Quit"),
    CommandSpec("help", ("h",), "help", "Show key bindings"),
)

_BY_WORD: dict[str, CommandSpec] = {
    word: spec for spec in COMMANDS for word in spec.words
}


@dataclass(frozen=True)
class ParsedCommand:
    spec: CommandSpec | None
    word: str
    args: str


def parse_command(text: str) -> ParsedCommand:
    """Split ``text`` into a command word and its raw argument string.

    ``spec`` is None when the word is not a known name or alias.
    """
    stripped = text.strip()
    word, _, args = stripped.partition(" ")
    return ParsedCommand(_BY_WORD.get(word.lower()), word, args.strip())


def matching_commands(prefix: str) -> list[str]:
    """Command names whose name or any alias starts with ``prefix``, in table order."""
    needle = prefix.strip().lower()
    return [
        spec.name
        for spec in COMMANDS
        if any(word.startswith(needle) for word in spec.words)
    ]


def complete(buffer: str) -> str:
    """Tab completion: the first matching command name plus a space.

    Buffers that already hold arguments, or match nothing, come back unchanged.
    """
    if " " in buffer.strip():
        return buffer
    matches = matching_commands(buffer)
    if not matches:
        return buffer
    return matches[0] + " "
