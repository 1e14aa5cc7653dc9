from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional

# handler(ctx, args) -> exit status (None means 0)
Handler = Callable[[Any, list[str]], Optional[int]]


@dataclass(frozen=True)
class Command:
    verb: str
    handler: Handler
    synopsis: str = ""
    aliases: tuple[str, ...] = ()
    is_base: bool = False

    @property
    def names(self) -> tuple[str, ...]:
        return (self.verb, *self.aliases)

    @property
    def label(self) -> str:
        return " | ".join(self.names)


class CommandTable:
    """Ordered, immutable verb -> handler table shared by routing and help."""

    def __init__(self, commands: Iterable[Command]):
        self._commands: tuple[Command, ...] = tuple(commands)
        self._index: dict[str, Command] = {}
        for cmd in self._commands:
            for name in cmd.names:
                if not name or name != name.strip():
                    raise ValueError(f"invalid verb: {name!r}")
                if name in self._index:
                    raise ValueError(f"duplicate verb: {name}")
                self._index[name] = cmd

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, verb: str) -> bool:
        return verb in self._index

    def lookup(self, verb: str) -> Optional[Command]:
        return self._index.get(verb)

    def base(self) -> list[Command]:
        return [c for c in self._commands if c.is_base]

    def non_base(self) -> list[Command]:
        return [c for c in self._commands if not c.is_base]
