"""Intermediate clause tree produced by the generator."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any


class ClauseKind(str, Enum):
    """Clause kinds, declared in rendering order."""

    SELECT = 'select'
    FROM = 'from'
    JOIN = 'join'
    WHERE = 'where'
    GROUP_BY = 'group_by'
    ORDER_BY = 'order_by'
    LIMIT = 'limit'


CLAUSE_ORDER: tuple[ClauseKind, ...] = tuple(ClauseKind)


@dataclass(frozen=True, slots=True)
class Clause:
    """
    One rendered clause.

    Attributes:
        kind: Clause kind (determines position in the statement)
        keyword: Leading keyword text, e.g. 'SELECT DISTINCT' or 'LEFT JOIN'
        items: Clause body fragments
        separator: Text placed between items
        multiline: Render each item on its own indented line (SELECT list)
    """

    kind: ClauseKind
    keyword: str
    items: tuple[str, ...]
    separator: str = ', '
    multiline: bool = False

    def render(self, inline: bool = False) -> str:
        """Render the clause as text; inline ignores the multiline layout."""
        if self.multiline and not inline:
            return f'{self.keyword}\n  ' + ',\n  '.join(self.items)
        return f'{self.keyword} {self.separator.join(self.items)}'


@dataclass(frozen=True, slots=True)
class Statement:
    """
    Query as an ordered clause tree plus out-of-band bind parameters.

    `params` is empty for preview rendering, where literals are inlined.
    `transpiled` holds the text rewritten for a target dialect; when set it
    replaces the clause rendering.
    """

    clauses: tuple[Clause, ...]
    params: dict[str, Any] = field(default_factory=dict)
    transpiled: str | None = None

    @property
    def text(self) -> str:
        """Dialect text if transpiled, otherwise clauses joined by newline."""
        if self.transpiled is not None:
            return self.transpiled
        return '\n'.join(clause.render() for clause in self.clauses)

    @property
    def inline_text(self) -> str:
        """Clauses on one line, for nesting the statement inside another query."""
        return ' '.join(clause.render(inline=True) for clause in self.clauses)

    @property
    def kinds(self) -> tuple[ClauseKind, ...]:
        """Kinds of the clauses present, in order."""
        return tuple(clause.kind for clause in self.clauses)

    def __str__(self) -> str:
        return self.text
