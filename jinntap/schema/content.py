"""Content expressions: which children a node type admits.

Expressions use the editor's notation: a space-separated sequence of terms,
each a type name or group name (or a parenthesised ``a | b`` choice),
optionally followed by ``*``, ``+`` or ``?``. The empty expression admits no
children.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

TOKEN_PATTERN = re.compile(r"\s*(\(|\)|\||[*+?]|[A-Za-z_][\w.\-]*)")

# Labels that mark a term as admitting bare text
TEXT_LABELS = frozenset({"text", "inline"})


class ContentExpressionError(ValueError):
    """Raised for a content expression that cannot be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        super().__init__(f"Invalid content expression {expression!r}: {reason}")


@dataclass(frozen=True)
class ContentTerm:
    """One term of a content expression."""

    names: tuple[str, ...]
    min: int = 1
    max: int | None = 1
    """Upper bound on repetitions; None is unbounded."""

    def accepts(self, labels: frozenset[str]) -> bool:
        return any(name in labels for name in self.names)

    def __str__(self) -> str:
        atom = self.names[0] if len(self.names) == 1 else f"({' | '.join(self.names)})"
        suffix = {(0, None): "*", (1, None): "+", (0, 1): "?"}.get((self.min, self.max), "")
        return atom + suffix


def _tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped = expression.rstrip()
    while pos < len(stripped):
        match = TOKEN_PATTERN.match(stripped, pos)
        if match is None:
            raise ContentExpressionError(expression, f"unexpected character at {pos}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def parse_content(expression: str | None) -> tuple[ContentTerm, ...]:
    """Parse a content expression into terms.

    Raises:
        ContentExpressionError: If the expression is malformed
    """
    tokens = _tokenize(expression or "")
    terms: list[ContentTerm] = []
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token == "(":
            names: list[str] = []
            i += 1
            while True:
                if i >= len(tokens) or not re.match(r"[A-Za-z_]", tokens[i]):
                    raise ContentExpressionError(expression or "", "expected a name in choice")
                names.append(tokens[i])
                i += 1
                if i < len(tokens) and tokens[i] == "|":
                    i += 1
                    continue
                if i < len(tokens) and tokens[i] == ")":
                    i += 1
                    break
                raise ContentExpressionError(expression or "", "unclosed choice")
        elif re.match(r"[A-Za-z_]", token):
            names = [token]
            i += 1
        else:
            raise ContentExpressionError(expression or "", f"unexpected {token!r}")

        low, high = 1, 1
        if i < len(tokens) and tokens[i] in "*+?":
            low, high = {"*": (0, None), "+": (1, None), "?": (0, 1)}[tokens[i]]
            i += 1
        terms.append(ContentTerm(names=tuple(names), min=low, max=high))

    return tuple(terms)


@dataclass(frozen=True)
class ContentModel:
    """Compiled content constraint of a node type."""

    expression: str
    terms: tuple[ContentTerm, ...] = ()

    @classmethod
    def parse(cls, expression: str | None) -> ContentModel:
        return cls(expression=expression or "", terms=parse_content(expression))

    @property
    def is_leaf(self) -> bool:
        """True when no children are admitted."""
        return not self.terms

    @property
    def allows_text(self) -> bool:
        """True when bare text runs may appear among the children."""
        return any(term.accepts(TEXT_LABELS) for term in self.terms)

    @property
    def first_required(self) -> ContentTerm | None:
        """The leading term when it must occur at least once."""
        if self.terms and self.terms[0].min > 0:
            return self.terms[0]
        return None

    def referenced_names(self) -> set[str]:
        """All type or group names the expression mentions."""
        return {name for term in self.terms for name in term.names}

    def matches(self, children: Sequence[Iterable[str]]) -> bool:
        """Check a child sequence against the expression.

        Args:
            children: For each child, the labels it answers to (its type
                name and its group)

        Returns:
            True if the sequence satisfies every term
        """
        labels = [frozenset(c) for c in children]
        return self._match(0, 0, labels)

    def _match(self, term_index: int, pos: int, labels: list[frozenset[str]]) -> bool:
        if term_index == len(self.terms):
            return pos == len(labels)

        term = self.terms[term_index]
        count = 0
        while pos + count < len(labels) and (term.max is None or count < term.max):
            if not term.accepts(labels[pos + count]):
                break
            count += 1

        # Greedy first, backing off one child at a time
        for taken in range(count, term.min - 1, -1):
            if self._match(term_index + 1, pos + taken, labels):
                return True
        return False

    def __str__(self) -> str:
        return " ".join(str(term) for term in self.terms)
