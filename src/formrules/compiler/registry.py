"""Pattern Registry: named regular expressions scoped to one form."""

import logging
import re
from typing import Iterator

from formrules.errors import DuplicateIdentifier, InvalidPattern, UnknownIdentifier
from formrules.models.form import PatternEntry

logger = logging.getLogger(__name__)

# Field-local patterns get identifiers containing '#', which no user
# identifier (a Python identifier) can contain.
LOCAL_SEPARATOR = "#"


class PatternRegistry:
    """Per-form table of compiled patterns.

    Each identifier is compiled exactly once; every rule that resolves it
    receives the same PatternEntry. The registry is frozen once the form is
    built and is read-only from then on.
    """

    def __init__(self, scope: str | None = None):
        self.scope = scope
        self._entries: dict[str, PatternEntry] = {}
        self._local_counts: dict[str, int] = {}
        self._frozen = False

    def declare(self, identifier: str, pattern_text: str) -> PatternEntry:
        """Compile and register a named pattern.

        Raises:
            DuplicateIdentifier: If the identifier already exists in scope
            InvalidPattern: If the pattern text does not compile
        """
        self._check_mutable()
        if identifier in self._entries:
            raise DuplicateIdentifier(identifier, form=self.scope, attribute="validate_regex")
        return self._register(identifier, pattern_text)

    def declare_local(self, field_name: str, pattern_text: str) -> PatternEntry:
        """Register a field-local ``regex`` pattern under a synthetic identifier.

        Compile failures name the field, never the synthetic identifier.
        """
        self._check_mutable()
        index = self._local_counts.get(field_name, 0)
        self._local_counts[field_name] = index + 1
        identifier = f"{field_name}{LOCAL_SEPARATOR}regex{index}"
        return self._register(identifier, pattern_text, subject=f"regex on field `{field_name}`")

    def _register(self, identifier: str, pattern_text: str, subject: str | None = None) -> PatternEntry:
        try:
            compiled = re.compile(pattern_text)
        except re.error as e:
            raise InvalidPattern(identifier, pattern_text, str(e), subject=subject, form=self.scope) from e

        entry = PatternEntry(identifier, pattern_text, compiled)
        self._entries[identifier] = entry
        logger.debug(f"Registered pattern {identifier!r} in {self.scope or '<anonymous>'}")
        return entry

    def resolve(self, identifier: str) -> PatternEntry:
        """Look up a registered pattern.

        Raises:
            UnknownIdentifier: If the identifier was never declared
        """
        try:
            return self._entries[identifier]
        except KeyError:
            raise UnknownIdentifier(identifier, form=self.scope) from None

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def declared(self) -> list[PatternEntry]:
        """Entries declared through ``validate_regex``, in declaration order."""
        return [entry for entry in self._entries.values() if LOCAL_SEPARATOR not in entry.identifier]

    def identifiers(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return f"PatternRegistry(scope={self.scope!r}, identifiers={self.identifiers()!r})"

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"Pattern registry for {self.scope!r} is frozen")
