"""Node classifier — maps a step type to safe / review_required / unknown."""

import logging
import re

from flowaudit.config import Settings
from flowaudit.errors.exceptions import ClassifierConfigError
from flowaudit.models.enums import NodeClassification
from flowaudit.rules.security_rules import (
    DEFAULT_SECURITY_CONFIG,
    ReviewRequiredInfo,
    SecurityConfig,
)

# Matchers made only of these characters read as plain type identifiers.
_IDENTIFIER_LIKE = re.compile(r"[\w.@/-]+")


class NodeClassifier:
    """Classifies step types against the safe allow-list and the review table.

    The review table is split into an exact-match dict and an ordered list of
    compiled patterns. Lookup tries the exact dict first, then the patterns in
    declaration order; the first match wins. A matcher that does not compile
    as a regular expression is kept as an exact entry only.
    """

    def __init__(
        self,
        config: SecurityConfig = DEFAULT_SECURITY_CONFIG,
        *,
        strict: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._safe_types = frozenset(config.safe_nodes)
        self._exact: dict[str, ReviewRequiredInfo] = {}
        self._patterns: list[tuple[re.Pattern[str], ReviewRequiredInfo]] = []

        for info in config.review_required_nodes:
            self._exact.setdefault(info.type_matcher, info)
            try:
                compiled = re.compile(info.type_matcher)
            except re.error as exc:
                self._logger.warning(
                    "Review entry %r is not a valid pattern (%s); matching it literally",
                    info.type_matcher,
                    exc,
                )
                continue
            self._patterns.append((compiled, info))

        self.shadowed_entries = self._find_shadowed(config.review_required_nodes)
        if self.shadowed_entries:
            details = [
                {"entry": entry, "shadowed_by": pattern}
                for entry, pattern in self.shadowed_entries
            ]
            if strict:
                raise ClassifierConfigError(
                    f"{len(details)} review patterns can never match: earlier entries claim them",
                    details=details,
                )
            for item in details:
                self._logger.warning(
                    "Review pattern %r can never match: earlier entry %r claims every type it matches",
                    item["entry"],
                    item["shadowed_by"],
                )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        config: SecurityConfig = DEFAULT_SECURITY_CONFIG,
        logger: logging.Logger | None = None,
    ) -> "NodeClassifier":
        """Build a classifier whose strictness follows ``settings.strict_review_table``."""
        return cls(config, strict=settings.strict_review_table, logger=logger)

    def _find_shadowed(
        self,
        entries: tuple[ReviewRequiredInfo, ...],
    ) -> list[tuple[str, str]]:
        """Pattern entries whose matches are all claimed by an earlier, differently routed entry.

        Plain type identifiers are always reached through the exact dict, so
        only real patterns can be shadowed. An earlier entry claims every
        match of a later pattern when both matchers are the same string, or
        when the earlier entry is a plain identifier found inside the text
        that every match of the later pattern must contain.
        """
        shadowed = []
        for position, entry in enumerate(entries):
            if _IDENTIFIER_LIKE.fullmatch(entry.type_matcher):
                continue
            required = _required_text(entry.type_matcher)
            for earlier in entries[:position]:
                if earlier.type_matcher == entry.type_matcher:
                    covered = True
                elif required is not None and _IDENTIFIER_LIKE.fullmatch(earlier.type_matcher):
                    covered = re.search(earlier.type_matcher, required) is not None
                else:
                    covered = False
                if not covered:
                    continue
                if _routing(earlier) != _routing(entry):
                    shadowed.append((entry.type_matcher, earlier.type_matcher))
                break
        return shadowed

    def classify(self, node_type: str) -> NodeClassification:
        """Classify *node_type* into one of three categories."""
        if node_type in self._safe_types:
            return NodeClassification.SAFE
        if self.get_review_info(node_type) is not None:
            return NodeClassification.REVIEW_REQUIRED
        return NodeClassification.UNKNOWN

    def get_review_info(self, node_type: str) -> ReviewRequiredInfo | None:
        """Review routing info for *node_type*, or None if it needs no review."""
        direct = self._exact.get(node_type)
        if direct is not None:
            return direct
        for compiled, info in self._patterns:
            if compiled.search(node_type):
                return info
        return None

    def is_safe(self, node_type: str) -> bool:
        return self.classify(node_type) == NodeClassification.SAFE

    def is_review_required(self, node_type: str) -> bool:
        return self.classify(node_type) == NodeClassification.REVIEW_REQUIRED


def _routing(info: ReviewRequiredInfo) -> tuple:
    return (info.has_rule_module, info.rule_module_id, info.external_connection)


def _required_text(matcher: str) -> str | None:
    """Identifier text every match of *matcher* contains, or None if not that simple.

    Only ``^``/``$`` anchors and escaped dots are understood; ``\\.`` is kept
    as ``.``, which an identifier matcher's wildcard dot still matches.
    """
    core = matcher.removeprefix("^").removesuffix("$").replace(r"\.", ".")
    return core if _IDENTIFIER_LIKE.fullmatch(core) else None
