"""
Extraction of Asana task references from free text.

Matching happens in two stages so that a malformed link is an explicit,
testable branch instead of a silent regex miss:

1. ``ReferenceTokenizer`` finds every occurrence of the trigger phrase
   immediately followed by ``http(s)://<host>/`` and captures the path token
   that follows it. A leading ``<digits>/<digits>/<digits>`` run is captured
   on its own, so punctuation or markup right after a link is left behind.
2. ``parse_reference_token`` turns a path token such as ``0/123/456/f`` into a
   ``Reference``; anything that lacks the project or task id raises
   ``MatchError``.

``ReferenceExtractor.extract`` runs both stages, logs and drops invalid
tokens, and returns the valid references in the order they appear.
"""

import re
from collections.abc import Iterator
from functools import lru_cache

import structlog

from asana_sync.exceptions import MatchError
from asana_sync.models.domain import Reference

log = structlog.get_logger(__name__)

DEFAULT_HOST = "app.asana.com"

# An id run ends at the task id; any other path runs to whitespace, a bracket,
# a quote or inline markup
_PATH_TOKEN = r"\d+/\d+/\d+|[^\s<>()\[\]\"'`*]*"

# <version>/<project>/<task>, anything after the task id is ignored
_REFERENCE_PATH = re.compile(r"^(?P<version>\d+)/(?P<project_id>\d+)/(?P<task_id>\d+)")


class ReferenceTokenizer:
    """Locates ``<trigger>http(s)://<host>/<path>`` occurrences in text."""

    def __init__(self, trigger: str, host: str = DEFAULT_HOST):
        """Initialize tokenizer.

        Args:
            trigger: Literal phrase that must immediately precede the link.
                An empty trigger matches every bare link.
            host: Host name of task links
        """
        self.trigger = trigger
        self.host = host
        self.pattern = re.compile(
            re.escape(trigger) + r"https?://" + re.escape(host) + "/(?P<path>" + _PATH_TOKEN + ")"
        )

    def tokens(self, text: str) -> Iterator[str]:
        """Yield the path token of every non-overlapping occurrence, left to right."""
        for match in self.pattern.finditer(text):
            yield match.group("path")


def parse_reference_token(token: str) -> Reference:
    """Convert a link path token into a Reference.

    Args:
        token: Path following ``https://<host>/``, e.g. ``0/123/456/f``

    Returns:
        Reference with the project and task ids

    Raises:
        MatchError: If the token does not carry both numeric ids
    """
    match = _REFERENCE_PATH.match(token)
    if match is None:
        raise MatchError(f"Invalid Asana task URL path: {token!r}", token=token)
    return Reference(container_id=match.group("project_id"), item_id=match.group("task_id"))


@lru_cache(maxsize=32)
def _tokenizer(trigger: str, host: str) -> ReferenceTokenizer:
    return ReferenceTokenizer(trigger, host)


class ReferenceExtractor:
    """Finds task references placed after a trigger phrase."""

    def __init__(self, host: str = DEFAULT_HOST):
        self.host = host

    def extract(self, text: str | None, trigger: str) -> list[Reference]:
        """Return every valid reference in ``text`` in order of appearance.

        Args:
            text: Free text such as a PR body or a commit message
            trigger: Literal phrase that must precede each link

        Returns:
            References in discovery order; invalid links are logged and skipped
        """
        if not text:
            return []

        tokenizer = _tokenizer(trigger, self.host)
        references: list[Reference] = []
        for token in tokenizer.tokens(text):
            try:
                references.append(parse_reference_token(token))
            except MatchError as e:
                log.warning("invalid_task_reference", trigger=trigger, token=e.token, error=e.message)

        log.info(
            "task_references_found",
            trigger=trigger,
            count=len(references),
            task_ids=[r.item_id for r in references],
        )
        return references
