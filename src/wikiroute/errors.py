"""Exceptions raised by wikiroute."""


class WikirouteError(Exception):
    """Base class for wikiroute errors."""


class ScanError(WikirouteError):
    """Content tree could not be read.

    Fatal: the build cannot produce a trustworthy index without every file.
    """

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class LinkConflictError(WikirouteError):
    """Two documents registered the same lookup key under the reject policy."""

    def __init__(self, key: str, existing: str, incoming: str) -> None:
        super().__init__(
            f'Lookup key "{key}" is claimed by both {existing} and {incoming}'
        )
        self.key = key
        self.existing = existing
        self.incoming = incoming
