"""Exception types raised by the content tree."""


class ContentTreeError(Exception):
    """Base class for content tree errors."""


class StructuralError(ContentTreeError):
    """A mutation would break the tree structure (root or non-empty directory)."""


class NodeNotFoundError(ContentTreeError, LookupError):
    """A caller asked for a node that the tree does not contain."""


class ProviderError(ContentTreeError):
    """A document store operation failed."""


class ConfigError(ContentTreeError):
    """Project configuration is invalid."""


class LintError(ContentTreeError):
    """The markdown linter could not scan a document."""
