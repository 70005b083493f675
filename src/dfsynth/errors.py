class DocumentError(Exception):
    """Base class for instruction-document errors."""


class NoStageError(DocumentError):
    """A stage-bound instruction was added before any FROM."""


class StageIndexError(DocumentError, IndexError):
    """A stage index or stage name does not refer to an existing stage."""


class DocumentSourceError(DocumentError, OSError):
    """A document source could not be opened, read, written or decoded."""
