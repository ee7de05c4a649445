"""
Exceptions raised by the Plan Classifier.
"""


class ClassifierError(Exception):
    """Base class for plan classifier errors."""
    pass


class SourceFetchError(ClassifierError):
    """Raised when a reference source cannot be downloaded or parsed."""

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        super().__init__(f"{source_id}: {message}")
