"""Custom exceptions for clonekit."""


class CloneKitError(Exception):
    """Base exception for all clonekit errors."""

    pass


class ValidationError(CloneKitError):
    """Raised when a clone request references a missing engagement or client.

    Always raised before anything is written.
    """

    pass


class PerArtifactError(CloneKitError):
    """Exception raised when a single artifact cannot be processed or persisted."""

    def __init__(self, message: str, artifact_id: str = None):
        """
        Initialize per-artifact error.

        Args:
            message: Error message
            artifact_id: Optional id of the source artifact that failed
        """
        super().__init__(message)
        self.artifact_id = artifact_id


class LineageConflictError(CloneKitError):
    """Exception raised when a lineage edge would break the clone forest."""

    def __init__(self, message: str, parent_id: str = None, child_id: str = None):
        """
        Initialize lineage conflict error.

        Args:
            message: Error message
            parent_id: Parent (source) engagement id of the rejected edge
            child_id: Child (cloned) engagement id of the rejected edge
        """
        super().__init__(message)
        self.parent_id = parent_id
        self.child_id = child_id


class DuplicateEdgeError(LineageConflictError):
    """Exception raised when an edge already exists for the same parent/child pair."""

    pass


class FieldConfigError(CloneKitError):
    """Exception raised for an invalid field definition table."""

    pass


class LineageWriteError(CloneKitError):
    """Exception raised when storage fails while writing a lineage edge."""

    def __init__(self, message: str, parent_id: str = None, child_id: str = None):
        super().__init__(message)
        self.parent_id = parent_id
        self.child_id = child_id
