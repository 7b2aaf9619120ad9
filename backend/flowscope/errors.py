class DiagramShapeError(ValueError):
    """Raised when a payload cannot be read as a diagram at all."""


class AnalysisError(RuntimeError):
    """Internal failure of an analysis operation."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")
