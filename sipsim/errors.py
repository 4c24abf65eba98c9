class ParameterError(ValueError):
    """Raised when a physical parameter is outside its valid range."""


class IntegrationError(RuntimeError):
    """Raised when the ODE integrator does not reach the end of the span."""

    def __init__(self, message: str, status: int = -1):
        super().__init__(message)
        self.status = status
