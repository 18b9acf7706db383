"""Authentication error taxonomy."""


class AuthenticationError(RuntimeError):
    """Raised when a Salesforce credential cannot be obtained."""


class ConfigurationIncomplete(AuthenticationError):
    """A strategy is missing required configuration and cannot be attempted."""

    def __init__(self, strategy: str, missing):
        self.strategy = strategy
        self.missing = list(missing)
        super().__init__(
            f"{strategy} strategy is missing configuration: {', '.join(self.missing)}"
        )


class StrategyFailure(AuthenticationError):
    """A configured strategy was attempted and did not yield a credential."""

    def __init__(self, strategy: str, reason: str):
        self.strategy = strategy
        self.reason = reason
        super().__init__(f"{strategy} strategy failed: {reason}")
