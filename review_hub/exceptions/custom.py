class HostawayError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class HostawayAuthError(HostawayError):
    """Raised when the client-credentials exchange is rejected."""


class ProviderContractError(Exception):
    """The provider answered with a payload we cannot parse."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CredentialStoreError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CredentialStoreNotConfiguredError(CredentialStoreError):
    def __init__(self, store: str):
        self.store = store
        super().__init__(f"Credential store '{store}' is not configured")
