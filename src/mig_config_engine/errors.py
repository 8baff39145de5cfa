from __future__ import annotations


class MIGConfigError(Exception):
    pass


class InputError(MIGConfigError, ValueError):
    pass


class EmptyInputError(InputError):
    pass


class CredentialError(MIGConfigError):
    pass


class UpstreamUnavailable(CredentialError):
    def __init__(self, message: str = "API key not configured") -> None:
        super().__init__(message)


class UpstreamError(MIGConfigError):
    def __init__(self, status: int, details: str) -> None:
        super().__init__(f"OpenAI API Error: {status}")
        self.status = status
        self.details = details


class TransportError(MIGConfigError):
    pass


class ParseError(MIGConfigError, ValueError):
    pass
