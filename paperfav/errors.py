from __future__ import annotations


class PaperfavError(Exception):
    pass


class RemoteReadError(PaperfavError):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Load remote favorites failed: {message}")
        self.status = status
        self.message = message


class InvalidCredentialsError(PaperfavError):
    pass
