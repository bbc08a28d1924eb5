from __future__ import annotations

"""Error taxonomy for the Gladia connector."""


class ConnectorError(Exception):
    """Base class; `item_index` is set once the batch runner knows the item."""

    def __init__(self, message: str, *, item_index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.item_index = item_index


class TransportError(ConnectorError):
    """Network, HTTP status or response-parse failure talking to Gladia."""

    def __init__(self, message: str, *, status_code: int | None = None, item_index: int | None = None) -> None:
        super().__init__(message, item_index=item_index)
        self.status_code = status_code


class UploadError(ConnectorError):
    pass


class BinaryDataError(ConnectorError):
    pass


class MalformedSubmissionError(ConnectorError):
    pass


class TranscriptionFailedError(ConnectorError):
    def __init__(self, message: str, *, service_message: object = None, item_index: int | None = None) -> None:
        super().__init__(message, item_index=item_index)
        self.service_message = service_message


def _format_seconds(ms: float) -> str:
    seconds = ms / 1000
    return str(int(seconds)) if seconds.is_integer() else repr(seconds)


class TranscriptionTimeoutError(ConnectorError):
    def __init__(self, timeout_ms: int, *, item_index: int | None = None) -> None:
        super().__init__(
            f"Transcription timed out after {_format_seconds(timeout_ms)} seconds",
            item_index=item_index,
        )
        self.timeout_ms = timeout_ms
