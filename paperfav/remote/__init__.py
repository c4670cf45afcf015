from .client import (
    ContentHandle,
    Credentials,
    RemoteContentClient,
    RepoConfig,
    WriteAccepted,
    WriteConflict,
    WriteRejected,
    WriteResult,
    decode_content,
    encode_content,
    favorite_file_path,
)

__all__ = [
    "ContentHandle",
    "Credentials",
    "RemoteContentClient",
    "RepoConfig",
    "WriteAccepted",
    "WriteConflict",
    "WriteRejected",
    "WriteResult",
    "decode_content",
    "encode_content",
    "favorite_file_path",
]
