from dataclasses import dataclass


@dataclass(frozen=True)
class StoredDocument:
    """An original upload written to the storage bucket. Never updated."""

    name: str
    bucket: str
    public_url: str
