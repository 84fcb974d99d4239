import time
from collections.abc import Callable

from po_upload.logging.logger import Log
from po_upload.storage.client import SupabaseStorageClient
from po_upload.storage.exceptions import StorageConfigurationError, StorageError
from po_upload.storage.models import StoredDocument

BUCKET_MISSING_MESSAGE = (
    'Storage bucket "{bucket}" not found. Please create it in your Supabase '
    "dashboard under Storage."
)
LIST_POLICY_MESSAGE = (
    'Storage bucket has RLS enabled but no policies. Please either: 1) Disable RLS '
    'on the "{bucket}" bucket in Supabase Storage settings, or 2) Add a policy '
    "allowing INSERT for anonymous users."
)
UPLOAD_POLICY_MESSAGE = """Storage RLS Policy Error: The bucket has Row Level Security enabled but no policies allow uploads.

To fix this, go to your Supabase dashboard:
1. Navigate to Storage > Policies
2. Find the "{bucket}" bucket
3. Either:
   - Disable RLS for this bucket (easier for testing), OR
   - Add a new policy with:
     * Operation: INSERT
     * Target roles: anon (for anonymous users)
     * Policy: true (to allow all uploads)"""


def object_name(filename: str, now_ms: int) -> str:
    """Storage key for an upload: epoch milliseconds, a dash, the original name."""
    return f"{now_ms}-{filename}"


class DocumentStore:
    """Writes original uploads to the bucket, explaining known misconfigurations."""

    def __init__(
        self,
        client: SupabaseStorageClient,
        *,
        cache_control: str = "3600",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._cache_control = cache_control
        self._clock = clock

    def store(self, filename: str, content: bytes, content_type: str) -> StoredDocument:
        """Probe the bucket, then create a new timestamp-prefixed object.

        Raises:
            StorageConfigurationError: bucket missing or access policy blocks the upload.
            StorageError: any other provider failure.
        """
        bucket = self._client.bucket
        self._probe_bucket(bucket)

        name = object_name(filename, int(self._clock() * 1000))
        try:
            self._client.upload(
                name, content, content_type, cache_control=self._cache_control, upsert=False
            )
        except StorageError as exc:
            if "row-level security" in str(exc).lower():
                raise StorageConfigurationError(
                    UPLOAD_POLICY_MESSAGE.format(bucket=bucket)
                ) from exc
            raise

        stored = StoredDocument(name=name, bucket=bucket, public_url=self._client.public_url(name))
        Log.info(f"Stored {filename} as {bucket}/{name}")
        return stored

    def _probe_bucket(self, bucket: str) -> None:
        try:
            self._client.list_objects(limit=1)
        except StorageError as exc:
            message = str(exc).lower()
            if "not found" in message:
                raise StorageConfigurationError(
                    BUCKET_MISSING_MESSAGE.format(bucket=bucket)
                ) from exc
            if "row-level security" in message:
                raise StorageConfigurationError(
                    LIST_POLICY_MESSAGE.format(bucket=bucket)
                ) from exc
            # The upload below reports anything that actually blocks the write.
            Log.warning(f"Bucket probe for {bucket} failed, continuing: {exc}")
