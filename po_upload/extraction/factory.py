from po_upload.config.settings import Settings
from po_upload.extraction.base import BasePurchaseOrderExtractor
from po_upload.extraction.example_client_adapter import ExampleClientAdapter
from po_upload.extraction.exceptions import ExtractionNotConfiguredError
from po_upload.extraction.extractor import PurchaseOrderExtractor
from po_upload.extraction.openai_client_adapter import OpenAIClientAdapter


class ExtractorFactory:
    """Creates the configured purchase-order extractor."""

    PROVIDERS = ("example", "openai", "openai_compatible")

    @classmethod
    def create(cls, settings: Settings) -> BasePurchaseOrderExtractor:
        """Create an extractor from application settings.

        Raises:
            ValueError: for an unknown provider or a missing compatible base URL.
            ExtractionNotConfiguredError: when the provider has no API key.
        """
        provider = settings.extraction_provider.lower()
        if provider == "example":
            return PurchaseOrderExtractor(client=ExampleClientAdapter(), model="example")
        if provider == "openai":
            if not settings.openai_api_key:
                raise ExtractionNotConfiguredError("OpenAI API key not configured")
            client = OpenAIClientAdapter(
                api_key=settings.openai_api_key,
                timeout_seconds=settings.openai_timeout_seconds,
            )
            return PurchaseOrderExtractor(
                client=client,
                model=settings.openai_model_name,
                temperature=settings.openai_temperature,
            )
        if provider == "openai_compatible":
            base_url = settings.openai_compatible_base_url.strip()
            if not base_url:
                raise ValueError(
                    "openai_compatible_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            client = OpenAIClientAdapter(
                # Local servers such as ollama accept any non-empty key.
                api_key=settings.openai_compatible_api_key or "unused",
                timeout_seconds=settings.openai_timeout_seconds,
                base_url=base_url,
            )
            return PurchaseOrderExtractor(
                client=client,
                model=settings.openai_compatible_model_name,
                temperature=settings.openai_temperature,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
