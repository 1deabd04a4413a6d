"""Payment processor (Stripe REST API) client."""

import httpx
import structlog

from learnhub.config.settings import Settings
from learnhub.core.errors import ConfigurationError, UpstreamError


logger = structlog.get_logger(__name__)


class PaymentGateway:
    """Creates payment intents through the Stripe API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = settings.stripe_api_base.rstrip("/")
        self._secret_key = settings.stripe_secret_key
        self._currency = settings.stripe_currency
        self._timeout = settings.stripe_request_timeout
        self._transport = transport

    async def create_payment_intent(self, amount: int) -> str:
        """Create a payment intent for `amount` minor units.

        Returns:
            The intent's client secret.

        Raises:
            ConfigurationError: If the secret key is not configured.
            UpstreamError: If the processor rejects or fails the request.
        """
        if not self._secret_key:
            raise ConfigurationError("Payment processor is not configured")

        data = {
            "amount": str(amount),
            "currency": self._currency,
            "automatic_payment_methods[enabled]": "true",
            "automatic_payment_methods[allow_redirects]": "never",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self._base_url}/payment_intents",
                    data=data,
                    auth=(self._secret_key, ""),
                )
        except httpx.TimeoutException as e:
            logger.error("payment_api_timeout", error=str(e))
            raise UpstreamError(
                "Error creating stripe payment intent", "Payment processor timeout"
            ) from e
        except httpx.RequestError as e:
            logger.error("payment_api_request_error", error=str(e))
            raise UpstreamError("Error creating stripe payment intent", str(e)) from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "payment_api_request_failed",
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise UpstreamError(
                "Error creating stripe payment intent",
                f"Payment processor error: {response.status_code}",
            )

        intent = response.json()
        logger.info("payment_intent_created", intent_id=intent.get("id"), amount=amount)
        return intent["client_secret"]
