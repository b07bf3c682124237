"""
Merchant - create, query and retrieve payment channels
"""

import base64
import json
import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any
from urllib.parse import quote

from eth_utils import is_address

from zkpay.api_client import ApiClient
from zkpay.auth import AuthManager, HostEnvironment
from zkpay.clock import Clock, now_ms
from zkpay.config import SdkConfig
from zkpay.exceptions import ValidationError
from zkpay.signers import Identity, ensure_identity
from zkpay.tokens import TokenResolver
from zkpay.types import (
    GetChannelQuery,
    MerchantConfig,
    PaymentDetails,
    PaymentParams,
    PaymentResponse,
)
from zkpay.utils import extract_request_token_metadata

logger = logging.getLogger(__name__)

CHANNELS_ENDPOINT = "/v1/public/channels"
SIGNATURE_HEADER = "signature"


def _encode_signed_payload(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("utf-8")


def to_base_units(amount: str, decimals: int) -> str:
    """
    Convert a human-readable amount to integer base units.

    Raises:
        ValidationError: If the amount has more decimal places than the token
            supports or is not positive
    """
    value = Decimal(amount)
    # scaleb only shifts the exponent, so the coefficient length is enough precision
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits))
        scaled = value.scaleb(decimals)

    if scaled != scaled.to_integral_value():
        raise ValidationError(f"Amount {amount} has more than {decimals} decimal places")
    if scaled <= 0:
        raise ValidationError("Amount must be greater than 0")
    return str(int(scaled))


class Merchant:
    """
    Merchant-facing payment channel API.

    With a signer, created payloads are signed and channel queries are
    authenticated with a bearer token obtained through :class:`AuthManager`.
    """

    def __init__(
        self,
        config: MerchantConfig,
        *,
        signer: Identity | None = None,
        environment: HostEnvironment | None = None,
        api_client: ApiClient | None = None,
        token_resolver: TokenResolver | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize Merchant.

        Args:
            config: Merchant settings; ``merchant_address`` is required
            signer: Identity binding payments to the merchant
            environment: Browser-like host for persisting the auth token
            api_client: Client for the zkpay service
            token_resolver: Currency/token metadata resolver
            clock: Callable returning the current time in epoch milliseconds

        Raises:
            ValidationError: If the merchant address or signer is invalid
        """
        if not config.merchant_address:
            raise ValidationError("merchantAddress is required")
        if not is_address(config.merchant_address):
            raise ValidationError("Invalid merchantAddress format")

        self._config = config
        self._signer = ensure_identity(signer)
        self._clock = clock or now_ms
        self._api_client = api_client or ApiClient(
            base_url=config.base_url, timeout=config.timeout
        )
        self._token_resolver = token_resolver or TokenResolver(clock=self._clock)
        self.auth = AuthManager(
            self._api_client,
            self._signer,
            environment=environment,
            clock=self._clock,
        )

    @classmethod
    async def create(cls, config: MerchantConfig, **kwargs: Any) -> "Merchant":
        """Create a merchant and restore any persisted auth token"""
        merchant = cls(config, **kwargs)
        await merchant.auth.load_persisted_auth()
        return merchant

    async def aclose(self) -> None:
        await self._api_client.aclose()
        await self._token_resolver.aclose()

    async def __aenter__(self) -> "Merchant":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def create_payment(self, params: PaymentParams) -> PaymentResponse:
        """
        Create a payment channel.

        Args:
            params: Chain, amount and currency of the payment

        Returns:
            PaymentResponse with the channel id and payment URL
        """
        self._validate_payment_params(params)

        body, signature = await self._prepare_request(params)
        logger.info(f"Creating payment channel on chain {params.chain.id}")

        headers = {SIGNATURE_HEADER: signature} if signature else None
        try:
            data = await self._api_client.post(CHANNELS_ENDPOINT, body, headers=headers)
        except Exception as e:
            logger.error(f"Failed to create payment: {e}")
            raise
        return PaymentResponse.model_validate(data)

    async def query_payments(self, query: GetChannelQuery | None = None) -> list[PaymentDetails]:
        """
        List the merchant's payment channels.

        Raises:
            ValidationError: If no signer is configured
            AuthenticationError: If a bearer token could not be obtained
        """
        if self._signer is None:
            raise ValidationError("Signer is required to perform this action")

        query = query or GetChannelQuery()
        await self.auth.ensure_authenticated()

        encoded = _encode_signed_payload(
            {
                "query": query.model_dump(by_alias=True, exclude_none=True),
                "expiredAt": self._clock() + SdkConfig.PAYLOAD_TTL_MS,
            }
        )
        signature = await self._signer.sign_message(encoded)

        headers = {SIGNATURE_HEADER: signature, **self._auth_headers()}
        try:
            data = await self._api_client.get(
                CHANNELS_ENDPOINT, params={"query": encoded}, headers=headers
            )
        except Exception as e:
            logger.error(f"Failed to query {query.model_dump_json(exclude_none=True)}: {e}")
            raise
        return [PaymentDetails.model_validate(item) for item in data]

    async def get_payment(self, payment_id: str) -> PaymentDetails:
        """
        Fetch a payment channel by id.

        The bearer token is attached when the merchant is authenticated.
        """
        if not payment_id:
            raise ValidationError("Payment ID is required")

        try:
            data = await self._api_client.get(
                f"{CHANNELS_ENDPOINT}/{quote(payment_id, safe='')}",
                headers=self._auth_headers() or None,
            )
        except Exception as e:
            logger.error(f"Failed to fetch payment {payment_id}: {e}")
            raise
        return PaymentDetails.model_validate(data)

    def _auth_headers(self) -> dict[str, str]:
        token = self.auth.get_auth_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _prepare_request(self, params: PaymentParams) -> tuple[dict[str, Any], str | None]:
        token = await extract_request_token_metadata(params, self._token_resolver)
        candidate = {
            "chainId": params.chain.id,
            "targetAddress": self._config.merchant_address,
            "amount": to_base_units(params.amount, token.decimals),
            "tokenAddress": token.address,
            "webhookUrl": self._config.webhook_url,
            "redirectUrl": self._config.redirect_url,
            "metadata": params.metadata,
        }
        payload = {k: v for k, v in candidate.items() if v is not None}

        if self._signer is None:
            return payload, None

        encoded = _encode_signed_payload(
            {"payload": payload, "expiredAt": self._clock() + SdkConfig.PAYLOAD_TTL_MS}
        )
        signature = await self._signer.sign_message(encoded)
        return {"payload": encoded}, signature

    @staticmethod
    def _validate_payment_params(params: PaymentParams) -> None:
        if params.chain is None:
            raise ValidationError("chain is required")
        if not params.amount:
            raise ValidationError("amount is required")

        try:
            amount = Decimal(params.amount)
        except InvalidOperation as e:
            raise ValidationError(f"Invalid amount: {params.amount}") from e
        if not amount.is_finite():
            raise ValidationError(f"Invalid amount: {params.amount}")
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")
