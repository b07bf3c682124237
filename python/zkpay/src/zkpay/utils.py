"""
Payment request helpers
"""

from zkpay.exceptions import ValidationError
from zkpay.tokens import TokenResolver
from zkpay.types import PaymentParams, TokenMetadata


async def extract_request_token_metadata(
    params: PaymentParams,
    resolver: TokenResolver,
) -> TokenMetadata:
    """
    Resolve the decimals and contract address of the payment currency.

    Either ``currency`` (a symbol) or ``token_address`` may be set; with
    neither, the chain's native currency is used.

    Raises:
        ValidationError: If both are set or the token cannot be resolved
    """
    chain = params.chain
    native = TokenMetadata(decimals=chain.native_currency.decimals)

    if params.currency and params.token_address:
        raise ValidationError("Only set either currency or tokenAddress")

    if params.currency:
        if params.currency == chain.native_currency.symbol:
            return native

        token = await resolver.get_token_by_symbol(chain.id, params.currency)
        if token is None:
            raise ValidationError(
                f"Currency {params.currency} is not supported on chain {chain.name}. "
                "Please specify 'tokenAddress' instead."
            )
        return TokenMetadata(decimals=token.decimals, address=token.address)

    if params.token_address:
        try:
            token = await resolver.get_token_by_address(chain, params.token_address)
        except Exception as e:
            raise ValidationError(
                f"Failed to fetch token details for address {params.token_address}: {e}"
            ) from e
        return TokenMetadata(decimals=token.decimals, address=token.address)

    return native
