"""
Type definitions for the zkpay SDK
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class Credential(BaseModel):
    """Cached bearer token with its computed expiry (epoch milliseconds)"""

    token: str
    expired_at: int = Field(alias="expiredAt")

    class Config:
        populate_by_name = True

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expired_at


class AuthResponse(BaseModel):
    """Response of the authentication endpoint"""

    token: str
    expires_in: int = Field(alias="expiresIn")

    class Config:
        populate_by_name = True


class BackendErrorResponse(BaseModel):
    """Error envelope returned by the service for non-2xx responses"""

    message: str
    error: str
    status_code: int = Field(alias="statusCode")

    class Config:
        populate_by_name = True


class NativeCurrency(BaseModel):
    """Native currency of a chain"""

    name: str
    symbol: str
    decimals: int


class Chain(BaseModel):
    """EVM chain definition"""

    id: int
    name: str
    native_currency: NativeCurrency = Field(alias="nativeCurrency")
    rpc_url: Optional[str] = Field(None, alias="rpcUrl")

    class Config:
        populate_by_name = True


class Token(BaseModel):
    """ERC-20 token entry of a token list"""

    chain_id: int = Field(alias="chainId")
    address: str
    name: str
    symbol: str
    decimals: int

    class Config:
        populate_by_name = True


class TokenList(BaseModel):
    """Uniswap-format token list"""

    name: str = ""
    timestamp: str = ""
    tokens: list[Token] = Field(default_factory=list)


class TokenMetadata(BaseModel):
    """Decimals and contract address of the currency a payment is made in"""

    decimals: int
    address: Optional[str] = None


class MerchantConfig(BaseModel):
    """Merchant settings"""

    merchant_address: Optional[str] = Field(None, alias="merchantAddress")
    redirect_url: Optional[str] = Field(None, alias="redirectUrl")
    webhook_url: Optional[str] = Field(None, alias="webhookUrl")
    timeout: Optional[int] = None
    base_url: Optional[str] = Field(None, alias="baseUrl")

    class Config:
        populate_by_name = True


class PaymentParams(BaseModel):
    """Parameters of a payment channel to create"""

    chain: Optional[Chain] = None
    currency: Optional[str] = None
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    amount: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True


class GetChannelQuery(BaseModel):
    """Filter for querying payment channels"""

    target_address: Optional[str] = Field(None, alias="targetAddress")
    page: Optional[int] = None
    limit: Optional[int] = None
    order: Optional[Literal["ASC", "DESC"]] = None

    class Config:
        populate_by_name = True


class PaymentResponse(BaseModel):
    """Created payment channel"""

    id: str
    url: str


class Transaction(BaseModel):
    """On-chain transaction observed for a payment channel"""

    hash: Optional[str] = None
    chain_id: Optional[int] = Field(None, alias="chainId")
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    amount: Optional[str] = None
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    block_number: Optional[int] = Field(None, alias="blockNumber")
    created_at: Optional[str] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True
        extra = "allow"


class PaymentDetails(BaseModel):
    """Payment channel as returned by the service"""

    id: str
    chain_id: Optional[int] = Field(None, alias="chainId")
    target_address: Optional[str] = Field(None, alias="targetAddress")
    contract_address: Optional[str] = Field(None, alias="contractAddress")
    status: str
    amount: str
    human_readable_amount: Optional[str] = Field(None, alias="humanReadableAmount")
    currency: Optional[str] = None
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    webhook_url: Optional[str] = Field(None, alias="webhookUrl")
    redirect_url: Optional[str] = Field(None, alias="redirectUrl")
    reference_id: Optional[str] = Field(None, alias="referenceId")
    transactions: list[Transaction] = Field(default_factory=list)
    created_at: Optional[str] = Field(None, alias="createdAt")
    metadata: dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class PaymentsMeta(BaseModel):
    """Pagination metadata"""

    total_items: int = Field(alias="totalItems")
    item_count: int = Field(alias="itemCount")
    items_per_page: int = Field(alias="itemsPerPage")
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")

    class Config:
        populate_by_name = True


class PaymentsResponse(BaseModel):
    """Paginated payment channels"""

    items: list[PaymentDetails]
    meta: PaymentsMeta
