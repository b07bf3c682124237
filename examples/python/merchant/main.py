import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from zkpay import Chains, EvmSigner, GetChannelQuery, Merchant, MerchantConfig, PaymentParams
from zkpay.logging_config import setup_logging

setup_logging(logging.DEBUG)

load_dotenv(Path(__file__).parent.parent.parent.parent / ".env")

MERCHANT_ADDRESS = os.getenv("MERCHANT_ADDRESS", "")
MERCHANT_PRIVATE_KEY = os.getenv("MERCHANT_PRIVATE_KEY", "")
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
REDIRECT_URL = os.getenv("REDIRECT_URL")

if not MERCHANT_ADDRESS:
    print("\n❌ Error: MERCHANT_ADDRESS not set in .env file")
    print("\nPlease add your merchant address to .env file\n")
    exit(1)


async def main():
    signer = EvmSigner.from_private_key(MERCHANT_PRIVATE_KEY) if MERCHANT_PRIVATE_KEY else None
    config = MerchantConfig(
        merchantAddress=MERCHANT_ADDRESS,
        webhookUrl=WEBHOOK_URL,
        redirectUrl=REDIRECT_URL,
    )

    print("Initializing merchant...")
    print(f"  Merchant: {MERCHANT_ADDRESS}")
    if signer:
        print(f"  Signer: {signer.get_address()}")

    async with await Merchant.create(config, signer=signer) as merchant:
        payment = await merchant.create_payment(
            PaymentParams(
                chain=Chains.SEPOLIA,
                amount="0.01",
                metadata={"orderId": "demo-1"},
            )
        )
        print(f"\n✅ Payment channel created: {payment.id}")
        print(f"  Pay at: {payment.url}")

        details = await merchant.get_payment(payment.id)
        print(f"  Status: {details.status}, amount: {details.amount}")

        if signer:
            payments = await merchant.query_payments(GetChannelQuery(limit=5, order="DESC"))
            print(f"\n📋 Latest {len(payments)} payments:")
            for item in payments:
                print(f"  {item.id} {item.status} {item.amount}")


if __name__ == "__main__":
    asyncio.run(main())
