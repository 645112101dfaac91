#!/usr/bin/env python3
"""
Sponsored Transfer Example: Gasless PYUSD on Sepolia

This example demonstrates:
- Loading configuration from the environment
- Checking the sender's fee tier before sending
- Quoting the service fee for a transfer
- Executing a sponsored transfer with a first-time delegation
- Waiting for the relayer to report inclusion

Requirements:
- GASLESS_BUNDLER_URL, GASLESS_COUNTER_ADDRESS and GASLESS_SPONSOR_POLICY_ID
- GASLESS_PRIVATE_KEY for a funded Sepolia test account
"""

import asyncio
import logging
import os
from pathlib import Path
import sys

# Add the src directory to the path so we can import the SDK modules
project_dir = Path(__file__).parent.parent
src_dir = project_dir / "src"
sys.path.insert(0, str(src_dir))

from gasless_sdk.core.config import GaslessConfig
from gasless_sdk.core.exceptions import (
    ConfigurationMissingError,
    GaslessSDKError,
    InsufficientBalanceError,
    InvalidRequestError,
    NetworkTimeoutError,
)
from gasless_sdk.core.units import address_link, from_minor_units
from gasless_sdk.delegation.signers import LocalAccountSigner
from gasless_sdk.transfers.sponsored import SponsoredTransfer, build_transfer_request

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

RECIPIENT = os.environ.get('GASLESS_EXAMPLE_RECIPIENT', '0x2222222222222222222222222222222222222222')


async def example_tier_status(client: SponsoredTransfer):
    """Show where the sender stands in the free tier."""
    print("\n=== Tier Status ===")

    count, decision = await client.get_tier_status(client.signer.address)
    print(f"Transactions sent so far: {count}")
    print(f"Next transfer: {decision.explanation}")
    print(f"Sender on explorer: {address_link(client.config.explorer_url, client.signer.address)}")


async def example_fee_quote(client: SponsoredTransfer):
    """Preview the fee for a 10 PYUSD transfer."""
    print("\n=== Fee Quote ===")

    amount = 10 * 10 ** client.config.token_decimals
    decision, fee_quote = await client.quote_transfer(client.signer.address, amount)
    decimals = client.config.token_decimals
    print(f"Free: {decision.is_free}")
    print(f"Fee: {from_minor_units(fee_quote.fee, decimals)} {client.config.token_symbol}")
    print(f"Total debited: {from_minor_units(fee_quote.total_debited, decimals)} {client.config.token_symbol}")


async def example_sponsored_transfer(client: SponsoredTransfer):
    """Send 0.5 PYUSD without holding ETH."""
    print("\n=== Sponsored Transfer ===")

    try:
        result = await client.transfer_tokens(RECIPIENT, "0.5")
        print(f"✅ Accepted by relayer: {result.settlement_handle}")
        print(f"   Free: {result.was_free}, fee: {result.fee}")
        print(f"   Explorer: {result.explorer_url}")

        status = await client.wait_for_settlement(result.settlement_handle, timeout=120.0)
        print(f"✅ Included: success={status.success}, tx={status.transaction_hash}")

    except InsufficientBalanceError as e:
        print(f"❌ Not enough balance: need {e.required}, have {e.available}")
    except NetworkTimeoutError as e:
        if e.submitted:
            print(f"⚠️  Outcome unknown, check the relayer before retrying: {e}")
        else:
            print(f"❌ Network error, safe to retry: {e}")
    except GaslessSDKError as e:
        print(f"❌ Transfer failed ({type(e).__name__}): {e}")


async def example_error_handling():
    """Demonstrate request validation before any network I/O."""
    print("\n=== Error Handling ===")

    sender = "0x1111111111111111111111111111111111111111"
    test_cases = [
        {"name": "Invalid recipient", "recipient": "0xinvalid", "amount": 100},
        {"name": "Zero amount", "recipient": RECIPIENT, "amount": 0},
        {"name": "Negative amount", "recipient": RECIPIENT, "amount": -5},
    ]

    for test_case in test_cases:
        try:
            build_transfer_request(sender, test_case["recipient"], test_case["amount"])
            print(f"❌ {test_case['name']}: Should have failed but didn't")
        except InvalidRequestError as e:
            print(f"✅ {test_case['name']}: rejected on field '{e.field}'")


async def main():
    """Run the sponsored transfer examples."""
    print("🚀 Gasless SDK Examples")
    print("=" * 50)

    await example_error_handling()

    private_key = os.environ.get('GASLESS_PRIVATE_KEY')
    if not private_key:
        print("\nSet GASLESS_PRIVATE_KEY to run the on-chain examples")
        return

    config = GaslessConfig.from_env()
    try:
        config.validate()
    except ConfigurationMissingError as e:
        print(f"\n❌ Missing setting: {e.setting}")
        return

    signer = LocalAccountSigner(private_key)

    try:
        async with SponsoredTransfer(config, signer) as client:
            await example_tier_status(client)
            await example_fee_quote(client)
            await example_sponsored_transfer(client)

        print("\n" + "=" * 50)
        print("✅ Examples completed")

    except Exception as e:
        print(f"\n❌ Example failed with error: {e}")
        logger.exception("Example execution failed")


if __name__ == "__main__":
    asyncio.run(main())
