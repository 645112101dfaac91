"""Unit tests for core types."""

import pytest
from pydantic import ValidationError
from web3 import Web3

from gasless_sdk.core.types import (
    AuthorizationRequest,
    Call,
    DelegationAuthorization,
    TransferRequest,
    normalize_address,
)
from tests import TEST_ADDRESSES

SIGNATURE = '0x' + 'aa' * 32 + 'bb' * 32 + '1c'


class TestNormalizeAddress:
    """Test address validation."""

    def test_checksummed_accepted(self):
        checksummed = Web3.to_checksum_address(TEST_ADDRESSES["delegate"])
        assert normalize_address(checksummed) == TEST_ADDRESSES["delegate"]

    def test_single_case_skips_checksum(self):
        upper = "0x" + TEST_ADDRESSES["token"][2:].upper()
        assert normalize_address(upper) == TEST_ADDRESSES["token"]
        assert normalize_address(TEST_ADDRESSES["token"]) == TEST_ADDRESSES["token"]

    def test_wrong_checksum_rejected(self):
        checksummed = Web3.to_checksum_address(TEST_ADDRESSES["delegate"])
        broken = checksummed[:2] + checksummed[2:].swapcase()
        with pytest.raises(ValueError):
            normalize_address(broken)


class TestTransferRequest:
    """Test transfer request validation."""

    def test_valid_request_is_normalized(self):
        request = TransferRequest(
            sender=TEST_ADDRESSES['sender'],
            recipient=Web3.to_checksum_address(TEST_ADDRESSES["token"]),
            amount=1000
        )
        assert request.recipient == TEST_ADDRESSES["token"]

    @pytest.mark.parametrize("recipient", ["0xinvalid", "not_an_address", "", None, "0x" + "zz" * 20])
    def test_invalid_recipient(self, recipient):
        with pytest.raises(ValidationError):
            TransferRequest(sender=TEST_ADDRESSES['sender'], recipient=recipient, amount=1)

    def test_bad_checksum_rejected(self):
        checksummed = Web3.to_checksum_address(TEST_ADDRESSES["token"])
        index = next(i for i, ch in enumerate(checksummed) if i > 1 and ch.isalpha())
        broken = checksummed[:index] + checksummed[index].swapcase() + checksummed[index + 1:]
        with pytest.raises(ValidationError):
            TransferRequest(
                sender=TEST_ADDRESSES["sender"],
                recipient=broken,
                amount=1
            )

    @pytest.mark.parametrize("amount", [0, -5, "100", 1.5, True])
    def test_invalid_amount(self, amount):
        with pytest.raises(ValidationError):
            TransferRequest(
                sender=TEST_ADDRESSES['sender'],
                recipient=TEST_ADDRESSES['recipient'],
                amount=amount
            )

    def test_frozen(self):
        request = TransferRequest(
            sender=TEST_ADDRESSES['sender'],
            recipient=TEST_ADDRESSES['recipient'],
            amount=1
        )
        with pytest.raises(ValidationError):
            request.amount = 2


class TestDelegationAuthorization:
    """Test authorization shape conversion."""

    def test_to_rpc_splits_signature(self):
        auth = DelegationAuthorization(
            delegate_contract=TEST_ADDRESSES['delegate'],
            chain_id=11155111,
            nonce=7,
            signature=SIGNATURE
        )
        rpc = auth.to_rpc()
        assert rpc["address"] == Web3.to_checksum_address(TEST_ADDRESSES["delegate"])
        assert rpc['chainId'] == hex(11155111)
        assert rpc['nonce'] == '0x7'
        assert rpc['r'] == '0x' + 'aa' * 32
        assert rpc['s'] == '0x' + 'bb' * 32
        assert rpc['yParity'] == '0x1'

    def test_raw_parity_kept(self):
        auth = DelegationAuthorization(
            delegate_contract=TEST_ADDRESSES['delegate'],
            chain_id=1,
            nonce=0,
            signature='0x' + '11' * 64 + '00'
        )
        assert auth.to_rpc()['yParity'] == '0x0'

    def test_short_signature_rejected(self):
        with pytest.raises(ValidationError):
            DelegationAuthorization(
                delegate_contract=TEST_ADDRESSES['delegate'],
                chain_id=1,
                nonce=0,
                signature='0x1234'
            )

    def test_matches_request(self):
        auth = DelegationAuthorization(
            delegate_contract=TEST_ADDRESSES['delegate'],
            chain_id=1,
            nonce=3,
            signature=SIGNATURE
        )
        assert auth.matches(AuthorizationRequest(delegate_contract=TEST_ADDRESSES['delegate'], chain_id=1, nonce=3))
        assert not auth.matches(AuthorizationRequest(delegate_contract=TEST_ADDRESSES['delegate'], chain_id=1, nonce=4))


class TestCall:
    """Test call serialization."""

    def test_to_rpc(self):
        call = Call(target=TEST_ADDRESSES['token'], data=b'\xa9\x05\x9c\xbb')
        assert call.to_rpc() == {
            "to": Web3.to_checksum_address(TEST_ADDRESSES["token"]),
            'data': '0xa9059cbb',
            'value': '0x0',
        }
