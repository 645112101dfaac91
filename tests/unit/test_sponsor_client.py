"""Unit tests for SponsorClient."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch
from aiohttp import ClientError

from gasless_sdk.core.config import GaslessConfig
from gasless_sdk.core.exceptions import (
    ConfigurationMissingError,
    NetworkTimeoutError,
    SimulationFailedError,
    SponsorRejectedError,
)
from gasless_sdk.core.types import Call, DelegationAuthorization
from gasless_sdk.sponsorship.client import SponsorClient
from tests import TEST_ADDRESSES


@pytest.fixture
def config():
    """Test configuration."""
    return GaslessConfig(
        rpc_url="https://rpc.example.org",
        bundler_url="https://bundler.example.org",
        token_address=TEST_ADDRESSES['token'],
        counter_address=TEST_ADDRESSES['counter'],
        delegate_contract=TEST_ADDRESSES['delegate'],
        sponsor_policy_id="sp_test",
        request_timeout=5.0
    )


@pytest.fixture
def client(config):
    """Test client."""
    return SponsorClient(config)


@pytest.fixture
def batch():
    return (
        Call(target=TEST_ADDRESSES['token'], data=b'\x01'),
        Call(target=TEST_ADDRESSES['counter'], data=b'\x02'),
    )


@pytest.fixture
def authorization():
    return DelegationAuthorization(
        delegate_contract=TEST_ADDRESSES['delegate'],
        chain_id=11155111,
        nonce=3,
        signature='0x' + 'aa' * 64 + '1b'
    )


@pytest.fixture
def mock_response():
    """Mock aiohttp response."""
    response = Mock()
    response.status = 200
    response.headers = {}
    return response


def attach_response(client, response):
    client.session = MagicMock()
    client.session.post.return_value.__aenter__ = AsyncMock(return_value=response)
    client.session.post.return_value.__aexit__ = AsyncMock(return_value=None)


def rpc_error(code, message):
    return {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}}


class TestSubmit:
    """Test sponsored batch submission."""

    @pytest.mark.asyncio
    async def test_successful_submission(self, client, batch, authorization):
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value="0xhandle")) as mock_call:
            handle = await client.submit_sponsored_batch(TEST_ADDRESSES['sender'], batch, authorization, "sp_test")

        assert handle == "0xhandle"
        method, params = mock_call.call_args[0]
        assert method == 'sponsor_sendBatch'
        payload = params[0]
        assert payload['sender'] == TEST_ADDRESSES['sender']
        assert payload['chainId'] == hex(11155111)
        assert [call['data'] for call in payload['calls']] == ['0x01', '0x02']
        assert payload['authorization']['nonce'] == '0x3'
        assert payload['context'] == {'sponsorshipPolicyId': 'sp_test'}
        assert mock_call.call_args.kwargs['submitting'] is True

    @pytest.mark.asyncio
    async def test_submission_without_authorization(self, client, batch):
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value="0xhandle")) as mock_call:
            await client.submit_sponsored_batch(TEST_ADDRESSES['sender'], batch, None, "sp_test")

        assert mock_call.call_args[0][1][0]['authorization'] is None

    @pytest.mark.asyncio
    async def test_missing_policy(self, client, batch):
        with patch.object(client, '_make_rpc_call', AsyncMock()) as mock_call:
            with pytest.raises(ConfigurationMissingError):
                await client.submit_sponsored_batch(TEST_ADDRESSES['sender'], batch, None, "")

        mock_call.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_handle(self, client, batch):
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value=None)):
            with pytest.raises(SponsorRejectedError):
                await client.submit_sponsored_batch(TEST_ADDRESSES['sender'], batch, None, "sp_test")


class TestErrorMapping:
    """Test mapping of relayer failures to SDK errors."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [-32500, -32502, -32521])
    async def test_simulation_failures(self, client, mock_response, code):
        mock_response.json = AsyncMock(return_value=rpc_error(code, "execution reverted"))

        with patch.object(client, '_ensure_session', AsyncMock()):
            attach_response(client, mock_response)
            with pytest.raises(SimulationFailedError) as exc_info:
                await client._make_rpc_call("sponsor_sendBatch", [], submitting=True)

        assert exc_info.value.code == code

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [-32501, -32504, -32603])
    async def test_sponsor_rejections(self, client, mock_response, code):
        mock_response.json = AsyncMock(return_value=rpc_error(code, "policy exhausted"))

        with patch.object(client, '_ensure_session', AsyncMock()):
            attach_response(client, mock_response)
            with pytest.raises(SponsorRejectedError) as exc_info:
                await client._make_rpc_call("sponsor_sendBatch", [], submitting=True)

        assert exc_info.value.code == code
        assert not exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_http_forbidden(self, client, mock_response):
        mock_response.status = 403
        mock_response.text = AsyncMock(return_value="policy not found")

        with patch.object(client, '_ensure_session', AsyncMock()):
            attach_response(client, mock_response)
            with pytest.raises(SponsorRejectedError) as exc_info:
                await client._make_rpc_call("sponsor_sendBatch", [], submitting=True)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_server_error_during_submit_is_unknown_outcome(self, client, mock_response):
        mock_response.status = 503
        mock_response.text = AsyncMock(return_value="unavailable")

        with patch.object(client, '_ensure_session', AsyncMock()):
            attach_response(client, mock_response)
            with pytest.raises(NetworkTimeoutError) as exc_info:
                await client._make_rpc_call("sponsor_sendBatch", [], submitting=True)

        assert exc_info.value.submitted
        assert not exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_timeout_during_submit(self, client):
        with patch.object(client, '_ensure_session', AsyncMock()):
            client.session = Mock()
            client.session.post.side_effect = asyncio.TimeoutError()

            with pytest.raises(NetworkTimeoutError) as exc_info:
                await client._make_rpc_call("sponsor_sendBatch", [], submitting=True)

        assert exc_info.value.submitted
        client.session.post.assert_called_once()

    @pytest.mark.asyncio
    async def test_network_error_on_status_query_is_retryable(self, client):
        with patch.object(client, '_ensure_session', AsyncMock()):
            client.session = Mock()
            client.session.post.side_effect = ClientError("reset")

            with pytest.raises(NetworkTimeoutError) as exc_info:
                await client._make_rpc_call("sponsor_getBatchReceipt", ["0xhandle"])

        assert exc_info.value.retryable


class TestStatus:
    """Test settlement status queries."""

    @pytest.mark.asyncio
    async def test_pending(self, client):
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value=None)):
            status = await client.get_submission_status("0xhandle")

        assert not status.included
        assert status.success is None

    @pytest.mark.asyncio
    async def test_included(self, client):
        receipt = {"success": True, "receipt": {"transactionHash": "0xtx"}}
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value=receipt)):
            status = await client.get_submission_status("0xhandle")

        assert status.included
        assert status.success is True
        assert status.transaction_hash == "0xtx"

    @pytest.mark.asyncio
    async def test_wait_for_settlement(self, client):
        receipt = {"success": True, "transactionHash": "0xtx"}
        with patch.object(client, "_make_rpc_call", AsyncMock(side_effect=[None, None, receipt])):
            with patch("gasless_sdk.sponsorship.client.asyncio.sleep", AsyncMock()):
                status = await client.wait_for_settlement("0xhandle", timeout=10.0, poll_interval=1.0)

        assert status.transaction_hash == "0xtx"

    @pytest.mark.asyncio
    async def test_wait_for_settlement_times_out(self, client):
        with patch.object(client, '_make_rpc_call', AsyncMock(return_value=None)):
            with patch('gasless_sdk.sponsorship.client.asyncio.sleep', AsyncMock()):
                with pytest.raises(NetworkTimeoutError) as exc_info:
                    await client.wait_for_settlement("0xhandle", timeout=1.0, poll_interval=0.5)

        assert exc_info.value.submitted
