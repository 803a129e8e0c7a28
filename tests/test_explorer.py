"""
Tests for the block explorer client against a mock transport
"""

import pytest
import httpx
from decimal import Decimal

from bank_portal.explorer import BlockExplorerClient

ETH_HASH = "0xabc123"
BTC_HASH = "f4184fc596403b9d638783cf57adfe4c75c605f6356fbc91338530e9831e9e16"


class TestBlockExplorerClient:
    """Test ethereum and bitcoin lookups"""

    def setup_method(self):
        self.requests = []

    def _client(self, handler, api_key="test-key"):
        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)
        return BlockExplorerClient(etherscan_api_key=api_key, transport=httpx.MockTransport(record))

    def test_ethereum_from_blockchain_info(self):
        def handler(request):
            return httpx.Response(200, json={
                "from": "0xfrom", "to": "0xto", "value": 2 * 10 ** 18, "gas": 21000,
                "confirmations": 12, "time": 1700000000,
            })

        client = self._client(handler)
        tx = client.lookup(ETH_HASH, "ethereum")

        assert tx.source == "blockchain.info"
        assert tx.amount == Decimal('2')
        assert tx.status == "confirmed"
        assert tx.timestamp.startswith("2023-11-14")
        assert self.requests[0].url.path == f"/rawtx/{ETH_HASH}"
        assert self.requests[0].url.params["cors"] == "true"

    def test_ethereum_falls_back_to_etherscan(self):
        def handler(request):
            if request.url.host == "blockchain.info":
                return httpx.Response(404, text="not found")
            return httpx.Response(200, json={"result": {
                "from": "0xfrom", "to": "0xto", "value": hex(10 ** 18),
                "gas": "0x5208", "blockNumber": "0x10",
            }})

        client = self._client(handler)
        tx = client.lookup(ETH_HASH, "eth")

        assert tx.source == "etherscan"
        assert tx.amount == Decimal('1')
        assert tx.fee == Decimal(21000) / Decimal(10) ** 18
        assert tx.confirmations == 1
        assert tx.explorer_url == f"https://etherscan.io/tx/{ETH_HASH}"

        params = self.requests[1].url.params
        assert params["action"] == "eth_getTransactionByHash"
        assert params["txhash"] == ETH_HASH
        assert params["apikey"] == "test-key"

    def test_pending_etherscan_transaction(self):
        def handler(request):
            if request.url.host == "blockchain.info":
                return httpx.Response(404)
            return httpx.Response(200, json={"result": {"value": "0x0", "blockNumber": None}})

        tx = self._client(handler).lookup(ETH_HASH)
        assert tx.status == "pending"
        assert tx.from_address == "Unknown"

    def test_unknown_hash_returns_none(self):
        def handler(request):
            if request.url.host == "blockchain.info":
                return httpx.Response(404)
            return httpx.Response(200, json={"result": None})

        assert self._client(handler).lookup(ETH_HASH) is None

    def test_no_etherscan_key(self):
        client = self._client(lambda r: httpx.Response(404), api_key=None)

        assert client.lookup(ETH_HASH) is None
        assert len(self.requests) == 1

    def test_network_error_falls_back(self):
        def handler(request):
            if request.url.host == "blockchain.info":
                raise httpx.ConnectError("unreachable", request=request)
            return httpx.Response(200, json={"result": {"value": "0x1", "blockNumber": "0x1"}})

        assert self._client(handler).lookup(ETH_HASH).source == "etherscan"

    def test_bitcoin(self):
        def handler(request):
            return httpx.Response(200, json={
                "inputs": [{"prev_out": {"addr": "1From", "value": 150000000}}],
                "out": [{"addr": "1To", "value": 100000000}],
                "block_height": 800000,
                "time": 1700000000,
            })

        tx = self._client(handler).lookup(BTC_HASH, "bitcoin")

        assert tx.network == "bitcoin"
        assert tx.from_address == "1From"
        assert tx.to_address == "1To"
        assert tx.amount == Decimal('1')
        assert tx.fee == Decimal('0.5')
        assert tx.status == "confirmed"
        assert tx.to_dict()["from"] == "1From"

    def test_bitcoin_unknown(self):
        assert self._client(lambda r: httpx.Response(404)).lookup(BTC_HASH, "btc") is None

    def test_unsupported_network(self):
        client = self._client(lambda r: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            client.lookup(ETH_HASH, "dogecoin")
        assert self.requests == []
