"""Tests for the IPFS document store and the web3 ledger client over real HTTP."""

import asyncio
import contextlib
import json

import pytest
from aiohttp import web

from clrscan.config import ClrConfig
from clrscan.errors import DocumentUnavailable, LedgerUnavailable
from clrscan.ipfs import IpfsDocumentStore, gateway_url
from clrscan.ledger.client import Web3LedgerClient, same_address
from clrscan.ledger.context import LedgerContext


ROUND = "0x1000000000000000000000000000000000000001"
MACI = "0x2000000000000000000000000000000000000002"
SCHEMA = {"metadata": {"columns": [{"label": "Name", "type": "text"}]}}


@contextlib.asynccontextmanager
async def serving(app: web.Application):
    """Run ``app`` on a free local port and yield its base URL."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    try:
        host, port = runner.addresses[0][:2]
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


def _ipfs_app(add_response) -> web.Application:
    uploads = []

    async def schema(request: web.Request) -> web.Response:
        return web.json_response(SCHEMA)

    async def html(request: web.Request) -> web.Response:
        return web.Response(text="<html>gateway error page</html>", content_type="text/html")

    async def add(request: web.Request) -> web.Response:
        form = await request.post()
        uploads.append(json.loads(form["file"].file.read()))
        return web.json_response(add_response)

    app = web.Application()
    app["uploads"] = uploads
    app.router.add_get("/ipfs/QmSchema/reg.json", schema)
    app.router.add_get("/ipfs/QmHtml", html)
    app.router.add_post("/api/v0/add", add)
    return app


class TestGatewayUrl:
    @pytest.mark.parametrize("gateway", ["https://ipfs.io", "https://ipfs.io/"])
    def test_joins_path(self, gateway: str) -> None:
        assert gateway_url(gateway, "/ipfs/QmHash/logo.png") == "https://ipfs.io/ipfs/QmHash/logo.png"

    def test_adds_leading_slash(self) -> None:
        assert gateway_url("https://ipfs.io", "ipfs/QmHash") == "https://ipfs.io/ipfs/QmHash"

    def test_empty_path_has_no_url(self) -> None:
        assert gateway_url("https://ipfs.io", "") == ""


class TestIpfsDocumentStore:
    def test_fetch_json(self) -> None:
        async def scenario():
            async with serving(_ipfs_app({"Hash": "QmNew"})) as base:
                return await IpfsDocumentStore(base, timeout_seconds=5).fetch_json(
                    "/ipfs/QmSchema/reg.json"
                )

        assert asyncio.run(scenario()) == SCHEMA

    def test_missing_document(self) -> None:
        async def scenario():
            async with serving(_ipfs_app({"Hash": "QmNew"})) as base:
                await IpfsDocumentStore(base, timeout_seconds=5).fetch_json("/ipfs/QmGone")

        with pytest.raises(DocumentUnavailable, match="404"):
            asyncio.run(scenario())

    def test_non_json_body(self) -> None:
        async def scenario():
            async with serving(_ipfs_app({"Hash": "QmNew"})) as base:
                await IpfsDocumentStore(base, timeout_seconds=5).fetch_json("/ipfs/QmHtml")

        with pytest.raises(DocumentUnavailable):
            asyncio.run(scenario())

    def test_unreachable_gateway(self) -> None:
        store = IpfsDocumentStore("http://127.0.0.1:1", timeout_seconds=5)
        with pytest.raises(DocumentUnavailable):
            asyncio.run(store.fetch_json("/ipfs/QmSchema/reg.json"))

    def test_publish_returns_hash(self) -> None:
        app = _ipfs_app({"Name": "document.json", "Hash": "QmNew", "Size": "42"})

        async def scenario():
            async with serving(app) as base:
                store = IpfsDocumentStore(base, api_url=base, timeout_seconds=5)
                return await store.publish_json({"results": [1, 2]})

        assert asyncio.run(scenario()) == "QmNew"
        assert app["uploads"] == [{"results": [1, 2]}]

    def test_publish_without_hash(self) -> None:
        async def scenario():
            async with serving(_ipfs_app({"Name": "document.json"})) as base:
                store = IpfsDocumentStore(base, api_url=base, timeout_seconds=5)
                await store.publish_json({"results": []})

        with pytest.raises(DocumentUnavailable, match="no hash"):
            asyncio.run(scenario())

    def test_publish_without_api_url(self) -> None:
        store = IpfsDocumentStore("https://ipfs.test")
        with pytest.raises(DocumentUnavailable):
            asyncio.run(store.publish_json({}))


def _rpc_app() -> web.Application:
    async def rpc(request: web.Request) -> web.Response:
        body = await request.json()
        if body["method"] == "eth_call":
            result = "0x" + "00" * 12 + MACI[2:]
        elif body["method"] == "eth_chainId":
            result = "0x64"
        else:
            return web.json_response({
                "jsonrpc": "2.0", "id": body["id"],
                "error": {"code": -32601, "message": "method not found"},
            })
        return web.json_response({"jsonrpc": "2.0", "id": body["id"], "result": result})

    app = web.Application()
    app.router.add_post("/", rpc)
    return app


class TestWeb3LedgerClient:
    def test_call_decodes_result(self) -> None:
        async def scenario():
            async with serving(_rpc_app()) as base:
                client = Web3LedgerClient(base + "/", request_timeout=5)
                return await client.call(ROUND, "FundingRound", "maci")

        assert same_address(asyncio.run(scenario()), MACI)

    def test_connection_failure_is_ledger_unavailable(self) -> None:
        client = Web3LedgerClient("http://127.0.0.1:1", request_timeout=5)
        with pytest.raises(LedgerUnavailable, match="FundingRound.maci"):
            asyncio.run(client.call(ROUND, "FundingRound", "maci"))

    def test_block_number_failure_is_ledger_unavailable(self) -> None:
        client = Web3LedgerClient("http://127.0.0.1:1", request_timeout=5)
        with pytest.raises(LedgerUnavailable):
            asyncio.run(client.block_number())

    def test_context_applies_configured_timeout(self) -> None:
        config = ClrConfig(
            rpc_url="http://127.0.0.1:8545",
            factory_address="0xFaC7000000000000000000000000000000000001",
            rpc_timeout_seconds=12,
        )
        ctx = LedgerContext.from_config(config)
        assert isinstance(ctx.client, Web3LedgerClient)
        assert ctx.client.request_timeout == 12


def test_same_address_ignores_case() -> None:
    assert same_address(
        "0xFaC7000000000000000000000000000000000001",
        "0xfac7000000000000000000000000000000000001",
    )
    assert not same_address(
        "0xfac7000000000000000000000000000000000001",
        "0xfac7000000000000000000000000000000000002",
    )
