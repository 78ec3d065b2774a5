"""Tests for the tiered SourceFetcher."""

import asyncio
import time

import httpx
import pytest

from fandash.fetchers.transport import Resource, SourceFetcher, SourceUnavailableError, Transport, proxy_chain

from .conftest import mock_client

PAGE = "https://shop.test/page"


def first_body(host, bodies):
    return bodies[0] if "items" in bodies[0] else None


class TestTransport:

    def test_proxy_wraps_encoded_target(self) -> None:
        t = Transport("proxy", prefix="https://proxy.test/?u=")
        assert t.wrap("https://shop.test/a?b=1") == "https://proxy.test/?u=https%3A%2F%2Fshop.test%2Fa%3Fb%3D1"

    def test_direct_leaves_url_untouched(self) -> None:
        assert Transport("direct").wrap(PAGE) == PAGE

    def test_chain_ends_with_direct(self) -> None:
        chain = proxy_chain(["https://a.test/?", "https://b.test/?"], {"User-Agent": "x"})
        assert [t.name for t in chain] == ["proxy[0]", "proxy[1]", "direct"]
        assert chain[-1].headers == {"User-Agent": "x"}


class TestSourceFetcher:

    @pytest.mark.asyncio
    async def test_falls_through_failed_tiers_in_order(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.host)
            if request.url.host == "proxy-a.test":
                return httpx.Response(503)
            if request.url.host == "proxy-b.test":
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, text="items here")

        async with mock_client(handler) as client:
            fetcher = SourceFetcher(client, proxy_chain(["https://proxy-a.test/?u=", "https://proxy-b.test/?u="]))
            result = await fetcher.fetch(Resource("SHOP", paths=(PAGE,)), first_body)

        assert seen == ["proxy-a.test", "proxy-b.test", "shop.test"]
        assert result.transport == "direct"
        assert result.value == "items here"

    @pytest.mark.asyncio
    async def test_empty_parse_moves_to_next_tier(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "proxy-a.test":
                return httpx.Response(200, text="<html>captcha</html>")
            return httpx.Response(200, text="items")

        async with mock_client(handler) as client:
            fetcher = SourceFetcher(client, proxy_chain(["https://proxy-a.test/?u="]))
            result = await fetcher.fetch(Resource("SHOP", paths=(PAGE,)), first_body)

        assert result.transport == "direct"

    @pytest.mark.asyncio
    async def test_parse_error_fails_only_that_tier(self) -> None:
        calls = []

        def parse(host, bodies):
            calls.append(host)
            if host == "https://mirror-a.test":
                raise ValueError("bad markup")
            return ["ok"]

        async with mock_client(lambda r: httpx.Response(200, text="x")) as client:
            fetcher = SourceFetcher(client, proxy_chain([]))
            resource = Resource("FEED", paths=("/feed",), hosts=("https://mirror-a.test", "https://mirror-b.test"))
            result = await fetcher.fetch(resource, parse)

        assert calls == ["https://mirror-a.test", "https://mirror-b.test"]
        assert result.host == "https://mirror-b.test"

    @pytest.mark.asyncio
    async def test_joint_pair_fails_together(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/replies"):
                return httpx.Response(500)
            return httpx.Response(200, text="items")

        async with mock_client(handler) as client:
            fetcher = SourceFetcher(client, proxy_chain([]))
            with pytest.raises(SourceUnavailableError):
                await fetcher.fetch(
                    Resource("PAIR", paths=("/main", "/replies"), hosts=("https://mirror.test",)), first_body)

    @pytest.mark.asyncio
    async def test_exhaustion_names_the_resource(self) -> None:
        async with mock_client(lambda r: httpx.Response(502)) as client:
            fetcher = SourceFetcher(client, proxy_chain(["https://proxy-a.test/?u=", "https://proxy-b.test/?u="]))
            with pytest.raises(SourceUnavailableError) as excinfo:
                await fetcher.fetch(Resource("MERCH_UNAVAILABLE", paths=(PAGE,)), first_body)

        assert excinfo.value.resource == "MERCH_UNAVAILABLE"
        assert len(excinfo.value.attempts) == 3

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "proxy-a.test":
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, text="items")

        async with mock_client(handler) as client:
            fetcher = SourceFetcher(client, proxy_chain(["https://proxy-a.test/?u="]), timeout=0.5)
            result = await fetcher.fetch(Resource("SHOP", paths=(PAGE,)), first_body)

        assert result.transport == "direct"

    @pytest.mark.asyncio
    async def test_deadline_covers_whole_attempt(self) -> None:
        # Headers arrive at once, then one body byte every 0.2 s; no single read is slow
        async def trickle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 12\r\nContent-Type: text/html\r\n\r\n")
            await writer.drain()
            try:
                for _ in range(12):
                    await asyncio.sleep(0.2)
                    writer.write(b"x")
                    await writer.drain()
            except ConnectionError:
                pass
            finally:
                writer.close()

        server = await asyncio.start_server(trickle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        url = f"http://127.0.0.1:{port}/page"

        try:
            async with httpx.AsyncClient() as client:
                fetcher = SourceFetcher(client, [Transport("direct")], timeout=0.5)
                started = time.monotonic()
                with pytest.raises(SourceUnavailableError) as excinfo:
                    await fetcher.fetch(Resource("SHOP", paths=(url,)), first_body)
                elapsed = time.monotonic() - started
        finally:
            server.close()
            await server.wait_closed()

        assert elapsed < 1.0
        assert len(excinfo.value.attempts) == 1
