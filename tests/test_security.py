import pytest

from hn_fetch.errors import FetchError, SecurityError
from hn_fetch.security import check_url, is_public_address


@pytest.mark.parametrize(
    "address",
    [
        "127.0.0.1",
        "10.1.2.3",
        "172.16.0.1",
        "192.168.1.1",
        "169.254.169.254",
        "100.64.0.1",
        "0.0.0.0",
        "224.0.0.1",
        "::1",
        "fe80::1",
        "fc00::1",
        "::ffff:127.0.0.1",
        "::ffff:10.0.0.1",
        "not-an-ip",
    ],
)
def test_non_public_addresses(address):
    assert not is_public_address(address)


@pytest.mark.parametrize(
    "address", ["93.184.216.34", "1.1.1.1", "2606:4700:4700::1111"]
)
def test_public_addresses(address):
    assert is_public_address(address)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        "http://127.0.0.1/admin",
        "http://10.0.0.7:8080/",
        "http://[::1]/",
        "http://169.254.169.254/latest/meta-data/",
        "http://localhost:3000/",
        "http://api.localhost/",
    ],
)
async def test_private_targets_blocked_without_resolving(url):
    async def resolver(host):
        raise AssertionError("resolver should not be consulted")

    with pytest.raises(SecurityError):
        await check_url(url, resolver)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["file:///etc/passwd", "ftp://example.com/x", "http:///path"])
async def test_bad_scheme_or_missing_host_blocked(url, public_resolver):
    with pytest.raises(SecurityError):
        await check_url(url, public_resolver)


@pytest.mark.asyncio
async def test_hostname_resolving_to_private_address_blocked():
    async def resolver(host):
        return ["93.184.216.34", "10.0.0.5"]

    with pytest.raises(SecurityError):
        await check_url("https://internal.example.com/", resolver)


@pytest.mark.asyncio
async def test_public_hostname_allowed(public_resolver):
    address = await check_url("https://example.com/page", public_resolver)
    assert address == "93.184.216.34"
    assert public_resolver.calls == ["example.com"]


@pytest.mark.asyncio
async def test_literal_address_returned_without_lookup(public_resolver):
    assert await check_url("http://[2606:4700::1111]/", public_resolver) == "2606:4700::1111"
    assert await check_url("https://1.1.1.1/dns", public_resolver) == "1.1.1.1"
    assert public_resolver.calls == []


@pytest.mark.asyncio
async def test_unresolvable_host_is_fetch_error_not_security_error():
    async def resolver(host):
        raise OSError("Name or service not known")

    with pytest.raises(FetchError) as exc_info:
        await check_url("https://nowhere.invalid/", resolver)
    assert not isinstance(exc_info.value, SecurityError)
