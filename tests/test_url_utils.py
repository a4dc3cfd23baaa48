from hn_fetch.url_utils import normalize_url


def test_normalize_url_lowercases_host():
    assert normalize_url("HTTPS://Example.COM/Path?q=1") == "https://example.com/Path?q=1"


def test_normalize_url_drops_default_port():
    assert normalize_url("http://example.com:80/a") == "http://example.com/a"


def test_normalize_url_keeps_path_and_query_encoding():
    url = "https://example.com/%7Euser/a%2Fb?X-Amz-Credential=AKIA%2F20240101%2Fus&sig=a%2Bb"
    assert normalize_url(url) == url


def test_normalize_url_without_host_unchanged():
    assert normalize_url("not a url") == "not a url"


def test_normalize_url_empty():
    assert normalize_url("") == ""
    assert normalize_url("   ") == ""
