"""Unit tests for the destination allowlist."""

import pytest

from hookgate.forwarding.allowlist import Allowlist, host_of


class TestHostOf:
    """Tests for host extraction."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://A.Example/hook", "a.example"),
            ("http://a.example:8080/x?y=1", "a.example"),
            ("https://user:pw@b.example/", "b.example"),
        ],
    )
    def test_returns_lowercased_host(self, url: str, expected: str) -> None:
        """Given an absolute URL, returns its lowercased hostname."""
        assert host_of(url) == expected

    @pytest.mark.parametrize("url", ["", "not a url", "/relative/path", "http://"])
    def test_returns_none_without_host(self, url: str) -> None:
        """Given a URL with no host, returns None."""
        assert host_of(url) is None


class TestAllowlist:
    """Tests for Allowlist.is_allowed."""

    def test_empty_allowlist_permits_any_host(self) -> None:
        """Given an empty allowlist, any parsable URL is allowed."""
        allowlist = Allowlist()

        assert allowlist.is_empty
        assert allowlist.is_allowed("https://anything.example/hook")

    def test_empty_allowlist_rejects_unparsable_url(self) -> None:
        """Given an empty allowlist, a URL without a host is still rejected."""
        assert not Allowlist().is_allowed("no-host-here")

    def test_exact_match_is_case_insensitive(self) -> None:
        """Given mixed-case entries and URLs, matching ignores case."""
        allowlist = Allowlist(["A.Example"])

        assert allowlist.is_allowed("https://a.example/hook")
        assert allowlist.is_allowed("https://A.EXAMPLE/hook")

    def test_rejects_unlisted_host(self) -> None:
        """Given a non-empty allowlist, other hosts are rejected."""
        allowlist = Allowlist(["a.example"])

        assert not allowlist.is_allowed("https://b.example/hook")

    def test_no_subdomain_or_suffix_matching(self) -> None:
        """Given an entry, subdomains and look-alike suffixes don't match."""
        allowlist = Allowlist(["a.example"])

        assert not allowlist.is_allowed("https://sub.a.example/")
        assert not allowlist.is_allowed("https://evila.example/")

    def test_port_does_not_affect_match(self) -> None:
        """Given a URL with a port, only the hostname is compared."""
        assert Allowlist(["a.example"]).is_allowed("http://a.example:9000/hook")

    def test_from_string_splits_and_trims(self) -> None:
        """Given a comma-separated string, blank entries are dropped."""
        allowlist = Allowlist.from_string(" a.example, ,B.example ,")

        assert allowlist.hosts == frozenset({"a.example", "b.example"})
        assert len(allowlist) == 2

    def test_from_none_is_empty(self) -> None:
        assert Allowlist.from_string(None).is_empty
