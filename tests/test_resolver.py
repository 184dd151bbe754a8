"""Tests for org and package alias resolution."""

import pytest

from common.cache import TTLCache
from errors import ResolutionFailure
from gateway.models import PackageVersion
from resolver import IdentityResolver

from conftest import FakeGateway, USER, vid


@pytest.fixture
def resolver(fake_gateway):
    return IdentityResolver(fake_gateway, TTLCache())


class TestResolveEnvironment:
    """Tests for resolve_environment()."""

    def test_username_short_circuits(self, resolver, fake_gateway):
        assert resolver.resolve_environment("someone@example.com") == "someone@example.com"
        assert fake_gateway.count("list_orgs") == 0

    def test_alias(self, resolver):
        assert resolver.resolve_environment("hub") == USER

    def test_org_id(self, resolver):
        assert resolver.resolve_environment("00D000000000002AAA") == "sandbox@example.com"

    def test_fifteen_char_org_id(self, resolver):
        assert resolver.resolve_environment("00D000000000003") == "scratch@example.com"

    def test_scratch_alias(self, resolver):
        assert resolver.resolve_environment("scratch") == "scratch@example.com"

    def test_persistent_org_wins_over_scratch(self, resolver):
        assert resolver.resolve_environment("sandbox") == "sandbox@example.com"

    def test_unknown_alias(self, resolver):
        with pytest.raises(ResolutionFailure) as exc_info:
            resolver.resolve_environment("nope")
        assert exc_info.value.kind == "environment"
        assert exc_info.value.alias == "nope"

    def test_org_list_fetched_once(self, resolver, fake_gateway):
        resolver.resolve_environment("hub")
        resolver.resolve_environment("scratch")
        with pytest.raises(ResolutionFailure):
            resolver.resolve_environment("missing")
        assert fake_gateway.count("list_orgs") == 1

    def test_reset_refetches(self, resolver, fake_gateway):
        resolver.resolve_environment("hub")
        resolver.reset()
        resolver.resolve_environment("hub")
        assert fake_gateway.count("list_orgs") == 2


class TestResolvePackageVersion:
    """Tests for resolve_package_version()."""

    def test_latest_by_name(self, resolver):
        assert resolver.resolve_package_version("A") == vid(2)

    def test_exact_version(self, resolver):
        assert resolver.resolve_package_version("A@1.0") == vid(1)

    def test_latest_suffix(self, resolver):
        assert resolver.resolve_package_version("A@LATEST") == vid(2)
        assert resolver.resolve_package_version("A@latest") == vid(2)

    def test_unknown_name(self, resolver):
        with pytest.raises(ResolutionFailure) as exc_info:
            resolver.resolve_package_version("C")
        assert exc_info.value.kind == "package"

    def test_unknown_exact_version(self, resolver):
        with pytest.raises(ResolutionFailure):
            resolver.resolve_package_version("A@3.0")

    def test_version_id_short_circuits(self, resolver, fake_gateway):
        assert resolver.resolve_package_version(vid(42)) == vid(42)
        assert fake_gateway.count("list_package_versions") == 0

    def test_package_id_picks_latest(self, resolver):
        assert resolver.resolve_package_version("0Ho000000000001AAA") == vid(2)

    def test_package_id_exact_version(self, resolver):
        assert resolver.resolve_package_version("0Ho000000000001AAA@1.0") == vid(1)

    def test_version_list_fetched_once(self, resolver, fake_gateway):
        resolver.resolve_package_version("A")
        resolver.resolve_package_version("B")
        assert fake_gateway.count("list_package_versions") == 1

    def test_numeric_ordering_by_default(self):
        gw = FakeGateway(versions=[
            PackageVersion(vid(9), "0Ho1", "X", "", "9.0.0.1"),
            PackageVersion(vid(10), "0Ho1", "X", "", "10.0.0.1"),
        ])
        assert IdentityResolver(gw, TTLCache()).resolve_package_version("X") == vid(10)

    def test_lexicographic_ordering(self):
        gw = FakeGateway(versions=[
            PackageVersion(vid(9), "0Ho1", "X", "", "9.0.0.1"),
            PackageVersion(vid(10), "0Ho1", "X", "", "10.0.0.1"),
        ])
        resolver = IdentityResolver(gw, TTLCache(), version_ordering="lexicographic")
        assert resolver.resolve_package_version("X") == vid(9)

    def test_get_package_version(self, resolver):
        assert resolver.get_package_version(vid(3)).package_name == "B"
        with pytest.raises(ResolutionFailure):
            resolver.get_package_version(vid(77))


class TestOrgLookups:
    """Tests for dev hub and id lookups."""

    def test_dev_hub(self, resolver):
        assert resolver.dev_hub().username == USER

    def test_no_dev_hub(self, orgs):
        gw = FakeGateway(orgs=orgs[1:])
        with pytest.raises(ResolutionFailure):
            IdentityResolver(gw, TTLCache()).dev_hub()

    def test_find_org_by_id(self, resolver):
        assert resolver.find_org_by_id("00D000000000003AAA").alias == "scratch"
        with pytest.raises(ResolutionFailure):
            resolver.find_org_by_id("00D000000000123AAA")
