"""Tests for capability string helpers and the capability index."""

import pytest

from rpm_requirements._depres import (
    CapabilityIndex,
    Package,
    PackageGraph,
    ignored_reason,
    is_boolean_dependency,
    is_path_capability,
    split_boolean_dependency,
    strip_version_constraint,
)
from rpm_requirements._linkres import Circular, Resolved, SymlinkResolver, Unresolved


class TestCapabilityStrings:
    @pytest.mark.parametrize(
        "capability,expected",
        [
            ("libfoo >= 1.2", "libfoo"),
            ("glibc = 2.34-60.el9", "glibc"),
            ("bash <= 5", "bash"),
            ("perl(Carp) >= 1.25", "perl(Carp)"),
            ("libc.so.6(GLIBC_2.34)(64bit)", "libc.so.6(GLIBC_2.34)(64bit)"),
            ("config(setup) = 2.13.7-9.el9", "config(setup)"),
            ("coreutils", "coreutils"),
        ],
    )
    def test_strip_version_constraint(self, capability, expected):
        assert strip_version_constraint(capability) == expected

    def test_path_capability(self):
        assert is_path_capability("/usr/bin/sh")
        assert not is_path_capability("sh")
        assert not is_path_capability("(a or b)")

    def test_boolean_dependency(self):
        assert is_boolean_dependency("(python3-foo if python3)")
        assert not is_boolean_dependency("python3-foo")

    def test_rpmlib_requirements_are_ignored(self):
        assert ignored_reason("rpmlib(CompressedFileNames) <= 3.0.4-1") is not None
        assert ignored_reason("rpm") is None
        assert ignored_reason("librpm.so.9()(64bit)") is None

    def test_split_boolean_dependency(self):
        assert split_boolean_dependency("(pkgA >= 1.0 if (pkgB or pkgC))") == {"pkgA", "pkgB", "pkgC"}

    def test_split_boolean_dependency_with_all_operators(self):
        names = split_boolean_dependency("((a and b) or (c with d) or (e without f) or (g unless h) or (i if j else k))")
        assert names == set("abcdefghijk")

    def test_split_boolean_dependency_breaks_on_every_parenthesis(self):
        assert split_boolean_dependency("(perl(Foo) if perl)") == {"perl", "Foo"}

    def test_split_boolean_dependency_skips_odd_pieces(self):
        assert split_boolean_dependency("(foo bar baz or qux)") == {"qux"}


def _graph() -> PackageGraph:
    return PackageGraph(
        [
            Package("glibc", provides=("libc.so.6()(64bit)", "glibc = 2.34-60"), files=frozenset({"/usr/lib64/libc.so.6"})),
            Package("bash", provides=("/bin/sh", "bash = 5.2"), files=frozenset({"/usr/bin/bash"})),
            Package("dash", provides=("/bin/sh",)),
            Package("broken", provides=("/loop/x", "/../escape")),
        ]
    )


LINKS = {"/bin": "usr/bin", "/lib64": "usr/lib64", "/loop": "/loop"}


class TestCapabilityIndex:
    @pytest.fixture
    def index(self) -> CapabilityIndex:
        return CapabilityIndex.build(_graph(), LINKS)

    def test_every_package_provides_itself(self, index):
        for name in ("glibc", "bash", "dash", "broken"):
            assert index.providers(name) == {name}

    def test_named_capability(self, index):
        assert index.providers("libc.so.6()(64bit)") == {"glibc"}

    def test_exact_versioned_capability(self, index):
        assert index.providers("glibc = 2.34-60") == {"glibc"}

    def test_versioned_requirement_falls_back_to_name(self, index):
        assert index.providers("glibc >= 2.30") == {"glibc"}
        assert index.providers("bash >= 99") == {"bash"}

    def test_versioned_provision_is_indexed_by_name(self, index):
        assert "glibc" in index
        assert "bash" in index

    def test_path_provision_is_indexed_under_canonical_path(self, index):
        assert index.providers("/usr/bin/sh") == {"bash", "dash"}
        assert index.providers("/bin/sh") == {"bash", "dash"}

    def test_owned_file_found_through_link(self, index):
        assert index.providers("/lib64/libc.so.6") == {"glibc"}
        assert index.providers("/bin/bash") == {"bash"}

    def test_unknown_capability_has_no_providers(self, index):
        assert index.providers("libdoesnotexist.so") == frozenset()
        assert index.providers("/usr/bin/doesnotexist") == frozenset()

    def test_unresolvable_path_query_has_no_providers(self, index):
        assert index.providers("/loop/x") == frozenset()

    def test_failed_path_provisions_are_dropped_and_recorded(self, index):
        dropped = index.dropped_provisions["broken"]
        assert set(dropped) == {"/loop/x", "/../escape"}
        assert isinstance(dropped["/loop/x"], Circular)
        assert isinstance(dropped["/../escape"], Unresolved)
        assert "/loop/x" not in index

    def test_canonicalize(self, index):
        assert index.canonicalize(" coreutils ") == "coreutils"
        assert index.canonicalize("/bin/sh") == Resolved("/usr/bin/sh")

    def test_build_accepts_existing_resolver(self):
        resolver = SymlinkResolver(LINKS)
        index = CapabilityIndex.build(_graph(), resolver)
        assert index.resolver is resolver
        assert index.providers("/bin/sh") == {"bash", "dash"}

    def test_index_is_read_only(self, index):
        with pytest.raises(TypeError):
            index.dropped_provisions["new"] = {}
