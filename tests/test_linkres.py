"""Tests for symlink resolution."""

import unittest

import pytest

from rpm_requirements._linkres import (
    DEFAULT_MAX_HOPS,
    REASON_HOP_BUDGET,
    REASON_TRAVERSAL,
    Circular,
    ResolutionStatus,
    Resolved,
    SymlinkResolver,
    Unresolved,
    normalize_path,
    resolve_path,
    validate_link,
)


class TestSymlinkResolverBasics(unittest.TestCase):
    """Plain chases through absolute and relative links."""

    def test_path_without_links_is_its_own_canonical_form(self):
        resolver = SymlinkResolver({})
        self.assertEqual(resolver.resolve("/usr/bin/ls"), Resolved("/usr/bin/ls"))

    def test_root_resolves_to_root(self):
        self.assertEqual(SymlinkResolver({}).resolve("/"), Resolved("/"))

    def test_absolute_directory_link(self):
        resolver = SymlinkResolver({"/sbin": "/usr/sbin"})
        self.assertEqual(resolver.resolve("/sbin/ldconfig"), Resolved("/usr/sbin/ldconfig"))

    def test_relative_directory_link(self):
        resolver = SymlinkResolver({"/sbin": "usr/sbin"})
        self.assertEqual(resolver.resolve("/sbin/ldconfig"), Resolved("/usr/sbin/ldconfig"))

    def test_chain_of_file_links(self):
        links = {
            "/usr/lib/libx.so": "/usr/lib/libx.so.1",
            "/usr/lib/libx.so.1": "/usr/lib/libx.so.1.2",
        }
        self.assertEqual(resolve_path("/usr/lib/libx.so", links), Resolved("/usr/lib/libx.so.1.2"))

    def test_relative_file_link_in_same_directory(self):
        resolver = SymlinkResolver({"/usr/lib64/libc.so.6": "libc-2.34.so"})
        self.assertEqual(resolver.resolve("/usr/lib64/libc.so.6"), Resolved("/usr/lib64/libc-2.34.so"))

    def test_link_below_linked_directory(self):
        links = {"/lib": "usr/lib", "/usr/lib/libx.so": "libx.so.1"}
        self.assertEqual(resolve_path("/lib/libx.so", links), Resolved("/usr/lib/libx.so.1"))

    def test_parent_reference_in_target(self):
        resolver = SymlinkResolver({"/usr/bin/python": "../libexec/python3"})
        self.assertEqual(resolver.resolve("/usr/bin/python"), Resolved("/usr/libexec/python3"))

    def test_redundant_slashes_are_collapsed(self):
        resolver = SymlinkResolver({"/bin": "usr/bin"})
        self.assertEqual(resolver.resolve("//bin//ls/"), Resolved("/usr/bin/ls"))

    def test_resolved_status(self):
        outcome = SymlinkResolver({}).resolve("/etc/passwd")
        self.assertEqual(outcome.status, ResolutionStatus.RESOLVED)

    def test_resolution_is_repeatable(self):
        resolver = SymlinkResolver({"/a": "/b", "/b": "/a"})
        self.assertEqual(resolver.resolve("/a"), resolver.resolve("/a"))


class TestSymlinkResolverLoops(unittest.TestCase):
    """Loops through directory links that terminate, and ones that don't."""

    def test_link_back_to_root_terminates(self):
        resolver = SymlinkResolver({"/iamlink": "/iamtarget", "/iamtarget/iamlink": "/"})
        outcome = resolver.resolve("/iamlink" * 9 + "/file.txt")
        self.assertEqual(outcome, Resolved("/iamtarget/file.txt"))

    def test_relative_link_back_to_parent_terminates(self):
        resolver = SymlinkResolver({"/iamlink": "iamtarget", "/iamtarget/iamlink": "../"})
        outcome = resolver.resolve("/iamlink" * 6 + "/file.txt")
        self.assertEqual(outcome, Resolved("/file.txt"))

    def test_link_to_own_directory_terminates(self):
        resolver = SymlinkResolver({"/iamlink": "/iamtarget", "/iamtarget/iamlink": "/iamtarget"})
        outcome = resolver.resolve("/iamlink" * 9 + "/file.txt")
        self.assertEqual(outcome, Resolved("/iamtarget/file.txt"))

    def test_alternating_links_terminate(self):
        resolver = SymlinkResolver({"/iamlink": "/iamtarget", "/iamtarget/iamlink": "/iamlink"})
        outcome = resolver.resolve("/iamlink" * 6 + "/file.txt")
        self.assertEqual(outcome, Resolved("/iamtarget/file.txt"))

    def test_self_link_is_circular(self):
        resolver = SymlinkResolver({"/iamlink": "/iamlink"})
        outcome = resolver.resolve("/iamlink/file.txt")
        self.assertIsInstance(outcome, Circular)
        self.assertEqual(outcome.visited, ("/iamlink/file.txt", "/iamlink/file.txt"))

    def test_two_link_cycle_is_circular(self):
        resolver = SymlinkResolver({"/iamlink": "/iamtarget/iamlink", "/iamtarget/iamlink": "/iamlink"})
        self.assertIsInstance(resolver.resolve("/iamlink/file.txt"), Circular)
        self.assertIsInstance(resolver.resolve("/iamlink/iamlink/iamlink/file.txt"), Circular)

    def test_three_link_cycle_is_circular(self):
        resolver = SymlinkResolver(
            {
                "/iamlink": "/iamtarget/iamlink",
                "/iamtarget/iamlink": "/iamtarget/iamanotherlink",
                "/iamtarget/iamanotherlink": "/iamlink",
            }
        )
        outcome = resolver.resolve("/iamlink/file.txt")
        self.assertEqual(outcome.status, ResolutionStatus.CIRCULAR)

    def test_file_cycle_reports_visited_paths_in_order(self):
        resolver = SymlinkResolver({"/a": "/b", "/b": "/a"})
        self.assertEqual(resolver.resolve("/a"), Circular(("/a", "/b", "/a")))

    def test_traversal_above_root_is_unresolved(self):
        resolver = SymlinkResolver({"/iamlink": "/iamtarget", "/iamtarget/iamlink": "../../"})
        outcome = resolver.resolve("/iamlink" * 9 + "/file.txt")
        self.assertIsInstance(outcome, Unresolved)
        self.assertEqual(outcome.reason, REASON_TRAVERSAL)

    def test_plain_path_above_root_is_unresolved(self):
        outcome = SymlinkResolver({}).resolve("/../etc/passwd")
        self.assertEqual(outcome, Unresolved("/../etc/passwd", REASON_TRAVERSAL))


class TestHopBudget:
    """The hop budget caps resolution of long, acyclic chains."""

    @staticmethod
    def _chain(length: int) -> dict[str, str]:
        return {f"/l{i}": f"/l{i + 1}" for i in range(length)}

    def test_chain_within_default_budget_resolves(self):
        outcome = SymlinkResolver(self._chain(DEFAULT_MAX_HOPS)).resolve("/l0")
        assert outcome == Resolved(f"/l{DEFAULT_MAX_HOPS}")

    def test_chain_beyond_default_budget_is_unresolved(self):
        outcome = SymlinkResolver(self._chain(DEFAULT_MAX_HOPS + 10)).resolve("/l0")
        assert isinstance(outcome, Unresolved)
        assert outcome.reason == REASON_HOP_BUDGET
        assert outcome.last_path == f"/l{DEFAULT_MAX_HOPS}"

    def test_custom_budget(self):
        outcome = resolve_path("/l0", self._chain(3), max_hops=2)
        assert outcome == Unresolved("/l2", REASON_HOP_BUDGET)

    def test_budget_must_be_positive(self):
        with pytest.raises(ValueError):
            SymlinkResolver({}, max_hops=0)


class TestLinkTableValidation:
    """Link tables are validated when the resolver is built."""

    @pytest.mark.parametrize(
        "path,target",
        [
            ("usr/bin", "/usr/bin"),
            ("/usr/../bin", "/usr/bin"),
            ("/bin", ""),
            ("/bin\0", "usr/bin"),
        ],
    )
    def test_invalid_entries_are_rejected(self, path, target):
        with pytest.raises(ValueError):
            validate_link(path, target)
        with pytest.raises(ValueError):
            SymlinkResolver({path: target})

    def test_relative_start_path_is_rejected(self):
        with pytest.raises(ValueError, match="absolute"):
            SymlinkResolver({}).resolve("usr/bin/ls")

    def test_links_are_exposed_read_only(self):
        resolver = SymlinkResolver({"/bin/": "usr/bin"})
        assert dict(resolver.links) == {"/bin": "usr/bin"}
        assert "/bin" in resolver
        assert len(resolver) == 1
        with pytest.raises(TypeError):
            resolver.links["/sbin"] = "usr/sbin"

    @pytest.mark.parametrize(
        "raw,expected",
        [("/", "/"), ("//usr//bin/", "/usr/bin"), ("usr/bin/", "usr/bin"), ("/usr/bin", "/usr/bin")],
    )
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected
