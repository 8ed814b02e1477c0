from __future__ import annotations

"""
Unit tests for the Path Resolver.

Verifies:
1. Textual normalization (slashes, query markers, trailing separators).
2. Re-expression against the working directory ('.', './rest', absolute).
3. Flattening of nested sequences and path-like objects.
4. Extraction of paths from mappings and attribute-carrying objects.
5. Detection of the (value, index, sequence) iteration-callback shape.
6. Reporting of unresolvable arguments.
"""

from pathlib import PurePosixPath
from types import SimpleNamespace

import pytest

from cachedfs.core.resolver import PathResolver, check_path, normalize
from cachedfs.domain.errors import InvalidArgumentError

CWD = "/work/project"


@pytest.fixture
def resolver() -> PathResolver:
    return PathResolver(cwd_provider=lambda: CWD)


# -----------------------------------------------------------------------------
# NORMALIZATION
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("a\\b\\c", "a/b/c"),
    ("a//b///c", "a/b/c"),
    ("a/b/", "a/b"),
    ("/", "/"),
    ("file?.txt", "file.txt"),
    ("", ""),
])
def test_normalize_rules(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


# -----------------------------------------------------------------------------
# CANONICAL FORM
# -----------------------------------------------------------------------------

def test_mixed_separators_collapse_to_one_canonical_path(resolver: PathResolver) -> None:
    """Empty middle parts, doubled slashes and backslashes all collapse."""
    resolved = resolver.resolve("a", "", "b//c/", "d\\e")
    assert resolved.path == "./a/b/c/d/e"
    assert resolved.problems == ()


def test_no_arguments_and_empty_string_mean_cwd(resolver: PathResolver) -> None:
    assert resolver.resolve().path == "."
    assert resolver.resolve("").path == "."
    assert resolver.resolve(".").path == "."
    assert resolver.resolve(CWD).path == "."


def test_paths_outside_cwd_stay_absolute(resolver: PathResolver) -> None:
    assert resolver.resolve("/etc/hosts").path == "/etc/hosts"
    assert resolver.resolve("..", "sibling").path == "/work/sibling"
    assert resolver.resolve("/").path == "/"


def test_absolute_path_inside_cwd_becomes_relative(resolver: PathResolver) -> None:
    assert resolver.resolve(CWD + "/src/app.py").path == "./src/app.py"


def test_dot_segments_are_collapsed(resolver: PathResolver) -> None:
    assert resolver.resolve("./a/./b/../c").path == "./a/c"


def test_prefix_sharing_directory_is_not_inside_cwd(resolver: PathResolver) -> None:
    assert resolver.resolve("/work/project-other/x").path == "/work/project-other/x"


def test_canonicalize_is_idempotent(resolver: PathResolver) -> None:
    for raw in ["a/b", "/etc", ".", "../x", "a\\b//c/"]:
        once = resolver.canonicalize(raw)
        assert resolver.canonicalize(once) == once


def test_absolute_uses_cwd(resolver: PathResolver) -> None:
    assert resolver.absolute("./a") == "/work/project/a"
    assert resolver.absolute(".") == "/work/project"


# -----------------------------------------------------------------------------
# ARGUMENT SHAPES
# -----------------------------------------------------------------------------

def test_nested_sequences_are_flattened(resolver: PathResolver) -> None:
    assert resolver.resolve(["a", ["b", ("c",)]]).path == "./a/b/c"


def test_numbers_become_segments(resolver: PathResolver) -> None:
    assert resolver.resolve("logs", 2024, 1.5).path == "./logs/2024/1.5"


def test_whole_floats_read_like_integers(resolver: PathResolver) -> None:
    assert resolver.resolve("v", 1.0).path == "./v/1"
    assert resolver.resolve("v", -3.0).path == "./v/-3"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_floats_are_reported(resolver: PathResolver, value: float) -> None:
    resolved = resolver.resolve("a", value)
    assert resolved.path == "./a"
    assert [p.index for p in resolved.problems] == [1]


def test_none_is_skipped(resolver: PathResolver) -> None:
    resolved = resolver.resolve("a", None, "b")
    assert resolved.path == "./a/b"
    assert resolved.problems == ()


def test_path_like_objects_are_accepted(resolver: PathResolver) -> None:
    assert resolver.resolve(PurePosixPath("a") / "b").path == "./a/b"


def test_mapping_with_path_key(resolver: PathResolver) -> None:
    assert resolver.resolve({"path": "data/file.json"}).path == "./data/file.json"
    assert resolver.resolve({"file_path": "x"}).path == "./x"


def test_object_attribute_lookup_order(resolver: PathResolver) -> None:
    """'name' wins over 'path' when both are present and non-empty."""
    obj = SimpleNamespace(name="first", path="second")
    assert resolver.resolve(obj).path == "./first"

    obj = SimpleNamespace(name="", fullPath="/abs/target")
    assert resolver.resolve(obj).path == "/abs/target"


def test_unresolvable_arguments_are_reported(resolver: PathResolver) -> None:
    resolved = resolver.resolve("a", True, object(), "b")
    assert resolved.path == "./a/b"
    assert [p.index for p in resolved.problems] == [1, 2]
    assert "bool" in resolved.problems[0].describe()


def test_nested_problems_report_the_outer_argument(resolver: PathResolver) -> None:
    """Items inside a nested list are reported at the position of that list."""
    resolved = resolver.resolve(["a", True], True, [["b", object()]])
    assert resolved.path == "./a/b"
    assert [p.index for p in resolved.problems] == [0, 1, 2]


# -----------------------------------------------------------------------------
# ITERATION CALLBACK SHAPE
# -----------------------------------------------------------------------------

def test_iteration_callback_uses_only_the_element(resolver: PathResolver) -> None:
    items = ["x", "y"]
    assert [resolver.resolve(v, i, items).path for i, v in enumerate(items)] == ["./x", "./y"]


def test_non_matching_triple_is_a_plain_path(resolver: PathResolver) -> None:
    """The element at the index differs from the value, so all three are used."""
    assert resolver.resolve("x", 1, ["x", "y"]).path == "./x/1/x/y"


def test_bool_index_is_not_a_callback(resolver: PathResolver) -> None:
    resolved = resolver.resolve("x", True, ["x"])
    assert resolved.problems


# -----------------------------------------------------------------------------
# VALIDATION
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("bad", ['./a"b', "./a<b", "./a>b", "./*.txt", "", "   "])
def test_check_path_rejects_forbidden_paths(bad: str) -> None:
    with pytest.raises(InvalidArgumentError):
        check_path(bad)


def test_check_path_returns_valid_path() -> None:
    assert check_path("./a/b.txt") == "./a/b.txt"
