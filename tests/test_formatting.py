import pytest

from filemaster.formatting import breadcrumbs, clean_dir, join_dir, parent_dir, size_formatted


@pytest.mark.parametrize(
    "num_bytes,expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1234567, "1.18 MB"),
        (1024 ** 3, "1 GB"),
        (1024 ** 4, "1 TB"),
        (1024 ** 5, "1024 TB"),
    ],
)
def test_size_formatted(num_bytes, expected):
    assert size_formatted(num_bytes) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, "."),
        ("", "."),
        (".", "."),
        ("./", "."),
        ("a\\b/", "a/b"),
        ("./docs", "docs"),
        ("/", "/"),
        ("sub/inner//", "sub/inner"),
    ],
)
def test_clean_dir(raw, expected):
    assert clean_dir(raw) == expected


def test_join_dir():
    assert join_dir(".", "a.txt") == "a.txt"
    assert join_dir("sub/", "a.txt") == "sub/a.txt"


@pytest.mark.parametrize("raw,expected", [("a/b", "a"), ("a", "."), ("/a", "."), (".", ".")])
def test_parent_dir(raw, expected):
    assert parent_dir(raw) == expected


def test_breadcrumbs_home_only():
    assert [(c.name, c.path) for c in breadcrumbs(".")] == [("Home", ".")]
    assert [(c.name, c.path) for c in breadcrumbs("")] == [("Home", ".")]


def test_breadcrumbs_accumulate():
    crumbs = breadcrumbs("docs\\2024/reports/")
    assert [(c.name, c.path) for c in crumbs] == [
        ("Home", "."),
        ("docs", "docs"),
        ("2024", "docs/2024"),
        ("reports", "docs/2024/reports"),
    ]
