import pytest

from factcheck.infrastructure.github import TreeEntry, rank_files, score_file_importance


@pytest.mark.parametrize("path, expected", [
    ("README.md", 100),
    ("docs/readme.md", 100),
    ("package.json", 90),
    ("backend/requirements.txt", 90),
    ("pyproject.toml", 90),
    ("Dockerfile", 85),
    ("deploy/k8s/deployment.yaml", 85),
    ("charts/helm/values.yaml", 85),
    ("src/main/resources/application.yml", 80),
    ("app/settings.py", 80),
    ("src/user_controller.ts", 70),
    ("app/order_service.py", 70),
    ("src/routes/handler.go", 70),
    ("src/utils/math.py", 50),
    ("web/index.tsx", 50),
    ("tests/foo.spec.ts", 20),
    ("src/widget.test.js", 20),
    ("pkg/parse_test.go", 20),
    ("test_models.py", 20),
    ("yarn.lock", 0),
    ("assets/logo.png", 0),
    ("Makefile", 10),
    ("LICENSE", 10),
])
def test_priority_tiers(path, expected):
    assert score_file_importance(path) == expected


def test_score_is_total_and_deterministic():
    for path in ("", "weird///path", "x" * 1000):
        first = score_file_importance(path)
        assert 0 <= first <= 100
        assert score_file_importance(path) == first


def test_rank_files_orders_by_score_and_keeps_tree_order_on_ties():
    entries = [
        TreeEntry("src/a.py", "blob", "h1"),
        TreeEntry("src", "tree", "h2"),
        TreeEntry("README.md", "blob", "h3"),
        TreeEntry("src/b.py", "blob", "h4"),
        TreeEntry("yarn.lock", "blob", "h5"),
        TreeEntry("src/c.py", "blob", "h6"),
    ]
    ranked = rank_files(entries, limit=4)
    assert [c.path for c in ranked] == ["README.md", "src/a.py", "src/b.py", "src/c.py"]
    assert [c.importance for c in ranked] == [100, 50, 50, 50]
    assert ranked[0].fetch_handle == "h3"


def test_rank_files_skips_entries_without_fetch_handle():
    entries = [TreeEntry("README.md", "blob", ""), TreeEntry("src/a.py", "blob", "h")]
    assert [c.path for c in rank_files(entries, limit=12)] == ["src/a.py"]
