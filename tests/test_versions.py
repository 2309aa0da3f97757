"""Tests for picking the newest cached package version."""

from pathlib import Path

import pytest

from conftest import make_version_dirs
from dotnet_cov.errors import InvalidArgumentError, NotFoundError
from dotnet_cov.resolve.versions import latest_version_dir, list_version_dirs, package_cache_dir


class TestLexicalOrdering:
    def test_returns_last_name(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["1.0.0", "1.2.0", "2.0.0"])
        assert latest_version_dir(root) == root / "2.0.0"

    def test_known_limitation_unpadded_versions(self, tmp_path: Path) -> None:
        """Plain string comparison ranks 1.9.0 above 1.10.0."""
        root = make_version_dirs(tmp_path / "pkg", ["1.9.0", "1.10.0"])
        assert latest_version_dir(root, ordering="lexical") == root / "1.9.0"

    def test_codecoverage_cache_lexical_picks_9_1_0(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / ".nuget/packages/microsoft.codecoverage", ["9.1.0", "10.0.0"])
        assert latest_version_dir(root, ordering="lexical") == root / "9.1.0"

    def test_files_are_ignored(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["1.0.0"])
        (root / "9.9.9.txt").write_text("not a version dir", encoding="utf-8")
        assert latest_version_dir(root) == root / "1.0.0"


class TestSemverOrdering:
    def test_codecoverage_cache_semver_picks_10_0_0(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / ".nuget/packages/microsoft.codecoverage", ["9.1.0", "10.0.0"])
        assert latest_version_dir(root, ordering="semver") == root / "10.0.0"

    def test_prerelease_ranks_below_release(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["17.9.0", "17.10.0-preview.1", "17.10.0"])
        assert latest_version_dir(root, ordering="semver") == root / "17.10.0"

    def test_unparsable_names_rank_lowest(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["zz-nightly", "1.0.0"])
        assert latest_version_dir(root, ordering="semver") == root / "1.0.0"

    def test_only_unparsable_names_fall_back_to_lexical(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["alpha", "beta"])
        assert latest_version_dir(root, ordering="semver") == root / "beta"


class TestFailures:
    def test_missing_root_raises_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            latest_version_dir(tmp_path / "missing")

    def test_empty_root_raises_not_found(self, tmp_path: Path) -> None:
        root = tmp_path / "empty"
        root.mkdir()
        with pytest.raises(NotFoundError):
            latest_version_dir(root)

    def test_unknown_ordering_is_invalid(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["1.0.0"])
        with pytest.raises(InvalidArgumentError):
            latest_version_dir(root, ordering="newest")


class TestPackageCacheDir:
    def test_lower_cases_package_id(self, tmp_path: Path) -> None:
        assert package_cache_dir(tmp_path, "Microsoft.CodeCoverage") == tmp_path / "microsoft.codecoverage"

    def test_blank_package_id_is_invalid(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidArgumentError):
            package_cache_dir(tmp_path, " ")

    def test_list_version_dirs_is_sorted(self, tmp_path: Path) -> None:
        root = make_version_dirs(tmp_path / "pkg", ["2.0.0", "1.0.0"])
        assert [path.name for path in list_version_dirs(root)] == ["1.0.0", "2.0.0"]
