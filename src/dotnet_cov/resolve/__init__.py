"""Path, version-directory and artifact resolution helpers."""

from dotnet_cov.resolve.artifacts import (
    RECENCY_POLICIES,
    RecencyPolicy,
    find_most_recent,
    iter_matching_files,
)
from dotnet_cov.resolve.paths import resolve_path
from dotnet_cov.resolve.versions import (
    VERSION_ORDERINGS,
    VersionOrdering,
    latest_version_dir,
    list_version_dirs,
    package_cache_dir,
)

__all__ = [
    "RECENCY_POLICIES",
    "RecencyPolicy",
    "find_most_recent",
    "iter_matching_files",
    "resolve_path",
    "VERSION_ORDERINGS",
    "VersionOrdering",
    "latest_version_dir",
    "list_version_dirs",
    "package_cache_dir",
]
