from secretflare.models.version import VersionDetails

__all__ = ["VersionCache"]


class VersionCache:
    """
    Version details fetched during one command invocation, keyed by version id.

    Entries are never replaced or evicted.
    """

    def __init__(self) -> None:
        self._versions: dict[str, VersionDetails] = {}

    def __contains__(self, version_id: object) -> bool:
        return version_id in self._versions

    def __len__(self) -> int:
        return len(self._versions)

    def get(self, version_id: str) -> VersionDetails | None:
        return self._versions.get(version_id)

    def insert_if_absent(self, details: VersionDetails) -> VersionDetails:
        """Store `details` unless its id is already cached; return the cached entry."""
        return self._versions.setdefault(details.id, details)
