import asyncio
import logging

from secretflare.client.cache import VersionCache
from secretflare.client.reader import VersionReader
from secretflare.constants import DEFAULT_FETCH_CONCURRENCY
from secretflare.models.version import VersionDetails

__all__ = ["fetch_latest_deployment_versions", "fetch_versions"]

logger = logging.getLogger(__name__)


async def fetch_versions(
    reader: VersionReader,
    account_id: str,
    script_name: str,
    version_ids: list[str],
    cache: VersionCache,
) -> list[VersionDetails]:
    """
    Fetch version details through `cache`, a few requests at a time.

    Results come back in the order of `version_ids`.
    """
    sem = asyncio.Semaphore(DEFAULT_FETCH_CONCURRENCY)

    async def _fetch_one(version_id: str) -> VersionDetails:
        cached = cache.get(version_id)
        if cached is not None:
            return cached
        async with sem:
            details = await reader.get_version(account_id, script_name, version_id)
        return cache.insert_if_absent(details)

    return list(await asyncio.gather(*(_fetch_one(v) for v in version_ids)))


async def fetch_latest_deployment_versions(
    reader: VersionReader,
    account_id: str,
    script_name: str,
    cache: VersionCache,
) -> tuple[list[VersionDetails], dict[str, float]]:
    """
    Fetch the versions of the most recent deployment.

    Returns:
        The deployed versions and a map of version id to traffic percentage.
        Both are empty when the script has never been deployed.
    """
    deployments = await reader.list_deployments(account_id, script_name)
    if not deployments:
        logger.debug("No deployments for %s", script_name)
        return [], {}

    latest = deployments[0]
    rollout = {version.version_id: version.percentage for version in latest.versions}
    versions = await fetch_versions(reader, account_id, script_name, list(rollout), cache)
    return versions, rollout
