"""Activity reader protocol: the backend's activity log as seen by the correlation worker."""

from typing import List, Mapping, Protocol

from matter_diff.domain.models.activity import ActivityEntry


class ActivityReader(Protocol):
    async def fetch_activity_list(
        self,
        practice_id: str,
        matter_id: str,
        headers: Mapping[str, str],
    ) -> List[ActivityEntry]:
        """Current activity entries for a matter. Raises UpstreamUnavailableError on transport failure."""
        ...
