"""
User profiles

One row per authenticated user, keyed by the user id. The row is created on the
first visit from the name carried in the access token.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Any
import logging

from .backend import BackendClient, Query
from .cache import QueryCache
from .logging_config import log_action

logger = logging.getLogger("bank_portal.profiles")


@dataclass
class Profile:
    id: str
    full_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Profile':
        return cls(id=row["id"], full_name=row.get("full_name"))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "full_name": self.full_name}


class ProfileManager:

    def __init__(self, backend: BackendClient, cache: QueryCache):
        self.backend = backend
        self.cache = cache
        self.table_name = "profiles"

    def get(self, user_id: str) -> Optional[Profile]:
        rows = self.cache.get_or_fetch(
            (self.table_name, user_id),
            lambda: self.backend.select(Query(self.table_name).eq("id", user_id).limit(1))
        )
        return Profile.from_row(rows[0]) if rows else None

    def ensure(self, user_id: str, full_name: Optional[str] = None) -> Profile:
        """Return the user's profile, creating it if this is the first visit"""
        profile = self.get(user_id)
        if profile is not None:
            return profile

        created = self.backend.insert(self.table_name, {"id": user_id, "full_name": full_name})
        self.cache.invalidate(self.table_name, user_id)
        log_action(
            logger, "info", "Profile created",
            user_id=user_id, action="create_profile", resource=self.table_name
        )
        return Profile.from_row(created[0])
