"""UserProfile singleton: one document per user in the ``profiles`` collection."""
from __future__ import annotations

import logging
from typing import Optional

from courtbell.db.schemas import UserProfile
from courtbell.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

PROFILES = "profiles"


class ProfileStore:

    def __init__(self, store: DocumentStore, user_id: str, email: Optional[str] = None, display_name: Optional[str] = None) -> None:
        self.store = store
        self.user_id = user_id
        self.email = email
        self.display_name = display_name

    def default(self) -> UserProfile:
        return UserProfile(name=self.display_name or "", email=self.email or "")

    def get(self) -> UserProfile:
        data = self.store.get(PROFILES, self.user_id, self.user_id)
        if data is None:
            return self.default()
        data.pop("id", None)
        return UserProfile.model_validate(data)

    def save(self, profile: UserProfile) -> UserProfile:
        """Merge the fields set on ``profile`` into the stored document."""
        changes = profile.model_dump(by_alias=True, mode="json", exclude_unset=True)
        if self.store.get(PROFILES, self.user_id, self.user_id) is None:
            # First save starts from the account defaults
            changes = {**self.default().model_dump(by_alias=True, mode="json", exclude_none=True), **changes}
        data = self.store.set(PROFILES, self.user_id, self.user_id, changes, merge=True)
        data.pop("id", None)
        logger.info("Profile saved for user %s (fields=%s)", self.user_id, sorted(changes))
        return UserProfile.model_validate(data)
