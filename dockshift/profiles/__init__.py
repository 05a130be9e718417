from .manager import DEFAULT_PROFILE_NAME, ProfileManager, make_entry
from .models import Profile
from .store import ProfileStore, profile_slug

__all__ = ["DEFAULT_PROFILE_NAME", "Profile", "ProfileManager", "ProfileStore", "make_entry", "profile_slug"]
