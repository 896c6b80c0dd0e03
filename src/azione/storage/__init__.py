"""Local file persistence for analyses and preferences."""

from azione.storage.analyses import AnalysisStore
from azione.storage.preferences import Preferences, PreferencesStore

__all__ = ["AnalysisStore", "Preferences", "PreferencesStore"]
