from functools import lru_cache

from azione.config import get_settings
from azione.services.analyses import AnalysisService
from azione.storage import AnalysisStore, PreferencesStore


@lru_cache
def get_analysis_store() -> AnalysisStore:
    return AnalysisStore(get_settings().analyses_path)


@lru_cache
def get_preferences_store() -> PreferencesStore:
    return PreferencesStore(get_settings().preferences_path)


def get_analysis_service() -> AnalysisService:
    return AnalysisService(get_analysis_store(), get_preferences_store())


def clear_caches() -> None:
    """Forget cached settings and stores (tests point them at a temp dir)."""
    get_settings.cache_clear()
    get_analysis_store.cache_clear()
    get_preferences_store.cache_clear()
