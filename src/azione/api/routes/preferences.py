from fastapi import APIRouter, Depends

from azione.api.dependencies import get_preferences_store
from azione.storage import Preferences, PreferencesStore

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=Preferences)
def read_preferences(store: PreferencesStore = Depends(get_preferences_store)) -> Preferences:
    return store.load()


@router.put("", response_model=Preferences)
def update_preferences(
    payload: Preferences,
    store: PreferencesStore = Depends(get_preferences_store),
) -> Preferences:
    return store.save(payload)
