import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from coursecore.context import ServiceContext
from coursecore.domain.entities import Principal
from coursecore.rules.loader import load_rules, resolve_rules_path
from coursecore.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("COURSECORE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "coursecore.db")
        self.rules_path = resolve_rules_path()


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Services ---
_context_instance: ServiceContext | None = None


def get_context(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> ServiceContext:
    """Get the service context singleton (migrates the database on first use)."""
    global _context_instance
    if _context_instance is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        _context_instance = ServiceContext.create(settings.db_path, rules)
    return _context_instance


# --- Identity ---
async def get_principal(
    x_principal_id: Annotated[str | None, Header()] = None,
    x_principal_role: Annotated[str | None, Header()] = None,
) -> Principal:
    """
    Principal asserted by the gateway. Identity is verified upstream and
    trusted as-is here; only the shape is checked.
    """
    if not x_principal_id or not x_principal_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return Principal(id=UUID(x_principal_id), role=x_principal_role)  # type: ignore[arg-type]
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid principal",
        ) from e


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
Context = Annotated[ServiceContext, Depends(get_context)]
