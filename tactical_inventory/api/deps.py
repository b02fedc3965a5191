"""
API Dependencies
Common dependencies for API endpoints
"""

from typing import Callable, Optional, Type, TypeVar

from fastapi import Depends, Header, Request

from tactical_inventory.core.exceptions import DatabaseConnectionError, ValidationError
from tactical_inventory.schemas.common import Site
from tactical_inventory.services.db_adapters import DatabaseAdapter
from tactical_inventory.services.notifications import ChangeNotifier
from tactical_inventory.services.stock.base_service import DEFAULT_ACTOR, LedgerService

S = TypeVar("S", bound=LedgerService)


def get_adapter(request: Request) -> DatabaseAdapter:
    """
    Database adapter dependency - the one adapter built at startup.
    """
    adapter = getattr(request.app.state, "adapter", None)
    if adapter is None:
        raise DatabaseConnectionError("Database adapter is not initialised")
    return adapter


def get_notifier(request: Request) -> Optional[ChangeNotifier]:
    return getattr(request.app.state, "notifier", None)


def get_current_user(x_user_name: Optional[str] = Header(None)) -> str:
    """
    Acting user's name, as set by the upstream gateway.
    """
    return (x_user_name or "").strip() or DEFAULT_ACTOR


def parse_site(value: str) -> Site:
    try:
        return Site.parse(value)
    except ValueError:
        raise ValidationError(f"Unknown site: {value}")


def get_site(site: str) -> Site:
    """Site taken from the path"""
    return parse_site(site)


def get_optional_site(site: Optional[str] = None) -> Optional[Site]:
    """Site taken from the query string, if given"""
    return parse_site(site) if site else None


def service(service_class: Type[S]) -> Callable[..., S]:
    """Build a dependency that constructs ``service_class`` for the current request"""

    def dependency(
        adapter: DatabaseAdapter = Depends(get_adapter),
        notifier: Optional[ChangeNotifier] = Depends(get_notifier),
        current_user: str = Depends(get_current_user),
    ) -> S:
        return service_class(adapter, notifier, current_user)

    return dependency
