"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.store import RecordStore
from services.auth import Authenticator
from services.documents import DocumentService
from services.identifiers import IdentifierGenerator


def _accepted_keys(settings: Settings):
    return settings.accepted_api_keys


def _id_length(settings: Settings) -> int:
    return settings.id_length


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Shared store client, created once per process
    store = providers.Singleton(
        RecordStore,
        settings=settings
    )

    # Key set parsed once at startup
    authenticator = providers.Singleton(
        Authenticator,
        accepted_keys=providers.Callable(_accepted_keys, settings)
    )

    id_generator = providers.Singleton(
        IdentifierGenerator,
        length=providers.Callable(_id_length, settings)
    )

    document_service = providers.Singleton(
        DocumentService,
        store=store,
        id_generator=id_generator,
        settings=settings
    )


# Global container instance
container = Container()
