"""Service identifiers and image references."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, computed_field

from tag_propagator.client.errors import ValidationError


def short_name(identifier: str) -> str:
    """Return the final path segment of a service identifier.

    ``services/auth-service`` -> ``auth-service``; ``api-gateway`` is its own
    short name.
    """
    name = identifier.strip().rstrip("/").rsplit("/", 1)[-1]
    if not name:
        raise ValidationError(f"Invalid service identifier: {identifier!r}")
    return name


def image_repository(registry: str, service: str) -> str:
    """Image name without tag, e.g. ``docker.io/acme/auth-service``."""
    return f"{registry.rstrip('/')}/{short_name(service)}"


def compose_image_ref(registry: str, service: str, tag: str) -> str:
    """Compose ``registry/short-name:tag``."""
    if not tag:
        raise ValidationError("Image tag must not be empty")
    return f"{image_repository(registry, service)}:{tag}"


def check_unique_services(identifiers: Iterable[str]) -> list[str]:
    """Validate a service list: non-empty, unique by short name, order kept."""
    services = [s.strip() for s in identifiers if s.strip()]
    if not services:
        raise ValidationError("At least one service is required")
    seen: dict[str, str] = {}
    for service in services:
        name = short_name(service)
        if name in seen:
            raise ValidationError(
                f"Services '{seen[name]}' and '{service}' share the short name '{name}'"
            )
        seen[name] = service
    return services


class ServiceRef(BaseModel):
    """A deployable unit named by a path-like identifier."""

    identifier: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def short_name(self) -> str:
        return short_name(self.identifier)

    def image_ref(self, registry: str, tag: str) -> str:
        return compose_image_ref(registry, self.identifier, tag)


def parse_services(identifiers: Iterable[str]) -> list[ServiceRef]:
    """Build ServiceRefs from identifiers, rejecting empty or ambiguous lists."""
    return [ServiceRef(identifier=s) for s in check_unique_services(identifiers)]
