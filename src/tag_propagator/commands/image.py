"""Image commands — show the image reference of each service."""

from __future__ import annotations

import typer

from tag_propagator.client.errors import error_handler
from tag_propagator.commands._common import (
    FormatOpt,
    ProfileOpt,
    RegistryOpt,
    ServicesOpt,
    TagOpt,
    make_settings,
)
from tag_propagator.models.service import parse_services
from tag_propagator.output.formatter import output

app = typer.Typer(name="image", help="Inspect service image references.")


@app.command("list")
@error_handler
def list_images(
    tag: TagOpt = None,
    services: ServicesOpt = None,
    profile: ProfileOpt = None,
    registry: RegistryOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """List the image reference each service is built and deployed as."""
    settings = make_settings(profile, registry=registry, services=services, tag=tag, require_repo=False)
    refs = parse_services(settings.services)
    items = [
        {
            "service": s.identifier,
            "short_name": s.short_name,
            "image": s.image_ref(settings.registry, settings.tag),
        }
        for s in refs
    ]
    columns = ["Service", "Short Name", "Image"]
    rows = [[i["service"], i["short_name"], i["image"]] for i in items]
    output(items, fmt, columns=columns, rows=rows, title="Images")
