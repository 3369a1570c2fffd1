"""Console reporter using Rich library for formatted CLI output.

Renders provider tables, listings and CORS analysis as ASCII tables so
output stays readable on any terminal.
"""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box
from rich.rule import Rule

from s3compat.errors import RemoteError, S3CompatError
from s3compat.models import (
    BucketListing,
    CorsConfiguration,
    ObjectListing,
    ObjectLocation,
    PresignedUrl,
    UploadCheck,
)
from s3compat.providers import Provider, ProviderProfile
from s3compat.reporters.base import Reporter


def _table(*columns: str) -> Table:
    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
        box=box.ASCII,
    )
    for column in columns:
        table.add_column(column, no_wrap=True)
    return table


def format_size(size: int) -> str:
    """Human readable byte count, e.g. 1.5 MB."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        console: Console to print to (mainly for tests)
    """

    def __init__(self, console: Optional[Console] = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)

    def _title(self, text: str) -> None:
        self.console.print()
        self.console.print(Rule(f"[bold cyan]{text}[/bold cyan]", style="cyan", characters="-"))

    def on_providers(self, profiles: list[ProviderProfile]) -> None:
        self._title("Providers")
        table = _table("Id", "Name", "Regions", "Default", "Region policy", "Requires")
        for profile in profiles:
            table.add_row(
                profile.id,
                profile.label,
                str(len(profile.regions)),
                profile.default_region or "-",
                profile.region_policy.value,
                ", ".join(profile.required_params) or "-",
            )
        self.console.print(table)

    def on_regions(self, profile: ProviderProfile) -> None:
        self._title(f"Regions: {profile.label}")
        table = _table("Region", "Name", "Signing code")
        for region_id, info in profile.regions.items():
            marker = " *" if region_id == profile.default_region else ""
            table.add_row(region_id + marker, info.label, info.code)
        self.console.print(table)
        if profile.help_url:
            self.console.print(f"[dim]{profile.help_url}[/dim]")

    def on_endpoint(self, provider: Provider) -> None:
        self._title(f"Endpoint: {provider.label}")
        table = _table("Setting", "Value")
        table.add_row("Region", provider.region)
        table.add_row("Host", provider.endpoint.host)
        table.add_row("Base URL", provider.endpoint.base_url)
        table.add_row("Addressing", "path" if provider.path_style else "virtual")
        table.add_row("Signing region", provider.signing_region)
        self.console.print(table)

        alternates = provider.alternate_hosts()
        if alternates:
            self.console.print("[dim]Also recognised:[/dim]")
            for alternate in alternates:
                self.console.print(f"  [dim]{alternate.pattern} ({alternate.kind.value})[/dim]")

    def on_presigned(self, bucket: str, key: str, presigned: PresignedUrl) -> None:
        self._title(f"Presigned URL: {bucket}/{key}")
        self.console.print(presigned.url, soft_wrap=True)
        self.console.print(
            f"[dim]Expires {presigned.expires_at.isoformat()} "
            f"({presigned.expires_seconds}s)[/dim]"
        )

    def on_location(self, url: str, location: Optional[ObjectLocation]) -> None:
        if location is None:
            self.console.print(f"[yellow]Not a URL of this provider:[/yellow] {url}")
            return
        table = _table("Bucket", "Key")
        table.add_row(location.bucket, location.key or "-")
        self.console.print(table)

    def on_buckets(self, listing: BucketListing) -> None:
        self._title("Buckets")
        if not listing.buckets:
            self.console.print("[yellow]No buckets found.[/yellow]")
            return
        table = _table("Name", "Created")
        for bucket in listing.buckets:
            table.add_row(bucket.name, bucket.creation_date or "-")
        self.console.print(table)
        if listing.owner is not None and listing.owner.display_name:
            self.console.print(f"[dim]Owner: {listing.owner.display_name}[/dim]")

    def on_objects(self, listing: ObjectListing) -> None:
        self._title(f"{listing.bucket}/{listing.prefix}")
        if not listing.objects and not listing.prefixes:
            self.console.print("[yellow]No objects found.[/yellow]")
            return

        table = _table("Key", "Size", "Modified", "Type")
        for prefix in listing.prefixes:
            table.add_row(f"[cyan]{prefix}[/cyan]", "-", "-", "folder")
        for obj in listing.objects:
            table.add_row(
                obj.key,
                format_size(obj.size),
                obj.last_modified or "-",
                obj.mime_type or obj.category,
            )
        self.console.print(table)

        if listing.is_truncated:
            self.console.print(
                f"[dim]More results available; continue with token "
                f"{listing.continuation_token or '(none)'}[/dim]"
            )

    def on_cors(self, bucket: str, config: CorsConfiguration, check: UploadCheck) -> None:
        self._title(f"CORS: {bucket}")
        if not config.has_cors:
            self.console.print("[yellow]No CORS configuration.[/yellow]")
        else:
            table = _table("Id", "Origins", "Methods", "Headers", "Max age")
            for rule in config.rules:
                table.add_row(
                    rule.id or "-",
                    ", ".join(rule.allowed_origins),
                    ", ".join(rule.allowed_methods),
                    ", ".join(rule.allowed_headers) or "-",
                    "-" if rule.max_age_seconds is None else str(rule.max_age_seconds),
                )
            self.console.print(table)

        if check.allows_upload:
            methods = ", ".join(check.allowed_methods)
            self.console.print(f"[green]Browser uploads allowed from {check.origin} ({methods})[/green]")
        else:
            self.console.print(f"[red]Browser uploads not allowed from {check.origin}[/red]")

    def on_error(self, error: S3CompatError) -> None:
        if isinstance(error, RemoteError):
            self.console.print(f"[bold red]{error.code}[/bold red] (HTTP {error.status}): {error.message}")
            if error.request_id:
                self.console.print(f"   [dim]Request id: {error.request_id}[/dim]")
        else:
            self.console.print(f"[bold red]Error:[/bold red] {error.message}")
