"""CLI for the real-estate compatibility matching engine."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
import yaml
from rich.console import Console
from rich.table import Table

from .access import MatchView
from .config import load_config
from .errors import ValidationError
from .filters import MatchFilters, SortBy, area_counts, filter_matches, unique_zip_count
from .logging_config import setup_logging
from .models import (
    AlertSeverity,
    BuyerProfile,
    ListingStatus,
    OffPlatformSeller,
    PropertyType,
    SellerProfile,
    User,
    utcnow,
)
from .service import MatchmakingService
from .sources import HttpFeedSource, JsonFileSource, OffPlatformSource
from .storage import Storage, export_csv, export_json

app = typer.Typer(
    name="real-match",
    help="Match sellers with buyers and investors, rank by compatibility, track marketplace health",
)
console = Console()


def _get_output_dir() -> Path:
    """Default output directory for exports and the database."""
    return Path("output")


def _get_storage() -> Storage:
    """Storage at REAL_MATCH_DB, or output/real_match.duckdb."""
    db = os.environ.get("REAL_MATCH_DB")
    return Storage(db or _get_output_dir() / "real_match.duckdb")


def _get_service(storage: Storage, config_path: Optional[Path]) -> MatchmakingService:
    cfg = load_config(config_path)
    return MatchmakingService(storage, storage, storage, config=cfg)


def _read_records(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain an object with users/buyers/sellers/off_platform")
    return data


def _parse_all(items: list[dict], parse, label: str) -> list:
    parsed = []
    for i, item in enumerate(items or []):
        try:
            parsed.append(parse(item))
        except ValidationError as e:
            console.print(f"[yellow]Skipping {label} {i}: {e}[/yellow]")
    return parsed


def _display_matches(views: list[MatchView], title: str, limit: int) -> None:
    if not views:
        console.print("[yellow]No matches to display.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Rank", style="dim")
    table.add_column("Counterparty", style="cyan")
    table.add_column("Location", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Overall", justify="right")
    table.add_column("Fin", justify="right")
    table.add_column("Urg", justify="right")
    table.add_column("Mot", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Why", style="green")

    for v in views[:limit]:
        m = v.match
        who = "[dim]🔒 locked[/dim]" if v.locked else (v.counterparty_name or m.counterparty_id)
        where = ", ".join(p for p in (v.city, v.state) if p)
        price = f"${v.asking_price:,.0f}" if v.asking_price else ""
        table.add_row(
            str(v.rank),
            who,
            where,
            price,
            str(m.overall_score),
            str(m.financial_score),
            str(m.urgency_score),
            str(m.motivation_score),
            str(m.closing_probability_score),
            "; ".join(m.key_alignment_factors[:2]),
        )
    console.print(table)


@app.callback()
def main(
    log_level: str = typer.Option(
        os.environ.get("REAL_MATCH_LOG_LEVEL", "INFO"), "--log-level", "-l", help="Logging level"
    ),
) -> None:
    setup_logging(log_level, console=Console(stderr=True))


@app.command()
def load(
    file: Path = typer.Argument(..., exists=True, readable=True, help="JSON or YAML with users/buyers/sellers/off_platform"),
) -> None:
    """Load users, profiles and the off-platform catalog into the database."""
    data = _read_records(file)
    users = _parse_all(data.get("users", []), User.from_dict, "user")
    buyers = _parse_all(data.get("buyers", data.get("buyer_profiles", [])), BuyerProfile.from_dict, "buyer")
    sellers = _parse_all(data.get("sellers", data.get("seller_profiles", [])), SellerProfile.from_dict, "seller")
    off_platform = _parse_all(data.get("off_platform", []), OffPlatformSeller.from_dict, "off-platform listing")

    storage = _get_storage()
    try:
        for u in users:
            storage.save_user(u)
        for b in buyers:
            storage.save_buyer_profile(b)
        for s in sellers:
            storage.save_seller_profile(s)
        if "off_platform" in data:
            storage.save_off_platform_sellers(off_platform)
    finally:
        storage.close()

    console.print(
        f"[green]Loaded {len(users)} users, {len(buyers)} buyer profiles, "
        f"{len(sellers)} seller profiles, {len(off_platform)} off-platform listings[/green]"
    )


@app.command("import-feed")
def import_feed(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read a JSON export instead of the HTTP feed"),
    url: Optional[str] = typer.Option(None, "--url", help="Feed URL (default: REAL_MATCH_FEED_URL)"),
) -> None:
    """Replace the off-platform catalog from a feed."""
    source: OffPlatformSource = JsonFileSource(file) if file else HttpFeedSource(url=url)
    console.print(f"[bold]Fetching off-platform listings from {source.source_name}...[/bold]")
    result = source.fetch()

    for e in result.errors:
        console.print(f"[yellow]Warning: {e}[/yellow]")

    if not result.sellers:
        console.print("[yellow]No listings to save. Catalog left unchanged.[/yellow]")
        raise typer.Exit(1)

    storage = _get_storage()
    try:
        storage.save_off_platform_sellers(result.sellers)
    finally:
        storage.close()
    console.print(f"[green]Imported {len(result.sellers)} off-platform listings[/green]")


@app.command()
def recompute(
    user_id: Optional[str] = typer.Argument(None, help="User to recompute"),
    all_users: bool = typer.Option(False, "--all", help="Recompute every user with a profile"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Recompute and store ranked matches."""
    if not user_id and not all_users:
        console.print("[red]Pass a USER_ID or --all.[/red]")
        raise typer.Exit(2)

    storage = _get_storage()
    try:
        service = _get_service(storage, config_path)
        if all_users:
            counts = service.compute_all()
            table = Table(title="Recompute")
            table.add_column("User", style="cyan")
            table.add_column("Matches", justify="right")
            for uid, n in counts.items():
                table.add_row(uid, str(n))
            console.print(table)
            return
        result = service.compute_matches_with_stats(user_id)
        alerts = service.get_unread_alerts(user_id)
    finally:
        storage.close()

    console.print(
        f"[green]{user_id}: {len(result.matches)} matches from {result.candidates} candidates[/green]"
    )
    if result.skipped_invalid:
        console.print(f"[yellow]Skipped {result.skipped_invalid} incomplete profile(s)[/yellow]")
    if alerts:
        console.print(f"[bold]{len(alerts)} unread alert(s)[/bold]")


@app.command()
def matches(
    user_id: str = typer.Argument(..., help="Viewer"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max matches to show"),
    min_price: Optional[float] = typer.Option(None, "--min-price", help="Minimum asking price"),
    max_price: Optional[float] = typer.Option(None, "--max-price", help="Maximum asking price"),
    min_beds: Optional[int] = typer.Option(None, "--min-beds", help="Minimum bedrooms"),
    property_type: Optional[PropertyType] = typer.Option(None, "--type", help="Property type"),
    status: Optional[ListingStatus] = typer.Option(None, "--status", help="Listing status"),
    sort_by: SortBy = typer.Option(SortBy.SCORE, "--sort", help="Sort order"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Show a user's ranked matches as their plan allows."""
    filters = MatchFilters(
        min_price=min_price,
        max_price=max_price,
        min_beds=min_beds,
        property_type=property_type,
        listing_status=status,
        sort_by=sort_by,
    )
    storage = _get_storage()
    try:
        service = _get_service(storage, config_path)
        result = service.get_visible_matches(user_id)
        expired = service.is_trial_expired(user_id)
        days_left = service.trial_days_left(user_id)
        alerts = service.get_unread_alerts(user_id)
        buyer = storage.get_buyer_profile(user_id)
    finally:
        storage.close()

    views = filter_matches(result.views, filters)
    title = f"Matches for {user_id}"
    if filters.active_count:
        title += f" ({len(views)} of {len(result.views)}, {filters.active_count} filter(s))"
    _display_matches(views, title, limit)
    if buyer is not None and result.views:
        areas = ", ".join(f"{label}: {n}" for label, n in area_counts(buyer, result.views))
        console.print(f"[dim]By area: {areas}. {unique_zip_count(result.views)} zip code(s).[/dim]")
    if result.locked_count:
        console.print(f"[dim]{result.locked_count} more match(es) locked. Upgrade to unlock.[/dim]")
    if expired:
        console.print("[red]Trial expired.[/red]")
    elif days_left:
        console.print(f"[cyan]Trial: {days_left} day(s) left.[/cyan]")
    for a in alerts:
        console.print(f"[bold green]●[/bold green] {a.message} [dim]({a.id})[/dim]")


@app.command()
def owner(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Show marketplace-health metrics and imbalance alerts."""
    storage = _get_storage()
    try:
        metrics = _get_service(storage, config_path).get_owner_dashboard_metrics()
    finally:
        storage.close()

    table = Table(title="Marketplace Health")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Active sellers", str(metrics.active_sellers))
    table.add_row("Active pro buyers", str(metrics.active_professional_buyers))
    table.add_row("Seller:buyer ratio", f"{metrics.seller_buyer_ratio_display}:1")
    table.add_row("Inquiry rate", f"{metrics.inquiry_rate}%")
    table.add_row("Offer rate", f"{metrics.offer_rate}%")
    table.add_row("Close rate", f"{metrics.close_rate}%")
    table.add_row("Avg offers / pro", f"{metrics.avg_offers_per_pro:.2f}")
    table.add_row("Liquidity score", f"{metrics.liquidity_score:.2f} (target {metrics.liquidity_threshold:g})")
    table.add_row("Profile completion", f"{metrics.profile_completion_rate}%")
    table.add_row("Drop-off", f"{metrics.drop_off_rate}%")
    console.print(table)
    console.print(f"Recommendation: [bold]{metrics.liquidity_recommendation}[/bold]")

    for a in metrics.alerts:
        style = "red" if a.severity is AlertSeverity.CRITICAL else "yellow"
        console.print(f"[{style}]{a.severity.value.upper()}: {a.message}[/{style}]")


@app.command()
def export(
    user_id: str = typer.Argument(..., help="Viewer"),
    out_dir: Optional[Path] = typer.Option(None, "--out", "-o", help="Output directory"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Export a user's visible matches to CSV and JSON."""
    storage = _get_storage()
    try:
        result = _get_service(storage, config_path).get_visible_matches(user_id)
    finally:
        storage.close()

    out = out_dir or _get_output_dir()
    stamp = utcnow().strftime("%Y%m%d_%H%M%S")
    csv_path = out / f"matches_{user_id}_{stamp}.csv"
    json_path = out / f"matches_{user_id}_{stamp}.json"
    export_csv(result.views, csv_path)
    export_json(result.views, json_path, user_id=user_id)

    console.print(f"[green]Exported {len(result.views)} matches for {user_id}[/green]")
    console.print(f"  CSV:  {csv_path}")
    console.print(f"  JSON: {json_path}")


if __name__ == "__main__":
    app()
