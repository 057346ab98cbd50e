"""Click CLI for imgvariants — build and inspect cached image variants."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgvariants.codec.pillow import SUPPORTED_EXTENSIONS
from imgvariants.config.hierarchy import load_config_hierarchy
from imgvariants.config.loader import load_policy_yaml, load_yaml
from imgvariants.config.schema import VariantsConfig
from imgvariants.errors.exceptions import ImgVariantsError
from imgvariants.types import BuildResult, VariantFamily

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _resolve_config(
    config_file: str | None,
    policy_file: str | None = None,
    thumb: bool = False,
    **overrides: Any,
) -> VariantsConfig:
    """Merge hierarchy, an explicit config file, a policy file and CLI flags."""
    merged = load_config_hierarchy()
    if config_file:
        raw = load_yaml(config_file)
        nested = raw.get("variants")
        merged.update(nested if isinstance(nested, dict) else raw)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    config = VariantsConfig.from_mapping(merged)
    if policy_file:
        policy = load_policy_yaml(policy_file)
        field = "thumb_resolutions" if thumb else "image_resolutions"
        config = config.model_copy(update={field: policy})
    return config


def _common_options(fn: Any) -> Any:
    options = [
        click.option(
            "--config", "config_file", type=click.Path(exists=True), help="Config YAML file."
        ),
        click.option(
            "--policy", "policy_file", type=click.Path(exists=True),
            help="Resolution policy YAML for the selected family.",
        ),
        click.option("--cache-dir", type=click.Path(), default=None, help="Variant cache root."),
        click.option(
            "--project-root", type=click.Path(exists=True), default=None,
            help="Root that source paths are mirrored relative to.",
        ),
        click.option("--thumb", is_flag=True, default=False, help="Use the thumbnail family."),
        click.option(
            "--webp/--no-webp", "supports_webp", default=False,
            help="Whether WebP candidates may be produced.",
        ),
        click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)."),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


@click.group()
@click.version_option(package_name="imgvariants")
def cli() -> None:
    """imgvariants — responsive image variant generator."""


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@_common_options
def build(
    image_path: str,
    config_file: str | None,
    policy_file: str | None,
    cache_dir: str | None,
    project_root: str | None,
    thumb: bool,
    supports_webp: bool,
    verbose: int,
) -> None:
    """Generate (or reuse) the variants of one image."""
    from imgvariants.core import ImageVariants

    _setup_logging(verbose)
    family = VariantFamily.THUMB if thumb else VariantFamily.IMAGE

    try:
        config = _resolve_config(
            config_file, policy_file, thumb, cache_dir=cache_dir, project_root=project_root
        )
        variants = ImageVariants(config)
    except (ImgVariantsError, ValueError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    try:
        result = asyncio.run(variants.build(image_path, family=family, supports_webp=supports_webp))
    except ImgVariantsError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        variants.close()

    _print_result(Path(image_path).name, result)


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--workers", type=int, default=None, help="Concurrent images.")
@_common_options
def warm(
    input_dir: str,
    workers: int | None,
    config_file: str | None,
    policy_file: str | None,
    cache_dir: str | None,
    project_root: str | None,
    thumb: bool,
    supports_webp: bool,
    verbose: int,
) -> None:
    """Generate variants for every supported image in a directory."""
    from imgvariants.core import ImageVariants

    _setup_logging(verbose)
    family = VariantFamily.THUMB if thumb else VariantFamily.IMAGE

    files = [
        f for f in sorted(Path(input_dir).iterdir())
        if f.is_file() and f.suffix.lower().lstrip(".") in SUPPORTED_EXTENSIONS
    ]
    if not files:
        error_console.print("[yellow]No supported images found in directory.[/yellow]")
        return

    try:
        config = _resolve_config(
            config_file, policy_file, thumb,
            cache_dir=cache_dir, project_root=project_root, max_workers=workers,
        )
        variants = ImageVariants(config)
    except (ImgVariantsError, ValueError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    try:
        results = asyncio.run(
            variants.warm([str(f) for f in files], family=family, supports_webp=supports_webp)
        )
    finally:
        variants.close()

    table = Table(title="Warmed Images", show_header=True)
    table.add_column("Image", style="cyan")
    table.add_column("Variants")
    table.add_column("Failures")
    table.add_column("Fallback")
    failed = 0
    for file, result in zip(files, results, strict=True):
        if result is None:
            failed += 1
            table.add_row(file.name, "-", "[red]error[/red]", "-")
            continue
        table.add_row(
            file.name,
            str(len(result.descriptors)),
            str(len(result.failures)),
            "yes" if result.fallback_used else "no",
        )
    console.print(table)
    console.print(f"[green]Processed {len(files) - failed} of {len(files)} images[/green]")


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--url-prefix", type=str, default=None, help="Prefix for variant URLs.")
@_common_options
def srcset(
    image_path: str,
    url_prefix: str | None,
    config_file: str | None,
    policy_file: str | None,
    cache_dir: str | None,
    project_root: str | None,
    thumb: bool,
    supports_webp: bool,
    verbose: int,
) -> None:
    """Print the srcset for one image (cached)."""
    from imgvariants.core import ImageVariants

    _setup_logging(verbose)
    family = VariantFamily.THUMB if thumb else VariantFamily.IMAGE

    try:
        config = _resolve_config(
            config_file, policy_file, thumb,
            cache_dir=cache_dir, project_root=project_root, url_prefix=url_prefix,
        )
        variants = ImageVariants(config)
    except (ImgVariantsError, ValueError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    try:
        value = asyncio.run(variants.srcset(image_path, family=family, supports_webp=supports_webp))
    except ImgVariantsError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        variants.close()

    console.print(value, soft_wrap=True)


def _print_result(name: str, result: BuildResult) -> None:
    table = Table(title=f"Variants of {name}", show_header=True)
    table.add_column("Path", style="cyan")
    table.add_column("Width")
    table.add_column("Height")
    table.add_column("Extension")
    for d in result.descriptors:
        table.add_row(d.relative_path, str(d.width), str(d.height), d.extension)
    console.print(table)

    if result.fallback_used:
        console.print("[yellow]No resolution qualified; original copied as-is.[/yellow]")

    for failure in result.failures:
        error_console.print(
            f"[red]Failed[/red] {failure.resolution.width}x{failure.resolution.height}"
            f" {failure.extension}: {failure.error_type} {failure.message}"
        )


@cli.group()
def cache() -> None:
    """Cache management commands."""


def _cache_manager() -> Any:
    from imgvariants.cache.manager import CacheManager

    config = VariantsConfig.from_mapping(load_config_hierarchy())
    return CacheManager(
        memory_max_mb=config.cache_memory_mb,
        disk_max_mb=config.cache_disk_mb,
        disk_path=config.cache_db_path,
    )


@cache.command("stats")
def cache_stats() -> None:
    """Show cache statistics."""
    mgr = _cache_manager()

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = mgr.stats()
    table.add_row("Entries", str(stats.entries))
    table.add_row("Size (MB)", f"{stats.size_mb:.2f}")

    console.print(table)
    mgr.close()


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear() -> None:
    """Clear all cached artifacts (variant files are kept)."""
    mgr = _cache_manager()
    mgr.clear()
    mgr.close()
    console.print("[green]Cache cleared.[/green]")


@cache.command("invalidate")
@click.argument("image_path", type=click.Path())
def cache_invalidate(image_path: str) -> None:
    """Drop cached artifacts derived from one source image."""
    mgr = _cache_manager()
    removed = mgr.invalidate(str(Path(image_path).absolute()))
    mgr.close()
    console.print(f"[green]Removed {removed} cached entries.[/green]")


@cli.command("validate-policy")
@click.argument("policy_yaml", type=click.Path(exists=True))
def validate_policy(policy_yaml: str) -> None:
    """Validate a resolution policy YAML file."""
    try:
        policy = load_policy_yaml(policy_yaml)
    except Exception as e:
        error_console.print(f"[red]Invalid policy:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Valid policy:[/green] {len(policy)} resolutions")
    for spec in policy.resolutions:
        console.print(
            f"  - w={spec.width or '-'} h={spec.height or '-'} "
            f"extensions={', '.join(spec.extensions)}"
        )


def main() -> None:
    """Entry point for the CLI."""
    cli()
