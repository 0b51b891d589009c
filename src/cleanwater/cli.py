import math
from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core import DEFAULT_GAIN, MAX_ALPHA, MAX_GAIN, MIN_GAIN
from .core.alpha_map import MaskSet, get_mask_set
from .core.errors import AssetError, ImageLoadError, ImageSaveError
from .core.params import Parameters, SizeMode, clamp_gain
from .core.position import Variant
from .log import configure_logging
from .processors.image import (
    SUPPORTED_IMAGE_FORMATS,
    ImageResult,
    is_supported_image,
    process_image,
    simulate_watermark,
)

app = typer.Typer(
    name="cleanwater",
    help="Remove the semi-transparent white watermark from images.",
    add_completion=True,
)
console = Console()

MASK_DIR_ENVVAR = "CLEANWATER_MASK_DIR"
ASSET_ERROR_EXIT_CODE = 2


def load_masks(mask_dir: Optional[Path]) -> MaskSet:
    """Load both masks or stop: no image is processed without them."""
    try:
        return get_mask_set(mask_dir)
    except AssetError as e:
        console.print(f"[red]Watermark assets are unavailable:[/red] {e}")
        console.print(
            f"Place {Variant.SMALL.asset_name} and {Variant.LARGE.asset_name} in a directory "
            f"and pass it with --mask-dir or {MASK_DIR_ENVVAR}."
        )
        raise typer.Exit(ASSET_ERROR_EXIT_CODE)


def build_parameters(size: SizeMode, gain: float) -> Parameters:
    if not math.isfinite(gain):
        raise typer.BadParameter(f"gain must be a finite number, got {gain}", param_hint="--gain")
    clamped = clamp_gain(gain)
    if clamped != gain:
        console.print(f"[yellow]Gain {gain} clamped to {clamped}[/yellow]")
    return Parameters(forced_variant=size.forced_variant, gain=clamped)


def check_input(path: Path) -> None:
    if not is_supported_image(path):
        console.print(f"[red]Unsupported file:[/red] {path}")
        console.print(f"Supported formats: {', '.join(sorted(SUPPORTED_IMAGE_FORMATS))}")
        raise typer.Exit(1)


def overwrite_prompt(overwrite: bool):
    """Prompt before replacing an existing output, unless --overwrite was given."""
    if overwrite:
        return None
    return lambda file_output: typer.confirm(f"Overwrite {file_output}?")


def report(result: ImageResult, saved_label: str) -> None:
    if result.declined:
        console.print(f"  [yellow]Kept existing file:[/yellow] {result.output_path}")
    elif result.skipped is not None:
        console.print(
            f"  [yellow]Left unchanged:[/yellow] {result.input_path.name} is too small "
            "to carry the watermark"
        )
    else:
        console.print(f"  [green]{saved_label}:[/green] {result.output_path}")


SizeOption = typer.Option(
    SizeMode.AUTO,
    "--size",
    case_sensitive=False,
    help="Watermark size. 'auto' picks large only when both sides exceed 1024px.",
)
GainOption = typer.Option(
    DEFAULT_GAIN,
    "--gain",
    "-g",
    help=f"Removal strength multiplier, clamped to [{MIN_GAIN:g}, {MAX_GAIN:g}].",
)
MaskDirOption = typer.Option(
    None,
    "--mask-dir",
    envvar=MASK_DIR_ENVVAR,
    file_okay=False,
    help="Directory holding the reference overlays. Defaults to the bundled assets.",
)
OverwriteOption = typer.Option(
    False,
    "--overwrite",
    "-y",
    help="Overwrite existing output files without prompting",
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug logging")


@app.command()
def process(
    path: Path = typer.Argument(
        ...,
        help="Path to the image file",
        exists=True,
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path. Defaults to input location with the suffix, as PNG.",
    ),
    size: SizeMode = SizeOption,
    gain: float = GainOption,
    suffix: str = typer.Option(
        "_cleaned",
        "--suffix",
        "-s",
        help="Suffix to add to the output filename",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        "-w",
        min=1,
        help="Threads used for the pixel transform",
    ),
    mask_dir: Optional[Path] = MaskDirOption,
    overwrite: bool = OverwriteOption,
    verbose: bool = VerboseOption,
):
    """
    Remove the watermark from an image.

    The result is always written as PNG. Images too small to carry the
    watermark are left untouched and nothing is written.

    Examples:
        cleanwater process image.png
        cleanwater process photo.jpg -o clean.png --gain 1.2
        cleanwater process image.png --size large
    """
    configure_logging(verbose, console)
    check_input(path)
    params = build_parameters(size, gain)
    masks = load_masks(mask_dir)

    console.print(
        Panel(
            f"Processing {path.name} (size: {size.value}, gain: {params.gain:.2f})",
            title="cleanwater",
            border_style="blue",
        )
    )

    try:
        result = process_image(
            path,
            output,
            suffix,
            params,
            masks,
            workers=workers,
            confirm_overwrite=overwrite_prompt(overwrite),
        )
    except (ImageLoadError, ImageSaveError) as e:
        console.print(f"  [red]Error processing {path}:[/red] {e}")
        raise typer.Exit(1)

    report(result, "Image saved")


@app.command()
def simulate(
    path: Path = typer.Argument(
        ...,
        help="Path to a clean image",
        exists=True,
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path. Defaults to input location with '_watermarked' suffix, as PNG.",
    ),
    size: SizeMode = SizeOption,
    gain: float = GainOption,
    mask_dir: Optional[Path] = MaskDirOption,
    overwrite: bool = OverwriteOption,
    verbose: bool = VerboseOption,
):
    """Blend the white watermark onto a clean image, for checking removal."""
    configure_logging(verbose, console)
    check_input(path)
    params = build_parameters(size, gain)
    masks = load_masks(mask_dir)

    try:
        result = simulate_watermark(
            path,
            output,
            params=params,
            masks=masks,
            confirm_overwrite=overwrite_prompt(overwrite),
        )
    except (ImageLoadError, ImageSaveError) as e:
        console.print(f"  [red]Error processing {path}:[/red] {e}")
        raise typer.Exit(1)

    report(result, "Watermarked image saved")


@app.command()
def masks(
    mask_dir: Optional[Path] = MaskDirOption,
    verbose: bool = VerboseOption,
):
    """Load the reference overlays and summarise their opacity masks."""
    configure_logging(verbose, console)
    mask_set = load_masks(mask_dir)

    table = Table(title="Opacity masks")
    table.add_column("Variant")
    table.add_column("Size", justify="right")
    table.add_column("Margin", justify="right")
    table.add_column("Mean opacity", justify="right")
    table.add_column("Max opacity", justify="right")

    for variant in Variant:
        mask = mask_set.for_variant(variant)
        table.add_row(
            variant.value,
            f"{mask.width}x{mask.height}",
            f"{variant.margin}px",
            f"{float(np.mean(mask.values)):.3f}",
            f"{float(np.max(mask.values)):.3f}",
        )

    console.print(table)


@app.command()
def info():
    """Display information about supported formats and algorithm."""
    console.print(
        Panel(
            "[bold]cleanwater[/bold]\n\n"
            "Removes a semi-transparent white logo blended into the bottom-right\n"
            "corner of an image, recovering the pixels underneath.\n\n"
            "[cyan]Watermark sizes:[/cyan]\n"
            f"  - small: {Variant.SMALL.size}x{Variant.SMALL.size}, {Variant.SMALL.margin}px from the corner\n"
            f"  - large: {Variant.LARGE.size}x{Variant.LARGE.size}, {Variant.LARGE.margin}px from the corner "
            "(both sides > 1024px)\n\n"
            f"[cyan]Supported Image Formats:[/cyan] {', '.join(sorted(SUPPORTED_IMAGE_FORMATS))}\n"
            "[cyan]Output:[/cyan] PNG (lossless)\n\n"
            "[dim]original = (watermarked - alpha * 255) / (1 - alpha)[/dim]\n"
            f"[dim]alpha = mask * gain, capped at {MAX_ALPHA}[/dim]",
            title="About",
            border_style="blue",
        )
    )


if __name__ == "__main__":
    app()
