"""
Command-line interface for guided-cluster.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table

from .clustering import MAX_SEED
from .config import UI_CLUSTER_RANGE, UI_DIMENSION_RANGE, AnalysisConfig
from .errors import AnalysisError
from .export import export_csv, export_json
from .labeling import DEFAULT_SAMPLE_SIZE, load_labels, select_for_labeling
from .loader import load_embeddings
from .pipeline import analyze_embeddings
from .ranking import rank_dimensions

console = Console()


def _fail(error: Exception):
    console.print(f"[red]{error}[/red]")
    raise click.exceptions.Exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline progress")
def main(verbose: bool):
    """
    Cluster text embeddings guided by a few human labels.

    Ranks embedding dimensions by how well they separate labeled groups,
    clusters on the best ones and projects the result to 2D.

    Examples:

        guided-cluster info vectors.npz

        guided-cluster sample vectors.npz --labels labels.json -n 8

        guided-cluster rank vectors.npz --labels labels.json -d 20

        guided-cluster analyze vectors.npz --labels labels.json -d 50 -k 3
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info(file: str, as_json: bool):
    """
    Show information about an embedding file.
    """
    try:
        embeddings = load_embeddings(file)
    except (ValueError, AnalysisError) as e:
        _fail(e)

    if as_json:
        output = {
            "file": file,
            "format": embeddings.metadata.get("format", "unknown"),
            "n_vectors": embeddings.n_vectors,
            "dimensions": embeddings.dimensions,
            "has_ids": embeddings.ids is not None,
            "has_texts": embeddings.texts is not None,
        }
        console.print_json(json.dumps(output))
        return

    console.print()
    console.print(Panel(
        f"[bold]File:[/bold] {file}\n"
        f"[bold]Format:[/bold] {embeddings.metadata.get('format', 'unknown')}\n"
        f"[bold]Vectors:[/bold] {embeddings.n_vectors:,}\n"
        f"[bold]Dimensions:[/bold] {embeddings.dimensions}\n"
        f"[bold]Has IDs:[/bold] {'Yes' if embeddings.ids else 'No'}\n"
        f"[bold]Has Texts:[/bold] {'Yes' if embeddings.texts else 'No'}",
        title="Embedding Set Info",
        border_style="blue",
    ))


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--labels", "-l", "labels_file", type=click.Path(exists=True), help="Existing labels to skip")
@click.option("--n", "-n", default=DEFAULT_SAMPLE_SIZE, type=click.IntRange(min=1), help="Rows to show")
@click.option("--seed", type=click.IntRange(0, MAX_SEED), help="Random seed")
def sample(file: str, labels_file: Optional[str], n: int, seed: Optional[int]):
    """
    Show random unlabeled rows to label.
    """
    try:
        embeddings = load_embeddings(file)
        labels = load_labels(labels_file) if labels_file else {}
        indices = select_for_labeling(embeddings.identifiers, n=n, labels=labels, seed=seed)
    except (ValueError, AnalysisError) as e:
        _fail(e)

    console.print()
    if not indices:
        console.print("[green]Every row is already labeled[/green]")
        return

    console.print(f"[bold]{len(indices)} rows to label[/bold]")
    console.print()

    table = Table()
    table.add_column("Index", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Text", max_width=70)

    for idx in indices:
        text = embeddings.get_text(idx)
        text = text[:70] + "..." if text and len(text) > 70 else text or "-"
        table.add_row(str(idx), embeddings.get_id(idx), text)

    console.print(table)


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--labels", "-l", "labels_file", type=click.Path(exists=True), required=True, help="Labels file")
@click.option("--dimensions", "-d", default=20, type=click.IntRange(min=1), help="Dimensions to keep")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rank(file: str, labels_file: str, dimensions: int, as_json: bool):
    """
    Rank dimensions by how well they separate the labeled groups.
    """
    try:
        embeddings = load_embeddings(file)
        labels = load_labels(labels_file)
        with Progress(transient=True, console=console) as progress:
            progress.add_task("Ranking dimensions...", total=None)
            _, stats = rank_dimensions(embeddings.vectors, labels, embeddings.identifiers, dimensions)
    except (ValueError, AnalysisError) as e:
        _fail(e)

    if as_json:
        output = [
            {"dimension": s.dimension, "pValue": s.p_value, "statistic": s.statistic}
            for s in stats
        ]
        console.print_json(json.dumps(output))
        return

    console.print()
    table = Table(title="Discriminative Dimensions")
    table.add_column("Rank", style="dim", justify="right")
    table.add_column("Dimension", justify="right")
    table.add_column("p-value", justify="right")
    table.add_column("|t|", justify="right")

    for position, stat in enumerate(stats, 1):
        color = "green" if stat.significant else "white"
        table.add_row(
            str(position),
            str(stat.dimension),
            f"[{color}]{stat.p_value:.4g}[/{color}]",
            f"{stat.statistic:.3f}",
        )

    console.print(table)
    significant = sum(1 for s in stats if s.significant)
    console.print(f"[dim]{significant} of {len(stats)} dimensions significant at p < 0.05[/dim]")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--labels", "-l", "labels_file", type=click.Path(exists=True), required=True, help="Labels file")
@click.option(
    "--dimensions", "-d", type=click.IntRange(min=1),
    help="Dimensions to keep (typically %d-%d)" % UI_DIMENSION_RANGE,
)
@click.option(
    "--clusters", "-k", type=click.IntRange(min=1),
    help="Number of clusters (typically %d-%d)" % UI_CLUSTER_RANGE,
)
@click.option("--seed", type=click.IntRange(0, MAX_SEED), help="K-means seed")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.option("--output", "-o", type=click.Path(), help="Write the JSON export here")
@click.option("--csv", "csv_path", type=click.Path(), help="Write the CSV export here")
@click.option("--show-samples", "-s", default=3, help="Samples to show per cluster")
def analyze(
    file: str,
    labels_file: str,
    dimensions: Optional[int],
    clusters: Optional[int],
    seed: Optional[int],
    as_json: bool,
    output: Optional[str],
    csv_path: Optional[str],
    show_samples: int,
):
    """
    Cluster embeddings on the most discriminative dimensions.
    """
    try:
        config = AnalysisConfig.from_env(
            num_dimensions=dimensions, num_clusters=clusters, seed=seed,
        )
        embeddings = load_embeddings(file)
        labels = load_labels(labels_file)
        with Progress(transient=True, console=console) as progress:
            progress.add_task("Analyzing...", total=None)
            result = analyze_embeddings(embeddings, labels, config)
    except (ValueError, AnalysisError) as e:
        _fail(e)

    if output:
        Path(output).write_text(export_json(result))
    if csv_path:
        Path(csv_path).write_text(export_csv(result))

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    console.print()
    console.print(Panel(
        f"[bold]Samples:[/bold] {result.total_samples:,} ({result.labeled_samples} labeled)\n"
        f"[bold]Dimensions used:[/bold] {len(result.selected_dimensions)}\n"
        f"[bold]Clusters:[/bold] {result.num_clusters}\n"
        f"[bold]PC1 / PC2 variance:[/bold] "
        f"{result.explained_variance[0]:.1%} / {result.explained_variance[1]:.1%}\n"
        f"[bold]Seed:[/bold] {result.seed}",
        title="Analysis Results",
        border_style="blue",
    ))

    console.print()
    table = Table()
    table.add_column("Cluster", style="cyan", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Labels", max_width=30)
    table.add_column("Sample Texts", max_width=60)

    index_of = {identifier: i for i, identifier in enumerate(embeddings.identifiers)}
    for group in result.clusters:
        pct = (group.size / result.total_samples) * 100
        counts: dict[str, int] = {}
        for item in group.items:
            if item.label:
                counts[item.label] = counts.get(item.label, 0) + 1
        label_text = ", ".join(f"{label}: {count}" for label, count in counts.items()) or "-"

        samples = []
        for item in group.items[:show_samples]:
            text = embeddings.get_text(index_of[item.identifier])
            if text:
                samples.append(text[:30] + "..." if len(text) > 30 else text)
        sample_text = " | ".join(samples) if samples else "[dim]no texts[/dim]"

        table.add_row(str(group.id + 1), f"{group.size:,}", f"{pct:.1f}%", label_text, sample_text)

    console.print(table)

    if output:
        console.print(f"Saved JSON export to {output}")
    if csv_path:
        console.print(f"Saved CSV export to {csv_path}")


if __name__ == "__main__":
    main()
