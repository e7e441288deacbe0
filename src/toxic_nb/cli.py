"""Command-line interface for the toxic comment classifier.

Provides ``evaluate``, ``cross-validate``, and ``rank-words`` commands with
rich terminal output using the ``click`` and ``rich`` libraries.

Usage::

    toxic-nb evaluate tokens.tsv --seed 7
    toxic-nb evaluate tokens.csv --ratings ratings.csv --output json
    toxic-nb cross-validate tokens.tsv -k 5
    toxic-nb rank-words tokens.tsv --top 15
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .classifier import NaiveBayesModel
from .config import Settings
from .corpus import load_corpus
from .errors import ToxicNBError
from .evaluation import ClassificationMetrics
from .models import Document, Label, MissingTokenPolicy
from .pipeline import PipelineResult, cross_validate, run_pipeline

console = Console()

_corpus_argument = click.argument("corpus", type=click.Path(exists=True, path_type=Path))
_ratings_option = click.option(
    "--ratings", "-r", type=click.Path(exists=True, path_type=Path), default=None,
    help="CSV/TSV of document_id,rating rows; summed ratings replace the label column.",
)
_min_count_option = click.option(
    "--min-count", type=int, default=None,
    help="Drop tokens seen fewer times than this across the corpus.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(ctx: click.Context, corpus: Path, ratings: Optional[Path]) -> list[Document]:
    settings: Settings = ctx.obj["settings"]
    try:
        return load_corpus(
            corpus,
            ratings_path=ratings,
            min_count=settings.min_token_count,
            threshold=settings.toxicity_threshold,
        )
    except ToxicNBError as e:
        _fail(e)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {error}")
    sys.exit(1)


def _apply_min_count(ctx: click.Context, min_count: Optional[int]) -> None:
    try:
        ctx.obj["settings"] = ctx.obj["settings"].override(min_token_count=min_count)
    except ValueError as e:
        _fail(e)


@click.group()
@click.version_option(package_name="toxic-nb")
@click.option("--verbose", "-v", is_flag=True, help="Show progress logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """☣️  toxic-nb: Naive Bayes toxic comment classifier.

    Reads a long-format token corpus (document_id, token, label) and
    trains a log-likelihood-ratio classifier over word counts.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = Settings.from_env()
    except ValueError as e:
        _fail(e)


@main.command()
@_corpus_argument
@_ratings_option
@_min_count_option
@click.option("--test-ratio", type=float, default=None, help="Held-out share of each class.")
@click.option("--seed", type=int, default=None, help="Split seed for a reproducible run.")
@click.option("--policy", type=click.Choice([p.value for p in MissingTokenPolicy]),
              default=None, help="Scoring of tokens missing from a class table.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--predictions", "-p", type=click.Path(path_type=Path), default=None,
              help="Save test-set predictions to a JSON file.")
@click.pass_context
def evaluate(
    ctx: click.Context,
    corpus: Path,
    ratings: Optional[Path],
    min_count: Optional[int],
    test_ratio: Optional[float],
    seed: Optional[int],
    policy: Optional[str],
    output: str,
    predictions: Optional[Path],
) -> None:
    """Train on a per-class split and report test-set metrics.

    Example: toxic-nb evaluate tokens.tsv --seed 7
    """
    try:
        ctx.obj["settings"] = ctx.obj["settings"].override(
            min_token_count=min_count,
            test_ratio=test_ratio,
            seed=seed,
            policy=MissingTokenPolicy(policy) if policy else None,
        )
    except ValueError as e:
        _fail(e)
    documents = _load(ctx, corpus, ratings)

    with console.status("[bold blue]Training classifier...", spinner="dots"):
        try:
            result = run_pipeline(documents, ctx.obj["settings"])
        except (ToxicNBError, ValueError) as e:
            _fail(e)

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_result(result, corpus.name)

    if predictions:
        predictions.write_text(json.dumps(result.batch.to_dict(), indent=2), encoding="utf-8")
        console.print(f"\n[dim]Predictions saved to {predictions}[/]")


@main.command("cross-validate")
@_corpus_argument
@_ratings_option
@_min_count_option
@click.option("-k", "folds", type=int, default=5, show_default=True, help="Number of folds.")
@click.option("--seed", type=int, default=42, show_default=True, help="Fold assignment seed.")
@click.pass_context
def cross_validate_command(
    ctx: click.Context,
    corpus: Path,
    ratings: Optional[Path],
    min_count: Optional[int],
    folds: int,
    seed: int,
) -> None:
    """Run stratified k-fold cross-validation.

    Example: toxic-nb cross-validate tokens.tsv -k 5
    """
    _apply_min_count(ctx, min_count)
    documents = _load(ctx, corpus, ratings)

    with console.status(f"[bold blue]Running {folds}-fold cross-validation...", spinner="dots"):
        try:
            results = cross_validate(
                documents, k=folds, seed=seed, policy=ctx.obj["settings"].policy
            )
        except (ToxicNBError, ValueError) as e:
            _fail(e)

    table = Table(title=f"Cross-validation: {corpus.name}")
    table.add_column("Fold", justify="right", width=6)
    table.add_column("Accuracy", justify="right")
    table.add_column("Macro F1", justify="right")
    table.add_column("Toxic F1", justify="right")
    table.add_column("Docs", justify="right")

    for i, metrics in enumerate(results, 1):
        table.add_row(
            str(i),
            f"{metrics.accuracy:.2%}",
            f"{metrics.macro_f1:.4f}",
            f"{metrics.per_class[Label.TOXIC.value]['f1']:.4f}",
            str(metrics.total),
        )

    mean_acc = sum(m.accuracy for m in results) / len(results)
    table.add_row("mean", f"{mean_acc:.2%}", "", "", "", style="bold")
    console.print(table)


@main.command("rank-words")
@_corpus_argument
@_ratings_option
@_min_count_option
@click.option("--top", "-n", type=click.IntRange(min=1), default=20, show_default=True,
              help="Tokens to show per direction.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def rank_words_command(
    ctx: click.Context,
    corpus: Path,
    ratings: Optional[Path],
    min_count: Optional[int],
    top: int,
    output: str,
) -> None:
    """List the most toxic and most benign indicative words.

    Trains on the whole corpus and ranks tokens by the ratio of their
    toxic to non-toxic log-probability.

    Example: toxic-nb rank-words tokens.tsv --top 15
    """
    _apply_min_count(ctx, min_count)
    documents = _load(ctx, corpus, ratings)

    try:
        model = NaiveBayesModel.train(documents, policy=ctx.obj["settings"].policy)
    except (ToxicNBError, ValueError) as e:
        _fail(e)

    toxic = model.rank_words(top_n=top)
    benign = model.rank_words(top_n=top, descending=True)

    if output == "json":
        click.echo(json.dumps({"toxic": toxic, "non_toxic": benign}, indent=2))
        return

    for title, rows, style in (
        ("Most toxic words", toxic, "red"),
        ("Most non-toxic words", benign, "green"),
    ):
        table = Table(title=title)
        table.add_column("#", justify="right", width=4)
        table.add_column("Token", style=style)
        table.add_column("Ratio", justify="right")
        table.add_column("Toxic n", justify="right")
        table.add_column("Non-toxic n", justify="right")
        for i, (token, ratio) in enumerate(rows, 1):
            table.add_row(
                str(i),
                token,
                f"{ratio:.4f}",
                str(model.table_toxic.count(token)),
                str(model.table_good.count(token)),
            )
        console.print(table)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_result(result: PipelineResult, filename: str) -> None:
    """Render a PipelineResult with rich formatting."""
    console.print()
    console.print(Panel(
        f"[bold]{filename}[/]\n"
        f"Train: {len(result.split.train)} | Test: {len(result.split.test)} | "
        f"P(toxic): {result.model.prior_toxic:.3f} | "
        f"Vocabulary: {len(result.model.vocabulary)} | "
        f"Policy: {result.model.policy.value}",
        title="☣️  Toxic Comment Classifier",
        border_style="blue",
    ))

    _render_confusion_matrix(result.metrics)
    console.print(result.metrics.summary())
    console.print()

    if result.batch.failures:
        console.print(f"[bold yellow]{len(result.batch.failures)} document(s) not scored:[/]")
        for failure in result.batch.failures[:10]:
            console.print(f"  ⚠️  {failure.document_id}: {failure.error}")
        console.print()


def _render_confusion_matrix(metrics: ClassificationMetrics) -> None:
    labels = [label.value for label in Label]
    table = Table(title="Confusion matrix (actual × predicted)", show_lines=True)
    table.add_column("Actual", style="cyan")
    for label in labels:
        table.add_column(label, justify="right")

    for actual in labels:
        row = metrics.confusion_matrix.get(actual, {})
        table.add_row(
            actual,
            *[
                f"[bold]{row.get(pred, 0)}[/]" if pred == actual else str(row.get(pred, 0))
                for pred in labels
            ],
        )
    console.print(table)


if __name__ == "__main__":
    main()
