"""Command-line interface for repo2ctx."""
import os
import sys
import logging
from typing import List, Optional, Sequence

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, TextColumn, BarColumn, TimeElapsedColumn
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .core.analyzer import RepositoryAnalyzer
from .core.config import load_config_file
from .core.content_processor import ContentProcessor
from .core.exceptions import Repo2CtxError
from .core.models import AnalysisResult, Config, ProcessOptions, TreeNode
from .core.selection import select_all
from .core.tokenizer import TokenCounter
from .utils.tree_builder import FileTreeBuilder

# Load environment variables from .env file
load_dotenv()

console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on the verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    format_string = '[%(levelname)s] %(message)s'

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def _token_counter(config: Config) -> TokenCounter:
    return TokenCounter(os.getenv('REPO2CTX_ENCODING') or config.token_encoder)


def _add_nodes(branch: Tree, nodes: Sequence[TreeNode]) -> None:
    for node in nodes:
        if node.is_directory():
            sub = branch.add(f"[bold cyan]{node.name}/[/bold cyan] [dim]({node.item_count})[/dim]")
            _add_nodes(sub, node.children)
        else:
            branch.add(f"{node.name} [dim]{node.size:,} B[/dim]")


def _print_analysis(result: AnalysisResult, limit: int = 20) -> None:
    table = Table(title="Token Analysis", show_lines=False)
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Tokens", justify="right", style="bright_blue")
    table.add_column("File Path")

    for i, entry in enumerate(result.files_info[:limit], start=1):
        table.add_row(str(i), f"{entry.tokens:,}", entry.path)

    console.print(table)
    if result.total_files > limit:
        console.print(f"[dim]... +{result.total_files - limit} more files[/dim]")
    console.print(f"[cyan]FILES:[/cyan] {result.total_files}  [cyan]TOTAL TOKENS:[/cyan] {result.total_tokens:,}")


def _write_output(content: str, output: Optional[str]) -> None:
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(content)
        console.print(f"[green]Written:[/green] {output}")
    else:
        click.echo(content, nl=False)


def _run_analysis(root: str, config: Config, files: Sequence[str]) -> AnalysisResult:
    if files:
        selected: List[str] = [os.path.abspath(f) for f in files]
    else:
        tree = FileTreeBuilder.from_directory(root, config.exclude_patterns)
        selected = select_all(tree).sorted_files(tree)

    analyzer = RepositoryAnalyzer(token_counter=_token_counter(config))

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Analyzing", total=len(selected))
        return analyzer.analyze(
            root,
            config,
            selected,
            progress=lambda _path: progress.advance(task),
        )


def _run_process(root: str, result: AnalysisResult, config: Config, tree: bool, token_count: bool) -> str:
    options = ProcessOptions(show_token_count=token_count, include_tree_view=tree)
    tree_view = FileTreeBuilder.render_paths(e.path for e in result.files_info) if tree else None

    analyzer = RepositoryAnalyzer(token_counter=_token_counter(config))
    processed = analyzer.process(root, result.files_info, tree_view, options)

    console.print(
        f"[cyan]PROCESSED:[/cyan] {processed.processed_files}  "
        f"[cyan]TOKENS:[/cyan] {processed.total_tokens:,}"
        + (f"  [yellow]SKIPPED:[/yellow] {processed.skipped_files}" if processed.skipped_files else "")
    )
    return processed.content


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='repo2ctx')
def main(verbose: bool) -> None:
    """
    Assemble a directory's files into one document for an LLM context window.

    Examples:

        repo2ctx tree .

        repo2ctx analyze . -o analysis.txt

        repo2ctx process . --analysis analysis.txt -o context.md

        repo2ctx run /path/to/project --config repo2ctx.yaml -o context.md
    """
    setup_logging(verbose)


@main.command()
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False), help='YAML configuration file')
def tree(root: str, config_path: Optional[str]) -> None:
    """Show the directory tree after exclude patterns are applied."""
    try:
        config = load_config_file(config_path)
        nodes = FileTreeBuilder.from_directory(root, config.exclude_patterns)
    except Repo2CtxError as e:
        raise click.ClickException(str(e)) from e

    root_branch = Tree(f"[bold]{os.path.basename(os.path.abspath(root))}/[/bold]")
    _add_nodes(root_branch, nodes)
    Console().print(root_branch)


@main.command()
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@click.argument('files', nargs=-1, type=click.Path())
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False), help='YAML configuration file')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the analysis file here')
def analyze(root: str, files: Sequence[str], config_path: Optional[str], output: Optional[str]) -> None:
    """
    Count tokens for the files that pass the configured filters.

    FILES restricts the selection; by default every file in the tree is used.
    """
    try:
        config = load_config_file(config_path)
        result = _run_analysis(root, config, files)
    except Repo2CtxError as e:
        raise click.ClickException(str(e)) from e

    _print_analysis(result)
    if output:
        _write_output(ContentProcessor.format_analysis(result), output)


@main.command()
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@click.option('--analysis', '-a', 'analysis_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Analysis file produced by "repo2ctx analyze"')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file (default: stdout)')
@click.option('--tree/--no-tree', default=True, help='Include the file structure section')
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False), help='YAML configuration file')
@click.option('--no-token-count', is_flag=True, help='Omit per-file token counts from headers')
def process(root: str, analysis_path: str, config_path: Optional[str], output: Optional[str], tree: bool, no_token_count: bool) -> None:
    """Assemble the document from a previously written analysis file."""
    entries = ContentProcessor.read_analysis_file(analysis_path)
    result = AnalysisResult(files_info=entries, total_tokens=sum(e.tokens for e in entries))

    try:
        config = load_config_file(config_path)
        content = _run_process(root, result, config, tree, not no_token_count)
    except Repo2CtxError as e:
        raise click.ClickException(str(e)) from e

    _write_output(content, output)


@main.command()
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False), help='YAML configuration file')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file (default: stdout)')
@click.option('--tree/--no-tree', default=True, help='Include the file structure section')
@click.option('--no-token-count', is_flag=True, help='Omit per-file token counts from headers')
def run(root: str, config_path: Optional[str], output: Optional[str], tree: bool, no_token_count: bool) -> None:
    """Analyze and assemble in one step."""
    try:
        config = load_config_file(config_path)
        result = _run_analysis(root, config, ())
        if not result.files_info:
            console.print("[yellow]No matching files found.[/yellow]")
            return
        _print_analysis(result, limit=10)
        content = _run_process(root, result, config, tree, not no_token_count)
    except Repo2CtxError as e:
        raise click.ClickException(str(e)) from e

    _write_output(content, output)


if __name__ == '__main__':
    main()
