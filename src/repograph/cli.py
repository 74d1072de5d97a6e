"""
Command Line Interface for RepoGraph.

Commands:
    - analyze: Map a GitHub repository
    - analyze-local: Map a local checkout
    - diagram: Render one Mermaid diagram
    - schema: Parse schema files and print entities and the ERD
    - summarize: Describe one source file
    - config-show: Show current configuration
    - serve: Run as MCP server

Example Usage:
    $ repograph analyze vercel/next.js --summary
    $ repograph analyze-local ~/projects/shop -o graph.json
    $ repograph diagram acme/shop --type sequence --endpoint app/api/users/route.ts
    $ repograph schema prisma/schema.prisma
    $ repograph summarize src/lib/db.ts

Author: RepoGraph Team
"""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import AnalysisConfig, Config, SchemaConfig, get_config, set_config
from .constants import APPLICATION_NAME, APPLICATION_VERSION, DiagramType
from .parsers import extract_schema_entities
from .tools.analyze_repo import analyze_local_repository, analyze_repository
from .tools.file_summary import summarize_file
from .tools.generate_diagrams import DiagramGenerator, generate_diagram

console = Console()


def _emit(result: dict, output: str | None) -> None:
    """Print a tool result, or write it to ``output``; exit 1 on error."""
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise SystemExit(1)

    text = json.dumps(result, indent=2, default=str)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Wrote {output}[/green]")
    else:
        console.print_json(text)


def _print_summary(result: dict) -> None:
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise SystemExit(1)

    console.print(f"\n[bold]{result['meta']['name']}[/bold]")
    console.print(result["summary"])

    table = Table()
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result["stats"].items():
        table.add_row(key, str(value))
    console.print(table)


@click.group()
@click.option("--max-files", type=int, help="Maximum number of source files to fetch and parse")
@click.option("--merge-schemas", is_flag=True, help="Merge entities from every schema file")
@click.version_option(APPLICATION_VERSION, prog_name=APPLICATION_NAME)
@click.pass_context
def main(ctx, max_files, merge_schemas):
    """RepoGraph - structural and architectural maps of source repositories.

    \b
    Quick Start:
        # Summarize a GitHub repository
        repograph analyze owner/repo --summary

        # Full graph of a local checkout as JSON
        repograph analyze-local . -o graph.json

        # Architecture diagram
        repograph diagram owner/repo --type architecture
    """
    ctx.ensure_object(dict)

    if max_files is not None or merge_schemas:
        current = get_config()
        analysis = current.analysis
        if max_files is not None:
            analysis = AnalysisConfig(**{**analysis.model_dump(), "max_parsed_files": max_files})
        set_config(Config(
            analysis=analysis,
            layout=current.layout,
            cache=current.cache,
            schemas=SchemaConfig(merge_schema_files=merge_schemas or current.schemas.merge_schema_files),
            diagram=current.diagram,
            github=current.github,
        ))


@main.command()
@click.argument("repository")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the JSON result to a file")
@click.option("--summary", "summary_only", is_flag=True, help="Print only the summary and stats")
@click.option("--contents", is_flag=True, help="Include fetched file texts in the result")
def analyze(repository, output, summary_only, contents):
    """Analyze a GitHub repository.

    REPOSITORY: GitHub URL or owner/repo
    """
    result = asyncio.run(analyze_repository(repository, include_contents=contents))
    if summary_only:
        _print_summary(result)
    else:
        _emit(result, output)


@main.command("analyze-local")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the JSON result to a file")
@click.option("--summary", "summary_only", is_flag=True, help="Print only the summary and stats")
@click.option("--contents", is_flag=True, help="Include file texts in the result")
def analyze_local(path, output, summary_only, contents):
    """Analyze a repository checked out locally.

    PATH: Repository root directory
    """
    result = asyncio.run(analyze_local_repository(path, include_contents=contents))
    if summary_only:
        _print_summary(result)
    else:
        _emit(result, output)


@main.command()
@click.argument("repository")
@click.option(
    "--type", "-t", "diagram_type",
    type=click.Choice([t.value for t in DiagramType]),
    default=DiagramType.ARCHITECTURE.value,
    show_default=True,
)
@click.option("--endpoint", "-e", help="API file path for sequence diagrams")
@click.option("--local", is_flag=True, help="REPOSITORY is a local directory")
@click.option("--raw", is_flag=True, help="Print only the Mermaid text")
def diagram(repository, diagram_type, endpoint, local, raw):
    """Render a Mermaid diagram for a repository.

    REPOSITORY: GitHub URL, owner/repo, or a directory with --local
    """
    result = asyncio.run(generate_diagram(repository, diagram_type, endpoint=endpoint, local=local))
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        for path in result.get("endpoints", []):
            console.print(f"  {path}")
        raise SystemExit(1)

    if raw:
        click.echo(result["content"], nl=False)
    elif not result["content"]:
        console.print(f"[yellow]No {diagram_type} diagram: nothing to draw[/yellow]")
    else:
        console.print(f"[bold]{result['title']}[/bold]\n")
        console.print(result["content"], markup=False, highlight=False)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--erd", "erd_only", is_flag=True, help="Print only the Mermaid ERD")
def schema(files, erd_only):
    """Parse schema files (Prisma-style models or SQL DDL).

    FILES: Schema files, tried in the given order
    """
    contents = {path: Path(path).read_text(encoding="utf-8", errors="replace") for path in files}
    entities, source = extract_schema_entities(
        list(files),
        contents,
        merge=get_config().schemas.merge_schema_files,
    )

    if not entities:
        console.print("[yellow]No entities found[/yellow]")
        return

    erd = DiagramGenerator().erd(entities)
    if erd_only:
        click.echo(erd, nl=False)
        return

    if source:
        console.print(f"[dim]Entities from {source}[/dim]")
    for entity in entities:
        table = Table(title=entity.name)
        table.add_column("Field", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Key")
        for field in entity.fields:
            key = "PK" if field.is_primary else "FK" if field.is_relation else ""
            table.add_row(field.name, field.type, key)
        console.print(table)

    console.print("\n[bold]ERD[/bold]\n")
    console.print(erd, markup=False, highlight=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def summarize(file):
    """Describe one source file.

    FILE: The file to summarize
    """
    content = Path(file).read_text(encoding="utf-8", errors="replace")
    result = summarize_file(content, Path(file).as_posix())
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise SystemExit(1)

    console.print(f"[bold]{result['file']}[/bold]")
    console.print(result["summary"], markup=False, highlight=False)
    for api in result["apiCalls"]:
        console.print(f"  {api}", style="dim", markup=False)


@main.command()
def serve():
    """Run as MCP server for AI assistant integration."""
    from .server import run_server

    # stdout carries the MCP protocol
    Console(stderr=True).print("[bold]Starting RepoGraph MCP Server...[/bold]")
    run_server()


@main.command()
def config_show():
    """Show current configuration."""
    config = get_config()

    console.print("\n[bold]RepoGraph Configuration[/bold]\n")

    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Parseable Extensions", ", ".join(config.analysis.parseable_extensions))
    table.add_row("Max Parsed Files", str(config.analysis.max_parsed_files))
    table.add_row("Fetch Batch Size", str(config.analysis.fetch_batch_size))
    table.add_row("Max Schema Files", str(config.analysis.max_schema_files))
    table.add_row("Merge Schema Files", "✓ Yes" if config.schemas.merge_schema_files else "✗ No")
    table.add_row("Layout", f"{config.layout.rank_direction}, "
                  f"nodesep {config.layout.node_separation}, ranksep {config.layout.rank_separation}")
    table.add_row("Repo Cache", f"{config.cache.repo_max_entries} entries / {config.cache.repo_ttl_seconds}s")
    table.add_row("File Cache", f"{config.cache.file_max_entries} entries / {config.cache.file_ttl_seconds}s")
    table.add_row("GitHub API", config.github.api_url)
    table.add_row("GitHub Token", "✓ Set" if config.github.token else "[dim]Not set[/dim]")

    console.print(table)


if __name__ == "__main__":
    main()
