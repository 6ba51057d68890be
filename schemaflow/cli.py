#!/usr/bin/env python3
# schemaflow/cli.py

import json
from pathlib import Path
import typer
import yaml
from typing import Optional

from schemaflow.core.models import Category, NodeInstance, WorkflowDefinition
from schemaflow.graph.diagnostics import graph_diagnostics
from schemaflow.graph.integrity import GraphIntegrityChecker
from schemaflow.registry.factory import NodeInstanceFactory
from schemaflow.registry.registry import SchemaRegistry, shape_errors
from schemaflow.registry.store import JsonFileStore
from schemaflow.utils.config import load_settings
from schemaflow.utils.io import dump_any, list_files, load_any
from schemaflow.utils.logger import init_logger
from schemaflow.validation.instance import InstanceValidator

app = typer.Typer(help="SchemaFlow CLI - validate schema-driven workflow graphs")

STORE_HELP = "JSON key-value store holding custom schemas (default: $SCHEMAFLOW_STORE or ~/.schemaflow/store.json)"


def _registry(store: Optional[Path]) -> SchemaRegistry:
    settings = load_settings(store)
    init_logger(level=settings.log_level, log_dir=settings.log_dir)
    return SchemaRegistry(JsonFileStore(settings.store_path))


def _load(path: Path):
    try:
        return load_any(path)
    except (ValueError, yaml.YAMLError) as e:
        raise typer.BadParameter(str(e))


def _parse(model, path: Path):
    """Load `path` into `model` (NodeInstance or WorkflowDefinition)."""
    data = _load(path)
    try:
        return model.from_dict(data)
    except KeyError as e:
        raise typer.BadParameter(f"missing field {e} in {path}")
    except (AttributeError, TypeError) as e:
        raise typer.BadParameter(f"{path}: not a valid {model.__name__} record ({e})")


@app.command()
def schemas(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only list schemas of this category"),
    as_json: bool = typer.Option(False, "--json", help="Print full schema records as JSON"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """List registered schemas (built-in and custom)."""
    if category is not None and category not in {c.value for c in Category}:
        raise typer.BadParameter(f"Unknown category '{category}'. "
                                 f"Choose one of: {', '.join(c.value for c in Category)}")
    registry = _registry(store)
    items = registry.list_by_category(category) if category else registry.list_all()

    if as_json:
        print(json.dumps([s.to_dict() for s in items], ensure_ascii=False, indent=2))
        return
    for s in items:
        req = f" required={s.required}" if s.required else ""
        print(f"{s.id:<20} {s.category:<12} v{s.version:<8} {s.name}{req}")


@app.command()
def register(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Schema record (JSON or YAML)"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """Register (or overwrite) a schema; custom schemas are persisted."""
    record = _load(input)
    problems = shape_errors(record)
    if problems:
        for p in problems:
            print(f"- {p}")
        raise typer.Exit(code=1)

    registry = _registry(store)
    if not registry.register(record):
        print(f"[fail] could not register schema '{record.get('id')}'")
        raise typer.Exit(code=1)
    print(f"[ok] registered schema '{record['id']}'")


@app.command()
def unregister(
    schema_id: str = typer.Option(..., "--id", help="Id of the custom schema to remove"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """Remove a custom schema. Built-in schemas cannot be removed."""
    registry = _registry(store)
    if not registry.unregister(schema_id):
        print(f"[fail] schema '{schema_id}' is unknown or not a custom schema")
        raise typer.Exit(code=1)
    print(f"[ok] removed schema '{schema_id}'")


@app.command()
def new_node(
    schema_id: str = typer.Option(..., "--schema", "-s", help="Schema id to instantiate"),
    x: float = typer.Option(0.0, "--x", help="Canvas x position"),
    y: float = typer.Option(0.0, "--y", help="Canvas y position"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the instance to this file instead of stdout"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """Create a node instance pre-filled with the schema defaults."""
    registry = _registry(store)
    node = NodeInstanceFactory(registry).create(schema_id, {"x": x, "y": y})
    if node is None:
        raise typer.BadParameter(f"Schema '{schema_id}' is not registered")

    if out is not None:
        dump_any(out, node.to_dict())
        print(f"[ok] wrote {out}")
    else:
        print(json.dumps(node.to_dict(), ensure_ascii=False, indent=2))


@app.command()
def check_node(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Node instance (JSON or YAML)"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """Validate one node instance against its schema."""
    registry = _registry(store)
    node = _parse(NodeInstance, input)
    result = InstanceValidator(registry).validate(node)

    if result.is_valid:
        print(f"[ok] node '{node.id}' is valid")
        return
    print(f"Node '{node.id}' has {len(result.errors)} error(s):")
    for err in result.errors:
        print(f"- {err}")
    raise typer.Exit(code=1)


@app.command()
def check(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow definition (JSON or YAML)"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show advisory graph diagnostics"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """
    Validate every node of a workflow and evaluate the run gate.
    Exits with code 1 when the workflow is Blocked.
    """
    registry = _registry(store)
    wf = _parse(WorkflowDefinition, input)
    validator = InstanceValidator(registry)

    per_node = {n.id: validator.validate(n) for n in wf.nodes}
    verdict = GraphIntegrityChecker(registry, validator).check_workflow(wf)
    issues, detail = graph_diagnostics(wf.nodes, wf.edges, registry)

    print(f"Workflow:  {wf.name or wf.id or input.name}")
    print(f"Verdict:   {'Runnable' if verdict.runnable else 'Blocked'} ({verdict.rule})")
    if not verdict.runnable:
        print(f"Reason:    {verdict.reason}")

    invalid = {nid: r for nid, r in per_node.items() if not r.is_valid}
    if invalid:
        print("Node configuration errors:")
        for nid, r in invalid.items():
            for err in r.errors:
                print(f"- [{nid}] {err}")

    if report is not None:
        payload = {
            "input": str(input),
            "verdict": verdict.to_dict(),
            "nodes": {nid: r.to_dict() for nid, r in per_node.items()},
            "diagnostics": {"issues": issues, "detail": detail},
        }
        dump_any(report, payload)
        print(f"[ok] wrote report to {report}")

    if verbose:
        if issues:
            print("Advisory diagnostics (do not affect the verdict):")
            for it in issues:
                print(f"- {it}")
        print("[debug] graph detail:", detail)

    if not verdict.runnable:
        raise typer.Exit(code=1)


@app.command()
def batch(
    glob: str = typer.Option("workflows/**/*.json", "--glob", help="Glob for workflow files"),
    out: Path = typer.Option(Path("reports/workflows.csv"), "--out", help="CSV path to write results"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """Check many workflow files and export a CSV summary."""
    import pandas as pd

    registry = _registry(store)
    validator = InstanceValidator(registry)
    checker = GraphIntegrityChecker(registry, validator)

    rows = []
    for fp in list_files(glob):
        data = load_any(fp)
        if not isinstance(data, dict) or "nodes" not in data:
            print(f"[skip] {fp} does not look like a workflow (missing 'nodes'); skipping")
            continue
        try:
            wf = WorkflowDefinition.from_dict(data)
        except (KeyError, AttributeError, TypeError) as e:
            print(f"[skip] {fp} has a malformed node or edge ({e!r}); skipping")
            continue
        verdict = checker.check_workflow(wf)
        issues, _ = graph_diagnostics(wf.nodes, wf.edges, registry)
        rows.append({
            "file": str(fp),
            "workflow": wf.name or wf.id,
            "nodes": len(wf.nodes),
            "edges": len(wf.edges),
            "invalid_nodes": sum(1 for n in wf.nodes if not validator.validate(n).is_valid),
            "runnable": verdict.runnable,
            "rule": verdict.rule,
            "reason": verdict.reason,
            "advisories": len(issues),
        })

    out.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=["file", "workflow", "nodes", "edges", "invalid_nodes",
                                "runnable", "rule", "reason", "advisories"]).to_csv(out, index=False)
    print(f"[ok] wrote {out} ({len(rows)} workflows)")


if __name__ == "__main__":
    app()
