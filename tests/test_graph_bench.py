import json
from pathlib import Path

import pytest

from schemaflow.core.models import WorkflowDefinition
from schemaflow.graph.diagnostics import graph_diagnostics

BENCH_DIR = Path(__file__).resolve().parent.parent / "bench" / "graph"


@pytest.mark.parametrize("case_dir", sorted(BENCH_DIR.glob("G*")), ids=lambda p: p.name)
def test_graph_bench(case_dir: Path, registry, checker):
    """
    Graph benchmark:
    - load workflow.json and expect.json
    - run the integrity gate and the advisory diagnostics
    - compare verdict, failing rule and advisory tags
    """
    wf_file = case_dir / "workflow.json"
    exp_file = case_dir / "expect.json"

    assert wf_file.exists(), f"Missing workflow.json in {case_dir}"
    assert exp_file.exists(), f"Missing expect.json in {case_dir}"

    with wf_file.open("r", encoding="utf-8") as f:
        workflow = WorkflowDefinition.from_dict(json.load(f))
    with exp_file.open("r", encoding="utf-8") as f:
        asserts = json.load(f).get("assert") or {}

    result = checker.check_workflow(workflow)

    assert result.runnable == asserts["runnable"], f"{case_dir.name}: {result.reason}"
    assert bool(result) == asserts["runnable"]

    if "rule" in asserts:
        assert result.rule == asserts["rule"], f"{case_dir.name}: rule={result.rule}, reason={result.reason}"

    if "node_id" in asserts:
        assert result.node_id == asserts["node_id"]

    if "error_properties" in asserts:
        assert [e.property for e in result.errors] == asserts["error_properties"]

    if "advisories" in asserts:
        issues, _ = graph_diagnostics(workflow.nodes, workflow.edges, registry)
        expected = asserts["advisories"]
        if not expected:
            assert issues == [], f"{case_dir.name}: unexpected advisories {issues}"
        for tag in expected:
            assert any(tag in msg for msg in issues), f"{case_dir.name}: missing {tag} in {issues}"
