"""
Tests for the command-line interface.
"""

import json

import numpy as np
import pytest
from click.testing import CliRunner

from guided_cluster.cli import main


@pytest.fixture
def files(tmp_path, two_group_data):
    vectors, labels, ids = two_group_data
    vectors_path = tmp_path / "vectors.npz"
    np.savez(vectors_path, vectors=vectors, ids=np.array(ids),
             texts=np.array([f"text number {i}" for i in range(len(ids))]))

    # leave the last row of each group unlabeled
    partial = {k: v for k, v in labels.items() if k not in ("r9", "r19")}
    labels_path = tmp_path / "labels.json"
    labels_path.write_text(json.dumps(partial))
    return vectors_path, labels_path


def test_info_json(files):
    vectors_path, _ = files
    result = CliRunner().invoke(main, ["info", str(vectors_path), "--json"])

    assert result.exit_code == 0
    assert '"n_vectors": 20' in result.output
    assert '"dimensions": 10' in result.output


def test_sample_lists_unlabeled_rows(files):
    vectors_path, labels_path = files
    result = CliRunner().invoke(main, ["sample", str(vectors_path), "-l", str(labels_path), "--seed", "1"])

    assert result.exit_code == 0
    assert "2 rows to label" in result.output
    assert "r9" in result.output
    assert "r19" in result.output


def test_rank(files):
    vectors_path, labels_path = files
    result = CliRunner().invoke(main, ["rank", str(vectors_path), "-l", str(labels_path), "-d", "3"])

    assert result.exit_code == 0
    assert "Discriminative Dimensions" in result.output


def test_analyze_writes_exports(files, tmp_path):
    vectors_path, labels_path = files
    out_json = tmp_path / "out.json"
    out_csv = tmp_path / "out.csv"

    result = CliRunner().invoke(main, [
        "analyze", str(vectors_path), "-l", str(labels_path),
        "-d", "2", "-k", "2", "--seed", "0",
        "--output", str(out_json), "--csv", str(out_csv),
    ])

    assert result.exit_code == 0, result.output
    assert "Analysis Results" in result.output

    exported = json.loads(out_json.read_text())
    assert exported["statistics"]["labeledSamples"] == 18
    assert sum(c["size"] for c in exported["clusters"]) == 20
    assert out_csv.read_text().startswith('"Identifier","Cluster","Original_Label"')


def test_analyze_json(files):
    vectors_path, labels_path = files
    result = CliRunner().invoke(main, [
        "analyze", str(vectors_path), "-l", str(labels_path), "-d", "2", "-k", "2", "--seed", "0", "--json",
    ])

    assert result.exit_code == 0
    assert "clusterAssignments" in result.output


def test_analyze_single_group_fails(files, tmp_path):
    vectors_path, _ = files
    labels_path = tmp_path / "one_group.json"
    labels_path.write_text(json.dumps({"r0": "A", "r1": "A"}))

    result = CliRunner().invoke(main, ["analyze", str(vectors_path), "-l", str(labels_path), "-k", "2"])

    assert result.exit_code == 1
    assert "need at least 2 labeled groups" in result.output


@pytest.mark.parametrize("command", ["sample", "analyze"])
def test_negative_seed_is_a_usage_error(files, command):
    vectors_path, labels_path = files
    result = CliRunner().invoke(main, [command, str(vectors_path), "-l", str(labels_path), "--seed", "-1"])

    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
    assert "--seed" in result.output


def test_analyze_help_shows_typical_ranges():
    result = CliRunner().invoke(main, ["analyze", "--help"])

    assert result.exit_code == 0
    assert "typically 10-100" in result.output
    assert "typically 2-6" in result.output
