"""
Tests for label files and sample selection.
"""

import json

import pytest

from guided_cluster.labeling import load_labels, select_for_labeling


def test_load_labels_json_dict(tmp_path):
    path = tmp_path / "labels.json"
    path.write_text(json.dumps({"a": "spam", "b": " ham ", "c": ""}))
    assert load_labels(path) == {"a": "spam", "b": "ham"}


def test_load_labels_json_records(tmp_path):
    path = tmp_path / "labels.json"
    path.write_text(json.dumps([{"id": 1, "label": "x"}, {"identifier": "2", "label": "y"}]))
    assert load_labels(path) == {"1": "x", "2": "y"}


def test_load_labels_csv(tmp_path):
    path = tmp_path / "labels.csv"
    path.write_text("id,label\nr1,A\nr2,\nr3,B\n")
    assert load_labels(path) == {"r1": "A", "r3": "B"}


def test_load_labels_record_without_id(tmp_path):
    path = tmp_path / "labels.json"
    path.write_text(json.dumps([{"label": "x"}]))
    with pytest.raises(ValueError):
        load_labels(path)


def test_select_skips_labeled_rows():
    ids = [f"r{i}" for i in range(10)]
    labels = {"r0": "A", "r1": "B", "r2": "A"}

    picked = select_for_labeling(ids, n=20, labels=labels, seed=0)

    assert sorted(picked) == list(range(3, 10))


def test_select_is_reproducible():
    ids = [f"r{i}" for i in range(50)]
    first = select_for_labeling(ids, n=8, seed=5)
    second = select_for_labeling(ids, n=8, seed=5)

    assert first == second
    assert len(first) == 8
    assert len(set(first)) == 8
