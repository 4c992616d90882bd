from __future__ import annotations
from pathlib import Path

import pytest

from docscan.core.config import DEFAULT_CFG, load_cfg, merge_cfg

SHIPPED = Path(__file__).resolve().parents[1] / "config" / "scanner.yaml"


def test_defaults():
    cfg = merge_cfg(None)
    assert cfg["blur"]["ksize"] == 5
    assert cfg["morph"]["ksize"] == 5
    assert cfg["min_area_px"] == 10000
    assert cfg["approx_epsilon"] == 0.02
    assert cfg["aspect_range"] == (1.2, 1.8)
    assert cfg["output_size"] == (850, 1100)

def test_nested_dicts_merge_one_level_deep():
    cfg = merge_cfg({"threshold": {"c": 5}, "outline": {"thickness": 3}})
    assert cfg["threshold"] == {"block_size": 11, "c": 5}
    assert cfg["outline"]["thickness"] == 3
    assert cfg["outline"]["color"] == (166, 191, 0)
    # defaults are not mutated
    assert DEFAULT_CFG["threshold"]["c"] == 2

def test_merge_is_idempotent():
    once = merge_cfg({"min_area_px": 5000})
    assert merge_cfg(once) == once

@pytest.mark.parametrize("override", [
    {"blur": {"ksize": 4}},
    {"morph": {"ksize": 0}},
    {"threshold": {"block_size": 1}},
    {"aspect_range": (1.8, 1.2)},
    {"output_size": (0, 100)},
    {"approx_epsilon": 0.0},
])
def test_invalid_values_raise(override):
    with pytest.raises(ValueError):
        merge_cfg(override)

def test_load_yaml_lists_become_tuples(tmp_path):
    p = tmp_path / "scan.yaml"
    p.write_text("aspect_range: [1.3, 1.6]\noutput_size: [600, 800]\nblur:\n  ksize: 7\n")
    cfg = load_cfg(p)
    assert cfg["aspect_range"] == (1.3, 1.6)
    assert cfg["output_size"] == (600, 800)
    assert cfg["blur"]["ksize"] == 7
    assert cfg["morph"]["ksize"] == 5

def test_load_empty_yaml_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_cfg(p) == merge_cfg(None)

def test_load_rejects_non_mapping(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_cfg(p)

def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_cfg(tmp_path / "nope.yaml")

def test_shipped_config_matches_defaults():
    assert load_cfg(SHIPPED) == merge_cfg(None)

def test_merged_config_does_not_share_nested_defaults():
    cfg = merge_cfg(None)
    cfg["blur"]["ksize"] = 7
    cfg["outline"]["thickness"] = 1
    assert DEFAULT_CFG["blur"]["ksize"] == 5
    assert DEFAULT_CFG["outline"]["thickness"] == 8
    assert merge_cfg(None)["blur"]["ksize"] == 5

def test_unknown_channel_order_is_rejected():
    with pytest.raises(ValueError):
        merge_cfg({"channel_order": "yuv"})
