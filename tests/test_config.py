import pytest
from mncc.config import DEFAULT_CONFIG, load_config
from mncc.errors import ValidationError


def test_defaults():
    cfg = load_config()
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_yaml_override(tmp_path):
    p = tmp_path / 'cfg.yaml'
    p.write_text('required_fraction_of_overlapping_pixels: 0.25\nbackend: opencv\n', encoding='utf-8')
    cfg = load_config(p)
    assert cfg['required_fraction_of_overlapping_pixels'] == 0.25
    assert cfg['backend'] == 'opencv'
    assert cfg['required_number_of_overlapping_pixels'] == 0


def test_empty_file(tmp_path):
    p = tmp_path / 'empty.yaml'
    p.write_text('', encoding='utf-8')
    assert load_config(p) == DEFAULT_CONFIG


def test_bad_files(tmp_path):
    p = tmp_path / 'bad.yaml'
    p.write_text('unknown_knob: 1\n', encoding='utf-8')
    with pytest.raises(ValidationError):
        load_config(p)
    p.write_text('- 1\n- 2\n', encoding='utf-8')
    with pytest.raises(ValidationError):
        load_config(p)


def test_shipped_config_matches_defaults():
    from pathlib import Path
    shipped = Path(__file__).resolve().parent.parent / 'configs' / 'masked_ncc.yaml'
    assert load_config(shipped) == DEFAULT_CONFIG
