from __future__ import annotations

from pathlib import Path

import pytest

from chainhash.config import AppConfig, TablePolicy, load_app_config
from chainhash.contracts.error import BadInputError
from chainhash.core.maps import HashTable


def test_default_config_validates() -> None:
    cfg = load_app_config(None)
    assert cfg.table.initial_capacity == 4
    assert cfg.table.load_factor_threshold == pytest.approx(0.75)
    assert cfg.table.large_rehash_warn_threshold == 1_000_000


def test_load_from_toml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = tmp_path / "config.toml"
    cfg_path.write_text(
        """
[table]
initial_capacity = 100
load_factor_threshold = 0.5
large_rehash_warn_threshold = 5000
""",
        encoding="utf-8",
    )
    cfg = load_app_config(str(cfg_path))
    assert cfg.table.initial_capacity == 100
    assert cfg.table.load_factor_threshold == pytest.approx(0.5)
    assert cfg.table.large_rehash_warn_threshold == 5000

    table = HashTable.from_policy(cfg.table)
    assert table.capacity == 128

    # env override takes precedence
    monkeypatch.setenv("CHAINHASH_INITIAL_CAPACITY", "7")
    monkeypatch.setenv("CHAINHASH_LOAD_FACTOR", "0.9")
    cfg_env = AppConfig.load(cfg_path)
    assert cfg_env.table.initial_capacity == 7
    assert cfg_env.table.load_factor_threshold == pytest.approx(0.9)
    assert cfg_env.table.large_rehash_warn_threshold == 5000


def test_invalid_values_raise(tmp_path: Path) -> None:
    bad_path = tmp_path / "bad.toml"
    bad_path.write_text("[table]\nload_factor_threshold = 1.5\n", encoding="utf-8")
    with pytest.raises(BadInputError):
        load_app_config(str(bad_path))

    negative = tmp_path / "negative.toml"
    negative.write_text("[table]\ninitial_capacity = -4\n", encoding="utf-8")
    with pytest.raises(BadInputError):
        load_app_config(str(negative))

    unknown = tmp_path / "unknown.toml"
    unknown.write_text("[table]\nbuckets = 4\n", encoding="utf-8")
    with pytest.raises(BadInputError):
        load_app_config(str(unknown))

    not_table = tmp_path / "not_table.toml"
    not_table.write_text('table = "big"\n', encoding="utf-8")
    with pytest.raises(BadInputError):
        load_app_config(str(not_table))


def test_missing_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(BadInputError, match="not found"):
        load_app_config(str(tmp_path / "absent.toml"))

    broken = tmp_path / "broken.toml"
    broken.write_text("[table\n", encoding="utf-8")
    with pytest.raises(BadInputError, match="Invalid TOML"):
        load_app_config(str(broken))


def test_bad_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINHASH_LOAD_FACTOR", "lots")
    with pytest.raises(BadInputError, match="CHAINHASH_LOAD_FACTOR"):
        load_app_config(None)

    monkeypatch.setenv("CHAINHASH_LOAD_FACTOR", "0")
    with pytest.raises(BadInputError):
        load_app_config(None)


def test_policy_rejects_non_numeric_values() -> None:
    with pytest.raises(BadInputError):
        TablePolicy(initial_capacity=True).validate()
    with pytest.raises(BadInputError):
        TablePolicy(load_factor_threshold="0.5").validate()  # type: ignore[arg-type]
    with pytest.raises(BadInputError, match=r"\(0, 1\]") as excinfo:
        TablePolicy(load_factor_threshold=0.0).validate()
    assert excinfo.value.hint
