import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from src.app.data import fee_repository
from src.app.persistence import fee_configs
from src.app.persistence.fee_configs import (
    CONFIGS_TABLE,
    TIERS_TABLE,
    DatabaseNotConfiguredError,
    create_fee_config,
    list_fee_configs,
    update_fee_config,
)
from src.app.schemas.delivery_fee import DeliveryFeeConfigModel, DeliveryFeeConfigUpdate


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters: dict[str, object] = {}

    def select(self, *args, **kwargs):
        return self

    def order(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def execute(self):
        if self.operation == "insert":
            self.client.inserts.append((self.table, self.payload))
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            return SimpleNamespace(data=[{"id": f"{self.table}-{len(self.client.inserts)}", **row} for row in rows])
        if self.client.fail:
            raise ConnectionError("database unreachable")
        rows = self.client.rows if self.table == CONFIGS_TABLE else []
        rows = [row for row in rows if all(row.get(column) == value for column, value in self.filters.items())]
        if self.operation in ("update", "delete"):
            self.client.writes.append((self.operation, self.table, dict(self.filters)))
        return SimpleNamespace(data=rows)


class FakeSupabase:
    def __init__(self, rows=None, fail: bool = False) -> None:
        self.rows = rows or []
        self.fail = fail
        self.inserts: list[tuple[str, object]] = []
        self.writes: list[tuple[str, str, dict]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def _row(config_id, min_distance, max_distance, fee, base_fee=None, tiers=None):
    return {
        "id": config_id,
        "min_distance": min_distance,
        "max_distance": max_distance,
        "fee": fee,
        "base_fee": base_fee,
        TIERS_TABLE: tiers or [],
    }


def test_list_fee_configs_reads_rows_with_tiers():
    client = FakeSupabase(
        rows=[
            _row(
                "a",
                0,
                5,
                40,
                base_fee=45,
                tiers=[
                    {"min_order_amount": 500, "max_order_amount": None, "fee": 0},
                    {"min_order_amount": 0, "max_order_amount": 500, "fee": 60},
                ],
            )
        ]
    )

    configs = list_fee_configs(client)

    assert len(configs) == 1
    assert configs[0].id == "a"
    assert [tier.min_order_amount for tier in configs[0].tiers] == [0, 500]


def test_list_fee_configs_returns_none_when_database_fails():
    assert list_fee_configs(FakeSupabase(fail=True)) is None


def test_list_fee_configs_skips_invalid_rows():
    client = FakeSupabase(rows=[{"id": "broken"}, _row("ok", 0, 10, 50)])

    configs = list_fee_configs(client)

    assert [config.id for config in configs] == ["ok"]


def test_load_fee_schedule_prefers_database():
    client = FakeSupabase(rows=[_row("a", 0, 5, 30), _row("b", 5, 100, 60)])

    schedule = fee_repository.load_fee_schedule(client=client, source=Path("/nonexistent.json"))

    assert [tier.fee for tier in schedule.tiers] == [30, 60]
    assert schedule.tiers[0].config_id == "a"


def test_load_fee_schedule_falls_back_to_file_when_database_tiers_invalid(tmp_path: Path):
    client = FakeSupabase(rows=[_row("a", 0, 5, 30), _row("b", 7, 100, 60)])
    source = tmp_path / "fees.json"
    source.write_text(json.dumps([{"minDistance": 0, "maxDistance": 50, "fee": 45}]), encoding="utf-8")

    schedule = fee_repository.load_fee_schedule(client=client, source=source)

    assert [tier.fee for tier in schedule.tiers] == [45]


def test_load_fee_schedule_uses_seed_defaults_without_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(fee_configs, "get_supabase_client", lambda: None)

    schedule = fee_repository.load_fee_schedule(source=tmp_path / "missing.json")

    assert [(tier.min_distance, tier.max_distance, tier.fee) for tier in schedule.tiers] == [
        (0, 10, 50),
        (10, 20, 80),
        (20, 30, 120),
        (30, 1000, 200),
    ]


def test_load_fee_schedule_ignores_corrupt_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(fee_configs, "get_supabase_client", lambda: None)
    source = tmp_path / "fees.json"
    source.write_text("{ not json", encoding="utf-8")

    schedule = fee_repository.load_fee_schedule(source=source)

    assert len(schedule.tiers) == 4


def test_create_fee_config_inserts_config_and_tiers():
    client = FakeSupabase()
    config = DeliveryFeeConfigModel.model_validate(
        {"minDistance": 0, "maxDistance": 10, "baseFee": 50, "tiers": [{"minOrderAmount": 1000, "fee": 0}]}
    )

    created = create_fee_config(config, client=client)

    assert created.id == f"{CONFIGS_TABLE}-1"
    assert client.inserts[0][0] == CONFIGS_TABLE
    assert client.inserts[1] == (
        TIERS_TABLE,
        [{"config_id": created.id, "min_order_amount": 1000, "max_order_amount": None, "fee": 0}],
    )


def test_writes_require_database(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(fee_configs, "get_supabase_client", lambda: None)
    config = DeliveryFeeConfigModel.model_validate({"minDistance": 0, "maxDistance": 10, "fee": 50})

    with pytest.raises(DatabaseNotConfiguredError):
        create_fee_config(config)


def test_update_unknown_config_touches_nothing():
    client = FakeSupabase(rows=[_row("a", 0, 10, 50)])
    update = DeliveryFeeConfigUpdate.model_validate({"tiers": [{"minOrderAmount": 100, "fee": 0}]})

    assert update_fee_config("missing", update, client=client) is None
    assert client.writes == []
    assert client.inserts == []


def test_update_replaces_tiers_of_existing_config():
    client = FakeSupabase(rows=[_row("a", 0, 10, 50)])
    update = DeliveryFeeConfigUpdate.model_validate({"tiers": [{"minOrderAmount": 100, "fee": 0}]})

    updated = update_fee_config("a", update, client=client)

    assert updated.id == "a"
    assert client.writes == [("delete", TIERS_TABLE, {"config_id": "a"})]
    assert client.inserts == [
        (TIERS_TABLE, [{"config_id": "a", "min_order_amount": 100, "max_order_amount": None, "fee": 0}])
    ]
