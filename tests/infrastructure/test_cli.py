"""End-to-end tests for the click CLI against a JSON store on disk."""

import json
import logging
from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from rentals.infrastructure.cli.main import cli
from rentals.infrastructure.persistence.document_store import JsonDocumentStore
from rentals.infrastructure.persistence.json_unit_of_work import DocumentUnitOfWork
from tests.fakes import make_coupon, make_product


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner(tmp_path):
    store = JsonDocumentStore(tmp_path / "store.json")
    with DocumentUnitOfWork(store) as uow:
        uow.products.save(make_product("P1", name="Camera", stock=5, day_price="500"))
        uow.coupons.save(
            make_coupon(
                "SAVE10",
                value="10",
                valid_from=datetime(2020, 1, 1, tzinfo=timezone.utc),
                valid_to=datetime(2099, 1, 1, tzinfo=timezone.utc),
            )
        )
        uow.commit()
    return CliRunner(env={"RENTALS_DATA_DIR": str(tmp_path), "RENTALS_LOG_LEVEL": "WARNING"})


def _invoke(runner, *args):
    return runner.invoke(cli, list(args), catch_exceptions=False)


def _create(runner, *extra):
    return _invoke(
        runner,
        "order", "create",
        "--as", "customer:C1",
        "--vendor", "V1",
        "--start", "2030-01-10",
        "--end", "2030-01-15",
        "--lines", "P1:2",
        *extra,
    )


class TestOrderCommands:

    def test_create_shows_quotation(self, runner):
        result = _create(runner)
        assert result.exit_code == 0
        assert "Quotation #1 created" in result.output
        assert "QUOTATION" in result.output
        assert "INR 5000.00" in result.output

    def test_create_with_coupon(self, runner):
        result = _create(runner, "--coupon", "save10")
        assert result.exit_code == 0
        assert "Discount (SAVE10)" in result.output
        assert "INR 4500.00" in result.output

    def test_full_lifecycle(self, runner, tmp_path):
        _create(runner)
        for command, expected in [
            ("send", "sent"),
            ("confirm", "confirmed"),
            ("invoice", "Invoice INV-000001 created"),
            ("pickup", "picked up"),
        ]:
            result = _invoke(runner, "order", command, "--as", "vendor:V1", "--id", "1")
            assert result.exit_code == 0, result.output
            assert expected in result.output

        result = _invoke(runner, "invoice", "post", "--as", "vendor:V1", "--id", "1")
        assert "INV-000001 posted" in result.output

        result = _invoke(
            runner, "order", "return", "--as", "vendor:V1", "--id", "1", "--at", "2030-01-17T12:00"
        )
        assert result.exit_code == 0, result.output
        assert "Late fee: INR 750.00" in result.output
        assert "INV-LATE-000002" in result.output

        document = json.loads((tmp_path / "store.json").read_text())
        assert document["orders"]["1"]["status"] == "RETURNED"
        assert document["reservations"] == {}

    def test_confirm_quotation_fails_cleanly(self, runner):
        _create(runner)
        result = _invoke(runner, "order", "confirm", "--as", "vendor:V1", "--id", "1")
        assert result.exit_code == 1
        assert "Cannot confirm order in QUOTATION status" in result.output

    def test_other_vendor_rejected(self, runner):
        _create(runner)
        result = _invoke(runner, "order", "send", "--as", "vendor:V2", "--id", "1")
        assert result.exit_code == 1
        assert "Not authorized" in result.output

    def test_show_unknown_order(self, runner):
        result = _invoke(runner, "order", "show", "--as", "admin", "--id", "42")
        assert result.exit_code == 1
        assert "Order #42 not found" in result.output

    def test_bad_principal(self, runner):
        result = _invoke(runner, "order", "show", "--as", "boss", "--id", "1")
        assert result.exit_code == 2
        assert "Invalid principal" in result.output

    def test_bad_lines(self, runner):
        result = _create(runner, "--lines", "P1-2")
        assert result.exit_code == 2

    def test_rejected_coupon_still_quotes(self, runner, tmp_path):
        store = JsonDocumentStore(tmp_path / "store.json")
        with DocumentUnitOfWork(store) as uow:
            uow.coupons.save(
                make_coupon(
                    "ONCE",
                    max_uses=1,
                    used_count=1,
                    valid_from=datetime(2020, 1, 1, tzinfo=timezone.utc),
                    valid_to=datetime(2099, 1, 1, tzinfo=timezone.utc),
                )
            )
            uow.commit()

        result = _create(runner, "--coupon", "ONCE")

        assert result.exit_code == 0
        assert "Coupon not applied: Coupon usage limit reached" in result.output
        assert "INR 5000.00" in result.output

    def test_show_lists_history(self, runner):
        _create(runner)
        _invoke(runner, "order", "send", "--as", "vendor:V1", "--id", "1")

        result = _invoke(runner, "order", "show", "--as", "customer:C1", "--id", "1")

        assert result.exit_code == 0
        assert "History:" in result.output
        history = result.output.split("History:")[1].splitlines()
        assert "ORDER_CREATED" in history[1] and "by customer:C1" in history[1]
        assert "ORDER_SENT" in history[2] and "by vendor:V1" in history[2]


class TestQueryCommands:

    def _availability(self, runner, quantity):
        return _invoke(
            runner,
            "product", "availability",
            "--id", "P1", "--start", "2030-01-12", "--end", "2030-01-14",
            "--quantity", str(quantity),
        )

    def test_availability_reflects_confirmed_order(self, runner):
        _create(runner, "--lines", "P1:3")
        _invoke(runner, "order", "send", "--as", "vendor:V1", "--id", "1")
        _invoke(runner, "order", "confirm", "--as", "vendor:V1", "--id", "1")

        result = self._availability(runner, 2)
        assert result.exit_code == 0
        assert "FULL" in result.output

        result = self._availability(runner, 3)
        assert result.exit_code == 0
        assert "PARTIAL" in result.output

    def test_coupon_validate(self, runner):
        result = _invoke(runner, "coupon", "validate", "--code", "SAVE10", "--amount", "1500")
        assert result.exit_code == 0
        assert "discount INR 150.00, pay INR 1350.00" in result.output

    def test_coupon_validate_unknown(self, runner):
        result = _invoke(runner, "coupon", "validate", "--code", "NOPE", "--amount", "10")
        assert result.exit_code == 1
        assert "Invalid coupon code" in result.output
