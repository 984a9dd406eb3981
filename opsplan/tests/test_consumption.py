"""
═══════════════════════════════════════════════════════════════════════════════
                    OPSPLAN — Stock Consumption Tests
═══════════════════════════════════════════════════════════════════════════════

Stage gating, scrap fallback, overrides and remaining-stock status.
Stock fixture: s1 Core PCB usage 2 (on hand 500, reorder 200, min 100),
s2 Housing usage 0.5 (on hand 400).
"""

import logging

import pytest

from opsplan.inventory.consumption import (
    StockStatus,
    batch_consumption,
    classify_stock,
    completed_stages,
    stock_consumption,
    stock_remaining_after_production,
)
from opsplan.scenario.models import ProcessStage


def _entry(entry_id, batch_id, process_id, status="Complete", day="2024-01-08"):
    return {"id": entry_id, "batchId": batch_id, "date": day, "processId": process_id, "status": status}


class TestCompletionGate:

    def test_stages_tracked_independently(self, make_snapshot, stage_processes):
        snapshot = make_snapshot(
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1"}, {"id": "b2", "batchNumber": "B2"}],
            schedule=[
                _entry("e1", "b1", "pa"),
                _entry("e2", "b1", "pp", status="Planned"),
                _entry("e3", "b2", "pp"),
            ],
        )
        stages = completed_stages(snapshot)
        assert stages["b1"] == {ProcessStage.ASSEMBLY}
        assert stages["b2"] == {ProcessStage.POST_ASSEMBLY}

    def test_unknown_template_belongs_to_no_stage(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100}],
            schedule=[_entry("e1", "b1", "missing")],
        )
        assert completed_stages(snapshot) == {}
        assert stock_consumption(snapshot) == {"s1": 0.0, "s2": 0.0}

    def test_nothing_consumed_without_completion(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100, "scrapQty": 5,
                      "consumptionOverrides": "Housing, 9"}],
            schedule=[_entry("e1", "b1", "pa", status="In Progress")],
        )
        assert stock_consumption(snapshot) == {"s1": 0.0, "s2": 0.0}
        assert batch_consumption(snapshot)[0].counted is False


class TestGoodUnits:

    def test_assembly_complete_scenario(self, make_snapshot, stage_processes, bom_stock):
        """Good 100 at usage 2 with 500 on hand leaves 300, OK."""
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        consumed = stock_consumption(snapshot)
        assert consumed["s1"] == pytest.approx(200.0)
        assert consumed["s2"] == pytest.approx(50.0)

        pcb = stock_remaining_after_production(snapshot)[0]
        assert pcb.remaining_qty == pytest.approx(300.0)
        assert pcb.status == StockStatus.OK

    def test_post_assembly_alone_does_not_count_good_units(
        self, make_snapshot, stage_processes, bom_stock
    ):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100}],
            schedule=[_entry("e1", "b1", "pp")],
        )
        assert stock_consumption(snapshot)["s1"] == 0.0

    def test_additive_across_batches(self, make_snapshot, stage_processes, bom_stock):
        single = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        split = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[
                {"id": "b1", "batchNumber": "B1", "goodQty": 40},
                {"id": "b2", "batchNumber": "B2", "goodQty": 60},
            ],
            schedule=[_entry("e1", "b1", "pa"), _entry("e2", "b2", "pa")],
        )
        assert stock_consumption(split) == pytest.approx(stock_consumption(single))


class TestScrap:

    def test_itemized_rejects(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "scrapStage": "Assembly", "scrapQty": 10,
                      "componentRejects": "Core PCB, 3"}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        assert stock_consumption(snapshot) == {"s1": 3.0, "s2": 0.0}
        assert batch_consumption(snapshot)[0].scrap_fallback_used is False

    def test_assembly_fallback_matches_post_assembly_bom(
        self, make_snapshot, stage_processes, bom_stock
    ):
        assembly = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "scrapStage": "Assembly", "scrapQty": 10,
                      "componentRejects": "Unknown part, 4"}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        post = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "scrapStage": "Post-Assembly", "scrapQty": 10}],
            schedule=[_entry("e1", "b1", "pp")],
        )
        assert stock_consumption(assembly) == pytest.approx(stock_consumption(post))
        assert stock_consumption(post) == pytest.approx({"s1": 20.0, "s2": 5.0})
        assert batch_consumption(assembly)[0].scrap_fallback_used is True

    def test_post_assembly_scrap_needs_post_assembly_complete(
        self, make_snapshot, stage_processes, bom_stock
    ):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "scrapStage": "Post-Assembly", "scrapQty": 10}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        assert stock_consumption(snapshot) == {"s1": 0.0, "s2": 0.0}

    def test_scrap_without_stage_template_is_logged(
        self, make_snapshot, bom_stock, caplog
    ):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=[{"id": "p", "name": "Legacy build"}],
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 1,
                      "scrapStage": "Post-Assembly", "scrapQty": 2}],
            schedule=[_entry("e1", "b1", "p")],
        )
        with caplog.at_level(logging.WARNING, logger="opsplan.inventory.consumption"):
            consumed = stock_consumption(snapshot)

        assert consumed == pytest.approx({"s1": 2.0, "s2": 0.5})
        assert "Post-Assembly scrap not counted" in caplog.text


class TestOverrides:

    def test_override_replaces_scrap_rejects(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "scrapStage": "Assembly", "scrapQty": 4,
                      "componentRejects": "Core PCB, 3",
                      "consumptionOverrides": "Core PCB, 1"}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        assert stock_consumption(snapshot) == {"s1": 1.0, "s2": 0.0}

    def test_override_replaces_computed_value(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 100,
                      "consumptionOverrides": "Housing, 7"}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        consumed = stock_consumption(snapshot)
        assert consumed["s2"] == 7.0
        assert consumed["s1"] == pytest.approx(200.0)
        assert batch_consumption(snapshot)[0].overridden_items == ("s2",)

    def test_override_applies_with_post_assembly_only(
        self, make_snapshot, stage_processes, bom_stock
    ):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "consumptionOverrides": "Core PCB, 12"}],
            schedule=[_entry("e1", "b1", "pp")],
        )
        assert stock_consumption(snapshot)["s1"] == 12.0


class TestRemainingStock:

    @pytest.mark.parametrize("remaining,expected", [
        (50, StockStatus.BELOW_MIN),
        (150, StockStatus.REORDER),
        (200, StockStatus.OK),
        (1000, StockStatus.OK),
    ])
    def test_classify(self, remaining, expected):
        assert classify_stock(remaining, min_qty=100, reorder_point_qty=200) == expected

    def test_thresholds_optional(self):
        assert classify_stock(-5, None, None) == StockStatus.OK

    def test_below_min_beats_reorder(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 225}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        pcb = stock_remaining_after_production(snapshot)[0]
        assert pcb.remaining_qty == pytest.approx(50.0)
        assert pcb.status == StockStatus.BELOW_MIN

    def test_remaining_can_go_negative(self, make_snapshot, stage_processes, bom_stock):
        snapshot = make_snapshot(
            stock=bom_stock,
            processes=stage_processes,
            batches=[{"id": "b1", "batchNumber": "B1", "goodQty": 300}],
            schedule=[_entry("e1", "b1", "pa")],
        )
        pcb = stock_remaining_after_production(snapshot)[0]
        assert pcb.remaining_qty == pytest.approx(-100.0)

    def test_explicit_consumed_map(self, make_snapshot, bom_stock):
        positions = stock_remaining_after_production(make_snapshot(stock=bom_stock), {"s2": 390})
        assert positions[1].remaining_qty == pytest.approx(10.0)
        assert positions[0].consumed_qty == 0.0
