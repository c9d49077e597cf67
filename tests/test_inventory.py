import pytest

from mfgops.common.exceptions import NotFoundError, ValidationError
from mfgops.models.inventory import InventoryItemType, InventoryStatus, TransactionType
from mfgops.services.inventory_service import (
    adjust_stock,
    calculate_status,
    create_inventory_item,
    generate_missing_inventory_items,
    get_inventory_stats,
    get_unresolved_alerts,
    list_alerts,
    list_inventory_with_details,
    list_transactions,
    mark_all_alerts_read,
    refresh_alerts,
    set_stock,
    sweep_alerts,
    update_inventory_item,
)


def _track(store, supplier_item, **kwargs):
    return create_inventory_item(store, InventoryItemType.SUPPLIER_MATERIAL, supplier_item.id, **kwargs)


def test_status_boundaries():
    assert calculate_status(100, 100, 200) == InventoryStatus.IN_STOCK
    assert calculate_status(200, 100, 200) == InventoryStatus.IN_STOCK
    assert calculate_status(99.5, 100, 200) == InventoryStatus.LOW_STOCK
    assert calculate_status(200.5, 100, 200) == InventoryStatus.OVERSTOCK
    assert calculate_status(0, 100, 200) == InventoryStatus.OUT_OF_STOCK
    assert calculate_status(1000, 100, None) == InventoryStatus.IN_STOCK


def test_initial_stock_is_recorded(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=40, min_stock_level=10)
    assert item.unit == "kg"
    assert item.item_name == "Coconut Oil"
    [transaction] = list_transactions(store, item.id)
    assert transaction.reason == "Initial Stock"
    assert transaction.stock_after == pytest.approx(40)


def test_tracking_twice_is_rejected(store, catalogue):
    _track(store, catalogue["material_a"])
    with pytest.raises(ValidationError):
        _track(store, catalogue["material_a"])
    with pytest.raises(NotFoundError):
        create_inventory_item(store, InventoryItemType.SUPPLIER_LABEL, "SLB-MISSING")


def test_ledger_follows_every_change(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=0, min_stock_level=10)
    adjust_stock(store, item.id, 50, reason="Delivery")
    item = adjust_stock(store, item.id, -20, reason="Production")

    assert item.current_stock == pytest.approx(30)
    transactions = list_transactions(store, item.id)
    assert len(transactions) == 2
    out = next(t for t in transactions if t.type == TransactionType.OUT)
    assert (out.stock_before, out.stock_after, out.quantity) == (50, 30, 20)
    assert item.current_stock in {t.stock_after for t in transactions}


def test_stock_cannot_go_negative(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=5)
    with pytest.raises(ValidationError):
        adjust_stock(store, item.id, -6, reason="Production")
    with pytest.raises(ValidationError):
        set_stock(store, item.id, -1)
    assert store.get("inventory_items", item.id).current_stock == pytest.approx(5)
    assert len(list_transactions(store, item.id)) == 1


def test_set_stock_writes_adjustment(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=5, min_stock_level=2)
    item = set_stock(store, item.id, 12, reason="Cycle count")
    assert item.current_stock == pytest.approx(12)
    assert {t.type for t in list_transactions(store, item.id)} == {TransactionType.IN, TransactionType.ADJUSTMENT}


def test_new_alert_supersedes_old_one(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=0, min_stock_level=100)
    assert [a.alert_type for a in get_unresolved_alerts(store, item.id)] == [InventoryStatus.OUT_OF_STOCK]

    item = adjust_stock(store, item.id, 50, reason="Delivery")
    unresolved = get_unresolved_alerts(store, item.id)
    assert len(unresolved) == 1
    assert unresolved[0].alert_type == InventoryStatus.LOW_STOCK
    assert len(list_alerts(store, include_resolved=True, inventory_item_id=item.id)) == 2

    refresh_alerts(store, item)
    assert len(get_unresolved_alerts(store, item.id)) == 1


def test_back_in_stock_clears_alerts(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=0, min_stock_level=10)
    adjust_stock(store, item.id, 50, reason="Delivery")
    assert get_unresolved_alerts(store, item.id) == []


def test_threshold_change_reclassifies(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=50, min_stock_level=10)
    assert item.status == InventoryStatus.IN_STOCK
    item = update_inventory_item(store, item.id, min_stock_level=80)
    assert item.status == InventoryStatus.LOW_STOCK
    assert len(get_unresolved_alerts(store, item.id)) == 1
    with pytest.raises(ValidationError):
        update_inventory_item(store, item.id, max_stock_level=20)


def test_sweep_only_adds_missing_alerts(store, catalogue):
    item = _track(store, catalogue["material_a"], current_stock=5, min_stock_level=10)
    assert sweep_alerts(store) == 0
    for alert in get_unresolved_alerts(store, item.id):
        store.update("inventory_alerts", alert.id, {"is_resolved": True})
    assert sweep_alerts(store) == 1
    assert mark_all_alerts_read(store) == 1


def test_untracked_items_show_as_placeholders(store, catalogue):
    _track(store, catalogue["material_a"], current_stock=10, min_stock_level=5)
    details = list_inventory_with_details(store)
    by_item = {d.item_id: d for d in details}

    assert by_item[catalogue["material_a"].id].is_tracked is True
    # 10 kg at 20/kg + 5%
    assert by_item[catalogue["material_a"].id].stock_value == pytest.approx(210)
    placeholder = by_item[catalogue["bottle"].id]
    assert placeholder.is_tracked is False
    assert placeholder.id is None
    assert placeholder.current_stock == 0
    assert store.get_all("inventory_items")[0].item_id == catalogue["material_a"].id
    assert len(store.get_all("inventory_items")) == 1

    tracked_only = list_inventory_with_details(store, include_untracked=False)
    assert [d.item_id for d in tracked_only] == [catalogue["material_a"].id]


def test_stats_and_generation(store, catalogue):
    _track(store, catalogue["material_a"], current_stock=10, min_stock_level=5)
    stats = get_inventory_stats(store)
    assert stats.total_items == 5
    assert stats.tracked_items == 1
    assert stats.untracked_items == 4
    assert stats.in_stock == 1
    assert stats.total_value == pytest.approx(210)

    created = generate_missing_inventory_items(store, min_stock_level=1)
    assert len(created) == 4
    stats = get_inventory_stats(store)
    assert stats.tracked_items == 5
    assert stats.out_of_stock == 4
    assert stats.critical_alerts == 4
