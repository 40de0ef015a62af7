"""End-to-end flows through the Storefront composition root."""

from ordering.order.order import OrderStatus, orders_namespace
from shared.config import ProgressionMode

from app import run_demo


def test_checkout_then_follow_to_delivery(make_storefront, store, run, eventually, settle):
    storefront = make_storefront(auth_token="token-001")
    run(storefront.start())
    storefront.add_to_cart("prod1")
    storefront.add_to_cart("prod1")
    storefront.add_to_cart("prod3")
    assert storefront.cart.total_display == "244.98"

    order = run(storefront.checkout())
    assert storefront.cart.is_empty

    tracker = storefront.new_tracker()
    tracker.track(order.id)
    eventually(lambda: tracker.status is OrderStatus.DELIVERED)
    settle(0.05)

    [stored] = run(storefront.history.list_orders())
    assert stored.id == order.id
    assert stored.status is OrderStatus.DELIVERED
    assert stored.owner_id == "cust-001"
    assert [write[0] for write in store.writes] == ["create", "update", "update", "update", "update"]
    assert store.writes[0][1] == orders_namespace("test-app", "cust-001")

    tracker.stop()


def test_without_progression_orders_stay_processing(make_storefront, store, run, settle):
    storefront = make_storefront(order_progression=ProgressionMode.NONE)
    run(storefront.start())
    storefront.add_to_cart("prod2")
    order = run(storefront.checkout())

    tracker = storefront.new_tracker()
    tracker.track(order.id)
    settle(0.05)

    assert tracker.status is OrderStatus.PROCESSING
    assert not tracker.has_pending_advance
    assert [write[0] for write in store.writes] == ["create"]
    tracker.stop()


def test_stopping_one_tracker_leaves_another_running(make_storefront, run, settle):
    storefront = make_storefront(order_progression=ProgressionMode.NONE)
    run(storefront.start())
    storefront.add_to_cart("prod4")
    order = run(storefront.checkout())

    first, second = storefront.new_tracker(), storefront.new_tracker()
    first.track(order.id)
    second.track(order.id)
    settle()
    first.stop()

    assert second.status is OrderStatus.PROCESSING
    second.stop()


def test_catalogue_is_exposed(make_storefront):
    storefront = make_storefront()
    assert [product.id for product in storefront.products()] == ["prod1", "prod2", "prod3", "prod4"]


def test_demo_prints_each_status(make_storefront, run, capsys):
    storefront = make_storefront()

    run(run_demo(storefront, ["prod1", "prod3"]))

    output = capsys.readouterr().out
    assert "cart total 144.99" in output
    for status in OrderStatus:
        assert status.value in output


def test_demo_reports_rejected_checkout(make_storefront, store, run, capsys):
    storefront = make_storefront()

    run(run_demo(storefront, []))

    assert "Checkout failed" in capsys.readouterr().out
    assert store.writes == []
