from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.adapters.local_image_store import LocalImageStore
from app.repositories.cart_repo import PersistenceError
from app.schemas.cart_schema import PendingSelection
from app.schemas.product_schema import ProductOut
from app.services.cart_service import CartService, OutOfRangeError, ValidationError
from app.services.delivery_service import UnknownRegionError
from app.utils.i18n import Locale


@pytest.fixture
def store(tmp_path):
    return LocalImageStore(upload_dir=str(tmp_path), url_prefix="/uploads/")


@pytest.fixture
def svc(db, store):
    return CartService(db, image_store=store)


@pytest.fixture
def p1():
    return ProductOut(id="p1", price=50, sizes=["S", "M"], colors=[])


@pytest.fixture
def dress():
    return ProductOut(
        id="dress",
        item_id="G-101",
        name_en="Floral Dress",
        name_ar="فستان مزهر",
        price=80,
        old_price=100,
        sizes=["2Y", "3Y"],
        colors=["Pink", "Yellow"],
        images=[{"url": "pink.jpg", "variantId": "P1"}, "yellow.jpg"],
    )


def test_repeated_add_merges_into_one_line(svc, p1):
    svc.add_item(p1, "S", None, "img1.png", None, 1)
    cart = svc.add_item(p1, "S", None, "img1.png", None, 1)
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
    assert svc.compute_subtotal() == Decimal("100")


def test_merge_sums_requested_quantities(svc, p1):
    for qty in (1, 3, 2):
        svc.add_item(p1, "M", image_url="img1.png", quantity=qty)
    assert [line.quantity for line in svc.cart.lines] == [6]
    assert svc.total_item_count() == 6


def test_different_size_color_or_image_makes_new_line(svc, dress):
    svc.add_item(dress, "2Y", "Pink", "pink.jpg")
    svc.add_item(dress, "3Y", "Pink", "pink.jpg")
    svc.add_item(dress, "2Y", "Yellow", "pink.jpg")
    svc.add_item(dress, "2Y", "Pink", "yellow.jpg")
    assert len(svc.cart.lines) == 4
    assert len({line.identity for line in svc.cart.lines}) == 4


def test_size_is_required(svc, p1):
    with pytest.raises(ValidationError):
        svc.add_item(p1, "", image_url="img1.png")
    with pytest.raises(ValidationError):
        svc.add_item(p1, None, image_url="img1.png")
    assert svc.cart.lines == []


def test_color_required_only_when_product_has_colors(svc, dress, p1):
    with pytest.raises(ValidationError):
        svc.add_item(dress, "2Y", None, "pink.jpg")
    # a color given for a colorless product is dropped
    cart = svc.add_item(p1, "S", "Red", "img1.png")
    assert cart.lines[0].color is None


def test_unknown_size_and_out_of_stock_rejected(svc, p1):
    with pytest.raises(ValidationError):
        svc.add_item(p1, "XXL", image_url="img1.png")
    sold_out = p1.model_copy(update={"in_stock": False})
    with pytest.raises(ValidationError):
        svc.add_item(sold_out, "S", image_url="img1.png")
    assert svc.cart.lines == []


def test_unit_price_captured_at_add_time(svc, p1):
    svc.add_item(p1, "S", image_url="img1.png")
    repriced = p1.model_copy(update={"price": Decimal("60")})
    svc.add_item(repriced, "S", image_url="img1.png")
    svc.add_item(repriced, "M", image_url="img1.png")
    assert svc.cart.lines[0].unit_price == Decimal("50")
    assert svc.cart.lines[0].quantity == 2
    assert svc.cart.lines[1].unit_price == Decimal("60")


def test_line_name_snapshot_follows_locale(svc, dress):
    svc.add_item(dress, "2Y", "Pink", "pink.jpg", locale=Locale.EN)
    svc.add_item(dress, "3Y", "Pink", "pink.jpg", locale=Locale.AR)
    assert svc.cart.lines[0].name == "Floral Dress"
    assert svc.cart.lines[1].name == "فستان مزهر"
    assert svc.cart.lines[0].item_id == "G-101"


def test_remove_line_reindexes(svc, p1):
    svc.add_item(p1, "S", image_url="img1.png")
    svc.add_item(p1, "M", image_url="img1.png")
    cart = svc.remove_line(0)
    assert len(cart.lines) == 1
    assert cart.lines[0].size == "M"
    with pytest.raises(OutOfRangeError):
        svc.remove_line(1)
    with pytest.raises(OutOfRangeError):
        svc.remove_line(-1)


def test_totals(svc, p1):
    assert svc.compute_subtotal() == 0
    assert svc.compute_total(20) == 0
    svc.add_item(p1, "S", image_url="img1.png", quantity=2)
    assert svc.compute_total(20) == Decimal("120")
    assert svc.compute_total(Decimal("-500")) == 0


def test_total_uses_selected_region(svc, p1):
    svc.add_item(p1, "S", image_url="img1.png")
    assert svc.compute_total() == Decimal("70")
    svc.select_region("jerusalem")
    assert svc.compute_total() == Decimal("80")
    with pytest.raises(UnknownRegionError):
        svc.select_region("mars")
    assert svc.cart.region_key == "jerusalem"


def test_pending_quantity_never_below_one():
    sel = PendingSelection(size="S")
    assert sel.adjust_quantity(+1) == 2
    assert sel.adjust_quantity(-1) == 1
    assert sel.adjust_quantity(-1) == 1
    assert sel.adjust_quantity(-10) == 1
    assert sel.quantity == 1


def test_add_selection_resolves_image_variant(svc, dress):
    sel = PendingSelection(size="2Y", color="Pink", image_index=0)
    sel.adjust_quantity(2)
    cart = svc.add_selection(dress, sel)
    line = cart.lines[0]
    assert line.image_url == "/uploads/pink.jpg"
    assert line.variant_tag == "P1"
    assert line.quantity == 3

    cart = svc.add_selection(dress, PendingSelection(size="2Y", color="Pink", image_index=1))
    assert cart.lines[1].image_url == "/uploads/yellow.jpg"
    assert cart.lines[1].variant_tag is None

    with pytest.raises(ValidationError):
        svc.add_selection(dress, PendingSelection(size="2Y", color="Pink", image_index=5))


def test_add_selection_without_images_uses_placeholder(svc, p1, store):
    cart = svc.add_selection(p1, PendingSelection(size="S"))
    assert cart.lines[0].image_url == store.placeholder


def test_cart_survives_reload(db, store, p1):
    first = CartService(db, image_store=store)
    first.add_item(p1, "S", image_url="img1.png", quantity=2)
    first.select_region("interior")

    again = CartService(db, first.cart_uuid, image_store=store)
    assert again.cart_uuid == first.cart_uuid
    assert len(again.cart.lines) == 1
    assert again.cart.lines[0].quantity == 2
    assert again.cart.lines[0].unit_price == Decimal("50")
    assert again.cart.region_key == "interior"


def test_unknown_cookie_starts_empty_cart(db, store):
    svc = CartService(db, "never-saved", image_store=store)
    assert svc.cart_uuid == "never-saved"
    assert svc.cart.lines == []


def test_failed_persist_leaves_cart_unchanged(svc, p1, monkeypatch):
    svc.add_item(p1, "S", image_url="img1.png")

    def boom(*a, **kw):
        raise PersistenceError("disk full")

    monkeypatch.setattr(svc.cart_repo, "save", boom)
    with pytest.raises(PersistenceError):
        svc.add_item(p1, "S", image_url="img1.png")
    with pytest.raises(PersistenceError):
        svc.remove_line(0)
    assert len(svc.cart.lines) == 1
    assert svc.cart.lines[0].quantity == 1


def test_database_error_surfaces_as_persistence_error(svc, db, p1, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(PersistenceError):
        svc.add_item(p1, "S", image_url="img1.png")
    assert svc.cart.lines == []


def test_clear_empties_cart_but_keeps_region(svc, p1):
    svc.add_item(p1, "S", image_url="img1.png")
    svc.select_region("jerusalem")
    cart = svc.clear()
    assert cart.lines == []
    assert cart.region_key == "jerusalem"
