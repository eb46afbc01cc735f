import io
import os

import pytest

from app.adapters.local_image_store import LocalImageStore
from app.schemas.product_schema import ProductImage


@pytest.fixture
def store(tmp_path):
    return LocalImageStore(
        upload_dir=str(tmp_path / "up"), url_prefix="/uploads/", placeholder="ph.png"
    )


def test_normalizes_legacy_and_object_entries():
    assert ProductImage.from_raw("a.jpg") == ProductImage(url="a.jpg")
    assert ProductImage.from_raw({"url": "b.jpg", "variantId": "V2"}).variant_tag == "V2"
    assert ProductImage.from_raw({"url": "c.jpg", "variantId": ""}).variant_tag is None
    assert ProductImage(url="d.jpg", variant_tag="T").to_record() == {"url": "d.jpg", "variantId": "T"}


def test_resolve(store):
    assert store.resolve(None) == "ph.png"
    assert store.resolve("") == "ph.png"
    assert store.resolve("a.jpg") == "/uploads/a.jpg"
    assert store.resolve("/a.jpg") == "/uploads/a.jpg"
    assert store.resolve({"url": "b.jpg", "variantId": "V"}) == "/uploads/b.jpg"
    assert store.resolve("https://cdn.example.com/x.jpg") == "https://cdn.example.com/x.jpg"
    assert store.resolve("data:image/png;base64,AAA") == "data:image/png;base64,AAA"


def test_save_and_delete(store):
    img = store.save_stream("Photo.JPG", io.BytesIO(b"pixels"), variant_tag="P1")
    assert img.variant_tag == "P1"
    assert img.url.endswith(".jpg")
    path = os.path.join(store.upload_dir, img.url)
    with open(path, "rb") as fh:
        assert fh.read() == b"pixels"

    assert store.delete(img.to_record()) is True
    assert not os.path.exists(path)
    assert store.delete(img.url) is False
    assert store.delete("https://cdn.example.com/x.jpg") is False


def test_unique_names(store):
    a = store.save_stream("a.png", io.BytesIO(b"1"))
    b = store.save_stream("a.png", io.BytesIO(b"2"))
    assert a.url != b.url
    assert a.variant_tag is None


def test_health_check(store):
    assert store.health_check() is True
