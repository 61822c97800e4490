import threading
import time

import pytest

from uniform_registry.image_storage import ImageUpload
from uniform_registry.timestamps import MonotonicTimestamp
from uniform_registry.uniform_service import NotFoundError, UniformService, ValidationError
from uniform_registry.uniform_store import CorruptStoreError, UniformStore


def test_create_appends_record_with_null_image_slots(service, store, sample_uniform):
    record = service.create_uniform(sample_uniform, {})

    assert record == {
        "id": record["id"],
        **sample_uniform,
        "uniformImage": None,
        "compoundImage": None,
        "churchImage": None,
    }
    assert store.load_all() == [record]


def test_create_keeps_field_order(service, sample_uniform):
    record = service.create_uniform(sample_uniform, {})
    assert list(record) == [
        "id",
        "school",
        "schoolType",
        "uniformCombo",
        "uniformImage",
        "compoundWear",
        "compoundImage",
        "churchWear",
        "churchImage",
    ]


def test_create_omits_text_fields_not_submitted(service):
    record = service.create_uniform({"school": "A", "uniformCombo": "B"}, {})
    assert "schoolType" not in record
    assert "churchWear" not in record
    assert record["churchImage"] is None


def test_create_stores_uploaded_images(service, images):
    record = service.create_uniform(
        {"school": "A", "uniformCombo": "B"},
        {"churchImage": ImageUpload("church.png", b"png")},
    )

    assert record["churchImage"].startswith("/uploads/")
    assert record["churchImage"].endswith(".png")
    assert record["uniformImage"] is None
    stored = images.uploads_dir / record["churchImage"].rsplit("/", 1)[1]
    assert stored.read_bytes() == b"png"


@pytest.mark.parametrize(
    "fields",
    [
        {"uniformCombo": "B"},
        {"school": "A"},
        {"school": "", "uniformCombo": "B"},
        {"school": "A", "uniformCombo": ""},
    ],
)
def test_create_requires_school_and_combo(service, store, images, fields):
    with pytest.raises(ValidationError):
        service.create_uniform(fields, {"uniformImage": ImageUpload("a.jpg", b"x")})

    assert store.load_all() == []
    assert list(images.uploads_dir.iterdir()) == []


def test_ids_are_unique_when_clock_stands_still(store, images):
    service = UniformService(store, images, ids=MonotonicTimestamp(clock=lambda: 5.0))
    first = service.create_uniform({"school": "A", "uniformCombo": "B"}, {})
    second = service.create_uniform({"school": "C", "uniformCombo": "D"}, {})

    assert first["id"] == "5000"
    assert second["id"] == "5001"


def test_ids_skip_values_already_in_store(store, images):
    store.save_all([{"id": "5000"}, {"id": "5001"}])
    service = UniformService(store, images, ids=MonotonicTimestamp(clock=lambda: 5.0))

    record = service.create_uniform({"school": "A", "uniformCombo": "B"}, {})
    assert record["id"] == "5002"


def test_update_only_overwrites_submitted_fields(service, sample_uniform):
    created = service.create_uniform(
        sample_uniform, {"uniformImage": ImageUpload("u.jpg", b"u")}
    )

    updated = service.update_uniform(created["id"], {"schoolType": "Primary"}, {})

    assert updated == {**created, "schoolType": "Primary"}


def test_update_empty_string_overwrites(service, sample_uniform):
    created = service.create_uniform(sample_uniform, {})
    updated = service.update_uniform(created["id"], {"churchWear": ""}, {})
    assert updated["churchWear"] == ""


def test_update_ignores_id_and_unknown_fields(service, sample_uniform):
    created = service.create_uniform(sample_uniform, {})
    updated = service.update_uniform(created["id"], {"id": "other", "rank": "1"}, {})
    assert updated == created


def test_update_keeps_position(service, store):
    ids = [
        service.create_uniform({"school": s, "uniformCombo": "x"}, {})["id"]
        for s in "ABC"
    ]

    service.update_uniform(ids[1], {"school": "B2"}, {})

    assert [r["school"] for r in store.load_all()] == ["A", "B2", "C"]


def test_update_replaces_image_and_deletes_old_file(service, images, sample_uniform):
    created = service.create_uniform(
        sample_uniform, {"compoundImage": ImageUpload("old.jpg", b"old")}
    )
    old_file = images.uploads_dir / created["compoundImage"].rsplit("/", 1)[1]

    updated = service.update_uniform(
        created["id"], {}, {"compoundImage": ImageUpload("new.jpg", b"new")}
    )

    assert updated["compoundImage"] != created["compoundImage"]
    assert not old_file.exists()
    new_file = images.uploads_dir / updated["compoundImage"].rsplit("/", 1)[1]
    assert new_file.read_bytes() == b"new"


def test_update_keeps_old_files_when_cleanup_disabled(store, images, sample_uniform):
    service = UniformService(store, images, delete_orphaned_images=False)
    created = service.create_uniform(
        sample_uniform, {"uniformImage": ImageUpload("old.jpg", b"old")}
    )

    service.update_uniform(created["id"], {}, {"uniformImage": ImageUpload("new.jpg", b"new")})

    assert len(list(images.uploads_dir.iterdir())) == 2


def test_update_unknown_id(service, store, images, sample_uniform):
    created = service.create_uniform(sample_uniform, {})

    with pytest.raises(NotFoundError):
        service.update_uniform("missing", {"school": "X"}, {"uniformImage": ImageUpload("a.jpg", b"x")})

    assert store.load_all() == [created]
    assert list(images.uploads_dir.iterdir()) == []


def test_delete_removes_record_and_keeps_order(service, store):
    ids = [
        service.create_uniform({"school": s, "uniformCombo": "x"}, {})["id"]
        for s in "ABCD"
    ]

    service.delete_uniform(ids[1])

    assert [r["id"] for r in store.load_all()] == [ids[0], ids[2], ids[3]]


def test_delete_removes_image_files(service, images, sample_uniform):
    created = service.create_uniform(
        sample_uniform,
        {
            "uniformImage": ImageUpload("u.jpg", b"u"),
            "churchImage": ImageUpload("c.jpg", b"c"),
        },
    )
    assert len(list(images.uploads_dir.iterdir())) == 2

    service.delete_uniform(created["id"])

    assert list(images.uploads_dir.iterdir()) == []


def test_delete_unknown_id(service, store, sample_uniform):
    service.create_uniform(sample_uniform, {})

    with pytest.raises(NotFoundError):
        service.delete_uniform("missing")

    assert len(store.load_all()) == 1


def test_failed_save_discards_new_uploads(service, store, images, monkeypatch):
    def broken_save(records):
        raise OSError("disk full")

    monkeypatch.setattr(store, "save_all", broken_save)

    with pytest.raises(OSError):
        service.create_uniform(
            {"school": "A", "uniformCombo": "B"},
            {"uniformImage": ImageUpload("a.jpg", b"x")},
        )

    assert list(images.uploads_dir.iterdir()) == []


def test_corrupt_store_propagates(service, store):
    store.data_file.write_text("][")
    with pytest.raises(CorruptStoreError):
        service.list_uniforms()
    with pytest.raises(CorruptStoreError):
        service.create_uniform({"school": "A", "uniformCombo": "B"}, {})


class SlowStore(UniformStore):
    """Widens the gap between reading and writing the collection."""

    def load_all(self):
        records = super().load_all()
        time.sleep(0.05)
        return records


def test_concurrent_creates_all_survive(tmp_path, images):
    store = SlowStore(tmp_path / "uniforms.json")
    store.ensure_exists()
    service = UniformService(store, images)
    barrier = threading.Barrier(5)
    errors = []

    def create(n):
        barrier.wait()
        try:
            service.create_uniform({"school": f"School {n}", "uniformCombo": "x"}, {})
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=create, args=(n,)) for n in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    records = store.load_all()
    assert errors == []
    assert sorted(r["school"] for r in records) == [f"School {n}" for n in range(5)]
    assert len({r["id"] for r in records}) == 5
