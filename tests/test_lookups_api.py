import pytest
from sqlmodel import select

from astrolog.models import ImagingSession, ObjectCatalogEntry
from astrolog.services.errors import LogbookValidationError
from astrolog.services.lookups import LookupKind, clean_values


@pytest.fixture
def catalog_entries(db_session):
    db_session.add_all(
        [
            ObjectCatalogEntry(catalog_no="M31", description="Andromeda Galaxy"),
            ObjectCatalogEntry(catalog_no="M33", description="Triangulum Galaxy"),
            ObjectCatalogEntry(catalog_no="NGC 224 ", description=" Andromeda (NGC) "),
            ObjectCatalogEntry(catalog_no="M42", description="Orion Nebula"),
        ]
    )
    db_session.commit()


def test_lookup_kinds_are_a_closed_set(client):
    kinds = {entry["kind"]: entry for entry in client.get("/api/lookups").json()}
    assert set(kinds) == {"camera", "filter", "location", "mount", "telescope", "object_catalog"}
    assert kinds["filter"]["editable"] == ["name", "sort_order"]
    assert kinds["object_catalog"]["searchable"] is True
    assert client.get("/api/lookups/eyepiece").status_code == 422


def test_filters_list_in_sort_order(client, equipment):
    rows = client.get("/api/lookups/filter").json()
    assert [row["name"] for row in rows] == ["L", "R", "Ha"]


def test_add_update_and_delete_lookup_row(client):
    created = client.post("/api/lookups/telescope", json={"name": "  RedCat 51 ", "notes": ""})
    assert created.status_code == 201
    row = created.json()
    assert row["name"] == "RedCat 51"
    assert row["notes"] is None

    updated = client.put(f"/api/lookups/telescope/{row['telescope_id']}", json={"notes": "f/4.9"})
    assert updated.status_code == 200
    assert updated.json() == {"telescope_id": row["telescope_id"], "name": "RedCat 51", "notes": "f/4.9"}

    assert client.delete(f"/api/lookups/telescope/{row['telescope_id']}").status_code == 200
    assert client.get("/api/lookups/telescope").json() == []


def test_undeclared_columns_are_never_written(client):
    created = client.post("/api/lookups/camera", json={"name": "ASI533MC", "camera_id": 77})
    assert created.status_code == 201
    assert created.json()["camera_id"] != 77


def test_required_name_is_enforced(client):
    response = client.post("/api/lookups/mount", json={"name": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "name is required."


def test_clean_values_partial_keeps_only_supplied_columns():
    spec = LookupKind.FILTER.spec
    assert clean_values(spec, {"sort_order": 3}, partial=True) == {"sort_order": 3}
    assert clean_values(spec, {"name": " OIII "}) == {"name": "OIII", "sort_order": None}
    with pytest.raises(LogbookValidationError):
        clean_values(LookupKind.OBJECT_CATALOG.spec, {"description": "no number"})


def test_deleting_equipment_clears_session_reference(client, db_session, m31, equipment):
    response = client.delete(f"/api/lookups/telescope/{equipment['telescope']}")
    assert response.status_code == 200

    db_session.expire_all()
    telescope_ids = {s.telescope_id for s in db_session.exec(select(ImagingSession)).all()}
    assert telescope_ids == {None}


def test_deleting_a_filter_in_use_conflicts(client, m31, equipment):
    response = client.delete(f"/api/lookups/filter/{equipment['L']}")
    assert response.status_code == 409
    assert len(client.get("/api/lookups/filter").json()) == 3


def test_unknown_lookup_row_is_not_found(client):
    response = client.put("/api/lookups/camera/12", json={"name": "x"})
    assert response.status_code == 404
    assert response.json()["detail"] == "camera_not_found"


def test_catalog_search_needs_two_characters(client, catalog_entries):
    assert client.get("/api/catalog/search", params={"q": "M"}).json() == []
    assert client.get("/api/catalog/search", params={"q": " "}).json() == []


def test_catalog_search_matches_number_or_description(client, catalog_entries):
    results = client.get("/api/catalog/search", params={"q": "androm"}).json()
    assert results == [
        {"catalog_no": "M31", "description": "Andromeda Galaxy"},
        {"catalog_no": "NGC 224", "description": "Andromeda (NGC)"},
    ]

    numbers = [r["catalog_no"] for r in client.get("/api/catalog/search", params={"q": "m3"}).json()]
    assert numbers == ["M31", "M33"]


def test_catalog_search_is_capped(client, db_session, monkeypatch):
    from astrolog.core.config import settings

    db_session.add_all(ObjectCatalogEntry(catalog_no=f"Sh2-{n:03d}") for n in range(40))
    db_session.commit()

    assert len(client.get("/api/catalog/search", params={"q": "sh2"}).json()) == 25
    monkeypatch.setattr(settings, "catalog_search_limit", 5)
    assert len(client.get("/api/catalog/search", params={"q": "sh2"}).json()) == 5


def test_object_catalog_listing_filters_by_search(client, catalog_entries):
    rows = client.get("/api/lookups/object_catalog", params={"q": "nebula"}).json()
    assert [row["catalog_no"] for row in rows] == ["M42"]
    assert len(client.get("/api/lookups/object_catalog").json()) == 4


def test_non_integer_sort_order_is_rejected_before_writing(client):
    response = client.post("/api/lookups/filter", json={"name": "Ha", "sort_order": "first"})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("sort_order:")
    assert client.get("/api/lookups/filter").json() == []


def test_numeric_string_sort_order_is_coerced(client):
    response = client.post("/api/lookups/filter", json={"name": "OIII", "sort_order": "7"})
    assert response.status_code == 201
    assert response.json()["sort_order"] == 7


def test_non_string_name_is_rejected(client):
    response = client.post("/api/lookups/camera", json={"name": {"model": "ASI"}})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("name:")
    assert client.get("/api/lookups/camera").json() == []


def test_update_with_wrong_type_leaves_row_untouched(client, equipment):
    response = client.put(f"/api/lookups/filter/{equipment['L']}", json={"sort_order": [1, 2]})
    assert response.status_code == 400
    rows = {row["name"]: row for row in client.get("/api/lookups/filter").json()}
    assert rows["L"]["sort_order"] == 1
