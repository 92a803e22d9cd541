import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cms_admin.api.v1.routes.content_types import limiter
from cms_admin.models import ContentField, ContentType

pytestmark = pytest.mark.unit

IMPORT_URL = "/v1/content-types/import"

CASE = {"slug": "case", "singular": "Case", "plural": "Cases"}


def test_import_creates_new_content_type(client: TestClient, admin_headers, db_session: Session):
    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "status", "type": "select"}]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["fieldsImported"] == 1
    assert body["replacedExisting"] is False
    assert body["contentType"]["slug"] == "case"
    assert body["contentType"]["label_singular"] == "Case"
    assert body["contentType"]["name"] == "Cases"
    assert body["contentType"]["id"]

    fields = db_session.query(ContentField).all()
    assert [(f.field_key, f.type) for f in fields] == [("status", "select")]


def test_reimport_replaces_field_set(client: TestClient, admin_headers):
    client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "status", "type": "select"}]},
        headers=admin_headers,
    )

    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "notes", "type": "text"}]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["replacedExisting"] is True

    detail = client.get("/v1/content-types/case", headers=admin_headers).json()
    assert [(f["field_key"], f["type"]) for f in detail["fields"]] == [("notes", "text")]


def test_dry_run_reports_without_writing(client: TestClient, admin_headers, db_session: Session):
    response = client.post(
        IMPORT_URL,
        json={
            "contentType": CASE,
            "fields": [{"key": "status"}, {"key": "  "}, {"field_key": "notes"}],
            "dryRun": True,
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "dryRun": True,
        "slug": "case",
        "willCreateOrUpdate": True,
        "fieldsProvided": 3,
        "fieldsNormalized": 2,
    }
    assert db_session.query(ContentType).count() == 0
    assert db_session.query(ContentField).count() == 0


@pytest.mark.parametrize("dry_run", ["true", 1])
def test_truthy_dry_run_does_not_replace_fields(
    client: TestClient, admin_headers, db_session: Session, dry_run
):
    client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "status"}]},
        headers=admin_headers,
    )
    stored_ids = {f.id for f in db_session.query(ContentField).all()}

    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}], "dryRun": dry_run},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["dryRun"] is True
    assert {f.id for f in db_session.query(ContentField).all()} == stored_ids


def test_truthy_dry_run_on_new_slug_writes_nothing(
    client: TestClient, admin_headers, db_session: Session
):
    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}], "dryRun": "true"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert db_session.query(ContentType).count() == 0
    assert db_session.query(ContentField).count() == 0


@pytest.mark.parametrize(
    "body, message",
    [
        ({"fields": []}, "contentType and fields are required"),
        ({"contentType": CASE, "fields": "status"}, "contentType and fields are required"),
        (
            {"contentType": CASE, "fields": [{"key": "k"}] * 501},
            "Too many fields (501). Max allowed is 500.",
        ),
        (
            {"contentType": {"slug": "case"}, "fields": [{"key": "k"}]},
            "contentType.slug (or key), contentType.singular, and contentType.plural are required",
        ),
        ({"contentType": CASE, "fields": [{"key": ""}]}, "No valid fields provided"),
    ],
)
def test_validation_errors_return_400(
    client: TestClient, admin_headers, db_session: Session, body, message
):
    response = client.post(IMPORT_URL, json=body, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert db_session.query(ContentType).count() == 0


def test_malformed_json_is_invalid_payload(client: TestClient, admin_headers):
    response = client.post(
        IMPORT_URL,
        content=b"{not json",
        headers={**admin_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "contentType and fields are required"}


def test_write_failure_returns_500_and_leaves_store_unchanged(
    client: TestClient, admin_headers, db_session: Session
):
    client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "status", "type": "select"}]},
        headers=admin_headers,
    )

    response = client.post(
        IMPORT_URL,
        json={
            "contentType": {"slug": "case", "singular": "Matter", "plural": "Matters"},
            "fields": [{"key": "notes"}, {"key": "notes"}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Import failed"
    assert body["message"]

    detail = client.get("/v1/content-types/case", headers=admin_headers).json()
    assert detail["label_singular"] == "Case"
    assert [f["field_key"] for f in detail["fields"]] == ["status"]


def test_import_requires_token(client: TestClient):
    response = client.post(IMPORT_URL, json={"contentType": CASE, "fields": [{"key": "k"}]})
    assert response.status_code == 401


def test_import_requires_admin_role(client: TestClient, editor_headers, db_session: Session):
    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}]},
        headers=editor_headers,
    )

    assert response.status_code == 403
    assert db_session.query(ContentType).count() == 0


def test_import_accepts_nested_admin_role(client: TestClient, make_headers):
    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}], "dryRun": True},
        headers=make_headers({"sub": "u1", "user": {"role": "Admin"}}),
    )
    assert response.status_code == 200


def test_token_without_role_is_not_admin(client: TestClient, make_headers):
    response = client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}], "dryRun": True},
        headers=make_headers({"sub": "u1"}),
    )
    assert response.status_code == 403


def test_list_content_types(client: TestClient, admin_headers, editor_headers):
    for slug in ("b-type", "a-type"):
        client.post(
            IMPORT_URL,
            json={"contentType": {**CASE, "slug": slug}, "fields": [{"key": "k"}]},
            headers=admin_headers,
        )

    response = client.get("/v1/content-types", headers=editor_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [item["slug"] for item in body["items"]] == ["a-type", "b-type"]
    assert body["limit"] == 100
    assert body["offset"] == 0


def test_list_rejects_bad_limit(client: TestClient, editor_headers):
    response = client.get("/v1/content-types?limit=0", headers=editor_headers)
    assert response.status_code == 400


def test_get_content_type_orders_fields(client: TestClient, admin_headers, editor_headers):
    client.post(
        IMPORT_URL,
        json={
            "contentType": CASE,
            "fields": [
                {"key": "second", "order_index": 5},
                {"key": "first", "order_index": 1, "options": ["x"]},
            ],
        },
        headers=admin_headers,
    )

    response = client.get("/v1/content-types/case", headers=editor_headers)

    assert response.status_code == 200
    fields = response.json()["fields"]
    assert [f["field_key"] for f in fields] == ["first", "second"]
    assert fields[0]["config"]["options"] == ["x"]


def test_get_unknown_content_type(client: TestClient, editor_headers):
    response = client.get("/v1/content-types/missing", headers=editor_headers)
    assert response.status_code == 404


def test_delete_content_type(client: TestClient, admin_headers, editor_headers, db_session: Session):
    client.post(
        IMPORT_URL,
        json={"contentType": CASE, "fields": [{"key": "k"}]},
        headers=admin_headers,
    )

    assert client.delete("/v1/content-types/case", headers=editor_headers).status_code == 403
    assert client.delete("/v1/content-types/case", headers=admin_headers).status_code == 204
    assert client.delete("/v1/content-types/case", headers=admin_headers).status_code == 404
    assert db_session.query(ContentField).count() == 0


def test_import_is_rate_limited(client: TestClient, admin_headers, monkeypatch):
    monkeypatch.setenv("IMPORT_RATE_LIMIT", "1/minute")
    limiter.enabled = True
    limiter.reset()
    body = {"contentType": CASE, "fields": [{"key": "k"}], "dryRun": True}

    try:
        assert client.post(IMPORT_URL, json=body, headers=admin_headers).status_code == 200
        assert client.post(IMPORT_URL, json=body, headers=admin_headers).status_code == 429
    finally:
        limiter.reset()
