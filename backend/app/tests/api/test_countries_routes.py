from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.config import settings
from app.models import Country, Product, Taxonomy, TaxonomyType, VisaRequirement, VisaStatus

API = f"{settings.API_V1_STR}/countries"


def create_country(client: TestClient, headers: dict[str, str], **fields) -> dict:
    payload = {"name": "Almanya", "country_code": "DE", "continent": "Avrupa", **fields}
    r = client.post(f"{API}/", headers=headers, json=payload)
    assert r.status_code == 200, r.text
    return r.json()


def test_create_country_assigns_slug_from_name(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    country = create_country(client, superuser_token_headers, name="Güney Kore")
    assert country["slug"] == "guney-kore"

    taxonomy = db.exec(
        select(Taxonomy).where(
            Taxonomy.type == TaxonomyType.COUNTRY, Taxonomy.model_id == country["id"]
        )
    ).one()
    assert taxonomy.slug == "guney-kore"


def test_create_country_rejects_taken_slug(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    create_country(client, superuser_token_headers)
    r = client.post(
        f"{API}/", headers=superuser_token_headers, json={"name": "Almanya"}
    )
    assert r.status_code == 400


def test_public_list_only_active_and_sorted(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    create_country(client, superuser_token_headers, name="Fransa", country_code="FR", sorted=2)
    create_country(client, superuser_token_headers, name="Almanya", sorted=1)
    create_country(client, superuser_token_headers, name="Gizli", country_code="XX", status=0)
    create_country(
        client, superuser_token_headers, name="Japonya", country_code="JP", continent="Asya"
    )

    r = client.get(f"{API}/")
    assert r.status_code == 200
    names = [c["name"] for c in r.json()["data"]]
    assert "Gizli" not in names
    assert names.index("Almanya") < names.index("Fransa")

    r = client.get(f"{API}/", params={"continent": "Asya"})
    assert [c["name"] for c in r.json()["data"]] == ["Japonya"]


def test_country_detail_includes_visa_and_products(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    country = create_country(client, superuser_token_headers)
    db.add(VisaRequirement(country_code="DE", visa_status=VisaStatus.VISA_REQUIRED))
    db.add(Product(country_id=country["id"], name="Premium", price=300))
    db.add(Product(country_id=country["id"], name="Standart", price=100))
    db.add(Product(country_id=country["id"], name="Eski", price=50, status=0))
    db.commit()

    r = client.get(f"{API}/almanya")
    assert r.status_code == 200
    body = r.json()
    assert body["slug"] == "almanya"
    assert body["visa_requirement"]["visa_status"] == "visa-required"
    assert [p["name"] for p in body["products"]] == ["Standart", "Premium"]


def test_country_detail_unknown_slug(client: TestClient) -> None:
    r = client.get(f"{API}/yok-boyle-bir-ulke")
    assert r.status_code == 404


def test_country_by_code(client: TestClient, superuser_token_headers: dict[str, str]) -> None:
    create_country(client, superuser_token_headers)
    r = client.get(f"{API}/code/de")
    assert r.status_code == 200
    assert r.json()["name"] == "Almanya"


def test_update_country_changes_slug(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    country = create_country(client, superuser_token_headers)
    r = client.patch(
        f"{API}/{country['id']}",
        headers=superuser_token_headers,
        json={"title": "Almanya Vizesi", "slug": "Almanya Vize"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Almanya Vizesi"
    assert body["slug"] == "almanya-vize"
    assert body["updated_at"] is not None


def test_delete_country_removes_taxonomy(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    country = create_country(client, superuser_token_headers)
    r = client.delete(f"{API}/{country['id']}", headers=superuser_token_headers)
    assert r.status_code == 200
    assert db.exec(select(Taxonomy)).all() == []
    assert client.get(f"{API}/almanya").status_code == 404


def test_duplicates_keep_oldest(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    db.add(Country(name="Mısır", created_at=datetime(2020, 1, 1, tzinfo=timezone.utc)))
    db.add(Country(name="Mısır", created_at=datetime(2023, 1, 1, tzinfo=timezone.utc)))
    db.add(Country(name="Fas"))
    db.commit()

    r = client.get(f"{API}/admin/duplicates", headers=superuser_token_headers)
    report = r.json()
    assert report["duplicate_entries"] == 1
    assert report["duplicates"][0]["name"] == "Mısır"

    r = client.delete(f"{API}/admin/duplicates", headers=superuser_token_headers)
    assert r.json()["deleted_count"] == 1

    db.expire_all()
    remaining = db.exec(select(Country).where(Country.name == "Mısır")).all()
    assert len(remaining) == 1
    assert remaining[0].created_at.year == 2020


def test_fix_seo_preview_and_apply(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    create_country(client, superuser_token_headers, title=f"Almanya Vizesi | {settings.SITE_NAME}")

    r = client.get(f"{API}/admin/fix-seo", headers=superuser_token_headers)
    preview = r.json()
    assert preview["dry_run"] is True
    assert preview["fixed_countries"] == 1
    db.expire_all()
    assert db.exec(select(Country)).one().meta_title is None

    r = client.post(f"{API}/admin/fix-seo", headers=superuser_token_headers)
    assert r.json()["dry_run"] is False
    db.expire_all()
    country = db.exec(select(Country)).one()
    assert country.title == "Almanya Vizesi"
    assert country.meta_title == f"Almanya Vizesi - {settings.SITE_NAME}"
    assert len(country.meta_description) >= 120


def test_incomplete_report(client: TestClient, superuser_token_headers: dict[str, str]) -> None:
    create_country(client, superuser_token_headers)
    r = client.get(f"{API}/admin/incomplete", headers=superuser_token_headers)
    body = r.json()
    assert body["count"] == 1
    assert "contents" in body["countries"][0]["missing"]


def test_translate_country_fills_english_fields(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    country = create_country(client, superuser_token_headers, title="Almanya Vizesi")

    mock_message = MagicMock()
    mock_message.content = "Germany Visa"
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]

    mock_completions = MagicMock()
    mock_completions.create = AsyncMock(return_value=mock_response)
    mock_client_instance = AsyncMock()
    mock_client_instance.chat = MagicMock(completions=mock_completions)

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        r = client.post(f"{API}/{country['id']}/translate", headers=superuser_token_headers)

    assert r.status_code == 200
    assert r.json()["title_en"] == "Germany Visa"
    mock_completions.create.assert_called_once()
