import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from inmobiliaria.adapters.ingestion.csv_upload import parse_csv_upload
from inmobiliaria.adapters.ingestion.json_upload import parse_json_upload
from inmobiliaria.adapters.repos.images import ImageRepository
from inmobiliaria.models import DwellingType, ImportSource, Property, SaleState
from inmobiliaria.service_layer.duplicates import (
    REASON_SAME_TITLE_LOCATION,
    REASON_SAME_URL,
    REASON_SAME_URL_IN_BATCH,
)
from inmobiliaria.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from inmobiliaria.service_layer.use_cases.import_listings import import_rows

from factories import scraped_row, scraper_document


async def _count_properties(session) -> int:
    return int((await session.execute(select(func.count()).select_from(Property))).scalar_one())


async def _seed(uow, **fields):
    prop = await uow.properties.add(**fields)
    await uow.commit()
    return prop


async def test_three_row_scenario_new_duplicate_error(uow, session):
    await _seed(
        uow,
        title="Casa existente",
        price=150000,
        locality="Vic",
        province="Barcelona",
        source_url="https://www.idealista.com/inmueble/2/",
    )

    doc = scraper_document(
        [
            scraped_row(1, titulo="Ático con terraza", precio="240.000 €"),
            scraped_row(2),
            scraped_row(3, precio="no-disponible"),
        ]
    )
    report = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)
    out = report.to_dict()

    assert out["summary"] == {"total": 3, "success": 1, "duplicates": 1, "errors": 1}
    assert [d["row"] for d in out["details"]] == [1, 2, 3]
    assert [d["status"] for d in out["details"]] == ["success", "duplicate", "error"]

    ok, dup, err = out["details"]
    assert ok["title"] == "Ático con terraza"
    assert ok["id"]
    assert dup["url"] == "https://www.idealista.com/inmueble/2/"
    assert dup["reason"] == REASON_SAME_URL
    assert "price" in err["error"]

    assert out["metadata"]["total"] == 3
    assert await _count_properties(session) == 2

    stored = await session.get(Property, ok["id"])
    assert stored.price == 240000
    assert stored.locality == "Igualada"
    assert stored.province == "Barcelona"
    assert stored.dwelling_type == DwellingType.atico
    assert stored.sale_state == SaleState.pendiente
    assert stored.published is False
    assert stored.import_source == ImportSource.json
    assert stored.import_batch_id == report.batch_id
    assert stored.source_url == "https://www.idealista.com/inmueble/1/"
    assert stored.scraped_at is not None
    assert stored.acquired_at is not None


async def test_rerun_same_import_yields_only_duplicates(uow, session):
    doc = scraper_document([scraped_row(i) for i in range(1, 5)])

    first = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)
    assert first.summary == {"total": 4, "success": 4, "duplicates": 0, "errors": 0}

    second = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)
    assert second.summary == {"total": 4, "success": 0, "duplicates": 4, "errors": 0}
    assert {d["reason"] for d in second.details()} == {REASON_SAME_URL}

    assert await _count_properties(session) == 4


async def test_title_and_location_match_catches_changed_url(uow):
    await _seed(uow, title="Piso luminoso número 1", price=1, locality="igualada", source_url="https://old/1")

    doc = scraper_document([scraped_row(1, titulo="  PISO luminoso   número 1 ")])
    report = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)

    (detail,) = report.details()
    assert detail["status"] == "duplicate"
    assert detail["reason"] == REASON_SAME_TITLE_LOCATION
    # points at the catalog listing it collided with, not the incoming URL
    assert detail["url"] == "https://old/1"


async def test_same_batch_siblings_are_caught(uow, session):
    doc = scraper_document([scraped_row(1), scraped_row(1, titulo="Mismo anuncio, otro título")])

    report = await import_rows(
        uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json, check_batch_duplicates=True
    )

    assert report.summary == {"total": 2, "success": 1, "duplicates": 1, "errors": 0}
    assert report.details()[1]["reason"] == REASON_SAME_URL_IN_BATCH
    assert await _count_properties(session) == 1


async def test_same_batch_gap_when_batch_check_disabled(uow, session):
    doc = scraper_document([scraped_row(1), scraped_row(1)])

    report = await import_rows(
        uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json, check_batch_duplicates=False
    )

    # both siblings are persisted: only the pre-batch catalog is consulted
    assert report.summary == {"total": 2, "success": 2, "duplicates": 0, "errors": 0}
    assert await _count_properties(session) == 2


async def test_persistence_failure_is_a_row_error_and_batch_continues(uow, session, monkeypatch):
    real_add = uow.properties.add

    async def flaky_add(**fields):
        if fields["title"] == "Piso luminoso número 2":
            raise OperationalError("INSERT INTO properties", {}, Exception("database is locked"))
        return await real_add(**fields)

    monkeypatch.setattr(uow.properties, "add", flaky_add)

    doc = scraper_document([scraped_row(1), scraped_row(2), scraped_row(3)])
    report = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)

    assert report.summary == {"total": 3, "success": 2, "duplicates": 0, "errors": 1}
    failed = report.details()[1]
    assert failed["status"] == "error"
    assert "OperationalError" in failed["error"]
    assert await _count_properties(session) == 2


async def test_out_of_range_numbers_never_abort_the_batch(uow, session):
    doc = scraper_document(
        [
            scraped_row(1, precio="99999999999999999999999 €"),
            scraped_row(2, metros="99999999999999999999999 m²", habitaciones="99999999999999999999999"),
            scraped_row(3),
        ]
    )
    report = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)

    assert report.summary == {"total": 3, "success": 2, "duplicates": 0, "errors": 1}
    too_big, huge_area, _ = report.details()
    assert "out of range" in too_big["error"]

    stored = await session.get(Property, huge_area["id"])
    assert stored.area_m2 is None
    assert stored.rooms == 0
    assert await _count_properties(session) == 2


async def test_driver_overflow_is_a_row_error(uow, session, monkeypatch):
    real_add = uow.properties.add

    async def overflowing_add(**fields):
        if fields["title"] == "Piso luminoso número 1":
            raise OverflowError("Python int too large to convert to SQLite INTEGER")
        return await real_add(**fields)

    monkeypatch.setattr(uow.properties, "add", overflowing_add)

    doc = scraper_document([scraped_row(1), scraped_row(2)])
    report = await import_rows(uow, parse_json_upload(doc, max_rows=100), source=ImportSource.json)

    assert report.summary == {"total": 2, "success": 1, "duplicates": 0, "errors": 1}
    assert "OverflowError" in report.details()[0]["error"]
    assert await _count_properties(session) == 1


async def test_unit_of_work_outside_context_raises():
    uow = SqlAlchemyUnitOfWork()

    with pytest.raises(RuntimeError, match="not active"):
        await uow.commit()
    with pytest.raises(RuntimeError, match="not active"):
        await uow.rollback()


async def test_images_are_created_in_ascending_order(uow, session):
    row = scraped_row(1, imagenes=["https://img/a.jpg", "https://img/b.jpg", "https://img/c.jpg"])
    report = await import_rows(
        uow, parse_json_upload(scraper_document([row]), max_rows=100), source=ImportSource.json
    )

    prop_id = report.details()[0]["id"]
    images = await ImageRepository(session).list_for_property(prop_id)
    assert [(i.url, i.sort_order) for i in images] == [
        ("https://img/a.jpg", 1),
        ("https://img/b.jpg", 2),
        ("https://img/c.jpg", 3),
    ]


async def test_csv_import_end_to_end(uow, session):
    content = (
        "Titulo,Precio,Ubicacion,URL,Habitaciones,Superficie,Portal,Telefono,Nombre_Contacto\n"
        'Piso luminoso en Igualada,"180.000 €","Igualada, Barcelona",https://x/1,3 hab.,90 m²,Idealista,612345678,Juan\n'
        "Sin precio,,Vic,https://x/2,,,Fotocasa,,\n"
    ).encode("utf-8")

    report = await import_rows(uow, parse_csv_upload(content, max_rows=100), source=ImportSource.csv)

    assert report.summary == {"total": 2, "success": 1, "duplicates": 0, "errors": 1}
    assert report.metadata is None
    assert "metadata" not in report.to_dict()

    stored = await session.get(Property, report.details()[0]["id"])
    assert stored.import_source == ImportSource.csv
    assert stored.rooms == 3
    assert stored.area_m2 == 90
    assert stored.owner_phone == "612345678"
    assert stored.notes == "Importado desde CSV - Portal: Idealista"


@pytest.mark.parametrize("n", [1, 7])
async def test_counts_always_add_up(uow, n):
    rows = [scraped_row(i, precio="abc" if i % 3 == 0 else f"{i}.000") for i in range(1, n + 1)]
    rows += [scraped_row(1)]

    report = await import_rows(uow, parse_json_upload(scraper_document(rows), max_rows=100), source=ImportSource.json)
    s = report.summary

    assert s["success"] + s["duplicates"] + s["errors"] == s["total"] == len(rows)
    assert [d["row"] for d in report.details()] == list(range(1, len(rows) + 1))
