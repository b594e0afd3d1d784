import pytest

from conftest import make_item
from models.content_item import ContentItem
from models.research_item import ResearchItem
from models.sections import SECTIONS
from services.content import ContentRepository
from services.errors import InvalidSection, NotFound, StoreUnavailable, ValidationError


@pytest.fixture
def repository(store):
    return ContentRepository(store)


@pytest.mark.asyncio
@pytest.mark.parametrize("section", ["news", "ideas", "reports", "documents", "podcasts", "research"])
async def test_added_item_is_listed_as_active_with_fresh_id(repository, section):
    first = await repository.add_item(section, {"title": "AI Act trilogue", "url": "https://eu.example/ai"})
    second = await repository.add_item(section, {"title": "Chips Act", "url": "https://us.example/chips"})

    assert first.id and second.id and first.id != second.id
    assert first.status == "active"
    assert first.date_added.endswith("Z")

    page = await repository.list_items(section)
    listed = {item.id: item for item in page.items}
    assert first.id in listed
    assert listed[first.id].status == "active"
    assert page.total == 2


@pytest.mark.asyncio
async def test_add_defaults_added_by_and_requires_title_and_url(repository):
    item = await repository.add_item("news", {"title": "Title", "url": "https://a.example", "source": "Wire"})
    assert item.added_by == "admin"

    by_editor = await repository.add_item("news", {"title": "T2", "url": "https://b.example"}, added_by="ed@x.test")
    assert by_editor.added_by == "ed@x.test"

    with pytest.raises(ValidationError):
        await repository.add_item("news", {"title": "  ", "url": "https://c.example"})
    with pytest.raises(ValidationError):
        await repository.add_item("news", {"title": "No url"})


@pytest.mark.asyncio
async def test_unknown_section_is_rejected(repository):
    with pytest.raises(InvalidSection):
        await repository.list_items("blog")
    with pytest.raises(InvalidSection):
        await repository.add_item("blog", {"title": "t", "url": "u"})


@pytest.mark.asyncio
async def test_delete_is_soft_and_only_touches_status_cell(repository, store):
    item = await repository.add_item("reports", {"title": "Report", "url": "https://r.example", "source": "OECD"})
    before = list(store.rows_for(SECTIONS["reports"])[0])

    await repository.delete_item("reports", item.id)

    after = store.rows_for(SECTIONS["reports"])[0]
    assert after[:6] == before[:6]
    assert after[6] == "deleted"
    assert ("update", "Reports!G2") in store.calls

    visible = await repository.list_items("reports")
    assert item.id not in [entry.id for entry in visible.items]

    with_deleted = await repository.list_items("reports", include_deleted=True)
    assert [(entry.id, entry.status) for entry in with_deleted.items] == [(item.id, "deleted")]


@pytest.mark.asyncio
async def test_delete_is_idempotent_and_missing_ids_raise(repository, store):
    item = await repository.add_item("news", {"title": "Once", "url": "https://once.example"})
    await repository.delete_item("news", item.id)
    writes = [call for call in store.calls if call[0] == "update"]

    await repository.delete_item("news", item.id)
    assert [call for call in store.calls if call[0] == "update"] == writes

    with pytest.raises(NotFound):
        await repository.delete_item("news", "missing-id")


@pytest.mark.asyncio
async def test_update_preserves_identity_fields(repository):
    item = await repository.add_item("ideas", {"title": "Old", "url": "https://old.example", "source": "Blog"})

    updated = await repository.update_item(
        "ideas",
        item.id,
        {"id": "hijacked", "title": "New", "url": "", "source": None},
    )

    assert updated.id == item.id
    assert updated.date_added == item.date_added
    assert updated.added_by == item.added_by
    assert updated.title == "New"
    assert updated.url == "https://old.example"
    assert updated.source == "Blog"

    listed = (await repository.list_items("ideas")).items
    assert [(entry.id, entry.title) for entry in listed] == [(item.id, "New")]


@pytest.mark.asyncio
async def test_update_honours_explicit_date_override(repository):
    item = await repository.add_item("podcasts", {"title": "Ep 1", "url": "https://pod.example/1"})
    updated = await repository.update_item("podcasts", item.id, {"dateAdded": "2020-02-02T00:00:00.000Z"})
    assert updated.date_added == "2020-02-02T00:00:00.000Z"

    with pytest.raises(NotFound):
        await repository.update_item("podcasts", "nope", {"title": "x"})


@pytest.mark.asyncio
async def test_list_filters_sorts_and_paginates(repository, store):
    store.seed(
        SECTIONS["news"],
        [
            make_item(ContentItem, "a", "Privacy bill advances", "2024-01-01T10:00:00.000Z", source="Politico"),
            make_item(ContentItem, "b", "Antitrust ruling", "2025-06-01T10:00:00.000Z", source="Reuters"),
            make_item(ContentItem, "c", "Spectrum auction", "2024-09-01T10:00:00.000Z", source="PRIVACY DAILY"),
            make_item(ContentItem, "d", "Old archived", "2023-01-01T10:00:00.000Z", status="archived"),
            make_item(ContentItem, "e", "", "2026-01-01T10:00:00.000Z"),
        ],
    )

    everything = await repository.list_items("news")
    assert [item.id for item in everything.items] == ["b", "c", "a"]
    assert everything.total == 3

    matched = await repository.list_items("news", search="privacy")
    assert [item.id for item in matched.items] == ["c", "a"]

    page = await repository.list_items("news", limit=1, offset=1)
    assert [item.id for item in page.items] == ["c"]
    assert page.total == 3
    assert page.payload(include_total=True)["total"] == 3
    assert page.payload()[0]["dateAdded"] == "2024-09-01T10:00:00.000Z"

    unlimited = await repository.list_items("news", limit=0)
    assert len(unlimited.items) == 3


@pytest.mark.asyncio
async def test_research_search_covers_authors_and_institutions(repository, store):
    store.seed(
        SECTIONS["research"],
        [
            make_item(ResearchItem, "r1", "Platform audits", "2024-03-01", authors="Ada Lovelace", institutions="MIT"),
            make_item(ResearchItem, "r2", "Spectrum policy", "2024-04-01", authors="Alan Turing", institutions="Oxford"),
        ],
    )

    by_author = await repository.list_items("research", search="lovelace")
    assert [item.id for item in by_author.items] == ["r1"]
    by_institution = await repository.list_items("research", search="OXFORD")
    assert [item.id for item in by_institution.items] == ["r2"]


@pytest.mark.asyncio
async def test_profile_shaped_research_payload_is_mapped(repository):
    record = await repository.add_item(
        "research",
        {
            "name": "Grace Hopper",
            "institution": "Yale",
            "researchArea": "Compilers",
            "profileUrl": "https://yale.example/hopper",
            "recentPublication": "A-0 system",
        },
    )

    assert record.title == "A-0 system"
    assert record.url == "https://yale.example/hopper"
    assert record.authors == "Grace Hopper"
    assert record.institutions == "Yale"
    assert record.source == "Compilers"


@pytest.mark.asyncio
async def test_read_failures_degrade_but_write_failures_propagate(repository, store):
    store.fail_reads.add("News")
    page = await repository.list_items("news")
    assert page.items == [] and page.total == 0

    with pytest.raises(StoreUnavailable):
        await repository.delete_item("news", "any")

    store.fail_reads.clear()
    store.fail_writes = True
    with pytest.raises(StoreUnavailable):
        await repository.add_item("news", {"title": "t", "url": "https://u.example"})
