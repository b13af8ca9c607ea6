"""Tests for PdfPoller reconciliation."""

import pytest

from painel_faturas.core.errors import StoreError
from painel_faturas.core.poller import PdfPoller, bare_filename, storage_key_for
from painel_faturas.infrastructure.database import PdfType

PUBLIC_BASE = "https://proj.supabase.co/storage/v1/object/public/celesc-faturas"


@pytest.fixture
def poller(pdf_repo, object_store):
    return PdfPoller(pdf_repo, object_store)


class TestNaming:
    def test_bare_filename(self):
        assert bare_filename("faturas/a.pdf") == "a.pdf"
        assert bare_filename("a.pdf") == "a.pdf"

    def test_storage_key_adds_folder(self):
        assert storage_key_for("a.pdf", "faturas") == "faturas/a.pdf"

    def test_storage_key_keeps_existing_path(self):
        assert storage_key_for("resumos/a.pdf", "faturas") == "resumos/a.pdf"


class TestPoller:
    """Test one poll cycle against the fake bucket."""

    @pytest.mark.asyncio
    async def test_new_resumo_cataloged(self, poller, pdf_repo, bucket):
        bucket.add("resumos", "Jane Doe.pdf", size=4096)

        report = await poller.run()

        assert report.inserted == ["Jane Doe.pdf"]
        [pdf] = pdf_repo.list_all()
        assert pdf.filename == "Jane Doe.pdf"
        assert pdf.storage_key == "resumos/Jane Doe.pdf"
        assert pdf.pdf_type == PdfType.RESUMO
        assert pdf.file_size == 4096
        assert pdf.storage_url == f"{PUBLIC_BASE}/resumos/Jane%20Doe.pdf"

    @pytest.mark.asyncio
    async def test_fatura_tagged(self, poller, pdf_repo, bucket):
        bucket.add("faturas", "123.pdf")

        await poller.run()

        [pdf] = pdf_repo.list_all()
        assert pdf.pdf_type == PdfType.FATURA

    @pytest.mark.asyncio
    async def test_second_run_inserts_nothing(self, poller, pdf_repo, bucket):
        bucket.add("faturas", "123.pdf")
        bucket.add("resumos", "456.pdf")

        await poller.run()
        report = await poller.run()

        assert report.inserted == []
        assert len(pdf_repo.list_all()) == 2

    @pytest.mark.asyncio
    async def test_same_name_in_both_folders_recorded_once(self, poller, pdf_repo, bucket):
        bucket.add("faturas", "dup.pdf")
        bucket.add("resumos", "dup.pdf")

        report = await poller.run()

        assert report.inserted == ["dup.pdf"]
        [pdf] = pdf_repo.list_all()
        assert pdf.pdf_type == PdfType.FATURA

    @pytest.mark.asyncio
    async def test_placeholders_and_other_files_ignored(self, poller, pdf_repo, bucket):
        bucket.add("faturas", "faturas")
        bucket.add("faturas", ".emptyFolderPlaceholder")
        bucket.add("faturas", "notes.txt")
        bucket.add("faturas", "real.pdf")

        report = await poller.run()

        assert report.inserted == ["real.pdf"]
        assert report.listed["faturas"] == 1

    @pytest.mark.asyncio
    async def test_listing_options(self, poller, bucket):
        await poller.run()

        folders = [path for path, _ in bucket.list_calls]
        assert folders == ["faturas", "resumos"]
        _, options = bucket.list_calls[0]
        assert options["limit"] == 1000
        assert options["sortBy"] == {"column": "created_at", "order": "desc"}

    @pytest.mark.asyncio
    async def test_failing_folder_does_not_block_other(self, poller, pdf_repo, bucket):
        bucket.failing_folders.add("faturas")
        bucket.add("faturas", "lost.pdf")
        bucket.add("resumos", "kept.pdf")

        report = await poller.run()

        assert report.inserted == ["kept.pdf"]
        assert report.listed["faturas"] == 0

    @pytest.mark.asyncio
    async def test_size_from_head_when_metadata_missing(self, poller, pdf_repo, bucket):
        bucket.add("faturas", "nosize.pdf", size=None)

        await poller.run()

        [pdf] = pdf_repo.list_all()
        assert pdf.file_size == 2048

    @pytest.mark.asyncio
    async def test_size_zero_when_head_fails(self, store_factory, pdf_repo, bucket):
        store = store_factory(head_size=None)
        bucket.add("faturas", "nosize.pdf", size=None)

        await PdfPoller(pdf_repo, store).run()

        [pdf] = pdf_repo.list_all()
        assert pdf.file_size == 0

    @pytest.mark.asyncio
    async def test_insert_failure_skips_only_that_file(self, poller, pdf_repo, bucket, monkeypatch):
        bucket.add("faturas", "bad.pdf")
        bucket.add("faturas", "good.pdf")
        original_save = pdf_repo.save

        def flaky_save(filename, *args, **kwargs):
            if filename == "bad.pdf":
                raise StoreError("insert failed")
            return original_save(filename, *args, **kwargs)

        monkeypatch.setattr(pdf_repo, "save", flaky_save)

        report = await poller.run()

        assert report.inserted == ["good.pdf"]
        assert report.failed == ["bad.pdf"]

    @pytest.mark.asyncio
    async def test_failed_file_retried_next_cycle(self, poller, pdf_repo, bucket, monkeypatch):
        bucket.add("faturas", "later.pdf")
        original_save = pdf_repo.save

        def failing_save(*args, **kwargs):
            raise StoreError("down")

        monkeypatch.setattr(pdf_repo, "save", failing_save)
        await poller.run()

        monkeypatch.setattr(pdf_repo, "save", original_save)
        report = await poller.run()

        assert report.inserted == ["later.pdf"]

    @pytest.mark.asyncio
    async def test_catalog_unreadable_skips_cycle(self, poller, fake_supabase, bucket):
        fake_supabase.tables["generated_pdfs"].fail_with = RuntimeError("db down")
        bucket.add("faturas", "x.pdf")

        report = await poller.run()

        assert report.skipped is True
        assert bucket.list_calls == []

    @pytest.mark.asyncio
    async def test_existing_catalog_entries_respected(self, poller, pdf_repo, bucket):
        pdf_repo.save("old.pdf", "faturas/old.pdf", "https://x/old.pdf", PdfType.FATURA, 10)
        bucket.add("faturas", "old.pdf")
        bucket.add("faturas", "new.pdf")

        report = await poller.run()

        assert report.inserted == ["new.pdf"]
