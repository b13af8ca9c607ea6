"""PDF poller for Painel de Faturas.

Reconciles the bucket against the generated_pdfs catalog. The bare filename is
the dedup key, so a file is recorded once no matter which folder it shows up in.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from painel_faturas.core.error_classifier import ErrorClassifier
from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database.models import PdfType
from painel_faturas.infrastructure.database.repositories import PdfRepository
from painel_faturas.infrastructure.storage import ObjectStoreClient, StorageObject

# Folder scanned -> type tag of the PDFs it holds
FOLDERS: Tuple[Tuple[str, PdfType], ...] = (
    ("faturas", PdfType.FATURA),
    ("resumos", PdfType.RESUMO),
)


def bare_filename(name: str) -> str:
    """Last path segment of a listed name."""
    return name.split("/")[-1] or name


def storage_key_for(name: str, folder: str) -> str:
    """Bucket-relative key: names without a separator get the folder prefix."""
    if "/" in name:
        return name
    return f"{folder}/{name}"


@dataclass
class PollReport:
    """Outcome of one poller cycle."""

    listed: Dict[str, int] = field(default_factory=dict)
    inserted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: bool = False


class PdfPoller:
    """Finds new PDFs in the bucket and catalogs them."""

    def __init__(self, repository: PdfRepository, storage: ObjectStoreClient):
        self.repository = repository
        self.storage = storage

    async def run(self) -> PollReport:
        """Run one cycle. Never raises."""
        report = PollReport()

        try:
            known = await asyncio.to_thread(self.repository.known_filenames)
        except Exception as e:
            logger.error(
                "poller_catalog_load_failed",
                error=str(e),
                error_category=ErrorClassifier.categorize(e).value,
            )
            report.skipped = True
            return report

        listings = []
        for folder, pdf_type in FOLDERS:
            files = await self._list_folder(folder)
            report.listed[folder] = len(files)
            listings.append((folder, pdf_type, files))

        for folder, pdf_type, files in listings:
            for item in files:
                filename = bare_filename(item.name)
                if filename in known:
                    continue
                try:
                    await self._catalog(item, folder, pdf_type)
                except Exception as e:
                    report.failed.append(filename)
                    logger.error("poller_file_failed", folder=folder, name=item.name, error=str(e))
                    continue
                known.add(filename)
                report.inserted.append(filename)

        if report.inserted:
            logger.info("poller_new_pdfs", count=len(report.inserted))
        else:
            logger.debug("poller_no_new_pdfs", **report.listed)
        return report

    async def _list_folder(self, folder: str) -> List[StorageObject]:
        """List one folder; a failure yields no files for this cycle."""
        try:
            return await self.storage.list(folder)
        except Exception as e:
            logger.error(
                "poller_list_failed",
                folder=folder,
                error=str(e),
                error_category=ErrorClassifier.categorize(e).value,
            )
            return []

    async def _catalog(self, item: StorageObject, folder: str, pdf_type: PdfType) -> None:
        storage_key = storage_key_for(item.name, folder)
        url = self.storage.public_url(storage_key)

        size = item.size
        if not size:
            size = await self.storage.head_size(url)

        await asyncio.to_thread(
            self.repository.save,
            bare_filename(item.name),
            storage_key,
            url,
            pdf_type,
            size or 0,
        )
