"""Generated PDFs repository for Painel de Faturas."""

from typing import Any, Dict, List, Optional, Set

from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database.models import GeneratedPdf, PdfType
from painel_faturas.infrastructure.database.repositories.base import BaseRepository
from painel_faturas.utils.scheduling import parse_timestamp, utc_now


class PdfRepository(BaseRepository[GeneratedPdf]):
    """Repository for generated_pdfs table."""

    def table_name(self) -> str:
        """Return table name."""
        return "generated_pdfs"

    def save(
        self,
        filename: str,
        storage_key: str,
        storage_url: str,
        pdf_type: PdfType,
        file_size: int = 0,
    ) -> GeneratedPdf:
        """Insert a newly discovered PDF.

        Args:
            filename: Bare file name (dedup key)
            storage_key: Bucket-relative path including the folder
            storage_url: Public URL
            pdf_type: fatura or resumo
            file_size: Size in bytes, 0 when unknown

        Returns:
            Created GeneratedPdf
        """
        result = self._execute(
            "insert",
            lambda: self._table().insert(
                {
                    "filename": filename,
                    "storage_key": storage_key,
                    "storage_url": storage_url,
                    "file_size": file_size or 0,
                    "pdf_type": PdfType(pdf_type).value,
                    "created_at": utc_now().isoformat(),
                }
            ),
        )

        row = result.data[0]
        logger.info("pdf_saved", pdf_id=row["id"], filename=filename, pdf_type=row["pdf_type"])
        return self._row_to_model(row)

    def list_all(self) -> List[GeneratedPdf]:
        """List all PDFs ordered by created_at DESC."""
        result = self._execute(
            "list",
            lambda: self._table().select("*").order("created_at", desc=True),
        )
        return [self._row_to_model(row) for row in result.data or []]

    def known_filenames(self) -> Set[str]:
        """Filenames already cataloged."""
        result = self._execute(
            "known_filenames", lambda: self._table().select("id, filename")
        )
        return {row["filename"] for row in result.data or []}

    def get_by_id(self, pdf_id: int) -> Optional[GeneratedPdf]:
        result = self._execute("get", lambda: self._table().select("*").eq("id", pdf_id))
        if not result.data:
            return None
        return self._row_to_model(result.data[0])

    def delete(self, pdf_id: int) -> bool:
        """Delete a PDF record (the bucket object is left alone).

        Returns:
            True if a row was removed, False if the id was unknown
        """
        result = self._execute("delete", lambda: self._table().delete().eq("id", pdf_id))
        return bool(result.data)

    def _row_to_model(self, row: Dict[str, Any]) -> GeneratedPdf:
        """Convert database row to GeneratedPdf model."""
        return GeneratedPdf(
            id=row["id"],
            filename=row["filename"],
            storage_key=row["storage_key"],
            storage_url=row["storage_url"],
            pdf_type=PdfType(row["pdf_type"]),
            file_size=row.get("file_size") or 0,
            created_at=parse_timestamp(row.get("created_at")),
        )
