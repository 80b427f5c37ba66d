"""
DocumentExporter domain service.

Turns extracted documents into export payloads (JSON-ready dicts) and CSV text.
Each document type has its own row layout: Rebut exports one row per scrapped
item, NPT one row per downtime event, Kosu one row per team summary.
"""
from __future__ import annotations

import csv
import io
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.value_objects.document_type import DocumentType

REBUT_ITEM_COLUMNS = ["index", "reference", "designation", "quantity", "unit", "type", "total_scrapped"]
NPT_EVENT_COLUMNS = ["index", "start_time", "end_time", "duration", "reason", "description"]
KOSU_SUMMARY_COLUMNS = ["index", "heures_deposees", "objectif_qte_eq", "qte_realisee"]

BULK_HEADERS: Dict[DocumentType, List[str]] = {
    DocumentType.REBUT: [
        "Document ID", "Date", "Ligne", "OF Number", "Item Index", "Reference",
        "Designation", "Quantity", "Unit", "Type", "Total Scrapped",
    ],
    DocumentType.NPT: [
        "Document ID", "Date", "UAP", "Equipe", "Event Index", "Codes Ligne", "Ref PF",
        "Designation", "NPT Minutes", "Heure Debut", "Heure Fin", "Cause NPT",
    ],
    DocumentType.KOSU: [
        "Document ID", "Date", "Nom Ligne", "Code Ligne", "Numero OF", "Ref PF",
        "Heures Deposees", "Objectif Qte EQ", "Qte Realisee",
    ],
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class DocumentExporter:
    """Stateless export helpers for extracted documents."""

    # ------------------------------------------------------------------
    # Single document
    # ------------------------------------------------------------------
    def prepare(self, document: ExtractedDocument) -> Dict[str, Any]:
        """Common fields plus the type-specific section, ready for JSON."""
        payload: Dict[str, Any] = {
            "id": document.id,
            "filename": document.metadata.get("filename"),
            "document_type": document.document_type.value,
            "processed_at": document.metadata.get("processed_at"),
            "remark": document.remark,
            "created_at": document.created_at.isoformat(),
            "updated_at": document.updated_at.isoformat(),
        }
        section = self._section(document)
        if section is not None:
            payload["headers"] = dict(document.data.get("header") or {})
            key, rows = section
            payload[key] = rows
        return payload

    def to_csv(self, document: ExtractedDocument) -> str:
        """Headers block followed by the type-specific table."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        header = document.data.get("header") or {}
        if header:
            buffer.write("DOCUMENT HEADERS\n")
            for key, value in header.items():
                writer.writerow([key, _text(value)])
            buffer.write("\n")

        section = self._section(document)
        if section is not None:
            key, rows = section
            title, columns = {
                "items": ("ITEMS DATA", REBUT_ITEM_COLUMNS),
                "downtime_events": ("DOWNTIME EVENTS", NPT_EVENT_COLUMNS),
                "team_summary": ("TEAM SUMMARY", KOSU_SUMMARY_COLUMNS),
            }[key]
            buffer.write(f"{title}\n")
            writer.writerow(columns)
            for row in rows:
                writer.writerow([_text(row.get(column)) for column in columns])
        return buffer.getvalue()

    def filename_for(self, document: ExtractedDocument, extension: str) -> str:
        base = document.metadata.get("filename") or document.id
        return f"{base}_{document.document_type.value.lower()}.{extension}"

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------
    def bulk_rows(
        self,
        documents: Iterable[ExtractedDocument],
        document_type: DocumentType,
    ) -> Tuple[List[str], List[List[str]]]:
        rows: List[List[str]] = []
        for document in documents:
            if document.document_type is not document_type:
                continue
            header = document.data.get("header") or {}
            if document_type is DocumentType.REBUT:
                for index, item in enumerate(document.data.get("items") or []):
                    rows.append([
                        document.id, _text(header.get("date")), _text(header.get("ligne")),
                        _text(header.get("of_number")), str(index), _text(item.get("reference")),
                        _text(item.get("designation")), _text(item.get("quantity")), _text(item.get("unit")),
                        _text(item.get("type")), _text(item.get("total_scrapped")),
                    ])
            elif document_type is DocumentType.NPT:
                for index, event in enumerate(document.data.get("downtime_events") or []):
                    rows.append([
                        document.id, _text(header.get("date")), _text(header.get("uap")),
                        _text(header.get("equipe")), str(index), _text(event.get("codes_ligne")),
                        _text(event.get("ref_pf")), _text(event.get("designation")),
                        _text(event.get("npt_minutes")), _text(event.get("heure_debut_d_arret")),
                        _text(event.get("heure_fin_d_arret")), _text(event.get("cause_npt")),
                    ])
            else:
                summary = document.data.get("team_summary")
                if not header or not isinstance(summary, dict):
                    continue
                rows.append([
                    document.id, _text(header.get("date")), _text(header.get("nom_ligne")),
                    _text(header.get("code_ligne")), _text(header.get("numero_of")), _text(header.get("ref_pf")),
                    _text(summary.get("heures_deposees")), _text(summary.get("objectif_qte_eq")),
                    _text(summary.get("qte_realisee")),
                ])
        return list(BULK_HEADERS[document_type]), rows

    def bulk_csv(self, documents: Sequence[ExtractedDocument], document_type: DocumentType) -> str:
        headers, rows = self.bulk_rows(documents, document_type)
        if not rows:
            return ""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _section(self, document: ExtractedDocument) -> Tuple[str, List[Dict[str, Any]]] | None:
        data = document.data
        if document.document_type is DocumentType.REBUT and data.get("items"):
            return "items", [
                {
                    "index": index,
                    "reference": item.get("reference", ""),
                    "designation": item.get("designation", ""),
                    "quantity": item.get("quantity", 0),
                    "unit": item.get("unit", ""),
                    "type": item.get("type", ""),
                    "total_scrapped": item.get("total_scrapped", 0),
                }
                for index, item in enumerate(data["items"], start=1)
            ]
        if document.document_type is DocumentType.NPT and data.get("downtime_events"):
            return "downtime_events", [
                {
                    "index": index,
                    "start_time": event.get("start_time", ""),
                    "end_time": event.get("end_time", ""),
                    "duration": event.get("duration", 0),
                    "reason": event.get("reason", ""),
                    "description": event.get("description", ""),
                }
                for index, event in enumerate(data["downtime_events"], start=1)
            ]
        if document.document_type is DocumentType.KOSU and isinstance(data.get("team_summary"), dict):
            summary = data["team_summary"]
            return "team_summary", [
                {
                    "index": 1,
                    "heures_deposees": summary.get("heures_deposees", 0),
                    "objectif_qte_eq": summary.get("objectif_qte_eq", 0),
                    "qte_realisee": summary.get("qte_realisee", 0),
                }
            ]
        return None
