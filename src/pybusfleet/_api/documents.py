"""Document store endpoints: collection listing and single-document writes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pybusfleet._api._common import raise_for_store_status
from pybusfleet._api._values import decode_document, document_id, encode_fields
from pybusfleet._transport import Transport
from pybusfleet.config import FleetConfig
from pybusfleet.session import Session

_logger = logging.getLogger(__name__)


def _collection_url(config: FleetConfig, collection: str) -> str:
    return f"{config.documents_url}/{collection}"


def _document_url(config: FleetConfig, collection: str, doc_id: str) -> str:
    return f"{config.documents_url}/{collection}/{doc_id}"


async def list_documents(
    config: FleetConfig,
    session: Session,
    transport: Transport,
    collection: str,
) -> list[dict[str, Any]]:
    """Fetch every document of *collection*, following page tokens.

    Documents are returned in the order the store lists them, each as a
    flat ``{"id": ..., **fields}`` dict. A document holding a value that
    cannot be decoded is skipped with a warning.
    """
    url = _collection_url(config, collection)
    documents: list[dict[str, Any]] = []
    page_token: str | None = None
    while True:
        params: dict[str, str] = {"pageSize": str(config.page_size)}
        if page_token:
            params["pageToken"] = page_token
        status, body = await transport.request("GET", url, params=params, token=session.id_token)
        raise_for_store_status(endpoint=collection, status=status, body=body)

        for document in body.get("documents") or []:
            if not isinstance(document, dict):
                continue
            try:
                documents.append(decode_document(document))
            except (AttributeError, TypeError, ValueError):
                _logger.warning(
                    "Skipping undecodable %s document %s", collection, document.get("name"), exc_info=True
                )

        page_token = body.get("nextPageToken") or None
        if page_token is None:
            break

    _logger.debug("Fetched %d documents from %s", len(documents), collection)
    return documents


async def create_document(
    config: FleetConfig,
    session: Session,
    transport: Transport,
    collection: str,
    fields: Mapping[str, Any],
    *,
    doc_id: str | None = None,
) -> str:
    """Insert a document and return its id.

    Without *doc_id* the store assigns one; with it, creation fails if a
    document with that id already exists.
    """
    params = {"documentId": doc_id} if doc_id else None
    status, body = await transport.request(
        "POST",
        _collection_url(config, collection),
        params=params,
        json_body={"fields": encode_fields(fields)},
        token=session.id_token,
    )
    raise_for_store_status(endpoint=collection, status=status, body=body)
    return document_id(str(body.get("name", ""))) or (doc_id or "")


async def set_document(
    config: FleetConfig,
    session: Session,
    transport: Transport,
    collection: str,
    doc_id: str,
    fields: Mapping[str, Any],
) -> None:
    """Write a document with a known id, replacing any existing fields."""
    status, body = await transport.request(
        "PATCH",
        _document_url(config, collection, doc_id),
        json_body={"fields": encode_fields(fields)},
        token=session.id_token,
    )
    raise_for_store_status(endpoint=f"{collection}/{doc_id}", status=status, body=body)


async def update_document(
    config: FleetConfig,
    session: Session,
    transport: Transport,
    collection: str,
    doc_id: str,
    fields: Mapping[str, Any],
) -> None:
    """Update only the given fields of an existing document.

    Raises
    ------
    FleetDocumentNotFoundError
        If the document does not exist.
    """
    params: list[tuple[str, str]] = [("updateMask.fieldPaths", key) for key in fields]
    params.append(("currentDocument.exists", "true"))
    status, body = await transport.request(
        "PATCH",
        _document_url(config, collection, doc_id),
        params=params,
        json_body={"fields": encode_fields(fields)},
        token=session.id_token,
    )
    raise_for_store_status(endpoint=f"{collection}/{doc_id}", status=status, body=body)


async def delete_document(
    config: FleetConfig,
    session: Session,
    transport: Transport,
    collection: str,
    doc_id: str,
) -> None:
    """Delete a document. Deleting a missing document is not an error."""
    status, body = await transport.request(
        "DELETE",
        _document_url(config, collection, doc_id),
        token=session.id_token,
    )
    raise_for_store_status(endpoint=f"{collection}/{doc_id}", status=status, body=body)
