"""
Flask REST API for the Policy Assistant.

Exposes document ingestion, deletion and context retrieval over HTTP.
The language-model call lives in the client; this API only supplies
the policy context for its prompt.

Endpoints:
    GET    /api/health            - Health check
    GET    /api/documents         - List stored documents
    GET    /api/documents/<id>    - Document details with sections
    POST   /api/documents         - Ingest PDFs (multipart field 'files')
    DELETE /api/documents/<id>    - Delete a document
    DELETE /api/documents         - Delete every document
    POST   /api/search            - Build the context block for a query

Usage:
    python -m policy_assistant.web.app
"""

import os
from typing import Optional

from flask import Flask, current_app, jsonify, request

from ..config import AppConfig
from ..exceptions import BatchIngestionError, FileExtractionError
from ..ingestion.document import ProcessedDocument
from ..ingestion.parsers.base import UploadedFile
from ..knowledge_base import KnowledgeBase
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _kb() -> KnowledgeBase:
    return current_app.extensions["policy_assistant"]


def _summary(doc: ProcessedDocument) -> dict:
    return {
        "id": doc.id,
        "name": doc.name,
        "uploadedAt": doc.uploaded_at.isoformat(),
        "metadata": doc.metadata.to_dict(),
        "sectionCount": len(doc.sections),
    }


def create_app(
    config: Optional[AppConfig] = None,
    knowledge_base: Optional[KnowledgeBase] = None,
) -> Flask:
    """Application factory.

    Args:
        config: Application configuration; defaults are used if omitted.
        knowledge_base: An already opened knowledge base. When omitted
            one is built from ``config``.
    """
    config = config or AppConfig()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.web.max_upload_mb * 1024 * 1024

    kb = knowledge_base if knowledge_base is not None else KnowledgeBase.from_config(config)
    app.extensions["policy_assistant"] = kb
    logger.info("KnowledgeBase initialised: %d documents", len(kb))

    # ─── API Endpoints ──────────────────────────────────────────────

    @app.route("/api/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "documents": len(_kb())})

    @app.route("/api/documents")
    def list_documents():
        """List stored documents in upload order."""
        return jsonify({"documents": [_summary(d) for d in _kb().documents]})

    @app.route("/api/documents/<doc_id>")
    def get_document(doc_id):
        doc = _kb().get_document(doc_id)
        if doc is None:
            return jsonify({"error": "Document not found"}), 404
        return jsonify(doc.to_dict())

    @app.route("/api/documents", methods=["POST"])
    def ingest():
        """Ingest uploaded PDFs.

        Accepts multipart/form-data with one or more 'files' fields.

        Returns:
            201 when every file was ingested, 207 when some failed,
            422 when none could be ingested.
        """
        uploads = request.files.getlist("files")
        if not uploads:
            return jsonify({"error": "No files provided"}), 400
        if any(not f.filename for f in uploads):
            return jsonify({"error": "Empty filename"}), 400

        files = [UploadedFile.from_bytes(f.filename, f.read()) for f in uploads]

        try:
            documents = _kb().ingest(files)
        except FileExtractionError as e:
            return jsonify({
                "documents": [],
                "errors": [{"file": e.filename, "error": str(e)}],
            }), 422
        except BatchIngestionError as e:
            body = {
                "documents": [_summary(d) for d in e.documents],
                "errors": [{"file": f.filename, "error": str(f)} for f in e.failures],
            }
            return jsonify(body), 207 if e.documents else 422

        return jsonify({
            "documents": [_summary(d) for d in documents],
            "errors": [],
        }), 201

    @app.route("/api/documents/<doc_id>", methods=["DELETE"])
    def delete_document(doc_id):
        """Delete a single document."""
        if _kb().delete_document(doc_id):
            return jsonify({"deleted": doc_id})
        return jsonify({"error": "Document not found"}), 404

    @app.route("/api/documents", methods=["DELETE"])
    def clear_documents():
        """Delete every stored document."""
        kb = _kb()
        count = len(kb)
        kb.clear()
        return jsonify({"deleted": count})

    @app.route("/api/search", methods=["POST"])
    def search():
        """Context retrieval endpoint.

        Request body:
            {"query": "..."}

        Returns:
            {"query": "...", "context": "...", "found": true}
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("query"), str):
            return jsonify({"error": "Missing 'query' field"}), 400

        context = _kb().search(data["query"])
        return jsonify({
            "query": data["query"],
            "context": context,
            "found": bool(context),
        })

    return app


if __name__ == "__main__":
    config = AppConfig.from_yaml(os.environ.get("POLICY_ASSISTANT_CONFIG", "configs/config.yaml"))
    create_app(config).run(host=config.web.host, port=config.web.port, debug=config.web.debug)
