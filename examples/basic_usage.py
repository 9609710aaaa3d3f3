"""
Basic usage example for the Policy Assistant.

This example demonstrates how to:
1. Ingest policy PDFs
2. Inspect the extracted sections
3. Retrieve the context block for a question
"""

from pathlib import Path

from policy_assistant import AppConfig, KnowledgeBase
from policy_assistant.exceptions import BatchIngestionError

config = AppConfig.from_yaml("configs/config.yaml")
kb = KnowledgeBase.from_config(config)

print("=" * 70)
print("POLICY ASSISTANT - BASIC USAGE")
print("=" * 70)

corpus = Path("data/policies")
if corpus.exists():
    print(f"\n1. Ingesting PDFs from: {corpus}")
    try:
        documents = kb.ingest_paths([corpus])
    except BatchIngestionError as e:
        documents = e.documents
        for failure in e.failures:
            print(f"   Skipped: {failure}")
    print(f"   Added {len(documents)} documents")
else:
    print(f"   Directory not found: {corpus}")
    print("   Please add some policy PDFs to data/policies/")

print("\n2. Stored documents:")
for doc in kb.documents:
    print(f"   {doc.name}: {doc.metadata.page_count} pages, "
          f"quality {doc.metadata.extraction_quality.value}")
    for section in doc.sections[:5]:
        print(f"     - {section.title} (p. {section.page_numbers[0]})")

if len(kb) > 0:
    query = "How many vacation days do employees get?"
    print(f"\n3. Query: '{query}'\n")
    context = kb.search(query)
    print(context or "   No relevant policy found.")

kb.close()
print("\n" + "=" * 70)
print(f"Done! Documents are stored in: {config.storage.directory}")
print("=" * 70)
