# Ingestion Pipeline - Import exports and build the vector index
from ingestion.importer import Importer, ImportFileError
from ingestion.index_builder import IndexBuilder, build_embedding_text

__all__ = ["Importer", "ImportFileError", "IndexBuilder", "build_embedding_text"]
