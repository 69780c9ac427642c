"""Out-of-band job that (re)generates table_semantics embeddings.

Run with ``python -m agents.sql_agent.indexer``. The query path only reads
what this job writes.
"""

import json
import logging
from typing import Any, Dict, Optional

import psycopg2
from psycopg2 import extras, sql

from agents.llm_gateway import LLMGateway
from .retriever import EMBEDDING_COLUMN, TableDescriptor

logger = logging.getLogger(__name__)


def describe_table(descriptor: TableDescriptor) -> str:
    """Text that gets embedded for one descriptor."""
    text = f"Table: {descriptor.name}\nType: {descriptor.kind}\n"
    if descriptor.description:
        text += f"Description: {descriptor.description}\n"
    text += f"Columns: {', '.join(descriptor.columns)}"
    return text


class TableSemanticsIndexer:
    """Embed every table descriptor and store the vectors, overwriting old ones."""

    def __init__(
        self,
        gateway: LLMGateway,
        db_host: Optional[str],
        db_port: int,
        db_name: Optional[str],
        db_user: Optional[str],
        db_password: Optional[str],
        table_name: str = "table_semantics"
    ):
        """Initialize the indexer.

        Args:
            gateway: LLM gateway used for embeddings
            db_host: Database host
            db_port: Database port
            db_name: Database name
            db_user: Database user with write access to ``table_name``
            db_password: Database password
            table_name: Descriptor table
        """
        self.gateway = gateway
        self.db_config = {
            'host': db_host,
            'port': db_port,
            'database': db_name,
            'user': db_user,
            'password': db_password
        }
        self.table_name = table_name

    def generate_all_embeddings(self) -> Dict[str, Any]:
        """Regenerate every embedding; rows that fail are logged and skipped."""
        select_query = sql.SQL(
            "SELECT id, name, type, description, columns, {embed} FROM {table}"
        ).format(
            embed=sql.Identifier(EMBEDDING_COLUMN),
            table=sql.Identifier(self.table_name),
        )
        update_query = sql.SQL("UPDATE {table} SET {embed} = %s WHERE id = %s").format(
            embed=sql.Identifier(EMBEDDING_COLUMN),
            table=sql.Identifier(self.table_name),
        )

        success_count = 0
        embedding_dimension = 0

        conn = None
        cursor = None
        try:
            conn = psycopg2.connect(**self.db_config)
            cursor = conn.cursor(cursor_factory=extras.RealDictCursor)
            cursor.execute(select_query)
            rows = cursor.fetchall()
            logger.info(f"Indexing {len(rows)} table descriptors")

            for row in rows:
                descriptor = TableDescriptor.from_row(row)
                old_dimension = len(descriptor.embedding) if descriptor.embedding else 0
                try:
                    embedding = self.gateway.embed(describe_table(descriptor))
                    cursor.execute(update_query, (json.dumps(embedding), descriptor.id))
                    conn.commit()
                except Exception as e:
                    conn.rollback()
                    logger.error(f"Failed to index {descriptor.name}: {e}")
                    continue

                success_count += 1
                embedding_dimension = len(embedding)
                logger.info(
                    f"Embedding updated for {descriptor.name} "
                    f"(old: {old_dimension}, new: {embedding_dimension})"
                )
        finally:
            if cursor:
                cursor.close()
            if conn:
                conn.close()

        return {
            "table_name": self.table_name,
            "records_processed": success_count,
            "embedding_generated": success_count > 0,
            "embedding_dimension": embedding_dimension,
        }


def main():
    from app.config import settings

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    gateway = LLMGateway(
        openai_api_key=settings.OPENAI_API_KEY,
        chat_model=settings.OPENAI_GENERAL_MODEL,
        embedding_model=settings.OPENAI_EMBEDDING_MODEL,
    )
    indexer = TableSemanticsIndexer(
        gateway=gateway,
        db_host=settings.DB_HOST,
        db_port=settings.DB_PORT,
        db_name=settings.DB_NAME,
        db_user=settings.DB_USER,
        db_password=settings.DB_PASSWORD,
        table_name=settings.TABLE_SEMANTICS_TABLE,
    )
    result = indexer.generate_all_embeddings()
    logger.info(f"Indexing finished: {result}")


if __name__ == "__main__":
    main()
