"""
Node functions for the LangGraph workflow.
Each node takes the trace and returns updates to it.
"""

import logging
from typing import Any, Dict

from app.config import settings
from app.graph.state import QueryTrace
from agents.llm_gateway import LLMGateway
from agents.sql_agent import SQLAgent, TableIndex, QueryGuard, Executable
from agents.executor_agent import ConnectionPool, RLSExecutor, RLSContextError
from agents.answer_agent import AnswerAgent, FALLBACK_ANSWER, strip_internal_columns

logger = logging.getLogger(__name__)


# Initialize shared components (module-level)
gateway = LLMGateway(
    openai_api_key=settings.OPENAI_API_KEY,
    chat_model=settings.OPENAI_GENERAL_MODEL,
    embedding_model=settings.OPENAI_EMBEDDING_MODEL,
    max_tokens=settings.OPENAI_MAX_TOKENS,
    provider=settings.LLM_PROVIDER,
    anthropic_api_key=settings.ANTHROPIC_API_KEY,
    anthropic_model=settings.ANTHROPIC_SQL_MODEL,
    anthropic_max_tokens=settings.ANTHROPIC_MAX_TOKENS,
)

connection_pool = ConnectionPool(
    db_host=settings.DB_HOST,
    db_port=settings.DB_PORT,
    db_name=settings.DB_NAME,
    db_user=settings.DB_USER,
    db_password=settings.DB_PASSWORD,
    min_connections=settings.DB_POOL_MIN,
    max_connections=settings.DB_POOL_MAX,
    query_timeout=settings.QUERY_TIMEOUT,
    acquire_timeout=settings.DB_POOL_ACQUIRE_TIMEOUT,
)

table_index = TableIndex(
    pool=connection_pool,
    table_name=settings.TABLE_SEMANTICS_TABLE,
    use_native=settings.ENABLE_NATIVE_SIMILARITY,
)

sql_agent = SQLAgent(gateway=gateway)

query_guard = QueryGuard()

rls_executor = RLSExecutor(
    pool=connection_pool,
    role=settings.RLS_ROLE,
    identity_setting=settings.RLS_IDENTITY_SETTING,
)

answer_agent = AnswerAgent(gateway=gateway)


def embed_node(state: QueryTrace) -> Dict[str, Any]:
    """Embed node: turn the question into a query vector."""
    logger.info(f"Embed node: Processing question: {state['question'][:100]}...")

    try:
        return {"query_embedding": gateway.embed(state["question"])}
    except Exception as e:
        logger.error(f"Embedding error: {e}")
        return {
            "query_embedding": None,
            "generation_error": f"Embedding error: {e}",
        }


def match_node(state: QueryTrace) -> Dict[str, Any]:
    """Match node: find the tables most relevant to the question."""
    query_embedding = state.get("query_embedding")
    if not query_embedding:
        logger.warning("No query embedding available, skipping table matching")
        return {"matched_tables": []}

    matches = table_index.find_top_matches(query_embedding, k=settings.TOP_K_TABLES)
    logger.info(f"Match node: {len(matches)} tables matched")
    return {"matched_tables": matches}


def sql_generator_node(state: QueryTrace) -> Dict[str, Any]:
    """SQL Generator node: write one SELECT against the matched tables."""
    logger.info(f"SQL Generator node: Generating SQL for question: {state['question'][:100]}...")

    try:
        generated_sql = sql_agent.synthesize(state["question"], state["matched_tables"])
        logger.info(f"Generated SQL: {generated_sql[:100]}...")
        return {"generated_sql": generated_sql}

    except Exception as e:
        logger.error(f"SQL generation error: {e}")
        return {
            "generated_sql": None,
            "generation_error": f"SQL generation error: {e}",
        }


def guard_node(state: QueryTrace) -> Dict[str, Any]:
    """Guard node: validate and normalize the generated SQL."""
    verdict = query_guard.check(state.get("generated_sql") or "")

    if isinstance(verdict, Executable):
        return {
            "normalized_sql": verdict.query,
            "validation": {"valid": True, "reason": None},
        }

    logger.warning(f"Generated SQL rejected: {verdict.reason}")
    return {
        "normalized_sql": None,
        "validation": {"valid": False, "reason": verdict.reason},
    }


def executor_node(state: QueryTrace) -> Dict[str, Any]:
    """
    Executor node: run the validated SQL as the caller, under row-level security.
    """
    logger.info("Executor node: Executing SQL...")

    normalized_sql = state.get("normalized_sql")
    if not normalized_sql:
        error_message = "No SQL to execute"
        return {"rows": [], "execution_error": error_message}

    try:
        rows = rls_executor.execute_scoped(state["caller_id"], normalized_sql)
        logger.info(f"SQL executed successfully. Rows returned: {len(rows)}")
        return {"rows": strip_internal_columns(rows), "execution_error": None}

    except RLSContextError as e:
        logger.error(f"Execution error: {e}")
        return {"rows": [], "execution_error": str(e)}
    except Exception as e:
        logger.error(f"Unexpected execution error: {e}")
        return {"rows": [], "execution_error": f"Unexpected execution error: {e}"}


def answer_node(state: QueryTrace) -> Dict[str, Any]:
    """
    Answer node: write the conversational reply (runs as last step).
    """
    logger.info("Answer node: Generating final answer...")

    try:
        answer = answer_agent.answer(
            state["question"],
            state.get("matched_tables") or [],
            state.get("rows") or [],
        )
    except Exception as e:
        logger.error(f"Answer generation error: {e}")
        return {"answer": FALLBACK_ANSWER}

    if not answer:
        logger.warning("Empty answer generated, using fallback")
        return {"answer": FALLBACK_ANSWER}

    return {"answer": answer}
