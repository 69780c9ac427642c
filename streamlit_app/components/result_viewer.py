"""Result viewer component."""

import streamlit as st
import pandas as pd
from typing import Dict, Any


def render_results(response: Dict[str, Any]):
    """Render an answer and its trace.

    Args:
        response: Debug endpoint response dictionary
    """
    st.markdown("### Answer")
    st.info(response.get('response', ''))

    tab1, tab2, tab3 = st.tabs(["Rows", "Query Details", "Matched Tables"])

    with tab1:
        render_rows_tab(response)

    with tab2:
        render_query_details_tab(response)

    with tab3:
        render_matched_tables_tab(response)


def render_rows_tab(response: Dict[str, Any]):
    """Render the rows the caller was allowed to see."""
    st.subheader("Result Rows")

    rows = response.get('rows') or []
    st.metric("Rows", response.get('row_count', len(rows)))

    if rows:
        st.dataframe(pd.DataFrame(rows), width="stretch")
    else:
        st.info("No rows were returned for this user.")


def render_query_details_tab(response: Dict[str, Any]):
    """Render generated SQL and the guard verdict."""
    st.subheader("Query Analysis")

    generated_sql = response.get('generated_sql')
    if generated_sql:
        st.markdown("**Generated SQL:**")
        st.code(generated_sql, language='sql')

    validation = response.get('validation')
    if validation:
        if validation.get('valid'):
            st.success("✅ Query passed validation")
            normalized_sql = response.get('normalized_sql')
            if normalized_sql and normalized_sql != generated_sql:
                st.markdown("**Executed SQL:**")
                st.code(normalized_sql, language='sql')
        else:
            st.error(f"❌ Query rejected: {validation.get('reason')}")

    if response.get('generation_error'):
        st.warning(f"Generation error: {response['generation_error']}")
    if response.get('execution_error'):
        st.warning(f"Execution error: {response['execution_error']}")


def render_matched_tables_tab(response: Dict[str, Any]):
    """Render the tables matched to the question."""
    st.subheader("Matched Tables")

    matched = response.get('matched_tables') or []
    if not matched:
        st.info("No tables matched this question.")
        return

    df = pd.DataFrame([
        {
            "Table": m.get('name'),
            "Kind": m.get('kind'),
            "Similarity": f"{m.get('similarity', 0) * 100:.2f}%",
            "Columns": ", ".join(m.get('columns') or []),
        }
        for m in matched
    ])
    st.table(df)
