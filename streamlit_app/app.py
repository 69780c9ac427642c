"""Operator console for the Secure Query Agent."""

import os
from typing import Any, Dict

import requests
import streamlit as st

from components.chat_ui import render_chat_interface, render_example_queries
from components.result_viewer import render_results

API_URL = os.getenv("API_URL", "http://localhost:8001")
REQUEST_TIMEOUT = 120


def ask_agent(api_url: str, user_id: str, query: str) -> Dict[str, Any]:
    """Call the debug endpoint so the full trace can be shown."""
    response = requests.post(
        f"{api_url}/sn-agent/query/debug",
        json={"userId": user_id, "query": query},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def record_history(user_id: str, query: str, result: Dict[str, Any]):
    validation = result.get('validation') or {}
    st.session_state['query_history'].append({
        'user_id': user_id,
        'query': query,
        'timestamp': result.get('timestamp'),
        'executed': bool(validation.get('valid')) and not result.get('execution_error'),
    })


def render_history():
    history = st.session_state['query_history']
    if not history:
        return
    with st.expander("Recent Questions"):
        for item in reversed(history[-10:]):
            marker = "✅" if item['executed'] else "⚠️"
            st.markdown(f"{marker} **{item['query'][:100]}** ({item['user_id']}) - {item['timestamp']}")


st.set_page_config(page_title="Secure Query Agent", page_icon="🔒", layout="wide")

if 'query_history' not in st.session_state:
    st.session_state['query_history'] = []

with st.sidebar:
    st.markdown("### Secure Query Agent")
    api_url = st.text_input("API URL", value=API_URL)
    st.metric("Questions Asked", len(st.session_state['query_history']))
    st.markdown("---")
    example = render_example_queries()

user_id, query, submit = render_chat_interface()
query = example or query

if submit:
    if not user_id:
        st.warning("Enter a user ID to ask on behalf of.")
    elif not query or not query.strip():
        st.warning("Enter a question.")
    else:
        with st.spinner("Thinking..."):
            try:
                result = ask_agent(api_url, user_id, query)
            except requests.exceptions.Timeout:
                st.error("The question took too long to answer.")
            except requests.exceptions.ConnectionError:
                st.error(f"Cannot connect to API at {api_url}")
            except requests.exceptions.HTTPError as e:
                st.error(f"API Error: {e.response.status_code} - {e.response.text}")
            else:
                record_history(user_id, query, result)
                render_results(result)

render_history()
