"""Chat interface component."""

import streamlit as st


def render_chat_interface() -> tuple:
    """Render chat interface for question input.

    Returns:
        Tuple of (user_id, query, submit)
    """
    st.title("🔒 Secure Query Agent")
    st.markdown("Ask questions in plain language. Answers only use rows the user is allowed to see.")

    user_id = st.text_input(
        "User ID:",
        placeholder="e.g., 7f3c2a10-5b1e-4c1d-9a8e-2d4f6b8c0e12"
    )

    query = st.text_area(
        "Enter your question:",
        height=100,
        placeholder="e.g., How many orders did I place last month?"
    )

    submit = st.button("Ask", type="primary", width="stretch")

    return user_id.strip(), query, submit


def render_example_queries():
    """Render example queries sidebar."""
    st.sidebar.header("📝 Example Questions")

    examples = [
        "How many orders did I place last month?",
        "What is the total amount of my recent orders?",
        "Which vendor locations are currently active?",
        "Which drivers are available right now?",
        "When does my driver's license expire?",
        "Show my last 5 orders",
    ]

    for example in examples:
        if st.sidebar.button(example, key=example):
            st.session_state['example_query'] = example

    return st.session_state.get('example_query', None)
