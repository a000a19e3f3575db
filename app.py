import asyncio
import html
import logging

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import plotly.io as pio

# Import services
from services import (
    DataAccessError,
    DataFormattingService,
    DataQueryService,
    DemoDataService,
    ErrorCategory,
    PayloadType,
    QueryInterpreterService,
    ResponsePayload,
    UnsupportedSpeechDevice,
    VoiceAssistantService,
    get_config,
    get_error_handler,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Initialize configuration
config = get_config()

# Apply chart configuration
px.defaults.color_discrete_sequence = config.CHART_COLORS
_insights_layout = config.get_chart_layout()
pio.templates["insights_dark"] = go.layout.Template(layout=_insights_layout)
px.defaults.template = "insights_dark"

data_formatting_service = DataFormattingService()
error_handler = get_error_handler()

SUGGESTIONS = [
    "Show me total revenue",
    "Show me recent sales",
    "What is our monthly growth trend?",
    "Which customers were active this week?",
    "Show high priority insights",
    "Sales of laptops",
]

# Page configuration
st.set_page_config(
    page_title="Voice Insights Dashboard",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="collapsed"
)

def inject_css():
    st.markdown("""
    <style>
      :root{
        --vi-bg:#0B1020;
        --vi-surface:#111827;
        --vi-border:#1F2937;
        --vi-text:#E5E7EB;
        --vi-text-dim:#9CA3AF;
        --vi-primary:#2563EB;
      }
      .stApp { background: var(--vi-bg); color: var(--vi-text) !important; }
      .stButton>button {
        background: var(--vi-primary) !important;
        color: #fff !important;
        border-radius: 12px !important;
        font-weight: 600 !important;
      }
      .stButton>button:disabled { opacity: 0.6 !important; }
      .vi-reply { background: var(--vi-surface); border: 1px solid var(--vi-border); border-radius: 12px; padding: 12px 14px; margin: 8px 0; }
      .vi-reply .vi-label { color: var(--vi-text-dim); font-size: .85rem; font-weight: 600; }
    </style>
    """, unsafe_allow_html=True)

inject_css()


@st.cache_resource
def get_interpreter() -> QueryInterpreterService:
    """Shared read-only data source and interpreter, loaded once per server."""
    data_service = DataQueryService()
    sales, customers, insights = DemoDataService(seed=config.get_demo_seed()).generate()
    data_service.load_frames(sales, customers, insights)
    return QueryInterpreterService(data_service)


def remember_query(question: str) -> None:
    """Keep the latest unique questions, newest first."""
    history = st.session_state.query_history
    if question not in history:
        st.session_state.query_history = [question, *history][:config.QUERY_HISTORY_SIZE]


interpreter = get_interpreter()

# Initialize session state
if 'query_history' not in st.session_state:
    st.session_state.query_history = []
if 'last_reply' not in st.session_state:
    st.session_state.last_reply = None
if 'speech_enabled' not in st.session_state:
    st.session_state.speech_enabled = True
if 'assistant' not in st.session_state:
    # Server-rendered page: no microphone or speaker on this side.
    speech_device = UnsupportedSpeechDevice()
    st.session_state.assistant = VoiceAssistantService(
        interpreter,
        capture=speech_device,
        synthesis=speech_device,
        speech_enabled=config.get_speech_enabled(),
        on_query=remember_query,
    )

assistant: VoiceAssistantService = st.session_state.assistant


def render_story(story: dict) -> None:
    st.subheader(story['title'])
    st.write(story['summary'])
    for section in ('highlights', 'insights', 'recommendations'):
        items = story.get(section) or []
        if not items:
            continue
        st.markdown(f"**{section.title()}**")
        for item in items:
            st.markdown(f"- **{item['title']}**: {item['content']}")
    st.markdown(f"**Conclusion**: {story['conclusion']}")


def render_payload(payload: ResponsePayload) -> None:
    if payload.type == PayloadType.UNKNOWN:
        st.warning(payload.message)
        return
    if payload.type == PayloadType.ERROR:
        st.error(payload.message)
        return

    st.info(payload.summary)

    if payload.type == PayloadType.STORY:
        render_story(payload.data)
        return

    if payload.type == PayloadType.SUMMARY:
        data = payload.data
        st.metric(f"Total {data['metric']}", f"${data['total']}", help=f"{data['count']} transactions, {data['currency']}")
        return

    table = data_formatting_service.payload_to_dataframe(payload)
    if table.empty:
        return

    if payload.type == PayloadType.TREND and len(table) >= 2:
        fig = px.line(table, x='Month', y='Revenue', title='Monthly Revenue Trend')
        fig.update_layout(margin=dict(l=8, r=8, t=40, b=8), height=360, hovermode='x unified', showlegend=False)
        fig.update_layout(yaxis=dict(tickformat=',.2f', tickprefix=config.DEFAULT_CURRENCY_SYMBOL))
        fig.update_traces(line=dict(width=2), fill='tonexty', fillcolor='rgba(37, 99, 235, 0.15)')
        st.plotly_chart(fig, use_container_width=True)
    elif payload.type == PayloadType.SALES and list(table.columns) == ['Date', 'Amount'] and len(table) >= 2:
        fig = px.bar(table, x='Date', y='Amount', title='Sales by Day')
        fig.update_layout(margin=dict(l=8, r=8, t=40, b=8), height=320, showlegend=False)
        st.plotly_chart(fig, use_container_width=True)

    st.dataframe(data_formatting_service.format_chat_dataframe(table), use_container_width=True, hide_index=True)


def ask(question: str) -> None:
    with st.spinner("Processing..."):
        reply = asyncio.run(assistant.submit_text(question))
    if reply is not None:
        st.session_state.last_reply = reply


st.title("📈 Voice Insights Dashboard")
st.caption("Ask about sales, revenue, customers, users, trends, or insights.")

tab1, tab2, tab3 = st.tabs(["📊 Overview", "💬 Ask", "📖 Business Story"])

# Tab 1: Overview
with tab1:
    try:
        overview = interpreter.analytics_overview()
    except DataAccessError as e:
        error_info = error_handler.process_error(e, context="analytics_overview", category=ErrorCategory.DATA)
        error_handler.log_error(error_info)
        st.error(error_handler.display_error(error_info))
        overview = None

    if overview is not None:
        monthly = pd.DataFrame(overview['monthly_sales'])
        categories = pd.DataFrame(overview['categories'])

        col1, col2, col3 = st.columns(3)
        col1.metric("Total Sales", f"${data_formatting_service.abbreviate_number(overview['total_sales'])}")
        col2.metric("Months of Data", len(monthly))
        col3.metric("Categories", len(categories))

        left, right = st.columns(2)
        if not monthly.empty:
            fig = px.line(monthly, x='date', y='value', title='Monthly Sales', labels={'date': 'Month', 'value': 'Revenue'})
            fig.update_layout(margin=dict(l=8, r=8, t=40, b=8), height=340, showlegend=False)
            left.plotly_chart(fig, use_container_width=True)
        if not categories.empty:
            fig = px.bar(categories, x='value', y='name', orientation='h', title='Sales by Category', labels={'name': 'Category', 'value': 'Revenue'})
            fig.update_layout(margin=dict(l=8, r=8, t=40, b=8), height=340, showlegend=False)
            fig.update_traces(marker_line_width=0)
            right.plotly_chart(fig, use_container_width=True)

# Tab 2: Ask
with tab2:
    with st.form("query_form", clear_on_submit=False):
        question = st.text_input("Your question", placeholder="e.g. Show me total revenue")
        submitted = st.form_submit_button("Ask")
    if submitted and question.strip():
        ask(question)

    col_voice, col_speech = st.columns(2)
    with col_voice:
        if st.button(
            "🎤 Start Listening",
            disabled=not assistant.voice_controls_enabled,
            help=None if assistant.is_supported else "Voice input isn't available in this environment.",
        ):
            with st.spinner("Listening..."):
                voice_reply = asyncio.run(assistant.toggle_listening())
            if voice_reply is not None:
                st.session_state.last_reply = voice_reply
    with col_speech:
        speech_label = "🔊 Spoken replies on" if assistant.speech_enabled else "🔇 Spoken replies off"
        if st.button(speech_label, disabled=not assistant.is_supported):
            st.session_state.speech_enabled = assistant.toggle_speech()
            st.rerun()

    st.markdown("**Try asking**")
    suggestion_cols = st.columns(3)
    for i, suggestion in enumerate(SUGGESTIONS):
        if suggestion_cols[i % 3].button(suggestion, key=f"suggestion_{i}"):
            ask(suggestion)

    reply = st.session_state.last_reply
    if reply is not None:
        st.markdown(
            f"<div class='vi-reply'><div class='vi-label'>You asked</div>{html.escape(reply.transcript)}</div>"
            f"<div class='vi-reply'><div class='vi-label'>Assistant</div>{html.escape(reply.message)}</div>",
            unsafe_allow_html=True,
        )
        if reply.payload is not None:
            render_payload(reply.payload)

    if st.session_state.query_history:
        st.markdown("**Recent questions**")
        for i, past in enumerate(st.session_state.query_history):
            if st.button(past, key=f"history_{i}"):
                ask(past)
                st.rerun()
        if st.button("Clear History"):
            st.session_state.query_history = []
            st.rerun()

# Tab 3: Business Story
with tab3:
    timeframe = st.selectbox(
        "Timeframe",
        options=["last-quarter", "last-year"],
        format_func=lambda v: "Quarterly review" if v == "last-quarter" else "Annual review",
    )
    if st.button("Generate business story"):
        with st.spinner("Writing your story..."):
            st.session_state.story = interpreter.tell_story(timeframe)
    story_payload = st.session_state.get('story')
    if story_payload is not None:
        render_payload(story_payload)
