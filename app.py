"""
=============================================================================
Hybrid Powerball Generator - Streamlit front end
=============================================================================
Loads a draw history file, runs the weighted Monte Carlo engine and shows
the most frequent combinations with hot/cold numbers, pairs and triplets.

Run with:  streamlit run app.py
=============================================================================
"""

import logging
import os
from datetime import date, timedelta

import pandas as pd
import plotly.express as px
import streamlit as st

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.errors import HybridLottoError
from hybrid_lotto.export import ExportManager
from hybrid_lotto.history import FileHistorySource
from hybrid_lotto.service import error_to_dict, result_to_dict, run_analysis

# ==============================================================================
# 1. Settings
# ==============================================================================

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s', datefmt='%H:%M:%S')
logger = logging.getLogger("HybridLotto")

DATA_FILE = "history.csv"
RUN_TIMEOUT = 25  # seconds


def initialize_session_state():
    defaults = {
        'source': None,
        'source_name': None,
        'payload': None,
        'result': None,
        'hot_color': '#22c55e',
        'cold_color': '#3b82f6',
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


# ==============================================================================
# 2. Theme
# ==============================================================================

def apply_theme():
    st.markdown(f"""
    <style>
        .lottery-number {{
            display: inline-block;
            background: {st.session_state.hot_color};
            color: white;
            padding: 8px 14px;
            margin: 3px;
            border-radius: 50%;
            font-weight: bold;
            border: 2px solid rgba(255,255,255,0.3);
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
        }}

        .lottery-number.cold {{
            background: {st.session_state.cold_color};
        }}

        .special-number {{
            display: inline-block;
            background: #ef4444;
            color: white;
            padding: 8px 14px;
            margin: 3px 3px 3px 12px;
            border-radius: 50%;
            font-weight: bold;
        }}
    </style>
    """, unsafe_allow_html=True)


def balls_html(numbers, special=None, cold=False):
    css = "lottery-number cold" if cold else "lottery-number"
    html = ''.join(f'<span class="{css}">{n}</span>' for n in numbers)
    if special is not None:
        html += f'<span class="special-number">{special}</span>'
    return html


# ==============================================================================
# 3. User interface
# ==============================================================================

def render_sidebar():
    with st.sidebar:
        st.title("⚙️ Settings")

        st.subheader("📂 History")
        if st.session_state.source is None and os.path.exists(DATA_FILE):
            st.session_state.source = FileHistorySource(DATA_FILE)
            st.session_state.source_name = DATA_FILE

        uploaded_file = st.file_uploader("Upload history", type=['csv', 'xlsx', 'xls'])
        if uploaded_file:
            st.session_state.source = FileHistorySource(uploaded_file)
            st.session_state.source_name = uploaded_file.name

        if st.session_state.source_name:
            st.caption(f"Using {st.session_state.source_name}")

        st.divider()

        params = {
            'gameName': st.selectbox("Game", LotteryConfig.GAMES),
            'limit': st.slider("Draws to analyse", 1, LotteryConfig.MAX_LIMIT, LotteryConfig.DEFAULT_LIMIT),
            'startDate': st.date_input("From", date.today() - timedelta(days=365)).isoformat(),
            'endDate': st.date_input("To", date.today()).isoformat(),
            'numOfSimulation': st.number_input(
                "Simulations",
                min_value=LotteryConfig.MIN_SIMS,
                max_value=LotteryConfig.MAX_SIMS,
                value=LotteryConfig.DEFAULT_SIMS,
                step=1000
            ),
            'batchSize': st.number_input(
                "Batch size",
                min_value=LotteryConfig.MIN_BATCH,
                max_value=LotteryConfig.MAX_BATCH,
                value=LotteryConfig.DEFAULT_BATCH,
                step=1000
            ),
            'dateBias': st.text_input(
                "Date bias numbers",
                ','.join(map(str, LotteryConfig.DEFAULT_DATE_BIAS)),
                help="Comma separated numbers between 1 and 50 that get an extra weight boost"
            ),
            'workers': st.slider("Worker processes", 1, os.cpu_count() or 1, 1),
        }
        if st.checkbox("Fixed seed"):
            params['seed'] = st.number_input("Seed", min_value=0, value=42, step=1)
        return params


def render_results(payload, result):
    st.success(payload['msg'])

    st.subheader("🎯 Top combinations")
    for rank, combo in enumerate(payload['results'], 1):
        cols = st.columns([1, 6, 2])
        with cols[0]:
            st.write(f"**#{rank}**")
        with cols[1]:
            st.markdown(balls_html(combo['balls'], combo['powerball']), unsafe_allow_html=True)
        with cols[2]:
            st.write(f"{combo['count']:,} hits")

    st.download_button(
        "📥 Export to Excel",
        data=ExportManager.export_to_excel(result),
        file_name="hybrid_combinations.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    st.divider()

    analysis = payload['analysis']
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Draws analysed", f"{analysis['drawsAnalyzed']:,}")
    with col2:
        st.metric("Simulations", f"{payload['params']['numOfSimulation']:,}")
    with col3:
        st.metric("Hot powerball", analysis['hotPower'])
    with col4:
        st.metric("Cold powerball", analysis['coldPower'])

    col_hot, col_cold = st.columns(2)
    with col_hot:
        st.write("**🔥 Hot balls**")
        st.markdown(balls_html(analysis['hotBalls']), unsafe_allow_html=True)
    with col_cold:
        st.write("**❄️ Cold balls**")
        st.markdown(balls_html(analysis['coldBalls'], cold=True), unsafe_allow_html=True)


def render_cooccurrence(result):
    st.subheader("🔗 Co-occurrence")

    col_pairs, col_triplets = st.columns(2)
    with col_pairs:
        st.write("**Top pairs**")
        pairs_df = pd.DataFrame([
            {'pair': f"{a}-{b}", 'count': count} for (a, b), count in result.top_pairs
        ])
        if not pairs_df.empty:
            fig = px.bar(pairs_df, x='pair', y='count', color='count', color_continuous_scale='Viridis')
            fig.update_layout(showlegend=False, height=350)
            st.plotly_chart(fig, use_container_width=True)

    with col_triplets:
        st.write("**Top triplets**")
        triplets_df = pd.DataFrame([
            {'triplet': ', '.join(map(str, t)), 'count': count} for t, count in result.top_triplets
        ])
        st.dataframe(triplets_df, hide_index=True, use_container_width=True)


# ==============================================================================
# 4. Main
# ==============================================================================

def main():
    st.set_page_config(
        page_title="🎰 Hybrid Powerball Generator",
        page_icon="🎲",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    initialize_session_state()
    apply_theme()
    params = render_sidebar()

    st.title("🎰 Hybrid Powerball Generator")

    if st.session_state.source is None:
        st.warning(f"⚠️ Upload a history file or place {DATA_FILE} next to the app")
        st.info("""
        ### 📋 Expected columns:
        - ball1, ball2, ball3, ball4, ball5, powerball
        - optional: drawDate, drawNumber, game
        """)
        return

    if st.button("🚀 Generate", type="primary"):
        with st.spinner("Running simulations..."):
            try:
                request, result = run_analysis(st.session_state.source, params, timeout=RUN_TIMEOUT)
            except HybridLottoError as e:
                logger.error(f"Generation failed: {e}")
                st.session_state.payload = error_to_dict(e)
                st.session_state.result = None
            else:
                st.session_state.payload = result_to_dict(request, result)
                st.session_state.result = result

    payload = st.session_state.payload
    if payload is None:
        return
    if payload['status'] != 1:
        st.error(payload['msg'])
        return

    render_results(payload, st.session_state.result)
    st.divider()
    render_cooccurrence(st.session_state.result)

    st.warning("""
    ⚠️ **Disclaimer:** lottery draws are random. No weighting scheme can
    improve the odds of winning. Play responsibly!
    """)


if __name__ == "__main__":
    main()
