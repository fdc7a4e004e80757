from __future__ import annotations

import streamlit as st

from puzzles.config import configure_logging
from ui.trainer_page import render_trainer_page

st.set_page_config(page_title="Chess Puzzle Trainer", page_icon="♟️", layout="wide")

configure_logging()
render_trainer_page()
