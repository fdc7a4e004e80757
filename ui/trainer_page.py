from __future__ import annotations

import logging
import time

import pandas as pd
import streamlit as st

from puzzles.config import get_settings
from puzzles.events import (
    MoveDropped,
    MoveOutcome,
    NextRequested,
    PreviousRequested,
    PromotionCancelled,
    PromotionChosen,
)
from puzzles.interfaces import PuzzleTrainerError
from puzzles.manager import EXPORT_FILENAME, EXPORT_MIME, ManagerResult
from puzzles.puzzle_types import SessionPhase
from puzzles.session import PuzzleController
from puzzles.trainer import TrainerApp
from ui.board import PIECE_SYMBOLS, StreamlitBoardView, clear_selection, render_board, render_board_svg
from ui.feedback import StreamlitNotifier, StreamlitSounds

logger = logging.getLogger(__name__)

_APP_KEY = "trainer_app_v1"
_UPLOAD_KEY = "trainer_last_upload_id"
_CONFIRM_RESET_KEY = "trainer_confirm_reset"
_CONFIRM_DELETE_KEY = "trainer_confirm_delete"
_FORM_KEYS = ("m_id", "m_fen", "m_solution")


def _get_app() -> TrainerApp:
    app = st.session_state.get(_APP_KEY)
    if isinstance(app, TrainerApp):
        return app

    settings = get_settings()
    app = TrainerApp(
        board=StreamlitBoardView(),
        notifier=StreamlitNotifier(),
        sounds=StreamlitSounds(settings.sounds_dir),
        settings=settings,
    )
    try:
        app.start()
    except PuzzleTrainerError as e:
        logger.error("Trainer start failed: %s", e)
        st.error(str(e))
    st.session_state[_APP_KEY] = app
    return app


def _confirmed(_message: str) -> bool:
    # Confirmation already happened through the two-step buttons
    return True


# =============================================================================
# SIDEBAR
# =============================================================================


def render_player_sidebar(app: TrainerApp) -> None:
    tracker = app.tracker
    st.sidebar.subheader("Player")

    players = tracker.players
    current = st.sidebar.selectbox(
        "Player",
        players,
        index=players.index(tracker.current_player),
        label_visibility="collapsed",
    )
    tracker.select_player(current)

    with st.sidebar.form("add_player", clear_on_submit=True):
        name = st.text_input("New player name")
        if st.form_submit_button("Add player"):
            if tracker.add_player(name):
                st.rerun()

    if not st.session_state.get(_CONFIRM_RESET_KEY):
        if st.sidebar.button("Reset my stats", use_container_width=True):
            if tracker.record_for(tracker.current_player) is not None:
                st.session_state[_CONFIRM_RESET_KEY] = True
                st.rerun()
    else:
        st.sidebar.warning(f"Clear all statistics for {tracker.current_player}?")
        c1, c2 = st.sidebar.columns(2)
        if c1.button("Yes, reset", type="primary"):
            if tracker.reset_player(tracker.current_player, _confirmed):
                st.toast("Statistics reset for this player.")
            st.session_state[_CONFIRM_RESET_KEY] = False
            st.rerun()
        if c2.button("Cancel", key="cancel_reset"):
            st.session_state[_CONFIRM_RESET_KEY] = False
            st.rerun()


def render_file_sidebar(app: TrainerApp) -> None:
    st.sidebar.subheader("Puzzle file")
    upload = st.sidebar.file_uploader("Upload puzzles (.json)", type=["json"])
    # The uploader keeps its value across reruns; import each file once
    if upload is not None and st.session_state.get(_UPLOAD_KEY) != upload.file_id:
        st.session_state[_UPLOAD_KEY] = upload.file_id
        if app.apply_upload(upload.getvalue()):
            clear_selection()
            st.toast(f"Loaded {len(app.controller.puzzles)} puzzles")

    st.sidebar.download_button(
        "Export puzzles",
        data=app.manager.export(),
        file_name=EXPORT_FILENAME,
        mime=EXPORT_MIME,
        use_container_width=True,
        disabled=not app.controller.puzzles,
    )


# =============================================================================
# BOARD
# =============================================================================


def render_promotion_chooser(app: TrainerApp) -> None:
    pending = app.controller.session.pending_promotion
    if pending is None:
        return

    st.write("**Promote to:**")
    cols = st.columns(5)
    for col, piece in zip(cols, ("q", "r", "b", "n")):
        symbol = piece.upper() if pending.color == "w" else piece
        if col.button(PIECE_SYMBOLS[symbol], key=f"promote_{piece}", use_container_width=True):
            app.controller.dispatch(PromotionChosen(piece))
            st.rerun()
    if cols[4].button("✕", key="promote_cancel", use_container_width=True):
        app.controller.dispatch(PromotionCancelled())
        st.rerun()


def render_board_panel(app: TrainerApp) -> None:
    controller = app.controller
    view = controller.board

    if not controller.puzzles:
        app.notifier.render()
        st.info("No puzzles loaded. Upload a puzzle file or add one in the manager.")
        return
    if controller.engine is None:
        # The current puzzle failed to load; let the player move past it
        app.notifier.render()
        st.warning("This puzzle could not be loaded.")
        render_navigation(controller)
        return

    col_board, col_info = st.columns([2, 1])

    with col_board:
        move = render_board(view, disabled=not controller.accepts_moves)
        if move is not None:
            outcome = controller.dispatch(MoveDropped(*move))
            if outcome == MoveOutcome.SNAPBACK:
                st.toast("Illegal move")
            st.rerun()
        render_promotion_chooser(app)

    with col_info:
        app.notifier.render()
        puzzle = controller.active_puzzle
        if puzzle is not None and puzzle.uses_line:
            done = min(controller.session.line_step, len(puzzle.line))
            st.write(f"Line: **{done} / {len(puzzle.line)}**")
        if controller.session.phase == SessionPhase.SOLVED:
            st.success("Correct!")
        elif controller.session.phase == SessionPhase.ALL_SOLVED:
            st.success("All puzzles completed! 🎉")
        st.write(f"Progress: **{controller.session.active_index + 1} / {len(controller.puzzles)}**")

        render_navigation(controller)


def render_navigation(controller: PuzzleController) -> None:
    nav1, nav2 = st.columns(2)
    with nav1:
        if st.button("Back", use_container_width=True):
            controller.dispatch(PreviousRequested())
            clear_selection()
            st.rerun()
    with nav2:
        if st.button("Next", use_container_width=True):
            controller.dispatch(NextRequested())
            clear_selection()
            st.rerun()


# =============================================================================
# MANAGER / STATS
# =============================================================================


def _load_form(values: dict) -> None:
    st.session_state["m_id"] = str(values["id"])
    st.session_state["m_fen"] = values["fen"]
    st.session_state["m_solution"] = values["solution"]


def _show_result(result: ManagerResult) -> None:
    if not result.ok:
        st.error(result.message)
        return
    st.toast(result.message)
    st.rerun()


def render_manager_panel(app: TrainerApp) -> None:
    manager = app.manager

    entries = manager.entries()
    if not entries:
        st.write("No puzzles yet.")
    for i, row in enumerate(entries):
        c_id, c_fen, c_sol, c_edit, c_del = st.columns([1, 5, 3, 1, 1])
        c_id.write(f"**#{row['id']}**")
        c_fen.code(row["fen"], language=None)
        c_sol.write(f"Solution: `{row['solution']}`")
        if c_edit.button("Edit", key=f"edit_{i}_{row['id']}"):
            values = manager.form_values(row["id"])
            if values:
                _load_form(values)
                st.rerun()
        if c_del.button("Delete", key=f"delete_{i}_{row['id']}"):
            st.session_state[_CONFIRM_DELETE_KEY] = row["id"]
            st.rerun()

    pending_delete = st.session_state.get(_CONFIRM_DELETE_KEY)
    if pending_delete is not None:
        st.warning(f"Delete puzzle #{pending_delete}?")
        c1, c2 = st.columns(2)
        if c1.button("Yes, delete", type="primary"):
            result = manager.delete(pending_delete, _confirmed)
            st.session_state[_CONFIRM_DELETE_KEY] = None
            clear_selection()
            st.toast(result.message)
            st.rerun()
        if c2.button("Cancel", key="cancel_delete"):
            st.session_state[_CONFIRM_DELETE_KEY] = None
            st.rerun()

    st.divider()
    for k in _FORM_KEYS:
        st.session_state.setdefault(k, "")
    st.text_input("ID (for update)", key="m_id")
    st.text_input("FEN", key="m_fen")
    st.text_input("Solution (comma separated SAN)", key="m_solution")

    fen = st.session_state["m_fen"].strip()
    if fen:
        try:
            st.markdown(render_board_svg(fen, size=240), unsafe_allow_html=True)
        except ValueError:
            st.caption("Not a valid FEN")

    c_add, c_update = st.columns(2)
    if c_add.button("Add", use_container_width=True):
        _show_result(manager.add(st.session_state["m_fen"], st.session_state["m_solution"]))
    if c_update.button("Update", use_container_width=True):
        _show_result(
            manager.update(st.session_state["m_id"], st.session_state["m_fen"], st.session_state["m_solution"])
        )


def render_stats_panel(app: TrainerApp) -> None:
    tracker = app.tracker
    player = tracker.current_player
    record = tracker.record_for(player)
    if record is None:
        st.write(f"No data for player **{player}** yet.")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Attempts", record.overall.attempts)
    c2.metric("Correct", record.overall.correct)
    c3.metric("Wrong", record.overall.wrong)

    df = pd.DataFrame(tracker.puzzle_rows(player, app.controller.puzzles))
    if df.empty:
        return
    df = df.rename(
        columns={"puzzle": "Puzzle", "fen": "FEN", "attempts": "Attempts", "correct": "Correct", "wrong": "Wrong"}
    )
    st.dataframe(df, hide_index=True, use_container_width=True)


# =============================================================================
# PAGE
# =============================================================================


def render_trainer_page() -> None:
    st.header("♟️ Chess Puzzle Trainer")

    app = _get_app()
    try:
        app.tick()

        render_player_sidebar(app)
        render_file_sidebar(app)

        tab_train, tab_manage, tab_stats = st.tabs(["Train", "Manage puzzles", "Stats"])
        with tab_train:
            render_board_panel(app)
        with tab_manage:
            render_manager_panel(app)
        with tab_stats:
            render_stats_panel(app)
    except PuzzleTrainerError as e:
        logger.error("Puzzle could not be loaded: %s", e)
        st.error(str(e))

    app.sounds.render()

    # Poll the auto-advance timer
    delay = app.scheduler.next_delay()
    if delay is not None:
        time.sleep(delay)
        st.rerun()
