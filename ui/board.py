"""
Streamlit board view.

A single interactive board made of square buttons: click a piece, then a
highlighted destination. The drop is reported back as (source, target)
square names; legality is decided by the session controller's rules engine.
"""

from __future__ import annotations

from functools import lru_cache
from typing import FrozenSet, Optional, Tuple

import chess
import chess.svg
import streamlit as st

from puzzles.interfaces import BoardConfig


PIECE_SYMBOLS = {
    "P": "♙", "N": "♘", "B": "♗", "R": "♖", "Q": "♕", "K": "♔",
    "p": "♟", "n": "♞", "b": "♝", "r": "♜", "q": "♛", "k": "♚",
}

_SELECTED_KEY = "board_selected_square"


class StreamlitBoardView:
    """
    BoardView kept in st.session_state between reruns.

    configure() and set_position() only record state; the page draws it
    with render_board().
    """

    def __init__(self) -> None:
        self.config = BoardConfig(position=chess.STARTING_FEN)
        self.fen = chess.STARTING_FEN
        # Bumped on every configure() so button keys from the previous puzzle are discarded
        self.nonce = 0

    def configure(self, config: BoardConfig) -> None:
        self.config = config
        self.fen = config.position
        self.nonce += 1

    def set_position(self, fen: str, animate: bool = False) -> None:
        # Button squares cannot animate; the flag is accepted and ignored
        self.fen = fen

    def resize(self) -> None:
        # Squares are laid out with st.columns, which already track the page width
        pass

    @property
    def flipped(self) -> bool:
        return self.config.orientation == "black"


@lru_cache(maxsize=256)
def _get_legal_destinations_cached(fen: str, from_square: int) -> FrozenSet[int]:
    board = chess.Board(fen)
    return frozenset(m.to_square for m in board.legal_moves if m.from_square == from_square)


@lru_cache(maxsize=256)
def _get_pieces_with_moves_cached(fen: str) -> FrozenSet[int]:
    board = chess.Board(fen)
    return frozenset(m.from_square for m in board.legal_moves)


def render_board_svg(fen: str, size: int = 400, flipped: bool = False) -> str:
    """Static SVG rendering of a position."""
    return chess.svg.board(chess.Board(fen), size=size, flipped=flipped)


def clear_selection() -> None:
    if _SELECTED_KEY in st.session_state:
        del st.session_state[_SELECTED_KEY]


def render_board(view: StreamlitBoardView, *, disabled: bool = False, key: str = "board") -> Optional[Tuple[str, str]]:
    """
    Draw the board and return (source, target) when the player completes a move.
    """
    try:
        board = chess.Board(view.fen)
    except ValueError:
        st.error(f"Invalid FEN: {view.fen}")
        return None

    selected: Optional[int] = st.session_state.get(_SELECTED_KEY)
    movable = set() if disabled or not view.config.draggable else set(_get_pieces_with_moves_cached(view.fen))
    if selected not in movable:
        selected = None
    destinations = set(_get_legal_destinations_cached(view.fen, selected)) if selected is not None else set()

    st.markdown(
        """
        <style>
        div[data-testid="stHorizontalBlock"] button {
            height: 52px; min-height: 52px; padding: 0; font-size: 30px;
            border-radius: 0; border: none; margin: 0;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )

    ranks = range(8) if view.flipped else range(7, -1, -1)
    files = list(range(7, -1, -1) if view.flipped else range(8))

    clicked: Optional[int] = None
    for rank in ranks:
        cols = st.columns(8, gap="small")
        for col_idx, file in enumerate(files):
            square = chess.square(file, rank)
            piece = board.piece_at(square)
            label = PIECE_SYMBOLS.get(piece.symbol(), " ") if piece else " "
            if square == selected:
                label = f"[{label}]"
            elif square in destinations:
                label = f"{label}•" if piece else "•"

            with cols[col_idx]:
                pressed = st.button(
                    label,
                    key=f"{key}_{view.nonce}_{square}",
                    help=chess.square_name(square),
                    use_container_width=True,
                    disabled=disabled or (square not in movable and square not in destinations),
                )
                if pressed:
                    clicked = square

    if clicked is None:
        return None

    if selected is not None and clicked in destinations:
        clear_selection()
        return chess.square_name(selected), chess.square_name(clicked)

    if clicked in movable and clicked != selected:
        st.session_state[_SELECTED_KEY] = clicked
    else:
        clear_selection()
    st.rerun()
    return None
