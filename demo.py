import random
import time

import numpy as np
import streamlit as st

from slide2048.game import Direction, GridEngine


def play_game(size: int, seed: int) -> list[list[list[int]]]:
    """Play random valid moves until the grid is won or lost, recording every grid."""
    rng = random.Random(seed)
    game = GridEngine(size, rng=rng)
    states = [[list(row) for row in game.rows]]
    while not game.is_lost() and not game.is_won():
        valid = [d for d in Direction if game.valid(d)]
        game.move(rng.choice(valid))
        states.append([list(row) for row in game.rows])
    return states


def display_2048_board(board, moves: int, length: int):
    """
    Display a 2048 game board in Streamlit with proper styling.

    Parameters:
    board (numpy.ndarray or list): A square array representing the 2048 game board,
                                  where 0 represents an empty cell.
    """
    board = np.array(board)
    size = board.shape[0]

    color_map = {
        0: "#CDC1B4",
        2: "#EEE4DA",
        4: "#EDE0C8",
        8: "#F2B179",
        16: "#F59563",
        32: "#F67C5F",
        64: "#F65E3B",
        128: "#EDCF72",
        256: "#EDCC61",
        512: "#EDC850",
        1024: "#EDC53F",
        2048: "#EDC22E",
    }
    default_color = "#3C3A32"

    st.markdown("""
    <style>
    .tile-container {
        background-color: #BBADA0;
        border-radius: 6px;
        padding: 10px;
        width: fit-content;
    }
    .tile {
        width: 80px;
        height: 80px;
        margin: 3px;
        border-radius: 3px;
        display: flex;
        justify-content: center;
        align-items: center;
        font-family: 'Arial', sans-serif;
        font-weight: bold;
        font-size: 24px;
        text-align: center;
        color: #776E65;
    }
    .value-0 {
        color: transparent;
    }
    .value-high {
        color: #F9F6F2;
    }
    </style>
    """, unsafe_allow_html=True)

    s = """<div class="tile-container">"""
    for i in range(size):
        s += '<div style="display: flex;">'
        for j in range(size):
            value = int(board[i][j])
            bg_color = color_map.get(value, default_color)
            text_class = "value-0" if value == 0 else "value-high" if value >= 8 else ""
            display_text = "" if value == 0 else str(value)
            s += f'<div class="tile {text_class}" style="background-color: {bg_color};">{display_text}</div>'
        s += '</div>'
    s += "</div>"

    st.markdown(s, unsafe_allow_html=True)

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Moves made", moves)
    with col2:
        st.metric("Highest Tile", int(np.max(board)))
    with col3:
        st.metric("Game Length", length)


if __name__ == "__main__":
    st.title("2048 Game Viewer")

    size = st.sidebar.number_input("Grid size", min_value=2, max_value=8, value=4)
    seed = st.sidebar.number_input("Seed", min_value=0, value=0)

    if (
        st.button("Regenerate")
        or "game" not in st.session_state
        or st.session_state.get("params") != (size, seed)
    ):
        st.session_state.params = (size, seed)
        st.session_state.game = play_game(int(size), int(seed))
        st.session_state.index = 0

    states = st.session_state.game

    cols = st.columns(4)
    with cols[0]:
        if st.button("Start"):
            st.session_state.index = 0
    with cols[1]:
        if st.button("Previous"):
            st.session_state.index = max(0, st.session_state.index - 1)
    with cols[2]:
        if st.button("Next"):
            st.session_state.index = min(len(states) - 1, st.session_state.index + 1)
    with cols[3]:
        if st.button("End"):
            st.session_state.index = len(states) - 1
    if st.button("Auto play"):
        st.session_state.auto_play = True

    current_state = states[st.session_state.index]
    display_2048_board(current_state, st.session_state.index, len(states) - 1)

    last = GridEngine.from_rows(states[-1])
    if st.session_state.index == len(states) - 1:
        st.write("You win" if last.is_won() else "You lose")

    if "auto_play" in st.session_state and st.session_state.auto_play:
        if st.session_state.index == len(states) - 1:
            st.session_state.auto_play = False
        else:
            st.session_state.index += 1
            time.sleep(0.05)
            st.rerun()
