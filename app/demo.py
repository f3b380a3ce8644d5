"""
Lucky Minesweeper - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, List, Tuple

from luckysweeper import GameConfig, GameStatus, LuckPolicy, Minesweeper

NUMBER_COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def cell_style(symbol: str) -> Tuple[str, str, str]:
    """Map a board symbol to (text, background, text color)."""
    if symbol == ".":
        return " ", "#c0c0c0", "#666666"
    if symbol == "F":
        return "F", "#ffa500", "#ffffff"
    if symbol == "?":
        return "?", "#c0c0c0", "#000000"
    if symbol == "M":
        return "M", "#ffcccc", "#ff0000"
    if symbol == "*":
        return "M", "#ff0000", "#ffffff"
    if symbol == "X":
        return "X", "#ffcccc", "#000000"
    if symbol == "0":
        return " ", "#f0f0f0", "#cccccc"
    return symbol, "#ffffff", NUMBER_COLORS.get(symbol, "#000000")


def render_board_html(game: Minesweeper, reveal_all: bool = False) -> str:
    """Render the board as an HTML table with coordinate labels."""
    # Scale cell size based on board width
    if game.width >= 34:
        cell_size, font_size = 14, "10px"
    elif game.width >= 21:
        cell_size, font_size = 18, "12px"
    else:
        cell_size, font_size = 26, "15px"

    label = f'style="font-size: {font_size}; color: #0097a7; text-align: center;"'
    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'
    html += "<tr><td></td>" + "".join(
        f"<td {label}>{x}</td>" for x in range(game.width)
    ) + "</tr>"

    for y in range(game.height):
        html += f"<tr><td {label}>{y}</td>"
        for x in range(game.width):
            text, bg, color = cell_style(game.cell_symbol(x, y, reveal_all=reveal_all))
            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: 1px solid #999;
                color: {color};
                font-weight: bold;
                font-size: {font_size};
            ">{text}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def start_game(config: GameConfig) -> None:
    st.session_state.game = Minesweeper(config=config)
    st.session_state.settings = (config.size_level, config.density_level)
    st.session_state.last_move = None


def main():
    st.set_page_config(
        page_title="Lucky Minesweeper",
        page_icon="💣",
        layout="wide",
    )

    st.title("Lucky Minesweeper")
    st.markdown("""
    Minesweeper where luck is a setting: the engine may move mines under your
    click, but never changes a number you have already seen.
    """)

    # Sidebar configuration
    st.sidebar.header("Game Configuration")

    if "config" not in st.session_state:
        st.session_state.config = GameConfig(size_level=2)
    config: GameConfig = st.session_state.config

    st.sidebar.markdown(f"**Board Size:** {config.width}x{config.height}")
    size_col1, size_col2 = st.sidebar.columns(2)
    if size_col1.button("Smaller", key="size_down"):
        config.step_size(-1)
        st.rerun()
    if size_col2.button("Larger", key="size_up"):
        config.step_size(1)
        st.rerun()

    st.sidebar.markdown(f"**Mine Density:** {config.mine_density:.0%}")
    density_col1, density_col2 = st.sidebar.columns(2)
    if density_col1.button("Fewer", key="density_down"):
        config.step_density(-1)
        st.rerun()
    if density_col2.button("More", key="density_up"):
        config.step_density(1)
        st.rerun()

    luck = st.sidebar.selectbox(
        "Luck",
        list(LuckPolicy),
        format_func=lambda p: p.value.capitalize(),
        help="great: every click is made safe when possible. "
             "good: only clicks next to revealed cells are helped. "
             "bad: every click is made a mine when possible.",
    )
    question_marks = st.sidebar.checkbox("Question marks", value=False)
    chord_luck = st.sidebar.checkbox(
        "Luck applies to chords",
        value=False,
        help="When off, chording reveals the true contents of the neighbors.",
    )
    compute_timeout = st.sidebar.slider(
        "Placement timeout (s)", 0.1, 5.0, 1.0, step=0.1,
        help="Wall-clock budget for each mine placement request.",
    )

    # Board settings restart the game; the rest are applied live
    if "game" not in st.session_state or st.session_state.settings != (config.size_level, config.density_level):
        start_game(config)

    game: Minesweeper = st.session_state.game
    game.config.luck = luck
    game.config.chord_luck = chord_luck
    game.config.compute_timeout = compute_timeout
    game.solver.compute_timeout = compute_timeout
    if game.config.question_marks != question_marks:
        game.set_question_marks_enabled(question_marks)

    use_vertical_layout = game.width >= 34

    col2 = None
    if use_vertical_layout:
        board_container = st.container()
    else:
        col1, col2 = st.columns([3, 1])
        board_container = col1

    with board_container:
        st.subheader("Game Board")

        with st.form("move", clear_on_submit=False):
            mcol1, mcol2, mcol3 = st.columns([1, 1, 2])
            with mcol1:
                x = st.number_input("x", 0, game.width - 1, 0, step=1)
            with mcol2:
                y = st.number_input("y", 0, game.height - 1, 0, step=1)
            with mcol3:
                action = st.radio(
                    "Action", ["Reveal", "Flag", "Chord"], horizontal=True
                )
            submitted = st.form_submit_button("Play", type="primary")

        if submitted:
            if action == "Reveal":
                game.reveal(int(x), int(y))
            elif action == "Flag":
                game.toggle_flag(int(x), int(y))
            else:
                game.chord(int(x), int(y))
            st.session_state.last_move = (action, int(x), int(y))
            st.rerun()

        btn_col1, btn_col2 = st.columns(2)
        with btn_col1:
            if st.button("New Game"):
                game.new_game()
                st.session_state.last_move = None
                st.rerun()
        with btn_col2:
            if st.button("Claim Win", disabled=game.status is not GameStatus.ACTIVE):
                game.claim_win()
                st.rerun()

        st.markdown(render_board_html(game), unsafe_allow_html=True)

        if game.is_won():
            st.success("You won! All safe cells are revealed.")
        elif game.is_lost():
            st.error("Game over! You hit a mine.")
        elif st.session_state.last_move:
            move, mx, my = st.session_state.last_move
            st.info(f"Last move: {move} ({mx}, {my})")

        # Board legend
        st.markdown("""
        <div style="font-size: 12px; margin-top: 10px;">
        <b>Legend:</b>
        <span style="background: #c0c0c0; padding: 2px 6px; margin: 0 4px;">&nbsp;</span> Hidden
        <span style="color: #0000ff; font-weight: bold; margin: 0 4px;">1-8</span> Adjacent mines
        <span style="background: #ffa500; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">F</span> Flag
        <span style="background: #ffcccc; color: #ff0000; padding: 2px 6px; margin: 0 4px; font-weight: bold;">M</span> Mine (shown at end)
        <span style="background: #ff0000; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">M</span> Exploded mine
        <span style="background: #ffcccc; padding: 2px 6px; margin: 0 4px; font-weight: bold;">X</span> Wrong flag
        </div>
        """, unsafe_allow_html=True)

    if use_vertical_layout:
        stats_container = st.container()
    else:
        assert col2 is not None
        stats_container = col2

    with stats_container:
        st.subheader("Game")
        metrics: List[Tuple[str, Any]] = [
            ("Status", game.status.value.capitalize()),
            ("Mines", game.mines_displayed()),
            ("Cells Revealed", f"{game.visible_count} / {game.grid.area}"),
        ]
        for label, value in metrics:
            st.metric(label, value)

        st.markdown("---")
        st.markdown("**Placement Solver**")
        stats = game.solver.stats()
        st.text(f"Requests: {stats['requests_count']}")
        st.text(f"Fast paths: {stats['fast_path_count']}")
        st.text(f"MILP runs: {stats['milp_runs_count']}")
        for outcome in ("success", "infeasible", "timeout"):
            st.text(f"{outcome.capitalize()}: {stats[f'{outcome}_count']}")
        st.text(f"Max solve time: {stats['max_solve_time']:.3f}s")

        if game.status is not GameStatus.ACTIVE:
            st.markdown("---")
            with st.expander("Full minefield"):
                st.markdown(render_board_html(game, reveal_all=True), unsafe_allow_html=True)


if __name__ == "__main__":
    main()
