"""Pygame front-end — keyboard input, table drawing, scoreboard and banners.

The visualizer only reads GameSession.snapshot() and the events returned by
advance(); all game rules live in tt_engine.
"""

import random
from typing import Optional

try:
    import pygame
except ImportError:
    pygame = None

from tt_engine.ai_player import get_preset
from tt_engine.game import GameSession
from tt_engine.types import (
    InputState,
    MatchOver,
    PointScored,
    ServeSwitched,
    SessionPhase,
    SetOver,
    Settings,
    Snapshot,
)
from tt_engine import table

PANEL_W = 300
HEADER_H = 42
MARGIN = 20
WIN_W = table.BOARD_WIDTH + PANEL_W + MARGIN * 2
WIN_H = table.BOARD_HEIGHT + HEADER_H + MARGIN * 2 + 40

BANNER_FRAMES = 120
SCORE_FLASH_FRAMES = 30

# Colors
BG_COLOR = (12, 12, 22)
TABLE_GREEN = (46, 204, 113)
TABLE_GREEN_DARK = (39, 174, 96)
LINE_WHITE = (255, 255, 255)
BALL_WHITE = (255, 255, 255)
SHADOW = (20, 80, 45)
ACCENT = (233, 69, 96)
CARD_BG = (26, 26, 46)
PANEL_BG = (22, 33, 62)
TEXT_WHITE = (224, 224, 224)
TEXT_DIM = (136, 136, 136)
NET_YELLOW = (255, 217, 61)
WON_GREEN = (40, 167, 69)
P1_COLOR = (52, 152, 219)
P2_COLOR = (231, 76, 60)

PLAYER_COLORS = {1: P1_COLOR, 2: P2_COLOR}


def read_inputs(keys) -> InputState:
    """Held keys -> paddle actions. W/S for player 1, arrows for player 2."""
    return InputState(
        p1_up=bool(keys[pygame.K_w]),
        p1_down=bool(keys[pygame.K_s]),
        p2_up=bool(keys[pygame.K_UP]),
        p2_down=bool(keys[pygame.K_DOWN]),
    )


def _draw_table(surface, snap: Snapshot):
    w, h = int(snap.board_width), int(snap.board_height)
    half = h // 2
    pygame.draw.rect(surface, TABLE_GREEN, (0, 0, w, half))
    pygame.draw.rect(surface, TABLE_GREEN_DARK, (0, half, w, h - half))
    pygame.draw.rect(surface, LINE_WHITE, (2, 2, w - 4, h - 4), 4)

    # Net and its mesh
    pygame.draw.rect(surface, LINE_WHITE, (w // 2 - 2, 0, 4, h))
    for y in range(10, h, 20):
        pygame.draw.line(surface, LINE_WHITE, (w // 2 - 15, y), (w // 2 + 15, y), 1)


def _draw_paddles(surface, snap: Snapshot):
    for paddle in (snap.paddle1, snap.paddle2):
        rect = (int(paddle.x), int(paddle.y), int(paddle.width), int(paddle.height))
        pygame.draw.rect(surface, PLAYER_COLORS[paddle.player], rect)
        # Highlight strip on the outer edge
        strip_w = int(paddle.width / 3)
        strip_x = int(paddle.x) if paddle.player == 1 else int(paddle.x + paddle.width - strip_w)
        highlight = pygame.Surface((strip_w, int(paddle.height)), pygame.SRCALPHA)
        highlight.fill((255, 255, 255, 77))
        surface.blit(highlight, (strip_x, int(paddle.y)))


def _draw_ball(surface, snap: Snapshot):
    bx, by, r = int(snap.ball.x), int(snap.ball.y), int(snap.ball.radius)
    pygame.draw.circle(surface, SHADOW, (bx + 2, by + 2), r)
    pygame.draw.circle(surface, BALL_WHITE, (bx, by), r)
    pygame.draw.circle(surface, (230, 230, 230), (bx - 2, by - 2), max(1, r // 3))


def _draw_overlay(surface, font_lg, font_md, title, message):
    w, h = surface.get_size()
    shade = pygame.Surface((w, h), pygame.SRCALPHA)
    shade.fill((0, 0, 0, 150))
    surface.blit(shade, (0, 0))
    t = font_lg.render(title, True, LINE_WHITE)
    m = font_md.render(message, True, TEXT_WHITE)
    surface.blit(t, ((w - t.get_width()) // 2, h // 2 - 30))
    surface.blit(m, ((w - m.get_width()) // 2, h // 2 + 10))


def _overlay_text(snap: Snapshot, names, banner) -> Optional[tuple]:
    if snap.phase == SessionPhase.MENU:
        return banner or ("Table Tennis", "Press SPACE to start")
    if snap.phase == SessionPhase.PAUSED:
        return ("Game Paused", "Press SPACE to resume")
    if snap.phase == SessionPhase.SET_OVER and snap.sets_history:
        last = snap.sets_history[-1]
        return (
            f"Set {last.set_index} Winner: {names[last.winner - 1]}",
            f"Score: {last.player1_score} - {last.player2_score}   (SPACE to continue)",
        )
    if snap.phase == SessionPhase.GAME_OVER:
        return (
            f"{names[snap.match_winner - 1]} Wins!",
            f"Final Score: {snap.sets[0]} - {snap.sets[1]}   (N for a new game)",
        )
    return None


def run_visualizer(
    settings: Optional[Settings] = None,
    seed: Optional[int] = None,
    names: tuple = ("Player 1", "Player 2"),
):
    """Launch the pygame window. Player 2 is the AI unless the arrows are held."""
    if pygame is None:
        print("ERROR: pygame is not installed. Run: pip install pygame")
        return

    pygame.init()
    screen = pygame.display.set_mode((WIN_W, WIN_H))
    pygame.display.set_caption("Table Tennis")
    clock = pygame.time.Clock()

    font_sm = pygame.font.SysFont("monospace", 12)
    font_md = pygame.font.SysFont("monospace", 15)
    font_lg = pygame.font.SysFont("monospace", 24, bold=True)
    font_xl = pygame.font.SysFont("monospace", 42, bold=True)
    font_title = pygame.font.SysFont("monospace", 15, bold=True)

    session = GameSession(settings, rng=random.Random(seed))
    board = pygame.Surface((table.BOARD_WIDTH, table.BOARD_HEIGHT))

    banner = None
    banner_frames = 0
    flash = {1: 0, 2: 0}
    running = True

    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False
                elif event.key == pygame.K_SPACE:
                    session.handle_controls(InputState(toggle_pause=True))
                elif event.key == pygame.K_r and session.phase != SessionPhase.GAME_OVER:
                    session.handle_controls(InputState(reset=True))
                    banner, banner_frames = ("Game Reset", "Press SPACE to start"), 0
                elif event.key == pygame.K_n:
                    session.new_game()
                    banner, banner_frames = None, 0

        events = session.advance(1.0, read_inputs(pygame.key.get_pressed()))
        for e in events:
            if isinstance(e, PointScored):
                flash[e.player] = SCORE_FLASH_FRAMES
            elif isinstance(e, ServeSwitched):
                banner, banner_frames = (f"{names[e.new_server - 1]} to serve", ""), BANNER_FRAMES // 2
            elif isinstance(e, (SetOver, MatchOver)):
                banner = None

        if banner_frames > 0:
            banner_frames -= 1
        elif session.phase == SessionPhase.PLAYING:
            banner = None
        for player in flash:
            flash[player] = max(0, flash[player] - 1)

        snap = session.snapshot()

        # ---- DRAW ----
        screen.fill(BG_COLOR)

        # Header
        pygame.draw.rect(screen, CARD_BG, (0, 0, WIN_W, HEADER_H))
        pygame.draw.line(screen, ACCENT, (0, HEADER_H - 1), (WIN_W, HEADER_H - 1), 2)
        screen.blit(font_title.render("TABLE TENNIS", True, TEXT_WHITE), (MARGIN, 13))
        controls = font_sm.render(
            "W/S:P1  UP/DOWN:P2  SPACE:start/pause  R:reset set  N:new game  Q:quit",
            True, TEXT_DIM,
        )
        screen.blit(controls, (WIN_W - controls.get_width() - 10, 16))

        # Board
        _draw_table(board, snap)
        _draw_paddles(board, snap)
        _draw_ball(board, snap)
        overlay = _overlay_text(snap, names, banner)
        if overlay:
            _draw_overlay(board, font_lg, font_md, *overlay)
        elif banner and banner_frames > 0:
            note = font_md.render(banner[0], True, NET_YELLOW)
            board.blit(note, ((table.BOARD_WIDTH - note.get_width()) // 2, 12))
        screen.blit(board, (MARGIN, HEADER_H + MARGIN))

        # ---- SCOREBOARD PANEL ----
        panel_x = MARGIN * 2 + table.BOARD_WIDTH
        pygame.draw.rect(screen, PANEL_BG, (panel_x, HEADER_H, WIN_W - panel_x, WIN_H - HEADER_H))
        px = panel_x + 12
        py = HEADER_H + 12

        screen.blit(font_title.render(f"SET {snap.current_set}", True, ACCENT), (px, py))
        fmt = session.settings.match_format
        screen.blit(font_sm.render(f"Best of {fmt}", True, TEXT_DIM), (px + 90, py + 2))
        py += 26

        for player in (1, 2):
            color = PLAYER_COLORS[player]
            score_color = NET_YELLOW if flash[player] else color
            serve_mark = "*" if snap.server == player else " "
            screen.blit(font_md.render(f"{serve_mark} {names[player - 1]}", True, color), (px, py))
            screen.blit(font_xl.render(str(snap.score[player - 1]), True, score_color), (px + 170, py - 10))
            screen.blit(font_sm.render(f"sets: {snap.sets[player - 1]}", True, TEXT_DIM), (px + 14, py + 18))
            py += 52

        if snap.deuce:
            screen.blit(font_md.render("DEUCE!", True, NET_YELLOW), (px, py))
        py += 24

        # Set history
        pygame.draw.line(screen, (42, 42, 74), (px, py), (WIN_W - 12, py), 1)
        py += 8
        screen.blit(font_title.render("SETS", True, ACCENT), (px, py))
        py += 20
        for record in snap.sets_history:
            color = WON_GREEN if record.winner == 1 else P2_COLOR
            line = f"Set {record.set_index}: {record.player1_score} - {record.player2_score}  {names[record.winner - 1]}"
            screen.blit(font_sm.render(line, True, color), (px, py))
            py += 15

        # Rally info
        py = WIN_H - 60
        preset = get_preset(session.settings.difficulty)
        screen.blit(font_sm.render(f"AI: {preset['label']}", True, TEXT_DIM), (px, py))
        screen.blit(font_sm.render(f"Rally: {snap.rally_hits} hits", True, TEXT_DIM), (px, py + 15))
        screen.blit(font_sm.render(f"Speed: {snap.ball.speed:.1f}", True, TEXT_DIM), (px + 130, py + 15))
        screen.blit(font_sm.render(snap.phase.value.upper(), True, TEXT_WHITE), (px, py + 30))

        pygame.display.flip()

    pygame.quit()
