# render/renderer.py
import pygame, logging
from typing import Dict, Iterable, Tuple
from notes.model import SongNote
from notes.transform import canonical_key
from input.keymap import KEYBOARD_ROWS
from config import RenderConfig

STATUS_H = 36

class Renderer:
    def __init__(self, cfg: RenderConfig):
        pygame.init()
        self.cfg = cfg
        self.screen = pygame.display.set_mode((cfg.window_w, cfg.window_h))
        pygame.display.set_caption("keysync")
        self.font = pygame.font.SysFont("consolas", 18)
        self.font_small = pygame.font.SysFont("consolas", 14)
        self.clock = pygame.time.Clock()
        self.key_rects: Dict[str, pygame.Rect] = {}
        self._layout_keys()

    def _layout_keys(self):
        rows = len(KEYBOARD_ROWS)
        row_h = self.cfg.keys_h // rows
        key_w = self.cfg.window_w // max(len(r) for r in KEYBOARD_ROWS)
        top = self.cfg.window_h - self.cfg.keys_h
        self.key_rects.clear()
        for r, row in enumerate(KEYBOARD_ROWS):
            indent = (self.cfg.window_w - key_w * len(row)) // 2
            for i, k in enumerate(row):
                self.key_rects[k] = pygame.Rect(indent + i * key_w, top + r * row_h, key_w - 2, row_h - 2)
        logging.debug("Keyboard layout rebuilt: %d keys, key_w=%d", len(self.key_rects), key_w)

    def tick(self, fps=60) -> float:
        return self.clock.tick(fps) / 1000.0

    def begin_frame(self):
        self.screen.fill((12, 12, 14))

    def end_frame(self):
        pygame.display.flip()

    def draw_status_bar(self, text: str):
        pygame.draw.rect(self.screen, (24, 24, 28), (0, 0, self.cfg.window_w, STATUS_H))
        pygame.draw.line(self.screen, (60, 60, 66), (0, STATUS_H), (self.cfg.window_w, STATUS_H), 1)
        surf = self.font_small.render(text, True, (220, 220, 230))
        self.screen.blit(surf, (10, (STATUS_H - surf.get_height()) // 2))

    def draw_typed_text(self, text: str):
        last_line = text.split("\n")[-1][-80:]
        surf = self.font.render(last_line, True, (200, 200, 210))
        self.screen.blit(surf, (10, STATUS_H + 8))

    def draw_keyboard(self, highlight: Iterable[str] = ()):
        highlight = set(highlight)
        for k, rect in self.key_rects.items():
            fill = (255, 240, 170) if k in highlight else (230, 230, 230)
            pygame.draw.rect(self.screen, fill, rect, border_radius=4)
            pygame.draw.rect(self.screen, (60, 60, 66), rect, 1, border_radius=4)
            label = self.font.render(k, True, (20, 20, 24))
            self.screen.blit(label, label.get_rect(center=rect.center))

    def _lane(self, key: str) -> Tuple[int, int]:
        rect = self.key_rects.get(canonical_key(key))
        if rect is None:
            return -1, 0
        return rect.x, rect.width

    # ------- timeline -------
    def draw_notes(self, notes: Iterable[SongNote], time_ms: float):
        hit_y = self.cfg.window_h - self.cfg.keys_h - 6
        px_per_ms = (hit_y - STATUS_H) / max(1, self.cfg.lookahead_ms)
        for n in notes:
            x, w = self._lane(n.key)
            if w == 0:
                continue
            y_start = hit_y - (n.time - time_ms) * px_per_ms
            h = max(3, n.duration * px_per_ms)
            pygame.draw.rect(self.screen, (80, 200, 120), (x, y_start - h, w, h), border_radius=6)
        pygame.draw.line(self.screen, (90, 90, 90), (0, hit_y), (self.cfg.window_w, hit_y), 2)
