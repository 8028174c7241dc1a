# ========================= input/keymap.py =========================
import pygame
from typing import Dict, Optional

# computer key -> on-screen key symbol
DEFAULT_KEYMAP: Dict[int, str] = {getattr(pygame, f"K_{c}"): c.upper() for c in "abcdefghijklmnopqrstuvwxyz"}
DEFAULT_KEYMAP.update({
    pygame.K_BACKSPACE: "BS",
    pygame.K_RETURN: "ENT",
    pygame.K_KP_ENTER: "ENT",
})

KEYBOARD_ROWS = ["QWERTYUIOP", "ASDFGHJKL", "ZXCVBNM"]

def keycode_to_symbol(k: int, keymap: Optional[Dict[int, str]] = None) -> Optional[str]:
    return (keymap or DEFAULT_KEYMAP).get(k)

def keycode_to_name(k: int) -> str:
    try:
        return pygame.key.name(k)
    except Exception:
        return str(k)
