"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer  v1.0  —  THEMES & SETTINGS          ║
║                                                                  ║
║  Colour palettes and the persisted user preferences shared by    ║
║  the window and the off-screen exporters.                        ║
╚══════════════════════════════════════════════════════════════════╝
"""

import json
import logging
import os

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════
#  PLAYBACK SPEED RANGE
#
#  The slider value is a "speed": higher is faster.  The delay
#  between two auto-play frames is SPEED_OFFSET - speed (ms).
# ═════════════════════════════════════════════════════════════════
SPEED_MIN     = 100
SPEED_MAX     = 1000
SPEED_DEFAULT = 500
SPEED_OFFSET  = 1100


def clamp_speed(value):
    """Clamp a speed value into [SPEED_MIN, SPEED_MAX]."""
    return max(SPEED_MIN, min(SPEED_MAX, int(value)))


# ═════════════════════════════════════════════════════════════════
#  THEME DEFINITIONS
#  Two palettes.  Node fills follow the visit state:
#  current > searching > visited > plain.
# ═════════════════════════════════════════════════════════════════
THEMES = {
    # ── Dark theme ───────────────────────────────────────────────
    "dark": {
        "BG": "#1e1e2e",              # Main window background
        "BG2": "#2a2a3d",             # Secondary panels
        "FG": "#cdd6f4",              # Primary foreground text
        "ACCENT": "#89b4fa",          # Buttons, headings
        "GREEN_C": "#a6e3a1",         # Play / positive
        "RED_C": "#f38ba8",           # Pause / delete
        "YELLOW_C": "#f9e2af",        # Warnings
        "BTN_BG": "#45475a",          # Button face colour
        "CANVAS_BG": "#1e1e2e",       # Tree-drawing canvas
        "NODE_FILL": "#ffffff",       # Plain node
        "NODE_CURRENT": "#e74c3c",    # Node being visited / deleted
        "NODE_SEARCHING": "#f1c40f",  # Node being compared
        "NODE_VISITED": "#2ecc71",    # Node already recorded
        "NODE_TEXT": "#333333",       # Text on a plain node
        "NODE_TEXT_HL": "#ffffff",    # Text on an annotated node
        "NODE_OUTLINE": "#34495e",    # Circle outline
        "EDGE": "#bdc3c7",            # Parent → child lines
        "STATS_BG": "#2a2a3d",        # Stats panel background
        "STATS_FG": "#bac2de",        # Stats panel text
    },
    # ── Light theme ──────────────────────────────────────────────
    "light": {
        "BG": "#eff1f5",
        "BG2": "#dce0e8",
        "FG": "#4c4f69",
        "ACCENT": "#1e66f5",
        "GREEN_C": "#40a02b",
        "RED_C": "#d20f39",
        "YELLOW_C": "#df8e1d",
        "BTN_BG": "#ccd0da",
        "CANVAS_BG": "#ffffff",
        "NODE_FILL": "#ffffff",
        "NODE_CURRENT": "#e74c3c",
        "NODE_SEARCHING": "#f1c40f",
        "NODE_VISITED": "#2ecc71",
        "NODE_TEXT": "#333333",
        "NODE_TEXT_HL": "#ffffff",
        "NODE_OUTLINE": "#34495e",
        "EDGE": "#8c8fa1",
        "STATS_BG": "#dce0e8",
        "STATS_FG": "#5c5f77",
    },
}


def node_colors(settings, node):
    """
    Pick (fill, text) colours for a node from its flags.

    Args:
        settings (Settings): Colour lookup.
        node     (Node)    : Live or snapshot node.

    Returns:
        tuple[str, str]: Fill and text hex colours.
    """
    if node.is_current:
        fill = settings.get("NODE_CURRENT")
    elif node.is_searching:
        fill = settings.get("NODE_SEARCHING")
    elif node.visited:
        fill = settings.get("NODE_VISITED")
    else:
        return settings.get("NODE_FILL"), settings.get("NODE_TEXT")
    return fill, settings.get("NODE_TEXT_HL")


# ═════════════════════════════════════════════════════════════════
#  SETTINGS — persisted user preferences
#
#  Saved as JSON in the user's home directory.  Stores theme,
#  playback speed, the auto-play toggle and colour overrides.
#  Trees and histories are never written here.
# ═════════════════════════════════════════════════════════════════
class Settings:
    """
    Persistent user preferences manager.

    Attributes:
        theme         (str) : Active theme name ("dark" / "light").
        speed         (int) : Playback speed, SPEED_MIN..SPEED_MAX.
        auto_play     (bool): Start playing as soon as an operation ends.
        custom_colors (dict): Key→hex overrides on top of the theme.

    File location:  ~/.bst_visualizer_v1.json
    """
    DEFAULT_PATH = os.path.join(os.path.expanduser("~"),
                                ".bst_visualizer_v1.json")

    def __init__(self, path=None, load=True):
        self.path          = path or self.DEFAULT_PATH
        self.theme         = "dark"
        self._speed        = SPEED_DEFAULT
        self.auto_play     = True
        self.custom_colors = {}
        if load:
            self._load()

    @property
    def speed(self):
        return self._speed

    @speed.setter
    def speed(self, value):
        self._speed = clamp_speed(value)

    # ── Load from disk ──────────────────────────────────────────
    def _load(self):
        """Read settings JSON; a missing or corrupt file keeps the defaults."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            theme = d.get("theme", "dark")
            self.theme         = theme if theme in THEMES else "dark"
            self.speed         = d.get("speed", SPEED_DEFAULT)
            self.auto_play     = bool(d.get("auto_play", True))
            self.custom_colors = dict(d.get("custom_colors", {}))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s",
                           self.path, e)

    # ── Save to disk ────────────────────────────────────────────
    def save(self):
        """
        Write the preferences back to disk.

        Returns:
            bool: True on success.  Failures are logged, not raised.
        """
        try:
            with open(self.path, "w") as f:
                json.dump({"theme": self.theme,
                           "speed": self.speed,
                           "auto_play": self.auto_play,
                           "custom_colors": self.custom_colors}, f)
            return True
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self.path, e)
            return False

    # ── Colour lookup ───────────────────────────────────────────
    def get(self, key):
        """
        Resolve a colour key to its hex value.

        Priority: custom_colors[key]  →  THEMES[theme][key]  →  "#ffffff"
        """
        if key in self.custom_colors:
            return self.custom_colors[key]
        return THEMES.get(self.theme, THEMES["dark"]).get(key, "#ffffff")
