#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer v1.0 — Entry Point                   ║
║                                                                  ║
║  Run     : python main.py [KEY_FILE]                             ║
║            bst-visualizer [KEY_FILE]        (after pip install)  ║
║                                                                  ║
║  Architecture:                                                   ║
║    main.py  ──► visualizer.py (VisualizerWindow)                 ║
║                   ├──► playback.py  (Session, PlaybackController)║
║                   │      └──► bst_engine.py (tree + History)     ║
║                   ├──► inputs.py    (key / key-file parsing)     ║
║                   └──► export.py    (PNG / PDF / video)          ║
║                                                                  ║
║  Logging level comes from $BST_VISUALIZER_LOG (default WARNING). ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
import os
import sys


def configure_logging() -> None:
    level = os.environ.get("BST_VISUALIZER_LOG", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv=None) -> None:
    """
    Application entry point.

    Flow:
      1. Configure logging
      2. Create a hidden root Tk window and load user settings
      3. Open the VisualizerWindow (optionally pre-loading a key file)
      4. Enter the tkinter mainloop
    """
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()

    from visualizer import open_visualizer

    open_visualizer(key_file=argv[0] if argv else None)


if __name__ == "__main__":
    main()
