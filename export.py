#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer  v1.0  —  EXPORT                     ║
║                                                                  ║
║  Off-screen rendering of snapshots and the exporters built on    ║
║  top of it:                                                      ║
║    • PNG   — current snapshot                (Pillow)            ║
║    • PDF   — one page per snapshot + summary (reportlab)         ║
║    • MP4   — whole history as a video        (OpenCV / imageio)  ║
║    • GIF   — whole history as an animation   (Pillow)            ║
║                                                                  ║
║  Backends are optional at import time; exporting without one     ║
║  raises ExportError, which the window reports in a dialog.       ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
import os
import shutil
import tempfile
from datetime import datetime

from bst_engine import clone_tree, count_nodes, layout_tree, tree_height
from settings import node_colors

logger = logging.getLogger(__name__)

# ─── Pillow: PNG export, frame rendering for PDF/Video/GIF ──────
try:
    from PIL import Image, ImageDraw, ImageFont
    HAS_PIL = True
except ImportError:
    HAS_PIL = False

# ─── NumPy: frame arrays for the video encoders ─────────────────
try:
    import numpy as np
    HAS_NUMPY = True
except ImportError:
    HAS_NUMPY = False

# ─── OpenCV: primary MP4 video export engine ────────────────────
try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

# ─── imageio: second MP4 backend ────────────────────────────────
try:
    import imageio
    HAS_IMAGEIO = True
except ImportError:
    HAS_IMAGEIO = False

# ─── ReportLab: PDF walkthrough ─────────────────────────────────
try:
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.pdfgen import canvas as pdf_canvas
    HAS_REPORTLAB = True
except ImportError:
    HAS_REPORTLAB = False


class ExportError(RuntimeError):
    """Missing export backend or failed write."""


def _require(flag, message):
    if not flag:
        raise ExportError(message)


def sequence_text(sequence):
    """Traversal sequence as shown under the canvas: ``3 → 5 → 8`` or ``none``."""
    return " → ".join(str(k) for k in sequence) or "none"


# ═════════════════════════════════════════════════════════════════
#  TREE IMAGE RENDERER
#
#  Renders one Snapshot to a Pillow Image.  Layout is recomputed
#  on a private copy, so the stored snapshot is never touched.
#  Layout: status at top, tree in the middle, traversal sequence
#  at the bottom.
# ═════════════════════════════════════════════════════════════════
class TreeImageRenderer:
    """
    Off-screen tree renderer using Pillow.

    Args:
        settings (Settings): For colour lookups.
        width    (int)     : Image width in pixels.
        height   (int)     : Image height in pixels.
    """

    FOOTER_H = 40

    def __init__(self, settings, width=800, height=500):
        self.settings    = settings
        self.width       = width
        self.height      = height
        self.node_radius = 22
        self.padding     = 30

    @staticmethod
    def _load_fonts():
        """
        Try a few platform fonts; fall back to Pillow's bitmap font.

        Returns:
            tuple[ImageFont, ImageFont]: (normal_14pt, title_16pt)
        """
        candidates = [
            "arialbd.ttf",                                          # Windows
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", # Debian/Ubuntu
            "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",             # Arch
            "/System/Library/Fonts/Helvetica.ttc",                  # macOS
        ]
        for p in candidates:
            try:
                return ImageFont.truetype(p, 14), ImageFont.truetype(p, 16)
            except OSError:
                continue
        font = ImageFont.load_default()
        return font, font

    def render(self, snapshot, title=None):
        """
        Render a snapshot.

        Args:
            snapshot (Snapshot): Recorded moment to draw.
            title    (str|None): Heading; defaults to the snapshot status.

        Returns:
            Image: RGB Pillow image.
        """
        _require(HAS_PIL, "Pillow required.\npip install Pillow")
        s = self.settings
        img  = Image.new("RGB", (self.width, self.height), s.get("CANVAS_BG"))
        draw = ImageDraw.Draw(img)
        font, font_t = self._load_fonts()

        draw.text((10, 8), title if title is not None else snapshot.status,
                  fill=s.get("ACCENT"), font=font_t)
        draw.text((10, self.height - self.FOOTER_H + 10),
                  "Sequence: " + sequence_text(snapshot.sequence),
                  fill=s.get("FG"), font=font)

        if snapshot.tree is None:
            draw.text((self.width // 2 - 40, self.height // 2),
                      "Empty Tree", fill=s.get("FG"), font=font)
            return img

        # ── Layout a private copy, squeezing levels to fit ──
        tree = clone_tree(snapshot.tree)
        levels = max(tree_height(tree), 1)
        usable = self.height - self.FOOTER_H - 60 - self.node_radius
        level_h = min(70, usable / levels)
        layout_tree(tree, self.width - 2 * self.padding,
                    level_height=level_h, top=40 - level_h + self.node_radius)

        r = self.node_radius
        pad = self.padding

        def _edges(n):
            for child in (n.left, n.right):
                if child is not None:
                    draw.line([(n.x + pad, n.y), (child.x + pad, child.y)],
                              fill=s.get("EDGE"), width=2)
                    _edges(child)

        def _nodes(n):
            if n is None:
                return
            fill, text_fill = node_colors(s, n)
            x, y = n.x + pad, n.y
            draw.ellipse([x - r, y - r, x + r, y + r], fill=fill,
                         outline=s.get("NODE_OUTLINE"), width=2)
            txt = str(n.key)
            bb  = draw.textbbox((0, 0), txt, font=font)
            tw, th = bb[2] - bb[0], bb[3] - bb[1]
            draw.text((x - tw // 2, y - th // 2), txt, fill=text_fill, font=font)
            _nodes(n.left)
            _nodes(n.right)

        _edges(tree)
        _nodes(tree)
        return img


def export_png(settings, snapshot, filename, width=1200, height=800, title=None):
    """Render ``snapshot`` and save it as a PNG file."""
    img = TreeImageRenderer(settings, width, height).render(snapshot, title)
    try:
        img.save(filename, format="PNG")
    except OSError as e:
        raise ExportError(f"Could not write {filename}: {e}") from e
    return filename


def _frame_title(i, total, snapshot):
    return f"Step {i + 1}/{total}: {snapshot.status}"


# ═════════════════════════════════════════════════════════════════
#  PDF EXPORTER
#
#  Title page, one page per snapshot (image + status + sequence),
#  then a summary page.  Requires reportlab + Pillow.
# ═════════════════════════════════════════════════════════════════
class PDFExporter:
    """
    Export a whole History as a landscape-A4 PDF.

    Attributes:
        settings (Settings)          : Colour lookups.
        renderer (TreeImageRenderer) : Renders the page images.
    """

    def __init__(self, settings):
        self.settings = settings
        self.renderer = TreeImageRenderer(settings, 700, 400)

    def export(self, history, filename, title="BST Step-by-Step Walkthrough"):
        """
        Write the PDF.

        Args:
            history  (History|list): Snapshots to export.
            filename (str)         : Output PDF path.

        Returns:
            int: Number of step pages written.
        """
        _require(HAS_REPORTLAB, "ReportLab required.\npip install reportlab")
        _require(HAS_PIL, "Pillow required.\npip install Pillow")
        steps = list(history)
        pw, ph = landscape(A4)
        tmp = tempfile.mkdtemp()
        try:
            c = pdf_canvas.Canvas(filename, pagesize=landscape(A4))

            # ── Title page ──
            c.setFont("Helvetica-Bold", 28)
            c.drawCentredString(pw / 2, ph - 100, title)
            c.setFont("Helvetica", 12)
            c.drawCentredString(pw / 2, ph - 140,
                f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
            c.drawCentredString(pw / 2, ph - 160, f"Total Steps: {len(steps)}")
            c.showPage()

            # ── One page per snapshot ──
            for i, snap in enumerate(steps):
                img = self.renderer.render(snap, _frame_title(i, len(steps), snap))
                ip = os.path.join(tmp, f"s{i:04d}.png")
                img.save(ip)

                c.setFont("Helvetica-Bold", 14)
                c.drawString(30, ph - 30, f"Step {i + 1} of {len(steps)}")
                c.drawImage(ip, 30, ph - 450, width=700, height=400,
                            preserveAspectRatio=True)
                c.setFont("Helvetica", 12)
                c.drawString(30, ph - 480, f"Status: {snap.status}")
                c.drawString(30, ph - 500,
                             f"Sequence: {sequence_text(snap.sequence)}")
                c.showPage()

            # ── Summary page ──
            final = steps[-1].tree if steps else None
            c.setFont("Helvetica-Bold", 20)
            c.drawCentredString(pw / 2, ph - 100, "Summary")
            c.setFont("Helvetica", 12)
            y = ph - 150
            for line in [f"Total Steps: {len(steps)}",
                         f"Final node count: {count_nodes(final)}",
                         f"Final height: {tree_height(final)}",
                         "Final sequence: "
                         + sequence_text(steps[-1].sequence if steps else ())]:
                c.drawString(100, y, line)
                y -= 22
            c.showPage()
            c.save()
        except OSError as e:
            raise ExportError(f"Could not write {filename}: {e}") from e
        finally:
            shutil.rmtree(tmp, ignore_errors=True)
        logger.info("Exported %d steps to %s", len(steps), filename)
        return len(steps)


# ═════════════════════════════════════════════════════════════════
#  VIDEO EXPORTER
#
#  Renders every snapshot and writes them as:
#    1. MP4 via OpenCV (cv2.VideoWriter): preferred
#    2. MP4 via imageio (imageio.mimwrite): second backend
#    3. Animated GIF via Pillow: no codec needed
#  Each snapshot is held for ``fps`` frames (one second).
# ═════════════════════════════════════════════════════════════════
class VideoExporter:
    """
    Export a History as a video or animated GIF.

    Attributes:
        settings (Settings)          : Colour lookups.
        renderer (TreeImageRenderer) : Renders frames at 1280×720.
    """

    def __init__(self, settings, width=1280, height=720):
        self.settings = settings
        self.renderer = TreeImageRenderer(settings, width, height)

    def _frames(self, history):
        steps = list(history)
        for i, snap in enumerate(steps):
            yield self.renderer.render(snap, _frame_title(i, len(steps), snap))

    def export_cv2(self, history, filename, fps=2):
        """
        Write an MP4 with OpenCV's VideoWriter (mp4v codec).

        Returns:
            int: Number of snapshots written.
        """
        _require(HAS_CV2 and HAS_NUMPY and HAS_PIL,
                 "opencv-python + numpy + Pillow required.")
        size = (self.renderer.width, self.renderer.height)
        out = cv2.VideoWriter(filename, cv2.VideoWriter_fourcc(*"mp4v"),
                              fps, size)
        if not out.isOpened():
            raise ExportError(f"Could not open video writer for {filename}")
        count = 0
        try:
            for img in self._frames(history):
                bgr = cv2.cvtColor(np.array(img), cv2.COLOR_RGB2BGR)
                for _ in range(max(1, fps)):
                    out.write(bgr)
                count += 1
        finally:
            out.release()
        return count

    def export_imageio(self, history, filename, fps=2):
        """
        Write an MP4 with imageio (needs its ffmpeg plugin).

        Returns:
            int: Number of snapshots written.
        """
        _require(HAS_IMAGEIO and HAS_NUMPY and HAS_PIL,
                 "imageio + numpy + Pillow required.")
        frames = []
        for img in self._frames(history):
            frames.extend([np.array(img)] * max(1, fps))
        try:
            imageio.mimwrite(filename, frames, fps=fps)
        except (OSError, ValueError, RuntimeError) as e:
            raise ExportError(f"imageio could not write {filename}: {e}") from e
        return len(frames) // max(1, fps)

    def export_gif(self, history, filename, frame_ms=800):
        """
        Write an animated GIF, ``frame_ms`` milliseconds per snapshot.

        Returns:
            int: Number of snapshots written.
        """
        _require(HAS_PIL, "Pillow required.\npip install Pillow")
        frames = list(self._frames(history))
        if not frames:
            raise ExportError("Nothing to export: the history is empty.")
        try:
            frames[0].save(filename, format="GIF", save_all=True,
                           append_images=frames[1:], duration=frame_ms, loop=0)
        except OSError as e:
            raise ExportError(f"Could not write {filename}: {e}") from e
        return len(frames)

    def export(self, history, filename, fps=2):
        """
        Pick a backend from the file extension and available libraries.

        ``.gif`` → Pillow; anything else → OpenCV, then imageio.
        """
        if filename.lower().endswith(".gif"):
            return self.export_gif(history, filename, frame_ms=1000 // max(1, fps))
        if HAS_CV2:
            return self.export_cv2(history, filename, fps)
        return self.export_imageio(history, filename, fps)
