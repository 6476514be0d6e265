#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer  v1.0  —  VISUALIZER WINDOW          ║
║                                                                  ║
║  The Tkinter presentation layer.  It owns no tree state of its   ║
║  own: every command goes to a Session, and every redraw reads    ║
║  the snapshot under the playback cursor.                         ║
║                                                                  ║
║  Data Flow                                                       ║
║  ─────────                                                       ║
║  1. User types a key → parse_key() → Session.perform_operation() ║
║  2. The engine records snapshots into the History                ║
║  3. PlaybackController moves the cursor (buttons or after())     ║
║     and calls _on_render(snapshot)                               ║
║  4. _on_render draws the snapshot tree, status and sequence      ║
║                                                                  ║
║  Dependencies                                                    ║
║  ────────────                                                    ║
║  Required : tkinter (stdlib)                                     ║
║  Optional : Pillow → PNG / GIF export                            ║
║             reportlab → PDF walkthrough export                   ║
║             opencv / imageio(+ffmpeg) + numpy → MP4 export       ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
import os

from tkinter import (
    Tk, Toplevel, Frame, Canvas, Label, Entry, Button, Scale,
    StringVar, BooleanVar, IntVar, Checkbutton,
    LEFT, RIGHT, TOP, BOTTOM, BOTH, X, HORIZONTAL, NORMAL, DISABLED,
    messagebox, filedialog,
)

from bst_engine import TraversalOrder, clone_tree, layout_tree, tree_stats
from export import (ExportError, PDFExporter, VideoExporter, export_png,
                    sequence_text)
from inputs import InvalidKeyError, parse_key, read_key_file
from playback import OperationKind, PlaybackState, Session, TkScheduler
from settings import SPEED_MAX, SPEED_MIN, Settings, node_colors

logger = logging.getLogger(__name__)

NODE_RADIUS = 22


# ══════════════════════════════════════════════════════════════════════
#  SECTION: VISUALIZER WINDOW — Main Application Window
# ══════════════════════════════════════════════════════════════════════
#  ┌─────────────────────────────────────────────────────────────────┐
#  │ TOP BAR   [🌳 BST Step Visualizer v1.0]            [☀ Theme]    │
#  ├─────────────────────────────────────────────────────────────────┤
#  │ INPUT BAR [Key: ____] [+Insert] [-Delete] [Load] [Clear]        │
#  │           [Preorder] [Inorder] [Postorder]                      │
#  ├──────────────────────────────────────────────┬──────────────────┤
#  │                                              │  📊 Tree Stats   │
#  │               Canvas (tree drawing)          │  Nodes / Height  │
#  │                                              │  💾 Export       │
#  ├──────────────────────────────────────────────┴──────────────────┤
#  │ STATUS    Compare 7 with 5                                      │
#  │ SEQUENCE  3 → 5 → 8                                             │
#  ├─────────────────────────────────────────────────────────────────┤
#  │ CONTROLS [⏮Restart][◀Prev][▶Play][Next▶][⏭End] Speed [===] ☑Auto │
#  └─────────────────────────────────────────────────────────────────┘
# ══════════════════════════════════════════════════════════════════════
class VisualizerWindow(Toplevel):
    """Main window — step-by-step BST insert / delete / traversal.

    Attributes:
        settings (Settings): Persisted theme, speed and auto-play.
        session  (Session):  Live tree, History and playback cursor.

    Widget references (set in ``_build_ui``):
        canvas, status_label, seq_label, step_label, key_var,
        prev_btn, next_btn, restart_btn, end_btn, play_btn,
        speed_var, auto_var, stats_labels
    """

    def __init__(self, master, settings):
        super().__init__(master)
        self.settings = settings
        self.title("🌳 BST Step Visualizer  v1.0")
        self.geometry("1200x800")
        self.minsize(900, 600)
        self.configure(bg=settings.get("BG"))

        # ── Core session (tree + history + cursor) ──
        self.session = Session(scheduler=TkScheduler(self),
                               config=settings,
                               on_render=self._on_render,
                               layout=self._layout_live)

        self.pdf_exporter   = PDFExporter(settings)
        self.video_exporter = VideoExporter(settings)

        self._build_ui()
        self.bind("<Return>", lambda e: self._do_operation(OperationKind.INSERT))
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.after_idle(self._redraw)

    def _on_close(self):
        """Cancel any pending tick before the window goes away."""
        self.session.playback.cancel()
        self.settings.save()
        self.destroy()
        if self.master is not None:
            self.master.destroy()

    # ═══════════════════════════════════════════════════════════════
    #  BUILD UI — construct all widgets
    # ═══════════════════════════════════════════════════════════════
    def _build_ui(self):
        s = self.settings
        btn = dict(font=("Consolas", 10, "bold"), bd=0, cursor="hand2", padx=8)

        # ── TOP BAR ──
        top = Frame(self, bg=s.get("BG2"))
        top.pack(fill=X, padx=8, pady=6)
        Label(top, text="🌳 BST Step Visualizer  v1.0",
              font=("Consolas", 14, "bold"),
              bg=s.get("BG2"), fg=s.get("ACCENT")).pack(side=LEFT, padx=10)
        Button(top, text="☀ Theme" if s.theme == "dark" else "🌙 Theme",
               bg=s.get("BTN_BG"), fg=s.get("FG"), command=self._toggle_theme,
               **btn).pack(side=RIGHT, padx=4)

        # ── INPUT BAR ──
        inp = Frame(self, bg=s.get("BG"))
        inp.pack(fill=X, padx=8, pady=4)
        Label(inp, text="Key:", font=("Consolas", 10),
              bg=s.get("BG"), fg=s.get("FG")).pack(side=LEFT)
        self.key_var = StringVar()
        Entry(inp, textvariable=self.key_var, font=("Consolas", 11), width=10,
              bg=s.get("BG2"), fg=s.get("FG"),
              insertbackground=s.get("FG")).pack(side=LEFT, padx=4)
        for txt, cmd, clr in [
            ("➕ Insert", lambda: self._do_operation(OperationKind.INSERT), "GREEN_C"),
            ("➖ Delete", lambda: self._do_operation(OperationKind.DELETE), "RED_C"),
        ]:
            Button(inp, text=txt, bg=s.get(clr), fg="#11111b", command=cmd,
                   **btn).pack(side=LEFT, padx=4)
        Button(inp, text="📂 Load Keys", bg=s.get("BTN_BG"), fg=s.get("FG"),
               command=self._load_file, **btn).pack(side=LEFT, padx=4)
        Button(inp, text="🗑 Clear", bg=s.get("BTN_BG"), fg=s.get("FG"),
               command=self._clear_all, **btn).pack(side=LEFT, padx=4)

        Label(inp, text="Traverse:", font=("Consolas", 10),
              bg=s.get("BG"), fg=s.get("FG")).pack(side=LEFT, padx=(20, 0))
        for order in TraversalOrder:
            Button(inp, text=order.label, bg=s.get("ACCENT"), fg="#11111b",
                   command=lambda o=order: self._do_traversal(o),
                   **btn).pack(side=LEFT, padx=3)

        # ── CONTROLS (packed before the body so they keep their space) ──
        ctrl = Frame(self, bg=s.get("BG2"))
        ctrl.pack(side=BOTTOM, fill=X, padx=8, pady=6)
        self.restart_btn = Button(ctrl, text="⏮ Restart", bg=s.get("BTN_BG"),
                                  fg=s.get("FG"), command=self._restart, **btn)
        self.prev_btn = Button(ctrl, text="◀ Prev", bg=s.get("BTN_BG"),
                               fg=s.get("FG"), command=self._prev, **btn)
        self.play_btn = Button(ctrl, text="▶ Play", bg=s.get("GREEN_C"),
                               fg="#11111b", command=self._toggle_play, **btn)
        self.next_btn = Button(ctrl, text="Next ▶", bg=s.get("BTN_BG"),
                               fg=s.get("FG"), command=self._next, **btn)
        self.end_btn = Button(ctrl, text="End ⏭", bg=s.get("BTN_BG"),
                              fg=s.get("FG"), command=self._go_end, **btn)
        for b in (self.restart_btn, self.prev_btn, self.play_btn,
                  self.next_btn, self.end_btn):
            b.pack(side=LEFT, padx=3, pady=4)

        Label(ctrl, text="Speed:", font=("Consolas", 10),
              bg=s.get("BG2"), fg=s.get("FG")).pack(side=LEFT, padx=(20, 2))
        self.speed_var = IntVar(value=s.speed)
        Scale(ctrl, from_=SPEED_MIN, to=SPEED_MAX, orient=HORIZONTAL,
              variable=self.speed_var, showvalue=False, length=180,
              bg=s.get("BG2"), fg=s.get("FG"), highlightthickness=0,
              troughcolor=s.get("BTN_BG"),
              command=self._on_speed_change).pack(side=LEFT)

        self.auto_var = BooleanVar(value=s.auto_play)
        Checkbutton(ctrl, text="Auto-play", variable=self.auto_var,
                    bg=s.get("BG2"), fg=s.get("FG"), selectcolor=s.get("BG"),
                    activebackground=s.get("BG2"), font=("Consolas", 10),
                    command=self._on_auto_change).pack(side=LEFT, padx=10)

        self.step_label = Label(ctrl, text="Step 0 / 0", font=("Consolas", 10),
                                bg=s.get("BG2"), fg=s.get("FG"))
        self.step_label.pack(side=RIGHT, padx=10)

        # ── STATUS + SEQUENCE ──
        info = Frame(self, bg=s.get("BG"))
        info.pack(side=BOTTOM, fill=X, padx=8)
        self.status_label = Label(info, text="Insert a key or load a key file.",
                                  font=("Consolas", 12, "bold"), anchor="w",
                                  bg=s.get("BG"), fg=s.get("YELLOW_C"))
        self.status_label.pack(fill=X)
        self.seq_label = Label(info, text="Sequence: none", font=("Consolas", 11),
                               anchor="w", bg=s.get("BG"), fg=s.get("FG"))
        self.seq_label.pack(fill=X)

        # ── BODY: canvas + side panel ──
        body = Frame(self, bg=s.get("BG"))
        body.pack(side=TOP, fill=BOTH, expand=True, padx=8, pady=4)

        right = Frame(body, bg=s.get("STATS_BG"), width=220, bd=1, relief="solid")
        right.pack(side=RIGHT, fill="y", padx=(4, 0))
        right.pack_propagate(False)
        Label(right, text="📊 Tree Stats", font=("Consolas", 11, "bold"),
              bg=s.get("STATS_BG"), fg=s.get("ACCENT")).pack(fill=X, pady=6)
        self.stats_labels = {}
        for key, title in [("nodes", "Nodes"), ("height", "Height"),
                           ("valid", "Live BST valid")]:
            row = Frame(right, bg=s.get("STATS_BG"))
            row.pack(fill=X, padx=8, pady=2)
            Label(row, text=f"{title}:", font=("Consolas", 10),
                  bg=s.get("STATS_BG"), fg=s.get("STATS_FG")).pack(side=LEFT)
            lbl = Label(row, text="—", font=("Consolas", 10, "bold"),
                        bg=s.get("STATS_BG"), fg=s.get("FG"))
            lbl.pack(side=RIGHT)
            self.stats_labels[key] = lbl

        Label(right, text="💾 Export", font=("Consolas", 11, "bold"),
              bg=s.get("STATS_BG"), fg=s.get("ACCENT")).pack(fill=X, pady=(16, 6))
        for txt, cmd in [("PNG (current step)", self._export_png),
                         ("PDF (all steps)", self._export_pdf),
                         ("Video / GIF", self._export_video)]:
            Button(right, text=txt, bg=s.get("BTN_BG"), fg=s.get("FG"),
                   command=cmd, **btn).pack(fill=X, padx=8, pady=2)

        self.canvas = Canvas(body, bg=s.get("CANVAS_BG"), highlightthickness=0)
        self.canvas.pack(side=LEFT, fill=BOTH, expand=True)
        self.canvas.bind("<Configure>", lambda e: self._redraw())

    def _toggle_theme(self):
        """Switch dark ↔ light, persist, and rebuild the widgets."""
        self.settings.theme = "light" if self.settings.theme == "dark" else "dark"
        self.settings.save()
        for child in self.winfo_children():
            child.destroy()
        self.configure(bg=self.settings.get("BG"))
        self._build_ui()
        self.after_idle(self._redraw)

    # ═══════════════════════════════════════════════════════════════
    #  COMMANDS — forwarded to the Session
    # ═══════════════════════════════════════════════════════════════
    def _do_operation(self, kind):
        try:
            key = parse_key(self.key_var.get())
        except InvalidKeyError:
            messagebox.showwarning("Warning", "Please enter an integer key.",
                                   parent=self)
            return
        self.session.perform_operation(kind, key)
        self.key_var.set("")

    def _do_traversal(self, order):
        self.session.perform_traversal(order)
        if not self.session.history_non_empty():
            self.status_label.config(text="Tree is empty — nothing to traverse.")

    def _load_file(self):
        path = filedialog.askopenfilename(
            parent=self, title="Load keys",
            filetypes=[("Text", "*.txt"), ("All files", "*.*")])
        if not path:
            return
        try:
            keys = read_key_file(path)
        except (OSError, UnicodeDecodeError) as e:
            messagebox.showerror("Error", f"Could not read file:\n{e}", parent=self)
            return
        self.session.load_keys(keys)
        self.status_label.config(
            text=f"Loaded {len(keys)} keys from {os.path.basename(path)}")

    def _clear_all(self):
        self.session.clear_tree()
        self.status_label.config(text="Cleared.")

    # ═══════════════════════════════════════════════════════════════
    #  PLAYBACK CONTROLS
    # ═══════════════════════════════════════════════════════════════
    def _next(self):
        self.session.step_forward()
        self._update_controls()

    def _prev(self):
        self.session.step_backward()
        self._update_controls()

    def _restart(self):
        self.session.restart()
        self._update_controls()

    def _go_end(self):
        self.session.playback.go_end()
        self._update_controls()

    def _toggle_play(self):
        pb = self.session.playback
        if pb.state is PlaybackState.PLAYING:
            pb.pause()
        else:
            pb.play()
        self._update_controls()

    def _on_speed_change(self, _value):
        self.settings.speed = self.speed_var.get()

    def _on_auto_change(self):
        self.settings.auto_play = self.auto_var.get()

    def _update_controls(self):
        """Mirror the cursor boundaries onto the transport buttons."""
        sess = self.session
        pb = sess.playback
        self.prev_btn.config(state=NORMAL if sess.can_step_back() else DISABLED)
        self.next_btn.config(state=NORMAL if sess.can_step_forward() else DISABLED)
        self.end_btn.config(state=NORMAL if sess.can_step_forward() else DISABLED)
        self.restart_btn.config(
            state=NORMAL if sess.history_non_empty() else DISABLED)
        if pb.state is PlaybackState.PLAYING:
            self.play_btn.config(text="⏸ Pause", bg=self.settings.get("RED_C"),
                                 state=NORMAL)
        else:
            self.play_btn.config(text="▶ Play", bg=self.settings.get("GREEN_C"),
                                 state=NORMAL if sess.can_step_forward() else DISABLED)
        self.step_label.config(
            text=f"Step {pb.cursor + 1} / {len(sess.history)}")

    # ═══════════════════════════════════════════════════════════════
    #  DRAWING
    # ═══════════════════════════════════════════════════════════════
    def _canvas_width(self):
        return max(self.canvas.winfo_width(), 600)

    def _layout_live(self, root):
        """History hook: position the live tree before it is copied."""
        layout_tree(root, self._canvas_width())

    def _on_render(self, snapshot):
        """PlaybackController callback: the cursor moved."""
        if snapshot is not None:
            self.status_label.config(text=snapshot.status)
            self.seq_label.config(text="Sequence: " + sequence_text(snapshot.sequence))
        self._redraw()

    def _redraw(self):
        snap = self.session.current_snapshot()
        tree = snap.tree if snap is not None else self.session.root
        if snap is None:
            self.seq_label.config(text="Sequence: none")
        self._render_tree(tree)
        self._update_stats(tree)
        self._update_controls()

    def _render_tree(self, tree):
        """Draw a tree: edges first, then node circles and keys."""
        c = self.canvas
        c.delete("all")
        s = self.settings
        w = self._canvas_width()
        if tree is None:
            c.create_text(w // 2, max(c.winfo_height(), 400) // 2,
                          text="Empty Tree", font=("Consolas", 16),
                          fill=s.get("FG"))
            return

        # snapshot positions were laid out for the width at recording time
        if abs(tree.x * 2 - w) > 1 or tree is self.session.root:
            tree = clone_tree(tree)
            layout_tree(tree, w)

        def _edges(n):
            for child in (n.left, n.right):
                if child is not None:
                    c.create_line(n.x, n.y, child.x, child.y,
                                  fill=s.get("EDGE"), width=2)
                    _edges(child)

        def _nodes(n):
            if n is None:
                return
            fill, text_fill = node_colors(s, n)
            r = NODE_RADIUS
            c.create_oval(n.x - r, n.y - r, n.x + r, n.y + r, fill=fill,
                          outline=s.get("NODE_OUTLINE"), width=2)
            c.create_text(n.x, n.y, text=str(n.key), fill=text_fill,
                          font=("Arial", 12, "bold"))
            _nodes(n.left)
            _nodes(n.right)

        _edges(tree)
        _nodes(tree)

    def _update_stats(self, tree):
        if tree is None:
            for lbl in self.stats_labels.values():
                lbl.config(text="—")
            return
        stats = tree_stats(tree, self.session.root)
        self.stats_labels["nodes"].config(text=str(stats["nodes"]))
        self.stats_labels["height"].config(text=str(stats["height"]))
        self.stats_labels["valid"].config(
            text="✅ Yes" if stats["valid"] else "❌ No")

    # ═══════════════════════════════════════════════════════════════
    #  EXPORT
    # ═══════════════════════════════════════════════════════════════
    def _export_png(self):
        snap = self.session.current_snapshot()
        if snap is None:
            messagebox.showinfo("Info", "Run an operation first.", parent=self)
            return
        path = filedialog.asksaveasfilename(
            parent=self, defaultextension=".png", filetypes=[("PNG", "*.png")],
            title="Export Current Step as PNG")
        if not path:
            return
        try:
            export_png(self.settings, snap, path)
        except ExportError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return
        messagebox.showinfo("Exported", f"PNG saved:\n{path}", parent=self)

    def _export_pdf(self):
        if not self.session.history_non_empty():
            messagebox.showinfo("Info", "Run an operation first.", parent=self)
            return
        path = filedialog.asksaveasfilename(
            parent=self, defaultextension=".pdf", filetypes=[("PDF", "*.pdf")],
            title="Export All Steps as PDF")
        if not path:
            return
        try:
            n = self.pdf_exporter.export(self.session.history, path)
        except ExportError as e:
            messagebox.showerror("PDF Error", str(e), parent=self)
            return
        messagebox.showinfo("Exported", f"{n} steps saved:\n{path}", parent=self)

    def _export_video(self):
        if not self.session.history_non_empty():
            messagebox.showinfo("Info", "Run an operation first.", parent=self)
            return
        path = filedialog.asksaveasfilename(
            parent=self, defaultextension=".mp4",
            filetypes=[("MP4 video", "*.mp4"), ("Animated GIF", "*.gif")],
            title="Export All Steps as Video")
        if not path:
            return
        try:
            n = self.video_exporter.export(self.session.history, path)
        except ExportError as e:
            messagebox.showerror("Video Error", str(e), parent=self)
            return
        messagebox.showinfo("Exported", f"{n} steps saved:\n{path}", parent=self)


# ══════════════════════════════════════════════════════════════════════
#  ENTRY POINT
# ══════════════════════════════════════════════════════════════════════
def open_visualizer(root=None, settings=None, key_file=None):
    """
    Launch the visualizer window.

    Args:
        root     (Tk|None)      : Master window; a hidden one is created
                                  when omitted.
        settings (Settings|None): Preferences; loaded from disk if omitted.
        key_file (str|None)     : Optional key file loaded at start-up.

    Returns:
        VisualizerWindow: The opened window (mainloop already finished
        when this function created the root itself).
    """
    settings = settings or Settings()
    own_root = root is None
    if own_root:
        root = Tk()
        root.withdraw()

    win = VisualizerWindow(root, settings)
    if key_file:
        try:
            win.session.load_keys(read_key_file(key_file))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not load key file %s: %s", key_file, e)
            messagebox.showerror("Error", f"Could not read file:\n{e}", parent=win)

    if own_root and root.winfo_exists():
        root.mainloop()
    return win


if __name__ == "__main__":
    open_visualizer()
