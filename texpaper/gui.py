import os
import threading
import webbrowser
from datetime import datetime
from tkinter import filedialog
from typing import Optional

import customtkinter as ctk

from .config import DEFAULT_BIB_PATH, DEFAULT_OUTPUT_PATH, DEFAULT_PAPER_PATH
from .renderer import PaperRenderer


class App(ctk.CTk):
    def __init__(self) -> None:
        super().__init__()
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("dark-blue")
        self.title("LaTeX Paper to HTML")
        self.geometry("960x640")
        self.resizable(True, True)
        self.worker: Optional[threading.Thread] = None
        self.output_path: Optional[str] = None
        self.typeset_var = ctk.BooleanVar(value=True)
        self.renderer_var = ctk.StringVar(value="auto")
        self._build_ui()

    # ---- UI helpers ----
    def _build_ui(self) -> None:
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self.main_frame = ctk.CTkFrame(self)
        self.main_frame.grid(row=0, column=0, sticky="nsew", padx=20, pady=20)
        self.main_frame.grid_columnconfigure(0, weight=1)
        self.main_frame.grid_rowconfigure(4, weight=1)  # Log area expands

        # ---- Header Section ----
        header_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        header_frame.grid(row=0, column=0, sticky="ew", padx=20, pady=(20, 10))
        hero_label = ctk.CTkLabel(header_frame, text="Paper Renderer", font=ctk.CTkFont(size=24, weight="bold"))
        hero_label.pack(anchor="w")
        sub_label = ctk.CTkLabel(
            header_frame,
            text="Render a LaTeX paper and its bibliography to a single HTML page.",
            font=ctk.CTkFont(size=14),
            text_color="gray70",
        )
        sub_label.pack(anchor="w", pady=(5, 0))

        # ---- Input Section ----
        input_frame = ctk.CTkFrame(self.main_frame)
        input_frame.grid(row=1, column=0, sticky="ew", padx=20, pady=10)
        input_frame.grid_columnconfigure(0, weight=1)

        self.paper_entry = ctk.CTkEntry(input_frame, placeholder_text="Paper .tex path or URL", height=36)
        self.paper_entry.insert(0, DEFAULT_PAPER_PATH)
        self.paper_entry.grid(row=0, column=0, sticky="ew", padx=(15, 10), pady=(15, 5))
        paper_btn = ctk.CTkButton(input_frame, text="Browse", width=90, command=lambda: self._browse(self.paper_entry, "*.tex"))
        paper_btn.grid(row=0, column=1, sticky="e", padx=(0, 15), pady=(15, 5))

        self.bib_entry = ctk.CTkEntry(input_frame, placeholder_text="Bibliography .bib path or URL", height=36)
        self.bib_entry.insert(0, DEFAULT_BIB_PATH)
        self.bib_entry.grid(row=1, column=0, sticky="ew", padx=(15, 10), pady=(5, 15))
        bib_btn = ctk.CTkButton(input_frame, text="Browse", width=90, command=lambda: self._browse(self.bib_entry, "*.bib"))
        bib_btn.grid(row=1, column=1, sticky="e", padx=(0, 15), pady=(5, 15))

        # ---- Options & Actions Section ----
        action_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        action_frame.grid(row=2, column=0, sticky="ew", padx=20, pady=10)
        action_frame.grid_columnconfigure(2, weight=1)  # Spacer

        renderer_menu = ctk.CTkOptionMenu(action_frame, values=["auto", "latex"], variable=self.renderer_var, width=110)
        renderer_menu.grid(row=0, column=0, sticky="w", padx=(0, 10))

        typeset_checkbox = ctk.CTkCheckBox(action_frame, text="Typeset math (MathML)", variable=self.typeset_var)
        typeset_checkbox.grid(row=0, column=1, sticky="w")

        self.open_btn = ctk.CTkButton(
            action_frame,
            text="Open in Browser",
            command=self.on_open,
            fg_color="transparent",
            border_width=2,
            text_color=("gray10", "#DCE4EE"),
        )
        self.open_btn.grid(row=0, column=3, sticky="e", padx=(0, 10))

        self.render_btn = ctk.CTkButton(
            action_frame, text="Render", command=self.on_render, font=ctk.CTkFont(weight="bold"), height=35
        )
        self.render_btn.grid(row=0, column=4, sticky="e")

        # ---- Status & Progress Section ----
        status_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        status_frame.grid(row=3, column=0, sticky="ew", padx=20, pady=(10, 5))
        status_frame.grid_columnconfigure(1, weight=1)

        self.status_label = ctk.CTkLabel(status_frame, text="Ready", font=ctk.CTkFont(size=12, weight="bold"))
        self.status_label.grid(row=0, column=0, sticky="w")

        self.progress = ctk.CTkProgressBar(status_frame)
        self.progress.set(0)
        self.progress.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(5, 0))

        # ---- Log Section ----
        self.log_text = ctk.CTkTextbox(self.main_frame, wrap="word", font=ctk.CTkFont(family="Consolas", size=12))
        self.log_text.grid(row=4, column=0, sticky="nsew", padx=20, pady=(5, 20))
        self.log_text.configure(state="disabled")

    def _browse(self, entry: ctk.CTkEntry, pattern: str) -> None:
        path = filedialog.askopenfilename(filetypes=[("Source", pattern), ("All files", "*.*")])
        if path:
            entry.delete(0, "end")
            entry.insert(0, path)

    def log(self, message: str) -> None:
        def _append() -> None:
            self.log_text.configure(state="normal")
            timestamp = datetime.now().strftime("%H:%M:%S")
            self.log_text.insert("end", f"[{timestamp}] {message}\n")
            self.log_text.see("end")
            self.log_text.configure(state="disabled")

        self.after(0, _append)

    def set_progress(self, value: float, text: str) -> None:
        value = max(0.0, min(1.0, value))

        def _update() -> None:
            self.progress.set(value)
            self.status_label.configure(text=text)

        self.after(0, _update)

    # ---- button callbacks ----
    def on_render(self) -> None:
        paper = self.paper_entry.get().strip()
        if not paper:
            self.log("Please enter a paper path or URL.")
            return
        if self.worker and self.worker.is_alive():
            self.log("Another task is running.")
            return
        bib = self.bib_entry.get().strip() or None
        self.render_btn.configure(state="disabled")
        self.worker = threading.Thread(target=self._render_worker, args=(paper, bib), daemon=True)
        self.worker.start()

    def _render_worker(self, paper: str, bib: Optional[str]) -> None:
        try:
            renderer = PaperRenderer(self.log, self.set_progress, typeset=self.typeset_var.get())
            outcome = renderer.load(paper, bib, renderer=self.renderer_var.get())
            self.output_path = renderer.write(os.path.join(os.getcwd(), DEFAULT_OUTPUT_PATH))
            if not outcome.ok:
                self.log(f"Render failed: {outcome.error}")
        except Exception as exc:  # noqa: BLE001
            self.set_progress(0, "Failed")
            self.log(f"Render failed: {exc}")
            self.output_path = None
        finally:
            self.after(0, lambda: self.render_btn.configure(state="normal"))

    def on_open(self) -> None:
        if not self.output_path or not os.path.isfile(self.output_path):
            self.log("No rendered page yet.")
            return
        webbrowser.open(f"file://{os.path.abspath(self.output_path)}")
