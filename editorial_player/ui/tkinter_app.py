"""Tkinter desktop player: video surface, control bar and a code editor."""
from __future__ import annotations

import os
import tkinter as tk
from tkinter import ttk
from typing import Any, Callable, Optional

from ..application.commands import (
    Command,
    SeekAbsolute,
    SeekRelative,
    SetPlaybackRate,
    SetVolume,
    ToggleFullscreen,
    ToggleMute,
    TogglePlayPause,
    ToggleSpeedMenu,
)
from ..application.coordinator import PlaybackCoordinator
from ..application.ports import MediaElementError
from ..config import PlayerConfig
from ..domain.session_state import MediaSessionState
from ..integrations.vlc_media import VlcMediaElement
from .common import (
    APP_TITLE,
    EDITOR_PLACEHOLDER,
    NO_MEDIA_HINT,
    NO_MEDIA_TITLE,
    RATE_MENU_LABELS,
    PlayerViewModel,
    build_player_view,
    snap_volume,
)
from .desktop_types import PlayerApp
from .tk_adapters import TkFullscreenHost, TkKeySource, TkScheduler

PLAYER_SURFACE_TAG = "EditorialPlayerSurface"
_BACKGROUND = "#000000"
_SURFACE = "#1d232a"
_FOREGROUND = "#f2f2f2"


def _is_descendant(widget: Any, ancestor: tk.Misc) -> bool:
    node = widget
    while node is not None:
        if node is ancestor:
            return True
        node = getattr(node, "master", None)
    return False


def build_no_media_panel(parent: tk.Misc) -> tk.Frame:
    panel = tk.Frame(parent, bg=_SURFACE, padx=48, pady=48)
    tk.Label(panel, text="▣", font=("TkDefaultFont", 28), bg=_SURFACE, fg="#6b7280").pack()
    tk.Label(
        panel,
        text=NO_MEDIA_TITLE,
        font=("TkDefaultFont", 14, "bold"),
        bg=_SURFACE,
        fg="#9ca3af",
    ).pack(pady=(12, 0))
    tk.Label(panel, text=NO_MEDIA_HINT, bg=_SURFACE, fg="#6b7280").pack(pady=(6, 0))
    return panel


class TkPlayerView:
    """Renders player state and turns widget interaction into commands.

    The view never writes session state; every interaction goes through
    ``dispatch`` or the pointer callbacks.
    """

    def __init__(
        self,
        parent: tk.Misc,
        *,
        dispatch: Callable[[Command], bool],
        on_pointer_move: Callable[[], None],
        on_pointer_leave: Callable[[], None],
        logger,
        poster: str = "",
        seek_step_seconds: float = 5.0,
    ) -> None:
        self.logger = logger
        step = float(seek_step_seconds)
        self._dispatch = dispatch
        self._on_pointer_move = on_pointer_move
        self._on_pointer_leave = on_pointer_leave
        self._programmatic = False
        self._poster_image: Optional[tk.PhotoImage] = None
        self.last_view: Optional[PlayerViewModel] = None

        self.container = tk.Frame(parent, bg=_BACKGROUND, highlightthickness=0)
        self.container.rowconfigure(0, weight=1)
        self.container.columnconfigure(0, weight=1)
        self.video_frame = tk.Frame(self.container, bg=_BACKGROUND, width=960, height=540)
        self.video_frame.grid(row=0, column=0, sticky="nsew")

        self.poster_label = tk.Label(self.container, bg=_BACKGROUND)
        self._load_poster(poster)
        self.play_overlay = tk.Button(
            self.container,
            text="▶",
            font=("TkDefaultFont", 24),
            width=3,
            relief="flat",
            takefocus=False,
            command=lambda: self._dispatch(TogglePlayPause()),
        )
        self.buffering_label = tk.Label(
            self.container, text="Buffering…", bg=_BACKGROUND, fg=_FOREGROUND
        )

        self.controls = tk.Frame(self.container, bg=_SURFACE, padx=12, pady=8)
        self.controls.grid(row=1, column=0, sticky="ew")
        self.controls.columnconfigure(0, weight=1)

        self.progress_var = tk.DoubleVar(master=self.container, value=0.0)
        self.progress_scale = ttk.Scale(
            self.controls,
            from_=0.0,
            to=100.0,
            variable=self.progress_var,
            command=self._on_progress_scale,
            takefocus=False,
        )
        self.progress_scale.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))

        left = tk.Frame(self.controls, bg=_SURFACE)
        left.grid(row=1, column=0, sticky="w")
        right = tk.Frame(self.controls, bg=_SURFACE)
        right.grid(row=1, column=1, sticky="e")

        self.skip_back_btn = self._button(left, f"⏪ {step:g}s", SeekRelative(-step))
        self.play_btn = self._button(left, "Play (k)", TogglePlayPause())
        self.skip_forward_btn = self._button(left, f"{step:g}s ⏩", SeekRelative(step))
        self.mute_btn = self._button(left, "\U0001f50a", ToggleMute())
        self.volume_var = tk.DoubleVar(master=self.container, value=1.0)
        self.volume_scale = ttk.Scale(
            left,
            from_=0.0,
            to=1.0,
            length=96,
            variable=self.volume_var,
            command=self._on_volume_scale,
            takefocus=False,
        )
        self.volume_scale.pack(side="left", padx=(0, 12))
        self.time_label = tk.Label(left, text="0:00 / 0:00", bg=_SURFACE, fg=_FOREGROUND)
        self.time_label.pack(side="left")

        self.speed_btn = self._button(right, "1x ⚙", ToggleSpeedMenu())
        self.fullscreen_btn = self._button(right, "Fullscreen (f)", ToggleFullscreen())

        self.speed_menu = tk.Frame(self.container, bg=_SURFACE, bd=1, relief="solid")
        self.rate_buttons: dict[float, tk.Button] = {}
        for rate, label in reversed(RATE_MENU_LABELS):
            button = tk.Button(
                self.speed_menu,
                text=label,
                anchor="w",
                relief="flat",
                takefocus=False,
                command=lambda rate=rate: self._dispatch(SetPlaybackRate(rate)),
            )
            button.pack(fill="x")
            self.rate_buttons[rate] = button

        self._install_pointer_tracking()

    def _button(self, parent: tk.Misc, text: str, command: Command) -> tk.Button:
        button = tk.Button(
            parent,
            text=text,
            relief="flat",
            takefocus=False,
            command=lambda: self._dispatch(command),
        )
        button.pack(side="left", padx=(0, 8))
        return button

    def _load_poster(self, poster: str) -> None:
        if not poster or not os.path.isfile(poster):
            return
        try:
            self._poster_image = tk.PhotoImage(master=self.container, file=poster)
        except tk.TclError:
            self.logger.debug("Poster image is not readable by Tk: %s", poster)
            return
        self.poster_label.configure(image=self._poster_image)

    def _install_pointer_tracking(self) -> None:
        stack: list[tk.Misc] = [self.container]
        while stack:
            widget = stack.pop()
            widget.bindtags((PLAYER_SURFACE_TAG,) + tuple(widget.bindtags()))
            stack.extend(widget.winfo_children())
        self.container.bind_class(PLAYER_SURFACE_TAG, "<Motion>", self._on_motion, add="+")
        self.container.bind_class(PLAYER_SURFACE_TAG, "<Enter>", self._on_motion, add="+")
        self.container.bind("<Leave>", self._on_leave, add="+")
        # Any press on the player takes keyboard focus back from the editor.
        self.container.bind_class(PLAYER_SURFACE_TAG, "<ButtonPress-1>", self._claim_focus, add="+")
        self.video_frame.bind("<ButtonPress-1>", self._on_surface_click, add="+")
        self.poster_label.bind("<ButtonPress-1>", self._on_surface_click, add="+")

    def _claim_focus(self, _event: tk.Event) -> None:
        self.container.focus_set()

    def _on_surface_click(self, _event: tk.Event) -> None:
        self._dispatch(TogglePlayPause())

    def _on_motion(self, _event: tk.Event) -> None:
        self._on_pointer_move()

    def _on_leave(self, event: tk.Event) -> None:
        try:
            under = self.container.winfo_containing(event.x_root, event.y_root)
        except (KeyError, tk.TclError):
            under = None
        if under is not None and _is_descendant(under, self.container):
            return
        self._on_pointer_leave()

    def _on_progress_scale(self, value: str) -> None:
        if self._programmatic:
            return
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return
        self._dispatch(SeekAbsolute(seconds))

    def _on_volume_scale(self, value: str) -> None:
        if self._programmatic:
            return
        try:
            volume = snap_volume(float(value))
        except (TypeError, ValueError):
            return
        self._dispatch(SetVolume(volume))

    def video_handle(self) -> int:
        self.video_frame.update_idletasks()
        return int(self.video_frame.winfo_id())

    def render(self, state: MediaSessionState) -> None:
        view = build_player_view(state)
        self.last_view = view
        self._programmatic = True
        try:
            self.progress_scale.configure(to=view.progress_max)
            self.progress_var.set(state.current_time_seconds)
            self.volume_var.set(view.volume_slider_value)
        finally:
            self._programmatic = False
        self.time_label.configure(text=view.time_label)
        self.play_btn.configure(text=view.play_button_label)
        self.mute_btn.configure(text="\U0001f507" if view.show_muted_icon else "\U0001f50a")
        self.speed_btn.configure(text=f"{view.rate_label} ⚙")
        self.fullscreen_btn.configure(text=view.fullscreen_button_label)
        for rate, button in self.rate_buttons.items():
            selected = abs(rate - state.playback_rate) < 1e-9
            button.configure(font=("TkDefaultFont", 10, "bold" if selected else "normal"))

        if view.show_play_overlay:
            if self._poster_image is not None and not state.has_started:
                self.poster_label.place(in_=self.video_frame, relx=0, rely=0, relwidth=1, relheight=1)
            else:
                self.poster_label.place_forget()
            self.play_overlay.place(in_=self.video_frame, relx=0.5, rely=0.5, anchor="center")
            self.play_overlay.lift()
        else:
            self.poster_label.place_forget()
            self.play_overlay.place_forget()
        if view.show_buffering:
            self.buffering_label.place(in_=self.video_frame, relx=0.5, rely=0.5, anchor="center")
            self.buffering_label.lift()
        else:
            self.buffering_label.place_forget()
        if view.controls_visible:
            self.controls.grid()
        else:
            self.controls.grid_remove()
        if view.speed_menu_open and view.controls_visible:
            self.speed_menu.place(in_=self.controls, relx=1.0, rely=0.0, anchor="se")
            self.speed_menu.lift()
        else:
            self.speed_menu.place_forget()


class EditorialPlayerApp:
    """Window hosting the player beside an independent code editor."""

    def __init__(
        self,
        *,
        config: PlayerConfig,
        logger,
        element_factory: Callable[..., Any] | None = None,
        fullscreen_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self.title = APP_TITLE
        self._element_factory = element_factory or VlcMediaElement
        self._fullscreen_factory = fullscreen_factory or TkFullscreenHost
        self.root: Optional[tk.Tk] = None
        self.element: Any = None
        self.coordinator: Optional[PlaybackCoordinator] = None
        self.view: Optional[TkPlayerView] = None
        self.no_media_panel: Optional[tk.Frame] = None
        self.editor: Optional[tk.Text] = None
        self.editor_frame: Optional[tk.Frame] = None
        self.panes: Optional[ttk.PanedWindow] = None
        self._editor_docked = False

    def launch(self) -> None:
        self._ensure_root()
        assert self.root is not None
        self.root.mainloop()

    def build_for_test(self) -> tk.Tk:
        """Build root/widgets without entering mainloop (for tests)."""
        self._ensure_root()
        assert self.root is not None
        return self.root

    def _run_on_ui(self, callback: Callable[[], None]) -> None:
        if self.root is None:
            return
        self.root.after(0, callback)

    def _ensure_root(self) -> None:
        if self.root is not None:
            return
        root = tk.Tk()
        root.title(self.title)
        root.geometry("1440x820")
        root.minsize(960, 600)
        self.root = root

        panes = ttk.PanedWindow(root, orient="horizontal")
        panes.pack(fill="both", expand=True)
        player_host = tk.Frame(panes, bg=_SURFACE)
        self.editor_frame = self._build_editor(panes)
        panes.add(player_host, weight=3)
        panes.add(self.editor_frame, weight=2)
        self.panes = panes
        self._editor_docked = True

        self.element = self._create_element()
        self.coordinator = PlaybackCoordinator(
            source=self.config.source,
            element=self.element,
            fullscreen=self._fullscreen_factory(root, self.logger),
            key_source=TkKeySource(root, self.logger),
            scheduler=TkScheduler(root),
            logger=self.logger,
            poster=self.config.poster,
            known_duration=self.config.known_duration_seconds,
            idle_seconds=self.config.controls_hide_delay_seconds,
            seek_step_seconds=self.config.seek_step_seconds,
            volume_step=self.config.volume_step,
        )
        self.coordinator.policy.register_region(self.editor_frame)
        self.coordinator.add_observer(self._sync_editor_pane)

        if not self.coordinator.has_source:
            self.no_media_panel = build_no_media_panel(player_host)
            self.no_media_panel.pack(expand=True)
        else:
            self.view = TkPlayerView(
                player_host,
                dispatch=self.coordinator.dispatch,
                on_pointer_move=self.coordinator.on_pointer_move,
                on_pointer_leave=self.coordinator.on_pointer_leave,
                logger=self.logger,
                poster=self.config.poster,
                seek_step_seconds=self.config.seek_step_seconds,
            )
            self.view.container.pack(fill="both", expand=True)
            stop_rendering = self.coordinator.add_observer(self.view.render)
            try:
                self.element.attach_window(self.view.video_handle())
            except Exception:
                self.logger.exception("Failed to attach video output to the player surface")
            try:
                self.coordinator.start()
            except Exception:
                self.logger.exception("Playback session failed to start; showing the no-media panel")
                stop_rendering()
                self._fall_back_to_no_media(player_host)
            else:
                self.view.render(self.coordinator.state)

        root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.logger.debug("Tkinter UI wiring complete")

    def _fall_back_to_no_media(self, player_host: tk.Misc) -> None:
        if self.view is not None:
            self.view.container.destroy()
            self.view = None
        if self.element is not None:
            self.element.release()
            self.element = None
        self.no_media_panel = build_no_media_panel(player_host)
        self.no_media_panel.pack(expand=True)

    def _sync_editor_pane(self, state: MediaSessionState) -> None:
        """Hide the editor pane while the player fills the screen."""
        if self.panes is None or self.editor_frame is None:
            return
        if state.fullscreen and self._editor_docked:
            self.panes.forget(self.editor_frame)
            self._editor_docked = False
        elif not state.fullscreen and not self._editor_docked:
            self.panes.add(self.editor_frame, weight=2)
            self._editor_docked = True

    def _build_editor(self, parent: tk.Misc) -> tk.Frame:
        frame = tk.Frame(parent, bg=_SURFACE, padx=8, pady=8)
        tk.Label(frame, text="Code editor", bg=_SURFACE, fg=_FOREGROUND, anchor="w").pack(fill="x")
        editor = tk.Text(frame, wrap="none", undo=True, font=("TkFixedFont", 11))
        scrollbar = ttk.Scrollbar(frame, orient="vertical", command=editor.yview)
        editor.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side="right", fill="y")
        editor.pack(side="left", fill="both", expand=True)
        editor.insert("1.0", EDITOR_PLACEHOLDER)
        self.editor = editor
        return frame

    def _create_element(self) -> Any:
        if not self.config.source:
            return None
        try:
            element = self._element_factory(logger=self.logger, dispatch=self._run_on_ui)
        except RuntimeError:
            self.logger.exception("Media element is unavailable")
            return None
        try:
            element.load(self.config.source)
        except MediaElementError:
            self.logger.exception("Failed to load media source: %s", self.config.source)
            element.release()
            return None
        return element

    def close(self) -> None:
        if self.coordinator is not None:
            self.coordinator.close()
        if self.element is not None:
            self.element.release()
            self.element = None
        if self.root is not None:
            self.root.destroy()
            self.root = None

    def _on_close(self) -> None:
        self.close()


def create_tkinter_app(
    *,
    config: PlayerConfig,
    logger,
    element_factory: Callable[..., Any] | None = None,
    fullscreen_factory: Callable[..., Any] | None = None,
) -> PlayerApp:
    """Create the Tkinter desktop player instance."""
    return EditorialPlayerApp(
        config=config,
        logger=logger,
        element_factory=element_factory,
        fullscreen_factory=fullscreen_factory,
    )
