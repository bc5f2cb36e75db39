"""
Interactive Pygame Viewer for Gray-Scott Reaction-Diffusion

The window is the host: every flipped frame presents the frame
scheduler once, which is what drives the simulation while it plays.
Minimising or hiding the window pauses the simulation; it stays paused
until resumed by hand.

Controls:
  SPACE / ESC  Play / Pause
  S            Single step (one batch of steps)
  R            Reset with the current seed pattern
  SHIFT+R      Reseed with random circles
  E            Export PNG
  1-8          Presets
  + / -        Grid resolution (128 / 256 / 512)
  TAB          Toggle control panel
  H            Toggle HUD overlay
  Q            Quit
  Mouse L      Paint V (on canvas area)
  Mouse R      Erase V (on canvas area)
"""

import os
import time

import pygame
from scipy.ndimage import gaussian_filter

from .config import COLOR_MODES, RESOLUTIONS, SessionConfig
from .controls import ControlPanel, THEME
from .export import default_export_name, save_png
from .gray_scott import GrayScott, SeedPattern
from .palettes import PALETTE_ORDER, get_colormap, map_to_rgb
from .persistence import save_state
from .presets import PRESETS, PRESET_ORDER, get_preset
from .simulation import FrameScheduler, Simulation


PANEL_WIDTH = 300
SEED_ORDER = [p.value for p in SeedPattern]


class Viewer:
    def __init__(self, width=900, height=900, config=None, start_preset=None,
                 export_dir=None, state_path=None, autoplay=True):
        self.canvas_w = width
        self.canvas_h = height
        self.panel_visible = True
        self.show_hud = True
        self.running = True
        self.autoplay = autoplay
        self.brush_radius = 12
        # Soft render (Blur slider): 0 = sharp cells
        self.blur_sigma = 0.0
        self.export_dir = export_dir or os.path.join(os.getcwd(), "screenshots")
        self.state_path = state_path

        self.frames = FrameScheduler()
        self.sim = Simulation(config or SessionConfig(), scheduler=self.frames)
        if start_preset:
            self.sim.apply_preset(start_preset)

        # Control panel (built after pygame.init in run())
        self.panel = None
        self.sliders = {}
        self.rows = {}

    @property
    def total_w(self):
        return self.canvas_w + (PANEL_WIDTH if self.panel_visible else 0)

    # --- Panel -----------------------------------------------------------

    def _build_panel(self):
        panel = ControlPanel(self.canvas_w, 0, PANEL_WIDTH, self.canvas_h)
        self.sliders = {}
        self.rows = {}

        panel.add_section("PRESETS")
        preset_idx = PRESET_ORDER.index(self.sim.preset_key) if self.sim.preset_key in PRESET_ORDER else -1
        self.rows["preset"] = panel.add_button_row(
            [PRESETS[k]["name"] for k in PRESET_ORDER], selected=preset_idx,
            on_select=lambda i, _: self._apply_preset(PRESET_ORDER[i]),
        )

        panel.add_section("CONTROLS")
        panel.add_button("Play / Pause  [SPACE]", on_click=self.sim.toggle)
        panel.add_button("Step  [S]", on_click=self.sim.step)
        panel.add_button("Reset  [R]", on_click=self.sim.reset)
        panel.add_button("Random Seed  [SHIFT+R]", on_click=self.sim.random_seed)
        panel.add_button("Export PNG  [E]", on_click=self._export)

        panel.add_section("PARAMETERS")
        params = self.sim.params.as_dict()
        for sdef in GrayScott.get_slider_defs():
            key = sdef["key"]
            self.sliders[key] = panel.add_slider(
                sdef["label"], sdef["min"], sdef["max"], params[key],
                fmt=sdef.get("fmt", ".3f"), step=sdef.get("step"),
                on_change=self._make_param_callback(key),
            )
        self.sliders["steps"] = panel.add_slider(
            "Steps / frame", 1, 10, self.sim.steps_per_tick, fmt=".0f", step=1,
            on_change=self.sim.set_steps_per_tick,
        )
        self.sliders["blur"] = panel.add_slider(
            "Blur", 0.0, 4.0, self.blur_sigma, fmt=".1f", step=0.1,
            on_change=lambda v: setattr(self, "blur_sigma", v),
        )

        panel.add_section("PALETTE")
        self.rows["palette"] = panel.add_button_row(
            PALETTE_ORDER, selected=self._index(PALETTE_ORDER, self.sim.palette),
            on_select=lambda i, name: self.sim.set_palette(name),
        )
        self.rows["mode"] = panel.add_button_row(
            COLOR_MODES, selected=self._index(COLOR_MODES, self.sim.color_mode),
            on_select=lambda i, mode: self.sim.set_color_mode(mode),
        )

        panel.add_section("SEED / GRID")
        self.rows["seed"] = panel.add_button_row(
            SEED_ORDER, selected=self._index(SEED_ORDER, self.sim.seed_pattern.value),
            on_select=lambda i, name: self.sim.set_seed_pattern(name),
        )
        self.rows["resolution"] = panel.add_button_row(
            [str(r) for r in RESOLUTIONS],
            selected=self._index(RESOLUTIONS, self.sim.width),
            on_select=lambda i, _: self._set_resolution(RESOLUTIONS[i]),
        )
        self.panel = panel

    @staticmethod
    def _index(options, value):
        return list(options).index(value) if value in options else -1

    def _make_param_callback(self, key):
        def callback(val):
            self.sim.update_params(**{key: val})
            self.sim.preset_key = None
            if "preset" in self.rows:
                self.rows["preset"].select(-1)
        return callback

    def _sync_panel(self):
        """Move widgets to match the session after a preset or resize."""
        if self.panel is None:
            return
        params = self.sim.params.as_dict()
        for key, val in params.items():
            if key in self.sliders:
                self.sliders[key].set_value(val)
        self.sliders["steps"].set_value(self.sim.steps_per_tick)
        self.rows["preset"].select(self._index(PRESET_ORDER, self.sim.preset_key))
        self.rows["seed"].select(self._index(SEED_ORDER, self.sim.seed_pattern.value))
        self.rows["resolution"].select(self._index(RESOLUTIONS, self.sim.width))

    # --- Actions ---------------------------------------------------------

    def _apply_preset(self, key):
        if self.sim.apply_preset(key):
            self._sync_panel()

    def _set_resolution(self, size):
        self.sim.resize(size, size)
        self._sync_panel()

    def _cycle_resolution(self, direction):
        idx = self._index(RESOLUTIONS, self.sim.width)
        idx = max(0, min(len(RESOLUTIONS) - 1, idx + direction))
        self._set_resolution(RESOLUTIONS[idx])

    def _export(self):
        path = os.path.join(self.export_dir, default_export_name())
        save_png(self._render_rgb(), path)
        print(f"Exported: {path}")

    # --- Rendering -------------------------------------------------------

    def _render_rgb(self):
        if self.blur_sigma <= 0:
            return self.sim.render_rgb()
        # Soft render: blur both species on the torus before coloring
        field = self.sim.field
        u = gaussian_filter(field.u, self.blur_sigma, mode="wrap")
        v = gaussian_filter(field.v, self.blur_sigma, mode="wrap")
        return map_to_rgb(u, v, get_colormap(self.sim.palette), self.sim.color_mode)

    def _draw_hud(self, screen):
        if not self.show_hud:
            return
        preset = get_preset(self.sim.preset_key) if self.sim.preset_key else None
        name = preset["name"] if preset else "Custom"
        line = (f"Gray-Scott - {name}  |  Gen: {self.sim.generation:,}  |  "
                f"{self.sim.width}x{self.sim.height}  |  "
                f"{self.sim.steps_per_tick} step/frame  |  FPS: {self.sim.fps.fps}")
        if not self.sim.running:
            line = "[PAUSED]  " + line

        bg = pygame.Surface((self.canvas_w, 24), pygame.SRCALPHA)
        bg.fill((0, 0, 0, 150))
        screen.blit(bg, (0, 0))
        screen.blit(self.hud_font.render(line, True, THEME["text_bright"]), (10, 6))

    def _handle_mouse(self):
        buttons = pygame.mouse.get_pressed()
        if not (buttons[0] or buttons[2]):
            return
        mx, my = pygame.mouse.get_pos()
        if mx >= self.canvas_w or my >= self.canvas_h:
            return
        sx = int(mx * self.sim.width / self.canvas_w)
        sy = int(my * self.sim.height / self.canvas_h)
        radius = max(2, int(self.brush_radius * self.sim.width / self.canvas_w))
        self.sim.paint(sx, sy, radius=radius, erase=bool(buttons[2]))

    # --- Main loop ---------------------------------------------------------

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.total_w, self.canvas_h), pygame.RESIZABLE)
        pygame.display.set_caption("Reaction-Diffusion")
        clock = pygame.time.Clock()

        self.hud_font = pygame.font.SysFont("menlo", 13)
        self.panel_font = pygame.font.SysFont("menlo", 12)

        self._build_panel()
        if self.autoplay:
            self.sim.play()

        while self.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type in (pygame.WINDOWHIDDEN, pygame.WINDOWMINIMIZED):
                    self.sim.set_visible(False)
                elif event.type in (pygame.WINDOWSHOWN, pygame.WINDOWRESTORED):
                    self.sim.set_visible(True)
                elif event.type == pygame.VIDEORESIZE:
                    self.canvas_w = max(100, event.w - (PANEL_WIDTH if self.panel_visible else 0))
                    self.canvas_h = max(100, event.h)
                    self._build_panel()
                elif event.type == pygame.KEYDOWN:
                    screen = self._handle_keydown(event, screen)
                elif self.panel_visible and self.panel:
                    self.panel.handle_event(event)

            if self.sim.visible:
                self._handle_mouse()

            screen.fill(THEME["bg"])
            rgb = self._render_rgb()
            surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1).copy())
            screen.blit(pygame.transform.scale(surface, (self.canvas_w, self.canvas_h)), (0, 0))
            self._draw_hud(screen)
            if self.panel_visible and self.panel:
                self.panel.draw(screen, self.panel_font)

            pygame.display.flip()
            clock.tick(60)
            # One presented frame: run the simulation's pending tick
            self.frames.present(time.perf_counter())

        if self.state_path:
            save_state(self.state_path, self.sim.to_config())
        self.sim.close()
        pygame.quit()

    def _handle_keydown(self, event, screen):
        key = event.key
        shift = bool(event.mod & pygame.KMOD_SHIFT)

        if key == pygame.K_q:
            self.running = False

        elif key in (pygame.K_SPACE, pygame.K_ESCAPE):
            self.sim.toggle()

        elif key == pygame.K_s:
            self.sim.step()

        elif key == pygame.K_r:
            if shift:
                self.sim.random_seed()
            else:
                self.sim.reset()

        elif key == pygame.K_e:
            self._export()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_TAB:
            self.panel_visible = not self.panel_visible
            screen = pygame.display.set_mode((self.total_w, self.canvas_h), pygame.RESIZABLE)

        elif key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
            self._cycle_resolution(+1)

        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self._cycle_resolution(-1)

        # Preset selection (1-8)
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER):
                self._apply_preset(PRESET_ORDER[idx])

        return screen
