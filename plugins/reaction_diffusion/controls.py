"""
Side-panel widgets for the reaction-diffusion viewer.

Flat, dark widgets drawn straight onto a pygame surface. The panel lays
widgets out top to bottom and translates mouse events into its own
coordinates.
"""

import pygame


THEME = {
    "bg": (10, 10, 12),
    "panel": (22, 22, 26),
    "track": (52, 52, 58),
    "track_fill": (235, 200, 40),
    "handle": (215, 215, 220),
    "handle_active": (255, 255, 255),
    "text": (185, 185, 190),
    "text_bright": (245, 240, 220),
    "text_dim": (110, 110, 118),
    "button": (40, 40, 46),
    "button_hover": (58, 58, 66),
    "button_active": (150, 120, 20),
    "divider": (45, 45, 52),
}


class Slider:
    """Labelled horizontal slider. ``step`` snaps values (e.g. 1 for ints)."""

    height = 36

    def __init__(self, x, y, width, label, min_val, max_val, value,
                 fmt=".3f", step=None, on_change=None):
        self.x, self.y, self.width = x, y, width
        self.label = label
        self.min_val, self.max_val = min_val, max_val
        self.fmt = fmt
        self.step = step
        self.on_change = on_change
        self.dragging = False
        self.hovered = False
        self.value = min_val
        self.set_value(value)

        self.track_x = x + 8
        self.track_w = width - 16
        self.track_y = y + 22

    def _snap(self, val):
        val = max(self.min_val, min(self.max_val, val))
        if self.step:
            val = self.min_val + round((val - self.min_val) / self.step) * self.step
        return val

    def _value_at(self, px):
        frac = (px - self.track_x) / self.track_w
        frac = max(0.0, min(1.0, frac))
        return self._snap(self.min_val + frac * (self.max_val - self.min_val))

    def _handle_x(self):
        span = self.max_val - self.min_val
        frac = (self.value - self.min_val) / span if span else 0.0
        return self.track_x + frac * self.track_w

    def set_value(self, val):
        """Move the handle without firing on_change."""
        self.value = self._snap(val)

    def _drag_to(self, px):
        new = self._value_at(px)
        if new != self.value:
            self.value = new
            if self.on_change:
                self.on_change(new)

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            mx, my = event.pos
            on_track = (self.track_x - 4 <= mx <= self.track_x + self.track_w + 4
                        and abs(my - self.track_y) <= 12)
            if on_track:
                self.dragging = True
                self._drag_to(mx)
                return True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION:
            mx, my = event.pos
            self.hovered = abs(mx - self._handle_x()) < 12 and abs(my - self.track_y) < 12
            if self.dragging:
                self._drag_to(mx)
                return True
        return False

    def draw(self, surface, font):
        surface.blit(font.render(self.label, True, THEME["text"]), (self.x + 8, self.y + 2))
        text = font.render(f"{self.value:{self.fmt}}", True, THEME["text_bright"])
        surface.blit(text, (self.x + self.width - text.get_width() - 8, self.y + 2))

        hx = self._handle_x()
        pygame.draw.rect(surface, THEME["track"],
                         pygame.Rect(self.track_x, self.track_y - 2, self.track_w, 4),
                         border_radius=2)
        pygame.draw.rect(surface, THEME["track_fill"],
                         pygame.Rect(self.track_x, self.track_y - 2, hx - self.track_x, 4),
                         border_radius=2)
        active = self.dragging or self.hovered
        pygame.draw.circle(surface, THEME["handle_active"] if active else THEME["handle"],
                           (int(hx), self.track_y), 9 if self.dragging else 7)


class Button:
    """Clickable button with label."""

    def __init__(self, x, y, width, height, label, on_click=None, active=False):
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.on_click = on_click
        self.active = active
        self.hovered = False

    def handle_event(self, event):
        if event.type == pygame.MOUSEMOTION:
            self.hovered = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                if self.on_click:
                    self.on_click()
                return True
        return False

    def draw(self, surface, font):
        if self.active:
            color = THEME["button_active"]
        elif self.hovered:
            color = THEME["button_hover"]
        else:
            color = THEME["button"]
        pygame.draw.rect(surface, color, self.rect, border_radius=4)
        text = font.render(self.label, True, THEME["text_bright"])
        surface.blit(text, text.get_rect(center=self.rect.center))


class ButtonRow:
    """Wrapping row of buttons where exactly one is selected."""

    def __init__(self, x, y, width, labels, selected=0, on_select=None, btn_height=24):
        self.labels = list(labels)
        self.on_select = on_select
        self.buttons = []
        bx, by = x, y
        for label in self.labels:
            bw = max(len(label) * 7 + 14, 44)
            if bx + bw > x + width and bx > x:
                bx, by = x, by + btn_height + 4
            self.buttons.append(Button(bx, by, bw, btn_height, label))
            bx += bw + 4
        self.height = by - y + btn_height
        self.selected = None
        self.select(selected)

    def select(self, idx):
        """Highlight a button without firing on_select."""
        self.selected = idx
        for i, btn in enumerate(self.buttons):
            btn.active = i == idx

    def handle_event(self, event):
        for i, btn in enumerate(self.buttons):
            if btn.handle_event(event):
                self.select(i)
                if self.on_select:
                    self.on_select(i, self.labels[i])
                return True
        return False

    def draw(self, surface, font):
        for btn in self.buttons:
            btn.draw(surface, font)


class SectionHeader:
    height = 24

    def __init__(self, x, y, width, title):
        self.x, self.y, self.width = x, y, width
        self.title = title

    def draw(self, surface, font):
        pygame.draw.line(surface, THEME["divider"],
                         (self.x + 8, self.y + 8), (self.x + self.width - 8, self.y + 8))
        surface.blit(font.render(self.title, True, THEME["text_dim"]), (self.x + 8, self.y + 12))


class ControlPanel:
    """
    Side panel holding the widgets. Widgets are positioned in panel-local
    coordinates; the panel itself sits at (x, y) in the window.
    """

    def __init__(self, x, y, width, height):
        self.x, self.y = x, y
        self.width, self.height = width, height
        self.widgets = []
        self._cursor_y = 8

    def _add(self, widget, height, gap):
        self.widgets.append(widget)
        self._cursor_y += height + gap
        return widget

    def add_section(self, title):
        return self._add(SectionHeader(0, self._cursor_y, self.width, title),
                         SectionHeader.height, 4)

    def add_slider(self, label, min_val, max_val, value, fmt=".3f", step=None, on_change=None):
        slider = Slider(0, self._cursor_y, self.width, label,
                        min_val, max_val, value, fmt, step, on_change)
        return self._add(slider, Slider.height, 6)

    def add_button_row(self, labels, selected=0, on_select=None):
        row = ButtonRow(8, self._cursor_y, self.width - 16, labels, selected, on_select)
        return self._add(row, row.height, 8)

    def add_button(self, label, on_click=None):
        btn = Button(8, self._cursor_y, self.width - 16, 26, label, on_click)
        return self._add(btn, 26, 6)

    def handle_event(self, event):
        """Route an event to the widgets. True if one consumed it."""
        if not hasattr(event, "pos"):
            return False
        local = (event.pos[0] - self.x, event.pos[1] - self.y)
        inside = 0 <= local[0] <= self.width and 0 <= local[1] <= self.height
        if not inside:
            # Let sliders finish a drag that ends outside the panel
            if event.type == pygame.MOUSEBUTTONUP:
                for widget in self.widgets:
                    if isinstance(widget, Slider):
                        widget.dragging = False
            return False
        attrs = dict(event.__dict__, pos=local)
        local_event = pygame.event.Event(event.type, attrs)
        for widget in self.widgets:
            if hasattr(widget, "handle_event") and widget.handle_event(local_event):
                return True
        return False

    def draw(self, target, font):
        surface = pygame.Surface((self.width, self.height))
        surface.fill(THEME["panel"])
        pygame.draw.line(surface, THEME["divider"], (0, 0), (0, self.height))
        for widget in self.widgets:
            widget.draw(surface, font)
        target.blit(surface, (self.x, self.y))
