# SPDX-License-Identifier: GPL-3.0-or-later
# Main window

import logging

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Gtk, Adw, GLib, Gio

from .config import read_monitor_config
from .errors import ConfigError, GpuMonitorError
from .gpu import GpuMonitor, Provider
from .gpu_page import GpuPage
from .timer import RefreshTimer

logger = logging.getLogger(__name__)


class NvidiaMonitorWindow(Adw.ApplicationWindow):
    """Main application window with one page per GPU."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        app = self.get_application()
        self.settings = app.settings

        # Key: GPU UUID, Value: GpuPage
        self.gpu_pages = {}
        self.monitor = None
        self.config = None
        self.refresh_timer = RefreshTimer()
        self._last_error = None

        # Window setup
        self.set_title("NVIDIA Monitor")
        width = self.settings.get("window_width")
        height = self.settings.get("window_height")
        self.set_default_size(width, height)

        # Build UI
        self.build_ui()

        # Start monitoring with the saved settings
        self.apply_settings()

        # Connect window close to cleanup
        self.connect("close-request", self.on_close_request)

    def build_ui(self):
        """Build the user interface."""
        # Toast overlay for error messages
        self.toast_overlay = Adw.ToastOverlay()
        self.set_content(self.toast_overlay)

        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        self.toast_overlay.set_child(main_box)

        self.view_stack = Adw.ViewStack()
        self.view_stack.set_vexpand(True)

        # Header bar
        header = Adw.HeaderBar()
        switcher = Adw.ViewSwitcher(stack=self.view_stack)
        switcher.set_policy(Adw.ViewSwitcherPolicy.WIDE)
        header.set_title_widget(switcher)

        refresh_button = Gtk.Button(icon_name="view-refresh-symbolic")
        refresh_button.set_tooltip_text("Refresh Now")
        refresh_button.set_action_name("app.refresh")
        header.pack_start(refresh_button)

        menu = Gio.Menu()
        menu.append("Open Nvidia Settings", "app.open-nvidia-settings")
        menu.append("Preferences", "app.preferences")
        menu.append("About NVIDIA Monitor", "app.about")
        menu.append("Quit", "app.quit")
        menu_button = Gtk.MenuButton(icon_name="open-menu-symbolic", menu_model=menu)
        header.pack_end(menu_button)

        main_box.append(header)

        # Shown until the first GPU has been found
        self.empty_page = Adw.StatusPage(
            icon_name="video-display-symbolic",
            title="No GPUs Found",
            description="Waiting for the GPU provider to report its GPUs"
        )
        self.view_stack.add_named(self.empty_page, "empty")
        main_box.append(self.view_stack)

    def show_toast(self, message):
        toast = Adw.Toast(title=message, timeout=3)
        self.toast_overlay.add_toast(toast)

    def apply_settings(self):
        """(Re)read the settings, replacing the provider and re-arming the timer."""
        try:
            config = read_monitor_config(self.settings)
        except ConfigError as e:
            logger.error("Invalid settings: %s", e)
            self.refresh_timer.cancel()
            self.show_toast(str(e))
            return

        if self.monitor is None or self.monitor.provider.kind != config.provider_kind:
            if self.monitor is not None:
                self.monitor.shutdown()
            self.clear_pages()
            logger.info("Using provider %s", config.provider_kind.label)
            self.monitor = GpuMonitor(Provider(config.provider_kind))

        self.config = config
        self.refresh_timer.arm(config.refresh_rate, self.on_refresh_timeout)
        self.refresh_now()

    def on_refresh_timeout(self):
        """Handle refresh timer."""
        self.refresh_now()
        return True  # Continue timer

    def refresh_now(self):
        """Request a refresh; skipped while the previous one is still running."""
        if self.monitor is None or self.config is None:
            return
        monitor = self.monitor
        monitor.request_refresh(
            self.config.format_params(),
            lambda result: GLib.idle_add(self._apply_result, monitor, result)
        )

    def _apply_result(self, monitor, result):
        # Results of a replaced provider are dropped
        if monitor is not self.monitor:
            return GLib.SOURCE_REMOVE

        if not result.ok:
            # Keep the pages of the last successful refresh
            message = f"GPU monitoring command failed: {result.error}"
            if message != self._last_error:
                self.show_toast(message)
            self._last_error = message
            return GLib.SOURCE_REMOVE

        self._last_error = None
        seen = set()
        for reading in result.readings:
            seen.add(reading.uuid)
            page = self.gpu_pages.get(reading.uuid)
            if page is None:
                page = GpuPage(reading.uuid, monitor.metric_ids)
                self.gpu_pages[reading.uuid] = page
                self.view_stack.add_titled_with_icon(
                    page, reading.uuid, reading.title, "video-display-symbolic"
                )
            page.update(reading)
            self.view_stack.get_page(page).set_title(page.title)

        for uuid in list(self.gpu_pages):
            if uuid not in seen:
                self.view_stack.remove(self.gpu_pages.pop(uuid))

        self._update_empty_page()
        return GLib.SOURCE_REMOVE

    def clear_pages(self):
        for page in self.gpu_pages.values():
            self.view_stack.remove(page)
        self.gpu_pages.clear()
        self._update_empty_page()

    def _update_empty_page(self):
        empty = not self.gpu_pages
        self.view_stack.get_page(self.empty_page).set_visible(empty)
        if empty:
            self.view_stack.set_visible_child(self.empty_page)
        elif self.view_stack.get_visible_child() is self.empty_page:
            self.view_stack.set_visible_child(next(iter(self.gpu_pages.values())))

    def open_nvidia_settings(self):
        """Open the Nvidia Settings application, if the provider uses it."""
        if self.monitor is None:
            return
        try:
            if not self.monitor.provider.open_settings():
                self.show_toast("Nvidia Settings is already open")
        except GpuMonitorError as e:
            logger.warning("Could not open Nvidia Settings: %s", e)
            self.show_toast(str(e))

    def on_close_request(self, window):
        """Handle window close."""
        self.refresh_timer.cancel()
        if self.monitor is not None:
            self.monitor.shutdown()

        # Save window size
        self.settings.set("window_width", self.get_width())
        self.settings.set("window_height", self.get_height())

        return False  # Allow close
