#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later
# NVIDIA Monitor - A GTK4 GPU monitor

"""Main application module for NVIDIA Monitor."""

from __future__ import annotations

import sys
from typing import Optional

import gi

gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Gtk, Adw, Gio, Gdk

from .constants import APP_CSS, APP_ID, APP_NAME, APP_VERSION, APP_WEBSITE, APP_ISSUE_URL
from .logging_setup import configure_logging
from .settings import Settings
from .window import NvidiaMonitorWindow


class NvidiaMonitorApplication(Adw.Application):
    """Main application class with single-instance support."""

    def __init__(self) -> None:
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.FLAGS_NONE
        )

        self.settings = Settings()
        configure_logging(self.settings.config_dir)
        self.window: Optional[NvidiaMonitorWindow] = None

        # Set up actions
        self._create_actions()

    def _create_actions(self) -> None:
        """Create application actions and keyboard shortcuts."""
        actions = [
            ("quit", self._on_quit, ["<Control>q"]),
            ("about", self._on_about, []),
            ("preferences", self._on_preferences, ["<Control>comma"]),
            ("refresh", self._on_refresh, ["F5"]),
            ("open-nvidia-settings", self._on_open_nvidia_settings, []),
        ]
        for name, handler, accels in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", handler)
            self.add_action(action)
            if accels:
                self.set_accels_for_action(f"app.{name}", accels)

    def _load_css(self) -> None:
        """Load application CSS styles."""
        css_provider = Gtk.CssProvider()
        css_provider.load_from_data(APP_CSS.encode())

        Gtk.StyleContext.add_provider_for_display(
            Gdk.Display.get_default(),
            css_provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
        )

    def do_startup(self) -> None:
        Adw.Application.do_startup(self)
        self._load_css()

    def do_activate(self) -> None:
        """Handle application activation (single instance)."""
        if not self.window:
            self.window = NvidiaMonitorWindow(application=self)

        self.window.present()

    def _on_quit(self, action: Gio.SimpleAction, param: None) -> None:
        """Quit the application."""
        if self.window:
            self.window.close()
        self.quit()

    def _on_about(self, action: Gio.SimpleAction, param: None) -> None:
        """Show about dialog."""
        about = Adw.AboutWindow(
            transient_for=self.window,
            application_name=APP_NAME,
            application_icon=APP_ID,
            developer_name="NVIDIA Monitor Developers",
            version=APP_VERSION,
            developers=["NVIDIA Monitor Contributors"],
            copyright="© 2022 NVIDIA Monitor Developers",
            license_type=Gtk.License.GPL_3_0,
            website=APP_WEBSITE,
            issue_url=APP_ISSUE_URL
        )
        about.present()

    def _on_preferences(self, action: Gio.SimpleAction, param: None) -> None:
        """Show preferences dialog."""
        from .preferences import PreferencesDialog
        dialog = PreferencesDialog(self.window, self.settings)
        dialog.present()

    def _on_refresh(self, action: Gio.SimpleAction, param: None) -> None:
        """Refresh GPU data now."""
        if self.window:
            self.window.refresh_now()

    def _on_open_nvidia_settings(self, action: Gio.SimpleAction, param: None) -> None:
        """Open the vendor's Nvidia Settings application."""
        if self.window:
            self.window.open_nvidia_settings()


def main(version: Optional[str] = None) -> int:
    """Main entry point for the application.

    Args:
        version: Optional version string (unused, kept for compatibility).

    Returns:
        Exit code from the application.
    """
    app = NvidiaMonitorApplication()
    return app.run(sys.argv)


if __name__ == "__main__":
    sys.exit(main())
