# SPDX-License-Identifier: GPL-3.0-or-later
# Preferences dialog

"""Preferences dialog for configuring the refresh rate, provider and units."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Gtk, Adw

from .gpu import ProviderKind, TemperatureUnit

if TYPE_CHECKING:
    from .settings import Settings
    from .window import NvidiaMonitorWindow


class PreferencesDialog(Adw.PreferencesWindow):
    """Application preferences dialog.

    Every change is saved immediately and applied to the main window,
    which replaces its provider and re-arms its refresh timer.
    """

    def __init__(self, parent: NvidiaMonitorWindow, settings: Settings) -> None:
        super().__init__(
            transient_for=parent,
            title="Preferences",
            modal=True
        )

        self.parent_window = parent
        self.settings = settings
        self._build_ui()

    def _build_ui(self) -> None:
        """Build the preferences UI."""
        page = Adw.PreferencesPage()
        page.set_title("General")
        page.set_icon_name("preferences-system-symbolic")
        self.add(page)

        # Monitoring group
        monitoring_group = Adw.PreferencesGroup()
        monitoring_group.set_title("Monitoring")
        monitoring_group.set_description("Configure how GPU data is collected")
        page.add(monitoring_group)

        # Refresh rate
        refresh_row = Adw.SpinRow.new_with_range(1, 60, 1)
        refresh_row.set_title("Refresh Rate")
        refresh_row.set_subtitle("Time between GPU updates (seconds)")
        refresh_row.set_value(self.settings.get("refreshrate"))
        refresh_row.connect("notify::value", self._on_refresh_changed)
        monitoring_group.add(refresh_row)

        # Provider selection
        provider_row = Adw.ComboRow()
        provider_row.set_title("Provider")
        provider_row.set_subtitle("Tools used to query the GPUs")
        provider_model = Gtk.StringList()
        for kind in ProviderKind:
            provider_model.append(kind.label)
        provider_row.set_model(provider_model)
        provider_row.set_selected(self.settings.get("provider"))
        provider_row.connect("notify::selected", self._on_provider_changed)
        monitoring_group.add(provider_row)

        # Display group
        display_group = Adw.PreferencesGroup()
        display_group.set_title("Display")
        page.add(display_group)

        unit_row = Adw.ComboRow()
        unit_row.set_title("Temperature Unit")
        unit_model = Gtk.StringList()
        unit_model.append("Celsius")
        unit_model.append("Fahrenheit")
        unit_row.set_model(unit_model)
        unit_row.set_selected(self.settings.get("tempformat"))
        unit_row.connect("notify::selected", self._on_unit_changed)
        display_group.add(unit_row)

        # Reset to defaults
        reset_group = Adw.PreferencesGroup()
        page.add(reset_group)

        reset_row = Adw.ActionRow()
        reset_row.set_title("Reset to Defaults")
        reset_row.set_subtitle("Restore all settings to their default values")

        reset_button = Gtk.Button(label="Reset")
        reset_button.set_valign(Gtk.Align.CENTER)
        reset_button.add_css_class("destructive-action")
        reset_button.connect("clicked", self._on_reset_clicked)
        reset_row.add_suffix(reset_button)
        reset_row.set_activatable_widget(reset_button)
        reset_group.add(reset_row)

    def _on_refresh_changed(self, row: Adw.SpinRow, param: Any) -> None:
        """Handle refresh rate change."""
        self.settings.set("refreshrate", int(row.get_value()))
        self.parent_window.apply_settings()

    def _on_provider_changed(self, row: Adw.ComboRow, param: Any) -> None:
        """Handle provider change."""
        self.settings.set("provider", int(ProviderKind(row.get_selected())))
        self.parent_window.apply_settings()

    def _on_unit_changed(self, row: Adw.ComboRow, param: Any) -> None:
        """Handle temperature unit change."""
        self.settings.set("tempformat", int(TemperatureUnit(row.get_selected())))
        self.parent_window.apply_settings()

    def _on_reset_clicked(self, button: Gtk.Button) -> None:
        """Reset all settings to defaults."""
        self.settings.reset()
        self.parent_window.apply_settings()
        self.close()
