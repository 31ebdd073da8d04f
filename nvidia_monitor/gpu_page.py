# SPDX-License-Identifier: GPL-3.0-or-later
# GPU page widget

import gi
gi.require_version('Gtk', '4.0')

from gi.repository import Gtk, Pango

from .gpu import METRIC_TITLES, GpuReading


class GpuPage(Gtk.Grid):
    """Grid of metric titles and values for one GPU."""

    def __init__(self, uuid, metric_ids):
        super().__init__(column_spacing=24, row_spacing=8)
        self.add_css_class("gpu-page")
        self.uuid = uuid
        self.title = uuid

        self._value_labels = {}
        row = 0
        for metric_id in metric_ids:
            if metric_id == 'name':
                # Shown as the page title instead
                continue

            title_label = Gtk.Label(label=METRIC_TITLES.get(metric_id, metric_id), xalign=0)
            title_label.add_css_class("metric-title")
            self.attach(title_label, 0, row, 1, 1)

            value_label = Gtk.Label(label="", xalign=1, hexpand=True)
            value_label.set_ellipsize(Pango.EllipsizeMode.END)
            value_label.add_css_class("metric-value")
            self.attach(value_label, 1, row, 1, 1)

            self._value_labels[metric_id] = value_label
            row += 1

        uuid_label = Gtk.Label(label=uuid, xalign=0, selectable=True)
        uuid_label.add_css_class("dim-label")
        uuid_label.add_css_class("caption")
        self.attach(uuid_label, 0, row, 2, 1)

    def update(self, reading: GpuReading) -> None:
        """Show the values of one refresh; failed metrics get the placeholder."""
        self.title = reading.title
        for metric_id, label in self._value_labels.items():
            label.set_label(reading.display(metric_id))
            error = reading.errors.get(metric_id)
            if error is not None:
                label.add_css_class("unavailable")
                label.set_tooltip_text(str(error))
            else:
                label.remove_css_class("unavailable")
                label.set_tooltip_text(None)
